"""Custom exception hierarchy for the upstream sync daemon."""


class SyncError(Exception):
    """Base exception for all daemon errors."""


class ConfigError(SyncError):
    """Invalid or missing configuration."""


class MembershipError(SyncError):
    """Transient failure querying the membership source (network, auth, timeout)."""


class TemplateError(SyncError):
    """The nginx template could not be parsed or references undefined fields."""


class PublishError(SyncError):
    """Writing the rendered configuration to its destination failed."""

    def __init__(self, message: str, destination: str | None = None):
        super().__init__(message)
        self.destination = destination


class ReloadError(SyncError):
    """The reload command failed, timed out, or could not be started."""

    def __init__(self, message: str, exit_code: int | None = None, stderr: str = ""):
        super().__init__(message)
        self.exit_code = exit_code
        self.stderr = stderr

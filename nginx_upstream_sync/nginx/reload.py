"""Runs the external command that makes nginx pick up a new configuration."""

from __future__ import annotations

import logging
import subprocess

from ..exceptions import ReloadError

logger = logging.getLogger(__name__)


class ReloadTrigger:
    """Invokes a fixed reload command and surfaces its stderr on failure."""

    def __init__(self, command: list[str], timeout: float):
        self._command = list(command)
        self._timeout = timeout

    @property
    def command(self) -> list[str]:
        return list(self._command)

    def reload(self) -> None:
        cmd = " ".join(self._command)
        logger.info("Reloading nginx: %s", cmd)
        try:
            result = subprocess.run(
                self._command,
                capture_output=True,
                text=True,
                timeout=self._timeout,
                check=False,
            )
        except subprocess.TimeoutExpired as exc:
            stderr = exc.stderr.decode(errors="replace") if isinstance(exc.stderr, bytes) else (exc.stderr or "")
            raise ReloadError(
                f"Reload command timed out after {self._timeout}s: {cmd}",
                stderr=stderr.strip(),
            ) from exc
        except OSError as exc:
            raise ReloadError(f"Could not run reload command {cmd}: {exc}", stderr=str(exc)) from exc

        if result.returncode != 0:
            raise ReloadError(
                f"Reload command exited with status {result.returncode}: {cmd}",
                exit_code=result.returncode,
                stderr=result.stderr.strip(),
            )
        logger.debug("Reload command succeeded: %s", cmd)

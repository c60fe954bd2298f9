"""Atomic publication of rendered configuration files."""

from __future__ import annotations

import logging
import os
import stat
import tempfile
from pathlib import Path

from ..exceptions import PublishError

logger = logging.getLogger(__name__)

DEFAULT_FILE_MODE = 0o644


class ConfigPublisher:
    """Writes config text to a fixed destination via write-to-temp + rename.

    The temporary file lives in the destination directory so ``os.replace``
    stays on one filesystem and readers see either the old or the new file,
    never a partial one.
    """

    def __init__(self, destination: str | Path):
        self.destination = Path(destination)

    def publish(self, rendered: str) -> None:
        dest = self.destination
        mode = self._target_mode(dest)
        tmp_name: str | None = None

        try:
            fd, tmp_name = tempfile.mkstemp(dir=dest.parent, prefix=f".{dest.name}.", suffix=".tmp")
            with os.fdopen(fd, "w", encoding="utf-8") as tmp_file:
                tmp_file.write(rendered)
                tmp_file.flush()
                os.fsync(tmp_file.fileno())
            os.chmod(tmp_name, mode)
            os.replace(tmp_name, dest)
            tmp_name = None
        except OSError as exc:
            raise PublishError(f"Could not write nginx config {dest}: {exc}", destination=str(dest)) from exc
        finally:
            if tmp_name is not None:
                self._discard(tmp_name)

        logger.info("Published %d bytes", len(rendered.encode("utf-8")), extra={"destination": str(dest)})

    @staticmethod
    def _target_mode(dest: Path) -> int:
        """Keep the permissions of the file being replaced; mkstemp would otherwise leave 0600."""
        try:
            return stat.S_IMODE(dest.stat().st_mode)
        except OSError:
            return DEFAULT_FILE_MODE

    @staticmethod
    def _discard(tmp_name: str) -> None:
        """Best-effort removal of a leftover temporary file."""
        try:
            os.remove(tmp_name)
        except OSError:
            logger.debug("Could not remove temporary file %s", tmp_name, exc_info=True)

"""Set-based change detection between discovery cycles."""

from __future__ import annotations

import logging

from .models import HostSet

logger = logging.getLogger(__name__)


class ChangeDetector:
    """Decides whether a freshly reduced host set differs from the previous one.

    Stateless: the previous set is owned by the reconciler and passed in.
    """

    def has_changed(self, current: HostSet, previous: HostSet | None) -> bool:
        if previous is None:
            logger.info("No previous host set, treating %d hosts as new", len(current))
            return True

        if current == previous:
            return False

        added = current.added_since(previous)
        removed = current.removed_since(previous)
        logger.info(
            "Host set changed: +%d -%d",
            len(added), len(removed),
            extra={"added": added, "removed": removed},
        )
        return True

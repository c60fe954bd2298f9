"""Membership discovery package: source Protocol and public exports."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from .models import Instance


@runtime_checkable
class MembershipSource(Protocol):
    """Protocol that every membership source must satisfy."""

    def list_candidates(self) -> list[Instance]:
        """Return all candidate instances; raise MembershipError on failure."""
        ...

"""Data models for discovered pods and the canonical host set."""

from __future__ import annotations

import enum
from collections.abc import Iterable, Iterator
from dataclasses import dataclass, field


class PodPhase(enum.Enum):
    PENDING = "Pending"
    RUNNING = "Running"
    SUCCEEDED = "Succeeded"
    FAILED = "Failed"
    UNKNOWN = "Unknown"

    @classmethod
    def parse(cls, raw: str | None) -> PodPhase:
        """Map a pod status phase string onto the enum; anything unrecognised is UNKNOWN."""
        if not raw:
            return cls.UNKNOWN
        try:
            return cls(raw)
        except ValueError:
            return cls.UNKNOWN


@dataclass(frozen=True)
class Instance:
    """A single backend candidate reported by the membership source.

    Only lives for one polling cycle.
    """

    identity: str  # "namespace/name" for pods
    host_address: str | None
    phase: PodPhase = PodPhase.UNKNOWN

    @property
    def is_eligible(self) -> bool:
        """Running and reporting a non-empty host address."""
        return self.phase is PodPhase.RUNNING and bool(self.host_address and self.host_address.strip())


@dataclass(frozen=True)
class HostSet:
    """Canonical, deduplicated set of eligible backend addresses.

    Equality is plain set equality. ``ordered()`` is the one deterministic
    projection to a sequence (lexicographic), used for rendering and logging
    so that permutations of the same membership always produce the same text.
    """

    addresses: frozenset[str] = field(default_factory=frozenset)

    def __post_init__(self) -> None:
        if not isinstance(self.addresses, frozenset):
            object.__setattr__(self, "addresses", frozenset(self.addresses))
        if any(not addr for addr in self.addresses):
            raise ValueError("HostSet addresses must be non-empty strings")

    @classmethod
    def of(cls, addresses: Iterable[str]) -> HostSet:
        return cls(frozenset(addresses))

    def ordered(self) -> list[str]:
        return sorted(self.addresses)

    def added_since(self, previous: HostSet | None) -> list[str]:
        if previous is None:
            return self.ordered()
        return sorted(self.addresses - previous.addresses)

    def removed_since(self, previous: HostSet | None) -> list[str]:
        if previous is None:
            return []
        return sorted(previous.addresses - self.addresses)

    def __len__(self) -> int:
        return len(self.addresses)

    def __iter__(self) -> Iterator[str]:
        return iter(self.ordered())

    def __contains__(self, address: object) -> bool:
        return address in self.addresses

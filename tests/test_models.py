"""Tests for discovery models."""

import pytest

from nginx_upstream_sync.discovery.models import HostSet, Instance, PodPhase


class TestPodPhase:
    def test_parses_known_phases(self):
        assert PodPhase.parse("Running") is PodPhase.RUNNING
        assert PodPhase.parse("Pending") is PodPhase.PENDING
        assert PodPhase.parse("Failed") is PodPhase.FAILED

    def test_unrecognised_phase_is_unknown(self):
        assert PodPhase.parse("Terminating") is PodPhase.UNKNOWN
        assert PodPhase.parse("running") is PodPhase.UNKNOWN

    def test_missing_phase_is_unknown(self):
        assert PodPhase.parse(None) is PodPhase.UNKNOWN
        assert PodPhase.parse("") is PodPhase.UNKNOWN


class TestInstance:
    def test_running_with_host_is_eligible(self):
        assert Instance("ns/a", "10.0.0.1", PodPhase.RUNNING).is_eligible

    def test_not_running_is_not_eligible(self):
        for phase in (PodPhase.PENDING, PodPhase.SUCCEEDED, PodPhase.FAILED, PodPhase.UNKNOWN):
            assert not Instance("ns/a", "10.0.0.1", phase).is_eligible

    def test_missing_or_blank_host_is_not_eligible(self):
        assert not Instance("ns/a", None, PodPhase.RUNNING).is_eligible
        assert not Instance("ns/a", "", PodPhase.RUNNING).is_eligible
        assert not Instance("ns/a", "   ", PodPhase.RUNNING).is_eligible

    def test_frozen(self):
        inst = Instance("ns/a", "10.0.0.1", PodPhase.RUNNING)
        with pytest.raises(AttributeError):
            inst.host_address = "10.0.0.2"  # type: ignore


class TestHostSet:
    def test_equality_ignores_order(self):
        assert HostSet.of(["10.0.0.2", "10.0.0.1"]) == HostSet.of(["10.0.0.1", "10.0.0.2"])

    def test_duplicates_collapse(self):
        assert len(HostSet.of(["10.0.0.1", "10.0.0.1"])) == 1

    def test_ordered_is_lexicographic(self):
        hs = HostSet.of(["10.0.0.2", "10.0.0.10", "10.0.0.1"])
        assert hs.ordered() == ["10.0.0.1", "10.0.0.10", "10.0.0.2"]
        assert list(hs) == hs.ordered()

    def test_rejects_empty_address(self):
        with pytest.raises(ValueError):
            HostSet.of(["10.0.0.1", ""])

    def test_empty_set_is_falsy(self):
        assert not HostSet()
        assert HostSet.of(["10.0.0.1"])

    def test_accepts_plain_set(self):
        hs = HostSet({"10.0.0.1"})  # type: ignore[arg-type]
        assert isinstance(hs.addresses, frozenset)
        assert "10.0.0.1" in hs

    def test_added_and_removed(self):
        prev = HostSet.of(["a", "b"])
        curr = HostSet.of(["b", "c"])
        assert curr.added_since(prev) == ["c"]
        assert curr.removed_since(prev) == ["a"]

    def test_added_since_nothing(self):
        curr = HostSet.of(["b", "a"])
        assert curr.added_since(None) == ["a", "b"]
        assert curr.removed_since(None) == []

"""Tests for reducing pod listings to a host set."""

import itertools

from nginx_upstream_sync.discovery.host_set import reduce_instances
from nginx_upstream_sync.discovery.models import HostSet, Instance, PodPhase


def _inst(identity, host, phase=PodPhase.RUNNING):
    return Instance(identity=identity, host_address=host, phase=phase)


class TestReduceInstances:
    def test_filters_ineligible_instances(self):
        instances = [
            _inst("1", "10.0.0.1", PodPhase.RUNNING),
            _inst("2", "", PodPhase.RUNNING),
            _inst("3", "10.0.0.2", PodPhase.PENDING),
        ]
        assert reduce_instances(instances) == HostSet.of(["10.0.0.1"])

    def test_deduplicates_pods_on_same_node(self):
        instances = [
            _inst("a", "10.0.0.1"),
            _inst("b", "10.0.0.1"),
            _inst("c", "10.0.0.2"),
        ]
        result = reduce_instances(instances)
        assert result == HostSet.of(["10.0.0.1", "10.0.0.2"])
        assert len(result) == 2

    def test_every_permutation_gives_same_set(self):
        instances = [
            _inst("a", "10.0.0.3"),
            _inst("b", "10.0.0.1"),
            _inst("c", None),
            _inst("d", "10.0.0.2", PodPhase.FAILED),
            _inst("e", "10.0.0.1"),
        ]
        results = {reduce_instances(perm) for perm in itertools.permutations(instances)}
        assert results == {HostSet.of(["10.0.0.1", "10.0.0.3"])}

    def test_strips_whitespace(self):
        assert reduce_instances([_inst("a", " 10.0.0.1 ")]) == HostSet.of(["10.0.0.1"])

    def test_no_eligible_hosts_gives_empty_set(self):
        instances = [_inst("a", None), _inst("b", "10.0.0.1", PodPhase.SUCCEEDED)]
        assert not reduce_instances(instances)

    def test_empty_input(self):
        assert reduce_instances([]) == HostSet()

    def test_accepts_generator(self):
        result = reduce_instances(_inst(str(i), f"10.0.0.{i}") for i in range(3))
        assert len(result) == 3

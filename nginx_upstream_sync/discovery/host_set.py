"""Reduces raw pod listings to the canonical set of eligible host addresses."""

from __future__ import annotations

import logging
from collections.abc import Iterable

from .models import HostSet, Instance

logger = logging.getLogger(__name__)


def reduce_instances(instances: Iterable[Instance]) -> HostSet:
    """Keep running instances with a host address and deduplicate by address.

    Several pods scheduled on the same node share a host IP, so the result is
    usually smaller than the input. An empty result means "no eligible hosts";
    callers must not publish it.
    """
    addresses: set[str] = set()
    skipped = 0
    total = 0
    for inst in instances:
        total += 1
        if not inst.is_eligible:
            logger.debug(
                "Skipping %s (phase=%s, host=%r)",
                inst.identity, inst.phase.value, inst.host_address,
            )
            skipped += 1
            continue
        addresses.add(inst.host_address.strip())

    host_set = HostSet.of(addresses)
    logger.debug(
        "Reduced %d instances to %d hosts (%d ineligible)",
        total, len(host_set), skipped,
    )
    return host_set

"""One reconciliation cycle: discover, reduce, detect, render, publish, reload."""

from __future__ import annotations

import enum
import logging
import time
from dataclasses import dataclass

from .discovery import MembershipSource
from .discovery.change_detector import ChangeDetector
from .discovery.host_set import reduce_instances
from .discovery.models import HostSet
from .exceptions import MembershipError, PublishError, ReloadError, TemplateError
from .nginx.publisher import ConfigPublisher
from .nginx.reload import ReloadTrigger
from .nginx.renderer import ConfigRenderer

logger = logging.getLogger(__name__)


class CycleOutcome(enum.Enum):
    PUBLISHED = "published"
    RELOAD_RETRIED = "reload_retried"
    NO_CHANGE = "no_change"
    NO_HOSTS = "no_hosts"
    DISCOVERY_FAILED = "discovery_failed"
    RENDER_FAILED = "render_failed"
    PUBLISH_FAILED = "publish_failed"
    RELOAD_FAILED = "reload_failed"

    @property
    def failed(self) -> bool:
        return self in _FAILURES


_FAILURES = frozenset({
    CycleOutcome.DISCOVERY_FAILED,
    CycleOutcome.RENDER_FAILED,
    CycleOutcome.PUBLISH_FAILED,
    CycleOutcome.RELOAD_FAILED,
})


@dataclass
class ReconciliationState:
    """What this process has done so far; lost on restart.

    ``written`` is the host set currently on disk. ``last_published`` only
    moves once nginx has also been reloaded with it, so the two differ exactly
    when a reload is still owed.
    """

    last_published: HostSet | None = None
    written: HostSet | None = None

    @property
    def reload_pending(self) -> bool:
        return self.written is not None and self.written != self.last_published


class Reconciler:
    """Runs reconciliation cycles against injected collaborators.

    Every error from the collaborators is handled at the cycle boundary: it is
    logged, the state is left as it was, and the same change is attempted
    again on the next cycle.
    """

    def __init__(
        self,
        source: MembershipSource,
        renderer: ConfigRenderer,
        publisher: ConfigPublisher,
        reload_trigger: ReloadTrigger,
        port: int,
        retry_failed_reload: bool = True,
        change_detector: ChangeDetector | None = None,
    ):
        self._source = source
        self._renderer = renderer
        self._publisher = publisher
        self._reload_trigger = reload_trigger
        self._port = port
        self._retry_failed_reload = retry_failed_reload
        self._detector = change_detector or ChangeDetector()
        self._state = ReconciliationState()

    @property
    def state(self) -> ReconciliationState:
        return self._state

    def reset(self) -> None:
        """Forget everything so the next cycle republishes and reloads."""
        logger.info("Reconciliation state reset, next cycle will republish")
        self._state = ReconciliationState()

    def run_cycle(self) -> CycleOutcome:
        start = time.monotonic()
        outcome = self._cycle()
        elapsed = time.monotonic() - start
        logger.info(
            "Cycle complete: %s", outcome.value,
            extra={"outcome": outcome.value, "elapsed_seconds": round(elapsed, 2)},
        )
        return outcome

    def _cycle(self) -> CycleOutcome:
        # Poll
        try:
            instances = self._source.list_candidates()
        except MembershipError as exc:
            logger.error("Could not retrieve pods: %s", exc)
            return CycleOutcome.DISCOVERY_FAILED

        # Reduce; an empty upstream would blackhole all traffic
        host_set = reduce_instances(instances)
        if not host_set:
            logger.warning("No relevant hosts identified, keeping current config")
            return CycleOutcome.NO_HOSTS

        # Detect
        if not self._detector.has_changed(host_set, self._state.written):
            if not self._state.reload_pending:
                logger.info("Hosts did not change", extra={"host_count": len(host_set)})
                return CycleOutcome.NO_CHANGE
            if self._retry_failed_reload:
                logger.info("Hosts did not change, retrying the reload that failed last cycle")
                return self._reload(host_set, CycleOutcome.RELOAD_RETRIED)
            logger.warning("Hosts did not change; nginx has not been reloaded since the last publish")
            return CycleOutcome.NO_CHANGE

        hosts = host_set.ordered()
        logger.info(
            "Found hosts: %s", ", ".join(hosts),
            extra={"hosts": hosts, "host_count": len(hosts)},
        )

        # Render
        try:
            rendered = self._renderer.render(host_set, self._port)
        except TemplateError as exc:
            logger.error("Could not render nginx config: %s", exc)
            return CycleOutcome.RENDER_FAILED

        # Publish
        try:
            self._publisher.publish(rendered)
        except PublishError as exc:
            logger.error("Could not publish nginx config: %s", exc, extra={"destination": exc.destination})
            return CycleOutcome.PUBLISH_FAILED
        self._state.written = host_set

        return self._reload(host_set, CycleOutcome.PUBLISHED)

    def _reload(self, host_set: HostSet, success: CycleOutcome) -> CycleOutcome:
        try:
            self._reload_trigger.reload()
        except ReloadError as exc:
            logger.error(
                "Could not reload nginx: %s: %s", exc, exc.stderr or "<no stderr>",
                extra={"exit_code": exc.exit_code, "stderr": exc.stderr},
            )
            return CycleOutcome.RELOAD_FAILED

        self._state.last_published = host_set
        logger.info("Nginx updated and reloaded", extra={"host_count": len(host_set)})
        return success

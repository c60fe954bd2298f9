"""Main polling loop with signal handling and a cancellable interval wait."""

from __future__ import annotations

import logging
import random
import signal
import threading
import time
from types import FrameType

from .config import AppConfig
from .discovery.kubernetes_client import KubernetesClient
from .nginx.publisher import ConfigPublisher
from .nginx.reload import ReloadTrigger
from .nginx.renderer import ConfigRenderer
from .reconciler import CycleOutcome, Reconciler

logger = logging.getLogger(__name__)


class Daemon:
    """Polling daemon: run a reconciliation cycle, then wait out the interval."""

    def __init__(self, config: AppConfig, reconciler: Reconciler | None = None):
        self._config = config
        self._reconciler = reconciler or self._build_reconciler(config)
        self._stop_event = threading.Event()
        self._consecutive_failures = 0

    @staticmethod
    def load_renderer(config: AppConfig) -> ConfigRenderer:
        """Load and trial-render the template. Raises TemplateError."""
        renderer = ConfigRenderer.from_file(config.nginx.template_path)
        renderer.validate(config.nginx.port)
        return renderer

    @classmethod
    def _build_reconciler(cls, config: AppConfig) -> Reconciler:
        """Wire the concrete collaborators; template and credentials fail fast here."""
        renderer = cls.load_renderer(config)
        return Reconciler(
            source=KubernetesClient(config.kubernetes),
            renderer=renderer,
            publisher=ConfigPublisher(config.nginx.output_path),
            reload_trigger=ReloadTrigger(config.nginx.reload_command, config.nginx.reload_timeout_seconds),
            port=config.nginx.port,
            retry_failed_reload=config.nginx.retry_failed_reload,
        )

    @property
    def reconciler(self) -> Reconciler:
        return self._reconciler

    def run_once(self) -> CycleOutcome:
        """Execute a single reconciliation cycle."""
        return self._reconciler.run_cycle()

    def run(self) -> None:
        """Run the polling loop until stop() or a shutdown signal."""
        self._install_signal_handlers()
        logger.info("Started, polling every %ss", self._config.polling.interval_seconds)

        while not self._stop_event.is_set():
            cycle_start = time.monotonic()

            try:
                outcome = self._reconciler.run_cycle()
            except Exception:
                logger.exception("Cycle crashed")
                outcome = None

            if outcome is None or outcome.failed:
                self._consecutive_failures += 1
                logger.warning("Cycle failed (consecutive failures: %d)", self._consecutive_failures)
            else:
                self._consecutive_failures = 0

            elapsed = time.monotonic() - cycle_start
            sleep_time = self._calculate_sleep(elapsed)
            logger.debug("Sleeping %.1fs before next cycle", sleep_time)
            self._stop_event.wait(sleep_time)

        logger.info("Stopped")

    def stop(self) -> None:
        self._stop_event.set()

    def _calculate_sleep(self, elapsed: float) -> float:
        """Interval measured from cycle start, plus optional jitter."""
        jitter = random.uniform(0, self._config.polling.jitter_seconds) if self._config.polling.jitter_seconds else 0.0
        return max(0.0, self._config.polling.interval_seconds - elapsed + jitter)

    def _install_signal_handlers(self) -> None:
        signal.signal(signal.SIGTERM, self._handle_shutdown)
        signal.signal(signal.SIGINT, self._handle_shutdown)
        signal.signal(signal.SIGHUP, self._handle_reset)

    def _handle_shutdown(self, signum: int, frame: FrameType | None) -> None:
        sig_name = signal.Signals(signum).name
        logger.info("Received %s, shutting down", sig_name)
        self.stop()

    def _handle_reset(self, signum: int, frame: FrameType | None) -> None:
        logger.info("Received SIGHUP, resetting reconciliation state")
        self._reconciler.reset()

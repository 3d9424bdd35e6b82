"""Recurring discovery and optimization."""

import threading
import time
from enum import Enum
from typing import Callable

from hpcnic.core.catalog import InterfaceCatalog
from hpcnic.core.logging import NullLogger
from hpcnic.core.models import NICRecord, OptimizationOutcome
from hpcnic.core.optimizer import OptimizationEngine

Renderer = Callable[[list[NICRecord], list[OptimizationOutcome]], None]


class MonitorState(Enum):
    IDLE = "idle"
    RUNNING = "running"
    STOPPED = "stopped"


class MonitorLoop:
    """
    Runs discover -> optimize -> render on a fixed interval until cancelled.

    A failed tick is logged and the loop carries on; only the cancel event
    stops it. Ticks never overlap. If one overruns the interval the next
    starts as soon as it finishes.
    """

    def __init__(
        self,
        catalog: InterfaceCatalog,
        engine: OptimizationEngine,
        renderer: Renderer,
        min_speed_mbps: int,
        max_workers: int,
        logger=None,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.catalog = catalog
        self.engine = engine
        self.renderer = renderer
        self.min_speed_mbps = min_speed_mbps
        self.max_workers = max_workers
        self.logger = logger or NullLogger()
        self.state = MonitorState.IDLE
        self._clock = clock

    def tick(self) -> tuple[list[NICRecord], list[OptimizationOutcome]]:
        """Run one full pass, exactly as a one-shot set would."""
        records = self.catalog.discover(self.min_speed_mbps)
        outcomes = self.engine.optimize_all(records, self.max_workers)
        self.renderer(records, outcomes)
        return records, outcomes

    def run(self, interval_seconds: float, cancel: threading.Event) -> int:
        """
        Tick every interval_seconds until cancel is set.

        A tick already in progress when cancel is set runs to completion.

        Returns:
            Number of ticks executed
        """
        if interval_seconds <= 0:
            raise ValueError(f"interval must be positive, got {interval_seconds}")

        self.logger.info(
            f"Starting monitor mode with interval: {interval_seconds} seconds",
            interval=interval_seconds,
        )
        ticks = 0

        while not cancel.is_set():
            started = self._clock()
            self.state = MonitorState.RUNNING
            self.logger.info("Checking ring buffer settings...", tick=ticks + 1)
            try:
                self.tick()
            except Exception as e:
                self.logger.error(f"Monitor tick failed: {e}", tick=ticks + 1)
            ticks += 1
            self.state = MonitorState.IDLE

            remaining = interval_seconds - (self._clock() - started)
            if remaining > 0:
                self.logger.debug(f"Sleeping for {remaining:.1f} seconds...")
                cancel.wait(remaining)

        self.state = MonitorState.STOPPED
        self.logger.info("Monitoring stopped", ticks=ticks)
        return ticks

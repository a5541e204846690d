"""Refresh scheduler driving repeated aggregation rounds.

Each tick runs one full round (fetch, merge, sort), hands the snapshot to
the renderer, then waits for the configured interval. stop() interrupts the
wait and cancels a round in progress, so the loop ends without waiting for
slow sources. Cancelling the running task also cancels any in-flight round.
"""

import asyncio
from dataclasses import dataclass
import logging
from typing import Protocol

from kubetop.collectors.aggregator import FanInAggregator
from kubetop.models.base import RoundSnapshot

logger = logging.getLogger(__name__)

DEFAULT_INTERVAL = 0.5


class Renderer(Protocol):
    """Draws one round: the fixed header and the ordered rows of a snapshot."""

    def render(self, snapshot: RoundSnapshot) -> None: ...


@dataclass
class SchedulerStats:
    """Statistics about the scheduler's state.

    Attributes:
        running: Whether the loop is currently running
        rounds_completed: Rounds rendered since start
        total_source_failures: Sum of failed sources over all rounds
        last_round_ms: Duration of the most recent round in milliseconds
        last_row_count: Rows rendered in the most recent round
    """

    running: bool = False
    rounds_completed: int = 0
    total_source_failures: int = 0
    last_round_ms: float = 0.0
    last_row_count: int = 0


class RefreshScheduler:
    """Runs aggregation rounds forever on a fixed interval.

    Example:
        scheduler = RefreshScheduler(aggregator, TableFormatter(), interval=0.5)
        await scheduler.run()  # until stop() or cancellation
    """

    def __init__(
        self,
        aggregator: FanInAggregator,
        renderer: Renderer,
        interval: float = DEFAULT_INTERVAL,
    ) -> None:
        """Initialize the scheduler.

        Args:
            aggregator: Produces one RoundSnapshot per tick
            renderer: Draws each snapshot
            interval: Pause between rounds in seconds (must be positive)
        """
        if interval <= 0:
            raise ValueError("Interval must be positive")
        self._aggregator = aggregator
        self._renderer = renderer
        self._interval = interval
        self._stop_event = asyncio.Event()
        self._round_task: asyncio.Task[RoundSnapshot] | None = None
        self._stats = SchedulerStats()

    @property
    def interval(self) -> float:
        """Pause between rounds in seconds."""
        return self._interval

    @property
    def running(self) -> bool:
        """Check if the loop is running."""
        return self._stats.running

    @property
    def stats(self) -> SchedulerStats:
        """Current scheduler statistics."""
        return self._stats

    def stop(self) -> None:
        """End the loop, abandoning a round that is still fetching."""
        self._stop_event.set()
        if self._round_task is not None and not self._round_task.done():
            self._round_task.cancel()

    async def run_round(self) -> RoundSnapshot:
        """Run one round and render it.

        Returns:
            The rendered snapshot
        """
        snapshot = await self._aggregator.aggregate()
        self._renderer.render(snapshot)

        self._stats.rounds_completed += 1
        self._stats.total_source_failures += len(snapshot.failures)
        self._stats.last_round_ms = snapshot.duration_ms
        self._stats.last_row_count = len(snapshot.rows)
        logger.debug(
            "Round %d: %d rows, %d failed sources, %.1fms",
            self._stats.rounds_completed,
            len(snapshot.rows),
            len(snapshot.failures),
            snapshot.duration_ms,
        )
        return snapshot

    async def run(self, max_rounds: int | None = None) -> int:
        """Run rounds until stopped, cancelled, or ``max_rounds`` is reached.

        Errors raised by a round (integrity faults, or fetch errors under the
        fatal policy) end the loop and propagate.

        Args:
            max_rounds: Stop after this many rounds (None runs forever)

        Returns:
            Number of rounds completed during this call
        """
        self._stop_event.clear()
        self._stats.running = True
        completed = 0
        try:
            while not self._stop_event.is_set():
                self._round_task = asyncio.create_task(self.run_round())
                try:
                    await self._round_task
                except asyncio.CancelledError:
                    if self._stopped_by_request():
                        logger.info("Round abandoned by stop()")
                        break
                    raise
                finally:
                    self._round_task = None
                completed += 1
                if max_rounds is not None and completed >= max_rounds:
                    break
                await self._sleep()
        finally:
            self._stats.running = False
        return completed

    def _stopped_by_request(self) -> bool:
        """Check whether a cancelled round came from stop() rather than our caller."""
        current = asyncio.current_task()
        return self._stop_event.is_set() and current is not None and not current.cancelling()

    async def _sleep(self) -> None:
        """Wait for the interval, returning early if stop() is called."""
        try:
            await asyncio.wait_for(self._stop_event.wait(), timeout=self._interval)
        except TimeoutError:
            pass

"""Fan-in aggregation of snapshot sources.

One round runs every registered source concurrently, waits for all of them
(the barrier), then merges and orders their rows.

Key properties:
- One asyncio task per source, each bounded by its own timeout
- Each task returns its own rows; only the aggregator appends them
- A failed or timed-out source contributes zero rows and is reported
- Integrity faults cancel the round and propagate
"""

import asyncio
from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from datetime import UTC, datetime
import logging
from typing import Literal

from kubetop.collectors.base import FATAL_ERRORS, FetchResult, SnapshotSource
from kubetop.errors import FetchError
from kubetop.models.base import ResourceRow, RoundSnapshot, SourceFailure

logger = logging.getLogger(__name__)

FailurePolicy = Literal["skip", "fatal"]


def _utcnow() -> datetime:
    """Return current UTC time as timezone-aware datetime."""
    return datetime.now(UTC)


def sort_rows(rows: Iterable[ResourceRow]) -> list[ResourceRow]:
    """Order rows ascending by the concatenation of their fields.

    Sorting an already sorted sequence returns it unchanged.
    """
    return sorted(rows, key=ResourceRow.sort_key)


@dataclass
class SourceInfo:
    """A registered source and its per-round fetch settings.

    Attributes:
        source: The SnapshotSource instance
        max_attempts: Fetch attempts per round (1 disables retry)
        retry_base_delay: Base delay in seconds between attempts
        total_timeouts: Count of rounds in which this source timed out
    """

    source: SnapshotSource
    max_attempts: int = 1
    retry_base_delay: float = 0.1
    total_timeouts: int = 0

    @property
    def round_timeout(self) -> float:
        """Upper bound for one round of this source, retries included."""
        delays = sum(self.retry_base_delay * n for n in range(1, self.max_attempts))
        return self.source.timeout * self.max_attempts + delays


class FanInAggregator:
    """Runs all snapshot sources concurrently and merges their rows.

    Holds no row state across rounds: every call to aggregate() builds a
    fresh RoundSnapshot.

    Example:
        aggregator = FanInAggregator([NodeSource(client), PodSource(client)])
        snapshot = await aggregator.aggregate()
        for row in snapshot.rows:
            print(row.fields())
    """

    def __init__(
        self,
        sources: Sequence[SnapshotSource] = (),
        failure_policy: FailurePolicy = "skip",
    ) -> None:
        """Initialize the aggregator.

        Args:
            sources: Sources to register with default fetch settings
            failure_policy: "skip" drops a failed source for the round;
                "fatal" raises FetchError once the round's barrier is reached
        """
        if failure_policy not in ("skip", "fatal"):
            raise ValueError(f"Unknown failure policy: {failure_policy}")
        self._sources: dict[str, SourceInfo] = {}
        self.failure_policy: FailurePolicy = failure_policy
        for source in sources:
            self.register(source)

    @property
    def sources(self) -> list[SnapshotSource]:
        """Registered sources in registration order."""
        return [info.source for info in self._sources.values()]

    def register(
        self,
        source: SnapshotSource,
        max_attempts: int = 1,
        retry_base_delay: float = 0.1,
    ) -> None:
        """Register a source.

        Args:
            source: The SnapshotSource to register
            max_attempts: Fetch attempts per round (default: 1, no retry)
            retry_base_delay: Base delay in seconds for retry backoff

        Raises:
            ValueError: If a source with the same name is already registered
        """
        if source.name in self._sources:
            raise ValueError(f"Source '{source.name}' is already registered")
        if max_attempts < 1:
            raise ValueError("max_attempts must be at least 1")

        self._sources[source.name] = SourceInfo(
            source=source,
            max_attempts=max_attempts,
            retry_base_delay=retry_base_delay,
        )

    def get_info(self, name: str) -> SourceInfo | None:
        """Get the registration info for a source by name."""
        return self._sources.get(name)

    async def aggregate(self) -> RoundSnapshot:
        """Run one round: fetch all sources concurrently, merge and sort.

        Returns:
            RoundSnapshot with ordered rows and any failed sources

        Raises:
            DataIntegrityError: If a source saw a malformed API response
            RowShapeError: If a source produced a malformed row
            FetchError: If a source failed and the policy is "fatal"
        """
        started = _utcnow()
        infos = list(self._sources.values())
        tasks = [
            asyncio.create_task(self._fetch_source(info), name=f"source-{info.source.name}")
            for info in infos
        ]

        try:
            results: list[FetchResult] = await asyncio.gather(*tasks)
        except BaseException:
            for task in tasks:
                if not task.done():
                    task.cancel()
            await asyncio.gather(*tasks, return_exceptions=True)
            raise

        rows: list[ResourceRow] = []
        failures: list[SourceFailure] = []
        for info, result in zip(infos, results, strict=True):
            if result.success and result.rows is not None:
                rows.extend(result.rows)
                continue
            failures.append(
                SourceFailure(
                    source=info.source.name,
                    error=result.error or "unknown error",
                    consecutive_failures=max(1, info.source.consecutive_failures),
                )
            )

        if failures and self.failure_policy == "fatal":
            first = failures[0]
            raise FetchError(first.source, first.error)

        return RoundSnapshot(
            timestamp=started,
            rows=sort_rows(rows),
            failures=failures,
            duration_ms=(_utcnow() - started).total_seconds() * 1000,
        )

    async def _fetch_source(self, info: SourceInfo) -> FetchResult:
        """Fetch one source with retry, bounded by its round timeout."""
        source = info.source
        try:
            result = await asyncio.wait_for(
                source.fetch_with_retry(
                    max_attempts=info.max_attempts,
                    base_delay=info.retry_base_delay,
                ),
                timeout=info.round_timeout,
            )
        except TimeoutError:
            info.total_timeouts += 1
            source.record_timeout()
            result = FetchResult(
                success=False,
                error=f"timed out after {info.round_timeout:g}s",
                source_name=source.name,
            )
        except FATAL_ERRORS:
            logger.error("Source '%s' produced invalid data", source.name, exc_info=True)
            raise

        if not result.success:
            logger.warning(
                "Source '%s' contributed no rows this round: %s",
                source.name,
                result.error,
            )
        return result

"""Abstract base class for snapshot sources.

This module defines the SnapshotSource interface that every resource type
implements. A source fetches one resource collection from the cluster API and
normalizes it into ResourceRows, with error handling, timing and retry.
"""

from abc import ABC, abstractmethod
import asyncio
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import UTC, datetime
import logging
from typing import TYPE_CHECKING, Any

from kubetop.errors import DataIntegrityError, FetchError, RowShapeError
from kubetop.models.base import ResourceKind, ResourceRow

if TYPE_CHECKING:
    from kubetop.cluster.client import ClusterClient

logger = logging.getLogger(__name__)

DEFAULT_SYSTEM_NAMESPACE = "kube-system"

# Faults that indicate a broken normalization contract; never absorbed
FATAL_ERRORS = (DataIntegrityError, RowShapeError)


def _utcnow() -> datetime:
    """Return current UTC time as timezone-aware datetime."""
    return datetime.now(UTC)


@dataclass
class FetchResult:
    """Result of one fetch attempt by a snapshot source.

    Attributes:
        success: Whether the fetch succeeded
        rows: Rows produced by the source (None if failed)
        error: Error message if the fetch failed
        fetch_time_ms: How long the fetch took in milliseconds
        timestamp: When the fetch was attempted
        source_name: Name of the source that produced this result
    """

    success: bool
    rows: list[ResourceRow] | None = None
    error: str | None = None
    fetch_time_ms: float = 0.0
    timestamp: datetime = field(default_factory=_utcnow)
    source_name: str = ""

    def __post_init__(self) -> None:
        """Validate result consistency."""
        if self.success and self.rows is None:
            raise ValueError("Successful fetch must include rows")
        if not self.success and self.error is None:
            raise ValueError("Failed fetch must include error message")


class SnapshotSource(ABC):
    """Abstract base class for snapshot sources.

    A source lists one resource collection and maps every object to a
    ResourceRow. Either the whole collection is returned or the fetch fails:
    there is no partial success within a source.

    Class Attributes:
        name: Unique identifier for this source
        kind: Category tag of the rows this source produces
        timeout: Maximum time allowed for a single fetch in seconds

    Example:
        class NodeSource(SnapshotSource):
            name = "nodes"
            kind = ResourceKind.NODE

            async def fetch(self) -> list[ResourceRow]:
                nodes = await self.client.list_nodes()
                return [self.to_row(node) for node in nodes]
    """

    name: str = "unnamed_source"
    kind: ResourceKind = ResourceKind.NODE
    timeout: float = 5.0

    def __init__(
        self,
        client: "ClusterClient",
        namespace: str | None = None,
        system_namespace: str = DEFAULT_SYSTEM_NAMESPACE,
        clock: Callable[[], datetime] = _utcnow,
        timeout: float | None = None,
    ) -> None:
        """Initialize the source.

        Args:
            client: Cluster API client used to list objects
            namespace: Restrict namespaced listings to this namespace (None for all)
            system_namespace: Namespace whose objects are hidden from namespaced sources
            clock: Returns the current aware UTC time, used for ages
            timeout: Override the class default fetch timeout in seconds
        """
        self.client = client
        self.namespace = namespace
        self.system_namespace = system_namespace
        self._clock = clock
        if timeout is not None:
            if timeout <= 0:
                raise ValueError("Timeout must be positive")
            self.timeout = timeout
        self._last_success: datetime | None = None
        self._consecutive_failures: int = 0
        self._total_fetches: int = 0
        self._total_failures: int = 0

    @property
    def last_success(self) -> datetime | None:
        """Get the timestamp of the last successful fetch."""
        return self._last_success

    @property
    def consecutive_failures(self) -> int:
        """Get the number of rounds in a row that ended in failure."""
        return self._consecutive_failures

    @property
    def stats(self) -> dict[str, Any]:
        """Get source statistics.

        Returns:
            Dictionary with fetch stats
        """
        return {
            "name": self.name,
            "kind": self.kind.value,
            "timeout": self.timeout,
            "total_fetches": self._total_fetches,
            "total_failures": self._total_failures,
            "consecutive_failures": self._consecutive_failures,
            "last_success": self._last_success,
            "success_rate": (
                (self._total_fetches - self._total_failures) / self._total_fetches
                if self._total_fetches > 0
                else 0.0
            ),
        }

    def now(self) -> datetime:
        """Current time from the injected clock."""
        return self._clock()

    def is_hidden_namespace(self, namespace: str | None) -> bool:
        """Check whether objects in ``namespace`` are excluded from display."""
        return namespace == self.system_namespace

    @abstractmethod
    async def fetch(self) -> list[ResourceRow]:
        """Fetch and normalize the whole collection.

        Returns:
            One ResourceRow per displayed object

        Raises:
            FetchError: If the cluster API call failed
            DataIntegrityError: If a required field is missing from a response
        """
        ...

    async def safe_fetch(self) -> FetchResult:
        """Fetch with error handling and timing.

        Wraps fetch() and measures the elapsed time. Fetch failures become a
        failed FetchResult; integrity faults propagate to the caller.

        Returns:
            FetchResult with rows or error information

        Raises:
            DataIntegrityError: If the response violated the normalization contract
            RowShapeError: If a malformed row was produced
        """
        start_time = _utcnow()
        self._total_fetches += 1

        try:
            rows = await self.fetch()
            elapsed_ms = (_utcnow() - start_time).total_seconds() * 1000

            self._last_success = _utcnow()

            return FetchResult(
                success=True,
                rows=rows,
                fetch_time_ms=elapsed_ms,
                timestamp=start_time,
                source_name=self.name,
            )

        except FATAL_ERRORS:
            self._total_failures += 1
            raise

        except FetchError as e:
            elapsed_ms = (_utcnow() - start_time).total_seconds() * 1000
            self._total_failures += 1

            return FetchResult(
                success=False,
                error=e.message,
                fetch_time_ms=elapsed_ms,
                timestamp=start_time,
                source_name=self.name,
            )

        except Exception as e:
            logger.debug("Unexpected error in source '%s'", self.name, exc_info=True)
            elapsed_ms = (_utcnow() - start_time).total_seconds() * 1000
            self._total_failures += 1

            return FetchResult(
                success=False,
                error=f"{type(e).__name__}: {e!s}",
                fetch_time_ms=elapsed_ms,
                timestamp=start_time,
                source_name=self.name,
            )

    async def fetch_with_retry(
        self,
        max_attempts: int = 1,
        base_delay: float = 0.1,
    ) -> FetchResult:
        """Run one round of fetching, with bounded retry on failure.

        On each failure waits base_delay * attempt before the next attempt.
        The consecutive-failure count moves once per call, after the last
        attempt, so it counts failed rounds rather than failed attempts.

        Args:
            max_attempts: Total number of attempts (1 disables retry)
            base_delay: Base delay in seconds between attempts

        Returns:
            FetchResult from the last attempt
        """
        if max_attempts < 1:
            raise ValueError("max_attempts must be at least 1")

        attempt = 1
        result = await self.safe_fetch()
        while not result.success and attempt < max_attempts:
            delay = base_delay * attempt
            logger.debug(
                "Source '%s': attempt %d/%d failed, retrying in %.1fs: %s",
                self.name,
                attempt,
                max_attempts,
                delay,
                result.error,
            )
            await asyncio.sleep(delay)
            attempt += 1
            result = await self.safe_fetch()

        if result.success:
            self._consecutive_failures = 0
        else:
            self._consecutive_failures += 1
        return result

    def record_timeout(self) -> None:
        """Count a round abandoned by the caller's timeout as a failed round."""
        self._consecutive_failures += 1
        self._total_failures += 1

    def reset_stats(self) -> None:
        """Reset all fetch statistics."""
        self._consecutive_failures = 0
        self._total_fetches = 0
        self._total_failures = 0
        self._last_success = None

"""Exception types raised by the kubetop aggregation engine.

Three kinds of fault can occur during a refresh round:

- FetchError: a cluster API list call failed (network, auth, or API error).
  Recoverable per source: the source contributes no rows for that round.
- DataIntegrityError: an otherwise successful response lacked a field the
  normalization depends on. Always fatal.
- RowShapeError: a row was built with the wrong number of fields. A
  programming defect, always fatal.
"""

from typing import Any

# Process exit codes
EXIT_OK = 0
EXIT_ERROR = 1
EXIT_INTERRUPTED = 130  # 128 + SIGINT


class KubetopError(Exception):
    """Base exception for all kubetop errors."""


class FetchError(KubetopError):
    """A cluster API call for one snapshot source failed.

    Attributes:
        source: Name of the snapshot source whose fetch failed
        message: Description of the underlying failure
    """

    def __init__(self, source: str, message: str) -> None:
        self.source = source
        self.message = message
        super().__init__(f"{source}: {message}")


class DataIntegrityError(KubetopError):
    """A required field was absent from a cluster API response.

    Attributes:
        source: Name of the snapshot source that detected the problem
        field: Dotted path of the missing field (e.g. "spec.replicas")
        obj: "namespace/name" of the offending object
    """

    def __init__(self, source: str, field: str, obj: str) -> None:
        self.source = source
        self.field = field
        self.obj = obj
        super().__init__(f"{source}: required field '{field}' missing on {obj}")


class RowShapeError(KubetopError):
    """A row's field count does not match the header.

    Attributes:
        expected: Number of fields in the header
        actual: Number of fields in the offending row
        index: Position of the row in the round, if known
    """

    def __init__(self, expected: int, actual: int, index: int | None = None) -> None:
        self.expected = expected
        self.actual = actual
        self.index = index
        where = f" for row {index}" if index is not None else ""
        super().__init__(f"len(header)={expected} != len(row)={actual}{where}")


def describe_object(obj: Any) -> str:
    """Return "namespace/name" for a Kubernetes object, for error messages."""
    metadata = getattr(obj, "metadata", None)
    namespace = getattr(metadata, "namespace", None) or ""
    name = getattr(metadata, "name", None) or "<unnamed>"
    return f"{namespace}/{name}" if namespace else name

"""Domain exceptions raised while loading batches into the ledger.

Every per-record failure derives from ``SeedError`` so the loader can convert it
into a skip entry without catching unrelated exceptions.  ``InfrastructureError``
is the only one that is expected to abort a whole run.
"""

from typing import Any


class SeedError(Exception):
    """Base class for every error raised by the seeding services."""


class ValidationError(SeedError):
    """A field is missing, malformed, non-positive, or outside its closed domain."""

    def __init__(self, field: str, value: Any, message: str | None = None) -> None:
        self.field = field
        self.value = value
        super().__init__(message or f"Invalid {field} {value!r}")


class MissingReferenceError(SeedError):
    """A referenced admin, user, stock or shipment does not exist."""

    def __init__(self, entity: str, key: Any) -> None:
        self.entity = entity
        self.key = key
        super().__init__(f"Unknown {entity} {key!r}")


class DuplicateError(SeedError):
    """A unique business key or pair is already taken."""


class NotFoundError(SeedError):
    """A row that the caller already resolved has disappeared."""


class NegativeBalanceError(SeedError):
    """A weight adjustment would drive a stock balance below zero."""

    def __init__(self, lot_no: str, current: float, change: float) -> None:
        self.lot_no = lot_no
        self.current = current
        self.change = change
        super().__init__(
            f"Adjustment of {change} on lotNo {lot_no} would leave {current + change}"
        )


class InfrastructureError(Exception):
    """Storage is unreachable or a batch transaction could not be completed."""


class RecordSkipped(SeedError):
    """A soft precondition breach: the record is skipped without an error entry."""

"""Exception hierarchy shared by calculators and monitors."""

from __future__ import annotations


class FinwatchError(Exception):
    """Base class for every error raised by finwatch."""


class InvalidInputError(FinwatchError, ValueError):
    """A financial input is out of range; the originating save must be blocked."""


class InvalidRateError(InvalidInputError):
    """Annual effective rate outside the accepted 0-200 % range."""


class NotFoundError(FinwatchError, LookupError):
    """An evaluator referenced an entity id missing from the supplied collection."""

    def __init__(self, entity: str, entity_id: object) -> None:
        super().__init__(f"{entity} not found: {entity_id}")
        self.entity = entity
        self.entity_id = entity_id


class SnapshotFrozenError(FinwatchError):
    """Attempt to recompute the interest snapshot of a persisted transaction."""


class PersistenceFailure(FinwatchError):
    """The notification store rejected a write."""


__all__ = [
    "FinwatchError",
    "InvalidInputError",
    "InvalidRateError",
    "NotFoundError",
    "PersistenceFailure",
    "SnapshotFrozenError",
]

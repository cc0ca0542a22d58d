"""Error types raised by the outfit engine and its persistence collaborators."""

from __future__ import annotations

from datetime import date
from typing import Any, Optional


class PlannerError(Exception):
    """Base class for outfit engine failures."""


class InsufficientWardrobeError(PlannerError):
    """A mandatory slot has no eligible item after exclusions."""

    def __init__(self, slot: str, category: str, target_date: Optional[date] = None) -> None:
        self.slot = slot
        self.category = category
        self.target_date = target_date
        message = f"No eligible {category} items available for the {slot} slot"
        if target_date is not None:
            message = f"{message} on {target_date.isoformat()}"
        super().__init__(message)

    def for_date(self, target_date: date) -> "InsufficientWardrobeError":
        return InsufficientWardrobeError(self.slot, self.category, target_date)


class ExternalPersistenceError(PlannerError):
    """A create/update/delete call to a store failed."""

    def __init__(self, operation: str, target_date: Optional[date] = None, cause: Optional[BaseException] = None) -> None:
        self.operation = operation
        self.target_date = target_date
        self.cause = cause
        message = f"Persistence call '{operation}' failed"
        if target_date is not None:
            message = f"{message} for {target_date.isoformat()}"
        if cause is not None:
            message = f"{message}: {cause}"
        super().__init__(message)


class DuplicateOutfitError(PlannerError):
    """An outfit with the same item set already exists."""

    def __init__(self, signature: str, existing_outfit_id: Optional[str] = None) -> None:
        self.signature = signature
        self.existing_outfit_id = existing_outfit_id
        super().__init__(f"Outfit with items [{signature}] already exists")


class PlanAbortedError(PlannerError):
    """Raised by ``PlanRunResult.raise_for_error`` with the partial result attached."""

    def __init__(self, partial: Any) -> None:
        self.partial = partial
        cause = getattr(partial, "error", None)
        failed_date = getattr(partial, "failed_date", None)
        where = f" on {failed_date.isoformat()}" if failed_date else ""
        super().__init__(f"Planning aborted{where}: {cause}")


__all__ = [
    "PlannerError",
    "InsufficientWardrobeError",
    "ExternalPersistenceError",
    "DuplicateOutfitError",
    "PlanAbortedError",
]

"""Exceptions raised by the spot import pipeline and spot storage."""

import copy
from typing import List, Optional

STAGE_READ = "read"
STAGE_VALIDATE = "validate"
STAGE_WRITE = "write"


class SpotImportError(RuntimeError):
    """Base class for failures that end an import run."""

    stage: str = ""

    def with_context(self, context: str) -> "SpotImportError":
        """Return a copy of this error whose message is prefixed with ``context``."""
        wrapped = copy.copy(self)
        wrapped.args = (f"{context}: {self}",)
        return wrapped


class SourceReadError(SpotImportError):
    """Raised when the entry source cannot be read or parsed."""

    stage = STAGE_READ


class EntryValidationError(SpotImportError):
    """Raised when one or more candidate entries violate a field constraint."""

    stage = STAGE_VALIDATE

    def __init__(self, message: str, errors: Optional[List[str]] = None) -> None:
        super().__init__(message)
        self.errors = list(errors) if errors else [message]


class NothingToImportError(SpotImportError):
    """Raised when an import run receives no entries at all."""

    stage = STAGE_WRITE


class SpotStoreError(SpotImportError):
    """Raised when the store fails to persist a batch of spots."""

    stage = STAGE_WRITE


class ImportCancelledError(SpotStoreError):
    """Raised when an import run is cancelled or exceeds its deadline."""


class SpotNotFoundError(LookupError):
    """Raised when a spot does not exist."""


class EmptySpotUpdateError(ValueError):
    """Raised when a spot update carries no fields."""

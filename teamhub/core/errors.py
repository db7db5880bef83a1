"""Error types shared by the record stores, repositories and forms."""

from __future__ import annotations

from typing import Dict, Optional


class TeamHubError(Exception):
    """Base class for all TeamHub errors."""


class StorageError(TeamHubError):
    """A remote or mock store call failed (rejected record, transport, ...)."""


class NotFoundError(StorageError):
    """The requested record id does not exist in the store."""


class ValidationError(TeamHubError):
    """
    Local, field-scoped form failure.

    Raised before any store call; ``errors`` maps field name -> message.
    """

    def __init__(self, errors: Dict[str, str], message: Optional[str] = None) -> None:
        self.errors = dict(errors)
        super().__init__(message or "; ".join(self.errors.values()) or "Invalid input")

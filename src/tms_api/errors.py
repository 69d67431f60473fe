from __future__ import annotations

from typing import Any


class RepositoryError(Exception):
    """Base class for errors raised by the data-access layer."""


# PUBLIC_INTERFACE
class NotFoundError(RepositoryError):
    """
    Raised when a single-entity lookup matches zero rows.

    Kept distinct from store failures so the HTTP layer can answer 404
    instead of 500.
    """

    def __init__(self, entity: str, entity_id: Any) -> None:
        super().__init__(f"{entity} {entity_id} not found")
        self.entity = entity
        self.entity_id = entity_id


# PUBLIC_INTERFACE
class DecodeError(RepositoryError):
    """Raised when a row fetched from the store cannot be decoded into an entity."""

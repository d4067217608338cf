"""Error taxonomy for the knowledge base.

Only "not found" is a dedicated type. Validation never raises (it returns a
``DataValidationResult``), and repository faults (``SQLAlchemyError`` and
driver errors) propagate unchanged.
"""

from __future__ import annotations

from uuid import UUID


class KnowledgeBaseError(Exception):
    """Base class for errors raised by this package."""


class EntityNotFoundError(KnowledgeBaseError, KeyError):
    """Raised when an operation targets an identifier that does not exist."""

    def __init__(self, entity_kind: str, entity_id: UUID | str) -> None:
        super().__init__(entity_kind, entity_id)
        self.entity_kind = entity_kind
        self.entity_id = entity_id

    def __str__(self) -> str:
        return f"{self.entity_kind} not found: {self.entity_id}"

"""Exception hierarchy shared by the voting and comment services."""

from __future__ import annotations


class ForumError(RuntimeError):
    """Base exception for failures raised by the forum core.

    The HTTP layer maps each subclass onto a status code; see
    ``agora.main`` for the handlers.
    """


class InvalidInputError(ForumError):
    """Raised when a payload or an entity field fails validation."""


class InvalidVoteValue(InvalidInputError):
    """Raised when a vote value is outside {-1, 0, 1}."""

    def __init__(self, value: object) -> None:
        super().__init__("Invalid vote value")
        self.value = value


class NotFoundError(ForumError):
    """Raised when a referenced user, post or comment does not exist."""

    def __init__(self, entity: str, identifier: object) -> None:
        super().__init__(f"{entity} not found")
        self.entity = entity
        self.identifier = identifier


class ConflictError(ForumError):
    """Raised when a concurrent uniqueness violation survives every retry."""


class StorageFailureError(ForumError):
    """Raised when the persistence layer is unavailable.

    Callers should treat this as retryable.
    """

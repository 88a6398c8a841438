"""Exceptions raised by the townsite core."""

from __future__ import annotations

from typing import Optional


class TownsiteError(Exception):
    """Base class for errors surfaced to the user."""


class ValidationError(TownsiteError):
    """Input rejected before any network call or generation."""


class CollaboratorError(TownsiteError):
    """An external service failed or answered with something unusable."""

    def __init__(self, message: str, details: Optional[str] = None) -> None:
        super().__init__(message)
        self.details = details


class ApiError(CollaboratorError):
    """The REST backend failed."""

    def __init__(
        self,
        message: str,
        details: Optional[str] = None,
        status: Optional[int] = None,
    ) -> None:
        super().__init__(message, details)
        self.status = status


class PublishError(CollaboratorError):
    """The publish webhook did not confirm success."""

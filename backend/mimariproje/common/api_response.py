"""Uniform result envelope returned by every client-side API call."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel


class ApiResponse(BaseModel):
    """Result of a backend call as seen by session consumers.

    :param success: Whether the backend call succeeded
    :param data: Parsed response body on success
    :param error: Human-readable error on failure
    :param message: Optional message from the backend or the caller
    """

    success: bool
    data: Any = None
    error: str | None = None
    message: str | None = None

    @classmethod
    def ok(cls, data: Any = None, message: str | None = None) -> ApiResponse:
        """Build a successful response.

        :param data: Parsed response body
        :param message: Optional message
        :return: ApiResponse instance
        """
        return cls(success=True, data=data, message=message)

    @classmethod
    def fail(cls, error: str) -> ApiResponse:
        """Build a failed response.

        :param error: Error description
        :return: ApiResponse instance
        """
        return cls(success=False, error=error)

    def field(self, name: str) -> Any:
        """Return a top-level field of a dict payload, or None."""
        if isinstance(self.data, dict):
            return self.data.get(name)
        return None

"""Typed failures surfaced by the todo store's operations."""

from typing import Any
from typing import Dict


class ApiError(Exception):
    """Base class for failures returned to store callers.

    Args:
        code: HTTP-style status code.
        description: Human readable reason.
    """

    code = 500
    default_description = "internal error"

    def __init__(self, description: str = None, code: int = None):
        self.code = code if code is not None else self.code
        self.description = description or self.default_description
        super().__init__(f"{self.code}: {self.description}")

    def to_dict(self) -> Dict[str, Any]:
        """Return the error body: {"error": {"code": ..., "description": ...}}."""
        return {"error": {"code": self.code, "description": self.description}}


class ValidationError(ApiError):
    """A caller-supplied index or payload was rejected before any mutation."""

    code = 400
    default_description = "index out of bound"


class ServerError(ApiError):
    """Simulated failure, or an unexpected fault that was rolled back."""

    code = 500
    default_description = "internal error"

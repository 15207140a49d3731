"""Pydantic response envelope for API endpoints."""

from datetime import datetime, timezone
from typing import Any, Optional

from pydantic import BaseModel, Field


def _utc_now() -> str:
    return datetime.now(timezone.utc).isoformat()


class ApiResponse(BaseModel):
    """Standard response envelope."""

    success: bool
    data: Any = None
    message: Optional[str] = None
    error: Optional[str] = None
    timestamp: str = Field(default_factory=_utc_now)  # ISO 8601 UTC

    @classmethod
    def ok(cls, data: Any, message: str = "Success") -> "ApiResponse":
        return cls(success=True, data=data, message=message)

    @classmethod
    def failure(cls, error: str) -> "ApiResponse":
        return cls(success=False, error=error)

from __future__ import annotations

from dataclasses import dataclass
from typing import Any


@dataclass
class AppError(Exception):
    code: str
    message: str
    http_status: int = 400
    detail: Any | None = None
    cause: Exception | None = None

    def __str__(self) -> str:
        return self.message


class ValidationError(AppError):
    """Client-input fault; terminal for the request."""

    def __init__(self, code: str, message: str, *, detail: Any | None = None):
        super().__init__(code=code, message=message, http_status=400, detail=detail)


class SerializationError(AppError):
    def __init__(self, message: str = "Failed to encode payload", *, cause: Exception | None = None):
        super().__init__(code="SERIALIZATION_FAILED", message=message, http_status=500, cause=cause)


class BackendInvocationError(AppError):
    def __init__(
        self,
        message: str = "Model invocation failed",
        *,
        detail: Any | None = None,
        cause: Exception | None = None,
    ):
        super().__init__(
            code="BACKEND_INVOCATION_FAILED",
            message=message,
            http_status=502,
            detail=detail,
            cause=cause,
        )


class BackendTimeoutError(BackendInvocationError):
    def __init__(self, timeout_seconds: float):
        super().__init__(
            f"Model invocation timed out after {timeout_seconds:g} seconds",
            detail={"timeout_seconds": timeout_seconds},
        )
        self.code = "BACKEND_TIMEOUT"
        self.http_status = 504


class BackendUnavailableError(AppError):
    def __init__(self, message: str = "Model backend is not available", *, cause: Exception | None = None):
        super().__init__(code="BACKEND_UNAVAILABLE", message=message, http_status=503, cause=cause)

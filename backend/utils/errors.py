"""Common error classes and utilities"""

from fastapi import HTTPException
from starlette.exceptions import HTTPException as StarletteHTTPException
from typing import Any, Dict, Optional


class ValidationError(HTTPException):
    """Request validation errors"""
    def __init__(self, detail: str = "Invalid request"):
        super().__init__(status_code=400, detail=detail)


class AuthenticationError(HTTPException):
    """Authentication related errors"""
    def __init__(self, detail: str = "Unauthorized"):
        super().__init__(status_code=401, detail=detail)


class NotFoundError(HTTPException):
    """Referenced record does not exist"""
    def __init__(self, detail: str = "Not found"):
        super().__init__(status_code=404, detail=detail)


class ConfigurationError(HTTPException):
    """Required credentials are absent"""
    def __init__(self, details: Dict[str, bool], detail: str = "Missing required environment variables"):
        super().__init__(status_code=500, detail=detail)
        self.details = details


class StorageError(HTTPException):
    """Storage collaborator rejected a read or write"""
    def __init__(self, detail: str = "Database error"):
        super().__init__(status_code=500, detail=detail)


class UpstreamProviderError(HTTPException):
    """LLM provider answered with a non-success status or could not be reached"""
    def __init__(self, detail: str, status: Optional[int] = None, body: str = ""):
        super().__init__(status_code=502, detail=detail)
        self.provider_status = status
        self.provider_body = body


class ModelOutputError(HTTPException):
    """Model text could not be coerced into the required structure"""
    def __init__(self, detail: str = "AI did not return valid analysis"):
        super().__init__(status_code=502, detail=detail)


def error_payload(exc: StarletteHTTPException) -> Dict[str, Any]:
    """Render an HTTPException as the `{error, ...}` body every route returns."""
    payload: Dict[str, Any] = {"error": exc.detail}

    if isinstance(exc, ConfigurationError):
        payload["details"] = exc.details
    elif isinstance(exc, UpstreamProviderError):
        payload["type"] = "provider_error"
        payload["provider_status"] = exc.provider_status
    elif isinstance(exc, ModelOutputError):
        payload["type"] = "parse_error"

    return payload

"""
Domain errors for the Marketplace service.

Services raise these; main.py renders them as structured error responses.
"""
from datetime import datetime
from typing import Dict, List, Optional

from fastapi.responses import JSONResponse


class MarketplaceException(Exception):
    """Base exception for Marketplace errors."""

    def __init__(
        self,
        message: str,
        code: str = "INTERNAL_ERROR",
        status_code: int = 500,
        detail: Optional[str] = None,
    ):
        self.message = message
        self.code = code
        self.status_code = status_code
        self.detail = detail
        super().__init__(message)


class ValidationError(MarketplaceException):
    """Input failed one or more field rules. errors maps field -> messages."""

    def __init__(self, errors: Dict[str, List[str]]):
        self.errors = errors
        fields = ", ".join(sorted(errors))
        super().__init__(
            message="The given data was invalid",
            code="VALIDATION_ERROR",
            status_code=422,
            detail=f"Invalid fields: {fields}",
        )


class ForbiddenError(MarketplaceException):
    """Authenticated user does not own the targeted resource."""

    def __init__(self, resource: str, identifier):
        super().__init__(
            message="Access denied",
            code="FORBIDDEN",
            status_code=403,
            detail=f"You do not own {resource} '{identifier}'",
        )


class NotFoundError(MarketplaceException):
    """Resource not found."""

    def __init__(self, resource: str, identifier):
        super().__init__(
            message=f"{resource} not found",
            code="NOT_FOUND",
            status_code=404,
            detail=f"No {resource} with identifier '{identifier}' exists",
        )


class StorageWriteError(MarketplaceException):
    """An uploaded file could not be written to the asset store."""

    def __init__(self, path: str, reason: str):
        super().__init__(
            message="Could not store uploaded file",
            code="STORAGE_WRITE_ERROR",
            status_code=500,
            detail=f"{path}: {reason}",
        )


def create_error_response(exc: MarketplaceException) -> JSONResponse:
    """Create standardized error response."""
    content = {
        "error": exc.message,
        "code": exc.code,
        "detail": exc.detail,
        "timestamp": datetime.utcnow().isoformat(),
    }
    if isinstance(exc, ValidationError):
        content["errors"] = exc.errors
    return JSONResponse(status_code=exc.status_code, content=content)

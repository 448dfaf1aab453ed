"""
Domain exceptions and error response utilities for the work order service.
"""
from typing import Any, Dict, Optional


class DomainError(Exception):
    """Base exception for domain-specific errors."""

    status_code = 400

    def __init__(
        self,
        code: str,
        message: str,
        details: Optional[Any] = None,
        status_code: Optional[int] = None,
    ):
        self.code = code
        self.message = message
        self.details = details
        if status_code is not None:
            self.status_code = status_code
        super().__init__(message)


class ValidationFailedError(DomainError):
    """Raised when a payload passes schema validation but is still unusable."""

    status_code = 400

    def __init__(self, message: str = "validation failed", details: Optional[Any] = None):
        super().__init__(code="VALIDATION_ERROR", message=message, details=details)


class NotFoundError(DomainError):
    """Exception raised when a requested resource is not found."""

    status_code = 404

    def __init__(self, message: str = "resource not found", details: Optional[Any] = None):
        super().__init__(code="NOT_FOUND", message=message, details=details)


class SchemaError(DomainError):
    """Upstream data did not match the shape we transform into."""

    status_code = 500

    def __init__(self, message: str = "schema error", details: Optional[Any] = None):
        super().__init__(code="SCHEMA_ERROR", message=message, details=details)


class UpstreamError(DomainError):
    """Odoo or Xpand failed for a reason we do not classify further."""

    status_code = 500

    def __init__(self, message: str = "upstream error", details: Optional[Any] = None):
        super().__init__(code="UPSTREAM_ERROR", message=message, details=details)


def create_error_response(
    message: str,
    metadata: Optional[Dict[str, Any]] = None,
    details: Optional[Any] = None,
    key: str = "error",
) -> Dict[str, Any]:
    """
    Create a standardized error response.

    Args:
        message: Human-readable error message
        metadata: Request tracing information merged into the body
        details: Optional additional error details (e.g. validation errors)
        key: Either "error" or "reason"

    Returns:
        Dictionary with standardized error structure
    """
    response: Dict[str, Any] = {key: message}

    if details:
        response["details"] = details

    if metadata:
        response.update(metadata)

    return response

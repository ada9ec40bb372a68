"""Custom exceptions for the Humans CRM API."""

from typing import Any


class HumansException(Exception):
    """Base exception for all CRM API errors."""

    def __init__(
        self,
        message: str,
        code: str,
        status_code: int = 400,
        details: dict[str, Any] | None = None,
    ) -> None:
        """Initialize the exception.

        Args:
            message: Human-readable error message.
            code: Machine-readable error code.
            status_code: HTTP status code.
            details: Additional error details.
        """
        super().__init__(message)
        self.message = message
        self.code = code
        self.status_code = status_code
        self.details = details or {}


class NotFoundError(HumansException):
    """Resource not found error (404)."""

    def __init__(self, resource: str, resource_id: str | None = None) -> None:
        """Initialize not found error.

        Args:
            resource: Name of the resource that was not found.
            resource_id: Optional ID of the resource.
        """
        message = f"{resource} not found"
        if resource_id:
            message = f"{resource} with ID '{resource_id}' not found"
        super().__init__(
            message=message,
            code="NOT_FOUND",
            status_code=404,
            details={"resource": resource, "resource_id": resource_id},
        )


class AuthenticationError(HumansException):
    """Authentication failed error (401)."""

    def __init__(self, message: str = "Authentication required") -> None:
        super().__init__(
            message=message,
            code="AUTHENTICATION_ERROR",
            status_code=401,
        )


class ValidationError(HumansException):
    """Input validation error (400)."""

    def __init__(
        self, message: str, field: str | None = None, details: dict[str, Any] | None = None
    ) -> None:
        """Initialize validation error.

        Args:
            message: Error message.
            field: Name of the invalid field.
            details: Additional validation details.
        """
        error_details = details or {}
        if field:
            error_details["field"] = field
        super().__init__(
            message=message,
            code="VALIDATION_ERROR",
            status_code=400,
            details=error_details,
        )


class DatabaseError(HumansException):
    """Database operation error (500)."""

    def __init__(self, message: str = "A database error occurred") -> None:
        super().__init__(
            message=message,
            code="DATABASE_ERROR",
            status_code=500,
        )


class ExternalServiceError(HumansException):
    """External service error (502)."""

    def __init__(self, service: str, message: str | None = None) -> None:
        """Initialize external service error.

        Args:
            service: Name of the external service.
            message: Optional error message.
        """
        super().__init__(
            message=message or f"External service '{service}' is unavailable",
            code="EXTERNAL_SERVICE_ERROR",
            status_code=502,
            details={"service": service},
        )


class FrontAPIError(ExternalServiceError):
    """Front API request failed (non-2xx, timeout, or unreadable payload)."""

    def __init__(
        self,
        message: str,
        status_code: int | None = None,
        body: str | None = None,
    ) -> None:
        """Initialize Front API error.

        Args:
            message: Error message, e.g. ``Front API 404: not found``.
            status_code: HTTP status returned by Front, if any.
            body: Raw response body text, if any.
        """
        super().__init__(service="front", message=message)
        self.code = "FRONT_API_ERROR"
        self.front_status = status_code
        self.body = body
        self.details.update({"front_status": status_code})


class FrontSyncError(HumansException):
    """Front sync could not run or aborted (500)."""

    def __init__(self, message: str, sync_run_id: str | None = None) -> None:
        """Initialize Front sync error.

        Args:
            message: Error message.
            sync_run_id: The sync run the failure belongs to, if one was created.
        """
        details: dict[str, Any] = {}
        if sync_run_id:
            details["sync_run_id"] = sync_run_id
        super().__init__(
            message=message,
            code="FRONT_SYNC_FAILED",
            status_code=500,
            details=details,
        )

"""
Base exception classes for application-wide error handling.

Every error raised by project code derives from BaseApplicationError so
callers can log and report failures uniformly, with a machine-readable
error code and a details dict for structured logging.

Exception Hierarchy:
    BaseApplicationError (base)
    ├── ValidationError - Malformed input (payloads, configuration values)
    ├── ConflictError - State conflicts (duplicate keys, already processed)
    └── ExternalServiceError - Database, broker or third-party failures

Usage:
    from core.exceptions import ConflictError, ExternalServiceError

    raise ConflictError(
        "Event evt_123 already stored",
        error_code="DUPLICATE_EVENT",
        details={"stripe_event_id": "evt_123"},
    )

    try:
        ...
    except BaseApplicationError as e:
        logger.warning(str(e), extra=e.to_dict())

Note:
    Domain apps subclass these (see stripe_webhooks.exceptions).
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from typing import Any


class BaseApplicationError(Exception):
    """
    Base exception for all application-specific errors.

    Attributes:
        message: Human-readable error description
        error_code: Machine-readable code for logs and callers
        details: Additional error context (ids, field errors, metadata)

    Example:
        try:
            receiver.receive(event)
        except BaseApplicationError as e:
            logger.error(f"Webhook rejected: {e.error_code}", extra=e.details)
            raise
    """

    default_error_code: str = "APPLICATION_ERROR"

    def __init__(
        self,
        message: str,
        error_code: str | None = None,
        details: dict[str, Any] | None = None,
    ):
        """
        Initialize the exception.

        Args:
            message: Human-readable error description
            error_code: Machine-readable error code (defaults to class default)
            details: Additional error context
        """
        self.message = message
        self.error_code = error_code or self.default_error_code
        self.details = details or {}
        super().__init__(message)

    def to_dict(self) -> dict[str, Any]:
        """
        Convert exception to a dictionary.

        Returns:
            Dict with error, error_code and (when present) details keys

        Example:
            {
                "error": "Unknown queue connection: billing",
                "error_code": "CONFIGURATION_ERROR",
                "details": {"connection": "billing"}
            }
        """
        result: dict[str, Any] = {
            "error": self.message,
            "error_code": self.error_code,
        }
        if self.details:
            result["details"] = self.details
        return result

    def __str__(self) -> str:
        """Return string representation with error code."""
        return f"[{self.error_code}] {self.message}"

    def __repr__(self) -> str:
        """Return detailed representation for debugging."""
        return (
            f"{self.__class__.__name__}("
            f"message={self.message!r}, "
            f"error_code={self.error_code!r}, "
            f"details={self.details!r})"
        )


class ValidationError(BaseApplicationError):
    """
    Raised when input fails validation.

    Use for:
    - Payloads missing required fields
    - Settings values of the wrong shape or type
    """

    default_error_code: str = "VALIDATION_ERROR"


class ConflictError(BaseApplicationError):
    """
    Raised when an operation conflicts with current stored state.

    Use for:
    - Unique constraint violations
    - Work that has already been done by a concurrent caller

    Example:
        except IntegrityError as e:
            raise ConflictError(
                f"Record {pk} already exists",
                details={"pk": pk},
            ) from e
    """

    default_error_code: str = "CONFLICT"


class ExternalServiceError(BaseApplicationError):
    """
    Raised when a backing service call fails.

    Use for:
    - Database errors other than constraint violations
    - Message broker unavailability
    - Third-party API failures

    Note:
        These are generally transient; callers should let the error
        propagate so the upstream retry mechanism can run again.
    """

    default_error_code: str = "EXTERNAL_SERVICE_ERROR"

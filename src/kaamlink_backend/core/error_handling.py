"""Error taxonomy and centralized error handling.

Every failure a workflow step can report to the initiating actor is a
``KaamLinkError`` subclass carrying a stable ``code`` and the HTTP status the
API layer answers with. Nothing in this module retries.
"""

from typing import Any, Dict, Optional
from datetime import datetime
from enum import Enum
from dataclasses import dataclass, asdict

from sqlalchemy.exc import SQLAlchemyError

from .logging import get_logger

logger = get_logger(__name__)


class ErrorSeverity(Enum):
    """Error severity levels for classification and handling."""
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


class ErrorCategory(Enum):
    """Error categories for classification and routing."""
    VALIDATION = "validation"
    AUTHENTICATION = "authentication"
    AUTHORIZATION = "authorization"
    NOT_FOUND = "not_found"
    DATABASE = "database"
    EXTERNAL_SERVICE = "external_service"
    CONFIGURATION = "configuration"
    BUSINESS_LOGIC = "business_logic"
    SYSTEM = "system"


@dataclass
class ErrorContext:
    """Context information for error handling and logging."""
    operation: str
    component: str
    user_id: Optional[str] = None
    request_id: Optional[str] = None
    additional_data: Optional[Dict[str, Any]] = None

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


class KaamLinkError(Exception):
    """Base exception class for KaamLink workflow errors."""

    code = "error"
    http_status = 500

    def __init__(
        self,
        message: str,
        category: ErrorCategory = ErrorCategory.SYSTEM,
        severity: ErrorSeverity = ErrorSeverity.MEDIUM,
        context: Optional[ErrorContext] = None,
        original_error: Optional[Exception] = None
    ):
        super().__init__(message)
        self.message = message
        self.category = category
        self.severity = severity
        self.context = context
        self.original_error = original_error
        self.timestamp = datetime.utcnow()

    def to_dict(self) -> Dict[str, Any]:
        """Convert error to dictionary for logging."""
        return {
            "code": self.code,
            "message": self.message,
            "category": self.category.value,
            "severity": self.severity.value,
            "timestamp": self.timestamp.isoformat(),
            "context": self.context.to_dict() if self.context else None,
            "original_error": str(self.original_error) if self.original_error else None,
            "original_error_type": type(self.original_error).__name__ if self.original_error else None,
        }


class ValidationError(KaamLinkError):
    """A required field is missing or malformed. Raised before any write."""

    code = "validation_error"
    http_status = 400

    def __init__(self, message: str, field: str = None, value: Any = None, **kwargs):
        super().__init__(message, ErrorCategory.VALIDATION, ErrorSeverity.LOW, **kwargs)
        self.field = field
        self.value = value


class NotFound(KaamLinkError):
    """A referenced application, job, profile or OTP does not exist."""

    code = "not_found"
    http_status = 404

    def __init__(self, message: str, resource: str = None, **kwargs):
        super().__init__(message, ErrorCategory.NOT_FOUND, ErrorSeverity.LOW, **kwargs)
        self.resource = resource


class PersistenceError(KaamLinkError):
    """The primary write of a workflow step failed."""

    code = "persistence_error"
    http_status = 500

    def __init__(self, message: str, **kwargs):
        super().__init__(message, ErrorCategory.DATABASE, ErrorSeverity.HIGH, **kwargs)


class OtpInvalid(KaamLinkError):
    """No unused code matches the application, code and type."""

    code = "otp_invalid"
    http_status = 400

    def __init__(self, message: str = "OTP is invalid or already used", **kwargs):
        super().__init__(message, ErrorCategory.BUSINESS_LOGIC, ErrorSeverity.LOW, **kwargs)


class OtpExpired(KaamLinkError):
    """A matching code exists but its expiry has passed."""

    code = "otp_expired"
    http_status = 400

    def __init__(self, message: str = "OTP has expired", record: Any = None, **kwargs):
        super().__init__(message, ErrorCategory.BUSINESS_LOGIC, ErrorSeverity.LOW, **kwargs)
        self.record = record


class NoActiveShift(KaamLinkError):
    """End of shift requested while nothing is ongoing."""

    code = "no_active_shift"
    http_status = 409

    def __init__(self, message: str = "No ongoing shift for this application", **kwargs):
        super().__init__(message, ErrorCategory.BUSINESS_LOGIC, ErrorSeverity.LOW, **kwargs)


class ShiftAlreadyActive(KaamLinkError):
    """Start of shift requested while one is already ongoing."""

    code = "shift_already_active"
    http_status = 409

    def __init__(self, message: str = "A shift is already ongoing for this application", **kwargs):
        super().__init__(message, ErrorCategory.BUSINESS_LOGIC, ErrorSeverity.LOW, **kwargs)


class DuplicateRating(KaamLinkError):
    """The rater has already rated this job."""

    code = "duplicate_rating"
    http_status = 409

    def __init__(self, message: str = "This job has already been rated by you", **kwargs):
        super().__init__(message, ErrorCategory.BUSINESS_LOGIC, ErrorSeverity.LOW, **kwargs)


class AuthenticationError(KaamLinkError):
    """Error for authentication failures."""

    code = "authentication_failed"
    http_status = 401

    def __init__(self, message: str = "Authentication failed", **kwargs):
        super().__init__(message, ErrorCategory.AUTHENTICATION, ErrorSeverity.HIGH, **kwargs)


class AuthorizationError(KaamLinkError):
    """The caller is not a party to the resource it is acting on."""

    code = "forbidden"
    http_status = 403

    def __init__(self, message: str = "Access denied", **kwargs):
        super().__init__(message, ErrorCategory.AUTHORIZATION, ErrorSeverity.HIGH, **kwargs)


class SignatureMismatch(KaamLinkError):
    """Payment gateway signature did not verify."""

    code = "signature_mismatch"
    http_status = 403

    def __init__(self, message: str = "Payment signature mismatch", **kwargs):
        super().__init__(message, ErrorCategory.AUTHORIZATION, ErrorSeverity.HIGH, **kwargs)


class ExternalServiceError(KaamLinkError):
    """Error for external service failures."""

    code = "external_service_error"
    http_status = 502

    def __init__(self, message: str, service_name: str = None, **kwargs):
        super().__init__(message, ErrorCategory.EXTERNAL_SERVICE, ErrorSeverity.MEDIUM, **kwargs)
        self.service_name = service_name


class ConfigurationError(KaamLinkError):
    """Error for configuration issues."""

    code = "server_config_missing"
    http_status = 500

    def __init__(self, message: str, **kwargs):
        super().__init__(message, ErrorCategory.CONFIGURATION, ErrorSeverity.CRITICAL, **kwargs)


class ErrorHandler:
    """Centralized error classification and logging."""

    def __init__(self):
        self.logger = get_logger("error_handler")

    def handle_error(
        self,
        error: Exception,
        context: Optional[ErrorContext] = None
    ) -> KaamLinkError:
        """Classify an exception and log it at a level matching its severity.

        Args:
            error: The original exception
            context: Error context information

        Returns:
            Classified KaamLink error
        """
        if isinstance(error, KaamLinkError):
            kaamlink_error = error
            if kaamlink_error.context is None:
                kaamlink_error.context = context
        else:
            kaamlink_error = self._classify_error(error, context)

        self._log_error(kaamlink_error)
        return kaamlink_error

    def _classify_error(self, error: Exception, context: Optional[ErrorContext]) -> KaamLinkError:
        """Classify generic exceptions into KaamLink errors."""
        if isinstance(error, SQLAlchemyError):
            return PersistenceError(
                f"Database operation failed: {error}",
                context=context,
                original_error=error
            )

        if isinstance(error, (ValueError, TypeError)):
            return ValidationError(
                f"Validation failed: {error}",
                context=context,
                original_error=error
            )

        return KaamLinkError(
            f"Unexpected error: {error}",
            ErrorCategory.SYSTEM,
            ErrorSeverity.HIGH,
            context=context,
            original_error=error
        )

    def _log_error(self, error: KaamLinkError):
        """Log error with appropriate level and context."""
        log_data = error.to_dict()

        if error.severity == ErrorSeverity.CRITICAL:
            self.logger.critical("Critical error occurred", **log_data)
        elif error.severity == ErrorSeverity.HIGH:
            self.logger.error("High severity error occurred", **log_data)
        elif error.severity == ErrorSeverity.MEDIUM:
            self.logger.warning("Medium severity error occurred", **log_data)
        else:
            self.logger.info("Low severity error occurred", **log_data)


# Global instance
error_handler = ErrorHandler()

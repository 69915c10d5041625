"""
Custom exception hierarchy for the retention engine.

Two families of errors are raised to callers:
- RuleValidationError: caller or data errors that should map to a
  client-facing rejection (bad time window, rule type mismatch, too many
  exclusions, no usable project id)
- Operational errors: state drift or infrastructure failures that need
  investigation or a recreate-job remediation (JobNotFoundError,
  TransferServiceError)

Each exception includes:
- error_code: Machine-readable error identifier
- context: Additional structured data for debugging
- is_retryable: Whether the operation can be retried
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class ErrorCode(str, Enum):
    """Machine-readable error codes for categorization and monitoring."""

    # Configuration and validation errors (1xxx)
    CONFIG_INVALID = "SDRS_1001"
    INVALID_RANGE = "SDRS_1101"
    INVALID_RULE_TYPE = "SDRS_1102"
    TOO_MANY_EXCLUSIONS = "SDRS_1103"
    PROJECT_ID_UNRESOLVABLE = "SDRS_1104"

    # State drift errors (3xxx)
    JOB_NOT_FOUND = "SDRS_3001"

    # Transfer service errors (4xxx)
    TRANSFER_CONNECTION_FAILED = "SDRS_4001"
    TRANSFER_HTTP_ERROR = "SDRS_4002"
    TRANSFER_AUTH_FAILED = "SDRS_4003"
    TRANSFER_QUOTA_EXCEEDED = "SDRS_4004"
    TRANSFER_INVALID_RESPONSE = "SDRS_4005"

    # General errors (9xxx)
    UNKNOWN = "SDRS_9999"


@dataclass
class SdrsError(Exception):
    """
    Base exception for all retention engine errors.

    Attributes:
        message: Human-readable error description
        error_code: Machine-readable error identifier
        context: Additional structured data for debugging
        is_retryable: Whether the operation can be safely retried
        cause: Original exception that caused this error
    """

    message: str
    error_code: ErrorCode = ErrorCode.UNKNOWN
    context: dict[str, Any] = field(default_factory=dict)
    is_retryable: bool = False
    cause: Exception | None = None

    is_client_error = False

    def __post_init__(self) -> None:
        super().__init__(self.message)

    def __str__(self) -> str:
        parts = [f"[{self.error_code.value}] {self.message}"]
        if self.context:
            context_str = ", ".join(f"{k}={v}" for k, v in self.context.items())
            parts.append(f" ({context_str})")
        return "".join(parts)

    def __repr__(self) -> str:
        return (
            f"{self.__class__.__name__}("
            f"message={self.message!r}, "
            f"error_code={self.error_code!r}, "
            f"context={self.context!r}, "
            f"is_retryable={self.is_retryable})"
        )

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for structured logging."""
        return {
            "error_type": self.__class__.__name__,
            "error_code": self.error_code.value,
            "message": self.message,
            "context": self.context,
            "is_retryable": self.is_retryable,
            "is_client_error": self.is_client_error,
            "cause": str(self.cause) if self.cause else None,
        }


@dataclass
class ConfigurationError(SdrsError):
    """Raised when configuration is invalid."""

    error_code: ErrorCode = ErrorCode.CONFIG_INVALID

    @classmethod
    def validation_failed(
        cls, field: str, value: Any, reason: str, cause: Exception | None = None
    ) -> ConfigurationError:
        """Create error for validation failure."""
        return cls(
            message=f"Configuration validation failed for '{field}': {reason}",
            context={"field": field, "value": str(value), "reason": reason},
            cause=cause,
        )


@dataclass
class RuleValidationError(SdrsError, ValueError):
    """Base class for errors caused by the caller's rule data."""

    is_client_error = True


@dataclass
class InvalidRangeError(RuleValidationError):
    """Raised when a prefix window ends before it starts."""

    error_code: ErrorCode = ErrorCode.INVALID_RANGE

    @classmethod
    def end_before_start(cls, start: Any, end: Any) -> InvalidRangeError:
        """Create error for an inverted time window."""
        return cls(
            message="endTime occurs before startTime; try swapping them.",
            context={"start_time": str(start), "end_time": str(end)},
        )


@dataclass
class InvalidRuleTypeError(RuleValidationError):
    """Raised when a rule's type does not match the requested operation."""

    error_code: ErrorCode = ErrorCode.INVALID_RULE_TYPE

    @classmethod
    def for_operation(cls, rule_type: str, operation: str) -> InvalidRuleTypeError:
        """Create error for a rule type the operation does not accept."""
        return cls(
            message=f"{rule_type} retention rule type is invalid for {operation}",
            context={"rule_type": rule_type, "operation": operation},
        )


@dataclass
class TooManyExclusionsError(RuleValidationError):
    """Raised when an exclusion list exceeds the transfer service limit."""

    error_code: ErrorCode = ErrorCode.TOO_MANY_EXCLUSIONS

    @classmethod
    def limit_exceeded(cls, count: int, limit: int) -> TooManyExclusionsError:
        """Create error for an oversized exclusion list."""
        return cls(
            message=(
                "There are too many dataset rules associated with this bucket. "
                f"A maximum of {limit} rules are allowed."
            ),
            context={"count": count, "limit": limit},
        )


@dataclass
class ProjectIdUnresolvableError(RuleValidationError):
    """Raised when neither a rule nor its siblings carry a usable project id."""

    error_code: ErrorCode = ErrorCode.PROJECT_ID_UNRESOLVABLE

    @classmethod
    def no_project(cls, rule_id: int | None, sibling_count: int) -> ProjectIdUnresolvableError:
        """Create error for a rule whose project id cannot be determined."""
        return cls(
            message="Transfer job could not be created. No projectId found.",
            context={"rule_id": rule_id, "sibling_count": sibling_count},
        )


@dataclass
class JobNotFoundError(SdrsError):
    """Raised when a recorded transfer job no longer exists in the service."""

    error_code: ErrorCode = ErrorCode.JOB_NOT_FOUND

    @classmethod
    def missing(cls, job_name: str, project_id: str | None) -> JobNotFoundError:
        """Create error for a stale job record."""
        return cls(
            message=(
                f"Update failed. The requested transfer job {job_name} "
                "does not exist in the transfer service"
            ),
            context={"job_name": job_name, "project_id": project_id},
        )


@dataclass
class TransferServiceError(SdrsError):
    """Raised when the transfer service call fails."""

    error_code: ErrorCode = ErrorCode.TRANSFER_HTTP_ERROR

    @classmethod
    def connection_failed(cls, url: str, reason: str) -> TransferServiceError:
        """Create error for a connection failure."""
        return cls(
            message=f"Failed to connect to transfer service at {url}: {reason}",
            error_code=ErrorCode.TRANSFER_CONNECTION_FAILED,
            context={"url": url, "reason": reason},
            is_retryable=True,
        )

    @classmethod
    def http_error(cls, operation: str, status: int, reason: str) -> TransferServiceError:
        """Create error for a non-success HTTP status."""
        if status in (401, 403):
            code = ErrorCode.TRANSFER_AUTH_FAILED
        elif status == 429:
            code = ErrorCode.TRANSFER_QUOTA_EXCEEDED
        else:
            code = ErrorCode.TRANSFER_HTTP_ERROR
        return cls(
            message=f"Transfer service '{operation}' failed with HTTP {status}: {reason}",
            error_code=code,
            context={"operation": operation, "status": status, "reason": reason},
            is_retryable=status == 429 or status >= 500,
        )

    @classmethod
    def invalid_response(cls, operation: str, reason: str) -> TransferServiceError:
        """Create error for a response body that cannot be decoded."""
        return cls(
            message=f"Invalid transfer service response for '{operation}': {reason}",
            error_code=ErrorCode.TRANSFER_INVALID_RESPONSE,
            context={"operation": operation, "reason": reason},
        )

"""
Tests for the retention engine exception hierarchy.

Verifies:
- Exception creation and message formatting
- Error code assignment
- Client error classification
- Factory method behavior
- Serialization to dict for logging
"""

import pytest

from sdrs.exceptions import (
    ConfigurationError,
    ErrorCode,
    InvalidRangeError,
    InvalidRuleTypeError,
    JobNotFoundError,
    ProjectIdUnresolvableError,
    RuleValidationError,
    SdrsError,
    TooManyExclusionsError,
    TransferServiceError,
)


class TestErrorCode:
    """Tests for ErrorCode enum."""

    def test_error_codes_are_strings(self) -> None:
        """Error codes should be string values."""
        assert isinstance(ErrorCode.CONFIG_INVALID.value, str)
        assert ErrorCode.CONFIG_INVALID.value == "SDRS_1001"

    def test_error_code_ranges(self) -> None:
        """Error codes should follow the defined ranges."""
        # Configuration and validation: 1xxx
        assert ErrorCode.INVALID_RANGE.value.startswith("SDRS_1")
        assert ErrorCode.TOO_MANY_EXCLUSIONS.value.startswith("SDRS_1")

        # State drift: 3xxx
        assert ErrorCode.JOB_NOT_FOUND.value.startswith("SDRS_3")

        # Transfer service: 4xxx
        assert ErrorCode.TRANSFER_HTTP_ERROR.value.startswith("SDRS_4")
        assert ErrorCode.TRANSFER_QUOTA_EXCEEDED.value.startswith("SDRS_4")


class TestSdrsError:
    """Tests for the base SdrsError class."""

    def test_basic_creation(self) -> None:
        """Basic error creation with message."""
        error = SdrsError(message="Something went wrong")
        assert error.message == "Something went wrong"
        assert error.error_code == ErrorCode.UNKNOWN
        assert error.is_retryable is False
        assert error.is_client_error is False
        assert error.cause is None

    def test_str_with_context(self) -> None:
        """String form includes code and context."""
        error = SdrsError(
            message="Bad thing",
            error_code=ErrorCode.CONFIG_INVALID,
            context={"key": "value"},
        )
        assert str(error) == "[SDRS_1001] Bad thing (key=value)"

    def test_str_without_context(self) -> None:
        """String form omits an empty context."""
        assert str(SdrsError(message="Plain")) == "[SDRS_9999] Plain"

    def test_repr(self) -> None:
        """Repr names the class and its fields."""
        text = repr(SdrsError(message="oops"))
        assert text.startswith("SdrsError(")
        assert "message='oops'" in text

    def test_to_dict(self) -> None:
        """Serialization for structured logging."""
        cause = RuntimeError("root")
        error = SdrsError(message="wrapped", context={"a": 1}, cause=cause)

        result = error.to_dict()

        assert result == {
            "error_type": "SdrsError",
            "error_code": "SDRS_9999",
            "message": "wrapped",
            "context": {"a": 1},
            "is_retryable": False,
            "is_client_error": False,
            "cause": "root",
        }

    def test_can_be_raised(self) -> None:
        """Errors are ordinary exceptions."""
        with pytest.raises(SdrsError, match="boom"):
            raise SdrsError(message="boom")


class TestConfigurationError:
    """Tests for ConfigurationError."""

    def test_validation_failed(self) -> None:
        """Factory records the field and reason."""
        error = ConfigurationError.validation_failed("transfer.suffix", "", "must not be empty")

        assert error.error_code == ErrorCode.CONFIG_INVALID
        assert "transfer.suffix" in error.message
        assert error.context["reason"] == "must not be empty"
        assert error.cause is None

    def test_validation_failed_with_cause(self) -> None:
        """Factory keeps the underlying exception."""
        cause = ValueError("bad")
        error = ConfigurationError.validation_failed("transfer", "x", "bad", cause=cause)

        assert error.cause is cause
        assert error.to_dict()["cause"] == "bad"


class TestRuleValidationErrors:
    """Tests for errors caused by rule data."""

    @pytest.mark.parametrize(
        "error",
        [
            InvalidRangeError.end_before_start("2024-01-02", "2024-01-01"),
            InvalidRuleTypeError.for_operation("GLOBAL", "execute_dataset_rule"),
            TooManyExclusionsError.limit_exceeded(1001, 1000),
            ProjectIdUnresolvableError.no_project(7, 0),
        ],
    )
    def test_are_client_value_errors(self, error: RuleValidationError) -> None:
        """Validation errors are client errors and ValueErrors."""
        assert isinstance(error, RuleValidationError)
        assert isinstance(error, ValueError)
        assert error.is_client_error is True
        assert error.is_retryable is False
        assert error.to_dict()["is_client_error"] is True

    def test_invalid_range(self) -> None:
        """Inverted windows suggest swapping the bounds."""
        error = InvalidRangeError.end_before_start("s", "e")

        assert error.error_code == ErrorCode.INVALID_RANGE
        assert error.message == "endTime occurs before startTime; try swapping them."
        assert error.context == {"start_time": "s", "end_time": "e"}

    def test_invalid_rule_type(self) -> None:
        """Message names the rejected type."""
        error = InvalidRuleTypeError.for_operation("DATASET", "update_default_rule")

        assert error.error_code == ErrorCode.INVALID_RULE_TYPE
        assert error.message == "DATASET retention rule type is invalid for update_default_rule"

    def test_too_many_exclusions(self) -> None:
        """Message states the limit."""
        error = TooManyExclusionsError.limit_exceeded(1001, 1000)

        assert error.error_code == ErrorCode.TOO_MANY_EXCLUSIONS
        assert "1000" in error.message
        assert error.context == {"count": 1001, "limit": 1000}

    def test_project_id_unresolvable(self) -> None:
        """Context records the rule and sibling count."""
        error = ProjectIdUnresolvableError.no_project(None, 3)

        assert error.error_code == ErrorCode.PROJECT_ID_UNRESOLVABLE
        assert error.context == {"rule_id": None, "sibling_count": 3}


class TestJobNotFoundError:
    """Tests for JobNotFoundError."""

    def test_missing(self) -> None:
        """Stale records are operational, not client errors."""
        error = JobNotFoundError.missing("transferJobs/9", "p1")

        assert error.error_code == ErrorCode.JOB_NOT_FOUND
        assert "transferJobs/9" in error.message
        assert error.is_client_error is False
        assert not isinstance(error, ValueError)


class TestTransferServiceError:
    """Tests for TransferServiceError factories."""

    def test_connection_failed(self) -> None:
        """Connection failures are retryable."""
        error = TransferServiceError.connection_failed("https://example", "refused")

        assert error.error_code == ErrorCode.TRANSFER_CONNECTION_FAILED
        assert error.is_retryable is True
        assert error.context["url"] == "https://example"

    @pytest.mark.parametrize(
        ("status", "code", "retryable"),
        [
            (400, ErrorCode.TRANSFER_HTTP_ERROR, False),
            (401, ErrorCode.TRANSFER_AUTH_FAILED, False),
            (403, ErrorCode.TRANSFER_AUTH_FAILED, False),
            (404, ErrorCode.TRANSFER_HTTP_ERROR, False),
            (429, ErrorCode.TRANSFER_QUOTA_EXCEEDED, True),
            (500, ErrorCode.TRANSFER_HTTP_ERROR, True),
            (503, ErrorCode.TRANSFER_HTTP_ERROR, True),
        ],
    )
    def test_http_error(self, status: int, code: ErrorCode, retryable: bool) -> None:
        """Status codes map to error codes and retryability."""
        error = TransferServiceError.http_error("create", status, "reason")

        assert error.error_code == code
        assert error.is_retryable is retryable
        assert error.context["status"] == status

    def test_invalid_response(self) -> None:
        """Undecodable bodies are not retryable."""
        error = TransferServiceError.invalid_response("get", "not JSON")

        assert error.error_code == ErrorCode.TRANSFER_INVALID_RESPONSE
        assert error.is_retryable is False
        assert "get" in str(error)

"""
Unit tests for the domain exception hierarchy and its helpers.
"""

from decimal import Decimal

import pytest

from voidcore.core.exceptions import ErrorSeverity
from voidcore.domain.exceptions import (
    InsufficientFundsError,
    InvalidArgumentError,
    NotFoundError,
    QuotaExceededError,
    VoidDomainException,
    get_error_severity,
    is_transient_error,
    should_alert,
)


@pytest.mark.unit
@pytest.mark.domain
class TestDomainExceptions:
    """Test codes, details and serialization."""

    def test_invalid_argument(self):
        error = InvalidArgumentError("amount", "must be positive")

        assert error.error_code == "INVALID_AMOUNT"
        assert error.details == {"field": "amount", "validation_message": "must be positive"}
        assert str(error).startswith("[INVALID_AMOUNT] Invalid amount: must be positive")

    def test_quota_exceeded_reports_remaining(self):
        error = QuotaExceededError(Decimal("3000"), Decimal("8000"), Decimal("10000"))

        assert error.details["remaining"] == "2000"
        assert error.is_retryable is True
        assert error.error_code == "DAILY_QUOTA_EXCEEDED"

    def test_not_found_without_identifier(self):
        error = NotFoundError("Category")

        assert error.message == "Category not found"
        assert error.error_code == "CATEGORY_NOT_FOUND"

    def test_to_dict(self):
        error = InsufficientFundsError("liquid", Decimal("100"), Decimal("40"))

        assert error.to_dict() == {
            "error_type": "InsufficientFundsError",
            "error_code": "INSUFFICIENT_LIQUID",
            "message": "Insufficient liquid balance: need 100, have 40",
            "details": {"balance": "liquid", "required": "100", "available": "40"},
            "severity": ErrorSeverity.INFO.value,
            "is_retryable": False,
        }

    def test_base_defaults(self):
        error = VoidDomainException("something broke")

        assert error.error_code == "VoidDomainException"
        assert error.severity is ErrorSeverity.ERROR
        assert error.details == {}


@pytest.mark.unit
@pytest.mark.domain
class TestErrorHelpers:
    """Test retry, severity and alerting classification."""

    @pytest.mark.parametrize(
        "error, transient",
        [
            (QuotaExceededError(1, 0, 0), True),
            (InsufficientFundsError("staked", 5, 1), False),
            (ValueError("plain"), False),
        ],
    )
    def test_is_transient_error(self, error, transient):
        assert is_transient_error(error) is transient

    def test_unknown_exception_is_error_severity(self):
        assert get_error_severity(RuntimeError("boom")) is ErrorSeverity.ERROR

    def test_rule_violations_never_alert(self):
        assert should_alert(InvalidArgumentError("category", "malformed")) is False
        assert should_alert(NotFoundError("RankingEntry", "p1")) is False

    def test_unexpected_failures_alert(self):
        assert should_alert(RuntimeError("boom")) is True
        assert should_alert(VoidDomainException("broken", severity=ErrorSeverity.CRITICAL))

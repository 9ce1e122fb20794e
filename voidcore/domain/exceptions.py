"""
Domain exceptions for the VOID economy core.

Purpose
-------
Define the structured, domain-specific exception hierarchy for economy and
progression rules. Domain models raise these before any state change, so a
raised exception always means "nothing happened".

Design Notes
------------
- All domain exceptions inherit from `VoidDomainException`.
- Each exception carries `message`, `details`, `severity`, `is_retryable`
  and a stable `error_code`, and serializes with `to_dict()` so the API layer
  can turn it into a JSON error body without knowing the concrete type.
- Domain code never logs these; services log and re-raise.
"""

from __future__ import annotations

from typing import Any, Dict, Optional

from voidcore.core.exceptions import ErrorSeverity


class VoidDomainException(Exception):
    """
    Base exception for all domain-level errors.

    Args:
        message: Human-readable error message
        details: Additional structured data about the error
        severity: Error severity level for logging handlers
        is_retryable: Whether the operation can be retried
        error_code: Optional code for programmatic handling
    """

    DEFAULT_SEVERITY: ErrorSeverity = ErrorSeverity.ERROR
    DEFAULT_RETRYABLE: bool = False

    def __init__(
        self,
        message: str,
        details: Optional[Dict[str, Any]] = None,
        severity: Optional[ErrorSeverity] = None,
        is_retryable: Optional[bool] = None,
        error_code: Optional[str] = None,
    ) -> None:
        self.message: str = message
        self.details: Dict[str, Any] = details or {}
        self.severity: ErrorSeverity = severity or self.DEFAULT_SEVERITY
        self.is_retryable: bool = (
            is_retryable if is_retryable is not None else self.DEFAULT_RETRYABLE
        )
        self.error_code: str = error_code or self.__class__.__name__
        super().__init__(self.message)

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to dictionary for logging/serialization."""
        return {
            "error_type": self.__class__.__name__,
            "error_code": self.error_code,
            "message": self.message,
            "details": self.details,
            "severity": self.severity.value,
            "is_retryable": self.is_retryable,
        }

    def __str__(self) -> str:
        details_str = f" | Details: {self.details}" if self.details else ""
        return f"[{self.error_code}] {self.message}{details_str}"

    def __repr__(self) -> str:
        return (
            f"{self.__class__.__name__}("
            f"message={self.message!r}, "
            f"details={self.details!r}, "
            f"severity={self.severity.value!r}, "
            f"is_retryable={self.is_retryable!r}"
            ")"
        )


class InvalidArgumentError(VoidDomainException):
    """
    Raised when an argument violates a domain precondition.

    Covers negative or zero amounts where a positive one is required,
    malformed category names and invalid fee splits.

    Args:
        field: Name of the offending argument
        message: Explanation of why it is invalid
    """

    DEFAULT_SEVERITY = ErrorSeverity.INFO
    DEFAULT_RETRYABLE = False

    def __init__(self, field: str, message: str) -> None:
        self.field = field
        self.validation_message = message
        super().__init__(
            f"Invalid {field}: {message}",
            details={
                "field": field,
                "validation_message": message,
            },
            error_code=f"INVALID_{field.upper()}",
        )


class InsufficientFundsError(VoidDomainException):
    """
    Raised when a stake, unstake or withdrawal exceeds the available balance.

    Args:
        balance: Which balance was checked ("liquid" or "staked")
        required: Amount requested
        available: Amount available in that balance
    """

    DEFAULT_SEVERITY = ErrorSeverity.INFO
    DEFAULT_RETRYABLE = False

    def __init__(self, balance: str, required: Any, available: Any) -> None:
        self.balance = balance
        self.required = required
        self.available = available
        super().__init__(
            f"Insufficient {balance} balance: need {required}, have {available}",
            details={
                "balance": balance,
                "required": str(required),
                "available": str(available),
            },
            error_code=f"INSUFFICIENT_{balance.upper()}",
        )


class QuotaExceededError(VoidDomainException):
    """
    Raised when a withdrawal would push the day's total past the daily limit.

    The quota resets at the start of the next day, so the error is marked
    retryable.

    Args:
        requested: Amount requested
        withdrawn_today: Amount already withdrawn in the current window
        daily_limit: Daily withdrawal cap
    """

    DEFAULT_SEVERITY = ErrorSeverity.INFO
    DEFAULT_RETRYABLE = True

    def __init__(self, requested: Any, withdrawn_today: Any, daily_limit: Any) -> None:
        self.requested = requested
        self.withdrawn_today = withdrawn_today
        self.daily_limit = daily_limit
        remaining = daily_limit - withdrawn_today
        super().__init__(
            f"Daily withdrawal limit exceeded: requested {requested}, "
            f"remaining {remaining} of {daily_limit}",
            details={
                "requested": str(requested),
                "withdrawn_today": str(withdrawn_today),
                "daily_limit": str(daily_limit),
                "remaining": str(remaining),
            },
            error_code="DAILY_QUOTA_EXCEEDED",
        )


class NotFoundError(VoidDomainException):
    """
    Raised when a read targets an unknown player or category.

    Args:
        resource_type: Type of resource (e.g., "Category", "RankingEntry")
        identifier: Optional identifier for the missing resource
    """

    DEFAULT_SEVERITY = ErrorSeverity.INFO
    DEFAULT_RETRYABLE = False

    def __init__(self, resource_type: str, identifier: Optional[Any] = None) -> None:
        self.resource_type = resource_type
        self.identifier = identifier

        if identifier is not None:
            message = f"{resource_type} not found: {identifier}"
        else:
            message = f"{resource_type} not found"

        super().__init__(
            message,
            details={
                "resource_type": resource_type,
                "identifier": identifier,
            },
            error_code=f"{resource_type.upper()}_NOT_FOUND",
        )


def is_transient_error(exc: Exception) -> bool:
    """Check if an exception represents an error that may succeed later."""
    if isinstance(exc, VoidDomainException):
        return exc.is_retryable
    return False


def get_error_severity(exc: Exception) -> ErrorSeverity:
    """Get the severity level of an exception for logging."""
    if isinstance(exc, VoidDomainException):
        return exc.severity
    return ErrorSeverity.ERROR


def should_alert(exc: Exception) -> bool:
    """Only unexpected failures page anyone; rule violations never do."""
    return get_error_severity(exc) in (ErrorSeverity.ERROR, ErrorSeverity.CRITICAL)

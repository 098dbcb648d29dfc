"""Base exception classes for domain-level errors."""

from __future__ import annotations


class DomainError(Exception):
    """Base exception for all domain-level errors."""

    def __init__(self, message: str, code: str | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.code = code or self.__class__.__name__


class ValidationError(DomainError):
    """Raised when domain validation fails."""

    def __init__(self, message: str, field: str | None = None) -> None:
        super().__init__(message, code="VALIDATION_ERROR")
        self.field = field


class BusinessRuleViolationError(DomainError):
    """Raised when a business rule is violated."""

    def __init__(self, rule: str, message: str | None = None) -> None:
        msg = message or f"Business rule violated: {rule}"
        super().__init__(msg, code="BUSINESS_RULE_VIOLATION")
        self.rule = rule


class ResolutionError(DomainError):
    """Raised by resolvers when an identifier cannot be turned into playable items.

    Never escapes the resolver port: implementations convert it into a
    ``LoadFailed`` result.
    """

    def __init__(self, identifier: str, reason: str) -> None:
        super().__init__(f"Failed to load '{identifier}': {reason}", code="RESOLUTION_FAILED")
        self.identifier = identifier
        self.reason = reason

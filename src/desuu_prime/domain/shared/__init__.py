"""
Shared Domain Kernel

Contains constrained types, message catalogues and exceptions shared across
the package.
"""

from desuu_prime.domain.shared.exceptions import (
    BusinessRuleViolationError,
    DomainError,
    ResolutionError,
    ValidationError,
)

__all__ = [
    "DomainError",
    "ValidationError",
    "BusinessRuleViolationError",
    "ResolutionError",
]

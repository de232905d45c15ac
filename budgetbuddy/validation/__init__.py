"""Validation package."""

from budgetbuddy.validation.validator import EMAIL_PATTERN, ExpenseValidator

__all__ = ["EMAIL_PATTERN", "ExpenseValidator"]

"""
Input Validation

DESIGN DECISION: The screens validate form input before calling the
store, and the store trusts them by default. These checks are what a
standalone core adds on top: the store runs `validate_expense` itself
when strict validation is switched on, and the form helpers are shared
so every caller applies the same rules.

Validation NEVER silently fixes input. It reports issues; errors block,
warnings are for display.

NOTE: `validate_credentials` is a form check only. There is no account
backend and nothing is verified.
"""

import re
from datetime import date
from decimal import Decimal
from typing import Iterable, Optional

from budgetbuddy.config import BudgetSettings, get_settings
from budgetbuddy.models.budget import (
    Category,
    Expense,
    ValidationIssue,
    ValidationResult,
)


EMAIL_PATTERN = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")


class ExpenseValidator:
    """
    Validates expense, onboarding and login form input.
    """

    def __init__(self, settings: Optional[BudgetSettings] = None):
        self._settings = settings or get_settings().budget

    def validate_expense(
        self,
        expense: Expense,
        categories: Iterable[Category],
        today: Optional[date] = None,
    ) -> ValidationResult:
        """
        Check an expense before it is recorded.

        Checks:
        - Amount is greater than zero
        - Category exists in the current set
        - Date is an ISO calendar date, not in the future
        """
        issues = []
        today = today or date.today()

        if expense.amount <= 0:
            issues.append(ValidationIssue(
                field="amount",
                issue_type="invalid_value",
                message="Amount must be greater than zero",
                severity="error",
            ))

        names = {category.name for category in categories}
        if not expense.category:
            issues.append(ValidationIssue(
                field="category",
                issue_type="missing",
                message="Please select a category",
                severity="error",
            ))
        elif expense.category not in names:
            issues.append(ValidationIssue(
                field="category",
                issue_type="unknown_category",
                message=f"Unknown category: {expense.category}",
                severity="error",
            ))

        try:
            expense_date = date.fromisoformat(expense.date)
        except ValueError:
            issues.append(ValidationIssue(
                field="date",
                issue_type="invalid_format",
                message=f"Date must be YYYY-MM-DD, got '{expense.date}'",
                severity="error",
            ))
        else:
            if expense_date > today:
                issues.append(ValidationIssue(
                    field="date",
                    issue_type="future_date",
                    message=f"Expense date {expense.date} is in the future",
                    severity="warning",
                ))

        return ValidationResult(issues=issues)

    def validate_onboarding(
        self,
        monthly_income: Decimal,
        total_budget: Decimal,
    ) -> ValidationResult:
        """Check the income and budget entered during onboarding."""
        issues = []

        if monthly_income <= 0:
            issues.append(ValidationIssue(
                field="monthly_income",
                issue_type="invalid_value",
                message="Monthly income must be greater than zero",
                severity="error",
            ))
        if total_budget <= 0:
            issues.append(ValidationIssue(
                field="total_budget",
                issue_type="invalid_value",
                message="Monthly budget must be greater than zero",
                severity="error",
            ))
        elif monthly_income > 0 and total_budget > monthly_income:
            issues.append(ValidationIssue(
                field="total_budget",
                issue_type="exceeds_income",
                message="Monthly budget is higher than monthly income",
                severity="warning",
            ))

        return ValidationResult(issues=issues)

    def validate_credentials(self, email: str, password: str) -> ValidationResult:
        """Check the login/signup form fields."""
        issues = []

        if not email or not EMAIL_PATTERN.match(email.strip()):
            issues.append(ValidationIssue(
                field="email",
                issue_type="invalid_format",
                message="Please enter a valid email address",
                severity="error",
            ))

        min_length = self._settings.min_password_length
        if len(password or "") < min_length:
            issues.append(ValidationIssue(
                field="password",
                issue_type="too_short",
                message=f"Password must be at least {min_length} characters",
                severity="error",
            ))

        return ValidationResult(issues=issues)

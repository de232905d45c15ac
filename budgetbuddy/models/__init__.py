"""
Data Models Package

This package contains all Pydantic models used in BudgetBuddy.
All data flowing through the system must conform to these schemas.
"""

from budgetbuddy.models.budget import (
    CURRENT_SCHEMA_VERSION,
    DEFAULT_CATEGORIES,
    UNCATEGORIZED_COLOR,
    Alert,
    BudgetSummary,
    Category,
    CategoryProgress,
    ChartDataItem,
    Expense,
    MonthlySpending,
    MutationResult,
    Prediction,
    SavingTip,
    Screen,
    Trend,
    UserData,
    ValidationIssue,
    ValidationResult,
    default_categories,
)
from budgetbuddy.models.audit import (
    AuditEvent,
    AuditEventBuilder,
    AuditEventType,
    AuditSeverity,
)

__all__ = [
    # Budget models
    "CURRENT_SCHEMA_VERSION",
    "DEFAULT_CATEGORIES",
    "UNCATEGORIZED_COLOR",
    "Alert",
    "BudgetSummary",
    "Category",
    "CategoryProgress",
    "ChartDataItem",
    "Expense",
    "MonthlySpending",
    "MutationResult",
    "Prediction",
    "SavingTip",
    "Screen",
    "Trend",
    "UserData",
    "ValidationIssue",
    "ValidationResult",
    "default_categories",
    # Audit models
    "AuditEvent",
    "AuditEventBuilder",
    "AuditEventType",
    "AuditSeverity",
]

"""
Core Data Models for BudgetBuddy

These models define the schemas for all data flowing through the system.
They are designed to:
1. Be immutable snapshots - a mutation always builds a new UserData
2. Serialize to exactly the persisted document shape (camelCase keys)
3. Provide clear validation error messages on load

DESIGN DECISION: Monetary values are Decimal so that category and grand
totals stay exact across any sequence of adds, edits and deletes.
"""

from decimal import Decimal
from enum import Enum
from typing import Optional
from uuid import UUID, uuid4

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


CURRENT_SCHEMA_VERSION = 1

# Colour tag given to expenses whose category is not in the set
UNCATEGORIZED_COLOR = "bg-gray-100"


class BudgetModel(BaseModel):
    """Base for all persisted snapshot models."""
    model_config = ConfigDict(
        frozen=True,
        alias_generator=to_camel,
        populate_by_name=True,
        str_strip_whitespace=True,
    )


# =============================================================================
# ENUMS
# =============================================================================

class Screen(str, Enum):
    """Views the presentation layer can be asked to show after a mutation."""
    DASHBOARD = "dashboard"
    EXPENSES = "expenses"
    REPORTS = "reports"
    AI = "ai"
    SETTINGS = "settings"


class Trend(str, Enum):
    UP = "up"
    DOWN = "down"


# =============================================================================
# CORE BUDGET MODELS
# =============================================================================

class Category(BudgetModel):
    """
    A spending category with a monthly limit.

    `spent` is maintained by the store as the sum of the amounts of all
    expenses tagged with this category. `id` stays fixed across renames.
    """

    id: UUID = Field(
        default_factory=uuid4,
        description="Stable category identifier"
    )
    name: str = Field(
        ...,
        min_length=1,
        max_length=50,
        description="Category name, unique within the set"
    )
    limit: Decimal = Field(
        ...,
        ge=0,
        description="Monthly spending limit"
    )
    spent: Decimal = Field(
        default=Decimal("0"),
        description="Amount spent so far"
    )
    color: str = Field(
        default=UNCATEGORIZED_COLOR,
        description="Display colour tag"
    )


class Expense(BudgetModel):
    """
    A single recorded expense.

    `category` references a Category by name; `category_id` and
    `category_color` are filled in by the store from the matching category.
    """

    amount: Decimal = Field(
        ...,
        description="Amount spent"
    )
    category: str = Field(
        ...,
        description="Name of the category this expense belongs to"
    )
    category_id: Optional[UUID] = Field(
        default=None,
        description="Stable reference to the category"
    )
    category_color: str = Field(
        default=UNCATEGORIZED_COLOR,
        description="Colour tag copied from the category"
    )
    date: str = Field(
        ...,
        description="Calendar date, YYYY-MM-DD"
    )
    notes: str = ""


class Alert(BudgetModel):
    """An over-budget warning shown on the dashboard."""

    message: str
    category: Optional[str] = Field(
        default=None,
        description="Category the alert was raised for"
    )

    def references(self, category_name: str) -> bool:
        """Whether this alert is about the given category."""
        return self.category == category_name or category_name in self.message


class UserData(BudgetModel):
    """
    The root aggregate for a session.

    The whole aggregate is the unit of persistence. `spent` is the grand
    total of all expense amounts. `expenses` are newest-first.
    """

    schema_version: int = Field(
        default=CURRENT_SCHEMA_VERSION,
        ge=1,
    )
    monthly_income: Decimal
    total_budget: Decimal
    spent: Decimal = Decimal("0")
    categories: tuple[Category, ...] = ()
    expenses: tuple[Expense, ...] = ()
    alerts: tuple[Alert, ...] = ()
    ai_suggestions: tuple[str, ...] = ()
    badges: tuple[str, ...] = ()
    savings_goal: Decimal = Decimal("5000")
    current_savings: Decimal = Decimal("0")

    def find_category(self, name: str) -> Optional[Category]:
        """Get a category by name, or None."""
        for category in self.categories:
            if category.name == name:
                return category
        return None

    def to_document(self) -> str:
        """Serialize to the persisted JSON document."""
        return self.model_dump_json(by_alias=True)

    @classmethod
    def from_document(cls, document: str) -> "UserData":
        """Parse a persisted JSON document."""
        return cls.model_validate_json(document)


# Default category set for a fresh session: (name, limit, colour)
DEFAULT_CATEGORIES: tuple[tuple[str, Decimal, str], ...] = (
    ("Food", Decimal("3000"), "bg-orange-100"),
    ("Rent", Decimal("4000"), "bg-blue-100"),
    ("Travel", Decimal("2000"), "bg-green-100"),
    ("Entertainment", Decimal("2000"), "bg-purple-100"),
    ("Shopping", Decimal("1500"), "bg-pink-100"),
    ("Education", Decimal("1000"), "bg-yellow-100"),
)


def default_categories() -> tuple[Category, ...]:
    """Build the default categories with fresh ids and nothing spent."""
    return tuple(
        Category(name=name, limit=limit, color=color)
        for name, limit, color in DEFAULT_CATEGORIES
    )


# =============================================================================
# MUTATION RESULT
# =============================================================================

class MutationResult(BaseModel):
    """
    Outcome of a store mutation.

    The state change itself always succeeded when a result is returned.
    `persisted` tells whether the write-through did too; `navigate_to`
    and `message` are signals for the presentation layer.
    """

    user_data: UserData
    persisted: bool = True
    persistence_error: Optional[str] = None
    navigate_to: Optional[Screen] = None
    message: str = ""
    alerts_raised: tuple[Alert, ...] = ()


# =============================================================================
# VIEW MODELS (derived, never persisted)
# =============================================================================

class BudgetSummary(BaseModel):
    """Headline numbers for the dashboard budget card."""

    total_budget: Decimal
    spent: Decimal
    remaining: Decimal
    percentage_spent: float
    percentage_remaining: float


class CategoryProgress(BaseModel):
    """Progress of one category against its limit."""

    name: str
    color: str
    limit: Decimal
    spent: Decimal
    percentage: float = Field(
        ...,
        description="Unclamped spent / limit * 100"
    )
    display_percentage: float = Field(
        ...,
        ge=0.0,
        le=100.0,
        description="Percentage clamped for a progress bar"
    )
    is_over_budget: bool
    over_amount: Decimal


class ChartDataItem(BaseModel):
    """One slice of the category distribution chart."""

    name: str
    value: Decimal
    fill: str


class MonthlySpending(BaseModel):
    month: str
    spent: Decimal
    budget: Decimal


class Prediction(BaseModel):
    """A (static) next-month spending prediction for a category."""

    category: str
    predicted: Decimal
    current: Decimal
    trend: Trend

    @property
    def change(self) -> Decimal:
        return abs(self.predicted - self.current)


class SavingTip(BaseModel):
    title: str
    description: str
    savings: Decimal
    difficulty: str


# =============================================================================
# VALIDATION MODELS
# =============================================================================

class ValidationIssue(BaseModel):
    """A single validation issue found."""

    field: str = Field(
        ...,
        description="Field with the issue"
    )
    issue_type: str = Field(
        ...,
        description="Type of issue (e.g., 'missing', 'invalid_value', 'unknown_category')"
    )
    message: str = Field(
        ...,
        description="Human-readable description of the issue"
    )
    severity: str = Field(
        ...,
        pattern="^(error|warning|info)$",
        description="Issue severity"
    )


class ValidationResult(BaseModel):
    """Result of validating one form's input."""

    issues: list[ValidationIssue] = Field(
        default_factory=list,
        description="All validation issues found"
    )

    @property
    def has_errors(self) -> bool:
        """Check if there are any error-level issues."""
        return any(issue.severity == "error" for issue in self.issues)

    @property
    def error_count(self) -> int:
        """Count error-level issues."""
        return sum(1 for issue in self.issues if issue.severity == "error")

    @property
    def is_valid(self) -> bool:
        return not self.has_errors

    @property
    def warnings(self) -> list[str]:
        return [issue.message for issue in self.issues if issue.severity == "warning"]

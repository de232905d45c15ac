"""
Derived-View Calculators

DESIGN DECISION: Everything the screens show beyond raw state is
computed here, on every read, from the current UserData snapshot.
Nothing is cached and nothing mutates state.

Division by zero is defined rather than left to the caller:
- percentage_spent / savings_progress are 0.0 when the denominator is 0
- category_percentage with a 0 limit is 0.0 if nothing was spent,
  100.0 otherwise
"""

from collections import defaultdict
from datetime import date
from decimal import ROUND_HALF_UP, Decimal
from typing import Iterable, Literal, Optional

from budgetbuddy.models.budget import (
    BudgetSummary,
    Category,
    CategoryProgress,
    ChartDataItem,
    Expense,
    MonthlySpending,
    UserData,
)


ZERO = Decimal("0")

# Chart fill colours for the category colour tags
COLOR_HEX: dict[str, str] = {
    "bg-orange-100": "#fb923c",
    "bg-blue-100": "#60a5fa",
    "bg-green-100": "#4ade80",
    "bg-purple-100": "#c084fc",
    "bg-pink-100": "#f472b6",
    "bg-yellow-100": "#facc15",
    "bg-red-100": "#f87171",
    "bg-cyan-100": "#22d3ee",
}
DEFAULT_CHART_COLOR = "#94a3b8"

ALL_CATEGORIES = "All"

SortKey = Literal["date", "amount"]


def format_amount(amount: Decimal) -> str:
    """Whole amounts without decimals, others with two places."""
    if amount == amount.to_integral_value():
        return str(int(amount))
    return f"{amount:.2f}"


def display_color(color: str) -> str:
    return COLOR_HEX.get(color, DEFAULT_CHART_COLOR)


# =============================================================================
# OVERALL BUDGET
# =============================================================================

def percentage_spent(user_data: UserData) -> float:
    """Share of the total budget spent, in percent (0.0 for a zero budget)."""
    if user_data.total_budget == 0:
        return 0.0
    return float(user_data.spent / user_data.total_budget * 100)


def remaining_budget(user_data: UserData) -> Decimal:
    return user_data.total_budget - user_data.spent


def budget_summary(user_data: UserData) -> BudgetSummary:
    """Headline numbers for the dashboard."""
    spent_pct = percentage_spent(user_data)
    return BudgetSummary(
        total_budget=user_data.total_budget,
        spent=user_data.spent,
        remaining=remaining_budget(user_data),
        percentage_spent=spent_pct,
        percentage_remaining=100.0 - spent_pct,
    )


def savings_progress(user_data: UserData) -> float:
    """Progress towards the savings goal, in percent."""
    if user_data.savings_goal == 0:
        return 0.0
    return float(user_data.current_savings / user_data.savings_goal * 100)


def recommended_budget(monthly_income: Decimal, ratio: float = 0.8) -> Decimal:
    """Budget suggested at onboarding: a share of income, to the nearest unit."""
    return (Decimal(monthly_income) * Decimal(str(ratio))).quantize(
        Decimal("1"), rounding=ROUND_HALF_UP
    )


# =============================================================================
# CATEGORIES
# =============================================================================

def category_percentage(category: Category) -> float:
    """
    Spent as a percentage of the limit, unclamped.

    Values over 100 mean the category is over budget.
    """
    if category.limit == 0:
        return 0.0 if category.spent <= 0 else 100.0
    return float(category.spent / category.limit * 100)


def category_display_percentage(category: Category) -> float:
    """category_percentage clamped to [0, 100] for a progress bar."""
    return min(max(category_percentage(category), 0.0), 100.0)


def is_over_budget(category: Category) -> bool:
    return category.spent > category.limit


def over_budget_amount(category: Category) -> Decimal:
    return max(category.spent - category.limit, ZERO)


def over_budget_categories(user_data: UserData) -> list[Category]:
    """Categories currently over their limit, in category order."""
    return [c for c in user_data.categories if is_over_budget(c)]


def category_progress(user_data: UserData) -> list[CategoryProgress]:
    return [
        CategoryProgress(
            name=c.name,
            color=c.color,
            limit=c.limit,
            spent=c.spent,
            percentage=category_percentage(c),
            display_percentage=category_display_percentage(c),
            is_over_budget=is_over_budget(c),
            over_amount=over_budget_amount(c),
        )
        for c in user_data.categories
    ]


def category_distribution(user_data: UserData) -> list[ChartDataItem]:
    """Pie chart slices: categories with any spending."""
    return [
        ChartDataItem(name=c.name, value=c.spent, fill=display_color(c.color))
        for c in user_data.categories
        if c.spent > 0
    ]


def total_category_limits(categories: Iterable[Category]) -> Decimal:
    return sum((c.limit for c in categories), ZERO)


def is_over_allocated(categories: Iterable[Category], total_budget: Decimal) -> bool:
    """True when the category limits add up to more than the total budget."""
    return total_category_limits(categories) > total_budget


def spent_by_category(expenses: Iterable[Expense]) -> dict[str, Decimal]:
    """Sum expense amounts per category name, straight from the expense list."""
    totals: dict[str, Decimal] = defaultdict(lambda: ZERO)
    for expense in expenses:
        totals[expense.category] += expense.amount
    return dict(totals)


# =============================================================================
# EXPENSE LISTS
# =============================================================================

def recent_expenses(user_data: UserData, limit: int = 5) -> list[Expense]:
    return list(user_data.expenses[:limit])


def list_expenses(
    user_data: UserData,
    category: Optional[str] = None,
    sort_by: SortKey = "date",
) -> list[tuple[int, Expense]]:
    """
    Filter and sort expenses for the expense screen.

    Each entry carries the expense's index in `user_data.expenses`, which
    is what update_expense / delete_expense take.

    Args:
        category: Category name to keep, or None / "All" for everything
        sort_by: "date" (newest first) or "amount" (largest first)
    """
    entries = [
        (index, expense)
        for index, expense in enumerate(user_data.expenses)
        if category in (None, ALL_CATEGORIES) or expense.category == category
    ]

    if sort_by == "date":
        # ISO dates sort correctly as strings
        return sorted(entries, key=lambda entry: entry[1].date, reverse=True)
    if sort_by == "amount":
        return sorted(entries, key=lambda entry: entry[1].amount, reverse=True)
    raise ValueError(f"Unknown sort key: {sort_by}")


# =============================================================================
# MONTHLY REPORTS
# =============================================================================

def monthly_trend(
    user_data: UserData,
    history: Iterable[MonthlySpending],
    current_month: Optional[str] = None,
) -> list[MonthlySpending]:
    """Previous months followed by the current one."""
    label = current_month or date.today().strftime("%b")
    return [
        *history,
        MonthlySpending(month=label, spent=user_data.spent, budget=user_data.total_budget),
    ]


def spending_change(user_data: UserData, previous: MonthlySpending) -> Decimal:
    """Spent this month minus spent in the previous month."""
    return user_data.spent - previous.spent

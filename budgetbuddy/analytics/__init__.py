"""Derived views over the budget state."""

from budgetbuddy.analytics.calculators import (
    ALL_CATEGORIES,
    COLOR_HEX,
    DEFAULT_CHART_COLOR,
    budget_summary,
    category_display_percentage,
    category_distribution,
    category_percentage,
    category_progress,
    display_color,
    format_amount,
    is_over_allocated,
    is_over_budget,
    list_expenses,
    monthly_trend,
    over_budget_amount,
    over_budget_categories,
    percentage_spent,
    recent_expenses,
    recommended_budget,
    remaining_budget,
    savings_progress,
    spending_change,
    spent_by_category,
    total_category_limits,
)

__all__ = [
    "ALL_CATEGORIES",
    "COLOR_HEX",
    "DEFAULT_CHART_COLOR",
    "budget_summary",
    "category_display_percentage",
    "category_distribution",
    "category_percentage",
    "category_progress",
    "display_color",
    "format_amount",
    "is_over_allocated",
    "is_over_budget",
    "list_expenses",
    "monthly_trend",
    "over_budget_amount",
    "over_budget_categories",
    "percentage_spent",
    "recent_expenses",
    "recommended_budget",
    "remaining_budget",
    "savings_progress",
    "spending_change",
    "spent_by_category",
    "total_category_limits",
]

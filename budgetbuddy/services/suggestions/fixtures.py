"""
Static fixture data.

These are the canned suggestions, badges, predictions, tips and history
the app shows until a real engine is plugged in. DEMO_EXPENSES is a small
September spend used to bootstrap a demo session.
"""

from decimal import Decimal

from budgetbuddy.models.budget import (
    Expense,
    MonthlySpending,
    Prediction,
    SavingTip,
    Trend,
)


SUGGESTIONS: tuple[str, ...] = (
    "You spent 30% more on food this month compared to last month.",
    "Consider setting aside ₹500 from your remaining budget for emergency savings.",
    "You're doing great with Travel - 25% under budget!",
    "Try meal prepping to save up to ₹600/month on food expenses.",
)

BADGES: tuple[str, ...] = (
    "Smart Saver 🌟",
    "Budget Master 💪",
    "Streak King 🔥",
)

PREDICTIONS: tuple[Prediction, ...] = (
    Prediction(category="Food", predicted=Decimal("2800"), current=Decimal("2400"), trend=Trend.UP),
    Prediction(category="Travel", predicted=Decimal("1200"), current=Decimal("1500"), trend=Trend.DOWN),
    Prediction(category="Entertainment", predicted=Decimal("1600"), current=Decimal("1800"), trend=Trend.DOWN),
)

SAVING_TIPS: tuple[SavingTip, ...] = (
    SavingTip(
        title="Pack Your Lunch",
        description="Save ₹500/month by bringing lunch from home 3 times a week",
        savings=Decimal("500"),
        difficulty="Easy",
    ),
    SavingTip(
        title="Student Discounts",
        description="Use your student ID for 10-30% off on entertainment and food",
        savings=Decimal("300"),
        difficulty="Easy",
    ),
    SavingTip(
        title="Bike More, Ride Less",
        description="Switch to cycling for short distances to cut travel costs",
        savings=Decimal("400"),
        difficulty="Medium",
    ),
)

MONTHLY_HISTORY: tuple[MonthlySpending, ...] = (
    MonthlySpending(month="Aug", spent=Decimal("8500"), budget=Decimal("12000")),
    MonthlySpending(month="Sep", spent=Decimal("10200"), budget=Decimal("12000")),
)

# Oldest first, so replaying them through add_expense leaves the newest on top
DEMO_EXPENSES: tuple[Expense, ...] = (
    Expense(amount=Decimal("400"), category="Travel", date="2025-09-22", notes="Weekend trip"),
    Expense(amount=Decimal("200"), category="Food", date="2025-09-23", notes="Coffee shop"),
    Expense(amount=Decimal("150"), category="Shopping", date="2025-09-24", notes="New notebook"),
    Expense(amount=Decimal("300"), category="Food", date="2025-09-25", notes="Dinner at restaurant"),
    Expense(amount=Decimal("500"), category="Entertainment", date="2025-09-26", notes="Movie with friends"),
    Expense(amount=Decimal("120"), category="Travel", date="2025-09-27", notes="Bus pass"),
    Expense(amount=Decimal("250"), category="Food", date="2025-09-28", notes="Lunch at campus cafeteria"),
)

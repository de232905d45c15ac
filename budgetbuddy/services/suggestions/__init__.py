"""Suggestion providers package."""

from budgetbuddy.services.suggestions.fixtures import DEMO_EXPENSES
from budgetbuddy.services.suggestions.provider import (
    StaticSuggestionProvider,
    SuggestionProvider,
)

__all__ = [
    "DEMO_EXPENSES",
    "StaticSuggestionProvider",
    "SuggestionProvider",
]

"""
Suggestion Providers

DESIGN DECISION: "AI suggestions", badges and predictions are not
computed anywhere. They come from a provider behind a small capability
interface, so a real engine can replace the static one without the
budget store changing.

The store asks the provider for suggestions and badges when a session
is initialized; the analytics screens ask it for predictions, tips and
monthly history directly.
"""

from abc import ABC, abstractmethod
from typing import Optional

from budgetbuddy.models.budget import (
    MonthlySpending,
    Prediction,
    SavingTip,
    UserData,
)
from budgetbuddy.services.suggestions import fixtures


class SuggestionProvider(ABC):
    """Source of advice and engagement content for a session."""

    @abstractmethod
    def suggestions(self, user_data: Optional[UserData] = None) -> list[str]:
        """Short spending suggestions, most relevant first."""
        pass

    @abstractmethod
    def badges(self, user_data: Optional[UserData] = None) -> list[str]:
        """Achievement badges earned by the user."""
        pass

    @abstractmethod
    def predictions(self, user_data: Optional[UserData] = None) -> list[Prediction]:
        """Next-month spending predictions per category."""
        pass

    @abstractmethod
    def saving_tips(self) -> list[SavingTip]:
        pass

    @abstractmethod
    def monthly_history(self) -> list[MonthlySpending]:
        """Spending of previous months, oldest first."""
        pass


class StaticSuggestionProvider(SuggestionProvider):
    """
    Serves the fixture data regardless of the user's numbers.
    """

    def suggestions(self, user_data: Optional[UserData] = None) -> list[str]:
        return list(fixtures.SUGGESTIONS)

    def badges(self, user_data: Optional[UserData] = None) -> list[str]:
        return list(fixtures.BADGES)

    def predictions(self, user_data: Optional[UserData] = None) -> list[Prediction]:
        return list(fixtures.PREDICTIONS)

    def saving_tips(self) -> list[SavingTip]:
        return list(fixtures.SAVING_TIPS)

    def monthly_history(self) -> list[MonthlySpending]:
        return list(fixtures.MONTHLY_HISTORY)

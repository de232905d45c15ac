"""
Budget State Store for BudgetBuddy

This module owns the session's UserData and defines how every mutation
moves it from one snapshot to the next:
1. Expenses (add / edit / delete) with category and grand totals
2. Budget settings (total budget, category limits, income, renames)
3. Session lifecycle (initialize, load, reset)

DESIGN DECISION: The store enforces the boundaries:
- Each mutation computes a complete next snapshot before swapping it in,
  so no caller ever sees a half-applied change
- A failed precondition leaves the state untouched
- Every successful mutation is written through to storage
- Every step is audited

A failed write does not undo the mutation. The result reports it and the
caller can retry_save() or warn the user.
"""

from decimal import Decimal
from typing import Iterable, Optional
from uuid import UUID

from budgetbuddy.analytics import format_amount, is_over_budget, over_budget_amount, over_budget_categories
from budgetbuddy.audit import AuditLogger, create_correlation_id
from budgetbuddy.config import AlertPolicy, BudgetSettings, get_settings
from budgetbuddy.models.audit import AuditEventBuilder
from budgetbuddy.models.budget import (
    Alert,
    Category,
    Expense,
    MutationResult,
    Screen,
    UserData,
    ValidationResult,
    default_categories,
)
from budgetbuddy.services.storage import (
    InMemoryAuditStorage,
    InMemoryStorage,
    JsonFileStorage,
    StorageError,
    UserDataStorageInterface,
)
from budgetbuddy.services.suggestions import StaticSuggestionProvider, SuggestionProvider
from budgetbuddy.validation import ExpenseValidator


class BudgetStoreError(Exception):
    """Base exception for store operations."""
    pass


class NotInitializedError(BudgetStoreError):
    """A mutation was requested before the session was initialized."""

    def __init__(self, operation: str):
        self.operation = operation
        super().__init__(f"Cannot {operation}: no budget session is initialized")


class IndexOutOfRangeError(BudgetStoreError):
    """An edit or delete referenced an expense that does not exist."""

    def __init__(self, index: int, size: int):
        self.index = index
        self.size = size
        super().__init__(f"Expense index {index} out of range for {size} expenses")


class CategoryNotFoundError(BudgetStoreError):
    """No category with the given name exists."""
    pass


class DuplicateCategoryError(BudgetStoreError):
    """A category with the requested name already exists."""
    pass


class ExpenseValidationError(BudgetStoreError):
    """Strict validation rejected an expense."""

    def __init__(self, result: ValidationResult):
        self.result = result
        messages = "; ".join(issue.message for issue in result.issues if issue.severity == "error")
        super().__init__(f"Invalid expense: {messages}")


# =============================================================================
# STATE TRANSITIONS
# Pure functions: (current snapshot, input) -> next snapshot
# =============================================================================

def build_alert(category: Category, currency: str) -> Alert:
    """The over-budget alert for a category."""
    over = format_amount(over_budget_amount(category))
    return Alert(
        message=f"You've exceeded your {category.name} budget by {currency}{over}!",
        category=category.name,
    )


def recompute_alerts(state: UserData, currency: str) -> tuple[Alert, ...]:
    """One alert per category currently over budget, in category order."""
    return tuple(build_alert(c, currency) for c in over_budget_categories(state))


def link_expense(expense: Expense, category: Optional[Category]) -> Expense:
    """
    Copy the category's id and colour onto the expense.

    Without a matching category the expense keeps the colour it came with.
    """
    if category is None:
        return expense.model_copy(update={"category_id": None})
    return expense.model_copy(
        update={"category_id": category.id, "category_color": category.color}
    )


def apply_add_expense(
    state: UserData,
    expense: Expense,
    policy: AlertPolicy,
    currency: str,
) -> tuple[UserData, tuple[Alert, ...]]:
    """
    Prepend an expense and roll its amount into the totals.

    Returns the next snapshot and the alerts newly raised by it. An
    expense for an unknown category is still recorded and counted in the
    grand total, but no category total changes.
    """
    expense = link_expense(expense, state.find_category(expense.category))

    categories = tuple(
        c.model_copy(update={"spent": c.spent + expense.amount})
        if c.name == expense.category else c
        for c in state.categories
    )
    next_state = state.model_copy(update={
        "expenses": (expense, *state.expenses),
        "categories": categories,
        "spent": state.spent + expense.amount,
    })

    if policy == AlertPolicy.RECOMPUTE:
        return _with_recomputed_alerts(state, next_state, currency)

    alerts = state.alerts
    raised: tuple[Alert, ...] = ()
    category = next_state.find_category(expense.category)
    if category is not None and is_over_budget(category):
        if not any(alert.references(category.name) for alert in alerts):
            raised = (build_alert(category, currency),)
            alerts = (*alerts, *raised)

    return next_state.model_copy(update={"alerts": alerts}), raised


def apply_update_expense(
    state: UserData,
    index: int,
    new_expense: Expense,
    policy: AlertPolicy,
    currency: str,
) -> tuple[UserData, tuple[Alert, ...]]:
    """
    Replace the expense at `index` and move amounts between categories.

    Under the accumulate policy alerts are left exactly as they were.
    """
    _check_index(state, index)

    old = state.expenses[index]
    new = link_expense(new_expense, state.find_category(new_expense.category))
    amount_diff = new.amount - old.amount

    def adjust(category: Category) -> Category:
        if category.name == old.category and old.category == new.category:
            return category.model_copy(update={"spent": category.spent + amount_diff})
        if category.name == old.category:
            return category.model_copy(update={"spent": category.spent - old.amount})
        if category.name == new.category:
            return category.model_copy(update={"spent": category.spent + new.amount})
        return category

    expenses = list(state.expenses)
    expenses[index] = new
    next_state = state.model_copy(update={
        "expenses": tuple(expenses),
        "categories": tuple(adjust(c) for c in state.categories),
        "spent": state.spent + amount_diff,
    })

    if policy == AlertPolicy.RECOMPUTE:
        return _with_recomputed_alerts(state, next_state, currency)
    return next_state, ()


def apply_delete_expense(
    state: UserData,
    index: int,
    policy: AlertPolicy,
    currency: str,
) -> tuple[UserData, tuple[Alert, ...]]:
    """Remove the expense at `index` and take its amount back out of the totals."""
    _check_index(state, index)

    removed = state.expenses[index]
    next_state = state.model_copy(update={
        "expenses": state.expenses[:index] + state.expenses[index + 1:],
        "categories": tuple(
            c.model_copy(update={"spent": c.spent - removed.amount})
            if c.name == removed.category else c
            for c in state.categories
        ),
        "spent": state.spent - removed.amount,
    })

    if policy == AlertPolicy.RECOMPUTE:
        return _with_recomputed_alerts(state, next_state, currency)
    return next_state, ()


def apply_rename_category(
    state: UserData,
    name: str,
    new_name: str,
) -> tuple[UserData, int]:
    """
    Rename a category and carry its expenses and alerts along.

    Expenses are matched by category id. An expense whose id is missing
    or points at no current category is matched by the old name. Returns the next snapshot and
    the number of expenses relinked.
    """
    category = state.find_category(name)
    if category is None:
        raise CategoryNotFoundError(f"Unknown category: {name}")
    if new_name != name and state.find_category(new_name) is not None:
        raise DuplicateCategoryError(f"A category named {new_name} already exists")

    renamed = category.model_copy(update={"name": new_name})

    known_ids = {c.id for c in state.categories}
    relinked = 0
    expenses = []
    for expense in state.expenses:
        if expense.category_id in known_ids:
            belongs = expense.category_id == category.id
        else:
            belongs = expense.category == name
        if belongs:
            expense = link_expense(expense.model_copy(update={"category": new_name}), renamed)
            relinked += 1
        expenses.append(expense)

    old_phrase, new_phrase = f"your {name} budget", f"your {new_name} budget"
    alerts = tuple(
        alert.model_copy(update={
            "category": new_name,
            "message": alert.message.replace(old_phrase, new_phrase),
        })
        if _alert_is_about(alert, name) else alert
        for alert in state.alerts
    )

    next_state = state.model_copy(update={
        "categories": tuple(renamed if c.id == category.id else c for c in state.categories),
        "expenses": tuple(expenses),
        "alerts": alerts,
    })
    return next_state, relinked


def relink_expenses(state: UserData) -> tuple[Expense, ...]:
    """Point every expense at the current category with its name."""
    return tuple(link_expense(e, state.find_category(e.category)) for e in state.expenses)


def _alert_is_about(alert: Alert, name: str) -> bool:
    if alert.category is not None:
        return alert.category == name
    return f"your {name} budget" in alert.message


def _to_decimal(value) -> Decimal:
    if isinstance(value, Decimal):
        return value
    return Decimal(str(value))


def _check_index(state: UserData, index: int) -> None:
    if not 0 <= index < len(state.expenses):
        raise IndexOutOfRangeError(index, len(state.expenses))


def _with_recomputed_alerts(
    previous: UserData,
    next_state: UserData,
    currency: str,
) -> tuple[UserData, tuple[Alert, ...]]:
    alerts = recompute_alerts(next_state, currency)
    already = {alert.category for alert in previous.alerts}
    raised = tuple(alert for alert in alerts if alert.category not in already)
    return next_state.model_copy(update={"alerts": alerts}), raised


# =============================================================================
# STORE
# =============================================================================

class BudgetStore:
    """
    Owns the UserData snapshot for one session.

    Lifecycle:
    1. load() at startup - restores a saved session, if any
    2. initialize() after onboarding when nothing was restored
    3. Mutations - each replaces the snapshot and writes it through
    4. reset() on logout

    Every mutator raises NotInitializedError before initialize()/load().
    """

    def __init__(
        self,
        storage: Optional[UserDataStorageInterface] = None,
        settings: Optional[BudgetSettings] = None,
        suggestion_provider: Optional[SuggestionProvider] = None,
        audit_logger: Optional[AuditLogger] = None,
        validator: Optional[ExpenseValidator] = None,
    ):
        self._storage = storage or JsonFileStorage()
        self._settings = settings or get_settings().budget
        self._suggestions = suggestion_provider or StaticSuggestionProvider()
        self._audit_logger = audit_logger or AuditLogger()
        self._validator = validator or ExpenseValidator(self._settings)
        self._user_data: Optional[UserData] = None

    @property
    def user_data(self) -> Optional[UserData]:
        """The current snapshot, or None when no session is active."""
        return self._user_data

    @property
    def is_initialized(self) -> bool:
        return self._user_data is not None

    @property
    def suggestion_provider(self) -> SuggestionProvider:
        return self._suggestions

    @property
    def _currency(self) -> str:
        return self._settings.currency_symbol

    # -------------------------------------------------------------------------
    # Session lifecycle
    # -------------------------------------------------------------------------

    def load(self) -> Optional[UserData]:
        """
        Restore the persisted session.

        Returns the loaded snapshot, or None if nothing was saved (the user
        still has to log in and onboard).

        Raises:
            StorageError: If the saved document can't be read or parsed
        """
        correlation_id = create_correlation_id()

        try:
            user_data = self._storage.load()
        except StorageError as e:
            self._audit_logger.log(AuditEventBuilder.load_failed(
                error_type=type(e).__name__,
                error_message=str(e),
                correlation_id=correlation_id,
            ))
            raise

        self._user_data = user_data
        self._audit_logger.log(AuditEventBuilder.state_loaded(
            found=user_data is not None,
            expense_count=len(user_data.expenses) if user_data else 0,
            correlation_id=correlation_id,
        ))
        return user_data

    def initialize(
        self,
        monthly_income: Decimal,
        total_budget: Decimal,
        expenses: Iterable[Expense] = (),
    ) -> MutationResult:
        """
        Start a fresh session with the default categories.

        Args:
            monthly_income: Income entered at onboarding
            total_budget: Monthly budget entered at onboarding
            expenses: Optional seed expenses, oldest first, replayed through
                     the same logic as add_expense (demo bootstrapping)
        """
        correlation_id = create_correlation_id()

        state = UserData(
            monthly_income=monthly_income,
            total_budget=total_budget,
            categories=default_categories(),
            ai_suggestions=tuple(self._suggestions.suggestions()),
            badges=tuple(self._suggestions.badges()),
            savings_goal=self._settings.savings_goal,
            current_savings=self._settings.current_savings,
        )

        seeded = 0
        raised: tuple[Alert, ...] = ()
        for expense in expenses:
            state, new_alerts = apply_add_expense(
                state, expense, self._settings.alert_policy, self._currency
            )
            raised += new_alerts
            seeded += 1

        self._audit_logger.log(AuditEventBuilder.session_initialized(
            monthly_income=str(state.monthly_income),
            total_budget=str(state.total_budget),
            seeded_expenses=seeded,
            correlation_id=correlation_id,
        ))
        return self._commit(
            state,
            correlation_id,
            navigate_to=Screen.DASHBOARD,
            message="Welcome to BudgetBuddy! 🎉",
            alerts_raised=raised,
        )

    def reset(self) -> None:
        """
        End the session (logout).

        Drops the in-memory snapshot and clears the persisted one so the
        next start begins at login.

        Raises:
            NotInitializedError: If no session is active
        """
        self._require("reset")
        correlation_id = create_correlation_id()
        self._user_data = None

        try:
            self._storage.clear()
        except StorageError as e:
            self._audit_logger.log(AuditEventBuilder.save_failed(
                error_type=type(e).__name__,
                error_message=str(e),
                correlation_id=correlation_id,
            ))

        self._audit_logger.log(AuditEventBuilder.session_reset(correlation_id))

    def retry_save(self) -> MutationResult:
        """Write the current snapshot again, e.g. after a failed save."""
        state = self._require("retry save")
        correlation_id = create_correlation_id()
        persisted, error = self._persist(state, correlation_id)
        return MutationResult(
            user_data=state,
            persisted=persisted,
            persistence_error=error,
            message="Saved" if persisted else "",
        )

    # -------------------------------------------------------------------------
    # Expense mutations
    # -------------------------------------------------------------------------

    def add_expense(self, expense: Expense) -> MutationResult:
        """
        Record a new expense (newest first).

        Raises:
            NotInitializedError: If no session is active
            ExpenseValidationError: If strict validation is on and rejects it
        """
        state = self._require("add expense")
        correlation_id = create_correlation_id()
        self._validate(expense, state, "add_expense", correlation_id)

        next_state, raised = apply_add_expense(
            state, expense, self._settings.alert_policy, self._currency
        )

        self._audit_logger.log(AuditEventBuilder.expense_added(
            category=expense.category,
            amount=str(expense.amount),
            correlation_id=correlation_id,
        ))
        return self._commit(
            next_state,
            correlation_id,
            navigate_to=Screen.DASHBOARD,
            message=f"Added {self._currency}{format_amount(expense.amount)} expense to {expense.category}",
            alerts_raised=raised,
        )

    def update_expense(self, index: int, new_expense: Expense) -> MutationResult:
        """
        Replace the expense at `index`.

        Raises:
            NotInitializedError: If no session is active
            IndexOutOfRangeError: If there is no expense at `index`
            ExpenseValidationError: If strict validation is on and rejects it
        """
        state = self._require("update expense")
        correlation_id = create_correlation_id()
        _check_index(state, index)
        self._validate(new_expense, state, "update_expense", correlation_id)

        old = state.expenses[index]
        next_state, raised = apply_update_expense(
            state, index, new_expense, self._settings.alert_policy, self._currency
        )

        self._audit_logger.log(AuditEventBuilder.expense_updated(
            index=index,
            old_category=old.category,
            new_category=new_expense.category,
            amount_diff=str(new_expense.amount - old.amount),
            correlation_id=correlation_id,
        ))
        return self._commit(
            next_state,
            correlation_id,
            message="Updated expense successfully",
            alerts_raised=raised,
        )

    def delete_expense(self, index: int) -> MutationResult:
        """
        Remove the expense at `index`.

        Raises:
            NotInitializedError: If no session is active
            IndexOutOfRangeError: If there is no expense at `index`
        """
        state = self._require("delete expense")
        correlation_id = create_correlation_id()

        next_state, raised = apply_delete_expense(
            state, index, self._settings.alert_policy, self._currency
        )
        removed = state.expenses[index]

        self._audit_logger.log(AuditEventBuilder.expense_deleted(
            index=index,
            category=removed.category,
            amount=str(removed.amount),
            correlation_id=correlation_id,
        ))
        return self._commit(
            next_state,
            correlation_id,
            message=f"Deleted expense: {self._currency}{format_amount(removed.amount)}",
            alerts_raised=raised,
        )

    # -------------------------------------------------------------------------
    # Budget settings
    # -------------------------------------------------------------------------

    def update_budget(
        self,
        total_budget: Decimal,
        categories: Iterable[Category],
    ) -> MutationResult:
        """
        Replace the total budget and the whole category set.

        The categories are taken as given, `spent` included; nothing is
        recomputed from the expenses. Expenses are relinked to the new
        categories by name.
        """
        state = self._require("update budget")
        correlation_id = create_correlation_id()

        next_state = state.model_copy(update={
            "total_budget": _to_decimal(total_budget),
            "categories": tuple(categories),
        })
        next_state = next_state.model_copy(update={"expenses": relink_expenses(next_state)})
        raised: tuple[Alert, ...] = ()
        if self._settings.alert_policy == AlertPolicy.RECOMPUTE:
            next_state, raised = _with_recomputed_alerts(state, next_state, self._currency)

        self._audit_logger.log(AuditEventBuilder.budget_updated(
            total_budget=str(next_state.total_budget),
            category_count=len(next_state.categories),
            correlation_id=correlation_id,
        ))
        return self._commit(
            next_state,
            correlation_id,
            message="Budget updated successfully",
            alerts_raised=raised,
        )

    def update_income(self, income: Decimal) -> MutationResult:
        """Replace the monthly income."""
        state = self._require("update income")
        correlation_id = create_correlation_id()

        next_state = state.model_copy(update={"monthly_income": _to_decimal(income)})

        self._audit_logger.log(AuditEventBuilder.income_updated(
            monthly_income=str(next_state.monthly_income),
            correlation_id=correlation_id,
        ))
        return self._commit(
            next_state,
            correlation_id,
            message="Income updated successfully",
        )

    def rename_category(self, name: str, new_name: str) -> MutationResult:
        """
        Rename a category, keeping its expenses linked.

        Raises:
            NotInitializedError: If no session is active
            CategoryNotFoundError: If `name` is not a category
            DuplicateCategoryError: If `new_name` is already taken
        """
        state = self._require("rename category")
        correlation_id = create_correlation_id()

        new_name = new_name.strip()
        if not new_name:
            raise BudgetStoreError("Category name cannot be empty")

        next_state, relinked = apply_rename_category(state, name, new_name)

        self._audit_logger.log(AuditEventBuilder.category_renamed(
            old_name=name,
            new_name=new_name,
            relinked_expenses=relinked,
            correlation_id=correlation_id,
        ))
        return self._commit(
            next_state,
            correlation_id,
            message=f"Renamed {name} to {new_name}",
        )

    # -------------------------------------------------------------------------
    # Internals
    # -------------------------------------------------------------------------

    def _require(self, operation: str) -> UserData:
        if self._user_data is None:
            raise NotInitializedError(operation)
        return self._user_data

    def _validate(
        self,
        expense: Expense,
        state: UserData,
        operation: str,
        correlation_id: UUID,
    ) -> None:
        if not self._settings.strict_validation:
            return

        result = self._validator.validate_expense(expense, state.categories)
        if result.has_errors:
            self._audit_logger.log(AuditEventBuilder.validation_failed(
                operation=operation,
                issues=[issue.model_dump() for issue in result.issues],
                correlation_id=correlation_id,
            ))
            raise ExpenseValidationError(result)

    def _commit(
        self,
        next_state: UserData,
        correlation_id: UUID,
        navigate_to: Optional[Screen] = None,
        message: str = "",
        alerts_raised: tuple[Alert, ...] = (),
    ) -> MutationResult:
        """Swap in the next snapshot, then write it through."""
        self._user_data = next_state

        for alert in alerts_raised:
            category = next_state.find_category(alert.category) if alert.category else None
            if category is not None:
                self._audit_logger.log(AuditEventBuilder.budget_exceeded(
                    category=category.name,
                    spent=str(category.spent),
                    limit=str(category.limit),
                    correlation_id=correlation_id,
                ))

        persisted, error = self._persist(next_state, correlation_id)
        return MutationResult(
            user_data=next_state,
            persisted=persisted,
            persistence_error=error,
            navigate_to=navigate_to,
            message=message,
            alerts_raised=alerts_raised,
        )

    def _persist(self, state: UserData, correlation_id: UUID) -> tuple[bool, Optional[str]]:
        try:
            self._storage.save(state)
        except StorageError as e:
            self._audit_logger.log(AuditEventBuilder.save_failed(
                error_type=type(e).__name__,
                error_message=str(e),
                correlation_id=correlation_id,
            ))
            return False, str(e)
        return True, None


def create_store(use_storage: bool = True) -> BudgetStore:
    """
    Factory function to create a store with its collaborators.

    Args:
        use_storage: Whether to persist to the local JSON file.
                    Set to False to keep the session in memory only.
    """
    storage: UserDataStorageInterface = JsonFileStorage() if use_storage else InMemoryStorage()
    return BudgetStore(
        storage=storage,
        audit_logger=AuditLogger(InMemoryAuditStorage()),
    )

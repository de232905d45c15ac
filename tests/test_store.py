"""
Tests for the budget state store.

Test strategy:
1. The documented scenarios, step by step
2. Invariants after mixed sequences of adds, edits and deletes
3. Failure paths leave state untouched
4. Persistence failures are reported, not raised
"""

import random
from decimal import Decimal
from uuid import uuid4

import pytest

from budgetbuddy.analytics import spent_by_category
from budgetbuddy.audit import AuditLogger
from budgetbuddy.config import AlertPolicy, BudgetSettings
from budgetbuddy.models.audit import AuditEventType
from budgetbuddy.models.budget import (
    UNCATEGORIZED_COLOR,
    Alert,
    Category,
    Expense,
    Screen,
    UserData,
)
from budgetbuddy.services.storage import InMemoryAuditStorage, InMemoryStorage
from budgetbuddy.services.suggestions import DEMO_EXPENSES, StaticSuggestionProvider
from budgetbuddy.store import (
    BudgetStore,
    BudgetStoreError,
    CategoryNotFoundError,
    DuplicateCategoryError,
    ExpenseValidationError,
    IndexOutOfRangeError,
    NotInitializedError,
    apply_add_expense,
    apply_rename_category,
)


def _expense(amount, category, date="2025-09-28", notes=""):
    return Expense(amount=Decimal(str(amount)), category=category, date=date, notes=notes)


def _category(user_data: UserData, name: str):
    category = user_data.find_category(name)
    assert category is not None
    return category


def _assert_invariants(user_data: UserData):
    assert user_data.spent == sum((e.amount for e in user_data.expenses), Decimal("0"))
    totals = spent_by_category(user_data.expenses)
    for category in user_data.categories:
        assert category.spent == totals.get(category.name, Decimal("0"))


class TestInitialize:
    """Tests for starting a session."""

    def test_initialize_builds_default_state(self, store):
        """A fresh session has default categories and nothing spent."""
        result = store.initialize(15000, 12000)
        data = result.user_data

        assert data.monthly_income == 15000
        assert data.total_budget == 12000
        assert data.spent == 0
        assert [c.name for c in data.categories] == [
            "Food", "Rent", "Travel", "Entertainment", "Shopping", "Education",
        ]
        assert all(c.spent == 0 for c in data.categories)
        assert data.expenses == ()
        assert data.alerts == ()
        assert data.savings_goal == 5000
        assert data.current_savings == 0

    def test_initialize_uses_suggestion_provider(self, store):
        """Suggestions and badges come from the provider."""
        data = store.initialize(15000, 12000).user_data
        provider = StaticSuggestionProvider()

        assert list(data.ai_suggestions) == provider.suggestions()
        assert list(data.badges) == provider.badges()

    def test_initialize_signals_dashboard_and_persists(self, store, storage):
        """Onboarding completes on the dashboard with the state saved."""
        result = store.initialize(15000, 12000)

        assert result.navigate_to == Screen.DASHBOARD
        assert result.persisted is True
        assert storage.load() == result.user_data
        assert store.is_initialized

    def test_initialize_with_demo_expenses(self, store):
        """Seed expenses are replayed so totals and alerts are consistent."""
        data = store.initialize(15000, 12000, expenses=DEMO_EXPENSES).user_data

        assert len(data.expenses) == len(DEMO_EXPENSES)
        # Newest first
        assert data.expenses[0].notes == "Lunch at campus cafeteria"
        assert data.spent == Decimal("1920")
        assert _category(data, "Food").spent == Decimal("750")
        assert data.alerts == ()
        _assert_invariants(data)

    def test_reinitialize_replaces_state(self, session):
        """Initializing again starts over."""
        session.add_expense(_expense(250, "Food"))
        data = session.initialize(20000, 16000).user_data

        assert data.expenses == ()
        assert data.spent == 0
        assert data.total_budget == 16000


class TestAddExpense:
    """Tests for add_expense."""

    def test_scenario_add_food_expense(self, session):
        """250 on Food against a 3000 limit: totals move, no alert."""
        result = session.add_expense(_expense(250, "Food", date="2025-09-28"))
        data = result.user_data

        assert _category(data, "Food").spent == 250
        assert data.spent == 250
        assert data.alerts == ()
        assert result.alerts_raised == ()

    def test_scenario_entertainment_goes_over_budget(self, session):
        """1800 then 500 on a 2000 Entertainment limit raises one alert."""
        session.add_expense(_expense(1800, "Entertainment"))
        result = session.add_expense(_expense(500, "Entertainment"))
        data = result.user_data

        assert _category(data, "Entertainment").spent == 2300
        assert len(data.alerts) == 1
        assert "Entertainment" in data.alerts[0].message
        assert data.alerts[0].message == "You've exceeded your Entertainment budget by ₹300!"
        assert result.alerts_raised == data.alerts

    def test_alert_dedup(self, session):
        """Two expenses pushing the same category over budget yield one alert."""
        session.add_expense(_expense(1900, "Travel"))
        session.add_expense(_expense(200, "Travel"))
        result = session.add_expense(_expense(300, "Travel"))

        travel_alerts = [a for a in result.user_data.alerts if "Travel" in a.message]
        assert len(travel_alerts) == 1
        assert result.alerts_raised == ()

    def test_spending_exactly_the_limit_is_not_over(self, session):
        """An alert needs spent > limit, not spent == limit."""
        data = session.add_expense(_expense(1000, "Education")).user_data

        assert _category(data, "Education").spent == 1000
        assert data.alerts == ()

    def test_expense_is_prepended(self, session):
        """The newest expense is first."""
        session.add_expense(_expense(100, "Food", notes="first"))
        data = session.add_expense(_expense(200, "Food", notes="second")).user_data

        assert [e.notes for e in data.expenses] == ["second", "first"]

    def test_expense_is_linked_to_category(self, session):
        """The stored expense carries the category's id and colour."""
        data = session.add_expense(_expense(100, "Food")).user_data
        food = _category(data, "Food")

        assert data.expenses[0].category_id == food.id
        assert data.expenses[0].category_color == "bg-orange-100"

    def test_unknown_category_is_recorded_without_category_total(self, session):
        """Unmatched categories still count towards the grand total."""
        before = session.user_data
        data = session.add_expense(_expense(75, "Groceries")).user_data

        assert len(data.expenses) == 1
        assert data.spent == 75
        assert data.categories == before.categories
        assert data.expenses[0].category_color == UNCATEGORIZED_COLOR
        assert data.expenses[0].category_id is None

    def test_unknown_category_keeps_supplied_colour(self, session):
        """Unmatched expenses keep the colour they were entered with."""
        expense = _expense(75, "Groceries").model_copy(update={"category_color": "bg-teal-100"})

        data = session.add_expense(expense).user_data

        assert data.expenses[0].category_color == "bg-teal-100"

    def test_add_signals_dashboard_and_message(self, session):
        """Adding an expense asks the UI to go back to the dashboard."""
        result = session.add_expense(_expense(250, "Food"))

        assert result.navigate_to == Screen.DASHBOARD
        assert result.message == "Added ₹250 expense to Food"

    def test_add_writes_through(self, session, storage):
        """The saved document matches the new snapshot."""
        result = session.add_expense(_expense(250, "Food"))

        assert storage.load() == result.user_data

    def test_snapshots_are_not_mutated(self, session):
        """A previous snapshot is unaffected by later mutations."""
        before = session.user_data
        session.add_expense(_expense(250, "Food"))

        assert before.expenses == ()
        assert before.spent == 0
        assert session.user_data is not before

    def test_existing_alert_mentioning_category_blocks_new_alert(self):
        """Dedup also matches alerts that only mention the category in text."""
        store = BudgetStore(storage=InMemoryStorage(), settings=BudgetSettings())
        store.initialize(15000, 12000)
        state = store.user_data.model_copy(update={
            "alerts": (Alert(message="You've exceeded your Rent budget by ₹1!"),),
        })

        next_state, raised = apply_add_expense(
            state, _expense(4500, "Rent"), AlertPolicy.ACCUMULATE, "₹"
        )

        assert raised == ()
        assert len(next_state.alerts) == 1


class TestUpdateExpense:
    """Tests for update_expense."""

    def test_scenario_move_expense_to_other_category(self, session):
        """250 Food -> 400 Travel moves amounts and raises the total by 150."""
        session.add_expense(_expense(250, "Food"))
        before = session.user_data

        data = session.update_expense(0, _expense(400, "Travel")).user_data

        assert _category(data, "Food").spent == _category(before, "Food").spent - 250
        assert _category(data, "Travel").spent == _category(before, "Travel").spent + 400
        assert data.spent == before.spent + 150
        assert data.expenses[0].category == "Travel"
        assert data.expenses[0].category_color == "bg-green-100"

    def test_update_same_category_applies_difference(self, session):
        """Within one category only the difference is applied."""
        session.add_expense(_expense(300, "Food"))
        session.add_expense(_expense(100, "Shopping"))

        data = session.update_expense(1, _expense(450, "Food")).user_data

        assert _category(data, "Food").spent == 450
        assert data.spent == 550
        _assert_invariants(data)

    def test_update_out_of_range_leaves_state(self, session, storage):
        """A bad index raises and changes nothing."""
        session.add_expense(_expense(250, "Food"))
        before = session.user_data
        saves = storage.save_count

        with pytest.raises(IndexOutOfRangeError):
            session.update_expense(1, _expense(400, "Travel"))
        with pytest.raises(IndexOutOfRangeError):
            session.update_expense(-1, _expense(400, "Travel"))

        assert session.user_data == before
        assert storage.save_count == saves

    def test_update_does_not_retract_alerts(self, session):
        """Under accumulate, bringing a category back under keeps its alert."""
        session.add_expense(_expense(3500, "Food"))
        data = session.update_expense(0, _expense(100, "Food")).user_data

        assert _category(data, "Food").spent == 100
        assert len(data.alerts) == 1

    def test_update_does_not_raise_new_alerts(self, session):
        """Under accumulate, edits never add alerts."""
        session.add_expense(_expense(100, "Food"))
        result = session.update_expense(0, _expense(3500, "Food"))

        assert result.user_data.alerts == ()
        assert result.message == "Updated expense successfully"
        assert result.navigate_to is None


class TestDeleteExpense:
    """Tests for delete_expense."""

    def test_scenario_delete_third_expense(self, session):
        """Deleting index 2 takes exactly its amount out of the totals."""
        session.add_expense(_expense(120, "Travel"))
        session.add_expense(_expense(300, "Food"))
        session.add_expense(_expense(150, "Shopping"))
        session.add_expense(_expense(250, "Food"))
        before = session.user_data
        third = before.expenses[2]
        assert third.amount == 300 and third.category == "Food"

        result = session.delete_expense(2)
        data = result.user_data

        assert len(data.expenses) == 3
        assert third not in data.expenses
        assert _category(data, "Food").spent == _category(before, "Food").spent - 300
        assert data.spent == before.spent - 300
        assert result.message == "Deleted expense: ₹300"
        _assert_invariants(data)

    def test_delete_out_of_range_leaves_state(self, session):
        """A bad index raises and changes nothing."""
        before = session.user_data

        with pytest.raises(IndexOutOfRangeError) as exc_info:
            session.delete_expense(0)

        assert exc_info.value.index == 0
        assert exc_info.value.size == 0
        assert session.user_data == before

    def test_delete_does_not_retract_alerts(self, session):
        """Under accumulate, deleting the offending expense keeps the alert."""
        session.add_expense(_expense(2100, "Entertainment"))
        data = session.delete_expense(0).user_data

        assert _category(data, "Entertainment").spent == 0
        assert len(data.alerts) == 1


class TestInvariants:
    """Totals always match the expense list."""

    def test_random_sequence_keeps_totals_consistent(self, session):
        """Mixed adds, edits and deletes never break the invariants."""
        rng = random.Random(42)
        names = [c.name for c in session.user_data.categories]

        for _ in range(200):
            expenses = session.user_data.expenses
            action = rng.choice(["add", "add", "update", "delete"])
            amount = Decimal(rng.randint(1, 200000)) / 100
            category = rng.choice(names)

            if action == "add" or not expenses:
                session.add_expense(_expense(amount, category))
            elif action == "update":
                session.update_expense(rng.randrange(len(expenses)), _expense(amount, category))
            else:
                session.delete_expense(rng.randrange(len(expenses)))

            _assert_invariants(session.user_data)

    def test_alerts_reference_each_category_at_most_once(self, session):
        """Dedup holds across a long run of adds."""
        for _ in range(10):
            for name in ("Food", "Rent", "Travel"):
                session.add_expense(_expense(900, name))

        for name in ("Food", "Rent", "Travel"):
            assert sum(1 for a in session.user_data.alerts if a.references(name)) == 1


class TestRecomputeAlertPolicy:
    """Tests for the recompute alert policy."""

    @pytest.fixture
    def recompute_store(self, storage, audit_storage):
        store = BudgetStore(
            storage=storage,
            settings=BudgetSettings(alert_policy=AlertPolicy.RECOMPUTE),
            audit_logger=AuditLogger(audit_storage),
        )
        store.initialize(15000, 12000)
        return store

    def test_delete_retracts_alert(self, recompute_store):
        """Going back under budget drops the alert."""
        recompute_store.add_expense(_expense(3100, "Food"))
        assert len(recompute_store.user_data.alerts) == 1

        data = recompute_store.delete_expense(0).user_data

        assert data.alerts == ()

    def test_update_raises_alert(self, recompute_store):
        """An edit that pushes a category over adds its alert."""
        recompute_store.add_expense(_expense(100, "Shopping"))
        result = recompute_store.update_expense(0, _expense(1600, "Shopping"))

        assert len(result.alerts_raised) == 1
        assert result.user_data.alerts[0].category == "Shopping"
        assert result.user_data.alerts[0].message.endswith("by ₹100!")

    def test_alert_message_tracks_current_overspend(self, recompute_store):
        """Recomputed alerts state the current amount over."""
        recompute_store.add_expense(_expense(2100, "Travel"))
        data = recompute_store.add_expense(_expense(400, "Travel")).user_data

        assert len(data.alerts) == 1
        assert data.alerts[0].message == "You've exceeded your Travel budget by ₹500!"

    def test_raising_limit_retracts_alert(self, recompute_store):
        """update_budget re-evaluates alerts against the new limits."""
        recompute_store.add_expense(_expense(2500, "Travel"))
        data = recompute_store.user_data
        categories = [
            c.model_copy(update={"limit": Decimal("3000")}) if c.name == "Travel" else c
            for c in data.categories
        ]

        result = recompute_store.update_budget(12000, categories)

        assert result.user_data.alerts == ()


class TestBudgetSettings:
    """Tests for update_budget, update_income and rename_category."""

    def test_update_budget_replaces_categories_verbatim(self, session):
        """Limits change; spent values are carried over as given."""
        session.add_expense(_expense(250, "Food"))
        data = session.user_data
        categories = [
            c.model_copy(update={"limit": Decimal("3500")}) if c.name == "Food" else c
            for c in data.categories
        ]

        result = session.update_budget(13000, categories)

        assert result.user_data.total_budget == 13000
        assert _category(result.user_data, "Food").limit == 3500
        assert _category(result.user_data, "Food").spent == 250
        assert result.user_data.expenses == data.expenses

    def test_update_income_changes_only_income(self, session):
        """Only monthly_income changes."""
        before = session.user_data
        data = session.update_income(18000).user_data

        assert data.monthly_income == 18000
        assert data.model_copy(update={"monthly_income": before.monthly_income}) == before

    def test_update_income_accepts_floats_exactly(self, session):
        """Floats are converted through their string form."""
        data = session.update_income(1234.56).user_data

        assert data.monthly_income == Decimal("1234.56")

    def test_rename_category_keeps_expenses_linked(self, session):
        """Renamed categories keep their expenses and totals."""
        session.add_expense(_expense(250, "Food"))
        session.add_expense(_expense(50, "Travel"))

        data = session.rename_category("Food", "Groceries").user_data

        assert data.find_category("Food") is None
        assert _category(data, "Groceries").spent == 250
        assert [e.category for e in data.expenses] == ["Travel", "Groceries"]
        _assert_invariants(data)

        data = session.add_expense(_expense(100, "Groceries")).user_data
        assert _category(data, "Groceries").spent == 350

    def test_rename_category_rewrites_alerts(self, session):
        """Alerts follow the category to its new name."""
        session.add_expense(_expense(2100, "Entertainment"))
        data = session.rename_category("Entertainment", "Fun").user_data

        assert data.alerts[0].category == "Fun"
        assert "Fun" in data.alerts[0].message

    def test_rename_after_rebuilding_categories(self, session):
        """Categories rebuilt with fresh ids still carry their expenses through a rename."""
        session.add_expense(_expense(100, "Rent"))
        rebuilt = [
            Category(name=c.name, limit=c.limit + 1, spent=c.spent, color=c.color)
            for c in session.user_data.categories
        ]

        data = session.update_budget(12000, rebuilt).user_data
        assert data.expenses[0].category_id == _category(data, "Rent").id

        data = session.rename_category("Rent", "Housing").user_data

        assert [e.category for e in data.expenses] == ["Housing"]
        assert _category(data, "Housing").spent == 100
        _assert_invariants(data)

    def test_rename_matches_legacy_expenses_by_name(self, session):
        """Expenses pointing at no current category fall back to their name."""
        session.add_expense(_expense(40, "Travel"))
        data = session.user_data
        stale = data.expenses[0].model_copy(update={"category_id": uuid4()})
        state = data.model_copy(update={"expenses": (stale,)})

        next_state, relinked = apply_rename_category(state, "Travel", "Commute")

        assert relinked == 1
        assert next_state.expenses[0].category == "Commute"

    def test_rename_leaves_similar_alerts_alone(self, session):
        """Renaming Food does not touch an alert for Fast Food."""
        fast_food = Category(name="Fast Food", limit=Decimal("10"), color="bg-red-100")
        session.update_budget(12000, [*session.user_data.categories, fast_food])
        session.add_expense(_expense(3100, "Food"))
        session.add_expense(_expense(20, "Fast Food"))

        alerts = session.rename_category("Food", "Groceries").user_data.alerts

        assert [a.category for a in alerts] == ["Groceries", "Fast Food"]
        assert alerts[0].message == "You've exceeded your Groceries budget by ₹100!"
        assert alerts[1].message == "You've exceeded your Fast Food budget by ₹10!"

    def test_rename_unknown_category(self, session):
        with pytest.raises(CategoryNotFoundError):
            session.rename_category("Pets", "Animals")

    def test_rename_to_existing_name(self, session):
        before = session.user_data
        with pytest.raises(DuplicateCategoryError):
            session.rename_category("Food", "Rent")
        assert session.user_data == before

    def test_rename_to_blank_name(self, session):
        with pytest.raises(BudgetStoreError):
            session.rename_category("Food", "   ")


class TestSessionLifecycle:
    """Tests for load, reset and the uninitialized state."""

    @pytest.mark.parametrize("call", [
        lambda s: s.add_expense(_expense(1, "Food")),
        lambda s: s.update_expense(0, _expense(1, "Food")),
        lambda s: s.delete_expense(0),
        lambda s: s.update_budget(1000, []),
        lambda s: s.update_income(1000),
        lambda s: s.rename_category("Food", "Meals"),
        lambda s: s.retry_save(),
        lambda s: s.reset(),
    ])
    def test_mutators_require_initialization(self, store, call):
        """Every mutator fails before initialize()."""
        with pytest.raises(NotInitializedError):
            call(store)

    def test_load_without_saved_state(self, store):
        """Nothing saved means no session."""
        assert store.load() is None
        assert not store.is_initialized

    def test_load_restores_saved_session(self, session, storage, budget_settings):
        """A new store picks up where the last one left off."""
        session.add_expense(_expense(250, "Food"))

        restored = BudgetStore(storage=storage, settings=budget_settings)
        data = restored.load()

        assert data == session.user_data
        assert restored.is_initialized
        restored.add_expense(_expense(50, "Food"))
        assert _category(restored.user_data, "Food").spent == 300

    def test_reset_clears_memory_and_storage(self, session, storage):
        """Logout drops the session and the saved document."""
        session.add_expense(_expense(250, "Food"))
        session.reset()

        assert session.user_data is None
        assert storage.load() is None
        with pytest.raises(NotInitializedError):
            session.add_expense(_expense(1, "Food"))


class TestPersistenceFailures:
    """Save failures are reported on the result, not raised."""

    def test_failed_save_keeps_mutation(self, session, storage, audit_storage):
        """The mutation succeeds in memory even if the write fails."""
        storage.fail_writes = True

        result = session.add_expense(_expense(250, "Food"))

        assert result.persisted is False
        assert "Simulated write failure" in result.persistence_error
        assert session.user_data.spent == 250
        assert any(e.event_type == AuditEventType.SAVE_FAILED for e in audit_storage.events)

    def test_retry_save_after_failure(self, session, storage):
        """retry_save writes the current snapshot once storage recovers."""
        storage.fail_writes = True
        session.add_expense(_expense(250, "Food"))
        storage.fail_writes = False

        result = session.retry_save()

        assert result.persisted is True
        assert storage.load() == session.user_data


class TestStrictValidation:
    """Tests for the optional validation in the store."""

    @pytest.fixture
    def strict_store(self, storage):
        store = BudgetStore(
            storage=storage,
            settings=BudgetSettings(strict_validation=True),
        )
        store.initialize(15000, 12000)
        return store

    def test_rejects_non_positive_amount(self, strict_store):
        before = strict_store.user_data
        with pytest.raises(ExpenseValidationError) as exc_info:
            strict_store.add_expense(_expense(0, "Food"))

        assert exc_info.value.result.has_errors
        assert strict_store.user_data == before

    def test_rejects_unknown_category(self, strict_store):
        with pytest.raises(ExpenseValidationError, match="Unknown category"):
            strict_store.add_expense(_expense(10, "Groceries"))

    def test_rejects_invalid_update(self, strict_store):
        strict_store.add_expense(_expense(10, "Food"))
        before = strict_store.user_data

        with pytest.raises(ExpenseValidationError):
            strict_store.update_expense(0, _expense(-5, "Food"))
        assert strict_store.user_data == before

    def test_accepts_valid_expense(self, strict_store):
        result = strict_store.add_expense(_expense(10, "Food", date="2025-09-01"))
        assert result.user_data.spent == 10


class TestAuditTrail:
    """Store operations leave audit events behind."""

    def test_operations_are_audited(self, session, audit_storage):
        session.add_expense(_expense(1800, "Entertainment"))
        session.add_expense(_expense(500, "Entertainment"))
        session.update_expense(0, _expense(400, "Entertainment"))
        session.delete_expense(1)
        session.update_income(16000)
        session.reset()

        types = [e.event_type for e in audit_storage.events]
        assert types[0] == AuditEventType.SESSION_INITIALIZED
        assert types.count(AuditEventType.EXPENSE_ADDED) == 2
        assert AuditEventType.BUDGET_EXCEEDED in types
        assert AuditEventType.EXPENSE_UPDATED in types
        assert AuditEventType.EXPENSE_DELETED in types
        assert AuditEventType.INCOME_UPDATED in types
        assert types[-1] == AuditEventType.SESSION_RESET

    def test_validation_failure_is_audited(self, storage, audit_storage):
        store = BudgetStore(
            storage=storage,
            settings=BudgetSettings(strict_validation=True),
            audit_logger=AuditLogger(audit_storage),
        )
        store.initialize(15000, 12000)

        with pytest.raises(ExpenseValidationError):
            store.add_expense(_expense(0, "Food"))

        assert audit_storage.events[-1].event_type == AuditEventType.VALIDATION_FAILED

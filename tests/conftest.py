"""Shared fixtures: every store here runs against in-memory storage."""

from decimal import Decimal

import pytest

from budgetbuddy.audit import AuditLogger
from budgetbuddy.config import AlertPolicy, BudgetSettings
from budgetbuddy.services.storage import InMemoryAuditStorage, InMemoryStorage
from budgetbuddy.store import BudgetStore


@pytest.fixture
def storage():
    return InMemoryStorage()


@pytest.fixture
def audit_storage():
    return InMemoryAuditStorage()


@pytest.fixture
def budget_settings():
    return BudgetSettings(
        currency_symbol="₹",
        savings_goal=Decimal("5000"),
        current_savings=Decimal("0"),
        alert_policy=AlertPolicy.ACCUMULATE,
        strict_validation=False,
    )


@pytest.fixture
def store(storage, audit_storage, budget_settings):
    return BudgetStore(
        storage=storage,
        settings=budget_settings,
        audit_logger=AuditLogger(audit_storage),
    )


@pytest.fixture
def session(store):
    """A store initialized with income 15000 and budget 12000."""
    store.initialize(15000, 12000)
    return store


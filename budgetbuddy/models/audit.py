"""
Audit Models for BudgetBuddy

Every state change in the system is logged for audit purposes.
This provides:
1. Traceability of every mutation applied to the budget
2. Debugging information when persistence goes wrong
3. Ability to reconstruct how totals and alerts came to be

DESIGN DECISION: Audit logs are append-only. We never delete or modify them.
"""

from datetime import datetime, timezone
from enum import Enum
from typing import Any, Optional
from uuid import UUID, uuid4

from pydantic import BaseModel, Field


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class AuditEventType(str, Enum):
    """
    Types of events we audit.

    Every store operation has its own event type.
    """
    # Session lifecycle
    SESSION_INITIALIZED = "session_initialized"
    STATE_LOADED = "state_loaded"
    SESSION_RESET = "session_reset"

    # Expense mutations
    EXPENSE_ADDED = "expense_added"
    EXPENSE_UPDATED = "expense_updated"
    EXPENSE_DELETED = "expense_deleted"

    # Budget settings
    BUDGET_UPDATED = "budget_updated"
    INCOME_UPDATED = "income_updated"
    CATEGORY_RENAMED = "category_renamed"

    # Alerts
    BUDGET_EXCEEDED = "budget_exceeded"

    # Failures
    VALIDATION_FAILED = "validation_failed"
    SAVE_FAILED = "save_failed"
    LOAD_FAILED = "load_failed"
    SYSTEM_ERROR = "system_error"


class AuditSeverity(str, Enum):
    """Severity level for audit events."""
    DEBUG = "debug"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"


class AuditEvent(BaseModel):
    """
    A single audit event.

    This is the core unit of our audit trail.
    Every significant action creates one of these.
    """

    # Identity
    event_id: UUID = Field(
        default_factory=uuid4,
        description="Unique event identifier"
    )
    timestamp: datetime = Field(
        default_factory=_utcnow,
        description="When the event occurred (UTC)"
    )

    # Event classification
    event_type: AuditEventType = Field(
        ...,
        description="Type of event"
    )
    severity: AuditSeverity = Field(
        default=AuditSeverity.INFO,
        description="Event severity"
    )

    # Context - what entity is this about?
    entity_type: Optional[str] = Field(
        default=None,
        description="Type of entity (e.g., 'expense', 'category', 'session')"
    )
    entity_ref: Optional[str] = Field(
        default=None,
        description="Reference to the entity (expense index, category name)"
    )

    # Correlation - for tracking related events
    correlation_id: Optional[UUID] = Field(
        default=None,
        description="ID to correlate related events (e.g., a save failure and its mutation)"
    )

    description: str = Field(
        ...,
        max_length=500,
        description="Human-readable description of what happened"
    )

    details: dict[str, Any] = Field(
        default_factory=dict,
        description="Additional event-specific data"
    )

    error_message: Optional[str] = None

    is_user_action: bool = Field(
        default=False,
        description="Was this triggered by a user action?"
    )

    def to_log_dict(self) -> dict:
        """
        Convert to a dictionary suitable for structured logging.
        """
        return {
            "event_id": str(self.event_id),
            "timestamp": self.timestamp.isoformat(),
            "event_type": self.event_type.value,
            "severity": self.severity.value,
            "entity_type": self.entity_type,
            "entity_ref": self.entity_ref,
            "correlation_id": str(self.correlation_id) if self.correlation_id else None,
            "description": self.description,
            "details": self.details,
            "error_message": self.error_message,
            "is_user_action": self.is_user_action,
        }


class AuditEventBuilder:
    """
    Helper class to build audit events with common patterns.

    Usage:
        event = AuditEventBuilder.expense_added(expense, correlation_id)
        event = AuditEventBuilder.save_failed(error, correlation_id)
    """

    @staticmethod
    def session_initialized(
        monthly_income: str,
        total_budget: str,
        seeded_expenses: int,
        correlation_id: UUID
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.SESSION_INITIALIZED,
            entity_type="session",
            correlation_id=correlation_id,
            description="Budget session initialized",
            details={
                "monthly_income": monthly_income,
                "total_budget": total_budget,
                "seeded_expenses": seeded_expenses,
            },
            is_user_action=True,
        )

    @staticmethod
    def state_loaded(
        found: bool,
        expense_count: int,
        correlation_id: UUID
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.STATE_LOADED,
            entity_type="session",
            correlation_id=correlation_id,
            description=(
                f"Loaded saved state with {expense_count} expenses"
                if found else "No saved state found"
            ),
            details={
                "found": found,
                "expense_count": expense_count,
            },
        )

    @staticmethod
    def session_reset(correlation_id: UUID) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.SESSION_RESET,
            entity_type="session",
            correlation_id=correlation_id,
            description="Session cleared",
            is_user_action=True,
        )

    @staticmethod
    def expense_added(
        category: str,
        amount: str,
        correlation_id: UUID
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.EXPENSE_ADDED,
            entity_type="expense",
            entity_ref="0",
            correlation_id=correlation_id,
            description=f"Expense added: {category} - {amount}",
            details={
                "category": category,
                "amount": amount,
            },
            is_user_action=True,
        )

    @staticmethod
    def expense_updated(
        index: int,
        old_category: str,
        new_category: str,
        amount_diff: str,
        correlation_id: UUID
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.EXPENSE_UPDATED,
            entity_type="expense",
            entity_ref=str(index),
            correlation_id=correlation_id,
            description=f"Expense {index} updated",
            details={
                "old_category": old_category,
                "new_category": new_category,
                "amount_diff": amount_diff,
            },
            is_user_action=True,
        )

    @staticmethod
    def expense_deleted(
        index: int,
        category: str,
        amount: str,
        correlation_id: UUID
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.EXPENSE_DELETED,
            entity_type="expense",
            entity_ref=str(index),
            correlation_id=correlation_id,
            description=f"Expense {index} deleted: {category} - {amount}",
            details={
                "category": category,
                "amount": amount,
            },
            is_user_action=True,
        )

    @staticmethod
    def budget_updated(
        total_budget: str,
        category_count: int,
        correlation_id: UUID
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.BUDGET_UPDATED,
            entity_type="budget",
            correlation_id=correlation_id,
            description=f"Budget set to {total_budget} across {category_count} categories",
            details={
                "total_budget": total_budget,
                "category_count": category_count,
            },
            is_user_action=True,
        )

    @staticmethod
    def income_updated(
        monthly_income: str,
        correlation_id: UUID
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.INCOME_UPDATED,
            entity_type="budget",
            correlation_id=correlation_id,
            description="Monthly income updated",
            details={
                "monthly_income": monthly_income,
            },
            is_user_action=True,
        )

    @staticmethod
    def category_renamed(
        old_name: str,
        new_name: str,
        relinked_expenses: int,
        correlation_id: UUID
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.CATEGORY_RENAMED,
            entity_type="category",
            entity_ref=new_name,
            correlation_id=correlation_id,
            description=f"Category renamed: {old_name} -> {new_name}",
            details={
                "old_name": old_name,
                "new_name": new_name,
                "relinked_expenses": relinked_expenses,
            },
            is_user_action=True,
        )

    @staticmethod
    def budget_exceeded(
        category: str,
        spent: str,
        limit: str,
        correlation_id: UUID
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.BUDGET_EXCEEDED,
            severity=AuditSeverity.WARNING,
            entity_type="category",
            entity_ref=category,
            correlation_id=correlation_id,
            description=f"{category} is over budget: {spent} / {limit}",
            details={
                "spent": spent,
                "limit": limit,
            },
        )

    @staticmethod
    def validation_failed(
        operation: str,
        issues: list[dict],
        correlation_id: UUID
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.VALIDATION_FAILED,
            severity=AuditSeverity.WARNING,
            correlation_id=correlation_id,
            description=f"{operation} rejected with {len(issues)} issues",
            details={
                "operation": operation,
                "issues": issues,
            },
        )

    @staticmethod
    def save_failed(
        error_type: str,
        error_message: str,
        correlation_id: UUID
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.SAVE_FAILED,
            severity=AuditSeverity.ERROR,
            entity_type="session",
            correlation_id=correlation_id,
            description=f"Saving state failed: {error_type}",
            error_message=error_message,
        )

    @staticmethod
    def load_failed(
        error_type: str,
        error_message: str,
        correlation_id: UUID
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.LOAD_FAILED,
            severity=AuditSeverity.ERROR,
            entity_type="session",
            correlation_id=correlation_id,
            description=f"Loading state failed: {error_type}",
            error_message=error_message,
        )

    @staticmethod
    def system_error(
        error_type: str,
        error_message: str,
        details: Optional[dict] = None,
        correlation_id: Optional[UUID] = None
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.SYSTEM_ERROR,
            severity=AuditSeverity.ERROR,
            description=f"System error: {error_type}",
            error_message=error_message,
            details=details or {},
            correlation_id=correlation_id,
        )

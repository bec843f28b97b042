"""
Goal Tracker

A savings goal accumulates money between 0 and its target. Deposits and
withdrawals are clamped to that range; invalid amounts are ignored.
"""

from decimal import ROUND_HALF_UP, Decimal
from typing import Any, Optional
from uuid import UUID

from pydantic import ValidationError

from finledger.models.audit import AuditEventType
from finledger.models.ledger import Goal
from finledger.models.reports import GoalBand, GoalProgress
from finledger.periods import utcnow
from finledger.store import Confirm, LedgerStore
from finledger.validation import parse_amount


class GoalTracker:
    """Create, move money into/out of, and delete savings goals."""

    def __init__(self, store: LedgerStore):
        self._store = store

    @property
    def goals(self) -> list[Goal]:
        return self._store.document.goals

    def get(self, goal_id: UUID) -> Optional[Goal]:
        return next((g for g in self.goals if g.id == goal_id), None)

    def add_goal(self, description: Any, target: Any) -> Optional[Goal]:
        """
        Create a goal. Returns None (and creates nothing) when the
        description is blank or the target is not a positive amount.
        """
        amount = parse_amount(target)
        if not isinstance(description, str) or not description.strip():
            return None
        if amount is None or amount <= 0:
            return None

        try:
            goal = Goal(description=description, target=amount)
        except ValidationError:
            return None

        self.goals.append(goal)
        self._store.persist()
        self._store.audit.log_simple(
            AuditEventType.GOAL_CREATED,
            description=f"Goal created: {goal.description}",
            entity_type="goal",
            entity_id=goal.id,
            details={"target": str(goal.target)},
        )
        return goal

    def deposit(self, goal_id: UUID, amount: Any) -> Optional[Goal]:
        """Add money, never beyond the target."""
        return self._move(goal_id, amount, deposit=True)

    def withdraw(self, goal_id: UUID, amount: Any) -> Optional[Goal]:
        """Take money out, never below zero."""
        return self._move(goal_id, amount, deposit=False)

    def _move(self, goal_id: UUID, amount: Any, deposit: bool) -> Optional[Goal]:
        value = parse_amount(amount)
        if value is None or value <= 0:
            return None
        goal = self.get(goal_id)
        if goal is None:
            return None

        if deposit:
            goal.accumulated = min(goal.target, goal.accumulated + value)
        else:
            goal.accumulated = max(Decimal("0"), goal.accumulated - value)
        goal.updated_at = utcnow()

        self._store.persist()
        self._store.audit.log_goal_updated(
            goal_id=goal.id,
            operation="deposit" if deposit else "withdraw",
            amount=str(value),
            accumulated=str(goal.accumulated),
        )
        return goal

    def delete_goal(self, goal_id: UUID, confirm: Confirm) -> bool:
        """
        Delete a goal after explicit confirmation. Irreversible.

        Returns:
            True if the goal was deleted
        """
        goal = self.get(goal_id)
        if goal is None:
            return False
        if not confirm(f'Delete the goal "{goal.description}"?'):
            self._store.audit.log_cancelled("delete goal")
            return False

        self._store.document.goals = [g for g in self.goals if g.id != goal_id]
        self._store.persist()
        self._store.audit.log_simple(
            AuditEventType.GOAL_DELETED,
            description=f"Goal deleted: {goal.description}",
            entity_type="goal",
            entity_id=goal.id,
        )
        return True

    @staticmethod
    def progress(goal: Goal) -> GoalProgress:
        """Rounded completion percentage and its colour band."""
        ratio = goal.accumulated / goal.target * 100 if goal.target > 0 else Decimal("0")
        if ratio > 75:
            band = GoalBand.GOLD
        elif ratio > 50:
            band = GoalBand.GREEN
        elif ratio > 25:
            band = GoalBand.ORANGE
        else:
            band = GoalBand.RED

        return GoalProgress(
            goal_id=goal.id,
            percentage=min(100, int(ratio.quantize(Decimal("1"), rounding=ROUND_HALF_UP))),
            band=band,
            missing=max(Decimal("0"), goal.target - goal.accumulated),
        )

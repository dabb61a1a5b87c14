"""Budget domain service."""

from datetime import date
from decimal import Decimal
from typing import Optional

from debtbook.database.base import Database
from debtbook.domain.entities import (
    OUTFLOW_TYPES,
    TXN_ACTIVE,
    Budget,
    Category,
    Transaction,
    touched,
)
from debtbook.domain.errors import NotFoundError, ValidationError, invalid_choice, record_not_found
from debtbook.domain.ledger import ChangeLedger
from debtbook.utils.date_parser import PERIODS, period_range
from debtbook.utils.ids import new_record_id

BUDGET_FIELDS = frozenset({"name", "amount", "period", "category_id", "start_date", "end_date", "is_active"})


class BudgetService:
    """Service for managing budgets and tracking spending against them."""

    def __init__(self, db: Database):
        """Initialize budget service.

        Args:
            db: Database instance
        """
        self.db = db
        self.ledger = ChangeLedger(db)

    def _require(self, budget_id: str) -> Budget:
        budget = self.db.get_record(Budget.TABLE, budget_id)
        if budget is None:
            raise NotFoundError(record_not_found(Budget.TABLE, budget_id))
        return budget

    def _validate(self, budget: Budget) -> None:
        if budget.amount <= 0:
            raise ValidationError("Budget amount must be greater than zero")
        if budget.period not in PERIODS:
            raise ValidationError(invalid_choice("period", budget.period, PERIODS))
        if budget.start_date and budget.end_date and budget.start_date > budget.end_date:
            raise ValidationError("Budget start date must not be after its end date")
        if budget.category_id is not None and self.db.get_record(Category.TABLE, budget.category_id) is None:
            raise NotFoundError(record_not_found(Category.TABLE, budget.category_id))

    def create_budget(
        self,
        user_id: str,
        name: str,
        amount: Decimal,
        period: str = "monthly",
        category_id: Optional[str] = None,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
    ) -> str:
        """Create a budget.

        Without explicit dates, the budget covers the current period.

        Returns:
            Budget ID
        """
        budget = Budget(
            id=new_record_id(),
            name=name,
            amount=Decimal(amount),
            period=period,
            user_id=user_id,
            category_id=category_id,
            start_date=start_date,
            end_date=end_date,
        )
        self._validate(budget)
        with self.db.write():
            self.db.insert_record(budget)
            self.ledger.record_create(Budget.TABLE, budget.id, user_id)
        return budget.id

    def update_budget(self, budget_id: str, **changes) -> Budget:
        unknown = set(changes) - BUDGET_FIELDS
        if unknown:
            raise ValidationError(f"Cannot update budget field(s): {', '.join(sorted(unknown))}")
        if "amount" in changes:
            changes["amount"] = Decimal(changes["amount"])
        budget = touched(self._require(budget_id), **changes)
        self._validate(budget)
        with self.db.write():
            self.db.save_record(budget)
            self.ledger.record_update(Budget.TABLE, budget.id, budget.user_id)
        return budget

    def delete_budget(self, budget_id: str) -> None:
        budget = self._require(budget_id)
        with self.db.write():
            self.ledger.record_delete(Budget.TABLE, budget.id, budget.user_id)
            self.db.delete_record(Budget.TABLE, budget.id)

    def list_budgets(self, user_id: str) -> list[Budget]:
        return self.db.list_records(Budget.TABLE, user_id=user_id, is_active=True)

    def get_budget_progress(self, budget_id: str, today: Optional[date] = None) -> dict:
        """Compute spending against a budget.

        Spending is the sum of active outflow transactions in the budget's
        category or its direct subcategories, dated within the budget's range.
        A budget without a category tracks nothing.

        Args:
            budget_id: Budget ID
            today: Reference day for budgets without explicit dates

        Returns:
            Dictionary with budget, start_date, end_date, spent, remaining
            and progress (spent / amount)
        """
        budget = self._require(budget_id)
        default_start, default_end = period_range(budget.period, today)
        start_date = budget.start_date or default_start
        end_date = budget.end_date or default_end

        spent = Decimal("0")
        if budget.category_id is not None:
            children = self.db.list_records(Category.TABLE, parent_category_id=budget.category_id)
            category_ids = [budget.category_id] + [c.id for c in children]
            transactions = self.db.list_records(
                Transaction.TABLE,
                user_id=budget.user_id,
                category_id=category_ids,
                type=list(OUTFLOW_TYPES),
                status=TXN_ACTIVE,
                is_recurring=False,
            )
            spent = sum(
                (t.amount for t in transactions if start_date <= t.transaction_date <= end_date),
                Decimal("0"),
            )

        return {
            "budget": budget,
            "start_date": start_date,
            "end_date": end_date,
            "spent": spent,
            "remaining": budget.amount - spent,
            "progress": spent / budget.amount,
        }

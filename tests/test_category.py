"""Tests for category and budget services."""

import pytest
from datetime import date
from decimal import Decimal

from debtbook.domain.category import DEFAULT_CATEGORIES
from debtbook.domain.errors import NotFoundError, ValidationError


@pytest.fixture
def food(category_service, sample_user):
    return category_service.create_category(sample_user.id, "Food")


class TestCategoryService:
    def test_create_category(self, category_service, food):
        category = category_service.get_category(food)

        assert category.name == "Food"
        assert category.type == "expense"
        assert category.is_active

    def test_create_with_missing_parent(self, category_service, sample_user):
        with pytest.raises(NotFoundError):
            category_service.create_category(sample_user.id, "Groceries", parent_category_id="missing")

    def test_create_with_unknown_type(self, category_service, sample_user):
        with pytest.raises(ValidationError, match="Invalid category type"):
            category_service.create_category(sample_user.id, "Gifts", category_type="gift")

    def test_list_by_type(self, category_service, sample_user, food):
        category_service.create_category(sample_user.id, "Salary", category_type="income")

        income = category_service.list_categories(sample_user.id, category_type="income")

        assert [c.name for c in income] == ["Salary"]

    def test_deactivate_hides_category(self, category_service, sample_user, food):
        category_service.deactivate_category(food)

        assert category_service.list_categories(sample_user.id) == []
        assert len(category_service.list_categories(sample_user.id, include_inactive=True)) == 1

    def test_update_category(self, category_service, food):
        category = category_service.update_category(food, color="#FF6B6B")

        assert category.color == "#FF6B6B"

    def test_update_category_rejects_unknown_field(self, category_service, food):
        with pytest.raises(ValidationError):
            category_service.update_category(food, user_id="someone")

    def test_initialize_defaults(self, temp_db, category_service, sample_user):
        expected = sum(len(defaults) for defaults in DEFAULT_CATEGORIES.values())

        created = category_service.initialize_defaults(sample_user.id)

        assert created == expected
        assert len(category_service.list_categories(sample_user.id, category_type="debt")) == 6
        assert len(temp_db.list_sync_logs(table_name="categories")) == expected

    def test_initialize_defaults_skips_when_categories_exist(self, category_service, sample_user, food):
        assert category_service.initialize_defaults(sample_user.id) == 0


class TestBudgetService:
    def test_create_budget(self, budget_service, sample_user, food):
        budget_id = budget_service.create_budget(sample_user.id, "Groceries", Decimal("300"), category_id=food)

        budgets = budget_service.list_budgets(sample_user.id)
        assert [b.id for b in budgets] == [budget_id]
        assert budgets[0].period == "monthly"

    @pytest.mark.parametrize(
        "kwargs",
        [
            {"amount": Decimal("0")},
            {"period": "hourly"},
            {"start_date": date(2025, 3, 31), "end_date": date(2025, 3, 1)},
        ],
    )
    def test_invalid_budget(self, budget_service, sample_user, kwargs):
        values = {"amount": Decimal("100"), **kwargs}
        with pytest.raises(ValidationError):
            budget_service.create_budget(sample_user.id, "Budget", **values)

    def test_budget_with_missing_category(self, budget_service, sample_user):
        with pytest.raises(NotFoundError):
            budget_service.create_budget(sample_user.id, "Budget", Decimal("100"), category_id="missing")

    def test_progress_counts_outflows_in_category_and_children(
        self, category_service, budget_service, transaction_service, sample_user, food, add_transaction
    ):
        groceries = category_service.create_category(sample_user.id, "Groceries", parent_category_id=food)
        budget_id = budget_service.create_budget(sample_user.id, "Food", Decimal("200"), category_id=food)
        add_transaction("cashOut", "50", category_id=food, transaction_date=date(2025, 3, 2))
        add_transaction("debit", "30", category_id=groceries, transaction_date=date(2025, 3, 20))
        add_transaction("cashIn", "500", category_id=food, transaction_date=date(2025, 3, 5))
        add_transaction("cashOut", "70", category_id=food, transaction_date=date(2025, 2, 27))
        cancelled = add_transaction("cashOut", "40", category_id=food, transaction_date=date(2025, 3, 6))
        transaction_service.cancel_transaction(cancelled)

        progress = budget_service.get_budget_progress(budget_id, today=date(2025, 3, 14))

        assert progress["start_date"] == date(2025, 3, 1)
        assert progress["end_date"] == date(2025, 3, 31)
        assert progress["spent"] == Decimal("80")
        assert progress["remaining"] == Decimal("120")
        assert progress["progress"] == Decimal("0.4")

    def test_progress_uses_explicit_dates(self, budget_service, sample_user, food, add_transaction):
        budget_id = budget_service.create_budget(
            sample_user.id, "Trip", Decimal("100"), category_id=food,
            start_date=date(2025, 2, 20), end_date=date(2025, 3, 5),
        )
        add_transaction("cashOut", "25", category_id=food, transaction_date=date(2025, 2, 27))

        progress = budget_service.get_budget_progress(budget_id, today=date(2025, 3, 14))

        assert progress["spent"] == Decimal("25")

    def test_budget_without_category_tracks_nothing(self, budget_service, sample_user, add_transaction):
        budget_id = budget_service.create_budget(sample_user.id, "Everything", Decimal("100"))
        add_transaction("cashOut", "25")

        assert budget_service.get_budget_progress(budget_id)["spent"] == Decimal("0")

    def test_update_and_delete_budget(self, budget_service, sample_user):
        budget_id = budget_service.create_budget(sample_user.id, "Budget", Decimal("100"))

        assert budget_service.update_budget(budget_id, amount="150").amount == Decimal("150")
        budget_service.delete_budget(budget_id)

        assert budget_service.list_budgets(sample_user.id) == []

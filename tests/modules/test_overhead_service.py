"""Tests for OverheadCostService."""

from decimal import Decimal
from uuid import uuid4

import pytest

from costs_kernel.domain.period import MonthPeriod
from costs_kernel.exceptions import InvalidInputError, OverheadCostNotFoundError
from costs_modules.closing.models import ClosingStatus, OverheadCostType


class TestOverheadCrud:
    def test_create_and_list(self, overhead_service, company_id, test_actor_id, period):
        overhead_service.create(
            company_id, test_actor_id, period, Decimal("1200"), OverheadCostType.STRUCTURE_COSTS, "Rent"
        )
        overhead_service.create(
            company_id, test_actor_id, period, Decimal("300.50"), OverheadCostType.TRANSFER_PRICING
        )
        overhead_service.create(
            company_id, test_actor_id, MonthPeriod(2024, 4), Decimal("99"), OverheadCostType.OTHER
        )

        listing = overhead_service.list_costs(company_id, period)

        assert len(listing.items) == 2
        assert listing.total == Decimal("1500.50")
        assert {i.cost_type for i in listing.items} == {
            OverheadCostType.STRUCTURE_COSTS,
            OverheadCostType.TRANSFER_PRICING,
        }

    def test_update_fields(self, overhead_service, company_id, test_actor_id, period):
        created = overhead_service.create(
            company_id, test_actor_id, period, Decimal("100"), OverheadCostType.OTHER
        ).overhead

        updated = overhead_service.update(
            company_id, test_actor_id, created.id,
            amount=Decimal("150"), cost_type=OverheadCostType.OTHER_PROFESSIONALS,
        ).overhead

        assert updated.amount == Decimal("150")
        assert updated.cost_type == OverheadCostType.OTHER_PROFESSIONALS
        assert updated.description is None

    def test_delete(self, overhead_service, company_id, test_actor_id, period):
        created = overhead_service.create(
            company_id, test_actor_id, period, Decimal("100"), OverheadCostType.OTHER
        ).overhead
        result = overhead_service.delete(company_id, test_actor_id, created.id)
        assert result.overhead is None
        assert overhead_service.list_costs(company_id, period).items == ()

    def test_negative_amount_rejected(self, overhead_service, company_id, test_actor_id, period):
        with pytest.raises(InvalidInputError):
            overhead_service.create(
                company_id, test_actor_id, period, Decimal("-5"), OverheadCostType.OTHER
            )

    def test_long_description_rejected(self, overhead_service, company_id, test_actor_id, period):
        with pytest.raises(InvalidInputError):
            overhead_service.create(
                company_id, test_actor_id, period, Decimal("5"), OverheadCostType.OTHER, "d" * 501
            )

    def test_unknown_or_foreign_item(self, overhead_service, company_id, test_actor_id, period):
        created = overhead_service.create(
            company_id, test_actor_id, period, Decimal("100"), OverheadCostType.OTHER
        ).overhead
        with pytest.raises(OverheadCostNotFoundError):
            overhead_service.delete(company_id, test_actor_id, uuid4())
        with pytest.raises(OverheadCostNotFoundError):
            overhead_service.update(uuid4(), test_actor_id, created.id, amount=Decimal("1"))


class TestOverheadReopensClosedMonth:
    def test_create_on_closed_month(
        self, overhead_service, closing_service, standard_month, company_id, test_actor_id, period
    ):
        closing_service.close(company_id, period, test_actor_id)

        result = overhead_service.create(
            company_id, test_actor_id, period, Decimal("500"), OverheadCostType.OTHER
        )

        assert result.warning is not None
        assert closing_service.get_status(company_id, period) == ClosingStatus.REOPENED
        closing = closing_service.close(company_id, period, test_actor_id)
        assert closing.total_overhead == Decimal("1500.00")

    def test_edit_in_other_month_leaves_closing_alone(
        self, overhead_service, closing_service, standard_month, company_id, test_actor_id, period
    ):
        closing_service.close(company_id, period, test_actor_id)

        result = overhead_service.create(
            company_id, test_actor_id, MonthPeriod(2024, 4), Decimal("10"), OverheadCostType.OTHER
        )

        assert result.warning is None
        assert closing_service.get_status(company_id, period) == ClosingStatus.CLOSED

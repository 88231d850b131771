"""Tests for ProjectCostAggregator in live and closing modes."""

from decimal import Decimal
from uuid import uuid4

from costs_engines.cost_hour import UserCostHour
from costs_engines.project_cost import CostMode, ProjectCostAggregator
from costs_kernel.domain.inputs import TimeAggregate


class TestProjectCostAggregator:
    def setup_method(self):
        self.aggregator = ProjectCostAggregator()
        self.user_a = uuid4()
        self.user_b = uuid4()
        self.project = uuid4()
        self.aggs = [
            TimeAggregate(self.user_a, self.project, 90),
            TimeAggregate(self.user_b, self.project, 60),
            TimeAggregate(self.user_a, None, 600),
        ]

    def test_live_mode_uses_hourly_cost(self):
        result = self.aggregator.aggregate(
            time_aggregates=self.aggs,
            hourly_costs={self.user_a: Decimal("20"), self.user_b: Decimal("10")},
        )
        assert result == {self.project: Decimal("40.00")}

    def test_user_without_rate_costs_nothing(self):
        result = self.aggregator.aggregate(
            time_aggregates=self.aggs,
            hourly_costs={self.user_a: Decimal("20"), self.user_b: None},
        )
        assert result[self.project] == Decimal("30.00")

    def test_closing_mode_prefers_month_cost_hour(self):
        cost_hours = {
            self.user_a: UserCostHour(
                user_id=self.user_a,
                cost_hour=Decimal("25"),
                total_hours=Decimal("100"),
                total_salary=Decimal("2500"),
                has_hours=True,
            )
        }
        result = self.aggregator.aggregate(
            time_aggregates=self.aggs,
            hourly_costs={self.user_a: Decimal("20"), self.user_b: Decimal("10")},
            mode=CostMode.CLOSING,
            cost_hours=cost_hours,
        )
        # user_a at 25/h for 1.5 h, user_b falls back to live 10/h
        assert result[self.project] == Decimal("47.50")

    def test_time_without_project_is_ignored(self):
        result = self.aggregator.aggregate(
            time_aggregates=[TimeAggregate(self.user_a, None, 600)],
            hourly_costs={self.user_a: Decimal("20")},
        )
        assert result == {}

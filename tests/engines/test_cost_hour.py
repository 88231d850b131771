"""Tests for CostHourCalculator and NonProductiveCostCalculator."""

from decimal import Decimal
from uuid import uuid4

from costs_engines.cost_hour import CostHourCalculator, minutes_by_user
from costs_engines.non_productive import NonProductiveCostCalculator
from costs_kernel.domain.inputs import TimeAggregate, UserCostInput


def _user(name: str, salary: str | None) -> UserCostInput:
    return UserCostInput(
        user_id=uuid4(),
        name=name,
        salary=Decimal(salary) if salary is not None else None,
        hourly_cost=None,
        is_active=True,
    )


class TestMinutesByUser:
    def test_sums_across_projects_and_unassigned_time(self):
        user_id = uuid4()
        aggs = [
            TimeAggregate(user_id=user_id, project_id=uuid4(), minutes=90),
            TimeAggregate(user_id=user_id, project_id=None, minutes=30),
        ]
        assert minutes_by_user(aggs) == {user_id: 120}


class TestCostHourCalculator:
    def setup_method(self):
        self.calc = CostHourCalculator()

    def test_salary_plus_extras_over_hours(self):
        user = _user("Bruno", "2000")
        result = self.calc.calculate(
            users=[user],
            extras={user.user_id: Decimal("500")},
            time_aggregates=[TimeAggregate(user.user_id, uuid4(), 6000)],
        )
        line = result[user.user_id]
        assert line.total_salary == Decimal("2500")
        assert line.total_hours == Decimal("100")
        assert line.cost_hour == Decimal("25")
        assert line.has_hours

    def test_user_without_hours_has_zero_cost_hour(self):
        user = _user("Ana", "3000")
        result = self.calc.calculate(users=[user], extras={}, time_aggregates=[])
        line = result[user.user_id]
        assert not line.has_hours
        assert line.cost_hour == Decimal("0")
        assert line.total_salary == Decimal("3000")

    def test_user_with_nothing_to_cost_is_skipped(self):
        user = _user("Carla", None)
        result = self.calc.calculate(
            users=[user],
            extras={},
            time_aggregates=[TimeAggregate(user.user_id, uuid4(), 60)],
        )
        assert user.user_id not in result

    def test_extras_alone_are_costed(self):
        user = _user("Dani", None)
        result = self.calc.calculate(
            users=[user],
            extras={user.user_id: Decimal("300")},
            time_aggregates=[TimeAggregate(user.user_id, uuid4(), 600)],
        )
        assert result[user.user_id].cost_hour == Decimal("30")

    def test_cost_hour_is_not_rounded(self):
        user = _user("Eva", "1000")
        result = self.calc.calculate(
            users=[user],
            extras={},
            time_aggregates=[TimeAggregate(user.user_id, uuid4(), 180)],
        )
        assert result[user.user_id].cost_hour == Decimal("1000") / Decimal("3")


class TestNonProductiveCost:
    def setup_method(self):
        self.cost_hour = CostHourCalculator()
        self.calc = NonProductiveCostCalculator()

    def test_hours_on_non_productive_projects_are_costed(self):
        ana = _user("Ana", "3000")
        interno = uuid4()
        aggs = [
            TimeAggregate(ana.user_id, uuid4(), 120 * 60),
            TimeAggregate(ana.user_id, interno, 40 * 60),
        ]
        cost_hours = self.cost_hour.calculate(users=[ana], extras={}, time_aggregates=aggs)

        result = self.calc.calculate(
            cost_hours=cost_hours, time_aggregates=aggs, non_productive_project_ids={interno}
        )
        assert result.hours_cost == Decimal("750.00")
        assert result.zero_hours_salaries == Decimal("0.00")
        assert result.total == Decimal("750.00")

    def test_salaries_of_users_without_hours_are_non_productive(self):
        ana = _user("Ana", "3000")
        idle = _user("Idle", "1800")
        aggs = [TimeAggregate(ana.user_id, uuid4(), 60)]
        cost_hours = self.cost_hour.calculate(users=[ana, idle], extras={}, time_aggregates=aggs)

        result = self.calc.calculate(
            cost_hours=cost_hours, time_aggregates=aggs, non_productive_project_ids=set()
        )
        assert result.hours_cost == Decimal("0.00")
        assert result.zero_hours_salaries == Decimal("1800.00")
        assert result.total == Decimal("1800.00")

    def test_no_non_productive_category_means_no_hours_cost(self):
        ana = _user("Ana", "3000")
        aggs = [TimeAggregate(ana.user_id, uuid4(), 600)]
        cost_hours = self.cost_hour.calculate(users=[ana], extras={}, time_aggregates=aggs)

        result = self.calc.calculate(
            cost_hours=cost_hours, time_aggregates=aggs, non_productive_project_ids=set()
        )
        assert result.total == Decimal("0.00")

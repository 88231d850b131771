"""
Module: costs_engines.cost_hour
Responsibility:
    Compute each user's effective cost per hour for one month:
    (base salary + monthly extras) / counted hours.

Architecture position:
    Engines -- pure calculation layer, zero I/O.

Invariants enforced:
    - total_salary = (salary or 0) + (extras or 0).
    - cost_hour = total_salary / total_hours when total_hours > 0, else 0.
    - Users whose total_salary is zero are left out of the result.
    - cost_hour is kept unrounded; consumers round the figures they report.

Failure modes:
    - None.  Missing data degrades to zero.
"""

from __future__ import annotations

from collections import defaultdict
from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from decimal import Decimal
from uuid import UUID

from costs_engines.tracer import traced_engine
from costs_kernel.db.types import ZERO, minutes_to_hours, to_decimal
from costs_kernel.domain.inputs import TimeAggregate, UserCostInput


@dataclass(frozen=True)
class UserCostHour:
    user_id: UUID
    cost_hour: Decimal
    total_hours: Decimal
    total_salary: Decimal
    has_hours: bool


def minutes_by_user(time_aggregates: Iterable[TimeAggregate]) -> dict[UUID, int]:
    """Sum counted minutes per user across every project (and no project)."""
    totals: dict[UUID, int] = defaultdict(int)
    for agg in time_aggregates:
        totals[agg.user_id] += agg.minutes
    return dict(totals)


class CostHourCalculator:
    """
    Per-user monthly cost-per-hour.

    Usage:
        calc = CostHourCalculator()
        cost_hours = calc.calculate(
            users=users, extras={user_id: Decimal("200")}, time_aggregates=aggs,
        )
    """

    @traced_engine("cost_hour", "1.0")
    def calculate(
        self,
        *,
        users: Iterable[UserCostInput],
        extras: Mapping[UUID, Decimal],
        time_aggregates: Iterable[TimeAggregate],
    ) -> dict[UUID, UserCostHour]:
        minutes = minutes_by_user(time_aggregates)
        result: dict[UUID, UserCostHour] = {}

        for user in users:
            total_salary = to_decimal(user.salary) + to_decimal(extras.get(user.user_id))
            if total_salary == ZERO:
                continue

            total_hours = minutes_to_hours(minutes.get(user.user_id, 0))
            has_hours = total_hours > ZERO
            cost_hour = total_salary / total_hours if has_hours else ZERO

            result[user.user_id] = UserCostHour(
                user_id=user.user_id,
                cost_hour=cost_hour,
                total_hours=total_hours,
                total_salary=total_salary,
                has_hours=has_hours,
            )

        return result

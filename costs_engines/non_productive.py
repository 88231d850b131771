"""
Module: costs_engines.non_productive
Responsibility:
    Compute the month's non-productive cost pool: time spent on projects of
    the non-productive category plus the full salary of paid users who
    logged no time at all.

Architecture position:
    Engines -- pure calculation layer, zero I/O.

Invariants enforced:
    - Only users present in the cost-hour map contribute (salary > 0).
    - A user with no counted hours contributes their total salary once,
      regardless of project.
    - The pool is rounded to 2 decimals exactly once, at the end.
"""

from __future__ import annotations

from collections.abc import Collection, Iterable, Mapping
from dataclasses import dataclass
from decimal import Decimal
from uuid import UUID

from costs_engines.cost_hour import UserCostHour
from costs_engines.tracer import traced_engine
from costs_kernel.db.types import ZERO, minutes_to_hours, round_money
from costs_kernel.domain.inputs import TimeAggregate


@dataclass(frozen=True)
class NonProductiveCost:
    hours_cost: Decimal
    zero_hours_salaries: Decimal
    total: Decimal


class NonProductiveCostCalculator:
    @traced_engine("non_productive", "1.0")
    def calculate(
        self,
        *,
        cost_hours: Mapping[UUID, UserCostHour],
        time_aggregates: Iterable[TimeAggregate],
        non_productive_project_ids: Collection[UUID],
    ) -> NonProductiveCost:
        hours_cost = ZERO
        if non_productive_project_ids:
            for agg in time_aggregates:
                if agg.project_id not in non_productive_project_ids:
                    continue
                user_cost = cost_hours.get(agg.user_id)
                if user_cost is None:
                    continue
                hours_cost += minutes_to_hours(agg.minutes) * user_cost.cost_hour

        zero_hours_salaries = sum(
            (c.total_salary for c in cost_hours.values() if not c.has_hours and c.total_salary > ZERO),
            ZERO,
        )

        return NonProductiveCost(
            hours_cost=round_money(hours_cost),
            zero_hours_salaries=round_money(zero_hours_salaries),
            total=round_money(hours_cost + zero_hours_salaries),
        )

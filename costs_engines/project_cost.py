"""
Module: costs_engines.project_cost
Responsibility:
    Internal labour cost per project: counted hours times a per-user rate.

Architecture position:
    Engines -- pure calculation layer, zero I/O.

Modes:
    - LIVE: every user's current ``hourly_cost``.
    - CLOSING: the month's cost_hour when the user is in the cost-hour map,
      else the live ``hourly_cost``.

Invariants enforced:
    - Users without any rate (hourly_cost NULL, not in the map) cost 0.
    - Time without a project is ignored.
    - Each project total is rounded to 2 decimals once.
"""

from __future__ import annotations

from collections import defaultdict
from collections.abc import Iterable, Mapping
from decimal import Decimal
from enum import Enum
from uuid import UUID

from costs_engines.cost_hour import UserCostHour
from costs_engines.tracer import traced_engine
from costs_kernel.db.types import ZERO, minutes_to_hours, round_money, to_decimal
from costs_kernel.domain.inputs import TimeAggregate


class CostMode(str, Enum):
    LIVE = "live"
    CLOSING = "closing"


class ProjectCostAggregator:
    @traced_engine("project_cost", "1.0", fingerprint_fields=("mode",))
    def aggregate(
        self,
        *,
        time_aggregates: Iterable[TimeAggregate],
        hourly_costs: Mapping[UUID, Decimal | None],
        mode: CostMode = CostMode.LIVE,
        cost_hours: Mapping[UUID, UserCostHour] | None = None,
    ) -> dict[UUID, Decimal]:
        cost_hours = cost_hours or {}
        totals: dict[UUID, Decimal] = defaultdict(lambda: ZERO)

        for agg in time_aggregates:
            if agg.project_id is None:
                continue
            totals[agg.project_id] += minutes_to_hours(agg.minutes) * self._rate(
                agg.user_id, mode, hourly_costs, cost_hours
            )

        return {project_id: round_money(total) for project_id, total in totals.items()}

    @staticmethod
    def _rate(
        user_id: UUID,
        mode: CostMode,
        hourly_costs: Mapping[UUID, Decimal | None],
        cost_hours: Mapping[UUID, UserCostHour],
    ) -> Decimal:
        if mode == CostMode.CLOSING and user_id in cost_hours:
            return cost_hours[user_id].cost_hour
        return to_decimal(hourly_costs.get(user_id))

"""
Module: costs_engines.distribution
Responsibility:
    Split the month's three shared cost pools (salaries, overhead,
    non-productive) across productive projects in proportion to each
    project's share of actual revenue.

Architecture position:
    Engines -- pure calculation layer, zero I/O.

Invariants enforced:
    - Weighting: revenue / total_revenue when total_revenue > 0, otherwise an
      equal split (1 / project_count).  The same weighting applies to all
      three pools; pools are never netted against each other.
    - Rounding: each pool is split independently and each share is rounded
      ROUND_HALF_UP to 2 decimals.  The rounding remainder of a pool
      (round(pool) - sum of rounded shares) goes to the project with the
      largest share, first in name order on ties, so that the shares of a
      pool always add up to round(pool) exactly.
    - total_distributed per project is the sum of its three rounded shares.
    - revenue_share_percent is reported rounded to 2 decimals; the split
      itself uses the unrounded ratio.
    - Output order is project name, then project id.

Failure modes:
    - None.  An empty target list yields an empty plan whose remainders
      equal the undistributed pools.

Usage:
    planner = DistributionPlanner()
    plan = planner.plan(
        targets=[DistributionTarget(project_id=p1, project_name="Alpha", revenue=Decimal("600"))],
        total_salaries=Decimal("1000"),
        total_overhead=Decimal("300"),
        total_non_productive=Decimal("0"),
    )
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass, field
from decimal import Decimal
from uuid import UUID

from costs_engines.tracer import traced_engine
from costs_kernel.db.types import HUNDRED, ZERO, round_money, round_percent
from costs_kernel.logging_config import get_logger

logger = get_logger("engines.distribution")

POOLS = ("salaries", "overhead", "non_productive")


@dataclass(frozen=True)
class DistributionTarget:
    """A productive active project eligible to receive costs."""

    project_id: UUID
    project_name: str
    revenue: Decimal = ZERO


@dataclass(frozen=True)
class ProjectDistribution:
    project_id: UUID
    project_name: str
    project_revenue: Decimal
    revenue_share_percent: Decimal
    distributed_salaries: Decimal
    distributed_overhead: Decimal
    distributed_non_productive: Decimal
    total_distributed: Decimal


@dataclass(frozen=True)
class DistributionPlan:
    """
    Result of a distribution run.

    Guarantees:
        - sum(d.distributed_salaries) == round(total_salaries) when at least
          one target exists (same for overhead and non_productive).
        - rounding_remainders[pool] records the correction applied to that
          pool's largest-share project.
    """

    total_revenue: Decimal
    total_salaries: Decimal
    total_overhead: Decimal
    total_non_productive: Decimal
    distributions: tuple[ProjectDistribution, ...]
    rounding_remainders: dict[str, Decimal] = field(default_factory=dict)
    equal_split: bool = False

    @property
    def total_distributed(self) -> Decimal:
        return sum((d.total_distributed for d in self.distributions), ZERO)


class DistributionPlanner:
    """Revenue-share computation and proportional allocation of cost pools."""

    @traced_engine(
        "distribution",
        "1.0",
        fingerprint_fields=("targets", "total_salaries", "total_overhead", "total_non_productive"),
    )
    def plan(
        self,
        *,
        targets: Sequence[DistributionTarget],
        total_salaries: Decimal,
        total_overhead: Decimal,
        total_non_productive: Decimal,
    ) -> DistributionPlan:
        ordered = sorted(targets, key=lambda t: (t.project_name, str(t.project_id)))
        pools = {
            "salaries": round_money(total_salaries),
            "overhead": round_money(total_overhead),
            "non_productive": round_money(total_non_productive),
        }
        raw_revenue = sum((t.revenue for t in ordered), ZERO)
        total_revenue = round_money(raw_revenue)

        if not ordered:
            return DistributionPlan(
                total_revenue=total_revenue,
                total_salaries=pools["salaries"],
                total_overhead=pools["overhead"],
                total_non_productive=pools["non_productive"],
                distributions=(),
                rounding_remainders=dict(pools),
            )

        equal_split = raw_revenue <= ZERO
        ratios = self._ratios(ordered, raw_revenue, equal_split)
        rounding_index = self._rounding_target_index(ratios)

        shares: dict[str, list[Decimal]] = {}
        remainders: dict[str, Decimal] = {}
        for pool_name in POOLS:
            pool = pools[pool_name]
            pool_shares = [round_money(pool * ratio) for ratio in ratios]
            remainder = pool - sum(pool_shares, ZERO)
            pool_shares[rounding_index] += remainder
            shares[pool_name] = pool_shares
            remainders[pool_name] = remainder

        distributions = []
        for i, target in enumerate(ordered):
            salaries = shares["salaries"][i]
            overhead = shares["overhead"][i]
            non_productive = shares["non_productive"][i]
            distributions.append(
                ProjectDistribution(
                    project_id=target.project_id,
                    project_name=target.project_name,
                    project_revenue=round_money(target.revenue),
                    revenue_share_percent=round_percent(ratios[i] * HUNDRED),
                    distributed_salaries=salaries,
                    distributed_overhead=overhead,
                    distributed_non_productive=non_productive,
                    total_distributed=round_money(salaries + overhead + non_productive),
                )
            )

        if any(r != ZERO for r in remainders.values()):
            logger.debug(
                "distribution_rounding_applied",
                extra={
                    "rounding_project_id": str(ordered[rounding_index].project_id),
                    "remainders": {k: str(v) for k, v in remainders.items()},
                },
            )

        return DistributionPlan(
            total_revenue=total_revenue,
            total_salaries=pools["salaries"],
            total_overhead=pools["overhead"],
            total_non_productive=pools["non_productive"],
            distributions=tuple(distributions),
            rounding_remainders=remainders,
            equal_split=equal_split,
        )

    @staticmethod
    def _ratios(
        targets: Sequence[DistributionTarget],
        total_revenue: Decimal,
        equal_split: bool,
    ) -> list[Decimal]:
        if equal_split:
            share = Decimal("1") / Decimal(len(targets))
            return [share for _ in targets]
        return [t.revenue / total_revenue for t in targets]

    @staticmethod
    def _rounding_target_index(ratios: Sequence[Decimal]) -> int:
        # max() keeps the first maximal element, i.e. first in name order
        return max(range(len(ratios)), key=lambda i: ratios[i])

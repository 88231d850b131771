"""Domain value objects - pure, zero I/O."""

from costs_kernel.domain.actor import Actor
from costs_kernel.domain.clock import Clock, DeterministicClock, SystemClock
from costs_kernel.domain.inputs import ProjectInput, TimeAggregate, UserCostInput
from costs_kernel.domain.period import MonthPeriod

__all__ = [
    "Actor",
    "Clock",
    "DeterministicClock",
    "SystemClock",
    "MonthPeriod",
    "ProjectInput",
    "TimeAggregate",
    "UserCostInput",
]

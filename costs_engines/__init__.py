"""
Pure calculation engines for the month closing.

Engines take immutable inputs (``costs_kernel.domain.inputs``) and return
frozen dataclasses.  They never open a session or read the clock.
"""

from costs_engines.cost_hour import CostHourCalculator, UserCostHour
from costs_engines.distribution import (
    DistributionPlan,
    DistributionPlanner,
    DistributionTarget,
    ProjectDistribution,
)
from costs_engines.non_productive import NonProductiveCost, NonProductiveCostCalculator
from costs_engines.project_cost import CostMode, ProjectCostAggregator
from costs_engines.validation import (
    ValidationErrorType,
    ValidationGate,
    ValidationIssue,
    ValidationResult,
)

__all__ = [
    "CostHourCalculator",
    "UserCostHour",
    "DistributionPlan",
    "DistributionPlanner",
    "DistributionTarget",
    "ProjectDistribution",
    "NonProductiveCost",
    "NonProductiveCostCalculator",
    "CostMode",
    "ProjectCostAggregator",
    "ValidationErrorType",
    "ValidationGate",
    "ValidationIssue",
    "ValidationResult",
]

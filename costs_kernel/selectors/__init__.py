"""Selectors - read-only queries returning DTOs."""

from costs_kernel.selectors.base import BaseSelector
from costs_kernel.selectors.cost_inputs import CostInputsSelector

__all__ = ["BaseSelector", "CostInputsSelector"]

"""Monthly salaries: per-user extras and base salary changes."""

from costs_modules.salaries.models import (
    MonthlySalary,
    MonthlySalaryLine,
    MonthlySalaryList,
    SalaryMutationResult,
)
from costs_modules.salaries.service import MonthlySalaryService

__all__ = [
    "MonthlySalary",
    "MonthlySalaryLine",
    "MonthlySalaryList",
    "SalaryMutationResult",
    "MonthlySalaryService",
]

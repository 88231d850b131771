"""
Costs Kernel - month closing and cost distribution core

A company-scoped persistence and domain layer with:
- Decimal money arithmetic with explicit rounding
- Read-only selectors over time entries, revenues and salaries
- Typed exceptions with machine-readable codes
- Structured JSON logging
"""

__version__ = "0.1.0"

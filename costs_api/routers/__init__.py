from costs_api.routers import (
    monthly_closing,
    monthly_overhead,
    monthly_salaries,
    projects,
)

__all__ = ["monthly_closing", "monthly_overhead", "monthly_salaries", "projects"]

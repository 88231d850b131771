"""
Pytest fixtures for the costs test suite.

Provides:
- An in-memory SQLite engine per test, created through the kernel engine module
- A DeterministicClock and fixed company / actor ids
- ``CostsDataBuilder`` for users, projects, time entries and revenues
- Service fixtures wired to the same session and clock
- ``captured_logs`` for asserting on structured log events
"""

import json
import logging
from datetime import datetime, timedelta, timezone
from decimal import Decimal
from io import StringIO
from uuid import UUID, uuid4

import pytest

from costs_kernel.db.engine import (
    create_tables,
    get_session,
    get_session_factory,
    init_engine_from_url,
    reset_engine,
)
from costs_kernel.domain.actor import Actor
from costs_kernel.domain.clock import DeterministicClock
from costs_kernel.domain.period import MonthPeriod
from costs_kernel.logging_config import (
    LogContext,
    StructuredFormatter,
    configure_logging,
    reset_logging,
)
from costs_kernel.models.enums import EntryType, RelationType, UserRole
from costs_kernel.models.project import Project, ProjectCategory
from costs_kernel.models.revenue import (
    ProjectExternalCostActual,
    ProjectExternalCostEstimate,
    ProjectMonthlyRevenue,
)
from costs_kernel.models.time_entry import TimeEntry
from costs_kernel.models.user import User
from costs_modules.closing.config import ClosingConfig
from costs_modules.closing.models import OverheadCostType
from costs_modules.closing.orm import MonthlyOverheadCostModel, MonthlyUserSalaryModel
from costs_modules.closing.service import MonthClosingService
from costs_modules.overhead.service import OverheadCostService
from costs_modules.project_costs.service import ProjectCostsService
from costs_modules.salaries.service import MonthlySalaryService

NON_PRODUCTIVE = "No productivos"
MARCH_2024 = MonthPeriod(2024, 3)


# =============================================================================
# Logging fixtures
# =============================================================================


@pytest.fixture(autouse=True, scope="session")
def _configure_test_logging():
    """Configure structured logging for the test suite."""
    reset_logging()
    configure_logging(level=logging.DEBUG)
    yield
    reset_logging()


@pytest.fixture(autouse=True)
def _clear_log_context():
    """Clear LogContext between tests to prevent cross-test contamination."""
    LogContext.clear()
    yield
    LogContext.clear()


@pytest.fixture
def captured_logs():
    """
    Capture costs_kernel logs as parsed JSON dicts.

    Usage::

        def test_something(captured_logs, closing_service):
            closing_service.close(...)
            assert any(r["message"] == "month_closed" for r in captured_logs())
    """
    stream = StringIO()
    handler = logging.StreamHandler(stream)
    handler.setFormatter(StructuredFormatter())
    root = logging.getLogger("costs_kernel")
    previous_level = root.level
    root.setLevel(logging.DEBUG)
    root.addHandler(handler)

    def _get_records() -> list[dict]:
        lines = stream.getvalue().strip().split("\n")
        return [json.loads(line) for line in lines if line]

    yield _get_records

    root.removeHandler(handler)
    root.setLevel(previous_level)


# =============================================================================
# Database
# =============================================================================


@pytest.fixture
def engine():
    """Fresh in-memory database with every table created."""
    eng = init_engine_from_url("sqlite://")
    create_tables()
    yield eng
    reset_engine()


@pytest.fixture
def session(engine):
    s = get_session()
    yield s
    s.rollback()
    s.close()


@pytest.fixture
def session_factory(engine):
    return get_session_factory()


# =============================================================================
# Identity and time
# =============================================================================


@pytest.fixture
def deterministic_clock() -> DeterministicClock:
    return DeterministicClock(datetime(2024, 4, 2, 10, 0, tzinfo=timezone.utc))


@pytest.fixture
def company_id() -> UUID:
    return uuid4()


@pytest.fixture
def test_actor_id() -> UUID:
    return uuid4()


@pytest.fixture
def admin_actor(company_id, test_actor_id) -> Actor:
    return Actor(user_id=test_actor_id, company_id=company_id, role=UserRole.ADMIN)


@pytest.fixture
def period() -> MonthPeriod:
    return MARCH_2024


# =============================================================================
# Data builders
# =============================================================================


class CostsDataBuilder:
    """Inserts input entities for one company and commits after each call."""

    def __init__(self, session, company_id: UUID):
        self.session = session
        self.company_id = company_id
        self._categories: dict[str, ProjectCategory] = {}

    def _save(self, obj):
        self.session.add(obj)
        self.session.commit()
        return obj

    def user(
        self,
        name: str,
        salary: Decimal | str | None = None,
        hourly_cost: Decimal | str | None = None,
        relation_type: RelationType = RelationType.EMPLOYEE,
        role: UserRole = UserRole.WORKER,
        is_active: bool = True,
        team_id: UUID | None = None,
        deleted: bool = False,
    ) -> User:
        return self._save(
            User(
                company_id=self.company_id,
                name=name,
                email=f"{name.lower().replace(' ', '.')}@example.com",
                role=role.value,
                relation_type=relation_type.value,
                salary=Decimal(salary) if salary is not None else None,
                hourly_cost=Decimal(hourly_cost) if hourly_cost is not None else None,
                is_active=is_active,
                team_id=team_id,
                deleted_at=datetime(2024, 1, 1, tzinfo=timezone.utc) if deleted else None,
            )
        )

    def category(self, name: str) -> ProjectCategory:
        if name not in self._categories:
            self._categories[name] = self._save(
                ProjectCategory(company_id=self.company_id, name=name)
            )
        return self._categories[name]

    def project(
        self,
        name: str,
        category: str | None = "Clientes",
        is_active: bool = True,
        team_id: UUID | None = None,
        code: str | None = None,
    ) -> Project:
        category_id = self.category(category).id if category is not None else None
        return self._save(
            Project(
                company_id=self.company_id,
                category_id=category_id,
                team_id=team_id,
                name=name,
                code=code,
                is_active=is_active,
            )
        )

    def time(
        self,
        user: User,
        project: Project | None,
        minutes: int | None,
        start: datetime | None = None,
        entry_type: EntryType = EntryType.WORK,
    ) -> TimeEntry:
        start = start or datetime(2024, 3, 5, 9, 0, tzinfo=timezone.utc)
        end = start + timedelta(minutes=minutes) if minutes is not None else None
        return self._save(
            TimeEntry(
                company_id=self.company_id,
                user_id=user.id,
                project_id=project.id if project is not None else None,
                start_time=start,
                end_time=end,
                duration_minutes=minutes,
                entry_type=entry_type.value,
            )
        )

    def hours(self, user: User, project: Project | None, hours: int, **kwargs) -> TimeEntry:
        return self.time(user, project, hours * 60, **kwargs)

    def revenue(
        self,
        project: Project,
        actual: Decimal | str | None,
        estimated: Decimal | str | None = None,
        period: MonthPeriod = MARCH_2024,
    ) -> ProjectMonthlyRevenue:
        return self._save(
            ProjectMonthlyRevenue(
                project_id=project.id,
                year=period.year,
                month=period.month,
                actual_revenue=Decimal(actual) if actual is not None else None,
                estimated_revenue=Decimal(estimated) if estimated is not None else None,
            )
        )

    def external_cost(
        self,
        project: Project,
        amount: Decimal | str,
        actual: bool = True,
        provider_name: str | None = None,
        period: MonthPeriod = MARCH_2024,
    ):
        model = ProjectExternalCostActual if actual else ProjectExternalCostEstimate
        return self._save(
            model(
                project_id=project.id,
                year=period.year,
                month=period.month,
                amount=Decimal(amount),
                provider_name=provider_name,
            )
        )

    def overhead(
        self,
        amount: Decimal | str,
        cost_type: OverheadCostType = OverheadCostType.STRUCTURE_COSTS,
        period: MonthPeriod = MARCH_2024,
    ) -> MonthlyOverheadCostModel:
        return self._save(
            MonthlyOverheadCostModel(
                company_id=self.company_id,
                year=period.year,
                month=period.month,
                cost_type=cost_type.value,
                amount=Decimal(amount),
            )
        )

    def extras(
        self, user: User, amount: Decimal | str, period: MonthPeriod = MARCH_2024
    ) -> MonthlyUserSalaryModel:
        return self._save(
            MonthlyUserSalaryModel(
                company_id=self.company_id,
                user_id=user.id,
                year=period.year,
                month=period.month,
                extras=Decimal(amount),
            )
        )


@pytest.fixture
def builder(session, company_id) -> CostsDataBuilder:
    return CostsDataBuilder(session, company_id)


@pytest.fixture
def standard_month(builder):
    """
    A closable March 2024:

    - Ana (3000) logs 120 h on Alpha and 40 h on Interno (non-productive)
    - Bruno (2000 + 500 extras) logs 100 h on Beta
    - Alpha earns 6000, Beta 4000; overhead is 1000
    """
    ana = builder.user("Ana", salary="3000", hourly_cost="17.24")
    bruno = builder.user("Bruno", salary="2000", hourly_cost="11.49")
    alpha = builder.project("Alpha")
    beta = builder.project("Beta")
    interno = builder.project("Interno", category=NON_PRODUCTIVE)

    builder.hours(ana, alpha, 120)
    builder.hours(ana, interno, 40)
    builder.hours(bruno, beta, 100)
    builder.extras(bruno, "500")
    builder.revenue(alpha, "6000")
    builder.revenue(beta, "4000")
    builder.overhead("1000")

    return {
        "ana": ana,
        "bruno": bruno,
        "alpha": alpha,
        "beta": beta,
        "interno": interno,
    }


# =============================================================================
# Services
# =============================================================================


@pytest.fixture
def closing_config() -> ClosingConfig:
    return ClosingConfig()


@pytest.fixture
def closing_service(session, deterministic_clock, closing_config) -> MonthClosingService:
    return MonthClosingService(session, clock=deterministic_clock, config=closing_config)


@pytest.fixture
def salary_service(session, deterministic_clock, closing_config, closing_service):
    return MonthlySalaryService(
        session,
        clock=deterministic_clock,
        config=closing_config,
        closing_service=closing_service,
    )


@pytest.fixture
def overhead_service(session, deterministic_clock, closing_config, closing_service):
    return OverheadCostService(
        session,
        clock=deterministic_clock,
        config=closing_config,
        closing_service=closing_service,
    )


@pytest.fixture
def project_costs_service(session, closing_config):
    return ProjectCostsService(session, config=closing_config)

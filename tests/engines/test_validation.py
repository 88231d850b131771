"""Tests for the pre-close ValidationGate."""

from decimal import Decimal
from uuid import uuid4

from costs_engines.validation import ValidationErrorType, ValidationGate
from costs_kernel.domain.inputs import ProjectInput, UserCostInput


def _user(name: str, salary: str | None) -> UserCostInput:
    return UserCostInput(
        user_id=uuid4(),
        name=name,
        salary=Decimal(salary) if salary is not None else None,
        hourly_cost=None,
        is_active=True,
    )


def _project(name: str) -> ProjectInput:
    return ProjectInput(
        project_id=uuid4(),
        name=name,
        code=None,
        category_name="Clientes",
        team_id=None,
        is_active=True,
    )


class TestValidationGate:
    def setup_method(self):
        self.gate = ValidationGate()

    def test_clean_month_can_close(self):
        alpha = _project("Alpha")
        result = self.gate.validate(
            active_users=[_user("Ana", "3000")],
            projects=[alpha],
            revenues={alpha.project_id: Decimal("100")},
        )
        assert result.can_close
        assert result.errors == ()

    def test_findings_are_aggregated_in_stable_order(self):
        alpha, beta = _project("Alpha"), _project("Beta")
        result = self.gate.validate(
            active_users=[_user("Zoe", None), _user("Ana", "0"), _user("Max", "1200")],
            projects=[beta, alpha],
            revenues={},
        )
        assert not result.can_close
        assert [(e.type, e.user_name or e.project_name) for e in result.errors] == [
            (ValidationErrorType.MISSING_SALARY, "Zoe"),
            (ValidationErrorType.MISSING_REVENUE, "Alpha"),
            (ValidationErrorType.MISSING_REVENUE, "Beta"),
        ]

    def test_zero_salary_is_configured(self):
        alpha = _project("Alpha")
        result = self.gate.validate(
            active_users=[_user("Ana", "0")],
            projects=[alpha],
            revenues={alpha.project_id: Decimal("100")},
        )
        assert result.can_close
        assert result.errors == ()

    def test_null_revenue_counts_as_missing(self):
        alpha = _project("Alpha")
        result = self.gate.validate(
            active_users=[], projects=[alpha], revenues={alpha.project_id: None}
        )
        assert [e.type for e in result.errors] == [ValidationErrorType.MISSING_REVENUE]

    def test_no_active_projects(self):
        result = self.gate.validate(active_users=[_user("Ana", "1")], projects=[], revenues={})
        assert [e.type for e in result.errors] == [ValidationErrorType.NO_ACTIVE_PROJECTS]

    def test_zero_total_revenue_blocks(self):
        alpha, beta = _project("Alpha"), _project("Beta")
        result = self.gate.validate(
            active_users=[],
            projects=[alpha, beta],
            revenues={alpha.project_id: Decimal("0"), beta.project_id: Decimal("0")},
        )
        assert [e.type for e in result.errors] == [ValidationErrorType.ZERO_REVENUE]
        assert not result.can_close

    def test_explicit_zero_revenue_alongside_positive_is_fine(self):
        alpha, beta = _project("Alpha"), _project("Beta")
        result = self.gate.validate(
            active_users=[],
            projects=[alpha, beta],
            revenues={alpha.project_id: Decimal("0"), beta.project_id: Decimal("10")},
        )
        assert result.can_close

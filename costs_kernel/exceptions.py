"""
Typed Exception Hierarchy for the Costs Kernel.

===============================================================================
WHY TYPED EXCEPTIONS
===============================================================================

Closing a month is a state transition that callers (HTTP handlers, scripts,
tests) must react to precisely.  Matching on message text is fragile, so:

  1. Every error has a TYPED exception class (catch by type, not message)
  2. Every exception has a CODE attribute (machine-readable, API-safe)
  3. Exceptions carry structured DATA (not just a message string)

Example - WRONG way to handle errors:
    try:
        service.close(company_id, period, actor_id)
    except Exception as e:
        if "already closed" in str(e):  # FRAGILE - message might change
            ...

Example - RIGHT way (what this module enables):
    try:
        service.close(company_id, period, actor_id)
    except MonthAlreadyClosedError as e:
        api_response(code=e.code, period=e.period_code)

Validation findings (missing salary, missing revenue, ...) are NOT
exceptions on their own: the preview returns them as data.  Only close()
wraps the full list into ClosingValidationError.

===============================================================================
EXCEPTION HIERARCHY
===============================================================================

    CostsKernelError (base)
    |
    +-- ClosingError
    |   +-- MonthAlreadyClosedError
    |   +-- MonthNotClosedError
    |   +-- ClosingNotFoundError
    |   +-- ClosingValidationError
    |   +-- ConcurrentClosingError
    |
    +-- InputError
        +-- InvalidPeriodError
        +-- InvalidInputError
        +-- UserNotFoundError
        +-- ProjectNotFoundError
        +-- ProjectAccessDeniedError
        +-- MonthlySalaryNotFoundError
        +-- OverheadCostNotFoundError
        +-- ExternalCostNotFoundError

===============================================================================
ERROR CODES - QUICK REFERENCE
===============================================================================

Category   | Code                        | When Raised                    | HTTP
-----------|-----------------------------|--------------------------------|-----
Closing    | MONTH_ALREADY_CLOSED        | close() on a CLOSED month      | 400
           | MONTH_NOT_CLOSED            | reopen() on an OPEN month      | 400
           | CLOSING_NOT_FOUND           | reopen() with no closing row   | 404
           | CLOSING_VALIDATION_FAILED   | close() while preview blocks   | 400
           | CONCURRENT_CLOSING          | lost a close/reopen race       | 409
-----------|-----------------------------|--------------------------------|-----
Input      | INVALID_PERIOD              | year/month out of range        | 400
           | INVALID_INPUT               | malformed amount/reason        | 400
           | USER_NOT_FOUND              | unknown user for company       | 404
           | PROJECT_NOT_FOUND           | unknown project for company    | 404
           | PROJECT_ACCESS_DENIED       | project outside actor's team   | 403
           | MONTHLY_SALARY_NOT_FOUND    | unknown monthly salary row     | 404
           | OVERHEAD_COST_NOT_FOUND     | unknown overhead line item     | 404
           | EXTERNAL_COST_NOT_FOUND     | unknown project external cost  | 404

===============================================================================
"""


class CostsKernelError(Exception):
    """
    Base exception for all costs kernel errors.

    All subclasses must have a `code` class attribute for machine-readable
    error identification.
    """

    code: str = "COSTS_KERNEL_ERROR"


# Closing-related exceptions


class ClosingError(CostsKernelError):
    """Base exception for month closing state errors."""

    code: str = "CLOSING_ERROR"


class MonthAlreadyClosedError(ClosingError):
    """The month is CLOSED; it must be reopened before closing again."""

    code: str = "MONTH_ALREADY_CLOSED"

    def __init__(self, company_id: str, period_code: str):
        self.company_id = company_id
        self.period_code = period_code
        super().__init__(
            f"Month {period_code} is already closed. Reopen it to close again."
        )


class MonthNotClosedError(ClosingError):
    """Reopen requested for a month that was never closed."""

    code: str = "MONTH_NOT_CLOSED"

    def __init__(self, company_id: str, period_code: str):
        self.company_id = company_id
        self.period_code = period_code
        super().__init__(f"Month {period_code} is not closed")


class ClosingNotFoundError(ClosingError):
    """No closing record exists for the company and month."""

    code: str = "CLOSING_NOT_FOUND"

    def __init__(self, company_id: str, period_code: str):
        self.company_id = company_id
        self.period_code = period_code
        super().__init__(f"No closing found for month {period_code}")


class ClosingValidationError(ClosingError):
    """
    The month cannot be closed because the preview reported blocking errors.

    Carries the complete, aggregated list of validation errors (never just the
    first one) so the caller can show every missing input at once.
    """

    code: str = "CLOSING_VALIDATION_FAILED"

    def __init__(self, period_code: str, errors: list):
        self.period_code = period_code
        self.errors = list(errors)
        super().__init__(
            f"Cannot close month {period_code}: "
            f"{len(self.errors)} validation error(s)"
        )


class ConcurrentClosingError(ClosingError):
    """
    Another transaction closed or reopened the same month concurrently.

    Raised when the closing row version moved under us or when two first
    closes of the same month collide on the unique constraint.
    """

    code: str = "CONCURRENT_CLOSING"

    def __init__(self, company_id: str, period_code: str, operation: str):
        self.company_id = company_id
        self.period_code = period_code
        self.operation = operation
        super().__init__(
            f"Concurrent {operation} detected for month {period_code}; "
            f"no changes were applied"
        )


# Input-related exceptions


class InputError(CostsKernelError):
    """Base exception for invalid or unknown inputs."""

    code: str = "INPUT_ERROR"


class InvalidPeriodError(InputError):
    """Year or month outside the supported range."""

    code: str = "INVALID_PERIOD"

    def __init__(self, year: int, month: int, reason: str):
        self.year = year
        self.month = month
        self.reason = reason
        super().__init__(f"Invalid period {year}-{month}: {reason}")


class InvalidInputError(InputError):
    """A request field failed a domain rule (negative amount, empty reason)."""

    code: str = "INVALID_INPUT"

    def __init__(self, field: str, reason: str):
        self.field = field
        self.reason = reason
        super().__init__(f"Invalid {field}: {reason}")


class UserNotFoundError(InputError):
    code: str = "USER_NOT_FOUND"

    def __init__(self, user_id: str):
        self.user_id = user_id
        super().__init__(f"User not found: {user_id}")


class ProjectNotFoundError(InputError):
    code: str = "PROJECT_NOT_FOUND"

    def __init__(self, project_id: str):
        self.project_id = project_id
        super().__init__(f"Project not found: {project_id}")


class ProjectAccessDeniedError(InputError):
    """The actor is not a full admin and the project belongs to another team."""

    code: str = "PROJECT_ACCESS_DENIED"

    def __init__(self, project_id: str, actor_id: str):
        self.project_id = project_id
        self.actor_id = actor_id
        super().__init__(f"Access to project {project_id} denied")


class MonthlySalaryNotFoundError(InputError):
    code: str = "MONTHLY_SALARY_NOT_FOUND"

    def __init__(self, salary_id: str):
        self.salary_id = salary_id
        super().__init__(f"Monthly salary not found: {salary_id}")


class OverheadCostNotFoundError(InputError):
    code: str = "OVERHEAD_COST_NOT_FOUND"

    def __init__(self, overhead_id: str):
        self.overhead_id = overhead_id
        super().__init__(f"Overhead cost not found: {overhead_id}")


class ExternalCostNotFoundError(InputError):
    """No estimate/actual with this id on a project of the actor's company."""

    code: str = "EXTERNAL_COST_NOT_FOUND"

    def __init__(self, kind: str, cost_id: str):
        self.kind = kind
        self.cost_id = cost_id
        super().__init__(f"External cost {kind.lower()} not found: {cost_id}")

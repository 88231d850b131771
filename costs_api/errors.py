"""
Mapping of typed kernel exceptions onto HTTP responses.

Every error body carries the exception ``code`` and a human-readable
``message``.  ``ClosingValidationError`` also lists every blocking finding
so the client can show all missing inputs at once.
"""

from __future__ import annotations

from fastapi import Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from sqlalchemy.exc import IntegrityError

from costs_api.schemas import ValidationIssueOut
from costs_kernel.exceptions import (
    ClosingNotFoundError,
    ClosingValidationError,
    ConcurrentClosingError,
    CostsKernelError,
    ExternalCostNotFoundError,
    MonthlySalaryNotFoundError,
    OverheadCostNotFoundError,
    ProjectAccessDeniedError,
    ProjectNotFoundError,
    UserNotFoundError,
)
from costs_kernel.logging_config import get_logger

logger = get_logger("api.errors")

_STATUS_BY_TYPE: tuple[tuple[type[CostsKernelError], int], ...] = (
    (ClosingNotFoundError, 404),
    (UserNotFoundError, 404),
    (ProjectNotFoundError, 404),
    (MonthlySalaryNotFoundError, 404),
    (OverheadCostNotFoundError, 404),
    (ExternalCostNotFoundError, 404),
    (ProjectAccessDeniedError, 403),
    (ConcurrentClosingError, 409),
)


def status_for(exc: CostsKernelError) -> int:
    for exc_type, status in _STATUS_BY_TYPE:
        if isinstance(exc, exc_type):
            return status
    return 400


def _request_id(request: Request) -> str:
    return getattr(request.state, "request_id", None) or request.headers.get("x-request-id", "")


def register_exception_handlers(target) -> None:
    async def kernel_error_handler(request: Request, exc: CostsKernelError):
        status = status_for(exc)
        payload = {
            "code": exc.code,
            "message": str(exc),
            "request_id": _request_id(request),
        }
        if isinstance(exc, ClosingValidationError):
            payload["errors"] = [
                ValidationIssueOut.model_validate(issue).model_dump(mode="json")
                for issue in exc.errors
            ]
        log = logger.warning if status >= 409 else logger.info
        log("api_request_rejected", extra={"code": exc.code, "status": status})
        return JSONResponse(status_code=status, content=payload)

    async def validation_exception_handler(request: Request, exc: RequestValidationError):
        payload = {
            "code": "validation_error",
            "message": "Request validation failed",
            "details": jsonable_encoder(exc.errors()),
            "request_id": _request_id(request),
        }
        return JSONResponse(status_code=422, content=payload)

    async def integrity_error_handler(request: Request, exc: IntegrityError):
        logger.warning("api_constraint_violation", extra={"error": str(exc.orig)})
        payload = {
            "code": "constraint_violation",
            "message": "The request conflicts with existing data",
            "request_id": _request_id(request),
        }
        return JSONResponse(status_code=409, content=payload)

    target.add_exception_handler(CostsKernelError, kernel_error_handler)
    target.add_exception_handler(RequestValidationError, validation_exception_handler)
    target.add_exception_handler(IntegrityError, integrity_error_handler)

"""Mapping from ballot errors to HTTP responses."""

from __future__ import annotations

import logging

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError

from collection_ballot.core.errors import (
    AlreadyComputed,
    BallotError,
    DuplicateSubmission,
    Forbidden,
    InvalidAddressFormat,
    InvalidPeriodState,
    NoActivePeriod,
    NotAuthenticated,
    StaleTransition,
    StorageFailure,
    SubmissionNotFound,
    VoteCapExceeded,
    WrongPhase,
)
from collection_ballot.schemas.common import ErrorResponse

logger = logging.getLogger(__name__)

ERROR_STATUS: dict[type[BallotError], int] = {
    NotAuthenticated: status.HTTP_401_UNAUTHORIZED,
    Forbidden: status.HTTP_403_FORBIDDEN,
    NoActivePeriod: status.HTTP_404_NOT_FOUND,
    SubmissionNotFound: status.HTTP_404_NOT_FOUND,
    InvalidAddressFormat: status.HTTP_400_BAD_REQUEST,
    WrongPhase: status.HTTP_409_CONFLICT,
    DuplicateSubmission: status.HTTP_409_CONFLICT,
    VoteCapExceeded: status.HTTP_409_CONFLICT,
    InvalidPeriodState: status.HTTP_409_CONFLICT,
    StaleTransition: status.HTTP_409_CONFLICT,
    AlreadyComputed: status.HTTP_409_CONFLICT,
    StorageFailure: status.HTTP_503_SERVICE_UNAVAILABLE,
}


def status_for(exc: BallotError) -> int:
    """Return the HTTP status for ``exc``, honouring subclassing."""
    for cls in type(exc).__mro__:
        if cls in ERROR_STATUS:
            return ERROR_STATUS[cls]
    return status.HTTP_400_BAD_REQUEST


async def ballot_error_handler(request: Request, exc: BallotError) -> JSONResponse:
    """Render a ballot error as ``{"code", "detail"}``."""
    status_code = status_for(exc)
    if status_code >= status.HTTP_500_INTERNAL_SERVER_ERROR:
        logger.error("%s %s failed: %s", request.method, request.url.path, exc)

    headers = None
    if isinstance(exc, NotAuthenticated):
        headers = {"WWW-Authenticate": "Bearer"}
    return JSONResponse(
        status_code=status_code,
        content={"code": exc.code, "detail": exc.message},
        headers=headers,
    )


def error_responses(*status_codes: int) -> dict[int | str, dict[str, object]]:
    """OpenAPI ``responses`` entries documenting the error body for ``status_codes``."""
    return {code: {"model": ErrorResponse} for code in status_codes}


async def storage_error_handler(request: Request, exc: SQLAlchemyError) -> JSONResponse:
    """Render storage errors that escaped the services as :class:`StorageFailure`."""
    logger.warning("%s %s hit a storage error: %s", request.method, request.url.path, exc)
    return await ballot_error_handler(request, StorageFailure())


def register_error_handlers(app: FastAPI) -> None:
    app.add_exception_handler(BallotError, ballot_error_handler)  # type: ignore[arg-type]
    app.add_exception_handler(SQLAlchemyError, storage_error_handler)  # type: ignore[arg-type]

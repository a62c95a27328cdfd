"""
Maps core errors onto HTTP responses
"""
import logging

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from clubhouse.exceptions import (
    ClubhouseError, ValidationError, UnknownPlayerError, NotFoundError,
    DuplicatePlayerError, PersistenceFailure, AggregationInputInconsistency,
)

logger = logging.getLogger(__name__)

STATUS_CODES = [
    (ValidationError, 422),
    (UnknownPlayerError, 400),
    (NotFoundError, 404),
    (DuplicatePlayerError, 409),
    (PersistenceFailure, 503),
    (AggregationInputInconsistency, 500),
]


def status_for(exc: ClubhouseError) -> int:
    for error_type, status_code in STATUS_CODES:
        if isinstance(exc, error_type):
            return status_code
    return 500


async def clubhouse_error_handler(request: Request, exc: ClubhouseError) -> JSONResponse:
    status_code = status_for(exc)
    if isinstance(exc, PersistenceFailure):
        # Scored data is kept in memory, the operator only needs to retry
        logger.error("Save failed on %s: %s", request.url.path, exc)
        return JSONResponse(status_code=status_code, content={"detail": "Save failed, please retry"})
    if isinstance(exc, AggregationInputInconsistency):
        logger.error("Data integrity fault on %s (match %s): %s", request.url.path, exc.match_id, exc)

    content = {"detail": str(exc)}
    if isinstance(exc, ValidationError):
        content["errors"] = exc.errors
    if isinstance(exc, AggregationInputInconsistency):
        content["match_id"] = exc.match_id
    return JSONResponse(status_code=status_code, content=content)


def register_error_handlers(app: FastAPI):
    app.add_exception_handler(ClubhouseError, clubhouse_error_handler)

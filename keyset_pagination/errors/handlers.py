"""Optional FastAPI exception handlers for host APIs that expose keyset pagination.

The library never installs these itself. A host application opts in with::

    from keyset_pagination.errors.handlers import register_exception_handlers

    register_exception_handlers(app)
"""

import logging
from fastapi import Request
from fastapi.responses import JSONResponse
from pydantic import ValidationError

from .problem_details import (
    ProblemDetailException,
    create_problem_response
)

logger = logging.getLogger(__name__)


async def problem_detail_exception_handler(
    request: Request,
    exc: ProblemDetailException
) -> JSONResponse:
    """Handle ProblemDetailException instances."""
    logger.info(
        f"Problem detail exception: {exc.status} - {exc.title}",
        extra={
            "status_code": exc.status,
            "path": str(request.url.path),
            "method": request.method,
            "detail": exc.detail
        }
    )
    return exc.to_response(request)


async def pydantic_validation_exception_handler(
    request: Request,
    exc: ValidationError
) -> JSONResponse:
    """Handle pydantic validation errors raised while building page requests."""
    errors = exc.errors(include_url=False, include_context=False, include_input=False)
    logger.info(
        f"Pydantic validation error: {len(errors)} errors",
        extra={
            "path": str(request.url.path),
            "method": request.method,
            "errors": errors
        }
    )

    error_messages = []
    for error in errors:
        loc = " -> ".join(str(x) for x in error["loc"])
        error_messages.append(f"{loc}: {error['msg']}")

    detail = "Data validation failed: " + "; ".join(error_messages)

    return create_problem_response(
        status=400,
        title="Validation Error",
        detail=detail,
        request=request,
        validation_errors=errors
    )


def register_exception_handlers(app):
    """Register the pagination exception handlers with a FastAPI app."""
    app.add_exception_handler(ProblemDetailException, problem_detail_exception_handler)
    app.add_exception_handler(ValidationError, pydantic_validation_exception_handler)

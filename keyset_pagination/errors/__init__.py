"""Error handling module for keyset pagination."""

from .problem_details import (
    ProblemDetail,
    ProblemDetailException,
    BadRequestError,
    UnprocessableEntityError,
    InvalidOrderError,
    InvalidCursorError,
    ConflictingCursorsError,
    InvalidFilterError,
    InvalidLimitError,
    create_problem_response
)

__all__ = [
    "ProblemDetail",
    "ProblemDetailException",
    "BadRequestError",
    "UnprocessableEntityError",
    "InvalidOrderError",
    "InvalidCursorError",
    "ConflictingCursorsError",
    "InvalidFilterError",
    "InvalidLimitError",
    "create_problem_response"
]

"""Problem Details (RFC 9457) errors raised by keyset pagination."""

from typing import Optional, Any
from pydantic import BaseModel, Field
from fastapi import Request
from fastapi.responses import JSONResponse


class ProblemDetail(BaseModel):
    """Problem Details as defined in RFC 9457."""

    type: str = Field(default="about:blank", description="A URI reference that identifies the problem type")
    title: str = Field(description="A short, human-readable summary of the problem type")
    status: int = Field(description="The HTTP status code")
    detail: Optional[str] = Field(default=None, description="A human-readable explanation specific to this occurrence")
    instance: Optional[str] = Field(default=None, description="A URI reference that identifies the specific occurrence")

    # Allow additional properties for extensions
    model_config = {"extra": "allow"}


class ProblemDetailException(Exception):
    """Base exception for Problem Details responses."""

    def __init__(
        self,
        status: int,
        title: str,
        detail: Optional[str] = None,
        type_uri: str = "about:blank",
        instance: Optional[str] = None,
        **extensions: Any
    ):
        self.status = status
        self.title = title
        self.detail = detail
        self.type_uri = type_uri
        self.instance = instance
        self.extensions = extensions
        super().__init__(detail or title)

    def to_problem_detail(self, request: Optional[Request] = None) -> ProblemDetail:
        """Convert to ProblemDetail model."""
        instance = self.instance
        if instance is None and request:
            instance = str(request.url.path)

        problem = ProblemDetail(
            type=self.type_uri,
            title=self.title,
            status=self.status,
            detail=self.detail,
            instance=instance
        )

        for key, value in self.extensions.items():
            setattr(problem, key, value)

        return problem

    def to_response(self, request: Optional[Request] = None) -> JSONResponse:
        """Convert to JSONResponse with Problem Details format."""
        problem = self.to_problem_detail(request)
        return JSONResponse(
            status_code=self.status,
            content=problem.model_dump(mode="json", exclude_none=True),
            headers={"Content-Type": "application/problem+json"}
        )


class BadRequestError(ProblemDetailException):
    """400 Bad Request error."""

    def __init__(self, detail: str, **extensions: Any):
        super().__init__(
            status=400,
            title="Bad Request",
            detail=detail,
            **extensions
        )


class UnprocessableEntityError(ProblemDetailException):
    """422 Unprocessable Entity error."""

    def __init__(self, detail: str, **extensions: Any):
        super().__init__(
            status=422,
            title="Unprocessable Entity",
            detail=detail,
            **extensions
        )


class InvalidOrderError(BadRequestError):
    """An order term has an unknown direction or an unsupported shape."""

    def __init__(self, detail: str, **extensions: Any):
        super().__init__(detail, error_code="INVALID_ORDER", **extensions)


class InvalidCursorError(BadRequestError):
    """A cursor could not be decoded or does not fit the requested order."""

    def __init__(self, detail: str, cursor: Optional[str] = None, **extensions: Any):
        if cursor is not None:
            extensions["cursor"] = cursor
        super().__init__(detail, error_code="INVALID_CURSOR", **extensions)


class ConflictingCursorsError(BadRequestError):
    """Both ``after`` and ``before`` were supplied."""

    def __init__(self, detail: str = "Only one of 'after' or 'before' may be supplied", **extensions: Any):
        super().__init__(detail, error_code="CONFLICTING_CURSORS", **extensions)


class InvalidFilterError(BadRequestError):
    """A filter cannot be translated by the data-store adapter."""

    def __init__(self, detail: str, **extensions: Any):
        super().__init__(detail, error_code="INVALID_FILTER", **extensions)


class InvalidLimitError(UnprocessableEntityError):
    """Requested page size is outside the configured bounds."""

    def __init__(self, limit: Any, max_page_size: int, **extensions: Any):
        super().__init__(
            f"limit must be between 1 and {max_page_size}, got {limit!r}",
            error_code="INVALID_LIMIT",
            max_page_size=max_page_size,
            **extensions
        )


def create_problem_response(
    status: int,
    title: str,
    detail: Optional[str] = None,
    type_uri: str = "about:blank",
    instance: Optional[str] = None,
    request: Optional[Request] = None,
    **extensions: Any
) -> JSONResponse:
    """Create a Problem Details response."""
    if instance is None and request:
        instance = str(request.url.path)

    problem = ProblemDetail(
        type=type_uri,
        title=title,
        status=status,
        detail=detail,
        instance=instance
    )

    for key, value in extensions.items():
        setattr(problem, key, value)

    return JSONResponse(
        status_code=status,
        content=problem.model_dump(mode="json", exclude_none=True),
        headers={"Content-Type": "application/problem+json"}
    )

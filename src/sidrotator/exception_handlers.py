"""Global exception handlers for standardized error responses.

Rotation failures answer with the short text bodies devices expect.
Everything else uses RFC 7807 Problem Details.
"""

from fastapi import Request
from fastapi.responses import JSONResponse, PlainTextResponse
from starlette.exceptions import HTTPException

from sidrotator.core.logging import logger
from sidrotator.domain.errors import RotationError
from sidrotator.models.errors import ProblemDetail


async def rotation_exception_handler(
    request: Request, exc: RotationError
) -> PlainTextResponse:  # noqa: ASYNC100
    """Handle RotationError with its status code and text body.

    Args:
        request: The FastAPI request object.
        exc: The RotationError that was raised.

    Returns:
        PlainTextResponse with the error's short body.
    """
    # Reasons may echo request values containing braces.
    logger.bind(
        status_code=exc.status_code,
        path=str(request.url.path),
        method=request.method,
    ).warning(
        f"{type(exc).__name__}: {exc.status_code} {exc.response_body!r} - {exc.reason}"
    )

    return PlainTextResponse(exc.response_body, status_code=exc.status_code)


async def http_exception_handler(
    request: Request, exc: HTTPException
) -> JSONResponse:  # noqa: ASYNC100
    """Handle HTTPException with RFC 7807 ProblemDetail response.

    Args:
        request: The FastAPI request object.
        exc: The HTTPException that was raised.

    Returns:
        JSONResponse with ProblemDetail body.
    """
    logger.error(
        f"HTTPException: {exc.status_code} - {exc.detail}",
        extra={
            "status_code": exc.status_code,
            "detail": exc.detail,
            "path": str(request.url.path),
            "method": request.method,
        },
    )

    problem_detail = ProblemDetail(
        title="An error occurred",
        status=exc.status_code,
        detail=str(exc.detail),
        instance=str(request.url.path),
    )

    return JSONResponse(
        status_code=exc.status_code,
        content=problem_detail.model_dump(exclude_none=True),
        headers=getattr(exc, "headers", None),
    )


async def general_exception_handler(
    request: Request, exc: Exception
) -> JSONResponse:  # noqa: ASYNC100
    """Handle unexpected exceptions with 500 Internal Server Error.

    Args:
        request: The FastAPI request object.
        exc: The exception that was raised.

    Returns:
        JSONResponse with ProblemDetail body.
    """
    logger.exception(
        f"Unexpected error: {type(exc).__name__}",
        extra={
            "exception_type": type(exc).__name__,
            "path": str(request.url.path),
            "method": request.method,
        },
    )

    problem_detail = ProblemDetail(
        title="Internal Server Error",
        status=500,
        detail="An unexpected error occurred. Please try again later.",
        instance=str(request.url.path),
    )

    return JSONResponse(
        status_code=500,
        content=problem_detail.model_dump(exclude_none=True),
    )

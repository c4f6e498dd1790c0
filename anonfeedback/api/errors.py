"""
Error responses - conversion of failures into the response envelope.

Routes convert domain errors themselves; the handlers installed here
cover failures raised before a route body runs (request validation and
authentication dependencies).
"""

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from anonfeedback.domain.exceptions import MessageBoardError


def error_response(error: MessageBoardError) -> JSONResponse:
    """Build a ``{success: false, message}`` response for a domain error."""
    return JSONResponse(
        status_code=error.status_code,
        content={"success": False, "message": error.message},
    )


def _describe_validation_error(exc: RequestValidationError) -> str:
    parts = []
    for error in exc.errors():
        field = ".".join(str(part) for part in error["loc"] if part not in ("body", "query"))
        parts.append(f"{field}: {error['msg']}" if field else error["msg"])
    return "; ".join(parts) or "Invalid request"


async def _validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    return JSONResponse(
        status_code=400,
        content={"success": False, "message": _describe_validation_error(exc)},
    )


async def _domain_error_handler(request: Request, exc: MessageBoardError) -> JSONResponse:
    return error_response(exc)


def install_exception_handlers(app: FastAPI) -> None:
    """Register the envelope-producing handlers on an application."""
    app.add_exception_handler(RequestValidationError, _validation_error_handler)
    app.add_exception_handler(MessageBoardError, _domain_error_handler)

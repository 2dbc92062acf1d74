"""Error plumbing shared by the API routers"""

import re
from contextlib import contextmanager
from typing import Any, Optional, Type, TypeVar

import pydantic
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from botpanel.exceptions import BotPanelError, InternalError, ValidationError
from botpanel.utils.logger import get_logger

logger = get_logger(__name__)

ModelT = TypeVar("ModelT", bound=BaseModel)

NON_NEGATIVE_INT = re.compile(r"[0-9]+")


def register_exception_handlers(app: FastAPI):
    """Render BotPanel errors as ``{"message": ..., "errors": [...]}``"""

    @app.exception_handler(BotPanelError)
    async def botpanel_error_handler(request: Request, exc: BotPanelError):
        return JSONResponse(status_code=exc.status_code, content=exc.to_dict())

    @app.exception_handler(Exception)
    async def unexpected_error_handler(request: Request, exc: Exception):
        logger.error(f"Unhandled error on {request.method} {request.url.path}: {exc}", exc_info=True)
        return JSONResponse(status_code=500, content={"message": "Internal Server Error"})


@contextmanager
def internal_errors(message: str):
    """Turn unexpected faults into an InternalError with a generic client message"""
    try:
        yield
    except BotPanelError:
        raise
    except Exception as e:
        logger.error(f"{message}: {e}", exc_info=True)
        raise InternalError(message) from e


async def read_json_body(request: Request, message: str) -> Any:
    try:
        return await request.json()
    except ValueError as e:
        raise ValidationError(
            message,
            errors=[{"type": "json_invalid", "loc": ["body"], "msg": "Request body is not valid JSON"}],
        ) from e


def validate_payload(model: Type[ModelT], payload: Any, message: str) -> ModelT:
    """Validate ``payload`` against ``model``; violations become a 400 with field errors"""
    try:
        return model.model_validate(payload)
    except pydantic.ValidationError as e:
        errors = e.errors(include_url=False, include_context=False, include_input=False)
        raise ValidationError(message, errors=errors) from e


def parse_id(raw: str, message: str) -> int:
    """Path ids must be non-negative decimal integers"""
    if not NON_NEGATIVE_INT.fullmatch(raw or ""):
        raise ValidationError(message)
    try:
        return int(raw)
    except ValueError as e:
        # past the interpreter's integer string conversion limit
        raise ValidationError(message) from e


def parse_limit(raw: Optional[str]) -> Optional[int]:
    """Permissive: anything that is not a non-negative integer means no limit"""
    if raw is None or not NON_NEGATIVE_INT.fullmatch(raw.strip()):
        return None
    try:
        return int(raw.strip())
    except ValueError:
        return None

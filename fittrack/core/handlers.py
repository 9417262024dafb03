import logging

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError

from fittrack.core.errors import FitTrackError, StorageError

logger = logging.getLogger(__name__)

# Сообщения для отсутствующих обязательных полей, как их ждет клиент
REQUIRED_FIELD_MESSAGES = {
    "workoutName": "Workout name and duration are required",
    "duration": "Workout name and duration are required",
    "message": "Message cannot be empty",
    "muscleGroup": "Please specify a muscle group",
}


def error_body(message: str, error=None) -> dict:
    body = {"success": False, "message": message}
    if error is not None:
        body["error"] = error
    return body


def _validation_message(exc: RequestValidationError) -> str:
    for err in exc.errors():
        loc = err.get("loc", ())
        field = loc[-1] if loc else None
        if field in REQUIRED_FIELD_MESSAGES:
            return REQUIRED_FIELD_MESSAGES[field]
    return "Validation error"


def register_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(FitTrackError)
    async def fittrack_error_handler(request: Request, exc: FitTrackError):
        if exc.status_code >= 500:
            logger.error("%s %s failed: %s (%s)", request.method, request.url.path, exc.message, exc.detail)
        # Подробности зависимостей/хранилища только в логах
        error = exc.detail if exc.status_code < 500 else None
        return JSONResponse(status_code=exc.status_code, content=error_body(exc.message, error))

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(request: Request, exc: RequestValidationError):
        errors = [
            {"field": ".".join(str(p) for p in e.get("loc", ())), "message": e.get("msg")}
            for e in exc.errors()
        ]
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content=error_body(_validation_message(exc), errors),
        )

    @app.exception_handler(SQLAlchemyError)
    async def storage_error_handler(request: Request, exc: SQLAlchemyError):
        logger.exception("Storage error on %s %s", request.method, request.url.path)
        return JSONResponse(
            status_code=StorageError.status_code,
            content=error_body(StorageError.default_message),
        )

    @app.exception_handler(Exception)
    async def unhandled_error_handler(request: Request, exc: Exception):
        logger.exception("Unhandled error on %s %s", request.method, request.url.path)
        return JSONResponse(
            status_code=StorageError.status_code,
            content=error_body(StorageError.default_message),
        )

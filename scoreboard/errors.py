import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

logger = logging.getLogger("uvicorn")


class ScoreboardError(Exception):
    status_code = 500
    message = "internal server error"

    def __init__(self, message=None, details=None):
        super().__init__(message or self.message)
        if message:
            self.message = message
        self.details = details

    def to_body(self) -> dict:
        body = {"error": self.message}
        if self.details is not None:
            body["details"] = self.details
        return body


class InvalidRequest(ScoreboardError):
    status_code = 400
    message = "invalid request data"


class AuthenticationRequired(ScoreboardError):
    status_code = 401
    message = "login required"


class NotFound(ScoreboardError):
    status_code = 404
    message = "user not found"


class StoreFailure(ScoreboardError):
    status_code = 500
    message = "score store unavailable"


async def scoreboard_error_handler(request: Request, exc: ScoreboardError):
    return JSONResponse(status_code=exc.status_code, content=exc.to_body())


async def request_validation_handler(request: Request, exc: RequestValidationError):
    details = [
        {"field": ".".join(str(part) for part in error["loc"]), "code": "invalid_type", "message": error["msg"]}
        for error in exc.errors()
    ]
    return JSONResponse(status_code=400, content={"error": InvalidRequest.message, "details": details})


async def unhandled_error_handler(request: Request, exc: Exception):
    logger.exception(f"Unhandled error on {request.method} {request.url.path}")
    return JSONResponse(status_code=500, content={"error": ScoreboardError.message})


def register_exception_handlers(app: FastAPI):
    app.add_exception_handler(ScoreboardError, scoreboard_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
    app.add_exception_handler(Exception, unhandled_error_handler)

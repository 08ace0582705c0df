import logging
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

logger = logging.getLogger(__name__)


class AppError(Exception):
    """Base class for errors that are turned into a JSON response at the boundary."""

    status_code = 500
    default_message = "Internal server error"

    def __init__(self, message: str = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class ValidationError(AppError):
    status_code = 400
    default_message = "Invalid request"


class InvalidOtpError(AppError):
    # Not-found, expired and exhausted records all surface with the same message
    # so a caller cannot tell whether an identifier has an account.
    status_code = 400
    default_message = "Invalid or expired OTP"


class NotFoundError(InvalidOtpError):
    pass


class ExpiredError(InvalidOtpError):
    pass


class AttemptsExceededError(InvalidOtpError):
    pass


class TransportError(AppError):
    status_code = 500
    default_message = "Failed to send OTP"


class BackendError(AppError):
    status_code = 500
    default_message = "Error communicating with the school backend"


class ServerError(AppError):
    status_code = 500


def register_exception_handlers(app: FastAPI) -> None:

    @app.exception_handler(AppError)
    async def app_error_handler(request: Request, exc: AppError):
        if exc.status_code >= 500:
            logger.error(f"{type(exc).__name__} on {request.url.path}: {exc.message}")
        return JSONResponse(
            status_code=exc.status_code,
            content={
                "success": False,
                "message": exc.message
            }
        )

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(request: Request, exc: RequestValidationError):
        error = exc.errors()[0]
        loc = ".".join(str(x) for x in error["loc"] if x != "body")
        return JSONResponse(
            status_code=400,
            content={
                "success": False,
                "message": f"Invalid {loc}: {error['msg'].lower()}" if loc else error["msg"]
            }
        )

    @app.exception_handler(Exception)
    async def unhandled_error_handler(request: Request, exc: Exception):
        logger.exception(f"Unhandled error on {request.url.path}")
        return JSONResponse(
            status_code=500,
            content={
                "success": False,
                "message": "Internal server error"
            }
        )

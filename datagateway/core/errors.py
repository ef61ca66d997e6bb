"""
Gateway error taxonomy.

Every failure that reaches the HTTP boundary is a GatewayError subclass
carrying the status code it maps to. Query execution failures are not in
this hierarchy: they travel back to the caller as QueryResult.error.
"""
import logging
import re

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

logger = logging.getLogger(__name__)

# user:password@ in URLs and password=... pairs in driver messages
_URL_CREDENTIALS = re.compile(r"(://[^:/@\s]+:)([^@\s]+)(@)")
_PASSWORD_PAIR = re.compile(r"(password\s*[=:]\s*)(\S+)", re.I)


class GatewayError(Exception):
    """Base class for errors surfaced to the HTTP layer"""
    status_code: int = 500

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code


class ValidationError(GatewayError):
    status_code = 400


class AuthenticationError(GatewayError):
    status_code = 401


class AuthorizationError(GatewayError):
    status_code = 403


class NotFoundError(GatewayError):
    status_code = 404


class UnsupportedEngineError(GatewayError):
    status_code = 400

    def __init__(self, engine: str):
        super().__init__(f"Unsupported database type: {engine}")
        self.engine = engine


class DataSourceConnectionError(GatewayError):
    """Handshake or authentication failure against the external database"""
    status_code = 400


class SchemaIntrospectionError(GatewayError):
    status_code = 500


class AIServiceError(GatewayError):
    status_code = 502


def redact(message: str) -> str:
    """Mask credentials that drivers sometimes echo back in their messages"""
    masked = _URL_CREDENTIALS.sub(r"\1****\3", message or "")
    return _PASSWORD_PAIR.sub(r"\1****", masked)


async def gateway_error_handler(request: Request, exc: GatewayError) -> JSONResponse:
    if exc.status_code >= 500:
        logger.error(f"{request.method} {request.url.path} -> {exc.status_code}: {redact(exc.message)}")
    else:
        logger.info(f"{request.method} {request.url.path} -> {exc.status_code}: {redact(exc.message)}")

    headers = {"WWW-Authenticate": "Bearer"} if exc.status_code == 401 else None
    return JSONResponse(status_code=exc.status_code, content={"message": exc.message}, headers=headers)


async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Malformed request bodies are a 400 with the field details"""
    return JSONResponse(status_code=400, content={"message": jsonable_encoder(exc.errors())})


def register_error_handlers(app: FastAPI) -> None:
    app.add_exception_handler(GatewayError, gateway_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)

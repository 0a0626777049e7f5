# reader/api/app.py
import logging

from fastapi import FastAPI, HTTPException, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from reader.api.routers.books import router as books_router
from reader.api.routers.reading import router as reading_router
from reader.container import Services
from reader.errors import ReaderError, StorageError

logger = logging.getLogger(__name__)

UNAUTHORIZED_CODE = 1001
INTERNAL_ERROR_CODE = 9999


def _error(status_code: int, code: int, message: str) -> JSONResponse:
    return JSONResponse({"code": code, "message": message}, status_code=status_code)


def create_app(services: Services) -> FastAPI:
    """Build the API around already-wired services."""
    app = FastAPI(title=services.config.app.name, version=services.config.app.version)
    app.state.services = services

    @app.exception_handler(ReaderError)
    async def handle_reader_error(request: Request, exc: ReaderError):
        if isinstance(exc, StorageError) or exc.status_code >= 500:
            # Storage details stay in the log
            logger.error(
                "Internal error on %s %s: %s",
                request.method,
                request.url.path,
                exc,
                exc_info=exc,
            )
            return _error(500, INTERNAL_ERROR_CODE, "Internal server error")
        return _error(exc.status_code, exc.error_code, exc.message)

    @app.exception_handler(HTTPException)
    async def handle_http_error(request: Request, exc: HTTPException):
        code = UNAUTHORIZED_CODE if exc.status_code == 401 else exc.status_code
        return _error(exc.status_code, code, str(exc.detail))

    @app.exception_handler(RequestValidationError)
    async def handle_validation_error(request: Request, exc: RequestValidationError):
        first = exc.errors()[0] if exc.errors() else {}
        field = ".".join(str(part) for part in first.get("loc", ()))
        return _error(400, 400, f"Invalid request: {field} {first.get('msg', '')}".strip())

    app.include_router(books_router, prefix="/api/books", tags=["books"])
    app.include_router(reading_router, prefix="/api/reading", tags=["reading"])
    return app

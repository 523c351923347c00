"""Main FastAPI application module.

This module initializes the FastAPI application, registers the route handlers
and turns every error into a ``{data, message, error}`` envelope.
"""

import logging
from http import HTTPStatus

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from sqlalchemy.exc import SQLAlchemyError
from starlette.exceptions import HTTPException as StarletteHTTPException

from api.routes import auth, books, lending, roles
from config import API_HOST, API_PORT, APP_NAME, APP_VERSION, CORS_ALLOWED_ORIGINS
from core.database import SessionLocal, init_db
from core.exceptions import LibraryError
from core.logging_config import setup_logging
from core.responses import internal_error, respond
from utils.permission_manager import PermissionManager

# Setup logging
setup_logging()

logger = logging.getLogger(__name__)

# Initialize FastAPI application
app = FastAPI(
    title=APP_NAME,
    description="Library management API: authentication, roles and book lending.",
    version=APP_VERSION,
)

# Configure CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ALLOWED_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# --- Error handling ---


@app.exception_handler(LibraryError)
async def library_error_handler(request: Request, exc: LibraryError):
    status = HTTPStatus(exc.status_code)
    return respond(status, exc.message, error=status.phrase)


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError):
    """Report the first failing field rule with 412."""
    errors = exc.errors()
    message = "The given data was invalid."
    if errors:
        first = errors[0]
        loc = list(first.get("loc", ()))
        if loc and loc[0] in ("body", "query", "path", "header"):
            loc = loc[1:]
        field = ".".join(str(part) for part in loc)
        message = f"{field}: {first.get('msg')}" if field else str(first.get("msg"))
    return respond(HTTPStatus.PRECONDITION_FAILED, message, error="Validation Error")


@app.exception_handler(StarletteHTTPException)
async def http_error_handler(request: Request, exc: StarletteHTTPException):
    status = HTTPStatus(exc.status_code)
    return respond(status, str(exc.detail), error=status.phrase)


@app.exception_handler(SQLAlchemyError)
async def database_error_handler(request: Request, exc: SQLAlchemyError):
    logger.error(
        "Database error on %s %s", request.method, request.url.path, exc_info=exc
    )
    return internal_error()


@app.exception_handler(Exception)
async def unhandled_error_handler(request: Request, exc: Exception):
    logger.error(
        "Unhandled error on %s %s", request.method, request.url.path, exc_info=exc
    )
    return internal_error()


# Register route handlers
app.include_router(auth.router)
app.include_router(roles.router)
app.include_router(books.router)
app.include_router(lending.router)


@app.on_event("startup")
def startup_tasks() -> None:
    """Create tables and seed default roles and permissions."""
    init_db()
    db = SessionLocal()
    try:
        PermissionManager(db).seed_defaults()
    finally:
        db.close()


@app.get("/", summary="API root", tags=["Info"])
def root() -> dict:
    """API root, returns API information and documentation links."""
    return {
        "name": APP_NAME,
        "version": APP_VERSION,
        "docs": {
            "swagger": "/docs",
            "redoc": "/redoc",
        },
        "health": "/api/health",
    }


@app.get("/api/health", summary="Health check", tags=["Health"])
def health() -> dict:
    """Health check endpoint.

    Returns:
        Dictionary with status "ok".
    """
    return {"status": "ok"}


# --- Startup code for direct execution ---
if __name__ == "__main__":
    import uvicorn

    logger.info("Starting %s on http://%s:%s", APP_NAME, API_HOST, API_PORT)
    uvicorn.run("app:app", host=API_HOST, port=API_PORT, reload=True)

import asyncio
import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from pathlib import Path
from uuid import uuid4

from dotenv import load_dotenv


# Load .env FIRST before any other imports that might need env vars
PROJECT_DIR = Path(__file__).parent.parent
load_dotenv(PROJECT_DIR / ".env")

from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.responses import JSONResponse
from pydantic import ValidationError
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded
from sqlalchemy.exc import DatabaseError, IntegrityError, OperationalError
from starlette.requests import Request

from .ai.router import router as ai_router
from .ai.service import AIService
from .assignments.router import router as assignments_router
from .auth.exceptions import AuthenticationError, AuthorizationError, UserAlreadyExistsError
from .auth.router import router as auth_router
from .challenges.router import router as challenges_router
from .config.logging import setup_logging
from .config.settings import Settings, get_settings
from .courses.router import lessons_router
from .courses.router import router as courses_router
from .database import Database, create_all_tables
from .exceptions import (
    DuplicateSubmissionError,
    OracleUnavailableError,
    ResourceNotFoundError,
    StorageFailureError,
    ValidationError as CustomValidationError,
)
from .middleware.error_handlers import (
    ErrorCategory,
    ErrorCode,
    format_error_response,
    handle_authentication_errors,
    handle_authorization_errors,
    handle_conflict_errors,
    handle_database_errors,
    handle_duplicate_submission_errors,
    handle_not_found_errors,
    handle_oracle_errors,
    handle_storage_failure_errors,
    handle_validation_errors,
    log_error_context,
)
from .middleware.security import SimpleSecurityMiddleware, limiter
from .progress.router import router as progress_router
from .users.router import router as users_router


setup_logging()
logger = logging.getLogger(__name__)


def _register_routers(app: FastAPI) -> None:
    """Register all application routers."""
    app.include_router(auth_router)
    app.include_router(users_router)
    app.include_router(courses_router)
    app.include_router(lessons_router)
    app.include_router(progress_router)
    app.include_router(assignments_router)
    app.include_router(challenges_router)
    app.include_router(ai_router)


async def _startup_database(database: Database) -> None:
    """Create tables with retry logic while the database comes up."""
    max_retries = 5
    retry_delay = 1  # seconds

    for attempt in range(max_retries):
        try:
            await create_all_tables(database.engine)
            logger.info("Database initialization completed successfully")
            break

        except OperationalError:
            if attempt == max_retries - 1:
                logger.exception("Startup failed after %d attempts", max_retries)
                raise

            logger.warning(
                "Database connection attempt %d failed, retrying in %ds...",
                attempt + 1,
                retry_delay,
            )
            await asyncio.sleep(retry_delay)
            retry_delay *= 2  # Exponential backoff


async def _shutdown_cleanup(database: Database) -> None:
    logger.info("Starting graceful shutdown...")
    try:
        await database.dispose()
        logger.info("Database engine disposed successfully")
    except OperationalError as e:
        logger.warning(f"Error disposing database engine: {e}")
    logger.info("Shutdown complete")


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan events."""
    database: Database = app.state.database
    await _startup_database(database)

    yield

    await _shutdown_cleanup(database)


def create_app(
    settings: Settings | None = None,
    database: Database | None = None,
    ai_service: AIService | None = None,
) -> FastAPI:
    """Create and configure the FastAPI application.

    The storage handle and AI service are built here and attached to
    ``app.state``; tests pass their own in-memory database and fake oracles.
    """
    try:
        settings = settings or get_settings()
    except Exception:
        logger.exception("Failed to load settings")
        raise

    app = FastAPI(
        title="EduSpark API",
        description="Courses, progression, assignments and AI tutoring for the EduSpark learning platform",
        version="0.1.0",
        debug=settings.DEBUG,
        lifespan=lifespan if settings.ENVIRONMENT != "test" else None,
    )

    app.state.database = database or Database.from_url(settings.DATABASE_URL, echo=settings.DEBUG)
    app.state.ai_service = ai_service or AIService(app.state.database)

    # Note: When allow_credentials=True, allow_origins cannot be ["*"]
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.add_middleware(GZipMiddleware, minimum_size=1000)

    app.add_middleware(SimpleSecurityMiddleware)

    app.state.limiter = limiter
    app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)

    @app.exception_handler(ResourceNotFoundError)
    async def resource_not_found_handler(request: Request, exc: ResourceNotFoundError) -> JSONResponse:
        return await handle_not_found_errors(request, exc)

    # Authentication errors (401)
    @app.exception_handler(AuthenticationError)
    async def auth_error_handler(request: Request, exc: AuthenticationError) -> JSONResponse:
        return await handle_authentication_errors(request, exc)

    # Authorization errors (403)
    @app.exception_handler(AuthorizationError)
    async def authorization_error_handler(request: Request, exc: AuthorizationError) -> JSONResponse:
        return await handle_authorization_errors(request, exc)

    # Conflicts (409)
    @app.exception_handler(UserAlreadyExistsError)
    async def user_exists_handler(request: Request, exc: UserAlreadyExistsError) -> JSONResponse:
        return await handle_conflict_errors(request, exc)

    @app.exception_handler(DuplicateSubmissionError)
    async def duplicate_submission_handler(request: Request, exc: DuplicateSubmissionError) -> JSONResponse:
        return await handle_duplicate_submission_errors(request, exc)

    # Validation errors (400/422)
    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
        return await handle_validation_errors(request, exc)

    @app.exception_handler(ValidationError)
    async def pydantic_validation_handler(request: Request, exc: ValidationError) -> JSONResponse:
        return await handle_validation_errors(request, exc)

    @app.exception_handler(CustomValidationError)
    async def custom_validation_handler(request: Request, exc: CustomValidationError) -> JSONResponse:
        return await handle_validation_errors(request, exc)

    # Database errors
    @app.exception_handler(StorageFailureError)
    async def storage_failure_handler(request: Request, exc: StorageFailureError) -> JSONResponse:
        return await handle_storage_failure_errors(request, exc)

    @app.exception_handler(IntegrityError)
    async def integrity_error_handler(request: Request, exc: IntegrityError) -> JSONResponse:
        return await handle_database_errors(request, exc)

    @app.exception_handler(DatabaseError)
    async def database_error_handler(request: Request, exc: DatabaseError) -> JSONResponse:
        return await handle_database_errors(request, exc)

    @app.exception_handler(OperationalError)
    async def operational_error_handler(request: Request, exc: OperationalError) -> JSONResponse:
        return await handle_database_errors(request, exc)

    # External service errors (503)
    @app.exception_handler(OracleUnavailableError)
    async def oracle_error_handler(request: Request, exc: OracleUnavailableError) -> JSONResponse:
        return await handle_oracle_errors(request, exc)

    @app.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception) -> JSONResponse:
        """Global exception handler for unhandled errors."""
        error_id = uuid4()
        log_error_context(request, exc, error_id)

        # Return generic error response without exposing internal details
        return format_error_response(
            category=ErrorCategory.INTERNAL,
            code=ErrorCode.INTERNAL,
            detail="An unexpected error occurred",
            status_code=500,
            metadata={"error_id": str(error_id)},
            suggestions=["Please try again later", "If the problem persists, contact support with the error ID"],
        )

    @app.get("/health")
    async def health_check() -> dict[str, str]:
        """Check application health status."""
        return {"status": "healthy"}

    _register_routers(app)

    return app


app = create_app()

if __name__ == "__main__":
    import uvicorn

    from eduspark.config import env

    host = env("API_HOST", "127.0.0.1")
    port = int(env("API_PORT", "8080"))

    uvicorn.run(app, host=host, port=port)

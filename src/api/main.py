"""FastAPI application entry point."""

from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from api.dependencies import engine_error_status
from api.models.responses import ErrorCodes, ErrorResponse
from api.routes import availability_router, conflicts_router, health_router, occurrences_router
from core.config import API_DEBUG, API_VERSION, DB_PATH
from core.errors import EngineError
from core.logging_config import get_logger, setup_logging

logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan handler for startup/shutdown."""
    setup_logging()

    if not DB_PATH.exists():
        logger.warning("Request log database not found; run scripts/init_db.py", db_path=str(DB_PATH))

    yield


app = FastAPI(
    title="Calendar Availability API",
    description="Recurrence expansion, shared free time and conflict detection for family calendars",
    version=API_VERSION,
    debug=API_DEBUG,
    lifespan=lifespan,
)

# CORS middleware (for development)
if API_DEBUG:
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError):
    """Report malformed request bodies in the standard error format."""
    return JSONResponse(
        status_code=422,
        content=ErrorResponse(
            error="Invalid request body",
            code=ErrorCodes.VALIDATION_ERROR,
            details=[
                f"{'.'.join(str(part) for part in err['loc'])}: {err['msg']}"
                for err in exc.errors()
            ],
        ).model_dump(),
    )


@app.exception_handler(EngineError)
async def engine_error_handler(request: Request, exc: EngineError):
    """Engine errors raised outside a logged route."""
    return JSONResponse(
        status_code=engine_error_status(exc),
        content=ErrorResponse(error=exc.message, code=exc.code, details=exc.details).model_dump(),
    )


# Global exception handler for unexpected errors
@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    """Handle unexpected exceptions with standard error format."""
    return JSONResponse(
        status_code=500,
        content=ErrorResponse(
            error="Internal server error",
            code=ErrorCodes.INTERNAL_ERROR,
            details=[],
        ).model_dump(),
    )


# Include routers
app.include_router(health_router)
app.include_router(occurrences_router)
app.include_router(availability_router)
app.include_router(conflicts_router)


# Entry point for uvicorn
if __name__ == "__main__":
    import uvicorn

    from core.config import API_HOST, API_PORT

    uvicorn.run(
        "api.main:app",
        host=API_HOST,
        port=API_PORT,
        reload=API_DEBUG,
    )

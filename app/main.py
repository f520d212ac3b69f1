"""FastAPI Application Entry Point"""

import asyncio
from contextlib import asynccontextmanager
from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse
from fastapi.middleware.cors import CORSMiddleware
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError

from app.config import settings
from app.core.exceptions import BillValidationError, LedgerApiError
from app.core.logging import setup_logging, get_logger
from app.core.middleware import RequestContextMiddleware
from app.api.v1.router import api_router
from app.schemas.responses import ErrorDetail, ErrorResponse
from app.services.cache import cache_from_settings
from app.services.data_store import DataStore
from app.services.ledger_api import LedgerApiClient

# Setup logging
setup_logging()
logger = get_logger(__name__)


def _log_refresh_failure(task: asyncio.Task) -> None:
    if task.cancelled():
        return
    exc = task.exception()
    if exc is not None:
        logger.error("Initial refresh failed", exc_info=exc)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan events"""
    # Startup
    logger.info("Starting application", extra={"environment": settings.ENVIRONMENT})
    
    client = LedgerApiClient(settings.LEDGER_API_URL, timeout=settings.LEDGER_API_TIMEOUT)
    store = DataStore(client, cache_from_settings(settings.CACHE_DIR), settings.LEDGER_USER_ID)
    # Serve the cached snapshot while the first refresh is in flight
    store.load_cached()
    app.state.data_store = store
    
    refresh_task = None
    if settings.LEDGER_API_URL:
        refresh_task = asyncio.create_task(store.refresh())
        refresh_task.add_done_callback(_log_refresh_failure)
    else:
        logger.warning("LEDGER_API_URL not set; serving cached data only")
    
    yield
    
    # Shutdown
    logger.info("Shutting down application")
    if refresh_task is not None and not refresh_task.done():
        refresh_task.cancel()
    await client.aclose()


# Create FastAPI app
app = FastAPI(
    title=settings.APP_NAME,
    version=settings.APP_VERSION,
    description="Per-shop bill ledger with payment status tracking",
    docs_url="/docs",
    redoc_url="/redoc",
    openapi_url="/openapi.json",
    lifespan=lifespan,
)

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.ALLOWED_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
    expose_headers=["X-Request-ID", "X-Process-Time"],
)

# Custom middleware
app.add_middleware(RequestContextMiddleware)

# Include API router
app.include_router(api_router, prefix=settings.API_V1_PREFIX)


# Health check endpoints
@app.get("/health", tags=["Health"])
async def health_check(request: Request):
    """Basic health check endpoint"""
    store = getattr(request.app.state, "data_store", None)
    return {
        "status": "healthy",
        "app_name": settings.APP_NAME,
        "version": settings.APP_VERSION,
        "environment": settings.ENVIRONMENT,
        "loading": bool(store and store.is_loading),
    }


@app.get("/", tags=["Root"])
async def root():
    """Root endpoint"""
    return {
        "message": f"Welcome to {settings.APP_NAME}",
        "version": settings.APP_VERSION,
        "docs": "/docs",
        "health": "/health"
    }


def _error_response(status_code: int, code: str, message: str) -> JSONResponse:
    body = ErrorResponse(error=ErrorDetail(code=code, message=message))
    return JSONResponse(status_code=status_code, content=body.model_dump())


# Exception handlers
@app.exception_handler(BillValidationError)
async def bill_validation_handler(request: Request, exc: BillValidationError):
    return _error_response(status.HTTP_400_BAD_REQUEST, exc.code, str(exc))


@app.exception_handler(LedgerApiError)
async def ledger_api_error_handler(request: Request, exc: LedgerApiError):
    """Remote ledger failures on writes surface as 502"""
    logger.warning(
        "Ledger API request failed",
        extra={
            "path": request.url.path,
            "action": exc.action,
            "correlation_id": getattr(request.state, "request_id", None),
        }
    )
    return _error_response(status.HTTP_502_BAD_GATEWAY, exc.code, str(exc))


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """Handle validation errors"""
    logger.warning(
        "Validation error",
        extra={
            "path": request.url.path,
            "errors": exc.errors(),
            "correlation_id": getattr(request.state, "request_id", None),
        }
    )
    return JSONResponse(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        content={"detail": jsonable_encoder(exc.errors())},
    )


@app.exception_handler(Exception)
async def general_exception_handler(request: Request, exc: Exception):
    """Handle general exceptions"""
    logger.error(
        f"Unhandled exception: {str(exc)}",
        extra={
            "path": request.url.path,
            "correlation_id": getattr(request.state, "request_id", None),
        },
        exc_info=True
    )
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={
            "detail": "Internal server error"
        },
    )


if __name__ == "__main__":
    import uvicorn
    
    uvicorn.run(
        "app.main:app",
        host=settings.HOST,
        port=settings.PORT,
        reload=settings.DEBUG,
        log_level=settings.LOG_LEVEL.lower()
    )

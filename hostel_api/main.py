"""
FastAPI application entry point.
Main application instance with middleware and route configuration.
"""
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from fastapi import FastAPI, Request, status, Depends
from fastapi.encoders import jsonable_encoder
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.exceptions import RequestValidationError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import text
from starlette.exceptions import HTTPException as StarletteHTTPException
import logging
import asyncio

from hostel_api.config import settings
from hostel_api.database import get_db, init_db, close_db
from hostel_api.services.image_host import ImageHost, get_image_host
from hostel_api.routes import branches, enquiries, gallery
from hostel_api.utils.responses import envelope

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)

CORS_METHODS = ["GET", "POST", "PUT", "DELETE", "PATCH", "OPTIONS"]
CORS_HEADERS = ["Content-Type", "Authorization"]


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Verify the database on startup and release connections on shutdown.
    The app still starts when the database is unreachable.
    """
    logger.info(f"Environment: {settings.ENVIRONMENT}")
    logger.info(f"CORS allowed origins: {settings.CORS_ORIGINS}")

    if settings.DATABASE_URL:
        try:
            await init_db()
            logger.info("Database connection established successfully")
        except Exception as e:
            logger.error(
                f"Failed to initialize database on startup: {str(e)}\n"
                f"The application will continue to run, but database-dependent endpoints will fail."
            )
    else:
        logger.info("DATABASE_URL not configured - using in-memory SQLite")

    yield

    try:
        await close_db()
    except Exception as e:
        if not isinstance(e, (KeyboardInterrupt, asyncio.CancelledError)):
            logger.warning(f"Error during database shutdown: {str(e)}")


# Create FastAPI application instance
app = FastAPI(
    title=settings.API_TITLE,
    description=settings.API_DESCRIPTION,
    version=settings.API_VERSION,
    lifespan=lifespan,
)

# CORS is limited to the known frontends; cookies/credentials are allowed
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=CORS_METHODS,
    allow_headers=CORS_HEADERS,
    max_age=3600,  # Cache preflight requests for 1 hour
)


@app.middleware("http")
async def log_requests(request: Request, call_next):
    """Log every request with its origin and the resulting status."""
    method = request.method
    path = request.url.path
    origin = request.headers.get("origin", "No origin header")

    logger.info(f"{method} {path} (origin: {origin})")

    try:
        response = await call_next(request)
        logger.info(f"Response status: {response.status_code} for {method} {path}")
        return response
    except Exception as e:
        logger.error(
            f"Error processing {method} {path}: {str(e)}\n"
            f"  Origin: {origin}\n"
            f"  Error type: {type(e).__name__}",
            exc_info=True
        )
        raise


# Include routers
app.include_router(branches.router, prefix="/api", tags=["branches"])
app.include_router(gallery.router, prefix="/api", tags=["gallery"])
app.include_router(enquiries.router, prefix="/api", tags=["enquiries"])


def add_cors_headers(response: JSONResponse, request: Request) -> JSONResponse:
    """
    Add CORS headers to error responses built outside the CORS middleware
    (the catch-all 500 handler runs after it has unwound).

    Only allow-listed origins are echoed back.
    """
    origin = request.headers.get("origin")
    if origin and origin in settings.CORS_ORIGINS:
        response.headers["Access-Control-Allow-Origin"] = origin
        response.headers["Access-Control-Allow-Credentials"] = "true"
        response.headers["Access-Control-Allow-Methods"] = ", ".join(CORS_METHODS)
        response.headers["Access-Control-Allow-Headers"] = ", ".join(CORS_HEADERS)
        response.headers["Vary"] = "Origin"

    return response


# Exception Handlers
@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    """Render HTTP exceptions (400, 404, 500, 502, ...) as the response envelope."""
    log = logger.warning if exc.status_code < 500 else logger.error
    log(
        f"HTTPException on {request.method} {request.url.path}: "
        f"status={exc.status_code} detail={exc.detail}"
    )

    if isinstance(exc.detail, dict):
        content = exc.detail
    elif exc.status_code == status.HTTP_404_NOT_FOUND and exc.detail == "Not Found":
        content = envelope(success=False, error="Route not found")
        content["path"] = request.url.path
    else:
        content = envelope(success=False, error=str(exc.detail))

    response = JSONResponse(
        status_code=exc.status_code,
        content=content,
        headers=getattr(exc, "headers", None),
    )
    return add_cors_headers(response, request)


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """Handle request validation errors as 400s."""
    logger.warning(
        f"Validation error on {request.method} {request.url.path}: {exc.errors()}"
    )
    response = JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content=envelope(
            success=False,
            error="Validation error",
            details=jsonable_encoder(exc.errors()),
        ),
    )
    return add_cors_headers(response, request)


@app.exception_handler(Exception)
async def general_exception_handler(request: Request, exc: Exception):
    """Last resort: log and answer 500, with details only in development."""
    logger.error(
        f"Unhandled exception on {request.method} {request.url.path}:\n"
        f"  Origin: {request.headers.get('origin', 'No origin')}\n"
        f"  Error: {str(exc)}\n"
        f"  Error type: {type(exc).__name__}",
        exc_info=True
    )
    response = JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=envelope(
            success=False,
            error="Internal server error",
            details=str(exc) if settings.is_development else None,
        ),
    )
    return add_cors_headers(response, request)


# Root Endpoints
@app.get("/")
async def root():
    """Liveness check."""
    return envelope(
        message=f"{settings.API_TITLE} is running",
        data={
            "version": settings.API_VERSION,
            "timestamp": datetime.now(timezone.utc).isoformat(),
        },
    )


@app.get("/health")
async def health_check():
    return envelope(data={"status": "healthy"})


@app.get("/health/db")
async def health_check_db(db: AsyncSession = Depends(get_db)):
    """
    Database health check endpoint.
    Tests database connection and returns status.
    """
    try:
        result = await db.execute(text("SELECT 1"))
        return envelope(data={"database": "connected", "status": "healthy", "result": result.scalar()})
    except Exception as e:
        logger.error(f"Database health check failed: {str(e)}", exc_info=True)
        return JSONResponse(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            content=envelope(success=False, error="Database connection failed"),
        )


@app.get("/health/image-host")
async def health_check_image_host(image_host: ImageHost = Depends(get_image_host)):
    """Report whether the configured image host has its credentials."""
    if image_host.is_configured():
        return envelope(data={"provider": image_host.name, "status": "configured"})
    return envelope(
        data={"provider": image_host.name, "status": "not_configured"},
        message="Image host credentials not set in environment variables",
    )


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("hostel_api.main:app", host="0.0.0.0", port=settings.PORT, reload=settings.is_development)

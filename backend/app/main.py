import logging
import traceback
from datetime import datetime

from fastapi import FastAPI, HTTPException, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import BaseModel
from slowapi.errors import RateLimitExceeded

from app.api.v1 import api_router
from app.core.config import settings
from app.core.errors import ServiceError
from app.core.logging_config import RequestLoggingMiddleware, setup_logging
from app.core.middleware import RequestSizeLimitMiddleware, SecurityHeadersMiddleware
from app.core.rate_limiter import limiter, rate_limit_exceeded_handler
from app.core.shutdown import RequestTrackingMiddleware, lifespan_manager
from app.db.session import check_db_connection

setup_logging()
logger = logging.getLogger("vodichron")

APP_VERSION = "1.0.0"


class ErrorResponse(BaseModel):
    """Body of every error response."""
    success: bool = False
    error: str
    message: str
    timestamp: str
    path: str | None = None


class HealthResponse(BaseModel):
    status: str
    service: str
    version: str
    environment: str
    checks: dict[str, bool]


app = FastAPI(
    title="Vodichron HRMS API",
    description="Employees, leaves, timesheets, documents, customers and projects",
    version=APP_VERSION,
    docs_url="/docs" if settings.DEBUG else None,
    redoc_url="/redoc" if settings.DEBUG else None,
    lifespan=lifespan_manager,
)

app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, rate_limit_exceeded_handler)

_default_dev_origins = [
    "http://localhost:3000",
    "http://localhost:5173",
    "http://127.0.0.1:3000",
    "http://127.0.0.1:5173",
]
cors_origins = settings.ALLOWED_ORIGINS or _default_dev_origins


def _error_body(request: Request, error: str, message: str) -> dict:
    return ErrorResponse(
        error=error,
        message=message,
        timestamp=datetime.utcnow().isoformat(),
        path=request.url.path,
    ).model_dump()


@app.exception_handler(ServiceError)
async def service_error_handler(request: Request, exc: ServiceError) -> JSONResponse:
    if exc.status_code >= 500:
        logger.error(f"{request.method} {request.url.path} failed: {exc.message}")
    return JSONResponse(status_code=exc.status_code, content=_error_body(request, exc.error, exc.message))


@app.exception_handler(HTTPException)
async def http_exception_handler(request: Request, exc: HTTPException) -> JSONResponse:
    return JSONResponse(
        status_code=exc.status_code,
        content=_error_body(request, "HTTP Error", str(exc.detail)),
        headers=getattr(exc, "headers", None),
    )


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    first = exc.errors()[0] if exc.errors() else {}
    field = ".".join(str(part) for part in first.get("loc", []) if part != "body")
    message = f"{field}: {first.get('msg')}" if field else str(first.get("msg", "Invalid request"))
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content=_error_body(request, "Bad Request", message),
    )


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Log the traceback under a reference id; hide details in production."""
    error_id = datetime.utcnow().strftime("%Y%m%d%H%M%S%f")
    logger.error(
        f"Unhandled exception [{error_id}]: {exc}\n"
        f"Path: {request.url.path}\n"
        f"Method: {request.method}\n"
        f"Traceback: {traceback.format_exc()}"
    )

    if settings.ENVIRONMENT.lower() == "production":
        message = f"An unexpected error occurred. Reference ID: {error_id}"
        error = "Internal Server Error"
    else:
        message = str(exc)
        error = exc.__class__.__name__
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=_error_body(request, error, message),
    )


app.add_middleware(
    CORSMiddleware,
    allow_origins=cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)
app.add_middleware(SecurityHeadersMiddleware)
app.add_middleware(RequestSizeLimitMiddleware)
app.add_middleware(RequestTrackingMiddleware)
app.add_middleware(RequestLoggingMiddleware)

app.include_router(api_router, prefix=settings.API_V1_STR)


@app.get("/health", response_model=HealthResponse)
async def health_check():
    """Returns 503 when the database is unreachable."""
    db_healthy = await check_db_connection()
    response = HealthResponse(
        status="healthy" if db_healthy else "unhealthy",
        service="vodichron-hrms",
        version=APP_VERSION,
        environment=settings.ENVIRONMENT,
        checks={"database": db_healthy},
    )
    if not db_healthy:
        logger.warning("Health check failed: database unreachable")
        return JSONResponse(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, content=response.model_dump())
    return response


@app.get("/")
async def root():
    return {"message": f"Welcome to {settings.PROJECT_NAME} API"}

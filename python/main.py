"""
Appearance Face Pipeline API - Main Entry Point

This is the FastAPI application entry point.
Uses core/ for configuration, exceptions, and logging.
"""

from dotenv import load_dotenv
load_dotenv()

from fastapi import Depends, FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from fastapi.middleware.cors import CORSMiddleware
import uvicorn

# Core imports
from core.config import settings, VERSION
from core.exceptions import AppException
from core.responses import ApiResponse
from core.logging import setup_logging, get_logger, log_error

# Setup logging first
setup_logging(level="INFO" if not settings.debug else "DEBUG")
logger = get_logger(__name__)

# Service imports
from middleware import RequestLoggingMiddleware
from services.employees import InMemoryEmployeeDirectory
from services.face_pipeline import FacePipelineService

# Router imports
from routers import face, employees
from routers.face.dependencies import get_pipeline

# ============================================================
# Application Setup
# ============================================================

app = FastAPI(
    title="Appearance Face Pipeline API",
    description="Face capture, registration and recognition in front of the remote face recognition service",
    version=VERSION,
    docs_url="/api/docs",
    redoc_url="/api/redoc",
    redirect_slashes=False,
)

# ============================================================
# Middleware
# ============================================================

app.add_middleware(RequestLoggingMiddleware)
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials="*" not in settings.cors_origins,
    allow_methods=["GET", "POST", "DELETE", "OPTIONS"],
    allow_headers=["*"],
    max_age=3600,
)

logger.info("CORS middleware configured")

# ============================================================
# Global Exception Handlers
# ============================================================

@app.exception_handler(AppException)
async def app_exception_handler(request: Request, exc: AppException):
    """
    Handle all custom AppException and subclasses.
    Returns unified ApiResponse format; details go to meta.
    """
    logger.warning(f"AppException: {exc.code} - {exc.message}")
    return JSONResponse(
        status_code=exc.status_code,
        content=ApiResponse.from_exception(exc).model_dump()
    )

@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError):
    """Malformed query/form parameters, reported in ApiResponse format."""
    errors = exc.errors()
    field = ".".join(str(p) for p in errors[0].get("loc", ())) if errors else None
    return JSONResponse(
        status_code=422,
        content=ApiResponse.fail(
            message=errors[0].get("msg", "Invalid request") if errors else "Invalid request",
            code="VALIDATION_ERROR",
            meta={"field": field},
        ).model_dump()
    )

@app.exception_handler(Exception)
async def generic_exception_handler(request: Request, exc: Exception):
    """
    Handle unexpected exceptions.
    Logs full traceback and returns generic error.
    """
    log_error(logger, exc, context=f"{request.method} {request.url.path}")
    return JSONResponse(
        status_code=500,
        content=ApiResponse.fail(
            message="Internal server error",
            code="INTERNAL_ERROR"
        ).model_dump()
    )

# ============================================================
# Service Initialization (Dependency Injection)
# ============================================================

logger.info(f"Starting Appearance Face Pipeline API v{VERSION}")
logger.info("Creating singleton service instances...")

# 1. Face pipeline (loads Haar cascades once)
pipeline = FacePipelineService.from_settings(settings)
if pipeline.detection_enabled:
    logger.info("✓ Created FacePipelineService (face detection enabled)")
else:
    logger.error("❌ Created FacePipelineService in DEGRADED mode: face detection disabled, whole images are forwarded")

# 2. Employee directory
employee_directory = InMemoryEmployeeDirectory()
logger.info("✓ Created InMemoryEmployeeDirectory")

# 3. Inject services into routers
face.set_services(pipeline, employee_directory)
logger.info("✓ Service instances injected into routers")

# ============================================================
# Root Endpoints
# ============================================================

@app.get("/api/health")
async def health_check(pipeline_service: FacePipelineService = Depends(get_pipeline)):
    """
    Health check endpoint.
    Returns service status and whether local face detection is enabled.
    """
    return ApiResponse.ok({
        "status": "healthy",
        "service": "appearance-face-pipeline",
        "version": VERSION,
        "face_detection_enabled": pipeline_service.detection_enabled,
        "face_api_base_url": settings.face_api_base_url,
        "default_model": settings.default_model,
    }).model_dump()

# ============================================================
# Router Registration
# ============================================================

app.include_router(face.router, prefix="/api/face", tags=["face"])
app.include_router(employees.router, prefix="/api/employees", tags=["employees"])

logger.info(f"Application startup complete. Running on {settings.server_host}:{settings.server_port}")

# ============================================================
# Entry Point
# ============================================================

if __name__ == "__main__":
    uvicorn.run(
        "main:app",
        host=settings.server_host,
        port=settings.server_port,
        reload=settings.debug
    )

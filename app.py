"""
E-Learning Platform API v1.0
Courses with lecture watch streaks, single-attempt quizzes and role-gated access
"""

import os
from contextlib import asynccontextmanager
from datetime import datetime

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles
from starlette.exceptions import HTTPException as StarletteHTTPException

from config import settings
from db import init_db
from routes import admin, auth, quiz, student, teacher
from utils.error_handling import PlatformError, error_payload
from utils.structured_logging import configure_logging, get_logger, log_request_middleware, LogCategory

# Configure structured logging system
configure_logging(level=settings.LOG_LEVEL, json_output=settings.LOG_JSON)
logger = get_logger("app")


@asynccontextmanager
async def lifespan(app: FastAPI):
    init_db()
    logger.info("E-Learning Platform API started", extra={"environment": settings.NODE_ENV})
    yield
    logger.info("E-Learning Platform API stopped")


app = FastAPI(
    title="E-Learning Platform API",
    description="Course content, lecture watch streaks and quizzes for students, teachers and administrators",
    version="1.0.0",
    docs_url="/docs",
    redoc_url="/redoc",
    openapi_url="/openapi.json",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origin_list,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
    allow_headers=["Content-Type", "Authorization", "X-Requested-With", "Accept", "Origin", "X-Correlation-ID"],
    expose_headers=["Content-Length", "X-Request-ID", "X-Correlation-ID"],
)


# Structured logging middleware - adds correlation IDs and logs all requests
@app.middleware("http")
async def structured_logging_middleware(request: Request, call_next):
    """Add correlation IDs and structured logging to all requests"""
    return await log_request_middleware(request, call_next)


# Global exception handlers
@app.exception_handler(PlatformError)
async def platform_exception_handler(request: Request, exc: PlatformError):
    """Map domain errors to their HTTP status with the fixed client message"""
    log = logger.error if exc.status_code >= 500 else logger.warning
    log(
        exc.message,
        category=LogCategory.ERROR,
        request_method=request.method,
        request_path=request.url.path,
        response_status=exc.status_code,
        user_id=getattr(request.state, "user_id", None),
        error_type=type(exc).__name__,
        error_message=exc.detail,
        extra=exc.context,
    )

    return JSONResponse(
        status_code=exc.status_code,
        content=error_payload(exc.message, exc.status_code, code=exc.code, request=request),
    )


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """Handle validation errors with proper structure and logging"""
    errors = []
    for error in exc.errors():
        errors.append(
            {"field": ".".join(str(loc) for loc in error["loc"]), "message": error["msg"], "code": error["type"]}
        )

    logger.warning(
        "Validation error",
        category=LogCategory.ERROR,
        request_method=request.method,
        request_path=request.url.path,
        error_type="ValidationError",
        error_message=f"{len(errors)} validation errors",
        extra={"errors": errors},
    )

    return JSONResponse(
        status_code=422,
        content=error_payload("Validation Error", 422, code="VALIDATION_ERROR", detail=errors, request=request),
    )


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    """Handle HTTP exceptions with proper structure and logging"""
    log = logger.error if exc.status_code >= 500 else logger.warning
    log(
        f"HTTP {exc.status_code} error",
        category=LogCategory.ERROR,
        request_method=request.method,
        request_path=request.url.path,
        response_status=exc.status_code,
        error_message=str(exc.detail),
    )

    return JSONResponse(status_code=exc.status_code, content=error_payload(exc.detail, exc.status_code, request=request))


@app.exception_handler(Exception)
async def general_exception_handler(request: Request, exc: Exception):
    """Handle unexpected exceptions with structured logging"""
    logger.critical(
        "Unexpected server error",
        category=LogCategory.ERROR,
        exception=exc,
        request_method=request.method,
        request_path=request.url.path,
        user_id=getattr(request.state, "user_id", None),
    )

    return JSONResponse(
        status_code=500,
        content=error_payload(
            "Internal Server Error",
            500,
            code="INTERNAL_ERROR",
            detail="An unexpected error occurred. Please try again later.",
            request=request,
        ),
    )


app.include_router(auth.router, prefix="/api/v1/auth", tags=["Authentication"])
app.include_router(student.router, prefix="/api/v1/student", tags=["Student"])
app.include_router(teacher.router, prefix="/api/v1/teacher", tags=["Teacher"])
app.include_router(admin.router, prefix="/api/v1/admin", tags=["Admin"])
app.include_router(quiz.router, prefix="/api/v1", tags=["Quizzes"])

# Uploaded lectures and notes are served back under their stored public path
os.makedirs(settings.UPLOAD_DIR, exist_ok=True)
app.mount("/uploads", StaticFiles(directory=settings.UPLOAD_DIR), name="uploads")


@app.get("/", tags=["System"], summary="API Information")
async def root():
    return {
        "name": "E-Learning Platform API",
        "version": "1.0.0",
        "status": "operational",
        "documentation": {"swagger": "/docs", "redoc": "/redoc", "openapi_spec": "/openapi.json"},
        "timestamp": datetime.utcnow().isoformat(),
        "services": {
            "auth": {"endpoint": "/api/v1/auth", "description": "Registration, login and token identity"},
            "student": {"endpoint": "/api/v1/student", "description": "Course registration, watches and streaks"},
            "teacher": {"endpoint": "/api/v1/teacher", "description": "Lecture and note uploads, student rosters"},
            "admin": {"endpoint": "/api/v1/admin", "description": "Accounts, courses and quiz oversight"},
            "quizzes": {"endpoint": "/api/v1/quizzes", "description": "Quiz authoring, attempts and review"},
        },
    }


@app.get("/health", tags=["System"], summary="Health Check")
async def health_check():
    return {"status": "healthy", "timestamp": datetime.utcnow().isoformat(), "version": "1.0.0"}

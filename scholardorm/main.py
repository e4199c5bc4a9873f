"""FastAPI application entry point."""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.trustedhost import TrustedHostMiddleware
from fastapi.responses import JSONResponse

from scholardorm.config import settings
from scholardorm.api import (
    health_router,
    progress_router,
    courses_router,
    students_router,
    admin_router,
    enrollments_router,
)
from scholardorm.schemas.common import ErrorResponse
from scholardorm.services.row_source import DataSourceError, RowNotFoundError

logging.basicConfig(
    level=logging.DEBUG if settings.DEBUG else logging.INFO,
    format="%(asctime)s  %(name)-25s  %(levelname)-8s  %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info("🚀 ScholarDorm analytics starting (backend=%s)…", settings.DATA_BACKEND)
    yield
    logger.info("✅ ScholarDorm analytics shut down")


app = FastAPI(
    title="ScholarDorm Analytics API",
    description="Progress, course and platform analytics for the ScholarDorm LMS",
    version="0.1.0",
    lifespan=lifespan,
)

# ── Middleware ─────────────────────────────────────────────────────────────────

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)
app.add_middleware(TrustedHostMiddleware, allowed_hosts=settings.ALLOWED_HOSTS)

# ── Error handlers ────────────────────────────────────────────────────────────


@app.exception_handler(RowNotFoundError)
async def row_not_found_handler(request: Request, exc: RowNotFoundError):
    return JSONResponse(
        status_code=status.HTTP_404_NOT_FOUND,
        content=ErrorResponse(
            error_code="not_found",
            message=f"No {exc.table} row with id {exc.row_id}",
        ).model_dump(),
    )


@app.exception_handler(DataSourceError)
async def data_source_error_handler(request: Request, exc: DataSourceError):
    logger.error("Data source failure on %s %s: %s", request.method, request.url.path, exc)
    return JSONResponse(
        status_code=status.HTTP_502_BAD_GATEWAY,
        content=ErrorResponse(
            error_code="data_source_error",
            message="The data service is unavailable. Please try again later.",
            details={"table": exc.table},
        ).model_dump(),
    )


# ── Routers ───────────────────────────────────────────────────────────────────

app.include_router(health_router, tags=["Health"])
app.include_router(progress_router, prefix="/api/progress", tags=["Progress"])
app.include_router(courses_router, prefix="/api/courses", tags=["Courses"])
app.include_router(students_router, prefix="/api/students", tags=["Students"])
app.include_router(admin_router, prefix="/api/admin", tags=["Admin"])
app.include_router(enrollments_router, prefix="/api/enrollments", tags=["Enrollments"])


@app.get("/")
async def root():
    return {
        "name": "ScholarDorm Analytics API",
        "version": "0.1.0",
        "docs": "/docs",
        "health": "/health",
    }

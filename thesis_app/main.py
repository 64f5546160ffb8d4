import logging
from contextlib import asynccontextmanager

from dotenv import load_dotenv
from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from starlette.exceptions import HTTPException as StarletteHTTPException

load_dotenv()

from thesis_app.config import settings
from thesis_app.core.errors import (
    http_exception_handler,
    repository_exception_handler,
    validation_exception_handler,
)
from thesis_app.core.exceptions import RepositoryException
from thesis_app.core.logging import configure_logging

# IMPORT ROUTERS
from thesis_app.routers.health import router as health_router
from thesis_app.routers.users import router as users_router
from thesis_app.routers.thesis_groups import router as thesis_groups_router
from thesis_app.routers.rubrics import router as rubrics_router
from thesis_app.routers.defense_schedules import router as defense_schedules_router
from thesis_app.routers.evaluations import router as evaluations_router
from thesis_app.routers.student_evaluations import router as student_evaluations_router
from thesis_app.routers.rankings import router as rankings_router
from thesis_app.routers.audit_logs import router as audit_logs_router
from thesis_app.routers.reports import router as reports_router

logger = logging.getLogger(__name__)


# STARTUP / SHUTDOWN
@asynccontextmanager
async def lifespan(app: FastAPI):
    configure_logging()
    logger.info(f"Starting Thesis Defense Platform API ({settings.APP_ENV})")
    logger.info("Swagger UI available at: http://localhost:8000/docs")
    yield
    logger.info("Shutting down Thesis Defense Platform API")


# SWAGGER UI - tag display order
_OPENAPI_TAGS = [
    {"name": "Root"},
    {"name": "Health"},
    {"name": "Users"},
    {"name": "Thesis Groups"},
    {"name": "Rubrics"},
    {"name": "Defense Schedules"},
    {"name": "Evaluations"},
    {"name": "Student Evaluations"},
    {"name": "Rankings"},
    {"name": "Audit Logs"},
    {"name": "Reports"},
]

# FASTAPI APPLICATION CONFIGURATION
app = FastAPI(
    title="Thesis Defense Platform API",
    version=settings.APP_VERSION,
    docs_url="/docs",
    redoc_url="/redoc",
    openapi_url="/openapi.json",
    openapi_tags=_OPENAPI_TAGS,
    lifespan=lifespan,
)

app.add_middleware(CORSMiddleware, allow_origins=["*"], allow_methods=["*"], allow_headers=["*"])

# REGISTER EXCEPTION HANDLERS
app.add_exception_handler(RequestValidationError, validation_exception_handler)
app.add_exception_handler(StarletteHTTPException, http_exception_handler)
app.add_exception_handler(RepositoryException, repository_exception_handler)

# REGISTER ROUTERS (order matches _OPENAPI_TAGS / Swagger UI display order)
app.include_router(health_router)               # Health
app.include_router(users_router)                # Users
app.include_router(thesis_groups_router)        # Thesis Groups
app.include_router(rubrics_router)              # Rubrics
app.include_router(defense_schedules_router)    # Defense Schedules
app.include_router(evaluations_router)          # Evaluations
app.include_router(student_evaluations_router)  # Student Evaluations
app.include_router(rankings_router)             # Rankings
app.include_router(audit_logs_router)           # Audit Logs
app.include_router(reports_router)              # Reports


# ROOT ENDPOINT
@app.get("/", tags=["Root"], summary="Root endpoint")
async def root():
    return {
        "service": "Thesis Defense Platform API",
        "version": settings.APP_VERSION,
        "docs": {
            "swagger": "/docs",
            "redoc": "/redoc"
        },
        "status": "running"
    }


# RUN WITH UVICORN
if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "thesis_app.main:app",
        host="0.0.0.0",
        port=8000,
        reload=settings.DEBUG,
    )

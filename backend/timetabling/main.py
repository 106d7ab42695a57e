from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from timetabling.api.routes import health, timetable
from timetabling.core.config import get_settings
from timetabling.core.exceptions import AppError
from timetabling.core.logging import setup_logging
from timetabling.core.middleware import RequestSizeLimitMiddleware, SecurityHeadersMiddleware
from timetabling.db.bootstrap import ensure_runtime_schema_compatibility


@asynccontextmanager
async def lifespan(_: FastAPI):
    ensure_runtime_schema_compatibility()
    yield


async def app_error_handler(request: Request, exc: AppError):
    return JSONResponse(
        status_code=exc.status_code,
        content={"message": exc.message, "details": exc.details},
    )


def create_app() -> FastAPI:
    settings = get_settings()
    setup_logging(environment=settings.environment, level_name=settings.log_level)

    app = FastAPI(title=settings.project_name, lifespan=lifespan)
    app.add_exception_handler(AppError, app_error_handler)

    app.add_middleware(RequestSizeLimitMiddleware, max_bytes=settings.max_request_size_bytes)
    app.add_middleware(
        SecurityHeadersMiddleware,
        hsts_max_age_seconds=settings.security_hsts_max_age_seconds if settings.security_enable_hsts else None,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(health.router, prefix=settings.api_prefix, tags=["health"])
    app.include_router(timetable.router, prefix=f"{settings.api_prefix}/timetable", tags=["timetable"])
    return app


app = create_app()

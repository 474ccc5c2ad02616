from contextlib import asynccontextmanager
import logging

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from horario_escolar.api.routes import (
    activity,
    analysis,
    auth,
    health,
    history,
    layout,
    snapshots,
    timetable,
    transfer,
)
from horario_escolar.core.config import get_settings
from horario_escolar.core.exceptions import AppError
from horario_escolar.core.middleware import RequestSizeLimitMiddleware
from horario_escolar.db.bootstrap import ensure_runtime_schema

settings = get_settings()
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(_: FastAPI):
    ensure_runtime_schema()
    yield


async def app_error_handler(request: Request, exc: AppError):
    if exc.status_code >= 500:
        logger.error("REQUEST FAILED | path=%s | message=%s", request.url.path, exc.message)
    return JSONResponse(
        status_code=exc.status_code,
        content={"message": exc.message, "details": exc.details},
    )


app = FastAPI(title=settings.project_name, lifespan=lifespan)
app.add_exception_handler(AppError, app_error_handler)

app.add_middleware(RequestSizeLimitMiddleware, max_bytes=settings.max_request_size_bytes)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(health.router, prefix=settings.api_prefix, tags=["health"])
app.include_router(auth.router, prefix=f"{settings.api_prefix}/auth", tags=["auth"])
app.include_router(layout.router, prefix=settings.api_prefix, tags=["configuracao"])
app.include_router(timetable.router, prefix=settings.api_prefix, tags=["horarios"])
app.include_router(analysis.router, prefix=settings.api_prefix, tags=["analise"])
app.include_router(history.router, prefix=settings.api_prefix, tags=["historico"])
app.include_router(snapshots.router, prefix=settings.api_prefix, tags=["snapshots"])
app.include_router(activity.router, prefix=settings.api_prefix, tags=["logs"])
app.include_router(transfer.router, prefix=settings.api_prefix, tags=["transferencia"])

from __future__ import annotations

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from learning_curve.api.achievements import router as achievements_router
from learning_curve.api.admin import router as admin_router
from learning_curve.api.bookmarks import router as bookmarks_router
from learning_curve.api.certificates import router as certificates_router
from learning_curve.api.health import router as health_router
from learning_curve.api.metrics_endpoint import router as metrics_router
from learning_curve.api.notes import router as notes_router
from learning_curve.api.paths import router as paths_router
from learning_curve.api.progress import router as progress_router
from learning_curve.api.quizzes import module_router as module_quiz_router
from learning_curve.api.quizzes import router as quizzes_router
from learning_curve.api.resources import router as resources_router
from learning_curve.api.users import router as users_router
from learning_curve.core.config import SETTINGS
from learning_curve.core.logging import setup_logging
from learning_curve.db.engine import lifespan_db
from learning_curve.db.redis import lifespan_redis
from learning_curve.middleware.metrics import MetricsMiddleware
from learning_curve.middleware.request_context import RequestContextMiddleware
from learning_curve.repos.achievement_repo import DataUnavailableError

# Configure logging before anything else runs.
setup_logging(SETTINGS.log_level, json_format=SETTINGS.log_json)

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(_app: FastAPI) -> AsyncGenerator[None, None]:
    # Nested so teardown runs in reverse order.
    async with lifespan_db():
        async with lifespan_redis():
            yield


app = FastAPI(
    title="learning-curve",
    lifespan=lifespan,
    docs_url="/docs" if SETTINGS.is_dev else None,
    redoc_url="/redoc" if SETTINGS.is_dev else None,
)


@app.exception_handler(DataUnavailableError)
async def data_unavailable_handler(
    _request: Request, exc: DataUnavailableError
) -> JSONResponse:
    logger.warning("Responding 503: %s", exc)
    return JSONResponse(
        status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
        content={"detail": {"message": "Service temporarily unavailable"}},
    )


app.add_middleware(
    CORSMiddleware,
    allow_origins=list(SETTINGS.cors_origins),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Last-added runs first: RequestContext → Metrics → CORS → route handler,
# so every request has an id before metrics are recorded.
app.add_middleware(MetricsMiddleware)
app.add_middleware(RequestContextMiddleware)

app.include_router(metrics_router)
app.include_router(health_router)
app.include_router(users_router)
app.include_router(paths_router)
app.include_router(progress_router)
app.include_router(quizzes_router)
app.include_router(module_quiz_router)
app.include_router(resources_router)
app.include_router(certificates_router)
app.include_router(notes_router)
app.include_router(bookmarks_router)
app.include_router(achievements_router)
app.include_router(admin_router)

logger.info(
    "learning-curve started  env=%s log_level=%s port=%d docs=%s",
    SETTINGS.app_env,
    SETTINGS.log_level,
    SETTINGS.port,
    "on" if SETTINGS.is_dev else "off",
)

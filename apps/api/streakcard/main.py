from __future__ import annotations

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
import sentry_sdk
from sentry_sdk.integrations.fastapi import FastApiIntegration

from streakcard.core.config import settings
from streakcard.core.correlation import correlation_id_middleware
from streakcard.routes.streaks import router as streaks_router
from streakcard.services.upstream import close_http

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(_: FastAPI):
    yield
    await close_http()


app = FastAPI(title="Streakcard API", version="0.1.0", lifespan=lifespan)


def _init_logging() -> None:
    logging.basicConfig(
        level=settings.log_level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def _init_sentry() -> None:
    if not settings.is_sentry_configured():
        return
    sentry_sdk.init(
        dsn=settings.sentry_dsn,
        integrations=[FastApiIntegration()],
        traces_sample_rate=max(0.0, min(settings.sentry_traces_sample_rate, 1.0)),
        send_default_pii=False,
        environment=settings.app_env,
    )


_init_logging()
_init_sentry()

# Cards are embedded in arbitrary pages (READMEs, portfolios).
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_methods=["GET", "OPTIONS"],
    allow_headers=["Content-Type"],
)
app.middleware("http")(correlation_id_middleware)


@app.get("/health")
async def health() -> dict:
    return {"ok": True}


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception):
    correlation_id = getattr(request.state, "correlation_id", None)
    logger.exception(
        "Unhandled server error on %s",
        request.url.path,
        extra={"correlation_id": correlation_id, "method": request.method},
    )
    return JSONResponse(status_code=500, content={"detail": "Internal server error"})


app.include_router(streaks_router, prefix="/api")

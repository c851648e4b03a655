# app/main.py
from __future__ import annotations

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from app.core.config import get_settings
from app.core.logging import setup_logging
from app.db.session import close_engines
from app.http_problem_handlers import register_exception_handlers
from app.obs.metrics import PrometheusMiddleware
from app.router_mount import mount_routers

settings = get_settings()
setup_logging(settings.LOG_LEVEL)
logger = logging.getLogger("portal")


@asynccontextmanager
async def lifespan(_app: FastAPI):
    logger.info("portal starting (env=%s)", settings.ENV)
    yield
    await close_engines()


app = FastAPI(
    title="Shipper Portal",
    version="1.0.0",
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)
app.add_middleware(PrometheusMiddleware)

register_exception_handlers(app)
mount_routers(app)


@app.get("/api/health")
async def health():
    return {"status": "ok", "env": settings.ENV}


def run() -> None:
    """命令行入口：shipper-portal（等价于 python -m uvicorn app.main:app）。"""
    import uvicorn

    uvicorn.run(
        "app.main:app",
        host=settings.HOST,
        port=settings.PORT,
        log_level=settings.LOG_LEVEL.lower(),
    )

"""
api/main.py

FastAPI application factory.

The repository is injected by the entry point (main.py) with
set_repository(); routes resolve it through a dependency so tests can
swap it with app.dependency_overrides or a fresh in-memory database.
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from ..config import settings
from ..storage.repository import PolicyRepository
from .routes import analysis as analysis_router
from .routes import history as history_router
from .routes import policy as policy_router

logger = logging.getLogger(__name__)

_repository: PolicyRepository | None = None


def set_repository(repo: PolicyRepository | None) -> None:
    global _repository
    _repository = repo


def get_repository() -> PolicyRepository:
    if _repository is None:
        raise RuntimeError("Repository not initialised — call set_repository() first")
    return _repository


def create_app() -> FastAPI:
    @asynccontextmanager
    async def lifespan(app: FastAPI):
        logger.info("FastAPI startup")
        yield
        logger.info("FastAPI shutdown")
        if _repository is not None:
            _repository.close()

    app = FastAPI(
        title="RuleGuardX — Firewall Rule Risk Analyzer",
        version="1.0.0",
        description="Offline risk scoring and hygiene checks for firewall rule sets",
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(analysis_router.router, prefix="/api")
    app.include_router(history_router.router,  prefix="/api")
    app.include_router(policy_router.router,   prefix="/api")

    @app.get("/health")
    async def health() -> dict:
        live = analysis_router.get_live_analysis()
        return {
            "status": "ok",
            "analysis_loaded": live.result is not None,
            "rules_loaded": len(live.rules),
            "engine_stats": dict(live.analyzer.stats),
        }

    return app

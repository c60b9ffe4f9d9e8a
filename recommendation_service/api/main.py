from __future__ import annotations

from typing import Optional, Tuple

import structlog
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.engine import Engine

from recommendation_service.api.routes.recommendations import router as rec_router
from recommendation_service.config import AppConfig, get_config
from recommendation_service.db.session import init_db, make_engine, make_session_factory
from recommendation_service.errors import InvalidArgument, NotFound, Unavailable
from recommendation_service.logging_setup import configure_logging
from recommendation_service.services.aggregation import RecommendationService
from recommendation_service.services.recommendation_store import RecommendationStore


logger = structlog.get_logger(__name__)


def build_service(cfg: AppConfig) -> Tuple[RecommendationService, Engine]:
    """Wire engine -> store -> service from config. Returns the service and its engine."""
    engine = make_engine(cfg.database.url)
    store = RecommendationStore(make_session_factory(engine))
    service = RecommendationService(
        store,
        recent_days=cfg.windows.recent_days,
        monthly_days=cfg.windows.monthly_days,
    )
    return service, engine


def create_app(
    config: Optional[AppConfig] = None,
    service: Optional[RecommendationService] = None,
) -> FastAPI:
    """Build the API. Pass `service` to serve an already-wired store (tests, embedding)."""
    cfg = config or get_config()
    configure_logging(cfg.logging)

    engine = None
    if service is None:
        service, engine = build_service(cfg)

    app = FastAPI(title="AI Recommendation Service", version="0.1.0")
    app.state.config = cfg
    app.state.recommendation_service = service

    app.add_middleware(
        CORSMiddleware,
        allow_origins=cfg.api.allowed_origins,
        allow_methods=["GET"],
        allow_headers=["*"],
    )
    app.include_router(rec_router)

    @app.on_event("startup")
    def _startup() -> None:
        """Create the schema when this app owns its engine."""
        if engine is not None:
            init_db(engine)
        logger.info("recommendation_service_started", database=str(engine.url) if engine is not None else "injected")

    @app.exception_handler(NotFound)
    async def _not_found(request: Request, exc: NotFound) -> JSONResponse:
        return JSONResponse(status_code=404, content={"detail": str(exc)})

    @app.exception_handler(InvalidArgument)
    async def _invalid(request: Request, exc: InvalidArgument) -> JSONResponse:
        return JSONResponse(status_code=422, content={"detail": str(exc)})

    @app.exception_handler(Unavailable)
    async def _unavailable(request: Request, exc: Unavailable) -> JSONResponse:
        return JSONResponse(status_code=503, content={"detail": str(exc)})

    @app.get("/health")
    def health():
        return {"status": "ok"}

    return app


app = create_app()

from typing import Optional

import httpx
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from app.api.v1.routes.cache import router as cache_router
from app.api.v1.routes.cards import router as cards_router
from app.api.v1.routes.health import router as health_router
from app.core.config import AppConfig, load_config
from app.core.context import AppContext
from app.core.logging import configure_logging_if_needed


def create_app(
    config: Optional[AppConfig] = None,
    *,
    tools_transport: Optional[httpx.BaseTransport] = None,
) -> FastAPI:
    config = config or load_config()
    configure_logging_if_needed(config.log_level)

    app = FastAPI(title="RailWise Card Data API")

    # Dev-friendly CORS policy: allow all origins/methods/headers so the frontend can call the API directly.
    # Tighten this for production.
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=False,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.state.context = AppContext(config=config)
    app.state.tools_transport = tools_transport

    app.include_router(health_router, prefix="/v1")
    app.include_router(cards_router)
    app.include_router(cache_router)
    return app


app = create_app()

from typing import Optional

import time
from fastapi import FastAPI
from starlette.exceptions import HTTPException as StarletteHTTPException

from ..config import AppSettings
from ..logging import init_logging
from ..ingestion import DataboxClient, MarketstackClient, WeatherstackClient
from ..services.audit_log import FileAuditLog
from .middleware import RequestIDMiddleware, generic_exception_handler, http_exception_handler
from .routes import health, market, weather


def create_app(settings: Optional[AppSettings] = None) -> FastAPI:
    settings = settings or AppSettings()
    init_logging(settings.log_level, settings.app_name)

    app = FastAPI(
        title=settings.app_name,
        version=settings.app_version,
        openapi_tags=[
            {"name": "health", "description": "Service health and uptime"},
            {"name": "weather", "description": "Weatherstack to Databox forwarding"},
            {"name": "market", "description": "Marketstack to Databox forwarding"},
        ],
    )

    app.add_middleware(RequestIDMiddleware)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(Exception, generic_exception_handler)

    app.include_router(health.router, prefix="/health", tags=["health"])
    app.include_router(weather.router, prefix="/api", tags=["weather"])
    app.include_router(market.router, prefix="/api", tags=["market"])

    app.state.settings = settings
    app.state.start_time = time.time()
    # Clients hold no IO until called, so tests can swap them on app.state
    app.state.weather_client = WeatherstackClient(settings)
    app.state.market_client = MarketstackClient(settings)
    app.state.databox_client = DataboxClient(settings)
    app.state.audit_log = FileAuditLog(settings.audit_log_path)

    return app


def main() -> None:
    import uvicorn

    s = AppSettings()
    uvicorn.run(create_app(s), host=s.host, port=s.port)


if __name__ == "__main__":
    main()

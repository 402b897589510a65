import time
from typing import Dict

import structlog
from fastapi import APIRouter, Request

from ...config import AppSettings
from ...schemas.health import HealthResponse

router = APIRouter()
logger = structlog.get_logger()

# Settings the send endpoints cannot work without
REQUIRED_SETTINGS = (
    "weatherstack_api_key",
    "marketstack_api_key",
    "databox_api_key",
    "databox_weather_dataset_id",
    "databox_market_dataset_id",
)


def configuration_status(settings: AppSettings) -> Dict[str, bool]:
    return {name: bool(getattr(settings, name, None)) for name in REQUIRED_SETTINGS}


@router.get("/", response_model=HealthResponse, summary="Uptime and configuration status")
def health(request: Request) -> HealthResponse:
    state = request.app.state
    uptime = max(0.0, time.time() - float(getattr(state, "start_time", time.time())))
    configured = configuration_status(state.settings)
    missing = [name for name, ok in configured.items() if not ok]
    status = "degraded" if missing else "ok"
    # names only; the values are secrets
    logger.info("health_check", status=status, missing=missing)
    return HealthResponse(
        status=status,
        uptime_s=uptime,
        version=state.settings.app_version,
        configured=configured,
        missing=missing,
    )

from __future__ import annotations

from typing import List

import structlog
from fastapi import APIRouter, HTTPException, Request

from ...ingestion.models import WEATHER_FIELDS
from ...schemas.records import ErrorResponse, SendWeatherDataResponse, WeatherRecordOut

router = APIRouter()
logger = structlog.get_logger()

PROVIDER = "Weatherstack"


@router.post(
    "/sendWeatherData/{location}",
    response_model=SendWeatherDataResponse,
    summary="Fetch current weather and send it to Databox",
    responses={
        400: {"model": ErrorResponse, "description": "No data fetched or Databox rejected the send"},
        500: {"model": ErrorResponse, "description": "Upstream fetch failed"},
    },
)
def send_weather_data(request: Request, location: str) -> SendWeatherDataResponse:
    state = request.app.state
    audit = state.audit_log
    log = logger.bind(location=location)
    log.info("send_weather_data_started")

    try:
        records = state.weather_client.get_weather_data(location)
    except Exception as e:
        log.error("send_weather_data_fetch_failed", error=str(e))
        audit.log_data_send(PROVIDER, 0, 0, False, str(e))
        raise HTTPException(status_code=500, detail=str(e))

    if not records:
        audit.log_data_send(PROVIDER, 0, 0, False, "Failed to fetch weather data")
        raise HTTPException(status_code=400, detail="Failed to fetch weather data")

    success = state.databox_client.send_weather_data(records)
    audit.log_data_send(
        PROVIDER,
        len(records),
        len(WEATHER_FIELDS),
        success,
        None if success else "Failed to send to Databox",
    )
    if not success:
        raise HTTPException(status_code=400, detail="Failed to send data to Databox")

    log.info("send_weather_data_completed", count=len(records))
    return SendWeatherDataResponse(
        success=True,
        message="Weather data sent to Databox successfully",
        data=[WeatherRecordOut.from_record(r) for r in records],
    )


@router.get(
    "/weather/preview/{location}",
    response_model=List[WeatherRecordOut],
    summary="Fetch current weather without sending it",
)
def preview_weather_data(request: Request, location: str) -> List[WeatherRecordOut]:
    try:
        records = request.app.state.weather_client.get_weather_data(location)
    except Exception as e:
        logger.error("preview_weather_data_failed", location=location, error=str(e))
        raise HTTPException(status_code=500, detail=str(e))
    return [WeatherRecordOut.from_record(r) for r in records]

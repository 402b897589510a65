from __future__ import annotations

from typing import List

import structlog
from fastapi import APIRouter, HTTPException, Query, Request

from ...ingestion.market import DEFAULT_LIMIT
from ...ingestion.models import MARKET_FIELDS
from ...schemas.records import ErrorResponse, MarketRecordOut, SendMarketDataResponse

router = APIRouter()
logger = structlog.get_logger()

PROVIDER = "Marketstack"


@router.post(
    "/sendMarketData/{symbols}",
    response_model=SendMarketDataResponse,
    summary="Fetch end-of-day bars and send them to Databox",
    responses={
        400: {"model": ErrorResponse, "description": "No data fetched or Databox rejected the send"},
        500: {"model": ErrorResponse, "description": "Upstream fetch failed"},
    },
)
def send_market_data(
    request: Request,
    symbols: str,
    limit: int = Query(DEFAULT_LIMIT, gt=0, description="Maximum number of bars to fetch"),
) -> SendMarketDataResponse:
    state = request.app.state
    audit = state.audit_log
    log = logger.bind(symbols=symbols, limit=limit)
    log.info("send_market_data_started")

    try:
        records = state.market_client.get_market_data(symbols, limit)
    except Exception as e:
        log.error("send_market_data_fetch_failed", error=str(e))
        audit.log_data_send(PROVIDER, 0, 0, False, str(e))
        raise HTTPException(status_code=500, detail=str(e))

    if not records:
        audit.log_data_send(PROVIDER, 0, 0, False, "Failed to fetch market data")
        raise HTTPException(status_code=400, detail="Failed to fetch market data")

    success = state.databox_client.send_market_data(records)
    audit.log_data_send(
        PROVIDER,
        len(records),
        len(MARKET_FIELDS),
        success,
        None if success else "Failed to send to Databox",
    )
    if not success:
        raise HTTPException(status_code=400, detail="Failed to send data to Databox")

    log.info("send_market_data_completed", count=len(records))
    return SendMarketDataResponse(
        success=True,
        message="Market data sent to Databox successfully",
        data=[MarketRecordOut.from_record(r) for r in records],
    )


@router.get(
    "/market/preview/{symbols}",
    response_model=List[MarketRecordOut],
    summary="Fetch end-of-day bars without sending them",
)
def preview_market_data(
    request: Request,
    symbols: str,
    limit: int = Query(DEFAULT_LIMIT, gt=0),
) -> List[MarketRecordOut]:
    try:
        records = request.app.state.market_client.get_market_data(symbols, limit)
    except Exception as e:
        logger.error("preview_market_data_failed", symbols=symbols, error=str(e))
        raise HTTPException(status_code=500, detail=str(e))
    return [MarketRecordOut.from_record(r) for r in records]

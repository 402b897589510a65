from __future__ import annotations

from dataclasses import asdict
from typing import List

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from ..ingestion.models import MarketRecord, WeatherRecord


class _CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class WeatherRecordOut(_CamelModel):
    id: str
    location: str
    temperature_celsius: int
    humidity_percent: int
    description: str
    occurred_at: str

    @classmethod
    def from_record(cls, record: WeatherRecord) -> "WeatherRecordOut":
        return cls(**asdict(record))


class MarketRecordOut(_CamelModel):
    id: str
    symbol: str
    date: str
    open: float
    high: float
    low: float
    close: float
    volume: int
    occurred_at: str

    @classmethod
    def from_record(cls, record: MarketRecord) -> "MarketRecordOut":
        return cls(**asdict(record))


class SendWeatherDataResponse(BaseModel):
    success: bool
    message: str
    data: List[WeatherRecordOut] = Field(default_factory=list)


class SendMarketDataResponse(BaseModel):
    success: bool
    message: str
    data: List[MarketRecordOut] = Field(default_factory=list)


class ErrorResponse(BaseModel):
    error: str
    request_id: str = ""

    model_config = {
        "json_schema_extra": {
            "examples": [
                {"error": "Failed to send data to Databox", "request_id": "3f1c2b..."}
            ]
        }
    }

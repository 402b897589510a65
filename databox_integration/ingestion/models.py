from __future__ import annotations

import datetime as dt
import uuid
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Tuple

OCCURRED_AT_FORMAT = "%Y-%m-%dT%H:%M:%S.%fZ"

# Databox field names, in the order they are sent
WEATHER_FIELDS: Tuple[str, ...] = (
    "id",
    "location",
    "temperature",
    "humidity",
    "weather_description",
    "occurredAt",
)
MARKET_FIELDS: Tuple[str, ...] = (
    "id",
    "symbol",
    "date",
    "open",
    "high",
    "low",
    "close",
    "volume",
    "occurredAt",
)


def format_occurred_at(moment: dt.datetime) -> str:
    """Render a datetime as a UTC ``YYYY-MM-DDTHH:MM:SS.ffffffZ`` string.

    Naive datetimes are interpreted as UTC.
    """
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=dt.timezone.utc)
    else:
        moment = moment.astimezone(dt.timezone.utc)
    return moment.strftime(OCCURRED_AT_FORMAT)


def _utcnow() -> dt.datetime:
    return dt.datetime.now(dt.timezone.utc)


def _uuid4_str() -> str:
    return str(uuid.uuid4())


@dataclass(frozen=True)
class RecordStamper:
    """Source of record ids and ingest timestamps.

    Parsing code asks the stamper for ids and the ``occurredAt`` value instead
    of calling ``uuid``/``datetime`` directly, so tests can pin both.

    Notes
    -----
    ``occurredAt`` is the ingest time, not the upstream observation time.
    Sources stamp it once per parse pass, so all records of one batch share it.
    """

    clock: Callable[[], dt.datetime] = field(default=_utcnow)
    id_factory: Callable[[], str] = field(default=_uuid4_str)

    def new_id(self) -> str:
        return self.id_factory()

    def occurred_at(self) -> str:
        return format_occurred_at(self.clock())


@dataclass(frozen=True)
class WeatherRecord:
    """Single current-weather observation for one location."""

    id: str
    location: str
    temperature_celsius: int
    humidity_percent: int
    description: str
    occurred_at: str

    def to_databox(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "location": self.location,
            "temperature": self.temperature_celsius,
            "humidity": self.humidity_percent,
            "weather_description": self.description,
            "occurredAt": self.occurred_at,
        }


@dataclass(frozen=True)
class MarketRecord:
    """End-of-day bar for one symbol and trading date."""

    id: str
    symbol: str
    date: str
    open: float
    high: float
    low: float
    close: float
    volume: int
    occurred_at: str

    def to_databox(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "symbol": self.symbol,
            "date": self.date,
            "open": self.open,
            "high": self.high,
            "low": self.low,
            "close": self.close,
            "volume": self.volume,
            "occurredAt": self.occurred_at,
        }

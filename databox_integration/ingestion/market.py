from __future__ import annotations

import math
from typing import Any, Dict, List, Sequence, Union
from urllib.parse import quote

from ..errors import PayloadError
from .base import DataSource
from .fields import as_float, as_str, is_number, optional, require
from .models import MarketRecord

DEFAULT_LIMIT = 5

# Null/absent fallbacks for each element of the Marketstack ``data`` array
MARKET_DEFAULTS: Dict[str, Any] = {
    "symbol": "",
    "date": "",
    "open": 0.0,
    "high": 0.0,
    "low": 0.0,
    "close": 0.0,
    "volume": 0,
}

PRICE_FIELDS = ("open", "high", "low", "close")


def join_symbols(symbols: Union[str, Sequence[str]]) -> str:
    if isinstance(symbols, str):
        return symbols
    return ",".join(s.strip() for s in symbols if s and s.strip())


def _volume(value: Any) -> int:
    if is_number(value) and math.isfinite(value):
        return int(value)
    return MARKET_DEFAULTS["volume"]


class MarketstackClient(DataSource[MarketRecord]):
    """Marketstack ``/v1/eod`` implementation of `DataSource`.

    Notes and assumptions:
    - One record per element of the top-level ``data`` array; an empty array
      is a valid, empty result. A missing ``data`` key is a parse failure.
    - Prices default to 0.0 when null; ``volume`` defaults to 0 when null or
      not a number and is truncated to an integer otherwise.
    - ``date`` is passed through as reported, without reparsing.
    - ``occurredAt`` is stamped once per parse pass and shared by the batch.
    """

    service_name = "Marketstack"
    api_key_setting = "marketstack_api_key"

    def build_url(self, symbols: Union[str, Sequence[str]], limit: int = DEFAULT_LIMIT) -> str:
        base = self.settings.marketstack_base_url.rstrip("/")
        return (
            f"{base}/v1/eod"
            f"?access_key={quote(self.api_key(), safe='')}"
            f"&symbols={quote(join_symbols(symbols), safe=',')}"
            f"&limit={int(limit)}"
        )

    def parse(self, payload: Any) -> List[MarketRecord]:
        svc = self.service_name
        data = require(payload, "data", path="data", service=svc)
        if not isinstance(data, list):
            raise PayloadError("field 'data' must be a list", svc, field="data")

        occurred_at = self.stamper.occurred_at()
        records: List[MarketRecord] = []
        for i, item in enumerate(data):
            if not isinstance(item, dict):
                raise PayloadError(f"field 'data[{i}]' must be an object", svc, field=f"data[{i}]")
            prices = {
                key: as_float(optional(item, key, MARKET_DEFAULTS), path=f"data[{i}].{key}", service=svc)
                for key in PRICE_FIELDS
            }
            records.append(
                MarketRecord(
                    id=self.stamper.new_id(),
                    symbol=as_str(optional(item, "symbol", MARKET_DEFAULTS), path=f"data[{i}].symbol", service=svc),
                    date=as_str(optional(item, "date", MARKET_DEFAULTS), path=f"data[{i}].date", service=svc),
                    volume=_volume(optional(item, "volume", MARKET_DEFAULTS)),
                    occurred_at=occurred_at,
                    **prices,
                )
            )
        return records

    def get_market_data(self, symbols: Union[str, Sequence[str]], limit: int = DEFAULT_LIMIT) -> List[MarketRecord]:
        if isinstance(limit, bool) or not isinstance(limit, int) or limit <= 0:
            raise ValueError("limit must be a positive integer")
        return self.fetch(symbols, limit)

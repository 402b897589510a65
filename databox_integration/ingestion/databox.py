from __future__ import annotations

import json
from typing import Any, Dict, List, Optional, Sequence

import requests
import structlog

from ..config import AppSettings
from .models import MarketRecord, WeatherRecord

logger = structlog.get_logger()


class DataboxClient:
    """Posts normalized records to the Databox ingestion API.

    The API key is read once at construction and attached to every send as a
    static ``x-api-key`` header. Dataset ids are resolved per send, so a
    missing id is reported at send time.

    Both send methods return a boolean and never raise: ``False`` means either
    the dataset id is not configured, the request could not be made, or Databox
    answered with a non-2xx status.
    """

    def __init__(self, settings: AppSettings) -> None:
        self.settings = settings
        api_key = settings.databox_api_key
        if not api_key:
            logger.warning("databox_api_key_missing")
        self.headers: Dict[str, str] = {"x-api-key": api_key or ""}

    def _session(self) -> requests.Session:
        # One session per send; requests sessions are not safe to share across threads
        s = requests.Session()
        s.headers.update(self.headers)
        return s

    def dataset_url(self, dataset_id: str) -> str:
        base = self.settings.databox_base_url.rstrip("/")
        return f"{base}/v1/datasets/{dataset_id}/data"

    def send_weather_data(self, records: Sequence[WeatherRecord]) -> bool:
        return self._send(records, self.settings.databox_weather_dataset_id, kind="weather")

    def send_market_data(self, records: Sequence[MarketRecord]) -> bool:
        return self._send(records, self.settings.databox_market_dataset_id, kind="market")

    def _send(self, records: Sequence[Any], dataset_id: Optional[str], kind: str) -> bool:
        log = logger.bind(kind=kind)
        if not dataset_id:
            log.error("databox_dataset_id_missing")
            return False

        try:
            rows: List[Dict[str, Any]] = [r.to_databox() for r in records]
            body = json.dumps({"records": rows}, allow_nan=False)
            log.info("databox_send_started", dataset_id=dataset_id, count=len(rows))
            with self._session() as s:
                resp = s.post(
                    self.dataset_url(dataset_id),
                    data=body,
                    headers={"Content-Type": "application/json"},
                    timeout=self.settings.http_timeout_seconds,
                )
            status = int(resp.status_code)
            text = resp.text
        except Exception as e:
            log.error("databox_send_exception", dataset_id=dataset_id, error=str(e))
            return False

        if 200 <= status < 300:
            log.info("databox_send_succeeded", dataset_id=dataset_id, status=status, response=text)
            return True
        log.error("databox_send_failed", dataset_id=dataset_id, status=status, response=text)
        return False

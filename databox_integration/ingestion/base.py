from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, Generic, List, Optional, TypeVar

import requests
import structlog

from ..config import AppSettings
from ..errors import FetchError, PayloadError, UpstreamError
from .models import RecordStamper

T = TypeVar("T")

logger = structlog.get_logger()


def _reject_constant(token: str) -> Any:
    # NaN, Infinity and -Infinity are not valid JSON
    raise ValueError(f"non-standard JSON token {token}")


class DataSource(ABC, Generic[T]):
    """Fetch-and-normalize contract shared by the upstream APIs.

    Subclasses provide the URL layout and the payload mapping; `fetch` owns the
    request, JSON decoding and error translation.

    Assumptions:
    - One blocking GET per `fetch` call, no retries.
    - Every failure (transport, non-2xx, invalid JSON, missing field, upstream
      error envelope) surfaces as `FetchError`. An empty list always means the
      upstream legitimately returned nothing.
    """

    #: Human readable name used in logs and error messages.
    service_name: str = "upstream"
    #: Name of the `AppSettings` attribute holding this source's API key.
    api_key_setting: str = ""

    def __init__(self, settings: AppSettings, stamper: Optional[RecordStamper] = None) -> None:
        self.settings = settings
        self.stamper = stamper or RecordStamper()

    def api_key(self) -> str:
        return getattr(self.settings, self.api_key_setting, None) or ""

    @abstractmethod
    def build_url(self, *params: Any) -> str:
        """Compose the upstream request URL from the API key and `params`."""

    @abstractmethod
    def parse(self, payload: Any) -> List[T]:
        """Map a decoded JSON document to records. Must not mutate `payload`."""

    def _session(self) -> requests.Session:
        return requests.Session()

    def fetch(self, *params: Any) -> List[T]:
        url = self.build_url(*params)
        log = logger.bind(service=self.service_name)
        # The URL carries the access key; log the caller's parameters instead
        log.info("upstream_fetch_started", params=[str(p) for p in params])

        try:
            with self._session() as s:
                resp = s.get(url, timeout=self.settings.http_timeout_seconds)
        except requests.RequestException as e:
            log.error("upstream_unreachable", error=str(e))
            raise FetchError(f"{self.service_name} request failed: {e}", self.service_name) from e

        if not 200 <= resp.status_code < 300:
            err = self._error_from_body(resp)
            log.error("upstream_http_error", status=resp.status_code, error=str(err))
            raise err

        try:
            payload = resp.json(parse_constant=_reject_constant)
        except ValueError as e:
            log.error("upstream_invalid_json", error=str(e))
            raise FetchError(f"{self.service_name} returned invalid JSON: {e}", self.service_name) from e

        upstream = self.upstream_error(payload)
        if upstream is not None:
            log.error("upstream_error_payload", code=upstream.code, error=str(upstream))
            raise upstream

        try:
            records = self.parse(payload)
        except PayloadError as e:
            e.service = e.service or self.service_name
            log.error("upstream_payload_invalid", field=e.field, error=str(e))
            raise
        except (KeyError, IndexError, TypeError, AttributeError) as e:
            log.error("upstream_payload_invalid", error=repr(e))
            raise PayloadError(
                f"{self.service_name} payload could not be parsed: {e!r}", self.service_name
            ) from e

        log.info("upstream_fetch_succeeded", count=len(records))
        return records

    def upstream_error(self, payload: Any) -> Optional[UpstreamError]:
        """Return the error described by an upstream error envelope, if any.

        Both APIs report failures as ``{"error": {...}}``; Weatherstack also
        sets ``"success": false`` and answers with HTTP 200.
        """
        if not isinstance(payload, dict):
            return None
        error = payload.get("error")
        if payload.get("success") is not False and not isinstance(error, dict):
            return None
        error = error if isinstance(error, dict) else {}
        message = error.get("info") or error.get("message") or "upstream reported an error"
        code = error.get("code", error.get("type"))
        return UpstreamError(
            f"{self.service_name} error: {message}",
            self.service_name,
            code=str(code) if code is not None else None,
        )

    def _error_from_body(self, resp: requests.Response) -> FetchError:
        try:
            payload = resp.json()
        except ValueError:
            payload = None
        upstream = self.upstream_error(payload)
        if upstream is not None:
            return upstream
        return FetchError(
            f"{self.service_name} returned HTTP {resp.status_code}", self.service_name
        )

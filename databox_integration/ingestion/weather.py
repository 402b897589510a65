from __future__ import annotations

from typing import Any, Dict, List
from urllib.parse import quote

from ..errors import PayloadError
from .base import DataSource
from .fields import as_int, as_str, optional, require
from .models import WeatherRecord

# Null/absent fallbacks for optional Weatherstack fields
WEATHER_DEFAULTS: Dict[str, Any] = {
    "name": "",
    "description": "",
}


class WeatherstackClient(DataSource[WeatherRecord]):
    """Weatherstack ``/current`` implementation of `DataSource`.

    Notes and assumptions:
    - The endpoint is single-location and single-observation, so a successful
      fetch always yields exactly one record.
    - ``current.temperature`` and ``current.humidity`` are required integers
      (zero and negative values are kept verbatim).
    - ``current.weather_descriptions`` must be present; an empty list gives an
      empty description.
    - ``location.name`` is optional and defaults to an empty string.
    """

    service_name = "Weatherstack"
    api_key_setting = "weatherstack_api_key"

    def build_url(self, location: str) -> str:
        base = self.settings.weatherstack_base_url.rstrip("/")
        return (
            f"{base}/current"
            f"?access_key={quote(self.api_key(), safe='')}"
            f"&query={quote(str(location), safe=',')}"
        )

    def parse(self, payload: Any) -> List[WeatherRecord]:
        svc = self.service_name
        current = require(payload, "current", path="current", service=svc)

        # A missing or null location object just means no display name
        location = payload.get("location")
        name = as_str(optional(location, "name", WEATHER_DEFAULTS), path="location.name", service=svc)

        temperature = as_int(
            require(current, "temperature", path="current.temperature", service=svc),
            path="current.temperature",
            service=svc,
        )
        humidity = as_int(
            require(current, "humidity", path="current.humidity", service=svc),
            path="current.humidity",
            service=svc,
        )
        descriptions = require(current, "weather_descriptions", path="current.weather_descriptions", service=svc)
        if not isinstance(descriptions, list):
            raise PayloadError(
                "field 'current.weather_descriptions' must be a list",
                svc,
                field="current.weather_descriptions",
            )
        first = descriptions[0] if descriptions else None
        description = WEATHER_DEFAULTS["description"] if first is None else as_str(
            first, path="current.weather_descriptions[0]", service=svc
        )

        return [
            WeatherRecord(
                id=self.stamper.new_id(),
                location=name,
                temperature_celsius=temperature,
                humidity_percent=humidity,
                description=description,
                occurred_at=self.stamper.occurred_at(),
            )
        ]

    def get_weather_data(self, location: str) -> List[WeatherRecord]:
        return self.fetch(location)

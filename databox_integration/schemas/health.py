from typing import Dict, List

from pydantic import BaseModel, Field


class HealthResponse(BaseModel):
    """Liveness plus which upstream credentials and Databox datasets are set.

    ``status`` is ``degraded`` while any of them is missing: the service is up
    but the affected send endpoints will fail.
    """

    status: str = Field(description="ok or degraded")
    uptime_s: float = Field(ge=0)
    version: str
    configured: Dict[str, bool] = Field(default_factory=dict)
    missing: List[str] = Field(default_factory=list)

    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "status": "degraded",
                    "uptime_s": 12.34,
                    "version": "0.1.0",
                    "configured": {
                        "weatherstack_api_key": True,
                        "marketstack_api_key": False,
                        "databox_api_key": True,
                        "databox_weather_dataset_id": True,
                        "databox_market_dataset_id": False,
                    },
                    "missing": ["marketstack_api_key", "databox_market_dataset_id"],
                }
            ]
        }
    }

# Ensure repo root is on sys.path for absolute imports like `databox_integration.*`
import os
import sys

import pytest

REPO_ROOT = os.path.dirname(os.path.dirname(os.path.dirname(__file__)))
if REPO_ROOT not in sys.path:
    sys.path.insert(0, REPO_ROOT)

from databox_integration.config import AppSettings  # noqa: E402


@pytest.fixture
def settings(tmp_path) -> AppSettings:
    # _env_file=None keeps a developer's .env out of the tests
    return AppSettings(
        _env_file=None,
        weatherstack_api_key="weather-key",
        marketstack_api_key="market-key",
        databox_api_key="test-api-key",
        databox_weather_dataset_id="weather-dataset-123",
        databox_market_dataset_id="market-dataset-456",
        audit_log_path=str(tmp_path / "integration.log"),
    )

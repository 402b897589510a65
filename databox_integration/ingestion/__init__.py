"""Ingestion subpackage.

Upstream clients that fetch and normalize weather and market data, and the
Databox client that forwards the normalized records.
"""

from .base import DataSource
from .databox import DataboxClient
from .market import MarketstackClient
from .models import MarketRecord, RecordStamper, WeatherRecord
from .weather import WeatherstackClient

__all__ = [
    "DataSource",
    "DataboxClient",
    "MarketRecord",
    "MarketstackClient",
    "RecordStamper",
    "WeatherRecord",
    "WeatherstackClient",
]

"""Weather and market data forwarding to the Databox ingestion API."""

__version__ = "0.1.0"

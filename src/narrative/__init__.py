"""Narrative: asset sentiment ingestion and market data sync pipeline."""

__version__ = "0.1.0"

"""
Services Package
================

These are the "workers" that do the actual work.

- MeasurementStore: Owns the measurements table, answers every query
- IngestionService: Decodes sensor submissions and stores them
- decode_request: Picks the right submission shape from the `type` tag
"""

from .measurement_store import MeasurementStore
from .request_decoder import decode_request
from .ingestion_service import DeviceIdentity, IngestionResult, IngestionService

__all__ = [
    "MeasurementStore",
    "decode_request",
    "DeviceIdentity",
    "IngestionResult",
    "IngestionService",
]

"""
Ingestion Service
=================

What happens when a sensor POSTs a reading:

    body --decode--> submission --check--> store.save() --> "Received ..."

1. Decode the body into one of the three submission shapes (DecodeError if not)
2. Refuse submissions that carry neither temperature nor humidity
3. Save whatever values the shape carries - and nothing it doesn't
4. Hand back a short human-readable acknowledgment

Who sent it (IP, MAC, device name) comes from the HTTP layer as a
DeviceIdentity. Nothing here keeps state between requests.
"""

import logging
from dataclasses import dataclass
from typing import Optional, Union

from tempmon.errors import StoreError, ValidationError
from tempmon.models import HumidityRequest, TemperatureHumidityRequest, TemperatureRequest
from tempmon.services.measurement_store import FAILED_INSERT_ID, MeasurementStore
from tempmon.services.request_decoder import Submission, decode_request

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DeviceIdentity:
    """Who a submission came from, as seen by the transport."""
    ip_address: Optional[str] = None
    mac_address: Optional[str] = None
    device_name: Optional[str] = None


@dataclass(frozen=True)
class IngestionResult:
    """What got stored, and the text sent back to the sensor."""
    measurement_id: int
    submission: Submission
    message: str


class IngestionService:
    """Turns raw submissions into stored measurements."""

    def __init__(self, store: MeasurementStore):
        self.store = store

    def ingest(self, body: Union[bytes, str, dict], identity: DeviceIdentity) -> IngestionResult:
        """
        Decode, check, and store one submission.

        Args:
            body: Raw request body
            identity: Sender identity from the transport

        Returns:
            IngestionResult with the new id and acknowledgment text

        Raises:
            DecodeError: Body is not a known submission shape
            ValidationError: Submission has no temperature and no humidity
            StoreError: The insert failed
        """
        submission = decode_request(body)
        return self.record(submission, identity)

    def record(self, submission: Submission, identity: DeviceIdentity) -> IngestionResult:
        """Store an already-decoded submission."""
        temperature, humidity = _carried_values(submission)
        if temperature is None and humidity is None:
            raise ValidationError(
                f"{type(submission).__name__} carries neither temperature nor humidity"
            )

        # The transport's view wins; the body only fills gaps
        ip_address = identity.ip_address or submission.ip_address or "unknown"
        device_name = identity.device_name or submission.device_name

        measurement_id = self.store.save(
            temperature=temperature,
            humidity=humidity,
            ip_address=ip_address,
            mac_address=identity.mac_address,
            device_name=device_name,
        )
        if measurement_id == FAILED_INSERT_ID:
            raise StoreError("Measurement was not stored: database returned no id")

        message = acknowledgment(submission)
        logger.info(
            f"[INGEST] #{measurement_id} from {device_name or '?'} "
            f"({identity.mac_address or 'no mac'}, {ip_address}): {message}"
        )
        return IngestionResult(measurement_id=measurement_id, submission=submission, message=message)


def _carried_values(submission: Submission) -> tuple[Optional[float], Optional[float]]:
    """(temperature, humidity) exactly as the submission shape carries them."""
    if isinstance(submission, TemperatureHumidityRequest):
        return submission.temperature, submission.humidity
    if isinstance(submission, HumidityRequest):
        return None, submission.humidity
    if isinstance(submission, TemperatureRequest):
        return submission.temperature, None
    raise TypeError(f"Unhandled submission type: {type(submission).__name__}")


def acknowledgment(submission: Submission) -> str:
    """Human-readable description of what was recorded."""
    if isinstance(submission, TemperatureHumidityRequest):
        return (
            f"Received TemperatureHumidityRequest: "
            f"Temp={submission.temperature}, Humidity={submission.humidity}"
        )
    if isinstance(submission, HumidityRequest):
        return f"Received HumidityRequest: Humidity={submission.humidity}"
    if isinstance(submission, TemperatureRequest):
        return f"Received TemperatureRequest: Temp={submission.temperature}"
    raise TypeError(f"Unhandled submission type: {type(submission).__name__}")

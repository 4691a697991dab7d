"""
Sensor Ingestion Router
=======================

Sensors wake up, read temperature and/or humidity, and POST it here.

Endpoint:
  POST /request  - Submit one reading. Answers in plain text.

Body (JSON), one of:
  {"type": "TEMPERATURE_HUMIDITY", "temperature": 25.0, "humidity": 60.0}
  {"type": "HUMIDITY", "humidity": 60.0}
  {"type": "TEMPERATURE", "temperature": 25.0}

Who sent it:
  - IP address: taken from the connection itself
  - X-MAC-Address / X-Device-Name: query parameters (what the firmware
    sends) or, failing that, request headers

Success is 200 "Received ...". Anything wrong is 400 with the reason.
"""

import logging
from typing import Optional

from fastapi import APIRouter, Request
from fastapi.responses import PlainTextResponse
from starlette.concurrency import run_in_threadpool

from tempmon.errors import DecodeError, TempMonError, ValidationError
from tempmon.services import DeviceIdentity, IngestionService

logger = logging.getLogger(__name__)

router = APIRouter(tags=["ingestion"])

MAC_ADDRESS_FIELD = "X-MAC-Address"
DEVICE_NAME_FIELD = "X-Device-Name"


def _side_channel(request: Request, name: str) -> Optional[str]:
    """A device identity field from the query string, else from the headers."""
    value = request.query_params.get(name) or request.headers.get(name)
    if value is None:
        return None
    return value.strip() or None


def device_identity(request: Request) -> DeviceIdentity:
    """Build the sender's identity from the transport."""
    return DeviceIdentity(
        ip_address=request.client.host if request.client else None,
        mac_address=_side_channel(request, MAC_ADDRESS_FIELD),
        device_name=_side_channel(request, DEVICE_NAME_FIELD),
    )


@router.post(
    "/request",
    response_class=PlainTextResponse,
    summary="Submit measurement data",
    responses={
        200: {"description": "Successful submission", "content": {"text/plain": {}}},
        400: {"description": "Invalid request body", "content": {"text/plain": {}}},
    },
)
async def submit_measurement(request: Request):
    """
    Submit temperature and/or humidity data from a device.

    The body is read raw and decoded by its `type` tag; the insert runs on
    the threadpool so it never blocks the event loop.
    """
    ingestion: IngestionService = request.app.state.ingestion
    identity = device_identity(request)
    body = await request.body()

    try:
        result = await run_in_threadpool(ingestion.ingest, body, identity)
    except (DecodeError, ValidationError) as e:
        logger.warning(f"[INGEST] Rejected submission from {identity.ip_address}: {e}")
        return PlainTextResponse(f"Invalid request body: {e}", status_code=400)
    except TempMonError as e:
        logger.warning(f"[INGEST] Could not store submission from {identity.ip_address}: {e}")
        return PlainTextResponse(f"Error storing measurement: {e}", status_code=400)
    except Exception as e:
        logger.exception(f"[INGEST] Unexpected error handling submission from {identity.ip_address}")
        return PlainTextResponse(f"Error storing measurement: {e}", status_code=400)

    return PlainTextResponse(result.message)

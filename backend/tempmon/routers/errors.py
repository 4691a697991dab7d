"""
Error Boundary for Endpoints
============================

Every endpoint wraps its work in `client_errors(...)` so that nothing
escapes as a 500 or kills the worker thread:

    with client_errors("retrieving devices"):
        return store.list_devices(limit, offset)

Any failure becomes a 400 whose detail names the operation and the cause,
e.g. "Error retrieving devices: Failed to retrieve devices: disk I/O error".

Query parameters FastAPI itself rejects (limit=abc, offset=-1) get the
same treatment through `request_validation_handler`.
"""

import logging
from contextlib import contextmanager
from typing import Iterator

from fastapi import HTTPException, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from tempmon.errors import StoreError, TempMonError

logger = logging.getLogger(__name__)


@contextmanager
def client_errors(operation: str) -> Iterator[None]:
    """Convert any exception raised inside the block into a 400 HTTPException."""
    try:
        yield
    except HTTPException:
        raise
    except StoreError as e:
        logger.exception(f"Error {operation}")
        raise HTTPException(status_code=400, detail=f"Error {operation}: {e}") from e
    except TempMonError as e:
        logger.warning(f"Error {operation}: {e}")
        raise HTTPException(status_code=400, detail=f"Error {operation}: {e}") from e
    except Exception as e:
        logger.exception(f"Unexpected error {operation}")
        raise HTTPException(status_code=400, detail=f"Error {operation}: {e}") from e


def describe_validation_errors(error: RequestValidationError) -> str:
    """One line per bad parameter, e.g. "limit: Input should be greater than or equal to 1"."""
    parts = []
    for item in error.errors():
        location = [str(p) for p in item.get("loc", ()) if p not in ("query", "header", "body")]
        parts.append(f"{'.'.join(location) or 'request'}: {item.get('msg', 'invalid value')}")
    return "; ".join(parts)


async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Answer rejected parameters with 400 and a readable `detail` string."""
    message = f"Invalid request parameters: {describe_validation_errors(exc)}"
    logger.warning(f"{request.method} {request.url.path}: {message}")
    return JSONResponse(status_code=400, content={"detail": message})

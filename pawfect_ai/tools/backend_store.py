"""
Marketplace Backend Data Store

Async DataStore over the marketplace backend REST API.
Uses a module-level singleton AsyncClient for efficient connection pooling.

Functions:
- get_client: Shared pooled client
- aclose_client: Close the HTTP client (call during app shutdown)

Responses may wrap records in {"data": ...} and may use camelCase keys;
both are normalized before pydantic parsing.
"""

import os
import logging
import re
from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Optional

import httpx
from pydantic import ValidationError as PydanticValidationError

from pawfect_ai.core.config import settings
from pawfect_ai.core.errors import DataUnavailableError, NotFoundError
from pawfect_ai.core.logging import get_trace_id
from pawfect_ai.schemas.booking import Booking, BookingDraft, BookingStatus
from pawfect_ai.schemas.pet import Pet
from pawfect_ai.schemas.sitter import SitterRecord
from pawfect_ai.schemas.slots import HistoricalBooking

logger = logging.getLogger(__name__)

# ============================================================================
# Configuration - Read from environment
# ============================================================================

SITTER_PATH = os.getenv("BACKEND_SITTER_PATH", "/sitters/{sitter_id}")
SITTER_BOOKINGS_PATH = os.getenv("BACKEND_SITTER_BOOKINGS_PATH", "/sitters/{sitter_id}/bookings")
PAIR_HISTORY_PATH = os.getenv("BACKEND_PAIR_HISTORY_PATH", "/pets/{pet_id}/sitters/{sitter_id}/history")
BOOKINGS_PATH = os.getenv("BACKEND_BOOKINGS_PATH", "/bookings")
BOOKING_PATH = os.getenv("BACKEND_BOOKING_PATH", "/bookings/{booking_id}")
BOOKING_STATUS_PATH = os.getenv("BACKEND_BOOKING_STATUS_PATH", "/bookings/{booking_id}/status")
OWNER_PETS_PATH = os.getenv("BACKEND_OWNER_PETS_PATH", "/owners/{owner_id}/pets")
PET_PATH = os.getenv("BACKEND_PET_PATH", "/pets/{pet_id}")


# ============================================================================
# Module-level HTTP Client (Singleton with Connection Pooling)
# ============================================================================

_client: Optional[httpx.AsyncClient] = None


def get_client() -> httpx.AsyncClient:
    """
    Get or create the module-level httpx.AsyncClient singleton.

    Returns:
        Shared httpx.AsyncClient instance
    """
    global _client

    if _client is None or _client.is_closed:
        limits = httpx.Limits(
            max_connections=settings.DEFAULT_CLIENT_MAX_CONNECTIONS,
            max_keepalive_connections=settings.DEFAULT_CLIENT_MAX_KEEPALIVE
        )

        _client = httpx.AsyncClient(
            timeout=settings.BACKEND_CLIENT_TIMEOUT,
            limits=limits,
            follow_redirects=False
        )
        logger.info("Initialized backend data store httpx.AsyncClient with connection pooling")

    return _client


async def aclose_client() -> None:
    """Close the module-level client. Called from the FastAPI lifespan."""
    global _client

    if _client is not None and not _client.is_closed:
        await _client.aclose()
        logger.info("Closed backend data store httpx.AsyncClient")
        _client = None


# ============================================================================
# Helper Functions
# ============================================================================

_CAMEL_RE = re.compile(r"(?<!^)(?=[A-Z])")


def _snake_keys(data: Any) -> Any:
    """Recursively convert camelCase dict keys to snake_case."""
    if isinstance(data, dict):
        return {_CAMEL_RE.sub("_", str(k)).lower(): _snake_keys(v) for k, v in data.items()}
    if isinstance(data, list):
        return [_snake_keys(item) for item in data]
    return data


def _unwrap(payload: Any) -> Any:
    if isinstance(payload, dict) and "data" in payload and len(payload) <= 3:
        return payload["data"]
    return payload


def _jsonable(value: Any) -> Any:
    if isinstance(value, datetime):
        return value.isoformat()
    if isinstance(value, Enum):
        return value.value
    return value


def _build_headers() -> Dict[str, str]:
    headers = {
        "Content-Type": "application/json",
        "Accept": "application/json",
    }

    trace_id = get_trace_id()
    if trace_id and trace_id != "-":
        headers["x-request-id"] = trace_id

    return headers


class BackendDataStore:
    """DataStore backed by the marketplace backend REST API."""

    def __init__(self, base_url: Optional[str] = None):
        self.base_url = (base_url or settings.BACKEND_API_URL).rstrip("/")
        logger.info(f"Backend data store configured with URL: {self.base_url}")

    async def _request(self, method: str, path: str, what: str, **kwargs) -> Any:
        url = f"{self.base_url}{path}"
        try:
            response = await get_client().request(method, url, headers=_build_headers(), **kwargs)
            response.raise_for_status()
            return _snake_keys(_unwrap(response.json()))
        except httpx.HTTPStatusError as e:
            status_code = e.response.status_code
            logger.warning(f"Backend error {status_code} on {method} {path}")
            if status_code == 404:
                raise NotFoundError(f"{what} not found") from e
            raise DataUnavailableError(
                f"Backend failed while loading {what}", details={"status": status_code}
            ) from e
        except httpx.RequestError as e:
            logger.error(f"Backend connection error: {type(e).__name__}: {e}")
            raise DataUnavailableError(f"Cannot reach backend for {what}") from e
        except ValueError as e:
            raise DataUnavailableError(f"Backend returned malformed {what}") from e

    @staticmethod
    def _parse(model, data: Any, what: str):
        try:
            return model.model_validate(data)
        except PydanticValidationError as e:
            logger.warning(f"Malformed {what} from backend: {e.error_count()} errors")
            raise DataUnavailableError(f"Backend returned malformed {what}") from e

    def _parse_list(self, model, data: Any, what: str) -> list:
        if not isinstance(data, list):
            raise DataUnavailableError(f"Backend returned malformed {what}")
        return [self._parse(model, item, what) for item in data]

    # ==================== Reads ====================

    async def get_sitter(self, sitter_id: str) -> SitterRecord:
        data = await self._request("GET", SITTER_PATH.format(sitter_id=sitter_id), "sitter")
        return self._parse(SitterRecord, data, "sitter")

    async def get_bookings_for_sitter(
        self, sitter_id: str, start: datetime, end: datetime
    ) -> List[Booking]:
        data = await self._request(
            "GET",
            SITTER_BOOKINGS_PATH.format(sitter_id=sitter_id),
            "sitter bookings",
            params={"from": start.isoformat(), "to": end.isoformat()},
        )
        return self._parse_list(Booking, data, "sitter bookings")

    async def get_bookings_for_pet_sitter_pair(
        self, pet_id: str, sitter_id: str
    ) -> List[HistoricalBooking]:
        data = await self._request(
            "GET", PAIR_HISTORY_PATH.format(pet_id=pet_id, sitter_id=sitter_id), "booking history"
        )
        return self._parse_list(HistoricalBooking, data, "booking history")

    async def get_booking(self, booking_id: str) -> Booking:
        data = await self._request("GET", BOOKING_PATH.format(booking_id=booking_id), "booking")
        return self._parse(Booking, data, "booking")

    async def get_pets_by_owner(self, owner_id: str) -> List[Pet]:
        data = await self._request("GET", OWNER_PETS_PATH.format(owner_id=owner_id), "pets")
        return self._parse_list(Pet, data, "pets")

    async def get_pet(self, pet_id: str) -> Pet:
        data = await self._request("GET", PET_PATH.format(pet_id=pet_id), "pet")
        return self._parse(Pet, data, "pet")

    # ==================== Writes ====================

    async def create_booking(self, draft: BookingDraft) -> Booking:
        data = await self._request(
            "POST", BOOKINGS_PATH, "booking", json=draft.model_dump(mode="json")
        )
        return self._parse(Booking, data, "booking")

    async def update_booking_status(self, booking_id: str, status: BookingStatus) -> Booking:
        data = await self._request(
            "PATCH",
            BOOKING_STATUS_PATH.format(booking_id=booking_id),
            "booking",
            json={"status": status.value},
        )
        return self._parse(Booking, data, "booking")

    async def update_booking(self, booking_id: str, fields: Dict[str, Any]) -> Booking:
        payload = {key: _jsonable(value) for key, value in fields.items()}
        data = await self._request(
            "PATCH", BOOKING_PATH.format(booking_id=booking_id), "booking", json=payload
        )
        return self._parse(Booking, data, "booking")

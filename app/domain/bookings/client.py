"""HTTP client the booking form uses to reach the intake API"""

import logging
from typing import Optional

import httpx

logger = logging.getLogger(__name__)


class BookingSubmissionError(Exception):
    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


class BookingApiClient:
    def __init__(
        self,
        base_url: str,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        timeout: float = 30.0,
    ):
        self.base_url = base_url.rstrip("/")
        self._transport = transport
        self.timeout = timeout

    async def submit_booking(self, payload: dict) -> dict:
        """POST the payload and return the acknowledgment body"""
        try:
            async with httpx.AsyncClient(
                base_url=self.base_url, transport=self._transport, timeout=self.timeout
            ) as client:
                response = await client.post("/api/bookings", json=payload)
        except httpx.HTTPError as e:
            logger.error(f"❌ Could not reach booking API: {e}")
            raise BookingSubmissionError("Failed to submit booking. Please try again.") from e

        try:
            body = response.json()
        except ValueError:
            body = {}

        if response.status_code >= 400:
            message = body.get("message") or "Failed to submit booking"
            logger.warning(f"Booking API rejected submission: {response.status_code} {message}")
            raise BookingSubmissionError(message, status_code=response.status_code)

        return body

"""
Google Sheets Service
Appends one row per booking to the bookings spreadsheet using a service account
"""
import logging
import time
from typing import Optional
from urllib.parse import quote

import httpx
from jose import jwt
from jose.exceptions import JOSEError

from ..config import SHEETS_SCOPE, ServiceAccountConfig
from ..domain.bookings.schemas import BookingSubmission

logger = logging.getLogger(__name__)

GOOGLE_SHEETS_API = "https://sheets.googleapis.com/v4/spreadsheets"
TOKEN_LIFETIME_SECONDS = 3600
# Refresh slightly before Google expires the token
TOKEN_REFRESH_MARGIN_SECONDS = 300

# Column order of the bookings sheet. Do not reorder: existing rows depend on it.
SHEET_COLUMNS = (
    "name",
    "email",
    "phone",
    "alternatePhone",
    "carMake",
    "carModel",
    "carColor",
    "carYear",
    "address",
    "city",
    "state",
    "zipCode",
    "licensePlate",
    "vin",
    "transmission",
    "fuelType",
    "mileage",
    "maintenanceHistory",
    "previousAccidents",
    "inspectionPurpose",
    "preferredInspector",
    "timePreference",
    "specialRequests",
    "specificConcerns",
    "emergencyContact",
    "date",
    "paymentStatus",
    "transactionId",
    "packageType",
)


class SpreadsheetError(Exception):
    """Authentication or append against the Sheets API failed"""


def booking_to_row(booking: BookingSubmission) -> list[str]:
    """Fixed-width sheet row; anything missing becomes an empty string"""
    values = booking.model_dump()
    values["packageType"] = booking.selected_package
    return ["" if values.get(column) is None else str(values.get(column)) for column in SHEET_COLUMNS]


def spreadsheet_url(spreadsheet_id: str) -> str:
    return f"https://docs.google.com/spreadsheets/d/{spreadsheet_id}"


class SheetsAppender:
    """Service-account authenticated appender for a single spreadsheet tab"""

    def __init__(
        self,
        credentials: ServiceAccountConfig,
        spreadsheet_id: str,
        sheet_range: str = "Sheet1!A1",
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.credentials = credentials
        self.spreadsheet_id = spreadsheet_id
        self.sheet_range = sheet_range
        self._transport = transport
        self._access_token: Optional[str] = None
        self._token_expires_at = 0.0

    @property
    def url(self) -> str:
        return spreadsheet_url(self.spreadsheet_id)

    def _signed_assertion(self, now: int) -> str:
        claims = {
            "iss": self.credentials.client_email,
            "scope": SHEETS_SCOPE,
            "aud": self.credentials.token_uri,
            "iat": now,
            "exp": now + TOKEN_LIFETIME_SECONDS,
        }
        headers = {"kid": self.credentials.private_key_id} if self.credentials.private_key_id else None
        try:
            return jwt.encode(claims, self.credentials.private_key, algorithm="RS256", headers=headers)
        except JOSEError as e:
            raise SpreadsheetError(f"Could not sign service account assertion: {e}") from e

    async def _get_access_token(self, client: httpx.AsyncClient) -> str:
        """Exchange a signed JWT for an access token, reusing it until it nears expiry"""
        if self._access_token and time.time() < self._token_expires_at - TOKEN_REFRESH_MARGIN_SECONDS:
            return self._access_token

        now = int(time.time())
        response = await client.post(
            self.credentials.token_uri,
            data={
                "grant_type": "urn:ietf:params:oauth:grant-type:jwt-bearer",
                "assertion": self._signed_assertion(now),
            },
        )
        if response.status_code != 200:
            logger.error(f"❌ Service account token request failed: {response.status_code} {response.text}")
            raise SpreadsheetError(f"Token request failed with status {response.status_code}")

        tokens = response.json()
        access_token = tokens.get("access_token")
        if not access_token:
            raise SpreadsheetError("No access token in token response")

        self._access_token = access_token
        self._token_expires_at = now + int(tokens.get("expires_in", TOKEN_LIFETIME_SECONDS))
        logger.info("🔑 Google Sheets access token obtained")
        return access_token

    async def append_row(self, row: list[str]) -> dict:
        """Append ``row`` below the last row of the configured range"""
        url = f"{GOOGLE_SHEETS_API}/{self.spreadsheet_id}/values/{quote(self.sheet_range)}:append"
        try:
            async with httpx.AsyncClient(transport=self._transport) as client:
                access_token = await self._get_access_token(client)
                response = await client.post(
                    url,
                    params={"valueInputOption": "USER_ENTERED"},
                    headers={"Authorization": f"Bearer {access_token}"},
                    json={"values": [row]},
                )
        except httpx.HTTPError as e:
            logger.error(f"❌ Could not reach Google Sheets: {e}")
            raise SpreadsheetError(f"Could not reach Google Sheets: {e}") from e

        if response.status_code not in (200, 201):
            logger.error(f"❌ Failed to append sheet row: {response.status_code} {response.text}")
            if response.status_code == 401:
                # Force a fresh token next time
                self._access_token = None
            raise SpreadsheetError(f"Append failed with status {response.status_code}")

        result = response.json()
        logger.info(f"✅ Sheet row appended: {result.get('updates', {}).get('updatedRange')}")
        return result

    async def append_booking(self, booking: BookingSubmission) -> dict:
        return await self.append_row(booking_to_row(booking))

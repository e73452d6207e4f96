import base64
import binascii
import enum
import json
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

# Load .env from project root
env_path = Path(__file__).resolve().parent.parent / ".env"
load_dotenv(dotenv_path=env_path)


class ConfigurationError(RuntimeError):
    """Raised when required configuration is missing or malformed"""


# Database Configuration
DB_HOST = os.getenv("DB_HOST", "localhost")
DB_USER = os.getenv("DB_USER", "root")
DB_PASSWORD = os.getenv("DB_PASSWORD", "")
DB_NAME = os.getenv("DB_NAME", "AutoTrustReport")
DB_PORT = int(os.getenv("DB_PORT", "3306"))

DATABASE_URL = os.getenv(
    "DATABASE_URL",
    f"mysql+pymysql://{DB_USER}:{DB_PASSWORD}@{DB_HOST}:{DB_PORT}/{DB_NAME}",
)

# Persist submitted bookings to the relational store (in addition to memory)
BOOKINGS_DB_ENABLED = os.getenv("BOOKINGS_DB_ENABLED", "true").lower() == "true"

# Google Sheets Configuration
# SPREADSHEET_API is the legacy variable name used by the first deployment
SPREADSHEET_ID = os.getenv("SPREADSHEET_ID") or os.getenv("SPREADSHEET_API")
SHEET_RANGE = os.getenv("SHEET_RANGE", "Sheet1!A1")
GOOGLE_TOKEN_URI = "https://oauth2.googleapis.com/token"
SHEETS_SCOPE = "https://www.googleapis.com/auth/spreadsheets"

# Email Configuration
EMAIL_TRANSPORT = os.getenv("EMAIL_TRANSPORT", "smtp").lower()  # smtp or resend
SMTP_HOST = os.getenv("SMTP_HOST", "smtp.gmail.com")
SMTP_PORT = int(os.getenv("SMTP_PORT", "587"))
SMTP_USE_TLS = os.getenv("SMTP_USE_TLS", "true").lower() == "true"
EMAIL_USER = os.getenv("EMAIL_USER")
EMAIL_PASS = os.getenv("EMAIL_PASS")
RESEND_API_KEY = os.getenv("RESEND_API_KEY")
EMAIL_FROM_ADDRESS = os.getenv(
    "EMAIL_FROM_ADDRESS", f"AutoTrust Inspections <{EMAIL_USER}>" if EMAIL_USER else None
)
# Internal alerts go to the mailbox we send from unless told otherwise
ADMIN_EMAIL = os.getenv("ADMIN_EMAIL", EMAIL_USER)

# Frontend base URL, used for links in emails
FRONTEND_URL = os.getenv("FRONTEND_URL", "http://localhost:5173")
PAYMENT_LINK_URL = os.getenv("PAYMENT_LINK_URL", f"{FRONTEND_URL}/booking")

# Server
PORT = int(os.getenv("PORT", "5000"))


class CredentialKind(str, enum.Enum):
    BASE64 = "base64"
    RAW_JSON = "raw_json"
    FIELDS = "fields"


@dataclass(frozen=True)
class ServiceAccountConfig:
    """Google service-account credential, whichever way it was supplied"""

    kind: CredentialKind
    client_email: str
    private_key: str
    private_key_id: Optional[str] = None
    token_uri: str = GOOGLE_TOKEN_URI


def _from_info(info: dict, kind: CredentialKind) -> ServiceAccountConfig:
    client_email = info.get("client_email")
    private_key = info.get("private_key")
    missing = [name for name, value in (("client_email", client_email), ("private_key", private_key)) if not value]
    if missing:
        raise ConfigurationError(
            f"Service account credential ({kind.value}) is missing: {', '.join(missing)}"
        )
    return ServiceAccountConfig(
        kind=kind,
        client_email=client_email,
        private_key=private_key,
        private_key_id=info.get("private_key_id"),
        token_uri=info.get("token_uri") or GOOGLE_TOKEN_URI,
    )


def resolve_service_account(env: Optional[dict] = None) -> ServiceAccountConfig:
    """
    Resolve the spreadsheet service account from the environment.

    Accepted encodings, checked in this order:
    1. GOOGLE_SERVICE_ACCOUNT_BASE64 - base64 of the JSON key file
    2. GOOGLE_SERVICE_ACCOUNT_JSON - the JSON key file contents
    3. GOOGLE_CLIENT_EMAIL + GOOGLE_PRIVATE_KEY - discrete fields

    Raises:
        ConfigurationError: if no encoding is present or the chosen one is invalid
    """
    env = os.environ if env is None else env

    encoded = env.get("GOOGLE_SERVICE_ACCOUNT_BASE64")
    if encoded:
        try:
            info = json.loads(base64.b64decode(encoded, validate=True).decode("utf-8"))
        except (binascii.Error, UnicodeDecodeError, json.JSONDecodeError) as e:
            raise ConfigurationError(
                f"GOOGLE_SERVICE_ACCOUNT_BASE64 is not base64-encoded JSON: {e}"
            ) from e
        return _from_info(info, CredentialKind.BASE64)

    raw_json = env.get("GOOGLE_SERVICE_ACCOUNT_JSON")
    if raw_json:
        try:
            info = json.loads(raw_json)
        except json.JSONDecodeError as e:
            raise ConfigurationError(f"GOOGLE_SERVICE_ACCOUNT_JSON is not valid JSON: {e}") from e
        return _from_info(info, CredentialKind.RAW_JSON)

    client_email = env.get("GOOGLE_CLIENT_EMAIL")
    private_key = env.get("GOOGLE_PRIVATE_KEY")
    if client_email or private_key:
        # Keys pasted into dashboards usually arrive with literal "\n"
        private_key = (private_key or "").replace("\\n", "\n")
        return _from_info(
            {"client_email": client_email, "private_key": private_key},
            CredentialKind.FIELDS,
        )

    raise ConfigurationError(
        "No Google service account configured. Set GOOGLE_SERVICE_ACCOUNT_BASE64, "
        "GOOGLE_SERVICE_ACCOUNT_JSON, or GOOGLE_CLIENT_EMAIL and GOOGLE_PRIVATE_KEY."
    )

import logging
import os
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.exception_handlers import http_exception_handler
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from . import config
from . import models  # noqa: F401 - registers tables on Base
from .database import Base, SessionLocal, check_connection, engine
from .domain.admin.router import router as admin_router
from .domain.bookings.router import router as bookings_router
from .domain.packages.catalogue import seed_packages
from .domain.packages.router import router as packages_router
from .email_service import BookingNotifier
from .services.sheets_service import SheetsAppender

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)

# Reduce verbosity of third-party libraries
logging.getLogger("httpx").setLevel(logging.WARNING)
logging.getLogger("httpcore").setLevel(logging.WARNING)


def build_sheets_appender():
    """
    Resolve the service account once. A configured spreadsheet with bad or
    missing credentials stops startup instead of failing the first booking.
    """
    if not config.SPREADSHEET_ID:
        logger.warning("⚠️ SPREADSHEET_ID not set - booking submissions will fail until it is configured")
        return None
    credentials = config.resolve_service_account()
    logger.info(
        f"📄 Google Sheets enabled ({credentials.kind.value} credentials for {credentials.client_email})"
    )
    return SheetsAppender(credentials, config.SPREADSHEET_ID, config.SHEET_RANGE)


def build_notifier(appender: Optional[SheetsAppender]) -> BookingNotifier:
    return BookingNotifier(
        admin_email=config.ADMIN_EMAIL,
        payment_url=config.PAYMENT_LINK_URL,
        spreadsheet_url=appender.url if appender else None,
    )


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info("Application starting up...")
    appender = build_sheets_appender()
    app.state.sheets_appender = appender
    app.state.notifier = build_notifier(appender)
    if not config.ADMIN_EMAIL:
        logger.warning("⚠️ ADMIN_EMAIL/EMAIL_USER not set - admin alerts will fail")

    if check_connection():
        try:
            Base.metadata.create_all(bind=engine, checkfirst=True)
            logger.info("Database tables created successfully")
            db = SessionLocal()
            try:
                seed_packages(db)
            finally:
                db.close()
        except Exception as e:
            # Ignore "already exists" errors from race conditions between workers
            error_msg = str(e)
            if "already exists" in error_msg or "Duplicate entry" in error_msg:
                logger.info("Database tables already exist (created by another worker)")
            else:
                logger.error(f"Failed to prepare database: {e}")

    yield
    logger.info("Application shutting down...")


app = FastAPI(title="AutoTrust Inspection Booking API", version="1.0.0", lifespan=lifespan)


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    logger.warning(f"Validation error for {request.url.path}: {exc.errors()}")
    return JSONResponse(status_code=422, content={"detail": exc.errors()})


@app.exception_handler(StarletteHTTPException)
async def admin_http_exception_handler(request: Request, exc: StarletteHTTPException):
    """Admin responses keep the {success, error} envelope the dashboards read"""
    if request.url.path.startswith("/admin"):
        return JSONResponse(
            status_code=exc.status_code,
            content={"success": False, "error": exc.detail},
        )
    return await http_exception_handler(request, exc)


@app.middleware("http")
async def log_requests(request: Request, call_next):
    try:
        response = await call_next(request)
        return response
    except Exception as e:
        logger.error(f"{request.method} {request.url.path} - Error: {str(e)}")
        raise


# CORS Configuration
ALLOWED_ORIGINS = os.getenv(
    "ALLOWED_ORIGINS",
    "http://localhost:5173,http://localhost:3000",
).split(",")

logger.info(f"CORS allowed origins: {ALLOWED_ORIGINS}")

app.add_middleware(
    CORSMiddleware,
    allow_origins=ALLOWED_ORIGINS,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS", "PATCH"],
    allow_headers=["*"],
)

# Routes
app.include_router(bookings_router)
app.include_router(packages_router)
app.include_router(admin_router)


@app.get("/")
def root():
    return {"message": "AutoTrust Inspection Booking API is running"}


@app.get("/health")
def health():
    return {"status": "healthy"}

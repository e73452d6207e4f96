"""Booking router - public intake endpoints"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session

from ... import config
from ...database import get_db
from ...email_service import BookingNotifier
from ...services.sheets_service import SheetsAppender, spreadsheet_url
from .repository import BookingRepository
from .schemas import BookingSubmission, IntakeResponse
from .service import BookingIntakePipeline
from .store import InMemoryBookingStore, get_booking_store

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["Bookings"])


def get_sheets_appender(request: Request) -> Optional[SheetsAppender]:
    """Appender built at startup; None when no spreadsheet is configured"""
    return getattr(request.app.state, "sheets_appender", None)


def get_notifier(request: Request) -> BookingNotifier:
    notifier = getattr(request.app.state, "notifier", None)
    if notifier is None:
        notifier = BookingNotifier(
            admin_email=config.ADMIN_EMAIL,
            payment_url=config.PAYMENT_LINK_URL,
            spreadsheet_url=spreadsheet_url(config.SPREADSHEET_ID) if config.SPREADSHEET_ID else None,
        )
    return notifier


def get_intake_pipeline(
    db: Session = Depends(get_db),
    store: InMemoryBookingStore = Depends(get_booking_store),
    appender: Optional[SheetsAppender] = Depends(get_sheets_appender),
    notifier: BookingNotifier = Depends(get_notifier),
) -> BookingIntakePipeline:
    """Dependency injection for the intake pipeline"""
    repository = BookingRepository(db) if config.BOOKINGS_DB_ENABLED else None
    return BookingIntakePipeline(store=store, notifier=notifier, appender=appender, repository=repository)


@router.post("/bookings", status_code=201, response_model=IntakeResponse)
async def create_booking(
    submission: BookingSubmission,
    pipeline: BookingIntakePipeline = Depends(get_intake_pipeline),
):
    """Accept a booking from the form and fan it out to the sheet and email"""
    logger.info(f"📥 Booking submitted by {submission.email} for package {submission.selected_package!r}")
    result = await pipeline.submit(submission)

    if not result.success:
        return JSONResponse(
            status_code=500,
            content=IntakeResponse(
                message="Error saving booking",
                bookingReference=result.booking_reference,
                steps=result.statuses(),
            ).model_dump(),
        )

    return IntakeResponse(
        message="Booking saved and email sent.",
        bookingReference=result.booking_reference,
        steps=result.statuses(),
    )


@router.get("/bookings")
async def list_bookings(store: InMemoryBookingStore = Depends(get_booking_store)):
    """Bookings received since this process started"""
    return store.all()

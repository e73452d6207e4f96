"""Admin router - dashboard, booking management, analytics and export"""

import logging
from typing import Literal, Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from ...database import get_db
from .schemas import PaymentUpdate, StatusUpdate
from .service import AdminService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/admin", tags=["Admin"])


def get_admin_service(db: Session = Depends(get_db)) -> AdminService:
    """Dependency injection for AdminService"""
    return AdminService(db)


@router.get("/dashboard")
async def get_dashboard(service: AdminService = Depends(get_admin_service)):
    """Headline numbers and the ten most recent bookings"""
    return {"success": True, "data": service.get_dashboard()}


@router.get("/bookings")
async def list_bookings(
    service: AdminService = Depends(get_admin_service),
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
    status: Optional[str] = Query(None),
    search: Optional[str] = Query(None),
):
    """Paginated booking list, filterable by status and free-text search"""
    rows, pagination = service.list_bookings(page, limit, status, search)
    return {"success": True, "data": rows, "pagination": pagination}


@router.get("/bookings/{reference}")
async def get_booking(reference: str, service: AdminService = Depends(get_admin_service)):
    return {"success": True, "data": service.get_booking(reference)}


@router.put("/bookings/{booking_id}/status")
async def update_booking_status(
    booking_id: int,
    data: StatusUpdate,
    service: AdminService = Depends(get_admin_service),
):
    service.update_status(booking_id, data.status)
    return {"success": True, "message": "Booking status updated successfully"}


@router.put("/bookings/{booking_id}/payment")
async def update_payment_status(
    booking_id: int,
    data: PaymentUpdate,
    service: AdminService = Depends(get_admin_service),
):
    """Record the outcome of the customer's payment"""
    service.update_payment(booking_id, data.paymentStatus, data.transactionId)
    return {"success": True, "message": "Payment status updated successfully"}


@router.get("/analytics/revenue")
async def revenue_analytics(
    period: str = Query("month"),
    service: AdminService = Depends(get_admin_service),
):
    """Paid revenue by day, week or month; any other period groups by year"""
    return {"success": True, "data": service.revenue_analytics(period)}


@router.get("/export/bookings")
async def export_bookings(
    export_format: Literal["json", "csv"] = Query("json", alias="format"),
    service: AdminService = Depends(get_admin_service),
):
    """Every booking as JSON or as a CSV download"""
    exported = service.export_bookings(export_format)
    if export_format == "csv":
        return exported
    return {"success": True, "data": exported}

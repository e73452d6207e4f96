"""Admin repository - aggregate and listing queries for the dashboards"""

from datetime import datetime
from typing import Optional

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from ...gateway import GatewayResult, PersistenceGateway
from ...models import Booking, utcnow
from ..bookings.repository import booking_summary_query, search_condition

PENDING_STATUSES = ("pending", "confirmed")
RECENT_BOOKINGS_LIMIT = 10


def _filtered(stmt, status: Optional[str], search: Optional[str]):
    if status and status != "all":
        stmt = stmt.where(Booking.status == status)
    if search:
        stmt = stmt.where(search_condition(search))
    return stmt


class AdminRepository:
    """Repository for admin dashboard queries"""

    def __init__(self, db: Session):
        self.gateway = PersistenceGateway(db)

    # Listings
    def list_bookings(
        self,
        page: int,
        limit: int,
        status: Optional[str] = None,
        search: Optional[str] = None,
    ) -> GatewayResult:
        stmt = _filtered(booking_summary_query(), status, search)
        stmt = (
            stmt.order_by(Booking.created_at.desc(), Booking.id.desc())
            .limit(limit)
            .offset((page - 1) * limit)
        )
        return self.gateway.execute(stmt)

    def count_bookings(self, status: Optional[str] = None, search: Optional[str] = None) -> GatewayResult:
        inner = _filtered(booking_summary_query(), status, search).subquery()
        return self.gateway.find_one(select(func.count().label("count")).select_from(inner))

    def all_booking_summaries(self) -> GatewayResult:
        return self.gateway.execute(
            booking_summary_query().order_by(Booking.created_at.desc(), Booking.id.desc())
        )

    # Aggregates
    def dashboard_queries(self, month_start: datetime) -> dict:
        """Named aggregate statements; each value is executed independently"""
        paid = Booking.payment_status == "paid"
        return {
            "totalBookings": select(func.count(Booking.id).label("value")),
            "totalRevenue": select(func.coalesce(func.sum(Booking.total_amount), 0).label("value")).where(paid),
            "completedBookings": select(func.count(Booking.id).label("value")).where(
                Booking.status == "completed"
            ),
            "pendingBookings": select(func.count(Booking.id).label("value")).where(
                Booking.status.in_(PENDING_STATUSES)
            ),
            "monthlyRevenue": select(func.coalesce(func.sum(Booking.total_amount), 0).label("value")).where(
                paid, Booking.created_at >= month_start
            ),
        }

    def dashboard_stats(self, month_start: datetime) -> GatewayResult:
        stats = {}
        for key, stmt in self.dashboard_queries(month_start).items():
            result = self.gateway.find_one(stmt)
            if not result.success:
                return GatewayResult.failure(result.error or f"{key} query returned no row")
            stats[key] = result.data["value"]

        recent = self.gateway.execute(
            booking_summary_query()
            .order_by(Booking.created_at.desc(), Booking.id.desc())
            .limit(RECENT_BOOKINGS_LIMIT)
        )
        if not recent.success:
            return recent
        stats["recentBookings"] = recent.data
        return GatewayResult(success=True, data=stats)

    def paid_revenue_rows(self, since: Optional[datetime] = None) -> GatewayResult:
        stmt = select(Booking.created_at, Booking.total_amount).where(Booking.payment_status == "paid")
        if since is not None:
            stmt = stmt.where(Booking.created_at >= since)
        return self.gateway.execute(stmt)

    # Updates
    def update_status(self, booking_id: int, status: str) -> GatewayResult:
        return self.gateway.update_record("bookings", {"status": status}, {"id": booking_id})

    def update_payment(
        self, booking_id: int, payment_status: str, transaction_id: Optional[str] = None
    ) -> GatewayResult:
        """
        Set the booking's payment status. Marking a booking paid also records
        a completed payment for its total.
        """
        data = {"payment_status": payment_status}
        if transaction_id:
            data["transaction_id"] = transaction_id
        result = self.gateway.update_record("bookings", data, {"id": booking_id})
        if not result.success or payment_status != "paid" or result.affected_rows == 0:
            return result

        booking = self.gateway.find_one(select(Booking.total_amount).where(Booking.id == booking_id))
        if not booking.success:
            return GatewayResult.failure(booking.error or "Booking disappeared during payment update")
        payment = self.gateway.insert_record(
            "payments",
            {
                "booking_id": booking_id,
                "amount": booking.data["total_amount"],
                "status": "completed",
                "transaction_id": transaction_id,
                "payment_date": utcnow(),
            },
        )
        if not payment.success:
            return payment
        return result

"""Admin domain schemas"""

from typing import Any, Optional

from pydantic import BaseModel


class StatusUpdate(BaseModel):
    # Checked against BOOKING_STATUSES in the service so bad values get a 400
    status: Optional[str] = None


class PaymentUpdate(BaseModel):
    paymentStatus: Optional[str] = None
    transactionId: Optional[str] = None


class Pagination(BaseModel):
    page: int
    limit: int
    total: int


class DashboardStats(BaseModel):
    totalBookings: int = 0
    totalRevenue: float = 0
    completedBookings: int = 0
    pendingBookings: int = 0
    monthlyRevenue: float = 0
    recentBookings: list[dict[str, Any]] = []


class RevenuePoint(BaseModel):
    period: str
    revenue: float
    bookings: int

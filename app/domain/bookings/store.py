"""Process-lifetime booking list. Lost on restart; the database is the record."""

from typing import Any


class InMemoryBookingStore:
    def __init__(self):
        self._bookings: list[dict[str, Any]] = []

    def append(self, booking: dict[str, Any]) -> None:
        self._bookings.append(booking)

    def all(self) -> list[dict[str, Any]]:
        return list(self._bookings)

    def clear(self) -> None:
        self._bookings.clear()

    def __len__(self) -> int:
        return len(self._bookings)


booking_store = InMemoryBookingStore()


def get_booking_store() -> InMemoryBookingStore:
    return booking_store

"""Booking intake pipeline - store, append to the sheet, notify"""

import logging
from dataclasses import dataclass, field
from typing import Optional

from ...email_service import BookingNotifier
from ...services.sheets_service import SheetsAppender, SpreadsheetError
from ..packages.catalogue import get_package
from .repository import BookingRepository
from .schemas import BookingSubmission
from .store import InMemoryBookingStore

logger = logging.getLogger(__name__)

OK = "ok"
FAILED = "failed"
SKIPPED = "skipped"


@dataclass
class StepOutcome:
    name: str
    status: str
    error: Optional[str] = None


@dataclass
class IntakeResult:
    steps: list[StepOutcome] = field(default_factory=list)
    booking_reference: Optional[str] = None

    @property
    def success(self) -> bool:
        return all(step.status != FAILED for step in self.steps)

    def record(self, name: str, status: str, error: Optional[str] = None) -> None:
        self.steps.append(StepOutcome(name, status, error))

    def statuses(self) -> dict[str, str]:
        return {step.name: step.status for step in self.steps}


class BookingIntakePipeline:
    """
    Runs one submission through every collaborator in order:

    memory -> database -> spreadsheet -> customer_email + admin_email

    A failed database write or sheet append stops the run; both emails are
    always attempted once reached. Earlier steps are never undone, so a
    failed result can still leave a stored booking and a sheet row behind.
    Without a configured spreadsheet the append step fails.
    Resubmitting creates duplicates.
    """

    STEP_NAMES = ("memory", "database", "spreadsheet", "customer_email", "admin_email")

    def __init__(
        self,
        store: InMemoryBookingStore,
        notifier: BookingNotifier,
        appender: Optional[SheetsAppender] = None,
        repository: Optional[BookingRepository] = None,
    ):
        self.store = store
        self.notifier = notifier
        self.appender = appender
        self.repository = repository

    def _skip_rest(self, result: IntakeResult) -> None:
        done = {step.name for step in result.steps}
        for name in self.STEP_NAMES:
            if name not in done:
                result.record(name, SKIPPED)

    def _email_context(self, submission: BookingSubmission, reference: Optional[str]) -> dict:
        package = get_package(submission.selected_package)
        context = submission.model_dump()
        context.update(
            booking_reference=reference or "",
            package_name=package.name if package else submission.selected_package,
            vehicle=submission.vehicle_description,
        )
        return context

    async def submit(self, submission: BookingSubmission) -> IntakeResult:
        result = IntakeResult()

        self.store.append(submission.model_dump())
        result.record("memory", OK)

        if self.repository is None:
            result.record("database", SKIPPED)
        else:
            package = get_package(submission.selected_package)
            stored = self.repository.create_booking(submission, package.price if package else 0)
            if not stored.success:
                logger.error(f"❌ Failed to persist booking for {submission.email}: {stored.error}")
                result.record("database", FAILED, stored.error)
                self._skip_rest(result)
                return result
            result.booking_reference = stored.data["booking_reference"]
            result.record("database", OK)

        try:
            if self.appender is None:
                raise SpreadsheetError("No spreadsheet configured (SPREADSHEET_ID)")
            await self.appender.append_booking(submission)
            result.record("spreadsheet", OK)
        except Exception as e:
            logger.error(f"❌ Error saving to Google Sheets: {e}")
            result.record("spreadsheet", FAILED, str(e))
            self._skip_rest(result)
            return result

        context = self._email_context(submission, result.booking_reference)
        for name, send in (
            ("customer_email", self.notifier.send_customer_confirmation),
            ("admin_email", self.notifier.send_admin_alert),
        ):
            try:
                await send(context)
                result.record(name, OK)
            except Exception as e:
                logger.error(f"❌ Failed to send {name.replace('_', ' ')}: {e}")
                result.record(name, FAILED, str(e))

        if result.success:
            logger.info(
                f"✅ Booking intake complete for {submission.email} "
                f"(reference={result.booking_reference}, package={submission.selected_package})"
            )
        return result

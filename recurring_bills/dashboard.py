"""Recurring bills dashboard session.

A RecurringBillsDashboard lives for one visit to the dashboard. It
fetches the bill collection through the API client, keeps it in a
BillListEngine, and applies add/edit/pay/delete actions locally only
once the API has confirmed them.

Overdue reclassification is a local display correction: it is applied
whenever the collection changes and is never written back to the API.
"""

import logging
from datetime import date
from typing import Callable, Optional

from .client import BillsApiClient
from .engine import BillListEngine, BillListView, CalendarDay
from .errors import ApiError, AuthorizationError, BillNotFoundError, ValidationError
from .models import Bill, BillStatus, FilterState, Viewport
from .summarizer import BillStatistics
from .validation import BillDraft, BillForm, validate_bill_form

logger = logging.getLogger(__name__)

LOAD_FAILED = "Failed to load recurring bills. Please try again later."
ADD_FAILED = "Failed to add recurring bill. Please try again."
UPDATE_FAILED = "Failed to update recurring bill. Please try again."
DELETE_FAILED = "Failed to delete recurring bill. Please try again."
STATUS_FAILED = "Failed to update bill status. Please try again."
AUTH_FAILED = "Your session has expired. Please log in again."
NOT_FOUND = "Recurring bill not found. It may already have been deleted."


class RecurringBillsDashboard:
    """State and actions behind the recurring bills page.

    Attributes:
        error: Page-level error message from the last failed action
        error_cause: The exception behind ``error``
        form_error: Inline message for a rejected add/edit form
        form_error_field: Form field the inline message refers to
        is_loading: True while a fetch is in flight
    """

    def __init__(
        self,
        client: BillsApiClient,
        engine: Optional[BillListEngine] = None,
        clock: Callable[[], date] = date.today
    ):
        self.client = client
        self.engine = engine or BillListEngine()
        self.clock = clock
        self.error: Optional[str] = None
        self.error_cause: Optional[Exception] = None
        self.form_error: Optional[str] = None
        self.form_error_field: Optional[str] = None
        self.is_loading = False
        self._generation = 0

    @property
    def today(self) -> date:
        return self.clock()

    @property
    def bills(self) -> list[Bill]:
        return self.engine.bills

    def _fail(self, message: str, cause: Exception) -> None:
        if isinstance(cause, AuthorizationError):
            message = AUTH_FAILED
        elif isinstance(cause, BillNotFoundError):
            message = NOT_FOUND
        self.error = message
        self.error_cause = cause

    def _reject_form(self, error: ValidationError) -> None:
        self.form_error = error.message
        self.form_error_field = error.field

    def _clear_form_error(self) -> None:
        self.form_error = None
        self.form_error_field = None

    def _lookup(self, bill_id: str) -> Optional[Bill]:
        try:
            return self.engine.get(bill_id)
        except BillNotFoundError as e:
            logger.warning(f"Ignoring action on unknown bill {bill_id}")
            self._fail(NOT_FOUND, e)
            return None

    def clear_error(self) -> None:
        self.error = None
        self.error_cause = None

    def begin_load(self) -> int:
        """Mark a fetch as started and return its generation token."""
        self.is_loading = True
        return self._generation

    def finish_load(self, generation: int, bills: list[Bill]) -> bool:
        """Store fetched bills unless the dashboard moved on meanwhile.

        Returns:
            False when the response is stale and was discarded.
        """
        if generation != self._generation:
            logger.warning("Discarding stale recurring bills response")
            return False
        self.is_loading = False
        self.engine.load(bills, self.today)
        self.clear_error()
        return True

    def load(self) -> bool:
        """Fetch the bill collection from the API.

        On failure the previous collection is kept and ``error`` is set.
        """
        generation = self.begin_load()
        try:
            bills = self.client.list_bills()
        except ApiError as e:
            logger.warning(f"Error fetching recurring bills: {e}")
            if generation == self._generation:
                self.is_loading = False
                self._fail(LOAD_FAILED, e)
            return False
        return self.finish_load(generation, bills)

    def close(self) -> None:
        """Leave the dashboard; responses still in flight become stale."""
        self._generation += 1
        self.is_loading = False

    def add_bill(self, form: BillForm) -> Optional[Bill]:
        """Validate and create a bill.

        Returns:
            The created bill, or None if validation or the API failed.
        """
        try:
            draft = validate_bill_form(form, self.today)
        except ValidationError as e:
            self._reject_form(e)
            return None

        try:
            bill = self.client.create_bill(draft)
        except ApiError as e:
            logger.warning(f"Error adding recurring bill: {e}")
            self._fail(ADD_FAILED, e)
            return None

        self.engine.add(bill, self.today)
        self._clear_form_error()
        logger.info(f"Added recurring bill {bill.id}")
        return bill

    def edit_bill(self, bill_id: str, form: BillForm) -> Optional[Bill]:
        """Validate and update a bill, replacing the local copy by id."""
        if self._lookup(bill_id) is None:
            return None

        try:
            draft = validate_bill_form(form, self.today)
        except ValidationError as e:
            self._reject_form(e)
            return None

        try:
            bill = self.client.update_bill(bill_id, draft)
        except ApiError as e:
            logger.warning(f"Error updating recurring bill {bill_id}: {e}")
            self._fail(UPDATE_FAILED, e)
            return None

        self.engine.replace(bill, self.today)
        self._clear_form_error()
        logger.info(f"Updated recurring bill {bill_id}")
        return bill

    def mark_as_paid(self, bill_id: str) -> Optional[Bill]:
        """Mark a pending or overdue bill as paid.

        A bill that is already paid is returned without calling the API.
        """
        bill = self._lookup(bill_id)
        if bill is None:
            return None
        if bill.is_paid:
            return bill

        try:
            updated = self.client.update_bill(
                bill_id, BillDraft.from_bill(bill, BillStatus.PAID)
            )
        except ApiError as e:
            logger.warning(f"Error updating bill status for {bill_id}: {e}")
            self._fail(STATUS_FAILED, e)
            return None

        self.engine.replace(updated, self.today)
        logger.info(f"Marked recurring bill {bill_id} as paid")
        return updated

    def delete_bill(self, bill_id: str) -> bool:
        if self._lookup(bill_id) is None:
            return False

        try:
            self.client.delete_bill(bill_id)
        except ApiError as e:
            logger.warning(f"Error deleting recurring bill {bill_id}: {e}")
            self._fail(DELETE_FAILED, e)
            return False

        self.engine.remove(bill_id)
        logger.info(f"Deleted recurring bill {bill_id}")
        return True

    def view(
        self,
        filter_state: FilterState,
        viewport: Viewport = Viewport.WIDE
    ) -> BillListView:
        return self.engine.build_view(filter_state, self.today, viewport)

    def statistics(self) -> BillStatistics:
        return self.engine.statistics(self.today)

    def calendar(self, filter_state: FilterState) -> list[CalendarDay]:
        return self.engine.calendar(filter_state, self.today)

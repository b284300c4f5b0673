"""Bill list derivation engine.

This module turns the raw bill collection fetched from the API into
what the dashboard renders: an overdue-corrected collection, filtered
and sorted views, list and grid pages, a month calendar, and aggregate
statistics.

Every function takes ``today`` explicitly so results never depend on
the wall clock, and none of them mutate the bills they are given.
"""

import logging
import math
import unicodedata
from dataclasses import dataclass, field
from datetime import date, datetime, timedelta
from typing import Iterable, Optional

from dateutil.relativedelta import relativedelta

from .errors import BillNotFoundError
from .models import (
    Bill,
    BillStatus,
    FilterState,
    Presentation,
    SortOption,
    TimeFrame,
    Viewport,
)
from .summarizer import BillStatistics, BillSummarizer

logger = logging.getLogger(__name__)

UPCOMING_WINDOW = timedelta(days=7)


def _as_day(value: date) -> date:
    if isinstance(value, datetime):
        return value.date()
    return value


def apply_overdue_correction(
    bills: Iterable[Bill],
    today: date
) -> tuple[list[Bill], bool]:
    """Reclassify pending bills whose due date has passed as overdue.

    Paid and overdue bills are returned as they are. Running the
    correction on its own output changes nothing.

    Args:
        bills: The full bill collection.
        today: Current date.

    Returns:
        The corrected collection and whether any bill changed.
    """
    today = _as_day(today)
    corrected = []
    changed = False
    for bill in bills:
        if bill.status is BillStatus.PENDING and bill.due_date < today:
            corrected.append(bill.with_status(BillStatus.OVERDUE))
            changed = True
        else:
            corrected.append(bill)
    return corrected, changed


def _in_window(due_date: date, start: date, end: date) -> bool:
    return start <= due_date <= end


def matches_time_frame(bill: Bill, time_frame: TimeFrame, today: date) -> bool:
    """Check whether a bill falls due inside the selected time frame.

    Bills already past due never match ``month`` or ``week``.
    """
    time_frame = TimeFrame(time_frame)
    if time_frame is TimeFrame.ALL:
        return True
    today = _as_day(today)
    if time_frame is TimeFrame.MONTH:
        return _in_window(bill.due_date, today, today + relativedelta(months=1))
    return _in_window(bill.due_date, today, today + UPCOMING_WINDOW)


def _matches_search(bill: Bill, search_term: str) -> bool:
    needle = search_term.strip().lower()
    if not needle:
        return True
    return needle in bill.name.lower() or needle in bill.category.value.lower()


def filter_bills(
    bills: Iterable[Bill],
    filter_state: FilterState,
    today: date
) -> list[Bill]:
    """Keep the bills that satisfy every active filter.

    Args:
        bills: Bills to filter.
        filter_state: Search term, status, category and time frame.
        today: Current date, used by the time frame window.

    Returns:
        The matching bills in their original order.
    """
    result = []
    for bill in bills:
        if not _matches_search(bill, filter_state.search_term):
            continue
        if filter_state.status != "all" and bill.status != filter_state.status:
            continue
        if filter_state.category != "all" and bill.category != filter_state.category:
            continue
        if not matches_time_frame(bill, filter_state.time_frame, today):
            continue
        result.append(bill)
    return result


def _fold(text: str) -> str:
    decomposed = unicodedata.normalize("NFKD", text)
    return "".join(c for c in decomposed if not unicodedata.combining(c)).casefold()


def _name_key(bill: Bill) -> str:
    """Name key that ignores case and accents, so "Éclair" sorts with "e"."""
    return _fold(bill.name)


_SORT_KEYS = {
    SortOption.DUE_DATE_ASC: (lambda bill: bill.due_date, False),
    SortOption.DUE_DATE_DESC: (lambda bill: bill.due_date, True),
    SortOption.NAME_ASC: (_name_key, False),
    SortOption.NAME_DESC: (_name_key, True),
    SortOption.AMOUNT_DESC: (lambda bill: bill.amount, True),
    SortOption.AMOUNT_ASC: (lambda bill: bill.amount, False),
}


def sort_bills(bills: Iterable[Bill], sort_option: SortOption) -> list[Bill]:
    """Return a new list sorted by ``sort_option``.

    The sort is stable in both directions: bills that compare equal
    keep their incoming relative order.
    """
    key, reverse = _SORT_KEYS[SortOption(sort_option)]
    return sorted(bills, key=key, reverse=reverse)


def paginate(bills: list[Bill], page_index: int, page_size: int) -> list[Bill]:
    """Slice out one 1-indexed page.

    A page beyond the end yields an empty list; clamping the cursor is
    the caller's job (see ``clamp_page``).

    Raises:
        ValueError: If ``page_index`` or ``page_size`` is below 1.
    """
    if page_index < 1:
        raise ValueError(f"page_index must be at least 1, got {page_index}")
    if page_size < 1:
        raise ValueError(f"page_size must be at least 1, got {page_size}")
    start = (page_index - 1) * page_size
    return list(bills[start:start + page_size])


def total_pages(count: int, page_size: int) -> int:
    if page_size < 1:
        raise ValueError(f"page_size must be at least 1, got {page_size}")
    return max(1, math.ceil(count / page_size))


def clamp_page(page_index: int, count: int, page_size: int) -> int:
    return min(max(page_index, 1), total_pages(count, page_size))


def aggregate(bills: Iterable[Bill], today: date) -> BillStatistics:
    """Compute dashboard statistics over the full (corrected) collection."""
    return BillSummarizer().aggregate(list(bills), _as_day(today))


def days_until_due(due_date: date, today: date) -> int:
    """Whole days from ``today`` to ``due_date``; negative once past due."""
    return (_as_day(due_date) - _as_day(today)).days


def due_date_message(bill: Bill, today: date) -> str:
    """Human readable due-date status, e.g. "Due in 3 days"."""
    if bill.is_paid:
        return "Paid"
    days = days_until_due(bill.due_date, today)
    if days > 0:
        return f"Due in {days} days"
    if days == 0:
        return "Due today"
    return f"Overdue by {abs(days)} days"


CALENDAR_CELLS = 35
WEEKDAY_LABELS = ("Sun", "Mon", "Tue", "Wed", "Thu", "Fri", "Sat")


@dataclass
class CalendarDay:
    """One cell of the month calendar."""
    day: date
    in_current_month: bool
    is_today: bool
    bills: list[Bill] = field(default_factory=list)


def calendar_days(bills: Iterable[Bill], today: date) -> list[CalendarDay]:
    """Lay bills out on a five-week grid for the current month.

    The grid starts on the Sunday on or before the 1st and always has
    35 cells, so the tail of long months can fall outside it. Bills keep
    their incoming order within a day.
    """
    today = _as_day(today)
    first = today.replace(day=1)
    start = first - timedelta(days=(first.weekday() + 1) % 7)
    by_day: dict = {}
    for bill in bills:
        by_day.setdefault(bill.due_date, []).append(bill)
    cells = []
    for offset in range(CALENDAR_CELLS):
        day = start + timedelta(days=offset)
        cells.append(CalendarDay(
            day=day,
            in_current_month=day.month == today.month,
            is_today=day == today,
            bills=by_day.get(day, []),
        ))
    return cells


@dataclass
class PageSizeTable:
    """Page sizes per presentation and viewport size class."""
    list_sizes: dict = field(default_factory=lambda: {
        Viewport.NARROW: 5,
        Viewport.MEDIUM: 6,
        Viewport.WIDE: 5,
    })
    grid_sizes: dict = field(default_factory=lambda: {
        Viewport.NARROW: 5,
        Viewport.MEDIUM: 6,
        Viewport.WIDE: 8,
    })

    def resolve(self, presentation: Presentation, viewport: Viewport) -> int:
        sizes = self.list_sizes
        if Presentation(presentation) is Presentation.GRID:
            sizes = self.grid_sizes
        return sizes[Viewport(viewport)]


@dataclass
class PageView:
    """One presentation's page of bills."""
    presentation: Presentation
    page: int
    page_size: int
    total_pages: int
    bills: list[Bill] = field(default_factory=list)


@dataclass
class BillListView:
    """Filtered, sorted and paginated output for both presentations."""
    filtered_count: int
    sorted_bills: list[Bill]
    list_page: PageView
    grid_page: PageView

    @property
    def no_results(self) -> bool:
        return self.filtered_count == 0


class BillListEngine:
    """Holds the bill collection for one dashboard visit.

    The collection is replaced only with records the backend has
    confirmed; derived views are recomputed on every call.
    """

    def __init__(
        self,
        bills: Optional[Iterable[Bill]] = None,
        page_sizes: Optional[PageSizeTable] = None
    ):
        self._bills: list[Bill] = list(bills or [])
        self.page_sizes = page_sizes or PageSizeTable()

    @property
    def bills(self) -> list[Bill]:
        return list(self._bills)

    def __len__(self) -> int:
        return len(self._bills)

    def get(self, bill_id: str) -> Bill:
        for bill in self._bills:
            if bill.id == bill_id:
                return bill
        raise BillNotFoundError(bill_id)

    def load(self, bills: Iterable[Bill], today: date) -> bool:
        """Store a freshly fetched collection, overdue-corrected.

        Returns:
            Whether the correction changed any bill.
        """
        self._bills, changed = apply_overdue_correction(bills, today)
        if changed:
            logger.info("Reclassified past-due pending bills as overdue")
        return changed

    def refresh(self, today: date) -> bool:
        """Re-run the overdue correction, e.g. after the date rolls over."""
        return self.load(self._bills, today)

    def add(self, bill: Bill, today: date) -> None:
        self._bills.append(bill)
        self.refresh(today)

    def replace(self, bill: Bill, today: date) -> None:
        """Overwrite the local copy of ``bill`` by id.

        Raises:
            BillNotFoundError: If no bill with that id is held.
        """
        for index, existing in enumerate(self._bills):
            if existing.id == bill.id:
                self._bills[index] = bill
                self.refresh(today)
                return
        raise BillNotFoundError(bill.id)

    def remove(self, bill_id: str) -> Bill:
        """Drop a bill by id and return it.

        Raises:
            BillNotFoundError: If no bill with that id is held.
        """
        bill = self.get(bill_id)
        self._bills = [b for b in self._bills if b.id != bill_id]
        return bill

    def categories(self) -> list:
        """Distinct categories present, in first-seen order."""
        seen = {}
        for bill in self._bills:
            seen.setdefault(bill.category, None)
        return list(seen)

    def build_view(
        self,
        filter_state: FilterState,
        today: date,
        viewport: Viewport = Viewport.WIDE
    ) -> BillListView:
        """Filter, sort and paginate for the list and grid presentations.

        Page cursors outside the filtered result are clamped back into
        range, so the returned pages carry the cursor actually shown.
        """
        filtered = filter_bills(self._bills, filter_state, today)
        ordered = sort_bills(filtered, filter_state.sort_option)
        pages = {}
        for presentation in (Presentation.LIST, Presentation.GRID):
            page_size = self.page_sizes.resolve(presentation, viewport)
            page = clamp_page(filter_state.page_for(presentation), len(ordered), page_size)
            pages[presentation] = PageView(
                presentation=presentation,
                page=page,
                page_size=page_size,
                total_pages=total_pages(len(ordered), page_size),
                bills=paginate(ordered, page, page_size),
            )
        logger.debug(
            "Built bill view: %d of %d bills match", len(ordered), len(self._bills)
        )
        return BillListView(
            filtered_count=len(ordered),
            sorted_bills=ordered,
            list_page=pages[Presentation.LIST],
            grid_page=pages[Presentation.GRID],
        )

    def statistics(self, today: date) -> BillStatistics:
        return aggregate(self._bills, today)

    def calendar(self, filter_state: FilterState, today: date) -> list[CalendarDay]:
        """Month calendar of the filtered, sorted bills."""
        filtered = filter_bills(self._bills, filter_state, today)
        return calendar_days(sort_bills(filtered, filter_state.sort_option), today)

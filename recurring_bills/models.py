"""Data models for the recurring bills dashboard.

This module defines the bill record as returned by the bills API,
the enumerations the dashboard filters and sorts on, and the
ephemeral filter state owned by the caller of the engine.
"""

from dataclasses import dataclass, replace
from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from typing import Any, Mapping, Optional, Union

from .errors import ValidationError


class BillStatus(str, Enum):
    """Lifecycle stage of a bill."""

    PENDING = "pending"
    PAID = "paid"
    OVERDUE = "overdue"


class BillCategory(str, Enum):
    """Closed set of bill categories.

    ``OTHER`` is the explicit fallback for values the dashboard does
    not know about.
    """

    UTILITIES = "Utilities"
    SUBSCRIPTIONS = "Subscriptions"
    GROCERIES = "Groceries"
    HEALTH_AND_FITNESS = "Health & Fitness"
    EDUCATION = "Education"
    PERSONAL_CARE = "Personal Care"
    ENTERTAINMENT = "Entertainment"
    OTHER = "Other"

    @classmethod
    def parse(cls, value: Any) -> "BillCategory":
        """Map a raw category label to a member, falling back to OTHER.

        Matching ignores case and surrounding whitespace.
        """
        if isinstance(value, cls):
            return value
        text = str(value or "").strip().lower()
        for member in cls:
            if member.value.lower() == text:
                return member
        return cls.OTHER

    @classmethod
    def selectable(cls) -> list["BillCategory"]:
        """Categories offered on the add/edit form (OTHER is never offered)."""
        return [member for member in cls if member is not cls.OTHER]


class TimeFrame(str, Enum):
    ALL = "all"
    MONTH = "month"
    WEEK = "week"


class SortOption(str, Enum):
    """Sort orders offered by the dashboard, keyed by their query values."""

    DUE_DATE_ASC = "dueDate-asc"
    DUE_DATE_DESC = "dueDate-desc"
    NAME_ASC = "name-asc"
    NAME_DESC = "name-desc"
    AMOUNT_DESC = "amount-desc"
    AMOUNT_ASC = "amount-asc"


class Presentation(str, Enum):
    LIST = "list"
    GRID = "grid"


class Viewport(str, Enum):
    """Viewport size class used to pick a page size."""

    NARROW = "narrow"
    MEDIUM = "medium"
    WIDE = "wide"

    @classmethod
    def from_width(cls, width: int) -> "Viewport":
        if width >= 1024:
            return cls.WIDE
        if width >= 640:
            return cls.MEDIUM
        return cls.NARROW


@dataclass
class Bill:
    """Represents a single recurring bill.

    Bills are owned by the backend: ids and timestamps are assigned
    there and never changed locally.

    Attributes:
        id: Opaque identifier assigned by the backend
        name: Display label
        amount: Non-negative amount due
        due_date: Calendar date the bill is due
        status: pending, paid or overdue
        category: One of the known categories, OTHER if unrecognized
        created_at: Backend creation timestamp
        updated_at: Backend last-update timestamp
    """
    id: str
    name: str
    amount: Decimal
    due_date: date
    status: BillStatus = BillStatus.PENDING
    category: BillCategory = BillCategory.OTHER
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    def __post_init__(self):
        """Normalize amount, status and category types."""
        self.amount = Decimal(str(self.amount))
        if self.amount < 0:
            raise ValueError(f"amount must be non-negative, got {self.amount}")
        if not self.name or not self.name.strip():
            raise ValueError("name is required")
        self.status = BillStatus(self.status)
        self.category = BillCategory.parse(self.category)

    @property
    def is_paid(self) -> bool:
        return self.status is BillStatus.PAID

    def with_status(self, status: BillStatus) -> "Bill":
        """Return a copy of this bill carrying a different status."""
        return replace(self, status=BillStatus(status))

    def to_dict(self) -> dict:
        """Convert to the API's JSON shape.

        Amounts are rendered as strings so no precision is lost.
        """
        return {
            "id": self.id,
            "name": self.name,
            "amount": str(self.amount),
            "dueDate": self.due_date.isoformat(),
            "status": self.status.value,
            "category": self.category.value,
            "createdAt": self.created_at.isoformat() if self.created_at else None,
            "updatedAt": self.updated_at.isoformat() if self.updated_at else None,
        }


@dataclass
class CategorySummary:
    """Summed amount and bill count for one category."""
    category: BillCategory
    amount: Decimal = Decimal("0")
    count: int = 0

    def to_dict(self) -> dict:
        return {
            "category": self.category.value,
            "amount": str(self.amount),
            "count": self.count,
        }


StatusFilter = Union[str, BillStatus]
CategoryFilter = Union[str, BillCategory]


@dataclass
class FilterState:
    """Search, filter, sort and page cursors chosen by the user.

    ``status`` and ``category`` are either the string ``"all"`` or an
    enum member; plain strings are converted on construction. The two page cursors are independent of each other.
    """
    search_term: str = ""
    status: StatusFilter = "all"
    category: CategoryFilter = "all"
    time_frame: TimeFrame = TimeFrame.MONTH
    sort_option: SortOption = SortOption.DUE_DATE_ASC
    list_page: int = 1
    grid_page: int = 1

    def __post_init__(self):
        """Coerce plain string values to their enum members."""
        if self.status != "all":
            self.status = BillStatus(self.status)
        if self.category != "all":
            self.category = BillCategory.parse(self.category)
        self.time_frame = TimeFrame(self.time_frame)
        self.sort_option = SortOption(self.sort_option)

    def page_for(self, presentation: Presentation) -> int:
        if Presentation(presentation) is Presentation.GRID:
            return self.grid_page
        return self.list_page

    @classmethod
    def from_query(cls, query: Mapping[str, Any]) -> "FilterState":
        """Build a filter state from query-string style parameters.

        Args:
            query: Mapping with optional keys ``search``, ``status``,
                ``category``, ``timeFrame``, ``sort``, ``listPage`` and
                ``gridPage``.

        Returns:
            The parsed FilterState.

        Raises:
            ValidationError: If an enum value or page number is invalid.
        """
        status: StatusFilter = "all"
        raw_status = (query.get("status") or "all").strip()
        if raw_status != "all":
            try:
                status = BillStatus(raw_status)
            except ValueError:
                raise ValidationError(f"Unknown status: {raw_status}", "status")

        category: CategoryFilter = "all"
        raw_category = (query.get("category") or "all").strip()
        if raw_category != "all":
            category = BillCategory.parse(raw_category)

        try:
            time_frame = TimeFrame(query.get("timeFrame") or TimeFrame.MONTH.value)
        except ValueError:
            raise ValidationError(
                f"Unknown time frame: {query.get('timeFrame')}", "timeFrame"
            )
        try:
            sort_option = SortOption(query.get("sort") or SortOption.DUE_DATE_ASC.value)
        except ValueError:
            raise ValidationError(f"Unknown sort option: {query.get('sort')}", "sort")

        return cls(
            search_term=query.get("search") or "",
            status=status,
            category=category,
            time_frame=time_frame,
            sort_option=sort_option,
            list_page=_parse_page(query.get("listPage"), "listPage"),
            grid_page=_parse_page(query.get("gridPage"), "gridPage"),
        )


def _parse_page(value: Any, name: str) -> int:
    if value in (None, ""):
        return 1
    try:
        page = int(value)
    except (TypeError, ValueError):
        raise ValidationError(f"{name} must be an integer", name)
    if page < 1:
        raise ValidationError(f"{name} must be at least 1", name)
    return page

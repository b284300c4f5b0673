"""Validation of the add/edit bill form.

Submissions are checked here before any request reaches the API; a
rejected form never results in a network call.
"""

from dataclasses import dataclass
from datetime import date
from decimal import Decimal, InvalidOperation
from typing import Any, Mapping, Optional

from .errors import ValidationError
from .models import Bill, BillCategory, BillStatus

MAX_TEXT_LENGTH = 100

OVERDUE_IN_FUTURE_MESSAGE = (
    "A bill cannot be marked as overdue if the due date is in the future."
)


@dataclass
class BillForm:
    """Raw form input, as typed by the user."""
    name: str = ""
    amount: str = ""
    due_date: str = ""
    status: str = BillStatus.PENDING.value
    category: str = BillCategory.UTILITIES.value

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "BillForm":
        """Read a form from a JSON body using the API's field names."""
        return cls(
            name=str(data.get("name") or ""),
            amount=str(data.get("amount") if data.get("amount") is not None else ""),
            due_date=str(data.get("dueDate") or ""),
            status=str(data.get("status") or BillStatus.PENDING.value),
            category=str(data.get("category") or BillCategory.UTILITIES.value),
        )


@dataclass
class BillDraft:
    """A validated bill, ready to be sent to the API."""
    name: str
    amount: Decimal
    due_date: date
    status: BillStatus
    category: BillCategory

    @classmethod
    def from_bill(
        cls,
        bill: Bill,
        status: Optional[BillStatus] = None
    ) -> "BillDraft":
        """Full record of an existing bill, optionally with a new status."""
        return cls(
            name=bill.name,
            amount=bill.amount,
            due_date=bill.due_date,
            status=BillStatus(status or bill.status),
            category=bill.category,
        )

    def to_payload(self) -> dict:
        """Request body for create and update calls."""
        return {
            "name": self.name,
            "amount": float(self.amount),
            "dueDate": self.due_date.isoformat(),
            "status": self.status.value,
            "category": self.category.value,
        }


def validate_bill_form(form: BillForm, today: date) -> BillDraft:
    """Validate a submitted form.

    Args:
        form: The raw form input.
        today: Current date; an overdue bill must fall due strictly before it.

    Returns:
        The validated BillDraft.

    Raises:
        ValidationError: On the first invalid field.
    """
    name = form.name.strip()
    if not name:
        raise ValidationError("Name is required", "name")
    if len(name) > MAX_TEXT_LENGTH:
        raise ValidationError(
            f"Name must be at most {MAX_TEXT_LENGTH} characters", "name"
        )

    try:
        amount = Decimal(form.amount.strip())
    except (InvalidOperation, AttributeError):
        raise ValidationError("Amount must be a number", "amount")
    if not amount.is_finite():
        raise ValidationError("Amount must be a number", "amount")
    if amount <= 0:
        raise ValidationError("Amount must be greater than 0", "amount")

    try:
        due_date = date.fromisoformat(form.due_date.strip())
    except ValueError:
        raise ValidationError("Invalid due date format", "dueDate")

    try:
        status = BillStatus(form.status.strip().lower())
    except ValueError:
        raise ValidationError("Invalid status", "status")

    category_label = form.category.strip()
    if not category_label:
        raise ValidationError("Category is required", "category")
    if len(category_label) > MAX_TEXT_LENGTH:
        raise ValidationError(
            f"Category must be at most {MAX_TEXT_LENGTH} characters", "category"
        )

    if status is BillStatus.OVERDUE and due_date >= today:
        raise ValidationError(OVERDUE_IN_FUTURE_MESSAGE, "status")

    return BillDraft(
        name=name,
        amount=amount,
        due_date=due_date,
        status=status,
        category=BillCategory.parse(category_label),
    )

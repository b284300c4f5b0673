"""Tests for add/edit form validation."""

from datetime import date
from decimal import Decimal

import pytest

from recurring_bills.errors import ValidationError
from recurring_bills.models import BillCategory, BillStatus
from recurring_bills.validation import (
    OVERDUE_IN_FUTURE_MESSAGE,
    BillDraft,
    BillForm,
    validate_bill_form,
)


class TestValidateBillForm:
    """Tests for validate_bill_form."""

    @pytest.fixture
    def form(self):
        return BillForm(
            name="Electricity",
            amount="120.50",
            due_date="2025-01-15",
            status="pending",
            category="Utilities"
        )

    def test_valid_form(self, form, today):
        draft = validate_bill_form(form, today)

        assert draft.name == "Electricity"
        assert draft.amount == Decimal('120.50')
        assert draft.due_date == date(2025, 1, 15)
        assert draft.status is BillStatus.PENDING
        assert draft.category is BillCategory.UTILITIES

    def test_payload(self, form, today):
        payload = validate_bill_form(form, today).to_payload()

        assert payload == {
            "name": "Electricity",
            "amount": 120.5,
            "dueDate": "2025-01-15",
            "status": "pending",
            "category": "Utilities",
        }

    def test_overdue_with_future_date_rejected(self, form, today):
        form.status = "overdue"
        form.due_date = "2025-02-01"

        with pytest.raises(ValidationError) as exc_info:
            validate_bill_form(form, today)

        assert exc_info.value.message == OVERDUE_IN_FUTURE_MESSAGE
        assert exc_info.value.field == "status"

    def test_overdue_with_past_date_accepted(self, form, today):
        form.status = "overdue"
        form.due_date = "2025-01-09"

        assert validate_bill_form(form, today).status is BillStatus.OVERDUE

    def test_overdue_due_today_rejected(self, form, today):
        form.status = "overdue"
        form.due_date = today.isoformat()

        with pytest.raises(ValidationError) as exc_info:
            validate_bill_form(form, today)

        assert exc_info.value.field == "status"

    def test_paid_with_future_date_accepted(self, form, today):
        form.status = "paid"
        form.due_date = "2025-06-01"

        assert validate_bill_form(form, today).status is BillStatus.PAID

    @pytest.mark.parametrize("name", ["", "   ", "x" * 101])
    def test_invalid_name(self, form, today, name):
        form.name = name

        with pytest.raises(ValidationError) as exc_info:
            validate_bill_form(form, today)

        assert exc_info.value.field == "name"

    @pytest.mark.parametrize("amount", ["", "abc", "0", "-5", "nan"])
    def test_invalid_amount(self, form, today, amount):
        form.amount = amount

        with pytest.raises(ValidationError) as exc_info:
            validate_bill_form(form, today)

        assert exc_info.value.field == "amount"

    def test_invalid_due_date(self, form, today):
        form.due_date = "15/01/2025"

        with pytest.raises(ValidationError) as exc_info:
            validate_bill_form(form, today)

        assert exc_info.value.field == "dueDate"

    def test_invalid_status(self, form, today):
        form.status = "cancelled"

        with pytest.raises(ValidationError) as exc_info:
            validate_bill_form(form, today)

        assert exc_info.value.field == "status"

    def test_unknown_category_maps_to_other(self, form, today):
        form.category = "Rent"

        assert validate_bill_form(form, today).category is BillCategory.OTHER

    def test_missing_category(self, form, today):
        form.category = " "

        with pytest.raises(ValidationError) as exc_info:
            validate_bill_form(form, today)

        assert exc_info.value.field == "category"


class TestBillForm:
    """Tests for BillForm construction."""

    def test_from_dict(self):
        form = BillForm.from_dict({
            "name": "Water",
            "amount": 30,
            "dueDate": "2025-02-05",
            "status": "pending",
            "category": "Utilities",
        })

        assert form.amount == "30"
        assert form.due_date == "2025-02-05"

    def test_from_dict_defaults(self):
        form = BillForm.from_dict({})

        assert form.amount == ""
        assert form.status == "pending"
        assert form.category == "Utilities"


class TestBillDraft:
    def test_from_bill_with_new_status(self, make_bill):
        bill = make_bill("a", "Gym", 45, date(2025, 1, 2), "overdue")

        draft = BillDraft.from_bill(bill, BillStatus.PAID)

        assert draft.status is BillStatus.PAID
        assert draft.to_payload()["status"] == "paid"
        assert draft.to_payload()["dueDate"] == "2025-01-02"

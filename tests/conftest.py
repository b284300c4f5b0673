"""Shared fixtures for the recurring bills tests."""

from datetime import date
from decimal import Decimal

import pytest

from recurring_bills.errors import ApiError, AuthorizationError, BillNotFoundError
from recurring_bills.models import Bill, BillCategory, BillStatus

TODAY = date(2025, 1, 10)


def build_bill(bill_id, name, amount, due_date, status="pending", category="Utilities"):
    return Bill(
        id=bill_id,
        name=name,
        amount=Decimal(str(amount)),
        due_date=due_date,
        status=BillStatus(status),
        category=BillCategory.parse(category),
    )


class FakeClient:
    """Stands in for BillsApiClient, recording every call."""

    def __init__(self, bills=None, token="token-123"):
        self.token = token
        self.remote = list(bills or [])
        self.fail_with = None
        self.created = []
        self.updated = []
        self.deleted = []
        self.list_calls = 0
        self._next_id = 100

    def _check(self):
        if not self.token:
            raise AuthorizationError("Missing bearer token")
        if self.fail_with is not None:
            raise self.fail_with

    def list_bills(self):
        self.list_calls += 1
        self._check()
        return list(self.remote)

    def create_bill(self, draft):
        self._check()
        self.created.append(draft)
        self._next_id += 1
        bill = Bill(
            id=str(self._next_id),
            name=draft.name,
            amount=draft.amount,
            due_date=draft.due_date,
            status=draft.status,
            category=draft.category,
        )
        self.remote.append(bill)
        return bill

    def update_bill(self, bill_id, draft):
        self._check()
        if not any(b.id == bill_id for b in self.remote):
            raise BillNotFoundError(bill_id, 404)
        self.updated.append((bill_id, draft))
        bill = Bill(
            id=bill_id,
            name=draft.name,
            amount=draft.amount,
            due_date=draft.due_date,
            status=draft.status,
            category=draft.category,
        )
        self.remote = [bill if b.id == bill_id else b for b in self.remote]
        return bill

    def delete_bill(self, bill_id):
        self._check()
        self.deleted.append(bill_id)
        self.remote = [b for b in self.remote if b.id != bill_id]


@pytest.fixture
def today():
    return TODAY


@pytest.fixture
def make_bill():
    """Factory for Bill objects with sensible defaults."""
    return build_bill


@pytest.fixture
def sample_bills():
    """Eleven bills across all statuses and seven categories (today = 2025-01-10)."""
    return [
        build_bill("1", "Electricity", 120, date(2025, 1, 15), "pending", "Utilities"),
        build_bill("2", "Netflix", "15.99", date(2025, 1, 5), "paid", "Subscriptions"),
        build_bill("3", "Gym Membership", 45, date(2025, 1, 2), "overdue", "Health & Fitness"),
        build_bill("4", "Water", 30, date(2025, 2, 5), "pending", "Utilities"),
        build_bill("5", "Spotify", "9.99", date(2025, 1, 12), "pending", "Subscriptions"),
        build_bill("6", "Veg Box", 60, date(2025, 1, 20), "pending", "Groceries"),
        build_bill("7", "Online Course", 200, date(2025, 1, 25), "paid", "Education"),
        build_bill("8", "Internet", 50, date(2025, 1, 8), "overdue", "Utilities"),
        build_bill("9", "Haircut", 25, date(2025, 3, 1), "pending", "Personal Care"),
        build_bill("10", "Cinema Club", 12, date(2025, 1, 17), "pending", "Entertainment"),
        build_bill("11", "Gas", 80, date(2025, 1, 10), "paid", "Utilities"),
    ]


@pytest.fixture
def fake_client(sample_bills):
    return FakeClient(sample_bills)


@pytest.fixture
def api_error():
    return ApiError("Bills API returned HTTP 500", 500)

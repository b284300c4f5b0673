"""Bill record extraction module.

This module turns the JSON payloads returned by the bills API
into Bill objects.
"""

import re
from datetime import date, datetime
from decimal import Decimal, InvalidOperation
from typing import Any, Optional

from .models import Bill, BillCategory, BillStatus


class BillExtractor:
    """Extracts Bill objects from API payloads.

    This class accepts single records, lists of records, and the
    ``{"recurringBills": [...], "total": n}`` envelope returned by the
    list endpoint.
    """

    def extract_from_dict(self, data: dict[str, Any]) -> Bill:
        """Extract a bill from a dictionary representation.

        Args:
            data: Dictionary containing bill data with keys:
                - id: Backend identifier
                - name: Display label
                - amount: Amount due
                - dueDate: ISO date or datetime
                - status: pending, paid or overdue (default pending)
                - category: Category label (unknown labels map to Other)
                - createdAt, updatedAt: Optional ISO timestamps

        Returns:
            A Bill object with extracted data.

        Raises:
            ValueError: If required fields are missing or invalid.
        """
        if not data.get('id'):
            raise ValueError("id is required")
        if not str(data.get('name') or '').strip():
            raise ValueError("name is required")
        if not data.get('dueDate'):
            raise ValueError("dueDate is required")

        raw_status = data.get('status') or BillStatus.PENDING.value
        try:
            status = BillStatus(str(raw_status).strip().lower())
        except ValueError:
            raise ValueError(f"Invalid status: {raw_status}")

        return Bill(
            id=str(data['id']),
            name=str(data['name']).strip(),
            amount=self._parse_amount(data.get('amount', 0)),
            due_date=self._parse_date(data['dueDate']),
            status=status,
            category=BillCategory.parse(data.get('category')),
            created_at=self._parse_timestamp(data.get('createdAt')),
            updated_at=self._parse_timestamp(data.get('updatedAt'))
        )

    def extract_many(self, payload: Any) -> list[Bill]:
        """Extract every bill from a list payload.

        Args:
            payload: Either a list of bill dicts or a dict with a
                ``recurringBills`` list.

        Returns:
            List of Bill objects in payload order.

        Raises:
            ValueError: If the payload has neither shape.
        """
        if isinstance(payload, dict):
            payload = payload.get('recurringBills')
        if not isinstance(payload, list):
            raise ValueError("Expected a list of recurring bills")
        return [self.extract_from_dict(item) for item in payload]

    @staticmethod
    def _parse_amount(value: Any) -> Decimal:
        """Parse a value into a Decimal amount.

        Handles strings with currency symbols, commas, etc.

        Raises:
            ValueError: If value cannot be parsed.
        """
        if isinstance(value, Decimal):
            return value

        if isinstance(value, bool):
            raise ValueError(f"Unsupported type for amount: {type(value)}")

        if isinstance(value, (int, float)):
            return Decimal(str(value))

        if isinstance(value, str):
            # Remove currency symbols, commas, and whitespace
            cleaned = re.sub(r'[^\d.-]', '', value)
            if not cleaned:
                return Decimal('0')
            try:
                return Decimal(cleaned)
            except InvalidOperation:
                raise ValueError(f"Cannot parse amount: {value}")

        raise ValueError(f"Unsupported type for amount: {type(value)}")

    @staticmethod
    def _parse_date(value: Any) -> date:
        """Parse an ISO date, truncating any time-of-day component."""
        if isinstance(value, datetime):
            return value.date()
        if isinstance(value, date):
            return value
        text = str(value).strip()
        try:
            return date.fromisoformat(text[:10])
        except ValueError:
            raise ValueError(f"Invalid date: {value}")

    @staticmethod
    def _parse_timestamp(value: Any) -> Optional[datetime]:
        if not value:
            return None
        if isinstance(value, datetime):
            return value
        text = str(value).strip()
        if text.endswith('Z'):
            text = text[:-1] + '+00:00'
        try:
            return datetime.fromisoformat(text)
        except ValueError:
            raise ValueError(f"Invalid timestamp: {value}")

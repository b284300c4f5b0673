"""Tests for bill record extraction."""

from datetime import date, datetime, timezone
from decimal import Decimal

import pytest

from recurring_bills.extractor import BillExtractor
from recurring_bills.models import BillCategory, BillStatus


class TestBillExtractor:
    """Tests for BillExtractor class."""

    @pytest.fixture
    def extractor(self):
        """Create a BillExtractor instance."""
        return BillExtractor()

    @pytest.fixture
    def sample_bill_data(self):
        """Sample bill record as returned by the API."""
        return {
            'id': 'clx1',
            'userId': 'u1',
            'name': 'Electricity',
            'amount': 120.5,
            'dueDate': '2025-01-15T00:00:00.000Z',
            'status': 'pending',
            'category': 'Utilities',
            'createdAt': '2025-01-01T09:30:00.000Z',
            'updatedAt': '2025-01-02T10:00:00.000Z'
        }

    def test_extract_from_dict(self, extractor, sample_bill_data):
        """Test extracting a bill from a dictionary."""
        bill = extractor.extract_from_dict(sample_bill_data)

        assert bill.id == 'clx1'
        assert bill.name == 'Electricity'
        assert bill.amount == Decimal('120.5')
        assert bill.due_date == date(2025, 1, 15)
        assert bill.status is BillStatus.PENDING
        assert bill.category is BillCategory.UTILITIES

    def test_extract_timestamps(self, extractor, sample_bill_data):
        bill = extractor.extract_from_dict(sample_bill_data)

        assert bill.created_at == datetime(2025, 1, 1, 9, 30, tzinfo=timezone.utc)
        assert bill.updated_at == datetime(2025, 1, 2, 10, 0, tzinfo=timezone.utc)

    def test_plain_date(self, extractor, sample_bill_data):
        sample_bill_data['dueDate'] = '2025-03-01'

        assert extractor.extract_from_dict(sample_bill_data).due_date == date(2025, 3, 1)

    def test_unknown_category_becomes_other(self, extractor, sample_bill_data):
        sample_bill_data['category'] = 'Rent'

        bill = extractor.extract_from_dict(sample_bill_data)

        assert bill.category is BillCategory.OTHER

    def test_missing_status_defaults_to_pending(self, extractor, sample_bill_data):
        del sample_bill_data['status']

        assert extractor.extract_from_dict(sample_bill_data).status is BillStatus.PENDING

    def test_invalid_status_raises_error(self, extractor, sample_bill_data):
        sample_bill_data['status'] = 'late'

        with pytest.raises(ValueError, match="status"):
            extractor.extract_from_dict(sample_bill_data)

    def test_missing_id_raises_error(self, extractor, sample_bill_data):
        del sample_bill_data['id']

        with pytest.raises(ValueError, match="id is required"):
            extractor.extract_from_dict(sample_bill_data)

    def test_missing_name_raises_error(self, extractor, sample_bill_data):
        sample_bill_data['name'] = ''

        with pytest.raises(ValueError, match="name is required"):
            extractor.extract_from_dict(sample_bill_data)

    def test_invalid_due_date_raises_error(self, extractor, sample_bill_data):
        sample_bill_data['dueDate'] = 'next tuesday'

        with pytest.raises(ValueError, match="Invalid date"):
            extractor.extract_from_dict(sample_bill_data)

    def test_extract_many_envelope(self, extractor, sample_bill_data):
        second = dict(sample_bill_data, id='clx2', name='Water')
        payload = {'recurringBills': [sample_bill_data, second], 'total': 2}

        bills = extractor.extract_many(payload)

        assert [b.id for b in bills] == ['clx1', 'clx2']

    def test_extract_many_bare_list(self, extractor, sample_bill_data):
        assert len(extractor.extract_many([sample_bill_data])) == 1

    def test_extract_many_rejects_other_shapes(self, extractor):
        with pytest.raises(ValueError):
            extractor.extract_many({'bills': []})
        with pytest.raises(ValueError):
            extractor.extract_many('nope')


class TestParseAmount:
    """Tests for amount parsing."""

    def test_parse_decimal(self):
        assert BillExtractor._parse_amount(Decimal('10.50')) == Decimal('10.50')

    def test_parse_int_and_float(self):
        assert BillExtractor._parse_amount(100) == Decimal('100')
        assert BillExtractor._parse_amount(9.99) == Decimal('9.99')

    def test_parse_string_with_currency(self):
        assert BillExtractor._parse_amount('£1,200.50') == Decimal('1200.50')
        assert BillExtractor._parse_amount('$99.99') == Decimal('99.99')

    def test_parse_empty_string(self):
        assert BillExtractor._parse_amount('') == Decimal('0')

    def test_parse_invalid(self):
        with pytest.raises(ValueError):
            BillExtractor._parse_amount('1.2.3')
        with pytest.raises(ValueError):
            BillExtractor._parse_amount([1])

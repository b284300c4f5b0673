"""Bill statistics module.

This module provides the aggregate figures shown above the bill
list: totals by status, the bills due this week, and the per-category
breakdown used by the category chart.
"""

from dataclasses import dataclass, field
from datetime import date, timedelta
from decimal import Decimal
from typing import Optional

from .formatting import CurrencyFormatter
from .models import Bill, BillCategory, BillStatus, CategorySummary

UPCOMING_DAYS = 7


def _total(bills: list[Bill]) -> Decimal:
    return sum((bill.amount for bill in bills), Decimal('0'))


@dataclass
class BillStatistics:
    """Aggregate statistics over the whole bill collection.

    Attributes:
        bill_count: Number of bills in the collection
        total_monthly: Sum of every bill amount, whatever its status
        upcoming: Pending bills due within the next seven days
        upcoming_total: Sum of upcoming amounts
        overdue: Bills with overdue status
        overdue_total: Sum of overdue amounts
        paid: Bills with paid status
        paid_total: Sum of paid amounts
        category_summary: One entry per category present, unordered
    """
    bill_count: int = 0
    total_monthly: Decimal = Decimal('0')
    upcoming: list[Bill] = field(default_factory=list)
    upcoming_total: Decimal = Decimal('0')
    overdue: list[Bill] = field(default_factory=list)
    overdue_total: Decimal = Decimal('0')
    paid: list[Bill] = field(default_factory=list)
    paid_total: Decimal = Decimal('0')
    category_summary: list[CategorySummary] = field(default_factory=list)

    def to_dict(self) -> dict:
        """Convert statistics to dictionary format.

        Returns:
            Dictionary representation with amounts as strings.
        """
        return {
            'bill_count': self.bill_count,
            'total_monthly': str(self.total_monthly),
            'upcoming_count': len(self.upcoming),
            'upcoming_total': str(self.upcoming_total),
            'overdue_count': len(self.overdue),
            'overdue_total': str(self.overdue_total),
            'paid_count': len(self.paid),
            'paid_total': str(self.paid_total),
            'category_summary': [s.to_dict() for s in self.category_summary],
        }


class BillSummarizer:
    """Computes dashboard statistics from a bill collection.

    Statistics are a pure function of the collection and ``today``;
    active filters never affect them.
    """

    def aggregate(self, bills: list[Bill], today: date) -> BillStatistics:
        """Compute totals by status and the category summary.

        Args:
            bills: The full, overdue-corrected bill collection.
            today: Current date.

        Returns:
            A BillStatistics object.
        """
        window_end = today + timedelta(days=UPCOMING_DAYS)
        upcoming = [
            bill for bill in bills
            if bill.status is BillStatus.PENDING
            and today <= bill.due_date <= window_end
        ]
        overdue = [bill for bill in bills if bill.status is BillStatus.OVERDUE]
        paid = [bill for bill in bills if bill.status is BillStatus.PAID]

        return BillStatistics(
            bill_count=len(bills),
            total_monthly=_total(bills),
            upcoming=upcoming,
            upcoming_total=_total(upcoming),
            overdue=overdue,
            overdue_total=_total(overdue),
            paid=paid,
            paid_total=_total(paid),
            category_summary=self.summarize_categories(bills),
        )

    def summarize_categories(self, bills: list[Bill]) -> list[CategorySummary]:
        """Sum amount and count per category present in ``bills``."""
        summary: dict[BillCategory, CategorySummary] = {}
        for bill in bills:
            entry = summary.setdefault(bill.category, CategorySummary(bill.category))
            entry.amount += bill.amount
            entry.count += 1
        return list(summary.values())

    def category_breakdown(self, bills: list[Bill]) -> list[dict]:
        """Category summary ordered for display, largest amount first.

        Each entry carries its share of the overall total as a
        percentage rounded to one decimal place.

        Args:
            bills: The bill collection.

        Returns:
            List of dictionaries with category, amount, count and share.
        """
        summaries = sorted(
            self.summarize_categories(bills),
            key=lambda s: s.amount,
            reverse=True
        )
        total = sum((s.amount for s in summaries), Decimal('0'))
        breakdown = []
        for s in summaries:
            share = Decimal('0')
            if total > 0:
                share = (s.amount * 100 / total).quantize(Decimal('0.1'))
            entry = s.to_dict()
            entry['share'] = str(share)
            breakdown.append(entry)
        return breakdown

    def stat_cards(
        self,
        stats: BillStatistics,
        formatter: Optional[CurrencyFormatter] = None
    ) -> list[dict]:
        """Build the four headline cards shown above the bill list."""
        formatter = formatter or CurrencyFormatter()
        return [
            {
                'title': 'Total Monthly',
                'value': formatter.format(stats.total_monthly),
                'secondary_value': f"{stats.bill_count} bills",
            },
            {
                'title': 'Due This Week',
                'value': formatter.format(stats.upcoming_total),
                'secondary_value': f"{len(stats.upcoming)} bills",
            },
            {
                'title': 'Overdue',
                'value': formatter.format(stats.overdue_total),
                'secondary_value': f"{len(stats.overdue)} bills",
            },
            {
                'title': 'Paid This Month',
                'value': formatter.format(stats.paid_total),
                'secondary_value': f"{len(stats.paid)} bills",
            },
        ]

    def get_formatted_summary(
        self,
        stats: BillStatistics,
        formatter: Optional[CurrencyFormatter] = None
    ) -> str:
        """Generate a plain-text summary of the statistics.

        Args:
            stats: Statistics to render.
            formatter: Currency formatter; GBP when omitted.

        Returns:
            Formatted string representation of the statistics.
        """
        formatter = formatter or CurrencyFormatter()
        lines = [
            "Recurring Bills Summary",
            "=" * 50,
        ]
        for card in self.stat_cards(stats, formatter):
            lines.append(
                f"{card['title']}: {card['value']} ({card['secondary_value']})"
            )

        if stats.category_summary:
            lines.append("")
            lines.append("Categories:")
            lines.append("-" * 50)
            ordered = sorted(
                stats.category_summary, key=lambda s: s.amount, reverse=True
            )
            for s in ordered:
                lines.append(
                    f"  {s.category.value}: {formatter.format(s.amount)} "
                    f"({s.count} bills)"
                )

        return "\n".join(lines)

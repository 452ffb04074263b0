"""
Statistics Aggregator

Per-day totals are always derived from the invoices currently stored;
nothing here is persisted. Day keys are zero-padded ISO dates, so plain
string comparison orders them chronologically.
"""

from typing import Iterable

from fruit_invoice.config import get_logger
from fruit_invoice.history import InvoiceHistory
from fruit_invoice.models.invoice import DayStat, Invoice, day_key

logger = get_logger(__name__)


def compute_stats(invoices: Iterable[Invoice]) -> list[DayStat]:
    """Group invoices by day, newest day first."""
    groups: dict[str, DayStat] = {}

    for invoice in invoices:
        key = day_key(invoice.created_at)
        stat = groups.get(key)
        if stat is None:
            stat = groups[key] = DayStat(date=key)
        stat.total += invoice.total_amount
        stat.count += 1

    return sorted(groups.values(), key=lambda s: s.date, reverse=True)


def summarize(stats: Iterable[DayStat]) -> tuple[int, int]:
    """Grand (total, count) across the given days."""
    total = 0
    count = 0
    for stat in stats:
        total += stat.total
        count += stat.count
    return total, count


class StatisticsService:
    """The statistics screen's flows: load, delete a day, clear all."""

    def __init__(self, history: InvoiceHistory):
        self._history = history

    async def load_stats(self) -> list[DayStat]:
        return compute_stats(await self._history.list_invoices())

    async def delete_day(self, date_key: str) -> list[DayStat]:
        """Delete every invoice of a day and return the refreshed stats."""
        removed = await self._history.delete_invoices_by_date(date_key)
        logger.info("stats_day_deleted", date=date_key, removed=removed)
        return await self.load_stats()

    async def clear_all(self) -> list[DayStat]:
        await self._history.clear_all_invoices()
        return await self.load_stats()

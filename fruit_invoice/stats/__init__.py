"""Statistics package."""

from fruit_invoice.stats.aggregator import StatisticsService, compute_stats, summarize

__all__ = ["StatisticsService", "compute_stats", "summarize"]

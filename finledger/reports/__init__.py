"""Report aggregation package."""

from finledger.reports.aggregator import LedgerAggregator

__all__ = ["LedgerAggregator"]

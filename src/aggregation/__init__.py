"""
Report data aggregation module.
"""

from src.aggregation.aggregator import ReportDataAggregator, aggregate_report_data

__all__ = [
    "ReportDataAggregator",
    "aggregate_report_data",
]

"""
Data module for loading, validating and splitting the price series.

This module provides:
- CSV loading into a daily log-price series
- Data validation
- Calendar train/test splitting
"""

from .loader import PriceLoader
from .validator import DataValidator, ValidationReport
from .splitter import TrainTestSplit, split_series, cutoff_from_year_day

__all__ = [
    "PriceLoader",
    "DataValidator",
    "ValidationReport",
    "TrainTestSplit",
    "split_series",
    "cutoff_from_year_day"
]

"""
ETH Forecast - Daily Ethereum Price Forecast Comparison

This package provides a batch report that:
- Loads a daily ETH/USD price series and log-transforms it
- Splits it at a calendar cutoff into training and test windows
- Fits ARIMA, ETS, Holt-Winters, NNAR and Prophet models
- Combines member forecasts by unweighted mean
- Ranks every forecast by test-set accuracy and writes a report
"""

__version__ = "1.0.0"

from .config import Config
from .pipeline.orchestrator import Pipeline

__all__ = ["Config", "Pipeline", "__version__"]

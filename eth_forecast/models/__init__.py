"""
Models module for univariate price forecasting.

This module provides:
- Base forecaster interface and ForecastResult
- Auto ARIMA, ETS, Holt-Winters, NNAR and Prophet forecasters
- Forecast combination
- Model bank for sequential fitting and forecasting
"""

from .base import BaseForecaster, ForecastResult
from .arima import AutoARIMAForecaster
from .ets import ETSForecaster
from .holt_winters import HoltWintersForecaster
from .nnetar import NNARForecaster
from .prophet import ProphetForecaster
from .combiner import ForecastCombiner
from .bank import ModelBank, MODEL_REGISTRY, build_forecaster

__all__ = [
    "BaseForecaster",
    "ForecastResult",
    "AutoARIMAForecaster",
    "ETSForecaster",
    "HoltWintersForecaster",
    "NNARForecaster",
    "ProphetForecaster",
    "ForecastCombiner",
    "ModelBank",
    "MODEL_REGISTRY",
    "build_forecaster"
]

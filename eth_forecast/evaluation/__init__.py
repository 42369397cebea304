"""
Evaluation module for forecast accuracy assessment.

This module provides:
- Forecast accuracy metrics
- Holdout evaluation and ranking
- Residual diagnostics
- Visualization tools
"""

from .metrics import accuracy, rmse, METRIC_NAMES
from .evaluator import Evaluator, AccuracyReport
from .diagnostics import ljung_box, residual_diagnostics, LjungBoxResult
from .visualizer import ForecastVisualizer

__all__ = [
    "accuracy",
    "rmse",
    "METRIC_NAMES",
    "Evaluator",
    "AccuracyReport",
    "ljung_box",
    "residual_diagnostics",
    "LjungBoxResult",
    "ForecastVisualizer"
]

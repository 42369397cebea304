"""
Metrics calculation module for forecast evaluation.

Provides the standard forecast accuracy measures:
- Scale-dependent errors (ME, RMSE, MAE)
- Percentage errors (MPE, MAPE)
- Scaled error (MASE) against an in-sample seasonal naive forecast
- Lag-1 autocorrelation of the errors (ACF1)
"""

import logging
from typing import Dict, Optional, Tuple, Union

import pandas as pd
import numpy as np
from sklearn.metrics import mean_absolute_error, mean_squared_error

logger = logging.getLogger(__name__)

ArrayLike = Union[pd.Series, np.ndarray]

METRIC_NAMES = ['me', 'rmse', 'mae', 'mpe', 'mape', 'mase', 'acf1']


def _paired(y_true: ArrayLike, y_pred: ArrayLike) -> Tuple[np.ndarray, np.ndarray]:
    """Align (when both are Series) and drop NaN pairs."""
    if isinstance(y_true, pd.Series) and isinstance(y_pred, pd.Series):
        aligned = pd.concat({'actual': y_true, 'predicted': y_pred}, axis=1, join='inner')
        y_true, y_pred = aligned['actual'], aligned['predicted']

    y_true = np.asarray(y_true, dtype=float)
    y_pred = np.asarray(y_pred, dtype=float)

    if y_true.shape != y_pred.shape:
        raise ValueError(f"Length mismatch: {len(y_true)} actual vs {len(y_pred)} predicted")

    mask = ~(np.isnan(y_true) | np.isnan(y_pred))
    return y_true[mask], y_pred[mask]


def rmse(y_true: ArrayLike, y_pred: ArrayLike) -> float:
    """Root mean squared error over matched, non-missing pairs."""
    y_true, y_pred = _paired(y_true, y_pred)
    if len(y_true) == 0:
        return np.nan
    return float(np.sqrt(mean_squared_error(y_true, y_pred)))


def seasonal_naive_scale(training: ArrayLike, seasonal_period: int = 1) -> float:
    """
    In-sample MAE of the seasonal naive forecast.

    Falls back to the non-seasonal naive forecast when the training
    series is shorter than one seasonal period.
    """
    values = np.asarray(training, dtype=float)
    values = values[~np.isnan(values)]

    lag = seasonal_period if len(values) > seasonal_period else 1
    if len(values) <= lag:
        return np.nan

    return float(np.mean(np.abs(values[lag:] - values[:-lag])))


def acf1(errors: np.ndarray) -> float:
    """Lag-1 autocorrelation of a sequence of errors."""
    if len(errors) < 3:
        return np.nan

    centred = errors - errors.mean()
    denominator = np.sum(centred ** 2)
    if denominator == 0:
        return np.nan

    return float(np.sum(centred[1:] * centred[:-1]) / denominator)


def accuracy(
    y_true: ArrayLike,
    y_pred: ArrayLike,
    training: Optional[ArrayLike] = None,
    seasonal_period: int = 1
) -> Dict[str, float]:
    """
    Calculate forecast accuracy measures.

    Args:
        y_true: Actual values
        y_pred: Forecast or fitted values
        training: Training series used to scale MASE (optional)
        seasonal_period: Lag of the naive forecast used for MASE

    Returns:
        Dictionary of metrics (NaN where undefined)
    """
    y_true, y_pred = _paired(y_true, y_pred)

    if len(y_true) == 0:
        return {name: np.nan for name in METRIC_NAMES}

    errors = y_true - y_pred

    mae = mean_absolute_error(y_true, y_pred)
    rmse_value = np.sqrt(mean_squared_error(y_true, y_pred))

    # Percentage errors (handling zeros)
    mask_nonzero = y_true != 0
    if mask_nonzero.sum() > 0:
        pct = errors[mask_nonzero] / y_true[mask_nonzero] * 100
        mpe = float(np.mean(pct))
        mape = float(np.mean(np.abs(pct)))
    else:
        mpe = mape = np.nan

    mase = np.nan
    if training is not None:
        scale = seasonal_naive_scale(training, seasonal_period)
        if scale and np.isfinite(scale):
            mase = float(mae / scale)

    return {
        'me': float(np.mean(errors)),
        'rmse': float(rmse_value),
        'mae': float(mae),
        'mpe': mpe,
        'mape': mape,
        'mase': mase,
        'acf1': acf1(errors)
    }

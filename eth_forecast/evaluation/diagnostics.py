"""
Residual diagnostics.
"""

import logging
from dataclasses import dataclass
from typing import Dict, Optional

import pandas as pd
import numpy as np
from statsmodels.stats.diagnostic import acorr_ljungbox

from ..models.base import ForecastResult

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class LjungBoxResult:
    """Ljung-Box portmanteau test on a residual series."""
    statistic: float
    p_value: float
    lags: int
    alpha: float = 0.05

    @property
    def white_noise(self) -> bool:
        """True when autocorrelation is not significant at `alpha`."""
        return bool(self.p_value > self.alpha)

    def to_dict(self) -> Dict:
        return {
            'statistic': self.statistic,
            'p_value': self.p_value,
            'lags': self.lags,
            'white_noise': self.white_noise
        }


def ljung_box_lags(n_obs: int, seasonal_period: int = 1) -> int:
    """Number of lags tested: min(2m, n/5), or 10 for non-seasonal data."""
    lags = 10 if seasonal_period <= 1 else 2 * seasonal_period
    return max(1, min(lags, n_obs // 5))


def ljung_box(
    residuals: pd.Series,
    seasonal_period: int = 1,
    lags: Optional[int] = None,
    alpha: float = 0.05
) -> LjungBoxResult:
    """
    Ljung-Box test on residuals.

    Args:
        residuals: Residual series (NaN values dropped)
        seasonal_period: Seasonal period used to pick the lag count
        lags: Explicit lag count (overrides the default rule)
        alpha: Significance level for the white-noise flag

    Returns:
        LjungBoxResult
    """
    values = pd.Series(residuals).dropna()

    if len(values) < 10:
        raise ValueError(f"Need at least 10 residuals for Ljung-Box, got {len(values)}")

    if lags is None:
        lags = ljung_box_lags(len(values), seasonal_period)

    table = acorr_ljungbox(values.to_numpy(), lags=[lags], return_df=True)

    return LjungBoxResult(
        statistic=float(table['lb_stat'].iloc[-1]),
        p_value=float(table['lb_pvalue'].iloc[-1]),
        lags=int(lags),
        alpha=alpha
    )


def residual_diagnostics(
    results: Dict[str, ForecastResult],
    train: pd.Series,
    seasonal_period: int = 1
) -> Dict[str, LjungBoxResult]:
    """
    Ljung-Box test on the training residuals of every model with fitted values.

    Args:
        results: Forecasts by model name
        train: Training series
        seasonal_period: Seasonal period used to pick the lag count

    Returns:
        Dictionary mapping model names to test results
    """
    diagnostics = {}

    for name, result in results.items():
        if result.fitted is None:
            logger.debug(f"{name}: no fitted values, skipping residual diagnostics")
            continue

        residuals = (train - result.fitted).replace([np.inf, -np.inf], np.nan)
        diagnostics[name] = ljung_box(residuals, seasonal_period)

        logger.info(
            f"  {name}: Q*={diagnostics[name].statistic:.2f}, "
            f"p={diagnostics[name].p_value:.4f}, lags={diagnostics[name].lags}"
        )

    return diagnostics

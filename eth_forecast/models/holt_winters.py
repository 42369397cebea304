"""
Holt-Winters forecaster (level + trend + seasonal).
"""

import logging
import warnings
from typing import Any, Dict, Optional

import pandas as pd
import numpy as np
from statsmodels.tsa.holtwinters import ExponentialSmoothing
from statsmodels.tools.sm_exceptions import ConvergenceWarning

from .base import BaseForecaster

logger = logging.getLogger(__name__)


class HoltWintersForecaster(BaseForecaster):
    """
    Holt-Winters exponential smoothing with a fixed structural form.

    Smoothing parameters are optimised; prediction intervals come from
    simulated future paths drawn with an explicit seed.
    """

    DEFAULT_PARAMS = {
        'seasonal_periods': 365,
        'trend': 'add',
        'seasonal': 'add',
        'damped_trend': False,
        'n_simulations': 200,
        'level': 95,
        'seed': None
    }

    def __init__(self, name: str = 'holt_winters', params: Optional[Dict[str, Any]] = None):
        merged_params = self.DEFAULT_PARAMS.copy()
        if params:
            merged_params.update(params)

        super().__init__(name, merged_params)

    def _fit(self, train: pd.Series) -> None:
        period = self.params['seasonal_periods']
        if len(train) < 2 * period:
            raise ValueError(
                f"Holt-Winters needs two full seasons ({2 * period} obs), got {len(train)}"
            )

        model = ExponentialSmoothing(
            train.to_numpy(dtype=float),
            trend=self.params['trend'],
            damped_trend=self.params['damped_trend'],
            seasonal=self.params['seasonal'],
            seasonal_periods=period,
            initialization_method='estimated'
        )

        with warnings.catch_warnings():
            warnings.simplefilter('ignore', ConvergenceWarning)
            self.model = model.fit(optimized=True)

        smoothing = {
            key: float(self.model.params[key])
            for key in ('smoothing_level', 'smoothing_trend', 'smoothing_seasonal')
            if self.model.params.get(key) is not None
        }
        self.metadata.update(smoothing)

        logger.info(f"Holt-Winters fitted (period={period}): {smoothing}")

    def _forecast(self, horizon: int, index: pd.DatetimeIndex):
        mean = np.asarray(self.model.forecast(horizon))

        n_sims = self.params['n_simulations']
        if not n_sims:
            return mean, None, None

        paths = np.asarray(self.model.simulate(
            nsimulations=horizon,
            repetitions=n_sims,
            error='add',
            random_state=self.params['seed']
        )).reshape(horizon, n_sims)

        tail = (100 - self.params['level']) / 2
        lower = np.percentile(paths, tail, axis=1)
        upper = np.percentile(paths, 100 - tail, axis=1)

        return mean, lower, upper

    def _fitted_values(self) -> Optional[np.ndarray]:
        return np.asarray(self.model.fittedvalues)

"""
ARIMA forecaster with automatic order selection.

Provides a non-seasonal ARIMA with:
- Stepwise information-criterion search over bounded orders
- Prediction intervals at a configurable level
"""

import logging
from typing import Any, Dict, Optional

import pandas as pd
import numpy as np
from pmdarima import auto_arima

from .base import BaseForecaster

logger = logging.getLogger(__name__)


class AutoARIMAForecaster(BaseForecaster):
    """
    Auto-selected ARIMA(p, d, q) model.

    The differencing order is chosen by unit-root tests, then (p, q)
    by a stepwise search minimising the information criterion.
    """

    DEFAULT_PARAMS = {
        'max_p': 5,
        'max_d': 2,
        'max_q': 5,
        'information_criterion': 'aicc',
        'seasonal': False,
        'm': 1,
        'stepwise': True,
        'level': 95
    }

    def __init__(self, name: str = 'arima', params: Optional[Dict[str, Any]] = None):
        """
        Initialize ARIMA forecaster.

        Args:
            name: Model name
            params: Search bounds and options (merged with defaults)
        """
        merged_params = self.DEFAULT_PARAMS.copy()
        if params:
            merged_params.update(params)

        super().__init__(name, merged_params)

    @property
    def order(self):
        """Selected (p, d, q) order."""
        return self.model.order if self.model is not None else None

    def _fit(self, train: pd.Series) -> None:
        self.model = auto_arima(
            train.to_numpy(),
            max_p=self.params['max_p'],
            max_d=self.params['max_d'],
            max_q=self.params['max_q'],
            seasonal=self.params['seasonal'],
            m=self.params['m'],
            stepwise=self.params['stepwise'],
            information_criterion=self.params['information_criterion'],
            suppress_warnings=True,
            error_action='ignore',
            trace=False
        )

        self.metadata['order'] = tuple(int(o) for o in self.model.order)
        self.metadata[self.params['information_criterion']] = float(
            getattr(self.model, self.params['information_criterion'])()
        )

        logger.info(f"ARIMA order selected: {self.metadata['order']}")

    def _forecast(self, horizon: int, index: pd.DatetimeIndex):
        alpha = 1 - self.params['level'] / 100
        mean, conf_int = self.model.predict(n_periods=horizon, return_conf_int=True, alpha=alpha)
        conf_int = np.asarray(conf_int)
        return np.asarray(mean), conf_int[:, 0], conf_int[:, 1]

    def _fitted_values(self) -> Optional[np.ndarray]:
        fitted = np.asarray(self.model.predict_in_sample(), dtype=float)
        # The first d values are undefined under differencing
        fitted[:self.model.order[1]] = np.nan
        return fitted

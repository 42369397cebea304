"""
ETS (error, trend, seasonal) exponential smoothing with automatic
component selection.
"""

import itertools
import logging
import warnings
from typing import Any, Dict, List, Optional, Tuple

import pandas as pd
import numpy as np
from statsmodels.tsa.exponential_smoothing.ets import ETSModel
from statsmodels.tools.sm_exceptions import ConvergenceWarning

from .base import BaseForecaster

logger = logging.getLogger(__name__)

# ETS seasonality is only searched for short seasonal cycles
MAX_ETS_SEASONAL_PERIOD = 24

# (error, trend, damped, seasonal)
Components = Tuple[str, Optional[str], bool, Optional[str]]


def describe_components(components: Components) -> str:
    """Short ETS(E,T,S) label, e.g. ETS(A,Ad,N)."""
    error, trend, damped, seasonal = components
    letter = {'add': 'A', 'mul': 'M', None: 'N'}
    trend_label = letter[trend] + ('d' if damped else '')
    return f"ETS({letter[error]},{trend_label},{letter[seasonal]})"


class ETSForecaster(BaseForecaster):
    """
    State-space exponential smoothing.

    Every admissible combination of additive/multiplicative error,
    none/additive/damped trend and (for short cycles) seasonal component
    is fitted by maximum likelihood; the lowest information criterion wins.
    """

    DEFAULT_PARAMS = {
        'information_criterion': 'aicc',
        'allow_multiplicative': True,
        'seasonal_periods': None,
        'level': 95,
        'seed': None
    }

    def __init__(self, name: str = 'ets', params: Optional[Dict[str, Any]] = None):
        merged_params = self.DEFAULT_PARAMS.copy()
        if params:
            merged_params.update(params)

        super().__init__(name, merged_params)
        self.components: Optional[Components] = None

    def candidate_components(self, train: pd.Series) -> List[Components]:
        """Enumerate the model forms searched for this series."""
        positive = bool((train > 0).all())
        errors = ['add', 'mul'] if self.params['allow_multiplicative'] and positive else ['add']

        trends = [(None, False), ('add', False), ('add', True)]

        seasonals: List[Optional[str]] = [None]
        period = self.params['seasonal_periods']
        if period and 1 < period <= MAX_ETS_SEASONAL_PERIOD and len(train) >= 2 * period:
            seasonals.append('add')
            if self.params['allow_multiplicative'] and positive:
                seasonals.append('mul')
        elif period and period > MAX_ETS_SEASONAL_PERIOD:
            logger.info(f"Seasonal period {period} too long for ETS; searching non-seasonal forms")

        candidates = []
        for error, (trend, damped), seasonal in itertools.product(errors, trends, seasonals):
            # Additive error with multiplicative seasonality is numerically unstable
            if error == 'add' and seasonal == 'mul':
                continue
            candidates.append((error, trend, damped, seasonal))

        return candidates

    def _fit_candidate(self, y: pd.Series, components: Components):
        error, trend, damped, seasonal = components
        model = ETSModel(
            y,
            error=error,
            trend=trend,
            damped_trend=damped,
            seasonal=seasonal,
            seasonal_periods=self.params['seasonal_periods'] if seasonal else None
        )
        with warnings.catch_warnings():
            warnings.simplefilter('ignore', ConvergenceWarning)
            warnings.simplefilter('ignore', RuntimeWarning)
            return model.fit(disp=False)

    def _fit(self, train: pd.Series) -> None:
        # ETSModel needs a pandas input for get_prediction to return a Series
        y = train.astype(float)
        criterion = self.params['information_criterion']

        best_score = np.inf
        best = None

        for components in self.candidate_components(train):
            try:
                results = self._fit_candidate(y, components)
            except (ValueError, np.linalg.LinAlgError) as e:
                logger.debug(f"  {describe_components(components)} failed: {e}")
                continue

            score = float(getattr(results, criterion))
            logger.debug(f"  {describe_components(components)}: {criterion}={score:.2f}")

            if np.isfinite(score) and score < best_score:
                best_score = score
                best = (components, results)

        if best is None:
            raise RuntimeError("No ETS candidate could be fitted")

        self.components, self.model = best
        self.metadata['components'] = describe_components(self.components)
        self.metadata[criterion] = best_score

        logger.info(f"ETS model selected: {self.metadata['components']} ({criterion}={best_score:.2f})")

    def _forecast(self, horizon: int, index: pd.DatetimeIndex):
        n = self.model.nobs
        # Multiplicative forms get simulated intervals
        prediction = self.model.get_prediction(
            start=n, end=n + horizon - 1, random_state=self.params['seed']
        )
        frame = prediction.summary_frame(
            alpha=1 - self.params['level'] / 100
        )
        return frame['mean'].to_numpy(), frame['pi_lower'].to_numpy(), frame['pi_upper'].to_numpy()

    def _fitted_values(self) -> Optional[np.ndarray]:
        return np.asarray(self.model.fittedvalues)

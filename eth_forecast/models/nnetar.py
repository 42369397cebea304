"""
Neural network autoregression (NNAR) forecaster.

Provides a single-hidden-layer feed-forward network on lagged values:
- Automatic lag order from the AIC-optimal linear AR fit
- Averaging over several randomly initialised networks
- Recursive point forecasts
- Simulated prediction intervals with an explicit seed
"""

import logging
import warnings
from typing import Any, Dict, List, Optional

import pandas as pd
import numpy as np
from sklearn.exceptions import ConvergenceWarning
from sklearn.neural_network import MLPRegressor
from statsmodels.tsa.ar_model import ar_select_order

from .base import BaseForecaster

logger = logging.getLogger(__name__)


def select_ar_order(y: np.ndarray, max_lags: int) -> int:
    """Order of the AIC-optimal linear AR model (at least 1)."""
    max_lags = max(1, min(max_lags, len(y) // 4))
    with warnings.catch_warnings():
        warnings.simplefilter('ignore')
        selection = ar_select_order(y, maxlag=max_lags, ic='aic', trend='c')
    lags = selection.ar_lags or []
    return max(max(lags) if lags else 0, 1)


def lag_matrix(values: np.ndarray, lags: List[int]):
    """
    Build the autoregressive design matrix.

    Returns:
        Tuple of (X, y) where row i of X holds values[t - lag] for
        t = max(lags) + i
    """
    max_lag = max(lags)
    n = len(values)
    X = np.column_stack([values[max_lag - lag:n - lag] for lag in lags])
    return X, values[max_lag:]


class NNARForecaster(BaseForecaster):
    """
    NNAR(p, P, k) model.

    Inputs are the p most recent values plus P seasonal lags (when a
    seasonal period is set); k hidden units. Inputs are standardised with
    the training mean and standard deviation.
    """

    DEFAULT_PARAMS = {
        'lags': None,
        'max_lags': 30,
        'seasonal_period': None,
        'seasonal_lags': 1,
        'hidden_size': None,
        'repeats': 20,
        'decay': 1e-4,
        'max_iter': 500,
        'pi': True,
        'n_paths': 1000,
        'level': 95,
        'seed': None
    }

    def __init__(self, name: str = 'nnetar', params: Optional[Dict[str, Any]] = None):
        merged_params = self.DEFAULT_PARAMS.copy()
        if params:
            merged_params.update(params)

        super().__init__(name, merged_params)

        self.input_lags: List[int] = []
        self.networks: List[MLPRegressor] = []
        self.scale_: Dict[str, float] = {}
        self.sigma_: Optional[float] = None
        self._simulation_seed: Optional[np.random.SeedSequence] = None

    def _scale(self, values: np.ndarray) -> np.ndarray:
        return (values - self.scale_['mean']) / self.scale_['std']

    def _unscale(self, values: np.ndarray) -> np.ndarray:
        return values * self.scale_['std'] + self.scale_['mean']

    def _resolve_lags(self, y: np.ndarray) -> List[int]:
        p = int(self.params['lags'] or select_ar_order(y, self.params['max_lags']))
        lags = list(range(1, p + 1))

        period = self.params['seasonal_period']
        if period and self.params['seasonal_lags']:
            seasonal = [period * i for i in range(1, self.params['seasonal_lags'] + 1)]
            lags.extend(lag for lag in seasonal if lag not in lags)

        if max(lags) >= len(y):
            raise ValueError(f"Series of {len(y)} observations too short for lag {max(lags)}")

        self.metadata['p'] = p
        self.metadata['P'] = len(lags) - p

        return lags

    def _predict_scaled(self, X: np.ndarray) -> np.ndarray:
        """Average the network outputs."""
        return np.mean([net.predict(X) for net in self.networks], axis=0)

    def _fit(self, train: pd.Series) -> None:
        y = train.to_numpy(dtype=float)

        seeds = np.random.SeedSequence(self.params['seed'])
        fit_seed, self._simulation_seed = seeds.spawn(2)
        net_seeds = np.random.default_rng(fit_seed).integers(0, 2**31 - 1, size=self.params['repeats'])

        self.input_lags = self._resolve_lags(y)
        hidden = self.params['hidden_size'] or max(1, int(round((len(self.input_lags) + 1) / 2)))

        std = float(np.std(y))
        self.scale_ = {'mean': float(np.mean(y)), 'std': std if std > 0 else 1.0}
        X, target = lag_matrix(self._scale(y), self.input_lags)

        self.networks = []
        with warnings.catch_warnings():
            warnings.simplefilter('ignore', ConvergenceWarning)
            for seed in net_seeds:
                net = MLPRegressor(
                    hidden_layer_sizes=(hidden,),
                    activation='logistic',
                    solver='lbfgs',
                    alpha=self.params['decay'],
                    max_iter=self.params['max_iter'],
                    random_state=int(seed)
                )
                net.fit(X, target)
                self.networks.append(net)

        residuals = target - self._predict_scaled(X)
        self.sigma_ = float(np.std(residuals, ddof=1))

        self.model = self.networks
        self.metadata['lags'] = list(self.input_lags)
        self.metadata['hidden_size'] = hidden
        if self.metadata['P']:
            self.metadata['label'] = (
                f"NNAR({self.metadata['p']},{self.metadata['P']},{hidden})"
                f"[{self.params['seasonal_period']}]"
            )
        else:
            self.metadata['label'] = f"NNAR({self.metadata['p']},{hidden})"

        logger.info(
            f"NNAR fitted: lags={self.input_lags}, hidden={hidden}, "
            f"{len(self.networks)} networks"
        )

    def _history(self) -> np.ndarray:
        """Scaled tail of the training series long enough for every lag."""
        return self._scale(self.train_.to_numpy(dtype=float))[-max(self.input_lags):]

    def _forecast(self, horizon: int, index: pd.DatetimeIndex):
        history = self._history()

        # Recursive point forecast
        path = list(history)
        for _ in range(horizon):
            x = np.array([[path[-lag] for lag in self.input_lags]])
            path.append(float(self._predict_scaled(x)[0]))
        mean = self._unscale(np.array(path[len(history):]))

        if not self.params['pi']:
            return mean, None, None

        lower, upper = self._simulate_intervals(history, horizon)
        return mean, lower, upper

    def _simulate_intervals(self, history: np.ndarray, horizon: int):
        """Interval bounds from simulated sample paths."""
        rng = np.random.default_rng(self._simulation_seed)
        n_paths = self.params['n_paths']

        paths = np.tile(history, (n_paths, 1))
        simulated = np.empty((n_paths, horizon))

        for step in range(horizon):
            X = np.column_stack([paths[:, -lag] for lag in self.input_lags])
            draw = self._predict_scaled(X) + rng.normal(0.0, self.sigma_, size=n_paths)
            simulated[:, step] = draw
            paths = np.column_stack([paths[:, 1:], draw])

        simulated = self._unscale(simulated)
        tail = (100 - self.params['level']) / 2

        return (
            np.percentile(simulated, tail, axis=0),
            np.percentile(simulated, 100 - tail, axis=0)
        )

    def _fitted_values(self) -> Optional[np.ndarray]:
        y = self._scale(self.train_.to_numpy(dtype=float))
        X, _ = lag_matrix(y, self.input_lags)
        fitted = np.full(len(y), np.nan)
        fitted[max(self.input_lags):] = self._unscale(self._predict_scaled(X))
        return fitted

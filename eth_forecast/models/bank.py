"""
Model bank orchestration module.

Handles:
- Building the enabled forecasters from configuration
- Sequential fitting on the training window
- Forecasting the holdout horizon
- Model persistence
"""

import logging
from pathlib import Path
from typing import Any, Dict, List, Optional, Type

from .base import BaseForecaster, ForecastResult
from .arima import AutoARIMAForecaster
from .ets import ETSForecaster
from .holt_winters import HoltWintersForecaster
from .nnetar import NNARForecaster
from .prophet import ProphetForecaster
from ..data.splitter import TrainTestSplit

logger = logging.getLogger(__name__)

MODEL_REGISTRY: Dict[str, Type[BaseForecaster]] = {
    'arima': AutoARIMAForecaster,
    'ets': ETSForecaster,
    'holt_winters': HoltWintersForecaster,
    'nnetar': NNARForecaster,
    'prophet': ProphetForecaster
}

# Models whose fits or intervals draw random numbers
SEEDED_MODELS = ('ets', 'holt_winters', 'nnetar', 'prophet')


def build_forecaster(
    name: str,
    params: Optional[Dict[str, Any]] = None,
    seed: Optional[int] = None
) -> BaseForecaster:
    """
    Instantiate a forecaster by registry name.

    Args:
        name: Registry name (see MODEL_REGISTRY)
        params: Model parameters
        seed: Random seed applied when `params` sets none

    Returns:
        Unfitted forecaster
    """
    if name not in MODEL_REGISTRY:
        raise KeyError(f"Unknown model: {name}. Choose from {sorted(MODEL_REGISTRY)}")

    params = dict(params or {})
    if name in SEEDED_MODELS and params.get('seed') is None and seed is not None:
        params['seed'] = seed

    return MODEL_REGISTRY[name](name, params)


class ModelBank:
    """
    Independent forecasters fitted and run one after another.

    Each forecaster owns its fitted parameters; nothing is shared
    between models.
    """

    def __init__(
        self,
        model_params: Dict[str, Dict[str, Any]],
        seed: Optional[int] = None
    ):
        """
        Initialize model bank.

        Args:
            model_params: Parameters by model name, in run order
            seed: Default random seed for stochastic models
        """
        self.seed = seed
        self.forecasters: Dict[str, BaseForecaster] = {
            name: build_forecaster(name, params, seed)
            for name, params in model_params.items()
        }

    @classmethod
    def from_config(cls, config) -> 'ModelBank':
        """Build the bank from the enabled models in configuration."""
        return cls(
            {name: config.model_params(name) for name in config.enabled_models},
            seed=config.random_seed
        )

    @property
    def names(self) -> List[str]:
        return list(self.forecasters)

    def __getitem__(self, name: str) -> BaseForecaster:
        return self.forecasters[name]

    def fit_all(self, train) -> 'ModelBank':
        """
        Fit every forecaster on the training series.

        Args:
            train: Training PriceSeries

        Returns:
            Self for method chaining
        """
        for i, (name, forecaster) in enumerate(self.forecasters.items(), 1):
            logger.info(f"[{i}/{len(self.forecasters)}] Fitting {name}...")
            forecaster.fit(train)

        return self

    def forecast_all(self, split: TrainTestSplit) -> Dict[str, ForecastResult]:
        """
        Forecast the holdout window with every fitted forecaster.

        Args:
            split: Train/test split whose test window sets the horizon

        Returns:
            Dictionary mapping model names to forecasts
        """
        results = {}

        for name, forecaster in self.forecasters.items():
            result = forecaster.forecast(split.horizon, index=split.test_index)

            if len(result) != split.horizon:
                raise ValueError(f"{name} produced {len(result)} forecasts for horizon {split.horizon}")

            results[name] = result
            logger.info(f"✓ {name}: {split.horizon}-day forecast")

        return results

    def save_all(self, directory: Path, prefix: str = '') -> Dict[str, str]:
        """
        Save every fitted forecaster.

        Args:
            directory: Output directory
            prefix: Optional file name prefix

        Returns:
            Dictionary mapping model names to saved paths
        """
        directory = Path(directory)
        return {
            name: forecaster.save(str(directory / f"{prefix}{name}.joblib"))
            for name, forecaster in self.forecasters.items()
        }

    def __repr__(self) -> str:
        return f"ModelBank(models={self.names})"

"""
Base forecaster interface for all univariate models.

Defines the common interface that all forecasters must implement
and the ForecastResult they produce.
"""

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Optional
from datetime import datetime

import pandas as pd
import numpy as np
import joblib

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ForecastResult:
    """Point forecasts (and optional interval bounds) for one model."""
    model_name: str
    mean: pd.Series
    lower: Optional[pd.Series] = None
    upper: Optional[pd.Series] = None
    level: Optional[float] = None
    fitted: Optional[pd.Series] = None
    metadata: Dict[str, Any] = field(default_factory=dict)

    def __post_init__(self):
        for bound in (self.lower, self.upper):
            if bound is not None and not bound.index.equals(self.mean.index):
                raise ValueError(f"{self.model_name}: interval bounds not aligned with forecast")

    def __len__(self) -> int:
        return len(self.mean)

    @property
    def has_intervals(self) -> bool:
        return self.lower is not None and self.upper is not None

    def to_frame(self) -> pd.DataFrame:
        """Return mean and bounds as columns on the forecast index."""
        frame = pd.DataFrame({'mean': self.mean})
        if self.has_intervals:
            frame['lower'] = self.lower
            frame['upper'] = self.upper
        return frame


class BaseForecaster(ABC):
    """
    Abstract base class for univariate forecasters.

    A forecaster is fitted once on a training series; the fitted
    instance then produces forecasts for any horizon.
    """

    def __init__(self, name: str, params: Optional[Dict[str, Any]] = None):
        """
        Initialize base forecaster.

        Args:
            name: Model name identifier
            params: Model hyperparameters
        """
        self.name = name
        self.params = params or {}
        self.model = None
        self.is_fitted = False
        self.train_: Optional[pd.Series] = None
        self.metadata: Dict[str, Any] = {
            'created_at': datetime.now().isoformat(),
            'name': name
        }

    def fit(self, train: pd.Series) -> 'BaseForecaster':
        """
        Train the model.

        Args:
            train: Training series on a DatetimeIndex

        Returns:
            Self for method chaining
        """
        if len(train) == 0:
            raise ValueError(f"{self.name}: empty training series")
        if train.isnull().any():
            raise ValueError(f"{self.name}: training series contains missing values")

        logger.info(f"Fitting {self.name} on {len(train)} observations...")

        self.train_ = train
        self._fit(train)

        self.is_fitted = True
        self.metadata['n_samples'] = len(train)
        self.metadata['train_end'] = str(train.index[-1].date())

        return self

    def forecast(self, horizon: int, index: Optional[pd.DatetimeIndex] = None) -> ForecastResult:
        """
        Generate forecasts for the next `horizon` periods.

        Args:
            horizon: Number of steps ahead
            index: Dates to attach to the forecast (defaults to the
                days following the training window)

        Returns:
            ForecastResult aligned with `index`
        """
        if not self.is_fitted:
            raise ValueError("Model must be fitted before prediction")
        if horizon < 1:
            raise ValueError(f"Horizon must be positive, got {horizon}")

        if index is None:
            index = self.future_index(horizon)
        elif len(index) != horizon:
            raise ValueError(f"Index length {len(index)} does not match horizon {horizon}")

        mean, lower, upper = self._forecast(horizon, index)

        result = ForecastResult(
            model_name=self.name,
            mean=pd.Series(np.asarray(mean, dtype=float), index=index, name=self.name),
            lower=None if lower is None else pd.Series(np.asarray(lower, dtype=float), index=index),
            upper=None if upper is None else pd.Series(np.asarray(upper, dtype=float), index=index),
            level=self.params.get('level') if lower is not None else None,
            fitted=self.fitted_values(),
            metadata=dict(self.metadata)
        )

        logger.debug(f"{self.name}: {horizon}-step forecast ends at {result.mean.iloc[-1]:.4f}")

        return result

    def future_index(self, horizon: int) -> pd.DatetimeIndex:
        """Daily dates following the training window."""
        start = self.train_.index[-1] + pd.Timedelta(days=1)
        return pd.date_range(start, periods=horizon, freq='D', name=self.train_.index.name)

    def fitted_values(self) -> Optional[pd.Series]:
        """In-sample one-step fitted values on the training index."""
        if not self.is_fitted:
            return None
        values = self._fitted_values()
        if values is None:
            return None
        return pd.Series(np.asarray(values, dtype=float), index=self.train_.index, name=self.name)

    def residuals(self) -> Optional[pd.Series]:
        """Training residuals (actual minus fitted)."""
        fitted = self.fitted_values()
        if fitted is None:
            return None
        return (self.train_ - fitted).dropna()

    @abstractmethod
    def _fit(self, train: pd.Series) -> None:
        """Fit the underlying library model and store it on `self.model`."""
        pass

    @abstractmethod
    def _forecast(self, horizon: int, index: pd.DatetimeIndex):
        """Return (mean, lower, upper) arrays; bounds may be None."""
        pass

    def _fitted_values(self) -> Optional[np.ndarray]:
        return None

    def save(self, filepath: str) -> str:
        """
        Save fitted forecaster to file.

        Args:
            filepath: Path to save model

        Returns:
            Path to saved file
        """
        if not self.is_fitted:
            raise ValueError("Model must be fitted before saving")

        filepath = Path(filepath)
        filepath.parent.mkdir(parents=True, exist_ok=True)

        self.metadata['saved_at'] = datetime.now().isoformat()

        joblib.dump(self, filepath)
        logger.info(f"Model saved to {filepath}")

        return str(filepath)

    @classmethod
    def load(cls, filepath: str) -> 'BaseForecaster':
        """
        Load a fitted forecaster from file.

        Args:
            filepath: Path to model file

        Returns:
            Loaded forecaster instance
        """
        filepath = Path(filepath)

        if not filepath.exists():
            raise FileNotFoundError(f"Model file not found: {filepath}")

        instance = joblib.load(filepath)

        if not isinstance(instance, cls):
            raise TypeError(f"{filepath} holds a {type(instance).__name__}, not a {cls.__name__}")

        logger.info(f"Model loaded from {filepath}")

        return instance

    def __repr__(self) -> str:
        status = "fitted" if self.is_fitted else "not fitted"
        return f"{self.__class__.__name__}(name='{self.name}', {status})"

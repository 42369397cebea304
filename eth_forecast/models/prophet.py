import pandas as pd
import numpy as np
from typing import Any, Dict, Optional
import logging
from prophet import Prophet

from .base import BaseForecaster


logger = logging.getLogger(__name__)


def _naive(index: pd.DatetimeIndex) -> pd.DatetimeIndex:
    """Prophet does not support timezone-aware datetimes"""
    return index.tz_convert(None) if index.tz is not None else index


class ProphetForecaster(BaseForecaster):
    """Facebook Prophet regression on the native daily timestamps"""

    DEFAULT_PARAMS = {
        "seasonality_mode": "additive",
        "yearly_seasonality": False,
        "weekly_seasonality": False,
        "daily_seasonality": False,
        "changepoint_prior_scale": 0.05,
        "interval_width": 0.95,
        "growth": "linear",
        "custom_seasonality": None,
        "seed": None,
    }

    # Keys consumed here rather than by Prophet()
    LOCAL_KEYS = ("custom_seasonality", "seed", "level")

    def __init__(self, name: str = "prophet", params: Optional[Dict[str, Any]] = None):
        merged_params = self.DEFAULT_PARAMS.copy()
        if params:
            merged_params.update(params)
        merged_params["level"] = merged_params["interval_width"] * 100

        super().__init__(name, merged_params)

    def _build_model(self) -> Prophet:
        prophet_params = {k: v for k, v in self.params.items() if k not in self.LOCAL_KEYS}
        model = Prophet(**prophet_params)

        custom = self.params["custom_seasonality"]
        if custom:
            model.add_seasonality(
                name=custom.get("name", "custom"),
                period=custom["period"],
                fourier_order=custom["fourier_order"],
                mode=custom.get("mode", self.params["seasonality_mode"]),
            )

        return model

    def _fit(self, train: pd.Series) -> None:
        # Suppress Prophet logs
        logging.getLogger("prophet").setLevel(logging.WARNING)
        logging.getLogger("cmdstanpy").setLevel(logging.WARNING)

        history = pd.DataFrame({"ds": _naive(train.index), "y": train.to_numpy()})

        self.model = self._build_model()
        self.model.fit(history)

        self.metadata["seasonality_mode"] = self.params["seasonality_mode"]
        self.metadata["seasonalities"] = {
            name: {"period": s["period"], "fourier_order": s["fourier_order"]}
            for name, s in self.model.seasonalities.items()
        }

        logger.info(f"Prophet fitted ({self.params['seasonality_mode']}, seasonalities={list(self.model.seasonalities)})")

    def _predict(self, dates: pd.DatetimeIndex) -> pd.DataFrame:
        future = pd.DataFrame({"ds": _naive(dates)})
        if self.params["seed"] is None:
            return self.model.predict(future)

        # Uncertainty intervals are sampled from numpy's global generator;
        # the caller's generator state is restored afterwards
        state = np.random.get_state()
        np.random.seed(self.params["seed"])
        try:
            return self.model.predict(future)
        finally:
            np.random.set_state(state)

    def _forecast(self, horizon: int, index: pd.DatetimeIndex):
        forecast = self._predict(index)
        return forecast["yhat"].to_numpy(), forecast["yhat_lower"].to_numpy(), forecast["yhat_upper"].to_numpy()

    def _fitted_values(self) -> Optional[np.ndarray]:
        return self._predict(self.train_.index)["yhat"].to_numpy()

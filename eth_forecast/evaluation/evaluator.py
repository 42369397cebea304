"""
Forecast evaluation against the holdout window.
"""

import logging
from dataclasses import dataclass, field
from typing import Dict, Optional

import pandas as pd
import numpy as np

from .metrics import accuracy, METRIC_NAMES
from ..data.splitter import TrainTestSplit
from ..models.base import ForecastResult

logger = logging.getLogger(__name__)


@dataclass
class AccuracyReport:
    """Training and test accuracy for every evaluated model."""
    scores: Dict[str, Dict[str, Dict[str, float]]] = field(default_factory=dict)

    def __contains__(self, model_name: str) -> bool:
        return model_name in self.scores

    def __getitem__(self, model_name: str) -> Dict[str, Dict[str, float]]:
        return self.scores[model_name]

    def __len__(self) -> int:
        return len(self.scores)

    def test_rmse(self, model_name: str) -> float:
        return self.scores[model_name]['test']['rmse']

    def to_frame(self) -> pd.DataFrame:
        """One row per (model, set) with one column per metric."""
        rows = []
        for model_name, sets in self.scores.items():
            for set_name, metrics in sets.items():
                rows.append({'model': model_name, 'set': set_name, **metrics})

        if not rows:
            return pd.DataFrame(columns=['model', 'set'] + METRIC_NAMES)

        return pd.DataFrame(rows).set_index(['model', 'set'])

    def ranked(self) -> pd.DataFrame:
        """Test metrics per model, ordered by test RMSE ascending."""
        test = pd.DataFrame({name: sets['test'] for name, sets in self.scores.items()}).T
        test.index.name = 'model'
        test = test.sort_values('rmse', kind='mergesort')
        test.insert(0, 'rank', np.arange(1, len(test) + 1))
        return test

    @property
    def best_model(self) -> Optional[str]:
        if not self.scores:
            return None
        return self.ranked().index[0]


class Evaluator:
    """
    Scores forecasts against the holdout window and fitted values
    against the training window.
    """

    def __init__(self, seasonal_period: int = 1):
        """
        Initialize evaluator.

        Args:
            seasonal_period: Naive-forecast lag used to scale MASE
        """
        self.seasonal_period = seasonal_period

    def evaluate(self, result: ForecastResult, split: TrainTestSplit) -> Dict[str, Dict[str, float]]:
        """
        Score one forecast.

        Args:
            result: Forecast aligned with the test window
            split: Train/test split

        Returns:
            {'train': metrics, 'test': metrics}
        """
        if not result.mean.index.equals(split.test.index):
            raise ValueError(f"{result.model_name}: forecast not aligned with the test window")

        if result.fitted is not None:
            train_metrics = accuracy(
                split.train, result.fitted,
                training=split.train, seasonal_period=self.seasonal_period
            )
        else:
            train_metrics = {name: np.nan for name in METRIC_NAMES}

        test_metrics = accuracy(
            split.test, result.mean,
            training=split.train, seasonal_period=self.seasonal_period
        )

        return {'train': train_metrics, 'test': test_metrics}

    def evaluate_all(self, results: Dict[str, ForecastResult], split: TrainTestSplit) -> AccuracyReport:
        """
        Score every forecast.

        Args:
            results: Forecasts by model name
            split: Train/test split

        Returns:
            AccuracyReport
        """
        report = AccuracyReport()

        for name, result in results.items():
            report.scores[name] = self.evaluate(result, split)
            logger.info(
                f"  {name}: test RMSE={report.scores[name]['test']['rmse']:.6f}, "
                f"MAE={report.scores[name]['test']['mae']:.6f}"
            )

        return report

"""
Visualization module for forecasts and model comparison.
"""

import logging
from pathlib import Path
from typing import Optional

import pandas as pd
import numpy as np
import matplotlib
matplotlib.use('Agg')
import matplotlib.pyplot as plt
import seaborn as sns

from ..data.splitter import TrainTestSplit
from ..models.base import ForecastResult

logger = logging.getLogger(__name__)

sns.set_style('darkgrid')
plt.rcParams['figure.figsize'] = [12, 6]
plt.rcParams['figure.dpi'] = 150


class ForecastVisualizer:
    """Visualization tools for holdout forecasts and accuracy."""

    def __init__(self, save_path: Optional[Path] = None):
        self.save_path = Path(save_path) if save_path else None
        if self.save_path:
            self.save_path.mkdir(parents=True, exist_ok=True)

    def _save(self, fig: plt.Figure, save_name: Optional[str]) -> None:
        if save_name and self.save_path:
            fig.savefig(self.save_path / f"{save_name}.png", bbox_inches='tight')
            logger.debug(f"Saved figure {save_name}.png")

    def plot_forecast(
        self, result: ForecastResult, split: TrainTestSplit,
        history_days: Optional[int] = None,
        save_name: Optional[str] = None
    ) -> plt.Figure:
        """Plot training history, holdout actuals and the forecast with its interval."""
        fig, ax = plt.subplots(figsize=(14, 6))

        history = split.train if history_days is None else split.train.iloc[-history_days:]
        ax.plot(history.index, history.values, label='Train', color='black', linewidth=1)
        ax.plot(split.test.index, split.test.values, label='Actual', color='blue', linewidth=1.5)
        ax.plot(result.mean.index, result.mean.values, label=f'{result.model_name} forecast',
                color='red', linewidth=2)

        if result.has_intervals:
            ax.fill_between(result.mean.index, result.lower.values, result.upper.values,
                            color='red', alpha=0.15, label=f'{result.level:.0f}% interval')

        ax.axvline(x=split.test.index[0], color='gray', linestyle='--', linewidth=1)
        ax.set_xlabel('Date')
        ax.set_ylabel('log(price)')
        ax.set_title(f'{result.model_name} - holdout forecast', weight='bold')
        ax.legend(loc='upper left')

        plt.tight_layout()
        self._save(fig, save_name)
        return fig

    def plot_accuracy_comparison(
        self, ranked: pd.DataFrame, metric: str = 'rmse',
        title: str = "Test Accuracy", save_name: Optional[str] = None
    ) -> plt.Figure:
        """Horizontal bar chart of one test metric per model, best first."""
        fig, ax = plt.subplots(figsize=(10, max(3, 0.6 * len(ranked) + 1)))

        ax.barh(range(len(ranked)), ranked[metric],
                color=plt.cm.viridis(np.linspace(0.2, 0.8, len(ranked))))
        ax.set_yticks(range(len(ranked)))
        ax.set_yticklabels(ranked.index)
        ax.invert_yaxis()
        ax.set_xlabel(metric.upper())
        ax.set_title(title, weight='bold')

        plt.tight_layout()
        self._save(fig, save_name)
        return fig

    def plot_residuals(
        self, residuals: pd.Series,
        title: str = "Residual Analysis", save_name: Optional[str] = None
    ) -> plt.Figure:
        """Plot training residuals over time, their distribution and ACF."""
        residuals = residuals.dropna()
        fig, axes = plt.subplots(2, 2, figsize=(14, 10))

        axes[0, 0].plot(residuals.index, residuals.values, alpha=0.7)
        axes[0, 0].axhline(y=0, color='r', linestyle='--')
        axes[0, 0].set_xlabel('Date')
        axes[0, 0].set_ylabel('Residuals')
        axes[0, 0].set_title('Residuals Over Time')

        sns.histplot(residuals.values, bins=40, kde=True, ax=axes[0, 1])
        axes[0, 1].axvline(x=0, color='r', linestyle='--')
        axes[0, 1].set_xlabel('Residuals')
        axes[0, 1].set_title('Residual Distribution')

        max_lag = min(40, len(residuals) - 1)
        centred = residuals.values - residuals.values.mean()
        denominator = np.sum(centred ** 2)
        acf = [np.sum(centred[k:] * centred[:len(centred) - k]) / denominator
               for k in range(1, max_lag + 1)]
        bound = 1.96 / np.sqrt(len(residuals))
        axes[1, 0].bar(range(1, max_lag + 1), acf, width=0.6)
        axes[1, 0].axhline(y=bound, color='b', linestyle='--', linewidth=1)
        axes[1, 0].axhline(y=-bound, color='b', linestyle='--', linewidth=1)
        axes[1, 0].set_xlabel('Lag')
        axes[1, 0].set_title('Residual ACF')

        axes[1, 1].scatter(range(len(residuals)), np.abs(residuals.values), alpha=0.5, s=4)
        axes[1, 1].set_xlabel('Index')
        axes[1, 1].set_ylabel('Absolute Residuals')
        axes[1, 1].set_title('Absolute Residuals')

        plt.suptitle(title, fontsize=14, weight='bold')
        plt.tight_layout()
        self._save(fig, save_name)
        return fig

    @staticmethod
    def close(fig: plt.Figure) -> None:
        plt.close(fig)

"""
Forecast combination.

Averages the point forecasts of a configurable set of member models.
"""

import logging
from typing import Dict, Optional, Sequence

import pandas as pd

from .base import ForecastResult

logger = logging.getLogger(__name__)

DEFAULT_MEMBERS = ('arima', 'ets', 'holt_winters', 'nnetar')


class ForecastCombiner:
    """
    Unweighted mean of member forecasts.

    The member set is a parameter; members are aligned on the forecast
    index and must all cover the same dates.
    """

    def __init__(self, members: Optional[Sequence[str]] = None, name: str = 'combination'):
        """
        Initialize forecast combiner.

        Args:
            members: Names of the forecasts to average
            name: Name given to the combined forecast
        """
        self.members = list(members) if members is not None else list(DEFAULT_MEMBERS)
        self.name = name

        if not self.members:
            raise ValueError("Combiner needs at least one member")

    def _member_results(self, results: Dict[str, ForecastResult]) -> Dict[str, ForecastResult]:
        missing = [m for m in self.members if m not in results]
        if missing:
            raise KeyError(f"Missing forecasts for combiner members: {missing}")

        selected = {m: results[m] for m in self.members}

        reference = selected[self.members[0]].mean.index
        for member, result in selected.items():
            if not result.mean.index.equals(reference):
                raise ValueError(f"Forecast index of '{member}' is not aligned with '{self.members[0]}'")

        return selected

    def combine(self, results: Dict[str, ForecastResult]) -> ForecastResult:
        """
        Combine member forecasts.

        Args:
            results: Forecasts by model name (may include non-members)

        Returns:
            ForecastResult whose mean is the member average at every date
        """
        selected = self._member_results(results)

        means = pd.concat({m: r.mean for m, r in selected.items()}, axis=1)
        mean = means.mean(axis=1)
        mean.name = self.name

        fitted = None
        fitted_parts = {m: r.fitted for m, r in selected.items() if r.fitted is not None}
        if len(fitted_parts) == len(selected):
            # Dates where any member lacks a fitted value stay undefined
            fitted = pd.concat(fitted_parts, axis=1).mean(axis=1, skipna=False)
            fitted.name = self.name

        logger.info(f"Combined {len(selected)} forecasts: {', '.join(self.members)}")

        return ForecastResult(
            model_name=self.name,
            mean=mean,
            fitted=fitted,
            metadata={'members': list(self.members)}
        )

    def __repr__(self) -> str:
        return f"ForecastCombiner(members={self.members})"

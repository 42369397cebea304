"""
Calendar train/test splitting for daily series.
"""

import logging
from dataclasses import dataclass
from datetime import date
from typing import Tuple, Union

import pandas as pd

logger = logging.getLogger(__name__)

Cutoff = Union[str, date, pd.Timestamp, Tuple[int, int]]


@dataclass(frozen=True)
class TrainTestSplit:
    """Contiguous, non-overlapping training and holdout windows."""
    train: pd.Series
    test: pd.Series
    cutoff: pd.Timestamp

    @property
    def horizon(self) -> int:
        """Number of holdout observations every forecast must cover."""
        return len(self.test)

    @property
    def test_index(self) -> pd.DatetimeIndex:
        return self.test.index

    def __repr__(self) -> str:
        return (
            f"TrainTestSplit(train={self.train.index[0].date()}..{self.train.index[-1].date()} "
            f"[{len(self.train)}], test={self.test.index[0].date()}..{self.test.index[-1].date()} "
            f"[{len(self.test)}])"
        )


def cutoff_from_year_day(year: int, day_of_year: int) -> pd.Timestamp:
    """Convert a (year, day-of-year) pair into a calendar date."""
    if day_of_year < 1 or day_of_year > 366:
        raise ValueError(f"Day of year out of range: {day_of_year}")

    cutoff = pd.Timestamp(year=year, month=1, day=1) + pd.Timedelta(days=day_of_year - 1)
    if cutoff.year != year:
        raise ValueError(f"{year} has no day {day_of_year}")

    return cutoff


def _to_timestamp(cutoff: Cutoff) -> pd.Timestamp:
    if isinstance(cutoff, tuple):
        return cutoff_from_year_day(*cutoff)
    return pd.Timestamp(cutoff).normalize()


def split_series(series: pd.Series, cutoff: Cutoff) -> TrainTestSplit:
    """
    Split a series into training and holdout windows at a calendar cutoff.

    Args:
        series: Time-indexed series, sorted by date
        cutoff: Last training day, as a date or (year, day_of_year)

    Returns:
        TrainTestSplit where train ends at the cutoff and test holds the rest
    """
    if not series.index.is_monotonic_increasing or series.index.has_duplicates:
        raise ValueError("Series index must be strictly increasing")

    cutoff_ts = _to_timestamp(cutoff)

    # Positional slices keep the index frequency
    n_train = int(series.index.searchsorted(cutoff_ts, side='right'))
    train = series.iloc[:n_train]
    test = series.iloc[n_train:]

    if len(train) == 0:
        raise ValueError(f"Cutoff {cutoff_ts.date()} precedes the first observation")
    if len(test) == 0:
        raise ValueError(f"Cutoff {cutoff_ts.date()} leaves no holdout observations")

    split = TrainTestSplit(train=train.copy(), test=test.copy(), cutoff=cutoff_ts)

    logger.info(f"Train: {len(train)} samples, Test: {len(test)} samples (cutoff {cutoff_ts.date()})")

    return split

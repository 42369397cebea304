"""
Data loader module for reading the daily price CSV.

Provides utilities for:
- Reading the raw observation/price frame
- Log-transforming prices into a daily PriceSeries
- Optional re-indexing from a fixed origin date
"""

import logging
from pathlib import Path
from typing import Optional, Union

import pandas as pd
import numpy as np

logger = logging.getLogger(__name__)

# FRED exports mark missing observations with a single dot
MISSING_TOKENS = ['.', '']


class PriceLoader:
    """
    Loads a single-ticker price CSV into a log-price series.

    The CSV carries one observation-date column and one price column
    named for the ticker, one row per calendar day.
    """

    def __init__(
        self,
        date_column: str = 'DATE',
        price_column: str = 'CBETHUSD',
        origin_date: Optional[Union[str, pd.Timestamp]] = None
    ):
        """
        Initialize price loader.

        Args:
            date_column: Name of the observation date column
            price_column: Name of the price column
            origin_date: If set, index the series as a daily range from here
        """
        self.date_column = date_column
        self.price_column = price_column
        self.origin_date = pd.Timestamp(origin_date) if origin_date is not None else None

    @classmethod
    def from_config(cls, config) -> 'PriceLoader':
        """Build a loader from the `data` configuration section."""
        data = config.data_config
        return cls(
            date_column=data.date_column,
            price_column=data.price_column,
            origin_date=data.origin_date
        )

    def read_frame(self, path: Union[str, Path]) -> pd.DataFrame:
        """
        Read the raw CSV and normalise its columns.

        Args:
            path: CSV file path

        Returns:
            DataFrame with `timestamp` and `price` columns, sorted by date
        """
        path = Path(path)

        if not path.exists():
            raise FileNotFoundError(f"Price file not found: {path}")

        df = pd.read_csv(path, na_values=MISSING_TOKENS)

        missing = [c for c in (self.date_column, self.price_column) if c not in df.columns]
        if missing:
            raise ValueError(f"Missing columns in {path.name}: {missing}")

        df = df[[self.date_column, self.price_column]].rename(columns={
            self.date_column: 'timestamp',
            self.price_column: 'price'
        })
        df['timestamp'] = pd.to_datetime(df['timestamp'])
        df['price'] = pd.to_numeric(df['price'], errors='coerce')
        df = df.sort_values('timestamp').reset_index(drop=True)

        logger.info(
            f"Read {len(df)} rows from {path.name} "
            f"({df['timestamp'].min().date()} to {df['timestamp'].max().date()})"
        )

        return df

    def to_series(self, df: pd.DataFrame) -> pd.Series:
        """
        Convert a normalised frame into a daily log-price series.

        Args:
            df: Frame returned by `read_frame`

        Returns:
            Log-price Series on a DatetimeIndex named `date`
        """
        with np.errstate(divide='ignore', invalid='ignore'):
            values = np.log(df['price'].to_numpy(dtype=float))

        if self.origin_date is not None:
            first = df['timestamp'].iloc[0]
            if first != self.origin_date:
                logger.warning(
                    f"Origin {self.origin_date.date()} differs from first observation {first.date()}"
                )
            index = pd.date_range(self.origin_date, periods=len(values), freq='D')
        else:
            index = pd.DatetimeIndex(df['timestamp'])

        index.name = 'date'
        series = pd.Series(values, index=index, name=self.price_column)

        # statsmodels reads the frequency off the index
        if len(series) > 2 and pd.infer_freq(series.index) == 'D':
            series = series.asfreq('D')

        n_bad = int((~np.isfinite(values)).sum())
        if n_bad:
            logger.warning(f"{n_bad} log-prices are missing or undefined")

        return series

    def load(self, path: Union[str, Path]) -> pd.Series:
        """
        Load a CSV straight into a log-price series.

        Args:
            path: CSV file path

        Returns:
            PriceSeries of natural-log prices
        """
        return self.to_series(self.read_frame(path))

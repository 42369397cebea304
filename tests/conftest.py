import numpy as np
import pandas as pd
import pytest

from eth_forecast.config import Config


def make_log_prices(start: str, periods: int, seed: int = 0, weekly: float = 0.01) -> pd.Series:
    """Random-walk log-price with drift and a weekly cycle on a daily index."""
    rng = np.random.default_rng(seed)
    index = pd.date_range(start, periods=periods, freq='D', name='date')
    steps = 0.001 + rng.normal(0.0, 0.02, size=periods)
    cycle = weekly * np.sin(2 * np.pi * np.arange(periods) / 7)
    return pd.Series(6.0 + np.cumsum(steps) + cycle, index=index, name='CBETHUSD')


@pytest.fixture
def log_prices():
    """Two years of daily log-prices: all of 2021 and 2022."""
    return make_log_prices('2021-01-01', 730)


@pytest.fixture
def short_series():
    """A short daily series for fast model fits."""
    return make_log_prices('2022-01-01', 150, seed=1)


@pytest.fixture
def price_csv(tmp_path):
    """FRED-style CSV with a `.` missing-value token."""
    index = pd.date_range('2022-01-01', periods=6, freq='D')
    frame = pd.DataFrame({
        'DATE': index.strftime('%Y-%m-%d'),
        'CBETHUSD': ['3700.5', '3800.0', '.', '3900.25', '4000.0', '4100.0']
    })
    path = tmp_path / 'CBETHUSD.csv'
    frame.to_csv(path, index=False)
    return path


@pytest.fixture
def clean_csv(tmp_path):
    """CSV of positive prices covering 2021 and 2022."""
    series = make_log_prices('2021-01-01', 730, seed=3)
    frame = pd.DataFrame({
        'DATE': series.index.strftime('%Y-%m-%d'),
        'CBETHUSD': np.round(np.exp(series.values), 2)
    })
    path = tmp_path / 'prices.csv'
    frame.to_csv(path, index=False)
    return path


@pytest.fixture
def raw_config(tmp_path, clean_csv):
    return {
        'data': {
            'csv_path': str(clean_csv),
            'date_column': 'DATE',
            'price_column': 'CBETHUSD'
        },
        'split': {'train_end': '2022-10-31'},
        'validation': {'strict': True},
        'random_seed': 7,
        'models': {
            'enabled': ['arima', 'ets', 'holt_winters', 'nnetar'],
            'arima': {'max_p': 2, 'max_q': 2},
            'ets': {'information_criterion': 'aic'},
            'holt_winters': {'seasonal_periods': 7, 'n_simulations': 50},
            'nnetar': {'lags': 3, 'repeats': 2, 'max_iter': 200, 'n_paths': 100}
        },
        'combiner': {
            'enabled': True,
            'members': ['arima', 'ets', 'holt_winters', 'nnetar']
        },
        'evaluation': {'mase_seasonal_period': 7, 'ljung_box_period': 7},
        'output': {
            'reports_path': str(tmp_path / 'reports'),
            'visualizations_path': str(tmp_path / 'reports' / 'figures'),
            'plots': False
        },
        'storage': {'models_path': str(tmp_path / 'models'), 'save_models': False}
    }


@pytest.fixture
def config(raw_config):
    return Config.from_dict(raw_config)

import numpy as np
import pandas as pd
import pytest

from eth_forecast.data.splitter import split_series
from eth_forecast.models import (
    AutoARIMAForecaster,
    ETSForecaster,
    HoltWintersForecaster,
    ModelBank,
    NNARForecaster,
    ProphetForecaster,
    build_forecaster,
)
from eth_forecast.models.ets import describe_components
from eth_forecast.models.nnetar import lag_matrix, select_ar_order

FAST_PARAMS = {
    'arima': {'max_p': 2, 'max_q': 2},
    'ets': {'information_criterion': 'aic'},
    'holt_winters': {'seasonal_periods': 7, 'n_simulations': 50},
    'nnetar': {'lags': 3, 'repeats': 2, 'max_iter': 200, 'n_paths': 100},
    'prophet': {'custom_seasonality': {'name': 'weekly', 'period': 7, 'fourier_order': 3}}
}


@pytest.fixture
def split(short_series):
    return split_series(short_series, short_series.index[119])


@pytest.mark.parametrize('name', sorted(FAST_PARAMS))
def test_forecast_length_equals_horizon(name, split):
    forecaster = build_forecaster(name, FAST_PARAMS[name], seed=3).fit(split.train)

    result = forecaster.forecast(split.horizon, index=split.test_index)

    assert len(result) == split.horizon == 30
    assert result.mean.index.equals(split.test.index)
    assert np.isfinite(result.mean.to_numpy()).all()
    assert result.model_name == name


@pytest.mark.parametrize('name', sorted(FAST_PARAMS))
def test_intervals_bracket_the_forecast(name, split):
    forecaster = build_forecaster(name, FAST_PARAMS[name], seed=3).fit(split.train)

    result = forecaster.forecast(split.horizon)

    assert result.has_intervals
    assert (result.lower <= result.upper).all()
    assert result.level == pytest.approx(95)


def test_default_forecast_index_follows_training(split):
    forecaster = ETSForecaster(params=FAST_PARAMS['ets']).fit(split.train)

    result = forecaster.forecast(5)

    assert result.mean.index[0] == split.train.index[-1] + pd.Timedelta(days=1)
    assert len(result.mean.index) == 5


def test_forecast_before_fit_raises():
    with pytest.raises(ValueError, match='fitted'):
        AutoARIMAForecaster().forecast(10)


def test_fit_rejects_missing_values(short_series):
    series = short_series.copy()
    series.iloc[5] = np.nan

    with pytest.raises(ValueError, match='missing'):
        ETSForecaster().fit(series)


def test_index_length_must_match_horizon(split):
    forecaster = ETSForecaster(params=FAST_PARAMS['ets']).fit(split.train)

    with pytest.raises(ValueError, match='does not match'):
        forecaster.forecast(10, index=split.test_index)


def test_arima_records_selected_order(split):
    forecaster = AutoARIMAForecaster(params=FAST_PARAMS['arima']).fit(split.train)

    p, d, q = forecaster.metadata['order']
    assert 0 <= p <= 2 and 0 <= d <= 2 and 0 <= q <= 2
    assert forecaster.order == (p, d, q)
    assert len(forecaster.fitted_values()) == len(split.train)


def test_ets_records_components(split):
    forecaster = ETSForecaster(params=FAST_PARAMS['ets']).fit(split.train)

    assert forecaster.metadata['components'].startswith('ETS(')
    assert 'aic' in forecaster.metadata


def test_ets_candidates():
    series = pd.Series(np.linspace(1.0, 2.0, 60), index=pd.date_range('2022-01-01', periods=60))

    candidates = ETSForecaster(params={'seasonal_periods': 7}).candidate_components(series)

    assert len(candidates) == 3 * 2 + 3 * 3
    assert ('add', None, False, 'mul') not in candidates
    assert len(ETSForecaster(params={'seasonal_periods': 365}).candidate_components(series)) == 6
    assert len(ETSForecaster(params={'allow_multiplicative': False}).candidate_components(series)) == 3
    assert len(ETSForecaster().candidate_components(-series)) == 3


def test_describe_components():
    assert describe_components(('add', 'add', True, None)) == 'ETS(A,Ad,N)'
    assert describe_components(('mul', None, False, 'mul')) == 'ETS(M,N,M)'


def test_holt_winters_needs_two_seasons(short_series):
    with pytest.raises(ValueError, match='two full seasons'):
        HoltWintersForecaster(params={'seasonal_periods': 365}).fit(short_series)


def test_holt_winters_without_simulation_has_no_intervals(split):
    params = dict(FAST_PARAMS['holt_winters'], n_simulations=0)

    result = HoltWintersForecaster(params=params).fit(split.train).forecast(split.horizon)

    assert not result.has_intervals


def test_nnetar_is_reproducible_with_seed(split):
    params = dict(FAST_PARAMS['nnetar'], seed=123)

    first = NNARForecaster(params=params).fit(split.train).forecast(split.horizon)
    second = NNARForecaster(params=params).fit(split.train).forecast(split.horizon)

    np.testing.assert_array_equal(first.mean.to_numpy(), second.mean.to_numpy())
    np.testing.assert_array_equal(first.lower.to_numpy(), second.lower.to_numpy())
    np.testing.assert_array_equal(first.upper.to_numpy(), second.upper.to_numpy())


def test_nnetar_label_and_hidden_size(split):
    forecaster = NNARForecaster(params=dict(FAST_PARAMS['nnetar'], seed=1)).fit(split.train)

    assert forecaster.metadata['lags'] == [1, 2, 3]
    assert forecaster.metadata['hidden_size'] == 2
    assert forecaster.metadata['label'] == 'NNAR(3,2)'
    assert len(forecaster.networks) == 2

    fitted = forecaster.fitted_values()
    assert fitted.iloc[:3].isnull().all()
    assert fitted.iloc[3:].notnull().all()


def test_nnetar_seasonal_lags(split):
    params = dict(FAST_PARAMS['nnetar'], seasonal_period=7, seed=1)

    forecaster = NNARForecaster(params=params).fit(split.train)

    assert forecaster.metadata['lags'] == [1, 2, 3, 7]
    assert forecaster.metadata['label'] == 'NNAR(3,1,2)[7]'


def test_nnetar_without_intervals(split):
    params = dict(FAST_PARAMS['nnetar'], pi=False, seed=1)

    result = NNARForecaster(params=params).fit(split.train).forecast(5)

    assert not result.has_intervals


def test_lag_matrix():
    X, y = lag_matrix(np.arange(6, dtype=float), [1, 2])

    np.testing.assert_array_equal(X, [[1, 0], [2, 1], [3, 2], [4, 3]])
    np.testing.assert_array_equal(y, [2, 3, 4, 5])


def test_select_ar_order_is_at_least_one():
    rng = np.random.default_rng(0)

    assert select_ar_order(rng.normal(size=200), max_lags=10) >= 1


def test_prophet_uses_interval_width_as_level(split):
    forecaster = ProphetForecaster(params={'interval_width': 0.8, 'seed': 1})

    assert forecaster.params['level'] == pytest.approx(80)


def test_save_and_load_round_trip(split, tmp_path):
    forecaster = ETSForecaster(params=FAST_PARAMS['ets']).fit(split.train)
    path = forecaster.save(str(tmp_path / 'ets.joblib'))

    loaded = ETSForecaster.load(path)

    assert loaded.is_fitted
    assert loaded.metadata['components'] == forecaster.metadata['components']
    np.testing.assert_allclose(
        loaded.forecast(10).mean.to_numpy(),
        forecaster.forecast(10).mean.to_numpy()
    )


def test_load_checks_class(split, tmp_path):
    path = ETSForecaster(params=FAST_PARAMS['ets']).fit(split.train).save(str(tmp_path / 'ets.joblib'))

    with pytest.raises(TypeError):
        AutoARIMAForecaster.load(path)


def test_unknown_model_raises():
    with pytest.raises(KeyError, match='Unknown model'):
        build_forecaster('lstm')


def test_seed_is_passed_to_stochastic_models_only():
    assert build_forecaster('nnetar', {}, seed=9).params['seed'] == 9
    assert build_forecaster('nnetar', {'seed': 4}, seed=9).params['seed'] == 4
    assert 'seed' not in build_forecaster('arima', {}, seed=9).params


def test_model_bank_fits_and_forecasts_in_order(split, tmp_path):
    params = {name: FAST_PARAMS[name] for name in ('arima', 'ets', 'holt_winters', 'nnetar')}
    bank = ModelBank(params, seed=5)

    results = bank.fit_all(split.train).forecast_all(split)

    assert bank.names == list(params)
    assert list(results) == list(params)
    assert all(len(r) == split.horizon for r in results.values())

    saved = bank.save_all(tmp_path, prefix='test_')
    assert all((tmp_path / f"test_{name}.joblib").exists() for name in params)
    assert set(saved) == set(params)


def test_ets_forecast_returns_dated_mean_and_bounds(split):
    forecaster = ETSForecaster(params=dict(FAST_PARAMS['ets'], seed=1)).fit(split.train)

    result = forecaster.forecast(split.horizon, index=split.test_index)

    assert result.mean.index.equals(split.test.index)
    assert np.isfinite(result.mean.to_numpy()).all()
    assert (result.lower <= result.mean).all()
    assert (result.mean <= result.upper).all()
    assert len(forecaster.fitted_values()) == len(split.train)


def test_ets_simulated_intervals_are_reproducible_with_seed(split, monkeypatch):
    forecaster = ETSForecaster(params={'seed': 17})
    monkeypatch.setattr(forecaster, 'candidate_components', lambda train: [('mul', 'add', True, None)])
    forecaster.fit(split.train)

    first = forecaster.forecast(split.horizon)
    second = forecaster.forecast(split.horizon)

    assert forecaster.metadata['components'] == 'ETS(M,Ad,N)'
    np.testing.assert_array_equal(first.lower.to_numpy(), second.lower.to_numpy())
    np.testing.assert_array_equal(first.upper.to_numpy(), second.upper.to_numpy())


def test_ets_receives_the_bank_seed():
    assert build_forecaster('ets', {}, seed=9).params['seed'] == 9


def test_prophet_leaves_global_random_state_untouched(split):
    forecaster = ProphetForecaster(params=dict(FAST_PARAMS['prophet'], seed=5)).fit(split.train)

    np.random.seed(123)
    state = np.random.get_state()
    first = forecaster.forecast(5)
    draw = np.random.random()

    np.random.set_state(state)
    assert draw == np.random.random()

    second = forecaster.forecast(5)
    np.testing.assert_array_equal(first.lower.to_numpy(), second.lower.to_numpy())

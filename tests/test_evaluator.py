import numpy as np
import pandas as pd
import pytest

from eth_forecast.data.splitter import split_series
from eth_forecast.evaluation.evaluator import AccuracyReport, Evaluator
from eth_forecast.evaluation.diagnostics import ljung_box, ljung_box_lags, residual_diagnostics
from eth_forecast.models.base import ForecastResult


@pytest.fixture
def split(log_prices):
    return split_series(log_prices, '2022-11-30')


def _result(name, split, offset, fitted=True):
    return ForecastResult(
        model_name=name,
        mean=split.test + offset,
        fitted=(split.train + offset) if fitted else None
    )


def test_evaluate_scores_train_and_test(split):
    scores = Evaluator().evaluate(_result('flat', split, 0.1), split)

    assert set(scores) == {'train', 'test'}
    assert scores['test']['rmse'] == pytest.approx(0.1)
    assert scores['test']['me'] == pytest.approx(-0.1)
    assert scores['train']['mae'] == pytest.approx(0.1)


def test_missing_fitted_values_give_nan_training_metrics(split):
    scores = Evaluator().evaluate(_result('nofit', split, 0.1, fitted=False), split)

    assert np.isnan(scores['train']['rmse'])
    assert scores['test']['rmse'] == pytest.approx(0.1)


def test_forecast_must_cover_test_window(split):
    result = ForecastResult('short', split.test.iloc[:-1])

    with pytest.raises(ValueError, match='not aligned'):
        Evaluator().evaluate(result, split)


def test_ranked_orders_by_test_rmse_ascending(split):
    results = {
        'worst': _result('worst', split, 0.5),
        'best': _result('best', split, 0.01),
        'middle': _result('middle', split, -0.2)
    }

    report = Evaluator(seasonal_period=7).evaluate_all(results, split)
    ranked = report.ranked()

    assert list(ranked.index) == ['best', 'middle', 'worst']
    assert list(ranked['rank']) == [1, 2, 3]
    assert ranked['rmse'].is_monotonic_increasing
    assert report.best_model == 'best'


def test_to_frame_has_one_row_per_model_and_set(split):
    results = {'a': _result('a', split, 0.1), 'b': _result('b', split, 0.2)}

    frame = Evaluator().evaluate_all(results, split).to_frame()

    assert frame.shape == (4, 7)
    assert frame.loc[('b', 'test'), 'rmse'] == pytest.approx(0.2)


def test_empty_report():
    report = AccuracyReport()

    assert report.best_model is None
    assert report.to_frame().empty


def test_ljung_box_lag_rule():
    assert ljung_box_lags(1000, 1) == 10
    assert ljung_box_lags(1000, 7) == 14
    assert ljung_box_lags(1000, 365) == 200
    assert ljung_box_lags(30, 365) == 6


def test_ljung_box_flags_white_noise_and_autocorrelation():
    rng = np.random.default_rng(11)
    noise = pd.Series(rng.normal(size=500))

    white = ljung_box(noise)
    assert white.lags == 10
    assert white.statistic >= 0.0
    assert 0.0 <= white.p_value <= 1.0

    ar = np.zeros(500)
    for t in range(1, 500):
        ar[t] = 0.9 * ar[t - 1] + noise.iloc[t]
    correlated = ljung_box(pd.Series(ar))

    assert not correlated.white_noise
    assert correlated.p_value < white.p_value


def test_ljung_box_needs_enough_residuals():
    with pytest.raises(ValueError):
        ljung_box(pd.Series([0.1, -0.2, 0.3]))


def test_residual_diagnostics_skip_models_without_fitted_values(split):
    results = {
        'with': ForecastResult('with', split.test, fitted=split.train + np.sin(np.arange(len(split.train)))),
        'without': _result('without', split, 0.0, fitted=False)
    }

    diagnostics = residual_diagnostics(results, split.train, seasonal_period=7)

    assert set(diagnostics) == {'with'}
    assert diagnostics['with'].lags == 14
    assert set(diagnostics['with'].to_dict()) == {'statistic', 'p_value', 'lags', 'white_noise'}

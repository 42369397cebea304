import numpy as np
import pandas as pd
import pytest

from eth_forecast.config import Config
from eth_forecast.pipeline import Pipeline, ReportWriter


def test_run_writes_report_and_ranks_models(config, tmp_path):
    pipeline = Pipeline(config)

    results = pipeline.run()

    assert results['success']
    assert pipeline.split.horizon == 61
    assert set(pipeline.results) == {'arima', 'ets', 'holt_winters', 'nnetar', 'combination'}
    assert all(len(r) == pipeline.split.horizon for r in pipeline.results.values())

    ranked = results['accuracy']
    assert ranked['rmse'].is_monotonic_increasing
    assert results['best_model'] == ranked.index[0]

    reports = tmp_path / 'reports'
    for name in ('accuracy.csv', 'forecasts.csv', 'report.md'):
        assert (reports / name).exists()

    forecasts = pd.read_csv(reports / 'forecasts.csv', index_col='date')
    assert list(forecasts.columns) == ['actual', 'arima', 'ets', 'holt_winters', 'nnetar', 'combination']
    members = forecasts[['arima', 'ets', 'holt_winters', 'nnetar']].mean(axis=1)
    np.testing.assert_allclose(forecasts['combination'], members, rtol=1e-9)

    report = (reports / 'report.md').read_text(encoding='utf-8')
    assert 'ARIMA(' in report
    assert 'ETS(' in report
    assert 'Ljung-Box' in report


def test_run_with_plots(raw_config, tmp_path):
    raw_config['output']['plots'] = True
    raw_config['models']['enabled'] = ['ets', 'holt_winters']
    raw_config['combiner']['members'] = ['ets', 'holt_winters']

    Pipeline(Config.from_dict(raw_config)).run()

    figures = tmp_path / 'reports' / 'figures'
    for name in ('ets_forecast', 'holt_winters_forecast', 'combination_forecast',
                 'ets_residuals', 'accuracy_comparison'):
        assert (figures / f"{name}.png").exists()


def test_disabled_combiner_is_skipped(raw_config):
    raw_config['models']['enabled'] = ['ets']
    raw_config['combiner'] = {'enabled': False}

    pipeline = Pipeline(Config.from_dict(raw_config))
    results = pipeline.run()

    assert 'combination' not in pipeline.results
    assert 'combination' not in results['steps']


def test_strict_validation_halts_on_gaps(raw_config, tmp_path):
    path = tmp_path / 'gappy.csv'
    dates = list(pd.date_range('2021-01-01', periods=400, freq='D'))
    del dates[100:105]
    pd.DataFrame({
        'DATE': [d.strftime('%Y-%m-%d') for d in dates],
        'CBETHUSD': np.linspace(1000.0, 2000.0, len(dates))
    }).to_csv(path, index=False)
    raw_config['data']['csv_path'] = str(path)
    raw_config['split']['train_end'] = '2021-12-31'

    with pytest.raises(ValueError, match='Critical data validation failed'):
        Pipeline(Config.from_dict(raw_config)).run()


def test_missing_data_file_is_reraised(raw_config, tmp_path):
    raw_config['data']['csv_path'] = str(tmp_path / 'missing.csv')

    with pytest.raises(FileNotFoundError):
        Pipeline(Config.from_dict(raw_config)).run()


def test_forecast_ahead_single_model(config):
    frame = Pipeline(config).forecast_ahead('ets', 14)

    assert len(frame) == 14
    assert frame.index[0] == pd.Timestamp('2023-01-01')
    np.testing.assert_allclose(frame['price'], np.exp(frame['log_price']))
    assert {'price_lower', 'price_upper'} <= set(frame.columns)


def test_forecast_ahead_combination(config):
    frame = Pipeline(config).forecast_ahead('combination', 7)

    assert len(frame) == 7
    assert 'price_lower' not in frame.columns


def test_forecast_ahead_unknown_model(config):
    with pytest.raises(KeyError):
        Pipeline(config).forecast_ahead('prophet', 7)


def test_report_conclusions(config):
    pipeline = Pipeline(config)
    pipeline.run()

    writer = ReportWriter(config.reports_path, plots=False)
    lines = writer.conclusions(pipeline.accuracy, pipeline.results)

    assert lines[0].startswith('The most accurate model on the test set is')
    assert any('combination' in line for line in lines)

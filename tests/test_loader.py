import numpy as np
import pandas as pd
import pytest

from eth_forecast.data.loader import PriceLoader


def test_load_applies_natural_log(clean_csv):
    raw = pd.read_csv(clean_csv)

    series = PriceLoader().load(clean_csv)

    np.testing.assert_allclose(series.to_numpy(), np.log(raw['CBETHUSD'].to_numpy()))
    assert series.name == 'CBETHUSD'
    assert series.index.name == 'date'


def test_load_produces_daily_index(clean_csv):
    series = PriceLoader().load(clean_csv)

    assert isinstance(series.index, pd.DatetimeIndex)
    assert series.index.is_monotonic_increasing
    assert series.index.freq == 'D'
    assert series.index[0] == pd.Timestamp('2021-01-01')


def test_fred_dot_token_reads_as_missing(price_csv):
    loader = PriceLoader()

    frame = loader.read_frame(price_csv)
    series = loader.to_series(frame)

    assert frame['price'].isnull().sum() == 1
    assert np.isnan(series.loc['2022-01-03'])
    assert series.loc['2022-01-01'] == pytest.approx(np.log(3700.5))


def test_rows_are_sorted_by_date(tmp_path):
    path = tmp_path / 'shuffled.csv'
    pd.DataFrame({
        'DATE': ['2022-01-03', '2022-01-01', '2022-01-02'],
        'CBETHUSD': [3.0, 1.0, 2.0]
    }).to_csv(path, index=False)

    series = PriceLoader().load(path)

    np.testing.assert_allclose(series.to_numpy(), np.log([1.0, 2.0, 3.0]))


def test_origin_date_reindexes_series(clean_csv):
    series = PriceLoader(origin_date='2017-01-01').load(clean_csv)

    assert series.index[0] == pd.Timestamp('2017-01-01')
    assert len(series) == 730
    assert series.index[-1] == pd.Timestamp('2017-01-01') + pd.Timedelta(days=729)


def test_custom_columns(tmp_path):
    path = tmp_path / 'btc.csv'
    pd.DataFrame({'day': ['2022-01-01', '2022-01-02'], 'CBBTCUSD': [100.0, 110.0]}).to_csv(path, index=False)

    series = PriceLoader(date_column='day', price_column='CBBTCUSD').load(path)

    assert series.name == 'CBBTCUSD'
    assert series.iloc[1] == pytest.approx(np.log(110.0))


def test_missing_file_raises(tmp_path):
    with pytest.raises(FileNotFoundError):
        PriceLoader().load(tmp_path / 'absent.csv')


def test_missing_price_column_raises(price_csv):
    with pytest.raises(ValueError, match='Missing columns'):
        PriceLoader(price_column='CBBTCUSD').load(price_csv)

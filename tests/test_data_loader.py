"""Tests for PanelConfig and CSV loading."""

import pandas as pd
import pytest

from epi_clustering import config
from epi_clustering.data_loader import PanelConfig, load_data
from epi_clustering.exceptions import MissingColumnsError, NoDataError


class TestPanelConfig:
    """Tests for panel shape validation."""

    def test_default_matches_config(self):
        panel = PanelConfig.default()
        assert len(panel.regions) == 50
        assert panel.variables == tuple(config.VARIABLES)
        assert panel.start_date == config.START_DATE

    def test_dates_and_columns(self, panel_config):
        assert panel_config.n_days == 80
        assert panel_config.dates[0] == pd.Timestamp('2021-01-01')
        assert panel_config.columns[:2] == ['date', 'region']

    def test_empty_regions_raise(self):
        with pytest.raises(NoDataError):
            PanelConfig(regions=())

    def test_reversed_window_raises(self):
        with pytest.raises(NoDataError):
            PanelConfig(start_date='2021-05-01', end_date='2021-04-01')

    def test_duplicate_regions_raise(self):
        with pytest.raises(ValueError):
            PanelConfig(regions=('A', 'B', 'A'))

    def test_cumulative_outside_variables_raises(self):
        with pytest.raises(ValueError, match="vaccines"):
            PanelConfig(variables=('confirmed', 'hosp'),
                        cumulative_variables=('confirmed', 'vaccines'),
                        interpolated_variables=())


class TestLoadData:
    """Tests for load_data."""

    def test_reads_csv(self, tmp_path, raw_panel, panel_config):
        path = tmp_path / "panel.csv"
        raw_panel.to_csv(path, index=False)
        df = load_data(str(path), panel_config=panel_config, verbose=False)
        assert len(df) == len(raw_panel)
        assert pd.api.types.is_datetime64_any_dtype(df['date'])

    def test_missing_column_raises(self, tmp_path, raw_panel, panel_config):
        path = tmp_path / "panel.csv"
        raw_panel.drop(columns=['vaccines']).to_csv(path, index=False)
        with pytest.raises(MissingColumnsError):
            load_data(str(path), panel_config=panel_config, verbose=False)

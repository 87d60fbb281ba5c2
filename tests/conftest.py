import numpy as np
import pandas as pd
import pytest

from epi_clustering.data_loader import PanelConfig

VARIABLES = ('confirmed', 'deaths', 'tests', 'vaccines', 'hosp', 'icu')
CUMULATIVE = ('confirmed', 'deaths', 'tests', 'vaccines')


def make_raw_panel(regions, start='2021-01-01', periods=80, seed=0, shapes=None, noise=0.01):
    """
    Panel tho gia lap: moi vung co mot "hinh dang" dich (sin / cos / tuyen tinh),
    bien tich luy la tong cong don cua gia tri gia tang duong.
    """
    rng = np.random.default_rng(seed)
    dates = pd.date_range(start, periods=periods, freq='D')
    t = np.linspace(0, 2 * np.pi, periods)
    curves = {
        0: 2.0 + np.sin(t),
        1: 2.0 + np.cos(t),
        2: 1.0 + t / (2 * np.pi),
    }
    if shapes is None:
        shapes = [i % 3 for i in range(len(regions))]

    frames = []
    for region, shape in zip(regions, shapes):
        base = curves[shape]
        row = {'date': dates, 'region': region}
        for j, var in enumerate(VARIABLES):
            scale = 10.0 ** (j % 3 + 1)
            daily = scale * base * (1 + noise * rng.standard_normal(periods))
            row[var] = np.cumsum(daily) if var in CUMULATIVE else daily
        frames.append(pd.DataFrame(row))
    return pd.concat(frames, ignore_index=True)


@pytest.fixture
def regions():
    return tuple(f"R{i:02d}" for i in range(12))


@pytest.fixture
def panel_config(regions):
    return PanelConfig(
        regions=regions,
        start_date='2021-01-01',
        end_date='2021-03-21',   # 80 ngay
        variables=VARIABLES,
        cumulative_variables=CUMULATIVE,
        interpolated_variables=('tests',),
    )


@pytest.fixture
def raw_panel(regions):
    return make_raw_panel(regions)

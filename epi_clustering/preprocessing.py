"""
Module tiền xử lý panel đã làm sạch:
- Làm mịn LOWESS cho từng chuỗi (vùng, biến), biến hồi quy là số ngày
- Chuẩn hóa z-score cho từng chuỗi sau khi làm mịn
"""

import numpy as np
import pandas as pd
from sklearn.preprocessing import StandardScaler
from statsmodels.nonparametric.smoothers_lowess import lowess

from . import config
from .data_loader import PanelConfig

DATE = config.DATE_COLUMN
REGION = config.REGION_COLUMN


# ---------------------------------------------------------------------------
# Chuyển đổi panel <-> ma trận vùng x thời gian
# ---------------------------------------------------------------------------

def panel_to_matrix(panel, variable, regions=None):
    """
    Chuyển một biến của panel thành ma trận vùng x thời gian.

    Parameters
    ----------
    panel : pd.DataFrame
    variable : str
    regions : sequence of str, optional
        Thứ tự hàng. Mặc định theo thứ tự xuất hiện trong panel.

    Returns
    -------
    pd.DataFrame, index = vùng, columns = ngày (tăng dần)
    """
    wide = panel.pivot(index=REGION, columns=DATE, values=variable).sort_index(axis=1)
    if regions is None:
        regions = pd.unique(panel[REGION])
    return wide.reindex(list(regions))


def elapsed_days(dates):
    """Số ngày tính từ ngày đầu tiên, dùng làm biến hồi quy."""
    dates = pd.DatetimeIndex(dates)
    return ((dates - dates[0]) / pd.Timedelta(days=1)).to_numpy(dtype=float)


# ---------------------------------------------------------------------------
# Làm mịn
# ---------------------------------------------------------------------------

def lowess_smooth(y, x, frac=None, it=None):
    """
    Làm mịn một chuỗi bằng LOWESS (hồi quy cục bộ có trọng số tricube).

    Parameters
    ----------
    y : np.ndarray, shape (n,)
    x : np.ndarray, shape (n,)
    frac : float
        Tỷ lệ điểm dùng cho mỗi hồi quy cục bộ (span).
    it : int
        Số vòng lặp robust. 0 = không giảm trọng số ngoại lai.

    Returns
    -------
    np.ndarray, shape (n,), theo thứ tự của x
    """
    if frac is None:
        frac = config.LOWESS_FRAC
    if it is None:
        it = config.LOWESS_IT

    y = np.asarray(y, dtype=float)
    x = np.asarray(x, dtype=float)
    if int(frac * len(y) + 1e-10) < 2:
        raise ValueError(
            f"frac={frac} qua nho cho chuoi {len(y)} diem (can it nhat 2 diem moi cua so)")

    smoothed = lowess(y, x, frac=frac, it=it, delta=0.0, return_sorted=False)
    if np.isnan(smoothed).any():
        raise ValueError("LOWESS tra ve NaN; kiem tra du lieu dau vao")
    return smoothed


def lowess_filter_2d(data, x, frac=None):
    """
    Áp dụng LOWESS cho từng hàng của ma trận 2D.

    Parameters
    ----------
    data : np.ndarray, shape (n_regions, n_times)
    x : np.ndarray, shape (n_times,)
    frac : float

    Returns
    -------
    np.ndarray cùng shape với data
    """
    filtered = np.zeros_like(data, dtype=float)
    for i in range(data.shape[0]):
        filtered[i] = lowess_smooth(data[i], x, frac=frac)
    return filtered


# ---------------------------------------------------------------------------
# Chuẩn hóa
# ---------------------------------------------------------------------------

def zscore_2d(data):
    """
    Chuẩn hóa z-score từng hàng (trừ trung bình, chia độ lệch chuẩn).
    Hàng hằng số trở thành toàn 0.
    """
    scaler = StandardScaler()
    # fit_transform theo cột, nên transpose để mỗi hàng (vùng) là một cột
    return scaler.fit_transform(np.asarray(data, dtype=float).T).T


# ---------------------------------------------------------------------------
# Pipeline tiền xử lý đầy đủ
# ---------------------------------------------------------------------------

def preprocess_panel(panel, panel_config=None, frac=None, verbose=True):
    """
    Làm mịn rồi chuẩn hóa mọi chuỗi (vùng, biến) của panel.

    Parameters
    ----------
    panel : pd.DataFrame
        Panel đã làm sạch (clean_panel).
    panel_config : PanelConfig, optional
    frac : float, optional
        Span của LOWESS. Mặc định config.LOWESS_FRAC.

    Returns
    -------
    pd.DataFrame
        Cùng shape và thứ tự dòng với panel, giá trị đã làm mịn + chuẩn hóa.
    """
    if panel_config is None:
        panel_config = PanelConfig.default()
    if frac is None:
        frac = config.LOWESS_FRAC

    out = panel.copy()
    regions = [r for r in panel_config.regions if r in set(panel[REGION])]

    for variable in panel_config.variables:
        wide = panel_to_matrix(panel, variable, regions=regions)
        x = elapsed_days(wide.columns)

        smoothed = lowess_filter_2d(wide.to_numpy(dtype=float), x, frac=frac)
        scaled = zscore_2d(smoothed)

        r_idx = pd.Index(wide.index).get_indexer(out[REGION])
        d_idx = pd.Index(wide.columns).get_indexer(out[DATE])
        out[variable] = scaled[r_idx, d_idx]
        if verbose:
            print(f"  {variable}: LOWESS (frac={frac}) + z-score, ma trận {scaled.shape}")

    if verbose:
        print("Tiền xử lý hoàn thành.")
    return out

"""
Module làm sạch panel dịch tễ:
- Chọn vùng, khoảng ngày và biến phân tích
- Loại bỏ dòng trùng lặp, sắp xếp theo ngày rồi vùng
- Nội suy tuyến tính các giá trị thiếu bên trong chuỗi (biến tests)
- Lấy sai phân bậc 1 cho các biến tích lũy
"""

import numpy as np
import pandas as pd

from . import config
from .data_loader import PanelConfig, validate_columns
from .exceptions import BoundaryGapError, IncompletePanelError, NoDataError

DATE = config.DATE_COLUMN
REGION = config.REGION_COLUMN

EDGE_POLICIES = ('raise', 'fill')


# ---------------------------------------------------------------------------
# Chọn dữ liệu
# ---------------------------------------------------------------------------

def select_panel(raw, panel_config):
    """
    Giữ lại các vùng, khoảng ngày [start_date, end_date] và các biến cấu hình.

    Parameters
    ----------
    raw : pd.DataFrame
        Bảng thô có cột date, region và các biến.
    panel_config : PanelConfig

    Returns
    -------
    pd.DataFrame
        Bản sao đã lọc, cột date kiểu datetime.
    """
    validate_columns(raw, panel_config.columns)

    df = raw.loc[:, panel_config.columns].copy()
    df[DATE] = pd.to_datetime(df[DATE])

    start = pd.Timestamp(panel_config.start_date)
    end = pd.Timestamp(panel_config.end_date)
    mask = df[REGION].isin(panel_config.regions) & df[DATE].between(start, end)
    df = df[mask]

    if df.empty:
        raise NoDataError(
            f"Khong co du lieu cho {len(panel_config.regions)} vung "
            f"trong khoang {panel_config.start_date} – {panel_config.end_date}")

    missing = [r for r in panel_config.regions if r not in set(df[REGION])]
    if missing:
        raise NoDataError(f"Khong co du lieu cho cac vung: {missing}")

    return df


def drop_duplicate_rows(df):
    """Loại bỏ các dòng trùng lặp hoàn toàn."""
    return df.drop_duplicates()


def sort_panel(df):
    """Sắp xếp theo ngày rồi theo vùng (sai phân phụ thuộc thứ tự)."""
    return df.sort_values([DATE, REGION], kind='mergesort').reset_index(drop=True)


# ---------------------------------------------------------------------------
# Nội suy
# ---------------------------------------------------------------------------

def _interpolate_series(s, dates):
    """Nội suy theo thời gian, chỉ các điểm nằm giữa hai giá trị đã biết."""
    indexed = pd.Series(s.to_numpy(dtype=float), index=pd.DatetimeIndex(dates))
    filled = indexed.interpolate(method='time', limit_area='inside')
    return pd.Series(filled.to_numpy(), index=s.index)


def interpolate_interior(df, columns, edge_policy=None):
    """
    Nội suy tuyến tính giá trị thiếu bên trong chuỗi, độc lập theo từng vùng.

    Parameters
    ----------
    df : pd.DataFrame
        Panel đã sắp xếp theo ngày.
    columns : iterable of str
        Các biến cần nội suy.
    edge_policy : str
        'raise' – báo lỗi nếu còn giá trị thiếu ở đầu/cuối chuỗi.
        'fill'  – ffill rồi bfill cho phần đầu/cuối.

    Returns
    -------
    pd.DataFrame
    """
    if edge_policy is None:
        edge_policy = config.EDGE_POLICY
    if edge_policy not in EDGE_POLICIES:
        raise ValueError(
            f"edge_policy '{edge_policy}' khong duoc ho tro. Dung {EDGE_POLICIES}.")

    df = df.copy()
    for col in columns:
        filled = pd.Series(np.nan, index=df.index)
        for region, group in df.groupby(REGION, sort=False):
            series = group[col].astype(float)
            if series.isna().all():
                raise BoundaryGapError(f"Vung '{region}': bien '{col}' khong co gia tri nao")

            series = _interpolate_series(series, group[DATE])
            if series.isna().any():
                if edge_policy == 'raise':
                    first = group.loc[series.isna(), DATE].min().date()
                    raise BoundaryGapError(
                        f"Vung '{region}': bien '{col}' thieu gia tri o dau/cuoi chuoi "
                        f"(ngay {first}); dung edge_policy='fill' de lap day")
                series = series.ffill().bfill()
            filled.loc[group.index] = series
        df[col] = filled
    return df


# ---------------------------------------------------------------------------
# Sai phân
# ---------------------------------------------------------------------------

def difference_cumulative(df, columns):
    """
    Thay biến tích lũy bằng sai phân bậc 1 theo từng vùng:
    value[t] - value[t-1]. Ngày đầu tiên của mỗi vùng trở thành NaN.
    """
    df = df.copy()
    columns = list(columns)
    if columns:
        df[columns] = df.groupby(REGION, sort=False)[columns].diff()
    return df


def first_observations(df, columns):
    """Giá trị ngày đầu tiên của mỗi vùng (bị mất khi lấy sai phân)."""
    first = df.groupby(REGION, sort=False).head(1)
    return first.set_index(REGION)[list(columns)]


def reconstruct_cumulative(panel, first_values, columns=None):
    """
    Khôi phục chuỗi tích lũy từ chuỗi gia tăng hằng ngày.

    Parameters
    ----------
    panel : pd.DataFrame
        Panel đã sai phân (không có ngày đầu).
    first_values : pd.DataFrame
        Giá trị ngày đầu, index là vùng (xem first_observations).
    columns : list of str, optional
        Mặc định dùng các cột của first_values.

    Returns
    -------
    pd.DataFrame
        Cột date, region và các biến tích lũy.
    """
    if columns is None:
        columns = list(first_values.columns)
    out = panel[[DATE, REGION]].copy()
    for col in columns:
        out[col] = (panel.groupby(REGION, sort=False)[col].cumsum()
                    + panel[REGION].map(first_values[col]))
    return out


# ---------------------------------------------------------------------------
# Kiểm tra
# ---------------------------------------------------------------------------

def validate_clean_panel(df, panel_config):
    """
    Panel phải đủ n_regions * (n_days - 1) dòng và không còn null.
    n_days là số ngày lịch của [start_date, end_date], không phải số ngày
    có trong dữ liệu: dữ liệu kết thúc sớm hoặc thiếu ngày đều bị từ chối.
    """
    expected = len(panel_config.regions) * (panel_config.n_days - 1)
    if len(df) != expected:
        counts = df.groupby(REGION).size()
        short = counts[counts != panel_config.n_days - 1]
        raise IncompletePanelError(
            f"Panel co {len(df):,} dong, ky vong {expected:,} "
            f"({panel_config.n_days} ngay tu {panel_config.start_date} "
            f"den {panel_config.end_date}). Vung thieu ngay: {short.to_dict()}")
    if df.isna().any().any():
        raise IncompletePanelError("Panel van con gia tri null sau khi lam sach")
    if df.duplicated([DATE, REGION]).any():
        raise IncompletePanelError("Panel co nhieu dong cho cung (region, date)")


# ---------------------------------------------------------------------------
# Pipeline làm sạch đầy đủ
# ---------------------------------------------------------------------------

def clean_panel(raw, panel_config=None, edge_policy=None, verbose=True):
    """
    Pipeline làm sạch hoàn chỉnh:
    1. Chọn vùng / ngày / biến
    2. Loại dòng trùng
    3. Sắp xếp theo ngày rồi vùng
    4. Nội suy giá trị thiếu bên trong (biến tests)
    5. Sai phân các biến tích lũy
    6. Bỏ dòng còn null (chủ yếu ngày đầu mỗi vùng)

    Parameters
    ----------
    raw : pd.DataFrame
    panel_config : PanelConfig, optional
    edge_policy : str, optional
        'raise' hoặc 'fill'. Mặc định config.EDGE_POLICY.

    Returns
    -------
    pd.DataFrame
        n_regions * (n_days - 1) dòng, không có giá trị thiếu.
    """
    if panel_config is None:
        panel_config = PanelConfig.default()

    if verbose:
        print("Bước 1: Chọn vùng, khoảng ngày, biến...")
    df = select_panel(raw, panel_config)

    if verbose:
        print("Bước 2: Loại dòng trùng lặp, sắp xếp...")
    n_before = len(df)
    df = sort_panel(drop_duplicate_rows(df))
    if verbose and n_before != len(df):
        print(f"  Đã loại {n_before - len(df):,} dòng trùng")

    if verbose:
        print(f"Bước 3: Nội suy {list(panel_config.interpolated_variables)}...")
    df = interpolate_interior(df, panel_config.interpolated_variables, edge_policy=edge_policy)

    if verbose:
        print(f"Bước 4: Sai phân {list(panel_config.cumulative_variables)}...")
    df = difference_cumulative(df, panel_config.cumulative_variables)
    df = df.dropna().reset_index(drop=True)

    validate_clean_panel(df, panel_config)
    if verbose:
        print(f"Làm sạch hoàn thành: {len(df):,} dòng, "
              f"{df[REGION].nunique()} vùng, {df[DATE].nunique()} ngày.")
    return df

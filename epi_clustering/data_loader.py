"""
Module tải bảng dữ liệu dịch tễ thô và mô tả hình dạng panel
(vùng, khoảng ngày, biến) cần phân tích.
"""

from dataclasses import dataclass, field
from typing import Optional, Tuple

import pandas as pd

from . import config
from .exceptions import MissingColumnsError, NoDataError


@dataclass(frozen=True)
class PanelConfig:
    """Hình dạng panel: danh sách vùng, khoảng ngày và các biến."""

    regions: Tuple[str, ...] = field(default_factory=lambda: tuple(config.REGIONS))
    start_date: str = config.START_DATE
    end_date: str = config.END_DATE
    variables: Tuple[str, ...] = field(default_factory=lambda: tuple(config.VARIABLES))
    cumulative_variables: Tuple[str, ...] = field(
        default_factory=lambda: tuple(config.CUMULATIVE_VARIABLES))
    interpolated_variables: Tuple[str, ...] = field(
        default_factory=lambda: tuple(config.INTERPOLATED_VARIABLES))

    def __post_init__(self):
        if not self.regions:
            raise NoDataError("PanelConfig khong co vung nao")
        if not self.variables:
            raise NoDataError("PanelConfig khong co bien nao")
        if len(set(self.regions)) != len(self.regions):
            raise ValueError("Danh sach vung bi trung lap")
        extra = set(self.cumulative_variables) | set(self.interpolated_variables)
        unknown = sorted(extra - set(self.variables))
        if unknown:
            raise ValueError(f"Bien khong nam trong variables: {unknown}")
        if pd.Timestamp(self.end_date) < pd.Timestamp(self.start_date):
            raise NoDataError(
                f"Khoang ngay rong: {self.start_date} > {self.end_date}")

    @classmethod
    def default(cls):
        return cls()

    @property
    def dates(self):
        return pd.date_range(self.start_date, self.end_date, freq='D')

    @property
    def n_days(self):
        return len(self.dates)

    @property
    def columns(self):
        return [config.DATE_COLUMN, config.REGION_COLUMN] + list(self.variables)


def validate_columns(df, columns):
    """Kiểm tra bảng có đủ các cột yêu cầu."""
    missing = [c for c in columns if c not in df.columns]
    if missing:
        raise MissingColumnsError(f"Thieu cot: {missing}")


def load_data(filepath: Optional[str] = None, panel_config: Optional[PanelConfig] = None,
              verbose=True):
    """
    Đọc bảng dữ liệu thô từ file CSV.

    Parameters
    ----------
    filepath : str, optional
        Đường dẫn tới file CSV. Mặc định dùng config.DATA_PATH.
    panel_config : PanelConfig, optional
        Dùng để kiểm tra các cột bắt buộc.

    Returns
    -------
    df : pd.DataFrame
        Cột date đã được chuyển sang datetime.
    """
    if filepath is None:
        filepath = config.DATA_PATH
    if panel_config is None:
        panel_config = PanelConfig.default()

    if verbose:
        print(f"Đang đọc file {filepath}...")
    df = pd.read_csv(filepath)
    validate_columns(df, panel_config.columns)
    df[config.DATE_COLUMN] = pd.to_datetime(df[config.DATE_COLUMN])

    if verbose:
        print(f"Tổng số dòng dữ liệu: {len(df):,}")
        print(f"Khoảng thời gian: từ {df[config.DATE_COLUMN].min()} "
              f"đến {df[config.DATE_COLUMN].max()}")
        print(f"Số vùng có dữ liệu: {df[config.REGION_COLUMN].nunique()}")
    return df

"""
Module tính ma trận khoảng cách giữa các vùng:
- Ma trận đặc trưng: mỗi hàng là một vùng, các khối cột liên tiếp là chuỗi
  thời gian của từng biến
- Khoảng cách Euclid theo từng biến, cộng dồn với trọng số bằng nhau
"""

import numpy as np
from scipy.spatial.distance import pdist, squareform

from . import config
from .exceptions import DegenerateDistanceError
from .preprocessing import panel_to_matrix

REGION = config.REGION_COLUMN


def build_feature_matrix(panel, variables, regions=None):
    """
    Ghép chuỗi thời gian của các biến thành ma trận đặc trưng.

    Parameters
    ----------
    panel : pd.DataFrame
        Panel đã tiền xử lý.
    variables : sequence of str
    regions : sequence of str, optional
        Thứ tự hàng. Mặc định theo thứ tự xuất hiện trong panel.

    Returns
    -------
    X : np.ndarray, shape (n_regions, n_variables * n_times)
    regions : list of str
    """
    blocks = []
    for variable in variables:
        wide = panel_to_matrix(panel, variable, regions=regions)
        if regions is None:
            regions = list(wide.index)
        blocks.append(wide.to_numpy(dtype=float))
    X = np.hstack(blocks)
    if np.isnan(X).any():
        raise ValueError("Ma tran dac trung co NaN; panel chua day du")
    return X, list(regions)


def split_variable_blocks(X, n_variables):
    """Tách X thành n_variables khối cột có cùng độ dài."""
    X = np.asarray(X, dtype=float)
    if n_variables < 1 or X.shape[1] % n_variables != 0:
        raise ValueError(
            f"{X.shape[1]} cot khong chia deu cho {n_variables} bien")
    return np.split(X, n_variables, axis=1)


def variable_distance_matrix(matrix):
    """Khoảng cách Euclid giữa các hàng (vùng x thời gian) dạng vuông."""
    return squareform(pdist(np.asarray(matrix, dtype=float), metric='euclidean'))


def per_variable_distances(X, n_variables):
    """Danh sách ma trận khoảng cách, mỗi biến một ma trận."""
    return [variable_distance_matrix(block) for block in split_variable_blocks(X, n_variables)]


def composite_distance_matrix(X, n_variables):
    """
    Tổng các ma trận khoảng cách theo từng biến (trọng số bằng nhau).

    Hàm thuần: được gọi giống hệt nhau từ pipeline chính và từ vòng lặp
    tập tham chiếu của gap statistic.

    Parameters
    ----------
    X : np.ndarray, shape (n_regions, n_variables * n_times)
    n_variables : int

    Returns
    -------
    np.ndarray, shape (n_regions, n_regions)
    """
    X = np.asarray(X, dtype=float)
    D = np.zeros((X.shape[0], X.shape[0]))
    for block in split_variable_blocks(X, n_variables):
        D += variable_distance_matrix(block)
    return D


def check_degenerate(D, rtol=1e-10):
    """Báo lỗi nếu mọi khoảng cách ngoài đường chéo bằng nhau."""
    D = np.asarray(D, dtype=float)
    if D.shape[0] < 2:
        raise DegenerateDistanceError("Can it nhat 2 vung de tinh khoang cach")
    off = D[np.triu_indices_from(D, k=1)]
    if np.allclose(off, off[0], rtol=rtol, atol=1e-12):
        raise DegenerateDistanceError(
            f"Moi khoang cach giua cac vung deu bang {off[0]:.6g} "
            "(du lieu hang so?); khong the phan cum")

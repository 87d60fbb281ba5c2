"""
Module phân cụm phân cấp (Hierarchical Agglomerative Clustering) trên
ma trận khoảng cách tổng hợp giữa các vùng.
"""

import numpy as np
import pandas as pd
from scipy.cluster.hierarchy import cut_tree, linkage
from scipy.spatial.distance import squareform

from . import config
from .distance import check_degenerate, composite_distance_matrix


def _linkage(D, method):
    return linkage(squareform(D, checks=False), method=method)


def build_dendrogram(D, method=None):
    """
    Xây cây phân cấp từ ma trận khoảng cách vuông.

    Parameters
    ----------
    D : np.ndarray, shape (n, n)
        Đối xứng, không âm, đường chéo bằng 0.
    method : str
        Tiêu chí liên kết ('complete', 'average', 'single', ...).

    Returns
    -------
    Z : np.ndarray, shape (n - 1, 4)
        Ma trận linkage của scipy; cột 2 là chiều cao hợp nhất.
    """
    if method is None:
        method = config.LINKAGE_METHOD

    D = np.asarray(D, dtype=float)
    if D.ndim != 2 or D.shape[0] != D.shape[1]:
        raise ValueError(f"Ma tran khoang cach phai vuong, nhan {D.shape}")
    if not np.allclose(D, D.T) or np.any(np.diag(D) != 0) or np.any(D < 0):
        raise ValueError("Ma tran khoang cach phai doi xung, khong am, duong cheo bang 0")
    check_degenerate(D)

    return _linkage(D, method)


def merge_heights(Z):
    """Chiều cao hợp nhất theo thứ tự hợp nhất."""
    return np.asarray(Z)[:, 2]


def cut_dendrogram(Z, k, labels=None):
    """
    Cắt cây thành đúng k cụm.

    Parameters
    ----------
    Z : np.ndarray
        Ma trận linkage.
    k : int
    labels : sequence of str, optional
        Tên vùng theo thứ tự hàng của ma trận khoảng cách.

    Returns
    -------
    pd.Series (nếu có labels) hoặc np.ndarray, nhãn cụm 1..k
    """
    n = np.asarray(Z).shape[0] + 1
    if not 1 <= k <= n:
        raise ValueError(f"k={k} nam ngoai [1, {n}]")

    assignment = cut_tree(Z, n_clusters=int(k)).ravel() + 1
    if labels is None:
        return assignment
    return pd.Series(assignment, index=pd.Index(list(labels), name=config.REGION_COLUMN),
                     name='cluster')


def hclust_composite(X, k, n_variables, method=None):
    """
    Hàm phân cụm dùng cho gap statistic: tính lại khoảng cách tổng hợp
    từ X và phân cụm lại ở mỗi lần gọi.

    Returns
    -------
    np.ndarray, nhãn cụm 1..k
    """
    if method is None:
        method = config.LINKAGE_METHOD
    if k == 1:
        return np.ones(len(X), dtype=int)
    D = composite_distance_matrix(X, n_variables)
    return cut_dendrogram(_linkage(D, method), k)


def run_hierarchical_clustering(X, n_clusters, n_variables, regions=None, method=None,
                                verbose=True):
    """
    Phân cụm phân cấp trên khoảng cách tổng hợp và cắt tại n_clusters.

    Parameters
    ----------
    X : np.ndarray, shape (n_regions, n_variables * n_times)
    n_clusters : int
    n_variables : int
    regions : sequence of str, optional
    method : str

    Returns
    -------
    result : dict
        labels, linkage, distance, heights, n_clusters, method
    """
    if method is None:
        method = config.LINKAGE_METHOD

    if verbose:
        print("\nHIERARCHICAL AGGLOMERATIVE CLUSTERING")
        print("-" * 40)

    D = composite_distance_matrix(X, n_variables)
    Z = build_dendrogram(D, method=method)
    labels = cut_dendrogram(Z, n_clusters, labels=regions)

    result = {
        'labels': labels,
        'linkage': Z,
        'distance': D,
        'heights': merge_heights(Z),
        'n_clusters': int(len(np.unique(labels))),
        'method': method,
    }
    if verbose:
        print(f"Hoàn thành! linkage={method}, số cụm: {result['n_clusters']}")
    return result

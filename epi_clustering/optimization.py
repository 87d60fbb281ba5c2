"""
Module tìm số cụm tối ưu bằng Gap statistic (Tibshirani, Walther & Hastie 2001).

Gap(k) = E*[log W_k] - log W_k, với E* là trung bình trên B tập tham chiếu
lấy mẫu đều (không có cấu trúc cụm). Số cụm được chọn theo các quy tắc
"max SE" (mặc định firstSEmax).
"""

from functools import partial

import numpy as np
import pandas as pd
from scipy.spatial.distance import pdist
from tqdm.autonotebook import tqdm

from . import config
from .clustering import hclust_composite
from .distance import check_degenerate, composite_distance_matrix
from .exceptions import GapStatisticError

GAP_COLUMNS = ['logW', 'E.logW', 'gap', 'SE.sim']
SPACES_H0 = ('original', 'scaledPCA')


# ---------------------------------------------------------------------------
# Độ phân tán trong cụm
# ---------------------------------------------------------------------------

def within_dispersion(X, labels):
    """
    W_k = 0.5 * sum_r (tổng khoảng cách Euclid giữa các cặp trong cụm r) / n_r.
    Cụm một phần tử đóng góp 0.
    """
    X = np.asarray(X, dtype=float)
    labels = np.asarray(labels)
    W = 0.0
    for lab in np.unique(labels):
        members = X[labels == lab]
        if len(members) > 1:
            W += pdist(members).sum() / len(members)
    return 0.5 * W


# ---------------------------------------------------------------------------
# Phân phối tham chiếu
# ---------------------------------------------------------------------------

def make_reference_sampler(X, space_h0=None):
    """
    Tạo hàm sinh tập tham chiếu cùng shape với X.

    Parameters
    ----------
    X : np.ndarray, shape (n_samples, n_features)
    space_h0 : str
        'original'  – phân phối đều trên khoảng [min, max] của từng cột.
        'scaledPCA' – phân phối đều trong hộp theo các trục thành phần chính
                      của dữ liệu đã trừ trung bình, rồi xoay ngược lại.

    Returns
    -------
    sampler : callable(rng) -> np.ndarray
    """
    if space_h0 is None:
        space_h0 = config.GAP_SPACE_H0
    X = np.asarray(X, dtype=float)
    n = X.shape[0]

    if space_h0 == 'original':
        mins, maxs = X.min(axis=0), X.max(axis=0)
        return lambda rng: rng.uniform(mins, maxs, size=X.shape)

    if space_h0 == 'scaledPCA':
        center = X.mean(axis=0)
        _, _, vt = np.linalg.svd(X - center, full_matrices=False)
        projected = (X - center) @ vt.T
        mins, maxs = projected.min(axis=0), projected.max(axis=0)
        return lambda rng: rng.uniform(mins, maxs, size=(n, len(mins))) @ vt + center

    raise ValueError(f"space_h0 '{space_h0}' khong duoc ho tro. Dung {SPACES_H0}.")


def reference_sample(X, rng, space_h0=None):
    """Sinh một tập tham chiếu."""
    return make_reference_sampler(X, space_h0)(rng)


# ---------------------------------------------------------------------------
# Gap statistic
# ---------------------------------------------------------------------------

def _log_dispersion(X, cluster_fn, k, what):
    W = within_dispersion(X, cluster_fn(X, k))
    if not np.isfinite(W) or W <= 0:
        raise GapStatisticError(
            f"Do phan tan W_{k} cua {what} bang {W}; log(W) khong xac dinh "
            "(cac diem trong cum trung nhau?)")
    return np.log(W)


def gap_statistic(X, cluster_fn, k_max=None, n_bootstrap=None, space_h0=None,
                  random_state=None, verbose=True):
    """
    Tính Gap statistic cho k = 1..k_max.

    Parameters
    ----------
    X : np.ndarray, shape (n_samples, n_features)
    cluster_fn : callable(X, k) -> labels
        Hàm phân cụm, được gọi lại cho dữ liệu thật và cho mỗi tập tham chiếu.
    k_max : int
        Phải thỏa 2 <= k_max <= n_samples - 1.
    n_bootstrap : int
        Số tập tham chiếu B (>= 2).
    space_h0 : str
        'original' hoặc 'scaledPCA'.
    random_state : int
        Seed cho bộ sinh số ngẫu nhiên.

    Returns
    -------
    gap_table : pd.DataFrame
        Index k, cột logW, E.logW, gap, SE.sim.
    """
    if k_max is None:
        k_max = config.K_MAX
    if n_bootstrap is None:
        n_bootstrap = config.GAP_N_BOOTSTRAP
    if random_state is None:
        random_state = config.SEED

    X = np.asarray(X, dtype=float)
    n = X.shape[0]
    if not 2 <= k_max <= n - 1:
        raise GapStatisticError(f"k_max={k_max} phai nam trong [2, {n - 1}] voi {n} vung")
    if n_bootstrap < 2:
        raise GapStatisticError(f"n_bootstrap={n_bootstrap} phai >= 2 de tinh SE")

    ks = np.arange(1, k_max + 1)
    logW = np.array([_log_dispersion(X, cluster_fn, k, 'du lieu') for k in ks])

    sampler = make_reference_sampler(X, space_h0)
    rng = np.random.default_rng(random_state)
    logW_ref = np.zeros((n_bootstrap, len(ks)))
    for b in tqdm(range(n_bootstrap), desc="Bootstrapping reference sets",
                  disable=not verbose):
        X_ref = sampler(rng)
        for i, k in enumerate(ks):
            logW_ref[b, i] = _log_dispersion(X_ref, cluster_fn, k, f'tap tham chieu {b + 1}')

    E_logW = logW_ref.mean(axis=0)
    SE_sim = np.sqrt(1.0 + 1.0 / n_bootstrap) * logW_ref.std(axis=0, ddof=1)

    table = pd.DataFrame(
        np.column_stack([logW, E_logW, E_logW - logW, SE_sim]),
        index=pd.Index(ks, name='k'), columns=GAP_COLUMNS,
    )
    if not np.isfinite(table.to_numpy()).all():
        raise GapStatisticError("Gap statistic co gia tri khong huu han")
    return table


# ---------------------------------------------------------------------------
# Quy tắc chọn k
# ---------------------------------------------------------------------------

def _first_local_max(f):
    decr = np.diff(f) <= 0
    return int(np.argmax(decr)) + 1 if decr.any() else len(f)


def _first_within_se(f, fSE, nc):
    mp = f[:nc - 1] >= f[nc - 1] - fSE[nc - 1]
    return int(np.argmax(mp)) + 1 if mp.any() else nc


def max_se(f, se, method=None, se_factor=None):
    """
    Chọn số cụm từ đường Gap(k) và sai số chuẩn.

    Parameters
    ----------
    f : array-like
        Gap(k), k = 1..K.
    se : array-like
        SE(k), cùng độ dài.
    method : str
        'firstSEmax'    – cực đại địa phương đầu tiên k*, rồi k nhỏ nhất có
                          Gap(k) >= Gap(k*) - SE(k*).
        'Tibs2001SEmax' – k nhỏ nhất có Gap(k) >= Gap(k+1) - SE(k+1).
        'globalSEmax'   – như firstSEmax nhưng k* là cực đại toàn cục.
        'firstmax'      – cực đại địa phương đầu tiên.
        'globalmax'     – cực đại toàn cục.
    se_factor : float
        Hệ số nhân SE.

    Returns
    -------
    k : int (bắt đầu từ 1)
    """
    if method is None:
        method = config.GAP_METHOD
    if se_factor is None:
        se_factor = config.GAP_SE_FACTOR

    f = np.asarray(f, dtype=float)
    se = np.asarray(se, dtype=float)
    K = len(f)
    if K < 1 or len(se) != K:
        raise ValueError("f va se phai cung do dai >= 1")
    if np.any(~np.isfinite(f)) or np.any(~np.isfinite(se)) or np.any(se < 0):
        raise GapStatisticError("Gap / SE co gia tri khong hop le")
    if se_factor < 0:
        raise ValueError("se_factor phai >= 0")
    fSE = se_factor * se

    if method == 'firstmax':
        return _first_local_max(f)
    if method == 'globalmax':
        return int(np.argmax(f)) + 1
    if method == 'Tibs2001SEmax':
        mp = f[:-1] >= (f - fSE)[1:]
        return int(np.argmax(mp)) + 1 if mp.any() else K
    if method == 'firstSEmax':
        return _first_within_se(f, fSE, _first_local_max(f))
    if method == 'globalSEmax':
        return _first_within_se(f, fSE, int(np.argmax(f)) + 1)
    raise ValueError(f"Method '{method}' khong duoc ho tro. Dung {config.GAP_METHODS}.")


# ---------------------------------------------------------------------------
# Tìm số cụm tối ưu
# ---------------------------------------------------------------------------

def find_optimal_clusters(X, n_variables, k_max=None, n_bootstrap=None, method=None,
                          space_h0=None, se_factor=None, random_state=None,
                          linkage_method=None, verbose=True):
    """
    Tìm số cụm tối ưu cho phân cụm phân cấp trên khoảng cách tổng hợp.

    Parameters
    ----------
    X : np.ndarray, shape (n_regions, n_variables * n_times)
    n_variables : int
    k_max, n_bootstrap, space_h0, random_state
        Xem gap_statistic.
    method, se_factor
        Xem max_se.
    linkage_method : str
        Mặc định config.LINKAGE_METHOD.

    Returns
    -------
    optimization_result : dict
        recommended_k, gap_table, method, space_h0, n_bootstrap, k_max
    """
    if method is None:
        method = config.GAP_METHOD
    if space_h0 is None:
        space_h0 = config.GAP_SPACE_H0
    if n_bootstrap is None:
        n_bootstrap = config.GAP_N_BOOTSTRAP
    if k_max is None:
        k_max = config.K_MAX

    if verbose:
        print("TIM KIEM SO CUM TOI UU (GAP STATISTIC)")
        print("=" * 70)
        print(f"  k = 1..{k_max}, B = {n_bootstrap}, H0 = {space_h0}, quy tac = {method}")

    check_degenerate(composite_distance_matrix(X, n_variables))

    cluster_fn = partial(hclust_composite, n_variables=n_variables, method=linkage_method)
    gap_table = gap_statistic(X, cluster_fn, k_max=k_max, n_bootstrap=n_bootstrap,
                              space_h0=space_h0, random_state=random_state, verbose=verbose)
    recommended_k = max_se(gap_table['gap'], gap_table['SE.sim'],
                           method=method, se_factor=se_factor)

    if verbose:
        _print_gap_table(gap_table, recommended_k)
        print(f"\nK TOI UU DE XUAT: k = {recommended_k} ({method})")

    return {
        'recommended_k': recommended_k,
        'gap_table': gap_table,
        'method': method,
        'space_h0': space_h0,
        'n_bootstrap': n_bootstrap,
        'k_max': k_max,
    }


def _print_gap_table(gap_table, recommended_k):
    hdr = f"{'k':>4} {'logW':>10} {'E.logW':>10} {'gap':>10} {'SE.sim':>10}"
    print("\n" + hdr)
    print("-" * len(hdr))
    for k, row in gap_table.iterrows():
        mark = "  <--" if k == recommended_k else ""
        print(f"{k:>4} {row['logW']:>10.4f} {row['E.logW']:>10.4f} "
              f"{row['gap']:>10.4f} {row['SE.sim']:>10.4f}{mark}")

"""
Module kiem tra tinh on dinh cua ket qua phan cum (Stability Analysis).

Bootstrap Stability – Lay mau con cac vung nhieu lan, phan cum lai tren
khoang cach tong hop va so sanh voi nhan cua toan bo du lieu bang ARI.

ARI (Adjusted Rand Index):
  > 0.8  : cum rat on dinh
  0.5-0.8: cum tuong doi on dinh
  < 0.5  : cum khong dang tin cay
"""

import numpy as np
from sklearn.metrics import adjusted_rand_score

from . import config
from .clustering import hclust_composite


def bootstrap_stability(X, n_clusters, n_variables, n_iterations=None,
                        sample_ratio=None, random_state=None, method=None):
    """
    Danh gia tinh on dinh cua phan cum bang bootstrap resampling.

    Quy trinh:
      1. Phan cum toan bo du lieu -> labels_full
      2. Lap n_iterations lan:
         a. Lay mau ngau nhien sample_ratio% so vung (khong thay the)
         b. Phan cum tren mau -> labels_boot
         c. Tinh ARI giua labels_boot va labels_full tai cac chi so do
      3. Tra ve phan phoi ARI

    Parameters
    ----------
    X : np.ndarray, shape (n_regions, n_variables * n_times)
    n_clusters : int
    n_variables : int
    n_iterations : int
        So lan bootstrap (mac dinh config.STABILITY_N_ITERATIONS).
    sample_ratio : float
        Ty le vung lay moi lan (mac dinh 0.8 = 80%).
    random_state : int or None
    method : str
        Tieu chi lien ket, mac dinh config.LINKAGE_METHOD.

    Returns
    -------
    result : dict
        ari_scores    : list of float – ARI moi lan bootstrap
        ari_mean      : float
        ari_std       : float
        ari_median    : float
        n_iterations  : int
        n_clusters    : int
        interpretation: str – Dien giai ket qua
    """
    if n_iterations is None:
        n_iterations = config.STABILITY_N_ITERATIONS
    if sample_ratio is None:
        sample_ratio = config.STABILITY_SAMPLE_RATIO
    if random_state is None:
        random_state = config.SEED

    X = np.asarray(X, dtype=float)
    n_samples = len(X)
    n_boot = int(n_samples * sample_ratio)
    if not n_clusters < n_boot <= n_samples:
        raise ValueError(
            f"Mau bootstrap {n_boot} vung khong du cho {n_clusters} cum "
            f"(sample_ratio={sample_ratio})")

    rng = np.random.default_rng(random_state)
    labels_full = hclust_composite(X, n_clusters, n_variables, method=method)

    ari_scores = []
    for _ in range(n_iterations):
        boot_indices = np.sort(rng.choice(n_samples, size=n_boot, replace=False))
        labels_boot = hclust_composite(X[boot_indices], n_clusters, n_variables, method=method)
        ari_scores.append(adjusted_rand_score(labels_full[boot_indices], labels_boot))

    ari_mean = float(np.mean(ari_scores))

    return {
        'ari_scores': ari_scores,
        'ari_mean': ari_mean,
        'ari_std': float(np.std(ari_scores)),
        'ari_median': float(np.median(ari_scores)),
        'n_iterations': len(ari_scores),
        'n_clusters': n_clusters,
        'interpretation': interpret_ari(ari_mean, sample_ratio),
    }


def interpret_ari(ari_mean, sample_ratio=None):
    """
    Dien giai ARI trung binh theo cac nguong o dau module.

    Thong bao neu ro ty le vung giu lai moi lan, vi ARI o day do muc do
    nhan cua toan bo du lieu duoc giu nguyen khi bo bot vung.
    """
    if sample_ratio is None:
        sample_ratio = config.STABILITY_SAMPLE_RATIO
    dropped = f"bo {1 - sample_ratio:.0%} so vung"

    if ari_mean > 0.8:
        return f"Rat on dinh – {dropped} van giu gan nhu nguyen phan cum"
    if ari_mean >= 0.5:
        return f"Tuong doi on dinh – {dropped} lam doi mot phan nhan cum"
    return f"Khong dang tin cay – {dropped} lam thay doi phan cum dang ke"

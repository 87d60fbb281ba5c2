"""
Pipeline phân tích đầy đủ: làm sạch → tiền xử lý → khoảng cách tổng hợp
→ gap statistic → cắt cây phân cấp.
"""

from . import config
from .cleaning import clean_panel
from .clustering import run_hierarchical_clustering
from .data_loader import PanelConfig
from .distance import build_feature_matrix, per_variable_distances
from .optimization import find_optimal_clusters
from .preprocessing import preprocess_panel
from .stability import bootstrap_stability


def run_pipeline(raw, panel_config=None, k_max=None, n_bootstrap=None, method=None,
                 space_h0=None, random_state=None, edge_policy=None, frac=None,
                 stability=False, verbose=True):
    """
    Chạy toàn bộ phân tích trên bảng dữ liệu thô.

    Parameters
    ----------
    raw : pd.DataFrame
        Cột date, region và các biến của panel_config.
    panel_config : PanelConfig, optional
    k_max, n_bootstrap, method, space_h0, random_state
        Tham số gap statistic (xem optimization.find_optimal_clusters).
    edge_policy : str
        Xử lý giá trị thiếu ở đầu/cuối chuỗi khi nội suy.
    frac : float
        Span của LOWESS.
    stability : bool
        Chạy thêm bootstrap stability cho kết quả cuối.

    Returns
    -------
    result : dict
        clean_panel, preprocessed_panel, regions, feature_matrix,
        distance_matrices, composite_distance, linkage, heights, gap_table,
        n_clusters, assignment, stability (nếu có)
    """
    if panel_config is None:
        panel_config = PanelConfig.default()
    if random_state is None:
        random_state = config.SEED

    n_variables = len(panel_config.variables)

    if verbose:
        print("=" * 70)
        print("EPI CLUSTERING PIPELINE")
        print(f"  Vùng     : {len(panel_config.regions)}")
        print(f"  Khoảng   : {panel_config.start_date} → {panel_config.end_date}")
        print(f"  Biến     : {list(panel_config.variables)}")
        print("=" * 70)

    # ── 1. Làm sạch ──────────────────────────────────────────────────────────
    if verbose:
        print("\n[1/4] Làm sạch dữ liệu...")
    clean = clean_panel(raw, panel_config, edge_policy=edge_policy, verbose=verbose)

    # ── 2. Tiền xử lý ────────────────────────────────────────────────────────
    if verbose:
        print("\n[2/4] Tiền xử lý (LOWESS → z-score)...")
    preprocessed = preprocess_panel(clean, panel_config, frac=frac, verbose=verbose)

    # ── 3. Khoảng cách tổng hợp ──────────────────────────────────────────────
    if verbose:
        print("\n[3/4] Tính khoảng cách tổng hợp...")
    X, regions = build_feature_matrix(preprocessed, panel_config.variables,
                                      regions=list(panel_config.regions))
    distances = dict(zip(panel_config.variables, per_variable_distances(X, n_variables)))
    if verbose:
        print(f"  Ma trận đặc trưng: {X.shape}, {n_variables} ma trận khoảng cách")

    # ── 4. Chọn số cụm + cắt cây ─────────────────────────────────────────────
    if verbose:
        print("\n[4/4] Gap statistic + phân cụm phân cấp...")
    opt = find_optimal_clusters(X, n_variables, k_max=k_max, n_bootstrap=n_bootstrap,
                                method=method, space_h0=space_h0,
                                random_state=random_state, verbose=verbose)
    hac = run_hierarchical_clustering(X, opt['recommended_k'], n_variables,
                                      regions=regions, verbose=verbose)

    result = {
        'clean_panel': clean,
        'preprocessed_panel': preprocessed,
        'regions': regions,
        'feature_matrix': X,
        'distance_matrices': distances,
        'composite_distance': hac['distance'],
        'linkage': hac['linkage'],
        'heights': hac['heights'],
        'gap_table': opt['gap_table'],
        'n_clusters': opt['recommended_k'],
        'assignment': hac['labels'],
    }

    if stability:
        if verbose:
            print("\nBootstrap stability...")
        boot = bootstrap_stability(X, opt['recommended_k'], n_variables,
                                   random_state=random_state)
        if verbose:
            print(f"  ARI = {boot['ari_mean']:.3f} +/- {boot['ari_std']:.3f}")
            print(f"  >> {boot['interpretation']}")
        result['stability'] = boot

    if verbose:
        sizes = result['assignment'].value_counts().sort_index()
        print(f"\nHOAN THANH! k = {result['n_clusters']}, kich thuoc cum: {sizes.to_dict()}")
    return result

"""
Epi Clustering Package
======================

Cac module:
  config         – Cau hinh chung (vung, khoang ngay, bien, hyperparameter)
  exceptions     – Cac loai loi cua pipeline
  data_loader    – Tai CSV, PanelConfig
  cleaning       – Chon du lieu, noi suy, sai phan bien tich luy
  preprocessing  – LOWESS, z-score theo tung (vung, bien)
  distance       – Ma tran khoang cach theo bien va tong hop
  clustering     – Phan cum phan cap (complete linkage), cat cay
  optimization   – Gap statistic, quy tac chon k (firstSEmax, ...)
  stability      – Bootstrap stability (ARI)
  pipeline       – Chay toan bo phan tich

Vi du su dung nhanh
-------------------
    from epi_clustering import load_data, run_pipeline
    result = run_pipeline(load_data())
    result['assignment']
"""

# ── config ───────────────────────────────────────────────────────────────────
from . import config

# ── exceptions ───────────────────────────────────────────────────────────────
from .exceptions import (
    EpiClusteringError,
    MissingColumnsError,
    NoDataError,
    BoundaryGapError,
    IncompletePanelError,
    DegenerateDistanceError,
    GapStatisticError,
)

# ── data_loader ──────────────────────────────────────────────────────────────
from .data_loader import (
    PanelConfig,
    load_data,
    validate_columns,
)

# ── cleaning ─────────────────────────────────────────────────────────────────
from .cleaning import (
    select_panel,
    drop_duplicate_rows,
    sort_panel,
    interpolate_interior,
    difference_cumulative,
    first_observations,
    reconstruct_cumulative,
    clean_panel,
)

# ── preprocessing ────────────────────────────────────────────────────────────
from .preprocessing import (
    panel_to_matrix,
    lowess_smooth,
    lowess_filter_2d,
    zscore_2d,
    preprocess_panel,
)

# ── distance ─────────────────────────────────────────────────────────────────
from .distance import (
    build_feature_matrix,
    variable_distance_matrix,
    per_variable_distances,
    composite_distance_matrix,
    check_degenerate,
)

# ── clustering ───────────────────────────────────────────────────────────────
from .clustering import (
    build_dendrogram,
    merge_heights,
    cut_dendrogram,
    hclust_composite,
    run_hierarchical_clustering,
)

# ── optimization ─────────────────────────────────────────────────────────────
from .optimization import (
    within_dispersion,
    make_reference_sampler,
    reference_sample,
    gap_statistic,
    max_se,
    find_optimal_clusters,
)

# ── stability ────────────────────────────────────────────────────────────────
from .stability import (
    bootstrap_stability,
    interpret_ari,
)

# ── pipeline ─────────────────────────────────────────────────────────────────
from .pipeline import run_pipeline

__all__ = [
    # config
    "config",
    # exceptions
    "EpiClusteringError", "MissingColumnsError", "NoDataError",
    "BoundaryGapError", "IncompletePanelError",
    "DegenerateDistanceError", "GapStatisticError",
    # data_loader
    "PanelConfig", "load_data", "validate_columns",
    # cleaning
    "select_panel", "drop_duplicate_rows", "sort_panel",
    "interpolate_interior", "difference_cumulative",
    "first_observations", "reconstruct_cumulative", "clean_panel",
    # preprocessing
    "panel_to_matrix", "lowess_smooth", "lowess_filter_2d",
    "zscore_2d", "preprocess_panel",
    # distance
    "build_feature_matrix", "variable_distance_matrix",
    "per_variable_distances", "composite_distance_matrix", "check_degenerate",
    # clustering
    "build_dendrogram", "merge_heights", "cut_dendrogram",
    "hclust_composite", "run_hierarchical_clustering",
    # optimization
    "within_dispersion", "make_reference_sampler", "reference_sample", "gap_statistic",
    "max_se", "find_optimal_clusters",
    # stability
    "bootstrap_stability", "interpret_ari",
    # pipeline
    "run_pipeline",
]

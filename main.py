"""
Pipeline chinh cho Epi Clustering Project.

Chay:
    python main.py                                  # dung config.DATA_PATH
    python main.py --data data/us_states_daily.csv
    python main.py --k-max 8 --n-boot 200 --seed 1
    python main.py --method Tibs2001SEmax --space-h0 scaledPCA
    python main.py --edge-policy fill --stability --output result/clusters.csv

Tuy chinh:
    - Sua cac thong so trong epi_clustering/config.py
    - Hoac truyen doi so dong lenh
"""

import argparse
import os
import warnings
warnings.filterwarnings('ignore')

from epi_clustering import config
from epi_clustering.data_loader import PanelConfig, load_data
from epi_clustering.pipeline import run_pipeline

# --------------------------------------------------------------------------- #
#  Parse arguments                                                             #
# --------------------------------------------------------------------------- #
parser = argparse.ArgumentParser(description='Epi Clustering – phan cum vung theo chuoi dich te')
parser.add_argument('--data',        type=str,   default=None, help='File CSV (mac dinh: config.DATA_PATH)')
parser.add_argument('--k-max',       type=int,   default=None, help='k lon nhat (mac dinh: config.K_MAX)')
parser.add_argument('--n-boot',      type=int,   default=None, help='So tap tham chieu B (mac dinh: config.GAP_N_BOOTSTRAP)')
parser.add_argument('--method',      type=str,   default=None, choices=config.GAP_METHODS,
                    help='Quy tac chon k (mac dinh: config.GAP_METHOD)')
parser.add_argument('--space-h0',    type=str,   default=None, choices=['original', 'scaledPCA'],
                    help='Phan phoi tham chieu (mac dinh: config.GAP_SPACE_H0)')
parser.add_argument('--seed',        type=int,   default=None, help='Seed (mac dinh: config.SEED)')
parser.add_argument('--edge-policy', type=str,   default=None, choices=['raise', 'fill'],
                    help='Xu ly gia tri thieu dau/cuoi chuoi (mac dinh: config.EDGE_POLICY)')
parser.add_argument('--frac',        type=float, default=None, help='Span LOWESS (mac dinh: config.LOWESS_FRAC)')
parser.add_argument('--start',       type=str,   default=None, help='Ngay bat dau (mac dinh: config.START_DATE)')
parser.add_argument('--end',         type=str,   default=None, help='Ngay ket thuc (mac dinh: config.END_DATE)')
parser.add_argument('--stability',   action='store_true', help='Chay them bootstrap stability')
parser.add_argument('--output',      type=str,   default=None, help='Luu bang vung -> cum ra CSV')


def main(argv=None):
    args = parser.parse_args(argv)

    panel_config = PanelConfig(
        start_date=args.start or config.START_DATE,
        end_date=args.end or config.END_DATE,
    )

    raw = load_data(args.data, panel_config=panel_config)
    result = run_pipeline(
        raw,
        panel_config=panel_config,
        k_max=args.k_max,
        n_bootstrap=args.n_boot,
        method=args.method,
        space_h0=args.space_h0,
        random_state=args.seed,
        edge_policy=args.edge_policy,
        frac=args.frac,
        stability=args.stability,
    )

    # ── Tom tat ─────────────────────────────────────────────────────────────
    assignment = result['assignment']
    print("\n" + "=" * 70)
    print(f"KET QUA PHAN CUM (k = {result['n_clusters']})")
    print("=" * 70)
    for label, members in assignment.groupby(assignment):
        print(f"Cum {label:>2} ({len(members):>2} vung): {', '.join(members.index)}")

    if args.output:
        os.makedirs(os.path.dirname(os.path.abspath(args.output)), exist_ok=True)
        assignment.to_csv(args.output, header=True)
        print(f"\nDa luu vao {args.output}")

    return result


if __name__ == '__main__':
    main()

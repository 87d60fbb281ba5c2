"""
Cau hinh chung cho project Epi Clustering
"""

import os

# ── Seed ────────────────────────────────────────────────────────────────────
SEED = 23

# ── Thu muc goc ─────────────────────────────────────────────────────────────
BASE_DIR = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
DATA_DIR = os.path.join(BASE_DIR, 'data')

# ── Du lieu dau vao ──────────────────────────────────────────────────────────
DATA_PATH = os.path.join(DATA_DIR, 'us_states_daily.csv')

DATE_COLUMN   = 'date'
REGION_COLUMN = 'region'

# ── Vung (50 bang cua My) ────────────────────────────────────────────────────
REGIONS = (
    'Alabama', 'Alaska', 'Arizona', 'Arkansas', 'California',
    'Colorado', 'Connecticut', 'Delaware', 'Florida', 'Georgia',
    'Hawaii', 'Idaho', 'Illinois', 'Indiana', 'Iowa',
    'Kansas', 'Kentucky', 'Louisiana', 'Maine', 'Maryland',
    'Massachusetts', 'Michigan', 'Minnesota', 'Mississippi', 'Missouri',
    'Montana', 'Nebraska', 'Nevada', 'New Hampshire', 'New Jersey',
    'New Mexico', 'New York', 'North Carolina', 'North Dakota', 'Ohio',
    'Oklahoma', 'Oregon', 'Pennsylvania', 'Rhode Island', 'South Carolina',
    'South Dakota', 'Tennessee', 'Texas', 'Utah', 'Vermont',
    'Virginia', 'Washington', 'West Virginia', 'Wisconsin', 'Wyoming',
)

# ── Khoang thoi gian (2 nam, theo ngay) ──────────────────────────────────────
START_DATE = '2021-01-01'
END_DATE   = '2022-12-31'

# ── Bien phan tich ───────────────────────────────────────────────────────────
CUMULATIVE_VARIABLES   = ('confirmed', 'deaths', 'tests', 'vaccines')
GAUGE_VARIABLES        = ('hosp', 'icu')
VARIABLES              = CUMULATIVE_VARIABLES + GAUGE_VARIABLES
INTERPOLATED_VARIABLES = ('tests',)

# 'raise' hoac 'fill' (ffill + bfill) cho gia tri thieu o dau/cuoi chuoi
EDGE_POLICY = 'raise'

# ── Tien xu ly ───────────────────────────────────────────────────────────────
LOWESS_FRAC = 0.05   # span cua LOWESS
LOWESS_IT   = 0      # khong lap robust (tuong duong loess family='gaussian')

# ── Phan cum ─────────────────────────────────────────────────────────────────
LINKAGE_METHOD = 'complete'

# ── Gap statistic ────────────────────────────────────────────────────────────
K_MAX           = 10
GAP_N_BOOTSTRAP = 100           # so tap tham chieu B
GAP_SPACE_H0    = 'scaledPCA'   # 'scaledPCA' (nhu clusGap) hoac 'original'
GAP_METHOD      = 'firstSEmax'
GAP_SE_FACTOR   = 1.0
GAP_METHODS     = ('firstSEmax', 'Tibs2001SEmax', 'globalSEmax', 'firstmax', 'globalmax')

# ── Stability Analysis ─────────────────────────────────────────────────────
STABILITY_N_ITERATIONS = 100   # So lan bootstrap
STABILITY_SAMPLE_RATIO = 0.8   # Ty le vung moi lan (80%)

"""
Cac loai loi cua pipeline. Tat ca ke thua ValueError de code goi
co the bat chung nhu loi du lieu dau vao.
"""


class EpiClusteringError(ValueError):
    """Loi chung cua epi_clustering."""


class MissingColumnsError(EpiClusteringError):
    """Bang du lieu thieu cot bat buoc."""


class NoDataError(EpiClusteringError):
    """Bo loc vung / ngay / bien khong con du lieu."""


class BoundaryGapError(EpiClusteringError):
    """Gia tri thieu o dau hoac cuoi chuoi, khong noi suy duoc."""


class IncompletePanelError(EpiClusteringError):
    """Panel sau khi lam sach khong day du (con null hoac khong chu nhat)."""


class DegenerateDistanceError(EpiClusteringError):
    """Ma tran khoang cach suy bien (moi khoang cach bang nhau)."""


class GapStatisticError(EpiClusteringError):
    """Gap statistic khong xac dinh voi tham so / du lieu hien tai."""

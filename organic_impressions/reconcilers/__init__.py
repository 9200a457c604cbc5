"""Merge and estimation algorithms over the tracker tables."""

from .charts import build_chart_data
from .impressions import ImpressionEstimator, ImpressionReport, rank_multiplier
from .rank import RankReconciler
from .volume import HistoricalVolumeReconciler, VolumeReconcileResult

__all__ = [
    "build_chart_data",
    "ImpressionEstimator",
    "ImpressionReport",
    "rank_multiplier",
    "RankReconciler",
    "HistoricalVolumeReconciler",
    "VolumeReconcileResult",
]

"""
src/models/confidence_scorer.py
Turn accuracy history, insights and data volume into a single confidence value.
"""
from __future__ import annotations

import math
from collections.abc import Sequence

from src.models.records import AccuracyMetrics, StatisticalInsight

BASE_CONFIDENCE = 0.5
CONFIDENCE_FLOOR = 0.1
CONFIDENCE_CEILING = 0.95
INSIGHT_THRESHOLD = 0.6
DATA_SUFFICIENCY_DRAWS = 20


def _finite(value: float) -> float:
    return value if isinstance(value, (int, float)) and math.isfinite(value) else 0.0


def score_confidence(
    metrics: AccuracyMetrics,
    insights: Sequence[StatisticalInsight],
    history_length: int,
    insight_threshold: float = INSIGHT_THRESHOLD,
    data_sufficiency_draws: int = DATA_SUFFICIENCY_DRAWS,
) -> float:
    """
    0.5 base, plus:
      recent accuracy * 0.3        (when any accuracy history exists)
      min(trend * 2, 0.2)          (when accuracy is improving)
      0.05 per insight above the threshold
      0.1 when history_length >= data_sufficiency_draws
    clamped to [0.1, 0.95].
    """
    confidence = BASE_CONFIDENCE

    if metrics.total_predictions > 0:
        confidence += _finite(metrics.recent_performance) * 0.3

    trend = _finite(metrics.improvement_trend)
    if trend > 0:
        confidence += min(trend * 2, 0.2)

    strong = [i for i in insights if _finite(i.confidence) > insight_threshold]
    confidence += len(strong) * 0.05

    if history_length >= data_sufficiency_draws:
        confidence += 0.1

    return min(max(confidence, CONFIDENCE_FLOOR), CONFIDENCE_CEILING)

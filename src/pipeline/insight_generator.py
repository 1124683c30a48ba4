"""
src/pipeline/insight_generator.py
Mine the accuracy history for pattern / frequency / range / sum insights,
aggregate accuracy metrics, and derive improvement recommendations.
"""
from __future__ import annotations

from collections.abc import Sequence
from datetime import date, timedelta

import numpy as np

from src.models.records import (
    AccuracyMetrics,
    FrequencyInsightData,
    InsightType,
    LotteryTypeMetrics,
    NumberPerformance,
    PatternInsightData,
    PredictionAccuracyRecord,
    RangeInsightData,
    StatisticalInsight,
    SumInsightData,
)
from src.utils.config import get_number_range
from src.utils.logger import get_logger

log = get_logger("pipeline.insights")

MIN_RECORDS = 3
DEFAULT_LOOKBACK_DAYS = 30
RECENT_WINDOW = 10
SUM_TOLERANCE = 0.10


def _mean(values: Sequence[float]) -> float:
    return float(np.mean(values)) if len(values) else 0.0


def get_recent_analyses(
    history: Sequence[PredictionAccuracyRecord],
    lottery_type: str,
    lookback_days: int,
    today: date | None = None,
) -> list[PredictionAccuracyRecord]:
    """Records for one lottery type inside the lookback window, newest first."""
    cutoff = (today or date.today()) - timedelta(days=lookback_days)
    recent = [r for r in history if r.lottery_type == lottery_type and r.draw_date >= cutoff]
    return sorted(recent, key=lambda r: r.draw_date, reverse=True)


# ── Individual analyses ───────────────────────────────────────────

def analyze_number_patterns(analyses: Sequence[PredictionAccuracyRecord]) -> list[StatisticalInsight]:
    """How often predicted consecutive pairs were both drawn."""
    hits = attempts = 0
    for rec in analyses:
        actual = set(rec.actual_numbers)
        predicted = sorted(rec.predicted_numbers)
        for a, b in zip(predicted, predicted[1:]):
            if b == a + 1:
                attempts += 1
                if a in actual and b in actual:
                    hits += 1

    if attempts == 0:
        return []

    ratio = hits / attempts
    return [StatisticalInsight(
        type=InsightType.PATTERN,
        description=f"Consecutive number predictions have {ratio * 100:.1f}% accuracy",
        confidence=min(ratio + 0.3, 1.0),
        recommendation=(
            "Continue including consecutive numbers in predictions"
            if ratio > 0.3 else "Reduce consecutive number predictions"
        ),
        data=PatternInsightData(consecutive_hits=hits, total_consecutive_attempts=attempts, accuracy=ratio),
    )]


def analyze_number_frequency(analyses: Sequence[PredictionAccuracyRecord]) -> list[StatisticalInsight]:
    """Per-number predicted → appeared hit rate; top 5 of those predicted at least twice."""
    predicted: dict[int, int] = {}
    appeared: dict[int, int] = {}
    for rec in analyses:
        actual = set(rec.actual_numbers)
        for num in rec.predicted_numbers:
            predicted[num] = predicted.get(num, 0) + 1
            if num in actual:
                appeared[num] = appeared.get(num, 0) + 1

    performance = [
        NumberPerformance(number=n, accuracy=appeared.get(n, 0) / count, predictions=count)
        for n, count in predicted.items()
        if count >= 2
    ]
    best = sorted(performance, key=lambda p: (-p.accuracy, p.number))[:5]
    if not best:
        return []

    return [StatisticalInsight(
        type=InsightType.FREQUENCY,
        description=f"Numbers {', '.join(str(p.number) for p in best)} show highest prediction accuracy",
        confidence=0.6,
        recommendation="Consider including these high-performing numbers in future predictions",
        data=FrequencyInsightData(best_numbers=tuple(best)),
    )]


def analyze_number_ranges(
    analyses: Sequence[PredictionAccuracyRecord],
    number_range: tuple[int, int],
) -> list[StatisticalInsight]:
    """Hit rate of predicted numbers per low / mid / high third of the range."""
    if not analyses:
        return []
    lo, hi = number_range
    low_top = hi // 3
    mid_top = hi * 2 // 3
    bounds = {"low": (lo, low_top), "mid": (low_top + 1, mid_top), "high": (mid_top + 1, hi)}

    hits = {zone: 0 for zone in bounds}
    picks = {zone: 0 for zone in bounds}
    for rec in analyses:
        actual = set(rec.actual_numbers)
        for num in rec.predicted_numbers:
            zone = "low" if num <= low_top else "mid" if num <= mid_top else "high"
            picks[zone] += 1
            if num in actual:
                hits[zone] += 1

    rates = {zone: (hits[zone] / picks[zone] if picks[zone] else 0.0) for zone in bounds}
    best = max(reversed(list(rates)), key=rates.get)  # last of low/mid/high on ties
    zone_lo, zone_hi = bounds[best]

    return [StatisticalInsight(
        type=InsightType.RANGE,
        description=(
            f"{best} range numbers ({zone_lo}-{zone_hi}) show best accuracy: "
            f"{rates[best] * 100:.1f}%"
        ),
        confidence=0.5,
        recommendation=f"Focus more predictions on {best} range numbers",
        data=RangeInsightData(
            low=rates["low"], mid=rates["mid"], high=rates["high"], best_range=best, bounds=bounds,
        ),
    )]


def analyze_sum_patterns(analyses: Sequence[PredictionAccuracyRecord]) -> list[StatisticalInsight]:
    """Share of predictions whose sum landed within 10% of the drawn sum."""
    if not analyses:
        return []
    close = 0
    for rec in analyses:
        actual_sum = sum(rec.actual_numbers)
        if abs(sum(rec.predicted_numbers) - actual_sum) <= actual_sum * SUM_TOLERANCE:
            close += 1

    ratio = close / len(analyses)
    return [StatisticalInsight(
        type=InsightType.SUM,
        description=f"Sum predictions are accurate within 10% tolerance {ratio * 100:.1f}% of the time",
        confidence=0.4,
        recommendation=(
            "Continue using sum-based prediction strategies"
            if ratio > 0.3 else "Adjust sum calculation methods for better accuracy"
        ),
        data=SumInsightData(accuracy=ratio, hits=close, total=len(analyses)),
    )]


# ── Public API ────────────────────────────────────────────────────

def generate_insights(
    history: Sequence[PredictionAccuracyRecord],
    lottery_type: str,
    lookback_days: int = DEFAULT_LOOKBACK_DAYS,
    today: date | None = None,
    number_range: tuple[int, int] | None = None,
    min_records: int = MIN_RECORDS,
) -> list[StatisticalInsight]:
    """All insights for a lottery type, highest confidence first; [] when the sample is too small."""
    analyses = get_recent_analyses(history, lottery_type, lookback_days, today)
    if len(analyses) < min_records:
        log.debug(f"Only {len(analyses)} accuracy records for {lottery_type} — no insights")
        return []

    number_range = number_range or get_number_range(lottery_type)
    insights: list[StatisticalInsight] = []
    insights.extend(analyze_number_patterns(analyses))
    insights.extend(analyze_number_frequency(analyses))
    insights.extend(analyze_number_ranges(analyses, number_range))
    insights.extend(analyze_sum_patterns(analyses))

    log.info(f"Generated {len(insights)} insights from {len(analyses)} records ({lottery_type})")
    return sorted(insights, key=lambda i: i.confidence, reverse=True)


def get_accuracy_metrics(history: Sequence[PredictionAccuracyRecord]) -> AccuracyMetrics:
    """Aggregate accuracy across the whole history (oldest first, newest last)."""
    if not history:
        return AccuracyMetrics()

    accuracies = [r.accuracy for r in history]
    recent = accuracies[-RECENT_WINDOW:]
    prior = accuracies[-2 * RECENT_WINDOW:-RECENT_WINDOW]
    recent_avg = _mean(recent)
    prior_avg = _mean(prior) if prior else recent_avg

    grouped: dict[str, list[float]] = {}
    for rec in history:
        grouped.setdefault(rec.lottery_type, []).append(rec.accuracy)

    return AccuracyMetrics(
        total_predictions=len(history),
        average_accuracy=_mean(accuracies),
        best_accuracy=max(accuracies),
        worst_accuracy=min(accuracies),
        improvement_trend=recent_avg - prior_avg,
        recent_performance=recent_avg,
        by_lottery_type={
            lt: LotteryTypeMetrics(count=len(accs), average_accuracy=_mean(accs), best_accuracy=max(accs))
            for lt, accs in grouped.items()
        },
    )


def get_improvement_recommendations(
    history: Sequence[PredictionAccuracyRecord],
    lottery_type: str,
    lookback_days: int = DEFAULT_LOOKBACK_DAYS,
    today: date | None = None,
    number_range: tuple[int, int] | None = None,
    min_records: int = MIN_RECORDS,
) -> list[str]:
    insights = generate_insights(history, lottery_type, lookback_days, today, number_range, min_records)
    metrics = get_accuracy_metrics(history)
    recommendations: list[str] = []

    if metrics.improvement_trend < -0.05:
        recommendations.append("Prediction accuracy is declining. Consider adjusting the prediction algorithm.")
    if metrics.total_predictions and metrics.recent_performance < 0.15:
        recommendations.append("Recent predictions show low accuracy. Focus on hot numbers and recent patterns.")

    recommendations.extend(i.recommendation for i in insights if i.confidence > 0.7)

    if not recommendations:
        recommendations.append("Continue monitoring patterns and adjust predictions based on recent draw results.")
    return recommendations

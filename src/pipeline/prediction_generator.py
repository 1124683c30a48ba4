"""
src/pipeline/prediction_generator.py
Generate a new bộ số: ensemble numbers + special number + confidence,
with the accuracy history feeding insights back into the ensemble.
"""
from __future__ import annotations

from collections.abc import Sequence
from datetime import date

from src.models.confidence_scorer import score_confidence
from src.models.ensemble_predictor import EnsemblePredictor
from src.models.records import AccuracyMetrics, DrawRecord, PredictionCandidate, StatisticalInsight
from src.pipeline.accuracy_tracker import AccuracyTracker
from src.pipeline.insight_generator import (
    generate_insights,
    get_accuracy_metrics,
    get_improvement_recommendations,
)
from src.utils.config import LOTTERY_LABELS, get_model_config, get_special_range, has_special
from src.utils.history_store import AccuracyHistoryStore
from src.utils.logger import get_logger

log = get_logger("pipeline.generator")


def build_methodology(
    metrics: AccuracyMetrics,
    insights: Sequence[StatisticalInsight],
    base_prediction: PredictionCandidate | None,
) -> list[str]:
    methodology = ["Weighted rank voting across hot, smart-frequency, gap and pattern selectors"]
    if base_prediction is not None:
        methodology.append("External base prediction merged as an extra ensemble voter")
    methodology.append("Number frequency analysis from historical data")
    methodology.append("Gap analysis of overdue numbers")
    methodology.append("Even/odd balance and consecutive-number pattern constraints")
    if insights:
        methodology.append("Statistical insights from previous predictions")
    if metrics.total_predictions > 0:
        methodology.append("Self-learning from prediction accuracy history")
    methodology.append("Hot number identification from recent draws")
    return methodology


def build_insight_lines(
    metrics: AccuracyMetrics,
    insights: Sequence[StatisticalInsight],
    recommendations: Sequence[str],
    threshold: float,
) -> list[str]:
    lines = [i.description for i in insights if i.confidence > threshold][:3]
    if metrics.total_predictions > 0:
        lines.append(f"Recent prediction accuracy: {metrics.recent_performance * 100:.1f}%")
    lines.extend(recommendations[:2])
    return lines


def generate_prediction(
    lottery_type: str,
    draws: Sequence[DrawRecord],
    history_store: AccuracyHistoryStore,
    base_prediction: PredictionCandidate | None = None,
    today: date | None = None,
) -> PredictionCandidate:
    """
    Full flow:
    1. Load accuracy history → metrics, insights, recommendations
    2. Run ensemble (insights + optional base prediction as voters)
    3. Special number for Power 6/55
    4. Confidence score, methodology and insight lines
    """
    log.info(f"[GENERATE] Starting for {lottery_type} with {len(draws)} draws")

    config = get_model_config(lottery_type)
    number_range = tuple(config["number_range"])
    conf_cfg = config.get("confidence", {})
    ins_cfg = config.get("insights", {})
    threshold = conf_cfg.get("insight_threshold", 0.6)
    lookback_days = ins_cfg.get("lookback_days", 30)
    min_records = ins_cfg.get("min_records", 3)
    max_history = config.get("accuracy", {}).get("max_history", 100)

    # Step 1: Accuracy feedback
    history = AccuracyTracker(history_store, max_history=max_history).load_history()
    metrics = get_accuracy_metrics(history)
    insights = generate_insights(history, lottery_type, lookback_days, today, number_range, min_records)
    recommendations = get_improvement_recommendations(
        history, lottery_type, lookback_days, today, number_range, min_records
    )

    # Step 2: Ensemble
    ensemble = EnsemblePredictor(lottery_type, config)
    base_numbers = list(base_prediction.numbers) if base_prediction is not None else None
    numbers = ensemble.predict(draws, insights=insights, base_prediction=base_numbers)

    # Step 3: Special number
    special_number: int | None = None
    sp_range = get_special_range(lottery_type)
    if has_special(lottery_type) and sp_range:
        sp_lo, sp_hi = sp_range
        candidate = base_prediction.special_number if base_prediction is not None else None
        if candidate is None or candidate in numbers or not sp_lo <= candidate <= sp_hi:
            candidate = ensemble.freq_analyzer.select_special_number(draws, exclude=numbers, special_range=sp_range)
        special_number = candidate

    # Step 4: Confidence + explanation
    confidence = score_confidence(
        metrics,
        insights,
        history_length=len(draws),
        insight_threshold=threshold,
        data_sufficiency_draws=conf_cfg.get("data_sufficiency_draws", 20),
    )

    prediction = PredictionCandidate(
        numbers=tuple(numbers),
        confidence=confidence,
        special_number=special_number,
        methodology=tuple(build_methodology(metrics, insights, base_prediction)),
        insights=tuple(build_insight_lines(metrics, insights, recommendations, threshold)),
    )
    log.info(
        f"[GENERATE] {LOTTERY_LABELS.get(lottery_type, lottery_type)} → {list(prediction.numbers)}"
        + (f" | Special: {special_number}" if special_number is not None else "")
        + f" | confidence={confidence:.2f}"
    )
    return prediction

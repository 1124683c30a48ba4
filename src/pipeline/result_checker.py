"""
src/pipeline/result_checker.py
Dò kết quả: compare a stored prediction with the real draw, record the
accuracy and attach the Vietlott prize tier.
"""
from __future__ import annotations

from typing import Any

from src.models.records import DrawRecord, PredictionRecord
from src.pipeline.accuracy_tracker import AccuracyTracker
from src.utils.config import LOTTERY_LABELS
from src.utils.logger import get_logger

log = get_logger("pipeline.checker")


# ── Prize level logic ─────────────────────────────────────────────

def _prize_655(matched_count: int, jackpot2_matched: bool) -> str:
    """Power 6/55 prize levels."""
    if matched_count == 6:
        return "JACKPOT_1"
    if matched_count == 5 and jackpot2_matched:
        return "JACKPOT_2"
    if matched_count == 5:
        return "PRIZE_1"
    if matched_count == 4:
        return "PRIZE_2"
    if matched_count == 3:
        return "PRIZE_3"
    return "NO_PRIZE"


def _prize_645(matched_count: int) -> str:
    """Mega 6/45 prize levels."""
    if matched_count == 6:
        return "JACKPOT"
    if matched_count == 5:
        return "PRIZE_1"
    if matched_count == 4:
        return "PRIZE_2"
    if matched_count == 3:
        return "PRIZE_3"
    return "NO_PRIZE"


def get_prize_level(lottery_type: str, predicted: tuple[int, ...], draw: DrawRecord, matched_count: int) -> str:
    if lottery_type == "power_655":
        # Jackpot 2: the drawn power number is among the six picked numbers
        j2_matched = draw.special_number is not None and draw.special_number in predicted
        return _prize_655(matched_count, j2_matched)
    if lottery_type == "mega_645":
        return _prize_645(matched_count)
    return "NO_PRIZE"


# ── Main check function ───────────────────────────────────────────

def check_result(prediction: PredictionRecord, draw: DrawRecord, tracker: AccuracyTracker) -> dict[str, Any]:
    """
    1. Compare prediction vs draw and append to accuracy history
    2. Compute prize level
    3. Return a summary dict for callers (notifications, CLI)
    """
    log.info(f"[CHECK] {prediction.lottery_type} draw={draw.draw_id} prediction={prediction.prediction_id}")

    record = tracker.analyze_prediction(prediction, draw)
    prize_level = get_prize_level(prediction.lottery_type, record.predicted_numbers, draw, record.exact_matches)

    log.info(f"[CHECK] {prediction.lottery_type} → {prize_level} | {record.exact_matches} trùng {list(record.hot_numbers)}")
    return {
        "success": True,
        "lottery_type": prediction.lottery_type,
        "lottery_label": LOTTERY_LABELS.get(prediction.lottery_type, prediction.lottery_type),
        "draw_id": draw.draw_id,
        "draw_date": draw.draw_date.isoformat(),
        "predicted_nums": list(record.predicted_numbers),
        "predicted_special": record.special_number_predicted,
        "actual_numbers": list(record.actual_numbers),
        "actual_special": record.special_number_actual,
        "matched_numbers": list(record.hot_numbers),
        "matched_count": record.exact_matches,
        "special_matched": record.special_match,
        "accuracy": record.accuracy,
        "prize_level": prize_level,
    }

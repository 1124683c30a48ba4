"""
src/pipeline/accuracy_tracker.py
Compare a stored prediction with the real draw and append the outcome to
the accuracy history (newest last, capped at the most recent 100 entries).
"""
from __future__ import annotations

import threading

from src.models.records import (
    PICK_COUNT,
    DrawRecord,
    LotteryTypeMismatchError,
    PredictionAccuracyRecord,
    PredictionRecord,
)
from src.utils.history_store import AccuracyHistoryStore
from src.utils.logger import get_logger

log = get_logger("pipeline.accuracy")

MAX_HISTORY = 100


def compare_prediction(prediction: PredictionRecord, draw: DrawRecord) -> PredictionAccuracyRecord:
    """Pure comparison of one prediction against the draw it targeted."""
    if prediction.lottery_type != draw.lottery_type:
        raise LotteryTypeMismatchError(
            f"Lottery type mismatch between prediction ({prediction.lottery_type}) "
            f"and result ({draw.lottery_type})"
        )

    predicted = tuple(sorted(prediction.numbers))
    actual = tuple(sorted(draw.numbers))
    predicted_set, actual_set = set(predicted), set(actual)

    hot = tuple(n for n in predicted if n in actual_set)
    exact_matches = len(hot)
    special_match = (
        prediction.special_number is not None
        and draw.special_number is not None
        and prediction.special_number == draw.special_number
    )

    return PredictionAccuracyRecord(
        prediction_id=prediction.prediction_id,
        draw_date=draw.draw_date,
        lottery_type=prediction.lottery_type,
        predicted_numbers=predicted,
        actual_numbers=actual,
        exact_matches=exact_matches,
        partial_matches=min(exact_matches, len(predicted) - exact_matches),
        special_match=special_match,
        accuracy=exact_matches / PICK_COUNT,
        hot_numbers=hot,
        missed_numbers=tuple(n for n in actual if n not in predicted_set),
        over_predicted=tuple(n for n in predicted if n not in actual_set),
        special_number_predicted=prediction.special_number,
        special_number_actual=draw.special_number,
    )


class AccuracyTracker:
    """Owns the append-only accuracy history behind an injected store."""

    def __init__(self, store: AccuracyHistoryStore, max_history: int = MAX_HISTORY):
        self.store = store
        self.max_history = max_history
        self._lock = threading.Lock()

    def load_history(self) -> list[PredictionAccuracyRecord]:
        return [PredictionAccuracyRecord.from_dict(row) for row in self.store.load()]

    def analyze_prediction(self, prediction: PredictionRecord, actual_draw: DrawRecord) -> PredictionAccuracyRecord:
        record = compare_prediction(prediction, actual_draw)

        with self._lock:
            history = self.store.load()
            history.append(record.to_dict())
            evicted = max(0, len(history) - self.max_history)
            self.store.save(history[evicted:])

        if evicted:
            log.debug(f"Evicted {evicted} oldest accuracy record(s)")
        log.info(
            f"[ACCURACY] {prediction.lottery_type} {prediction.prediction_id} → "
            f"{record.exact_matches} trùng {list(record.hot_numbers)} (accuracy={record.accuracy:.2f})"
        )
        return record

    def clear(self) -> None:
        with self._lock:
            self.store.clear()
        log.info("Accuracy history cleared")


def record_accuracy(
    prediction: PredictionRecord,
    actual_draw: DrawRecord,
    store: AccuracyHistoryStore,
    max_history: int = MAX_HISTORY,
) -> PredictionAccuracyRecord:
    return AccuracyTracker(store, max_history=max_history).analyze_prediction(prediction, actual_draw)

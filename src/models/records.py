"""
src/models/records.py
Typed records shared by the analyzers, the ensemble and the accuracy tracker.

Draw sequences are always newest-first: index 0 is the most recent draw.
Callers guarantee the ordering and the validity of each draw (six distinct
numbers inside the lottery's range); the analyzers do not re-validate.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from enum import Enum
from typing import Any, Union

PICK_COUNT = 6


class LotteryTypeMismatchError(ValueError):
    """A prediction was compared against a draw from another lottery."""


def _parse_date(value: Any) -> date:
    if isinstance(value, date):
        return value
    return date.fromisoformat(str(value)[:10])


# ── Draws ─────────────────────────────────────────────────────────

@dataclass(frozen=True)
class DrawRecord:
    draw_id: str
    draw_date: date
    numbers: tuple[int, ...]
    lottery_type: str
    special_number: int | None = None

    @property
    def number_set(self) -> frozenset[int]:
        return frozenset(self.numbers)


# ── Per-number statistics ─────────────────────────────────────────

@dataclass(frozen=True)
class NumberStat:
    number: int
    count: int
    percentage: float
    last_seen_date: date | None = None
    days_since_last_seen: int | None = None


@dataclass(frozen=True)
class GapStat:
    number: int
    historical_gaps: tuple[int, ...]
    average_gap: float
    current_gap: int

    @property
    def due_ratio(self) -> float:
        return self.current_gap / self.average_gap if self.average_gap else 0.0


@dataclass(frozen=True)
class SumRange:
    minimum: int
    maximum: int
    average: float


@dataclass(frozen=True)
class PatternProfile:
    """Advisory distribution targets derived from recent draws."""
    optimal_even: int
    sum_range: SumRange
    average_consecutive_pairs: float
    last_digit_distribution: dict[int, int]
    draws_analyzed: int


# ── Predictions ───────────────────────────────────────────────────

@dataclass(frozen=True)
class PredictionCandidate:
    numbers: tuple[int, ...]
    confidence: float
    special_number: int | None = None
    methodology: tuple[str, ...] = ()
    insights: tuple[str, ...] = ()


@dataclass(frozen=True)
class PredictionRecord:
    """A stored prediction waiting for the draw it targets."""
    prediction_id: str
    prediction_date: date
    lottery_type: str
    numbers: tuple[int, ...]
    special_number: int | None = None
    strategy: str = "ENSEMBLE"

    @classmethod
    def from_candidate(
        cls,
        candidate: PredictionCandidate,
        prediction_id: str,
        lottery_type: str,
        prediction_date: date | None = None,
    ) -> "PredictionRecord":
        return cls(
            prediction_id=prediction_id,
            prediction_date=prediction_date or date.today(),
            lottery_type=lottery_type,
            numbers=tuple(candidate.numbers),
            special_number=candidate.special_number,
        )


@dataclass(frozen=True)
class PredictionAccuracyRecord:
    prediction_id: str
    draw_date: date
    lottery_type: str
    predicted_numbers: tuple[int, ...]
    actual_numbers: tuple[int, ...]
    exact_matches: int
    partial_matches: int
    special_match: bool
    accuracy: float
    hot_numbers: tuple[int, ...]
    missed_numbers: tuple[int, ...]
    over_predicted: tuple[int, ...]
    special_number_predicted: int | None = None
    special_number_actual: int | None = None

    def to_dict(self) -> dict[str, Any]:
        """Serialized form used by every accuracy history store."""
        return {
            "predictionId": self.prediction_id,
            "date": self.draw_date.isoformat(),
            "lotteryType": self.lottery_type,
            "predictedNumbers": list(self.predicted_numbers),
            "actualNumbers": list(self.actual_numbers),
            "specialNumberPredicted": self.special_number_predicted,
            "specialNumberActual": self.special_number_actual,
            "matches": {
                "exactMatches": self.exact_matches,
                "partialMatches": self.partial_matches,
                "specialMatch": self.special_match,
                "accuracy": self.accuracy,
            },
            "analysis": {
                "hotNumbers": list(self.hot_numbers),
                "missedNumbers": list(self.missed_numbers),
                "overPredicted": list(self.over_predicted),
            },
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "PredictionAccuracyRecord":
        matches = data.get("matches", {})
        analysis = data.get("analysis", {})
        return cls(
            prediction_id=str(data["predictionId"]),
            draw_date=_parse_date(data["date"]),
            lottery_type=data["lotteryType"],
            predicted_numbers=tuple(data["predictedNumbers"]),
            actual_numbers=tuple(data["actualNumbers"]),
            exact_matches=int(matches.get("exactMatches", 0)),
            partial_matches=int(matches.get("partialMatches", 0)),
            special_match=bool(matches.get("specialMatch", False)),
            accuracy=float(matches.get("accuracy", 0.0)),
            hot_numbers=tuple(analysis.get("hotNumbers", [])),
            missed_numbers=tuple(analysis.get("missedNumbers", [])),
            over_predicted=tuple(analysis.get("overPredicted", [])),
            special_number_predicted=data.get("specialNumberPredicted"),
            special_number_actual=data.get("specialNumberActual"),
        )


# ── Insights ──────────────────────────────────────────────────────

class InsightType(str, Enum):
    PATTERN = "pattern"
    FREQUENCY = "frequency"
    RANGE = "range"
    SUM = "sum"


@dataclass(frozen=True)
class PatternInsightData:
    consecutive_hits: int
    total_consecutive_attempts: int
    accuracy: float


@dataclass(frozen=True)
class NumberPerformance:
    number: int
    accuracy: float
    predictions: int


@dataclass(frozen=True)
class FrequencyInsightData:
    best_numbers: tuple[NumberPerformance, ...]


@dataclass(frozen=True)
class RangeInsightData:
    low: float
    mid: float
    high: float
    best_range: str
    bounds: dict[str, tuple[int, int]] = field(default_factory=dict)


@dataclass(frozen=True)
class SumInsightData:
    accuracy: float
    hits: int
    total: int


InsightData = Union[PatternInsightData, FrequencyInsightData, RangeInsightData, SumInsightData]


@dataclass(frozen=True)
class StatisticalInsight:
    type: InsightType
    description: str
    confidence: float
    recommendation: str
    data: InsightData


# ── Aggregates ────────────────────────────────────────────────────

@dataclass(frozen=True)
class LotteryTypeMetrics:
    count: int
    average_accuracy: float
    best_accuracy: float


@dataclass(frozen=True)
class AccuracyMetrics:
    total_predictions: int = 0
    average_accuracy: float = 0.0
    best_accuracy: float = 0.0
    worst_accuracy: float = 0.0
    improvement_trend: float = 0.0
    recent_performance: float = 0.0
    by_lottery_type: dict[str, LotteryTypeMetrics] = field(default_factory=dict)

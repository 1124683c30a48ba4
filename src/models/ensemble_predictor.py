"""
src/models/ensemble_predictor.py
Rank-weighted voting ensemble: hot + smart frequency + gap + pattern
(+ optional external base prediction and insight feedback) → 6 numbers.
"""
from __future__ import annotations

from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass
from typing import Any

from src.models.records import (
    PICK_COUNT,
    DrawRecord,
    FrequencyInsightData,
    PatternInsightData,
    StatisticalInsight,
)
from src.models.statistical.frequency_analyzer import FrequencyAnalyzer
from src.models.statistical.gap_analyzer import GapAnalyzer
from src.models.statistical.pattern_analyzer import PatternAnalyzer
from src.utils.logger import get_logger

log = get_logger("ensemble")

WEIGHT_MIN = 0.10
WEIGHT_MAX = 0.60

# Frequency-insight numbers must have hit at least this often to vote
INSIGHT_HIT_RATE = 0.3


@dataclass(frozen=True)
class WeightedCandidateSet:
    """One voter: its numbers in rank order (index 0 = most confident)."""
    name: str
    numbers: tuple[int, ...]
    weight: float


def combine_ensemble(
    candidate_sets: Iterable[WeightedCandidateSet] | Mapping[str, WeightedCandidateSet],
    number_range: tuple[int, int] = (1, 55),
    n_picks: int = PICK_COUNT,
) -> list[int]:
    """
    Each voter adds weight * (n_picks - i) to the number at rank i.
    Returns the n_picks best-scored numbers (ties → lower number), ascending.
    """
    if isinstance(candidate_sets, Mapping):
        candidate_sets = candidate_sets.values()
    lo, hi = number_range
    scores: dict[int, float] = {n: 0.0 for n in range(lo, hi + 1)}

    # Fixed accumulation order keeps float sums independent of input order
    for voter in sorted(candidate_sets, key=lambda v: (v.name, v.numbers, v.weight)):
        for idx, num in enumerate(voter.numbers[:n_picks]):
            if num in scores:
                scores[num] += voter.weight * (n_picks - idx)

    best = sorted(scores, key=lambda n: (-scores[n], n))[:n_picks]
    return sorted(best)


class EnsemblePredictor:
    """
    Runs the statistical selectors and combines their rankings via
    weighted voting to pick the 6 numbers.
    """

    def __init__(self, lottery_type: str, config: dict[str, Any]):
        self.lottery_type = lottery_type
        self.config = config
        number_range = tuple(config["number_range"])
        self.lo, self.hi = number_range
        self.n_picks = config.get("pick_count", PICK_COUNT)

        ens = config["ensemble"]
        self.weights: dict[str, float] = dict(ens["weights"])
        self.base_prediction_weight = ens.get("base_prediction_weight", 0.20)
        self.insight_weight = ens.get("insight_weight", 0.15)
        self.hot_recent_weight = ens.get("hot_recent_weight", 0.10)

        # Validate weights sum ~1.0
        total = sum(self.weights.values())
        if abs(total - 1.0) > 0.01:
            log.warning(f"Ensemble weights sum to {total:.3f}, normalizing.")
            self.weights = {k: v / total for k, v in self.weights.items()}

        freq_cfg = config.get("frequency", {})
        gap_cfg = config.get("gap", {})
        pat_cfg = config.get("pattern", {})
        self.hot_window = freq_cfg.get("hot_window", 10)

        self.freq_analyzer = FrequencyAnalyzer(
            number_range=number_range,
            smart_recent_window=freq_cfg.get("smart_recent_window", 50),
            smart_all_time_window=freq_cfg.get("smart_all_time_window", 200),
            smart_recent_weight=freq_cfg.get("smart_recent_weight", 0.7),
        )
        self.gap_analyzer = GapAnalyzer(
            number_range=number_range,
            due_threshold=gap_cfg.get("due_threshold", 1.2),
            default_average_gap=gap_cfg.get("default_average_gap", 10.0),
        )
        self.pattern_analyzer = PatternAnalyzer(
            number_range=number_range,
            window=pat_cfg.get("window", 30),
            frequency_window=pat_cfg.get("frequency_window", 100),
            max_consecutive_pairs=pat_cfg.get("max_consecutive_pairs", 2),
        )

    # ── Weights ───────────────────────────────────────────────────

    def update_weights(self, **weights: float) -> None:
        """Adjust ensemble weights with min/max constraints."""
        for name, value in weights.items():
            if name not in self.weights:
                raise ValueError(f"Unknown ensemble voter: {name}")
            self.weights[name] = max(WEIGHT_MIN, min(WEIGHT_MAX, value))
        # Normalize
        total = sum(self.weights.values())
        self.weights = {k: v / total for k, v in self.weights.items()}
        log.info("Weights updated: " + " ".join(f"{k}={v:.3f}" for k, v in self.weights.items()))

    # ── Voters ────────────────────────────────────────────────────

    def _insight_feedback(self, insights: Sequence[StatisticalInsight]) -> tuple[list[int], int]:
        """Numbers to promote and the consecutive-pair limit to use."""
        promoted: list[int] = []
        max_pairs = self.pattern_analyzer.max_consecutive_pairs
        for insight in insights:
            data = insight.data
            if isinstance(data, FrequencyInsightData):
                for perf in data.best_numbers:
                    if perf.accuracy > INSIGHT_HIT_RATE and self.lo <= perf.number <= self.hi \
                            and perf.number not in promoted:
                        promoted.append(perf.number)
            elif isinstance(data, PatternInsightData):
                if data.accuracy < INSIGHT_HIT_RATE:
                    max_pairs = min(max_pairs, 1)
        return promoted[: self.n_picks], max_pairs

    def build_voters(
        self,
        draws: Sequence[DrawRecord],
        insights: Sequence[StatisticalInsight] = (),
        base_prediction: Sequence[int] | None = None,
    ) -> list[WeightedCandidateSet]:
        """All weighted voters for this draw history, weights normalized to 1.0."""
        promoted, max_pairs = self._insight_feedback(insights)
        pattern = self.pattern_analyzer
        if max_pairs != pattern.max_consecutive_pairs:
            log.info(f"Pattern insight: tightening consecutive-pair limit to {max_pairs}")
            pattern = PatternAnalyzer(
                number_range=(self.lo, self.hi),
                window=pattern.window,
                frequency_window=pattern.frequency_window,
                max_consecutive_pairs=max_pairs,
            )

        raw: list[tuple[str, list[int], float]] = [
            ("hot", self.freq_analyzer.get_hot_numbers(draws, self.n_picks), self.weights.get("hot", 0.0)),
            ("smart", self.freq_analyzer.get_smart_numbers(draws, self.n_picks), self.weights.get("smart", 0.0)),
            ("gap", self.gap_analyzer.select_due_numbers(draws, self.n_picks), self.weights.get("gap", 0.0)),
            ("pattern", pattern.select_numbers(draws, self.n_picks), self.weights.get("pattern", 0.0)),
            ("hot_recent", self.freq_analyzer.get_hot_numbers(draws, self.n_picks, window=self.hot_window),
             self.hot_recent_weight if draws else 0.0),
        ]
        if promoted:
            raw.append(("insight_frequency", promoted, self.insight_weight))
        if base_prediction:
            base = [n for n in dict.fromkeys(base_prediction) if self.lo <= n <= self.hi]
            raw.append(("base_prediction", base, self.base_prediction_weight))

        raw = [(name, nums, w) for name, nums, w in raw if w > 0 and nums]
        total = sum(w for _, _, w in raw) or 1.0
        return [WeightedCandidateSet(name, tuple(nums), w / total) for name, nums, w in raw]

    # ── Prediction ────────────────────────────────────────────────

    def predict(
        self,
        draws: Sequence[DrawRecord],
        insights: Sequence[StatisticalInsight] = (),
        base_prediction: Sequence[int] | None = None,
    ) -> list[int]:
        """Run all voters and return the n_picks consensus numbers, ascending."""
        if not draws:
            log.warning(f"No draw history for {self.lottery_type} — ensemble uses neutral defaults.")
        voters = self.build_voters(draws, insights, base_prediction)
        for voter in voters:
            log.debug(f"voter {voter.name} w={voter.weight:.3f} → {list(voter.numbers)}")
        numbers = combine_ensemble(voters, number_range=(self.lo, self.hi), n_picks=self.n_picks)
        log.info(f"Ensemble prediction ({self.lottery_type}): {numbers}")
        return numbers

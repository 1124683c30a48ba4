"""
src/models/statistical/gap_analyzer.py
Score numbers by their gap (draws since last appearance) relative to the
average spacing between their past appearances. Numbers whose current gap
exceeds the average by the due threshold are "due".
"""
from __future__ import annotations

from collections.abc import Sequence

import numpy as np

from src.models.records import PICK_COUNT, DrawRecord, GapStat
from src.models.statistical.frequency_analyzer import FrequencyAnalyzer
from src.utils.logger import get_logger

log = get_logger("model.gap")

DUE_THRESHOLD = 1.2
DEFAULT_AVERAGE_GAP = 10.0


class GapAnalyzer:
    """Track per-number spacing between appearances and flag due numbers."""

    def __init__(
        self,
        number_range: tuple[int, int],
        due_threshold: float = DUE_THRESHOLD,
        default_average_gap: float = DEFAULT_AVERAGE_GAP,
    ):
        self.lo, self.hi = number_range
        self.due_threshold = due_threshold
        self.default_average_gap = default_average_gap

    def get_gap_stats(self, draws: Sequence[DrawRecord]) -> list[GapStat]:
        """
        One GapStat per number, ascending by number.
        current_gap = index of the most recent appearance (0 = last draw),
        or len(draws) if the number was never drawn.
        """
        n_draws = len(draws)
        appearances: dict[int, list[int]] = {n: [] for n in range(self.lo, self.hi + 1)}

        # Oldest → newest, recorded as newest-first indices
        for idx in range(n_draws - 1, -1, -1):
            for num in draws[idx].numbers:
                if num in appearances:
                    appearances[num].append(idx)

        stats = []
        for num, seen_at in appearances.items():
            gaps = tuple(prev - cur for prev, cur in zip(seen_at, seen_at[1:]))
            avg_gap = float(np.mean(gaps)) if gaps else self.default_average_gap
            current_gap = seen_at[-1] if seen_at else n_draws
            stats.append(GapStat(
                number=num,
                historical_gaps=gaps,
                average_gap=avg_gap,
                current_gap=current_gap,
            ))
        return stats

    def get_due_ratios(self, draws: Sequence[DrawRecord]) -> dict[int, float]:
        return {s.number: s.due_ratio for s in self.get_gap_stats(draws)}

    def get_due_numbers(self, draws: Sequence[DrawRecord]) -> list[int]:
        """Every due number, most overdue first (ties → lower number)."""
        ratios = self.get_due_ratios(draws)
        due = [n for n, r in ratios.items() if r > self.due_threshold]
        return sorted(due, key=lambda n: (-ratios[n], n))

    def select_due_numbers(self, draws: Sequence[DrawRecord], n_picks: int = PICK_COUNT) -> list[int]:
        """
        Up to n_picks due numbers in rank order, padded with the most
        frequent numbers when too few qualify.
        """
        picks = self.get_due_numbers(draws)[:n_picks]
        if len(picks) < n_picks:
            log.debug(f"Only {len(picks)} due numbers — padding from frequency ranking")
            freq = FrequencyAnalyzer((self.lo, self.hi))
            for num in freq.rank_numbers(draws):
                if len(picks) >= n_picks:
                    break
                if num not in picks:
                    picks.append(num)
        return picks


def compute_gaps(draws: Sequence[DrawRecord], number_range: tuple[int, int] = (1, 55)) -> list[GapStat]:
    return GapAnalyzer(number_range).get_gap_stats(draws)


def select_due_numbers(draws: Sequence[DrawRecord], max_number: int = 55) -> list[int]:
    return GapAnalyzer((1, max_number)).select_due_numbers(draws)

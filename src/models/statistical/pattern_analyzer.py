"""
src/models/statistical/pattern_analyzer.py
Distributional targets (odd/even balance, sum range, consecutive runs,
last digits) from recent draws, and a pattern-constrained number selector.
"""
from __future__ import annotations

from collections import Counter
from collections.abc import Sequence

import numpy as np

from src.models.records import PICK_COUNT, DrawRecord, PatternProfile, SumRange
from src.models.statistical.frequency_analyzer import FrequencyAnalyzer
from src.utils.logger import get_logger

log = get_logger("model.pattern")


def count_consecutive_pairs(numbers: Sequence[int]) -> int:
    """Number of (n, n+1) pairs contained in `numbers`."""
    present = set(numbers)
    return sum(1 for n in present if n + 1 in present)


class PatternAnalyzer:
    """Derive advisory pattern targets and pick numbers that respect them."""

    def __init__(
        self,
        number_range: tuple[int, int],
        window: int = 30,
        frequency_window: int = 100,
        max_consecutive_pairs: int = 2,
    ):
        self.lo, self.hi = number_range
        self.window = window
        self.frequency_window = frequency_window
        self.max_consecutive_pairs = max_consecutive_pairs

    def analyze(self, draws: Sequence[DrawRecord]) -> PatternProfile:
        recent = draws[: self.window]
        if not recent:
            return PatternProfile(
                optimal_even=PICK_COUNT // 2,
                sum_range=SumRange(minimum=0, maximum=0, average=0.0),
                average_consecutive_pairs=0.0,
                last_digit_distribution={d: 0 for d in range(10)},
                draws_analyzed=0,
            )

        evens = [sum(1 for n in d.numbers if n % 2 == 0) for d in recent]
        sums = [sum(d.numbers) for d in recent]
        consecutive = [count_consecutive_pairs(d.numbers) for d in recent]
        digits = Counter(n % 10 for d in recent for n in d.numbers)

        # Half-up rounding
        optimal_even = int(float(np.mean(evens)) + 0.5)
        return PatternProfile(
            optimal_even=max(0, min(PICK_COUNT, optimal_even)),
            sum_range=SumRange(
                minimum=int(min(sums)),
                maximum=int(max(sums)),
                average=float(np.mean(sums)),
            ),
            average_consecutive_pairs=float(np.mean(consecutive)),
            last_digit_distribution={d: digits.get(d, 0) for d in range(10)},
            draws_analyzed=len(recent),
        )

    def select_numbers(self, draws: Sequence[DrawRecord], n_picks: int = PICK_COUNT) -> list[int]:
        """
        Greedy pick from the frequency-ranked pool honouring the even/odd
        quota and the consecutive-pair limit. Constraints are relaxed in
        order (parity, then consecutive) so exactly n_picks come back.
        """
        profile = self.analyze(draws)
        pool = FrequencyAnalyzer((self.lo, self.hi)).rank_numbers(draws, window=self.frequency_window)

        target_even = min(profile.optimal_even, n_picks)
        quota = {0: target_even, 1: n_picks - target_even}
        taken = {0: 0, 1: 0}
        selected: list[int] = []

        def fits_consecutive(num: int) -> bool:
            return count_consecutive_pairs(selected + [num]) <= self.max_consecutive_pairs

        for num in pool:
            if len(selected) >= n_picks:
                break
            parity = num % 2
            if taken[parity] < quota[parity] and fits_consecutive(num):
                selected.append(num)
                taken[parity] += 1

        if len(selected) < n_picks:
            log.debug(f"Parity quota unmet ({taken}) — relaxing even/odd balance")
            for num in pool:
                if len(selected) >= n_picks:
                    break
                if num not in selected and fits_consecutive(num):
                    selected.append(num)

        if len(selected) < n_picks:
            log.debug("Relaxing consecutive-pair limit")
            for num in pool:
                if len(selected) >= n_picks:
                    break
                if num not in selected:
                    selected.append(num)

        return selected


def select_pattern_based(draws: Sequence[DrawRecord], max_number: int = 55) -> list[int]:
    return PatternAnalyzer((1, max_number)).select_numbers(draws)

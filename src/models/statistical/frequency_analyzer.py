"""
src/models/statistical/frequency_analyzer.py
Hot/cold number statistics based on appearance counts over a window of draws.
"""
from __future__ import annotations

from collections import Counter
from collections.abc import Iterable, Sequence
from datetime import date

import numpy as np

from src.models.records import PICK_COUNT, DrawRecord, NumberStat


class FrequencyAnalyzer:
    """Count how often each number appears in (a window of) recent draws."""

    def __init__(
        self,
        number_range: tuple[int, int],
        window: int | None = None,
        smart_recent_window: int = 50,
        smart_all_time_window: int = 200,
        smart_recent_weight: float = 0.7,
    ):
        self.lo, self.hi = number_range
        self.window = window  # None = whole history
        self.smart_recent_window = smart_recent_window
        self.smart_all_time_window = smart_all_time_window
        self.smart_recent_weight = smart_recent_weight

    def _recent(self, draws: Sequence[DrawRecord], window: int | None = None) -> Sequence[DrawRecord]:
        window = self.window if window is None else window
        return draws if window is None else draws[:window]

    def get_counts(self, draws: Sequence[DrawRecord], window: int | None = None) -> dict[int, int]:
        """Returns {number: appearances} for every number in range."""
        recent = self._recent(draws, window)
        seen = [n for draw in recent for n in draw.numbers if self.lo <= n <= self.hi]
        counts = np.bincount(np.array(seen, dtype=int) - self.lo, minlength=self.hi - self.lo + 1)
        return {self.lo + idx: int(c) for idx, c in enumerate(counts)}

    def get_percentages(self, draws: Sequence[DrawRecord], window: int | None = None) -> dict[int, float]:
        recent = self._recent(draws, window)
        counts = self.get_counts(recent, window=len(recent))
        total = len(recent) * PICK_COUNT
        return {n: (c / total * 100 if total else 0.0) for n, c in counts.items()}

    def get_stats(self, draws: Sequence[DrawRecord], today: date | None = None) -> list[NumberStat]:
        """
        NumberStat for every number in range, sorted by count desc,
        ties broken by the lower number.
        """
        today = today or date.today()
        recent = self._recent(draws)
        counts = self.get_counts(recent, window=len(recent))
        total = len(recent) * PICK_COUNT

        last_seen: dict[int, date] = {}
        for draw in recent:
            for num in draw.numbers:
                last_seen.setdefault(num, draw.draw_date)

        stats = []
        for num, count in counts.items():
            seen = last_seen.get(num)
            stats.append(NumberStat(
                number=num,
                count=count,
                percentage=count / total * 100 if total else 0.0,
                last_seen_date=seen,
                days_since_last_seen=(today - seen).days if seen else None,
            ))
        return sorted(stats, key=lambda s: (-s.count, s.number))

    def rank_numbers(self, draws: Sequence[DrawRecord], window: int | None = None) -> list[int]:
        """All numbers in range, most frequent first (ties → lower number)."""
        counts = self.get_counts(draws, window)
        return sorted(counts, key=lambda n: (-counts[n], n))

    def get_hot_numbers(self, draws: Sequence[DrawRecord], top_n: int = PICK_COUNT,
                        window: int | None = None) -> list[int]:
        return self.rank_numbers(draws, window)[:top_n]

    def get_cold_numbers(self, draws: Sequence[DrawRecord], bottom_n: int = PICK_COUNT) -> list[int]:
        counts = self.get_counts(draws)
        return sorted(counts, key=lambda n: (counts[n], n))[:bottom_n]

    # ── Smart frequency ───────────────────────────────────────────

    def get_smart_scores(self, draws: Sequence[DrawRecord]) -> dict[int, float]:
        """
        Blend recent and long-run appearance percentages so that a number
        hot in the last few weeks outranks one that was hot years ago.
        """
        recent = self.get_percentages(draws, window=self.smart_recent_window)
        all_time = self.get_percentages(draws, window=self.smart_all_time_window)
        w = self.smart_recent_weight
        return {n: recent[n] * w + all_time[n] * (1 - w) for n in recent}

    def get_smart_numbers(self, draws: Sequence[DrawRecord], n_picks: int = PICK_COUNT) -> list[int]:
        scores = self.get_smart_scores(draws)
        return sorted(scores, key=lambda n: (-scores[n], n))[:n_picks]

    # ── Special number ────────────────────────────────────────────

    def select_special_number(
        self,
        draws: Sequence[DrawRecord],
        exclude: Iterable[int] = (),
        special_range: tuple[int, int] | None = None,
    ) -> int:
        """
        Most frequent historical special number not in `exclude`.
        Falls back to the hottest main number when no special qualifies.
        """
        lo, hi = special_range or (self.lo, self.hi)
        excluded = set(exclude)
        specials = Counter(
            d.special_number for d in draws
            if d.special_number is not None and lo <= d.special_number <= hi
        )
        ranked = sorted(specials, key=lambda n: (-specials[n], n))
        for num in ranked:
            if num not in excluded:
                return num
        for num in self.rank_numbers(draws):
            if lo <= num <= hi and num not in excluded:
                return num
        raise ValueError(f"No special number available in [{lo},{hi}] outside {sorted(excluded)}")


def compute_frequency(
    draws: Sequence[DrawRecord],
    number_range: tuple[int, int] = (1, 55),
    window: int | None = None,
    today: date | None = None,
) -> list[NumberStat]:
    """NumberStat for each number in `number_range`, most frequent first."""
    return FrequencyAnalyzer(number_range, window=window).get_stats(draws, today=today)

"""tests/test_models.py"""
import copy
import math
from datetime import date, timedelta

import pytest

from src.models.confidence_scorer import score_confidence
from src.models.ensemble_predictor import EnsemblePredictor, WeightedCandidateSet, combine_ensemble
from src.models.records import (
    AccuracyMetrics,
    DrawRecord,
    FrequencyInsightData,
    InsightType,
    NumberPerformance,
    PatternInsightData,
    StatisticalInsight,
    SumInsightData,
)
from src.models.statistical.frequency_analyzer import FrequencyAnalyzer, compute_frequency
from src.models.statistical.gap_analyzer import GapAnalyzer, compute_gaps, select_due_numbers
from src.models.statistical.pattern_analyzer import (
    PatternAnalyzer,
    count_consecutive_pairs,
    select_pattern_based,
)
from src.utils.config import get_model_config


def make_draws(number_lists, lottery_type="power_655", newest=date(2024, 3, 1)):
    """Newest-first DrawRecords, one every other day going back."""
    return [
        DrawRecord(
            draw_id=str(1000 - idx),
            draw_date=newest - timedelta(days=2 * idx),
            numbers=tuple(nums),
            lottery_type=lottery_type,
        )
        for idx, nums in enumerate(number_lists)
    ]


HISTORY_655 = make_draws([
    [5, 14, 22, 33, 41, 52],
    [3, 11, 19, 28, 37, 50],
    [7, 14, 24, 35, 43, 54],
    [2, 9, 22, 30, 41, 49],
    [8, 17, 25, 36, 44, 53],
])


def _assert_valid_pick(nums, max_number=55):
    assert len(nums) == 6
    assert len(set(nums)) == 6
    assert all(1 <= n <= max_number for n in nums)


class TestFrequencyAnalyzer:
    def setup_method(self):
        self.fa = FrequencyAnalyzer(number_range=(1, 55))

    def test_returns_all_numbers(self):
        stats = self.fa.get_stats(HISTORY_655)
        assert len(stats) == 55
        assert {s.number for s in stats} == set(range(1, 56))

    def test_counts_sum_to_six_per_draw(self):
        stats = compute_frequency(HISTORY_655)
        assert sum(s.count for s in stats) == 6 * len(HISTORY_655)
        assert sum(s.percentage for s in stats) == pytest.approx(100.0)

    def test_sorted_by_count_then_number(self):
        stats = self.fa.get_stats(HISTORY_655)
        keys = [(-s.count, s.number) for s in stats]
        assert keys == sorted(keys)

    def test_hot_numbers_are_frequent(self):
        # 14, 22, 41 appear twice in HISTORY_655
        assert self.fa.get_hot_numbers(HISTORY_655, top_n=3) == [14, 22, 41]

    def test_empty_history_zero_counts(self):
        stats = compute_frequency([], number_range=(1, 45))
        assert len(stats) == 45
        assert all(s.count == 0 and s.percentage == 0.0 for s in stats)
        assert all(s.last_seen_date is None for s in stats)
        assert [s.number for s in stats] == list(range(1, 46))

    def test_number_in_every_draw_ranks_first(self):
        others = [n for n in range(1, 56) if n != 7]
        draws = make_draws([[7] + others[5 * i: 5 * i + 5] for i in range(10)])
        stats = compute_frequency(draws)
        assert stats[0].number == 7
        assert stats[0].count == 10
        assert stats[0].percentage == pytest.approx(10 / 60 * 100)
        assert all(s.count <= 1 for s in stats[1:])

    def test_window_limits_draws(self):
        stats = {s.number: s.count for s in compute_frequency(HISTORY_655, window=1)}
        assert stats[14] == 1
        assert stats[3] == 0

    def test_days_since_last_seen(self):
        stats = {s.number: s for s in self.fa.get_stats(HISTORY_655, today=date(2024, 3, 11))}
        assert stats[5].last_seen_date == date(2024, 3, 1)
        assert stats[5].days_since_last_seen == 10
        assert stats[3].last_seen_date == date(2024, 2, 28)
        assert stats[1].days_since_last_seen is None

    def test_cold_numbers_never_seen_first(self):
        cold = self.fa.get_cold_numbers(HISTORY_655, bottom_n=3)
        assert cold == [1, 4, 6]

    def test_smart_numbers_prefer_recent(self):
        draws = make_draws([[1, 2, 3, 4, 5, 6]] * 50 + [[50, 51, 52, 53, 54, 55]] * 150)
        assert sorted(self.fa.get_smart_numbers(draws)) == [1, 2, 3, 4, 5, 6]

    def test_special_number_most_common_not_excluded(self):
        draws = [
            DrawRecord("3", date(2024, 3, 5), (1, 2, 3, 4, 5, 6), "power_655", special_number=9),
            DrawRecord("2", date(2024, 3, 3), (1, 2, 3, 4, 5, 7), "power_655", special_number=9),
            DrawRecord("1", date(2024, 3, 1), (1, 2, 3, 4, 5, 8), "power_655", special_number=12),
        ]
        assert self.fa.select_special_number(draws) == 9
        assert self.fa.select_special_number(draws, exclude=[9]) == 12

    def test_special_number_falls_back_to_hot_number(self):
        assert self.fa.select_special_number(HISTORY_655, exclude=[14]) == 22

    def test_idempotent_and_input_untouched(self):
        before = copy.deepcopy(HISTORY_655)
        assert compute_frequency(HISTORY_655) == compute_frequency(HISTORY_655)
        assert HISTORY_655 == before


class TestGapAnalyzer:
    def setup_method(self):
        self.ga = GapAnalyzer(number_range=(1, 55))

    def test_stats_have_all_numbers(self):
        stats = compute_gaps(HISTORY_655)
        assert [s.number for s in stats] == list(range(1, 56))

    def test_unseen_number_uses_history_length_and_default_gap(self):
        stats = {s.number: s for s in self.ga.get_gap_stats(HISTORY_655)}
        assert stats[1].current_gap == len(HISTORY_655)
        assert stats[1].historical_gaps == ()
        assert stats[1].average_gap == 10.0

    def test_gaps_between_appearances(self):
        stats = {s.number: s for s in self.ga.get_gap_stats(HISTORY_655)}
        assert stats[14].historical_gaps == (2,)
        assert stats[14].current_gap == 0
        assert stats[22].historical_gaps == (3,)
        assert stats[3].current_gap == 1

    def test_overdue_number_is_selected(self):
        # 3 drawn 25 and 20 draws ago (gap 5), then not again → 20 / 5 = 4.0
        rows = []
        for idx in range(30):
            rows.append([10, 11, 12, 13, 14, 3 if idx in (20, 25) else 15])
        draws = make_draws(rows)

        stat = next(s for s in self.ga.get_gap_stats(draws) if s.number == 3)
        assert stat.average_gap == 5.0
        assert stat.current_gap == 20
        assert stat.due_ratio == pytest.approx(4.0)

        picks = select_due_numbers(draws)
        assert picks[0] == 3
        _assert_valid_pick(picks)

    def test_due_numbers_ranked_by_ratio(self):
        draws = make_draws([[1, 2, 3, 4, 5, 6]] * 3 + [[7, 8, 9, 10, 11, 12]] * 20)
        due = self.ga.get_due_numbers(draws)
        ratios = self.ga.get_due_ratios(draws)
        assert all(ratios[n] > 1.2 for n in due)
        assert [ratios[n] for n in due] == sorted((ratios[n] for n in due), reverse=True)

    def test_pads_from_frequency_when_nothing_due(self):
        assert select_due_numbers(HISTORY_655[:1]) == [5, 14, 22, 33, 41, 52]

    def test_empty_history_still_six_numbers(self):
        picks = select_due_numbers([], max_number=45)
        assert picks == [1, 2, 3, 4, 5, 6]


class TestPatternAnalyzer:
    def setup_method(self):
        self.pa = PatternAnalyzer(number_range=(1, 55))

    def test_profile_targets(self):
        profile = self.pa.analyze(HISTORY_655)
        assert profile.optimal_even == 3
        assert profile.sum_range.minimum == 148
        assert profile.sum_range.maximum == 183
        assert profile.sum_range.average == pytest.approx(165.6)
        assert profile.average_consecutive_pairs == 0.0
        assert sum(profile.last_digit_distribution.values()) == 30
        assert profile.draws_analyzed == 5

    def test_empty_profile_is_neutral(self):
        profile = self.pa.analyze([])
        assert profile.optimal_even == 3
        assert profile.draws_analyzed == 0

    def test_count_consecutive_pairs(self):
        assert count_consecutive_pairs([1, 2, 3, 7, 9, 10]) == 3
        assert count_consecutive_pairs([5, 14, 22]) == 0

    def test_select_respects_parity_quota(self):
        picks = self.pa.select_numbers(HISTORY_655)
        _assert_valid_pick(picks)
        assert sum(1 for n in picks if n % 2 == 0) == 3

    def test_select_rejects_third_consecutive_pair(self):
        draws = make_draws([[1, 2, 3, 4, 5, 6]] * 10)
        picks = self.pa.select_numbers(draws)
        assert picks == [1, 2, 3, 5, 8, 10]
        assert count_consecutive_pairs(picks) <= 2

    def test_constraints_relaxed_to_fill_six(self):
        tiny = PatternAnalyzer(number_range=(1, 6), max_consecutive_pairs=0)
        assert sorted(tiny.select_numbers([])) == [1, 2, 3, 4, 5, 6]

    def test_empty_history_returns_six(self):
        _assert_valid_pick(select_pattern_based([], max_number=45), max_number=45)


class TestCombineEnsemble:
    def test_unanimous_agreement(self):
        voters = [WeightedCandidateSet(name, (1, 2, 3, 4, 5, 6), 1 / 3) for name in ("hot", "gap", "pattern")]
        assert combine_ensemble(voters) == [1, 2, 3, 4, 5, 6]

    def test_order_invariant(self):
        a = WeightedCandidateSet("hot", (9, 4, 17, 33, 21, 50), 0.2)
        b = WeightedCandidateSet("gap", (4, 50, 1, 2, 3, 18), 0.3)
        c = WeightedCandidateSet("pattern", (17, 9, 8, 7, 6, 5), 0.5)
        forward = combine_ensemble({"hot": a, "gap": b, "pattern": c})
        backward = combine_ensemble({"pattern": c, "gap": b, "hot": a})
        assert forward == backward
        assert combine_ensemble([c, a, b]) == forward

    def test_ties_go_to_lower_numbers(self):
        voters = [
            WeightedCandidateSet("a", (10, 11, 12, 13, 14, 15), 0.5),
            WeightedCandidateSet("b", (1, 2, 3, 4, 5, 6), 0.5),
        ]
        assert combine_ensemble(voters) == [1, 2, 3, 10, 11, 12]

    def test_rank_position_matters(self):
        voters = [
            WeightedCandidateSet("a", (40, 1, 2, 3, 4, 5), 0.5),
            WeightedCandidateSet("b", (41, 6, 7, 8, 9, 10), 0.5),
        ]
        assert {40, 41} <= set(combine_ensemble(voters))


class TestEnsemblePredictor:
    def setup_method(self):
        self.config = copy.deepcopy(get_model_config("power_655"))
        self.ensemble = EnsemblePredictor("power_655", self.config)

    def test_weight_sum_to_one(self):
        assert sum(self.ensemble.weights.values()) == pytest.approx(1.0)

    def test_weights_normalized_when_misconfigured(self):
        self.config["ensemble"]["weights"] = {"hot": 1, "smart": 1, "gap": 1, "pattern": 1}
        ensemble = EnsemblePredictor("power_655", self.config)
        assert ensemble.weights["hot"] == pytest.approx(0.25)

    def test_update_weights_constraints(self):
        self.ensemble.update_weights(hot=0.90, smart=0.90, gap=0.90, pattern=0.90)
        assert all(w <= 0.60 for w in self.ensemble.weights.values())
        assert sum(self.ensemble.weights.values()) == pytest.approx(1.0)

    def test_update_unknown_voter(self):
        with pytest.raises(ValueError):
            self.ensemble.update_weights(lstm=0.5)

    def test_predict_returns_valid_sorted_numbers(self):
        nums = self.ensemble.predict(HISTORY_655 * 10)
        _assert_valid_pick(nums)
        assert nums == sorted(nums)

    def test_predict_empty_history(self):
        _assert_valid_pick(self.ensemble.predict([]))

    def test_predict_is_deterministic(self):
        history = HISTORY_655 * 6
        assert self.ensemble.predict(history) == self.ensemble.predict(history)

    def test_voter_weights_normalized(self):
        voters = self.ensemble.build_voters(HISTORY_655, base_prediction=[1, 2, 3, 4, 5, 6])
        assert {v.name for v in voters} >= {"hot", "smart", "gap", "pattern", "hot_recent", "base_prediction"}
        assert sum(v.weight for v in voters) == pytest.approx(1.0)

    def test_unanimous_base_prediction_pulls_numbers(self):
        self.ensemble.base_prediction_weight = 100.0
        nums = self.ensemble.predict(HISTORY_655, base_prediction=[1, 2, 3, 4, 6, 55])
        assert nums == [1, 2, 3, 4, 6, 55]

    def test_frequency_insight_adds_voter(self):
        insight = StatisticalInsight(
            type=InsightType.FREQUENCY,
            description="Numbers 40, 9 show highest prediction accuracy",
            confidence=0.6,
            recommendation="",
            data=FrequencyInsightData(best_numbers=(
                NumberPerformance(number=40, accuracy=0.5, predictions=4),
                NumberPerformance(number=9, accuracy=0.1, predictions=4),
            )),
        )
        voters = {v.name: v for v in self.ensemble.build_voters(HISTORY_655, insights=[insight])}
        assert voters["insight_frequency"].numbers == (40,)

    def test_weak_pattern_insight_tightens_consecutive_limit(self):
        draws = make_draws([[1, 2, 3, 4, 5, 6]] * 10)
        insight = StatisticalInsight(
            type=InsightType.PATTERN,
            description="",
            confidence=0.4,
            recommendation="Reduce consecutive number predictions",
            data=PatternInsightData(consecutive_hits=1, total_consecutive_attempts=10, accuracy=0.1),
        )
        voters = {v.name: v for v in self.ensemble.build_voters(draws, insights=[insight])}
        assert count_consecutive_pairs(voters["pattern"].numbers) <= 1


class TestConfidenceScorer:
    def _insight(self, confidence):
        return StatisticalInsight(
            type=InsightType.SUM, description="", confidence=confidence, recommendation="",
            data=SumInsightData(accuracy=0.0, hits=0, total=3),
        )

    def test_base_confidence(self):
        assert score_confidence(AccuracyMetrics(), [], history_length=5) == pytest.approx(0.5)

    def test_additive_components(self):
        metrics = AccuracyMetrics(total_predictions=12, recent_performance=0.2, improvement_trend=0.05)
        # 0.5 + 0.06 + 0.1 + 0.05 + 0.1
        score = score_confidence(metrics, [self._insight(0.8), self._insight(0.6)], history_length=20)
        assert score == pytest.approx(0.81)

    def test_negative_trend_ignored(self):
        metrics = AccuracyMetrics(total_predictions=12, recent_performance=0.0, improvement_trend=-0.3)
        assert score_confidence(metrics, [], history_length=0) == pytest.approx(0.5)

    def test_clamped_high(self):
        metrics = AccuracyMetrics(total_predictions=20, recent_performance=1.0, improvement_trend=0.5)
        insights = [self._insight(0.9)] * 10
        assert score_confidence(metrics, insights, history_length=100) == 0.95

    def test_clamped_low(self):
        metrics = AccuracyMetrics(total_predictions=5, recent_performance=-10.0)
        assert score_confidence(metrics, [], history_length=0) == 0.1

    def test_non_finite_inputs(self):
        metrics = AccuracyMetrics(total_predictions=5, recent_performance=math.nan, improvement_trend=math.inf)
        assert score_confidence(metrics, [self._insight(math.nan)], history_length=0) == pytest.approx(0.5)

    def test_deterministic(self):
        metrics = AccuracyMetrics(total_predictions=3, recent_performance=0.33, improvement_trend=0.01)
        insights = [self._insight(0.7)]
        assert score_confidence(metrics, insights, 30) == score_confidence(metrics, insights, 30)

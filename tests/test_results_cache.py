"""Tests for reports, the best-result tracker and the result cache."""

import math
from datetime import datetime

import pytest

from paramsearch.optimization.results import BestResult, OptimizationReport, Report, ResultCache


# ── Report normalization ──


class TestReport:

    def test_from_number(self):
        report = Report.from_outcome(1.5)
        assert report.fitness == 1.5
        assert report.metrics == {}

    def test_from_mapping_keeps_remaining_keys_as_metrics(self):
        report = Report.from_outcome({"fitness": 2.0, "trades": 14, "drawdown": 0.12})
        assert report.fitness == 2.0
        assert report.metrics == {"trades": 14, "drawdown": 0.12}

    def test_from_mapping_with_explicit_metrics(self):
        report = Report.from_outcome({"fitness": 2.0, "metrics": {"trades": 3}})
        assert report.metrics == {"trades": 3}

    def test_report_passes_through(self):
        report = Report(fitness=1.0)
        assert Report.from_outcome(report) is report

    @pytest.mark.parametrize("outcome", [None, True, {"trades": 1}])
    def test_unusable_outcomes_raise(self, outcome):
        with pytest.raises(ValueError):
            Report.from_outcome(outcome)


# ── Best result ──


class TestBestResult:

    def test_starts_empty(self):
        best = BestResult()
        assert best.parameters is None
        assert best.fitness == -math.inf
        assert not best.found

    def test_replaced_only_by_strictly_greater_fitness(self):
        best = BestResult()
        assert best.update([1.0], 2.0)
        assert not best.update([2.0], 2.0)
        assert not best.update([3.0], 1.0)
        assert not best.update([4.0], None)
        assert best.parameters == [1.0]
        assert best.fitness == 2.0

    def test_update_copies_parameters(self):
        best = BestResult()
        candidate = [1.0, 2.0]
        best.update(candidate, 1.0)
        candidate[0] = 9.0
        assert best.parameters == [1.0, 2.0]


# ── Result cache ──


class TestResultCache:

    def test_make_key_uses_shortest_decimals(self):
        assert ResultCache.make_key([3.0, 0.25, 10]) == "3, 0.25, 10"

    def test_record_and_lookup(self):
        cache = ResultCache()
        key = ResultCache.make_key([1.0, 2.0])
        assert key not in cache
        assert cache.lookup(key) is None
        assert cache.record(key, Report(fitness=0.5))
        assert key in cache
        assert cache.lookup(key).fitness == 0.5
        assert len(cache) == 1

    def test_first_report_is_kept(self):
        cache = ResultCache()
        cache.record("1", Report(fitness=1.0))
        assert not cache.record("1", Report(fitness=5.0))
        assert cache.lookup("1").fitness == 1.0
        assert len(cache) == 1

    def test_prepopulated_cache(self):
        cache = ResultCache({"1": 1.0, "2": {"fitness": 3.0, "trades": 2}})
        assert len(cache) == 2
        assert cache.lookup("2").metrics == {"trades": 2}
        key, report = cache.best()
        assert key == "2"
        assert report.fitness == 3.0

    def test_best_of_empty_cache(self):
        assert ResultCache().best() is None

    def test_to_frame(self):
        cache = ResultCache()
        cache.record("0, 1", Report(fitness=1.0, metrics={"trades": 4}))
        cache.record("1, 1", Report(fitness=2.0, metrics={"trades": 6}))
        frame = cache.to_frame()
        assert list(frame.columns) == ["parameters", "fitness", "trades"]
        assert frame["parameters"].tolist() == ["0, 1", "1, 1"]
        assert frame["fitness"].tolist() == [1.0, 2.0]

    def test_empty_frame_has_base_columns(self):
        frame = ResultCache().to_frame()
        assert frame.empty
        assert list(frame.columns) == ["parameters", "fitness"]


# ── Run report ──


class TestOptimizationReport:

    def test_report_frame_matches_results(self):
        report = OptimizationReport(
            algorithm="traversal",
            ranges="0→2",
            best=BestResult(parameters=[2.0], fitness=2.0),
            started_at=datetime.now(),
            results={"0": Report(fitness=0.0), "2": Report(fitness=2.0)}
        )
        frame = report.to_frame()
        assert frame["fitness"].tolist() == [0.0, 2.0]
        assert report.cancelled is False

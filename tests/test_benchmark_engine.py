"""
Benchmark engine tests: copy isolation, record bookkeeping, timing
arithmetic and running totals.
"""

import logging

import pytest

from benchmark_core import (
    AlgorithmInfo, BenchmarkConfig, BenchmarkEngine, Dataset, RunningTotals,
    SortVerificationError, TimingRecord, build_registry, get_algorithms,
)


def make_algo(name, fn):
    return AlgorithmInfo(name, fn)


def recording_registry(seen):
    """Algorithms that log what they receive and then trash the list in different ways."""
    def clear(a):
        seen.append(("clear", tuple(a)))
        a.clear()
        return a

    def reverse(a):
        seen.append(("reverse", tuple(a)))
        a.reverse()
        return a

    def overwrite(a):
        seen.append(("overwrite", tuple(a)))
        a[:] = [0] * len(a)
        return a

    def sort(a):
        seen.append(("sort", tuple(a)))
        a.sort()
        return a

    return build_registry([make_algo("Clear", clear), make_algo("Reverse", reverse),
                           make_algo("Overwrite", overwrite), make_algo("Sort", sort)])


# =============================================================================
# Test: registry
# =============================================================================

class TestRegistry:

    def test_default_members_in_order(self):
        assert list(get_algorithms()) == [
            "Insertion Sort", "Selection Sort", "Bubble Sort", "Heap Sort",
            "Merge Sort", "Quick Sort", "Shell Sort",
        ]

    def test_registry_is_read_only(self):
        algos = get_algorithms()
        with pytest.raises(TypeError):
            algos["Bogo Sort"] = make_algo("Bogo Sort", sorted)

    def test_duplicate_names_rejected(self):
        with pytest.raises(ValueError, match="Duplicate"):
            build_registry([make_algo("A", sorted), make_algo("A", sorted)])


# =============================================================================
# Test: every algorithm sees the untouched dataset
# =============================================================================

class TestIsolation:

    def test_each_algorithm_receives_original_content(self):
        seen = []
        dataset = Dataset(1, (4, 1, 3, 2))
        BenchmarkEngine().run_dataset(dataset, recording_registry(seen))

        assert [name for name, _ in seen] == ["clear", "reverse", "overwrite", "sort"]
        assert all(content == (4, 1, 3, 2) for _, content in seen)
        assert dataset.values == (4, 1, 3, 2)

    def test_isolation_holds_across_datasets_and_runs(self):
        seen = []
        datasets = [Dataset(1, (3, 2, 1)), Dataset(2, (9, 8))]
        engine = BenchmarkEngine()
        registry = recording_registry(seen)
        engine.run(datasets, registry)
        engine.run(datasets, registry)

        expected = [(3, 2, 1)] * 4 + [(9, 8)] * 4
        assert [content for _, content in seen] == expected * 2

    def test_time_once_hands_out_a_fresh_list(self):
        received = []
        dataset = Dataset(1, (2, 1))
        engine = BenchmarkEngine()
        engine.time_once(lambda a: received.append(a) or a, dataset)
        engine.time_once(lambda a: received.append(a) or a, dataset)

        assert received[0] == [2, 1]
        assert received[0] is not received[1]

    @pytest.mark.parametrize("gc_between_runs", [True, False])
    def test_gc_state_restored(self, gc_between_runs):
        import gc
        engine = BenchmarkEngine(BenchmarkConfig(gc_between_runs=gc_between_runs))
        engine.time_once(lambda a: a, Dataset(1, (1,)))
        assert gc.isenabled()


# =============================================================================
# Test: timing records
# =============================================================================

class TestTimingRecords:

    def test_record_count_is_datasets_times_algorithms(self):
        datasets = [Dataset(i, tuple(range(i * 3, 0, -1))) for i in range(1, 5)]
        algos = get_algorithms()
        run = BenchmarkEngine().run(datasets, algos)

        assert len(run.records) == len(datasets) * len(algos)
        for dataset in datasets:
            records = run.records_for(dataset.index)
            assert len(records) == len(algos)
            assert {r.algorithm for r in records} == set(algos)

    def test_records_grouped_by_dataset_in_order(self):
        datasets = [Dataset(1, (1,)), Dataset(2, (2,)), Dataset(3, (3,))]
        run = BenchmarkEngine().run(datasets, get_algorithms())
        indices = [r.dataset_index for r in run.records]
        assert indices == sorted(indices)

    def test_durations_truncated_to_microseconds(self, fake_clock):
        fake_clock(1_999, 999, 5_000_500)
        registry = build_registry([make_algo("Only", lambda a: a)])
        datasets = [Dataset(1, ()), Dataset(2, ()), Dataset(3, ())]
        run = BenchmarkEngine(BenchmarkConfig(gc_between_runs=False)).run(datasets, registry)

        assert [r.microseconds for r in run.records] == [1, 0, 5000]

    def test_empty_dataset_runs_every_algorithm(self):
        outputs = {}
        algos = build_registry(
            make_algo(info.name, lambda a, fn=info.function, name=info.name: outputs.setdefault(name, fn(a)))
            for info in get_algorithms().values()
        )
        run = BenchmarkEngine().run([Dataset(1, ())], algos)

        assert outputs == {name: [] for name in get_algorithms()}
        assert len(run.records) == len(algos)
        assert all(r.microseconds >= 0 for r in run.records)

    def test_progress_logged_per_dataset(self, caplog):
        with caplog.at_level(logging.INFO, logger="benchmark_core"):
            BenchmarkEngine().run([Dataset(1, (1,)), Dataset(2, (2,))], get_algorithms())
        assert "Running sort algorithms on dataset 1..." in caplog.messages
        assert "Running sort algorithms on dataset 2..." in caplog.messages

    def test_algorithm_faults_propagate(self):
        def broken(a):
            raise ZeroDivisionError("boom")
        registry = build_registry([make_algo("Broken", broken)])
        with pytest.raises(ZeroDivisionError):
            BenchmarkEngine().run([Dataset(1, (1, 2))], registry)


# =============================================================================
# Test: output verification
# =============================================================================

class TestVerification:

    def test_real_registry_passes(self):
        datasets = [Dataset(1, (5, -3, 9, 0, 5)), Dataset(2, ())]
        engine = BenchmarkEngine(BenchmarkConfig(verify_output=True))
        run = engine.run(datasets, get_algorithms())
        assert len(run.records) == 14

    def test_broken_sort_detected(self):
        registry = build_registry([make_algo("Identity", lambda a: a)])
        engine = BenchmarkEngine(BenchmarkConfig(verify_output=True))
        with pytest.raises(SortVerificationError) as excinfo:
            engine.run([Dataset(1, (1, 2)), Dataset(2, (2, 1))], registry)
        assert excinfo.value.algorithm == "Identity"
        assert excinfo.value.dataset_index == 2

    def test_not_checked_by_default(self):
        registry = build_registry([make_algo("Identity", lambda a: a)])
        run = BenchmarkEngine().run([Dataset(1, (2, 1))], registry)
        assert len(run.records) == 1


# =============================================================================
# Test: running totals
# =============================================================================

class TestRunningTotals:

    def test_totals_and_average(self):
        totals = RunningTotals()
        for i, us in enumerate([120, 340, 75], start=1):
            totals.add(TimingRecord("Insertion Sort", i, us))

        assert totals.totals["Insertion Sort"] == 535
        assert totals.dataset_count == 3
        assert totals.average("Insertion Sort") == pytest.approx(178.333, abs=1e-3)

    def test_engine_totals_match_record_sums(self, fake_clock):
        fake_clock(120_000, 10_000, 340_000, 20_000, 75_000, 30_000)
        registry = build_registry([make_algo("Insertion Sort", lambda a: a),
                                   make_algo("Merge Sort", lambda a: a)])
        datasets = [Dataset(1, (1,)), Dataset(2, (2,)), Dataset(3, (3,))]
        run = BenchmarkEngine(BenchmarkConfig(gc_between_runs=False)).run(datasets, registry)

        assert run.totals.totals == {"Insertion Sort": 535, "Merge Sort": 60}
        for name in registry:
            assert run.totals.totals[name] == sum(r.microseconds for r in run.records if r.algorithm == name)

    def test_totals_skipped_without_summary(self):
        run = BenchmarkEngine().run([Dataset(1, (1,))], get_algorithms(), summary=False)
        assert run.totals is None
        with pytest.raises(ValueError):
            run.summary_ranking()

    def test_negative_increment_rejected(self):
        with pytest.raises(ValueError):
            RunningTotals().add(TimingRecord("X", 1, -1))

    def test_average_with_no_datasets(self):
        assert RunningTotals().average("X") == 0.0


class TestConfig:

    def test_unknown_tie_break_rejected(self):
        with pytest.raises(ValueError):
            BenchmarkConfig(tie_break="random")

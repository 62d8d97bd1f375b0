"""
Sort Comparer - Core Module
===========================

Contains: configuration, dataset reader, algorithm registry, benchmark
engine, running totals, ranking and report rendering.
"""

from __future__ import annotations
import gc, logging, re, sys, time
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Callable, Dict, Iterable, List, Mapping, Optional, TextIO, Tuple
from contextlib import contextmanager

import numpy as np

from classic_sorts import (
    insertion_sort, selection_sort, bubble_sort, heap_sort,
    merge_sort, quick_sort, shell_sort,
)

logger = logging.getLogger(__name__)

# =============================================================================
# Configuration
# =============================================================================

#Element range of the datasets (signed 32-bit, like a C int)
INT_MIN = -2**31
INT_MAX = 2**31 - 1

TIE_BREAK_POLICIES = ("name", "input")

SUMMARY_HEADER = "==================== SUMMARY ===================="
RESULTS_HEADER = "==================== RESULTS ===================="


@dataclass(frozen=True)
class BenchmarkConfig:
    gc_between_runs: bool = True
    verify_output: bool = False
    tie_break: str = "name"

    def __post_init__(self):
        if self.tie_break not in TIE_BREAK_POLICIES:
            raise ValueError(f"Unknown tie-break policy {self.tie_break!r}, "
                             f"expected one of {TIE_BREAK_POLICIES}")


class Colors:
    HEADER = '\033[95m'
    CYAN = '\033[96m'
    BOLD = '\033[1m'
    END = '\033[0m'

    @classmethod
    def disable(cls):
        for a in ['HEADER', 'CYAN', 'BOLD', 'END']:
            setattr(cls, a, '')

if not sys.stdout.isatty():
    Colors.disable()


class SortVerificationError(RuntimeError):
    """Raised when a sort returns something other than the sorted dataset."""

    def __init__(self, algorithm: str, dataset_index: int):
        super().__init__(f"{algorithm} produced unsorted output on dataset {dataset_index}")
        self.algorithm = algorithm
        self.dataset_index = dataset_index


# =============================================================================
# Datasets
# =============================================================================

@dataclass(frozen=True)
class Dataset:
    index: int
    values: Tuple[int, ...]

    def __len__(self):
        return len(self.values)


@dataclass(frozen=True)
class ParseError:
    line: int
    position: int
    token: str

    def __str__(self):
        return (f"Failed to convert element at line {self.line}, "
                f"position {self.position} to an integer")


_INT_TOKEN = re.compile(r"[+-]?[0-9]+")


def parse_token(token: str) -> Optional[int]:
    """Convert one token to an int, or None if it is not a 32-bit decimal integer."""
    if not _INT_TOKEN.fullmatch(token):
        return None
    value = int(token)
    if not INT_MIN <= value <= INT_MAX:
        return None
    return value


def parse_dataset_line(line: str, line_number: int) -> Tuple[Tuple[int, ...], List[ParseError]]:
    """
    Parse one whitespace-separated line of integers.

    Tokens that fail conversion are left out of the values; each one is
    reported as a ParseError with its 1-based token position.
    """
    values, errors = [], []
    for position, token in enumerate(line.split(), start=1):
        value = parse_token(token)
        if value is None:
            errors.append(ParseError(line_number, position, token))
        else:
            values.append(value)
    return tuple(values), errors


def read_datasets(stream: TextIO, error_stream: Optional[TextIO] = None) -> List[Dataset]:
    """
    Read one dataset per line until a blank line or end of stream.

    Malformed tokens are skipped and logged; they never stop the read.
    A line holding nothing convertible still yields an (empty) dataset.
    If error_stream is given, a blank line is written to it after the
    diagnostics so they stand apart from what follows.
    """
    datasets: List[Dataset] = []
    errors_occurred = False
    #Reading stops at the first blank line, so line numbers double as dataset indices
    for line_number, raw in enumerate(stream, start=1):
        line = raw.rstrip("\r\n")
        if not line:
            break
        values, errors = parse_dataset_line(line, line_number)
        for err in errors:
            logger.error("%s", err)
            errors_occurred = True
        datasets.append(Dataset(line_number, values))

    if errors_occurred and error_stream is not None:
        print(file=error_stream)
    return datasets


# =============================================================================
# Algorithms
# =============================================================================

@dataclass(frozen=True)
class AlgorithmInfo:
    name: str
    function: Callable[[List[int]], List[int]]


ALGORITHMS: Tuple[AlgorithmInfo, ...] = (
    AlgorithmInfo("Insertion Sort", insertion_sort),
    AlgorithmInfo("Selection Sort", selection_sort),
    AlgorithmInfo("Bubble Sort", bubble_sort),
    AlgorithmInfo("Heap Sort", heap_sort),
    AlgorithmInfo("Merge Sort", merge_sort),
    AlgorithmInfo("Quick Sort", quick_sort),
    AlgorithmInfo("Shell Sort", shell_sort),
)


def build_registry(algorithms: Iterable[AlgorithmInfo]) -> Mapping[str, AlgorithmInfo]:
    """Index algorithms by name in a read-only mapping. Names must be unique."""
    registry: Dict[str, AlgorithmInfo] = {}
    for algo in algorithms:
        if algo.name in registry:
            raise ValueError(f"Duplicate algorithm name {algo.name!r}")
        registry[algo.name] = algo
    return MappingProxyType(registry)


def get_algorithms() -> Mapping[str, AlgorithmInfo]:
    return build_registry(ALGORITHMS)


# =============================================================================
# Result Types
# =============================================================================

@dataclass(frozen=True)
class TimingRecord:
    algorithm: str
    dataset_index: int
    microseconds: int


RankedList = Tuple[Tuple[str, int], ...]


class RunningTotals:
    """Accumulated microseconds per algorithm over the datasets seen so far."""

    def __init__(self):
        self.totals: Dict[str, int] = {}
        self._datasets = set()

    def add(self, record: TimingRecord):
        if record.microseconds < 0:
            raise ValueError(f"Negative duration for {record.algorithm}: {record.microseconds}")
        self.totals[record.algorithm] = self.totals.get(record.algorithm, 0) + record.microseconds
        self._datasets.add(record.dataset_index)

    @property
    def dataset_count(self) -> int:
        return len(self._datasets)

    def average(self, name: str) -> float:
        if not self.dataset_count:
            return 0.0
        return self.totals[name] / self.dataset_count

    def items(self):
        return self.totals.items()


@dataclass
class BenchmarkRun:
    algorithms: Mapping[str, AlgorithmInfo]
    datasets: List[Dataset]
    records: List[TimingRecord] = field(default_factory=list)
    totals: Optional[RunningTotals] = None

    def records_for(self, dataset_index: int) -> List[TimingRecord]:
        return [r for r in self.records if r.dataset_index == dataset_index]

    def dataset_ranking(self, dataset_index: int, tie_break: str = "name") -> RankedList:
        return rank_times(((r.algorithm, r.microseconds) for r in self.records_for(dataset_index)),
                          tie_break)

    def summary_ranking(self, tie_break: str = "name") -> RankedList:
        if self.totals is None:
            raise ValueError("Run was made without a summary")
        return rank_times(self.totals.items(), tie_break)


# =============================================================================
# Ranking
# =============================================================================

def rank_times(pairs: Iterable[Tuple[str, int]], tie_break: str = "name") -> RankedList:
    """
    Order (name, microseconds) pairs fastest first.

    tie_break="name" orders equal durations alphabetically, so the output
    does not depend on how the pairs were produced. tie_break="input" keeps
    them in the order they were given.
    """
    if tie_break == "name":
        key = lambda p: (p[1], p[0])
    elif tie_break == "input":
        key = lambda p: p[1]
    else:
        raise ValueError(f"Unknown tie-break policy {tie_break!r}")
    return tuple(sorted(((name, t) for name, t in pairs), key=key))


# =============================================================================
# Benchmark Engine
# =============================================================================

def reference_sort(values: Iterable[int]) -> np.ndarray:
    return np.sort(np.fromiter(values, dtype=np.int64))


class BenchmarkEngine:
    def __init__(self, config: BenchmarkConfig = BenchmarkConfig()):
        self.config = config

    @contextmanager
    def _gc_pause(self):
        if self.config.gc_between_runs:
            gc.collect()
            gc.disable()
        try:
            yield
        finally:
            if self.config.gc_between_runs:
                gc.enable()

    def time_once(self, fn: Callable[[List[int]], List[int]], dataset: Dataset) -> Tuple[int, List[int]]:
        """
        Time a single call of fn on a fresh copy of the dataset.

        The copy is made before the clock starts and belongs to this call
        alone. Returns whole microseconds (truncated) and the sorted copy.
        """
        a = list(dataset.values)
        with self._gc_pause():
            t0 = time.perf_counter_ns()
            result = fn(a)
            t1 = time.perf_counter_ns()
        return ((t1 - t0) // 1000, result if result is not None else a)

    def verify(self, algo: AlgorithmInfo, dataset: Dataset, result: List[int]):
        if not np.array_equal(reference_sort(dataset.values), np.asarray(result, dtype=np.int64)):
            raise SortVerificationError(algo.name, dataset.index)

    def run_dataset(self, dataset: Dataset, algorithms: Mapping[str, AlgorithmInfo]) -> List[TimingRecord]:
        records = []
        for name, algo in algorithms.items():
            micros, result = self.time_once(algo.function, dataset)
            if self.config.verify_output:
                self.verify(algo, dataset, result)
            logger.debug("%s on dataset %d: %d us", name, dataset.index, micros)
            records.append(TimingRecord(name, dataset.index, micros))
        return records

    def run(self, datasets: List[Dataset], algorithms: Mapping[str, AlgorithmInfo],
            summary: bool = True) -> BenchmarkRun:
        """Benchmark every algorithm on every dataset, one dataset at a time."""
        run = BenchmarkRun(algorithms, list(datasets),
                           totals=RunningTotals() if summary else None)
        for dataset in run.datasets:
            logger.info("Running sort algorithms on dataset %d...", dataset.index)
            records = self.run_dataset(dataset, algorithms)
            run.records.extend(records)
            if run.totals is not None:
                for record in records:
                    run.totals.add(record)
        return run


# =============================================================================
# Formatting & Output
# =============================================================================

def format_summary(ranked: RankedList, totals: RunningTotals) -> List[str]:
    lines = []
    for rank, (name, total) in enumerate(ranked, start=1):
        lines.append(f"{rank}. {name}: total time {total} microseconds, "
                     f"or {totals.average(name):.3f} microseconds per dataset on average")
    return lines


def format_dataset_results(dataset_number: int, ranked: RankedList) -> List[str]:
    lines = [f"DATASET {dataset_number}:"]
    for rank, (name, micros) in enumerate(ranked, start=1):
        lines.append(f"{rank}. {name}: {micros} microseconds")
    return lines


def print_header(text, stream=None):
    print(f"{Colors.BOLD}{Colors.HEADER}{text}{Colors.END}", file=stream or sys.stdout)


def print_report(run: BenchmarkRun, summary: bool = True, results: bool = True,
                 tie_break: str = "name", stream: Optional[TextIO] = None):
    """Print the summary section, then the per-dataset results section."""
    out = stream or sys.stdout

    if summary:
        if not run.datasets:
            logger.warning("No datasets were read")
        print_header(SUMMARY_HEADER, out)
        for line in format_summary(run.summary_ranking(tie_break), run.totals):
            print(line, file=out)
        print(file=out)

    if results:
        print_header(RESULTS_HEADER, out)
        for dataset in run.datasets:
            ranked = run.dataset_ranking(dataset.index, tie_break)
            for line in format_dataset_results(dataset.index, ranked):
                print(line, file=out)
            print(file=out)

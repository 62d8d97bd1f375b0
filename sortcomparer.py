#!/usr/bin/env python3
"""
Sort Comparer - Main Runner
===========================

Times seven classic sorting algorithms on integer datasets read from
standard input, one dataset per line, and ranks them fastest first.

Usage:
    python sortcomparer.py results < datasets.txt
    python sortcomparer.py summary < datasets.txt
    python sortcomparer.py < datasets.txt
    python sortcomparer.py --input datasets.txt --verify -v

"results" prints the ranking for each dataset, "summary" prints total and
average times over all datasets, and no argument prints both with the
summary first.
"""

import argparse
import logging
import sys

from benchmark_core import (
    BenchmarkConfig, BenchmarkEngine, BenchmarkRun, Colors,
    TIE_BREAK_POLICIES, get_algorithms, print_report, read_datasets,
)

logger = logging.getLogger(__name__)

MODES = ("results", "summary")

EXIT_OK = 0
EXIT_ARG_COUNT = 1
EXIT_ARG_VALUE = 2

_log_handler = None


def configure_logging(verbose: bool = False):
    """Send diagnostics to stderr as "LEVEL: message"."""
    global _log_handler
    root = logging.getLogger()
    if _log_handler is not None:
        root.removeHandler(_log_handler)
    _log_handler = logging.StreamHandler(sys.stderr)
    _log_handler.setFormatter(logging.Formatter("%(levelname)s: %(message)s"))
    root.addHandler(_log_handler)
    root.setLevel(logging.INFO if verbose else logging.WARNING)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="sortcomparer",
        description="Compare sorting algorithm running times on integer datasets",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  %(prog)s results < datasets.txt       Ranking for each dataset
  %(prog)s summary < datasets.txt       Totals and averages over all datasets
  %(prog)s < datasets.txt               Summary followed by per-dataset results
        """
    )

    #Validated by hand so a bad count and a bad value get different exit codes
    parser.add_argument("mode", nargs="*", metavar="results|summary",
                        help="Report to print (default: both)")

    parser.add_argument("--input", "-i", type=str, help="Read datasets from this file instead of stdin")
    parser.add_argument("--tie-break", choices=TIE_BREAK_POLICIES, default="name",
                        help="Order of equally fast algorithms (default: name)")
    parser.add_argument("--verify", action="store_true", help="Check every sort output against a reference sort")
    parser.add_argument("--no-gc-pause", action="store_true", help="Leave the garbage collector on while timing")
    parser.add_argument("--no-color", action="store_true", help="Plain headers")
    parser.add_argument("--verbose", "-v", action="store_true", help="Log progress to stderr")
    return parser


def select_reports(mode):
    """Return (summary_needed, results_needed) for an optional mode."""
    if mode is None:
        return True, True
    return mode == "summary", mode == "results"


def run_benchmarks(config: BenchmarkConfig, stream, summary: bool) -> BenchmarkRun:
    datasets = read_datasets(stream, error_stream=sys.stderr)
    logger.info("Read %d dataset(s)", len(datasets))
    engine = BenchmarkEngine(config)
    return engine.run(datasets, get_algorithms(), summary=summary)


def main(argv=None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    configure_logging(args.verbose)

    if len(args.mode) > 1:
        parser.print_usage(sys.stderr)
        logger.error("Expected at most one argument, got %d", len(args.mode))
        return EXIT_ARG_COUNT

    mode = args.mode[0] if args.mode else None
    if mode is not None and mode not in MODES:
        logger.error("Invalid program argument %r, try 'results' or 'summary'", mode)
        return EXIT_ARG_VALUE

    if args.no_color or not sys.stdout.isatty():
        Colors.disable()

    config = BenchmarkConfig(
        gc_between_runs=not args.no_gc_pause,
        verify_output=args.verify,
        tie_break=args.tie_break,
    )
    summary_needed, results_needed = select_reports(mode)

    #Undecodable bytes must reach the reader as tokens that fail conversion
    if args.input:
        try:
            f = open(args.input, encoding="utf-8", errors="surrogateescape")
        except OSError as e:
            parser.error(f"cannot read --input {args.input!r}: {e.strerror}")
        with f:
            run = run_benchmarks(config, f, summary_needed)
    else:
        if hasattr(sys.stdin, "reconfigure"):
            sys.stdin.reconfigure(errors="surrogateescape")
        run = run_benchmarks(config, sys.stdin, summary_needed)

    print_report(run, summary=summary_needed, results=results_needed,
                 tie_break=config.tie_break, stream=sys.stdout)
    return EXIT_OK


if __name__ == "__main__":
    sys.exit(main())

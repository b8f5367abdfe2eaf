#!/usr/bin/env python3
"""
slicestore Performance Benchmarks
=================================

Measures the two hot paths of a store:

- dispatch fan-out: one commit re-evaluating N selectors, of which only a
  fraction see their slice change;
- memoized reads: repeated ``produce_selection()`` calls between commits.

Usage:
    python scripts/benchmark.py                    # default sizes
    python scripts/benchmark.py --listeners 5000   # larger fan-out
    python scripts/benchmark.py --help
"""

import argparse
import time
from dataclasses import dataclass
from typing import List

from rich.console import Console
from rich.panel import Panel
from rich.table import Table, box

from slicestore import SelectorSubscription, StateHolder, StoreContext

# Benchmark defaults
DEFAULT_LISTENERS = 1000
DEFAULT_COMMITS = 200
DEFAULT_CHANGED_FRACTION = 0.1
DEFAULT_READS = 100_000


@dataclass
class BenchmarkResult:
    name: str
    operations: int
    seconds: float
    notes: str = ""

    @property
    def ops_per_second(self) -> float:
        return self.operations / self.seconds if self.seconds else float("inf")

    @property
    def micros_per_op(self) -> float:
        return self.seconds * 1e6 / self.operations if self.operations else 0.0


def bench_dispatch_fanout(
    listeners: int, commits: int, changed_fraction: float
) -> BenchmarkResult:
    """N listeners over N keys; each commit changes the first k keys."""
    state = {f"k{i}": 0 for i in range(listeners)}
    holder = StateHolder(state)
    store = holder.store
    fired = [0]

    def on_change():
        fired[0] += 1

    for i in range(listeners):
        key = f"k{i}"
        # distinct listener objects; the registry keys on identity
        store.subscribe(lambda: on_change(), lambda s, key=key: s[key])

    changed_keys = [f"k{i}" for i in range(int(listeners * changed_fraction))]

    start = time.perf_counter()
    for n in range(1, commits + 1):
        next_state = dict(holder.value)
        for key in changed_keys:
            next_state[key] = n
        holder.commit(next_state)
    elapsed = time.perf_counter() - start

    return BenchmarkResult(
        "dispatch fan-out",
        commits * listeners,
        elapsed,
        f"{listeners} selectors/commit, {fired[0]} notifications",
    )


def bench_memoized_reads(reads: int) -> BenchmarkResult:
    """Repeated reads of a record-shaped selection between commits."""
    context = StoreContext("bench")
    holder = StateHolder({"a": 1, "b": 2})

    with context.provide(holder.store):
        subscription = SelectorSubscription(context, lambda s: {"v": s["b"]})

    first = subscription.read()
    hits = 0

    start = time.perf_counter()
    for _ in range(reads):
        if subscription.produce_selection() is first:
            hits += 1
    elapsed = time.perf_counter() - start
    subscription.close()

    return BenchmarkResult(
        "memoized reads", reads, elapsed, f"{hits}/{reads} memo hits"
    )


def render(results: List[BenchmarkResult], console: Console) -> None:
    table = Table(title="slicestore benchmarks", box=box.ROUNDED)
    table.add_column("Benchmark", style="cyan")
    table.add_column("Operations", justify="right")
    table.add_column("Time (ms)", justify="right")
    table.add_column("ops/s", justify="right", style="green")
    table.add_column("µs/op", justify="right")
    table.add_column("Notes", style="dim")

    for result in results:
        table.add_row(
            result.name,
            f"{result.operations:,}",
            f"{result.seconds * 1000:.1f}",
            f"{result.ops_per_second:,.0f}",
            f"{result.micros_per_op:.3f}",
            result.notes,
        )

    console.print(table)


def main() -> None:
    parser = argparse.ArgumentParser(description="slicestore benchmarks")
    parser.add_argument("--listeners", type=int, default=DEFAULT_LISTENERS)
    parser.add_argument("--commits", type=int, default=DEFAULT_COMMITS)
    parser.add_argument(
        "--changed-fraction", type=float, default=DEFAULT_CHANGED_FRACTION
    )
    parser.add_argument("--reads", type=int, default=DEFAULT_READS)
    args = parser.parse_args()

    console = Console()
    console.print(
        Panel.fit(
            f"listeners={args.listeners} commits={args.commits} "
            f"changed={args.changed_fraction:.0%} reads={args.reads}",
            title="configuration",
        )
    )

    results = [
        bench_dispatch_fanout(args.listeners, args.commits, args.changed_fraction),
        bench_memoized_reads(args.reads),
    ]
    render(results, console)


if __name__ == "__main__":
    main()

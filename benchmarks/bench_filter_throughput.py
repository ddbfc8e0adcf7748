"""Benchmark: Exhaustive filter throughput — filter calls per second.

Measures compute_safe_actions() on the built-in line world at a fixed
horizon, with and without memoisation, to show the effect of keying the
search on (state, remaining depth).
"""
from __future__ import annotations

import json
import sys
import time
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from agent_reach_filter.convenience import LineWorld
from agent_reach_filter.reachability.engine import compute_safe_actions
from agent_reach_filter.reachability.keys import exact_key, no_memo

_ITERATIONS: int = 200
_HORIZON: int = 6


def _bench(label: str, state_key: object) -> dict[str, object]:
    world = LineWorld(limit=1_000)
    latencies: list[float] = []
    expansions = 0

    start = time.perf_counter()
    for i in range(_ITERATIONS):
        t0 = time.perf_counter()
        result = compute_safe_actions(
            i % 50,
            world.actions,
            world.transition,
            world.is_forbidden,
            _HORIZON,
            state_key=state_key,  # type: ignore[arg-type]
        )
        latencies.append(time.perf_counter() - t0)
        expansions = result.expansions
    total = time.perf_counter() - start

    latencies.sort()
    p99 = latencies[int(len(latencies) * 0.99) - 1]
    result_dict: dict[str, object] = {
        "operation": f"filter_throughput_{label}",
        "iterations": _ITERATIONS,
        "horizon": _HORIZON,
        "expansions_per_call": expansions,
        "total_seconds": round(total, 4),
        "ops_per_second": round(_ITERATIONS / total, 1),
        "avg_latency_ms": round(total / _ITERATIONS * 1000, 4),
        "p99_latency_ms": round(p99 * 1000, 4),
    }
    print(
        f"[bench_filter_throughput] {result_dict['operation']}: "
        f"{result_dict['ops_per_second']:,.0f} ops/sec  "
        f"avg {result_dict['avg_latency_ms']:.4f} ms  "
        f"{expansions} expansions/call"
    )
    return result_dict


def run_benchmark() -> list[dict[str, object]]:
    """Entry point returning the benchmark result dicts."""
    return [_bench("memoised", exact_key), _bench("unmemoised", no_memo)]


if __name__ == "__main__":
    results = run_benchmark()
    results_dir = Path(__file__).parent / "results"
    results_dir.mkdir(exist_ok=True)
    output_path = results_dir / "throughput_baseline.json"
    with open(output_path, "w", encoding="utf-8") as fh:
        json.dump(results, fh, indent=2)
    print(f"Results saved to {output_path}")

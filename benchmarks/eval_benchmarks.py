"""Throughput of ``matexpr.evaluate`` over arithmetic, function, array and matrix expressions."""

from __future__ import annotations

import argparse
import json
import platform
import statistics
import time
from dataclasses import asdict, dataclass
from datetime import UTC, datetime
from pathlib import Path

import jax

import matexpr

PROFILE_PRESETS: dict[str, dict[str, int]] = {
    "quick": {"samples": 5, "calls": 200, "warmup": 5},
    "full": {"samples": 15, "calls": 1000, "warmup": 20},
}


@dataclass(frozen=True)
class EvalCase:
    name: str
    expression: str
    note: str


CASES: tuple[EvalCase, ...] = (
    EvalCase("arith_simple", "1 + 2 * 3 - 4 / 2", "precedence chain"),
    EvalCase("arith_power", "2^3^2 + (-3)^2 - -3^2", "right-associative power and unary minus"),
    EvalCase("implicit_mul", "2PI + 3(4+5) - 2 E", "juxtaposition with constants and parentheses"),
    EvalCase("factorial", "10! / 8! + 5!", "postfix factorial"),
    EvalCase("trig", "sin(PI/6) + cos(PI/3) + tan(PI/4)", "transcendental functions"),
    EvalCase("statistics", "std(2, 4, 4, 4, 5, 5, 7, 9) + median(3, 1, 2) + percentile(50, 1, 2, 3, 4)", "variadic statistics"),
    EvalCase("combinatorics", "C(10, 3) + P(5, 2) + gcd(12, 18) + lcm(4, 6)", "integer functions"),
    EvalCase("variables", "x = 10; y = 2x; z = x + y; z^2", "statement list with assignments"),
    EvalCase("array_sum", "sum([1, 2, 3, 4, 5, 6, 7, 8, 9, 10])", "flattened array argument"),
    EvalCase("det_3x3", "det([[2, -1, 0], [-1, 2, -1], [0, -1, 2]])", "closed-form 3x3 determinant"),
    EvalCase("det_5x5", "det([[2,1,0,0,0],[1,2,1,0,0],[0,1,2,1,0],[0,0,1,2,1],[0,0,0,1,2]])", "cofactor expansion"),
    EvalCase("inverse_3x3", "inv([[4, 7, 2], [3, 6, 1], [2, 5, 3]])", "Gauss-Jordan inverse"),
    EvalCase("solve_3x3", "solve([[3, 2, -1], [2, -2, 4], [-1, 0.5, -1]], [[1], [-2], [0]])", "linear solve"),
    EvalCase("matmul_rank", "rank(matmul([[1, 2], [3, 4], [5, 6]], [[1, 0, 1], [0, 1, 1]]))", "matmul then rank"),
)


@dataclass(frozen=True)
class TimingStats:
    mean_ms: float
    stdev_ms: float
    cv_pct: float
    p50_ms: float
    p95_ms: float
    min_ms: float
    max_ms: float


@dataclass(frozen=True)
class EvalRow:
    name: str
    note: str
    result: str
    calls: int
    samples: int
    timing: TimingStats


def _host() -> dict[str, object]:
    return {
        "python": platform.python_version(),
        "machine": platform.machine(),
        "jax": jax.__version__,
        "backend": jax.default_backend(),
        "x64": bool(jax.config.jax_enable_x64),
    }


def _per_call_ms(source: str, calls: int) -> float:
    start = time.perf_counter()
    for _ in range(calls):
        matexpr.evaluate(source, {})
    return (time.perf_counter() - start) * 1000.0 / calls


def _summarize_ms(ms: list[float]) -> TimingStats:
    avg = statistics.fmean(ms)
    sd = statistics.stdev(ms) if len(ms) > 1 else 0.0
    cuts = statistics.quantiles(ms, n=20, method="inclusive") if len(ms) > 1 else [ms[0]] * 19
    return TimingStats(
        mean_ms=avg,
        stdev_ms=sd,
        cv_pct=(sd / avg) * 100.0 if avg > 0 else 0.0,
        p50_ms=statistics.median(ms),
        p95_ms=cuts[18],
        min_ms=min(ms),
        max_ms=max(ms),
    )


def run_benchmarks(cases: tuple[EvalCase, ...], profile: dict[str, int]) -> list[EvalRow]:
    rows: list[EvalRow] = []
    for case in cases:
        # The first call also builds the function registry.
        result = matexpr.format_value(matexpr.evaluate(case.expression, {}))
        for _ in range(profile["warmup"]):
            matexpr.evaluate(case.expression, {})
        ms = [_per_call_ms(case.expression, profile["calls"]) for _ in range(profile["samples"])]
        rows.append(EvalRow(case.name, case.note, result, profile["calls"], len(ms), _summarize_ms(ms)))
    return rows


def main() -> None:
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument("--profile", choices=sorted(PROFILE_PRESETS), default="quick", help="fixed benchmark profile")
    parser.add_argument("--case", action="append", default=[], help="run only the named case (repeatable)")
    parser.add_argument("--json-out", default="", help="optional path to write machine-readable benchmark results")
    args = parser.parse_args()

    cases = CASES
    if args.case:
        wanted = set(args.case)
        cases = tuple(case for case in CASES if case.name in wanted)
        if not cases:
            parser.error(f"no benchmark case matches {sorted(wanted)}")

    profile = PROFILE_PRESETS[args.profile]
    print(f"matexpr evaluate benchmarks (profile={args.profile})")
    print(f"{'case':<16} {'min ms':>10} {'mean ms':>10} {'p50 ms':>10} {'p95 ms':>10}  result")
    rows = run_benchmarks(cases, profile)
    for row in rows:
        t = row.timing
        print(f"{row.name:<16} {t.min_ms:>10.4f} {t.mean_ms:>10.4f} {t.p50_ms:>10.4f} {t.p95_ms:>10.4f}  {row.result}")

    if args.json_out:
        payload = {
            "generated_at": datetime.now(UTC).isoformat(),
            "profile": args.profile,
            "host": _host(),
            "rows": [asdict(row) for row in rows],
        }
        outpath = Path(args.json_out)
        outpath.parent.mkdir(parents=True, exist_ok=True)
        outpath.write_text(json.dumps(payload, indent=2), encoding="utf-8")
        print(f"wrote {outpath}")


if __name__ == "__main__":
    main()

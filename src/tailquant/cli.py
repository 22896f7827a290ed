import argparse
import json
import sys
import threading
from typing import Any, Dict, Iterator, List, Optional, TYPE_CHECKING

from . import __version__
from .accuracy import STREAM_KINDS, rank_errors, synthetic_stream
from .config import EstimatorConfig
from .errors import InvalidConfigurationError
from .estimator import CKMSQuantiles
from .logutil import get_logger, set_verbosity
from .metrics import IntervalQuantiles
from .parsers import parse_value
from .quantile import DEFAULT_QUANTILES, Quantile

if TYPE_CHECKING:  # pragma: no cover - typing only
    from rich.console import Console as _Console
    from rich.table import Table as _Table
else:  # runtime optional import
    try:  # noqa: SIM105
        from rich.console import Console as _Console  # type: ignore
        from rich.table import Table as _Table  # type: ignore
    except ImportError:
        _Console = None  # type: ignore
        _Table = None  # type: ignore

ConsoleType = Optional["_Console"]


def build_config(args: argparse.Namespace) -> EstimatorConfig:
    """Translate CLI flags into an EstimatorConfig (raises InvalidConfigurationError)."""
    cfg = EstimatorConfig()
    specs = getattr(args, "quantile", None) or []
    if specs:
        cfg.quantiles = sorted({Quantile.parse(s) for s in specs})
    else:
        cfg.quantiles = list(DEFAULT_QUANTILES)
    if getattr(args, "buffer_size", None) is not None:
        cfg.buffer_size = args.buffer_size
    if getattr(args, "interval", None) is not None:
        cfg.rollover_interval = float(args.interval)
    return cfg


def _maybe_console(args: argparse.Namespace) -> ConsoleType:
    if getattr(args, "no_color", False):
        return None
    if _Console is None:
        return None
    # force_terminal ensures ANSI codes even when output is being captured (for tests)
    return _Console(color_system="truecolor", stderr=False, force_terminal=True)


def _iter_lines(source: str) -> Iterator[str]:
    if source == "-":
        yield from sys.stdin
        return
    with open(source, "r", encoding="utf-8", errors="replace") as handle:
        yield from handle


def _snapshot_rows(est: CKMSQuantiles) -> List[Dict[str, Any]]:
    snap = est.snapshot() or {}
    return [
        {"quantile": q.label, "target": q.target, "error": q.error, "value": v}
        for q, v in snap.items()
    ]


def cmd_summarize(args: argparse.Namespace) -> int:
    log = get_logger()
    cfg = build_config(args)
    est = cfg.build_estimator()
    skipped = 0
    try:
        for lineno, line in enumerate(_iter_lines(args.file), start=1):
            value = parse_value(line, field=args.field)
            if value is None:
                if line.strip():
                    skipped += 1
                    log.debug("line %d: no numeric value", lineno)
                continue
            est.insert(value)
    except FileNotFoundError:
        print(f"[tailquant] file not found: {args.file}", file=sys.stderr)
        return 2
    except OSError as exc:
        print(f"[tailquant] cannot read {args.file}: {exc.strerror or exc}", file=sys.stderr)
        return 2
    if skipped:
        log.warning("skipped %d lines without a numeric value", skipped)

    rows = _snapshot_rows(est)
    if args.json:
        payload = {
            "count": est.get_count(),
            "samples": est.get_sample_count(),
            "skipped": skipped,
            "empty": not rows,
            "quantiles": rows,
        }
        with open(args.json, "w", encoding="utf-8") as oh:
            json.dump(payload, oh, indent=2)
        print(f"Wrote snapshot JSON to {args.json}")
        return 0

    if not rows:
        print("[no samples]")
        return 0
    console = _maybe_console(args)
    if console is not None and _Table is not None:
        table = _Table(title=f"{est.get_count()} values, {est.get_sample_count()} samples")
        table.add_column("quantile", style="cyan")
        table.add_column("+/- rank error", style="dim")
        table.add_column("estimate", style="bold green", justify="right")
        for row in rows:
            table.add_row(row["quantile"], f"{row['error'] * 100:.2f}%", str(row["value"]))
        console.print(table)
    else:
        print(f"count={est.get_count()} samples={est.get_sample_count()}")
        print(str(est))
    return 0


def cmd_check(args: argparse.Namespace) -> int:
    cfg = build_config(args)
    est = cfg.build_estimator()
    values = synthetic_stream(args.kind, args.samples, seed=args.seed)
    for v in values:
        est.insert(v)
    snap = est.snapshot()
    if snap is None:
        print("[no samples]")
        return 0
    checks = rank_errors(values, snap)
    if args.json:
        with open(args.json, "w", encoding="utf-8") as oh:
            json.dump([c.to_dict() for c in checks], oh, indent=2)
    failed = 0
    for c in checks:
        status = "ok" if c.ok else "FAIL"
        if not c.ok:
            failed += 1
        print(
            f"{c.quantile.label:>7} estimate={c.estimate} rank={c.rank_low}..{c.rank_high} "
            f"desired={c.desired_rank:.1f} error={c.rank_error:.1f} allowed={c.allowed:.1f} {status}"
        )
    print(f"summary samples: {est.get_sample_count()} for {est.get_count()} values")
    return 1 if failed else 0


def cmd_bench(args: argparse.Namespace) -> int:
    from .bench import report, run

    cfg = build_config(args)
    values = synthetic_stream(args.kind, args.samples, seed=args.seed)
    print(report(run(cfg.build_estimator(), values)))
    return 0


def cmd_serve(args: argparse.Namespace) -> int:  # pragma: no cover - integration feature
    try:
        import uvicorn
        from .service import build_app
    except (ImportError, RuntimeError):
        print("'serve' requires the server extra. Install with `pip install tailquant[server]`.", file=sys.stderr)
        return 2

    cfg = build_config(args)
    intervals = IntervalQuantiles(cfg)
    app = build_app(cfg.build_estimator(), intervals)
    stop = threading.Event()

    def _rollover_loop() -> None:
        while not stop.wait(max(1.0, cfg.rollover_interval)):
            intervals.rollover()

    t = threading.Thread(target=_rollover_loop, daemon=True)
    t.start()
    try:
        uvicorn.run(app, host=args.host, port=args.port, log_level="info")
    finally:
        stop.set()
    return 0


def _add_estimator_flags(p: argparse.ArgumentParser) -> None:
    p.add_argument(
        "--quantile",
        action="append",
        metavar="TARGET:ERROR",
        help="Tracked quantile, e.g. 0.99:0.001 (repeatable; default p50/p75/p90/p95/p99)",
    )
    p.add_argument("--buffer-size", type=int, help="Values buffered between merges (default 500)")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="tailquant", description="Streaming targeted quantiles (CKMS).")
    # Global --version (argparse will exit 0 before validating subcommands)
    parser.add_argument(
        "--version",
        action="version",
        version=f"tailquant {__version__}",
        help="Show version and exit",
    )
    parser.add_argument("-v", "--verbose", action="count", default=0, help="More logging (-vv for debug)")
    sub = parser.add_subparsers(dest="cmd")

    summarize_parser = sub.add_parser("summarize", help="Estimate quantiles of numbers read from a file or stdin")
    summarize_parser.add_argument("file", help="Input path, or - for stdin")
    summarize_parser.add_argument("--field", help="Read the value from this JSON key or key=value pair")
    summarize_parser.add_argument("--json", help="Write the snapshot as JSON to this path")
    summarize_parser.add_argument("--no-color", action="store_true", help="Disable colorized output even if rich present")
    _add_estimator_flags(summarize_parser)
    summarize_parser.set_defaults(func=cmd_summarize)

    check_parser = sub.add_parser("check", help="Verify rank error bounds on a synthetic stream")
    check_parser.add_argument("--kind", choices=STREAM_KINDS, default="uniform")
    check_parser.add_argument("--samples", type=int, default=10000)
    check_parser.add_argument("--seed", type=int, default=0)
    check_parser.add_argument("--json", help="Write per-quantile results as JSON to this path")
    _add_estimator_flags(check_parser)
    check_parser.set_defaults(func=cmd_check)

    bench_parser = sub.add_parser("bench", help="Measure insert throughput and memory")
    bench_parser.add_argument("--kind", choices=STREAM_KINDS, default="uniform")
    bench_parser.add_argument("--samples", type=int, default=100000)
    bench_parser.add_argument("--seed", type=int, default=0)
    _add_estimator_flags(bench_parser)
    bench_parser.set_defaults(func=cmd_bench)

    serve_parser = sub.add_parser("serve", help="Run HTTP service (requires tailquant[server])")
    serve_parser.add_argument("--host", default="0.0.0.0")
    serve_parser.add_argument("--port", type=int, default=8080)
    serve_parser.add_argument("--interval", type=float, default=60.0, help="Seconds between interval gauge rollovers")
    _add_estimator_flags(serve_parser)
    serve_parser.set_defaults(func=cmd_serve)

    # Simple 'version' subcommand for shells/users preferring explicit command
    version_parser = sub.add_parser("version", help="Show version and exit")
    version_parser.set_defaults(func=lambda _: (print(f"tailquant {__version__}"), 0)[1])

    return parser


def main() -> int:
    parser = build_parser()
    args = parser.parse_args()
    set_verbosity(args.verbose)
    if not getattr(args, "cmd", None):  # No subcommand provided
        parser.print_help()
        return 0
    try:
        return args.func(args)
    except InvalidConfigurationError as exc:
        print(f"[tailquant] invalid configuration: {exc}", file=sys.stderr)
        return 2


if __name__ == "__main__":
    sys.exit(main())

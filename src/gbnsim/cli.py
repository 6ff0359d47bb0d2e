from __future__ import annotations

import argparse
import dataclasses
import json
import logging
import time

from .bench import run_benchmark
from .config import ConfigError, RoundPolicy, SimConfig
from .constants import (
    DEFAULT_ACK_SUCCESS_PROB,
    DEFAULT_DATA_SUCCESS_PROB,
    DEFAULT_MAX_ROUNDS,
    DEFAULT_PACING_MS,
    DEFAULT_TIMEOUT_MS,
    DEFAULT_TOTAL_PACKETS,
    DEFAULT_WINDOW_SIZE,
)
from .simulation import Simulation


def config_from_args(args: argparse.Namespace) -> SimConfig:
    return SimConfig(
        total_packets=args.packets,
        window_size=args.window,
        data_success_prob=args.data_prob,
        ack_success_prob=args.ack_prob,
        timeout_ms=args.timeout_ms,
        pacing_ms=args.pacing_ms,
        seed=args.seed,
        max_rounds=args.max_rounds,
        round_policy=RoundPolicy(args.policy),
        ack_final_packet=args.ack_final,
    )


def cmd_run(args: argparse.Namespace) -> int:
    cfg = config_from_args(args)
    sim = Simulation(cfg, sleep=time.sleep if args.realtime else None)
    result = sim.run()

    payload = {"role": "run", **result.summary()}
    print(json.dumps(payload, indent=2) if args.json else payload)
    return 0 if result.converged else 1


def cmd_bench(args: argparse.Namespace) -> int:
    r = run_benchmark(config_from_args(args), runs=args.runs)
    payload = {"role": "bench", **dataclasses.asdict(r)}
    print(json.dumps(payload, indent=2) if args.json else payload)
    return 0


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(prog="gbnsim", description="Go-Back-N ARQ over a lossy link.")
    p.add_argument("--log-level", default="INFO", choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"])
    sub = p.add_subparsers(dest="cmd", required=True)

    def add_common(x: argparse.ArgumentParser) -> None:
        x.add_argument("--packets", type=int, default=DEFAULT_TOTAL_PACKETS)
        x.add_argument("--window", type=int, default=DEFAULT_WINDOW_SIZE)
        x.add_argument("--data-prob", type=float, default=DEFAULT_DATA_SUCCESS_PROB, help="data delivery probability [0..1]")
        x.add_argument("--ack-prob", type=float, default=DEFAULT_ACK_SUCCESS_PROB, help="ack delivery probability [0..1]")
        x.add_argument("--timeout-ms", type=int, default=DEFAULT_TIMEOUT_MS)
        x.add_argument("--pacing-ms", type=int, default=DEFAULT_PACING_MS)
        x.add_argument("--seed", type=int, default=None)
        x.add_argument("--max-rounds", type=int, default=DEFAULT_MAX_ROUNDS)
        x.add_argument("--policy", choices=[pol.value for pol in RoundPolicy], default=RoundPolicy.EARLY_EXIT.value)
        x.add_argument("--ack-final", action="store_true", help="acknowledge the last packet like any other")
        x.add_argument("--json", action="store_true")

    run = sub.add_parser("run", help="run one simulation and narrate it")
    add_common(run)
    run.add_argument("--realtime", action="store_true", help="actually sleep for timeouts and pacing")
    run.set_defaults(func=cmd_run)

    bench = sub.add_parser("bench", help="aggregate many seeded runs")
    add_common(bench)
    bench.add_argument("--runs", type=int, default=100)
    bench.set_defaults(func=cmd_bench)

    return p


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    logging.basicConfig(level=getattr(logging, args.log_level), format="%(asctime)s [%(levelname)s] %(message)s")
    try:
        return int(args.func(args))
    except ConfigError as e:
        parser.error(str(e))


if __name__ == "__main__":
    raise SystemExit(main())

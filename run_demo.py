from __future__ import annotations

import argparse
import logging

import structlog

from mail_sim.errors import SimulationError
from mail_sim.sim import MailSystem
from mail_sim.viz_pygame import run_visualization_pygame


def configure_logging(level: str) -> None:
    structlog.configure(
        wrapper_class=structlog.make_filtering_bound_logger(getattr(logging, level.upper())),
    )


def main():
    ap = argparse.ArgumentParser()
    ap.add_argument("--config", type=str, default="example_config.yaml")
    ap.add_argument("--max-ticks", type=int, default=500)
    ap.add_argument(
        "--viz",
        type=str,
        default="pygame",
        choices=["pygame", "mpl"],
        help="Visualization backend: pygame (recommended) or mpl (matplotlib).",
    )
    ap.add_argument("--subframes", type=int, default=8)
    ap.add_argument("--interval-ms", type=int, default=60)
    ap.add_argument(
        "--tick-ms",
        type=int,
        default=None,
        help="(pygame only) Real-time ms per simulation tick. Default: interval_ms * subframes.",
    )
    ap.add_argument(
        "--fps",
        type=int,
        default=60,
        help="(pygame only) Target FPS for rendering.",
    )
    ap.add_argument(
        "--log-level",
        type=str,
        default="warning",
        choices=["debug", "info", "warning", "error"],
    )
    ap.add_argument("--no-viz", action="store_true")
    args = ap.parse_args()

    configure_logging(args.log_level)
    system = MailSystem.from_yaml(args.config)

    try:
        if args.no_viz:
            for _ in range(args.max_ticks):
                frame = system.step()
                if frame.alarms:
                    print("\n".join(frame.alarms))
                if system.is_idle():
                    break
            print("\n=== DONE ===")
            print(f"tick={system.tick}")
            print(f"summary={system.delivery.summary()}")
            print(f"rejected={[i.item_id for i in system.rejected]}")
        elif args.viz == "mpl":
            # Import lazily so pygame users don't need matplotlib installed.
            from mail_sim.viz import run_visualization

            run_visualization(
                system,
                max_ticks=args.max_ticks,
                subframes=args.subframes,
                interval_ms=args.interval_ms,
            )
        else:
            tick_ms = args.tick_ms if args.tick_ms is not None else args.interval_ms * args.subframes
            run_visualization_pygame(
                system,
                max_ticks=args.max_ticks,
                tick_ms=tick_ms,
                fps=args.fps,
                window_title=f"Mail Room Simulator (pygame) | robots={len(system.robots)}",
            )
    except SimulationError as e:
        raise SystemExit(f"Simulation aborted at tick {system.tick}: {e}") from e


if __name__ == "__main__":
    main()

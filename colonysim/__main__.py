"""Entry point: ``python -m colonysim``.

Supports two modes:
  - ``python -m colonysim``              → Launch the FastAPI server (ticking every second)
  - ``python -m colonysim cli --seconds N`` → Headless catch-up: load, advance N seconds, save
"""

from __future__ import annotations

import argparse
import logging

logger = logging.getLogger(__name__)


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Tick-driven colony empire simulation")
    sub = parser.add_subparsers(dest="command")

    # --- Server mode (default) ---
    srv = sub.add_parser("serve", help="Start the FastAPI server (default)")
    srv.add_argument("--host", type=str, default="127.0.0.1")
    srv.add_argument("--port", type=int, default=8000)
    srv.add_argument("--seed", type=int, default=42)
    srv.add_argument("--state-file", type=str, default="empire_state.json")
    srv.add_argument("--log-level", type=str, default="INFO", choices=["DEBUG", "INFO", "WARNING"])

    # --- Headless CLI mode ---
    cli = sub.add_parser("cli", help="Advance a saved empire without the server")
    cli.add_argument("--seconds", type=float, default=3600.0, help="Simulated seconds to advance")
    cli.add_argument("--step", type=float, default=60.0, help="Simulated seconds per tick")
    cli.add_argument("--seed", type=int, default=42)
    cli.add_argument("--state-file", type=str, default="empire_state.json")
    cli.add_argument("--log-level", type=str, default="INFO", choices=["DEBUG", "INFO", "WARNING"])

    return parser


def _run_server(args: argparse.Namespace) -> None:
    import uvicorn

    from colonysim.api.app import create_app
    from colonysim.config import SimulationConfig

    config = SimulationConfig(
        world_seed=args.seed,
        state_file=args.state_file,
        log_level=args.log_level,
    )
    app = create_app(config)
    uvicorn.run(app, host=args.host, port=args.port, log_level=args.log_level.lower())


def _run_cli(args: argparse.Namespace) -> None:
    import time

    from colonysim.config import SimulationConfig
    from colonysim.engine.orchestrator import TickOrchestrator
    from colonysim.systems.rng import DeterministicRNG
    from colonysim.utils.logging import setup_logging
    from colonysim.utils.persistence import StateStore

    config = SimulationConfig(
        world_seed=args.seed,
        state_file=args.state_file,
        log_level=args.log_level,
    )
    setup_logging(config.log_level)

    store = StateStore(config.state_file)
    start = time.time()
    state = store.load(start, seed=config.world_seed, boost_duration=config.boost_duration_seconds)
    orchestrator = TickOrchestrator(config, rng=DeterministicRNG(state.seed))

    end = start + max(0.0, args.seconds)
    step = max(config.tick_interval_seconds, args.step)
    now = start
    orchestrator.advance(state, now)
    while now < end:
        now = min(now + step, end)
        orchestrator.advance(state, now)

    store.save(state)
    for colony in state.colonies:
        res = colony.resources
        logger.info(
            "%s [%s]: %.0f metal / %.0f crystal / %.0f deuterium, energy %+.0f",
            colony.name, colony.coords, res.metal, res.crystal, res.deuterium, res.energy,
        )
    logger.info(
        "Done. %d tick(s) over %.0fs; %d event(s) and %d mission(s) pending. Saved to %s",
        orchestrator.tick_count, end - start, len(state.events), len(state.missions), store.path,
    )


def main() -> None:
    parser = _build_parser()
    args = parser.parse_args()

    # Default to serve mode if no subcommand given
    if args.command is None or args.command == "serve":
        if args.command is None:
            args = parser.parse_args(["serve"])
        _run_server(args)
    elif args.command == "cli":
        _run_cli(args)


if __name__ == "__main__":
    main()

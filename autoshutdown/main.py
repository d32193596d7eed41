"""Auto shutdown entrypoint."""

from __future__ import annotations

import argparse
import logging
import os
import signal
import sys
from pathlib import Path

from dotenv import load_dotenv

from autoshutdown.bus import Bus, Signal
from autoshutdown.config.settings import EnvConfigStore, load_shutdown_config
from autoshutdown.core.clock import format_duration, format_instant, resolve_tzinfo
from autoshutdown.heart import RELOAD, Heart, HeartConfig
from autoshutdown.services.auto_shutdown import ServerAutoShutdown
from autoshutdown.world import ConsoleWorld


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(prog="autoshutdown")
    parser.add_argument("--log-level", default=os.getenv("AUTOSHUTDOWN_LOG_LEVEL", "INFO"))
    parser.add_argument("--env-file", default=".env", help="Optional .env file to load")
    sub = parser.add_subparsers(dest="command", required=True)

    run_parser = sub.add_parser("run", help="Run the shutdown scheduler loop")
    run_parser.add_argument(
        "--tick-seconds", type=float, default=0.1, help="Heartbeat interval"
    )
    sub.add_parser("show", help="Print the next shutdown schedule and exit")

    args = parser.parse_args(argv)
    _load_env(args.env_file)
    _configure_logging(args.log_level)

    if args.command == "run":
        return _command_run(args)
    return _command_show()


def _command_run(args: argparse.Namespace) -> int:
    bus = Bus()
    world = ConsoleWorld()
    store = EnvConfigStore()
    auto_shutdown = ServerAutoShutdown(
        world=world, config_loader=lambda: load_shutdown_config(store)
    )
    heart = Heart(
        HeartConfig(tick_seconds=args.tick_seconds),
        bus=bus,
        world=world,
        auto_shutdown=auto_shutdown,
    )
    if hasattr(signal, "SIGHUP"):
        signal.signal(
            signal.SIGHUP,
            lambda signum, frame: bus.emit(Signal(type=RELOAD, source="sighup")),
        )
    try:
        return heart.run()
    except KeyboardInterrupt:
        logging.info("Shutdown requested (KeyboardInterrupt).")
        heart.stop()
        return 0


def _command_show() -> int:
    config = load_shutdown_config(EnvConfigStore())
    auto_shutdown = ServerAutoShutdown(world=ConsoleWorld(output=lambda _: None))
    plan = auto_shutdown.initialize(config)
    if plan is None:
        print("Auto shutdown is disabled.")
        return 1
    zone = resolve_tzinfo(config.timezone)
    print(f"policy: {plan.policy.name}")
    print(f"shutdown_at: {format_instant(plan.shutdown_at, zone)}")
    print(f"shutdown_in: {format_duration(plan.diff_to_shutdown)}")
    if plan.pre_announce_at is None:
        print("pre_announce: skipped")
    else:
        print(f"pre_announce_at: {format_instant(plan.pre_announce_at, zone)}")
        print(f"announced_lead: {format_duration(plan.announce_lead_seconds)}")
    return 0


def _load_env(env_file: str) -> None:
    env_path = Path(env_file)
    if env_path.exists():
        load_dotenv(env_path)


def _configure_logging(level_name: str) -> None:
    logging.basicConfig(level=getattr(logging, level_name.upper(), logging.INFO))


if __name__ == "__main__":
    sys.exit(main())

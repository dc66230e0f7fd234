#!/usr/bin/env python3
"""Launch the bot with tuned parameters.

Useful for self-play between two parameter sets: point the referee at two
invocations of this script with different configs.

Examples:
    python ./run_agent.py --set DISCOUNT_RATE=0.85
    python ./run_agent.py --config ./configs/aggressive.json --log-level DEBUG
"""

from __future__ import annotations

import argparse


def _build_parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(description="Unleash the Geek agent")
    ap.add_argument("--config", default=None, help="JSON file of Params overrides (may set BASE_CONFIG)")
    ap.add_argument("--json", default=None, help="inline JSON object of Params overrides")
    ap.add_argument(
        "--set",
        metavar="KEY=VALUE",
        action="append",
        default=[],
        help="single override applied last, e.g. --set EXPLOSION_COST=50",
    )
    ap.add_argument("--log-level", default="WARNING", help="stderr logging level")
    return ap


def main() -> None:
    args = _build_parser().parse_args()

    # Deferred so that bad arguments fail before the bot's turn guard is in place
    from unleash_agent import bot, config

    bot.configure_logging(args.log_level)
    cfg = config.apply_set_items(config.load_config(args.config, args.json), args.set)
    config.apply_config(cfg)
    bot.main()


if __name__ == "__main__":
    main()

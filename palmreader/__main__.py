"""
Command line entry point for the webcam demo.

Usage examples:
    palmreader                           # camera 0, ./config.json
    python -m palmreader --config my.json --log-level DEBUG
"""

from __future__ import annotations

import argparse
import logging


def parse_args(argv=None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Webcam hand-gesture engine demo")
    parser.add_argument(
        "--config",
        default="config.json",
        help="JSON config file; reloaded automatically when it changes.",
    )
    parser.add_argument(
        "--log-level",
        default="INFO",
        choices=("DEBUG", "INFO", "WARNING", "ERROR"),
        help="Logging verbosity.",
    )
    return parser.parse_args(argv)


def main(argv=None) -> None:
    args = parse_args(argv)
    logging.basicConfig(
        level=getattr(logging, args.log_level),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    # camera stack is optional, import it only when the demo actually runs
    from .main_loop import main as run_main_loop

    run_main_loop(args.config)


if __name__ == "__main__":
    main()

#!/usr/bin/env python3
"""
OSC receiver example.

Binds a local UDP port, pumps the OSC service at a fixed rate and prints
every inbound message. Pair it with ``osc_sender.py`` or any other OSC client
for quick smoke tests.

Usage:
    python examples/osc_receiver.py --port 6969 --address /test
"""

from __future__ import annotations

import argparse
import sys
import time
from typing import Tuple

from oscbridge import Message, OSCConfig, OSCService


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description=__doc__, formatter_class=argparse.RawDescriptionHelpFormatter)
    parser.add_argument("--port", type=int, default=6969, help="Local UDP port to listen on (default: 6969)")
    parser.add_argument("--host", default="0.0.0.0", help="Interface to bind (default: 0.0.0.0)")
    parser.add_argument(
        "--address",
        default="*",
        help="Only print this address (default: '*', print every message)",
    )
    parser.add_argument("--rate", type=float, default=60.0, help="Pump calls per second (default: 60)")
    parser.add_argument(
        "--run-seconds",
        type=float,
        default=None,
        help="Stop after this many seconds (default: run until Ctrl+C)",
    )
    return parser


def main(argv: Tuple[str, ...] | None = None) -> int:
    args = build_parser().parse_args(argv)
    config = OSCConfig(local_port=args.port, local_host=args.host)
    service = OSCService(config=config)

    def show(message: Message) -> None:
        timestamp = time.strftime("%H:%M:%S")
        print(f"[{timestamp}] {message}")

    if args.address in ("", "*"):
        service.set_catch_all_handler(show)
    else:
        service.set_handler(args.address, show)

    if not service.start():
        print(f"Could not listen on {args.host}:{args.port}: {service.transport.last_error}", file=sys.stderr)
        return 1

    print(f"Listening for OSC on {args.host}:{args.port}. Press Ctrl+C to stop.")
    deadline = None if args.run_seconds is None else time.monotonic() + args.run_seconds
    period = 1.0 / max(args.rate, 1.0)
    try:
        while deadline is None or time.monotonic() < deadline:
            service.pump()
            time.sleep(period)
        service.pump()
    except KeyboardInterrupt:
        print("\nStopping receiver...")
    finally:
        service.stop()
    return 0


if __name__ == "__main__":
    sys.exit(main(tuple(sys.argv[1:])))

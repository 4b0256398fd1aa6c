#!/usr/bin/env python3
"""
OSC sender example.

Sends text-formatted messages (``/address value value ...``) to a receiver,
either once from the command line or repeatedly from stdin. Several messages
given with ``--bundle`` are sent as a single OSC bundle.

Usage:
    python examples/osc_sender.py --host 127.0.0.1 --port 6161 "/test 10" "/name \\"hello world\\""
    echo "/volume 0.5" | python examples/osc_sender.py --port 6161
"""

from __future__ import annotations

import argparse
import sys
from typing import Iterable, Sequence, Tuple

from oscbridge import OSCConfig, OSCService, parse_text


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description=__doc__, formatter_class=argparse.RawDescriptionHelpFormatter)
    parser.add_argument("messages", nargs="*", help="Messages in text form. Reads stdin lines when omitted.")
    parser.add_argument("--host", default="127.0.0.1", help="Receiver IP (default: 127.0.0.1)")
    parser.add_argument("--port", type=int, default=6161, help="Receiver UDP port (default: 6161)")
    parser.add_argument(
        "--local-port",
        type=int,
        default=0,
        help="Local UDP port to bind for replies (default: 0, any free port)",
    )
    parser.add_argument("--bundle", action="store_true", help="Send all messages as one bundle.")
    return parser


def iter_lines(messages: Sequence[str], stream=None) -> Iterable[str]:
    if messages:
        yield from messages
        return
    for line in stream or sys.stdin:
        line = line.strip()
        if line:
            yield line


def main(argv: Tuple[str, ...] | None = None, stream=None) -> int:
    args = build_parser().parse_args(argv)
    config = OSCConfig(local_port=args.local_port, remote_host=args.host, remote_port=args.port)
    service = OSCService(config=config)

    try:
        parsed = [parse_text(line) for line in iter_lines(args.messages, stream)]
        if not parsed:
            print("Nothing to send.")
            return 0
        if args.bundle:
            ok = service.send_batch(parsed)
        else:
            ok = all([service.send(message) for message in parsed])
        for message in parsed:
            print(f"-> {args.host}:{args.port} {message}")
        if not ok:
            print(f"Sending failed: {service.transport.last_error}", file=sys.stderr)
            return 1
        return 0
    finally:
        service.close()


if __name__ == "__main__":
    sys.exit(main(tuple(sys.argv[1:])))

from __future__ import annotations

import io
import socket

import examples.osc_receiver as receiver_example
import examples.osc_sender as sender_example
from oscbridge.codec import decode, decode_bundles_or_message
from oscbridge.message import Message


def _listener():
    sock = socket.socket(socket.AF_INET, socket.SOCK_DGRAM)
    sock.bind(("127.0.0.1", 0))
    sock.settimeout(2.0)
    return sock


def test_sender_parser_defaults():
    args = sender_example.build_parser().parse_args([])

    assert args.host == "127.0.0.1"
    assert args.port == 6161
    assert args.messages == []
    assert not args.bundle


def test_sender_sends_command_line_messages(udp_port, capsys):
    with _listener() as listener:
        port = listener.getsockname()[1]
        exit_code = sender_example.main(("--port", str(port), "/test 10", '/name "hello world"'))
        first, _ = listener.recvfrom(1024)
        second, _ = listener.recvfrom(1024)

    assert exit_code == 0
    assert decode(first) == Message("/test", 10)
    assert decode(second) == Message("/name", "hello world")
    assert "/test 10" in capsys.readouterr().out


def test_sender_bundles_stdin_lines(udp_port):
    stream = io.StringIO("/a 1\n\n/b 2.5\n")
    with _listener() as listener:
        port = listener.getsockname()[1]
        exit_code = sender_example.main(("--port", str(port), "--bundle"), stream=stream)
        packet, _ = listener.recvfrom(1024)

    assert exit_code == 0
    assert decode_bundles_or_message(packet) == [Message("/a", 1), Message("/b", 2.5)]


def test_receiver_reports_bind_failure(udp_port, capsys):
    with socket.socket(socket.AF_INET, socket.SOCK_DGRAM) as blocker:
        blocker.bind(("127.0.0.1", udp_port))
        exit_code = receiver_example.main(("--host", "127.0.0.1", "--port", str(udp_port), "--run-seconds", "0"))

    assert exit_code == 1
    assert "Could not listen" in capsys.readouterr().err


def test_receiver_runs_for_a_bounded_time(udp_port, capsys):
    exit_code = receiver_example.main(
        ("--host", "127.0.0.1", "--port", str(udp_port), "--run-seconds", "0.05", "--address", "/only")
    )

    assert exit_code == 0
    assert "Listening for OSC" in capsys.readouterr().out

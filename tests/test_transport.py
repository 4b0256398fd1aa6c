import socket
import threading
import time
import unittest

from oscbridge.errors import TransportError
from oscbridge.transport import UDPTransport
from tests.conftest import reserve_udp_port


class TestUDPTransportLoopback(unittest.TestCase):
    def setUp(self):
        port = reserve_udp_port()
        if port is None:
            self.skipTest("UDP sockets are not permitted in this environment.")
        self.port = port
        # Sends to its own receive port so one object covers both directions.
        self.transport = UDPTransport("127.0.0.1", self.port, self.port, local_host="127.0.0.1")

    def tearDown(self):
        if hasattr(self, "transport"):
            self.transport.close()

    def test_send_before_open_opens_lazily(self):
        self.assertFalse(self.transport.is_open())
        self.assertTrue(self.transport.send(b"/ping\0\0\0,\0\0\0"))
        self.assertTrue(self.transport.is_open())
        self.assertEqual(self.transport.receive(), b"/ping\0\0\0,\0\0\0")

    def test_one_receive_returns_one_datagram(self):
        self.transport.send(b"first\0\0\0")
        self.transport.send(b"second\0\0")
        self.assertEqual(self.transport.receive(), b"first\0\0\0")
        self.assertEqual(self.transport.receive(), b"second\0\0")

    def test_close_is_idempotent(self):
        self.transport.open()
        self.transport.close()
        self.transport.close()
        self.assertFalse(self.transport.is_open())

    def test_close_without_open(self):
        transport = UDPTransport("127.0.0.1", self.port, self.port)
        transport.close()
        self.assertFalse(transport.is_open())

    def test_send_after_close_reports_error(self):
        self.transport.open()
        self.transport.close()
        self.assertFalse(self.transport.send(b"late\0\0\0\0"))
        self.assertIsInstance(self.transport.last_error, TransportError)
        self.assertFalse(self.transport.is_open())

    def test_receive_after_close_returns_none(self):
        self.transport.open()
        self.transport.close()
        self.assertIsNone(self.transport.receive())
        self.assertIsInstance(self.transport.last_error, TransportError)

    def test_explicit_open_after_close(self):
        self.transport.open()
        self.transport.close()
        self.assertTrue(self.transport.open())
        self.assertTrue(self.transport.send(b"again\0\0\0"))
        self.assertEqual(self.transport.receive(), b"again\0\0\0")

    def test_close_unblocks_receive(self):
        self.transport.open()
        results = []

        def _worker():
            results.append(self.transport.receive())

        thread = threading.Thread(target=_worker)
        thread.start()
        time.sleep(0.1)
        self.assertTrue(thread.is_alive())
        self.transport.close()
        thread.join(timeout=2.0)
        self.assertFalse(thread.is_alive())
        self.assertEqual(results, [None])

    def test_bind_failure_returns_false(self):
        self.transport.open()
        clash = UDPTransport("127.0.0.1", self.port, self.port, local_host="127.0.0.1")
        try:
            self.assertFalse(clash.open())
            self.assertFalse(clash.is_open())
            self.assertIsInstance(clash.last_error, TransportError)
            self.assertFalse(clash.send(b"x\0\0\0"))
        finally:
            clash.close()

    def test_local_port_setter_reopens(self):
        new_port = reserve_udp_port()
        self.transport.open()
        self.transport.local_port = new_port
        self.assertTrue(self.transport.is_open())
        self.assertEqual(self.transport.local_address[1], new_port)

    def test_remote_endpoint_can_be_redirected(self):
        with socket.socket(socket.AF_INET, socket.SOCK_DGRAM) as listener:
            listener.bind(("127.0.0.1", 0))
            listener.settimeout(2.0)
            self.transport.remote_port = listener.getsockname()[1]
            self.assertTrue(self.transport.send(b"elsewhere\0\0\0"))
            data, _ = listener.recvfrom(64)
        self.assertEqual(data, b"elsewhere\0\0\0")

    def test_context_manager(self):
        with UDPTransport("127.0.0.1", self.port, 0, local_host="127.0.0.1") as transport:
            self.assertTrue(transport.is_open())
            self.assertNotEqual(transport.local_address[1], 0)
        self.assertFalse(transport.is_open())


if __name__ == "__main__":
    unittest.main()

from __future__ import annotations

import select
import socket
import threading
from typing import Optional, Tuple

from oscbridge.errors import TransportError
from oscbridge.platform.logging import create_logger


class UDPTransport:
    """
    UDP endpoint with one socket for sending and one bound socket for receiving.

    The transport starts closed and opens itself on the first ``send`` or
    ``receive``. ``close`` wakes a blocked ``receive`` and releases both
    sockets; once closed it only comes back through an explicit ``open``.
    """

    def __init__(
        self,
        remote_host: str,
        remote_port: int,
        local_port: int,
        *,
        local_host: str = "0.0.0.0",
        receive_buffer_size: int = 65535,
        logger=None,
    ) -> None:
        self._remote_host = remote_host
        self._remote_port = remote_port
        self._local_port = local_port
        self._local_host = local_host
        self._receive_buffer_size = receive_buffer_size
        self._logger = logger if logger else create_logger(__name__ + ".UDPTransport")

        self._sender: Optional[socket.socket] = None
        self._receiver: Optional[socket.socket] = None
        self._wake_r: Optional[socket.socket] = None
        self._wake_w: Optional[socket.socket] = None
        self._socket_open = False
        self._closed_explicitly = False
        self._lock = threading.Lock()
        self.last_error: Optional[TransportError] = None

    # Lifecycle --------------------------------------------------------
    def open(self) -> bool:
        """Bind the receive socket and create the send socket. Returns False on failure."""
        with self._lock:
            if self._socket_open:
                return True
            self._closed_explicitly = False
            try:
                self._sender = socket.socket(socket.AF_INET, socket.SOCK_DGRAM)
                self._receiver = socket.socket(socket.AF_INET, socket.SOCK_DGRAM)
                self._receiver.bind((self._local_host, self._local_port))
                self._wake_r, self._wake_w = socket.socketpair()
            except OSError as exc:
                self._logger.warning("Cannot open UDP interface at port %s: %s", self._local_port, exc)
                self.last_error = TransportError(f"Cannot bind UDP port {self._local_port}: {exc}")
                self._release()
                return False
            self._socket_open = True
            self.last_error = None
            self._logger.debug(
                "Opened UDP transport %s:%s -> %s:%s",
                self._local_host,
                self.local_address[1],
                self._remote_host,
                self._remote_port,
            )
            return True

    def close(self) -> None:
        """Release both sockets. Safe to call repeatedly or before ``open``."""
        with self._lock:
            self._closed_explicitly = True
            if self._wake_w is not None:
                try:
                    self._wake_w.send(b"\0")
                except OSError:
                    pass
            self._release()

    def _release(self) -> None:
        for sock in (self._sender, self._receiver, self._wake_w, self._wake_r):
            if sock is not None:
                sock.close()
        self._sender = self._receiver = None
        self._wake_r = self._wake_w = None
        self._socket_open = False

    def _ensure_open(self) -> bool:
        if self._socket_open:
            return True
        if self._closed_explicitly:
            return False
        return self.open()

    def is_open(self) -> bool:
        return self._socket_open

    # Datagram I/O -----------------------------------------------------
    def send(self, data: bytes) -> bool:
        """
        Transmit ``data`` as one datagram to the remote endpoint.

        Returns False and stores a ``TransportError`` in ``last_error`` when the
        transport is closed or the OS rejects the datagram.
        """
        if not self._ensure_open():
            self.last_error = TransportError("Send on a closed UDP transport")
            self._logger.warning("Dropping %d byte datagram: transport is closed", len(data))
            return False
        sender = self._sender
        if sender is None:
            self.last_error = TransportError("Send on a closed UDP transport")
            return False
        try:
            sender.sendto(data, (self._remote_host, self._remote_port))
        except OSError as exc:
            self.last_error = TransportError(
                f"Sending to {self._remote_host}:{self._remote_port} failed: {exc}"
            )
            self._logger.warning("%s", self.last_error)
            return False
        return True

    def receive(self) -> Optional[bytes]:
        """
        Block until one datagram arrives and return its bytes.

        Returns None when the transport is (or becomes) closed.
        """
        if not self._ensure_open():
            self.last_error = TransportError("Receive on a closed UDP transport")
            return None
        receiver, wake_r = self._receiver, self._wake_r
        if receiver is None or wake_r is None:
            return None
        try:
            readable, _, _ = select.select([receiver, wake_r], [], [])
            if wake_r in readable or not self._socket_open:
                return None
            data, _ = receiver.recvfrom(self._receive_buffer_size)
        except (OSError, ValueError) as exc:
            # The sockets were closed underneath a blocked select.
            if self._socket_open:
                self.last_error = TransportError(f"Receive failed: {exc}")
                self._logger.warning("%s", self.last_error)
            return None
        return data

    # Endpoint properties ----------------------------------------------
    @property
    def remote_host(self) -> str:
        return self._remote_host

    @remote_host.setter
    def remote_host(self, value: str) -> None:
        self._remote_host = value

    @property
    def remote_port(self) -> int:
        return self._remote_port

    @remote_port.setter
    def remote_port(self, value: int) -> None:
        self._remote_port = value

    @property
    def local_port(self) -> int:
        return self._local_port

    @local_port.setter
    def local_port(self, value: int) -> None:
        self._local_port = value
        self.close()
        self.open()

    @property
    def local_address(self) -> Tuple[str, int]:
        """Address the receive socket is bound to (resolves port 0 once open)."""
        receiver = self._receiver
        if receiver is None:
            return (self._local_host, self._local_port)
        return receiver.getsockname()

    def __enter__(self) -> "UDPTransport":
        self.open()
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    def __repr__(self) -> str:
        state = "open" if self._socket_open else "closed"
        return (
            f"UDPTransport({self._local_host}:{self._local_port} -> "
            f"{self._remote_host}:{self._remote_port}, {state})"
        )


__all__ = ["UDPTransport"]

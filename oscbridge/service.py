from __future__ import annotations

import threading
import time
from typing import Callable, List, Optional, Sequence, Union

from oscbridge.codec import decode_bundles_or_message, dump, encode, encode_bundle, parse_text
from oscbridge.errors import DecodeError, HandlerError
from oscbridge.message import Message
from oscbridge.platform.config import OSCConfig
from oscbridge.platform.logging import create_logger
from oscbridge.registry import HandlerRegistry, MessageHandler
from oscbridge.transport import UDPTransport


class OSCService:
    """
    Receive, queue and dispatch OSC messages; send messages and bundles.

    A background thread blocks on the transport, decodes every datagram and
    appends the messages to an inbox. Nothing is dispatched from that thread:
    the host calls :meth:`pump` once per control cycle, which drains the inbox
    and runs the catch-all handler followed by the handlers registered for the
    message address.

    While paused, datagrams are still read from the socket but their messages
    are discarded, not buffered.
    """

    def __init__(
        self,
        transport: Optional[UDPTransport] = None,
        *,
        config: Optional[OSCConfig] = None,
        max_packet_size: Optional[int] = None,
        idle_sleep: Optional[float] = None,
        on_handler_error: Optional[Callable[[HandlerError], None]] = None,
        logger=None,
    ) -> None:
        self._logger = logger if logger else create_logger(__name__ + ".OSCService")
        config = config if config else OSCConfig()
        if transport is None:
            transport = UDPTransport(
                config.remote_host,
                config.remote_port,
                config.local_port,
                local_host=config.local_host,
                receive_buffer_size=config.receive_buffer_size,
                logger=self._logger.getChild("transport"),
            )
        self.transport = transport
        self.max_packet_size = max_packet_size if max_packet_size is not None else config.max_packet_size
        self.idle_sleep = idle_sleep if idle_sleep is not None else config.idle_sleep
        self.on_handler_error = on_handler_error

        self._registry = HandlerRegistry()
        self._inbox: List[Message] = []
        self._inbox_lock = threading.Lock()
        self._paused = False
        self._running = False
        self._shutdown: Optional[threading.Event] = None
        self._thread: Optional[threading.Thread] = None
        self._lifecycle_lock = threading.Lock()

    # Lifecycle --------------------------------------------------------
    def start(self) -> bool:
        """Open the transport and launch the receive thread. Returns False if the port cannot be bound."""
        with self._lifecycle_lock:
            if self._running:
                return True
            if not self.transport.open():
                self._logger.error("OSC service not started: %s", self.transport.last_error)
                return False
            # Each thread gets its own flag so a restart cannot revive a thread that is still stopping.
            self._shutdown = threading.Event()
            self._running = True
            self._thread = threading.Thread(
                target=self._receive_loop, args=(self._shutdown,), name="OSCService", daemon=True
            )
            self._thread.start()
            self._logger.info("OSC service listening on %s:%s", *self.transport.local_address[:2])
            return True

    def stop(self, timeout: Optional[float] = None) -> None:
        """Signal the receive thread, close the transport to unblock it and wait for it to finish."""
        with self._lifecycle_lock:
            if self._shutdown is not None:
                self._shutdown.set()
            self.transport.close()
            thread, self._thread = self._thread, None
            self._running = False
        if thread is not None and thread is not threading.current_thread():
            thread.join(timeout)
            if thread.is_alive():
                self._logger.warning("OSC receive thread did not finish within %s seconds", timeout)
            else:
                self._logger.debug("OSC receive thread finished")

    def close(self) -> None:
        self.stop()

    @property
    def running(self) -> bool:
        return self._running

    def __enter__(self) -> "OSCService":
        self.start()
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.stop()

    # Receive side -----------------------------------------------------
    def _receive_loop(self, shutdown: threading.Event) -> None:
        while not shutdown.is_set():
            data = self.transport.receive()
            if shutdown.is_set():
                break
            if not data:
                time.sleep(self.idle_sleep)
                continue
            try:
                self._handle_datagram(data)
            except Exception:
                self._logger.exception("Dropping datagram (%d bytes) after an unexpected error", len(data))

    def _handle_datagram(self, data: bytes) -> None:
        try:
            messages = decode_bundles_or_message(data)
        except DecodeError as exc:
            self._logger.warning("Dropping undecodable datagram (%d bytes): %s", len(data), exc)
            self._logger.debug("Datagram bytes: %s", dump(data))
            return
        if self._paused:
            self._logger.debug("Paused, discarding %d message(s)", len(messages))
            return
        with self._inbox_lock:
            self._inbox.extend(messages)

    def set_paused(self, paused: bool) -> None:
        self._paused = bool(paused)

    @property
    def paused(self) -> bool:
        return self._paused

    def pending(self) -> int:
        with self._inbox_lock:
            return len(self._inbox)

    def pump(self) -> int:
        """
        Dispatch every queued message and return how many were drained.

        Must only be called from one thread. Handler failures are logged and
        reported to ``on_handler_error``; they never stop the remaining handlers.
        """
        with self._inbox_lock:
            messages, self._inbox = self._inbox, []

        for message in messages:
            catch_all = self._registry.catch_all
            if catch_all is not None:
                self._invoke(catch_all, message)
            for handler in self._registry.handlers_for(message.address):
                self._invoke(handler, message)
        return len(messages)

    def _invoke(self, handler: MessageHandler, message: Message) -> None:
        try:
            handler(message)
        except Exception as exc:
            error = HandlerError(message, handler, exc)
            self._logger.error("%s", error, exc_info=exc)
            if self.on_handler_error is not None:
                try:
                    self.on_handler_error(error)
                except Exception:
                    self._logger.exception("on_handler_error callback failed for %s", message.address)

    # Handler registration ---------------------------------------------
    def set_handler(self, address: str, handler: MessageHandler) -> None:
        """Append ``handler`` to the handlers called for messages sent to ``address``."""
        self._registry.add(address, handler)

    def remove_handler(self, address: str, handler: MessageHandler) -> bool:
        return self._registry.remove(address, handler)

    def set_catch_all_handler(self, handler: Optional[MessageHandler]) -> None:
        """Replace the handler called for every message; None clears it."""
        self._registry.set_catch_all(handler)

    def addresses(self) -> List[str]:
        return self._registry.addresses()

    # Send side --------------------------------------------------------
    def send(self, message: Union[Message, str]) -> bool:
        """
        Encode and transmit one message (a ``Message`` or a text line such as ``"/test 10"``).

        Raises:
            EncodeError: if the message exceeds ``max_packet_size``; nothing is sent.
        """
        if isinstance(message, str):
            message = parse_text(message)
        packet = encode(message, self.max_packet_size)
        return self._transmit(packet)

    def send_batch(self, messages: Sequence[Message]) -> bool:
        """Transmit several messages in one datagram, bundled when there is more than one."""
        packet = encode_bundle(list(messages), self.max_packet_size)
        return self._transmit(packet)

    def _transmit(self, packet: bytes) -> bool:
        sent = self.transport.send(packet)
        if sent:
            self._logger.debug("Sent %d bytes", len(packet))
        return sent

    def __repr__(self) -> str:
        state = "running" if self._running else "stopped"
        return f"OSCService({self.transport!r}, {state})"


__all__ = ["OSCService"]

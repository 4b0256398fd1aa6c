from __future__ import annotations

from typing import Any, Callable, Optional


class OSCError(Exception):
    """Base class for every error raised by oscbridge."""


class DecodeError(OSCError, ValueError):
    """Raised when bytes cannot be turned into a message (truncation, unknown tags, bad lengths)."""


class EncodeError(OSCError, ValueError):
    """Raised when a message does not fit into the configured packet size."""


class TransportError(OSCError, OSError):
    """Describes a failed bind, send or receive on the UDP transport."""


class HandlerError(OSCError):
    """
    Wraps an exception raised by a registered handler.

    The service never raises this; it is logged and handed to the optional
    ``on_handler_error`` callback. The original exception is ``__cause__``.
    """

    def __init__(self, message: Any, handler: Optional[Callable[..., Any]], error: BaseException) -> None:
        name = getattr(handler, "__qualname__", repr(handler))
        address = getattr(message, "address", "?")
        super().__init__(f"Handler {name} failed for {address}: {error!r}")
        self.message = message
        self.handler = handler
        self.error = error
        self.__cause__ = error


__all__ = ["OSCError", "DecodeError", "EncodeError", "TransportError", "HandlerError"]

from __future__ import annotations

import threading
from typing import Callable, Dict, List, Optional

from oscbridge.message import Message

MessageHandler = Callable[[Message], object]


class HandlerRegistry:
    """
    Address-keyed handler lists plus a single catch-all handler.

    Every read and write happens under one lock; lookups return copies so the
    caller can invoke handlers without holding it.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._handlers: Dict[str, List[MessageHandler]] = {}
        self._catch_all: Optional[MessageHandler] = None

    def add(self, address: str, handler: MessageHandler) -> None:
        if not callable(handler):
            raise TypeError(f"Handler for {address!r} is not callable")
        with self._lock:
            self._handlers.setdefault(address, []).append(handler)

    def remove(self, address: str, handler: MessageHandler) -> bool:
        """Remove the first registration of ``handler`` for ``address``."""
        with self._lock:
            handlers = self._handlers.get(address)
            if not handlers or handler not in handlers:
                return False
            handlers.remove(handler)
            if not handlers:
                del self._handlers[address]
            return True

    def set_catch_all(self, handler: Optional[MessageHandler]) -> None:
        if handler is not None and not callable(handler):
            raise TypeError("Catch-all handler is not callable")
        with self._lock:
            self._catch_all = handler

    @property
    def catch_all(self) -> Optional[MessageHandler]:
        with self._lock:
            return self._catch_all

    def handlers_for(self, address: str) -> List[MessageHandler]:
        with self._lock:
            return list(self._handlers.get(address, ()))

    def addresses(self) -> List[str]:
        with self._lock:
            return list(self._handlers)

    def clear(self) -> None:
        with self._lock:
            self._handlers.clear()
            self._catch_all = None


__all__ = ["HandlerRegistry", "MessageHandler"]

"""
Conversion between oscbridge messages and python-osc message objects.

Handy when part of an application already speaks python-osc (servers built on
``pythonosc.osc_server`` for instance) and needs to hand messages to, or
receive them from, an :class:`~oscbridge.service.OSCService`.
"""

from __future__ import annotations

from typing import Any

from oscbridge._optional import optional_import
from oscbridge.errors import EncodeError
from oscbridge.message import Float32, Int32, Message, String, Unsupported, Value

_INT_RANGE = range(-(2**31), 2**31)


def _builder_module():
    return optional_import("pythonosc.osc_message_builder", feature="python-osc interop")


def to_pythonosc(message: Message):
    """Build the equivalent ``pythonosc.osc_message.OscMessage``."""
    builder_mod = _builder_module()
    builder = builder_mod.OscMessageBuilder(address=message.address)
    for value in message.values:
        if isinstance(value, Int32):
            builder.add_arg(value.value, builder_mod.OscMessageBuilder.ARG_TYPE_INT)
        elif isinstance(value, Float32):
            builder.add_arg(value.value, builder_mod.OscMessageBuilder.ARG_TYPE_FLOAT)
        elif isinstance(value, String):
            builder.add_arg(value.value, builder_mod.OscMessageBuilder.ARG_TYPE_STRING)
        else:
            raise EncodeError(f"python-osc has no equivalent for {value!r} in {message.address}")
    return builder.build()


def _from_param(param: Any) -> Value:
    if isinstance(param, bool):
        return Unsupported()
    if isinstance(param, int):
        return Int32(param) if param in _INT_RANGE else Unsupported()
    if isinstance(param, float):
        return Float32(param)
    if isinstance(param, str):
        return String(param)
    return Unsupported()


def from_pythonosc(osc_message) -> Message:
    """
    Convert a python-osc message; argument types without an oscbridge variant
    (blobs, booleans, 64-bit values, ...) become ``Unsupported``.
    """
    message = Message(osc_message.address)
    message.values.extend(_from_param(param) for param in osc_message.params)
    return message


__all__ = ["to_pythonosc", "from_pythonosc"]

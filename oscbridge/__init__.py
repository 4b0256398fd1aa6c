from importlib import import_module
from typing import TYPE_CHECKING

_LAZY_EXPORTS = {
    "Message": ".message",
    "Int32": ".message",
    "Float32": ".message",
    "String": ".message",
    "Unsupported": ".message",
    "encode": ".codec",
    "encode_bundle": ".codec",
    "decode": ".codec",
    "decode_bundles_or_message": ".codec",
    "parse_text": ".codec",
    "UDPTransport": ".transport",
    "HandlerRegistry": ".registry",
    "OSCService": ".service",
    "OSCConfig": ".platform.config",
    "create_logger": ".platform.logging",
    "OSCError": ".errors",
    "DecodeError": ".errors",
    "EncodeError": ".errors",
    "TransportError": ".errors",
    "HandlerError": ".errors",
    "to_pythonosc": ".interop",
    "from_pythonosc": ".interop",
}

__all__ = tuple(_LAZY_EXPORTS)

if TYPE_CHECKING:
    from .codec import decode, decode_bundles_or_message, encode, encode_bundle, parse_text
    from .errors import DecodeError, EncodeError, HandlerError, OSCError, TransportError
    from .interop import from_pythonosc, to_pythonosc
    from .message import Float32, Int32, Message, String, Unsupported
    from .platform.config import OSCConfig
    from .platform.logging import create_logger
    from .registry import HandlerRegistry
    from .service import OSCService
    from .transport import UDPTransport


def __getattr__(name: str):
    try:
        module = import_module(_LAZY_EXPORTS[name], __name__)
    except KeyError as exc:
        raise AttributeError(f"module {__name__!r} has no attribute {name!r}") from exc
    value = getattr(module, name)
    globals()[name] = value
    return value


def __dir__():
    return sorted(set(__all__) | set(globals().keys()))

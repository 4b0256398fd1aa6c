from __future__ import annotations

from importlib import import_module


class OptionalDependencyError(ImportError):
    """Raised when an interop feature is used without the ``comms`` extra installed."""

    def __init__(self, feature: str, extra: str = "comms") -> None:
        super().__init__(
            f"{feature} requires optional dependencies that are not installed. "
            f"Install them via `pip install oscbridge[{extra}]`."
        )
        self.feature = feature
        self.extra = extra


def optional_import(module: str, *, feature: str, extra: str = "comms"):
    """Import ``module`` or raise ``OptionalDependencyError`` naming the extra to install."""
    try:
        return import_module(module)
    except ImportError as exc:
        raise OptionalDependencyError(feature, extra) from exc


__all__ = ["OptionalDependencyError", "optional_import"]

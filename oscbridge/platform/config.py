from __future__ import annotations

import os
import platform
from dataclasses import dataclass, fields
from typing import Dict, Mapping, Optional

DEFAULT_LOCAL_PORT = 6969
DEFAULT_REMOTE_HOST = "127.0.0.1"
DEFAULT_REMOTE_PORT = 6161
DEFAULT_MAX_PACKET_SIZE = 1024
ENV_PREFIX = "OSCBRIDGE_"


def get_config_path() -> str:
    """
    Determine the path to the oscbridge configuration file.

    Returns:
        Absolute path to the config file under the user's home directory.
    """
    system = platform.system()
    if system in {"Darwin", "Linux"}:
        return os.path.expanduser("~/.oscbridge_env_vars")
    if system == "Windows":
        home = os.environ.get("USERPROFILE")
        if not home:
            raise RuntimeError("Unable to determine USERPROFILE on Windows")
        return os.path.join(home, ".oscbridge_env_vars")
    raise ValueError(f"Unsupported operating system: {system}")


def read_config_file(path: Optional[str] = None) -> Dict[str, str]:
    """
    Load all ``KEY=VALUE`` pairs from a config file.

    Returns:
        Dictionary of key/value pairs. Returns empty dict if file does not exist.
    """
    config_path = path or get_config_path()
    if not os.path.exists(config_path):
        return {}

    with open(config_path, "r", encoding="utf-8") as file:
        result: Dict[str, str] = {}
        for line in file:
            line = line.strip()
            if not line or line.startswith("#") or "=" not in line:
                continue
            key, value = line.split("=", 1)
            result[key.strip()] = value.strip()
        return result


def _validate_port(name: str, port: int) -> int:
    port = int(port)
    if not 0 <= port <= 65535:
        raise ValueError(f"{name} must be within 0..65535, got {port}")
    return port


@dataclass
class OSCConfig:
    """Endpoint and buffer settings for a transport/service pair."""

    local_port: int = DEFAULT_LOCAL_PORT
    remote_host: str = DEFAULT_REMOTE_HOST
    remote_port: int = DEFAULT_REMOTE_PORT
    local_host: str = "0.0.0.0"
    max_packet_size: int = DEFAULT_MAX_PACKET_SIZE
    receive_buffer_size: int = 65535
    idle_sleep: float = 0.005

    def __post_init__(self) -> None:
        self.local_port = _validate_port("local_port", self.local_port)
        self.remote_port = _validate_port("remote_port", self.remote_port)
        if not self.remote_host:
            raise ValueError("remote_host must not be empty")
        if self.max_packet_size <= 0:
            raise ValueError("max_packet_size must be positive")
        if self.receive_buffer_size <= 0:
            raise ValueError("receive_buffer_size must be positive")
        if self.idle_sleep < 0:
            raise ValueError("idle_sleep must not be negative")

    @classmethod
    def from_mapping(cls, values: Mapping[str, str], prefix: str = ENV_PREFIX) -> "OSCConfig":
        """Build a config from ``PREFIX_FIELD`` keys, ignoring unrelated entries."""
        kwargs = {}
        for field in fields(cls):
            raw = values.get(f"{prefix}{field.name.upper()}")
            if raw is None or raw == "":
                continue
            if field.type in ("int", int):
                kwargs[field.name] = int(raw)
            elif field.type in ("float", float):
                kwargs[field.name] = float(raw)
            else:
                kwargs[field.name] = raw
        return cls(**kwargs)

    @classmethod
    def from_env(cls, prefix: str = ENV_PREFIX, environ: Optional[Mapping[str, str]] = None) -> "OSCConfig":
        return cls.from_mapping(os.environ if environ is None else environ, prefix=prefix)

    @classmethod
    def from_file(cls, path: Optional[str] = None, prefix: str = ENV_PREFIX) -> "OSCConfig":
        """Read the config file, letting environment variables override it."""
        values: Dict[str, str] = dict(read_config_file(path))
        values.update({key: value for key, value in os.environ.items() if key.startswith(prefix)})
        return cls.from_mapping(values, prefix=prefix)


__all__ = [
    "OSCConfig",
    "get_config_path",
    "read_config_file",
    "DEFAULT_LOCAL_PORT",
    "DEFAULT_REMOTE_HOST",
    "DEFAULT_REMOTE_PORT",
    "DEFAULT_MAX_PACKET_SIZE",
]

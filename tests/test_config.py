from __future__ import annotations

import pytest

from oscbridge.platform import config as config_module
from oscbridge.platform.config import OSCConfig, read_config_file


def test_defaults_match_historical_endpoint():
    config = OSCConfig()

    assert config.local_port == 6969
    assert config.remote_host == "127.0.0.1"
    assert config.remote_port == 6161
    assert config.max_packet_size == 1024


def test_from_env_reads_prefixed_keys():
    environ = {
        "OSCBRIDGE_LOCAL_PORT": "7000",
        "OSCBRIDGE_REMOTE_HOST": "10.0.0.2",
        "OSCBRIDGE_REMOTE_PORT": "7001",
        "OSCBRIDGE_IDLE_SLEEP": "0.01",
        "UNRELATED": "ignored",
    }

    config = OSCConfig.from_env(environ=environ)

    assert config.local_port == 7000
    assert config.remote_host == "10.0.0.2"
    assert config.remote_port == 7001
    assert config.idle_sleep == pytest.approx(0.01)


def test_invalid_port_is_rejected():
    with pytest.raises(ValueError):
        OSCConfig(local_port=70000)
    with pytest.raises(ValueError):
        OSCConfig.from_env(environ={"OSCBRIDGE_REMOTE_PORT": "-1"})


def test_read_config_file_skips_comments_and_blank_lines(tmp_path):
    path = tmp_path / "env_vars"
    path.write_text("# comment\n\nOSCBRIDGE_LOCAL_PORT = 8000\nbroken line\nOTHER=x=y\n", encoding="utf-8")

    assert read_config_file(str(path)) == {"OSCBRIDGE_LOCAL_PORT": "8000", "OTHER": "x=y"}
    assert read_config_file(str(tmp_path / "missing")) == {}


def test_from_file_is_overridden_by_environment(tmp_path, monkeypatch):
    path = tmp_path / "env_vars"
    path.write_text("OSCBRIDGE_LOCAL_PORT=8000\nOSCBRIDGE_REMOTE_PORT=8001\n", encoding="utf-8")
    monkeypatch.setenv("OSCBRIDGE_REMOTE_PORT", "9001")

    config = OSCConfig.from_file(str(path))

    assert config.local_port == 8000
    assert config.remote_port == 9001


def test_default_config_path_lives_in_home(monkeypatch):
    monkeypatch.setattr(config_module.platform, "system", lambda: "Linux")

    assert config_module.get_config_path().endswith(".oscbridge_env_vars")

from pathlib import Path

import pytest

from quill_nrepl.__main__ import main
from quill_nrepl.config import ServerConfig


def test_defaults(monkeypatch):
    for var in ("QUILL_NREPL_HOST", "QUILL_NREPL_PORT", "QUILL_NREPL_CHUNK_SIZE", "QUILL_NREPL_PORT_FILE"):
        monkeypatch.delenv(var, raising=False)
    config = ServerConfig.from_env()
    assert config == ServerConfig(host="127.0.0.1", port=0, chunk_size=4096, port_file=None)


def test_environment_and_overrides(monkeypatch):
    monkeypatch.setenv("QUILL_NREPL_HOST", "0.0.0.0")
    monkeypatch.setenv("QUILL_NREPL_PORT", "7888")
    monkeypatch.setenv("QUILL_NREPL_CHUNK_SIZE", "16")
    monkeypatch.setenv("QUILL_NREPL_PORT_FILE", "/tmp/.nrepl-port")
    config = ServerConfig.from_env(port=9000, chunk_size=None)
    assert config.host == "0.0.0.0"
    assert config.port == 9000
    assert config.chunk_size == 16
    assert config.port_file == Path("/tmp/.nrepl-port")


@pytest.mark.parametrize("var,value", [("QUILL_NREPL_PORT", "abc"), ("QUILL_NREPL_CHUNK_SIZE", "0")])
def test_invalid_numbers(monkeypatch, var, value):
    monkeypatch.setenv(var, value)
    with pytest.raises(ValueError):
        ServerConfig.from_env()


def test_unknown_override():
    with pytest.raises(TypeError):
        ServerConfig.from_env(colour="blue")


def test_cli_rejects_bad_arguments():
    with pytest.raises(SystemExit):
        main(["--port", "not-a-number"])

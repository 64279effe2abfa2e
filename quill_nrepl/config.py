from __future__ import annotations

import os
from dataclasses import dataclass, fields
from pathlib import Path
from typing import Any, Optional

DEFAULT_HOST = "127.0.0.1"
DEFAULT_PORT = 0
DEFAULT_CHUNK_SIZE = 4096


@dataclass
class ServerConfig:
    """
    Settings for NreplServer.

    port 0 asks the OS for an ephemeral port; port_file, when set, receives
    the bound port once the server is listening.
    """

    host: str = DEFAULT_HOST
    port: int = DEFAULT_PORT
    chunk_size: int = DEFAULT_CHUNK_SIZE
    port_file: Optional[Path] = None

    def __post_init__(self):
        if self.port_file is not None:
            self.port_file = Path(self.port_file)
        if not 0 <= self.port <= 65535:
            raise ValueError(f"Port out of range: {self.port}")
        if self.chunk_size <= 0:
            raise ValueError(f"Chunk size must be positive: {self.chunk_size}")

    @classmethod
    def from_env(cls, **overrides: Any) -> ServerConfig:
        """
        QUILL_NREPL_HOST, QUILL_NREPL_PORT, QUILL_NREPL_CHUNK_SIZE and
        QUILL_NREPL_PORT_FILE supply defaults; non-None overrides win.
        """
        env = os.environ
        values: dict[str, Any] = {}
        if env.get("QUILL_NREPL_HOST"):
            values["host"] = env["QUILL_NREPL_HOST"]
        if env.get("QUILL_NREPL_PORT"):
            values["port"] = int(env["QUILL_NREPL_PORT"])
        if env.get("QUILL_NREPL_CHUNK_SIZE"):
            values["chunk_size"] = int(env["QUILL_NREPL_CHUNK_SIZE"])
        if env.get("QUILL_NREPL_PORT_FILE"):
            values["port_file"] = Path(env["QUILL_NREPL_PORT_FILE"])
        known = {f.name for f in fields(cls)}
        for key, value in overrides.items():
            if key not in known:
                raise TypeError(f"Unknown server setting: {key}")
            if value is not None:
                values[key] = value
        return cls(**values)

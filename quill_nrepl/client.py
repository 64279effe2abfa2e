from __future__ import annotations

import itertools
import socket
from typing import Any, Dict, List, Optional

from quill_nrepl.bencode import decode_all, encode


def _text(raw: bytes) -> str:
    return raw.decode("utf-8", errors="replace")


class NreplClient:
    """
    Minimal blocking nREPL client.

        with NreplClient("127.0.0.1", port) as client:
            responses = client.request("eval", code="(+ 1 2)")

    Keyword field names use underscores; they are sent with dashes
    (file_path -> file-path).
    """

    def __init__(self, host: str, port: int, timeout: Optional[float] = 10.0, chunk_size: int = 4096):
        self.sock = socket.create_connection((host, port), timeout=timeout)
        self.chunk_size = chunk_size
        self._pending: List[Dict[str, Any]] = []
        self._remainder = b""
        self._ids = itertools.count(1)

    def send(self, msg: Dict[str, Any]) -> None:
        self.sock.sendall(encode(msg))

    def read(self) -> Dict[str, Any]:
        """Next message from the server; raises ConnectionError if it hung up."""
        while not self._pending:
            data = self.sock.recv(self.chunk_size)
            if not data:
                raise ConnectionError("Server closed the connection")
            values, self._remainder = decode_all(self._remainder + data, keywordize_keys=True, string_fn=_text)
            self._pending.extend(values)
        return self._pending.pop(0)

    def request(self, op: str, **fields: Any) -> List[Dict[str, Any]]:
        """Send one request and collect its responses up to the one with status done."""
        msg_id = str(next(self._ids))
        msg = {"op": op, "id": msg_id}
        msg.update({k.replace("_", "-"): v for k, v in fields.items()})
        self.send(msg)
        responses = []
        while True:
            resp = self.read()
            if resp.get("id") != msg_id:
                continue
            responses.append(resp)
            if "done" in resp.get("status", []):
                return responses

    def close(self) -> None:
        self.sock.close()

    def __enter__(self) -> NreplClient:
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

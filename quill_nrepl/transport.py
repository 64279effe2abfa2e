from __future__ import annotations

import logging
import socket
from typing import Any, Tuple

from quill.interpreter import Interpreter
from quill_nrepl.bencode import FramingError, IncompleteFrame, decode, encode
from quill_nrepl.ops import dispatch
from quill_nrepl.session import SessionContext

logger = logging.getLogger(__name__)


def _text(raw: bytes) -> str:
    return raw.decode("utf-8", errors="replace")


class Connection:
    """
    Serves one accepted socket until the peer disconnects.

    Requests are handled strictly in order: every response of a request is
    written, one sendall per message, before the next request is dispatched.
    """

    def __init__(self, sock: socket.socket, addr: Tuple[str, int], interp: Interpreter, chunk_size: int = 4096):
        self.sock = sock
        self.addr = addr
        self.interp = interp
        self.chunk_size = chunk_size
        self.session = SessionContext()
        self.remainder = b""

    def serve(self) -> None:
        logger.debug("Connection from %s:%s", *self.addr[:2])
        try:
            with self.sock:
                self._loop()
        except FramingError as exc:
            logger.warning("Closing connection from %s:%s: %s", *self.addr[:2], exc)
        except OSError as exc:
            logger.debug("Connection from %s:%s dropped: %s", *self.addr[:2], exc)
        finally:
            logger.debug("Connection from %s:%s closed", *self.addr[:2])

    def _loop(self) -> None:
        while True:
            data = self.sock.recv(self.chunk_size)
            if not data:
                return
            self.remainder += data
            # Each request is answered before the next one is decoded
            while self.remainder:
                try:
                    request, self.remainder = decode(self.remainder, keywordize_keys=True, string_fn=_text)
                except IncompleteFrame:
                    break
                self.handle(request)

    def handle(self, request: Any) -> None:
        if not isinstance(request, dict):
            raise FramingError(f"Expected a message dictionary, got {type(request).__name__}")
        for response in dispatch(self.interp, self.session, request):
            self.sock.sendall(encode(response))

"""
TCP nREPL server.

One accept thread plus one thread per connection. All connections share a
single Interpreter (and therefore the namespace registry); everything else
is per connection.

    server = NreplServer(ServerConfig(port=0))
    host, port = server.start().result()
    ...
    server.stop()
"""

from __future__ import annotations

import logging
import socket
import threading
from concurrent.futures import Future
from typing import Optional, Set, Tuple

from quill.interpreter import Interpreter
from quill_nrepl.config import ServerConfig
from quill_nrepl.transport import Connection

logger = logging.getLogger(__name__)

ACCEPT_POLL_INTERVAL = 0.1


class NreplServer:
    def __init__(self, config: Optional[ServerConfig] = None, interp: Optional[Interpreter] = None):
        self.config = config if config is not None else ServerConfig()
        self.interp = interp if interp is not None else Interpreter()
        self.address: Optional[Tuple[str, int]] = None
        self._listener: Optional[socket.socket] = None
        self._accept_thread: Optional[threading.Thread] = None
        self._stopping = threading.Event()
        self._connections: Set[socket.socket] = set()
        self._lock = threading.Lock()

    def start(self) -> Future:
        """
        Bind and start accepting in the background.

        Returns a Future resolved with the bound (host, port) once the
        listener is ready, or with the bind error.
        """
        if self._accept_thread is not None:
            raise RuntimeError("Server already started")
        started: Future = Future()
        self._accept_thread = threading.Thread(target=self._run, args=(started,), name="nrepl-accept", daemon=True)
        self._accept_thread.start()
        return started

    def _bind(self) -> socket.socket:
        listener = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
        try:
            listener.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
            listener.bind((self.config.host, self.config.port))
            listener.listen(16)
            listener.settimeout(ACCEPT_POLL_INTERVAL)
        except OSError:
            listener.close()
            raise
        return listener

    def _run(self, started: Future) -> None:
        try:
            self._listener = self._bind()
            host, port = self._listener.getsockname()[:2]
            self.address = (host, port)
            if self.config.port_file is not None:
                self.config.port_file.write_text(str(port), encoding="utf-8")
        except OSError as exc:
            logger.error("Could not start nREPL server on %s:%s: %s", self.config.host, self.config.port, exc)
            started.set_exception(exc)
            return
        logger.info("nREPL server listening on %s:%s", host, port)
        started.set_result(self.address)
        try:
            self._accept_loop(self._listener)
        finally:
            self._listener.close()

    def _accept_loop(self, listener: socket.socket) -> None:
        while not self._stopping.is_set():
            try:
                conn, addr = listener.accept()
            except socket.timeout:
                continue
            except OSError:
                if self._stopping.is_set():
                    break
                logger.exception("Accept failed")
                break
            conn.settimeout(None)
            with self._lock:
                if self._stopping.is_set():
                    conn.close()
                    break
                self._connections.add(conn)
            threading.Thread(target=self._serve, args=(conn, addr), name=f"nrepl-conn-{addr[1]}", daemon=True).start()

    def _serve(self, conn: socket.socket, addr: Tuple[str, int]) -> None:
        try:
            Connection(conn, addr, self.interp, self.config.chunk_size).serve()
        except Exception:
            logger.exception("Connection handler for %s:%s failed", *addr[:2])
        finally:
            with self._lock:
                self._connections.discard(conn)

    @property
    def connection_count(self) -> int:
        with self._lock:
            return len(self._connections)

    def stop(self) -> None:
        """
        Stop accepting and release the listening socket.

        Open connections are shut down so their threads unblock, but they are
        not joined; this returns promptly even with clients still attached.
        """
        if self._stopping.is_set():
            return
        self._stopping.set()
        if self._listener is not None:
            try:
                # Wakes an accept blocked in another thread
                self._listener.shutdown(socket.SHUT_RDWR)
            except OSError:
                pass
            self._listener.close()
        with self._lock:
            connections = list(self._connections)
        for conn in connections:
            try:
                conn.shutdown(socket.SHUT_RDWR)
            except OSError:
                pass  # already closed by its handler
        if self._accept_thread is not None and self._accept_thread is not threading.current_thread():
            self._accept_thread.join(timeout=ACCEPT_POLL_INTERVAL * 5)
        if self.config.port_file is not None and self.address is not None:
            self.config.port_file.unlink(missing_ok=True)
        logger.info("nREPL server stopped")

    def __enter__(self) -> NreplServer:
        self.start().result()
        return self

    def __exit__(self, *exc_info) -> None:
        self.stop()

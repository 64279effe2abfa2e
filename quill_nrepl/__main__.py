from __future__ import annotations

import argparse
import logging
import threading
from pathlib import Path
from typing import List, Optional

from quill_nrepl.config import ServerConfig
from quill_nrepl.server import NreplServer


def configure_logging(level: str = "INFO") -> None:
    logging.basicConfig(
        level=getattr(logging, str(level).upper(), logging.INFO),
        format="[%(asctime)s] %(levelname)s %(name)s: %(message)s",
        force=True,
    )


def main(argv: Optional[List[str]] = None) -> int:
    parser = argparse.ArgumentParser(prog="quill-nrepl", description="nREPL server for Quill")
    parser.add_argument("--host", help="bind address (default 127.0.0.1 or $QUILL_NREPL_HOST)")
    parser.add_argument("--port", type=int, help="bind port, 0 for any free port (default $QUILL_NREPL_PORT or 0)")
    parser.add_argument("--chunk-size", type=int, help="bytes per socket read (default 4096)")
    parser.add_argument("--port-file", type=Path, help="write the bound port to this file")
    parser.add_argument("--log-level", default="INFO")
    args = parser.parse_args(argv)

    configure_logging(args.log_level)
    config = ServerConfig.from_env(
        host=args.host,
        port=args.port,
        chunk_size=args.chunk_size,
        port_file=args.port_file,
    )
    server = NreplServer(config)
    host, port = server.start().result()
    print(f"nREPL server started on port {port} on host {host}", flush=True)
    try:
        threading.Event().wait()
    except KeyboardInterrupt:
        pass
    finally:
        server.stop()
    return 0


if __name__ == "__main__":
    raise SystemExit(main())

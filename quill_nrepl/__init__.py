"""nREPL server for the Quill runtime.

Speaks bencode over TCP: each accepted connection gets its own session
(current namespace, result history) and is served on its own thread.
"""

__version__ = "0.3.0"

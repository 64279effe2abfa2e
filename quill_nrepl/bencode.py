"""
  Bencode codec for nREPL frames

    integers     i<decimal>e
    byte strings <length>:<bytes>     (str values are UTF-8 encoded)
    lists        l<items>e
    dicts        d<key><value>...e    (keys sorted by their byte encoding)

Decoding is a single-pass recursive descent keyed on the first byte of each
value. Running out of input mid-value raises IncompleteFrame so the caller
can wait for more bytes; anything malformed raises FramingError.
"""

from __future__ import annotations

import sys
from typing import Any, Callable, Optional

DIGITS = b"0123456789"


class FramingError(Exception):
    """Malformed bencode input; the stream cannot be resynchronised."""


class IncompleteFrame(Exception):
    """The input ends part-way through a value."""


# -------------------------------
# Encoding
# -------------------------------
def _key_bytes(key: Any) -> bytes:
    if isinstance(key, str):
        return key.encode("utf-8")
    if isinstance(key, bytes):
        return key
    raise FramingError(f"Dictionary keys must be str or bytes, got {type(key).__name__}")


def _encode(value: Any, out: list[bytes]) -> None:
    if isinstance(value, bool):
        raise FramingError("Cannot encode a boolean")
    if isinstance(value, int):
        out.append(b"i%de" % value)
    elif isinstance(value, str):
        _encode(value.encode("utf-8"), out)
    elif isinstance(value, (bytes, bytearray)):
        out.append(b"%d:" % len(value))
        out.append(bytes(value))
    elif isinstance(value, (list, tuple)):
        out.append(b"l")
        for item in value:
            _encode(item, out)
        out.append(b"e")
    elif isinstance(value, dict):
        out.append(b"d")
        for key, item in sorted(((_key_bytes(k), v) for k, v in value.items()), key=lambda kv: kv[0]):
            _encode(key, out)
            _encode(item, out)
        out.append(b"e")
    else:
        raise FramingError(f"Cannot encode value of type {type(value).__name__}")


def encode(value: Any) -> bytes:
    out: list[bytes] = []
    _encode(value, out)
    return b"".join(out)


# -------------------------------
# Decoding
# -------------------------------
class _Decoder:
    __slots__ = ("data", "pos", "keywordize_keys", "string_fn")

    def __init__(self, data: bytes, keywordize_keys: bool, string_fn: Optional[Callable[[bytes], Any]]):
        self.data = data
        self.pos = 0
        self.keywordize_keys = keywordize_keys
        self.string_fn = string_fn

    def _peek(self) -> int:
        if self.pos >= len(self.data):
            raise IncompleteFrame("Unexpected end of input")
        return self.data[self.pos]

    def value(self) -> Any:
        tag = self._peek()
        if tag == ord("i"):
            return self._int()
        if tag == ord("l"):
            return self._list()
        if tag == ord("d"):
            return self._dict()
        if tag in DIGITS:
            raw = self._bytes()
            return self.string_fn(raw) if self.string_fn is not None else raw
        raise FramingError(f"Invalid bencode tag {bytes([tag])!r} at offset {self.pos}")

    def _int(self) -> int:
        end = self.data.find(b"e", self.pos + 1)
        if end == -1:
            self._check_partial_int(self.data[self.pos + 1:])
            raise IncompleteFrame("Unterminated integer")
        raw = self.data[self.pos + 1:end]
        if not _valid_int(raw):
            raise FramingError(f"Malformed integer {raw!r} at offset {self.pos}")
        self.pos = end + 1
        return int(raw)

    @staticmethod
    def _check_partial_int(raw: bytes) -> None:
        body = raw[1:] if raw.startswith(b"-") else raw
        if body.strip(DIGITS):
            raise FramingError(f"Malformed integer {raw!r}")

    def _bytes(self) -> bytes:
        colon = self.data.find(b":", self.pos)
        if colon == -1:
            if self.data[self.pos:].strip(DIGITS):
                raise FramingError(f"Non-numeric length prefix at offset {self.pos}")
            raise IncompleteFrame("Unterminated length prefix")
        raw_len = self.data[self.pos:colon]
        if raw_len.strip(DIGITS):
            raise FramingError(f"Non-numeric length prefix {raw_len!r} at offset {self.pos}")
        length = int(raw_len)
        start = colon + 1
        if start + length > len(self.data):
            raise IncompleteFrame("Byte string extends past end of input")
        self.pos = start + length
        return self.data[start:self.pos]

    def _list(self) -> list:
        self.pos += 1
        items = []
        while self._peek() != ord("e"):
            items.append(self.value())
        self.pos += 1
        return items

    def _dict(self) -> dict:
        self.pos += 1
        result = {}
        while self._peek() != ord("e"):
            if self._peek() not in DIGITS:
                raise FramingError(f"Dictionary key must be a byte string at offset {self.pos}")
            key: Any = self._bytes()
            if self.keywordize_keys:
                try:
                    key = sys.intern(key.decode("utf-8"))
                except UnicodeDecodeError:
                    raise FramingError(f"Dictionary key {key!r} is not valid UTF-8")
            result[key] = self.value()
        self.pos += 1
        return result


def _valid_int(raw: bytes) -> bool:
    body = raw[1:] if raw.startswith(b"-") else raw
    if not body or body.strip(DIGITS):
        return False
    if body.startswith(b"0") and (len(body) > 1 or raw.startswith(b"-")):
        return False
    return True


def decode(
    data: bytes,
    keywordize_keys: bool = False,
    string_fn: Optional[Callable[[bytes], Any]] = None,
) -> tuple[Any, bytes]:
    """
    Decode one value from the front of `data`.

    Returns (value, remainder). `keywordize_keys` turns dictionary keys into
    interned str; `string_fn` is applied to every byte-string value (never to
    keys). Raises IncompleteFrame if `data` ends mid-value.
    """
    decoder = _Decoder(bytes(data), keywordize_keys, string_fn)
    value = decoder.value()
    return value, decoder.data[decoder.pos:]


def decode_all(
    data: bytes,
    keywordize_keys: bool = False,
    string_fn: Optional[Callable[[bytes], Any]] = None,
) -> tuple[list[Any], bytes]:
    """Decode every complete value in `data`; returns (values, unconsumed tail)."""
    values = []
    remainder = bytes(data)
    while remainder:
        try:
            value, remainder = decode(remainder, keywordize_keys, string_fn)
        except IncompleteFrame:
            break
        values.append(value)
    return values, remainder

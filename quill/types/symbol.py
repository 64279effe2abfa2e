from __future__ import annotations
import sys
from typing import Optional


def split_qualified(name: str) -> tuple[Optional[str], str]:
    """Split ``ns/name`` into its parts; ``/`` alone and ``ns//`` name the division fn."""
    if name == "/" or "/" not in name[1:]:
        return None, name
    if name.endswith("//"):
        return name[:-2], "/"
    ns, _, local = name.partition("/")
    return ns, local


class Symbol:
    __slots__ = ("id",)

    def __init__(self, name: str):
        # Intern to ensure fast equality/hash and reduce memory
        self.id = sys.intern(name)

    @property
    def ns(self) -> Optional[str]:
        return split_qualified(self.id)[0]

    @property
    def name(self) -> str:
        return split_qualified(self.id)[1]

    def __eq__(self, other: object) -> bool:
        return isinstance(other, Symbol) and self.id == other.id

    def __hash__(self) -> int:
        return hash(self.id)

    def __repr__(self):
        return f"Symbol({self.id!r})"

    def __str__(self):
        return self.id


class Keyword:
    """Self-evaluating identifier such as :doc or :user/id."""

    __slots__ = ("ns", "name")

    def __init__(self, name: str, ns: Optional[str] = None):
        self.name = sys.intern(name)
        self.ns = sys.intern(ns) if ns is not None else None

    def __eq__(self, other: object) -> bool:
        return isinstance(other, Keyword) and self.ns == other.ns and self.name == other.name

    def __hash__(self) -> int:
        return hash((Keyword, self.ns, self.name))

    def __repr__(self):
        return f"Keyword({str(self)!r})"

    def __str__(self):
        if self.ns is None:
            return f":{self.name}"
        return f":{self.ns}/{self.name}"

from __future__ import annotations

from typing import Any, Optional

from quill import LispValue
from quill.types.nil import Nil
from quill.types.lambda_fn import Lambda


class Var:
    """A named, namespace-owned binding with metadata (doc, file, line, arglists, macro)."""

    __slots__ = ("ns", "name", "value", "meta")

    def __init__(self, ns: str, name: str, value: LispValue = Nil, meta: Optional[dict[str, Any]] = None):
        self.ns = ns
        self.name = name
        self.value = value
        self.meta: dict[str, Any] = dict(meta or {})

    @property
    def qualified_name(self) -> str:
        return f"{self.ns}/{self.name}"

    @property
    def is_macro(self) -> bool:
        return bool(self.meta.get("macro"))

    @property
    def kind(self) -> str:
        """One of "macro", "function" or "var"."""
        if self.is_macro:
            return "macro"
        if isinstance(self.value, Lambda) or getattr(self.value, "_quill_builtin", False):
            return "function"
        return "var"

    @property
    def arglists(self) -> list[list[str]]:
        return list(self.meta.get("arglists") or [])

    def __repr__(self):
        return f"#'{self.qualified_name}"

"""Namespaces: named scopes of Vars with aliases, refers and host imports."""

from __future__ import annotations

import types
from typing import Any, Optional

from quill import LispValue
from quill.errors import QuillNameError
from quill.types.var import Var


class Namespace:
    """
    A named scope holding interned Vars.

    - mappings: vars defined in this namespace, by local name
    - refers:   vars from other namespaces usable here unqualified
    - aliases:  short local names for other namespaces (alias -> namespace name)
    - imports:  Python modules made available under a local name
    """

    def __init__(self, name: str):
        self.name = name
        self.mappings: dict[str, Var] = {}
        self.refers: dict[str, Var] = {}
        self.aliases: dict[str, str] = {}
        self.imports: dict[str, types.ModuleType] = {}

    def intern(self, name: str, value: LispValue, meta: Optional[dict[str, Any]] = None) -> Var:
        """Create or rebind the Var `name`. Rebinding replaces value and metadata."""
        var = self.mappings.get(name)
        if var is None:
            var = Var(self.name, name, value, meta)
            self.mappings[name] = var
        else:
            var.value = value
            var.meta = dict(meta or {})
        # A local definition shadows any refer of the same name
        self.refers.pop(name, None)
        return var

    def refer(self, var: Var, as_name: Optional[str] = None) -> None:
        name = as_name or var.name
        if name in self.mappings:
            raise QuillNameError(f"{name} already refers to {self.mappings[name]!r} in namespace {self.name}")
        self.refers[name] = var

    def add_alias(self, alias: str, ns_name: str) -> None:
        existing = self.aliases.get(alias)
        if existing is not None and existing != ns_name:
            raise QuillNameError(f"Alias {alias} already exists in namespace {self.name}, aliasing {existing}")
        self.aliases[alias] = ns_name

    def find(self, name: str) -> Optional[Var]:
        """Unqualified lookup: interned first, then referred."""
        var = self.mappings.get(name)
        if var is not None:
            return var
        return self.refers.get(name)

    def __repr__(self):
        return f"#namespace[{self.name}]"

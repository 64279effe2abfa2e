from __future__ import annotations

from typing import Any, Callable, Optional

from quill.errors import QuillNameError, QuillUnboundSymbol
from quill.registry import NamespaceRegistry
from quill.types.namespace import Namespace
from quill.types.symbol import Symbol
from quill.types.var import Var

NO_SOURCE_FILE = "NO_SOURCE_FILE"


class EvalContext:
    """
    State of one evaluation request, passed explicitly to every special form.

    Holds the current namespace name (which `ns`/`in-ns` may change while the
    code runs), the sink for side-effecting output writes, and the source
    label and line recorded on definitions and fault reports.
    """

    __slots__ = ("registry", "ns", "out", "source", "line")

    def __init__(
        self,
        registry: NamespaceRegistry,
        ns: str,
        out: Optional[Callable[[str], None]] = None,
        source: str = NO_SOURCE_FILE,
    ):
        self.registry = registry
        self.ns = ns
        self.out = out if out is not None else _discard
        self.source = source
        self.line: Optional[int] = None

    @property
    def namespace(self) -> Namespace:
        ns = self.registry.get(self.ns)
        if ns is None:
            raise QuillNameError(f"No namespace: {self.ns} found")
        return ns

    def write(self, text: str) -> None:
        if text:
            self.out(text)

    def auto_ns(self, alias: Optional[str]) -> str:
        """Namespace for ::k (alias None) or ::alias/k keywords."""
        if alias is None:
            return self.ns
        target = self.namespace.aliases.get(alias)
        if target is None:
            raise QuillNameError(f"Invalid keyword: ::{alias}/..., no alias {alias} in {self.ns}")
        return target

    def find_var(self, sym: Symbol) -> Optional[Var]:
        return self.registry.find_var(self.namespace, sym)

    def resolve_host(self, sym: Symbol) -> Any:
        """Look `mod` or `mod/attr.path` up among the namespace's Python imports."""
        ns = self.namespace
        if sym.ns is None:
            if sym.name in ns.imports:
                return ns.imports[sym.name]
            raise QuillUnboundSymbol(f"Unable to resolve symbol: {sym} in this context")
        module = ns.imports.get(sym.ns)
        if module is None:
            if self.registry.resolve_namespace(ns, sym.ns) is None:
                raise QuillNameError(f"No such namespace: {sym.ns}")
            raise QuillUnboundSymbol(f"No such var: {sym}")
        obj = module
        try:
            for attr in sym.name.split("."):
                obj = getattr(obj, attr)
        except AttributeError:
            raise QuillUnboundSymbol(f"Unable to find {sym.name} in module {sym.ns}")
        return obj

    def lookup(self, sym: Symbol) -> Any:
        """Global lookup: Var value first, then host imports."""
        var = self.find_var(sym)
        if var is not None:
            return var.value
        return self.resolve_host(sym)


def _discard(_text: str) -> None:
    pass

from __future__ import annotations

import threading
from typing import Dict, Optional

from quill.types.namespace import Namespace
from quill.types.symbol import Symbol
from quill.types.var import Var

CORE_NS = "quill.core"
USER_NS = "user"


class NamespaceRegistry:
    """
    All loaded namespaces, by name.

    Shared by every session of a server, so mutation and iteration go through
    a re-entrant lock; callers get snapshots, never the live dict.
    """

    def __init__(self):
        self._namespaces: Dict[str, Namespace] = {}
        self._lock = threading.RLock()

    def get(self, name: str) -> Optional[Namespace]:
        with self._lock:
            return self._namespaces.get(name)

    def ensure(self, name: str) -> Namespace:
        with self._lock:
            ns = self._namespaces.get(name)
            if ns is None:
                ns = Namespace(name)
                self._namespaces[name] = ns
            return ns

    def create(self, name: str) -> Namespace:
        """Like ensure, but a newly created namespace refers every public quill.core var."""
        with self._lock:
            ns = self._namespaces.get(name)
            if ns is not None:
                return ns
            ns = self.ensure(name)
            core = self._namespaces.get(CORE_NS)
            if core is not None and core is not ns:
                self.refer_all(ns, core)
            return ns

    def all(self) -> Dict[str, Namespace]:
        with self._lock:
            return dict(self._namespaces)

    def resolve_namespace(self, ns: Namespace, name_or_alias: str) -> Optional[Namespace]:
        """Aliases known to `ns` take precedence over namespace names."""
        with self._lock:
            real = ns.aliases.get(name_or_alias, name_or_alias)
            return self._namespaces.get(real)

    def find_var(self, ns: Namespace, sym: Symbol) -> Optional[Var]:
        """
        Resolve a symbol to a Var as seen from `ns`.

        - name            interned in ns, else referred into ns
        - alias/name      via ns's alias table
        - fq.ns/name      via the registry
        """
        with self._lock:
            if sym.ns is None:
                return ns.find(sym.name)
            target = self.resolve_namespace(ns, sym.ns)
            if target is None:
                return None
            return target.mappings.get(sym.name)

    def refer_all(self, into: Namespace, source: Namespace) -> None:
        with self._lock:
            for name, var in source.mappings.items():
                if not var.meta.get("private") and name not in into.mappings:
                    into.refers[name] = var

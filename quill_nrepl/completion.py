from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Iterator, List, Optional

from quill.registry import NamespaceRegistry
from quill.types.namespace import Namespace


@dataclass(frozen=True)
class Candidate:
    candidate: str
    ns: Optional[str] = None
    type: Optional[str] = None  # "function" | "macro" | "var"; None for namespace prefixes

    def to_message(self) -> Dict[str, str]:
        msg = {"candidate": self.candidate}
        if self.ns is not None:
            msg["ns"] = self.ns
        if self.type is not None:
            msg["type"] = self.type
        return msg


def _layers(registry: NamespaceRegistry, ns: Namespace) -> Iterator[Candidate]:
    # Interned and referred names, usable unqualified
    for name, var in list(ns.mappings.items()) + list(ns.refers.items()):
        yield Candidate(name, var.ns, var.kind)

    loaded = registry.all()

    # alias/name for each alias of ns
    for alias, target_name in list(ns.aliases.items()):
        target = loaded.get(target_name)
        if target is None:
            continue
        for name, var in list(target.mappings.items()):
            yield Candidate(f"{alias}/{name}", var.ns, var.kind)

    # fully.qualified/name across every loaded namespace
    for ns_name, other in loaded.items():
        for name, var in list(other.mappings.items()):
            yield Candidate(f"{ns_name}/{name}", var.ns, var.kind)

    # Bare namespace names and aliases, for completing the part before "/"
    for ns_name in loaded:
        yield Candidate(ns_name)
    for alias in list(ns.aliases):
        yield Candidate(alias)


def search(registry: NamespaceRegistry, ns: str, query: str) -> List[Candidate]:
    """
    Completion candidates visible from `ns` whose display text starts with
    `query`, sorted by display text and de-duplicated on (display text, ns).

    An unknown namespace has nothing visible and yields no candidates.
    """
    namespace = registry.get(ns)
    if namespace is None:
        return []
    seen = {}
    for cand in _layers(registry, namespace):
        if cand.candidate.startswith(query):
            seen.setdefault((cand.candidate, cand.ns), cand)
    return sorted(seen.values(), key=lambda c: (c.candidate, c.ns or ""))

"""
Symbol resolution for info, eldoc and completion.

Classifies a token typed in an editor, as seen from a namespace, in a fixed
priority order:

    1. keyword         :k  :ns/k  ::k  ::alias/k
    2. special form    def, if, fn, ...
    3. var             name, alias/name, fully.qualified/name
    4. other           host imports and attributes, e.g. math/sqrt
    5. unresolvable    anything else, including tokens that fail to read

Resolution never raises; failures come back as Unresolvable.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Union

from quill.errors import QuillError
from quill.evaluation.special_forms import SPECIAL_FORM_NAMES
from quill.reader.parser import read_string
from quill.registry import NamespaceRegistry
from quill.runtime_context import EvalContext
from quill.types.namespace import Namespace
from quill.types.symbol import Keyword, Symbol, split_qualified
from quill.types.var import Var


@dataclass(frozen=True)
class KeywordEntity:
    value: Keyword


@dataclass(frozen=True)
class SpecialFormEntity:
    name: str


@dataclass(frozen=True)
class VarEntity:
    var: Var
    ns: str
    kind: str  # "function" | "macro" | "var"


@dataclass(frozen=True)
class OtherEntity:
    token: str
    value: Any


@dataclass(frozen=True)
class Unresolvable:
    reason: str


ResolvedEntity = Union[KeywordEntity, SpecialFormEntity, VarEntity, OtherEntity, Unresolvable]


def _resolve_keyword(ns: Namespace, token: str) -> ResolvedEntity:
    auto = token.startswith("::")
    body = token[2:] if auto else token[1:]
    if not body:
        return Unresolvable(f"Invalid keyword: {token}")
    segment, name = split_qualified(body)
    if not name or segment == "":
        return Unresolvable(f"Invalid keyword: {token}")
    if segment is not None:
        return KeywordEntity(Keyword(name, ns.aliases.get(segment, segment)))
    return KeywordEntity(Keyword(name, ns.name if auto else None))


def resolve(registry: NamespaceRegistry, ns: str, token: str) -> ResolvedEntity:
    """Classify `token` as seen from namespace `ns`."""
    namespace = registry.get(ns)
    if namespace is None:
        return Unresolvable(f"No namespace: {ns} found")
    if not token:
        return Unresolvable("Empty token")

    if token.startswith(":"):
        return _resolve_keyword(namespace, token)

    if token in SPECIAL_FORM_NAMES:
        return SpecialFormEntity(token)

    try:
        form = read_string(token)
    except QuillError as exc:
        return Unresolvable(str(exc))
    if not isinstance(form, Symbol):
        return Unresolvable(f"Not a symbol: {token}")

    var = registry.find_var(namespace, form)
    if var is not None:
        return VarEntity(var, var.ns, var.kind)

    try:
        value = EvalContext(registry, ns).resolve_host(form)
    except QuillError as exc:
        return Unresolvable(str(exc))
    return OtherEntity(token, value)

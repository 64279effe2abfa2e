from __future__ import annotations

import importlib
from typing import List

from quill import EvaluatorFn, LispValue, SExpression
from quill.errors import QuillArityError, QuillNameError, QuillTypeError
from quill.modules.loader import load_namespace
from quill.runtime_context import EvalContext
from quill.types.environment import Environment
from quill.types.namespace import Namespace
from quill.types.nil import Nil
from quill.types.symbol import Keyword, Symbol
from quill.types.vector import Vector

AS = Keyword("as")
REFER = Keyword("refer")
ALL = Keyword("all")


def _to_name(x: SExpression, what: str) -> str:
    if isinstance(x, Symbol) and x.ns is None:
        return x.id
    if isinstance(x, str):
        return x
    raise QuillTypeError(f"Expected {what} name, got: {x!r}")


def _options(spec: List[SExpression]) -> List[tuple]:
    if len(spec) % 2:
        raise QuillTypeError(f"Expected keyword/value options, got: {spec!r}")
    return list(zip(spec[::2], spec[1::2]))


def find_or_load(ctx: EvalContext, name: str) -> Namespace:
    ns = ctx.registry.get(name)
    if ns is None:
        load_namespace(ctx, name)
        ns = ctx.registry.get(name)
    return ns


def require_spec(ctx: EvalContext, into: Namespace, spec: SExpression) -> None:
    """
    Handle one libspec:
      foo.bar
      [foo.bar :as fb]
      [foo.bar :refer [x y]] / [foo.bar :refer :all]
    """
    if isinstance(spec, Symbol):
        find_or_load(ctx, _to_name(spec, "namespace"))
        return
    if not isinstance(spec, list) or not spec:
        raise QuillTypeError(f"Unsupported require spec: {spec!r}")
    target = find_or_load(ctx, _to_name(spec[0], "namespace"))
    for key, val in _options(spec[1:]):
        if key == AS:
            into.add_alias(_to_name(val, "alias"), target.name)
        elif key == REFER and val == ALL:
            ctx.registry.refer_all(into, target)
        elif key == REFER and isinstance(val, list):
            for sym in val:
                var = target.mappings.get(_to_name(sym, "var"))
                if var is None:
                    raise QuillNameError(f"{sym} does not exist in namespace {target.name}")
                into.refer(var)
        else:
            raise QuillTypeError(f"Unsupported require option: {key!r}")


def import_spec(into: Namespace, spec: SExpression) -> None:
    """Python module imports: `math` or `[os.path :as path]`."""
    if isinstance(spec, Symbol):
        module_name = local = _to_name(spec, "module")
    elif isinstance(spec, list) and spec:
        module_name = local = _to_name(spec[0], "module")
        for key, val in _options(spec[1:]):
            if key != AS:
                raise QuillTypeError(f"Unsupported import option: {key!r}")
            local = _to_name(val, "alias")
    else:
        raise QuillTypeError(f"Unsupported import spec: {spec!r}")
    into.imports[local] = importlib.import_module(module_name)


def ns_form(
    tail: List[SExpression],
    env: Environment,
    ctx: EvalContext,
    evaluate_fn: EvaluatorFn,
    is_tail: bool,
) -> LispValue:
    """(ns name "doc"? (:require spec...) (:import spec...))"""
    if not tail:
        raise QuillArityError("ns requires at least a name")
    name = _to_name(tail[0], "namespace")
    ns = ctx.registry.create(name)
    ctx.ns = name
    for clause in tail[1:]:
        if isinstance(clause, str):
            continue  # docstring
        if not isinstance(clause, list) or isinstance(clause, Vector) or not clause:
            raise QuillTypeError(f"Unsupported ns clause: {clause!r}")
        head, *specs = clause
        if head == Keyword("require"):
            for spec in specs:
                require_spec(ctx, ns, spec)
        elif head == Keyword("import"):
            for spec in specs:
                import_spec(ns, spec)
        else:
            raise QuillTypeError(f"Unsupported ns clause: {head!r}")
    return Nil


def in_ns_form(
    tail: List[SExpression],
    env: Environment,
    ctx: EvalContext,
    evaluate_fn: EvaluatorFn,
    is_tail: bool,
) -> LispValue:
    """(in-ns 'name) switches the current namespace, creating it if needed."""
    if len(tail) != 1:
        raise QuillArityError("in-ns requires exactly 1 argument")
    name = _to_name(evaluate_fn(tail[0], env, ctx), "namespace")
    ns = ctx.registry.create(name)
    ctx.ns = name
    return ns


def require_form(
    tail: List[SExpression],
    env: Environment,
    ctx: EvalContext,
    evaluate_fn: EvaluatorFn,
    is_tail: bool,
) -> LispValue:
    """(require 'foo.bar '[foo.baz :as fb]) -- specs are evaluated, so usually quoted."""
    if not tail:
        raise QuillArityError("require requires at least one spec")
    into = ctx.namespace
    for spec_expr in tail:
        require_spec(ctx, into, evaluate_fn(spec_expr, env, ctx))
    return Nil


def import_form(
    tail: List[SExpression],
    env: Environment,
    ctx: EvalContext,
    evaluate_fn: EvaluatorFn,
    is_tail: bool,
) -> LispValue:
    """(import math [os.path :as path]) -- specs are not evaluated."""
    if not tail:
        raise QuillArityError("import requires at least one module")
    into = ctx.namespace
    for spec in tail:
        import_spec(into, spec)
    return Nil

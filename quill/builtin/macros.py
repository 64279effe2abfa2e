"""Builtin macro transformers for Quill (implemented in Python).

Each transformer receives the unevaluated argument forms and returns the
expansion. They are interned in quill.core as Vars flagged :macro, exactly
like macros defined with defmacro.
"""

from __future__ import annotations

import itertools
from functools import partial

from quill import SExpression
from quill.builtin.registration import BuiltinFn, builtin as _builtin, register_all
from quill.errors import QuillArityError, QuillTypeError
from quill.runtime_context import EvalContext
from quill.types.namespace import Namespace
from quill.types.nil import Nil
from quill.types.symbol import Symbol
from quill.types.vector import Vector

CORE_MACROS: list[BuiltinFn] = []
macro = partial(_builtin, table=CORE_MACROS)

_gensym_counter = itertools.count(1)


def gensym(prefix: str = "G__") -> Symbol:
    return Symbol(f"{prefix}{next(_gensym_counter)}")


@macro("defn", "name doc-string? [params*] body", "name doc-string? ([params*] body) +")
def defn_macro(ctx: EvalContext, args: list[SExpression]) -> SExpression:
    """Same as (def name (fn name [params*] body)) with an optional docstring.

    Expands (defn name "doc" [x] body...) into
    (def name "doc" (fn name [x] body...)).
    """
    if len(args) < 2:
        raise QuillArityError("defn requires a name and a parameter vector")
    name, rest = args[0], list(args[1:])
    if not isinstance(name, Symbol):
        raise QuillTypeError(f"First argument to defn must be a Symbol, got {name!r}")
    doc = None
    if isinstance(rest[0], str) and len(rest) > 1:
        doc, rest = rest[0], rest[1:]
    fn = [Symbol("fn"), Symbol(name.name)] + rest
    if doc is None:
        return [Symbol("def"), name, fn]
    return [Symbol("def"), name, doc, fn]


@macro("when", "test & body")
def when_macro(ctx: EvalContext, args: list[SExpression]) -> SExpression:
    """Evaluates test. If logical true, evaluates body in an implicit do."""
    if not args:
        raise QuillArityError("when requires a test expression")
    return [Symbol("if"), args[0], [Symbol("do"), *args[1:]]]


@macro("when-not", "test & body")
def when_not_macro(ctx: EvalContext, args: list[SExpression]) -> SExpression:
    """Evaluates test. If logical false, evaluates body in an implicit do."""
    if not args:
        raise QuillArityError("when-not requires a test expression")
    return [Symbol("if"), args[0], Nil, [Symbol("do"), *args[1:]]]


@macro("cond", "& clauses")
def cond_macro(ctx: EvalContext, args: list[SExpression]) -> SExpression:
    """Takes test/expr pairs; evaluates the expr of the first logical true test.
    (cond) returns nil. Use :else as the final test for a default."""
    if len(args) % 2:
        raise QuillArityError("cond requires an even number of forms")
    if not args:
        return Nil
    test, expr, *more = args
    return [Symbol("if"), test, expr, [Symbol("cond"), *more]]


@macro("and", "", "x", "x & next")
def and_macro(ctx: EvalContext, args: list[SExpression]) -> SExpression:
    """Evaluates exprs one at a time, left to right. Returns the first logical
    false value, else the value of the last expr. (and) returns true."""
    if not args:
        return True
    if len(args) == 1:
        return args[0]
    g = gensym("and__")
    return [Symbol("let"), Vector([g, args[0]]), [Symbol("if"), g, [Symbol("and"), *args[1:]], g]]


@macro("or", "", "x", "x & next")
def or_macro(ctx: EvalContext, args: list[SExpression]) -> SExpression:
    """Evaluates exprs one at a time, left to right. Returns the first logical
    true value, else the value of the last expr. (or) returns nil."""
    if not args:
        return Nil
    if len(args) == 1:
        return args[0]
    g = gensym("or__")
    return [Symbol("let"), Vector([g, args[0]]), [Symbol("if"), g, g, [Symbol("or"), *args[1:]]]]


def register(ns: Namespace) -> None:
    """Register all builtin macros into the given namespace."""
    register_all(ns, CORE_MACROS, macro=True)

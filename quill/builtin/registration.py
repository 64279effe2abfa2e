"""Decorator and registration helpers shared by builtin functions and macros."""

from __future__ import annotations

import inspect
from typing import Callable

from quill import LispValue
from quill.types.namespace import Namespace

BuiltinFn = Callable[..., LispValue]


def builtin(name: str, *arglists: str, table: list[BuiltinFn]) -> Callable[[BuiltinFn], BuiltinFn]:
    """
    Mark `fn(ctx, args)` as a Quill builtin named `name`.

    Each arglist is a space separated parameter string, e.g. "x y & more";
    "" is the zero-argument overload.
    """

    def deco(fn: BuiltinFn) -> BuiltinFn:
        fn._quill_builtin = True
        fn._quill_name = name
        fn._quill_arglists = [a.split() for a in arglists]
        table.append(fn)
        return fn

    return deco


def register_all(ns: Namespace, table: list[BuiltinFn], macro: bool = False) -> None:
    for fn in table:
        meta = {
            "doc": inspect.getdoc(fn),
            "arglists": fn._quill_arglists,
            "file": fn.__code__.co_filename,
            "line": fn.__code__.co_firstlineno,
        }
        if macro:
            meta["macro"] = True
        ns.intern(fn._quill_name, fn, meta)

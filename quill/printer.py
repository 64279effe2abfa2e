"""Printable forms of Quill values.

`pr_str` renders values readably (strings quoted and escaped), which is what a
REPL reports back. `print_str` renders strings raw, for print/println/str.
"""

from __future__ import annotations

from fractions import Fraction
from types import ModuleType

from quill import LispValue
from quill.types.lambda_fn import Lambda
from quill.types.namespace import Namespace
from quill.types.nil import NilType
from quill.types.symbol import Keyword, Symbol
from quill.types.var import Var
from quill.types.vector import Vector

_ESCAPES = {'"': '\\"', "\\": "\\\\", "\n": "\\n", "\t": "\\t", "\r": "\\r"}


def _quote_string(s: str) -> str:
    return '"' + "".join(_ESCAPES.get(c, c) for c in s) + '"'


def _render(value: LispValue, readably: bool) -> str:
    if isinstance(value, NilType) or value is None:
        return "nil"
    if value is True:
        return "true"
    if value is False:
        return "false"
    if isinstance(value, str):
        return _quote_string(value) if readably else value
    if isinstance(value, (Symbol, Keyword)):
        return str(value)
    if isinstance(value, Fraction):
        return f"{value.numerator}/{value.denominator}"
    if isinstance(value, float):
        return repr(value)
    if isinstance(value, Vector):
        return "[" + " ".join(_render(v, readably) for v in value) + "]"
    if isinstance(value, (list, tuple)):
        return "(" + " ".join(_render(v, readably) for v in value) + ")"
    if isinstance(value, dict):
        return "{" + ", ".join(f"{_render(k, readably)} {_render(v, readably)}" for k, v in value.items()) + "}"
    if isinstance(value, (Var, Lambda, Namespace)):
        return repr(value)
    if getattr(value, "_quill_builtin", False):
        return f"#<builtin {value._quill_name}>"
    if isinstance(value, ModuleType):
        return f"#<module {value.__name__}>"
    if isinstance(value, BaseException):
        return f"#error {{:type {type(value).__name__}, :message {_quote_string(str(value))}}}"
    return str(value) if isinstance(value, (int, complex)) else f"#object[{type(value).__name__} {value!r}]"


def pr_str(value: LispValue) -> str:
    return _render(value, readably=True)


def print_str(value: LispValue) -> str:
    return _render(value, readably=False)

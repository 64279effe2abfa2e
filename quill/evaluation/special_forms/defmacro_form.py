"""Special form: defmacro.

Defines a macro as a Var flagged :macro whose value is the transformer fn.
"""

from __future__ import annotations

from quill import EvaluatorFn, SExpression, LispValue
from quill.errors import QuillArityError
from quill.evaluation.special_forms.def_form import definition_meta, definition_name
from quill.evaluation.special_forms.fn_form import parse_arities
from quill.runtime_context import EvalContext
from quill.types.environment import Environment
from quill.types.lambda_fn import Lambda


def defmacro_form(
    tail: list[SExpression],
    env: Environment,
    ctx: EvalContext,
    evaluate_fn: EvaluatorFn,
    _: bool,
) -> LispValue:
    """(defmacro name "doc"? [params] body...) or with ([params] body...) overloads."""
    if len(tail) < 2:
        raise QuillArityError("defmacro requires a name and parameter list")

    name = definition_name(tail[0], ctx, "defmacro")
    rest = tail[1:]
    doc = None
    if isinstance(rest[0], str) and len(rest) > 1:
        doc, rest = rest[0], rest[1:]

    transformer = Lambda(parse_arities(rest, "defmacro"), env, name)
    meta = definition_meta(ctx, doc)
    meta["macro"] = True
    meta["arglists"] = transformer.arglists
    return ctx.namespace.intern(name, transformer, meta)

from quill import EvaluatorFn, SExpression, LispValue
from quill.errors import QuillArityError, QuillTypeError
from quill.runtime_context import EvalContext
from quill.types.environment import Environment
from quill.types.lambda_fn import Lambda
from quill.types.nil import Nil
from quill.types.symbol import Symbol


def definition_name(name: SExpression, ctx: EvalContext, form: str) -> str:
    """The local name of a def target; qualified names must point at the current namespace."""
    if not isinstance(name, Symbol):
        raise QuillTypeError(f"First argument to {form} must be a Symbol, got {name!r}")
    if name.ns is not None and name.ns != ctx.ns:
        raise QuillTypeError(f"Can't create defs outside of current ns: {name}")
    return name.name


def definition_meta(ctx: EvalContext, doc: SExpression = None) -> dict:
    meta = {"file": ctx.source}
    if ctx.line is not None:
        meta["line"] = ctx.line
    if doc is not None:
        meta["doc"] = doc
    return meta


def def_form(
    tail: list[SExpression],
    env: Environment,
    ctx: EvalContext,
    evaluate_fn: EvaluatorFn,
    _: bool,
) -> LispValue:
    """
    (def name), (def name value) or (def name "docstring" value)
    Interns the Var in the current namespace and returns it.
    """
    if not 1 <= len(tail) <= 3:
        raise QuillArityError("def requires a name, an optional docstring and an optional value")
    name = definition_name(tail[0], ctx, "def")
    doc = None
    if len(tail) == 3:
        doc = tail[1]
        if not isinstance(doc, str):
            raise QuillTypeError("def docstring must be a string")
    value = evaluate_fn(tail[-1], env, ctx) if len(tail) > 1 else Nil
    meta = definition_meta(ctx, doc)
    if isinstance(value, Lambda):
        if value.name is None:
            value.name = name
        meta["arglists"] = value.arglists
    return ctx.namespace.intern(name, value, meta)

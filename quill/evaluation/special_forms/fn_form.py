from quill import EvaluatorFn, SExpression, LispValue
from quill.errors import QuillArityError, QuillTypeError
from quill.runtime_context import EvalContext
from quill.types.environment import Environment
from quill.types.lambda_fn import Arity, Lambda
from quill.types.nil import Nil
from quill.types.symbol import Symbol
from quill.types.vector import Vector


def body_of(forms: list[SExpression]) -> SExpression:
    # Multiple body forms are an implicit do; no body forms return nil.
    if not forms:
        return Nil
    if len(forms) == 1:
        return forms[0]
    return [Symbol("do"), *forms]


def parse_arities(specs: list[SExpression], form: str) -> list[Arity]:
    """Accepts `[params] body...` or one or more `([params] body...)` overloads."""
    if not specs:
        raise QuillArityError(f"{form} requires a parameter vector")
    if isinstance(specs[0], Vector):
        return [Arity.parse(specs[0], body_of(specs[1:]))]
    arities = []
    for spec in specs:
        if not isinstance(spec, list) or isinstance(spec, Vector) or not spec or not isinstance(spec[0], Vector):
            raise QuillTypeError(f"{form} expects a parameter vector or ([params] body) overloads")
        arities.append(Arity.parse(spec[0], body_of(spec[1:])))
    return arities


def fn_form(
    tail: list[SExpression],
    env: Environment,
    ctx: EvalContext,
    evaluate_fn: EvaluatorFn,
    _: bool,
) -> LispValue:
    """(fn name? [params] body...) or (fn name? ([params] body...) ...)"""
    name = None
    if tail and isinstance(tail[0], Symbol):
        name = tail[0].id
        tail = tail[1:]
    return Lambda(parse_arities(tail, "fn"), env, name)

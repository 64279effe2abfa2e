from quill import EvaluatorFn
from quill import SExpression, LispValue
from quill.errors import QuillArityError, QuillTypeError
from quill.evaluation.special_forms.fn_form import body_of
from quill.runtime_context import EvalContext
from quill.types.environment import Environment
from quill.types.symbol import Symbol
from quill.types.vector import Vector


def let_form(
    tail: list[SExpression],
    env: Environment,
    ctx: EvalContext,
    evaluate_fn: EvaluatorFn,
    is_tail_call: bool = False,
) -> LispValue:
    """
    (let [name1 val1 name2 val2 ...] body...)
    Bindings are sequential: each value sees the names bound before it.
    """
    if not tail or not isinstance(tail[0], Vector):
        raise QuillArityError("let requires a vector for its bindings")
    bindings = tail[0]
    if len(bindings) % 2:
        raise QuillTypeError("let requires an even number of forms in binding vector")

    local_env = Environment(outer=env)
    for name, val_expr in zip(bindings[::2], bindings[1::2]):
        if not isinstance(name, Symbol):
            raise QuillTypeError(f"let binding name must be a Symbol, got {name!r}")
        local_env.define(name, evaluate_fn(val_expr, local_env, ctx))
    return evaluate_fn(body_of(tail[1:]), local_env, ctx, is_tail_call)

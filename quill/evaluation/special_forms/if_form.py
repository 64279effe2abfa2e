from quill import EvaluatorFn
from quill import SExpression, LispValue
from quill.errors import QuillArityError
from quill.runtime_context import EvalContext
from quill.types.environment import Environment
from quill.types.nil import Nil, is_truthy


def if_form(
    tail: list[SExpression],
    env: Environment,
    ctx: EvalContext,
    evaluate_fn: EvaluatorFn,
    is_tail_call: bool = False,
) -> LispValue:
    if not 2 <= len(tail) <= 3:
        raise QuillArityError("if requires a condition, a then-expression and an optional else")

    cond = evaluate_fn(tail[0], env, ctx)
    if is_truthy(cond):
        return evaluate_fn(tail[1], env, ctx, is_tail_call)
    if len(tail) > 2:
        return evaluate_fn(tail[2], env, ctx, is_tail_call)
    return Nil

from quill import EvaluatorFn
from quill import SExpression, LispValue
from quill.runtime_context import EvalContext
from quill.types.environment import Environment
from quill.types.nil import Nil


def do_form(
    tail: list[SExpression],
    env: Environment,
    ctx: EvalContext,
    evaluate_fn: EvaluatorFn,
    is_tail_call: bool = False,
) -> LispValue:
    if not tail:
        return Nil
    for e in tail[:-1]:
        evaluate_fn(e, env, ctx)
    return evaluate_fn(tail[-1], env, ctx, is_tail_call)

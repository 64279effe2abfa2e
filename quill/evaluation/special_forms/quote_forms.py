from quill import SExpression, LispValue, EvaluatorFn
from quill.errors import QuillArityError, QuillTypeError
from quill.runtime_context import EvalContext
from quill.types.environment import Environment
from quill.types.nil import Nil
from quill.types.symbol import Symbol
from quill.types.vector import Vector

QUASIQUOTE = Symbol("quasiquote")
UNQUOTE = Symbol("unquote")
UNQUOTE_SPLICING = Symbol("unquote-splicing")


def _is_form(item: SExpression, head: Symbol) -> bool:
    return isinstance(item, list) and not isinstance(item, Vector) and len(item) == 2 and item[0] == head


def eval_quasiquote(
    evaluate_fn: EvaluatorFn,
    expr: SExpression,
    env: Environment,
    ctx: EvalContext,
    depth: int = 1,
) -> SExpression:
    """Build the template `expr`, evaluating ~x and splicing ~@xs at the current depth."""
    if _is_form(expr, UNQUOTE):
        if depth == 1:
            return evaluate_fn(expr[1], env, ctx)
        return [UNQUOTE, eval_quasiquote(evaluate_fn, expr[1], env, ctx, depth - 1)]

    if _is_form(expr, QUASIQUOTE):
        return [QUASIQUOTE, eval_quasiquote(evaluate_fn, expr[1], env, ctx, depth + 1)]

    if isinstance(expr, dict):
        return {
            eval_quasiquote(evaluate_fn, k, env, ctx, depth): eval_quasiquote(evaluate_fn, v, env, ctx, depth)
            for k, v in expr.items()
        }

    if not isinstance(expr, list):
        return expr

    result_list = []
    for item in expr:
        if _is_form(item, UNQUOTE_SPLICING) and depth == 1:
            spliced_val = evaluate_fn(item[1], env, ctx)
            if spliced_val is Nil:
                continue
            if not isinstance(spliced_val, list):
                raise QuillTypeError("Unquote-splicing must produce a list")
            result_list.extend(spliced_val)
            continue
        result_list.append(eval_quasiquote(evaluate_fn, item, env, ctx, depth))
    return Vector(result_list) if isinstance(expr, Vector) else result_list


def quote_form(
    tail: list[SExpression], env: Environment, ctx: EvalContext, evaluate_fn: EvaluatorFn, _: bool
) -> LispValue:
    if len(tail) != 1:
        raise QuillArityError("quote expects exactly 1 argument")
    return tail[0]


def quasiquote_form(
    tail: list[SExpression], env: Environment, ctx: EvalContext, evaluate_fn: EvaluatorFn, _: bool
) -> LispValue:
    if len(tail) != 1:
        raise QuillArityError("quasiquote expects exactly 1 argument")
    return eval_quasiquote(evaluate_fn, tail[0], env, ctx)

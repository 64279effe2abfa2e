"""Application engine for Quill.

Centralizes function application semantics:
- Tail-call awareness via TailCall objects (consumed by the trampoline).
- Lambdas with multiple arities and & rest parameters.
- Builtins registered in quill.core, called as fn(ctx, args).
- Keywords and maps as lookup functions.
- Plain Python callables reached through host imports, called as fn(*args).
"""

from __future__ import annotations

from quill import EvaluatorFn, LispValue
from quill.errors import QuillArityError, QuillTypeError
from quill.printer import pr_str
from quill.runtime_context import EvalContext
from quill.types.lambda_fn import Lambda
from quill.types.nil import Nil
from quill.types.symbol import Keyword
from quill.types.tail_call import TailCall


def apply_lambda(
    fn: Lambda,
    args: list[LispValue],
    ctx: EvalContext,
    evaluate_fn: EvaluatorFn,
    is_tail_call: bool,
) -> LispValue | TailCall:
    """Apply a Lisp Lambda value.

    In tail position the call is deferred as a TailCall for the trampoline;
    otherwise the body is stepped to completion here.
    """
    call_env, body = fn.extend_env(args)
    if is_tail_call:
        return TailCall(body, call_env)
    result = evaluate_fn(body, call_env, ctx, True)
    while isinstance(result, TailCall):
        result = evaluate_fn(result.body, result.env, ctx, True)
    return result


def _lookup_fn(coll: LispValue, key: LispValue, rest: list[LispValue]) -> LispValue:
    """(:k m), (:k m default), ({..} k) and ({..} k default)."""
    if len(rest) > 1:
        raise QuillArityError(f"Wrong number of args ({len(rest) + 2}) passed to lookup")
    default = rest[0] if rest else Nil
    if isinstance(coll, dict):
        return coll.get(key, default)
    return default


def apply(
    head: LispValue,
    args: list[LispValue],
    ctx: EvalContext,
    evaluate_fn: EvaluatorFn,
    tail: bool = False,
) -> LispValue | TailCall:
    """Apply a Lambda, builtin, keyword, map or host callable to evaluated args."""
    if isinstance(head, Lambda):
        return apply_lambda(head, args, ctx, evaluate_fn, tail)
    if getattr(head, "_quill_builtin", False):
        return head(ctx, args)
    if isinstance(head, Keyword):
        if not args:
            raise QuillArityError(f"Wrong number of args (0) passed to: {head}")
        return _lookup_fn(args[0], head, args[1:])
    if isinstance(head, dict):
        if not args:
            raise QuillArityError("Wrong number of args (0) passed to a map")
        return _lookup_fn(head, args[0], args[1:])
    if callable(head):
        return head(*args)
    raise QuillTypeError(f"{pr_str(head)} cannot be called as a function")

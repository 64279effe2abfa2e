"""Core evaluator and trampoline for the Quill interpreter.

Implements special-form dispatch, macro expansion through macro Vars, and
tail-call aware application via a simple trampoline using TailCall objects.
"""

from __future__ import annotations

from typing import Optional

from quill import SExpression, LispValue
from quill.errors import QuillUnboundSymbol
from quill.evaluation.apply import apply
from quill.evaluation.special_forms import SPECIAL_FORMS
from quill.reader.parser import TokenStream, lex
from quill.runtime_context import EvalContext
from quill.types.environment import Environment
from quill.types.nil import Nil
from quill.types.symbol import Symbol
from quill.types.tail_call import TailCall
from quill.types.var import Var
from quill.types.vector import Vector


def evaluate(expr: SExpression, env: Environment, ctx: EvalContext) -> LispValue:
    """
    Trampoline evaluator: tail-call aware evaluation to a final value.
    """
    result = evaluate0(expr, env, ctx, True)  # Start in 'tail' mode.
    while isinstance(result, TailCall):
        result = evaluate0(result.body, result.env, ctx, True)
    return result


def lookup_symbol(sym: Symbol, env: Environment, ctx: EvalContext) -> LispValue:
    if sym.ns is None:
        frame = env.find(sym)
        if frame is not None:
            return frame.vars[sym]
    if sym in SPECIAL_FORMS:
        raise QuillUnboundSymbol(f"Can't take value of a special form: {sym}")
    return ctx.lookup(sym)


def macro_var(head: SExpression, env: Environment, ctx: EvalContext) -> Optional[Var]:
    """The macro Var named by a call head, unless a local shadows it."""
    if not isinstance(head, Symbol):
        return None
    if head.ns is None and env.find(head) is not None:
        return None
    var = ctx.find_var(head)
    if var is not None and var.is_macro:
        return var
    return None


def macroexpand_1(form: SExpression, env: Environment, ctx: EvalContext) -> SExpression:
    if not isinstance(form, list) or isinstance(form, Vector) or not form:
        return form
    var = macro_var(form[0], env, ctx)
    if var is None:
        return form
    # Transformers receive the raw, unevaluated argument forms
    return apply(var.value, list(form[1:]), ctx, evaluate0, False)


def evaluate0(
    expr: SExpression,
    env: Environment,
    ctx: EvalContext,
    is_tail_call: bool = False,
) -> LispValue:
    """
    Core evaluator: single-step evaluation with tail-call awareness.
    Returns either a value or a TailCall.
    """
    if isinstance(expr, Symbol):
        return lookup_symbol(expr, env, ctx)

    if isinstance(expr, Vector):
        return Vector(evaluate(x, env, ctx) for x in expr)

    if isinstance(expr, dict):
        return {evaluate(k, env, ctx): evaluate(v, env, ctx) for k, v in expr.items()}

    if isinstance(expr, list):
        if not expr:
            return []
        head, *tail_args = expr

        if isinstance(head, Symbol) and head in SPECIAL_FORMS:
            return SPECIAL_FORMS[head](tail_args, env, ctx, evaluate0, is_tail_call)

        if macro_var(head, env, ctx) is not None:
            expanded = macroexpand_1(expr, env, ctx)
            return evaluate0(expanded, env, ctx, is_tail_call)

        fn = evaluate(head, env, ctx)
        args = [evaluate(arg, env, ctx) for arg in tail_args]
        return apply(fn, args, ctx, evaluate0, is_tail_call)

    # --- Atoms return as-is ---
    return expr


def eval_forms(code: str, ctx: EvalContext, env: Optional[Environment] = None) -> LispValue:
    """Read and evaluate every form of `code` in order; returns the last value.

    Forms are read one at a time so that a namespace switch made by one form
    applies to how the next is read (auto-resolved keywords).
    """
    env = env if env is not None else Environment()
    stream = TokenStream(lex(code), ctx.auto_ns)
    result: LispValue = Nil
    while stream.peek()[0] is not None:
        ctx.line = stream.line
        form = stream.parse_expr()
        result = evaluate(form, env, ctx)
    return result

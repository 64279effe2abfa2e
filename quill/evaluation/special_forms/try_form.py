# Exception handling
# Usage:
#   (try
#     (/ 1 0)
#     (catch ZeroDivisionError e (ex-message e))
#     (finally (println "done")))
#
#   (throw "boom")  ; raises QuillThrow carrying "boom"
#
# A catch clause names an exception class by its Python class name; any class
# in the exception's MRO matches, so `Exception` catches everything a user
# can reasonably catch. `:default` is an alias for that.

from __future__ import annotations

from quill import EvaluatorFn
from quill import SExpression, LispValue
from quill.errors import QuillArityError, QuillThrow, QuillTypeError
from quill.evaluation.special_forms.fn_form import body_of
from quill.runtime_context import EvalContext
from quill.types.environment import Environment
from quill.types.symbol import Keyword, Symbol
from quill.types.vector import Vector

CATCH = Symbol("catch")
FINALLY = Symbol("finally")
DEFAULT = Keyword("default")


def _is_clause(form: SExpression, head: Symbol) -> bool:
    return isinstance(form, list) and not isinstance(form, Vector) and bool(form) and form[0] == head


def _matches(exc: BaseException, selector: SExpression) -> bool:
    if selector == DEFAULT:
        return True
    if not isinstance(selector, Symbol):
        raise QuillTypeError(f"catch expects an exception class name, got {selector!r}")
    return any(cls.__name__ == selector.name for cls in type(exc).__mro__)


def throw_form(
    tail: list[SExpression],
    env: Environment,
    ctx: EvalContext,
    evaluate_fn: EvaluatorFn,
    is_tail_call: bool = False,
) -> LispValue:
    if len(tail) != 1:
        raise QuillArityError("throw requires exactly 1 argument")
    value = evaluate_fn(tail[0], env, ctx)
    if isinstance(value, Exception):
        raise value
    raise QuillThrow(value)


def try_form(
    tail: list[SExpression],
    env: Environment,
    ctx: EvalContext,
    evaluate_fn: EvaluatorFn,
    is_tail_call: bool = False,
) -> LispValue:
    body: list[SExpression] = []
    catches: list[list[SExpression]] = []
    finally_forms: list[SExpression] | None = None
    for form in tail:
        if _is_clause(form, CATCH):
            if finally_forms is not None:
                raise QuillTypeError("finally clause must be last in try expression")
            if len(form) < 3 or not isinstance(form[2], Symbol):
                raise QuillArityError("catch requires an exception class and a binding name")
            catches.append(form)
        elif _is_clause(form, FINALLY):
            if finally_forms is not None:
                raise QuillTypeError("Only one finally clause allowed in try expression")
            finally_forms = form[1:]
        elif catches or finally_forms is not None:
            raise QuillTypeError("Only catch or finally clause can follow catch in try expression")
        else:
            body.append(form)

    try:
        # Never in tail position: the handlers must still be active while the body runs
        return evaluate_fn(body_of(body), env, ctx)
    except Exception as exc:
        for _, selector, name, *handler in catches:
            if _matches(exc, selector):
                handler_env = Environment(outer=env)
                handler_env.define(name, exc)
                return evaluate_fn(body_of(handler), handler_env, ctx)
        raise
    finally:
        if finally_forms:
            evaluate_fn(body_of(finally_forms), env, ctx)

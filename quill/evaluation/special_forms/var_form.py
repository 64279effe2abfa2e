from quill import EvaluatorFn, SExpression, LispValue
from quill.errors import QuillArityError, QuillUnboundSymbol
from quill.runtime_context import EvalContext
from quill.types.environment import Environment
from quill.types.symbol import Symbol


def var_form(
    tail: list[SExpression],
    env: Environment,
    ctx: EvalContext,
    evaluate_fn: EvaluatorFn,
    _: bool,
) -> LispValue:
    """(var name) -> the Var itself rather than its value."""
    if len(tail) != 1 or not isinstance(tail[0], Symbol):
        raise QuillArityError("var requires exactly one symbol")
    var = ctx.find_var(tail[0])
    if var is None:
        raise QuillUnboundSymbol(f"Unable to resolve var: {tail[0]} in this context")
    return var

from __future__ import annotations

import traceback
from typing import Callable, Mapping, NamedTuple, Optional

from quill import LispValue
from quill.builtin import core, macros
from quill.errors import QuillError, QuillSyntaxError
from quill.evaluation.evaluator import eval_forms
from quill.registry import CORE_NS, USER_NS, NamespaceRegistry
from quill.runtime_context import NO_SOURCE_FILE, EvalContext
from quill.types.environment import Environment
from quill.types.symbol import Symbol


def bootstrap(registry: NamespaceRegistry) -> NamespaceRegistry:
    """Populate quill.core with builtins and macros and create the user namespace."""
    core_ns = registry.ensure(CORE_NS)
    core.register(core_ns)
    macros.register(core_ns)
    registry.create(USER_NS)
    return registry


class EvalResult(NamedTuple):
    value: LispValue
    ns: str


class EvaluationFault(QuillError):
    """
    Raised by Interpreter.evaluate when the code raised.

    `ns` is the namespace in effect when the fault happened, which may differ
    from the one evaluation started in.
    """

    def __init__(self, cause: BaseException, ns: str, source: str, line: Optional[int]):
        super().__init__(str(cause))
        self.cause = cause
        self.ns = ns
        self.source = source
        self.line = line

    @property
    def location(self) -> str:
        if self.line is None:
            return self.source
        return f"{self.source}:{self.line}"

    @property
    def summary(self) -> str:
        name = type(self.cause).__name__
        if isinstance(self.cause, QuillSyntaxError):
            return f"Syntax error ({name}) reading source at ({self.location}).\n{self.cause}\n"
        return f"Execution error ({name}) at {self.ns} ({self.location}).\n{self.cause}\n"

    @property
    def trace(self) -> str:
        header = f"{type(self.cause).__name__}: {self.cause}\n\tat {self.location}\n"
        return header + "".join(traceback.format_exception(type(self.cause), self.cause, self.cause.__traceback__))


class Interpreter:
    """
    Evaluates source text against a shared namespace registry.

    One interpreter is shared by every connection of a server; all per-call
    state lives in the EvalContext created for each evaluate call.
    """

    def __init__(self, registry: NamespaceRegistry | None = None):
        self.registry = registry if registry is not None else bootstrap(NamespaceRegistry())

    def evaluate(
        self,
        ns: str,
        code: str,
        source: str = NO_SOURCE_FILE,
        out: Callable[[str], None] | None = None,
        bindings: Mapping[str, LispValue] | None = None,
    ) -> EvalResult:
        """Evaluate every form of `code`, starting in namespace `ns`.

        `bindings` are visible to the code as locals, e.g. *1 or *e.
        Returns the last value and the namespace evaluation ended in.
        """
        ctx = EvalContext(self.registry, ns, out, source)
        env = Environment()
        env.update({Symbol(name): value for name, value in (bindings or {}).items()})
        try:
            ctx.namespace  # fails fast on an unknown namespace
            value = eval_forms(code, ctx, env)
        except Exception as exc:
            raise EvaluationFault(exc, ctx.ns, source, ctx.line) from exc
        return EvalResult(value, ctx.ns)

    def eval(self, code: str, ns: str = USER_NS) -> LispValue:
        """Evaluate `code` and return only its value; faults propagate."""
        return self.evaluate(ns, code).value

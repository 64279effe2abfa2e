"""Function values and argument binding for Quill."""

from __future__ import annotations

from typing import NamedTuple, Optional

from quill import SExpression, LispValue
from quill.errors import QuillArityError, QuillTypeError
from quill.types.environment import Environment
from quill.types.symbol import Symbol

REST_MARKER = Symbol("&")


class Arity(NamedTuple):
    """One overload of a function: fixed params, an optional rest param and a body."""

    params: list[Symbol]
    rest: Optional[Symbol]
    body: SExpression

    @classmethod
    def parse(cls, param_list: list, body: SExpression) -> Arity:
        params: list[Symbol] = []
        rest: Optional[Symbol] = None
        it = iter(param_list)
        for p in it:
            if not isinstance(p, Symbol):
                raise QuillTypeError(f"Parameter must be a symbol, got {p!r}")
            if p == REST_MARKER:
                rest = next(it, None)
                if not isinstance(rest, Symbol) or next(it, None) is not None:
                    raise QuillTypeError("& must be followed by exactly one parameter name")
                break
            params.append(p)
        return cls(params, rest, body)

    def accepts(self, nargs: int) -> bool:
        if self.rest is None:
            return nargs == len(self.params)
        return nargs >= len(self.params)

    def names(self) -> list[str]:
        names = [p.id for p in self.params]
        if self.rest is not None:
            names += ["&", self.rest.id]
        return names


class Lambda:
    """A first-class function with one or more arities and a closure env."""

    __slots__ = ("arities", "env", "name")

    def __init__(self, arities: list[Arity], env: Environment | None = None, name: str | None = None):
        self.arities: list[Arity] = arities
        # Avoid shared default Environment across instances
        self.env: Environment = env if env is not None else Environment()
        self.name = name

    @property
    def arglists(self) -> list[list[str]]:
        return [a.names() for a in self.arities]

    def select(self, nargs: int) -> Arity:
        # Fixed arities win over variadic ones
        for arity in self.arities:
            if arity.rest is None and arity.accepts(nargs):
                return arity
        for arity in self.arities:
            if arity.accepts(nargs):
                return arity
        raise QuillArityError(f"Wrong number of args ({nargs}) passed to: {self.name or 'fn'}")

    def extend_env(self, args: list[LispValue]) -> tuple[Environment, SExpression]:
        """Bind `args` to the matching arity; return the call env and body to evaluate."""
        arity = self.select(len(args))
        call_env = Environment(outer=self.env)
        for param, arg in zip(arity.params, args):
            call_env.define(param, arg)
        if arity.rest is not None:
            call_env.define(arity.rest, list(args[len(arity.params):]))
        if self.name is not None:
            # Let named fns refer to themselves without a global var
            call_env.vars.setdefault(Symbol(self.name), self)
        return call_env, arity.body

    def __repr__(self) -> str:
        return f"#<fn {self.name or 'anonymous'}>"

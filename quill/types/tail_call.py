from __future__ import annotations

from quill import SExpression
from quill.types.environment import Environment


class TailCall:
    """Deferred evaluation of a body in tail position, stepped by the trampoline."""

    __slots__ = ("body", "env")

    def __init__(self, body: SExpression, env: Environment):
        self.body = body
        self.env = env

from __future__ import annotations

from collections import deque
from typing import Any, Deque, Dict, Optional

from quill.registry import USER_NS
from quill.types.nil import Nil

HISTORY_SIZE = 3


class SessionContext:
    """
    Mutable evaluation state of one connection.

    `ns` is only a label: it need not name an existing namespace until an
    evaluation dereferences it. `history` holds the most recent successful
    values, newest first.
    """

    def __init__(self, ns: str = USER_NS):
        self.ns = ns
        self.history: Deque[Any] = deque(maxlen=HISTORY_SIZE)
        self.last_fault: Optional[BaseException] = None

    def record_value(self, value: Any) -> None:
        self.history.appendleft(value)

    def record_fault(self, fault: BaseException) -> None:
        self.last_fault = fault

    def bindings(self) -> Dict[str, Any]:
        """*1, *2, *3 and *e as seen by the next evaluation."""
        values = list(self.history) + [Nil] * (HISTORY_SIZE - len(self.history))
        result = {f"*{i}": v for i, v in enumerate(values, start=1)}
        result["*e"] = self.last_fault if self.last_fault is not None else Nil
        return result

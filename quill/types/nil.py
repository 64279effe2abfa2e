from __future__ import annotations


class NilType:
    __slots__ = ()

    def __repr__(self): return "nil"
    def __bool__(self): return False

    def __eq__(self, other):
        return isinstance(other, NilType)

    def __hash__(self):
        return hash(None)


Nil = NilType()


def is_truthy(value) -> bool:
    """Only nil and false are falsey; 0, "" and empty collections are true."""
    return value is not Nil and value is not False and value is not None

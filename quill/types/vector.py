class Vector(list):
    """Literal [a b c]. Evaluates element-wise instead of as a call."""

    __slots__ = ()

    def __repr__(self):
        return f"Vector({list.__repr__(self)})"

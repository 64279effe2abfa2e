from __future__ import annotations

from typing import Any


class QuillError(Exception):
    """ Base class for all Quill errors"""
    pass


class QuillSyntaxError(QuillError):
    """ Raised when the reader cannot parse its input"""


class QuillUnboundSymbol(QuillError):
    """ Raised when a symbol is used before it is bound"""


class QuillNameError(QuillError):
    """ Raised when a namespace is used before it exists"""


class QuillArityError(QuillError):
    """ Raised when the number of arguments passed to a function is incorrect"""


class QuillTypeError(QuillError):
    """ Raised when the types of arguments passed to a function are incorrect"""


class QuillThrow(QuillError):
    """Raised by (throw value); carries the thrown Lisp value."""

    def __init__(self, value: Any):
        super().__init__(str(value))
        self.value = value

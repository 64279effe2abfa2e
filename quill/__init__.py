# Core type aliases for Quill's data model.
# We use plain Python types (int, float, str, list, dict, etc.) to represent
# both code (forms) and runtime values. No explicit Cons type is defined.
#
# Naming guidance:
# - SExpression: Use in reader/macro code to denote syntactic forms (code-as-data).
# - LispValue:  Use in evaluator/runtime code to denote evaluated values.

from typing import Any, Callable

__version__ = "0.3.0"

# Runtime value alias
LispValue = Any
SExpression = LispValue

# Evaluator function type: Python evaluator used inside special forms/macros
EvaluatorFn = Callable[..., LispValue]

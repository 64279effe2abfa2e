"""Built-in functions of the quill.core namespace.

Core arithmetic, comparison, collection processing, predicates, string
helpers and output. Every builtin is called as fn(ctx, args) with already
evaluated arguments; its docstring becomes the Var's :doc.
"""
from __future__ import annotations

from fractions import Fraction
from functools import partial
from typing import Any

from quill import LispValue
from quill.errors import QuillArityError, QuillTypeError
from quill.builtin.registration import BuiltinFn, builtin as _builtin, register_all
from quill.evaluation.apply import apply as apply_engine
from quill.evaluation.evaluator import evaluate0
from quill.printer import pr_str, print_str
from quill.runtime_context import EvalContext
from quill.types.lambda_fn import Lambda
from quill.types.namespace import Namespace
from quill.types.nil import Nil, is_truthy
from quill.types.symbol import Keyword, Symbol
from quill.types.vector import Vector

CORE_FUNCTIONS: list[BuiltinFn] = []
builtin = partial(_builtin, table=CORE_FUNCTIONS)


def call(ctx: EvalContext, fn: LispValue, args: list[LispValue]) -> LispValue:
    """Invoke any callable Quill value from Python."""
    return apply_engine(fn, list(args), ctx, evaluate0, False)


def _arity(name: str, args: list, lo: int, hi: float = float("inf")) -> None:
    if not lo <= len(args) <= hi:
        raise QuillArityError(f"Wrong number of args ({len(args)}) passed to: {name}")


def _seq(coll: LispValue) -> list:
    """View a collection as a Python list of items."""
    if coll is Nil or coll is None:
        return []
    if isinstance(coll, dict):
        return [Vector([k, v]) for k, v in coll.items()]
    if isinstance(coll, (list, tuple, str, range)):
        return list(coll)
    raise QuillTypeError(f"Don't know how to create a sequence from: {pr_str(coll)}")


def _numbers(name: str, args: list) -> list:
    for a in args:
        if isinstance(a, bool) or not isinstance(a, (int, float, Fraction)):
            raise QuillTypeError(f"All arguments to {name} must be numbers, got {pr_str(a)}")
    return args


def _normalize(x: LispValue) -> LispValue:
    if isinstance(x, Fraction) and x.denominator == 1:
        return x.numerator
    return x


def is_equal(a, b) -> bool:
    """Deep equality for Lisp values; lists and vectors compare element-wise."""
    if a is b:
        return True
    if isinstance(a, (list, tuple)) and isinstance(b, (list, tuple)):
        return len(a) == len(b) and all(is_equal(x, y) for x, y in zip(a, b))
    if isinstance(a, bool) or isinstance(b, bool):
        return a is b
    if isinstance(a, (int, Fraction)) and isinstance(b, (int, Fraction)):
        return a == b
    if type(a) != type(b):
        return False
    return a == b


# -------------------------------
# Arithmetic
# -------------------------------
@builtin("+", "", "x", "x y", "x y & more")
def add(ctx: EvalContext, args: list[LispValue]) -> LispValue:
    """Returns the sum of nums. (+) returns 0."""
    return _normalize(sum(_numbers("+", args)))


@builtin("-", "x", "x y", "x y & more")
def sub(ctx: EvalContext, args: list[LispValue]) -> LispValue:
    """If no ys are supplied, returns the negation of x, else subtracts the ys from x."""
    _arity("-", args, 1)
    x, *ys = _numbers("-", args)
    if not ys:
        return -x
    for y in ys:
        x -= y
    return _normalize(x)


@builtin("*", "", "x", "x y", "x y & more")
def mul(ctx: EvalContext, args: list[LispValue]) -> LispValue:
    """Returns the product of nums. (*) returns 1."""
    result = 1
    for x in _numbers("*", args):
        result *= x
    return _normalize(result)


def _divide(x, y):
    if y == 0:
        raise ZeroDivisionError("Divide by zero")
    if isinstance(x, (int, Fraction)) and isinstance(y, (int, Fraction)):
        return _normalize(Fraction(x) / Fraction(y))
    return x / y


@builtin("/", "x", "x y", "x y & more")
def div(ctx: EvalContext, args: list[LispValue]) -> LispValue:
    """If no denominators are supplied, returns 1/numerator, else returns numerator
    divided by all of the denominators. Integer division yields a ratio."""
    _arity("/", args, 1)
    x, *ys = _numbers("/", args)
    if not ys:
        return _divide(1, x)
    for y in ys:
        x = _divide(x, y)
    return x


@builtin("mod", "num div")
def mod(ctx: EvalContext, args: list[LispValue]) -> LispValue:
    """Modulus of num and div. Truncates toward negative infinity."""
    _arity("mod", args, 2, 2)
    n, d = _numbers("mod", args)
    if d == 0:
        raise ZeroDivisionError("Divide by zero")
    return n % d


@builtin("inc", "x")
def inc(ctx: EvalContext, args: list[LispValue]) -> LispValue:
    """Returns a number one greater than num."""
    _arity("inc", args, 1, 1)
    return _numbers("inc", args)[0] + 1


@builtin("dec", "x")
def dec(ctx: EvalContext, args: list[LispValue]) -> LispValue:
    """Returns a number one less than num."""
    _arity("dec", args, 1, 1)
    return _numbers("dec", args)[0] - 1


# -------------------------------
# Comparison
# -------------------------------
@builtin("=", "x", "x y", "x y & more")
def equals(ctx: EvalContext, args: list[LispValue]) -> bool:
    """Equality. Returns true if x equals y, false if not."""
    _arity("=", args, 1)
    return all(is_equal(args[0], other) for other in args[1:])


@builtin("not=", "x", "x y", "x y & more")
def not_equals(ctx: EvalContext, args: list[LispValue]) -> bool:
    """Same as (not (= obj1 obj2))."""
    return not equals(ctx, args)


def _chain(name: str, op):
    def compare(ctx: EvalContext, args: list[LispValue]) -> bool:
        _arity(name, args, 1)
        nums = _numbers(name, args)
        return all(op(a, b) for a, b in zip(nums, nums[1:]))

    return compare


lt = builtin("<", "x", "x y", "x y & more")(_chain("<", lambda a, b: a < b))
lt.__doc__ = "Returns non-nil if nums are in monotonically increasing order."
lte = builtin("<=", "x", "x y", "x y & more")(_chain("<=", lambda a, b: a <= b))
lte.__doc__ = "Returns non-nil if nums are in monotonically non-decreasing order."
gt = builtin(">", "x", "x y", "x y & more")(_chain(">", lambda a, b: a > b))
gt.__doc__ = "Returns non-nil if nums are in monotonically decreasing order."
gte = builtin(">=", "x", "x y", "x y & more")(_chain(">=", lambda a, b: a >= b))
gte.__doc__ = "Returns non-nil if nums are in monotonically non-increasing order."


@builtin("not", "x")
def logical_not(ctx: EvalContext, args: list[LispValue]) -> bool:
    """Returns true if x is logical false, false otherwise."""
    _arity("not", args, 1, 1)
    return not is_truthy(args[0])


# -------------------------------
# Collections
# -------------------------------
@builtin("list", "& items")
def list_builtin(ctx: EvalContext, args: list[LispValue]) -> list:
    """Creates a new list containing the items."""
    return list(args)


@builtin("vector", "& args")
def vector(ctx: EvalContext, args: list[LispValue]) -> Vector:
    """Creates a new vector containing the args."""
    return Vector(args)


@builtin("hash-map", "& keyvals")
def hash_map(ctx: EvalContext, args: list[LispValue]) -> dict:
    """Returns a new hash map with supplied mappings."""
    if len(args) % 2:
        raise QuillArityError("hash-map requires an even number of arguments")
    return {args[i]: args[i + 1] for i in range(0, len(args), 2)}


@builtin("first", "coll")
def first(ctx: EvalContext, args: list[LispValue]) -> LispValue:
    """Returns the first item in the collection. If coll is nil or empty, returns nil."""
    _arity("first", args, 1, 1)
    items = _seq(args[0])
    return items[0] if items else Nil


@builtin("rest", "coll")
def rest(ctx: EvalContext, args: list[LispValue]) -> list:
    """Returns a possibly empty list of the items after the first."""
    _arity("rest", args, 1, 1)
    return _seq(args[0])[1:]


@builtin("cons", "x seq")
def cons(ctx: EvalContext, args: list[LispValue]) -> list:
    """Returns a new list where x is the first element and seq is the rest."""
    _arity("cons", args, 2, 2)
    head, tail = args
    return [head] + _seq(tail)


@builtin("conj", "coll x", "coll x & xs")
def conj(ctx: EvalContext, args: list[LispValue]) -> LispValue:
    """Returns a new collection with the xs 'added': at the end of a vector,
    at the front of a list, as [k v] entries of a map."""
    _arity("conj", args, 1)
    coll, *xs = args
    if coll is Nil:
        coll = []
    if isinstance(coll, Vector):
        return Vector(list(coll) + xs)
    if isinstance(coll, dict):
        result = dict(coll)
        for entry in xs:
            if not isinstance(entry, list) or len(entry) != 2:
                raise QuillTypeError("conj on a map takes [key value] entries")
            result[entry[0]] = entry[1]
        return result
    if isinstance(coll, list):
        return list(reversed(xs)) + list(coll)
    raise QuillTypeError(f"conj not supported on: {pr_str(coll)}")


@builtin("count", "coll")
def count(ctx: EvalContext, args: list[LispValue]) -> int:
    """Returns the number of items in the collection. (count nil) returns 0."""
    _arity("count", args, 1, 1)
    return len(_seq(args[0]))


@builtin("nth", "coll index", "coll index not-found")
def nth(ctx: EvalContext, args: list[LispValue]) -> LispValue:
    """Returns the value at the index. Throws IndexError when out of bounds unless not-found is supplied."""
    _arity("nth", args, 2, 3)
    items = _seq(args[0])
    index = args[1]
    if not isinstance(index, int) or isinstance(index, bool):
        raise QuillTypeError("nth index must be an integer")
    if 0 <= index < len(items):
        return items[index]
    if len(args) == 3:
        return args[2]
    raise IndexError(f"Index {index} out of bounds for count {len(items)}")


@builtin("get", "map key", "map key not-found")
def get(ctx: EvalContext, args: list[LispValue]) -> LispValue:
    """Returns the value mapped to key, not-found or nil if key not present."""
    _arity("get", args, 2, 3)
    coll, key = args[0], args[1]
    default = args[2] if len(args) == 3 else Nil
    if isinstance(coll, dict):
        return coll.get(key, default)
    if isinstance(coll, list) and isinstance(key, int) and 0 <= key < len(coll):
        return coll[key]
    return default


# -------------------------------
# Higher order
# -------------------------------
@builtin("apply", "f args", "f x & args")
def apply(ctx: EvalContext, args: list[LispValue]) -> LispValue:
    """Applies fn f to the argument list formed by prepending intervening arguments to args."""
    _arity("apply", args, 2)
    fn, *middle, last = args
    return call(ctx, fn, middle + _seq(last))


@builtin("map", "f coll", "f c1 c2 & colls")
def map_builtin(ctx: EvalContext, args: list[LispValue]) -> list:
    """Returns a list of the result of applying f to the first items of each coll,
    then the second items, until any one of the colls is exhausted."""
    _arity("map", args, 2)
    fn, *colls = args
    return [call(ctx, fn, list(items)) for items in zip(*(_seq(c) for c in colls))]


@builtin("filter", "pred coll")
def filter_builtin(ctx: EvalContext, args: list[LispValue]) -> list:
    """Returns a list of the items in coll for which (pred item) returns logical true."""
    _arity("filter", args, 2, 2)
    pred, coll = args
    return [x for x in _seq(coll) if is_truthy(call(ctx, pred, [x]))]


@builtin("reduce", "f coll", "f val coll")
def reduce_builtin(ctx: EvalContext, args: list[LispValue]) -> LispValue:
    """f should be a function of 2 arguments. Without val, the first item of coll
    is the initial value; (reduce f []) returns (f)."""
    _arity("reduce", args, 2, 3)
    fn = args[0]
    if len(args) == 2:
        items = _seq(args[1])
        if not items:
            return call(ctx, fn, [])
        acc, items = items[0], items[1:]
    else:
        acc, items = args[1], _seq(args[2])
    for x in items:
        acc = call(ctx, fn, [acc, x])
    return acc


@builtin("range", "end", "start end", "start end step")
def range_builtin(ctx: EvalContext, args: list[LispValue]) -> list:
    """Returns a list of nums from start (inclusive, default 0) to end (exclusive), by step (default 1)."""
    _arity("range", args, 1, 3)
    for a in args:
        if not isinstance(a, int) or isinstance(a, bool):
            raise QuillTypeError("range arguments must be integers")
    if args[-1] == 0 and len(args) == 3:
        raise QuillTypeError("range step must not be zero")
    return list(range(*args))


@builtin("identity", "x")
def identity(ctx: EvalContext, args: list[LispValue]) -> LispValue:
    """Returns its argument."""
    _arity("identity", args, 1, 1)
    return args[0]


# -------------------------------
# Strings, names and predicates
# -------------------------------
@builtin("str", "", "x", "x & ys")
def str_builtin(ctx: EvalContext, args: list[LispValue]) -> str:
    """With no args, returns the empty string. With one arg x, returns x rendered for
    printing; (str nil) is "". With more than one arg, returns the concatenation."""
    return "".join("" if a is Nil else print_str(a) for a in args)


@builtin("pr-str", "& xs")
def pr_str_builtin(ctx: EvalContext, args: list[LispValue]) -> str:
    """Prints the objects readably to a string, separated by spaces."""
    return " ".join(pr_str(a) for a in args)


@builtin("name", "x")
def name(ctx: EvalContext, args: list[LispValue]) -> str:
    """Returns the name String of a string, symbol or keyword."""
    _arity("name", args, 1, 1)
    x = args[0]
    if isinstance(x, str):
        return x
    if isinstance(x, (Symbol, Keyword)):
        return x.name
    raise QuillTypeError(f"Doesn't support name: {pr_str(x)}")


@builtin("keyword", "name", "ns name")
def keyword(ctx: EvalContext, args: list[LispValue]) -> Keyword:
    """Returns a Keyword with the given namespace and name."""
    _arity("keyword", args, 1, 2)
    if len(args) == 2:
        return Keyword(str(args[1]), str(args[0]))
    x = args[0]
    if isinstance(x, Keyword):
        return x
    text = x.id if isinstance(x, Symbol) else str(x)
    ns, _, local = text.rpartition("/")
    return Keyword(local, ns or None)


@builtin("symbol", "name", "ns name")
def symbol(ctx: EvalContext, args: list[LispValue]) -> Symbol:
    """Returns a Symbol with the given namespace and name."""
    _arity("symbol", args, 1, 2)
    if len(args) == 2:
        return Symbol(f"{args[0]}/{args[1]}")
    x = args[0]
    return x if isinstance(x, Symbol) else Symbol(str(x))


def _predicate(name: str, test):
    def pred(ctx: EvalContext, args: list[LispValue]) -> bool:
        _arity(name, args, 1, 1)
        return test(args[0])

    return pred


is_nil = builtin("nil?", "x")(_predicate("nil?", lambda x: x is Nil or x is None))
is_nil.__doc__ = "Returns true if x is nil, false otherwise."
is_number = builtin("number?", "x")(
    _predicate("number?", lambda x: isinstance(x, (int, float, Fraction)) and not isinstance(x, bool))
)
is_number.__doc__ = "Returns true if x is a number."
is_string = builtin("string?", "x")(_predicate("string?", lambda x: isinstance(x, str)))
is_string.__doc__ = "Returns true if x is a String."
is_fn = builtin("fn?", "x")(
    _predicate("fn?", lambda x: isinstance(x, Lambda) or getattr(x, "_quill_builtin", False))
)
is_fn.__doc__ = "Returns true if x is a function created with fn or a builtin."


@builtin("ex-message", "ex")
def ex_message(ctx: EvalContext, args: list[LispValue]) -> Any:
    """Returns the message attached to the given exception, nil for anything else."""
    _arity("ex-message", args, 1, 1)
    ex = args[0]
    return str(ex) if isinstance(ex, BaseException) else Nil


# -------------------------------
# Output
# -------------------------------
@builtin("print", "& more")
def print_builtin(ctx: EvalContext, args: list[LispValue]) -> LispValue:
    """Prints the object(s) to the output stream, separated by spaces. Returns nil."""
    ctx.write(" ".join(print_str(a) for a in args))
    return Nil


@builtin("println", "& more")
def println(ctx: EvalContext, args: list[LispValue]) -> LispValue:
    """Same as print followed by a newline. Returns nil."""
    ctx.write(" ".join(print_str(a) for a in args) + "\n")
    return Nil


def register(ns: Namespace) -> None:
    """Register all builtin functions into the given namespace."""
    register_all(ns, CORE_FUNCTIONS)

import math
from fractions import Fraction

import pytest

from quill.errors import QuillArityError, QuillThrow, QuillTypeError, QuillUnboundSymbol
from quill.interpreter import EvaluationFault
from quill.printer import pr_str
from quill.types.nil import Nil
from quill.types.symbol import Keyword, Symbol
from quill.types.var import Var
from quill.types.vector import Vector


@pytest.mark.parametrize(
    "source,expected",
    [
        ("(+ 1 2 3)", 6),
        ("(- 10 3 2)", 5),
        ("(- 5)", -5),
        ("(* 2 3 4)", 24),
        ("(/ 12 3)", 4),
        ("(/ 1 3)", Fraction(1, 3)),
        ("(/ 2)", Fraction(1, 2)),
        ("(+ 1 2.5)", 3.5),
        ("(+)", 0),
        ("(*)", 1),
        ("(mod -7 3)", 2),
        ("(inc 41)", 42),
        ("(dec 1)", 0),
        ("(+ 1 (* 2 (+ 3 4) (- 10 6)))", 57),
        ("(< 1 2 3)", True),
        ("(< 1 3 2)", False),
        ("(>= 3 3 1)", True),
        ("(= 1 1 1)", True),
        ("(= [1 2] (list 1 2))", True),
        ("(= 1 1.0)", False),
        ("(not= 1 2)", True),
        ("(not nil)", True),
        ("(not 0)", False),
    ],
)
def test_arithmetic_and_comparison(interp, source, expected):
    assert interp.eval(source) == expected


@pytest.mark.parametrize(
    "source,expected",
    [
        ("(first [1 2 3])", 1),
        ("(first [])", Nil),
        ("(rest [1 2 3])", [2, 3]),
        ("(cons 0 [1 2])", [0, 1, 2]),
        ("(conj [1 2] 3 4)", Vector([1, 2, 3, 4])),
        ("(conj (list 1 2) 3 4)", [4, 3, 1, 2]),
        ("(count {:a 1 :b 2})", 2),
        ("(count nil)", 0),
        ("(nth [10 20 30] 1)", 20),
        ("(nth [10] 5 :none)", Keyword("none")),
        ("(get {:a 1} :a)", 1),
        ("(get {:a 1} :b 0)", 0),
        ("(:a {:a 1})", 1),
        ("({:a 1} :b 2)", 2),
        ("(map inc [1 2 3])", [2, 3, 4]),
        ("(map + [1 2] [10 20 30])", [11, 22]),
        ("(filter (fn [x] (> x 1)) [1 2 3])", [2, 3]),
        ("(reduce + [1 2 3 4])", 10),
        ("(reduce + 10 [1 2])", 13),
        ("(reduce + [])", 0),
        ("(apply + 1 2 [3 4])", 10),
        ("(range 4)", [0, 1, 2, 3]),
        ("(range 1 10 3)", [1, 4, 7]),
        ('(str "a" 1 nil :k)', "a1:k"),
        ('(pr-str "a" 1)', '"a" 1'),
        ("(name :k)", "k"),
        ('(keyword "x")', Keyword("x")),
        ('(symbol "user" "x")', Symbol("user/x")),
        ("(nil? nil)", True),
        ("(number? 1/2)", True),
        ('(string? "s")', True),
        ("(fn? inc)", True),
        ("(fn? (fn [] 1))", True),
        ("(fn? :k)", False),
        ("(identity 5)", 5),
    ],
)
def test_core_functions(interp, source, expected):
    assert interp.eval(source) == expected


def test_def_returns_var_and_binds_value(interp):
    var = interp.eval("(def x 10)")
    assert isinstance(var, Var)
    assert pr_str(var) == "#'user/x"
    assert interp.eval("x") == 10
    assert interp.eval("user/x") == 10


def test_defn_with_docstring_and_multiple_arities(interp):
    interp.eval(
        """
        (defn greet
          "Say hello."
          ([] (greet "world"))
          ([who] (str "hello " who)))
        """
    )
    assert interp.eval("(greet)") == "hello world"
    assert interp.eval('(greet "bob")') == "hello bob"
    var = interp.registry.get("user").mappings["greet"]
    assert var.meta["doc"] == "Say hello."
    assert var.arglists == [[], ["who"]]
    assert var.kind == "function"


def test_rest_params(interp):
    interp.eval("(defn tail-of [a & more] more)")
    assert interp.eval("(tail-of 1 2 3)") == [2, 3]
    assert interp.eval("(tail-of 1)") == []


def test_wrong_arity_raises(interp):
    interp.eval("(defn one [x] x)")
    with pytest.raises(EvaluationFault) as info:
        interp.eval("(one 1 2)")
    assert isinstance(info.value.cause, QuillArityError)
    assert "one" in str(info.value.cause)


def test_let_is_sequential_and_lexical(interp):
    assert interp.eval("(let [a 1 b (+ a 1)] (* a b))") == 2
    with pytest.raises(EvaluationFault) as info:
        interp.eval("(do (let [hidden 1] hidden) hidden)")
    assert isinstance(info.value.cause, QuillUnboundSymbol)


def test_closures_capture_environment(interp):
    interp.eval("(defn adder [n] (fn [x] (+ x n)))")
    assert interp.eval("((adder 5) 10)") == 15


@pytest.mark.parametrize(
    "source,expected",
    [
        ("(if nil 1 2)", 2),
        ("(if 0 1 2)", 1),
        ("(if false 1)", Nil),
        ("(when true 1 2)", 2),
        ("(when-not true 1)", Nil),
        ("(cond false 1 nil 2 :else 3)", 3),
        ("(cond)", Nil),
        ("(and 1 2 3)", 3),
        ("(and 1 nil 3)", Nil),
        ("(and)", True),
        ("(or nil false 7)", 7),
        ("(or)", Nil),
    ],
)
def test_conditionals(interp, source, expected):
    assert interp.eval(source) == expected


def test_quote_and_quasiquote(interp):
    assert interp.eval("'(a b)") == [Symbol("a"), Symbol("b")]
    interp.eval("(def xs [2 3])")
    assert interp.eval("`(1 ~(first xs) ~@xs)") == [1, 2, 2, 3]
    assert interp.eval("`[a ~(+ 1 1)]") == Vector([Symbol("a"), 2])


def test_defmacro(interp):
    interp.eval("(defmacro unless [c & body] `(if ~c nil (do ~@body)))")
    assert interp.eval("(unless false 1 2)") == 2
    assert interp.eval("(unless true 1)") is Nil
    assert interp.registry.get("user").mappings["unless"].kind == "macro"


def test_macro_shadowed_by_local_is_called_as_function(interp):
    assert interp.eval("(let [when (fn [a b] (+ a b))] (when 1 2))") == 3


def test_try_catch_finally(interp):
    out = []
    result = interp.evaluate(
        "user",
        """
        (try
          (/ 1 0)
          (catch ZeroDivisionError e (ex-message e))
          (finally (println "cleanup")))
        """,
        out=out.append,
    )
    assert result.value == "Divide by zero"
    assert out == ["cleanup\n"]


def test_throw_non_exception_value(interp):
    assert interp.eval('(try (throw "boom") (catch QuillThrow e (ex-message e)))') == "boom"
    assert interp.eval("(try (throw :k) (catch :default e 1))") == 1
    with pytest.raises(EvaluationFault) as info:
        interp.eval("(throw 42)")
    assert isinstance(info.value.cause, QuillThrow)
    assert info.value.cause.value == 42


def test_uncaught_exception_class_propagates(interp):
    with pytest.raises(EvaluationFault) as info:
        interp.eval("(try (/ 1 0) (catch QuillTypeError e :caught))")
    assert isinstance(info.value.cause, ZeroDivisionError)


def test_special_forms_cannot_be_taken_as_values(interp):
    with pytest.raises(EvaluationFault) as info:
        interp.eval("if")
    assert isinstance(info.value.cause, QuillUnboundSymbol)


def test_calling_a_non_function(interp):
    with pytest.raises(EvaluationFault) as info:
        interp.eval("(1 2)")
    assert isinstance(info.value.cause, QuillTypeError)


def test_large_tail_recursive_loop_runs_without_stack_overflow(interp):
    interp.eval(
        """
        (defn count-down [n acc]
          (if (= n 0)
            acc
            (count-down (- n 1) (+ acc 1))))
        """
    )
    assert interp.eval("(count-down 5000 0)") == 5000


def test_output_writes_are_reported_in_order(interp):
    out = []
    interp.evaluate("user", '(print "a") (println "b" 1) (print)', out=out.append)
    assert out == ["a", "b 1\n"]


def test_host_import(interp):
    assert interp.eval("(import math) (math/sqrt 16)") == 4.0
    assert interp.eval("(import [os.path :as path]) (path/basename \"/a/b.txt\")") == "b.txt"
    assert interp.eval("math/pi") == math.pi


@pytest.mark.parametrize(
    "source,printed",
    [
        ("nil", "nil"),
        ("true", "true"),
        ('"q\\"uote"', '"q\\"uote"'),
        ("1/2", "1/2"),
        ("[1 :a \"s\"]", '[1 :a "s"]'),
        ("'(a b)", "(a b)"),
        ("{:a [1]}", "{:a [1]}"),
        ("(fn named [] 1)", "#<fn named>"),
        ("inc", "#<builtin inc>"),
    ],
)
def test_printed_forms(interp, source, printed):
    assert pr_str(interp.eval(source)) == printed


def test_session_bindings_are_visible_as_locals(interp):
    result = interp.evaluate("user", "(+ *1 *2)", bindings={"*1": 1, "*2": 2})
    assert result.value == 3


def test_fault_reports_location_and_type(interp):
    with pytest.raises(EvaluationFault) as info:
        interp.evaluate("user", "(def a 1)\n\n(/ a 0)", source="demo.qll")
    fault = info.value
    assert fault.line == 3
    assert fault.ns == "user"
    assert "ZeroDivisionError" in fault.summary
    assert "demo.qll:3" in fault.summary
    assert fault.trace.startswith("ZeroDivisionError: Divide by zero\n\tat demo.qll:3")


def test_syntax_errors_are_faults(interp):
    with pytest.raises(EvaluationFault) as info:
        interp.eval("(+ 1")
    assert "Syntax error" in info.value.summary

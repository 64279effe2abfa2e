import re

import pytest

from quill_nrepl.ops import OPS, arglists_str, dispatch
from quill_nrepl.session import SessionContext


@pytest.fixture
def session():
    return SessionContext()


@pytest.fixture
def run(interp, session):
    def run(**msg):
        msg.setdefault("id", "1")
        return list(dispatch(interp, session, {k.replace("_", "-"): v for k, v in msg.items()}))

    return run


def test_eval_success(run):
    assert run(op="eval", code="(+ 1 3)") == [
        {"id": "1", "ns": "user", "value": "4"},
        {"id": "1", "ns": "user", "status": ["done"]},
    ]


def test_eval_echoes_session(run):
    responses = run(op="eval", code="1", session="abc")
    assert all(r["session"] == "abc" for r in responses)


def test_eval_output_precedes_value(run):
    responses = run(op="eval", code='(print "a") (println "b") :ok')
    assert responses == [
        {"id": "1", "out": "a"},
        {"id": "1", "out": "b\n"},
        {"id": "1", "ns": "user", "value": ":ok"},
        {"id": "1", "ns": "user", "status": ["done"]},
    ]


def test_eval_fault_sequence(run, session):
    err, ex, done = run(op="eval", code="(/ 1 0)")
    assert err["id"] == "1"
    assert "ZeroDivisionError" in err["err"]
    assert ex["status"] == ["eval-error"]
    assert ex["ns"] == "user"
    assert "Divide by zero" in ex["ex"]
    assert done == {"id": "1", "ns": "user", "status": ["done"]}
    assert isinstance(session.last_fault, ZeroDivisionError)


def test_eval_output_is_sent_before_fault(run):
    responses = run(op="eval", code='(println "before") (throw "x")')
    assert responses[0] == {"id": "1", "out": "before\n"}
    assert "err" in responses[1]


def test_eval_namespace_follows_code(run, session):
    responses = run(op="eval", code="(ns my.ns) (def a 1) a")
    assert responses[-1] == {"id": "1", "ns": "my.ns", "status": ["done"]}
    assert session.ns == "my.ns"
    assert run(op="eval", code="a")[0]["value"] == "1"


def test_eval_namespace_after_fault(run, session):
    responses = run(op="eval", code="(in-ns 'broken) (/ 1 0)")
    assert responses[-1]["ns"] == "broken"
    assert session.ns == "broken"


def test_eval_ns_field_sets_starting_namespace(run):
    run(op="eval", code="(ns other) (def only-here 5)")
    run(op="eval", code="(in-ns 'user)")
    assert run(op="eval", code="only-here", ns="other")[0]["value"] == "5"


def test_eval_unknown_namespace(run):
    err, ex, done = run(op="eval", code="1", ns="ghost")
    assert "No namespace: ghost found" in err["err"]
    assert done["ns"] == "ghost"


def test_history_bindings(run):
    run(op="eval", code="10")
    run(op="eval", code="20")
    assert run(op="eval", code="(+ *1 *2)")[0]["value"] == "30"
    run(op="eval", code="(/ 1 0)")
    assert run(op="eval", code="(ex-message *e)")[0]["value"] == '"Divide by zero"'


def test_load_file_uses_path_as_source_label(run):
    run(op="load-file", file="(def loaded 1)\n(* loaded 2)", file_name="f.qll", file_path="/tmp/f.qll")
    responses = run(op="load-file", file="(defn bad [] (/ 1 0))\n(bad)", file_path="/src/bad.qll")
    assert "/src/bad.qll:2" in responses[0]["err"]
    assert "/src/bad.qll:2" in responses[1]["ex"]


def test_load_file_reports_last_value(run):
    responses = run(op="load-file", file="(def a 1)\n(+ a 41)", file_name="f.qll")
    assert responses[0] == {"id": "1", "ns": "user", "value": "42"}


def test_clone_returns_fresh_ids(run):
    first = run(op="clone")[0]
    second = run(op="clone")[0]
    assert first["status"] == ["done"]
    assert re.fullmatch(r"[0-9a-f-]{36}", first["new-session"])
    assert first["new-session"] != second["new-session"]


def test_close(run):
    assert run(op="close") == [{"id": "1", "status": ["done"]}]


def test_describe(run):
    (resp,) = run(op="describe")
    assert set(resp["ops"]) == set(OPS)
    assert all(v == {} for v in resp["ops"].values())
    assert set(resp["versions"]) == {"quill", "python", "quill-nrepl"}
    for version in resp["versions"].values():
        assert {"version-string", "major", "minor", "incremental"} <= set(version)
    assert resp["status"] == ["done"]


def test_unknown_op(run):
    assert run(op="frobnicate") == [{"id": "1", "status": ["error", "unknown-op", "done"]}]


def test_missing_op(run):
    assert run()[0]["status"] == ["error", "unknown-op", "done"]


@pytest.mark.parametrize("name", [["eval"], {"eval": 1}, 7])
def test_non_string_op_is_unknown(run, name):
    assert run(op=name) == [{"id": "1", "status": ["error", "unknown-op", "done"]}]


def test_handler_errors_become_eval_errors(run):
    err, ex, done = run(op="eval")
    assert "Missing required field: code" in err["err"]
    assert ex["status"] == ["eval-error"]
    assert done["status"] == ["done"]


def test_complete(run):
    run(op="eval", code="(def abc 1)")
    (resp,) = run(op="complete", prefix="ab")
    assert {"candidate": "abc", "ns": "user", "type": "var"} in resp["completions"]
    (resp,) = run(op="complete", symbol="ab", ns="quill.core")
    assert {"candidate": "abc", "ns": "user", "type": "var"} not in resp["completions"]


def test_info_for_builtin(run):
    (resp,) = run(op="info", sym="inc")
    assert resp["ns"] == "quill.core"
    assert resp["name"] == "inc"
    assert resp["doc"] == "Returns a number one greater than num."
    assert resp["arglists-str"] == "([x])"
    assert resp["file"].endswith("core.py")
    assert isinstance(resp["line"], int)
    assert resp["status"] == ["done"]


def test_info_for_user_function(run):
    run(op="eval", code='(defn f\n  "Doc."\n  ([x] x)\n  ([x y] y))')
    (resp,) = run(op="info", symbol="f")
    assert resp == {
        "id": "1",
        "ns": "user",
        "name": "f",
        "doc": "Doc.",
        "file": "NO_SOURCE_FILE",
        "line": 1,
        "arglists-str": "([x] [x y])",
        "status": ["done"],
    }


def test_info_without_match(run):
    assert run(op="info", sym="nope") == [{"id": "1", "status": ["done"]}]
    assert run(op="info", sym="if") == [{"id": "1", "status": ["done"]}]


def test_eldoc_for_function_and_macro(run):
    (resp,) = run(op="eldoc", sym="map")
    assert resp["type"] == "function"
    assert resp["eldoc"] == [["f", "coll"], ["f", "c1", "c2", "&", "colls"]]
    assert resp["docstring"].startswith("Returns a list")
    (resp,) = run(op="eldoc", sym="when")
    assert resp["type"] == "macro"
    assert resp["eldoc"] == [["test", "&", "body"]]


def test_eldoc_without_match(run):
    run(op="eval", code="(def plain 1)")
    for sym in ("plain", "nope", ":kw"):
        assert run(op="eldoc", sym=sym) == [{"id": "1", "status": ["done", "no-eldoc"]}]


def test_arglists_str():
    assert arglists_str([[], ["x", "&", "more"]]) == "([] [x & more])"

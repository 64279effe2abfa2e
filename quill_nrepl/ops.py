"""
nREPL operations.

Each op is a generator `handler(interp, session, msg)` yielding the response
messages for one request, in the order they must be written. Handlers are
registered in OPS by the `op` decorator; `dispatch` is the single entry
point used by the connection loop and never raises.
"""

from __future__ import annotations

import logging
import platform
import re
import traceback
import uuid
from typing import Any, Callable, Dict, Iterator

import quill
import quill_nrepl
from quill.interpreter import EvaluationFault, Interpreter
from quill.printer import pr_str
from quill.runtime_context import NO_SOURCE_FILE
from quill_nrepl.completion import search
from quill_nrepl.resolver import VarEntity, resolve
from quill_nrepl.session import SessionContext

logger = logging.getLogger(__name__)

Message = Dict[str, Any]
OpHandler = Callable[[Interpreter, SessionContext, Message], Iterator[Message]]

OPS: Dict[str, OpHandler] = {}

DONE = ["done"]


def op(name: str) -> Callable[[OpHandler], OpHandler]:
    def deco(fn: OpHandler) -> OpHandler:
        OPS[name] = fn
        return fn

    return deco


def response_for(msg: Message, **fields: Any) -> Message:
    """A response correlated with `msg`; keyword names use _ for the wire's -."""
    resp: Message = {}
    for key in ("id", "session"):
        if key in msg:
            resp[key] = msg[key]
    for key, value in fields.items():
        resp[key.replace("_", "-")] = value
    return resp


def _require(msg: Message, *names: str) -> Any:
    for name in names:
        if name in msg:
            return msg[name]
    raise ValueError(f"Missing required field: {' or '.join(names)}")


def _version(version_string: str) -> Message:
    parts = [int(p) for p in re.findall(r"\d+", version_string)[:3]]
    parts += [0] * (3 - len(parts))
    major, minor, incremental = parts
    return {"version-string": version_string, "major": major, "minor": minor, "incremental": incremental}


def arglists_str(arglists: list[list[str]]) -> str:
    return "(" + " ".join("[" + " ".join(params) + "]" for params in arglists) + ")"


def fault_responses(msg: Message, ns: str, summary: str, trace: str) -> Iterator[Message]:
    yield response_for(msg, err=summary)
    yield response_for(msg, ex=trace, status=["eval-error"], ns=ns)
    yield response_for(msg, ns=ns, status=DONE)


# -------------------------------
# Session ops
# -------------------------------
@op("clone")
def clone(interp: Interpreter, session: SessionContext, msg: Message) -> Iterator[Message]:
    yield response_for(msg, new_session=str(uuid.uuid4()), status=DONE)


@op("close")
def close(interp: Interpreter, session: SessionContext, msg: Message) -> Iterator[Message]:
    yield response_for(msg, status=DONE)


@op("describe")
def describe(interp: Interpreter, session: SessionContext, msg: Message) -> Iterator[Message]:
    versions = {
        "quill": _version(quill.__version__),
        "python": _version(platform.python_version()),
        "quill-nrepl": _version(quill_nrepl.__version__),
    }
    yield response_for(msg, ops={name: {} for name in OPS}, versions=versions, status=DONE)


# -------------------------------
# Evaluation
# -------------------------------
def _evaluate(
    interp: Interpreter,
    session: SessionContext,
    msg: Message,
    code: str,
    source: str,
) -> Iterator[Message]:
    if msg.get("ns"):
        session.ns = msg["ns"]
    writes: list[str] = []
    try:
        result = interp.evaluate(session.ns, code, source=source, out=writes.append, bindings=session.bindings())
    except EvaluationFault as fault:
        session.ns = fault.ns
        session.record_fault(fault.cause)
        for chunk in writes:
            yield response_for(msg, out=chunk)
        yield from fault_responses(msg, fault.ns, fault.summary, fault.trace)
        return
    session.ns = result.ns
    session.record_value(result.value)
    for chunk in writes:
        yield response_for(msg, out=chunk)
    yield response_for(msg, ns=result.ns, value=pr_str(result.value))
    yield response_for(msg, ns=result.ns, status=DONE)


@op("eval")
def eval_op(interp: Interpreter, session: SessionContext, msg: Message) -> Iterator[Message]:
    code = _require(msg, "code")
    yield from _evaluate(interp, session, msg, code, msg.get("file") or NO_SOURCE_FILE)


@op("load-file")
def load_file(interp: Interpreter, session: SessionContext, msg: Message) -> Iterator[Message]:
    code = _require(msg, "file")
    source = msg.get("file-path") or msg.get("file-name") or NO_SOURCE_FILE
    yield from _evaluate(interp, session, msg, code, source)


# -------------------------------
# Tooling
# -------------------------------
@op("complete")
def complete(interp: Interpreter, session: SessionContext, msg: Message) -> Iterator[Message]:
    ns = msg.get("ns") or session.ns
    query = msg.get("prefix", msg.get("symbol", ""))
    completions = [c.to_message() for c in search(interp.registry, ns, query)]
    yield response_for(msg, completions=completions, status=DONE)


@op("info")
def info(interp: Interpreter, session: SessionContext, msg: Message) -> Iterator[Message]:
    ns = msg.get("ns") or session.ns
    entity = resolve(interp.registry, ns, _require(msg, "sym", "symbol"))
    if not isinstance(entity, VarEntity):
        yield response_for(msg, status=DONE)
        return
    var = entity.var
    fields = {"ns": entity.ns, "name": var.name}
    for key in ("doc", "file", "line"):
        if var.meta.get(key) is not None:
            fields[key] = var.meta[key]
    if var.arglists:
        fields["arglists_str"] = arglists_str(var.arglists)
    yield response_for(msg, **fields, status=DONE)


@op("eldoc")
def eldoc(interp: Interpreter, session: SessionContext, msg: Message) -> Iterator[Message]:
    ns = msg.get("ns") or session.ns
    entity = resolve(interp.registry, ns, _require(msg, "sym", "symbol"))
    if not isinstance(entity, VarEntity) or not entity.var.arglists:
        yield response_for(msg, status=["done", "no-eldoc"])
        return
    var = entity.var
    fields = {
        "ns": entity.ns,
        "name": var.name,
        "type": "macro" if entity.kind == "macro" else "function",
        "eldoc": var.arglists,
    }
    if var.meta.get("doc") is not None:
        fields["docstring"] = var.meta["doc"]
    yield response_for(msg, **fields, status=DONE)


def dispatch(interp: Interpreter, session: SessionContext, msg: Message) -> Iterator[Message]:
    """
    Responses for one request. Errors escaping a handler are reported to the
    client as an eval error; responses already produced stay sent.
    """
    name = msg.get("op")
    handler = OPS.get(name) if isinstance(name, str) else None
    if handler is None:
        logger.debug("Unknown op %r", name)
        yield response_for(msg, status=["error", "unknown-op", "done"])
        return
    logger.debug("Dispatching op %s (id=%s)", name, msg.get("id"))
    try:
        yield from handler(interp, session, msg)
    except Exception as exc:
        logger.exception("Op %s failed", name)
        summary = f"{type(exc).__name__}: {exc}\n"
        trace = "".join(traceback.format_exception(type(exc), exc, exc.__traceback__))
        yield from fault_responses(msg, session.ns, summary, trace)

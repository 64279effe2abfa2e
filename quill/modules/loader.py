from __future__ import annotations
from pathlib import Path
from typing import Optional

from quill.config import get_source_roots
from quill.errors import QuillNameError
from quill.runtime_context import EvalContext


# Map a dotted namespace to a .qll file underneath a set of roots.
# Dashes in namespace segments become underscores in file names.

def _ns_to_relpath(namespace: str) -> Path:
    return Path(*namespace.replace('-', '_').split('.')).with_suffix('.qll')


def resolve_namespace(namespace: str) -> Optional[Path]:
    rel = _ns_to_relpath(namespace)
    for root in get_source_roots():
        candidate = root / rel
        if candidate.is_file():
            return candidate
    return None


def load_namespace(ctx: EvalContext, namespace: str) -> None:
    """Evaluate the source file of `namespace` in a context of its own.

    The file is expected to start with an `(ns ...)` form. Output written while
    loading goes to the requesting context's sink.
    """
    # Lazy import: the evaluator imports the special forms that call us
    from quill.evaluation.evaluator import eval_forms

    p = resolve_namespace(namespace)
    if p is None:
        raise QuillNameError(f"Could not locate {_ns_to_relpath(namespace)} on QUILL_PATH")
    code = p.read_text(encoding='utf-8')
    load_ctx = EvalContext(ctx.registry, "user", ctx.out, source=str(p))
    eval_forms(code, load_ctx)
    if ctx.registry.get(namespace) is None:
        raise QuillNameError(f"Namespace {namespace} not found after loading {p}")

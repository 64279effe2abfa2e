"""Registry of special forms for the Quill evaluator.

Maps Symbols to handler functions that implement non-standard evaluation rules.
The evaluator consults this table to dispatch special forms before macro
expansion and ordinary function application. These names are reserved: they
never resolve to Vars.
"""

from quill.types.symbol import Symbol
from quill.evaluation.special_forms.def_form import def_form
from quill.evaluation.special_forms.defmacro_form import defmacro_form
from quill.evaluation.special_forms.do_form import do_form
from quill.evaluation.special_forms.fn_form import fn_form
from quill.evaluation.special_forms.if_form import if_form
from quill.evaluation.special_forms.let_form import let_form
from quill.evaluation.special_forms.ns_forms import import_form, in_ns_form, ns_form, require_form
from quill.evaluation.special_forms.quote_forms import quasiquote_form, quote_form
from quill.evaluation.special_forms.try_form import throw_form, try_form
from quill.evaluation.special_forms.var_form import var_form

SPECIAL_FORMS = {
    Symbol("def"): def_form,
    Symbol("if"): if_form,
    Symbol("do"): do_form,
    Symbol("let"): let_form,
    Symbol("fn"): fn_form,
    Symbol("quote"): quote_form,
    Symbol("quasiquote"): quasiquote_form,
    Symbol("var"): var_form,
    Symbol("defmacro"): defmacro_form,
    Symbol("ns"): ns_form,
    Symbol("in-ns"): in_ns_form,
    Symbol("require"): require_form,
    Symbol("import"): import_form,
    Symbol("try"): try_form,
    Symbol("throw"): throw_form,
}

SPECIAL_FORM_NAMES = frozenset(sym.id for sym in SPECIAL_FORMS)

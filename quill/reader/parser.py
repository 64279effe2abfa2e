"""
  Quill Reader, Lexer and Parser

- Streaming, lazy parsing
- Emits Python primitives instead of Cons cells:

    - nil -> Nil, true/false -> True/False
    - lists -> Python list
    - vectors -> Vector (a list subclass)
    - maps -> dict
    - symbols -> Symbol, keywords -> Keyword
    - strings -> str
    - numbers -> int/float/Fraction
    - quote forms -> [quote, expr], etc.

Every token carries the 1-based line it starts on so that definitions can
record where they came from.
"""

from __future__ import annotations

import re
from fractions import Fraction
from typing import Callable, Iterable, Iterator, Optional

from quill import SExpression
from quill.errors import QuillSyntaxError
from quill.types.nil import Nil
from quill.types.symbol import Keyword, Symbol, split_qualified
from quill.types.vector import Vector


TOKEN_RE = re.compile(
    r"(?P<comment>;[^\n]*)"  # single-line comment
    r"|(?P<quote>')"  # '
    r"|(?P<syntax_quote>`)"  # `
    r"|(?P<unquote>~@|~)"  # ~ and ~@
    r"|(?P<lparen>\()"  # (
    r"|(?P<rparen>\))"  # )
    r"|(?P<lbracket>\[)"  # [
    r"|(?P<rbracket>\])"  # ]
    r"|(?P<lbrace>\{)"  # {
    r"|(?P<rbrace>\})"  # }
    r'|(?P<string>"(?:\\.|[^\\"])*")'  # double-quoted strings
    r'|(?P<symbol>[^\s,(){}\[\]\'"`~;]+)'  # fallback: symbols, keywords, numbers
)

WHITESPACE_RE = re.compile(r"[\s,]+")  # commas are whitespace

INT_RE = re.compile(r"[+-]?\d+$")
RATIO_RE = re.compile(r"([+-]?\d+)/(\d+)$")
FLOAT_RE = re.compile(r"[+-]?(\d+\.\d*|\d*\.\d+|\d+)([eE][+-]?\d+)?$")

QUOTE_FORMS: dict[str, Symbol] = {
    "'": Symbol("quote"),
    "`": Symbol("quasiquote"),
    "~": Symbol("unquote"),
    "~@": Symbol("unquote-splicing"),
}

CLOSERS = {"lparen": "rparen", "lbracket": "rbracket", "lbrace": "rbrace"}

STRING_ESCAPES = {"n": "\n", "t": "\t", "r": "\r", '"': '"', "\\": "\\", "0": "\0"}

Token = tuple[str, str, int]


def lex(source: str) -> Iterator[Token]:
    """Token generator: yields (token_type, token_value, line) tuples."""
    pos = 0
    line = 1
    n = len(source)
    while pos < n:
        ws = WHITESPACE_RE.match(source, pos)
        if ws:
            line += source.count("\n", pos, ws.end())
            pos = ws.end()
            continue
        m = TOKEN_RE.match(source, pos)
        if not m:
            if source[pos] == '"':
                raise QuillSyntaxError(f"EOF while reading string starting at line {line}")
            raise QuillSyntaxError(f"Unexpected char at line {line}: {source[pos]!r}")
        kind = m.lastgroup
        if kind != "comment":
            yield kind, m.group(kind), line
        line += m.group(0).count("\n")
        pos = m.end()


def _unescape(body: str) -> str:
    def repl(m: re.Match) -> str:
        ch = m.group(1)
        if ch not in STRING_ESCAPES:
            raise QuillSyntaxError(f"Unsupported escape character: \\{ch}")
        return STRING_ESCAPES[ch]

    return re.sub(r"\\(.)", repl, body, flags=re.DOTALL)


class TokenStream:
    """
    Pulls forms one at a time out of a token iterator.

    `auto_ns` resolves the namespace of auto-resolved keywords (::k and
    ::alias/k): it is called with None or the alias and returns a namespace
    name. Without it such keywords are a syntax error.
    """

    def __init__(self, token_iter: Iterable[Token], auto_ns: Optional[Callable[[Optional[str]], str]] = None):
        self.tokens = iter(token_iter)
        self.buffer: list[Token] = []
        self.auto_ns = auto_ns

    def peek(self) -> tuple[Optional[str], Optional[str], Optional[int]]:
        if not self.buffer:
            try:
                self.buffer.append(next(self.tokens))
            except StopIteration:
                return None, None, None
        return self.buffer[0]

    def advance(self) -> tuple[Optional[str], Optional[str], Optional[int]]:
        if self.buffer:
            return self.buffer.pop(0)
        return next(self.tokens, (None, None, None))

    @property
    def line(self) -> Optional[int]:
        """Line of the next unread token, or None at end of input."""
        return self.peek()[2]

    def parse_expr(self) -> SExpression:
        """Read the next form; returns None at end of input."""
        tok_type, tok_val, line = self.advance()
        if tok_type is None:
            return None

        if tok_type == "symbol":
            return self._parse_atom(tok_val)

        if tok_type == "string":
            return _unescape(tok_val[1:-1])

        if tok_type in ("quote", "syntax_quote", "unquote"):
            if self.peek()[0] is None:
                raise QuillSyntaxError(f"EOF while reading {tok_val!r} form at line {line}")
            return [QUOTE_FORMS[tok_val], self._parse_required(line)]

        if tok_type in CLOSERS:
            items = self._parse_seq(CLOSERS[tok_type], line)
            if tok_type == "lbracket":
                return Vector(items)
            if tok_type == "lbrace":
                return self._to_map(items, line)
            return items

        raise QuillSyntaxError(f"Unmatched delimiter: {tok_val} at line {line}")

    def _parse_required(self, line: int) -> SExpression:
        if self.peek()[0] in ("rparen", "rbracket", "rbrace"):
            raise QuillSyntaxError(f"Unmatched delimiter: {self.peek()[1]} at line {self.peek()[2]}")
        return self.parse_expr()

    def _parse_seq(self, closer: str, line: int) -> list:
        items = []
        while True:
            tok_type = self.peek()[0]
            if tok_type is None:
                raise QuillSyntaxError(f"EOF while reading, starting at line {line}")
            if tok_type == closer:
                self.advance()
                return items
            items.append(self._parse_required(line))

    def _to_map(self, items: list, line: int) -> dict:
        if len(items) % 2:
            raise QuillSyntaxError(f"Map literal must contain an even number of forms (line {line})")
        try:
            return {items[i]: items[i + 1] for i in range(0, len(items), 2)}
        except TypeError:
            raise QuillSyntaxError(f"Map literal has an unhashable key (line {line})")

    def _parse_atom(self, tok: str) -> SExpression:
        if tok == "nil":
            return Nil
        if tok == "true":
            return True
        if tok == "false":
            return False
        if INT_RE.match(tok):
            return int(tok)
        ratio = RATIO_RE.match(tok)
        if ratio:
            if int(ratio.group(2)) == 0:
                raise QuillSyntaxError(f"Divide by zero in ratio literal: {tok}")
            value = Fraction(int(ratio.group(1)), int(ratio.group(2)))
            return value.numerator if value.denominator == 1 else value
        if FLOAT_RE.match(tok) and any(c.isdigit() for c in tok):
            return float(tok)
        if tok[0].isdigit():
            raise QuillSyntaxError(f"Invalid number: {tok}")
        if tok.startswith(":"):
            return self._parse_keyword(tok)
        ns, name = split_qualified(tok)
        if not name or ns == "":
            raise QuillSyntaxError(f"Invalid token: {tok}")
        return Symbol(tok)

    def _parse_keyword(self, tok: str) -> Keyword:
        auto = tok.startswith("::")
        body = tok[2:] if auto else tok[1:]
        if not body or body.startswith(":") or body.endswith("/"):
            raise QuillSyntaxError(f"Invalid token: {tok}")
        ns, name = split_qualified(body)
        if ns == "" or not name:
            raise QuillSyntaxError(f"Invalid token: {tok}")
        if auto:
            if self.auto_ns is None:
                raise QuillSyntaxError(f"Invalid token: {tok}")
            return Keyword(name, self.auto_ns(ns))
        return Keyword(name, ns)

    def parse_all(self) -> Iterator[SExpression]:
        while self.peek()[0] is not None:
            yield self.parse_expr()


def read_string(text: str, auto_ns: Optional[Callable[[Optional[str]], str]] = None) -> SExpression:
    """Read exactly one form from `text`."""
    stream = TokenStream(lex(text), auto_ns)
    if stream.peek()[0] is None:
        raise QuillSyntaxError("EOF while reading")
    form = stream.parse_expr()
    if stream.peek()[0] is not None:
        raise QuillSyntaxError(f"Expected a single form, found trailing input in {text!r}")
    return form

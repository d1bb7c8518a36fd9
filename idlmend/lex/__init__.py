# idlmend/lex/__init__.py
"""idlmend tokeniser: lexes Web IDL text into a lossless, backtrackable token stream.

Features
--------
- Every token keeps the exact lexeme (`text`) plus the whitespace/comments that
  precede it (`trivia`), so `trivia + text` over the whole stream is the input.
- Keywords and punctuation lex as `inline` tokens; everything else keeps its
  lexical kind (`identifier`, `integer`, `decimal`, `string`, `other`).
- The input is lexed up front. The cursor is a plain index, so saving and
  restoring a position is O(1) and re-consuming after `unconsume` yields the
  very same Token objects.

Matching order at each offset:
  1) whitespace / comments -> accumulated into trivia
  2) decimal, integer, identifier (`[-0-9.A-Z_a-z]` start)
  3) string
  4) punctuation (longest first: `...` before `.`)
  5) any other single character

API
---
- `Token(kind, text, trivia, line, index, offset)`
- `Tokeniser(source, source_name)`
    - `position` / `unconsume(position)`
    - `probe(value)`, `probe_kind(kind)`
    - `consume(*values)`, `consume_kind(*kinds)`, `consume_identifier(value)`
    - `error(message, reason=None)` -> raises `WebIDLParseError`
"""

from __future__ import annotations
from dataclasses import dataclass
from typing import List, Optional, Tuple
import regex as re


# --------- Keyword tables ---------

ARGUMENT_NAME_KEYWORDS = (
    "async", "attribute", "callback", "const", "constructor", "deleter",
    "dictionary", "enum", "getter", "includes", "inherit", "interface",
    "iterable", "maplike", "namespace", "partial", "required", "setlike",
    "setter", "static", "stringifier", "typedef", "unrestricted",
)

STRING_TYPES = ("ByteString", "DOMString", "USVString")

TYPE_NAME_KEYWORDS = (
    "ArrayBuffer", "SharedArrayBuffer", "DataView",
    "Int8Array", "Int16Array", "Int32Array",
    "Uint8Array", "Uint16Array", "Uint32Array", "Uint8ClampedArray",
    "BigInt64Array", "BigUint64Array", "Float32Array", "Float64Array",
    "any", "object", "symbol",
)

NON_REGEX_TERMINALS = frozenset((
    "-Infinity", "FrozenArray", "Infinity", "NaN", "ObservableArray",
    "Promise", "bigint", "boolean", "byte", "double", "false", "float",
    "long", "mixin", "null", "octet", "optional", "or", "readonly", "record",
    "sequence", "short", "true", "undefined", "unsigned", "void",
) + ARGUMENT_NAME_KEYWORDS + STRING_TYPES + TYPE_NAME_KEYWORDS)

PUNCTUATIONS = ("(", ")", ",", "...", ":", ";", "<", "=", ">", "?", "*", "[", "]", "{", "}")

RESERVED = frozenset(("_constructor", "toString", "_toString"))

_TOKEN_RE = {
    "decimal": re.compile(
        r"-?(?=[0-9]*\.|[0-9]+[eE])(([0-9]+\.[0-9]*|[0-9]*\.[0-9]+)([Ee][-+]?[0-9]+)?|[0-9]+[Ee][-+]?[0-9]+)"
    ),
    "integer": re.compile(r"-?(0([Xx][0-9A-Fa-f]+|[0-7]*)|[1-9][0-9]*)"),
    "identifier": re.compile(r"[_-]?[A-Za-z][0-9A-Z_a-z-]*"),
    "string": re.compile(r'"[^"]*"'),
    "whitespace": re.compile(r"[\t\n\r ]+"),
    "comment": re.compile(r"//[^\n]*|/\*[\s\S]*?\*/"),
    "other": re.compile(r"[^\t\n\r 0-9A-Za-z]"),
}
_WORD_START_RE = re.compile(r"[-0-9.A-Z_a-z]")


# --------- Errors ---------

class WebIDLParseError(SyntaxError):
    """Committed syntax error. Aborts the parse of the current file."""

    def __init__(self, message: str, *, bare_message: str, source_name: Optional[str] = None,
                 line: int = 0, position: int = 0, context: str = "") -> None:
        super().__init__(message)
        self.bare_message = bare_message
        self.source_name = source_name
        self.line = line
        self.position = position
        self.context = context

    def __str__(self) -> str:
        return self.args[0]


class WrongVariantError(WebIDLParseError):
    """A committed error that means "this was the other shape".

    `reason` is a short tag ("bodyless", "mixin") that enclosing productions
    match on to turn the failure back into a NoMatch.
    """

    def __init__(self, message: str, *, reason: str, **kw) -> None:
        super().__init__(message, **kw)
        self.reason = reason


# --------- Public datatypes ---------

@dataclass(frozen=True)
class Token:
    kind: str         # identifier | integer | decimal | string | inline | other | eof
    text: str         # lexeme exactly as matched
    trivia: str = ""  # whitespace/comments before the lexeme
    line: int = 1     # 1-based, line of the lexeme
    index: int = 0    # position in the token stream
    offset: int = 0   # character offset of the lexeme

    @property
    def value(self) -> str:
        """Semantic value: identifiers lose their leading `_` escape."""
        if self.kind == "identifier" and self.text.startswith("_"):
            return self.text[1:]
        return self.text

    @property
    def raw_text(self) -> str:
        """The substring that was matched (trivia excluded)."""
        return self.text

    @property
    def position(self) -> int:
        return self.index


# --------- Helpers ---------

def _line_bounds(src: str, pos: int) -> Tuple[int, int]:
    """[start, end) of the line containing pos."""
    start = src.rfind("\n", 0, pos)
    start = 0 if start < 0 else start + 1
    end = src.find("\n", pos)
    end = len(src) if end < 0 else end
    return start, end


def _snippet_caret_at_pos(src: str, pos: int) -> str:
    start, end = _line_bounds(src, pos)
    line_text = src[start:end].rstrip("\r")
    caret = " " * (pos - start) + "^"
    return f"{line_text}\n{caret}"


def tokenise(src: str, source_name: Optional[str] = None) -> List[Token]:
    """Lex the whole of `src`. The last token is always `eof`."""
    toks: List[Token] = []
    trivia = ""
    line = 1
    i = 0
    n = len(src)

    def error(message: str):
        snippet = _snippet_caret_at_pos(src, i)
        where = f" in {source_name}" if source_name else ""
        raise WebIDLParseError(
            f"Syntax error at line {line}{where}:\n{snippet} {message}",
            bare_message=message, source_name=source_name, line=line,
            position=len(toks), context=snippet,
        )

    while i < n:
        ch = src[i]

        # 1) trivia
        m = None
        if ch in "\t\n\r ":
            m = _TOKEN_RE["whitespace"].match(src, i)
        elif ch == "/":
            m = _TOKEN_RE["comment"].match(src, i)
        if m:
            trivia += m.group(0)
            line += m.group(0).count("\n")
            i = m.end()
            continue

        kind = None
        if _WORD_START_RE.match(ch):
            for k in ("decimal", "integer", "identifier"):
                m = _TOKEN_RE[k].match(src, i)
                if m:
                    kind = k
                    break
            if kind == "identifier":
                if m.group(0) in RESERVED:
                    error(f"{m.group(0)} is a reserved identifier and must not be used.")
                if m.group(0) in NON_REGEX_TERMINALS:
                    kind = "inline"
        elif ch == '"':
            m = _TOKEN_RE["string"].match(src, i)
            if m:
                kind = "string"

        if kind is None:
            for punc in PUNCTUATIONS:
                if src.startswith(punc, i):
                    kind = "inline"
                    lexeme = punc
                    break
            else:
                m = _TOKEN_RE["other"].match(src, i)
                if not m:
                    error(f"Unexpected character {ch!r}")
                kind = "other"
                lexeme = m.group(0)
        else:
            lexeme = m.group(0)

        toks.append(Token(kind, lexeme, trivia, line, len(toks), i))
        trivia = ""
        i += len(lexeme)

    toks.append(Token("eof", "", trivia, line, len(toks), n))
    return toks


# --------- Core implementation ---------

class Tokeniser:
    """Cursor over a lexed source.

    Every successful `consume*` advances the cursor; a failed one is a no-op.
    `error` is the only way a production reports an unrecoverable syntax error.
    """

    def __init__(self, source: str, source_name: Optional[str] = None):
        self.text = source
        self.source_name = source_name
        self.source: List[Token] = tokenise(source, source_name)
        self.position = 0
        # node currently being parsed; used to name the construct in errors
        self.current = None
        # grammar extension points (grammar.registry.Extensions), set by the parser
        self.extensions = None

    # ---- Lookahead ----
    def peek(self) -> Token:
        return self.source[self.position]

    def probe_kind(self, kind: str) -> bool:
        tok = self.source[self.position]
        return tok.kind == kind

    def probe(self, value: str) -> bool:
        tok = self.source[self.position]
        return tok.kind == "inline" and tok.text == value

    # ---- Consumption ----
    def consume_kind(self, *kinds: str) -> Optional[Token]:
        tok = self.source[self.position]
        if tok.kind in kinds:
            self.position += 1
            return tok
        return None

    def consume(self, *values: str) -> Optional[Token]:
        tok = self.source[self.position]
        if tok.kind == "inline" and tok.text in values:
            self.position += 1
            return tok
        return None

    def consume_identifier(self, value: str) -> Optional[Token]:
        tok = self.source[self.position]
        if tok.kind == "identifier" and tok.text == value:
            self.position += 1
            return tok
        return None

    def unconsume(self, position: int) -> None:
        self.position = position

    @property
    def at_eof(self) -> bool:
        return self.source[self.position].kind == "eof"

    # ---- Errors ----
    def error(self, message: str, reason: Optional[str] = None):
        tok = self.source[self.position]
        if tok.kind == "eof" and self.position > 0:
            tok = self.source[self.position - 1]
        snippet = _snippet_caret_at_pos(self.text, tok.offset)
        where = f" in {self.source_name}" if self.source_name else ""
        context = ""
        current = self.current
        if current is not None and getattr(current, "name", None):
            partial = "partial " if getattr(current, "partial", None) else ""
            context = f", since `{partial}{current.type} {current.name}`"
        msg = f"Syntax error at line {tok.line}{where}{context}:\n{snippet} {message}"
        kw = dict(bare_message=message, source_name=self.source_name, line=tok.line,
                  position=self.position, context=snippet)
        if reason is not None:
            raise WrongVariantError(msg, reason=reason, **kw)
        raise WebIDLParseError(msg, **kw)

# idlmend/grammar/writer.py
"""Serialise a syntax tree back to text.

A token is written as `trivia + text`; a node as its syntax fields in
declaration order; a list as its items in order; a missing token as nothing.
No whitespace is ever added or removed here: all of it lives in token trivia.
"""

from __future__ import annotations
from typing import Iterable, Union

from ..lex import Token
from .ast import Node


class Writer:
    def token(self, tok) -> str:
        if tok is None:
            return ""
        return tok.trivia + tok.text

    def node(self, node: Node) -> str:
        return "".join(self.item(item) for item in node.syntax_items())

    def item(self, item) -> str:
        if item is None:
            return ""
        if isinstance(item, Token):
            return self.token(item)
        if isinstance(item, Node):
            return self.node(item)
        if isinstance(item, list):
            return "".join(self.item(sub) for sub in item)
        raise TypeError(f"Cannot write {type(item).__name__!r}")

    def write(self, ast: Union[Node, Iterable[Node]]) -> str:
        if isinstance(ast, Node):
            return self.node(ast)
        return "".join(self.node(definition) for definition in ast)


def write(ast: Union[Node, Iterable[Node]]) -> str:
    """Concatenate the text of every token in `ast` (a node or a sequence of nodes)."""
    return Writer().write(ast)

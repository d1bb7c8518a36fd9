from __future__ import annotations
from pathlib import Path

from idlmend.grammar.ast import Node
from idlmend.lex import Token

SYNTAX_DIR = Path(__file__).parent / "syntax"


def shape(root):
    """Node types and token texts in tree order; equal shapes mean equal trees."""
    out = []

    def visit(item):
        if item is None:
            return
        if isinstance(item, Token):
            out.append(item.text)
        elif isinstance(item, Node):
            out.append(f"<{item.type}>")
            for sub in item.syntax_items():
                visit(sub)
        elif isinstance(item, list):
            for sub in item:
                visit(sub)

    for definition in root:
        visit(definition)
    return out

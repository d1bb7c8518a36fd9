"""Production registry and writer plumbing."""

from dataclasses import replace

import pytest

from idlmend.grammar.ast import Interface
from idlmend.grammar.registry import ContainerExtension, Extensions, ProductionRegistry, extensions_of
from idlmend.grammar.writer import Writer, write
from idlmend.lex import Tokeniser


def greedy_miss(t):
    t.consume("interface")
    t.consume_kind("identifier")
    return None


def test_attempt_restores_cursor_after_a_miss():
    t = Tokeniser("interface Foo;")
    assert ProductionRegistry([greedy_miss]).attempt(t) is None
    assert t.position == 0


def test_first_match_wins_and_order_is_respected():
    calls = []

    def named(label, result):
        def production(t):
            calls.append(label)
            return result
        return production

    node = Interface()
    registry = ProductionRegistry([named("a", None), named("b", node), named("c", Interface())])
    assert registry.attempt(Tokeniser("")) is node
    assert calls == ["a", "b"]

    registry.register(named("first", None), first=True)
    calls.clear()
    registry.attempt(Tokeniser(""))
    assert calls == ["first", "a", "b"]
    assert len(registry) == 4


def test_extensions_default_to_empty():
    t = Tokeniser("")
    assert extensions_of(t).interface.members == []
    t.extensions = Extensions(namespace=ContainerExtension(type="custom namespace"))
    assert extensions_of(t).namespace.type == "custom namespace"


def test_writer_emits_replaced_tokens():
    t = Tokeniser("interface  Foo ;")
    base = t.consume("interface")
    name = t.consume_kind("identifier")
    node = Interface(base=base, name_token=name, termination=t.consume(";"))
    assert write(node) == "interface  Foo ;"
    node.name_token = replace(name, text="Bar")
    assert write(node) == "interface  Bar ;"


def test_writer_rejects_foreign_items():
    with pytest.raises(TypeError):
        Writer().item(42)

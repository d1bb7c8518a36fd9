"""Tokeniser: lossless lexing, cursor, errors."""

import pytest

from idlmend.lex import Tokeniser, WebIDLParseError, WrongVariantError, tokenise


def test_trivia_and_text_reproduce_input():
    src = "// lead\ninterface Foo {\n  attribute long _bar; /* c */\n};\n"
    toks = tokenise(src)
    assert "".join(t.trivia + t.raw_text for t in toks) == src
    assert toks[5].raw_text == "_bar"
    assert toks[5].value == "bar"
    assert toks[-1].kind == "eof"
    assert toks[-1].trivia == "\n"


def test_token_kinds():
    kinds = [(t.kind, t.text) for t in tokenise('legacycaller UTF8String interface 0x1F -1.5e3 "s" ... ? ~')]
    assert kinds == [
        ("identifier", "legacycaller"),
        ("identifier", "UTF8String"),
        ("inline", "interface"),
        ("integer", "0x1F"),
        ("decimal", "-1.5e3"),
        ("string", '"s"'),
        ("inline", "..."),
        ("inline", "?"),
        ("other", "~"),
        ("eof", ""),
    ]


def test_escaped_identifier_value():
    tok = tokenise("_interface")[0]
    assert tok.kind == "identifier"
    assert tok.text == "_interface"
    assert tok.value == "interface"


def test_lines_are_counted():
    toks = tokenise("a\n\nb /* x\ny */ c")
    assert [t.line for t in toks[:3]] == [1, 3, 4]


@pytest.mark.parametrize("name", ["_constructor", "toString", "_toString"])
def test_reserved_identifiers(name):
    with pytest.raises(WebIDLParseError, match="reserved identifier"):
        tokenise(f"interface {name};", "r.webidl")


def test_consume_is_noop_on_mismatch():
    t = Tokeniser("interface Foo;")
    assert t.consume("dictionary") is None
    assert t.consume_kind("identifier") is None
    assert t.position == 0
    assert t.consume("interface").text == "interface"
    assert t.consume_identifier("Bar") is None
    assert t.consume_identifier("Foo").text == "Foo"
    assert t.position == 2


def test_unconsume_gives_back_the_same_tokens():
    t = Tokeniser("interface Foo { };")
    start = t.position
    first = [t.consume("interface"), t.consume_kind("identifier"), t.consume("{")]
    t.unconsume(start)
    second = [t.consume("interface"), t.consume_kind("identifier"), t.consume("{")]
    assert all(a is b for a, b in zip(first, second))


def test_error_message_names_source_and_line():
    t = Tokeniser("\ninterface Foo", "foo.webidl")
    t.consume("interface")
    with pytest.raises(WebIDLParseError) as info:
        t.error("Something is missing")
    err = info.value
    assert isinstance(err, SyntaxError)
    assert not isinstance(err, WrongVariantError)
    assert err.line == 2
    assert err.source_name == "foo.webidl"
    assert err.bare_message == "Something is missing"
    assert str(err).startswith("Syntax error at line 2 in foo.webidl:")
    assert "^ Something is missing" in str(err)


def test_error_with_reason_is_wrong_variant():
    t = Tokeniser("interface Foo")
    with pytest.raises(WrongVariantError) as info:
        t.error("Bodyless interface", reason="bodyless")
    assert info.value.reason == "bodyless"

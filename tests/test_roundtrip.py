"""parse -> write over the sample files, in both dialects."""

import pytest

from idlmend import parse, write

from .helpers import SYNTAX_DIR, shape

ALL_FILES = sorted(SYNTAX_DIR.glob("*.webidl"))
BASELINE_FILES = [p for p in ALL_FILES if p.name != "gecko.webidl"]


def read(path):
    with open(path, encoding="utf-8", newline="") as f:
        return f.read()


@pytest.mark.parametrize("path", ALL_FILES, ids=lambda p: p.name)
def test_write_reproduces_source(path):
    src = read(path)
    assert write(parse(src, path.name)) == src


@pytest.mark.parametrize("path", BASELINE_FILES, ids=lambda p: p.name)
def test_write_reproduces_source_with_baseline_grammar(path):
    src = read(path)
    assert write(parse(src, path.name, dialect="webidl")) == src


@pytest.mark.parametrize("path", ALL_FILES, ids=lambda p: p.name)
def test_reparse_gives_the_same_tree(path):
    src = read(path)
    first = parse(src, path.name)
    second = parse(write(first), path.name)
    assert shape(second) == shape(first)


@pytest.mark.parametrize("path", ALL_FILES, ids=lambda p: p.name)
def test_repeated_parses_are_identical(path):
    src = read(path)
    assert parse(src, path.name) == parse(src, path.name)


def test_crlf_source():
    src = "interface A {\r\n  attribute long a;\r\n};\r\n"
    assert write(parse(src, "a.webidl")) == src


def test_window_tweak_is_reverted_on_write():
    src = ("interface Window {\n"
           "  SharedArrayBuffer unsupported();\n"
           "  attribute long x;\n"
           "};\n")
    window = parse(src, "Window.webidl")
    assert window.tweaks == (("SharedArrayBuffer", "// SharedArrayBuffer"),)
    assert len(window.definitions[0].members) == 1
    assert write(window) == src

    other = parse(src, "Other.webidl")
    assert other.tweaks == ()
    assert len(other.definitions[0].members) == 2
    assert write(other) == src


def test_write_serialises_its_argument():
    a = parse("interface A;", "a.webidl")
    b = parse("interface B;", "b.webidl")
    assert write(a) == "interface A;"
    assert write(b) == "interface B;"

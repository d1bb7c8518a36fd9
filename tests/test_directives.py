"""Preprocessor directive mask."""

import pytest

from idlmend import parse, write
from idlmend.directives import has_mask_collision, mask, unmask


def test_mask_comments_out_directive_lines():
    src = "#if 0\ninterface A {};\n  #not-at-line-start\n#endif\n"
    assert mask(src) == "//#if 0\ninterface A {};\n  #not-at-line-start\n//#endif\n"


def test_unmask_restores_directive_lines():
    assert unmask("//#if 0\n// plain comment\n//#endif") == "#if 0\n// plain comment\n#endif"


@pytest.mark.parametrize("src", [
    "",
    "#ifdef X\n",
    "#if 0\r\ninterface A {};\r\n#endif\r\n",
    "no directives\n\n",
    "#a\n#b\n#c",
])
def test_round_trip(src):
    assert not has_mask_collision(src)
    assert unmask(mask(src)) == src


def test_crlf_lines_are_kept():
    assert mask("#if X\r\nfoo\r\n") == "//#if X\r\nfoo\r\n"


def test_collision_is_detected():
    src = "//#not a directive\n"
    assert has_mask_collision(src)
    assert unmask(mask(src)) != src


def test_directives_survive_parse_and_write():
    src = "#if 0\ninterface A {\n#ifdef B\n  attribute long b;\n#endif\n};\n#endif\n"
    root = parse(src, "a.webidl")
    assert len(root.definitions[0].members) == 1
    assert write(root) == src

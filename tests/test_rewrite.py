"""Batch driver."""

import pytest

from idlmend import WebIDLParseError, rewrite, rewrite_file


@pytest.fixture
def webidl_dir(tmp_path):
    (tmp_path / "A.webidl").write_bytes(b"#ifdef X\r\ninterface A {\r\n  void f();\r\n};\r\n#endif\r\n")
    (tmp_path / "B.webidl").write_bytes(b"[Exposed=Window]\ninterface B {\n  undefined f();\n};\n")
    (tmp_path / "C.webidl").write_bytes(b"interface C;\n")
    (tmp_path / "notes.txt").write_bytes(b"void\n")
    return tmp_path


def test_rewrite_fixes_files_in_place(webidl_dir):
    b_before = (webidl_dir / "B.webidl").read_bytes()
    report = rewrite([webidl_dir])
    assert report.files_seen == 3
    assert report.rewritten == [webidl_dir / "A.webidl"]
    assert report.files_rewritten == 1
    assert report.fixes_applied == 1
    assert (webidl_dir / "A.webidl").read_bytes() == (
        b"#ifdef X\r\ninterface A {\r\n  undefined f();\r\n};\r\n#endif\r\n"
    )
    assert (webidl_dir / "B.webidl").read_bytes() == b_before
    assert (webidl_dir / "notes.txt").read_bytes() == b"void\n"


def test_rewrite_file_reports_fix_count(tmp_path):
    path = tmp_path / "D.webidl"
    path.write_text("[NoInterfaceObject]\ninterface D { void f(); void g(); };\n", encoding="utf-8")
    assert rewrite_file(path) == 3
    assert path.read_text(encoding="utf-8") == (
        "[LegacyNoInterfaceObject]\ninterface D { undefined f(); undefined g(); };\n"
    )


def test_webidl_dialect_only_replaces_void(tmp_path):
    path = tmp_path / "D.webidl"
    path.write_text("[NoInterfaceObject]\ninterface D { void f(); };\n", encoding="utf-8")
    report = rewrite([tmp_path], dialect="webidl")
    assert report.fixes_applied == 1
    assert path.read_text(encoding="utf-8") == "[NoInterfaceObject]\ninterface D { undefined f(); };\n"


def test_require_exposed_is_not_applied(tmp_path):
    path = tmp_path / "E.webidl"
    path.write_text("interface E {};\n", encoding="utf-8")
    assert rewrite_file(path) == 0
    assert path.read_text(encoding="utf-8") == "interface E {};\n"


def test_parse_error_leaves_file_untouched(tmp_path):
    good = tmp_path / "A.webidl"
    bad = tmp_path / "B.webidl"
    good.write_text("interface A { void f(); };\n", encoding="utf-8")
    bad.write_text("interface B { void f() };\n", encoding="utf-8")
    with pytest.raises(WebIDLParseError) as info:
        rewrite([tmp_path])
    assert info.value.source_name == "B.webidl"
    assert bad.read_text(encoding="utf-8") == "interface B { void f() };\n"
    assert good.read_text(encoding="utf-8") == "interface A { undefined f(); };\n"


def test_directories_are_processed_in_order(tmp_path):
    first, second = tmp_path / "one", tmp_path / "two"
    first.mkdir()
    second.mkdir()
    (first / "Z.webidl").write_text("interface Z { void f(); };", encoding="utf-8")
    (first / "Y.webidl").write_text("interface Y { void f(); };", encoding="utf-8")
    (second / "X.webidl").write_text("interface X { void f(); };", encoding="utf-8")
    report = rewrite([first, second])
    assert [p.name for p in report.rewritten] == ["Y.webidl", "Z.webidl", "X.webidl"]

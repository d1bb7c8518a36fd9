"""Validation rules and autofixes."""

import pytest

from idlmend import apply_autofixes, get_dialect, parse, validate, write


def diagnostics_for(src, rule, dialect="gecko"):
    root = parse(src, "a.webidl", dialect=dialect)
    return root, [d for d in validate(root) if d.rule_name == rule]


def fix_all(root, diagnostics):
    for d in diagnostics:
        d.fix()
    return write(root)


def test_replace_void_changes_only_that_token():
    src = ("[Exposed=Window]\n"
           "interface A {\n"
           "  void foo();\n"
           "  long bar(long x);\n"
           "  Promise<void> baz();\n"
           "};\n")
    root, found = diagnostics_for(src, "replace-void")
    assert len(found) == 2
    assert all(d.fixable for d in found)
    assert found[0].token.text == "void" and found[0].line == 3
    out = fix_all(root, found)
    assert out == src.replace("void", "undefined")
    before, after = src.splitlines(), out.splitlines()
    changed = [i for i, (a, b) in enumerate(zip(before, after)) if a != b]
    assert changed == [2, 4]


def test_replace_void_keeps_trivia():
    root, found = diagnostics_for("interface A {\n  setter  /* x */ void (long i, any v);\n};", "replace-void")
    assert fix_all(root, found) == "interface A {\n  setter  /* x */ undefined (long i, any v);\n};"


def test_require_exposed_adds_extended_attribute():
    root, found = diagnostics_for("// head\ninterface A {};\n", "require-exposed")
    (d,) = found
    assert d.fixable
    assert fix_all(root, found) == "// head\n[Exposed=Window]\ninterface A {};\n"


def test_require_exposed_appends_to_existing_list():
    root, found = diagnostics_for('[Pref="x"]\ninterface A {};', "require-exposed")
    assert fix_all(root, found) == '[Pref="x", Exposed=Window]\ninterface A {};'


@pytest.mark.parametrize("src", [
    "[Exposed=Window] interface A {};",
    "[LegacyNoInterfaceObject] interface A {};",
    "partial interface A {};",
    "interface mixin M {};",
    "dictionary D {};",
])
def test_require_exposed_not_reported(src):
    assert diagnostics_for(src, "require-exposed")[1] == []


def test_require_exposed_applies_to_namespaces():
    root, found = diagnostics_for("namespace N {};", "require-exposed")
    assert fix_all(root, found) == "[Exposed=Window]\nnamespace N {};"


def test_renamed_legacy():
    src = "[NoInterfaceObject, Exposed=Window]\ninterface A {\n  [Unforgeable] readonly attribute long a;\n};"
    root, found = diagnostics_for(src, "renamed-legacy")
    assert [d.node.name for d in found] == ["NoInterfaceObject", "Unforgeable"]
    assert fix_all(root, found) == ("[LegacyNoInterfaceObject, Exposed=Window]\n"
                                    "interface A {\n  [LegacyUnforgeable] readonly attribute long a;\n};")


def test_dict_arg_default():
    src = ("dictionary Opts { long a; };\n"
           "interface A {\n"
           "  undefined f(optional Opts o);\n"
           "  undefined g(optional Opts o = {});\n"
           "  undefined h(optional Opts? o);\n"
           "  undefined i(Opts o);\n"
           "};\n")
    root, found = diagnostics_for(src, "dict-arg-default")
    (d,) = found
    assert d.node.name == "o"
    out = fix_all(root, found)
    assert "undefined f(optional Opts o = {});" in out
    assert out == src.replace("f(optional Opts o)", "f(optional Opts o = {})")


def test_dict_arg_default_skips_dictionaries_with_required_members():
    src = "dictionary Opts { required long a; };\ninterface A { undefined f(optional Opts o); };"
    assert diagnostics_for(src, "dict-arg-default")[1] == []


def test_no_duplicate_is_informational():
    root, found = diagnostics_for("interface A {};\ninterface A;\ninterface A {};\npartial interface A {};",
                                  "no-duplicate")
    (d,) = found
    assert not d.fixable
    assert d.line == 3
    with pytest.raises(ValueError):
        d.fix()


def test_attr_invalid_type():
    src = ("dictionary D {};\n"
           "interface A {\n"
           "  attribute sequence<long> s;\n"
           "  attribute record<DOMString, long> r;\n"
           "  attribute D d;\n"
           "  attribute FrozenArray<long> ok;\n"
           "};")
    _, found = diagnostics_for(src, "attr-invalid-type")
    assert [d.node.name for d in found] == ["s", "r", "d"]
    assert not any(d.fixable for d in found)


def test_validate_does_not_modify_the_tree():
    src = "interface A { void f(optional D d); };\ndictionary D {};\n"
    root = parse(src, "a.webidl")
    assert validate(root)
    assert write(root) == src


def test_apply_autofixes_honours_the_dialect():
    src = "[NoInterfaceObject]\ninterface A { void f(); };"
    gecko_root = parse(src, "a.webidl", dialect="gecko")
    assert apply_autofixes(validate(gecko_root), get_dialect("gecko").admits_fix) == 2
    assert write(gecko_root) == "[LegacyNoInterfaceObject]\ninterface A { undefined f(); };"

    servo_root = parse(src, "a.webidl", dialect="webidl")
    assert apply_autofixes(validate(servo_root), get_dialect("webidl").admits_fix) == 1
    assert write(servo_root) == "[NoInterfaceObject]\ninterface A { undefined f(); };"


def test_validate_selected_rules():
    root = parse("interface A { void f(); };", "a.webidl")
    assert {d.rule_name for d in validate(root, ["replace-void"])} == {"replace-void"}

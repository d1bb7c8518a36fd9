# idlmend/validate.py
"""Validation rules over a parsed file, and their autofixes.

Every rule is a generator `rule(root, context) -> Diagnostic*`. A diagnostic
whose `autofix` is set is fixable; calling it mutates the tree in place by
swapping a token (`dataclasses.replace`) or splicing in a new child node.
Nothing else in the tree is touched, so every other span writes back
unchanged.
"""

from __future__ import annotations
from dataclasses import dataclass, field, replace
from typing import Callable, Dict, Iterable, Iterator, List, Optional
import logging

from .lex import Token
from .grammar.ast import (
    Argument, Attribute, Container, Default, Dictionary, ExtendedAttribute, ExtendedAttributes,
    Interface, Namespace, Node, Root, Type,
)

logger = logging.getLogger(__name__)

LEGACY_RENAMES = {
    "NoInterfaceObject": "LegacyNoInterfaceObject",
    "OverrideBuiltins": "LegacyOverrideBuiltIns",
    "Unforgeable": "LegacyUnforgeable",
    "LenientThis": "LegacyLenientThis",
    "LenientSetter": "LegacyLenientSetter",
    "TreatNonObjectAsNull": "LegacyTreatNonObjectAsNull",
    "NamedConstructor": "LegacyFactoryFunction",
    "Unscopeable": "LegacyUnscopable",
}

INVALID_ATTRIBUTE_GENERICS = ("sequence", "record")


@dataclass
class Diagnostic:
    rule_name: str
    message: str
    node: Node
    token: Optional[Token] = None
    level: str = "error"
    autofix: Optional[Callable[[], None]] = field(default=None, repr=False)

    @property
    def fixable(self) -> bool:
        return self.autofix is not None

    @property
    def line(self) -> int:
        tok = self.token or self.node.first_token()
        return tok.line if tok is not None else 0

    def fix(self) -> None:
        if self.autofix is None:
            raise ValueError(f"{self.rule_name} diagnostic has no autofix")
        self.autofix()

    def __str__(self) -> str:
        return f"line {self.line}: {self.message} [{self.rule_name}]"


@dataclass
class Context:
    """File-level facts shared by the rules."""
    root: Root
    dictionaries: Dict[str, List[Dictionary]] = field(default_factory=dict)

    @classmethod
    def of(cls, root: Root) -> "Context":
        ctx = cls(root)
        for definition in root.definitions:
            if isinstance(definition, Dictionary):
                ctx.dictionaries.setdefault(definition.name, []).append(definition)
        return ctx


def _inline(text: str, trivia: str = "") -> Token:
    return Token("inline", text, trivia)


def _identifier(text: str, trivia: str = "") -> Token:
    return Token("identifier", text, trivia)


# ---------- replace-void ----------
def replace_void(root: Root, ctx: Context) -> Iterator[Diagnostic]:
    for node in root.walk():
        if isinstance(node, Type) and node.base is not None and node.base.text == "void":
            def autofix(node=node):
                node.base = replace(node.base, text="undefined")
            yield Diagnostic("replace-void", "`void` is now replaced by `undefined`. Refer to the "
                             "relevant GitHub issue for more information.", node, node.base,
                             autofix=autofix)


# ---------- require-exposed ----------
def _exposed_autofix(node: Container) -> Callable[[], None]:
    def autofix():
        exposed = ExtendedAttribute(name_token=_identifier("Exposed"), assign=_inline("="),
                                    secondary_name=_identifier("Window"))
        if node.ext_attrs.open is not None:
            node.ext_attrs.items[-1].separator = _inline(",")
            exposed.name_token = _identifier("Exposed", " ")
            node.ext_attrs.items.append(exposed)
            return
        # `[Exposed=Window]` takes over the leading trivia, the keyword moves to a new line
        node.ext_attrs = ExtendedAttributes(open=_inline("[", node.base.trivia), items=[exposed],
                                            close=_inline("]"))
        node.base = replace(node.base, trivia="\n")
    return autofix


def require_exposed(root: Root, ctx: Context) -> Iterator[Diagnostic]:
    for definition in root.definitions:
        if not isinstance(definition, (Interface, Namespace)) or definition.partial is not None:
            continue
        ext_attrs = definition.ext_attrs
        if ext_attrs.get("Exposed") or ext_attrs.get("LegacyNoInterfaceObject"):
            continue
        yield Diagnostic("require-exposed", f"{definition.type} {definition.name} must have [Exposed] "
                         "extended attribute. To fix, add, for example, [Exposed=Window].",
                         definition, definition.name_token, autofix=_exposed_autofix(definition))


# ---------- renamed-legacy ----------
def renamed_legacy(root: Root, ctx: Context) -> Iterator[Diagnostic]:
    for node in root.walk():
        if not isinstance(node, ExtendedAttribute) or node.name not in LEGACY_RENAMES:
            continue
        new_name = LEGACY_RENAMES[node.name]

        def autofix(node=node, new_name=new_name):
            node.name_token = replace(node.name_token, text=new_name)
        yield Diagnostic("renamed-legacy", f"`[{node.name}]` extended attribute is a legacy feature "
                         f"that is now renamed to `[{new_name}]`.", node, node.name_token,
                         autofix=autofix)


# ---------- dict-arg-default ----------
def _argument_lists(root: Root) -> Iterator[List[Argument]]:
    for node in root.walk():
        arguments = getattr(node, "arguments", None)
        if isinstance(arguments, list) and arguments:
            yield arguments


def _has_required_field(dictionaries: Iterable[Dictionary]) -> bool:
    return any(getattr(member, "required", None) for d in dictionaries for member in d.members)


def dict_arg_default(root: Root, ctx: Context) -> Iterator[Diagnostic]:
    for arguments in _argument_lists(root):
        for arg in arguments:
            typ = arg.idl_type
            if not arg.optional or arg.default is not None or not isinstance(typ, Type):
                continue
            if typ.is_nullable or typ.idl_type not in ctx.dictionaries:
                continue
            if _has_required_field(ctx.dictionaries[typ.idl_type]):
                continue

            def autofix(arg=arg):
                arg.default = Default(assign=_inline("=", " "), expression=[_inline("{", " "), _inline("}")])
            yield Diagnostic("dict-arg-default", f"Optional dictionary arguments must have a default "
                             f"value of `{{}}`.", arg, arg.name_token, autofix=autofix)


# ---------- no-duplicate ----------
def no_duplicate(root: Root, ctx: Context) -> Iterator[Diagnostic]:
    seen: Dict[str, Node] = {}
    for definition in root.definitions:
        if getattr(definition, "partial", None) is not None or definition.type == "bodyless interface":
            continue
        name = getattr(definition, "name", None)
        if not name:
            continue
        if name in seen:
            yield Diagnostic("no-duplicate", f"The name \"{name}\" of type \"{seen[name].type}\" was "
                             "already seen", definition, getattr(definition, "name_token", None))
        else:
            seen[name] = definition


# ---------- attr-invalid-type ----------
def attr_invalid_type(root: Root, ctx: Context) -> Iterator[Diagnostic]:
    for node in root.walk():
        if not isinstance(node, Attribute) or not isinstance(node.idl_type, Type):
            continue
        typ = node.idl_type
        if typ.generic in INVALID_ATTRIBUTE_GENERICS:
            reason = f"`{typ.generic}`"
        elif typ.idl_type in ctx.dictionaries:
            reason = "a dictionary"
        else:
            continue
        yield Diagnostic("attr-invalid-type", f"Attributes cannot accept {reason} types.", node,
                         node.name_token)


RULES = {
    "replace-void": replace_void,
    "require-exposed": require_exposed,
    "renamed-legacy": renamed_legacy,
    "dict-arg-default": dict_arg_default,
    "no-duplicate": no_duplicate,
    "attr-invalid-type": attr_invalid_type,
}


def validate(root: Root, rules: Optional[Iterable[str]] = None) -> List[Diagnostic]:
    """Run `rules` (default: all) over `root`. The tree is not modified."""
    ctx = Context.of(root)
    diagnostics: List[Diagnostic] = []
    for name in (RULES if rules is None else rules):
        diagnostics.extend(RULES[name](root, ctx))
    logger.debug("%s: %d diagnostics", root.source_name, len(diagnostics))
    return diagnostics


def apply_autofixes(diagnostics: Iterable[Diagnostic], admits: Callable[[str], bool] = lambda name: True) -> int:
    """Apply every fixable diagnostic whose rule `admits` accepts; returns how many were applied."""
    applied = 0
    for diagnostic in diagnostics:
        if diagnostic.fixable and admits(diagnostic.rule_name):
            diagnostic.fix()
            applied += 1
    return applied

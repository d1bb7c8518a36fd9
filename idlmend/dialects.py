# idlmend/dialects.py
"""Dialects and the parse / write round trip.

  parse:  text -> mask -> per-file tweaks -> tokenise -> productions -> Root
  write:  Root -> writer -> revert tweaks -> unmask -> text

A dialect is plain data: the extra top-level productions, the container and
type extensions, per-file text tweaks and the validation rules whose
autofixes it applies.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from functools import partial
from typing import Dict, FrozenSet, List, Optional, Tuple, Union
import logging
import os

from .directives import mask, unmask
from .extensions import (
    legacy_caller, parse_bodyless_interface, parse_callback_constructor,
    parse_legacy_caller_interface, parse_utf8string_field, parse_utf8string_record,
    parse_utf8string_typedef,
)
from .grammar.ast import Root
from .grammar.parser import parse_attribute, parse_definitions
from .grammar.registry import ContainerExtension, Extensions, Production
from .grammar.writer import Writer
from .lex import Tokeniser

logger = logging.getLogger(__name__)

Tweak = Tuple[str, str]  # (original, replacement), first occurrence only


@dataclass(frozen=True)
class Dialect:
    name: str
    productions: Tuple[Production, ...] = ()
    extensions: Extensions = field(default_factory=Extensions)
    tweaks: Dict[str, Tuple[Tweak, ...]] = field(default_factory=dict)
    autofix_rules: FrozenSet[str] = frozenset()

    def tweaks_for(self, source_name: Optional[str]) -> Tuple[Tweak, ...]:
        if not source_name:
            return ()
        return self.tweaks.get(os.path.basename(source_name), ())

    def admits_fix(self, rule_name: str) -> bool:
        return rule_name in self.autofix_rules


GECKO = Dialect(
    name="gecko",
    productions=(
        parse_bodyless_interface,
        parse_callback_constructor,
        parse_legacy_caller_interface,
        parse_utf8string_typedef,
    ),
    extensions=Extensions(
        interface=ContainerExtension(members=[legacy_caller]),
        callback_interface=ContainerExtension(members=[parse_attribute], type="callback attr interface"),
        namespace=ContainerExtension(members=[partial(parse_attribute, no_inherit=True)], type="custom namespace"),
        dictionary=ContainerExtension(members=[parse_utf8string_field]),
        types=[parse_utf8string_record],
    ),
    tweaks={"Window.webidl": (("SharedArrayBuffer", "// SharedArrayBuffer"),)},
    autofix_rules=frozenset(("replace-void", "renamed-legacy", "dict-arg-default")),
)

WEBIDL = Dialect(
    name="webidl",
    autofix_rules=frozenset(("replace-void",)),
)

DIALECTS: Dict[str, Dialect] = {d.name: d for d in (GECKO, WEBIDL)}


def get_dialect(dialect: Union[str, Dialect]) -> Dialect:
    if isinstance(dialect, Dialect):
        return dialect
    try:
        return DIALECTS[dialect]
    except KeyError:
        raise ValueError(f"Unknown dialect {dialect!r} (expected one of: {', '.join(sorted(DIALECTS))})") from None


def apply_tweaks(text: str, tweaks) -> Tuple[str, List[Tweak]]:
    applied = []
    for original, replacement in tweaks:
        if original in text:
            text = text.replace(original, replacement, 1)
            applied.append((original, replacement))
    return text, applied


def revert_tweaks(text: str, tweaks) -> str:
    for original, replacement in reversed(tuple(tweaks)):
        text = text.replace(replacement, original, 1)
    return text


def parse(text: str, source_name: Optional[str] = None, dialect: Union[str, Dialect] = "gecko") -> Root:
    """Parse one file. Raises `WebIDLParseError` on the first committed syntax error."""
    d = get_dialect(dialect)
    text, applied = apply_tweaks(mask(text), d.tweaks_for(source_name))
    if applied:
        logger.debug("%s: applied tweaks %r", source_name, applied)
    tokeniser = Tokeniser(text, source_name)
    root = parse_definitions(tokeniser, d.productions, d.extensions)
    root.tweaks = tuple(applied)
    logger.debug("%s: parsed %d definitions with dialect %s", source_name, len(root.definitions), d.name)
    return root


def write(root: Root) -> str:
    """Serialise `root`, then undo its tweaks and the directive mask."""
    text = Writer().write(root)
    return unmask(revert_tweaks(text, getattr(root, "tweaks", ())))

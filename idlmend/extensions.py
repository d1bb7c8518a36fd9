# idlmend/extensions.py
"""Gecko grammar extensions on top of the baseline Web IDL grammar.

Top-level productions:
  - `parse_bodyless_interface`      interface Name ;
  - `parse_callback_constructor`    callback constructor Name = T ( args ) ;
  - `parse_legacy_caller_interface` interface whose members admit `legacycaller`
  - `parse_utf8string_typedef`      typedef record<UTF8String, T> Name ;
Member / type productions:
  - `legacy_caller`                 legacycaller T ( args ) ;
  - `parse_utf8string_field`        record<UTF8String, T> name ;  (dictionaries)
  - `parse_utf8string_record`       record<UTF8String, T>?        (any type position)
"""

from __future__ import annotations
from dataclasses import dataclass, field
from typing import ClassVar, List, Optional
import logging

from .lex import Token, Tokeniser, WrongVariantError
from .grammar.ast import (
    Argument, ExtendedAttributes, Field, Interface, Node, Operation, Type, Typedef, unescape,
)
from .grammar.parser import (
    argument_list, parse_attribute, parse_constant, parse_constructor, parse_container,
    parse_default, parse_iterable_like, parse_operation, return_type, static_member,
    stringifier, type_with_extended_attributes, _type_suffix,
)

logger = logging.getLogger(__name__)

LEGACY_CALLER = "legacycaller"
UTF8_STRING = "UTF8String"

# WrongVariantError reasons that mean "this interface is some other shape"
DEFERRING_REASONS = frozenset(("bodyless", "mixin"))


# ====== Nodes

@dataclass
class BodylessInterface(Node):
    type: ClassVar[str] = "bodyless interface"
    ext_attrs: ExtendedAttributes = field(default_factory=ExtendedAttributes)
    base: Optional[Token] = None
    name_token: Optional[Token] = None
    termination: Optional[Token] = None

    @property
    def name(self) -> str:
        return unescape(self.name_token.text)


@dataclass
class CallbackConstructor(Node):
    type: ClassVar[str] = "callback constructor"
    ext_attrs: ExtendedAttributes = field(default_factory=ExtendedAttributes)
    base: Optional[Token] = None
    constructor: Optional[Token] = None
    name_token: Optional[Token] = None
    assign: Optional[Token] = None
    idl_type: Optional[Node] = None
    open: Optional[Token] = None
    arguments: List[Argument] = field(default_factory=list)
    close: Optional[Token] = None
    termination: Optional[Token] = None

    @property
    def name(self) -> str:
        return unescape(self.name_token.text)


@dataclass
class LegacyCallerOperation(Operation):
    type: ClassVar[str] = "legacycaller operation"


@dataclass
class Utf8StringRecord(Type):
    """`record<UTF8String, V>`: subtypes are the key type and the value type."""
    type: ClassVar[str] = "utf8string record"

    @property
    def key(self) -> Type:
        return self.subtypes[0]

    @property
    def value(self) -> Node:
        return self.subtypes[1]


@dataclass
class Utf8StringField(Field):
    type: ClassVar[str] = "utf8string field"


@dataclass
class Utf8StringTypedef(Typedef):
    type: ClassVar[str] = "utf8string typedef"


# ====== Productions

def parse_bodyless_interface(t: Tokeniser) -> Optional[BodylessInterface]:
    start = t.position
    base = t.consume("interface")
    if not base:
        return None
    name = t.consume_kind("identifier")
    termination = t.consume(";") if name else None
    if not termination:
        t.unconsume(start)
        return None
    ret = BodylessInterface(base=base, name_token=name, termination=termination)
    t.current = ret
    return ret


def parse_callback_constructor(t: Tokeniser) -> Optional[CallbackConstructor]:
    start = t.position
    base = t.consume("callback")
    if not base:
        return None
    constructor = t.consume("constructor")
    if not constructor:
        t.unconsume(start)
        return None
    ret = CallbackConstructor(base=base, constructor=constructor)
    ret.name_token = t.consume_kind("identifier") or t.error("Callback lacks a name")
    t.current = ret
    ret.assign = t.consume("=") or t.error("Callback constructor lacks an assignment")
    ret.idl_type = return_type(t) or t.error("Callback constructor lacks a return type")
    ret.open = t.consume("(") or t.error("Callback constructor lacks parentheses for arguments")
    ret.arguments = argument_list(t)
    ret.close = t.consume(")") or t.error("Unterminated callback constructor")
    ret.termination = t.consume(";") or t.error("Unterminated callback constructor, expected `;`")
    return ret


def legacy_caller(t: Tokeniser) -> Optional[LegacyCallerOperation]:
    special = t.consume_identifier(LEGACY_CALLER)
    if not special:
        return None
    return parse_operation(t, special=special, cls=LegacyCallerOperation)


LEGACY_CALLER_INTERFACE_MEMBERS = [
    legacy_caller,
    parse_constant,
    parse_constructor,
    static_member,
    stringifier,
    parse_iterable_like,
    parse_attribute,
    parse_operation,
]


def parse_legacy_caller_interface(t: Tokeniser) -> Optional[Interface]:
    start = t.position
    base = t.consume("interface")
    if not base:
        return None
    node = Interface(base=base)
    node.type = "legacycaller interface"
    try:
        return parse_container(t, node, allowed_members=LEGACY_CALLER_INTERFACE_MEMBERS, inheritable=True)
    except WrongVariantError as err:
        if err.reason not in DEFERRING_REASONS:
            raise
        logger.debug("legacycaller interface deferred at token %d (%s)", start, err.reason)
        t.unconsume(start)
        return None


def parse_utf8string_record(t: Tokeniser) -> Optional[Utf8StringRecord]:
    start = t.position
    base = t.consume("record")
    if not base:
        return None
    open_ = t.consume("<")
    key = t.consume_identifier(UTF8_STRING) if open_ else None
    if not key:
        t.unconsume(start)
        return None
    key_type = Type(base=key)
    key_type.separator = t.consume(",") or t.error(f"Missing comma after record key type {UTF8_STRING}")
    value = type_with_extended_attributes(t) or t.error("Error parsing generic type record")
    ret = Utf8StringRecord(base=base, open=open_, subtypes=[key_type, value])
    ret.close = t.consume(">") or t.error(f"Unclosed record<{UTF8_STRING}>")
    _type_suffix(t, ret)
    return ret


def parse_utf8string_field(t: Tokeniser) -> Optional[Utf8StringField]:
    start = t.position
    ret = Utf8StringField()
    ret.required = t.consume("required")
    ret.idl_type = parse_utf8string_record(t)
    if not ret.idl_type:
        t.unconsume(start)
        return None
    ret.idl_type.kind = "dictionary-type"
    ret.name_token = t.consume_kind("identifier") or t.error("Dictionary member lacks a name")
    ret.default = parse_default(t)
    if ret.required and ret.default:
        t.error("Required member must not have a default")
    ret.termination = t.consume(";") or t.error("Unterminated dictionary member, expected `;`")
    return ret


def parse_utf8string_typedef(t: Tokeniser) -> Optional[Utf8StringTypedef]:
    start = t.position
    base = t.consume("typedef")
    if not base:
        return None
    ret = Utf8StringTypedef(base=base)
    ret.idl_type = parse_utf8string_record(t)
    if not ret.idl_type:
        t.unconsume(start)
        return None
    ret.idl_type.kind = "typedef-type"
    ret.name_token = t.consume_kind("identifier") or t.error("Typedef lacks a name")
    t.current = ret
    ret.termination = t.consume(";") or t.error("Unterminated typedef, expected `;`")
    return ret

"""Web IDL baseline grammar (recursive descent over `lex.Tokeniser`)

- Definitions: callback, callback interface, interface, interface mixin,
  partial, dictionary, enum, typedef, includes, namespace
- Members: const, constructor, static, stringifier, iterable/maplike/setlike,
  attribute, operation, dictionary field
- Each production returns a node or None. None leaves the cursor where it
  was; a production that has seen its leading keyword raises through
  `tokeniser.error` instead.
"""

from __future__ import annotations
from functools import partial
from typing import Callable, List, Optional

from ..lex import ARGUMENT_NAME_KEYWORDS, STRING_TYPES, TYPE_NAME_KEYWORDS, Tokeniser
from .ast import *
from .registry import ContainerExtension, Extensions, ProductionRegistry, extensions_of

EXT_ATTR_VALUE_KINDS = ("identifier", "decimal", "integer", "string")


# ---------- shared helpers ----------
def parse_list(t: Tokeniser, parser: Callable, *, allow_dangler: bool = False,
               list_name: str = "list") -> list:
    """Comma separated list; every item keeps the `,` that follows it."""
    first = parser(t)
    if first is None:
        return []
    first.separator = t.consume(",")
    items = [first]
    while items[-1].separator:
        item = parser(t)
        if item is None:
            if not allow_dangler:
                t.error(f"Trailing comma in {list_name}")
            break
        item.separator = t.consume(",")
        items.append(item)
    return items


def const_value(t: Tokeniser) -> Optional[Token]:
    return t.consume("true", "false", "Infinity", "-Infinity", "NaN") or t.consume_kind("decimal", "integer")


# ---------- extended attributes ----------
def _wrapped_token_parser(kind: str) -> Callable:
    def parse(t: Tokeniser) -> Optional[WrappedToken]:
        value = t.consume_kind(kind)
        if value:
            return WrappedToken(value=value)
        return None
    return parse


def _ext_attr_value_list(t: Tokeniser) -> List[Node]:
    for kind in EXT_ATTR_VALUE_KINDS:
        items = parse_list(t, _wrapped_token_parser(kind), list_name=f"{kind} list")
        if items:
            return items
    t.error("Expected identifiers, strings, decimals, or integers but none found")


def parse_extended_attribute(t: Tokeniser) -> Optional[ExtendedAttribute]:
    name = t.consume_kind("identifier")
    if not name:
        return None
    ret = ExtendedAttribute(name_token=name)
    ret.assign = t.consume("=")
    if ret.assign:
        ret.asterisk = t.consume("*")
        if ret.asterisk:
            return ret
        ret.secondary_name = t.consume_kind(*EXT_ATTR_VALUE_KINDS)
    ret.open = t.consume("(")
    if ret.open:
        ret.entries = _ext_attr_value_list(t) if ret.rhs_is_list else argument_list(t)
        ret.close = t.consume(")") or t.error("Unexpected token in extended attribute argument list")
    elif ret.assign and not ret.secondary_name:
        t.error("No right hand side to extended attribute assignment")
    return ret


def parse_extended_attributes(t: Tokeniser) -> ExtendedAttributes:
    ret = ExtendedAttributes()
    ret.open = t.consume("[")
    if not ret.open:
        return ret
    ret.items = parse_list(t, parse_extended_attribute, list_name="extended attribute")
    ret.close = t.consume("]") or t.error("Expected a closing token for the extended attribute list")
    if not ret.items:
        t.error("An extended attribute list must not be empty")
    if t.probe("["):
        t.error("Illegal double extended attribute lists, consider merging them")
    return ret


# ---------- defaults & arguments ----------
def parse_default(t: Tokeniser) -> Optional[Default]:
    assign = t.consume("=")
    if not assign:
        return None
    value = const_value(t) or t.consume_kind("string") or t.consume("null", "[", "{") \
        or t.error("No value for default")
    expression = [value]
    if value.text == "[":
        expression.append(t.consume("]") or t.error("Default sequence value must be empty"))
    elif value.text == "{":
        expression.append(t.consume("}") or t.error("Default dictionary value must be empty"))
    return Default(assign=assign, expression=expression)


def parse_argument(t: Tokeniser) -> Optional[Argument]:
    start = t.position
    ret = Argument(ext_attrs=parse_extended_attributes(t))
    ret.optional = t.consume("optional")
    ret.idl_type = type_with_extended_attributes(t, "argument-type")
    if not ret.idl_type:
        t.unconsume(start)
        return None
    if not ret.optional:
        ret.variadic = t.consume("...")
    ret.name_token = t.consume_kind("identifier") or t.consume(*ARGUMENT_NAME_KEYWORDS)
    if not ret.name_token:
        t.unconsume(start)
        return None
    ret.default = parse_default(t) if ret.optional else None
    return ret


def argument_list(t: Tokeniser) -> List[Argument]:
    return parse_list(t, parse_argument, list_name="arguments list")


# ---------- types ----------
def _type_suffix(t: Tokeniser, ret: Type) -> None:
    ret.nullable = t.consume("?")
    if t.probe("?"):
        t.error("Can't nullable more than once")


def generic_type(t: Tokeniser, kind: Optional[str] = None) -> Optional[Type]:
    base = t.consume("FrozenArray", "ObservableArray", "Promise", "sequence", "record")
    if not base:
        return None
    ret = Type(base=base, kind=kind)
    ret.open = t.consume("<") or t.error(f"No opening bracket after {base.text}")
    if base.text == "Promise":
        if t.probe("["):
            t.error("Promise type cannot have extended attribute")
        subtype = return_type(t, kind) or t.error("Missing Promise subtype")
        ret.subtypes.append(subtype)
    elif base.text == "record":
        if t.probe("["):
            t.error("Record key cannot have extended attribute")
        key = t.consume(*STRING_TYPES) or t.error(f"Record key must be one of: {', '.join(STRING_TYPES)}")
        key_type = Type(base=key, kind=kind)
        key_type.separator = t.consume(",") or t.error("Missing comma after record key type")
        value_type = type_with_extended_attributes(t, kind) or t.error("Error parsing generic type record")
        ret.subtypes.extend([key_type, value_type])
    else:
        subtype = type_with_extended_attributes(t, kind) or t.error(f"Missing {base.text} subtype")
        ret.subtypes.append(subtype)
    ret.close = t.consume(">") or t.error(f"Missing closing bracket after {base.text}")
    return ret


def integer_type(t: Tokeniser) -> Optional[Type]:
    prefix = t.consume("unsigned")
    base = t.consume("short", "long")
    if base:
        postfix = t.consume("long") if base.text == "long" else None
        return Type(prefix=prefix, base=base, postfix=postfix)
    if prefix:
        t.error("Failed to parse integer type")
    return None


def decimal_type(t: Tokeniser) -> Optional[Type]:
    prefix = t.consume("unrestricted")
    base = t.consume("float", "double")
    if base:
        return Type(prefix=prefix, base=base)
    if prefix:
        t.error("Failed to parse float type")
    return None


def primitive_type(t: Tokeniser) -> Optional[Type]:
    num = integer_type(t) or decimal_type(t)
    if num:
        return num
    base = t.consume("bigint", "boolean", "byte", "octet", "undefined")
    if base:
        return Type(base=base)
    return None


def single_type(t: Tokeniser, kind: Optional[str] = None) -> Optional[Type]:
    custom = ProductionRegistry(extensions_of(t).types).attempt(t)
    if custom is not None:
        custom.kind = kind
        return custom
    ret = generic_type(t, kind) or primitive_type(t)
    if ret is None:
        base = t.consume_kind("identifier") or t.consume(*STRING_TYPES, *TYPE_NAME_KEYWORDS)
        if not base:
            return None
        ret = Type(base=base)
        if t.probe("<"):
            t.error(f"Unsupported generic type {base.value}")
    if ret.generic == "Promise" and t.probe("?"):
        t.error("Promise type cannot be nullable")
    ret.kind = kind
    _type_suffix(t, ret)
    if ret.nullable and ret.idl_type == "any":
        t.error("Type `any` cannot be made nullable")
    return ret


def union_type(t: Tokeniser, kind: Optional[str] = None) -> Optional[Type]:
    open_ = t.consume("(")
    if not open_:
        return None
    ret = Type(open=open_, kind=kind, union=True)
    while True:
        typ = type_with_extended_attributes(t) or t.error("No type after open parenthesis or 'or' in union type")
        if typ.idl_type == "any":
            t.error("Type `any` cannot be included in a union type")
        if typ.generic == "Promise":
            t.error("Type `Promise` cannot be included in a union type")
        ret.subtypes.append(typ)
        typ.separator = t.consume("or")
        if not typ.separator:
            break
    if len(ret.subtypes) < 2:
        t.error("At least two types are expected in a union type but found less")
    ret.close = t.consume(")") or t.error("Unterminated union type")
    _type_suffix(t, ret)
    return ret


def parse_type(t: Tokeniser, kind: Optional[str] = None) -> Optional[Type]:
    return single_type(t, kind) or union_type(t, kind)


def type_with_extended_attributes(t: Tokeniser, kind: Optional[str] = None) -> Optional[Type]:
    start = t.position
    ext_attrs = parse_extended_attributes(t)
    ret = parse_type(t, kind)
    if ret is None:
        t.unconsume(start)
        return None
    ret.ext_attrs = ext_attrs
    return ret


def return_type(t: Tokeniser, kind: Optional[str] = None) -> Optional[Type]:
    typ = parse_type(t, kind or "return-type")
    if typ:
        return typ
    void = t.consume("void")
    if void:
        return Type(base=void, kind="return-type")
    return None


# ---------- members ----------
def parse_attribute(t: Tokeniser, *, special: Optional[Token] = None, no_inherit: bool = False,
                    readonly: bool = False) -> Optional[Attribute]:
    start = t.position
    ret = Attribute(special=special)
    if not special and not no_inherit:
        ret.special = t.consume("inherit")
    if ret.special and ret.special.text == "inherit" and t.probe("readonly"):
        t.error("Inherited attributes cannot be read-only")
    ret.readonly = t.consume("readonly")
    if readonly and not ret.readonly and t.probe("attribute"):
        t.error("Attributes must be readonly in this context")
    ret.base = t.consume("attribute")
    if not ret.base:
        t.unconsume(start)
        return None
    ret.idl_type = type_with_extended_attributes(t, "attribute-type") or t.error("Attribute lacks a type")
    ret.name_token = t.consume_kind("identifier") or t.consume("async", "required") \
        or t.error("Attribute lacks a name")
    ret.termination = t.consume(";") or t.error("Unterminated attribute, expected `;`")
    return ret


def parse_operation(t: Tokeniser, *, special: Optional[Token] = None, regular: bool = False,
                    cls=Operation) -> Optional[Operation]:
    ret = cls(special=special)
    if special and special.text == "stringifier":
        ret.termination = t.consume(";")
        if ret.termination:
            return ret
    if not special and not regular:
        ret.special = t.consume("getter", "setter", "deleter")
    ret.idl_type = return_type(t) or t.error("Missing return type")
    ret.name_token = t.consume_kind("identifier") or t.consume("includes")
    ret.open = t.consume("(") or t.error("Invalid operation")
    ret.arguments = argument_list(t)
    ret.close = t.consume(")") or t.error("Unterminated operation")
    ret.termination = t.consume(";") or t.error("Unterminated operation, expected `;`")
    return ret


def parse_constant(t: Tokeniser) -> Optional[Constant]:
    base = t.consume("const")
    if not base:
        return None
    ret = Constant(base=base)
    idl_type = primitive_type(t)
    if not idl_type:
        type_name = t.consume_kind("identifier") or t.error("Const lacks a type")
        idl_type = Type(base=type_name)
    if t.probe("?"):
        t.error("Unexpected nullable constant type")
    idl_type.kind = "const-type"
    ret.idl_type = idl_type
    ret.name_token = t.consume_kind("identifier") or t.error("Const lacks a name")
    ret.assign = t.consume("=") or t.error("Const lacks value assignment")
    ret.value = const_value(t) or t.error("Const lacks a value")
    ret.termination = t.consume(";") or t.error("Unterminated const, expected `;`")
    return ret


def parse_constructor(t: Tokeniser) -> Optional[Constructor]:
    base = t.consume("constructor")
    if not base:
        return None
    ret = Constructor(base=base)
    ret.open = t.consume("(") or t.error("No argument list in constructor")
    ret.arguments = argument_list(t)
    ret.close = t.consume(")") or t.error("Unterminated constructor")
    ret.termination = t.consume(";") or t.error("No semicolon after constructor")
    return ret


def static_member(t: Tokeniser) -> Optional[Node]:
    special = t.consume("static")
    if not special:
        return None
    return parse_attribute(t, special=special) or parse_operation(t, special=special) \
        or t.error("No body in static member")


def stringifier(t: Tokeniser) -> Optional[Node]:
    special = t.consume("stringifier")
    if not special:
        return None
    return parse_attribute(t, special=special) or parse_operation(t, special=special) \
        or t.error("Unterminated stringifier")


def parse_iterable_like(t: Tokeniser) -> Optional[IterableLike]:
    start = t.position
    ret = IterableLike()
    ret.readonly = t.consume("readonly")
    if not ret.readonly:
        ret.async_ = t.consume("async")
    if ret.readonly:
        ret.base = t.consume("maplike", "setlike")
    elif ret.async_:
        ret.base = t.consume("iterable")
    else:
        ret.base = t.consume("iterable", "maplike", "setlike")
    if not ret.base:
        t.unconsume(start)
        return None

    kind = ret.base.text
    second_type_required = kind == "maplike"
    second_type_allowed = second_type_required or kind == "iterable"
    arguments_allowed = bool(ret.async_) and kind == "iterable"

    ret.open = t.consume("<") or t.error(f"Missing less-than sign `<` in {kind} declaration")
    first = type_with_extended_attributes(t) or t.error(f"Missing a type argument in {kind} declaration")
    ret.idl_types = [first]
    if second_type_allowed:
        first.separator = t.consume(",")
        if first.separator:
            ret.idl_types.append(
                type_with_extended_attributes(t) or t.error(f"Missing second type argument in {kind} declaration")
            )
        elif second_type_required:
            t.error(f"Missing second type argument in {kind} declaration")
    ret.close = t.consume(">") or t.error(f"Missing greater-than sign `>` in {kind} declaration")
    if t.probe("("):
        if not arguments_allowed:
            t.error("Arguments are only allowed for `async iterable`")
        ret.args_open = t.consume("(")
        ret.arguments = argument_list(t)
        ret.args_close = t.consume(")") or t.error("Unterminated async iterable argument list")
    ret.termination = t.consume(";") or t.error(f"Missing semicolon after {kind} declaration")
    return ret


def parse_field(t: Tokeniser) -> Optional[Field]:
    ret = Field()
    ret.required = t.consume("required")
    ret.idl_type = type_with_extended_attributes(t, "dictionary-type") or t.error("Dictionary member lacks a type")
    ret.name_token = t.consume_kind("identifier") or t.error("Dictionary member lacks a name")
    ret.default = parse_default(t)
    if ret.required and ret.default:
        t.error("Required member must not have a default")
    ret.termination = t.consume(";") or t.error("Unterminated dictionary member, expected `;`")
    return ret


# ---------- containers ----------
def parse_container(t: Tokeniser, node: Container, *, allowed_members, inheritable: bool = False,
                    extension: Optional[ContainerExtension] = None) -> Container:
    """Name, optional inheritance, `{ members }` and `;`.

    `allowed_members` is tried in order for each member, after the members of
    `extension` (if any).
    """
    if extension is not None:
        allowed_members = [*extension.members, *allowed_members]
        if extension.type:
            node.type = extension.type
    registry = ProductionRegistry(allowed_members)

    node.name_token = t.consume_kind("identifier") or t.error(
        f"Missing name in {node.type}", reason="mixin" if t.probe("mixin") else None
    )
    t.current = node
    if inheritable:
        node.colon = t.consume(":")
        if node.colon:
            node.inheritance = t.consume_kind("identifier") or t.error("Inheritance lacks a type")
    node.open = t.consume("{") or t.error(f"Bodyless {node.type}", reason="bodyless")
    while True:
        node.close = t.consume("}")
        if node.close:
            node.termination = t.consume(";") or t.error(f"Missing semicolon after {node.type}")
            return node
        ext_attrs = parse_extended_attributes(t)
        member = registry.attempt(t)
        if member is None:
            t.error("Unknown member")
        member.ext_attrs = ext_attrs
        node.members.append(member)


INTERFACE_MEMBERS = [
    parse_constant,
    parse_constructor,
    static_member,
    stringifier,
    parse_iterable_like,
    parse_attribute,
    parse_operation,
]


def parse_interface(t: Tokeniser, base: Token, *, partial_: Optional[Token] = None) -> Interface:
    node = Interface(partial=partial_, base=base)
    return parse_container(t, node, allowed_members=INTERFACE_MEMBERS, inheritable=not partial_,
                           extension=extensions_of(t).interface)


def parse_mixin(t: Tokeniser, base: Token, mixin: Token, *, partial_: Optional[Token] = None) -> InterfaceMixin:
    node = InterfaceMixin(partial=partial_, base=base, mixin=mixin)
    return parse_container(t, node, allowed_members=[
        parse_constant,
        stringifier,
        partial(parse_attribute, no_inherit=True),
        partial(parse_operation, regular=True),
    ])


def parse_callback_interface(t: Tokeniser, callback: Token, base: Token) -> CallbackInterface:
    node = CallbackInterface(callback=callback, base=base)
    return parse_container(t, node, allowed_members=[
        parse_constant,
        partial(parse_operation, regular=True),
    ], extension=extensions_of(t).callback_interface)


def parse_namespace(t: Tokeniser, *, partial_: Optional[Token] = None) -> Optional[Namespace]:
    base = t.consume("namespace")
    if not base:
        return None
    node = Namespace(partial=partial_, base=base)
    return parse_container(t, node, allowed_members=[
        partial(parse_attribute, no_inherit=True, readonly=True),
        parse_constant,
        partial(parse_operation, regular=True),
    ], extension=extensions_of(t).namespace)


def parse_dictionary(t: Tokeniser, *, partial_: Optional[Token] = None) -> Optional[Dictionary]:
    base = t.consume("dictionary")
    if not base:
        return None
    node = Dictionary(partial=partial_, base=base)
    return parse_container(t, node, allowed_members=[parse_field], inheritable=not partial_,
                           extension=extensions_of(t).dictionary)


# ---------- other definitions ----------
def parse_callback_function(t: Tokeniser, base: Token) -> CallbackFunction:
    ret = CallbackFunction(base=base)
    ret.name_token = t.consume_kind("identifier") or t.error("Callback lacks a name")
    t.current = ret
    ret.assign = t.consume("=") or t.error("Callback lacks an assignment")
    ret.idl_type = return_type(t) or t.error("Callback lacks a return type")
    ret.open = t.consume("(") or t.error("Callback lacks parentheses for arguments")
    ret.arguments = argument_list(t)
    ret.close = t.consume(")") or t.error("Unterminated callback")
    ret.termination = t.consume(";") or t.error("Unterminated callback, expected `;`")
    return ret


def _enum_value(t: Tokeniser) -> Optional[EnumValue]:
    value = t.consume_kind("string")
    if value:
        return EnumValue(value=value)
    return None


def parse_enum(t: Tokeniser) -> Optional[Enum]:
    base = t.consume("enum")
    if not base:
        return None
    ret = Enum(base=base)
    ret.name_token = t.consume_kind("identifier") or t.error("No name for enum")
    t.current = ret
    ret.open = t.consume("{") or t.error("Bodyless enum")
    ret.values = parse_list(t, _enum_value, allow_dangler=True, list_name="enumeration")
    if t.probe_kind("string"):
        t.error("No comma between enum values")
    ret.close = t.consume("}") or t.error("Unexpected value in enum")
    if not ret.values:
        t.error("No value in enum")
    ret.termination = t.consume(";") or t.error("No semicolon after enum")
    return ret


def parse_typedef(t: Tokeniser) -> Optional[Typedef]:
    base = t.consume("typedef")
    if not base:
        return None
    ret = Typedef(base=base)
    ret.idl_type = type_with_extended_attributes(t, "typedef-type") or t.error("Typedef lacks a type")
    ret.name_token = t.consume_kind("identifier") or t.error("Typedef lacks a name")
    t.current = ret
    ret.termination = t.consume(";") or t.error("Unterminated typedef, expected `;`")
    return ret


def parse_includes(t: Tokeniser) -> Optional[Includes]:
    target = t.consume_kind("identifier")
    if not target:
        return None
    ret = Includes(target=target)
    ret.includes = t.consume("includes")
    if not ret.includes:
        t.unconsume(target.index)
        return None
    ret.mixin = t.consume_kind("identifier") or t.error("Incomplete includes statement")
    ret.termination = t.consume(";") or t.error("No terminating ; for includes statement")
    return ret


def callback(t: Tokeniser) -> Optional[Node]:
    base = t.consume("callback")
    if not base:
        return None
    interface = t.consume("interface")
    if interface:
        return parse_callback_interface(t, base, interface)
    return parse_callback_function(t, base)


def interface_(t: Tokeniser, *, partial_: Optional[Token] = None) -> Optional[Container]:
    base = t.consume("interface")
    if not base:
        return None
    mixin = t.consume("mixin")
    if mixin:
        return parse_mixin(t, base, mixin, partial_=partial_)
    return parse_interface(t, base, partial_=partial_)


def partial_definition(t: Tokeniser) -> Optional[Container]:
    partial_ = t.consume("partial")
    if not partial_:
        return None
    return parse_dictionary(t, partial_=partial_) \
        or interface_(t, partial_=partial_) \
        or parse_namespace(t, partial_=partial_) \
        or t.error("Partial doesn't apply to anything")


BASELINE_PRODUCTIONS = [
    callback,
    interface_,
    partial_definition,
    parse_dictionary,
    parse_enum,
    parse_typedef,
    parse_includes,
    parse_namespace,
]


# --- Definitions Parsing ---
def parse_definitions(t: Tokeniser, productions=(), extensions: Optional[Extensions] = None) -> Root:
    """Parse a whole file. `productions` are tried before the baseline definitions."""
    t.extensions = extensions
    registry = ProductionRegistry([*productions, *BASELINE_PRODUCTIONS])
    root = Root(source_name=t.source_name)
    while True:
        ext_attrs = parse_extended_attributes(t)
        definition = registry.attempt(t)
        if definition is None:
            if ext_attrs:
                t.error("Stray extended attributes")
            break
        definition.ext_attrs = ext_attrs
        root.append(definition)
    eof = t.consume_kind("eof")
    if eof is None:
        t.error("Unrecognised tokens")
    root.append(Eof(token=eof))
    return root

# idlmend/grammar/ast.py
"""Web IDL concrete syntax tree.

- One dataclass per construct kind; `type` is the class-level tag.
- Token roles are explicit `Optional[Token]` fields, children are `Node` or
  `List[Node]` fields, and both are declared **in source order**: the writer
  emits them in field order, so `write(parse(x)) == x`.
- Fields that carry no source text (e.g. a type's syntactic position) are
  declared with `semantic()` and skipped by the writer and by `walk()`.
- List items (arguments, extended attributes, enum values, union members…)
  own the `,`/`or` that follows them in their `separator` field.
"""

from __future__     import annotations
from dataclasses    import dataclass, field, fields
from typing         import ClassVar, Iterator, List, Optional, Union

from ..lex import Token


def semantic(default=None):
    """A field that is not part of the concrete syntax."""
    return field(default=default, metadata={"syntax": False})


def is_syntax_field(f) -> bool:
    return f.metadata.get("syntax", True)


def unescape(identifier: str) -> str:
    return identifier[1:] if identifier.startswith("_") else identifier


class Node:
    """Shared behaviour of all syntax nodes (the dataclasses below)."""

    type: ClassVar[str] = "node"

    def syntax_items(self) -> Iterator[Union[Token, "Node", list, None]]:
        for f in fields(self):
            if is_syntax_field(f):
                yield getattr(self, f.name)

    def children(self) -> Iterator["Node"]:
        for item in self.syntax_items():
            if isinstance(item, Node):
                yield item
            elif isinstance(item, list):
                for sub in item:
                    if isinstance(sub, Node):
                        yield sub

    def walk(self) -> Iterator["Node"]:
        """Pre-order traversal over this node and all its descendants."""
        yield self
        for child in self.children():
            yield from child.walk()

    def first_token(self) -> Optional[Token]:
        for item in self.syntax_items():
            if isinstance(item, Token):
                return item
            if isinstance(item, Node):
                tok = item.first_token()
                if tok is not None:
                    return tok
            elif isinstance(item, list):
                for sub in item:
                    tok = sub.first_token() if isinstance(sub, Node) else sub
                    if tok is not None:
                        return tok
        return None


# ====== Extended attributes

@dataclass
class WrappedToken(Node):
    """A bare token in a list (extended attribute rhs list entries)."""
    type: ClassVar[str] = "wrapped token"
    value: Optional[Token] = None
    separator: Optional[Token] = None


@dataclass
class ExtendedAttribute(Node):
    """`Name`, `Name=Ident`, `Name=(A,B)`, `Name(args)`, `Name=Ident(args)`, `Name=*`."""
    type: ClassVar[str] = "extended-attribute"
    name_token: Optional[Token] = None
    assign: Optional[Token] = None
    asterisk: Optional[Token] = None
    secondary_name: Optional[Token] = None
    open: Optional[Token] = None
    entries: List[Node] = field(default_factory=list)
    close: Optional[Token] = None
    separator: Optional[Token] = None

    @property
    def name(self) -> str:
        return self.name_token.value

    @property
    def rhs_is_list(self) -> bool:
        return bool(self.assign and not self.asterisk and not self.secondary_name)

    @property
    def rhs(self) -> Optional[str]:
        if self.asterisk:
            return "*"
        if self.secondary_name:
            return self.secondary_name.value
        if self.rhs_is_list:
            return ",".join(item.value.value for item in self.entries)
        return None


@dataclass
class ExtendedAttributes(Node):
    type: ClassVar[str] = "extended-attributes"
    open: Optional[Token] = None
    items: List[ExtendedAttribute] = field(default_factory=list)
    close: Optional[Token] = None

    def __len__(self) -> int:
        return len(self.items)

    def __iter__(self):
        return iter(self.items)

    def get(self, name: str) -> Optional[ExtendedAttribute]:
        for ea in self.items:
            if ea.name == name:
                return ea
        return None


# ====== Types, defaults, arguments

@dataclass
class Type(Node):
    """Single, generic (`sequence<T>`, `record<K, V>`…) or union type."""
    type: ClassVar[str] = "type"
    ext_attrs: ExtendedAttributes = field(default_factory=ExtendedAttributes)
    prefix: Optional[Token] = None      # unsigned | unrestricted
    base: Optional[Token] = None        # long, DOMString, Foo, sequence…
    postfix: Optional[Token] = None     # second `long` of `long long`
    open: Optional[Token] = None        # `<`, or `(` of a union
    subtypes: List[Node] = field(default_factory=list)
    close: Optional[Token] = None       # `>` or `)` of a union
    nullable: Optional[Token] = None
    separator: Optional[Token] = None   # `,` in generics, `or` in unions
    kind: Optional[str] = semantic()    # return-type, argument-type, …
    union: bool = semantic(False)

    @property
    def generic(self) -> str:
        return self.base.value if self.open is not None and not self.union else ""

    @property
    def idl_type(self) -> str:
        if self.union or self.open is not None:
            return ""
        parts = [t.value for t in (self.prefix, self.base, self.postfix) if t is not None]
        return " ".join(parts)

    @property
    def is_nullable(self) -> bool:
        return self.nullable is not None


@dataclass
class Default(Node):
    type: ClassVar[str] = "default"
    assign: Optional[Token] = None
    expression: List[Token] = field(default_factory=list)

    @property
    def value(self) -> str:
        return "".join(t.text for t in self.expression)


@dataclass
class Argument(Node):
    type: ClassVar[str] = "argument"
    ext_attrs: ExtendedAttributes = field(default_factory=ExtendedAttributes)
    optional: Optional[Token] = None
    idl_type: Optional[Node] = None
    variadic: Optional[Token] = None
    name_token: Optional[Token] = None
    default: Optional[Default] = None
    separator: Optional[Token] = None

    @property
    def name(self) -> str:
        return unescape(self.name_token.text)


# ====== Members

@dataclass
class Attribute(Node):
    type: ClassVar[str] = "attribute"
    ext_attrs: ExtendedAttributes = field(default_factory=ExtendedAttributes)
    special: Optional[Token] = None     # static | stringifier | inherit
    readonly: Optional[Token] = None
    base: Optional[Token] = None
    idl_type: Optional[Node] = None
    name_token: Optional[Token] = None
    termination: Optional[Token] = None

    @property
    def name(self) -> str:
        return unescape(self.name_token.text)


@dataclass
class Operation(Node):
    type: ClassVar[str] = "operation"
    ext_attrs: ExtendedAttributes = field(default_factory=ExtendedAttributes)
    special: Optional[Token] = None     # getter | setter | deleter | static | stringifier
    idl_type: Optional[Node] = None
    name_token: Optional[Token] = None
    open: Optional[Token] = None
    arguments: List[Argument] = field(default_factory=list)
    close: Optional[Token] = None
    termination: Optional[Token] = None

    @property
    def name(self) -> str:
        return unescape(self.name_token.text) if self.name_token else ""


@dataclass
class Constant(Node):
    type: ClassVar[str] = "const"
    ext_attrs: ExtendedAttributes = field(default_factory=ExtendedAttributes)
    base: Optional[Token] = None
    idl_type: Optional[Node] = None
    name_token: Optional[Token] = None
    assign: Optional[Token] = None
    value: Optional[Token] = None
    termination: Optional[Token] = None

    @property
    def name(self) -> str:
        return unescape(self.name_token.text)


@dataclass
class Constructor(Node):
    type: ClassVar[str] = "constructor"
    ext_attrs: ExtendedAttributes = field(default_factory=ExtendedAttributes)
    base: Optional[Token] = None
    open: Optional[Token] = None
    arguments: List[Argument] = field(default_factory=list)
    close: Optional[Token] = None
    termination: Optional[Token] = None


@dataclass
class IterableLike(Node):
    """iterable<>, async iterable<>(args), maplike<>, setlike<>."""
    type: ClassVar[str] = "iterable-like"
    ext_attrs: ExtendedAttributes = field(default_factory=ExtendedAttributes)
    readonly: Optional[Token] = None
    async_: Optional[Token] = None
    base: Optional[Token] = None
    open: Optional[Token] = None
    idl_types: List[Node] = field(default_factory=list)
    close: Optional[Token] = None
    args_open: Optional[Token] = None
    arguments: List[Argument] = field(default_factory=list)
    args_close: Optional[Token] = None
    termination: Optional[Token] = None

    @property
    def kind(self) -> str:
        return self.base.value


@dataclass
class Field(Node):
    """Dictionary member."""
    type: ClassVar[str] = "field"
    ext_attrs: ExtendedAttributes = field(default_factory=ExtendedAttributes)
    required: Optional[Token] = None
    idl_type: Optional[Node] = None
    name_token: Optional[Token] = None
    default: Optional[Default] = None
    termination: Optional[Token] = None

    @property
    def name(self) -> str:
        return unescape(self.name_token.text)


@dataclass
class EnumValue(Node):
    type: ClassVar[str] = "enum-value"
    value: Optional[Token] = None
    separator: Optional[Token] = None


# ====== Definitions

@dataclass
class Container(Node):
    """interface, interface mixin, callback interface, namespace, dictionary."""
    type: ClassVar[str] = "container"
    ext_attrs: ExtendedAttributes = field(default_factory=ExtendedAttributes)
    callback: Optional[Token] = None
    partial: Optional[Token] = None
    base: Optional[Token] = None
    mixin: Optional[Token] = None
    name_token: Optional[Token] = None
    colon: Optional[Token] = None
    inheritance: Optional[Token] = None
    open: Optional[Token] = None
    members: List[Node] = field(default_factory=list)
    close: Optional[Token] = None
    termination: Optional[Token] = None

    @property
    def name(self) -> str:
        return unescape(self.name_token.text) if self.name_token else ""

    @property
    def inherits(self) -> Optional[str]:
        return unescape(self.inheritance.text) if self.inheritance else None


@dataclass
class Interface(Container):
    type: ClassVar[str] = "interface"


@dataclass
class InterfaceMixin(Container):
    type: ClassVar[str] = "interface mixin"


@dataclass
class CallbackInterface(Container):
    type: ClassVar[str] = "callback interface"


@dataclass
class Namespace(Container):
    type: ClassVar[str] = "namespace"


@dataclass
class Dictionary(Container):
    type: ClassVar[str] = "dictionary"


@dataclass
class CallbackFunction(Node):
    type: ClassVar[str] = "callback"
    ext_attrs: ExtendedAttributes = field(default_factory=ExtendedAttributes)
    base: Optional[Token] = None
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
class Enum(Node):
    type: ClassVar[str] = "enum"
    ext_attrs: ExtendedAttributes = field(default_factory=ExtendedAttributes)
    base: Optional[Token] = None
    name_token: Optional[Token] = None
    open: Optional[Token] = None
    values: List[EnumValue] = field(default_factory=list)
    close: Optional[Token] = None
    termination: Optional[Token] = None

    @property
    def name(self) -> str:
        return unescape(self.name_token.text)


@dataclass
class Typedef(Node):
    type: ClassVar[str] = "typedef"
    ext_attrs: ExtendedAttributes = field(default_factory=ExtendedAttributes)
    base: Optional[Token] = None
    idl_type: Optional[Node] = None
    name_token: Optional[Token] = None
    termination: Optional[Token] = None

    @property
    def name(self) -> str:
        return unescape(self.name_token.text)


@dataclass
class Includes(Node):
    type: ClassVar[str] = "includes"
    ext_attrs: ExtendedAttributes = field(default_factory=ExtendedAttributes)
    target: Optional[Token] = None
    includes: Optional[Token] = None
    mixin: Optional[Token] = None
    termination: Optional[Token] = None


@dataclass
class Eof(Node):
    """Owns the trailing trivia of the file."""
    type: ClassVar[str] = "eof"
    token: Optional[Token] = None


class Root(list):
    """Top-level definitions of one file, in source order, `Eof` last."""

    def __init__(self, definitions=(), *, source_name: Optional[str] = None, tweaks=()):
        super().__init__(definitions)
        self.source_name = source_name
        # (original, replacement) text substitutions applied before tokenising
        self.tweaks = tuple(tweaks)

    @property
    def definitions(self) -> List[Node]:
        return [d for d in self if not isinstance(d, Eof)]

    def walk(self) -> Iterator[Node]:
        for definition in self:
            yield from definition.walk()

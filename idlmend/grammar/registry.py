# idlmend/grammar/registry.py
"""Production registry and grammar extension points.

A production is `f(tokeniser) -> Node | None`. `None` means "not matched" and
must leave no trace; once a production has matched its leading keyword(s) it
reports problems through `tokeniser.error` instead.

Extension points
----------------
- top-level productions: handed to the parser, tried before the baseline
  definitions (see `grammar.parser.parse_definitions`)
- `Extensions.interface / callback_interface / namespace / dictionary`:
  extra member productions tried before the container's own member grammar
- `Extensions.types`: type productions tried before the baseline types, so a
  custom type is accepted wherever a type is
"""

from __future__ import annotations
from dataclasses import dataclass, field
from typing import Callable, Iterable, List, Optional
import logging

from ..lex import Tokeniser
from .ast import Node

logger = logging.getLogger(__name__)

Production = Callable[[Tokeniser], Optional[Node]]


def production_name(production) -> str:
    func = getattr(production, "func", production)  # functools.partial
    return getattr(func, "__qualname__", repr(func))


class ProductionRegistry:
    """Ordered list of productions; the first one that matches wins."""

    def __init__(self, productions: Iterable[Production] = ()):
        self._productions: List[Production] = list(productions)

    def __iter__(self):
        return iter(self._productions)

    def __len__(self) -> int:
        return len(self._productions)

    def register(self, production: Production, *, first: bool = False) -> None:
        if first:
            self._productions.insert(0, production)
        else:
            self._productions.append(production)

    def attempt(self, tokeniser: Tokeniser) -> Optional[Node]:
        for production in self._productions:
            start = tokeniser.position
            node = production(tokeniser)
            if node is not None:
                logger.debug("%s matched %r at token %d", production_name(production), node.type, start)
                return node
            # a production that did not match must not have consumed anything
            tokeniser.unconsume(start)
        return None


@dataclass
class ContainerExtension:
    """Extra members admitted by one container kind.

    `members` are tried before the baseline member productions. `type`, when
    set, replaces the type tag of every container parsed with this extension.
    """
    members: List[Production] = field(default_factory=list)
    type: Optional[str] = None


@dataclass
class Extensions:
    interface: ContainerExtension = field(default_factory=ContainerExtension)
    callback_interface: ContainerExtension = field(default_factory=ContainerExtension)
    namespace: ContainerExtension = field(default_factory=ContainerExtension)
    dictionary: ContainerExtension = field(default_factory=ContainerExtension)
    types: List[Production] = field(default_factory=list)


NO_EXTENSIONS = Extensions()


def extensions_of(tokeniser: Tokeniser) -> Extensions:
    return tokeniser.extensions or NO_EXTENSIONS

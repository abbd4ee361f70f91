"""
wamp Tree Nodes
===============

This module defines the node types produced by the reader and rewritten
by the evaluator.

Node Hierarchy
--------------
Node (base)
├── Atom - a single token's text
│   ├── Whitespace - whitespace or comment run, inert
│   ├── Name - $-prefixed identifier
│   ├── Literal - bare keyword, operator or macro name
│   ├── Str - quoted string in raw, undecoded form
│   ├── Integer - integer literal
│   └── Float - float literal (always contains a '.')
└── List - parenthesized form
    └── Splice - expansion result inlined into the parent list

Trivia
------
Every node carries `leading` and `trailing` trivia: the Whitespace nodes
found immediately outside its own span in the source. A replacement node
produced during evaluation takes over the trivia of the node it replaces,
so the surrounding layout survives macro expansion.

Design Notes
------------
- Nodes are frozen dataclasses; evaluation builds new nodes instead of
  mutating existing ones.
- Trivia and source location do not take part in equality, so two nodes
  compare equal when they render the same content.
"""

from dataclasses import dataclass, field, replace
from typing import Iterable, Optional

from wamp.errors import SourceLocation


# =============================================================================
# Base Class
# =============================================================================

@dataclass(frozen=True)
class Node:
    """
    Base class for all tree nodes.

    Attributes:
        leading: Trivia emitted before the node
        trailing: Trivia emitted after the node
        location: Where the node started in the source (None if synthesized)
    """
    leading: tuple["Whitespace", ...] = field(default=(), compare=False, kw_only=True)
    trailing: tuple["Whitespace", ...] = field(default=(), compare=False, kw_only=True)
    location: Optional[SourceLocation] = field(default=None, compare=False, kw_only=True)

    def surround(
        self,
        leading: Iterable["Whitespace"] = (),
        trailing: Iterable["Whitespace"] = (),
    ) -> "Node":
        """Return a copy of this node with the given trivia."""
        return replace(self, leading=tuple(leading), trailing=tuple(trailing))

    def inherit_trivia(self, original: "Node") -> "Node":
        """Return a copy of this node carrying the trivia of original."""
        return self.surround(original.leading, original.trailing)


# =============================================================================
# Atoms
# =============================================================================

@dataclass(frozen=True)
class Atom(Node):
    """
    A node holding the text of a single token.

    Attributes:
        text: Exact token text
    """
    text: str = ""

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({self.text!r})"


class Whitespace(Atom):
    """Whitespace, line comment or block comment. Never evaluated."""


class Name(Atom):
    """A $-prefixed identifier (local variable, function, label...)."""


class Literal(Atom):
    """A bare word: target keyword, operator or macro name."""


class Str(Atom):
    """A quoted string literal, kept in raw source form."""


class Integer(Atom):
    """An integer literal (decimal or 0x hex, optional leading '-')."""


class Float(Atom):
    """A float literal; the '.' distinguishes it from an Integer."""


# =============================================================================
# Lists
# =============================================================================

@dataclass(frozen=True)
class List(Node):
    """
    A parenthesized form.

    Children may interleave Whitespace nodes between the meaningful
    forms ("words"). The first word is the head, which decides how the
    evaluator treats the form.

    Attributes:
        items: Child nodes in source order
    """
    items: tuple[Node, ...] = ()

    def __post_init__(self) -> None:
        if not isinstance(self.items, tuple):
            object.__setattr__(self, "items", tuple(self.items))

    def __repr__(self) -> str:
        inner = " ".join(repr(w) for w in self.words())
        return f"{self.__class__.__name__}({inner})"

    def __len__(self) -> int:
        return len(self.items)

    def __iter__(self):
        return iter(self.items)

    def __getitem__(self, index):
        return self.items[index]

    def words(self) -> list[Node]:
        """Return the children that are not Whitespace."""
        return [item for item in self.items if not isinstance(item, Whitespace)]

    @property
    def head(self) -> Optional[Node]:
        """First non-whitespace child, or None for an empty list."""
        for item in self.items:
            if not isinstance(item, Whitespace):
                return item
        return None

    def nth_word(self, nth: int) -> tuple[Optional[int], Optional[Node]]:
        """
        Find the nth word (negative counts from the end).

        Returns:
            (index into items, node), or (None, None) if there is no such word
        """
        if nth < 0:
            nth += len(self.words())
        word_idx = 0
        for idx, item in enumerate(self.items):
            if isinstance(item, Whitespace):
                continue
            if word_idx == nth:
                return idx, item
            word_idx += 1
        return None, None

    def with_items(self, items: Iterable[Node]) -> "List":
        """Return a copy of this list (same trivia) with new children."""
        return replace(self, items=tuple(items))

    def with_item(self, index: int, node: Node) -> "List":
        """Return a copy of this list with the child at index replaced."""
        items = list(self.items)
        items[index] = node
        return self.with_items(items)


class Splice(List):
    """
    Expansion result whose children are inlined into the parent list.

    Only macro handlers produce splices; they never appear in read trees.
    """


# =============================================================================
# Construction Helpers
# =============================================================================

def form(*items: Node | str) -> List:
    """
    Build a synthesized List; bare strings become Literal atoms.

    >>> form("i32.const", Integer("1"))
    List(Literal('i32.const') Integer('1'))
    """
    return List(tuple(Literal(i) if isinstance(i, str) else i for i in items))


def is_keyword(node: Optional[Node], *names: str) -> bool:
    """True if node is a Literal whose text is one of names."""
    return isinstance(node, Literal) and node.text in names

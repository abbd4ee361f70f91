"""
wamp Reader
===========

Recursive-descent reader turning a token stream into trees of nodes.

Each top-level parenthesized form becomes one List. Whitespace and
comments are never thrown away:

- trivia before a list's '(' becomes its `leading` trivia
- trivia after its ')' becomes its `trailing` trivia
- trivia between children stays in the list as Whitespace children

Two forms written with nothing between them, as in `(a)(b)`, get an empty
Whitespace marker between them so the emitter does not add a space.
Together these rules make `emit(read(text)) == text` for any input the
reader accepts.

Atom Classification
-------------------
| Token             | Node       |
|-------------------|------------|
| $name             | Name       |
| "..." or '...'    | Str        |
| 42, -7, 0x2a      | Integer    |
| 1.5, -0.25, 3.    | Float      |
| anything else     | Literal    |

Example
-------
>>> from wamp.transpiler.reader import read_str
>>> [tree] = read_str("(i32.add $a 1)")
>>> tree.words()
[Literal('i32.add'), Name('$a'), Integer('1')]
"""

from typing import Optional
import re

from wamp.errors import (
    SourceLocation,
    UnexpectedCloseError,
    UnexpectedEndError,
    WampSyntaxError,
)
from wamp.transpiler.lexer import Token, source_line_at, tokenize
from wamp.transpiler.nodes import (
    Float,
    Integer,
    List,
    Literal,
    Name,
    Node,
    Str,
    Whitespace,
)


INTEGER_PATTERN = re.compile(r"^-?(?:0[xX][0-9a-fA-F]+|[0-9]+)$")
FLOAT_PATTERN = re.compile(r"^-?[0-9]+\.[0-9]*$")

NAME_SIGIL = "$"
QUOTES = ("\"", "'")


def classify_atom(text: str, location: Optional[SourceLocation] = None) -> Node:
    """Build the atom node for a bare token's text."""
    if text.startswith(NAME_SIGIL):
        return Name(text, location=location)
    if text.startswith(QUOTES):
        return Str(text, location=location)
    if INTEGER_PATTERN.match(text):
        return Integer(text, location=location)
    if FLOAT_PATTERN.match(text):
        return Float(text, location=location)
    return Literal(text, location=location)


class Reader:
    """
    Reads nodes from a token list.

    Usage:
        reader = Reader(tokens, source)
        trees = reader.read_all()

    Attributes:
        tokens: Tokens to read from
        source: Original text, used to quote lines in error messages
    """

    def __init__(self, tokens: list[Token], source: str = ""):
        self.tokens = tokens
        self.source = source
        self.position = 0

    # =========================================================================
    # Token Access
    # =========================================================================

    def peek(self) -> Optional[Token]:
        if self.position < len(self.tokens):
            return self.tokens[self.position]
        return None

    def next(self) -> Token:
        token = self.tokens[self.position]
        self.position += 1
        return token

    def _at_form(self) -> bool:
        """True if another form (not a closer) follows."""
        token = self.peek()
        return token is not None and token.value != ")"

    def _source_line(self, location: SourceLocation) -> Optional[str]:
        if not self.source:
            return None
        lines = self.source.split("\n")
        if 0 < location.line <= len(lines):
            return lines[location.line - 1]
        return None

    # =========================================================================
    # Reading
    # =========================================================================

    def read_all(self) -> list[List]:
        """
        Read every top-level list in the stream.

        Trivia after the last list is attached to it as trailing trivia.

        Raises:
            WampSyntaxError: On malformed input
        """
        trees = []
        # read_list consumes trailing trivia, so only trivia-only input
        # reaches the end of the stream here without a list
        while self._next_form_index() is not None:
            trees.append(self.read_list())
        return trees

    def _next_form_index(self) -> Optional[int]:
        """Index of the first non-trivia token at or after the position."""
        index = self.position
        while index < len(self.tokens):
            if not self.tokens[index].type.is_trivia:
                return index
            index += 1
        return None

    def read_whitespace(self) -> list[Whitespace]:
        """Consume a run of trivia tokens."""
        result = []
        token = self.peek()
        while token is not None and token.type.is_trivia:
            self.next()
            result.append(Whitespace(token.value, location=token.location))
            token = self.peek()
        return result

    def read_form(self) -> Node:
        """Read one list or atom."""
        token = self.peek()
        if token is None:
            raise UnexpectedEndError("a form")
        if token.type.is_trivia:
            self.next()
            return Whitespace(token.value, location=token.location)
        if token.value == ")":
            raise UnexpectedCloseError(
                token.location, self._source_line(token.location)
            )
        if token.value == "(":
            return self.read_list()
        return self.read_atom()

    def read_atom(self) -> Node:
        token = self.next()
        return classify_atom(token.value, token.location)

    def read_list(self) -> List:
        """
        Read a parenthesized list together with its surrounding trivia.

        Raises:
            UnexpectedEndError: If the input ends before the closing ')'
            WampSyntaxError: If the next form is not a list
        """
        leading = self.read_whitespace()

        token = self.peek()
        if token is None:
            raise UnexpectedEndError("'('")
        if token.value == ")":
            raise UnexpectedCloseError(
                token.location, self._source_line(token.location)
            )
        if token.value != "(":
            raise WampSyntaxError(
                f"expected '(', got {token.value!r}",
                token.location,
                hint="top-level input must consist of parenthesized forms",
                source_line=self._source_line(token.location),
            )
        opener = self.next()

        items: list[Node] = list(self.read_whitespace())
        while True:
            token = self.peek()
            if token is None:
                raise UnexpectedEndError(
                    "')'", opener.location, self._source_line(opener.location)
                )
            if token.value == ")":
                break
            items.append(self.read_form())
            separator = self.read_whitespace()
            if separator:
                items.extend(separator)
            elif not items[-1].trailing and self._at_form():
                items.append(Whitespace(""))
        self.next()

        trailing = self.read_whitespace()
        return List(
            tuple(items),
            leading=tuple(leading),
            trailing=tuple(trailing),
            location=opener.location,
        )


# =============================================================================
# Convenience Functions
# =============================================================================

def read_str(source: str, filename: str = "<input>") -> list[List]:
    """
    Read all top-level lists from source text.

    Returns an empty list when the text holds no forms at all.

    Raises:
        WampSyntaxError: On malformed input
    """
    return Reader(tokenize(source, filename), source).read_all()


def read_form(source: str, filename: str = "<input>") -> List:
    """Read text that must contain exactly one top-level list."""
    trees = read_str(source, filename)
    if len(trees) != 1:
        raise WampSyntaxError(
            f"expected exactly one form, found {len(trees)}",
            SourceLocation(filename, 1, 1),
            source_line=source_line_at(source, 0),
        )
    return trees[0]

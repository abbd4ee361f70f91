"""
wamp Source Lexer
=================

This module splits source text into a flat stream of lexical fragments.
Unlike a conventional lexer it keeps everything: whitespace runs and
comments are tokens too, so concatenating the values of all tokens yields
the input text byte for byte. The reader attaches those fragments to the
tree as trivia, which is what lets the emitter reproduce the user's
formatting after macro expansion.

Token Types
-----------
Rules are tried in this order at each position:

| Type          | Example            | Notes                                 |
|---------------|--------------------|---------------------------------------|
| WHITESPACE    | "  \\n\\t"           | any run of whitespace                 |
| BLOCK_COMMENT | "(; note ;)"       | may span lines                        |
| PUNCT         | "(", ")", "[", "@" | single characters                     |
| STRING        | "'a'", '"a\\"b"'    | backslash escapes, may be unterminated|
| LINE_COMMENT  | ";; note"          | up to end of line                     |
| ATOM          | "i32.add", "$x"    | any other run of plain characters     |

Example
-------
>>> from wamp.transpiler.lexer import Lexer
>>> for token in Lexer("(i32.add $a 1)").tokenize():
...     print(token)
Token(PUNCT, '(', 1:1)
Token(ATOM, 'i32.add', 1:2)
Token(WHITESPACE, ' ', 1:9)
Token(ATOM, '$a', 1:10)
Token(WHITESPACE, ' ', 1:12)
Token(ATOM, '1', 1:13)
Token(PUNCT, ')', 1:14)
"""

from dataclasses import dataclass
from enum import Enum, auto
from typing import Iterator
import re

from wamp.errors import SourceLocation, WampSyntaxError


# =============================================================================
# Token Type Enumeration
# =============================================================================

class TokenType(Enum):
    """Categories of lexical fragments."""

    # Trivia (kept for faithful re-emission)
    WHITESPACE = auto()     # Run of spaces, tabs, newlines
    BLOCK_COMMENT = auto()  # (; ... ;)
    LINE_COMMENT = auto()   # ;; ...

    # Structure and values
    PUNCT = auto()          # Single bracket/punctuation character
    STRING = auto()         # Quoted string, raw (undecoded) form
    ATOM = auto()           # Any other bare word

    @property
    def is_trivia(self) -> bool:
        """True for token types that carry only formatting."""
        return self in _TRIVIA_TYPES


_TRIVIA_TYPES = frozenset({
    TokenType.WHITESPACE,
    TokenType.BLOCK_COMMENT,
    TokenType.LINE_COMMENT,
})


# =============================================================================
# Token Data Class
# =============================================================================

@dataclass(frozen=True)
class Token:
    """
    A single lexical fragment with its position.

    Attributes:
        type: The TokenType classification
        value: Exact source text of the fragment
        line: Line number in source (1-indexed)
        column: Column number in source (1-indexed)
        filename: Name of the source file
    """
    type: TokenType
    value: str
    line: int
    column: int
    filename: str

    def __repr__(self) -> str:
        return f"Token({self.type.name}, {self.value!r}, {self.line}:{self.column})"

    @property
    def location(self) -> SourceLocation:
        """Return a SourceLocation for error reporting."""
        return SourceLocation(self.filename, self.line, self.column)


# =============================================================================
# Token Patterns
# =============================================================================

# One named group per rule, in priority order
TOKEN_PATTERN = re.compile(
    r"""
      (?P<WHITESPACE>\s+)
    | (?P<BLOCK_COMMENT>\(;[\s\S]*?;\))
    | (?P<PUNCT>[\[\]{}()`~^@])
    | (?P<STRING>'(?:\\[\s\S]|[^\\'])*'?|"(?:\\[\s\S]|[^\\"])*"?)
    | (?P<LINE_COMMENT>;;[^\n]*)
    | (?P<ATOM>[^\s\[\]{}()'"`@,;]+)
    """,
    re.VERBOSE,
)


# =============================================================================
# Lexer Implementation
# =============================================================================

class Lexer:
    """
    Tokenizes wamp source text.

    Usage:
        lexer = Lexer(source_text, filename)
        tokens = list(lexer.tokenize())

    Attributes:
        source: The source text being tokenized
        filename: Name of the source file (for error reporting)
    """

    def __init__(self, source: str, filename: str = "<input>"):
        self.source = source
        self.filename = filename

        self._pos = 0
        self._line = 1
        self._column = 1
        self._line_start_pos = 0

    def tokenize(self) -> Iterator[Token]:
        """
        Generate tokens from the source text.

        Yields:
            Token objects covering the whole input without gaps

        Raises:
            WampSyntaxError: If a character matches no token rule
        """
        while self._pos < len(self.source):
            match = TOKEN_PATTERN.match(self.source, self._pos)
            if match is None:
                raise self._error(
                    f"unexpected character {self.source[self._pos]!r}"
                )
            token = Token(
                type=TokenType[match.lastgroup],
                value=match.group(),
                line=self._line,
                column=self._column,
                filename=self.filename,
            )
            self._advance(token.value)
            yield token

    def _advance(self, text: str) -> None:
        """Move past text, keeping line and column tracking current."""
        newlines = text.count("\n")
        if newlines:
            self._line += newlines
            last_newline = text.rfind("\n")
            self._line_start_pos = self._pos + last_newline + 1
            self._column = len(text) - last_newline
        else:
            self._column += len(text)
        self._pos += len(text)

    def _error(self, message: str) -> WampSyntaxError:
        """Create a syntax error at the current position."""
        location = SourceLocation(self.filename, self._line, self._column)
        return WampSyntaxError(
            message,
            location,
            source_line=source_line_at(self.source, self._line_start_pos),
        )


# =============================================================================
# Convenience Functions
# =============================================================================

def tokenize(source: str, filename: str = "<input>") -> list[Token]:
    """Tokenize source text into a list of tokens."""
    return list(Lexer(source, filename).tokenize())


def source_line_at(source: str, line_start_pos: int) -> str:
    """Return the text of the line beginning at line_start_pos."""
    line_end = source.find("\n", line_start_pos)
    if line_end == -1:
        line_end = len(source)
    return source[line_start_pos:line_end]

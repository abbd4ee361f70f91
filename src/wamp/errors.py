"""
wamp Error Hierarchy
====================

This module defines the exception hierarchy for the whole wamp package.
All exceptions inherit from WampError, allowing callers to catch every
transpiler-related error with a single except clause if desired.

Exception Hierarchy
-------------------
WampError (base)
├── TranspilerError (source-related)
│   ├── WampSyntaxError - malformed source text
│   │   ├── UnexpectedCloseError - stray ')' where a form was expected
│   │   └── UnexpectedEndError - input ended inside a list
│   ├── MacroError - wrong arity or shape in a macro invocation
│   └── EmitError - a node that cannot be rendered as text
└── ConfigError - invalid transpiler configuration

Design Philosophy
-----------------
Transpilation is all-or-nothing. Every error aborts the run and nothing is
written, so each exception carries as much context as is available (file,
line, column, the offending source line and an optional hint) to let the
user fix the input in one go.

Error messages follow this format:
    filename:line:column: error: description
        source_line_text
        ^
    hint: suggestion for fixing (when available)
"""

from dataclasses import dataclass
from typing import Optional


# =============================================================================
# Base Exception Class
# =============================================================================

class WampError(Exception):
    """
    Base exception for all wamp errors.

        try:
            transpile([source])
        except WampError as e:
            print(f"Error: {e}")
    """
    pass


# =============================================================================
# Source Location Tracking
# =============================================================================

@dataclass(frozen=True)
class SourceLocation:
    """
    A position in a source file, used for error reporting.

    Attributes:
        filename: Name of the source file (or "<input>" for string input)
        line: Line number (1-indexed)
        column: Column number (1-indexed)
    """
    filename: str
    line: int
    column: int

    def __str__(self) -> str:
        """Format as 'filename:line:column' for error messages."""
        return f"{self.filename}:{self.line}:{self.column}"


# =============================================================================
# Transpiler Exceptions
# =============================================================================

class TranspilerError(WampError):
    """
    Base exception for errors tied to the source being transpiled.

    Attributes:
        message: The error description
        location: Where in the source the error occurred (optional)
        hint: A suggestion for fixing the error (optional)
        source_line: The actual source text at the error location (optional)
    """

    def __init__(
        self,
        message: str,
        location: Optional[SourceLocation] = None,
        hint: Optional[str] = None,
        source_line: Optional[str] = None,
    ):
        self.message = message
        self.location = location
        self.hint = hint
        self.source_line = source_line
        super().__init__(self._format_message())

    def _format_message(self) -> str:
        """
        Format the error message with location, source context, and hint.

        Example output:
            main.wam:3:5: error: unexpected ')'
                (func))
                      ^
        """
        parts = []

        if self.location:
            parts.append(f"{self.location}: error: {self.message}")
        else:
            parts.append(f"error: {self.message}")

        if self.source_line is not None and self.location is not None:
            parts.append(f"    {self.source_line}")
            if self.location.column > 0:
                padding = " " * (4 + self.location.column - 1)
                parts.append(f"{padding}^")

        if self.hint:
            parts.append(f"hint: {self.hint}")

        return "\n".join(parts)


class WampSyntaxError(TranspilerError):
    """
    Syntax error in source text.

    Raised by the tokenizer and reader, and by string decoding, when the
    input cannot be turned into a tree.

    Examples:
        - A character no token rule accepts (a lone ';' or ',')
        - An unterminated string literal passed to STRING or CHR
        - An invalid escape sequence in a string literal
    """
    pass


class UnexpectedCloseError(WampSyntaxError):
    """A closing bracket appeared where a form was expected."""

    def __init__(
        self,
        location: Optional[SourceLocation] = None,
        source_line: Optional[str] = None,
    ):
        super().__init__(
            "unexpected ')'",
            location=location,
            hint="remove the extra ')' or add the matching '('",
            source_line=source_line,
        )


class UnexpectedEndError(WampSyntaxError):
    """
    The input ended while a form or closing bracket was still expected.

    The location points at the opening bracket of the unterminated list
    when it is known, which is where the user needs to look.
    """

    def __init__(
        self,
        expected: str = "')'",
        location: Optional[SourceLocation] = None,
        source_line: Optional[str] = None,
    ):
        self.expected = expected
        super().__init__(
            f"expected {expected}, got end of input",
            location=location,
            hint="unterminated list opened here" if location else None,
            source_line=source_line,
        )


class MacroError(TranspilerError):
    """
    Error in a macro invocation.

    Every built-in macro checks its own argument count and shape before
    expanding and raises this when the check fails.

    Example:
        (CHR "AB")   ; Error: CHR needs a single character string
    """

    def __init__(
        self,
        macro: str,
        message: str,
        location: Optional[SourceLocation] = None,
        hint: Optional[str] = None,
        source_line: Optional[str] = None,
    ):
        self.macro = macro
        super().__init__(
            f"{macro}: {message}",
            location=location,
            hint=hint,
            source_line=source_line,
        )


class EmitError(TranspilerError):
    """
    A node could not be rendered to text.

    This means the evaluator produced something that is not a node or an
    atom without textual content. It indicates a bug, not bad input.
    """
    pass


# =============================================================================
# Configuration Exceptions
# =============================================================================

class ConfigError(WampError):
    """
    Invalid transpiler configuration.

    Raised when an option is out of range, e.g. a memory size of zero pages.
    """
    pass

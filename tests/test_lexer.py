# =============================================================================
# test_lexer.py - Lexer Unit Tests
# =============================================================================
# Tests for the wamp source tokenizer.
#
# Test coverage includes:
#   - Lossless tokenization (token values concatenate to the input)
#   - Trivia tokens: whitespace, line comments, block comments
#   - Strings in both quote styles, escaped and unterminated
#   - Punctuation and bare atoms
#   - Line/column tracking
#   - Error conditions
# =============================================================================

import pytest
from wamp.transpiler.lexer import Lexer, TokenType, tokenize
from wamp.errors import WampSyntaxError


def types(source: str) -> list[TokenType]:
    return [t.type for t in tokenize(source, "<test>")]


def values(source: str) -> list[str]:
    return [t.value for t in tokenize(source, "<test>")]


# =============================================================================
# Lossless Tokenization
# =============================================================================

class TestLossless:
    """Token values must reproduce the input exactly."""

    @pytest.mark.parametrize("source", [
        "",
        "   \n\t ",
        "(module $m)",
        "(func $f (param $a i32) (result i32)\n  (i32.add $a 1)) ;; done\n",
        "(; a block\n   comment ;)(data \"a\\\"b\" 'c')",
        "(x [1] {2} `~^@ y)",
        "(call $f \"unterminated",
    ])
    def test_concatenation_reproduces_input(self, source):
        """Joining all token values gives back the source text."""
        assert "".join(values(source)) == source

    def test_empty_source(self):
        """Empty source produces no tokens."""
        assert tokenize("") == []


# =============================================================================
# Token Recognition
# =============================================================================

class TestTokenTypes:
    """Classification of individual fragments."""

    def test_simple_form(self):
        """Brackets, atoms and whitespace in a simple form."""
        assert types("(i32.add $a 1)") == [
            TokenType.PUNCT,
            TokenType.ATOM,
            TokenType.WHITESPACE,
            TokenType.ATOM,
            TokenType.WHITESPACE,
            TokenType.ATOM,
            TokenType.PUNCT,
        ]

    def test_whitespace_run_is_one_token(self):
        """Mixed spaces, tabs and newlines form a single token."""
        assert values(" \t\n  x") == [" \t\n  ", "x"]

    def test_line_comment_stops_at_newline(self):
        """A ;; comment ends before the newline."""
        tokens = tokenize(";; note\n(x)")
        assert tokens[0].type == TokenType.LINE_COMMENT
        assert tokens[0].value == ";; note"
        assert tokens[1].type == TokenType.WHITESPACE

    def test_block_comment_spans_lines(self):
        """A (; ... ;) comment may contain newlines."""
        tokens = tokenize("(; one\ntwo ;)x")
        assert tokens[0].type == TokenType.BLOCK_COMMENT
        assert tokens[0].value == "(; one\ntwo ;)"
        assert tokens[1].value == "x"

    def test_block_comment_is_not_a_bracket(self):
        """'(;' starts a comment, not a list."""
        assert types("(; c ;)") == [TokenType.BLOCK_COMMENT]

    def test_double_quoted_string_with_escapes(self):
        """Escaped quotes stay inside the string token."""
        tokens = tokenize('"a\\"b" c')
        assert tokens[0].type == TokenType.STRING
        assert tokens[0].value == '"a\\"b"'

    def test_single_quoted_string(self):
        """Single-quoted strings are string tokens too."""
        tokens = tokenize("'it\\'s'")
        assert len(tokens) == 1
        assert tokens[0].type == TokenType.STRING

    def test_unterminated_string_is_tolerated(self):
        """An unterminated string runs to the end of input."""
        tokens = tokenize('"abc')
        assert tokens[0].type == TokenType.STRING
        assert tokens[0].value == '"abc'

    def test_punctuation(self):
        """Bracket-like characters are single-character tokens."""
        assert values("[]{}`~^@") == list("[]{}`~^@")
        assert all(t == TokenType.PUNCT for t in types("[]{}`~^@"))

    def test_atom_stops_at_bracket_and_quote(self):
        """Atoms end at brackets and quote characters."""
        assert values('a(b)c"d"') == ["a", "(", "b", ")", "c", '"d"']

    def test_trivia_property(self):
        """Only whitespace and comments count as trivia."""
        assert TokenType.WHITESPACE.is_trivia
        assert TokenType.LINE_COMMENT.is_trivia
        assert TokenType.BLOCK_COMMENT.is_trivia
        assert not TokenType.ATOM.is_trivia
        assert not TokenType.STRING.is_trivia
        assert not TokenType.PUNCT.is_trivia


# =============================================================================
# Position Tracking
# =============================================================================

class TestPositions:
    """Line and column information on tokens."""

    def test_columns_on_first_line(self):
        tokens = tokenize("(i32.add $a 1)")
        assert [(t.line, t.column) for t in tokens] == [
            (1, 1), (1, 2), (1, 9), (1, 10), (1, 12), (1, 13), (1, 14),
        ]

    def test_lines_after_newlines(self):
        """Columns restart after each newline."""
        tokens = [t for t in tokenize("(a\n  b\n\n c)") if t.type == TokenType.ATOM]
        assert [(t.line, t.column) for t in tokens] == [(1, 2), (2, 3), (4, 2)]

    def test_position_after_multiline_comment(self):
        tokens = tokenize("(; x\nyy ;) z")
        assert tokens[-1].value == "z"
        assert (tokens[-1].line, tokens[-1].column) == (2, 7)

    def test_location_carries_filename(self):
        token = next(Lexer("x", "main.wam").tokenize())
        assert str(token.location) == "main.wam:1:1"


# =============================================================================
# Error Conditions
# =============================================================================

class TestErrors:
    """Characters no rule accepts are reported with their position."""

    def test_lone_semicolon(self):
        with pytest.raises(WampSyntaxError) as exc_info:
            tokenize("(a ; b)", "<test>")
        assert exc_info.value.location.column == 4
        assert "unexpected character ';'" in str(exc_info.value)

    def test_comma_on_later_line(self):
        with pytest.raises(WampSyntaxError) as exc_info:
            tokenize("(a\n  b,c)", "<test>")
        error = exc_info.value
        assert (error.location.line, error.location.column) == (2, 4)
        assert error.source_line == "  b,c)"

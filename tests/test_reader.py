# =============================================================================
# test_reader.py - Reader Unit Tests
# =============================================================================
# Tests for the recursive-descent reader.
#
# Test coverage includes:
#   - Round trip: rendering read trees reproduces the input exactly
#   - Atom classification (Name, Str, Integer, Float, Literal)
#   - Trivia placement (leading, trailing, interior Whitespace children)
#   - Multiple top-level forms
#   - Parse errors: stray ')', unterminated lists, non-list top level
# =============================================================================

import pytest

from wamp.errors import UnexpectedCloseError, UnexpectedEndError, WampSyntaxError
from wamp.transpiler.emitter import emit_node
from wamp.transpiler.nodes import (
    Float,
    Integer,
    List,
    Literal,
    Name,
    Str,
    Whitespace,
)
from wamp.transpiler.reader import classify_atom, read_form, read_str


def round_trip(source: str) -> str:
    return "".join(emit_node(tree) for tree in read_str(source, "<test>"))


# =============================================================================
# Round Trip
# =============================================================================

MODULE_SOURCE = """\
;; A small module
(module $demo
  (import "env" "log" (func $log (param i32)))
  (global $count (mut i32) 0)   ;; counter

  (; a block
     comment ;)
  (func $main (param $a i32 $b i32) (result i32)
    (LET $sum (i32.add $a $b))
    ($log "sum computed")
    (AND $a $b))
)
"""


class TestRoundTrip:
    """Reading then rendering without evaluation is lossless."""

    @pytest.mark.parametrize("source", [
        "(x)",
        "( x )",
        "  (x)  ",
        "(a)(b)",
        "(a) (b)\n",
        "(x (a)(b) c(d))",
        "(a\t\t( b\n\n c ) )",
        '(data "a\\"b" \'c\')',
        "(f 1 -2 0x1F 1.5 $v)",
        MODULE_SOURCE,
    ])
    def test_round_trip(self, source):
        assert round_trip(source) == source

    def test_blank_input_has_no_forms(self):
        """Whitespace and comments alone produce no trees."""
        assert read_str("") == []
        assert read_str("  \n;; just a comment\n") == []

    def test_many_top_level_forms(self):
        """Long runs of forms keep their order and trivia."""
        source = ";; header\n" + "".join(
            f"(module $m{i}) ;; unit {i}\n" for i in range(2000)
        )
        trees = read_str(source)
        assert len(trees) == 2000
        assert trees[-1].words()[1] == Name("$m1999")
        assert round_trip(source) == source


# =============================================================================
# Atom Classification
# =============================================================================

class TestAtoms:
    """Bare tokens become the right node type."""

    @pytest.mark.parametrize("text,node_type", [
        ("$x", Name),
        ("$my_func", Name),
        ('"hello"', Str),
        ("'hello'", Str),
        ("42", Integer),
        ("-7", Integer),
        ("0x2A", Integer),
        ("1.5", Float),
        ("-0.25", Float),
        ("3.", Float),
        ("i32.add", Literal),
        ("f32", Literal),
        ("abc", Literal),
        ("1.2.3", Literal),
        ("AND", Literal),
    ])
    def test_classification(self, text, node_type):
        node = classify_atom(text)
        assert type(node) is node_type
        assert node.text == text

    def test_atoms_inside_list(self):
        tree = read_form("(i32.add $a 1)")
        assert tree.words() == [Literal("i32.add"), Name("$a"), Integer("1")]


# =============================================================================
# Tree Structure and Trivia
# =============================================================================

class TestStructure:
    """Shape of read trees and where trivia ends up."""

    def test_nested_lists(self):
        tree = read_form("(a (b (c)))")
        inner = tree.words()[1]
        assert isinstance(inner, List)
        assert isinstance(inner.words()[1], List)
        assert inner.words()[1].words() == [Literal("c")]

    def test_head(self):
        assert read_form("(  foo bar)").head == Literal("foo")
        assert read_form("()").head is None

    def test_interior_whitespace_children(self):
        tree = read_form("( a  b )")
        assert [type(i) for i in tree.items] == [
            Whitespace, Literal, Whitespace, Literal, Whitespace,
        ]

    def test_leading_and_trailing_trivia(self):
        tree = read_form(";; c\n(x) ;; after\n")
        assert [w.text for w in tree.leading] == [";; c", "\n"]
        assert [w.text for w in tree.trailing] == [" ", ";; after", "\n"]

    def test_nested_list_owns_following_whitespace(self):
        """Whitespace after a nested ')' becomes that list's trailing trivia."""
        tree = read_form("(a (b) c)")
        inner = tree.words()[1]
        assert [w.text for w in inner.trailing] == [" "]

    def test_adjacent_forms_get_empty_marker(self):
        """Forms with nothing between them are separated by Whitespace('')."""
        tree = read_form("(x (a)(b))")
        markers = [i for i in tree.items if isinstance(i, Whitespace) and i.text == ""]
        assert len(markers) == 1

    def test_block_comment_in_list(self):
        tree = read_form("(a (; note ;) b)")
        assert tree.words() == [Literal("a"), Literal("b")]
        assert Whitespace("(; note ;)") in tree.items

    def test_multiple_top_level_forms(self):
        trees = read_str("(module $a)\n(module $b)\n")
        assert len(trees) == 2
        assert trees[1].words()[1] == Name("$b")

    def test_locations(self):
        tree = read_form("\n  (func $f)", "main.wam")
        assert str(tree.location) == "main.wam:2:3"
        assert str(tree.words()[1].location) == "main.wam:2:9"

    def test_nth_word(self):
        tree = read_form("( a b  c )")
        assert tree.nth_word(0) == (1, Literal("a"))
        assert tree.nth_word(2) == (5, Literal("c"))
        assert tree.nth_word(-1) == (5, Literal("c"))
        assert tree.nth_word(3) == (None, None)


# =============================================================================
# Parse Errors
# =============================================================================

class TestErrors:
    """Malformed input aborts with a located error."""

    def test_stray_close(self):
        with pytest.raises(UnexpectedCloseError) as exc_info:
            read_str("(a))", "<test>")
        assert exc_info.value.location.column == 4
        assert "unexpected ')'" in str(exc_info.value)

    def test_leading_close(self):
        with pytest.raises(UnexpectedCloseError):
            read_str(")")

    def test_unterminated_list(self):
        with pytest.raises(UnexpectedEndError) as exc_info:
            read_str("(module $m\n  (func $f)", "m.wam")
        error = exc_info.value
        assert str(error.location) == "m.wam:1:1"
        assert "got end of input" in str(error)

    def test_unterminated_nested_list(self):
        with pytest.raises(UnexpectedEndError) as exc_info:
            read_str("(a\n  (b c")
        assert exc_info.value.location.line == 2

    def test_errors_are_syntax_errors(self):
        """Both parse failures share the WampSyntaxError base."""
        for source in ("(a))", "(a"):
            with pytest.raises(WampSyntaxError):
                read_str(source)

    def test_atom_at_top_level(self):
        with pytest.raises(WampSyntaxError) as exc_info:
            read_str("foo")
        assert "expected '('" in str(exc_info.value)

    def test_read_form_requires_exactly_one(self):
        with pytest.raises(WampSyntaxError):
            read_form("(a)(b)")
        with pytest.raises(WampSyntaxError):
            read_form("")

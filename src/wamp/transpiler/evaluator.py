"""
wamp Evaluator
==============

Walks a tree, expands macros and resolves the syntactic sugar of the
source dialect, producing a tree in plain target format.

Sugar
-----
| Source          | Result                                     |
|-----------------|--------------------------------------------|
| 42              | (i32.const 42)                             |
| 1.5             | (f32.const 1.5)                            |
| $x (as a value) | (get_local $x)                             |
| "text"          | (STRING "text") expansion                  |
| ($f a b)        | (call $f a' b')                            |

Form Kinds
----------
Each list is classified once by its head into a FormKind, in this order:

1. CALL        head is a $name: implicit call, every argument evaluated
2. MACRO       head names a registered macro: the handler expands it
3. HOIST       import/global/table: moved to the top of the output and
               replaced in place by a comment (a global's initializer is
               evaluated first)
4. VERBATIM    arguments are raw target syntax, left untouched
5. SKIP_NAME   the form's own $name (if any) is left alone, the rest is
               evaluated
6. LAST_ONLY   only the final word is evaluated
7. EXPRESSION  everything else: every child is evaluated

Splices returned for children are flattened into the parent list.

Example
-------
>>> from wamp.transpiler.reader import read_form
>>> from wamp.transpiler.symbols import Context
>>> evaluate(read_form("($myfun 1)"), Context())
List(Literal('call') Name('$myfun') List(Literal('i32.const') Integer('1')))
"""

from enum import Enum, auto
from typing import Optional
import logging

from wamp.errors import MacroError
from wamp.transpiler.macros import BUILTIN_MACROS, MacroRegistry, string_macro
from wamp.transpiler.nodes import (
    Float,
    Integer,
    List,
    Literal,
    Name,
    Node,
    Splice,
    Str,
    Whitespace,
    form,
)
from wamp.transpiler.symbols import HOIST_ORDER, Context


logger = logging.getLogger(__name__)


# =============================================================================
# Form Classification
# =============================================================================

class FormKind(Enum):
    """Evaluation policy of a list, decided by its head."""
    CALL = auto()
    MACRO = auto()
    HOIST = auto()
    VERBATIM = auto()
    SKIP_NAME = auto()
    LAST_ONLY = auto()
    EXPRESSION = auto()


HOIST_FORMS = frozenset(HOIST_ORDER)

VERBATIM_FORMS = frozenset({
    "memory", "import", "export", "type", "param", "local",
    "get_global", "global.get", "get_local", "local.get",
    "br", "i32.const", "i64.const", "f32.const", "f64.const",
})

SKIP_NAME_FORMS = frozenset({
    "module", "func", "memory", "call",
    "set_local", "local.set", "tee_local", "local.tee",
    "set_global", "global.set",
    "block", "loop", "br_if",
})

LAST_ONLY_FORMS = frozenset({"global", "br_table"})


def classify(node: List, macros: MacroRegistry = BUILTIN_MACROS) -> FormKind:
    """Decide how a list is evaluated."""
    head = node.head
    if isinstance(head, Name):
        return FormKind.CALL
    if not isinstance(head, Literal):
        return FormKind.EXPRESSION
    if head.text in macros:
        return FormKind.MACRO
    if head.text in HOIST_FORMS:
        return FormKind.HOIST
    if head.text in VERBATIM_FORMS:
        return FormKind.VERBATIM
    if head.text in SKIP_NAME_FORMS:
        return FormKind.SKIP_NAME
    if head.text in LAST_ONLY_FORMS:
        return FormKind.LAST_ONLY
    return FormKind.EXPRESSION


# =============================================================================
# Evaluator
# =============================================================================

class Evaluator:
    """
    Evaluates trees against a shared Context.

    Attributes:
        ctx: Run state receiving string slots and hoisted forms
        macros: Registry consulted for macro heads
        source: Source text of the tree being evaluated (for error messages)
    """

    def __init__(
        self,
        ctx: Context,
        macros: Optional[MacroRegistry] = None,
        source: str = "",
    ):
        self.ctx = ctx
        self.macros = macros if macros is not None else BUILTIN_MACROS
        self.source = source
        self.expansions = 0

    def evaluate(self, node: Node) -> Node:
        """Return the fully expanded form of node."""
        if isinstance(node, List):
            return self._evaluate_list(node)
        if isinstance(node, Str):
            return string_macro([Literal("STRING"), node], self).inherit_trivia(node)
        if isinstance(node, Integer):
            return form("i32.const", node.surround()).inherit_trivia(node)
        if isinstance(node, Float):
            return form("f32.const", node.surround()).inherit_trivia(node)
        if isinstance(node, Name):
            return form("get_local", node.surround()).inherit_trivia(node)
        return node

    # =========================================================================
    # Lists
    # =========================================================================

    def _evaluate_list(self, node: List) -> Node:
        kind = classify(node, self.macros)

        if kind is FormKind.CALL:
            idx, head = node.nth_word(0)
            items = [Literal("call"), head]
            items.extend(self._evaluate_all(node.items[idx + 1:]))
            return node.with_items(items)

        if kind is FormKind.MACRO:
            return self._expand_macro(node)

        if kind is FormKind.HOIST:
            return self._hoist(node)

        if kind is FormKind.VERBATIM:
            return node

        if kind is FormKind.SKIP_NAME:
            idx, word = node.nth_word(1)
            if isinstance(word, Name):
                idx, word = node.nth_word(2)
            if idx is None:
                return node
            return node.with_items(
                list(node.items[:idx]) + self._evaluate_all(node.items[idx:])
            )

        if kind is FormKind.LAST_ONLY:
            return self._evaluate_last(node)

        return node.with_items(self._evaluate_all(node.items))

    def _evaluate_all(self, items) -> list[Node]:
        """Evaluate each node, inlining the children of any Splice."""
        result = []
        for item in items:
            value = self.evaluate(item)
            if isinstance(value, Splice):
                result.extend(value.items)
            else:
                result.append(value)
        return result

    def _evaluate_last(self, node: List) -> List:
        idx, word = node.nth_word(-1)
        if idx is None:
            return node
        return node.with_item(idx, self.evaluate(word))

    def _expand_macro(self, node: List) -> Node:
        args = node.words()
        handler = self.macros.get(args[0].text)
        result = handler(args, self)
        self.expansions += 1

        if isinstance(result, Splice):
            return result.with_items(
                item.inherit_trivia(node) for item in result.items
            )
        return result.inherit_trivia(node)

    def _hoist(self, node: List) -> Whitespace:
        """
        Move an import/global/table form to the context's hoist buckets.

        The form is replaced by a comment carrying the original trivia.
        """
        kind = node.head.text
        if kind == "global":
            node = self._evaluate_last(node)

        label = " ".join(
            w.text for w in node.words()[:3] if not isinstance(w, List)
        )
        self.ctx.add_hoisted(
            kind,
            node.surround([Whitespace("  ")], [Whitespace("\n")]),
        )
        logger.debug(f"Hoisted {label}")

        placeholder = Whitespace(f"(; hoisted to top: {label} ;)")
        return placeholder.inherit_trivia(node)

    # =========================================================================
    # Errors
    # =========================================================================

    def macro_error(
        self,
        head: Node,
        message: str,
        node: Optional[Node] = None,
        hint: Optional[str] = None,
    ) -> MacroError:
        """Build a MacroError located at node (or the macro head)."""
        location = node.location if node is not None else None
        if location is None:
            location = head.location
        source_line = None
        if location is not None and self.source:
            lines = self.source.split("\n")
            if 0 < location.line <= len(lines):
                source_line = lines[location.line - 1]
        return MacroError(
            getattr(head, "text", "?"),
            message,
            location=location,
            hint=hint,
            source_line=source_line,
        )


# =============================================================================
# Convenience Functions
# =============================================================================

def evaluate(node: Node, ctx: Context, macros: Optional[MacroRegistry] = None) -> Node:
    """Evaluate one node against ctx with the built-in (or given) macros."""
    return Evaluator(ctx, macros).evaluate(node)

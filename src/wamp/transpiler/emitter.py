"""
wamp Emitter
============

Serializes evaluated trees back to target-format text and links all input
modules into one combined module.

Output Structure
----------------
    (module $first__second

      (import "env" "memory" (memory 256))
      (import "env" "memoryBase" (global $memoryBase i32))

      <hoisted imports>
      <hoisted globals>
      <hoisted tables>

      (global $S_STRING_0  i32 (i32.const 4))
      ...
      (global $S_STRING_END  i32 (i32.const 14))

      (data
        (get_global $memoryBase)
        "\\de\\ad\\be\\ef" ;; skip first/NULL address
        "my string\\00"               ;; 4
      )

    ;; module $first
      <body of the first module>
    ;; module $second
      <body of the second module>
    )

Rendering
---------
A node renders as its leading trivia, its own text, then its trailing
trivia. Inside a list a single space is inserted between two adjacent
non-whitespace children that have no trivia between them, which is only
ever the case for synthesized nodes. A `(module $name ...)` list is not
wrapped: its name is recorded in the Context and its children are
emitted directly, so every input body ends up inside the one combined
module.
"""

from typing import Iterable, Optional
import logging

from wamp.config import TranspilerConfig
from wamp.errors import EmitError
from wamp.transpiler.nodes import Atom, List, Name, Node, Whitespace, is_keyword
from wamp.transpiler.strings import escape_data
from wamp.transpiler.symbols import END_SYMBOL, MEMORY_BASE, SENTINEL, Context


logger = logging.getLogger(__name__)

# Column width of the quoted payload in data section lines
DATA_COLUMN_WIDTH = 29


class Emitter:
    """
    Renders trees and builds the combined module.

    Usage:
        emitter = Emitter(ctx, config)
        text = emitter.emit(trees)

    Attributes:
        ctx: Context filled by the evaluator
        config: Output options (memory size)
    """

    def __init__(self, ctx: Context, config: Optional[TranspilerConfig] = None):
        self.ctx = ctx
        self.config = config or TranspilerConfig()

    # =========================================================================
    # Node Rendering
    # =========================================================================

    def render(self, node: Node, link: bool = False) -> str:
        """
        Render a single node (with its trivia) to text.

        With link=False the text is exactly what was read; with link=True
        module lists are unwrapped and their names recorded.
        """
        out: list[str] = []
        self._render_into(node, out, link)
        return "".join(out)

    def _render_into(self, node: Node, out: list[str], link: bool) -> None:
        if not isinstance(node, Node):
            raise EmitError(f"cannot emit non-node value {node!r}")

        for trivia in node.leading:
            self._render_into(trivia, out, link)

        if isinstance(node, List):
            if link and is_keyword(node.head, "module"):
                self._render_module_body(node, out)
            else:
                self._render_list(node, out, link)
        elif isinstance(node, Atom):
            if not isinstance(node.text, str):
                raise EmitError(
                    f"{type(node).__name__} has non-string content: {node.text!r}",
                    location=node.location,
                )
            out.append(node.text)
        else:
            raise EmitError(
                f"cannot emit node of type {type(node).__name__}",
                location=node.location,
            )

        for trivia in node.trailing:
            self._render_into(trivia, out, link)

    def _render_list(self, node: List, out: list[str], link: bool) -> None:
        out.append("(")
        previous: Optional[Node] = None
        for item in node.items:
            if previous is not None and _needs_space(previous, item):
                out.append(" ")
            self._render_into(item, out, link)
            previous = item
        out.append(")")

    def _render_module_body(self, node: List, out: list[str]) -> None:
        """Emit a module's children without the enclosing '(module $name' ... ')'."""
        words = node.words()
        if len(words) > 1 and isinstance(words[1], Name):
            name = words[1].text[1:]
            self.ctx.add_module(name)
            out.append(f";; module ${name}\n")

        skipping = True
        for item in node.items:
            if skipping:
                if isinstance(item, List):
                    skipping = False
                elif is_keyword(item, "module") or isinstance(item, Name):
                    continue
            self._render_into(item, out, link=True)

    # =========================================================================
    # Whole Program
    # =========================================================================

    def emit(self, trees: Iterable[Node]) -> str:
        """
        Build the combined module from all evaluated trees.

        Module names are collected while the bodies are rendered, so the
        Context's module list is rebuilt on every call.
        """
        self.ctx.modules.clear()
        bodies = [self.render(tree, link=True) for tree in trees]
        hoisted = [self.render(node, link=True) for node in self.ctx.hoisted()]

        name = "__".join(self.ctx.modules)
        header = f"(module ${name}\n\n" if name else "(module\n\n"

        parts = [
            header,
            f'  (import "env" "memory" (memory {self.config.memory_size}))\n',
            f'  (import "env" "memoryBase" (global {MEMORY_BASE} i32))\n\n',
        ]
        parts.extend(hoisted)
        parts.append("\n")
        parts.extend(self.data_section())
        parts.append("\n")
        parts.extend(bodies)
        parts.append("\n)")

        logger.debug(
            f"Emitted {len(bodies)} module bodies, {len(hoisted)} hoisted forms, "
            f"{len(self.ctx.slots)} data slots"
        )
        return "".join(parts)

    def data_section(self) -> list[str]:
        """Symbol globals for every slot followed by one data blob."""
        layout = self.ctx.layout()
        lines = []

        for entry in layout.entries:
            lines.append(
                f"  (global {entry.slot.name}  i32 (i32.const {entry.offset}))\n"
            )
        # Terminator so the program knows how much memory was taken
        lines.append(f"  (global {END_SYMBOL}  i32 (i32.const {layout.end}))\n\n")

        lines.append(f"  (data\n    (get_global {MEMORY_BASE})\n")
        lines.append(f'    "{escape_data(SENTINEL)}" ;; skip first/NULL address\n')
        for entry in layout.entries:
            quoted = '"' + (escape_data(entry.slot.data) + '\\00"').ljust(DATA_COLUMN_WIDTH)
            lines.append(f"    {quoted} ;; {entry.offset}\n")
        lines.append("  )\n\n")
        return lines


def _needs_space(previous: Node, item: Node) -> bool:
    """True if two adjacent list children would otherwise run together."""
    if not isinstance(item, Node) or not isinstance(previous, Node):
        return False
    if isinstance(previous, Whitespace) or isinstance(item, Whitespace):
        return False
    return not previous.trailing and not item.leading


# =============================================================================
# Convenience Functions
# =============================================================================

def emit_node(node: Node) -> str:
    """Render one node exactly, without module linking."""
    return Emitter(Context()).render(node)


def emit_module(
    trees: Iterable[Node],
    ctx: Context,
    config: Optional[TranspilerConfig] = None,
) -> str:
    """Build the combined module text for trees evaluated against ctx."""
    return Emitter(ctx, config).emit(trees)

"""
wamp Transpiler - Main Interface
================================

This module provides the Transpiler class, the primary interface for
turning wamp source into plain target-format text. It coordinates the
reader, evaluator and emitter around one shared Context.

Example Usage
-------------
>>> from wamp.transpiler import Transpiler
>>>
>>> t = Transpiler()
>>> t.add_source('''
... (module $hello
...   (func $main (result i32)
...     (LET $n 41)
...     (i32.add $n 1)))
... ''', "hello.wam")
>>> text = t.emit()
>>> t.write("hello.wat")

Command-Line Usage
------------------
    $ wamp lib.wam main.wam -o program.wat

Options:
    -o, --output FILE       Output file (default: stdout)
    -m, --memory-size N     Pages in the imported memory (default: 256)
    -s, --symbols FILE      Write the static data layout
    -v, --verbose           Verbose output
"""

from pathlib import Path
from typing import Iterable, Optional
import logging

from wamp.config import TranspilerConfig
from wamp.transpiler.emitter import Emitter
from wamp.transpiler.evaluator import Evaluator
from wamp.transpiler.macros import MacroRegistry
from wamp.transpiler.nodes import Node
from wamp.transpiler.reader import read_str
from wamp.transpiler.symbols import END_SYMBOL, Context, Layout


logger = logging.getLogger(__name__)


class Transpiler:
    """
    Main wamp transpiler class.

    Input units are added one at a time, in the order they should be
    merged. Each unit is read and evaluated immediately against the shared
    Context; emit() then links everything into one module.

    Any error aborts the run: the exception propagates and no output is
    produced.

    Attributes:
        config: Output options
        verbose: If True, log progress at INFO level
    """

    def __init__(
        self,
        config: Optional[TranspilerConfig] = None,
        verbose: bool = False,
        macros: Optional[MacroRegistry] = None,
    ):
        """
        Initialize the transpiler.

        Args:
            config: Output options (default: TranspilerConfig())
            verbose: Log a line per input unit and a summary
            macros: Macro registry to use instead of the built-in one
        """
        self.config = config or TranspilerConfig()
        self.verbose = verbose
        self._macros = macros
        self._ctx = Context()
        self._trees: list[Node] = []
        self._sources: list[str] = []

    @property
    def context(self) -> Context:
        """The Context shared by every unit of this run."""
        return self._ctx

    @property
    def trees(self) -> list[Node]:
        """Evaluated trees, in input order."""
        return list(self._trees)

    # =========================================================================
    # Input
    # =========================================================================

    def add_source(self, source: str, filename: str = "<input>") -> list[Node]:
        """
        Read and evaluate one input unit.

        Args:
            source: Source text
            filename: Name used in error messages

        Returns:
            The evaluated top-level trees of this unit

        Raises:
            WampSyntaxError: If the source cannot be read
            MacroError: If a macro invocation is malformed
        """
        trees = read_str(source, filename)
        evaluator = Evaluator(self._ctx, self._macros, source=source)
        evaluated = [evaluator.evaluate(tree) for tree in trees]

        self._trees.extend(evaluated)
        self._sources.append(filename)
        self._log(
            f"{filename}: {len(trees)} forms, {evaluator.expansions} macro expansions"
        )
        return evaluated

    def add_file(self, path: str | Path) -> list[Node]:
        """Read a UTF-8 source file and add it as one input unit."""
        path = Path(path)
        return self.add_source(path.read_text(encoding="utf-8"), str(path))

    # =========================================================================
    # Output
    # =========================================================================

    def emit(self) -> str:
        """Return the combined module for everything added so far."""
        text = Emitter(self._ctx, self.config).emit(self._trees)
        self._log(
            f"Linked {len(self._ctx.modules)} modules from {len(self._sources)} inputs, "
            f"{self.get_layout().end} bytes of static data"
        )
        return text

    def write(self, path: str | Path) -> None:
        """Write the combined module to path."""
        Path(path).write_text(self.emit(), encoding="utf-8")

    def get_layout(self) -> Layout:
        """Return the static data layout."""
        return self._ctx.layout()

    def get_symbols(self) -> dict[str, int]:
        """Map each generated data symbol (and $S_STRING_END) to its offset."""
        layout = self.get_layout()
        symbols = {entry.slot.name: entry.offset for entry in layout.entries}
        symbols[END_SYMBOL] = layout.end
        return symbols

    def format_symbols(self) -> str:
        """Format the static data layout as a text listing."""
        layout = self.get_layout()
        lines = [
            "; wamp static data layout",
            f"; {len(layout.entries)} slots, {layout.end} bytes",
            ";",
            f"; {'Symbol':<24} {'Offset':>8} {'Size':>8}  Kind",
        ]
        for entry in layout.entries:
            kind = "array" if entry.slot.is_array else "string"
            lines.append(
                f"  {entry.slot.name:<24} {entry.offset:>8} {entry.slot.size:>8}  {kind}"
            )
        lines.append(f"  {END_SYMBOL:<24} {layout.end:>8}")
        return "\n".join(lines) + "\n"

    def write_symbols(self, path: str | Path) -> None:
        """Write the static data layout listing to path."""
        Path(path).write_text(self.format_symbols(), encoding="utf-8")

    def _log(self, message: str) -> None:
        if self.verbose:
            logger.info(message)
        else:
            logger.debug(message)


# =============================================================================
# Convenience Functions
# =============================================================================

def transpile(
    sources: Iterable[str],
    config: Optional[TranspilerConfig] = None,
) -> str:
    """
    Transpile source texts into one combined module.

    Args:
        sources: Source texts, in merge order
        config: Output options

    Returns:
        Target-format text
    """
    transpiler = Transpiler(config)
    for index, source in enumerate(sources):
        transpiler.add_source(source, f"<input{index}>")
    return transpiler.emit()


def transpile_files(
    paths: Iterable[str | Path],
    config: Optional[TranspilerConfig] = None,
) -> str:
    """Transpile source files, in merge order, into one combined module."""
    transpiler = Transpiler(config)
    for path in paths:
        transpiler.add_file(path)
    return transpiler.emit()

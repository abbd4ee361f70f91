"""
wamp - Macro-expanding WebAssembly Text Transpiler
==================================================

wamp reads a friendlier dialect of the WebAssembly text format and writes
plain text format that downstream assemblers (wasm-as, wat2wasm) accept.

The source dialect adds:
- **Sugar**: bare numbers, $names and strings in value positions, and
  `($f args...)` as shorthand for `(call $f args...)`
- **Macros**: AND/OR (short-circuit), CHR, STRING, STATIC_ARRAY, LET
- **Static data**: string constants are deduplicated and laid out in one
  data section, with a global per slot holding its offset
- **Hoisting**: import/global/table declarations move to the top
- **Linking**: several modules merge into one combined module

Quick Start
-----------
    >>> from wamp import Transpiler
    >>> t = Transpiler()
    >>> t.add_file("main.wam")
    >>> t.write("main.wat")

Or from the command line:
    $ wamp main.wam -o main.wat
"""

__version__ = "1.0.0"

# =============================================================================
# Public API Exports
# =============================================================================

from wamp.config import TranspilerConfig
from wamp.errors import (
    WampError,
    SourceLocation,
    TranspilerError,
    WampSyntaxError,
    UnexpectedCloseError,
    UnexpectedEndError,
    MacroError,
    EmitError,
    ConfigError,
)
from wamp.transpiler import (
    Context,
    Transpiler,
    transpile,
    transpile_files,
)

__all__ = [
    "__version__",
    "TranspilerConfig",
    "Transpiler",
    "Context",
    "transpile",
    "transpile_files",
    "WampError",
    "SourceLocation",
    "TranspilerError",
    "WampSyntaxError",
    "UnexpectedCloseError",
    "UnexpectedEndError",
    "MacroError",
    "EmitError",
    "ConfigError",
]

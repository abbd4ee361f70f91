"""
wamp Transpiler
===============

This package turns wamp source, a sugared superset of the WebAssembly text
format, into plain text format that standard assemblers accept.

Main Components
---------------
- **Lexer**: Splits source text into fragments, keeping whitespace and comments
- **Reader**: Builds trees of nodes with the formatting attached as trivia
- **Evaluator**: Expands macros and resolves sugar
- **Context**: Run state: static data slots, hoisted declarations, module names
- **Emitter**: Renders trees and links all modules into one
- **Transpiler**: High-level interface driving the whole pipeline

Pipeline
--------
1. **Reading (Lexer + Reader)**: each input unit becomes a list of trees.
2. **Evaluation (Evaluator)**: each tree is rewritten, filling the Context
   with string/array slots and hoisted import/global/table forms.
3. **Emission (Emitter)**: after every unit is evaluated, the module header,
   memory imports, hoisted forms, data section and module bodies are
   written out as one module.

Example Usage
-------------
>>> from wamp.transpiler import transpile
>>> print(transpile(['(module $m (func $f (result i32) (CHR "A")))']))
"""

from wamp.transpiler.lexer import Lexer, Token, TokenType, tokenize
from wamp.transpiler.nodes import (
    Atom,
    Float,
    Integer,
    List,
    Literal,
    Name,
    Node,
    Splice,
    Str,
    Whitespace,
)
from wamp.transpiler.reader import Reader, read_form, read_str
from wamp.transpiler.symbols import Context, Layout, LayoutEntry, Slot
from wamp.transpiler.macros import BUILTIN_MACROS, MacroRegistry
from wamp.transpiler.evaluator import Evaluator, FormKind, classify, evaluate
from wamp.transpiler.emitter import Emitter, emit_module, emit_node
from wamp.transpiler.transpiler import Transpiler, transpile, transpile_files

__all__ = [
    "Lexer",
    "Token",
    "TokenType",
    "tokenize",
    "Atom",
    "Float",
    "Integer",
    "List",
    "Literal",
    "Name",
    "Node",
    "Splice",
    "Str",
    "Whitespace",
    "Reader",
    "read_form",
    "read_str",
    "Context",
    "Layout",
    "LayoutEntry",
    "Slot",
    "BUILTIN_MACROS",
    "MacroRegistry",
    "Evaluator",
    "FormKind",
    "classify",
    "evaluate",
    "Emitter",
    "emit_module",
    "emit_node",
    "Transpiler",
    "transpile",
    "transpile_files",
]

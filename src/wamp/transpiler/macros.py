"""
wamp Built-in Macros
====================

A macro is a named form whose head is a bare word, e.g. `(AND $a $b)`.
When the evaluator meets one it calls the registered handler with the
form's words (index 0 is the macro name itself) and the evaluator. The
handler returns a replacement node, or a Splice whose children are
inlined into the parent form.

Built-in Macros
---------------
| Macro               | Expands to                                        |
|---------------------|---------------------------------------------------|
| (AND c1 ... cn)     | nested `if`s yielding 1 only if every ci != 0     |
| (OR c1 ... cn)      | nested `if`s yielding 1 if any ci != 0            |
| (CHR "A")           | (i32.const 0x41 (; "A" ;))                        |
| (STRING "text")     | address of a deduplicated static string           |
| (STATIC_ARRAY n)    | address of a fresh zero-filled n byte array       |
| (LET $a 1 $b 2)     | local declarations followed by set_local forms    |
| (param $a i32 ...)  | one param form per name/type pair                 |
| (local $a i32 ...)  | one local form per name/type pair                 |

AND and OR short-circuit: each later condition is nested inside the
`then` (AND) or `else` (OR) branch of the previous one, so it is never
evaluated once the result is known.

Extending
---------
Handlers are plain functions registered on a MacroRegistry:

    registry = BUILTIN_MACROS.copy()

    @registry.register("NOT")
    def not_macro(args, evaluator):
        ...

    Evaluator(ctx, macros=registry)
"""

from typing import TYPE_CHECKING, Callable, Iterable, Optional

from wamp.transpiler.nodes import (
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
from wamp.transpiler.strings import decode_char, decode_string
from wamp.transpiler.symbols import MEMORY_BASE

if TYPE_CHECKING:
    from wamp.transpiler.evaluator import Evaluator


MacroHandler = Callable[[list[Node], "Evaluator"], Node]


# =============================================================================
# Registry
# =============================================================================

class MacroRegistry:
    """
    Maps macro names to their handlers.

    Built once at import time for the built-in macros; copy it to add
    project-specific macros without affecting other runs.
    """

    def __init__(self, handlers: Optional[dict[str, MacroHandler]] = None):
        self._handlers: dict[str, MacroHandler] = dict(handlers or {})

    def register(self, *names: str) -> Callable[[MacroHandler], MacroHandler]:
        """Decorator registering a handler under one or more names."""
        def decorator(handler: MacroHandler) -> MacroHandler:
            for name in names:
                self._handlers[name] = handler
            return handler
        return decorator

    def get(self, name: str) -> Optional[MacroHandler]:
        return self._handlers.get(name)

    def __contains__(self, name: object) -> bool:
        return name in self._handlers

    def names(self) -> list[str]:
        return sorted(self._handlers)

    def copy(self) -> "MacroRegistry":
        return MacroRegistry(self._handlers)


BUILTIN_MACROS = MacroRegistry()


# =============================================================================
# Helpers
# =============================================================================

def address_of(symbol: str) -> List:
    """Expression computing the runtime address of a static data slot."""
    return form(
        "i32.add",
        form("get_global", Name(MEMORY_BASE)),
        form("get_global", Name(symbol)),
    )


def parse_integer(text: str) -> int:
    """Parse an Integer atom's text (decimal or 0x hex, optional '-')."""
    sign = -1 if text.startswith("-") else 1
    digits = text.lstrip("-")
    if digits[:2].lower() == "0x":
        return sign * int(digits[2:], 16)
    return sign * int(digits, 10)


def _expect_count(
    args: list[Node], evaluator: "Evaluator", count: int, usage: str
) -> None:
    if len(args) - 1 != count:
        plural = "argument" if count == 1 else "arguments"
        raise evaluator.macro_error(
            args[0],
            f"takes {count} {plural}, got {len(args) - 1}",
            hint=f"usage: {usage}",
        )


def _expect_pairs(args: list[Node], evaluator: "Evaluator", usage: str) -> None:
    count = len(args) - 1
    if count < 2:
        raise evaluator.macro_error(
            args[0], f"takes at least 2 arguments, got {count}", hint=f"usage: {usage}"
        )
    if count % 2:
        raise evaluator.macro_error(
            args[0], f"takes an even number of arguments, got {count}", hint=f"usage: {usage}"
        )


def _pairs(args: list[Node]) -> Iterable[tuple[Node, Node]]:
    return zip(args[1::2], args[2::2])


def _string_argument(args: list[Node], evaluator: "Evaluator") -> bytes:
    arg = args[1]
    if not isinstance(arg, Str):
        raise evaluator.macro_error(
            args[0], f"expects a string literal, got {arg!r}", node=arg
        )
    return decode_string(arg.text, arg.location)


# =============================================================================
# Short-circuit Logic
# =============================================================================

@BUILTIN_MACROS.register("AND")
def and_macro(args: list[Node], evaluator: "Evaluator") -> Node:
    """
    (AND c1 c2 ... cn) => 1 if every condition is non-zero, else 0.

    Folded from the last condition backwards:
        (if (result i32) c1 (if (result i32) c2 (i32.const 1) (i32.const 0)) (i32.const 0))
    """
    if len(args) < 2:
        raise evaluator.macro_error(
            args[0], "takes at least 1 argument", hint="usage: (AND cond ...)"
        )
    result: Node = form("i32.const", Integer("1"))
    for arg in reversed(args[1:]):
        condition = evaluator.evaluate(arg)
        result = form(
            "if", form("result", "i32"), condition,
            result,
            form("i32.const", Integer("0")),
        )
    return result


@BUILTIN_MACROS.register("OR")
def or_macro(args: list[Node], evaluator: "Evaluator") -> Node:
    """(OR c1 c2 ... cn) => 1 if any condition is non-zero, else 0."""
    if len(args) < 2:
        raise evaluator.macro_error(
            args[0], "takes at least 1 argument", hint="usage: (OR cond ...)"
        )
    result: Node = form("i32.const", Integer("0"))
    for arg in reversed(args[1:]):
        condition = evaluator.evaluate(arg)
        result = form(
            "if", form("result", "i32"), condition,
            form("i32.const", Integer("1")),
            result,
        )
    return result


# =============================================================================
# Constants and Static Data
# =============================================================================

@BUILTIN_MACROS.register("CHR")
def chr_macro(args: list[Node], evaluator: "Evaluator") -> Node:
    """(CHR "A") => (i32.const 0x41 (; "A" ;))"""
    _expect_count(args, evaluator, 1, '(CHR "c")')
    code = decode_char(_string_argument(args, evaluator))
    if code is None:
        raise evaluator.macro_error(
            args[0],
            f"expects a 1 character string, got {args[1].text}",
            node=args[1],
        )
    return List((
        Literal("i32.const"),
        Whitespace(" "),
        Integer(f"0x{code:x}"),
        Whitespace(" "),
        Whitespace(f"(; {args[1].text} ;)"),
    ))


@BUILTIN_MACROS.register("STRING")
def string_macro(args: list[Node], evaluator: "Evaluator") -> Node:
    """
    (STRING "text") => address of the static copy of "text".

    Equal strings share a single slot however often they occur.
    """
    _expect_count(args, evaluator, 1, '(STRING "text")')
    value = _string_argument(args, evaluator)
    return address_of(evaluator.ctx.intern_string(value))


@BUILTIN_MACROS.register("STATIC_ARRAY")
def static_array_macro(args: list[Node], evaluator: "Evaluator") -> Node:
    """
    (STATIC_ARRAY n) => address of a new zero-filled n byte array.

    Every call allocates its own slot; arrays are never shared.
    """
    if len(args) == 3:
        raise evaluator.macro_error(
            args[0],
            "alignment argument is not supported",
            node=args[2],
            hint="usage: (STATIC_ARRAY length)",
        )
    _expect_count(args, evaluator, 1, "(STATIC_ARRAY length)")
    arg = args[1]
    if not isinstance(arg, Integer):
        raise evaluator.macro_error(
            args[0], f"length must be an integer literal, got {arg!r}", node=arg
        )
    length = parse_integer(arg.text)
    if length < 0:
        raise evaluator.macro_error(
            args[0], f"length must not be negative, got {length}", node=arg
        )
    return address_of(evaluator.ctx.allocate_array(length))


# =============================================================================
# Declarations
# =============================================================================

@BUILTIN_MACROS.register("LET")
def let_macro(args: list[Node], evaluator: "Evaluator") -> Node:
    """
    (LET $a 1 $b (i32.add $a 1)) =>
        (local $a i32) (local $b i32)
        (set_local $a (i32.const 1)) (set_local $b (i32.add (get_local $a) (i32.const 1)))

    Returns a Splice so it can stand wherever a statement sequence can.
    """
    _expect_pairs(args, evaluator, "(LET $name value ...)")
    locals_, sets = [], []
    for name, init in _pairs(args):
        if not isinstance(name, Name):
            raise evaluator.macro_error(
                args[0], f"expected a $name, got {name!r}", node=name
            )
        value = evaluator.evaluate(init).surround()
        locals_.append(form("local", name.surround(), "i32"))
        sets.append(form("set_local", name.surround(), value))
    return Splice(tuple(locals_ + sets))


@BUILTIN_MACROS.register("param", "local")
def param_local_macro(args: list[Node], evaluator: "Evaluator") -> Node:
    """
    (param $a i32 $b i32) => (param $a i32) (param $b i32)

    Not every assembler accepts several named declarations in one form.
    """
    kind = args[0].text
    _expect_pairs(args, evaluator, f"({kind} $name type ...)")
    return Splice(tuple(form(kind, name, type_) for name, type_ in _pairs(args)))

"""
wamp Symbol and Data Table
==========================

The Context is the single piece of mutable state shared by one transpiler
run. The evaluator fills it while it walks the trees; the emitter reads it
afterwards to build the module header, the hoisted declarations and the
static data section.

It holds:
- **slots**: string constants and zero-filled static arrays, in allocation
  order, each with a generated symbol name
- **string_map**: decoded string value -> symbol, so equal strings share
  one slot (arrays are never shared)
- **hoist**: declarations moved to the top of the output, bucketed by kind
- **modules**: names of the merged modules, in encounter order

Data Layout
-----------
The first four bytes of static data hold a fixed non-zero sentinel so that
address 0 never names a valid slot. Slots follow in table order; each
takes its payload length plus one zero terminator byte:

    offset 0   DE AD BE EF          sentinel
    offset 4   "my string" 00       $S_STRING_0   (10 bytes)
    offset 14  00 00 00 00 00       $S_STATIC_ARRAY_1 (4 + 1 bytes)
    offset 19                       $S_STRING_END

$S_STRING_END records how many bytes the data section occupies and can
be used as the start of a bump allocator.
"""

from dataclasses import dataclass, field
from typing import Union
import logging

from wamp.transpiler.nodes import List


logger = logging.getLogger(__name__)


# =============================================================================
# Constants
# =============================================================================

# Bytes reserved at the start of static data (never handed out)
SENTINEL = bytes([0xDE, 0xAD, 0xBE, 0xEF])
DATA_START = len(SENTINEL)

# Generated symbol names
STRING_PREFIX = "$S_STRING_"
ARRAY_PREFIX = "$S_STATIC_ARRAY_"
END_SYMBOL = "$S_STRING_END"
MEMORY_BASE = "$memoryBase"

# Hoisted declaration kinds, in emission order
HOIST_ORDER = ("import", "global", "table")


# =============================================================================
# Slots
# =============================================================================

@dataclass(frozen=True)
class Slot:
    """
    One entry of the static data table.

    Attributes:
        name: Generated symbol name ($S_STRING_n / $S_STATIC_ARRAY_n)
        payload: String bytes, or the length of a zero-filled array
    """
    name: str
    payload: Union[bytes, int]

    @property
    def is_array(self) -> bool:
        return isinstance(self.payload, int)

    @property
    def data(self) -> bytes:
        """Payload bytes, without the terminator."""
        if self.is_array:
            return bytes(self.payload)
        return self.payload

    @property
    def size(self) -> int:
        """Bytes occupied in the data section, terminator included."""
        return len(self.data) + 1


@dataclass(frozen=True)
class LayoutEntry:
    """A slot placed at its byte offset."""
    slot: Slot
    offset: int


@dataclass(frozen=True)
class Layout:
    """
    Computed data section layout.

    Attributes:
        entries: Slots in table order with their offsets
        end: Total bytes used, sentinel included (value of $S_STRING_END)
    """
    entries: tuple[LayoutEntry, ...]
    end: int

    def offset_of(self, name: str) -> int:
        """
        Look up the offset of a slot by symbol name.

        Raises:
            KeyError: If no slot has that name
        """
        for entry in self.entries:
            if entry.slot.name == name:
                return entry.offset
        if name == END_SYMBOL:
            return self.end
        raise KeyError(name)


# =============================================================================
# Context
# =============================================================================

@dataclass
class Context:
    """
    Shared, mutable state of one transpiler run.

    Create one per run and pass it explicitly to the evaluator and the
    emitter; nothing is kept in module globals, so independent runs never
    interfere.
    """

    slots: list[Slot] = field(default_factory=list)
    string_map: dict[bytes, str] = field(default_factory=dict)
    hoist: dict[str, list[List]] = field(default_factory=dict)
    modules: list[str] = field(default_factory=list)

    # =========================================================================
    # Allocation
    # =========================================================================

    def intern_string(self, value: bytes) -> str:
        """
        Return the symbol for a string constant, allocating on first use.

        Equal byte strings always map to the same symbol.
        """
        existing = self.string_map.get(value)
        if existing is not None:
            logger.debug(f"Reusing {existing} for {value!r}")
            return existing

        name = f"{STRING_PREFIX}{len(self.slots)}"
        self.slots.append(Slot(name, value))
        self.string_map[value] = name
        logger.debug(f"Allocated {name} ({len(value)} bytes)")
        return name

    def allocate_array(self, length: int) -> str:
        """Allocate a fresh zero-filled slot of length bytes."""
        if length < 0:
            raise ValueError(f"array length must not be negative, got {length}")
        name = f"{ARRAY_PREFIX}{len(self.slots)}"
        self.slots.append(Slot(name, length))
        logger.debug(f"Allocated {name} ({length} bytes)")
        return name

    def add_hoisted(self, kind: str, node: List) -> None:
        """Append a declaration to the bucket for its kind."""
        if kind not in HOIST_ORDER:
            raise ValueError(f"cannot hoist '{kind}' declarations")
        self.hoist.setdefault(kind, []).append(node)

    def hoisted(self) -> list[List]:
        """All hoisted declarations: imports, then globals, then tables."""
        result = []
        for kind in HOIST_ORDER:
            result.extend(self.hoist.get(kind, ()))
        return result

    def add_module(self, name: str) -> None:
        self.modules.append(name)

    # =========================================================================
    # Layout
    # =========================================================================

    def layout(self) -> Layout:
        """Assign every slot its byte offset."""
        entries = []
        offset = DATA_START
        for slot in self.slots:
            entries.append(LayoutEntry(slot, offset))
            offset += slot.size
        return Layout(tuple(entries), offset)

    @property
    def strings(self) -> list[tuple[str, Union[bytes, int]]]:
        """Slots as (name, payload) pairs."""
        return [(slot.name, slot.payload) for slot in self.slots]

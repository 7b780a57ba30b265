"""
Cell Reader.

Spreadsheet cells store their text in one of three ways:
- a reference into the workbook's shared-string table
- an inline string written directly in the cell
- a literal value (numbers, booleans, error tokens, cached formula text)

The rest of the project never looks at these representations: it calls
read_cell() and gets back trimmed text (or None).
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional, Sequence


class CellKind(Enum):
    SHARED = "shared"
    INLINE = "inline"
    LITERAL = "literal"


@dataclass(frozen=True)
class Cell:
    """
    One stored cell.

    value holds the shared-string index for SHARED cells, the text for
    INLINE cells and the raw stored value for LITERAL cells.
    """

    kind: CellKind
    value: str


@dataclass(frozen=True)
class SharedString:
    """
    One entry of the shared-string table.

    Rich-text strings are split into style runs; fragments keeps the text of
    every run so the full string can be reassembled.
    """

    text: Optional[str] = None
    fragments: List[str] = field(default_factory=list)

    def resolve(self) -> Optional[str]:
        if self.text is not None:
            return self.text
        if self.fragments:
            return "".join(self.fragments)
        return None


def _lookup_shared(value: str, shared_strings: Sequence[SharedString]) -> Optional[str]:
    try:
        idx = int(value)
    except ValueError:
        return None
    if not 0 <= idx < len(shared_strings):
        return None
    return shared_strings[idx].resolve()


def read_cell(
    cells: Sequence[Optional[Cell]],
    index: Optional[int],
    shared_strings: Sequence[SharedString],
) -> Optional[str]:
    """
    Return the trimmed text of the cell at a zero-based column index.

    Precedence:
    1. shared-string text (plain, or the reassembled rich-text runs)
    2. inline string text
    3. the raw value as stored (also used when a shared lookup fails)

    Returns None if the index is out of range or the slot is empty.
    """
    if index is None or index < 0 or index >= len(cells):
        return None

    cell = cells[index]
    if cell is None:
        return None

    if cell.kind is CellKind.SHARED:
        text = _lookup_shared(cell.value, shared_strings)
        if text is not None:
            return text.strip()

    # INLINE and LITERAL cells both keep their text in value
    return cell.value.strip()

"""
Workbook loading (XLSX bytes -> worksheets + shared strings).

- Opens the XLSX zip container in memory
- Reads the sheet list, the shared-string table and every worksheet
- Keeps each cell in its stored representation (see horaires.cells)

The markup is parsed with BeautifulSoup ("xml" features), so the rest of the
project only deals with Workbook / Worksheet / Row objects.
"""

from __future__ import annotations

import io
import posixpath
import re
import zipfile
from dataclasses import dataclass, field
from typing import Dict, List, Optional

from bs4 import BeautifulSoup, Tag

from horaires.cells import Cell, CellKind, SharedString


WORKBOOK_PATH = "xl/workbook.xml"
WORKBOOK_RELS_PATH = "xl/_rels/workbook.xml.rels"
SHARED_STRINGS_PATH = "xl/sharedStrings.xml"

SCHEDULE_SHEET_NEEDLES = ("horaire",)
MENU_SHEET_NEEDLES = ("menu", "déroulant", "deroulant")

_CELL_REF_RE = re.compile(r"^([A-Za-z]+)(\d*)$")


class WorkbookError(ValueError):
    """Raised when the bytes are not a readable XLSX container."""


@dataclass
class Row:
    cells: List[Optional[Cell]] = field(default_factory=list)


@dataclass
class Worksheet:
    name: str
    rows: List[Row] = field(default_factory=list)

    @property
    def width(self) -> int:
        """Number of columns of the widest row."""
        return max((len(r.cells) for r in self.rows), default=0)


@dataclass
class Workbook:
    sheets: List[Worksheet]
    shared_strings: List[SharedString]

    def sheet_containing(self, *needles: str) -> Optional[Worksheet]:
        """
        Return the first sheet whose lowercased name contains one of the needles.
        """
        for sheet in self.sheets:
            name = sheet.name.lower()
            if any(n in name for n in needles):
                return sheet
        return None

    def schedule_sheet(self) -> Optional[Worksheet]:
        """
        The timetable sheet ("horaire"), falling back to the first sheet.
        """
        sheet = self.sheet_containing(*SCHEDULE_SHEET_NEEDLES)
        if sheet is None and self.sheets:
            return self.sheets[0]
        return sheet

    def menu_sheet(self) -> Optional[Worksheet]:
        return self.sheet_containing(*MENU_SHEET_NEEDLES)


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def column_index(ref: str) -> Optional[int]:
    """
    Convert a cell reference ('C7', 'AA1' or just 'C') to a zero-based column index.
    """
    m = _CELL_REF_RE.match(ref.strip())
    if not m:
        return None
    idx = 0
    for ch in m.group(1).upper():
        idx = idx * 26 + (ord(ch) - ord("A") + 1)
    return idx - 1


def _soup(archive: zipfile.ZipFile, path: str) -> BeautifulSoup:
    return BeautifulSoup(archive.read(path), "xml")


def _text_runs(tag: Tag) -> List[str]:
    """
    Text of the <t> elements belonging to a string item.

    Phonetic hints (<rPh>) also contain <t> elements and are skipped.
    """
    runs = tag.find_all("r", recursive=False)
    if runs:
        out: List[str] = []
        for run in runs:
            t = run.find("t")
            if t is not None:
                out.append(t.get_text())
        return out
    return [t.get_text() for t in tag.find_all("t", recursive=False)]


def _relationship_id(sheet: Tag) -> Optional[str]:
    # the prefix of the relationships namespace is not fixed, only the local name
    for key, value in sheet.attrs.items():
        if key == "r:id" or key.endswith(":id"):
            return value
    return None


def _read_shared_strings(archive: zipfile.ZipFile) -> List[SharedString]:
    if SHARED_STRINGS_PATH not in archive.namelist():
        return []

    soup = _soup(archive, SHARED_STRINGS_PATH)
    out: List[SharedString] = []
    for si in soup.find_all("si"):
        runs = si.find_all("r", recursive=False)
        if runs:
            out.append(SharedString(fragments=_text_runs(si)))
        else:
            t = si.find("t", recursive=False)
            out.append(SharedString(text=t.get_text() if t is not None else None))
    return out


def _read_sheet_paths(archive: zipfile.ZipFile) -> Dict[str, str]:
    """
    Map relationship ids to worksheet paths inside the zip.
    """
    if WORKBOOK_RELS_PATH not in archive.namelist():
        return {}

    soup = _soup(archive, WORKBOOK_RELS_PATH)
    paths: Dict[str, str] = {}
    for rel in soup.find_all("Relationship"):
        rel_id = rel.get("Id")
        target = rel.get("Target")
        if not rel_id or not target:
            continue
        if target.startswith("/"):
            paths[rel_id] = target.lstrip("/")
        else:
            paths[rel_id] = posixpath.normpath(posixpath.join("xl", target))
    return paths


def _parse_cell(c: Tag) -> Optional[Cell]:
    cell_type = c.get("t", "n")

    if cell_type == "inlineStr":
        inline = c.find("is")
        if inline is None:
            return None
        return Cell(CellKind.INLINE, "".join(_text_runs(inline)))

    v = c.find("v")
    if v is None:
        # style-only cell
        return None

    kind = CellKind.SHARED if cell_type == "s" else CellKind.LITERAL
    return Cell(kind, v.get_text())


def _parse_rows(soup: BeautifulSoup) -> List[Row]:
    rows: List[Row] = []
    for r in soup.find_all("row"):
        cells: List[Optional[Cell]] = []
        for c in r.find_all("c", recursive=False):
            idx = column_index(c.get("r", "")) if c.get("r") else None
            if idx is None:
                idx = len(cells)

            # sparse rows: pad so each cell lands on its own column
            while len(cells) <= idx:
                cells.append(None)
            cells[idx] = _parse_cell(c)

        rows.append(Row(cells=cells))
    return rows


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def open_workbook(data: bytes) -> Workbook:
    """
    Parse XLSX bytes into a Workbook.

    Raises WorkbookError if the bytes are not an XLSX container or a
    referenced part is missing.
    """
    try:
        archive = zipfile.ZipFile(io.BytesIO(data))
    except (zipfile.BadZipFile, TypeError) as e:
        raise WorkbookError(f"Not a spreadsheet container: {e}") from e

    with archive:
        if WORKBOOK_PATH not in archive.namelist():
            raise WorkbookError(f"Missing {WORKBOOK_PATH}")

        shared_strings = _read_shared_strings(archive)
        sheet_paths = _read_sheet_paths(archive)

        sheets: List[Worksheet] = []
        workbook_soup = _soup(archive, WORKBOOK_PATH)
        for position, sheet in enumerate(workbook_soup.find_all("sheet"), start=1):
            name = sheet.get("name", "")
            rel_id = _relationship_id(sheet)
            path = sheet_paths.get(rel_id or "", f"xl/worksheets/sheet{position}.xml")

            try:
                sheet_soup = _soup(archive, path)
            except KeyError as e:
                raise WorkbookError(f"Missing worksheet part {path!r} for sheet {name!r}") from e

            sheets.append(Worksheet(name=name, rows=_parse_rows(sheet_soup)))

    return Workbook(sheets=sheets, shared_strings=shared_strings)

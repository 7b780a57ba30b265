"""
Column role resolution.

Header wording and column order drift between publications, so columns are
found in two explicit stages:

1. label scan: the first three rows are searched for each role's labels
   (exact match first, then containment), the most header-like row first
2. fallback table: a fixed position per file type, used only when the
   worksheet is wide enough to have that column

One role is special: the cursus column of course files has no header at all
and sits immediately left of the "option" column.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Dict, List, Optional, Sequence, Tuple

from horaires.cells import SharedString, read_cell
from horaires.model import FileType
from horaires.workbook import Row


HEADER_SCAN_ROWS = 3


class Role(Enum):
    DATE = "date"
    ARRIVAL = "arrival"
    START = "start"
    END = "end"
    PERIOD_COUNT = "period_count"
    TITLE = "title"
    CONTENT = "content"
    CURSUS = "cursus"
    COHORT = "cohort"
    MODALITY = "modality"
    OPTION = "option"
    ANONYMIZATION = "anonymization"
    ROOM = "room"
    INSTRUCTOR = "instructor"


class Resolution(Enum):
    LABEL = "label"
    FALLBACK = "fallback"
    INFERRED = "inferred"
    UNRESOLVED = "unresolved"


# Labels are lowercase; more specific labels come first
COURSE_LABELS: Dict[Role, Tuple[str, ...]] = {
    Role.DATE: ("date",),
    Role.START: ("heure de début", "heure début", "début", "debut"),
    Role.END: ("heure de fin", "heure fin", "fin"),
    Role.PERIOD_COUNT: ("nombre de périodes", "nb de périodes", "périodes", "periodes"),
    Role.TITLE: ("cours", "intitulé"),
    Role.CONTENT: ("contenu",),
    Role.OPTION: ("option",),
    Role.INSTRUCTOR: ("enseignant", "intervenant"),
    Role.ROOM: ("salle",),
}

EXAM_LABELS: Dict[Role, Tuple[str, ...]] = {
    Role.DATE: ("date",),
    Role.ARRIVAL: ("heure d'arrivée", "arrivée", "arrivee"),
    Role.START: ("heure de début", "heure début", "début", "debut"),
    Role.END: ("heure de fin", "heure fin", "fin"),
    Role.TITLE: ("intitulé", "examen", "module"),
    Role.CONTENT: ("contenu", "remarque"),
    Role.COHORT: ("volée", "volee", "cursus"),
    Role.MODALITY: ("modalité", "modalite"),
    Role.OPTION: ("orientation", "option"),
    Role.ANONYMIZATION: ("anonymisation", "anonymat"),
    Role.ROOM: ("salle",),
    Role.INSTRUCTOR: ("responsable", "enseignant"),
}

# Positions of the historical fixed layout
COURSE_FALLBACKS: Dict[Role, int] = {
    Role.DATE: 1,
    Role.START: 2,
    Role.END: 3,
    Role.TITLE: 5,
    Role.CURSUS: 7,
    Role.INSTRUCTOR: 9,
    Role.ROOM: 10,
}

EXAM_FALLBACKS: Dict[Role, int] = {
    Role.DATE: 0,
    Role.START: 2,
    Role.END: 3,
    Role.TITLE: 4,
    Role.COHORT: 5,
}

ESSENTIAL_ROLES = (Role.DATE, Role.TITLE)


@dataclass(frozen=True)
class ColumnResolution:
    index: Optional[int]
    source: Resolution


_UNRESOLVED = ColumnResolution(None, Resolution.UNRESOLVED)


class ColumnMap:
    """
    Read-only role -> column mapping for one worksheet.
    """

    def __init__(self, file_type: FileType, resolutions: Dict[Role, ColumnResolution]) -> None:
        self.file_type = file_type
        self._resolutions = dict(resolutions)

    def resolution(self, role: Role) -> ColumnResolution:
        return self._resolutions.get(role, _UNRESOLVED)

    def index(self, role: Role) -> Optional[int]:
        return self.resolution(role).index

    def source(self, role: Role) -> Resolution:
        return self.resolution(role).source

    def missing_essential(self) -> List[Role]:
        return [role for role in ESSENTIAL_ROLES if self.index(role) is None]

    def __contains__(self, role: object) -> bool:
        return isinstance(role, Role) and self.index(role) is not None

    def __repr__(self) -> str:
        parts = ", ".join(
            f"{role.value}={res.index}({res.source.value})" for role, res in self._resolutions.items()
        )
        return f"ColumnMap({self.file_type.name}: {parts})"


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _header_cells(rows: Sequence[Row], shared_strings: Sequence[SharedString]) -> List[List[str]]:
    """
    Lowercased text of every cell in the first rows (empty string for blanks).
    """
    out: List[List[str]] = []
    for row in rows[:HEADER_SCAN_ROWS]:
        texts = [(read_cell(row.cells, i, shared_strings) or "").lower() for i in range(len(row.cells))]
        out.append(texts)
    return out


def _role_hits(texts: List[str], labels: Dict[Role, Tuple[str, ...]]) -> int:
    """Number of roles with at least one label somewhere in the row."""
    return sum(
        1 for role_labels in labels.values() if any(label in text for label in role_labels for text in texts if text)
    )


def _rank_rows(header: List[List[str]], labels: Dict[Role, Tuple[str, ...]]) -> List[List[str]]:
    """
    Scanned rows, most header-like first.

    A title banner ("Horaire des cours ...") matches one role at most, the real
    header row matches many.
    """
    return sorted(header, key=lambda texts: _role_hits(texts, labels), reverse=True)


def _find_label(header: List[List[str]], labels: Tuple[str, ...]) -> Optional[int]:
    # exact match over all scanned rows first, then containment
    for label in labels:
        for texts in header:
            for idx, text in enumerate(texts):
                if text == label:
                    return idx
    for label in labels:
        for texts in header:
            for idx, text in enumerate(texts):
                if text and label in text:
                    return idx
    return None


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def build_column_map(
    rows: Sequence[Row],
    shared_strings: Sequence[SharedString],
    file_type: FileType,
) -> ColumnMap:
    """
    Resolve every role of the file type's vocabulary to a column index.
    """
    if file_type is FileType.COURSE:
        labels, fallbacks = COURSE_LABELS, COURSE_FALLBACKS
    else:
        labels, fallbacks = EXAM_LABELS, EXAM_FALLBACKS

    header = _rank_rows(_header_cells(rows, shared_strings), labels)
    width = max((len(r.cells) for r in rows), default=0)

    resolutions: Dict[Role, ColumnResolution] = {}

    # Stage 1: label scan
    for role, role_labels in labels.items():
        idx = _find_label(header, role_labels)
        if idx is not None:
            resolutions[role] = ColumnResolution(idx, Resolution.LABEL)

    # The cursus column is headerless: it precedes the "option" column
    if file_type is FileType.COURSE:
        option = resolutions.get(Role.OPTION)
        if option is not None and option.index is not None and option.index > 0:
            resolutions[Role.CURSUS] = ColumnResolution(option.index - 1, Resolution.INFERRED)

    # Stage 2: fallback table
    for role, idx in fallbacks.items():
        if role in resolutions:
            continue
        if idx < width:
            resolutions[role] = ColumnResolution(idx, Resolution.FALLBACK)

    for role in list(labels) + list(fallbacks):
        resolutions.setdefault(role, _UNRESOLVED)

    return ColumnMap(file_type, resolutions)

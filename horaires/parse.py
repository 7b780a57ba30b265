"""
Parsing (XLSX bytes -> list of ScheduleEvent).

- Picks the timetable sheet ("horaire", else the first sheet)
- Resolves the column roles once per sheet
- Turns EACH accepted data row into exactly ONE event
- Sorts the result by date

Important rules:
- 1 row = at most 1 event, rows that cannot be read are skipped one by one
- no cohort selected / no modality selected -> no events (never guess)
- duplicate rows in the source stay duplicated
"""

from __future__ import annotations

import re
from datetime import date
from itertools import cycle
from typing import AbstractSet, Dict, Iterator, List, Optional, Sequence

from horaires.cells import SharedString, read_cell
from horaires.columns import ColumnMap, Role, build_column_map
from horaires.matching import matches_course, matches_exam
from horaires.model import FileType, Modality, ScheduleColor, ScheduleEvent
from horaires.normalize import compute_duration, format_exam_label, format_time_range, parse_date
from horaires.workbook import (
    MENU_SHEET_NEEDLES,
    SCHEDULE_SHEET_NEEDLES,
    Row,
    Workbook,
    WorkbookError,
    open_workbook,
)


HEADER_ROWS: Dict[FileType, int] = {
    FileType.COURSE: 2,
    FileType.EXAM: 3,
}

MIN_COLUMNS: Dict[FileType, int] = {
    FileType.COURSE: 8,
    FileType.EXAM: 6,
}

ERROR_TOKENS = {"#REF!", "#N/A", "#VALUE!", "#DIV/0!", "#NAME?"}
NO_ROOM_VALUES = ERROR_TOKENS | {"0"}

UNREADABLE_TITLE = "Titre illisible"

_UPDATE_DATE_RE = re.compile(r"\b(\d{1,2})\.(\d{1,2})\.(\d{4})\b")
_NUMERIC_TITLE_RE = re.compile(r"^\d+(?:[.,]\d+)?$")


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _field(row: Row, columns: ColumnMap, role: Role, shared_strings: Sequence[SharedString]) -> str:
    return read_cell(row.cells, columns.index(role), shared_strings) or ""


def clean_room(raw: str) -> str:
    """
    Spreadsheet error tokens and a bare '0' mean "no room".
    """
    room = (raw or "").strip()
    if room.upper() in NO_ROOM_VALUES:
        return ""
    return room


def exam_title(raw: str) -> str:
    """
    Exam titles are formulas in the source; a broken one evaluates to a row
    number. Empty or numeric titles are replaced with a placeholder.
    """
    title = (raw or "").strip()
    if not title or _NUMERIC_TITLE_RE.match(title):
        return UNREADABLE_TITLE
    return title


def _exam_content(content: str, anonymization: str) -> str:
    parts = [content.strip()] if content.strip() else []
    if anonymization.strip():
        parts.append(f"Anonymisation : {anonymization.strip()}")
    return "\n".join(parts)


# ---------------------------------------------------------------------------
# Pipelines
# ---------------------------------------------------------------------------


def _course_events(
    rows: Sequence[Row],
    columns: ColumnMap,
    shared_strings: Sequence[SharedString],
    selected_cohort: str,
    selected_modalities: AbstractSet[Modality],
    colors: Iterator[ScheduleColor],
) -> List[ScheduleEvent]:
    events: List[ScheduleEvent] = []

    for row in rows[HEADER_ROWS[FileType.COURSE]:]:
        def get(role: Role) -> str:
            return _field(row, columns, role, shared_strings)

        if not matches_course(get(Role.CURSUS), selected_cohort, selected_modalities):
            continue

        title = get(Role.TITLE)
        if not title:
            continue

        day = parse_date(get(Role.DATE))
        if day is None:
            continue

        start, end = get(Role.START), get(Role.END)
        events.append(
            ScheduleEvent(
                date=day,
                time_label=format_time_range(start, end),
                title=title,
                room=clean_room(get(Role.ROOM)),
                instructor=get(Role.INSTRUCTOR),
                duration_label=compute_duration(start, end),
                color=next(colors),
                content_text=get(Role.CONTENT),
                period_count_text=get(Role.PERIOD_COUNT),
            )
        )

    return events


def _exam_events(
    rows: Sequence[Row],
    columns: ColumnMap,
    shared_strings: Sequence[SharedString],
    selected_cohort: str,
    selected_modalities: AbstractSet[Modality],
    colors: Iterator[ScheduleColor],
) -> List[ScheduleEvent]:
    events: List[ScheduleEvent] = []

    for row in rows[HEADER_ROWS[FileType.EXAM]:]:
        def get(role: Role) -> str:
            return _field(row, columns, role, shared_strings)

        if not matches_exam(
            get(Role.COHORT),
            get(Role.MODALITY),
            get(Role.OPTION),
            selected_cohort,
            selected_modalities,
        ):
            continue

        day = parse_date(get(Role.DATE))
        if day is None:
            continue

        start, end = get(Role.START), get(Role.END)
        events.append(
            ScheduleEvent(
                date=day,
                time_label=format_exam_label(get(Role.ARRIVAL), start, end),
                title=exam_title(get(Role.TITLE)),
                room=clean_room(get(Role.ROOM)),
                instructor=get(Role.INSTRUCTOR),
                duration_label=compute_duration(start, end),
                color=next(colors),
                content_text=_exam_content(get(Role.CONTENT), get(Role.ANONYMIZATION)),
            )
        )

    return events


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def parse_workbook(
    workbook: Workbook,
    file_type: FileType,
    selected_cohort: Optional[str],
    selected_modalities: AbstractSet[Modality],
) -> List[ScheduleEvent]:
    """
    Extract the events of an already opened workbook.

    Returns [] when no cohort or no modality is selected, when there is no
    sheet at all, or when the date / title columns cannot be located.
    """
    cohort = (selected_cohort or "").strip()
    if not cohort or not selected_modalities:
        return []

    sheet = workbook.schedule_sheet()
    if sheet is None:
        return []

    columns = build_column_map(sheet.rows, workbook.shared_strings, file_type)
    if columns.missing_essential():
        return []

    colors = cycle(ScheduleColor)
    if file_type is FileType.COURSE:
        events = _course_events(sheet.rows, columns, workbook.shared_strings, cohort, selected_modalities, colors)
    else:
        events = _exam_events(sheet.rows, columns, workbook.shared_strings, cohort, selected_modalities, colors)

    # stable: events of the same day keep their row order
    return sorted(events, key=lambda ev: ev.date)


def parse(
    data: bytes,
    file_type: FileType,
    selected_cohort: Optional[str],
    selected_modalities: AbstractSet[Modality],
) -> List[ScheduleEvent]:
    """
    Parse XLSX bytes into a date-sorted list of events.

    Raises WorkbookError if the bytes are not a spreadsheet.
    """
    workbook = open_workbook(data)
    return parse_workbook(workbook, file_type, selected_cohort, selected_modalities)


def extract_update_date(data: bytes) -> Optional[date]:
    """
    Publication date written in the first row of the timetable sheet
    (e.g. 'Mise à jour le 06.11.2025').
    """
    try:
        workbook = open_workbook(data)
    except WorkbookError:
        return None

    sheet = workbook.schedule_sheet()
    if sheet is None or not sheet.rows:
        return None

    first = sheet.rows[0]
    for idx in range(len(first.cells)):
        text = read_cell(first.cells, idx, workbook.shared_strings) or ""
        for m in _UPDATE_DATE_RE.finditer(text):
            day, month, year = (int(g) for g in m.groups())
            try:
                return date(year, month, day)
            except ValueError:
                continue
    return None


def validate_structure(data: bytes, file_type: FileType) -> bool:
    """
    Check that user-supplied bytes look like a timetable of the given type.
    """
    try:
        workbook = open_workbook(data)
    except WorkbookError:
        return False

    sheet = workbook.sheet_containing(*SCHEDULE_SHEET_NEEDLES)
    if sheet is None:
        return False

    if file_type is FileType.COURSE and workbook.sheet_containing(*MENU_SHEET_NEEDLES) is None:
        return False

    if len(sheet.rows) < HEADER_ROWS[file_type] + 1:
        return False

    return sheet.width >= MIN_COLUMNS[file_type]

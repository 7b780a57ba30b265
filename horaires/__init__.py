"""
Schedule extraction from loosely-structured XLSX timetables.
"""

from horaires.cohorts import extract_cohorts, list_cohorts
from horaires.model import FileType, Modality, ScheduleColor, ScheduleEvent
from horaires.parse import extract_update_date, parse, parse_workbook, validate_structure
from horaires.workbook import WorkbookError, open_workbook

__all__ = [
    "FileType",
    "Modality",
    "ScheduleColor",
    "ScheduleEvent",
    "WorkbookError",
    "extract_cohorts",
    "extract_update_date",
    "list_cohorts",
    "open_workbook",
    "parse",
    "parse_workbook",
    "validate_structure",
]

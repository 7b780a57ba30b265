"""
Cohort list extraction (the "Menu déroulant" sheet).

Column A holds a header ("Volée") followed by a contiguous block of cohort
labels, sometimes annotated with a modality or a semester count, and then
unrelated content. The block ends after three consecutive rows that do not
look like a cohort.
"""

from __future__ import annotations

import re
from typing import List, Optional, Sequence, Set

from horaires.cells import SharedString, read_cell
from horaires.workbook import Worksheet, open_workbook


VALID_COHORT_PREFIXES = ("IPS", "ICLS", "MSCSI", "MSC", "BSC", "PHD", "CAS", "DAS")
MAX_CONSECUTIVE_REJECTIONS = 3

_NOISE_RE = re.compile(
    r"\b(?:temps\s+plein|temps\s+partiel|partiel|plein|tous)\b"
    r"|\(?\b\d+\s*semestres?\b\)?",
    re.IGNORECASE,
)
_SPACES_RE = re.compile(r"\s+")


def _drop_numeric_prefix(value: str) -> str:
    tokens = value.split()
    if tokens and tokens[0].isdigit():
        tokens = tokens[1:]
    return " ".join(tokens)


def _clean(value: str) -> str:
    """
    Remove modality / semester annotations and a leading row number.
    """
    cleaned = _NOISE_RE.sub(" ", value)
    cleaned = _SPACES_RE.sub(" ", cleaned).strip()
    return _drop_numeric_prefix(cleaned)


def _has_valid_prefix(value: str) -> bool:
    upper = value.upper()
    return any(upper.startswith(prefix) for prefix in VALID_COHORT_PREFIXES)


def extract_cohorts(worksheet: Worksheet, shared_strings: Sequence[SharedString]) -> List[str]:
    """
    Return the sorted, distinct cohort labels listed in the first column.
    """
    found: Set[str] = set()
    rejected = 0

    # first row is the "Volée" header
    for row in worksheet.rows[1:]:
        value = _clean(read_cell(row.cells, 0, shared_strings) or "")

        if not _has_valid_prefix(value):
            rejected += 1
            if rejected >= MAX_CONSECUTIVE_REJECTIONS:
                break
            continue
        rejected = 0

        # several cohorts can share one row: 'IPS 7-24 / ICLS'
        for part in value.split("/"):
            cohort = _drop_numeric_prefix(part.strip())
            if cohort and _has_valid_prefix(cohort):
                found.add(cohort)

    return sorted(found)


def list_cohorts(data: bytes) -> List[str]:
    """
    Open XLSX bytes and extract the cohorts of the menu sheet.

    Returns [] when the workbook has no menu sheet. Raises WorkbookError
    for bytes that are not a spreadsheet.
    """
    workbook = open_workbook(data)
    menu: Optional[Worksheet] = workbook.menu_sheet()
    if menu is None:
        return []
    return extract_cohorts(menu, workbook.shared_strings)

"""
Cohort / modality matching.

Decides, per row, whether a session belongs to the requesting population.
Course rows and exam rows encode cohort and modality differently, so there
are two independent predicates.

Note the different defaults:
- course rows with an empty cursus field are rejected
- exam rows that state no modality anywhere are accepted (assumed to apply
  to everyone)
"""

from __future__ import annotations

import re
from typing import AbstractSet, Tuple

from horaires.model import Modality


ALL_MARKER = "tous"
ALL_TRACKS_MARKER = "toutes orientations"

MODALITY_MARKERS = {
    Modality.FULL_TIME: ("temps plein", "plein"),
    Modality.PART_TIME: ("partiel",),
}

_EXAM_COHORT_SPLIT_RE = re.compile(r"[/,]")


def _has_marker(text: str, modality: Modality) -> bool:
    return any(marker in text for marker in MODALITY_MARKERS[modality])


def _has_any_marker(text: str) -> bool:
    return any(_has_marker(text, m) for m in Modality)


def _all_modalities(selected: AbstractSet[Modality]) -> bool:
    return all(m in selected for m in Modality)


def matches_course(
    cursus: str,
    selected_cohort: str,
    selected_modalities: AbstractSet[Modality],
) -> bool:
    """
    Course rows: 'IPS 7-24 Temps Plein / ICLS Partiel' lists several cohorts,
    each with its own modality.
    """
    field = (cursus or "").strip()
    if not field:
        return False

    wanted = (selected_cohort or "").strip().lower()
    if not wanted:
        return False

    for part in field.split("/"):
        sub = part.strip().lower()
        if wanted not in sub:
            continue

        if ALL_MARKER in sub or _all_modalities(selected_modalities):
            return True

        for modality in selected_modalities:
            if _has_marker(sub, modality):
                return True

    return False


def matches_exam(
    cohort: str,
    modality: str,
    option: str,
    selected_cohort: str,
    selected_modalities: AbstractSet[Modality],
) -> bool:
    """
    Exam rows: cohort, modality and option live in separate columns.
    """
    cohort_field = (cohort or "").strip().lower()
    if not cohort_field:
        return False

    wanted = (selected_cohort or "").strip().lower()
    if not wanted:
        return False

    parts: Tuple[str, ...] = tuple(p.strip() for p in _EXAM_COHORT_SPLIT_RE.split(cohort_field))
    if not any(wanted in p for p in parts):
        return False

    if ALL_TRACKS_MARKER in (option or "").lower():
        return True

    if _all_modalities(selected_modalities):
        return True

    modality_field = (modality or "").strip().lower()
    for selected in selected_modalities:
        if _has_marker(cohort_field, selected) or _has_marker(modality_field, selected):
            return True

    # No modality stated at all: the exam applies to everyone
    if not modality_field and not _has_any_marker(cohort_field):
        return True

    return False

"""
Central data model definitions used across the project.

This module defines the canonical structure of schedule events so that:
- both extraction pipelines (courses, exams) emit the same record
- the CLI and any other caller read the same field names
- filter parameters (file type, modality) are plain enums instead of strings
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from enum import Enum
from typing import Any, Dict


class FileType(Enum):
    """Kind of spreadsheet publication."""

    COURSE = "Horaire de cours"
    EXAM = "Horaire d'examens"


class Modality(Enum):
    """Enrollment track used as a secondary filter."""

    FULL_TIME = "Temps plein"
    PART_TIME = "Partiel"


class ScheduleColor(Enum):
    """
    Display colors, handed out cyclically in emission order.

    Purely cosmetic: the color carries no identity meaning.
    """

    PINK = "pink"
    GREEN = "green"
    BLUE = "blue"
    PURPLE = "purple"
    ORANGE = "orange"
    YELLOW = "yellow"


@dataclass(frozen=True)
class ScheduleEvent:
    """
    Represents one accepted spreadsheet row (one course or exam session).

    The title is never empty and the date is always a real calendar date:
    rows that cannot satisfy this are dropped by the pipelines.
    """

    date: date
    time_label: str
    title: str
    room: str
    instructor: str
    duration_label: str
    color: ScheduleColor
    content_text: str = ""
    period_count_text: str = ""

    def to_dict(self) -> Dict[str, Any]:
        """
        Return a JSON-serialisable dict (ISO date, color name).
        """
        return {
            "date": self.date.isoformat(),
            "time_label": self.time_label,
            "title": self.title,
            "room": self.room,
            "instructor": self.instructor,
            "duration_label": self.duration_label,
            "color": self.color.value,
            "content_text": self.content_text,
            "period_count_text": self.period_count_text,
        }

"""
CLI (Command Line Interface).

Quick terminal commands around the extraction engine, e.g.:

    horaires cohorts <file.xlsx | url>
    horaires events <source> --cohort "IPS 7-24" [--modality part-time] [--exams] [--json out.json]
    horaires updated <source>
    horaires validate <source> [--exams]

Note:
- The engine itself never prints; everything user-facing happens here
- Errors are printed and turned into a non-zero exit code
"""

from __future__ import annotations

import argparse
import json
from pathlib import Path
from typing import Callable, Optional

import requests
from rich import box
from rich.console import Console
from rich.table import Table

from horaires.cohorts import list_cohorts
from horaires.fetch import DEFAULT_TIMEOUT, read_source
from horaires.model import FileType, Modality, ScheduleEvent
from horaires.parse import extract_update_date, parse, validate_structure
from horaires.workbook import WorkbookError


console = Console(highlight=False)

MODALITY_CHOICES = {
    "full-time": Modality.FULL_TIME,
    "part-time": Modality.PART_TIME,
}


def _file_type(args: argparse.Namespace) -> FileType:
    return FileType.EXAM if getattr(args, "exams", False) else FileType.COURSE


def _load(args: argparse.Namespace) -> Optional[bytes]:
    """
    Read the source given on the command line.

    CLI behavior: never crash with a traceback if the file or URL is
    unavailable. Print the problem and return None instead.
    """
    source = (args.source or "").strip()
    if not source:
        console.print("Please provide a file path or URL.")
        return None

    try:
        return read_source(source, timeout=args.timeout)
    except requests.RequestException as e:
        console.print(f"Download failed: {e}", markup=False)
    except OSError as e:
        console.print(f"Cannot read {source}: {e}", markup=False)
    return None


def _events_table(events: list[ScheduleEvent], title: str) -> Table:
    table = Table(title=title, box=box.SIMPLE_HEAVY)
    table.add_column("Date")
    table.add_column("Heure")
    table.add_column("Durée")
    table.add_column("Titre")
    table.add_column("Salle")
    table.add_column("Enseignant")

    for ev in events:
        table.add_row(
            ev.date.strftime("%d.%m.%Y"),
            ev.time_label,
            ev.duration_label,
            ev.title,
            ev.room,
            ev.instructor,
        )
    return table


# ---------------------------------------------------------------------------
# Commands
# ---------------------------------------------------------------------------


def _cmd_cohorts(args: argparse.Namespace, data: bytes) -> int:
    cohorts = list_cohorts(data)
    if not cohorts:
        console.print("No cohorts found.")
        return 0

    for cohort in cohorts:
        console.print(cohort, markup=False)
    return 0


def _cmd_events(args: argparse.Namespace, data: bytes) -> int:
    cohort = (args.cohort or "").strip()
    if not cohort:
        console.print("Please provide a cohort (--cohort).")
        return 1

    names = args.modality or list(MODALITY_CHOICES)
    modalities = {MODALITY_CHOICES[n] for n in names}

    file_type = _file_type(args)
    events = parse(data, file_type, cohort, modalities)

    if args.json:
        out = Path(args.json)
        out.parent.mkdir(parents=True, exist_ok=True)
        out.write_text(
            json.dumps([ev.to_dict() for ev in events], ensure_ascii=False, indent=2),
            encoding="utf-8",
        )
        console.print(f"Wrote {len(events)} events to: {out}", markup=False)
        return 0

    if not events:
        console.print("No events.")
        return 0

    console.print(_events_table(events, f"{file_type.value} – {cohort}"))
    console.print(f"{len(events)} events")
    return 0


def _cmd_updated(args: argparse.Namespace, data: bytes) -> int:
    updated = extract_update_date(data)
    if updated is None:
        console.print("No update date found.")
        return 1

    console.print(updated.isoformat())
    return 0


def _cmd_validate(args: argparse.Namespace, data: bytes) -> int:
    file_type = _file_type(args)
    if validate_structure(data, file_type):
        console.print(f"OK: looks like a valid '{file_type.value}' file.")
        return 0

    console.print(f"Invalid: not a '{file_type.value}' file.")
    return 1


COMMANDS: dict[str, Callable[[argparse.Namespace, bytes], int]] = {
    "cohorts": _cmd_cohorts,
    "events": _cmd_events,
    "updated": _cmd_updated,
    "validate": _cmd_validate,
}


def build_parser() -> argparse.ArgumentParser:
    """
    Build the argparse CLI parser with sub-commands.
    """
    parser = argparse.ArgumentParser(prog="horaires", description="Timetable extraction from XLSX publications")
    parser.add_argument("--timeout", type=float, default=DEFAULT_TIMEOUT, help="Download timeout in seconds")
    sub = parser.add_subparsers(dest="command", required=True)

    p_cohorts = sub.add_parser("cohorts", help="List selectable cohorts")
    p_cohorts.add_argument("source", type=str, help="XLSX path or URL")

    p_events = sub.add_parser("events", help="Extract events for one cohort")
    p_events.add_argument("source", type=str, help="XLSX path or URL")
    p_events.add_argument("--cohort", "-c", type=str, required=True, help="Cohort (e.g. 'IPS 7-24')")
    p_events.add_argument(
        "--modality",
        "-m",
        action="append",
        choices=sorted(MODALITY_CHOICES),
        help="Modality filter, repeatable (default: both)",
    )
    p_events.add_argument("--exams", action="store_true", help="Source is an exam timetable")
    p_events.add_argument("--json", type=str, default=None, help="Write events to this JSON file instead")

    p_updated = sub.add_parser("updated", help="Show the publication date of a file")
    p_updated.add_argument("source", type=str, help="XLSX path or URL")

    p_validate = sub.add_parser("validate", help="Check the structure of a file")
    p_validate.add_argument("source", type=str, help="XLSX path or URL")
    p_validate.add_argument("--exams", action="store_true", help="Expect an exam timetable")

    return parser


def main(argv: list[str] | None = None) -> None:
    """
    CLI entry point. Parses args, loads the source, dispatches to a command
    handler and exits via SystemExit with a return code.
    """
    parser = build_parser()
    args = parser.parse_args(argv)

    data = _load(args)
    if data is None:
        raise SystemExit(1)

    handler = COMMANDS.get(args.command)
    if handler is None:
        raise SystemExit(2)

    try:
        raise SystemExit(handler(args, data))
    except WorkbookError as e:
        console.print(f"Not a readable spreadsheet: {e}", markup=False)
        raise SystemExit(1)

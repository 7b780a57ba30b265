"""
Tests for column role resolution.

Each role is resolved by label, inferred (course cursus column), taken from
the fallback table, or left unresolved; the tests check which path was used.
"""

import unittest

from horaires.columns import Resolution, Role, build_column_map
from horaires.model import FileType
from horaires.workbook import open_workbook
from workbook_builder import COURSE_HEADER, EXAM_HEADER, build_xlsx, course_rows, exam_rows


def _column_map(rows, file_type):
    wb = open_workbook(build_xlsx([("Horaire", rows)]))
    return build_column_map(wb.sheets[0].rows, wb.shared_strings, file_type)


class TestCourseColumns(unittest.TestCase):
    def test_labels_and_inferred_cursus(self) -> None:
        columns = _column_map(course_rows(), FileType.COURSE)

        self.assertEqual(columns.index(Role.DATE), 1)
        self.assertEqual(columns.source(Role.DATE), Resolution.LABEL)
        self.assertEqual(columns.index(Role.START), 2)
        self.assertEqual(columns.index(Role.END), 3)
        self.assertEqual(columns.index(Role.PERIOD_COUNT), 4)
        self.assertEqual(columns.index(Role.TITLE), 5)
        self.assertEqual(columns.index(Role.CONTENT), 6)
        self.assertEqual(columns.index(Role.ROOM), 10)

        # headerless column just left of "Option"
        self.assertEqual(columns.index(Role.CURSUS), 7)
        self.assertEqual(columns.source(Role.CURSUS), Resolution.INFERRED)
        self.assertEqual(columns.missing_essential(), [])

    def test_moved_columns_follow_their_labels(self) -> None:
        rows = [
            ["Horaire"],
            ["Salle", "Cours", "Date", None, "Option"],
            ["A1", "Anatomie", 45611, "IPS 7-24 Tous", "X"],
        ]
        columns = _column_map(rows, FileType.COURSE)
        self.assertEqual(columns.index(Role.ROOM), 0)
        self.assertEqual(columns.index(Role.TITLE), 1)
        self.assertEqual(columns.index(Role.DATE), 2)
        self.assertEqual(columns.index(Role.CURSUS), 3)

    def test_exact_label_beats_containment(self) -> None:
        rows = [["Horaire"], ["Contenu du cours", "Cours", "Date"]]
        columns = _column_map(rows, FileType.COURSE)
        self.assertEqual(columns.index(Role.TITLE), 1)
        self.assertEqual(columns.index(Role.CONTENT), 0)

    def test_banner_does_not_shadow_header_labels(self) -> None:
        header = list(COURSE_HEADER)
        header[5] = "Intitulé du cours"
        rows = [["Horaire des cours - mise à jour le 06.11.2025"], header]
        columns = _column_map(rows, FileType.COURSE)

        self.assertEqual(columns.index(Role.TITLE), 5)
        self.assertEqual(columns.source(Role.TITLE), Resolution.LABEL)

    def test_fallback_table_without_headers(self) -> None:
        rows = [["x"] * 11, ["y"] * 11]
        columns = _column_map(rows, FileType.COURSE)

        self.assertEqual(columns.index(Role.DATE), 1)
        self.assertEqual(columns.source(Role.DATE), Resolution.FALLBACK)
        self.assertEqual(columns.index(Role.CURSUS), 7)
        self.assertEqual(columns.source(Role.CURSUS), Resolution.FALLBACK)
        self.assertEqual(columns.source(Role.CONTENT), Resolution.UNRESOLVED)
        self.assertIsNone(columns.index(Role.CONTENT))

    def test_fallback_needs_the_column_to_exist(self) -> None:
        rows = [["x", "y"], ["x", "y"]]
        columns = _column_map(rows, FileType.COURSE)
        self.assertEqual(columns.source(Role.DATE), Resolution.FALLBACK)
        self.assertEqual(columns.source(Role.TITLE), Resolution.UNRESOLVED)
        self.assertEqual(columns.missing_essential(), [Role.TITLE])


class TestExamColumns(unittest.TestCase):
    def test_exam_vocabulary(self) -> None:
        columns = _column_map(exam_rows(), FileType.EXAM)

        expected = {
            Role.DATE: 0,
            Role.ARRIVAL: 1,
            Role.START: 2,
            Role.END: 3,
            Role.TITLE: 4,
            Role.COHORT: 5,
            Role.MODALITY: 6,
            Role.OPTION: 7,
            Role.ANONYMIZATION: 8,
            Role.ROOM: 9,
            Role.INSTRUCTOR: 10,
        }
        for role, idx in expected.items():
            with self.subTest(role=role):
                self.assertEqual(columns.index(role), idx)
                self.assertEqual(columns.source(role), Resolution.LABEL)

        self.assertEqual(columns.source(Role.CONTENT), Resolution.UNRESOLVED)
        self.assertNotIn(Role.CURSUS, columns)

    def test_banner_does_not_shadow_header_labels(self) -> None:
        header = list(EXAM_HEADER)
        header[4] = "Examen / module"
        rows = [["Horaire d'examens A25 - 02.12.2025"], header, [""]]
        columns = _column_map(rows, FileType.EXAM)

        self.assertEqual(columns.index(Role.TITLE), 4)
        self.assertEqual(columns.source(Role.TITLE), Resolution.LABEL)


if __name__ == "__main__":
    unittest.main()

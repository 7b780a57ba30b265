"""
Unit tests for cohort / modality matching.

Course rows reject empty cursus fields; exam rows accept sessions that
state no modality at all.
"""

import unittest

from horaires.matching import matches_course, matches_exam
from horaires.model import Modality


FULL = {Modality.FULL_TIME}
PART = {Modality.PART_TIME}
BOTH = {Modality.FULL_TIME, Modality.PART_TIME}


class TestCourseMatching(unittest.TestCase):
    def test_modality_per_sub_cohort(self) -> None:
        cursus = "IPS 7-24 Temps Plein / ICLS Partiel"
        self.assertTrue(matches_course(cursus, "IPS 7-24", FULL))
        self.assertFalse(matches_course(cursus, "IPS 7-24", PART))
        self.assertTrue(matches_course(cursus, "ICLS", PART))
        self.assertFalse(matches_course(cursus, "ICLS", FULL))

    def test_case_insensitive(self) -> None:
        self.assertTrue(matches_course("ips 7-24 plein", "IPS 7-24", FULL))

    def test_tous_and_both_modalities_accept(self) -> None:
        self.assertTrue(matches_course("IPS 7-24 Tous", "IPS 7-24", PART))
        self.assertTrue(matches_course("IPS 7-24", "IPS 7-24", BOTH))

    def test_other_cohort_rejected(self) -> None:
        self.assertFalse(matches_course("ICLS Tous", "IPS 7-24", BOTH))

    def test_empty_cursus_rejected(self) -> None:
        self.assertFalse(matches_course("", "IPS 7-24", BOTH))
        self.assertFalse(matches_course("   ", "IPS 7-24", BOTH))

    def test_no_modality_selected(self) -> None:
        self.assertFalse(matches_course("IPS 7-24 Plein", "IPS 7-24", set()))


class TestExamMatching(unittest.TestCase):
    def test_empty_cohort_never_matches(self) -> None:
        for selection in (FULL, PART, BOTH):
            with self.subTest(selection=selection):
                self.assertFalse(matches_exam("", "", "", "IPS 7-24", selection))
                self.assertFalse(matches_exam("", "Temps plein", "Toutes orientations", "IPS 7-24", selection))

    def test_cohort_list_split_on_slash_and_comma(self) -> None:
        self.assertTrue(matches_exam("ICLS, IPS 7-24", "Partiel", "", "IPS 7-24", PART))
        self.assertTrue(matches_exam("ICLS / IPS 7-24", "Partiel", "", "IPS 7-24", PART))
        self.assertFalse(matches_exam("ICLS, IPS 8-25", "", "", "IPS 7-24", BOTH))

    def test_all_tracks_accepts_any_modality(self) -> None:
        self.assertTrue(matches_exam("IPS 7-24", "Temps plein", "Toutes orientations", "IPS 7-24", PART))

    def test_modality_from_either_field(self) -> None:
        self.assertTrue(matches_exam("IPS 7-24", "Partiel", "", "IPS 7-24", PART))
        self.assertFalse(matches_exam("IPS 7-24", "Partiel", "", "IPS 7-24", FULL))
        self.assertTrue(matches_exam("IPS 7-24 Temps plein", "", "", "IPS 7-24", FULL))
        self.assertFalse(matches_exam("IPS 7-24 Temps plein", "", "", "IPS 7-24", PART))

    def test_no_modality_stated_accepts(self) -> None:
        self.assertTrue(matches_exam("IPS 7-24", "", "", "IPS 7-24", PART))
        self.assertTrue(matches_exam("IPS 7-24", "", "", "IPS 7-24", FULL))


if __name__ == "__main__":
    unittest.main()

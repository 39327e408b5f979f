import unittest
from datetime import date

from eventreport_gen.models.report import ChiefGuest, FacultyCoordinator, StudentCoordinator
from eventreport_gen.services.docx.rules import (
    date_range,
    faculty_line,
    format_kb,
    format_long_date,
    format_short_date,
    guest_line,
    named,
    render_narrative,
    sanitize_title,
    signature_columns,
    student_line,
)

from helpers import make_report


class TestPeopleLines(unittest.TestCase):

    def test_faculty_line(self):
        full = FacultyCoordinator(name="Dr. Shah", designation="Professor", email="shah@bvmengineering.ac.in")
        self.assertEqual(faculty_line(full), "Dr. Shah, Professor (shah@bvmengineering.ac.in)")
        self.assertEqual(faculty_line(FacultyCoordinator(name="Dr. Shah", email="s@x.in")), "Dr. Shah (s@x.in)")
        self.assertEqual(faculty_line(FacultyCoordinator(name="Dr. Shah")), "Dr. Shah")

    def test_student_line(self):
        self.assertEqual(
            student_line(StudentCoordinator(name="Asha", roll_no="21CP045", contact="98765")),
            "Asha (21CP045) - 98765",
        )
        self.assertEqual(student_line(StudentCoordinator(name="Asha", contact="98765")), "Asha - 98765")
        self.assertEqual(student_line(StudentCoordinator(name="Asha")), "Asha")

    def test_guest_line(self):
        self.assertEqual(guest_line(ChiefGuest(name="Shri Patel", affiliation="ISRO")), "Shri Patel, ISRO")
        self.assertEqual(guest_line(ChiefGuest(name="Shri Patel")), "Shri Patel")

    def test_unnamed_entries_are_dropped(self):
        items = [FacultyCoordinator(name=""), FacultyCoordinator(name="Dr. Rao")]
        self.assertEqual([c.name for c in named(items)], ["Dr. Rao"])


class TestDates(unittest.TestCase):

    def test_formats(self):
        self.assertEqual(format_long_date(date(2024, 1, 15)), "Monday, 15 January 2024")
        self.assertEqual(format_short_date(date(2024, 3, 5)), "05 March 2024")

    def test_range_only_when_end_differs(self):
        start = date(2024, 1, 15)
        self.assertEqual(date_range(start, start, format_short_date, " - "), "15 January 2024")
        self.assertEqual(
            date_range(start, date(2024, 1, 16), format_short_date, " - "),
            "15 January 2024 - 16 January 2024",
        )


class TestReportRules(unittest.TestCase):

    def test_narrative_only_without_blocks(self):
        self.assertTrue(render_narrative(make_report(generatedContent="Summary text.")))
        self.assertFalse(render_narrative(make_report()))
        self.assertFalse(
            render_narrative(
                make_report(generatedContent="Summary text.", contentBlocks=[{"type": "text", "content": "x"}])
            )
        )

    def test_signature_columns(self):
        report = make_report(facultyCoordinators=[{"name": ""}, {"name": "Dr. Rao"}])
        self.assertEqual(
            signature_columns(report),
            [("Event Coordinator", "Dr. Rao"), ("Head of Department", "Department of Computer Engineering")],
        )
        report = make_report(organizedBy="")
        self.assertEqual(signature_columns(report), [("Event Coordinator", ""), ("Head of Department", "Department")])

    def test_sanitize_title(self):
        self.assertEqual(sanitize_title("Robotics Workshop"), "robotics_workshop")
        self.assertEqual(sanitize_title("AI & ML: Day-1"), "ai_ml_day_1")

    def test_format_kb(self):
        self.assertEqual(format_kb(2048), "2.0KB")
        self.assertEqual(format_kb(1536), "1.5KB")


if __name__ == '__main__':
    unittest.main()

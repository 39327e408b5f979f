import tempfile
import unittest
from datetime import date
from pathlib import Path

from eventreport_gen.models.logos import LogoAsset, LogoRegistry
from eventreport_gen.services.docx.template_builder import TemplateBuilder
from eventreport_gen.services.docx.types import (
    ImageRun,
    TableNode,
    count_nodes,
    document_text,
    iter_images,
    iter_paragraphs,
)
from eventreport_gen.services.resources.loader import ResourceLoader

from helpers import clean_settings, image_bytes, make_report, png_url

TODAY = date(2024, 1, 20)


class TestTemplateBuilder(unittest.IsolatedAsyncioTestCase):

    async def asyncSetUp(self):
        self.loader = ResourceLoader()
        self.builder = TemplateBuilder(self.loader, cfg=clean_settings(), today=TODAY)

    async def asyncTearDown(self):
        await self.loader.aclose()

    def paragraph_texts(self, doc):
        return [p.text for p in iter_paragraphs(doc.children)]

    async def test_minimal_report(self):
        report = make_report(contentBlocks=[{"id": "b1", "type": "text", "title": "Overview", "content": "Great turnout."}])
        doc = await self.builder.build(report)
        texts = self.paragraph_texts(doc)

        self.assertEqual(doc.page.margin_top, 720)
        self.assertIn("BIRLA VISHVAKARMA MAHAVIDYALAYA ENGINEERING COLLEGE", texts)
        self.assertIn("EVENT REPORT", texts)
        self.assertIn("ROBOTICS WORKSHOP", texts)
        self.assertIn("EVENT DETAILS", texts)
        self.assertIn("Overview", texts)
        self.assertIn("Great turnout.", texts)
        self.assertNotIn("EXECUTIVE SUMMARY", texts)
        self.assertNotIn("PEOPLE INVOLVED", texts)

        metadata = next(b for b in doc.children if isinstance(b, TableNode))
        self.assertTrue(metadata.borders)
        labels = [row.cells[0].children[0].text for row in metadata.rows]
        self.assertEqual(labels, ["Event Date", "Venue", "Event Type", "Organized By"])
        self.assertEqual(metadata.rows[0].cells[1].children[0].text, "Monday, 15 January 2024")
        self.assertEqual(metadata.rows[0].cells[0].shading, "f3f4f6")

    async def test_optional_metadata_rows(self):
        report = make_report(
            endDate="2024-01-16",
            venue="",
            targetAudience="Second-year students",
            participantCount=0,
            academicYear="2023-24",
        )
        doc = await self.builder.build(report)
        metadata = next(b for b in doc.children if isinstance(b, TableNode))
        rows = {row.cells[0].children[0].text: row.cells[1].children[0].text for row in metadata.rows}
        self.assertEqual(rows["Event Date"], "Monday, 15 January 2024 to Tuesday, 16 January 2024")
        self.assertEqual(rows["Venue"], "Not specified")
        self.assertEqual(rows["Target Audience"], "Second-year students")
        self.assertEqual(rows["Academic Year"], "2023-24")
        self.assertNotIn("No. of Participants", rows)

    async def test_failed_logo_becomes_label(self):
        doc = await self.builder.build(make_report(selectedLogos=["bvm", "unknown-id"]))
        self.assertEqual(self.paragraph_texts(doc)[0], "[bvm Logo]")

    async def test_logos_from_registry(self):
        with tempfile.TemporaryDirectory() as tmp:
            (Path(tmp) / "a.png").write_bytes(image_bytes())
            (Path(tmp) / "b.png").write_bytes(image_bytes())
            registry = LogoRegistry({"bvm": LogoAsset("/a.png"), "gtu": LogoAsset("/b.png")})
            loader = ResourceLoader(asset_dir=tmp)
            builder = TemplateBuilder(loader, registry=registry, cfg=clean_settings(), today=TODAY)
            doc = await builder.build(make_report(selectedLogos=["bvm", "gtu"]))
            await loader.aclose()

        logo_row = doc.children[0]
        images = [r for r in logo_row.runs if isinstance(r, ImageRun)]
        self.assertEqual(len(images), 2)
        self.assertEqual((images[0].width_px, images[0].height_px), (120, 120))
        self.assertEqual(logo_row.text, "   ")

    async def test_narrative_only_without_blocks(self):
        doc = await self.builder.build(make_report(generatedContent="The workshop introduced ROS."))
        texts = self.paragraph_texts(doc)
        self.assertIn("EXECUTIVE SUMMARY", texts)
        self.assertIn("The workshop introduced ROS.", texts)
        self.assertNotIn("EVENT DETAILS", texts)

    async def test_blocks_take_precedence_over_narrative(self):
        report = make_report(
            generatedContent="The workshop introduced ROS.",
            contentBlocks=[{"type": "text", "content": "Block body."}],
        )
        texts = self.paragraph_texts(await self.builder.build(report))
        self.assertIn("Block body.", texts)
        self.assertNotIn("EXECUTIVE SUMMARY", texts)
        self.assertNotIn("The workshop introduced ROS.", texts)

    async def test_people_section(self):
        report = make_report(
            facultyCoordinators=[{"name": "Dr. Shah", "email": "shah@bvm.ac.in"}, {"name": ""}],
            studentCoordinators=[{"name": "Asha", "rollNo": "21CP045"}],
            chiefGuest={"name": "Shri Patel", "designation": "Director"},
            hostedBy="IEEE Student Branch",
        )
        texts = self.paragraph_texts(await self.builder.build(report))
        self.assertIn("PEOPLE INVOLVED", texts)
        self.assertIn("1. Dr. Shah (shah@bvm.ac.in)", texts)
        self.assertFalse(any(t.startswith("2. ") for t in texts))
        self.assertIn("1. Asha (21CP045)", texts)
        self.assertIn("Shri Patel, Director", texts)
        self.assertIn("Hosted By: IEEE Student Branch", texts)
        self.assertNotIn("Guests of Honor: ", "\n".join(texts))

    async def test_nameless_people_are_omitted(self):
        texts = self.paragraph_texts(await self.builder.build(make_report(facultyCoordinators=[{"designation": "Prof"}])))
        self.assertNotIn("PEOPLE INVOLVED", texts)
        self.assertNotIn("Faculty Coordinators:", texts)

        report = make_report(
            facultyCoordinators=[{"designation": "Prof"}],
            studentCoordinators=[{"name": "Asha"}],
        )
        texts = self.paragraph_texts(await self.builder.build(report))
        self.assertIn("PEOPLE INVOLVED", texts)
        self.assertNotIn("Faculty Coordinators:", texts)
        self.assertIn("Student Coordinators:", texts)

    async def test_special_mentions(self):
        texts = self.paragraph_texts(await self.builder.build(make_report(specialMentions="Thanks to the NSS unit.")))
        self.assertIn("SPECIAL MENTIONS", texts)
        self.assertIn("Thanks to the NSS unit.", texts)

    async def test_non_image_attendance_is_named_placeholder(self):
        report = make_report(attendanceSheets=[{"originalName": "attendance.pdf", "mimetype": "application/pdf"}])
        text = document_text(await self.builder.build(report))
        self.assertIn("ATTENDANCE SHEET", text)
        self.assertIn("[Attendance Sheet: attendance.pdf]", text)
        self.assertIn("cannot be displayed inline", text)

    async def test_image_attendance_inline(self):
        report = make_report(attendanceSheet={"originalName": "sheet.png", "url": png_url()})
        doc = await self.builder.build(report)
        sizes = [(i.width_px, i.height_px) for i in iter_images(doc.children)]
        self.assertIn((500, 600), sizes)

    async def test_unreadable_attendance_image(self):
        report = make_report(attendanceSheet={"originalName": "sheet.png", "url": "/uploads/sheet.png"})
        text = document_text(await self.builder.build(report))
        self.assertIn("[Attendance Sheet could not be processed]", text)

    async def test_signatures_and_footer(self):
        report = make_report(facultyCoordinators=[{"name": "Dr. Shah"}])
        doc = await self.builder.build(report)
        texts = self.paragraph_texts(doc)

        heading = next(p for p in iter_paragraphs(doc.children) if p.text == "SIGNATURES")
        self.assertTrue(heading.page_break_before)
        signatures = [b for b in doc.children if isinstance(b, TableNode)][-1]
        self.assertFalse(signatures.borders)
        left, right = signatures.rows[0].cells
        self.assertEqual(left.children[0].text, "Event Coordinator")
        self.assertEqual(left.children[-1].text, "Dr. Shah")
        self.assertEqual(right.children[0].text, "Head of Department")
        self.assertEqual(right.children[-1].text, "Department of Computer Engineering")
        self.assertEqual(
            texts[-1],
            "Generated on Saturday, 20 January 2024 | Birla Vishvakarma Mahavidyalaya Engineering College",
        )

    async def test_build_is_repeatable(self):
        report = make_report(
            contentBlocks=[
                {"type": "image", "imageUrls": [png_url(), png_url(), png_url()], "imageLayout": "grid"},
                {"type": "quote", "content": "Keep building."},
            ],
        )
        first = await self.builder.build(report)
        second = await self.builder.build(report)
        self.assertEqual(count_nodes(first.children), count_nodes(second.children))
        self.assertEqual(document_text(first), document_text(second))


if __name__ == '__main__':
    unittest.main()

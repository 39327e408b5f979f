import unittest
from io import BytesIO

from docx import Document
from docx.enum.text import WD_ALIGN_PARAGRAPH
from docx.shared import Pt, Twips

from eventreport_gen.errors import DocumentBuildError
from eventreport_gen.services.docx.serializer import serialize
from eventreport_gen.services.docx.types import (
    Alignment,
    DocumentNode,
    ImageRun,
    PageSetup,
    ParagraphNode,
    TableCellNode,
    TableNode,
    TableRowNode,
    TextRun,
)

from helpers import image_bytes


def _open(blob: bytes):
    return Document(BytesIO(blob))


class TestSerialize(unittest.TestCase):

    def test_paragraph_formatting(self):
        node = DocumentNode(
            children=[
                ParagraphNode(
                    runs=[TextRun("Heading", bold=True, size=28, color="1f2937")],
                    alignment=Alignment.CENTER,
                    space_before=240,
                    space_after=120,
                    style="Heading 1",
                ),
                ParagraphNode(runs=[TextRun("line one\nline two", italic=True)], page_break_before=True),
            ],
            page=PageSetup(width=11906, height=16838, margin_top=720),
        )
        doc = _open(serialize(node))

        first, second = doc.paragraphs[0], doc.paragraphs[1]
        self.assertEqual(first.text, "Heading")
        self.assertEqual(first.style.name, "Heading 1")
        self.assertEqual(first.alignment, WD_ALIGN_PARAGRAPH.CENTER)
        self.assertEqual(first.paragraph_format.space_before, Twips(240))
        run = first.runs[0]
        self.assertTrue(run.bold)
        self.assertEqual(run.font.size, Pt(14))
        self.assertEqual(run.font.name, "Times New Roman")
        self.assertEqual(str(run.font.color.rgb), "1F2937")

        self.assertEqual(second.text, "line one\nline two")
        self.assertTrue(second.paragraph_format.page_break_before)

        section = doc.sections[0]
        self.assertEqual(section.page_width, Twips(11906))
        self.assertEqual(section.top_margin, Twips(720))

    def test_unknown_style_falls_back(self):
        node = DocumentNode(children=[ParagraphNode(runs=[TextRun("x")], style="No Such Style")])
        doc = _open(serialize(node))
        self.assertEqual(doc.paragraphs[0].style.name, "Normal")

    def test_tables_images_and_nesting(self):
        inner = TableNode(rows=[TableRowNode(cells=[TableCellNode(children=[ParagraphNode(runs=[TextRun("inner")])])])])
        outer = TableNode(
            rows=[
                TableRowNode(
                    cells=[
                        TableCellNode(
                            children=[ParagraphNode(runs=[TextRun("Label")])],
                            width_pct=48,
                            shading="f3f4f6",
                            margins=(200, 200, 100, 100),
                        ),
                        TableCellNode(children=[inner]),
                    ]
                ),
                TableRowNode(cells=[TableCellNode(children=[ParagraphNode(runs=[ImageRun(image_bytes(), "png", 96, 96)])])]),
            ],
            borders=True,
        )
        doc = _open(serialize(DocumentNode(children=[outer])))

        self.assertEqual(len(doc.tables), 1)
        table = doc.tables[0]
        self.assertEqual(table.style.name, "Table Grid")
        self.assertEqual(table.cell(0, 0).text, "Label")
        self.assertEqual(len(table.cell(0, 1).tables), 1)
        self.assertEqual(table.cell(0, 1).tables[0].cell(0, 0).text, "inner")
        # Short row: the missing cell is left empty.
        self.assertEqual(table.cell(1, 1).text, "")

        self.assertEqual(len(doc.inline_shapes), 1)
        self.assertEqual(doc.inline_shapes[0].width, 96 * 9525)

        tc_xml = table.cell(0, 0)._tc.xml
        self.assertIn('w:fill="f3f4f6"', tc_xml)
        self.assertIn("w:tcMar", tc_xml)

    def test_borderless_table(self):
        node = DocumentNode(children=[TableNode(rows=[TableRowNode(cells=[TableCellNode(), TableCellNode()])])])
        doc = _open(serialize(node))
        self.assertIn('w:val="nil"', doc.tables[0]._tbl.xml)

    def test_serializer_failure_is_fatal(self):
        node = DocumentNode(children=[ParagraphNode(runs=[ImageRun(b"not an image", "png", 10, 10)])])
        with self.assertRaises(DocumentBuildError):
            serialize(node)


if __name__ == '__main__':
    unittest.main()

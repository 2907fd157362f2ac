# tests/test_word_generator.py
"""Tests for the HTML to Word translator and the Word operator pipeline."""

import re
import pytest
from io import BytesIO
from unittest.mock import patch
from docx import Document
from docx.enum.section import WD_ORIENT
from docx.oxml.ns import qn
from docx.shared import Twips

from services.errors import OperatorError
from services.word_generator import (
    parse_html_blocks,
    runs_text,
    merge_word_options,
    hex_color,
    build_word_document,
    generate_word_from_html,
    generate_word_from_markdown,
)


def load(data: bytes):
    return Document(BytesIO(data))


def body_texts(doc):
    return [p.text for p in doc.paragraphs if p.text.strip()]


class TestParseHtmlBlocks:
    """Tests for parse_html_blocks function."""

    def test_block_sequence(self, sample_html):
        blocks, headings = parse_html_blocks(sample_html)
        kinds = [b["type"] for b in blocks]
        assert kinds == [
            "heading", "paragraph", "heading",
            "list_item", "list_item", "list_item", "list_item",
            "table", "code", "rule",
        ]

    def test_headings_get_sequential_bookmarks(self, sample_html):
        blocks, headings = parse_html_blocks(sample_html)
        assert headings == [
            {"level": 1, "text": "Quarterly Report", "bookmark": "_Toc00001"},
            {"level": 2, "text": "Summary", "bookmark": "_Toc00002"},
        ]

    def test_inline_runs_keep_formatting(self, sample_html):
        blocks, _ = parse_html_blocks(sample_html)
        runs = blocks[1]["runs"]
        assert runs_text(runs) == "Prepared for {{company}} by Finance."
        assert {"text": "{{company}}", "bold": True} in runs
        assert {"text": "Finance", "italic": True} in runs

    def test_nested_lists(self, sample_html):
        blocks, _ = parse_html_blocks(sample_html)
        items = [b for b in blocks if b["type"] == "list_item"]
        assert [(runs_text(i["runs"]), i["ordered"], i["index"], i["depth"]) for i in items] == [
            ("Revenue up", False, 1, 0),
            ("Costs down", False, 2, 0),
            ("Travel", True, 1, 1),
            ("Hosting", True, 2, 1),
        ]

    def test_table_header_rows_and_entities(self, sample_html):
        blocks, _ = parse_html_blocks(sample_html)
        table = next(b for b in blocks if b["type"] == "table")
        assert table["rows"] == [
            {"header": True, "cells": ["Region", "Total"]},
            {"header": False, "cells": ["North", "10 & 20"]},
        ]

    def test_unsectioned_table_uses_first_row_and_th(self):
        html = "<table><tr><td>a</td></tr><tr><td>b</td></tr><tr><th>c</th></tr></table>"
        blocks, _ = parse_html_blocks(html)
        assert [r["header"] for r in blocks[0]["rows"]] == [True, False, True]

    def test_pre_keeps_line_breaks(self, sample_html):
        blocks, _ = parse_html_blocks(sample_html)
        code = next(b for b in blocks if b["type"] == "code")
        assert code["text"] == "line one\nline two"

    def test_script_and_style_are_dropped(self, sample_html):
        blocks, _ = parse_html_blocks(sample_html)
        text = " ".join(runs_text(b.get("runs", [])) for b in blocks)
        assert "alert" not in text
        assert "color: red" not in text

    def test_stray_text_becomes_paragraph(self):
        blocks, _ = parse_html_blocks("Intro <b>bold</b><p>Para</p>tail")
        assert [runs_text(b["runs"]) for b in blocks] == ["Intro bold", "Para", "tail"]

    def test_div_with_blocks_is_walked(self):
        blocks, _ = parse_html_blocks('<div class="table-container"><table><tr><td>x</td></tr></table></div>')
        assert blocks[0]["type"] == "table"

    def test_leaf_div_is_paragraph(self):
        blocks, _ = parse_html_blocks("<div>Just <u>text</u></div>")
        assert blocks == [{"type": "paragraph", "runs": [{"text": "Just "}, {"text": "text", "underline": True}], "quote": False}]

    def test_br_splits_lines(self):
        blocks, _ = parse_html_blocks("<p>one<br>two</p>")
        assert runs_text(blocks[0]["runs"]) == "one\ntwo"

    def test_blockquote(self):
        blocks, _ = parse_html_blocks("<blockquote><p>Quoted</p></blockquote>")
        assert blocks[0]["quote"] is True

    def test_empty_input(self):
        assert parse_html_blocks("") == ([], [])


class TestWordOptions:
    """Tests for option merging and colour parsing."""

    def test_defaults(self):
        options = merge_word_options(None)
        assert options["orientation"] == "portrait"
        assert options["margins"] == {"top": 1440, "right": 1440, "bottom": 1440, "left": 1440}
        assert options["page_size"] == {"width": 12240, "height": 15840}
        assert options["include_toc"] is False

    def test_partial_overrides(self):
        options = merge_word_options({"margins": {"top": 720}, "page_size": {"width": 11906}})
        assert options["margins"]["top"] == 720
        assert options["margins"]["left"] == 1440
        assert options["page_size"] == {"width": 11906, "height": 15840}

    @pytest.mark.parametrize("value,expected", [
        ("#ff0000", "FF0000"),
        ("1a5490", "1A5490"),
        ("red", "333333"),
        (None, "333333"),
    ])
    def test_hex_color(self, value, expected):
        assert hex_color(value, "333333") == expected


class TestBuildWordDocument:
    """Tests for build_word_document function."""

    def test_body_content(self, sample_html):
        doc = load(build_word_document(sample_html))
        texts = body_texts(doc)
        assert texts[0] == "Quarterly Report"
        assert "• Revenue up" in texts
        assert "1. Travel" in texts
        assert "2. Hosting" in texts
        assert doc.paragraphs[0].style.name == "Heading 1"

    def test_headings_are_bookmarked(self, sample_html):
        doc = load(build_word_document(sample_html))
        names = [b.get(qn("w:name")) for b in doc.element.body.iter(qn("w:bookmarkStart"))]
        assert names == ["_Toc00001", "_Toc00002"]

    def test_table_rendering(self, sample_html):
        doc = load(build_word_document(sample_html))
        table = doc.tables[0]
        assert table.cell(0, 0).text == "Region"
        assert table.cell(0, 0).paragraphs[0].runs[0].bold is True
        shd = table.cell(0, 1)._tc.tcPr.find(qn("w:shd"))
        assert shd.get(qn("w:fill")) == "F2F2F2"
        assert table.cell(1, 1).text == "10 & 20"
        assert table.cell(1, 1)._tc.tcPr.find(qn("w:shd")) is None

    def test_code_block_font(self, sample_html):
        doc = load(build_word_document(sample_html))
        code = next(p for p in doc.paragraphs if p.text.startswith("line one"))
        assert code.runs[0].font.name == "Courier New"

    def test_page_setup(self):
        doc = load(build_word_document("<p>x</p>", {"margins": {"left": 720}}))
        section = doc.sections[-1]
        assert section.page_width == Twips(12240)
        assert section.page_height == Twips(15840)
        assert section.left_margin == Twips(720)
        assert section.top_margin == Twips(1440)

    def test_landscape_swaps_dimensions(self):
        doc = load(build_word_document("<p>x</p>", {"orientation": "landscape"}))
        section = doc.sections[-1]
        assert section.orientation == WD_ORIENT.LANDSCAPE
        assert section.page_width == Twips(15840)
        assert section.page_height == Twips(12240)

    def test_table_of_contents(self, sample_html):
        doc = load(build_word_document(sample_html, {"include_toc": True}))
        assert doc.paragraphs[0].text == "Contents"
        anchors = [h.get(qn("w:anchor")) for h in doc.element.body.iter(qn("w:hyperlink"))]
        assert anchors == ["_Toc00001", "_Toc00002"]

        entry = next(p for p in doc.paragraphs if p._p.find(qn("w:hyperlink")) is not None and "Summary" in p._p.xml)
        assert entry.paragraph_format.left_indent == Twips(480)
        stop = entry.paragraph_format.tab_stops[0]
        assert stop.position == Twips(9000)

    def test_toc_skipped_without_headings(self):
        doc = load(build_word_document("<p>no headings</p>", {"include_toc": True}))
        assert "Contents" not in [p.text for p in doc.paragraphs]

    def test_cover_page(self):
        options = {
            "cover_page": {"title": "Annual Plan", "subtitle": "FY25", "author": "Ops", "version": "2.0"},
            "style_config": {"cover_background_color": "#112233"},
        }
        doc = load(build_word_document("<h1>Body</h1>", options))

        assert len(doc.sections) == 2
        cover_section = doc.sections[0]
        assert cover_section.left_margin == 0
        assert cover_section.top_margin == 0

        cover = doc.tables[0]
        cell = cover.cell(0, 0)
        texts = [p.text for p in cell.paragraphs if p.text]
        assert texts[:4] == ["Annual Plan", "FY25", "Version: 2.0", "Author: Ops"]
        assert cell._tc.tcPr.find(qn("w:shd")).get(qn("w:fill")) == "112233"
        title_run = next(p for p in cell.paragraphs if p.text == "Annual Plan").runs[0]
        assert title_run.bold is True
        assert title_run.font.size.pt == 28

        trPr = cover.rows[0]._tr.trPr
        assert trPr.find(qn("w:cantSplit")) is not None

    def test_cover_uses_primary_color_fallback(self):
        options = {"cover_page": {"title": "T"}, "style_config": {"primary_color": "445566"}}
        doc = load(build_word_document("<p>x</p>", options))
        shd = doc.tables[0].cell(0, 0)._tc.tcPr.find(qn("w:shd"))
        assert shd.get(qn("w:fill")) == "445566"

    def test_empty_html_fallback(self):
        doc = load(build_word_document(""))
        assert body_texts(doc) == ["HTML result is empty."]


class TestGenerateWord:
    """Tests for the Word operator pipeline."""

    def test_generate_from_html(self, local_storage, temp_dir):
        result = generate_word_from_html("<h1>{{title}}</h1>", {"title": "Hello"}, file_name="letter")

        assert result["success"] is True
        assert re.fullmatch(r"letter_[0-9a-f]{8}\.docx", result["fileName"])
        assert result["blobPath"].startswith("word-documents/")
        assert result["wordURL"].endswith(result["fileName"])

        stored = local_storage / result["blobPath"]
        assert stored.stat().st_size == result["fileSize"]
        assert body_texts(Document(str(stored)))[0] == "Hello"
        assert list((temp_dir / "word-generator").iterdir()) == []

    def test_generate_from_markdown(self, local_storage, temp_dir):
        result = generate_word_from_markdown(
            "# {{title}}\n\n- one\n- two\n", {"title": "Notes"}, word_options={"include_toc": True}
        )
        assert re.fullmatch(r"markdown_word_\d+_[0-9a-f]{8}\.docx", result["fileName"])

        doc = Document(str(local_storage / result["blobPath"]))
        texts = body_texts(doc)
        assert texts[0] == "Contents"
        assert "• one" in texts

    def test_failure_is_wrapped(self, local_storage, temp_dir):
        with patch('services.word_generator.build_word_document', side_effect=ValueError("bad")):
            with pytest.raises(OperatorError) as exc:
                generate_word_from_html("<p>x</p>")
        assert exc.value.code == "WORD_GENERATION_FAILED"
        assert exc.value.details == {"originalError": "bad"}

    def test_markdown_unknown_tags_render_blank(self, local_storage, temp_dir):
        result = generate_word_from_markdown("Total: {{amount}} units")
        doc = Document(str(local_storage / result["blobPath"]))
        assert body_texts(doc) == ["Total: units"]

# services/word_generator.py
"""
HTML to Word translation.

The HTML is first flattened into a list of block dicts (headings, paragraphs,
list items, code, rules, tables) so that headings are known before anything
is written; the table of contents can then be emitted ahead of the body.
"""
import os
import re
import logging
from io import BytesIO
from datetime import date, datetime, timezone
from typing import Any, Dict, List, Optional, Tuple

from bs4 import BeautifulSoup, Comment, NavigableString
from docx import Document
from docx.enum.section import WD_ORIENT, WD_SECTION
from docx.enum.table import WD_ALIGN_VERTICAL
from docx.enum.text import WD_ALIGN_PARAGRAPH, WD_BREAK, WD_TAB_ALIGNMENT, WD_TAB_LEADER
from docx.oxml.ns import qn
from docx.shared import Pt, RGBColor, Twips

from config import (
    TEMP_DIR,
    STORAGE_FOLDERS,
    MEDIA_TYPES,
    DEFAULT_WORD_MARGIN_TWIPS,
    DEFAULT_WORD_PAGE_WIDTH,
    DEFAULT_WORD_PAGE_HEIGHT,
    DEFAULT_PRIMARY_COLOR,
    DEFAULT_FONT_FAMILY,
)
from services.errors import OperatorError
from services.storage import store_document, dated_folder
from services.stylesheets import WORD_DEFAULT_CSS
from services.templating import (
    resolve_template_source,
    render_template,
    markdown_to_html,
    build_full_html_document,
)
from utils.docx_utils import (
    shade_cell,
    apply_grid_borders,
    remove_table_borders,
    set_table_cell_margins,
    set_table_preferred_width,
    set_row_height,
    set_table_column_widths,
    tight_paragraph,
    add_bookmark,
    add_internal_hyperlink,
    add_page_ref_field,
)
from utils.file_utils import operator_temp_dir, cleanup_files
from utils.text_utils import unique_file_name, norm_txt

HEADING_TAGS = ("h1", "h2", "h3", "h4", "h5", "h6")
CONTAINER_TAGS = ("div", "section", "article", "main", "header", "footer", "nav", "aside", "figure", "center", "form")
BLOCK_TAGS = HEADING_TAGS + CONTAINER_TAGS + ("p", "pre", "hr", "ul", "ol", "table", "blockquote", "dl")
SKIP_TAGS = ("script", "style", "head", "title", "meta", "link", "noscript", "template")

HEADER_SHADING = "F2F2F2"
CODE_FONT = "Courier New"
LIST_INDENT_TWIPS = 720
TOC_INDENT_TWIPS = 480
TOC_TAB_TWIPS = 9000
# room left under the cover table for the section-break paragraph
COVER_SECTION_BREAK_TWIPS = 400

HEX_COLOR_RE = re.compile(r"^#?([0-9A-Fa-f]{6})$")


# ---------------------------------------------------------------------------
# Options
# ---------------------------------------------------------------------------

def merge_word_options(options: Optional[Dict[str, Any]]) -> Dict[str, Any]:
    options = options or {}
    margins = {side: DEFAULT_WORD_MARGIN_TWIPS for side in ("top", "right", "bottom", "left")}
    margins.update({k: v for k, v in (options.get("margins") or {}).items() if v is not None})
    page_size = {"width": DEFAULT_WORD_PAGE_WIDTH, "height": DEFAULT_WORD_PAGE_HEIGHT}
    page_size.update({k: v for k, v in (options.get("page_size") or {}).items() if v})
    return {
        "orientation": options.get("orientation") or "portrait",
        "margins": margins,
        "page_size": page_size,
        "cover_page": options.get("cover_page"),
        "include_toc": bool(options.get("include_toc")),
        "style_config": options.get("style_config") or {},
    }


def hex_color(value: Optional[str], default: str) -> str:
    m = HEX_COLOR_RE.match((value or "").strip())
    return m.group(1).upper() if m else default.upper()


def rgb(value: Optional[str], default: str) -> RGBColor:
    return RGBColor.from_string(hex_color(value, default))


# ---------------------------------------------------------------------------
# HTML -> blocks
# ---------------------------------------------------------------------------

def has_block_children(node) -> bool:
    return any(getattr(child, "name", None) in BLOCK_TAGS for child in node.children)


def node_runs(node, fmt: Optional[Dict[str, bool]] = None, skip=()) -> List[Dict[str, Any]]:
    """Runs for a single node (string or inline tag) under the inherited formatting."""
    fmt = fmt or {}
    if isinstance(node, Comment):
        return []
    if isinstance(node, NavigableString):
        text = re.sub(r"\s+", " ", str(node))
        return [dict(fmt, text=text)] if text else []

    name = node.name.lower()
    if name in SKIP_TAGS or name in skip:
        return []
    if name == "br":
        return [dict(fmt, text="\n")]
    if name == "img":
        alt = (node.get("alt") or "").strip()
        return [dict(fmt, text=f"[{alt}]")] if alt else []

    child_fmt = dict(fmt)
    if name in ("b", "strong", "th"):
        child_fmt["bold"] = True
    elif name in ("i", "em", "cite", "var"):
        child_fmt["italic"] = True
    elif name in ("u", "ins", "a"):
        child_fmt["underline"] = True
    elif name in ("s", "del", "strike"):
        child_fmt["strike"] = True
    elif name in ("code", "kbd", "samp", "tt"):
        child_fmt["code"] = True
    return collect_runs(node, child_fmt, skip)


def collect_runs(node, fmt: Optional[Dict[str, bool]] = None, skip=()) -> List[Dict[str, Any]]:
    """Flatten inline content into runs carrying bold/italic/underline/strike/code flags."""
    runs = []
    for child in node.children:
        inner = node_runs(child, fmt, skip)
        if getattr(child, "name", None) in BLOCK_TAGS and runs and inner:
            # block content nested inside inline context still starts on its own line
            runs.append(dict(fmt or {}, text="\n"))
        runs.extend(inner)
    return runs


def normalize_runs(runs: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
    """Trim edge whitespace, collapse doubled spaces across runs, merge equal neighbours."""
    out = []
    for run in runs:
        text = run["text"]
        if text != "\n" and out and (out[-1]["text"].endswith((" ", "\n"))):
            text = text.lstrip(" ")
        if not text:
            continue
        fmt = {k: v for k, v in run.items() if k != "text"}
        if out and {k: v for k, v in out[-1].items() if k != "text"} == fmt:
            out[-1]["text"] += text
        else:
            out.append(dict(fmt, text=text))

    if out:
        out[0]["text"] = out[0]["text"].lstrip()
        out[-1]["text"] = out[-1]["text"].rstrip()
        for run in out:
            run["text"] = re.sub(r" *\n *", "\n", run["text"])
    return [r for r in out if r["text"]]


def runs_text(runs: List[Dict[str, Any]]) -> str:
    return "".join(r["text"] for r in runs)


def parse_table(table) -> Optional[Dict[str, Any]]:
    """
    Header rows are the <thead> rows when the table is sectioned; otherwise the
    first row and any row containing <th>.
    """
    sectioned = table.find(["thead", "tbody"]) is not None
    rows = []
    own_rows = [tr for tr in table.find_all("tr") if tr.find_parent("table") is table]
    for idx, tr in enumerate(own_rows):
        cells = tr.find_all(["td", "th"], recursive=False)
        if not cells:
            continue
        if sectioned:
            is_header = tr.find_parent("thead") is not None
        else:
            is_header = idx == 0 or tr.find("th", recursive=False) is not None
        rows.append({
            "header": is_header,
            "cells": [norm_txt(c.get_text(" ")) for c in cells],
        })
    if not rows:
        return None
    return {"type": "table", "rows": rows}


class BlockParser:
    def __init__(self):
        self.blocks: List[Dict[str, Any]] = []
        self.headings: List[Dict[str, Any]] = []
        self.pending: List[Dict[str, Any]] = []
        self.bookmark_counter = 0

    def flush(self, quote=False):
        runs = normalize_runs(self.pending)
        self.pending = []
        if runs:
            self.blocks.append({"type": "paragraph", "runs": runs, "quote": quote})

    def add_paragraph(self, node, quote=False):
        runs = normalize_runs(collect_runs(node))
        if runs:
            self.blocks.append({"type": "paragraph", "runs": runs, "quote": quote})

    def add_heading(self, node):
        text = norm_txt(node.get_text(" "))
        if not text:
            return
        level = int(node.name[1])
        self.bookmark_counter += 1
        bookmark = f"_Toc{self.bookmark_counter:05d}"
        heading = {"level": level, "text": text, "bookmark": bookmark}
        self.headings.append(heading)
        self.blocks.append(dict(heading, type="heading", bookmark_id=self.bookmark_counter))

    def add_list(self, node, depth=0):
        ordered = node.name == "ol"
        try:
            start = int(node.get("start", 1))
        except ValueError:
            start = 1
        for offset, li in enumerate(node.find_all("li", recursive=False)):
            runs = normalize_runs(collect_runs(li, skip=("ul", "ol")))
            if runs:
                self.blocks.append({
                    "type": "list_item",
                    "runs": runs,
                    "ordered": ordered,
                    "index": start + offset,
                    "depth": depth,
                })
            for nested in li.find_all(["ul", "ol"], recursive=False):
                self.add_list(nested, depth + 1)

    def walk(self, container, quote=False):
        for child in container.children:
            if isinstance(child, Comment):
                continue
            if isinstance(child, NavigableString):
                if str(child).strip() or self.pending:
                    self.pending.append({"text": re.sub(r"\s+", " ", str(child))})
                continue

            name = child.name.lower()
            if name in SKIP_TAGS:
                continue
            if name not in BLOCK_TAGS and name != "br":
                self.pending.extend(node_runs(child))
                continue

            self.flush(quote)
            if name == "br":
                continue
            if name in HEADING_TAGS:
                self.add_heading(child)
            elif name == "p":
                self.add_paragraph(child, quote)
            elif name == "pre":
                text = child.get_text().strip("\n")
                if text.strip():
                    self.blocks.append({"type": "code", "text": text})
            elif name == "hr":
                self.blocks.append({"type": "rule"})
            elif name in ("ul", "ol"):
                self.add_list(child)
            elif name == "table":
                table = parse_table(child)
                if table:
                    self.blocks.append(table)
            elif name == "blockquote":
                if has_block_children(child):
                    self.walk(child, quote=True)
                else:
                    self.add_paragraph(child, quote=True)
            elif name == "dl":
                for item in child.find_all(["dt", "dd"], recursive=False):
                    runs = normalize_runs(collect_runs(item, {"bold": True} if item.name == "dt" else {}))
                    if runs:
                        self.blocks.append({"type": "paragraph", "runs": runs, "quote": item.name == "dd"})
            elif has_block_children(child):
                self.walk(child, quote)
            else:
                self.add_paragraph(child, quote)
        self.flush(quote)


def parse_html_blocks(html_str: str) -> Tuple[List[Dict[str, Any]], List[Dict[str, Any]]]:
    """
    Translate HTML into (blocks, headings).

    headings holds {level, text, bookmark} in document order; bookmarks are
    _Toc00001, _Toc00002, ... so the table of contents can link to them.
    """
    soup = BeautifulSoup(html_str or "", "html.parser")
    for tag in soup(["script", "style"]):
        tag.decompose()
    body = soup.body or soup

    parser = BlockParser()
    parser.walk(body)

    if not parser.blocks:
        text = norm_txt(body.get_text(" "))
        if text:
            parser.blocks.append({"type": "paragraph", "runs": [{"text": text}], "quote": False})

    return parser.blocks, parser.headings


# ---------------------------------------------------------------------------
# blocks -> docx
# ---------------------------------------------------------------------------

def add_runs(paragraph, runs: List[Dict[str, Any]]):
    for r in runs:
        parts = r["text"].split("\n")
        for i, part in enumerate(parts):
            if i > 0:
                paragraph.add_run().add_break()
            if not part:
                continue
            run = paragraph.add_run(part)
            if r.get("bold"):
                run.bold = True
            if r.get("italic"):
                run.italic = True
            if r.get("underline"):
                run.underline = True
            if r.get("strike"):
                run.font.strike = True
            if r.get("code"):
                run.font.name = CODE_FONT


def content_width_twips(section) -> int:
    return int((section.page_width - section.left_margin - section.right_margin) / Twips(1))


def render_table(doc, block: Dict[str, Any]):
    rows = block["rows"]
    cols = max(len(r["cells"]) for r in rows)
    tbl = doc.add_table(rows=len(rows), cols=cols)
    try:
        tbl.style = "Table Grid"
    except KeyError:
        logging.debug("Table Grid style not available; relying on explicit borders")
    apply_grid_borders(tbl)

    width = content_width_twips(doc.sections[-1])
    set_table_preferred_width(tbl, width)
    set_table_column_widths(tbl, [width // cols] * cols)

    for r_idx, row in enumerate(rows):
        for c_idx in range(cols):
            cell = tbl.cell(r_idx, c_idx)
            p = cell.paragraphs[0]
            text = row["cells"][c_idx] if c_idx < len(row["cells"]) else ""
            if text:
                run = p.add_run(text)
                run.bold = row["header"]
            cell.vertical_alignment = WD_ALIGN_VERTICAL.TOP
            if row["header"]:
                shade_cell(cell, HEADER_SHADING)

    spacer = doc.add_paragraph()
    spacer.paragraph_format.space_after = Twips(200)
    return tbl


def render_blocks(doc, blocks: List[Dict[str, Any]], style: Optional[Dict[str, Any]] = None):
    style = style or {}
    heading_color = rgb(style["primary_color"], DEFAULT_PRIMARY_COLOR) if style.get("primary_color") else None
    for block in blocks:
        kind = block["type"]
        if kind == "heading":
            p = doc.add_paragraph(style=f"Heading {block['level']}")
            p.paragraph_format.space_before = Twips(400)
            p.paragraph_format.space_after = Twips(200)

            def heading_run(par, text=block["text"]):
                run = par.add_run(text)
                run.bold = True
                if heading_color is not None:
                    run.font.color.rgb = heading_color
                return run

            add_bookmark(p, block["bookmark"], block["bookmark_id"], heading_run)
        elif kind == "paragraph":
            p = doc.add_paragraph()
            p.paragraph_format.space_after = Twips(200)
            if block.get("quote"):
                p.paragraph_format.left_indent = Twips(LIST_INDENT_TWIPS)
            add_runs(p, block["runs"])
            if block.get("quote"):
                for run in p.runs:
                    run.italic = True
        elif kind == "code":
            p = doc.add_paragraph()
            p.paragraph_format.space_after = Twips(200)
            add_runs(p, [{"text": block["text"], "code": True}])
            for run in p.runs:
                run.font.size = Pt(10)
        elif kind == "rule":
            p = doc.add_paragraph()
            p.paragraph_format.space_before = Twips(200)
            p.paragraph_format.space_after = Twips(200)
        elif kind == "list_item":
            p = doc.add_paragraph()
            p.paragraph_format.space_after = Twips(100)
            p.paragraph_format.left_indent = Twips(LIST_INDENT_TWIPS * (block["depth"] + 1))
            marker = f"{block['index']}. " if block["ordered"] else "• "
            p.add_run(marker)
            add_runs(p, block["runs"])
        elif kind == "table":
            render_table(doc, block)


def add_cover_page(doc, cover: Dict[str, Any], style: Dict[str, Any], page_size: Dict[str, int]):
    """Full-page shaded single-cell table holding the cover text, in the last section."""
    section = doc.sections[-1]
    page_width, page_height = page_size["width"], page_size["height"]
    background = hex_color(style.get("cover_background_color") or style.get("primary_color"), DEFAULT_PRIMARY_COLOR)
    text_color = rgb(style.get("cover_text_color"), "FFFFFF")
    light_color = rgb(style.get("cover_text_light_color"), "FFFFFF")
    font = style.get("font_family") or DEFAULT_FONT_FAMILY

    section.top_margin = section.bottom_margin = Twips(0)
    section.left_margin = section.right_margin = Twips(0)
    section.header_distance = section.footer_distance = Twips(0)

    tbl = doc.add_table(rows=1, cols=1)
    remove_table_borders(tbl)
    set_table_cell_margins(tbl, 0, 0, 0, 0)
    set_table_preferred_width(tbl, page_width)
    set_table_column_widths(tbl, [page_width])
    set_row_height(tbl.rows[0], page_height - COVER_SECTION_BREAK_TWIPS, rule="exact", allow_break_across_pages=False)

    cell = tbl.cell(0, 0)
    shade_cell(cell, background)
    cell.vertical_alignment = WD_ALIGN_VERTICAL.CENTER

    lines = [
        (cover.get("title") or "Document Title", 28, True, False, text_color, 3000, 600),
        (cover.get("subtitle"), 14, False, True, light_color, 0, 1800),
        (cover.get("company_name"), 16, True, False, text_color, 0, 4000),
        (f"Version: {cover['version']}" if cover.get("version") else None, 11, False, False, text_color, 0, 200),
        (cover.get("department"), 11, False, False, text_color, 0, 200),
        (f"Author: {cover['author']}" if cover.get("author") else None, 11, False, False, text_color, 0, 200),
        (cover.get("date") or date.today().strftime("%B %d, %Y"), 11, False, False, text_color, 0, 0),
    ]

    first = cell.paragraphs[0]
    tight_paragraph(first)
    for text, size, bold, italic, color, before, after in lines:
        p = cell.add_paragraph()
        p.alignment = WD_ALIGN_PARAGRAPH.CENTER
        p.paragraph_format.space_before = Twips(before)
        p.paragraph_format.space_after = Twips(after)
        if not text:
            continue
        run = p.add_run(text)
        run.font.size = Pt(size)
        run.font.name = font
        run.font.color.rgb = color
        run.bold = bold
        run.italic = italic
    return tbl


def add_table_of_contents(doc, headings: List[Dict[str, Any]], style: Dict[str, Any]):
    primary = rgb(style.get("primary_color"), DEFAULT_PRIMARY_COLOR)
    link_color = hex_color(style.get("link_color") or style.get("primary_color"), DEFAULT_PRIMARY_COLOR)

    title = doc.add_paragraph(style="Heading 1")
    title.alignment = WD_ALIGN_PARAGRAPH.CENTER
    title.paragraph_format.space_before = Twips(400)
    title.paragraph_format.space_after = Twips(600)
    run = title.add_run("Contents")
    run.bold = True
    run.font.size = Pt(18)
    run.font.color.rgb = primary

    doc.add_paragraph().paragraph_format.space_after = Twips(300)

    for heading in headings:
        level = heading["level"]
        p = doc.add_paragraph()
        pf = p.paragraph_format
        pf.left_indent = Twips((level - 1) * TOC_INDENT_TWIPS)
        pf.space_before = Twips(200 if level == 1 else 100)
        pf.space_after = Twips(150 if level == 1 else 100)
        pf.tab_stops.add_tab_stop(Twips(TOC_TAB_TWIPS), WD_TAB_ALIGNMENT.RIGHT, WD_TAB_LEADER.DOTS)
        add_internal_hyperlink(
            p,
            heading["text"],
            heading["bookmark"],
            color=link_color,
            font_pt={1: 12, 2: 11}.get(level, 10),
            bold=level <= 2,
        )
        p.add_run("\t")
        add_page_ref_field(p, heading["bookmark"])

    doc.add_paragraph().add_run().add_break(WD_BREAK.PAGE)


def apply_base_style(doc, style: Dict[str, Any]):
    normal = doc.styles["Normal"]
    if style.get("font_family"):
        normal.font.name = style["font_family"]
        rpr = normal.element.get_or_add_rPr()
        rfonts = rpr.find(qn("w:rFonts"))
        if rfonts is not None:
            rfonts.set(qn("w:eastAsia"), style["font_family"])
    if style.get("text_color"):
        normal.font.color.rgb = rgb(style["text_color"], "333333")


def set_page_layout(section, options: Dict[str, Any]):
    width, height = options["page_size"]["width"], options["page_size"]["height"]
    if options["orientation"] == "landscape":
        section.orientation = WD_ORIENT.LANDSCAPE
        width, height = max(width, height), min(width, height)
    else:
        section.orientation = WD_ORIENT.PORTRAIT
    section.page_width = Twips(width)
    section.page_height = Twips(height)
    margins = options["margins"]
    section.top_margin = Twips(margins["top"])
    section.right_margin = Twips(margins["right"])
    section.bottom_margin = Twips(margins["bottom"])
    section.left_margin = Twips(margins["left"])
    return {"width": width, "height": height}


def build_word_document(html_str: str, options: Optional[Dict[str, Any]] = None) -> bytes:
    """
    Build a .docx from HTML: optional cover section, optional table of
    contents, then the translated body. Returns the file bytes.
    """
    options = merge_word_options(options)
    style = options["style_config"]
    doc = Document()
    apply_base_style(doc, style)

    blocks, headings = parse_html_blocks(html_str)

    section = doc.sections[0]
    if options["cover_page"]:
        page_size = set_page_layout(section, options)
        add_cover_page(doc, options["cover_page"], style, page_size)
        section = doc.add_section(WD_SECTION.NEW_PAGE)
    set_page_layout(section, options)

    if options["include_toc"] and headings:
        add_table_of_contents(doc, headings, style)

    render_blocks(doc, blocks, style)

    if not blocks:
        doc.add_paragraph("HTML result is empty.")

    bio = BytesIO()
    doc.save(bio)
    logging.info(
        f"Word document built: {len(blocks)} blocks, {len(headings)} headings, "
        f"cover={bool(options['cover_page'])}, toc={options['include_toc']}"
    )
    return bio.getvalue()


# ---------------------------------------------------------------------------
# Operator pipeline
# ---------------------------------------------------------------------------

def save_and_store(data: bytes, final_name: str) -> Dict[str, Any]:
    temp_dir = operator_temp_dir(TEMP_DIR, "word-generator")
    output_path = os.path.join(temp_dir, f"{final_name}.docx")
    try:
        with open(output_path, "wb") as f:
            f.write(data)
        file_size = os.path.getsize(output_path)
        stored = store_document(
            dated_folder(STORAGE_FOLDERS["word"]), f"{final_name}.docx", data, MEDIA_TYPES["docx"]
        )
    finally:
        cleanup_files(temp_dir, output_path)

    return {
        "success": True,
        "wordURL": stored["url"],
        "fileSize": file_size,
        "fileName": f"{final_name}.docx",
        "storageProvider": stored["provider"],
        "blobPath": stored["blob_path"],
        "generatedAt": datetime.now(timezone.utc).isoformat(),
    }


def generation_failed(e: Exception) -> OperatorError:
    logging.exception("Word generation failed")
    return OperatorError(
        f"Word generation failed: {e}", "WORD_GENERATION_FAILED", 500, {"originalError": str(e)}
    )


def generate_word_from_html(html_content: str, template_data: Optional[Dict[str, Any]] = None,
                            css_styles: str = "", file_name: Optional[str] = None,
                            word_options: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
    final_name = unique_file_name(file_name, "word")
    logging.info(f"Generating Word {final_name} from HTML (data keys: {sorted((template_data or {}).keys())})")
    try:
        filled = render_template(html_content, template_data)
        full_html = build_full_html_document(filled, css_styles, WORD_DEFAULT_CSS, "Generated Word")
        result = save_and_store(build_word_document(full_html, word_options), final_name)
    except OperatorError:
        raise
    except Exception as e:
        raise generation_failed(e) from e

    logging.info(f"Word generated: {result['fileName']} -> {result['wordURL']}")
    return result


def generate_word_from_markdown(markdown_template: str, template_data: Optional[Dict[str, Any]] = None,
                                css_styles: str = "", file_name: Optional[str] = None,
                                word_options: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
    final_name = unique_file_name(file_name, "markdown_word")
    logging.info(f"Generating Word {final_name} from Markdown (data keys: {sorted((template_data or {}).keys())})")
    try:
        content = resolve_template_source(markdown_template)
        filled = render_template(content, template_data, skip_empty=False)
        full_html = build_full_html_document(markdown_to_html(filled), css_styles, WORD_DEFAULT_CSS, "Generated Word")
        result = save_and_store(build_word_document(full_html, word_options), final_name)
    except OperatorError:
        raise
    except Exception as e:
        raise generation_failed(e) from e

    logging.info(f"Word generated: {result['fileName']} -> {result['wordURL']}")
    return result

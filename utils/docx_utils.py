# utils/docx_utils.py
from docx.shared import Pt, Twips
from docx.oxml import OxmlElement
from docx.oxml.ns import qn
from docx.text.paragraph import Paragraph
from docx.table import Table


def shade_cell(cell, hex_fill="F2F2F2"):
    tcPr = cell._tc.get_or_add_tcPr()
    shd = tcPr.find(qn("w:shd"))
    if shd is None:
        shd = OxmlElement("w:shd")
        tcPr.append(shd)
    shd.set(qn("w:val"), "clear")
    shd.set(qn("w:color"), "auto")
    shd.set(qn("w:fill"), hex_fill)


def tight_paragraph(p: Paragraph):
    pf = p.paragraph_format
    pf.space_before = Pt(0)
    pf.space_after = Pt(0)


def apply_grid_borders(tbl: Table, size=6, color="auto"):
    """Ensure visible borders regardless of style availability."""
    tblPr = tbl._tbl.tblPr
    borders = tblPr.find(qn("w:tblBorders"))
    if borders is None:
        borders = OxmlElement("w:tblBorders")
        tblPr.append(borders)
    for side in ("top", "left", "bottom", "right", "insideH", "insideV"):
        e = borders.find(qn(f"w:{side}"))
        if e is None:
            e = OxmlElement(f"w:{side}")
            borders.append(e)
        e.set(qn("w:val"), "single")
        e.set(qn("w:sz"), str(size))     # eighths of a point
        e.set(qn("w:space"), "0")
        e.set(qn("w:color"), color)


def remove_table_borders(tbl: Table):
    tblPr = tbl._tbl.tblPr
    borders = tblPr.find(qn("w:tblBorders"))
    if borders is None:
        borders = OxmlElement("w:tblBorders")
        tblPr.append(borders)
    for side in ("top", "left", "bottom", "right", "insideH", "insideV"):
        e = borders.find(qn(f"w:{side}"))
        if e is None:
            e = OxmlElement(f"w:{side}")
            borders.append(e)
        e.set(qn("w:val"), "nil")


def set_table_cell_margins(tbl: Table, top=0, bottom=0, left=0, right=0):
    """Internal cell padding for the whole table (Word: tblCellMar), in twips."""
    tblPr = tbl._tbl.tblPr
    cellMar = tblPr.find(qn("w:tblCellMar"))
    if cellMar is None:
        cellMar = OxmlElement("w:tblCellMar")
        tblPr.append(cellMar)

    for side, val in (("top", top), ("bottom", bottom), ("left", left), ("right", right)):
        node = cellMar.find(qn(f"w:{side}"))
        if node is None:
            node = OxmlElement(f"w:{side}")
            cellMar.append(node)
        node.set(qn("w:w"), str(int(val)))
        node.set(qn("w:type"), "dxa")


def set_table_preferred_width(table: Table, width_twips: int):
    # Disable autofit so Word respects widths
    table.autofit = False

    tblPr = table._tbl.tblPr
    tblW = tblPr.find(qn("w:tblW"))
    if tblW is None:
        tblW = OxmlElement("w:tblW")
        tblPr.append(tblW)
    tblW.set(qn("w:type"), "dxa")
    tblW.set(qn("w:w"), str(int(width_twips)))


def set_row_height(row, height_twips: int, rule="atLeast", allow_break_across_pages=True):
    trPr = row._tr.get_or_add_trPr()

    trHeight = trPr.find(qn("w:trHeight"))
    if trHeight is None:
        trHeight = OxmlElement("w:trHeight")
        trPr.append(trHeight)
    trHeight.set(qn("w:val"), str(int(height_twips)))
    trHeight.set(qn("w:hRule"), rule)

    # Word uses <w:cantSplit/> to PREVENT breaking
    cantSplit = trPr.find(qn("w:cantSplit"))
    if allow_break_across_pages:
        if cantSplit is not None:
            trPr.remove(cantSplit)
    elif cantSplit is None:
        trPr.append(OxmlElement("w:cantSplit"))


def set_cell_preferred_width(cell, width_twips: int):
    cell.width = Twips(width_twips)
    tcPr = cell._tc.get_or_add_tcPr()
    tcW = tcPr.find(qn("w:tcW"))
    if tcW is None:
        tcW = OxmlElement("w:tcW")
        tcPr.append(tcW)
    tcW.set(qn("w:type"), "dxa")
    tcW.set(qn("w:w"), str(int(width_twips)))


def set_table_column_widths(table: Table, col_widths_twips):
    for row in table.rows:
        for i, w in enumerate(col_widths_twips):
            set_cell_preferred_width(row.cells[i], w)


def add_bookmark(paragraph: Paragraph, name: str, bookmark_id: int, run_builder):
    """
    Wrap the runs produced by run_builder(paragraph) in a named bookmark.
    Returns whatever run_builder returns.
    """
    start = OxmlElement("w:bookmarkStart")
    start.set(qn("w:id"), str(bookmark_id))
    start.set(qn("w:name"), name)
    paragraph._p.append(start)

    result = run_builder(paragraph)

    end = OxmlElement("w:bookmarkEnd")
    end.set(qn("w:id"), str(bookmark_id))
    paragraph._p.append(end)
    return result


def add_internal_hyperlink(paragraph: Paragraph, text: str, anchor: str, color="0563C1",
                           font_pt=None, bold=False, underline=True):
    """
    Add a clickable link to a bookmark in the same document.
    """
    hyperlink = OxmlElement("w:hyperlink")
    hyperlink.set(qn("w:anchor"), anchor)
    hyperlink.set(qn("w:history"), "1")

    run = OxmlElement("w:r")
    rPr = OxmlElement("w:rPr")

    if bold:
        rPr.append(OxmlElement("w:b"))

    c = OxmlElement("w:color")
    c.set(qn("w:val"), color)
    rPr.append(c)

    if font_pt:
        sz = OxmlElement("w:sz")
        sz.set(qn("w:val"), str(int(font_pt * 2)))
        rPr.append(sz)
        szCs = OxmlElement("w:szCs")
        szCs.set(qn("w:val"), str(int(font_pt * 2)))
        rPr.append(szCs)

    if underline:
        u = OxmlElement("w:u")
        u.set(qn("w:val"), "single")
        u.set(qn("w:color"), color)
        rPr.append(u)

    run.append(rPr)

    t = OxmlElement("w:t")
    t.set(qn("xml:space"), "preserve")
    t.text = text
    run.append(t)

    hyperlink.append(run)
    paragraph._p.append(hyperlink)
    return hyperlink


def para_text(p: Paragraph) -> str:
    return "".join(run.text for run in p.runs)


def add_page_ref_field(paragraph: Paragraph, bookmark: str, placeholder=""):
    """PAGEREF field pointing at a bookmark; Word fills in the number when fields update."""
    fld = OxmlElement("w:fldSimple")
    fld.set(qn("w:instr"), f"PAGEREF {bookmark} \\h")
    run = OxmlElement("w:r")
    t = OxmlElement("w:t")
    t.set(qn("xml:space"), "preserve")
    t.text = placeholder
    run.append(t)
    fld.append(run)
    paragraph._p.append(fld)
    return fld

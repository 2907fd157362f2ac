# services/text_extractor.py
"""
Plain-text extraction from stored office documents.

Supported: pdf (pdfplumber), docx (python-docx), doc (antiword, or LibreOffice
headless as a fallback), xlsx (openpyxl), xls (xlrd), txt.
"""
import os
import codecs
import shutil
import logging
import subprocess
import uuid
from typing import Any, Iterable

import pdfplumber
import xlrd
from docx import Document
from docx.table import Table
from openpyxl import load_workbook

from config import (
    TEMP_DIR,
    ANTIWORD_BIN,
    SOFFICE_BIN,
    MAX_EXTRACT_FILE_SIZE,
    SUPPORTED_EXTRACT_FORMATS,
)
from services.errors import OperatorError
from services.storage import fetch_document
from utils.docx_utils import para_text
from utils.file_utils import operator_temp_dir, cleanup_files

CONVERTER_TIMEOUT = 60


def file_extension(file_name: str) -> str:
    return os.path.splitext(file_name or "")[1].lower().lstrip(".")


def cell_text(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value).strip()


def rows_to_text(rows: Iterable[Iterable[Any]]) -> list:
    """Non-empty cells joined by tabs; rows with no content are dropped."""
    lines = []
    for row in rows:
        cells = [cell_text(v) for v in row]
        line = "\t".join(c for c in cells if c)
        if line.strip():
            lines.append(line)
    return lines


def extract_from_pdf(path: str) -> str:
    with pdfplumber.open(path) as pdf:
        pages = [page.extract_text() or "" for page in pdf.pages]
    return "\n".join(pages)


def extract_from_docx(path: str) -> str:
    doc = Document(path)
    parts = []
    for item in doc.iter_inner_content():
        if isinstance(item, Table):
            for row in item.rows:
                line = "\t".join(cell.text.strip() for cell in row.cells if cell.text.strip())
                if line:
                    parts.append(line)
        else:
            parts.append(para_text(item))
    return "\n".join(parts)


def extract_from_doc(path: str) -> str:
    antiword = shutil.which(ANTIWORD_BIN)
    if antiword:
        proc = subprocess.run([antiword, path], capture_output=True, timeout=CONVERTER_TIMEOUT, check=True)
        return proc.stdout.decode("utf-8", errors="replace")

    soffice = shutil.which(SOFFICE_BIN)
    if soffice:
        out_dir = os.path.dirname(path)
        subprocess.run(
            [soffice, "--headless", "--convert-to", "txt:Text", "--outdir", out_dir, path],
            capture_output=True, timeout=CONVERTER_TIMEOUT, check=True,
        )
        txt_path = os.path.splitext(path)[0] + ".txt"
        try:
            with open(txt_path, "rb") as f:
                return decode_text(f.read())
        finally:
            cleanup_files(out_dir, txt_path)

    raise RuntimeError("No .doc converter available; install antiword or LibreOffice")


def extract_from_xlsx(path: str) -> str:
    wb = load_workbook(path, read_only=True, data_only=True)
    try:
        lines = []
        for ws in wb.worksheets:
            lines.extend(rows_to_text(ws.iter_rows(values_only=True)))
    finally:
        wb.close()
    return "\n".join(lines)


def extract_from_xls(path: str) -> str:
    book = xlrd.open_workbook(path)
    lines = []
    for sheet in book.sheets():
        lines.extend(rows_to_text(sheet.row_values(r) for r in range(sheet.nrows)))
    return "\n".join(lines)


def decode_text(data: bytes) -> str:
    if data.startswith(codecs.BOM_UTF8):
        return data[len(codecs.BOM_UTF8):].decode("utf-8", errors="replace")
    if data.startswith((codecs.BOM_UTF16_LE, codecs.BOM_UTF16_BE)):
        return data.decode("utf-16", errors="replace")
    for encoding in ("utf-8", "gbk"):
        try:
            return data.decode(encoding)
        except UnicodeDecodeError:
            continue
    return data.decode("utf-8", errors="replace")


def extract_from_txt(path: str) -> str:
    with open(path, "rb") as f:
        return decode_text(f.read())


EXTRACTORS = {
    "pdf": extract_from_pdf,
    "docx": extract_from_docx,
    "doc": extract_from_doc,
    "xlsx": extract_from_xlsx,
    "xls": extract_from_xls,
    "txt": extract_from_txt,
}


def extract_text(file_id: str) -> str:
    """Fetch the stored file and return its text. Failures raise TEXT_EXTRACTION_FAILED."""
    temp_dir = operator_temp_dir(TEMP_DIR, "text-extractor")
    temp_path = None
    try:
        file_name, data = fetch_document(file_id)
        extension = file_extension(file_name)
        if extension not in SUPPORTED_EXTRACT_FORMATS:
            raise ValueError(
                f"Unsupported file format: {extension or '(none)'}. "
                f"Supported formats: {', '.join(SUPPORTED_EXTRACT_FORMATS)}"
            )
        if len(data) > MAX_EXTRACT_FILE_SIZE:
            raise ValueError(f"File size exceeds the limit of {MAX_EXTRACT_FILE_SIZE} bytes")

        temp_path = os.path.join(temp_dir, f"extract_{uuid.uuid4().hex[:12]}.{extension}")
        with open(temp_path, "wb") as f:
            f.write(data)
        logging.info(f"Extracting text from {file_id} ({extension}, {len(data)} bytes)")

        text = EXTRACTORS[extension](temp_path)
    except Exception as e:
        logging.exception(f"Text extraction failed for {file_id}")
        raise OperatorError(
            f"Text extraction failed: {e}", "TEXT_EXTRACTION_FAILED", 500, {"originalError": str(e)}
        ) from e
    finally:
        cleanup_files(temp_dir, temp_path)

    logging.info(f"Extracted {len(text)} characters from {file_id}")
    return text

# services/__init__.py
from .errors import OperatorError
from .storage import upload_and_sas, save_local_and_url, store_document, fetch_document
from .templating import resolve_template_source, render_template, markdown_to_html, build_full_html_document
from .pdf_generator import generate_pdf_from_html, generate_pdf_from_markdown
from .word_generator import build_word_document, generate_word_from_html, generate_word_from_markdown
from .markdown_generator import generate_markdown, validate_markdown_syntax
from .text_extractor import extract_text

__all__ = [
    "OperatorError",
    "upload_and_sas",
    "save_local_and_url",
    "store_document",
    "fetch_document",
    "resolve_template_source",
    "render_template",
    "markdown_to_html",
    "build_full_html_document",
    "generate_pdf_from_html",
    "generate_pdf_from_markdown",
    "build_word_document",
    "generate_word_from_html",
    "generate_word_from_markdown",
    "generate_markdown",
    "validate_markdown_syntax",
    "extract_text",
]

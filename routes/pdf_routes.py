# routes/pdf_routes.py
import time
import logging

from fastapi import APIRouter

from config import MAX_HTML_SIZE, MAX_MARKDOWN_TEMPLATE_SIZE
from models.schemas import PdfFromHtmlRequest, PdfFromMarkdownRequest, options_dict
from routes.common import success, require_text, check_size
from services.errors import OperatorError
from services.pdf_generator import generate_pdf_from_html, generate_pdf_from_markdown

router = APIRouter(prefix="/api/document/pdf-generator", tags=["pdf-generator"])


@router.post("/generate-from-html")
def pdf_from_html(payload: PdfFromHtmlRequest):
    started = time.monotonic()
    html_template = require_text(payload.html_template, "MISSING_HTML_TEMPLATE", "htmlTemplate is required")
    check_size(html_template, MAX_HTML_SIZE, "HTML_TOO_LARGE", "HTML template")
    logging.info(f"Incoming payload to pdf generate-from-html: fileName={payload.file_name}, {len(html_template)} chars")

    result = generate_pdf_from_html(
        html_template,
        template_data=payload.template_data,
        file_name=payload.file_name,
        css_styles=payload.css_styles or "",
        pdf_options=options_dict(payload.pdf_options),
    )
    return success(result, "PDF generated successfully", started)


@router.post("/generate-from-markdown")
def pdf_from_markdown(payload: PdfFromMarkdownRequest):
    started = time.monotonic()
    markdown_template = require_text(
        payload.markdown_template, "MISSING_MARKDOWN_TEMPLATE", "markdownTemplate is required"
    )
    check_size(markdown_template, MAX_MARKDOWN_TEMPLATE_SIZE, "MARKDOWN_TOO_LARGE", "Markdown template")
    if payload.template_data is None:
        raise OperatorError("templateData is required and must be an object", "INVALID_TEMPLATE_DATA", 400)
    logging.info(
        f"Incoming payload to pdf generate-from-markdown: fileName={payload.file_name}, {len(markdown_template)} chars"
    )

    result = generate_pdf_from_markdown(
        markdown_template,
        payload.template_data,
        file_name=payload.file_name,
        css_styles=payload.css_styles or "",
        pdf_options=options_dict(payload.pdf_options),
    )
    return success(result, "PDF generated from Markdown successfully", started)

# routes/word_routes.py
import time
import logging

from fastapi import APIRouter

from config import MAX_HTML_SIZE, MAX_MARKDOWN_TEMPLATE_SIZE, STORAGE_FOLDERS, MEDIA_TYPES
from models.schemas import WordFromHtmlRequest, WordFromMarkdownRequest, options_dict
from routes.common import success, require_text, check_size, serve_download
from services.word_generator import generate_word_from_html, generate_word_from_markdown

router = APIRouter(prefix="/api/document/word-generator", tags=["word-generator"])


@router.post("/generate-from-html")
def word_from_html(payload: WordFromHtmlRequest):
    started = time.monotonic()
    html_content = require_text(payload.html_content, "MISSING_HTML_CONTENT", "htmlContent is required")
    check_size(html_content, MAX_HTML_SIZE, "HTML_TOO_LARGE", "HTML content")
    logging.info(f"Incoming payload to word generate-from-html: fileName={payload.file_name}, {len(html_content)} chars")

    result = generate_word_from_html(
        html_content,
        template_data=payload.template_data,
        css_styles=payload.css_styles or "",
        file_name=payload.file_name,
        word_options=options_dict(payload.word_options),
    )
    return success(result, "Word document generated successfully", started)


@router.post("/generate-from-markdown")
def word_from_markdown(payload: WordFromMarkdownRequest):
    started = time.monotonic()
    markdown_template = require_text(
        payload.markdown_template, "MISSING_MARKDOWN_TEMPLATE", "markdownTemplate is required"
    )
    check_size(markdown_template, MAX_MARKDOWN_TEMPLATE_SIZE, "MARKDOWN_TOO_LARGE", "Markdown template")
    logging.info(
        f"Incoming payload to word generate-from-markdown: fileName={payload.file_name}, {len(markdown_template)} chars"
    )

    result = generate_word_from_markdown(
        markdown_template,
        template_data=payload.template_data,
        css_styles=payload.css_styles or "",
        file_name=payload.file_name,
        word_options=options_dict(payload.word_options),
    )
    return success(result, "Word document generated from Markdown successfully", started)


@router.get("/download/{file_name}")
def download_word(file_name: str):
    return serve_download(STORAGE_FOLDERS["word"], file_name, "docx", MEDIA_TYPES["docx"])

# routes/markdown_routes.py
import time
import logging

from fastapi import APIRouter

from config import MAX_MARKDOWN_CONTENT_SIZE, VALID_LINE_ENDINGS, STORAGE_FOLDERS
from models.schemas import MarkdownGenerateRequest, MarkdownValidateRequest
from routes.common import success, require_text, check_size, serve_download
from services.errors import OperatorError
from services.markdown_generator import generate_markdown, validate_markdown_syntax

router = APIRouter(prefix="/api/document/markdown-generator", tags=["markdown-generator"])


@router.post("/generate")
def markdown_generate(payload: MarkdownGenerateRequest):
    started = time.monotonic()
    content = require_text(payload.markdown_content, "MISSING_MARKDOWN_CONTENT", "markdownContent is required")
    check_size(content, MAX_MARKDOWN_CONTENT_SIZE, "MARKDOWN_TOO_LARGE", "Markdown content")
    line_ending = payload.line_ending if payload.line_ending is not None else "\n"
    if line_ending not in VALID_LINE_ENDINGS:
        raise OperatorError("lineEnding must be one of \\n, \\r\\n or \\r", "INVALID_LINE_ENDING", 400)
    logging.info(f"Incoming payload to markdown generate: fileName={payload.file_name}, {len(content)} chars")

    result = generate_markdown(
        content,
        template_data=payload.template_data,
        file_name=payload.file_name,
        line_ending=line_ending,
    )
    return success(result, "Markdown file generated successfully", started)


@router.post("/validate")
def markdown_validate(payload: MarkdownValidateRequest):
    content = require_text(payload.markdown_content, "MISSING_MARKDOWN_CONTENT", "markdownContent is required")
    try:
        result = validate_markdown_syntax(content)
    except Exception as e:
        logging.exception("Markdown validation failed")
        raise OperatorError(f"Markdown validation failed: {e}", "VALIDATION_FAILED", 500) from e
    return success(result, "Markdown syntax validated")


@router.get("/download/{file_name}")
def download_markdown(file_name: str):
    return serve_download(STORAGE_FOLDERS["markdown"], file_name, "md", "text/markdown; charset=utf-8")

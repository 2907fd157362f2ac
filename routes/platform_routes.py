# routes/platform_routes.py
import os
import platform
import logging
import mimetypes
from datetime import datetime, timezone

from fastapi import APIRouter, HTTPException
from fastapi.responses import FileResponse

from config import SERVICE_NAME, SERVICE_VERSION, SUPPORTED_EXTRACT_FORMATS, VALID_LINE_ENDINGS
from services.storage import local_path, storage_provider

router = APIRouter(tags=["platform"])

OPERATORS = [
    {
        "name": "pdf-generator",
        "description": "Render HTML or Markdown templates with JSON data into PDF",
        "routes": [
            "POST /api/document/pdf-generator/generate-from-html",
            "POST /api/document/pdf-generator/generate-from-markdown",
        ],
    },
    {
        "name": "word-generator",
        "description": "Render HTML or Markdown templates with JSON data into Word (.docx)",
        "routes": [
            "POST /api/document/word-generator/generate-from-html",
            "POST /api/document/word-generator/generate-from-markdown",
            "GET /api/document/word-generator/download/{fileName}",
        ],
    },
    {
        "name": "markdown-generator",
        "description": "Fill Markdown templates and store them as .md files",
        "routes": [
            "POST /api/document/markdown-generator/generate",
            "POST /api/document/markdown-generator/validate",
            "GET /api/document/markdown-generator/download/{fileName}",
        ],
    },
    {
        "name": "text-extractor",
        "description": "Extract plain text from stored office documents",
        "routes": ["POST /api/document/text-extractor/extract"],
    },
]


@router.get("/healthz")
def healthz():
    return {"ok": True, "time": datetime.now(timezone.utc).isoformat()}


@router.get("/api/platform/info")
def platform_info():
    logging.info("Incoming request to platform info endpoint")
    return {
        "success": True,
        "message": "Platform info",
        "data": {
            "service": SERVICE_NAME,
            "version": SERVICE_VERSION,
            "python": platform.python_version(),
            "platform": platform.platform(),
            "storageProvider": storage_provider(),
            "operators": OPERATORS,
            "supportedExtractFormats": list(SUPPORTED_EXTRACT_FORMATS),
            "lineEndings": list(VALID_LINE_ENDINGS),
        },
    }


@router.get("/local/{path:path}")
def get_local_file(path: str):
    try:
        full = local_path(path)
    except ValueError:
        raise HTTPException(404, "Not found")
    if not os.path.isfile(full):
        raise HTTPException(404, "Not found")
    media_type = mimetypes.guess_type(full)[0] or "application/octet-stream"
    if full.endswith(".md"):
        media_type = "text/markdown"
    return FileResponse(full, media_type=media_type)

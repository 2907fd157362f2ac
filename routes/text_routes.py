# routes/text_routes.py
import time
import logging
from datetime import datetime, timezone

from fastapi import APIRouter

from config import MAX_FILE_ID_LENGTH, MAX_RESPONSE_TEXT_SIZE
from models.schemas import TextExtractRequest
from routes.common import success, require_text
from services.errors import OperatorError
from services.text_extractor import extract_text

router = APIRouter(prefix="/api/document/text-extractor", tags=["text-extractor"])


@router.post("/extract")
def extract(payload: TextExtractRequest):
    started = time.monotonic()
    file_id = require_text(payload.file_id, "MISSING_FILE_ID", "fileId is required")
    if len(file_id) > MAX_FILE_ID_LENGTH:
        raise OperatorError(
            f"fileId is too long (maximum {MAX_FILE_ID_LENGTH} characters)", "FILE_ID_TOO_LONG", 400
        )
    logging.info(f"Incoming payload to text extract: fileId={file_id}")

    full_text = extract_text(file_id)
    is_truncated = len(full_text) > MAX_RESPONSE_TEXT_SIZE
    text = full_text[:MAX_RESPONSE_TEXT_SIZE] if is_truncated else full_text

    data = {
        "text": text,
        "fileId": file_id,
        "textLength": len(full_text),
        "returnedLength": len(text),
        "isTruncated": is_truncated,
        "extractedAt": datetime.now(timezone.utc).isoformat(),
    }
    if is_truncated:
        data["message"] = (
            f"Text is too large ({len(full_text) / 1024:.2f}KB) and was truncated to the first "
            f"{MAX_RESPONSE_TEXT_SIZE // 1024}KB. Full text length: {len(full_text)} characters"
        )
    message = "Text extracted (content truncated)" if is_truncated else "Text extracted successfully"
    return success(data, message, started)

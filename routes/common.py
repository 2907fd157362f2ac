# routes/common.py
import os
import re
import time
import logging
from pathlib import Path
from typing import Any, Dict, Optional

from fastapi.responses import FileResponse

from config import LOCAL_SAVE_DIR
from services.errors import OperatorError


def elapsed_ms(started: float) -> int:
    return int((time.monotonic() - started) * 1000)


def success(data: Dict[str, Any], message: str, started: Optional[float] = None) -> Dict[str, Any]:
    if started is not None:
        data = dict(data, processingTimeMs=elapsed_ms(started))
    return {"success": True, "message": message, "data": data}


def require_text(value: Optional[str], code: str, message: str) -> str:
    if not isinstance(value, str) or not value:
        raise OperatorError(message, code, 400)
    return value


def check_size(value: str, limit: int, code: str, label: str):
    if len(value) > limit:
        raise OperatorError(f"{label} is too large, maximum is {limit // (1024 * 1024)}MB", code, 400)


def serve_download(folder: str, file_name: str, extension: str, media_type: str) -> FileResponse:
    """
    Serve a locally stored output by its bare file name, searching the
    operator's dated folders under LOCAL_SAVE_DIR.
    """
    if not re.fullmatch(rf"[A-Za-z0-9_-]+\.{extension}", file_name):
        raise OperatorError("Invalid file name", "INVALID_FILENAME", 400)

    root = Path(LOCAL_SAVE_DIR) / folder
    matches = sorted(root.rglob(file_name), key=lambda p: p.stat().st_mtime) if root.is_dir() else []
    if not matches:
        raise OperatorError("File not found", "FILE_NOT_FOUND", 404)

    path = str(matches[-1])
    logging.info(f"Serving download {file_name} from {path} ({os.path.getsize(path)} bytes)")
    return FileResponse(
        path,
        media_type=media_type,
        filename=file_name,
        headers={"Cache-Control": "no-cache"},
    )

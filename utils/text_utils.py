# utils/text_utils.py
import re
import time
import uuid
from typing import Optional


def sanitize(name: str) -> str:
    return re.sub(r"[^\w.-]+", "_", name or "").strip("_")


def short_text(s: Optional[str], limit: int = 50) -> str:
    if not s:
        return ""
    s = re.sub(r"\s+", " ", s.strip())
    return (s[: limit - 1] + "…") if len(s) > limit else s


def norm_txt(s: str) -> str:
    if not s:
        return ""
    # normalize NBSP and whitespace
    s = s.replace("\u00a0", " ")
    return " ".join(s.split())


def unique_file_name(file_name: Optional[str], prefix: str) -> str:
    """
    Build '<file_name>_<uuid8>', or '<prefix>_<epoch ms>_<uuid8>' when no name is given.
    Characters unsafe in storage paths are replaced with '_'.
    """
    unique_id = uuid.uuid4().hex[:8]
    base = sanitize(file_name or "")
    if base:
        return f"{base}_{unique_id}"
    return f"{prefix}_{int(time.time() * 1000)}_{unique_id}"

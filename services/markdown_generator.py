# services/markdown_generator.py
import os
import re
import logging
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from config import TEMP_DIR, STORAGE_FOLDERS, MEDIA_TYPES
from services.errors import OperatorError
from services.storage import store_document, dated_folder
from services.templating import resolve_template_source, render_template
from utils.file_utils import operator_temp_dir, cleanup_files
from utils.text_utils import unique_file_name

HEADING_OK_RE = re.compile(r"^#{1,6}\s")
HEADING_RE = re.compile(r"^#+")
LIST_OK_RE = re.compile(r"^\s*[-*+]\s")
LIST_RE = re.compile(r"^\s*[-*+]")
# thematic breaks (---, * * *) and emphasis (*word*, **word**) also start with a marker
NOT_A_LIST_RE = re.compile(r"^\s*(?:([-*_])(?:\s*\1){2,}\s*$|\*{1,2}\S)")
LINK_RE = re.compile(r"\[([^\]]*)\]\(([^)]*)\)")


def process_markdown(text: str, line_ending: str = "\n") -> str:
    """
    Normalise line endings to LF, strip trailing whitespace on every line,
    ensure one trailing newline, then convert to line_ending.
    """
    lines = text.replace("\r\n", "\n").replace("\r", "\n").split("\n")
    processed = "\n".join(line.rstrip() for line in lines)
    if not processed.endswith("\n"):
        processed += "\n"
    return processed.replace("\n", line_ending)


def count_lines(text: str) -> int:
    if not text:
        return 0
    return len(text.splitlines())


def validate_markdown_syntax(content: str) -> Dict[str, Any]:
    """Line-level lint: heading and list markers need a following space, links need a target."""
    lines = content.replace("\r\n", "\n").replace("\r", "\n").split("\n")
    issues: List[Dict[str, Any]] = []

    for line_no, line in enumerate(lines, start=1):
        if HEADING_RE.match(line) and not HEADING_OK_RE.match(line):
            issues.append({
                "line": line_no,
                "type": "warning",
                "message": "Heading marker should be followed by a space",
                "code": "HEADING_SPACE",
            })

        if LIST_RE.match(line) and not LIST_OK_RE.match(line) and not NOT_A_LIST_RE.match(line):
            issues.append({
                "line": line_no,
                "type": "warning",
                "message": "List marker should be followed by a space",
                "code": "LIST_SPACE",
            })

        for _, target in LINK_RE.findall(line):
            if not target.strip():
                issues.append({
                    "line": line_no,
                    "type": "warning",
                    "message": "Link target should not be empty",
                    "code": "EMPTY_LINK",
                })

    errors = sum(1 for i in issues if i["type"] == "error")
    warnings = sum(1 for i in issues if i["type"] == "warning")
    return {
        "isValid": errors == 0,
        "lineCount": len(lines),
        "issueCount": len(issues),
        "issues": issues,
        "summary": {"errors": errors, "warnings": warnings},
    }


def generate_markdown(markdown_content: str, template_data: Optional[Dict[str, Any]] = None,
                      file_name: Optional[str] = None, line_ending: str = "\n") -> Dict[str, Any]:
    final_name = unique_file_name(file_name, "markdown")
    logging.info(f"Generating Markdown {final_name} (line ending {line_ending!r})")

    temp_dir = operator_temp_dir(TEMP_DIR, "markdown-generator")
    output_path = os.path.join(temp_dir, f"{final_name}.md")
    try:
        content = resolve_template_source(markdown_content)
        filled = render_template(content, template_data)
        processed = process_markdown(filled, line_ending)
        data = processed.encode("utf-8")
        # newline="" keeps the requested line ending as-is on every platform
        with open(output_path, "w", encoding="utf-8", newline="") as f:
            f.write(processed)
        file_size = os.path.getsize(output_path)
        stored = store_document(
            dated_folder(STORAGE_FOLDERS["markdown"]), f"{final_name}.md", data, MEDIA_TYPES["md"]
        )
    except OperatorError:
        raise
    except Exception as e:
        logging.exception("Markdown generation failed")
        raise OperatorError(
            f"Markdown generation failed: {e}", "MARKDOWN_GENERATION_FAILED", 500, {"originalError": str(e)}
        ) from e
    finally:
        cleanup_files(temp_dir, output_path)

    result = {
        "success": True,
        "mdURL": stored["url"],
        "lineCount": count_lines(processed),
        "fileSize": file_size,
        "fileName": f"{final_name}.md",
        "storageProvider": stored["provider"],
        "blobPath": stored["blob_path"],
        "generatedAt": datetime.now(timezone.utc).isoformat(),
    }
    logging.info(f"Markdown generated: {result['fileName']} ({result['lineCount']} lines) -> {result['mdURL']}")
    return result

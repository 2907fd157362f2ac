# services/templating.py
import os
import re
import logging
from typing import Any, Dict, Optional

import chevron
import markdown
import requests
from bs4 import BeautifulSoup

from config import TEMPLATE_FETCH_TIMEOUT
from services.errors import OperatorError
from utils.text_utils import short_text

MARKDOWN_EXTENSIONS = ["tables", "fenced_code", "nl2br", "sane_lists"]

FULL_DOCUMENT_RE = re.compile(r"<!doctype|<html", re.IGNORECASE)


def looks_like_file_path(source: str) -> bool:
    return "\n" not in source and "#" not in source and ("/" in source or "\\" in source)


def resolve_template_source(source: str) -> str:
    """
    Return template text for a URL, a local file path, or inline template content.

    URLs are downloaded; a single-line path naming an existing file is read;
    everything else (including paths that do not exist) is treated as content.
    """
    if source.startswith(("http://", "https://")):
        try:
            resp = requests.get(source, timeout=TEMPLATE_FETCH_TIMEOUT)
            resp.raise_for_status()
        except requests.RequestException as e:
            raise OperatorError(f"Failed to download template: {e}", "TEMPLATE_FETCH_FAILED", 400)
        if not resp.encoding or resp.encoding.lower() == "iso-8859-1":
            resp.encoding = "utf-8"
        return resp.text

    if looks_like_file_path(source):
        if os.path.isfile(source):
            with open(source, "r", encoding="utf-8") as f:
                return f.read()
        logging.warning(f"Template file not found, using it as template content: {short_text(source)}")

    return source


def render_template(template: str, data: Optional[Dict[str, Any]], skip_empty: bool = True) -> str:
    """
    Mustache-render template with data. Empty data leaves the template
    untouched unless skip_empty is False, in which case unknown tags render blank.
    """
    if not data and skip_empty:
        return template
    return chevron.render(template, data or {})


def markdown_to_html(text: str) -> str:
    """
    Convert Markdown to an HTML fragment (tables, fenced code, hard line breaks).
    Tables are wrapped in <div class="table-container"> and every code block
    carries a language-* class.
    """
    html_body = markdown.markdown(text or "", extensions=MARKDOWN_EXTENSIONS)
    soup = BeautifulSoup(html_body, "html.parser")

    for code in soup.select("pre > code"):
        classes = code.get("class") or []
        if not any(c.startswith("language-") for c in classes):
            code["class"] = classes + ["language-text"]

    for table in soup.find_all("table"):
        wrapper = soup.new_tag("div", attrs={"class": "table-container"})
        table.wrap(wrapper)

    return str(soup)


def build_full_html_document(html_content: str, css: str = "", default_css: str = "",
                             title: str = "Generated Document") -> str:
    """Wrap an HTML fragment in a full document, or inject css into an existing one."""
    if FULL_DOCUMENT_RE.search(html_content):
        if css:
            style_tag = f"<style>{css}</style>"
            if "</head>" in html_content:
                return html_content.replace("</head>", f"{style_tag}</head>", 1)
            if "<head>" in html_content:
                return html_content.replace("<head>", f"<head>{style_tag}", 1)
        return html_content

    styles = f"{default_css}\n{css}" if css else default_css
    return (
        "<!DOCTYPE html>\n"
        "<html>\n"
        "<head>\n"
        '<meta charset="UTF-8">\n'
        '<meta name="viewport" content="width=device-width, initial-scale=1.0">\n'
        f"<title>{title}</title>\n"
        f"<style>{styles}</style>\n"
        "</head>\n"
        "<body>\n"
        f"{html_content}\n"
        "</body>\n"
        "</html>\n"
    )

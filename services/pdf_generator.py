# services/pdf_generator.py
import os
import logging
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from bs4 import BeautifulSoup, NavigableString

from config import (
    TEMP_DIR,
    STORAGE_FOLDERS,
    MEDIA_TYPES,
    DEFAULT_PDF_FORMAT,
    DEFAULT_PDF_MARGIN,
)
from services.errors import OperatorError
from services.storage import store_document, dated_folder
from services.stylesheets import PDF_DEFAULT_CSS
from services.templating import (
    resolve_template_source,
    render_template,
    markdown_to_html,
    build_full_html_document,
)
from utils.file_utils import operator_temp_dir, cleanup_files
from utils.text_utils import unique_file_name

PAGE_SIZES = {
    "a3": "A3",
    "a4": "A4",
    "a5": "A5",
    "b4": "B4",
    "b5": "B5",
    "letter": "letter",
    "legal": "legal",
    "ledger": "ledger",
    "tabloid": "11in 17in",
}

COUNTER_CLASSES = ["pageNumber", "totalPages"]

DEFAULT_PDF_OPTIONS = {
    "format": DEFAULT_PDF_FORMAT,
    "landscape": False,
    "margin": {side: DEFAULT_PDF_MARGIN for side in ("top", "right", "bottom", "left")},
    "print_background": True,
    "prefer_css_page_size": True,
    "display_header_footer": False,
    "header_template": None,
    "footer_template": None,
    "scale": 1.0,
}


def merge_pdf_options(options: Optional[Dict[str, Any]]) -> Dict[str, Any]:
    merged = dict(DEFAULT_PDF_OPTIONS)
    merged["margin"] = dict(DEFAULT_PDF_OPTIONS["margin"])
    for key, value in (options or {}).items():
        if value is None:
            continue
        if key == "margin":
            merged["margin"].update({k: v for k, v in value.items() if v})
        else:
            merged[key] = value
    return merged


def css_string(text: str) -> str:
    return '"' + text.replace("\\", "\\\\").replace('"', '\\"').replace("\n", "\\A ") + '"'


def margin_box_content(template: str) -> str:
    """
    Translate a header/footer HTML template into a CSS `content` value.
    Spans with class pageNumber / totalPages become page counters.
    """
    soup = BeautifulSoup(template or "", "html.parser")
    parts = []
    buffer = []

    def flush():
        if buffer:
            parts.append(css_string("".join(buffer)))
            buffer.clear()

    for node in soup.descendants:
        if isinstance(node, NavigableString):
            if node.find_parent(class_=COUNTER_CLASSES) is None:
                buffer.append(str(node))
            continue
        classes = node.get("class") or []
        if "pageNumber" in classes:
            flush()
            parts.append("counter(page)")
        elif "totalPages" in classes:
            flush()
            parts.append("counter(pages)")
    flush()
    return " ".join(parts) if parts else '""'


def build_page_css(options: Dict[str, Any]) -> str:
    size = PAGE_SIZES.get(str(options.get("format") or "").lower(), options.get("format") or DEFAULT_PDF_FORMAT)
    if options.get("landscape"):
        dims = size.split()
        # an orientation keyword is only valid after a named size
        if len(dims) == 2 and all(d[0].isdigit() for d in dims):
            size = f"{dims[1]} {dims[0]}"
        else:
            size = f"{size} landscape"
    margin = options.get("margin") or {}

    rules = [
        f"size: {size};",
        f"margin-top: {margin.get('top', DEFAULT_PDF_MARGIN)};",
        f"margin-right: {margin.get('right', DEFAULT_PDF_MARGIN)};",
        f"margin-bottom: {margin.get('bottom', DEFAULT_PDF_MARGIN)};",
        f"margin-left: {margin.get('left', DEFAULT_PDF_MARGIN)};",
    ]
    if options.get("display_header_footer"):
        if options.get("header_template"):
            rules.append(f"@top-center {{ content: {margin_box_content(options['header_template'])}; font-size: 9px; }}")
        if options.get("footer_template"):
            rules.append(f"@bottom-center {{ content: {margin_box_content(options['footer_template'])}; font-size: 9px; }}")

    css = "@page { " + " ".join(rules) + " }\n"

    if not options.get("print_background", True):
        css += "* { background: none !important; box-shadow: none !important; }\n"

    return css


def inject_head_style(html_content: str, css: str) -> str:
    style_tag = f"<style>{css}</style>"
    if "<head>" in html_content:
        return html_content.replace("<head>", f"<head>{style_tag}", 1)
    return style_tag + html_content


def render_pdf(html_content: str, options: Dict[str, Any], output_path: str) -> int:
    """Render html_content to output_path with WeasyPrint; returns the page count."""
    from weasyprint import CSS, HTML

    page_css = build_page_css(options)
    stylesheets = []
    if options.get("prefer_css_page_size", True):
        # document @page rules declared later win over these defaults
        html_content = inject_head_style(html_content, page_css)
    else:
        stylesheets.append(CSS(string=page_css))

    document = HTML(string=html_content, base_url=os.getcwd()).render(stylesheets=stylesheets)
    document.write_pdf(target=output_path, zoom=options.get("scale") or 1.0)
    logging.info(f"PDF rendered to {output_path} ({len(document.pages)} pages)")
    return len(document.pages)


def render_and_store(full_html: str, final_name: str, pdf_options: Optional[Dict[str, Any]]) -> Dict[str, Any]:
    temp_dir = operator_temp_dir(TEMP_DIR, "pdf-generator")
    output_path = os.path.join(temp_dir, f"{final_name}.pdf")
    try:
        page_count = render_pdf(full_html, merge_pdf_options(pdf_options), output_path)
        file_size = os.path.getsize(output_path)
        with open(output_path, "rb") as f:
            data = f.read()
        stored = store_document(
            dated_folder(STORAGE_FOLDERS["pdf"]), f"{final_name}.pdf", data, MEDIA_TYPES["pdf"]
        )
    finally:
        cleanup_files(temp_dir, output_path)

    return {
        "success": True,
        "pdfURL": stored["url"],
        "pageCount": page_count,
        "fileSize": file_size,
        "fileName": f"{final_name}.pdf",
        "storageProvider": stored["provider"],
        "blobPath": stored["blob_path"],
        "generatedAt": datetime.now(timezone.utc).isoformat(),
    }


def generation_failed(e: Exception) -> OperatorError:
    logging.exception("PDF generation failed")
    return OperatorError(
        f"PDF generation failed: {e}", "PDF_GENERATION_FAILED", 500, {"originalError": str(e)}
    )


def generate_pdf_from_html(html_template: str, template_data: Optional[Dict[str, Any]] = None,
                           file_name: Optional[str] = None, css_styles: str = "",
                           pdf_options: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
    final_name = unique_file_name(file_name, "pdf")
    logging.info(f"Generating PDF {final_name} from HTML (data keys: {sorted((template_data or {}).keys())})")
    try:
        content = resolve_template_source(html_template)
        filled = render_template(content, template_data)
        full_html = build_full_html_document(filled, css_styles, PDF_DEFAULT_CSS, "Generated PDF")
        result = render_and_store(full_html, final_name, pdf_options)
    except OperatorError:
        raise
    except Exception as e:
        raise generation_failed(e) from e

    logging.info(f"PDF generated: {result['fileName']} -> {result['pdfURL']}")
    return result


def generate_pdf_from_markdown(markdown_template: str, template_data: Dict[str, Any],
                               file_name: Optional[str] = None, css_styles: str = "",
                               pdf_options: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
    final_name = unique_file_name(file_name, "pdf")
    logging.info(f"Generating PDF {final_name} from Markdown (data keys: {sorted(template_data.keys())})")
    try:
        content = resolve_template_source(markdown_template)
        filled = render_template(content, template_data, skip_empty=False)
        full_html = build_full_html_document(markdown_to_html(filled), css_styles, PDF_DEFAULT_CSS, "Generated PDF")
        result = render_and_store(full_html, final_name, pdf_options)
    except OperatorError:
        raise
    except Exception as e:
        raise generation_failed(e) from e

    logging.info(f"PDF generated: {result['fileName']} -> {result['pdfURL']}")
    return result

# models/__init__.py
from .schemas import (
    PdfMargin,
    PdfOptions,
    PdfFromHtmlRequest,
    PdfFromMarkdownRequest,
    WordMargins,
    PageSize,
    CoverPage,
    StyleConfig,
    WordOptions,
    WordFromHtmlRequest,
    WordFromMarkdownRequest,
    MarkdownGenerateRequest,
    MarkdownValidateRequest,
    TextExtractRequest,
    options_dict,
)

__all__ = [
    "PdfMargin",
    "PdfOptions",
    "PdfFromHtmlRequest",
    "PdfFromMarkdownRequest",
    "WordMargins",
    "PageSize",
    "CoverPage",
    "StyleConfig",
    "WordOptions",
    "WordFromHtmlRequest",
    "WordFromMarkdownRequest",
    "MarkdownGenerateRequest",
    "MarkdownValidateRequest",
    "TextExtractRequest",
    "options_dict",
]

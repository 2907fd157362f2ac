# models/schemas.py
from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel
from typing import Dict, Any, Literal, Optional


class CamelModel(BaseModel):
    # camelCase on the wire, snake_case in Python
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# ---------------------------------------------------------------------------
# PDF
# ---------------------------------------------------------------------------

class PdfMargin(CamelModel):
    top: Optional[str] = None
    right: Optional[str] = None
    bottom: Optional[str] = None
    left: Optional[str] = None


class PdfOptions(CamelModel):
    format: Optional[str] = None
    landscape: Optional[bool] = None
    margin: Optional[PdfMargin] = None
    print_background: Optional[bool] = None
    prefer_css_page_size: Optional[bool] = Field(None, alias="preferCSSPageSize")
    display_header_footer: Optional[bool] = None
    header_template: Optional[str] = None
    footer_template: Optional[str] = None
    scale: Optional[float] = Field(None, gt=0, le=2)


class PdfFromHtmlRequest(CamelModel):
    html_template: Optional[str] = None
    template_data: Optional[Dict[str, Any]] = None
    file_name: Optional[str] = None
    css_styles: Optional[str] = None
    pdf_options: Optional[PdfOptions] = None


class PdfFromMarkdownRequest(CamelModel):
    markdown_template: Optional[str] = None
    # required by the operator; presence is checked by the route
    template_data: Optional[Dict[str, Any]] = None
    file_name: Optional[str] = None
    css_styles: Optional[str] = None
    pdf_options: Optional[PdfOptions] = None


# ---------------------------------------------------------------------------
# Word
# ---------------------------------------------------------------------------

class WordMargins(CamelModel):
    top: Optional[int] = Field(None, ge=0)
    right: Optional[int] = Field(None, ge=0)
    bottom: Optional[int] = Field(None, ge=0)
    left: Optional[int] = Field(None, ge=0)


class PageSize(CamelModel):
    width: Optional[int] = Field(None, gt=0)
    height: Optional[int] = Field(None, gt=0)


class CoverPage(CamelModel):
    title: str = "Document Title"
    subtitle: Optional[str] = None
    company_name: Optional[str] = None
    version: Optional[str] = None
    date: Optional[str] = None
    author: Optional[str] = None
    department: Optional[str] = None


class StyleConfig(CamelModel):
    primary_color: Optional[str] = None
    secondary_color: Optional[str] = None
    background_color: Optional[str] = None
    cover_background_color: Optional[str] = None
    text_color: Optional[str] = None
    text_light_color: Optional[str] = None
    cover_text_color: Optional[str] = None
    cover_text_light_color: Optional[str] = None
    link_color: Optional[str] = None
    font_family: Optional[str] = None


class WordOptions(CamelModel):
    orientation: Literal["portrait", "landscape"] = "portrait"
    margins: Optional[WordMargins] = None
    page_size: Optional[PageSize] = None
    cover_page: Optional[CoverPage] = None
    include_toc: bool = Field(False, alias="includeTOC")
    style_config: Optional[StyleConfig] = None


class WordFromHtmlRequest(CamelModel):
    html_content: Optional[str] = None
    template_data: Optional[Dict[str, Any]] = None
    css_styles: Optional[str] = None
    file_name: Optional[str] = None
    word_options: Optional[WordOptions] = None


class WordFromMarkdownRequest(CamelModel):
    markdown_template: Optional[str] = None
    template_data: Optional[Dict[str, Any]] = None
    css_styles: Optional[str] = None
    file_name: Optional[str] = None
    word_options: Optional[WordOptions] = None


# ---------------------------------------------------------------------------
# Markdown / text
# ---------------------------------------------------------------------------

class MarkdownGenerateRequest(CamelModel):
    markdown_content: Optional[str] = None
    template_data: Optional[Dict[str, Any]] = None
    file_name: Optional[str] = None
    line_ending: Optional[str] = None


class MarkdownValidateRequest(CamelModel):
    markdown_content: Optional[str] = None


class TextExtractRequest(CamelModel):
    file_id: Optional[str] = None


def options_dict(options: Optional[BaseModel]) -> Optional[Dict[str, Any]]:
    """Snake_case dict of the options that were actually set."""
    if options is None:
        return None
    return options.model_dump(exclude_none=True)

from .text_utils import (
    sanitize,
    short_text,
    norm_txt,
    unique_file_name,
)
from .file_utils import operator_temp_dir, is_inside, cleanup_files
from .docx_utils import (
    shade_cell,
    tight_paragraph,
    apply_grid_borders,
    remove_table_borders,
    set_table_cell_margins,
    set_table_preferred_width,
    set_row_height,
    set_cell_preferred_width,
    set_table_column_widths,
    add_bookmark,
    add_internal_hyperlink,
    add_page_ref_field,
    para_text,
)

__all__ = [
    # text utils
    "sanitize",
    "short_text",
    "norm_txt",
    "unique_file_name",
    # file utils
    "operator_temp_dir",
    "is_inside",
    "cleanup_files",
    # docx utils
    "shade_cell",
    "tight_paragraph",
    "apply_grid_borders",
    "remove_table_borders",
    "set_table_cell_margins",
    "set_table_preferred_width",
    "set_row_height",
    "set_cell_preferred_width",
    "set_table_column_widths",
    "add_bookmark",
    "add_internal_hyperlink",
    "add_page_ref_field",
    "para_text",
]

# config.py
import os
import tempfile

SERVICE_NAME = "document-operators"
SERVICE_VERSION = "1.0.0"

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()

# Azure Storage Configuration
AZURE_CONTAINER = os.getenv("AZURE_BLOB_CONTAINER", "document-operators")
AZURE_CONN_STR = os.getenv("AZURE_STORAGE_CONNECTION_STRING")  # optional
AZURITE_SAS_VERSION = os.getenv("AZURITE_SAS_VERSION", "2021-08-06")
SAS_TTL_MINUTES = int(os.getenv("SAS_TTL_MINUTES", "120"))

# Local Storage Configuration
LOCAL_SAVE_DIR = os.getenv("LOCAL_SAVE_DIR", "./_out")
PUBLIC_BASE_URL = os.getenv("PUBLIC_BASE_URL", "http://localhost:8000")

# Scratch space for rendered files before upload
TEMP_DIR = os.getenv("OPERATOR_TEMP_DIR", tempfile.gettempdir())

# Template Configuration
TEMPLATE_FETCH_TIMEOUT = float(os.getenv("TEMPLATE_FETCH_TIMEOUT", "10"))

# External tools for legacy .doc files
ANTIWORD_BIN = os.getenv("ANTIWORD_BIN", "antiword")
SOFFICE_BIN = os.getenv("SOFFICE_BIN", "soffice")

# Request limits
MAX_HTML_SIZE = 10 * 1024 * 1024
MAX_MARKDOWN_TEMPLATE_SIZE = 5 * 1024 * 1024
MAX_MARKDOWN_CONTENT_SIZE = 10 * 1024 * 1024
MAX_FILE_ID_LENGTH = 128
MAX_EXTRACT_FILE_SIZE = 50 * 1024 * 1024
MAX_RESPONSE_TEXT_SIZE = 100 * 1024

SUPPORTED_EXTRACT_FORMATS = ("pdf", "doc", "docx", "xls", "xlsx", "txt")
VALID_LINE_ENDINGS = ("\n", "\r\n", "\r")

# Storage folders per operator
STORAGE_FOLDERS = {
    "pdf": "pdf-documents",
    "word": "word-documents",
    "markdown": "markdown-documents",
}

# Page defaults
DEFAULT_PDF_MARGIN = "1cm"
DEFAULT_PDF_FORMAT = "A4"
DEFAULT_WORD_MARGIN_TWIPS = 1440
DEFAULT_WORD_PAGE_WIDTH = 12240
DEFAULT_WORD_PAGE_HEIGHT = 15840
DEFAULT_PRIMARY_COLOR = "1a5490"
DEFAULT_FONT_FAMILY = "Microsoft YaHei"

MEDIA_TYPES = {
    "pdf": "application/pdf",
    "docx": "application/vnd.openxmlformats-officedocument.wordprocessingml.document",
    "md": "text/markdown",
}

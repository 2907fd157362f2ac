# services/errors.py
from typing import Any, Optional


class OperatorError(Exception):
    """Failure raised by an operator, rendered as the JSON error envelope."""

    def __init__(self, message: str, code: str, status_code: int = 500, details: Optional[Any] = None):
        super().__init__(message)
        self.message = message
        self.code = code
        self.status_code = status_code
        self.details = details

    def to_content(self) -> dict:
        return {
            "success": False,
            "message": self.message,
            "error": {"code": self.code, "details": self.details},
        }

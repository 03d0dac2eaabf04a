from __future__ import annotations
import enum
import logging
from typing import Any, Callable, Dict, Optional

logger = logging.getLogger(__name__)

class ErrorKind(enum.Enum):
    """Fatal import failures. The value is the message key reported to the error sink."""
    UNREADABLE_INPUT = "cannotreaduploadfile"
    COPY_FAILED = "cannotcopybackup"
    EXTRACT_FAILED = "cannotunzip"
    MALFORMED_CONTENT = "invalidcontent"
    UNSUPPORTED_CONTENT_TYPE = "unsupportedtype"

MESSAGES: Dict[str, str] = {
    "cannotreaduploadfile": "Could not read uploaded file: {path}",
    "cannotcopybackup": "Could not copy package to scratch directory: {path}",
    "cannotunzip": "Could not unzip package: {path}",
    "invalidcontent": "Package content is missing or malformed: {detail}",
    "unsupportedtype": "Unsupported H5P content type: {library}",
}

ErrorSink = Callable[[str, Dict[str, Any]], None]

def format_message(error_key: str, context: Dict[str, Any]) -> str:
    template = MESSAGES.get(error_key, error_key)
    try:
        return template.format(**context)
    except (KeyError, IndexError):
        return template

def log_error_sink(error_key: str, context: Dict[str, Any]) -> None:
    """Default sink: log the localized message."""
    logger.error(format_message(error_key, context))

class H5PImportError(RuntimeError):
    def __init__(self, kind: ErrorKind, context: Optional[Dict[str, Any]] = None):
        self.kind = kind
        self.context = dict(context or {})
        super().__init__(format_message(kind.value, self.context))

def fail(kind: ErrorKind, sink: Optional[ErrorSink] = None, **context) -> H5PImportError:
    """Report a fatal error to the sink and return the exception to raise."""
    (sink or log_error_sink)(kind.value, context)
    return H5PImportError(kind, context)

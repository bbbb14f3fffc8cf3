"""
Safe Logging
============

Notes are personal. Titles, bodies and imported text must never land in
log files verbatim, so every logger that might see them goes through this
module. Structured context is passed as keyword arguments and rendered as
`message | key=value`; values under content keys are reduced to a length
marker.

Usage:
    from notesmap.utils.safe_logging import get_safe_logger

    logger = get_safe_logger(__name__)
    logger.info("Import rejected", reason="missing edges", text=raw)
    # INFO: Import rejected | reason=missing edges | text=<redacted 812 chars>
"""

import logging
import os
from typing import Any, Dict, Optional


class ContentRedactor:
    """Strips note content out of log context."""

    CONTENT_FIELDS = {'title', 'body', 'text', 'seed', 'content', 'query'}

    @staticmethod
    def redact_value(value: Any) -> str:
        if value is None:
            return "<none>"
        return f"<redacted {len(str(value))} chars>"

    @staticmethod
    def redact_dict(data: Dict[str, Any]) -> Dict[str, Any]:
        """Recursively redact content fields; other keys pass through."""
        if not isinstance(data, dict):
            return data

        redacted = {}
        for key, value in data.items():
            if key.lower() in ContentRedactor.CONTENT_FIELDS:
                redacted[key] = ContentRedactor.redact_value(value)
            elif isinstance(value, dict):
                redacted[key] = ContentRedactor.redact_dict(value)
            else:
                redacted[key] = value
        return redacted


class SafeLogger:
    """
    Logger wrapper with content redaction.

    Handlers are attached once per logger name; repeated get_safe_logger()
    calls for the same module reuse them.
    """

    def __init__(self, name: str, log_file: Optional[str] = None, level: Optional[str] = None):
        self.logger = logging.getLogger(name)
        if level is None:
            level = os.getenv('LOG_LEVEL', 'INFO')
        self.logger.setLevel(getattr(logging, str(level).upper(), logging.INFO))

        if not self.logger.handlers:
            console_handler = logging.StreamHandler()
            console_handler.setFormatter(logging.Formatter('%(levelname)s: %(message)s'))
            self.logger.addHandler(console_handler)

            if log_file:
                directory = os.path.dirname(log_file)
                if directory:
                    os.makedirs(directory, exist_ok=True)
                file_handler = logging.FileHandler(log_file)
                file_handler.setFormatter(logging.Formatter(
                    '%(asctime)s | %(name)s | %(levelname)s | %(message)s'
                ))
                self.logger.addHandler(file_handler)
            self.logger.propagate = False

    def _format_safe_message(self, message: str, **kwargs) -> str:
        if not kwargs:
            return message
        safe_kwargs = ContentRedactor.redact_dict(kwargs)
        kwargs_str = " | ".join(f"{k}={v}" for k, v in safe_kwargs.items())
        return f"{message} | {kwargs_str}"

    def debug(self, message: str, **kwargs):
        self.logger.debug(self._format_safe_message(message, **kwargs))

    def info(self, message: str, **kwargs):
        self.logger.info(self._format_safe_message(message, **kwargs))

    def warning(self, message: str, **kwargs):
        self.logger.warning(self._format_safe_message(message, **kwargs))

    def error(self, message: str, **kwargs):
        self.logger.error(self._format_safe_message(message, **kwargs))


def get_safe_logger(name: str, log_file: Optional[str] = None) -> SafeLogger:
    """
    Get a safe logger instance

    Args:
        name: Logger name (use __name__)
        log_file: Optional log file path; defaults to $LOG_FILE when set

    Returns:
        SafeLogger instance
    """
    if log_file is None:
        log_file = os.getenv('LOG_FILE') or None
    return SafeLogger(name, log_file)

"""
Logging service for the resource picker.
"""

import logging
import logging.handlers
import json
from datetime import datetime
from typing import Dict, Any, Optional

from textual.logging import TextualHandler

from ..models.config import PickerConfig


ROOT_LOGGER_NAME = 'resource_picker'


class StructuredFormatter(logging.Formatter):
    """Custom formatter for structured logging with JSON output."""

    def format(self, record: logging.LogRecord) -> str:
        """Format log record as structured JSON."""
        log_data = {
            'timestamp': datetime.fromtimestamp(record.created).isoformat(),
            'level': record.levelname,
            'logger': record.name,
            'message': record.getMessage(),
            'module': record.module,
            'function': record.funcName,
            'line': record.lineno
        }

        # Add context data if available
        if hasattr(record, 'context') and record.context:
            log_data['context'] = record.context

        # Add exception info if available
        if record.exc_info:
            log_data['exception'] = self.formatException(record.exc_info)

        return json.dumps(log_data, default=str)


class LoggingService:
    """Configures the package logger and offers context-aware helpers.

    Every module logs through ``logging.getLogger(__name__)``; records
    propagate to the ``resource_picker`` logger configured here. The file
    gets JSON lines, the terminal only gets warnings unless verbose.
    """

    def __init__(self, config: PickerConfig, verbose: bool = False):
        """
        Initialize the logging service.

        Args:
            config: Picker configuration containing logging settings
            verbose: Echo debug output to stderr as well
        """
        self.config = config
        self.verbose = verbose
        self.logger = self._setup_logger()

    def _setup_logger(self) -> logging.Logger:
        """Set up the package logger with file and console handlers."""
        logger = logging.getLogger(ROOT_LOGGER_NAME)
        logger.setLevel(logging.DEBUG if self.verbose else getattr(logging, self.config.logging_level.upper()))

        # Clear any existing handlers
        logger.handlers.clear()

        log_path = self.config.resolved_logging_file_path
        if log_path is not None:
            # Create log directory if it doesn't exist
            log_path.parent.mkdir(parents=True, exist_ok=True)

            # File handler with structured logging
            file_handler = logging.handlers.RotatingFileHandler(
                str(log_path),
                maxBytes=5 * 1024 * 1024,  # 5MB
                backupCount=3,
                encoding='utf-8'
            )
            file_handler.setFormatter(StructuredFormatter())
            logger.addHandler(file_handler)

        # Console handler: stderr while no screen is up, the textual log while one is
        console_handler = TextualHandler(stderr=True, stdout=False)
        console_handler.setLevel(logging.DEBUG if self.verbose else logging.WARNING)
        console_formatter = logging.Formatter(
            '%(asctime)s - %(levelname)s - %(message)s',
            datefmt='%Y-%m-%d %H:%M:%S'
        )
        console_handler.setFormatter(console_formatter)
        logger.addHandler(console_handler)

        return logger

    def log_info(self, message: str, context: Optional[Dict[str, Any]] = None) -> None:
        """Log an info message with optional context."""
        self.logger.info(message, extra={'context': context or {}})

    def log_warning(self, message: str, context: Optional[Dict[str, Any]] = None) -> None:
        """Log a warning message with optional context."""
        self.logger.warning(message, extra={'context': context or {}})

    def log_error(self, message: str, error: Optional[Exception] = None,
                  context: Optional[Dict[str, Any]] = None) -> None:
        """Log an error message with optional exception and context."""
        extra_context = dict(context or {})
        if error:
            extra_context.update({
                'error_type': type(error).__name__,
                'error_message': str(error)
            })

        self.logger.error(message, exc_info=error, extra={'context': extra_context})

    def log_debug(self, message: str, context: Optional[Dict[str, Any]] = None) -> None:
        """Log a debug message with optional context."""
        self.logger.debug(message, extra={'context': context or {}})

    def get_logger(self) -> logging.Logger:
        """Get the underlying logger instance for direct use."""
        return self.logger

    def close(self) -> None:
        """Close all logging handlers and clean up resources."""
        for handler in self.logger.handlers:
            handler.close()
        self.logger.handlers.clear()

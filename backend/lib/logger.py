"""
Console Logging for the Backend

Color-coded, structured log output:
- Level colors and per-component icons
- Pretty printing for dict/list payloads
- Section separators for startup and shutdown banners
"""

import json
import logging
import sys
from datetime import datetime
from pprint import pformat
from typing import Any, Dict, List, Optional


class Colors:
    """ANSI color codes for terminal output."""
    RESET = '\033[0m'
    BOLD = '\033[1m'

    # Log levels
    DEBUG = '\033[36m'      # Cyan
    INFO = '\033[32m'       # Green
    WARNING = '\033[33m'    # Yellow
    ERROR = '\033[31m'      # Red
    CRITICAL = '\033[35m'   # Magenta

    # Sections
    SECTION = '\033[94m'    # Bright Blue

    # Data
    KEY = '\033[93m'        # Bright Yellow
    VALUE = '\033[92m'      # Bright Green
    TIMESTAMP = '\033[90m'  # Dark Gray


LEVEL_COLORS = {
    'DEBUG': Colors.DEBUG,
    'INFO': Colors.INFO,
    'WARNING': Colors.WARNING,
    'ERROR': Colors.ERROR,
    'CRITICAL': Colors.CRITICAL,
}


class ColoredFormatter(logging.Formatter):
    """Formatter with colors, timestamps and component icons."""

    ICONS = {
        'DEBUG': '🔍',
        'INFO': 'ℹ️',
        'WARNING': '⚠️',
        'ERROR': '❌',
        'CRITICAL': '🚨',
    }

    # Keyed on the last segment of the logger name
    COMPONENT_ICONS = {
        'main': '🌐',
        'socratic_tutor': '🦉',
        'game_session': '🎮',
        'session_manager': '💾',
        'context_retriever': '📚',
        'rephraser': '💬',
        'response_enhancer': '✨',
        'difficulty_adapter': '📊',
    }

    def __init__(self, use_colors: bool = True):
        super().__init__()
        self.use_colors = use_colors and sys.stdout.isatty()

    def _paint(self, color: str, text: str) -> str:
        return f"{color}{text}{Colors.RESET}" if self.use_colors else text

    def format(self, record: logging.LogRecord) -> str:
        component = record.name.split('.')[-1]
        icon = self.COMPONENT_ICONS.get(component, self.ICONS.get(record.levelname, '•'))
        timestamp = datetime.fromtimestamp(record.created).strftime('%H:%M:%S.%f')[:-3]

        message = record.getMessage()
        stripped = message.strip()
        if stripped.startswith(('{', '[')):
            try:
                message = f"\n{pformat(json.loads(stripped), indent=2, width=100)}"
            except ValueError:
                pass

        formatted = (
            f"{self._paint(Colors.TIMESTAMP, f'[{timestamp}]')} "
            f"{icon} {self._paint(LEVEL_COLORS.get(record.levelname, Colors.RESET), f'{record.levelname:8s}')} "
            f"{self._paint(Colors.BOLD, record.name)} | {message}"
        )

        data = getattr(record, 'data', None)
        if data:
            formatted += "\n" + format_data(data, use_colors=self.use_colors)

        if record.exc_info:
            formatted += f"\n{self.formatException(record.exc_info)}"
        return formatted


def format_data(data: Any, indent: int = 2, use_colors: bool = False) -> str:
    """Indent nested dicts and lists; long lists are truncated to 3 items."""
    key_color = Colors.KEY if use_colors else ''
    value_color = Colors.VALUE if use_colors else ''
    reset = Colors.RESET if use_colors else ''
    pad = ' ' * indent
    closing_pad = ' ' * (indent - 2)

    if isinstance(data, dict):
        lines = []
        for key, value in data.items():
            if isinstance(value, (dict, list)):
                rendered = format_data(value, indent + 2, use_colors)
            else:
                rendered = f"{value_color}{value}{reset}"
            lines.append(f"{pad}{key_color}{key}{reset}: {rendered}")
        return "{\n" + "\n".join(lines) + f"\n{closing_pad}}}"

    if isinstance(data, list):
        shown: List[Any] = data[:3] if len(data) > 5 else data
        items = ",\n".join(f"{pad}{format_data(item, indent + 2, use_colors)}" for item in shown)
        more = f"\n{pad}... ({len(data)} items total)" if len(data) > 5 else ""
        return f"[\n{items}{more}\n{closing_pad}]"

    return str(data)


class StructuredLogger:
    """Logger wrapper with section banners and payload pretty printing."""

    SECTION_WIDTH = 80

    def __init__(self, name: str, logger: Optional[logging.Logger] = None):
        self.name = name
        self.logger = logger or logging.getLogger(name)

    def _with_data(self, message: str, data: Optional[Dict[str, Any]]) -> str:
        return f"{message}\n{format_data(data)}" if data else message

    def section(self, title: str, data: Optional[Dict[str, Any]] = None):
        """Log a banner for a major event (startup, shutdown)."""
        separator = "=" * self.SECTION_WIDTH
        self.logger.info(self._with_data(f"\n{separator}\n📋 {title.upper()}", data) + f"\n{separator}")

    def debug(self, message: str, data: Optional[Dict[str, Any]] = None):
        self.logger.debug(self._with_data(message, data))

    def info(self, message: str, data: Optional[Dict[str, Any]] = None):
        self.logger.info(self._with_data(message, data))

    def warning(self, message: str, data: Optional[Dict[str, Any]] = None):
        self.logger.warning(self._with_data(message, data))

    def error(self, message: str, error: Optional[Exception] = None, data: Optional[Dict[str, Any]] = None):
        """Log an error with the exception type and traceback, if given."""
        if error:
            message = f"{message} Error: {type(error).__name__}: {error}"
        self.logger.error(self._with_data(message, data), exc_info=error)

    def request(self, method: str, path: str, session_id: Optional[str] = None, data: Optional[Dict[str, Any]] = None):
        request_data = {"method": method, "path": path, "session_id": session_id}
        if data:
            request_data.update(data)
        self.logger.info(f"📥 REQUEST: {method} {path}", extra={"data": request_data})

    def response(self, status: int, path: str, duration: Optional[float] = None, data: Optional[Dict[str, Any]] = None):
        response_data = {
            "status": status,
            "path": path,
            "duration_ms": f"{duration * 1000:.2f}" if duration else None,
        }
        if data:
            response_data.update(data)
        self.logger.info(f"📤 RESPONSE: {status} {path}", extra={"data": response_data})


def setup_logging(level: int = logging.INFO, use_colors: bool = True):
    """Install the colored console handler on the root logger."""
    root_logger = logging.getLogger()
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(level)
    console_handler.setFormatter(ColoredFormatter(use_colors=use_colors))

    root_logger.setLevel(level)
    root_logger.addHandler(console_handler)

    # Suppress noisy loggers
    for noisy in ('asyncio', 'httpx', 'httpcore', 'openai'):
        logging.getLogger(noisy).setLevel(logging.WARNING)

    return root_logger


def get_logger(name: str) -> StructuredLogger:
    """Get a structured logger instance."""
    return StructuredLogger(name, logging.getLogger(name))

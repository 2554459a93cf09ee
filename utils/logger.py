"""
Enhanced logging with rich formatting and colorlog.
Provides Spring Boot-style logging with beautiful terminal output.
"""

import logging
import re
import sys
import uuid
from pathlib import Path
from typing import Optional

import colorlog
from rich.console import Console
from rich.panel import Panel

from utils.config import config, LOG_DIR

# Global console for rich output
console = Console()

# Request ID context for correlation
_request_context = {}


def get_request_id() -> str:
    """Get or create request ID for current context."""
    if "request_id" not in _request_context:
        _request_context["request_id"] = str(uuid.uuid4())[:8]
    return _request_context["request_id"]


def set_request_id(request_id: str):
    """Set request ID for current context."""
    _request_context["request_id"] = request_id


def clear_request_id():
    """Clear request ID from context."""
    _request_context.clear()


class SensitiveDataFilter(logging.Filter):
    """Filter to mask credentials that leak into URLs or messages."""

    SENSITIVE_PATTERNS = [
        ("token=", "token=***MASKED***"),
        ("api_key=", "api_key=***MASKED***"),
        ("password=", "password=***MASKED***"),
    ]

    def filter(self, record):
        if hasattr(record, "msg") and record.msg:
            msg = str(record.msg)
            for pattern, replacement in self.SENSITIVE_PATTERNS:
                if pattern in msg:
                    regex = rf"({re.escape(pattern)})([a-zA-Z0-9_.-]+)"
                    msg = re.sub(regex, replacement, msg)
            record.msg = msg
        return True


class ContextFilter(logging.Filter):
    """Add request ID and component name to log records."""

    def __init__(self, component: str = "SYSTEM"):
        super().__init__()
        self.component = component

    def filter(self, record):
        record.request_id = get_request_id()
        record.component = self.component
        return True


def setup_logger(
    name: str,
    level: str = "INFO",
    log_file: Optional[Path] = None,
    component: str = None
) -> logging.Logger:
    """
    Setup logger with colorlog formatting.

    Args:
        name: Logger name
        level: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        log_file: Optional file path for logging (defaults to LOG_DIR when LOG_TO_FILE is set)
        component: Component name for contextualized logging

    Returns:
        Configured logger instance
    """
    logger = logging.getLogger(name)
    logger.setLevel(getattr(logging, level.upper()))
    logger.handlers.clear()

    # Component name (use module name if not specified)
    comp = component or name.split(".")[-1].upper()

    console_handler = colorlog.StreamHandler(sys.stdout)
    console_handler.setLevel(getattr(logging, level.upper()))

    # Color formatter (Spring Boot style)
    console_formatter = colorlog.ColoredFormatter(
        fmt=(
            "%(log_color)s[%(asctime)s.%(msecs)03d] "
            "%(levelname)-8s "
            "%(white)s[%(request_id)s] "
            "%(cyan)s[%(component)s] "
            "%(message_log_color)s%(message)s"
        ),
        datefmt="%Y-%m-%d %H:%M:%S",
        log_colors={
            "DEBUG": "blue",
            "INFO": "green",
            "WARNING": "yellow",
            "ERROR": "red",
            "CRITICAL": "red,bg_white",
        },
        secondary_log_colors={
            "message": {
                "DEBUG": "white",
                "INFO": "white",
                "WARNING": "yellow",
                "ERROR": "red",
                "CRITICAL": "red,bg_white",
            }
        },
        reset=True,
        style="%"
    )

    console_handler.setFormatter(console_formatter)
    console_handler.addFilter(ContextFilter(comp))
    console_handler.addFilter(SensitiveDataFilter())
    logger.addHandler(console_handler)

    if log_file is None and config.log_to_file:
        log_file = LOG_DIR / "maintenance_reports.log"

    if log_file:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_file, encoding="utf-8")
        file_handler.setLevel(logging.DEBUG)

        # JSON-style formatter for file (easier parsing)
        file_formatter = logging.Formatter(
            fmt=(
                '{"timestamp":"%(asctime)s.%(msecs)03d",'
                '"level":"%(levelname)s",'
                '"request_id":"%(request_id)s",'
                '"component":"%(component)s",'
                '"logger":"%(name)s",'
                '"message":"%(message)s"}'
            ),
            datefmt="%Y-%m-%d %H:%M:%S"
        )
        file_handler.setFormatter(file_formatter)
        file_handler.addFilter(ContextFilter(comp))
        file_handler.addFilter(SensitiveDataFilter())
        logger.addHandler(file_handler)

    return logger


def print_banner():
    """Print application startup banner."""
    banner = """
╔══════════════════════════════════════════════════════════╗
║                                                          ║
║   ⚡  TRANSFORMER MAINTENANCE REPORTS  v1.0.0            ║
║   Inspection Aggregation & Annotated PDF Reports         ║
║                                                          ║
╚══════════════════════════════════════════════════════════╝
"""
    console.print(banner, style="bold cyan")


def print_summary_panel(title: str, content: dict, style: str = "green"):
    """
    Print summary information in a panel.

    Args:
        title: Panel title
        content: Dict of key-value pairs to display
        style: Panel border style (green, yellow, red, cyan)
    """
    text = "\n".join([f"[bold]{k}:[/bold] {v}" for k, v in content.items()])
    panel = Panel(text, title=title, border_style=style, expand=False)
    console.print(panel)


def print_error(error_type: str, message: str, details: Optional[str] = None):
    """
    Print error message in formatted panel.

    Args:
        error_type: Type of error
        message: Error message
        details: Optional detailed error information
    """
    content = f"[bold red]{error_type}[/bold red]\n\n{message}"
    if details:
        content += f"\n\n[dim]{details}[/dim]"

    panel = Panel(
        content,
        title="❌ Error",
        border_style="red",
        expand=False
    )
    console.print(panel)

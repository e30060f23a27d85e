"""
Simple leveled logger writing to the console (via Rich) and optionally a file.
"""

from __future__ import annotations

import json
import os
import sys
from datetime import datetime
from pathlib import Path
from typing import Optional, List

from rich.console import Console
from rich.markup import escape
from rich.table import Table

LEVELS = {"debug": 10, "info": 20, "warning": 30, "error": 40}
FORMATS = ("text", "json")
DEFAULT_LEVEL = "info"
DEFAULT_FORMAT = "text"

# Accepted spellings that map onto one of LEVELS
LEVEL_ALIASES = {"trace": "debug", "warn": "warning", "fatal": "error", "panic": "error"}

_STYLES = {
    "[DEBUG]": "dim",
    "[INFO]": "cyan",
    "[SUCCESS]": "green",
    "[WARNING]": "yellow",
    "[ERROR]": "bold red",
}


def normalize_level(value: str) -> str:
    """Lowercase a level name and resolve aliases such as ``WARN`` or ``trace``."""
    level = value.strip().lower()
    return LEVEL_ALIASES.get(level, level)


def normalize_format(value: str) -> str:
    return value.strip().lower()


def log_settings_from_env() -> tuple[str, str]:
    """Return (level, format) from LOG_LEVEL / LOG_FORMAT, falling back to defaults."""
    level = normalize_level(os.environ.get("LOG_LEVEL", DEFAULT_LEVEL))
    fmt = normalize_format(os.environ.get("LOG_FORMAT", DEFAULT_FORMAT))
    return level, fmt


class SimpleLogger:
    """Simple logger that writes to console and file.

    Keyword arguments passed to the level methods are treated as context
    fields: rendered as ``key=value`` in text format, or as JSON keys.
    """

    def __init__(
        self,
        log_file: Optional[Path] = None,
        level: str = DEFAULT_LEVEL,
        fmt: str = DEFAULT_FORMAT,
        console: Optional[Console] = None,
        err_console: Optional[Console] = None,
    ):
        level = normalize_level(level)
        fmt = normalize_format(fmt)
        if level not in LEVELS:
            raise ValueError(f"unknown log level {level!r} (valid: {', '.join(LEVELS)})")
        if fmt not in FORMATS:
            raise ValueError(f"unknown log format {fmt!r} (valid: {', '.join(FORMATS)})")
        self.log_file = log_file
        self.level = level
        self.fmt = fmt
        self.console = console or Console(file=sys.stdout, highlight=False)
        self.err_console = err_console or Console(file=sys.stderr, highlight=False)

        if self.log_file:
            self.log_file.parent.mkdir(parents=True, exist_ok=True)
            with open(self.log_file, 'a', encoding='utf-8') as f:
                f.write(f"\n{'='*60}\n")
                f.write(f"Session started: {datetime.now().isoformat()}\n")
                f.write(f"{'='*60}\n")

    def enabled(self, level: str) -> bool:
        return LEVELS[level] >= LEVELS[self.level]

    def log(self, message: str, prefix: str = "", error: bool = False, **fields: object) -> None:
        """Log a message to console and file.

        Args:
            message: The message to log
            prefix: Optional prefix like [INFO], [ERROR], etc.
            error: Whether to write to stderr instead of stdout
            fields: Context fields appended to the message
        """
        timestamp = datetime.now().strftime("%H:%M:%S")

        if self.fmt == "json":
            record = {"time": datetime.now().isoformat(), "level": prefix.strip("[]").lower() or "info", "msg": message}
            record.update({k: _jsonable(v) for k, v in fields.items()})
            formatted = json.dumps(record)
            styled = escape(formatted)
        else:
            ctx = " ".join(f"{k}={v}" for k, v in fields.items())
            body = f"{message} {ctx}" if ctx else message
            formatted = f"[{timestamp}] {prefix} {body}" if prefix else f"[{timestamp}] {body}"
            style = _STYLES.get(prefix)
            tag = f"[{style}]{escape(prefix)}[/] " if (prefix and style) else (f"{escape(prefix)} " if prefix else "")
            styled = f"[dim]\\[{timestamp}][/] {tag}{escape(body)}"

        output = self.err_console if error else self.console
        output.print(styled, soft_wrap=True)

        if self.log_file:
            try:
                with open(self.log_file, 'a', encoding='utf-8') as f:
                    f.write(formatted + '\n')
            except OSError:
                pass  # Don't fail on logging errors

    def table(self, headers: List[str], rows: List[List[str]], title: Optional[str] = None) -> None:
        """Print a table to the console; the file gets ``key: value`` lines.

        Args:
            headers: Column headers
            rows: Table rows
            title: Optional table title
        """
        if not headers or not rows:
            return
        if self.fmt == "json":
            for row in rows:
                self.info(title or "table", **{h: c for h, c in zip(headers, row)})
            return

        table = Table(title=title, show_header=True, header_style="bold")
        for h in headers:
            table.add_column(h)
        for row in rows:
            table.add_row(*(escape(str(c)) for c in row))
        self.console.print(table)

        if self.log_file:
            try:
                with open(self.log_file, 'a', encoding='utf-8') as f:
                    if title:
                        f.write(f"{title}\n")
                    for row in rows:
                        f.write("  " + " | ".join(f"{h}: {c}" for h, c in zip(headers, row)) + "\n")
            except OSError:
                pass

    def section(self, title: str) -> None:
        """Print a section header.

        Args:
            title: Section title
        """
        if self.fmt == "json":
            return
        self.console.rule(escape(title))
        if self.log_file:
            try:
                with open(self.log_file, 'a', encoding='utf-8') as f:
                    f.write(f"\n{'=' * 60}\n{title.center(60)}\n{'=' * 60}\n")
            except OSError:
                pass

    def debug(self, message: str, **fields: object) -> None:
        """Log a debug message."""
        if self.enabled("debug"):
            self.log(message, prefix="[DEBUG]", **fields)

    def info(self, message: str, **fields: object) -> None:
        """Log an info message."""
        if self.enabled("info"):
            self.log(message, prefix="[INFO]", **fields)

    def success(self, message: str, **fields: object) -> None:
        """Log a success message."""
        if self.enabled("info"):
            self.log(message, prefix="[SUCCESS]", **fields)

    def warning(self, message: str, **fields: object) -> None:
        """Log a warning message."""
        if self.enabled("warning"):
            self.log(message, prefix="[WARNING]", error=True, **fields)

    def error(self, message: str, **fields: object) -> None:
        """Log an error message."""
        self.log(message, prefix="[ERROR]", error=True, **fields)


def _jsonable(value: object) -> object:
    if isinstance(value, (str, int, float, bool)) or value is None:
        return value
    return str(value)

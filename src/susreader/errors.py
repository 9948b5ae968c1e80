from __future__ import annotations


class SusError(Exception):
    """Base error for SUS chart reading."""


class SusParseError(SusError):
    """Raised when a chart line or declaration cannot be turned into timing data."""

    def __init__(self, message: str, line_no: int = 0):
        self.line_no = int(line_no)
        if self.line_no > 0:
            message = f"line {self.line_no}: {message}"
        super().__init__(message)

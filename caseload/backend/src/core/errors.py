"""Error types raised by the timesheet engine."""

from __future__ import annotations


class ParseError(ValueError):
    """Raised when a required date or time string cannot be parsed."""

    def __init__(self, value: object, field: str | None = None) -> None:
        self.value = value
        self.field = field
        label = f" for {field}" if field else ""
        super().__init__(f"Unable to parse {value!r}{label}")


__all__ = ["ParseError"]

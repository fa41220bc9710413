from __future__ import annotations

from typing import NamedTuple


class ConverterError(ValueError):
    """Base class for recoverable conversion/export failures."""


class ValidationError(ConverterError):
    """Missing file or a file that is not CSV."""


class EmptyInputError(ConverterError):
    """The CSV has no non-blank lines."""


class UnexpectedParseError(ConverterError):
    """Any other failure while parsing lines or building rows."""


class ExportPreconditionError(ConverterError):
    """Export was requested without records or without sections.

    Carries a `title`/`body` pair for the blocking error panel.
    """

    def __init__(self, message: str, title: str = "Export Error", body: str = ""):
        super().__init__(message)
        self.title = title
        self.body = body or message


class StatusMessage(NamedTuple):
    kind: str
    message: str

    @classmethod
    def success(cls, message: str) -> "StatusMessage":
        return cls("success", message)

    @classmethod
    def error(cls, message: str) -> "StatusMessage":
        return cls("error", message)

    def render(self) -> str:
        if not self.message:
            return ""
        prefix = "Success" if self.kind == "success" else "Error"
        return f"{prefix}: {self.message}"

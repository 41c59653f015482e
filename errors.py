"""
Exceptions raised while generating an EOD report.

    ReportGenerationError
      ├─ InputShapeError           : bad or unreadable input data
      └─ TemplateConfigurationError: template does not match the layout

Both are fatal: the run stops before (or during) mutation and the caller
must not deliver the workbook.  Recoverable anomalies (malformed dispatch
rows, per-cell style failures) are logged instead of raised.
"""

from __future__ import annotations

from typing import Iterable


class ReportGenerationError(Exception):
    """Base class for fatal report-generation failures."""


class InputShapeError(ReportGenerationError):
    """The dispatch data or template workbook cannot be used at all."""


class TemplateConfigurationError(ReportGenerationError):
    """The configured template block does not match the template file."""

    def __init__(self, message: str, expected_tokens: Iterable[str] = ()):
        self.expected_tokens = list(expected_tokens)
        if self.expected_tokens:
            message = f"{message} (expected one of: {', '.join(self.expected_tokens)})"
        super().__init__(message)

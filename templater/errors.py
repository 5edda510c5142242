"""
Exception hierarchy for the templater.

All expected errors caused by template content, context data or module
behaviour inherit from TemplaterUserError. They are caught at node or
phase boundaries and turned into diagnostics unless strict mode escalates
them.

Programming errors and bugs should NOT inherit from TemplaterUserError.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Optional

if TYPE_CHECKING:
    from .diagnostics import ErrorRecord
    from .pipeline import PipelineResult


class TemplaterUserError(Exception):
    """
    Base class for all user-facing templater errors.

    Attributes:
        position: Offset in the source text the error refers to, if known
    """

    def __init__(self, message: str, position: Optional[int] = None):
        super().__init__(message)
        self.message = message
        self.position = position

    def __str__(self) -> str:
        if self.position is None:
            return self.message
        return f"{self.message} (at {self.position})"


class TemplateSyntaxError(TemplaterUserError):
    """Unbalanced or malformed block tags."""
    pass


class ResolutionError(TemplaterUserError):
    """Context path could not be resolved."""

    def __init__(self, path: str, position: Optional[int] = None):
        super().__init__(f"Missing data for '{path}'", position)
        self.path = path


class TemplateTypeError(TemplaterUserError):
    """Context value has the wrong shape (e.g. loop over a scalar)."""
    pass


class ModuleError(TemplaterUserError):
    """Raised by (or on behalf of) a module phase implementation."""

    def __init__(self, module: str, phase: str, message: str, position: Optional[int] = None):
        super().__init__(f"Module '{module}' failed in {phase}: {message}", position)
        self.module = module
        self.phase = phase


class ConfigError(TemplaterUserError):
    """Invalid render options."""
    pass


class FatalError(TemplaterUserError):
    """
    Error escalated to fatal (strict mode or syntax error).

    Wraps the diagnostic that caused the escalation.
    """

    def __init__(self, record: ErrorRecord):
        super().__init__(record.message, record.position)
        self.record = record


class RenderAborted(FatalError):
    """
    Whole render invocation aborted.

    `result` keeps what was completed before the abort, including the
    full list of error records.
    """

    def __init__(self, record: ErrorRecord, result: PipelineResult):
        super().__init__(record)
        self.result = result


__all__ = [
    "TemplaterUserError",
    "TemplateSyntaxError",
    "ResolutionError",
    "TemplateTypeError",
    "ModuleError",
    "ConfigError",
    "FatalError",
    "RenderAborted",
]

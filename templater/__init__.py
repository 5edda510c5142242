"""
Ядро шаблонизатора документов.

Превращает текст шаблонов, извлечённый из офисных документов, в
отрендеренный текст и структурные подсказки с помощью конвейера модулей,
упорядоченного по приоритету.
"""

from __future__ import annotations

from .assets import AssetIdAllocator, AssetSink, InMemoryAssetSink
from .config import RenderOptions, load_options
from .context import resolve
from .diagnostics import ErrorCollector, ErrorKind, ErrorRecord, Severity
from .errors import (
    ConfigError,
    FatalError,
    ModuleError,
    RenderAborted,
    ResolutionError,
    TemplateSyntaxError,
    TemplateTypeError,
    TemplaterUserError,
)
from .modules import ModuleRegistry, Phase, TemplateModule
from .pipeline import ModulePipeline, PipelineResult
from .session import current_session
from .template import parse_template, render_template, tokenize
from .types import ContentUnit, HintKind, StructuralHint

__version__ = "0.1.0"

__all__ = [
    "AssetIdAllocator",
    "AssetSink",
    "InMemoryAssetSink",
    "RenderOptions",
    "load_options",
    "resolve",
    "ErrorCollector",
    "ErrorKind",
    "ErrorRecord",
    "Severity",
    "ConfigError",
    "FatalError",
    "ModuleError",
    "RenderAborted",
    "ResolutionError",
    "TemplateSyntaxError",
    "TemplateTypeError",
    "TemplaterUserError",
    "ModuleRegistry",
    "Phase",
    "TemplateModule",
    "ModulePipeline",
    "PipelineResult",
    "current_session",
    "parse_template",
    "render_template",
    "tokenize",
    "ContentUnit",
    "HintKind",
    "StructuralHint",
]

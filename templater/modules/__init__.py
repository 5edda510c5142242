"""
Подключаемые модули шаблонов и их реестр.
"""

from __future__ import annotations

from .base import ALL_FILE_TYPES, ModuleDescriptor, Phase, TagMatch, TemplateModule
from .image import HttpImageFetcher, ImageModule
from .lint import TagLintModule
from .registry import ModuleRegistry, RegisteredModule

__all__ = [
    "ALL_FILE_TYPES",
    "ModuleDescriptor",
    "Phase",
    "TagMatch",
    "TemplateModule",
    "HttpImageFetcher",
    "ImageModule",
    "TagLintModule",
    "ModuleRegistry",
    "RegisteredModule",
]

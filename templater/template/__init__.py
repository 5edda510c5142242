"""
Шаблонизатор: лексер, построитель дерева и базовый рендерер.
"""

from __future__ import annotations

from .lexer import TemplateLexer, tokenize
from .nodes import TemplateAST, TemplateNode, collect_module_tags, walk
from .parser import TemplateParser, build, parse_template
from .renderer import RenderResult, TemplateRenderer, format_value, render_template
from .tokens import Token, TokenKind

__all__ = [
    "TemplateLexer",
    "tokenize",
    "TemplateAST",
    "TemplateNode",
    "collect_module_tags",
    "walk",
    "TemplateParser",
    "build",
    "parse_template",
    "RenderResult",
    "TemplateRenderer",
    "format_value",
    "render_template",
    "Token",
    "TokenKind",
]

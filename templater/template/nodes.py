"""
Узлы AST.

Неизменяемые классы узлов разобранных шаблонов. Блочные узлы содержат
полностью вложенные тела, построенные парсером один раз.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterator, List, Sequence, Tuple

from ..conditions.model import Condition


@dataclass(frozen=True)
class TemplateNode:
    """Базовый класс всех узлов AST шаблона."""
    pass


@dataclass(frozen=True)
class TextNode(TemplateNode):
    """Статический текст, выводится как есть."""
    text: str
    start: int = 0


@dataclass(frozen=True)
class PlaceholderNode(TemplateNode):
    """{{ path }}"""
    path: str
    start: int = 0


@dataclass(frozen=True)
class ParagraphPlaceholderNode(TemplateNode):
    """
    {{? path }}

    Пустые значения удаляют охватывающий блок (через структурную подсказку).
    """
    path: str
    start: int = 0


@dataclass(frozen=True)
class RawSpliceNode(TemplateNode):
    """{@ path } - значение вставляется без экранирования."""
    path: str
    start: int = 0


@dataclass(frozen=True)
class LoopNode(TemplateNode):
    """{% loop var in collection_path %} body {% endloop %}"""
    var: str
    collection_path: str
    body: Tuple[TemplateNode, ...] = field(default_factory=tuple)
    start: int = 0


@dataclass(frozen=True)
class ConditionalNode(TemplateNode):
    """{% if expr %} then_body [{% else %} else_body] {% endif %}"""
    expr: str
    condition: Condition
    then_body: Tuple[TemplateNode, ...] = field(default_factory=tuple)
    else_body: Tuple[TemplateNode, ...] = field(default_factory=tuple)
    start: int = 0


@dataclass(frozen=True)
class ModuleTagNode(TemplateNode):
    """
    {% name data %}

    Оставляется для фазы render модулей; базовый рендерер
    выводит `raw` без изменений.
    """
    name: str
    data: str
    raw: str
    start: int = 0


# Псевдоним для списка узлов (AST)
TemplateAST = List[TemplateNode]


def walk(nodes: Sequence[TemplateNode]) -> Iterator[TemplateNode]:
    """Обходит узлы в глубину, родители раньше своих тел."""
    for node in nodes:
        yield node
        if isinstance(node, LoopNode):
            yield from walk(node.body)
        elif isinstance(node, ConditionalNode):
            yield from walk(node.then_body)
            yield from walk(node.else_body)


def collect_module_tags(nodes: TemplateAST) -> List[ModuleTagNode]:
    """Все теги модулей в дереве, в порядке исходника."""
    return [node for node in walk(nodes) if isinstance(node, ModuleTagNode)]


__all__ = [
    "TemplateNode",
    "TextNode",
    "PlaceholderNode",
    "ParagraphPlaceholderNode",
    "RawSpliceNode",
    "LoopNode",
    "ConditionalNode",
    "ModuleTagNode",
    "TemplateAST",
    "walk",
    "collect_module_tags",
]

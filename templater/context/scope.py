"""
Снимки контекста и области видимости итераций цикла.
"""

from __future__ import annotations

import copy
from collections import ChainMap
from collections.abc import Mapping, Set
from types import MappingProxyType
from typing import Any, Dict

from .resolver import is_sequence

# Синтетические привязки внутри тела цикла
INDEX = "$index"
FIRST = "$first"
LAST = "$last"
LENGTH = "$length"


def freeze(value: Any) -> Any:
    """
    Неизменяемое представление значения контекста.

    Отображения становятся MappingProxyType, последовательности кортежами,
    множества frozenset; вложенные значения замораживаются рекурсивно.
    """
    if isinstance(value, Mapping):
        return MappingProxyType({k: freeze(v) for k, v in value.items()})
    if is_sequence(value):
        return tuple(freeze(v) for v in value)
    if isinstance(value, Set):
        return frozenset(value)
    return value


def snapshot(context: Any) -> Any:
    """
    Возвращает собственную неизменяемую копию контекста вызывающей стороны.

    Копию читают все единицы контента одного вызова. Ни изменения исходного
    объекта, ни попытки модулей записать в контекст не видны другим единицам.
    """
    if context is None:
        return MappingProxyType({})
    return freeze(copy.deepcopy(context))


def loop_scope(outer: Any, var: str, item: Any, index: int, length: int) -> ChainMap:
    """
    Строит контекст одной итерации цикла.

    Внешний контекст перекрывается, но не изменяется; каждая итерация
    получает новую область, поэтому привязки не утекают к соседям.
    """
    bindings: Dict[str, Any] = {
        var: item,
        INDEX: index,
        FIRST: index == 0,
        LAST: index == length - 1,
        LENGTH: length,
    }
    if isinstance(outer, Mapping):
        return ChainMap(bindings, outer)
    return ChainMap(bindings)


__all__ = ["INDEX", "FIRST", "LAST", "LENGTH", "freeze", "snapshot", "loop_scope"]

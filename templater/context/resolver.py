"""
Разрешение путей с точками относительно значения контекста.

Разрешение никогда не бросает исключений: отсутствующие ключи, индексы вне
диапазона и попытки спуститься в скаляр дают "не найдено". Политику
(строгий или мягкий режим) применяют вызывающие через `lookup`.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from typing import Any, Callable, Optional

from ..errors import ResolutionError


class _Missing:
    """Тип-маркер неразрешённых путей."""

    _instance: Optional[_Missing] = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "MISSING"

    def __bool__(self) -> bool:
        return False


MISSING: Any = _Missing()


def is_sequence(value: Any) -> bool:
    """True для списковых значений контекста (строки и байты считаются скалярами)."""
    return isinstance(value, Sequence) and not isinstance(value, (str, bytes, bytearray))


def _step(current: Any, segment: str) -> Any:
    if isinstance(current, Mapping):
        if segment in current:
            return current[segment]
        return MISSING
    if is_sequence(current):
        if segment.isascii() and segment.isdigit():
            index = int(segment)
            if index < len(current):
                return current[index]
        return MISSING
    # Скаляры не индексируются
    return MISSING


def resolve_or_missing(context: Any, path: str) -> Any:
    """
    Разрешает путь, возвращая MISSING, если его нет.

    В отличие от `resolve`, существующий ключ со значением None возвращается как None.
    """
    if not isinstance(path, str) or not path:
        return MISSING

    current = context
    for segment in path.split("."):
        try:
            current = _step(current, segment)
        except (KeyError, IndexError, TypeError):
            return MISSING
        if current is MISSING:
            return MISSING
    return current


def resolve(context: Any, path: str) -> Optional[Any]:
    """
    Разрешает путь с точками и индексами, например "user.address.street" или "items.0.name".

    Args:
        context: Корневое значение контекста
        path: Путь через точку; числовые сегменты индексируют последовательности

    Returns:
        Разрешённое значение или None, если пути нет
    """
    value = resolve_or_missing(context, path)
    return None if value is MISSING else value


def lookup(
    context: Any,
    path: str,
    *,
    strict: bool = False,
    null_getter: Optional[Callable[[], Any]] = None,
    default: Any = MISSING,
    position: Optional[int] = None,
) -> Any:
    """
    Разрешает путь и применяет политику отсутствующих данных.

    Порядок: разрешённое значение, затем `default`, если задан, затем
    ResolutionError в строгом режиме, затем `null_getter()` (или None без него).

    Raises:
        ResolutionError: Путь отсутствует в строгом режиме без default
    """
    value = resolve_or_missing(context, path)
    if value is not MISSING:
        return value
    if default is not MISSING:
        return default
    if strict:
        raise ResolutionError(path, position)
    return null_getter() if null_getter is not None else None


__all__ = ["MISSING", "is_sequence", "resolve", "resolve_or_missing", "lookup"]

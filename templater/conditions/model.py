"""
Модели данных условных выражений.

Выражение `{% if %}` это либо одно сравнение пути контекста с операндом,
либо одиночный путь контекста, проверяемый на истинность.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum
from typing import Union


class ConditionType(Enum):
    """Типы условий."""
    COMPARISON = "comparison"
    TRUTHINESS = "truthiness"


class OperandKind(Enum):
    STRING = "string"      # литерал в кавычках
    NUMBER = "number"
    BOOLEAN = "boolean"
    REFERENCE = "reference"  # путь контекста, иначе буквальный текст


# Компараторы в порядке просмотра; побеждает первый найденный в выражении
COMPARATORS = ("==", "!=", ">=", "<=", ">", "<")


@dataclass(frozen=True)
class Operand:
    """Правая часть сравнения."""
    kind: OperandKind
    value: Union[str, int, float, bool]

    def __str__(self) -> str:
        if self.kind == OperandKind.STRING:
            return f'"{self.value}"'
        if self.kind == OperandKind.BOOLEAN:
            return "true" if self.value else "false"
        return str(self.value)


@dataclass(frozen=True)
class Condition(ABC):
    """Базовый класс для условий."""

    @abstractmethod
    def get_type(self) -> ConditionType:
        pass

    def __str__(self) -> str:
        return self._to_string()

    @abstractmethod
    def _to_string(self) -> str:
        pass


@dataclass(frozen=True)
class Comparison(Condition):
    """
    Сравнение: left OP right

    `left` всегда путь контекста.
    """
    left: str
    operator: str
    right: Operand

    def get_type(self) -> ConditionType:
        return ConditionType.COMPARISON

    def _to_string(self) -> str:
        return f"{self.left} {self.operator} {self.right}"


@dataclass(frozen=True)
class Truthiness(Condition):
    """Одиночный путь: истина, если значение не null, не пустое, не ноль и не false."""
    path: str

    def get_type(self) -> ConditionType:
        return ConditionType.TRUTHINESS

    def _to_string(self) -> str:
        return self.path


__all__ = [
    "ConditionType",
    "OperandKind",
    "COMPARATORS",
    "Operand",
    "Condition",
    "Comparison",
    "Truthiness",
]

"""
Парсер выражений `{% if %}`.

Список компараторов просматривается в фиксированном порядке; первый
текстуально присутствующий компаратор делит выражение на сегменты. Левым
операндом служит первый сегмент, правым второй, остальные отбрасываются.
Это простой поиск подстроки: операнд с символом компаратора (например,
строка в кавычках с ">") тоже будет разрезан.
"""

from __future__ import annotations

import re
from typing import Optional, Union

from .model import (
    COMPARATORS,
    Comparison,
    Condition,
    Operand,
    OperandKind,
    Truthiness,
)

_NUMBER = re.compile(r"[+-]?(?:\d+(?:\.\d*)?|\.\d+)(?:[eE][+-]?\d+)?")


def parse_number(text: str) -> Optional[Union[int, float]]:
    """Разбирает десятичный литерал; None, если текст не число."""
    if not _NUMBER.fullmatch(text):
        return None
    if any(ch in text for ch in ".eE"):
        return float(text)
    return int(text)


class ConditionParser:
    """Превращает строку выражения в условие Comparison или Truthiness."""

    def parse(self, expr: str) -> Condition:
        """
        Разбирает выражение условия.

        Args:
            expr: Текст выражения из `{% if ... %}`

        Returns:
            Разобранное условие (разбор никогда не падает)
        """
        text = expr.strip()

        for op in COMPARATORS:
            if op in text:
                segments = text.split(op)
                return Comparison(
                    left=segments[0].strip(),
                    operator=op,
                    right=self.parse_operand(segments[1].strip()),
                )

        return Truthiness(path=text)

    @staticmethod
    def parse_operand(text: str) -> Operand:
        """
        Классифицирует правый операнд.

        Порядок: строка в кавычках, число, true/false, ссылка на контекст.
        """
        if len(text) >= 2 and text[0] == text[-1] and text[0] in ("'", '"'):
            return Operand(OperandKind.STRING, text[1:-1])

        number = parse_number(text)
        if number is not None:
            return Operand(OperandKind.NUMBER, number)

        if text == "true":
            return Operand(OperandKind.BOOLEAN, True)
        if text == "false":
            return Operand(OperandKind.BOOLEAN, False)

        return Operand(OperandKind.REFERENCE, text)


def parse_condition(expr: str) -> Condition:
    """Удобная обёртка над ConditionParser."""
    return ConditionParser().parse(expr)


__all__ = ["ConditionParser", "parse_condition", "parse_number"]

"""
Вычислитель разобранных условий `{% if %}`.

Вычисление никогда не бросает исключений. Условие, которое нельзя вычислить
(нет левого пути, несравнимые операнды), считается невыполненным.
"""

from __future__ import annotations

import logging
import operator
from typing import Any, Callable, Dict, Optional, Tuple, cast

from .model import Comparison, Condition, ConditionType, Operand, OperandKind, Truthiness
from .parser import parse_number
from ..context.resolver import MISSING, resolve, resolve_or_missing

logger = logging.getLogger(__name__)

_OPERATORS: Dict[str, Callable[[Any, Any], bool]] = {
    "==": operator.eq,
    "!=": operator.ne,
    ">=": operator.ge,
    "<=": operator.le,
    ">": operator.gt,
    "<": operator.lt,
}

# Обратный вызов, получающий сообщение о несравнимых операндах
TypeErrorReporter = Callable[[str], None]


def is_truthy(value: Any) -> bool:
    """Не null, не пустое, не ноль и не false."""
    if value is None or value is MISSING:
        return False
    return bool(value)


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _coerce_pair(left: Any, right: Any) -> Tuple[Any, Any]:
    """Превращает числовую строку в число при сравнении с числом."""
    if _is_number(right) and isinstance(left, str):
        number = parse_number(left.strip())
        if number is not None:
            return number, right
    if _is_number(left) and isinstance(right, str):
        number = parse_number(right.strip())
        if number is not None:
            return left, number
    return left, right


class ConditionEvaluator:
    """
    Вычисляет условия относительно значения контекста.

    Args:
        on_type_error: Необязательный получатель сообщений о несовпадении типов
    """

    def __init__(self, on_type_error: Optional[TypeErrorReporter] = None):
        self.on_type_error = on_type_error

    def evaluate(self, condition: Condition, context: Any) -> bool:
        """
        Вычисляет значение условия.

        Args:
            condition: Разобранное условие
            context: Текущий контекст (возможно, область цикла)

        Returns:
            Логический результат; False при любой неудаче вычисления
        """
        condition_type = condition.get_type()

        if condition_type == ConditionType.TRUTHINESS:
            return is_truthy(resolve(context, cast(Truthiness, condition).path))
        if condition_type == ConditionType.COMPARISON:
            return self._evaluate_comparison(cast(Comparison, condition), context)
        return False

    def _evaluate_comparison(self, condition: Comparison, context: Any) -> bool:
        left = resolve_or_missing(context, condition.left)
        if left is MISSING:
            return False

        right = self._operand_value(condition.right, context)
        left, right = _coerce_pair(left, right)

        try:
            return bool(_OPERATORS[condition.operator](left, right))
        except TypeError:
            message = (
                f"Cannot compare {type(left).__name__} with {type(right).__name__} "
                f"in condition '{condition}'"
            )
            logger.debug(message)
            if self.on_type_error is not None:
                self.on_type_error(message)
            return False

    @staticmethod
    def _operand_value(operand: Operand, context: Any) -> Any:
        if operand.kind != OperandKind.REFERENCE:
            return operand.value
        value = resolve_or_missing(context, str(operand.value))
        # Неразрешимая ссылка считается строковым литералом
        return operand.value if value is MISSING else value


def evaluate_condition_string(expr: str, context: Any) -> bool:
    """Разбирает и вычисляет выражение за один шаг."""
    from .parser import ConditionParser

    return ConditionEvaluator().evaluate(ConditionParser().parse(expr), context)


__all__ = ["ConditionEvaluator", "evaluate_condition_string", "is_truthy"]

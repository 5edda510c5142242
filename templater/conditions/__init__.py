"""
Условные выражения блоков `{% if %}`.
"""

from .evaluator import ConditionEvaluator, evaluate_condition_string, is_truthy
from .model import Comparison, Condition, ConditionType, Operand, OperandKind, Truthiness
from .parser import ConditionParser, parse_condition

__all__ = [
    "ConditionEvaluator",
    "ConditionParser",
    "Comparison",
    "Condition",
    "ConditionType",
    "Operand",
    "OperandKind",
    "Truthiness",
    "evaluate_condition_string",
    "is_truthy",
    "parse_condition",
]

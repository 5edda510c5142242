"""
Тесты разбора и вычисления условий.
"""

import pytest

from templater.conditions.evaluator import ConditionEvaluator, evaluate_condition_string, is_truthy
from templater.conditions.model import Comparison, ConditionType, Operand, OperandKind, Truthiness
from templater.conditions.parser import ConditionParser, parse_number


class TestConditionParser:

    def setup_method(self):
        self.parser = ConditionParser()

    def test_truthiness(self):
        condition = self.parser.parse("  user.active ")
        assert condition == Truthiness(path="user.active")
        assert condition.get_type() == ConditionType.TRUTHINESS

    @pytest.mark.parametrize("expr,left,op,right", [
        ("age>=18", "age", ">=", Operand(OperandKind.NUMBER, 18)),
        ("status == 'done'", "status", "==", Operand(OperandKind.STRING, "done")),
        ('status != "open"', "status", "!=", Operand(OperandKind.STRING, "open")),
        ("price < 9.5", "price", "<", Operand(OperandKind.NUMBER, 9.5)),
        ("flag == true", "flag", "==", Operand(OperandKind.BOOLEAN, True)),
        ("flag == false", "flag", "==", Operand(OperandKind.BOOLEAN, False)),
        ("a > b.limit", "a", ">", Operand(OperandKind.REFERENCE, "b.limit")),
    ])
    def test_comparisons(self, expr, left, op, right):
        condition = self.parser.parse(expr)
        assert condition == Comparison(left=left, operator=op, right=right)
        assert condition.get_type() == ConditionType.COMPARISON

    def test_first_listed_comparator_wins(self):
        # "==" просматривается раньше ">", хотя ">" встречается первым
        condition = self.parser.parse("a > 'x==y'")
        assert condition.operator == "=="
        assert condition.left == "a > 'x"

    def test_segments_after_the_second_are_dropped(self):
        condition = self.parser.parse("a == b == c")
        assert condition.left == "a"
        assert condition.right == Operand(OperandKind.REFERENCE, "b")

    def test_repeated_comparator_compares_first_two_segments(self):
        assert evaluate_condition_string("a == b == c", {"a": 1, "b": 1, "c": 2}) is True
        assert evaluate_condition_string("x > 1 > 5", {"x": 3}) is True

    @pytest.mark.parametrize("text,expected", [
        ("42", 42),
        ("-3", -3),
        ("2.5", 2.5),
        (".5", 0.5),
        ("1e3", 1000.0),
        ("abc", None),
        ("1.2.3", None),
        ("", None),
    ])
    def test_parse_number(self, text, expected):
        assert parse_number(text) == expected


class TestConditionEvaluator:

    def setup_method(self):
        self.parser = ConditionParser()
        self.reported = []
        self.evaluator = ConditionEvaluator(self.reported.append)
        self.context = {
            "age": 15,
            "adult_age": 18,
            "name": "Ada",
            "score": "42",
            "active": True,
            "tags": [],
            "nothing": None,
            "limits": {"max": 10},
        }

    def evaluate(self, expr):
        return self.evaluator.evaluate(self.parser.parse(expr), self.context)

    @pytest.mark.parametrize("expr,expected", [
        ("age>=18", False),
        ("age<18", True),
        ("age < adult_age", True),
        ("name == 'Ada'", True),
        ("name != 'Ada'", False),
        ("active == true", True),
        ("score == 42", True),
        ("score > 40", True),
        ("limits.max <= 10", True),
        ("name == Bob", False),
    ])
    def test_comparisons(self, expr, expected):
        assert self.evaluate(expr) is expected

    @pytest.mark.parametrize("expr,expected", [
        ("active", True),
        ("name", True),
        ("tags", False),
        ("nothing", False),
        ("age", True),
        ("missing", False),
    ])
    def test_truthiness(self, expr, expected):
        assert self.evaluate(expr) is expected

    def test_missing_left_operand_is_false(self):
        assert self.evaluate("unknown == 1") is False
        assert self.evaluate("unknown != 1") is False
        assert self.reported == []

    def test_unresolved_reference_is_literal(self):
        self.context["word"] = "hello"
        assert self.evaluate("word == hello") is True

    def test_incomparable_types_report_and_return_false(self):
        assert self.evaluate("name > 5") is False
        assert len(self.reported) == 1
        assert "Cannot compare str with int" in self.reported[0]

    def test_without_reporter(self):
        evaluator = ConditionEvaluator()
        assert evaluator.evaluate(self.parser.parse("limits > 1"), self.context) is False


@pytest.mark.parametrize("value,expected", [
    (None, False),
    (0, False),
    ("", False),
    ([], False),
    ({}, False),
    (False, False),
    ("0", True),
    (1, True),
    ([0], True),
])
def test_is_truthy(value, expected):
    assert is_truthy(value) is expected


def test_evaluate_condition_string():
    assert evaluate_condition_string("x >= 2", {"x": 3}) is True
    assert evaluate_condition_string("x", {}) is False

"""
Модуль проверки тегов.

Сообщает о незакрытых открывающих тегах. Лексер превращает такие теги в
простой текст, и без проверки это прошло бы незаметно.
"""

from __future__ import annotations

import logging
from typing import List, Optional

from ..diagnostics import ErrorKind
from ..errors import TemplateSyntaxError
from ..template.lexer import tokenize
from ..template.parser import TemplateParser
from ..template.tokens import TokenKind
from .base import TemplateModule

logger = logging.getLogger(__name__)

_OPENERS = ("{{?", "{@", "{{", "{%")


def find_unclosed_opener(text: str) -> Optional[int]:
    """Позиция первого открывающего тега без закрывающего разделителя, если есть."""
    for token in tokenize(text):
        if token.kind is TokenKind.TEXT and token.raw.startswith(_OPENERS):
            return token.start
    return None


class TagLintModule(TemplateModule):
    """Записывает синтаксические диагностики незакрытых тегов до разбора."""
    name = "lint"
    priority = 10

    async def preparse(self, text: str, file_type: str) -> str:
        position = find_unclosed_opener(text)
        if position is not None:
            opener = next(o for o in _OPENERS if text.startswith(o, position))
            self.session.report(
                ErrorKind.SYNTAX,
                f"Tag '{opener}' is never closed; the rest of the text is treated as plain text",
                position=position,
                module=self.name,
            )
        return text

    def validate(self, text: str) -> List[str]:
        problems: List[str] = []
        position = find_unclosed_opener(text)
        if position is not None:
            problems.append(f"Unclosed tag at {position}")
        try:
            TemplateParser().build(tokenize(text))
        except TemplateSyntaxError as e:
            problems.append(str(e))
        return problems


__all__ = ["TagLintModule", "find_unclosed_opener"]

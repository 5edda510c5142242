"""
Лексический анализатор шаблонизатора.

Разбивает текст шаблона на упорядоченный поток токенов без пропусков. Лексер
тотален: на любом входе сырые срезы токенов в сумме дают исходный текст.
Открывающие теги без закрывающего разделителя становятся текстом.
"""

from __future__ import annotations

import logging
import re
from typing import Callable, List, Tuple

from .tokens import Token, TokenKind

logger = logging.getLogger(__name__)

# Открывающие разделители, с которых может начаться тег ("{{?" покрыт "{{")
_OPENERS = ("{@", "{{", "{%")

_LOOP_HEADER = re.compile(r"(\S+)\s+in\s+(\S.*)", re.DOTALL)


class TemplateLexer:
    """
    Лексер шаблонов.

    В каждой позиции курсора синтаксисы тегов пробуются в фиксированном порядке:
    - raw splice          {@ path }
    - абзацный плейсхолдер  {{? path }}
    - блочный тег или тег модуля {% ... %}
    - плейсхолдер         {{ path }}
    """

    def __init__(self, text: str):
        self.text = text
        self.position = 0
        self.length = len(text)

        # (открывающий, закрывающий, построитель) в порядке приоритета
        self._syntaxes: List[Tuple[str, str, Callable[[int, int, str], Token]]] = [
            ("{@", "}", self._raw_splice),
            ("{{?", "}}", self._paragraph_placeholder),
            ("{%", "%}", self._block),
            ("{{", "}}", self._placeholder),
        ]

    def tokenize(self) -> List[Token]:
        """Токенизирует весь текст."""
        tokens: List[Token] = []
        while self.position < self.length:
            tokens.append(self.next_token())
        logger.debug(f"Tokenized {self.length} chars -> {len(tokens)} tokens")
        return tokens

    def next_token(self) -> Token:
        """Извлекает токен, начинающийся в текущей позиции."""
        start = self.position
        opened = False

        for opener, closer, build in self._syntaxes:
            if not self.text.startswith(opener, start):
                continue
            opened = True
            close = self.text.find(closer, start + len(opener))
            if close == -1:
                continue
            end = close + len(closer)
            self.position = end
            return build(start, end, self.text[start + len(opener):close])

        if opened:
            # Незакрытый тег: остаток входа считается простым текстом
            return self._text(start, self.length)

        return self._text(start, self._find_next_opener(start + 1))

    def _find_next_opener(self, pos: int) -> int:
        """Позиция ближайшего открывающего разделителя не раньше pos или конец текста."""
        nearest = self.length
        for opener in _OPENERS:
            idx = self.text.find(opener, pos)
            if idx != -1 and idx < nearest:
                nearest = idx
        return nearest

    # --- построители токенов ----------------------------------------

    def _text(self, start: int, end: int) -> Token:
        self.position = end
        return Token(TokenKind.TEXT, start, end, self.text[start:end])

    def _raw_splice(self, start: int, end: int, inner: str) -> Token:
        return Token(TokenKind.RAW_SPLICE, start, end, self.text[start:end], path=inner.strip())

    def _paragraph_placeholder(self, start: int, end: int, inner: str) -> Token:
        return Token(TokenKind.PARAGRAPH_PLACEHOLDER, start, end, self.text[start:end], path=inner.strip())

    def _placeholder(self, start: int, end: int, inner: str) -> Token:
        return Token(TokenKind.PLACEHOLDER, start, end, self.text[start:end], path=inner.strip())

    def _block(self, start: int, end: int, inner: str) -> Token:
        raw = self.text[start:end]
        parts = inner.strip().split(None, 1)
        keyword = parts[0] if parts else ""
        data = parts[1].strip() if len(parts) > 1 else ""

        if keyword == "loop":
            match = _LOOP_HEADER.fullmatch(data)
            if match:
                return Token(TokenKind.LOOP_START, start, end, raw,
                             var=match.group(1), path=match.group(2).strip())
            # Некорректный заголовок, его отклонит парсер
            return Token(TokenKind.LOOP_START, start, end, raw, data=data)
        if keyword == "endloop":
            return Token(TokenKind.LOOP_END, start, end, raw)
        if keyword == "if":
            return Token(TokenKind.COND_IF, start, end, raw, expr=data)
        if keyword == "else":
            return Token(TokenKind.COND_ELSE, start, end, raw)
        if keyword == "endif":
            return Token(TokenKind.COND_END, start, end, raw)

        return Token(TokenKind.MODULE_TAG, start, end, raw, name=keyword, data=data)


def tokenize(text: str) -> List[Token]:
    """
    Удобная функция токенизации текста шаблона.

    Args:
        text: Исходный текст шаблона

    Returns:
        Список токенов (никогда не бросает исключений)
    """
    return TemplateLexer(text).tokenize()


__all__ = ["TemplateLexer", "tokenize"]

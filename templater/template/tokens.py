"""
Лексические типы шаблонизатора.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass


class TokenKind(enum.Enum):
    """Виды токенов, выдаваемых лексером."""

    # Простое содержимое между тегами
    TEXT = "TEXT"

    # Теги значений
    PLACEHOLDER = "PLACEHOLDER"                          # {{ path }}
    PARAGRAPH_PLACEHOLDER = "PARAGRAPH_PLACEHOLDER"      # {{? path }}
    RAW_SPLICE = "RAW_SPLICE"                            # {@ path }

    # Блочные теги
    LOOP_START = "LOOP_START"                            # {% loop x in path %}
    LOOP_END = "LOOP_END"                                # {% endloop %}
    COND_IF = "COND_IF"                                  # {% if expr %}
    COND_ELSE = "COND_ELSE"                              # {% else %}
    COND_END = "COND_END"                                # {% endif %}

    # Всё остальное внутри {% ... %}
    MODULE_TAG = "MODULE_TAG"                            # {% name data %}


@dataclass(frozen=True)
class Token:
    """
    Токен с точным срезом исходника.

    Заполняются только поля данных, относящиеся к виду токена.
    """
    kind: TokenKind
    start: int
    end: int
    raw: str
    path: str = ""   # путь плейсхолдера, raw splice или коллекции цикла
    var: str = ""    # переменная цикла
    expr: str = ""   # выражение if
    name: str = ""   # имя тега модуля
    data: str = ""   # данные тега модуля

    def __repr__(self) -> str:
        return f"Token({self.kind.name}, {self.raw!r}, {self.start}:{self.end})"


__all__ = ["TokenKind", "Token"]

from __future__ import annotations

import enum
from dataclasses import dataclass
from typing import Literal

# ---- Aliases for clarity ----
FatalScope = Literal["unit", "invocation"]


# ---- Входные единицы ----

@dataclass(frozen=True)
class ContentUnit:
    """
    Один независимо рендерящийся фрагмент текста.

    Поставляется контейнерным слоем; неизменяемый вход одного прохода конвейера.
    """
    id: str
    file_type: str
    raw_text: str


# ---- Структурные подсказки ----

class HintKind(enum.Enum):
    REMOVE_ENCLOSING_BLOCK = "remove_enclosing_block"


@dataclass(frozen=True)
class StructuralHint:
    """
    Запрос к слою формата изменить разметку вокруг тега.

    Ядро ничего не знает об абзацах и других блоках разметки; оно лишь
    сообщает о намерении в заданной позиции.
    """
    kind: HintKind
    position: int  # смещение тега в тексте шаблона
    offset: int  # смещение в выводе, где стоял бы тег
    path: str = ""
    unit_id: str = ""


__all__ = ["FatalScope", "ContentUnit", "HintKind", "StructuralHint"]

"""
Базовые интерфейсы подключаемых модулей шаблонов.

Модуль объявляет статические метаданные (имя, теги, поддерживаемые типы
файлов, приоритет) и переопределяет любой из четырёх методов фаз.
Непереопределённые фазы тождественны и конвейером пропускаются.
"""

from __future__ import annotations

import enum
import re
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, FrozenSet, List, Pattern

from ..session import RenderSession, current_session
from ..template.tokens import Token


class Phase(enum.Enum):
    """Точки, в которых модуль может воздействовать на единицу контента."""
    PREPARSE = "preparse"
    TOKEN_TRANSFORM = "token_transform"
    RENDER = "render"
    POSTRENDER = "postrender"


ALL_FILE_TYPES: FrozenSet[str] = frozenset({"docx", "pptx", "xlsx"})


@dataclass(frozen=True)
class ModuleDescriptor:
    """Статические метаданные зарегистрированного модуля."""
    name: str
    tags: FrozenSet[str]
    supported_file_types: FrozenSet[str]
    priority: int
    phases: FrozenSet[Phase]

    def supports(self, file_type: str) -> bool:
        return file_type in self.supported_file_types


@dataclass(frozen=True)
class TagMatch:
    """Одно вхождение `{% tag data %}` в тексте."""
    name: str
    data: str
    raw: str
    start: int
    end: int


def tag_pattern(tag: str) -> Pattern[str]:
    """Шаблон, совпадающий с `{% tag %}` и `{% tag data %}`."""
    return re.compile(r"\{%\s*" + re.escape(tag) + r"(?:\s+(.*?))?\s*%\}", re.DOTALL)


class TemplateModule:
    """
    Базовый класс модулей шаблонов.

    Подклассы задают атрибуты класса и переопределяют нужные им фазы.
    Методы фаз с вводом-выводом это корутины, чтобы другие единицы контента
    продолжали работу, пока одна приостановлена.
    """
    #: Уникальное имя модуля в пределах конвейера
    name: str = "base"
    #: Имена тегов модуля; пустое множество значит "применим всегда"
    tags: FrozenSet[str] = frozenset()
    #: Типы файлов, которые модуль умеет обрабатывать
    supported_file_types: FrozenSet[str] = ALL_FILE_TYPES
    #: Меньшее значение выполняется раньше
    priority: int = 100

    def __init__(self):
        self._patterns: List[Pattern[str]] = [tag_pattern(tag) for tag in sorted(self.tags)]

    # --- фазы (по умолчанию тождественные) -------------------------

    async def preparse(self, text: str, file_type: str) -> str:
        """Изменяет сырой текст до токенизации."""
        return text

    def token_transform(self, tokens: List[Token], file_type: str) -> List[Token]:
        """Переписывает поток токенов до построения дерева."""
        return tokens

    async def render(self, text: str, context: Any, file_type: str) -> str:
        """Заменяет собственные теги модуля в тексте после базового рендерера."""
        return text

    async def postrender(self, text: str, file_type: str) -> str:
        """Финальные изменения после рендеринга всеми модулями."""
        return text

    # --- метаданные --------------------------------------------------

    def implemented_phases(self) -> FrozenSet[Phase]:
        """Фазы, переопределённые конкретным классом."""
        cls = type(self)
        overridden = set()
        for phase in Phase:
            if getattr(cls, phase.value) is not getattr(TemplateModule, phase.value):
                overridden.add(phase)
        return frozenset(overridden)

    def descriptor(self) -> ModuleDescriptor:
        return ModuleDescriptor(
            name=self.name,
            tags=frozenset(self.tags),
            supported_file_types=frozenset(self.supported_file_types),
            priority=self.priority,
            phases=self.implemented_phases(),
        )

    def should_process(self, text: str, file_type: str) -> bool:
        """
        True, если модуль применим к тексту.

        По умолчанию: тип файла поддерживается и, для модулей с тегами,
        в тексте есть хотя бы один объявленный тег.
        """
        if file_type not in self.supported_file_types:
            return False
        if not self.tags:
            return True
        return any(p.search(text) for p in self._patterns)

    def validate(self, text: str) -> List[str]:
        """Проверки шаблона, специфичные для модуля; возвращает описания проблем."""
        return []

    # --- помощники для подклассов ------------------------------------

    @property
    def session(self) -> RenderSession:
        """Сессия выполняющегося вызова."""
        return current_session()

    def find_tags(self, text: str) -> List[TagMatch]:
        """Все вхождения объявленных тегов в порядке текста, без перекрытий."""
        found: List[TagMatch] = []
        for tag, pattern in zip(sorted(self.tags), self._patterns):
            for m in pattern.finditer(text):
                found.append(TagMatch(
                    name=tag,
                    data=(m.group(1) or "").strip(),
                    raw=m.group(0),
                    start=m.start(),
                    end=m.end(),
                ))
        found.sort(key=lambda t: t.start)

        result: List[TagMatch] = []
        last_end = -1
        for match in found:
            if match.start >= last_end:
                result.append(match)
                last_end = match.end
        return result

    async def replace_tags(self, text: str, replace: Callable[[TagMatch], Awaitable[str]]) -> str:
        """Заменяет каждое вхождение объявленного тега ожидаемой заменой."""
        parts: List[str] = []
        cursor = 0
        for match in self.find_tags(text):
            parts.append(text[cursor:match.start])
            parts.append(await replace(match))
            cursor = match.end
        parts.append(text[cursor:])
        return "".join(parts)

    def __repr__(self) -> str:
        return f"<{type(self).__name__} name={self.name!r} priority={self.priority}>"


__all__ = [
    "Phase",
    "ALL_FILE_TYPES",
    "ModuleDescriptor",
    "TagMatch",
    "tag_pattern",
    "TemplateModule",
]

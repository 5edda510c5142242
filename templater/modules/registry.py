"""
Реестр модулей шаблонов.

Хранит модули в порядке выполнения: по возрастанию приоритета, при равенстве
по порядку регистрации. Порядок пересчитывается при каждом register/unregister.
"""

from __future__ import annotations

import itertools
import logging
from dataclasses import dataclass
from typing import Dict, Iterator, List, Optional

from .base import ModuleDescriptor, TemplateModule

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RegisteredModule:
    """Модуль вместе с дескриптором и порядковым номером регистрации."""
    module: TemplateModule
    descriptor: ModuleDescriptor
    seq: int

    @property
    def name(self) -> str:
        return self.descriptor.name


class ModuleRegistry:
    """
    Реестр модулей одного конвейера.

    Изменение реестра во время выполнения run не поддерживается; вызывающие
    упорядочивают register/unregister относительно запусков сами.
    """

    def __init__(self):
        self._entries: Dict[str, RegisteredModule] = {}
        self._ordered: List[RegisteredModule] = []
        self._seq = itertools.count()

    def register(self, module: TemplateModule, descriptor: Optional[ModuleDescriptor] = None) -> ModuleDescriptor:
        """
        Регистрирует модуль.

        Args:
            module: Реализация модуля
            descriptor: Явные метаданные; без них берутся из модуля

        Returns:
            Дескриптор, под которым модуль зарегистрирован

        Raises:
            ValueError: Если модуль с таким именем уже зарегистрирован
        """
        descriptor = descriptor or module.descriptor()
        if not descriptor.name:
            raise ValueError("Module must have a name")
        if descriptor.name in self._entries:
            raise ValueError(f"Module '{descriptor.name}' already registered")

        self._entries[descriptor.name] = RegisteredModule(module, descriptor, next(self._seq))
        self._reorder()

        logger.debug(
            f"Registered module '{descriptor.name}' (priority: {descriptor.priority}, "
            f"phases: {sorted(p.value for p in descriptor.phases)})"
        )
        return descriptor

    def unregister(self, name: str) -> TemplateModule:
        """
        Удаляет модуль по имени.

        Raises:
            KeyError: Если такой модуль не зарегистрирован
        """
        if name not in self._entries:
            raise KeyError(f"Module '{name}' is not registered")
        entry = self._entries.pop(name)
        self._reorder()
        logger.debug(f"Unregistered module '{name}'")
        return entry.module

    def get(self, name: str) -> Optional[TemplateModule]:
        entry = self._entries.get(name)
        return entry.module if entry else None

    def descriptor(self, name: str) -> Optional[ModuleDescriptor]:
        entry = self._entries.get(name)
        return entry.descriptor if entry else None

    def ordered(self) -> List[RegisteredModule]:
        """Модули в порядке выполнения."""
        return list(self._ordered)

    def processing_order(self) -> List[str]:
        return [entry.name for entry in self._ordered]

    def clear(self) -> None:
        self._entries.clear()
        self._ordered = []

    def stats(self) -> Dict[str, object]:
        """Сводка по зарегистрированным модулям."""
        return {
            "total_modules": len(self._entries),
            "module_names": sorted(self._entries),
            "processing_order": self.processing_order(),
        }

    def _reorder(self) -> None:
        self._ordered = sorted(self._entries.values(), key=lambda e: (e.descriptor.priority, e.seq))

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, name: object) -> bool:
        return name in self._entries

    def __iter__(self) -> Iterator[RegisteredModule]:
        return iter(self.ordered())


__all__ = ["ModuleRegistry", "RegisteredModule"]

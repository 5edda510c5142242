"""
Состояние одного вызова рендеринга.

RenderSession живёт ровно один вызов `ModulePipeline.run`. Код модулей видит
её через контекстную переменную, которую asyncio копирует в задачу каждой
единицы, поэтому конкурентные вызовы не делят состояние.
"""

from __future__ import annotations

import asyncio
import contextlib
from contextvars import ContextVar
from dataclasses import dataclass, field
from typing import Any, Iterator, Optional

from .assets import AssetIdAllocator, AssetSink
from .config import RenderOptions
from .diagnostics import ErrorCollector, ErrorKind, ErrorRecord

_session_var: ContextVar[Optional["RenderSession"]] = ContextVar("templater_session", default=None)
_unit_var: ContextVar[str] = ContextVar("templater_unit", default="")


@dataclass
class RenderSession:
    """
    Состояние, общее для всех единиц контента одного вызова рендеринга.

    Attributes:
        options: Политика рендеринга
        context: Неизменяемый снимок контекста
        collector: Диагностики этого вызова
        allocator: Счётчик ID ресурсов этого вызова
        asset_sink: Хранилище ресурсов от контейнерного слоя, если есть
        cancel: Внешний сигнал отмены
    """
    options: RenderOptions
    context: Any
    collector: ErrorCollector = field(default_factory=ErrorCollector)
    allocator: AssetIdAllocator = field(default_factory=AssetIdAllocator)
    asset_sink: Optional[AssetSink] = None
    cancel: Optional[asyncio.Event] = None
    aborted: bool = False

    @property
    def cancelled(self) -> bool:
        """True, если вызов прерван или отменён извне."""
        return self.aborted or (self.cancel is not None and self.cancel.is_set())

    def next_asset_id(self) -> str:
        return self.allocator.next_id()

    def report(
        self,
        kind: ErrorKind,
        message: str,
        *,
        position: Optional[int] = None,
        module: Optional[str] = None,
    ) -> ErrorRecord:
        """Записывает восстановимую диагностику для обрабатываемой единицы."""
        record = ErrorRecord(
            kind=kind,
            message=message,
            unit_id=current_unit_id(),
            position=position,
            module=module,
        )
        self.collector.add(record)
        return record


def current_session() -> RenderSession:
    """
    Возвращает активную сессию рендеринга.

    Raises:
        RuntimeError: При вызове вне запуска конвейера
    """
    session = _session_var.get()
    if session is None:
        raise RuntimeError("No active render session (called outside ModulePipeline.run?)")
    return session


def current_unit_id() -> str:
    return _unit_var.get()


@contextlib.contextmanager
def activate(session: RenderSession) -> Iterator[RenderSession]:
    """Делает сессию текущей внутри блока (и в созданных в нём задачах)."""
    token = _session_var.set(session)
    try:
        yield session
    finally:
        _session_var.reset(token)


def bind_unit(unit_id: str) -> None:
    """Отмечает единицу, обрабатываемую текущей задачей."""
    _unit_var.set(unit_id)


__all__ = [
    "RenderSession",
    "current_session",
    "current_unit_id",
    "activate",
    "bind_unit",
]

"""
Сбор ошибок вызовов рендеринга.

Сборщик только пополняется в течение одного вызова; каждый вызов получает
новый сборщик. Добавление защищено блокировкой, так как фазы модулей могут
выполняться в рабочих потоках.
"""

from __future__ import annotations

import enum
import logging
import threading
from dataclasses import dataclass
from typing import Iterable, Iterator, List, Optional, Tuple

logger = logging.getLogger(__name__)


class ErrorKind(enum.Enum):
    """Категории диагностик."""
    SYNTAX = "syntax"
    RESOLUTION = "resolution"
    TYPE = "type"
    MODULE = "module"
    FATAL = "fatal"


class Severity(enum.Enum):
    RECOVERABLE = "recoverable"
    FATAL = "fatal"


@dataclass(frozen=True)
class ErrorRecord:
    """Одна диагностика, возникшая при рендеринге единицы контента."""
    kind: ErrorKind
    message: str
    unit_id: str
    position: Optional[int] = None
    severity: Severity = Severity.RECOVERABLE
    module: Optional[str] = None  # имя модуля для записей MODULE

    @property
    def is_fatal(self) -> bool:
        return self.severity is Severity.FATAL

    def escalate(self) -> ErrorRecord:
        """Возвращает фатальную копию записи."""
        return ErrorRecord(
            kind=self.kind,
            message=self.message,
            unit_id=self.unit_id,
            position=self.position,
            severity=Severity.FATAL,
            module=self.module,
        )

    def __str__(self) -> str:
        where = f"{self.unit_id}@{self.position}" if self.position is not None else self.unit_id
        return f"[{self.severity.value}] {self.kind.value}: {self.message} ({where})"


class ErrorCollector:
    """Накапливает диагностики одного вызова рендеринга."""

    def __init__(self):
        self._records: List[ErrorRecord] = []
        self._lock = threading.Lock()

    def reset(self) -> None:
        with self._lock:
            self._records = []

    def add(self, record: ErrorRecord) -> None:
        with self._lock:
            self._records.append(record)
        if record.is_fatal:
            logger.debug(f"Fatal diagnostic recorded: {record}")
        else:
            logger.warning(str(record))

    def extend(self, records: Iterable[ErrorRecord]) -> None:
        for record in records:
            self.add(record)

    def all(self) -> Tuple[ErrorRecord, ...]:
        with self._lock:
            return tuple(self._records)

    def for_unit(self, unit_id: str) -> Tuple[ErrorRecord, ...]:
        return tuple(r for r in self.all() if r.unit_id == unit_id)

    def has_fatal(self) -> bool:
        return any(r.is_fatal for r in self.all())

    def __len__(self) -> int:
        return len(self._records)

    def __iter__(self) -> Iterator[ErrorRecord]:
        return iter(self.all())


__all__ = ["ErrorKind", "Severity", "ErrorRecord", "ErrorCollector"]

"""
Опции рендеринга и их загрузчик из YAML.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Callable, Dict, Optional

from ruamel.yaml import YAML

from .errors import ConfigError
from .types import FatalScope

logger = logging.getLogger(__name__)

_yaml = YAML(typ="safe")

_FATAL_SCOPES = ("unit", "invocation")


def _empty_null_getter() -> str:
    return ""


@dataclass(frozen=True)
class RenderOptions:
    """
    Переключатели политики одного конвейера.

    strict:        повышать каждую восстановимую ошибку до фатальной
    fatal_scope:   что прерывает фатальная ошибка: единицу или весь вызов
    null_getter:   подстановка для неразрешённых плейсхолдеров в мягком режиме
    concurrency:   максимум одновременно обрабатываемых единиц
    asset_id_prefix: префикс ID, выдаваемых аллокатором ресурсов
    """
    strict: bool = False
    fatal_scope: FatalScope = "invocation"
    null_getter: Callable[[], str] = field(default=_empty_null_getter, compare=False)
    concurrency: int = 4
    asset_id_prefix: str = "rId"

    def __post_init__(self):
        if self.fatal_scope not in _FATAL_SCOPES:
            raise ConfigError(
                f"fatal_scope must be one of {', '.join(_FATAL_SCOPES)}, got {self.fatal_scope!r}"
            )
        if not isinstance(self.concurrency, int) or isinstance(self.concurrency, bool) or self.concurrency < 1:
            raise ConfigError(f"concurrency must be a positive integer, got {self.concurrency!r}")

    @staticmethod
    def from_dict(raw: Optional[Dict[str, Any]]) -> RenderOptions:
        """
        Строит опции из простого отображения (например, разобранного YAML).

        Поддерживаемые ключи: strict, fatal_scope, concurrency, asset_id_prefix,
        null_value (постоянная строка, которую возвращает null getter).

        Raises:
            ConfigError: При неизвестных ключах или неверных значениях
        """
        data = dict(raw or {})
        known = {"strict", "fatal_scope", "concurrency", "asset_id_prefix", "null_value"}
        unknown = sorted(set(data) - known)
        if unknown:
            raise ConfigError(f"Unknown render option(s): {', '.join(unknown)}")

        kwargs: Dict[str, Any] = {}
        if "strict" in data:
            if not isinstance(data["strict"], bool):
                raise ConfigError(f"strict must be a boolean, got {data['strict']!r}")
            kwargs["strict"] = data["strict"]
        if "fatal_scope" in data:
            kwargs["fatal_scope"] = str(data["fatal_scope"])
        if "concurrency" in data:
            kwargs["concurrency"] = data["concurrency"]
        if "asset_id_prefix" in data:
            kwargs["asset_id_prefix"] = str(data["asset_id_prefix"])
        if "null_value" in data:
            null_value = "" if data["null_value"] is None else str(data["null_value"])
            kwargs["null_getter"] = lambda: null_value

        return RenderOptions(**kwargs)


def load_options(path: Path) -> RenderOptions:
    """
    Читает опции рендеринга из YAML-файла.

    Отсутствующий файл даёт опции по умолчанию.

    Raises:
        ConfigError: Если документ не отображение или содержит неверные значения
    """
    if not path.is_file():
        logger.debug(f"Options file not found, using defaults: {path}")
        return RenderOptions()
    raw = _yaml.load(path.read_text(encoding="utf-8")) or {}
    if not isinstance(raw, dict):
        raise ConfigError(f"YAML must be a mapping: {path}")
    return RenderOptions.from_dict(raw)


__all__ = ["RenderOptions", "load_options"]

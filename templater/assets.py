"""
Поддержка встраиваемых ресурсов.

Само встраивание выполняет контейнерный слой; ядро лишь передаёт ему байты,
имя и ID из аллокатора, своего для каждого вызова.
"""

from __future__ import annotations

import itertools
import logging
import threading
from dataclasses import dataclass
from typing import Dict, List, Protocol, runtime_checkable

logger = logging.getLogger(__name__)


@runtime_checkable
class AssetSink(Protocol):
    """Соавтор, сохраняющий бинарные ресурсы выходного документа."""

    def embed(self, data: bytes, name: str, asset_id: str) -> str:
        """
        Сохраняет ресурс.

        Returns:
            Непрозрачная ссылка для использования в отрендеренной разметке
        """
        ...


class AssetIdAllocator:
    """
    Последовательные ID ресурсов для одного вызова рендеринга.

    Инкремент атомарен, поэтому конкурентно обрабатываемые единицы никогда
    не получают одинаковый ID. Для каждого вызова создаётся новый аллокатор.
    """

    def __init__(self, prefix: str = "rId", start: int = 1):
        self.prefix = prefix
        self._counter = itertools.count(start)
        self._lock = threading.Lock()

    def next_id(self) -> str:
        with self._lock:
            n = next(self._counter)
        return f"{self.prefix}{n}"


@dataclass(frozen=True)
class EmbeddedAsset:
    asset_id: str
    name: str
    data: bytes


class InMemoryAssetSink:
    """AssetSink, хранящий ресурсы в памяти; ссылками служат ID ресурсов."""

    def __init__(self):
        self._assets: Dict[str, EmbeddedAsset] = {}
        self._lock = threading.Lock()

    def embed(self, data: bytes, name: str, asset_id: str) -> str:
        with self._lock:
            if asset_id in self._assets:
                raise ValueError(f"Asset ID '{asset_id}' already embedded")
            self._assets[asset_id] = EmbeddedAsset(asset_id=asset_id, name=name, data=data)
        logger.debug(f"Embedded asset {asset_id} ({name}, {len(data)} bytes)")
        return asset_id

    @property
    def assets(self) -> List[EmbeddedAsset]:
        with self._lock:
            return list(self._assets.values())

    def get(self, asset_id: str) -> EmbeddedAsset:
        return self._assets[asset_id]


__all__ = ["AssetSink", "AssetIdAllocator", "EmbeddedAsset", "InMemoryAssetSink"]

import asyncio
from typing import Dict

import pytest

from templater import ContentUnit, InMemoryAssetSink, ModulePipeline, RenderOptions


def make_unit(text: str, unit_id: str = "word/document.xml", file_type: str = "docx") -> ContentUnit:
    return ContentUnit(id=unit_id, file_type=file_type, raw_text=text)


class FakeFetcher:
    """Асинхронный загрузчик изображений из словаря; неизвестные URL падают как сетевая ошибка."""

    def __init__(self, images: Dict[str, bytes]):
        self.images = images
        self.calls = []

    async def __call__(self, url: str) -> bytes:
        self.calls.append(url)
        await asyncio.sleep(0)
        if url not in self.images:
            raise OSError(f"cannot reach {url}")
        return self.images[url]


@pytest.fixture
def sink() -> InMemoryAssetSink:
    return InMemoryAssetSink()


@pytest.fixture
def pipeline(sink) -> ModulePipeline:
    return ModulePipeline(options=RenderOptions(), asset_sink=sink)


@pytest.fixture
def strict_pipeline(sink) -> ModulePipeline:
    return ModulePipeline(options=RenderOptions(strict=True), asset_sink=sink)

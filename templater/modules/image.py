"""
Модуль встраивания изображений.

Заменяет теги `{% image PATH %}` ссылкой на встроенное изображение.
PATH разрешается либо в строку URL, либо в отображение `{url, name}`.
"""

from __future__ import annotations

import logging
import posixpath
from typing import Any, Awaitable, Callable, List, Mapping, Optional, Tuple
from urllib.parse import urlparse

import httpx

from ..context.resolver import MISSING, resolve_or_missing
from ..diagnostics import ErrorKind
from ..errors import ModuleError
from .base import Phase, TagMatch, TemplateModule

logger = logging.getLogger(__name__)

ImageFetcher = Callable[[str], Awaitable[bytes]]


class HttpImageFetcher:
    """Загружает байты изображения по HTTP."""

    def __init__(self, timeout: float = 15.0, max_bytes: int = 20 * 1024 * 1024):
        self.timeout = timeout
        self.max_bytes = max_bytes

    async def __call__(self, url: str) -> bytes:
        async with httpx.AsyncClient(timeout=httpx.Timeout(self.timeout), follow_redirects=True) as client:
            resp = await client.get(url)
        resp.raise_for_status()

        content = resp.content
        if len(content) > self.max_bytes:
            raise ValueError(f"Refusing to embed {len(content)} bytes (max_bytes={self.max_bytes})")
        return content


class ImageModule(TemplateModule):
    """Встраивает изображения, на которые ссылается контекст."""
    name = "image"
    tags = frozenset({"image"})
    supported_file_types = frozenset({"docx", "pptx"})
    priority = 30

    def __init__(self, fetcher: Optional[ImageFetcher] = None):
        super().__init__()
        self.fetcher: ImageFetcher = fetcher or HttpImageFetcher()

    async def render(self, text: str, context: Any, file_type: str) -> str:
        async def replace(match: TagMatch) -> str:
            return await self._embed(match, context)

        return await self.replace_tags(text, replace)

    def validate(self, text: str) -> List[str]:
        return [
            f"Image tag without a path at {match.start}"
            for match in self.find_tags(text)
            if not match.data
        ]

    async def _embed(self, match: TagMatch, context: Any) -> str:
        session = self.session
        source = self._source(resolve_or_missing(context, match.data))
        if source is None:
            session.report(
                ErrorKind.MODULE,
                f"Image source for '{match.data}' must be a URL or a {{url, name}} mapping",
                position=match.start,
                module=self.name,
            )
            return ""

        url, name = source
        try:
            data = await self.fetcher(url)
        except (httpx.HTTPError, OSError, ValueError) as e:
            raise ModuleError(self.name, Phase.RENDER.value, f"Cannot fetch image '{url}': {e}", match.start) from e

        if session.asset_sink is None:
            raise ModuleError(self.name, Phase.RENDER.value, "No asset sink configured", match.start)

        asset_id = session.next_asset_id()
        reference = session.asset_sink.embed(data, name or f"image_{asset_id}", asset_id)
        logger.debug(f"Image '{url}' embedded as {asset_id}")
        return reference

    @staticmethod
    def _source(value: Any) -> Optional[Tuple[str, str]]:
        """(url, name) значения изображения или None, если значение непригодно."""
        if value is MISSING or value is None:
            return None
        if isinstance(value, str):
            url, name = value, ""
        elif isinstance(value, Mapping):
            url, name = value.get("url"), value.get("name") or ""
        else:
            return None

        if not isinstance(url, str) or not url.strip():
            return None
        if not name:
            name = posixpath.basename(urlparse(url).path)
        return url.strip(), str(name)


__all__ = ["ImageModule", "HttpImageFetcher", "ImageFetcher"]

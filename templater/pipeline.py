"""
Конвейер модулей.

Проводит каждую единицу контента через preparse -> токенизация -> token
transform -> построение дерева -> базовый рендеринг -> render модулей ->
postrender, вызывая зарегистрированные модули в порядке приоритета на каждой
фазе. Единицы независимы и обрабатываются конкурентно как задачи asyncio.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable, Dict, Iterable, List, NoReturn, Optional, Tuple

from .assets import AssetIdAllocator, AssetSink
from .config import RenderOptions
from .context.scope import snapshot
from .diagnostics import ErrorCollector, ErrorKind, ErrorRecord, Severity
from .errors import (
    FatalError,
    ModuleError,
    RenderAborted,
    ResolutionError,
    TemplateSyntaxError,
    TemplateTypeError,
    TemplaterUserError,
)
from .modules.base import ModuleDescriptor, Phase, TemplateModule
from .modules.registry import ModuleRegistry, RegisteredModule
from .session import RenderSession, activate, bind_unit
from .template.lexer import tokenize
from .template.parser import TemplateParser
from .template.renderer import TemplateRenderer
from .template.tokens import Token
from .types import ContentUnit, StructuralHint

logger = logging.getLogger(__name__)


@dataclass
class PipelineResult:
    """
    Результат одного вызова рендеринга.

    outputs:   (id единицы, отрендеренный текст) для завершённых единиц, в порядке входа
    hints:     структурные подсказки завершённых единиц, в порядке входа
    errors:    все диагностики, записанные за вызов
    cancelled: True, если оставшиеся единицы были брошены
    """
    outputs: List[Tuple[str, str]] = field(default_factory=list)
    hints: List[StructuralHint] = field(default_factory=list)
    errors: Tuple[ErrorRecord, ...] = ()
    cancelled: bool = False

    def output(self, unit_id: str) -> Optional[str]:
        for uid, text in self.outputs:
            if uid == unit_id:
                return text
        return None

    @property
    def ok(self) -> bool:
        """True, если диагностик не было."""
        return not self.errors


class _UnitAborted(FatalError):
    """Фатальная ошибка, ограниченная одной единицей."""
    pass


class _Cancelled(Exception):
    """Единица брошена, так как вызов отменён."""
    pass


def _kind_for(error: TemplaterUserError) -> ErrorKind:
    if isinstance(error, TemplateSyntaxError):
        return ErrorKind.SYNTAX
    if isinstance(error, ResolutionError):
        return ErrorKind.RESOLUTION
    if isinstance(error, TemplateTypeError):
        return ErrorKind.TYPE
    if isinstance(error, ModuleError):
        return ErrorKind.MODULE
    return ErrorKind.FATAL


class ModulePipeline:
    """
    Многофазный конвейер модулей, упорядоченный по приоритету.

    Args:
        registry: Реестр модулей (по умолчанию новый пустой)
        options: Политика рендеринга
        asset_sink: Хранилище встраиваемых ресурсов от контейнерного слоя
    """

    def __init__(
        self,
        registry: Optional[ModuleRegistry] = None,
        options: Optional[RenderOptions] = None,
        asset_sink: Optional[AssetSink] = None,
    ):
        self.registry = registry if registry is not None else ModuleRegistry()
        self.options = options or RenderOptions()
        self.asset_sink = asset_sink
        # Сборщик последнего завершённого вызова; каждый run заводит свой
        self.collector = ErrorCollector()
        self.parser = TemplateParser()

    # --- делегаты реестра ---------------------------------------------

    def register(self, module: TemplateModule, descriptor: Optional[ModuleDescriptor] = None) -> ModuleDescriptor:
        return self.registry.register(module, descriptor)

    def unregister(self, name: str) -> TemplateModule:
        return self.registry.unregister(name)

    @property
    def errors(self) -> Tuple[ErrorRecord, ...]:
        """Диагностики последнего запущенного вызова."""
        return self.collector.all()

    # --- запуск -------------------------------------------------------

    def run_sync(
        self,
        units: Iterable[ContentUnit],
        context: Any,
        *,
        cancel: Optional[asyncio.Event] = None,
    ) -> PipelineResult:
        """Блокирующая обёртка над `run` для кода без цикла событий."""
        return asyncio.run(self.run(units, context, cancel=cancel))

    async def run(
        self,
        units: Iterable[ContentUnit],
        context: Any,
        *,
        cancel: Optional[asyncio.Event] = None,
    ) -> PipelineResult:
        """
        Рендерит единицы контента.

        Конкурентные вызовы на одном конвейере не делят ни сборщик ошибок,
        ни аллокатор ID ресурсов.

        Args:
            units: Единицы контента от контейнерного слоя
            context: Корневой контекст; снимается копия, оригинал не изменяется
            cancel: Необязательный внешний сигнал отмены

        Returns:
            Отрендеренные тексты, подсказки и диагностики

        Raises:
            RenderAborted: Строгий режим с областью "invocation" встретил
                фатальную ошибку; `result` содержит завершённые единицы и все ошибки
        """
        unit_list = list(units)
        collector = ErrorCollector()
        self.collector = collector

        session = RenderSession(
            options=self.options,
            context=snapshot(context),
            collector=collector,
            allocator=AssetIdAllocator(self.options.asset_id_prefix),
            asset_sink=self.asset_sink,
            cancel=cancel,
        )
        ordered = self.registry.ordered()
        semaphore = asyncio.Semaphore(self.options.concurrency)

        outputs: Dict[str, str] = {}
        hints: Dict[str, List[StructuralHint]] = {}
        fatal: List[FatalError] = []

        logger.debug(
            f"Rendering {len(unit_list)} unit(s) with modules {[e.name for e in ordered]} "
            f"(strict={self.options.strict}, concurrency={self.options.concurrency})"
        )

        async def worker(unit: ContentUnit) -> None:
            async with semaphore:
                if session.cancelled:
                    logger.debug(f"Skipping unit '{unit.id}': invocation cancelled")
                    return
                bind_unit(unit.id)
                try:
                    text, unit_hints = await self._process_unit(unit, ordered, session)
                except _Cancelled:
                    logger.debug(f"Unit '{unit.id}' abandoned")
                    return
                except _UnitAborted as e:
                    logger.debug(f"Unit '{unit.id}' aborted: {e}")
                    return
                except FatalError as e:
                    session.aborted = True
                    fatal.append(e)
                    return
                outputs[unit.id] = text
                hints[unit.id] = unit_hints

        with activate(session):
            await asyncio.gather(*(worker(unit) for unit in unit_list))

        result = PipelineResult(
            outputs=[(u.id, outputs[u.id]) for u in unit_list if u.id in outputs],
            hints=[h for u in unit_list for h in hints.get(u.id, [])],
            errors=collector.all(),
            cancelled=session.cancelled,
        )
        if fatal:
            raise RenderAborted(fatal[0].record, result)
        return result

    async def _process_unit(
        self,
        unit: ContentUnit,
        ordered: List[RegisteredModule],
        session: RenderSession,
    ) -> Tuple[str, List[StructuralHint]]:
        file_type = unit.file_type
        logger.debug(f"Processing unit '{unit.id}' ({file_type})")

        # 1. Preparse
        text = await self._run_text_phase(
            Phase.PREPARSE, ordered, unit, unit.raw_text, session,
            lambda module, t: module.preparse(t, file_type),
        )

        # 2. Токенизация, token transform, построение дерева
        tokens = tokenize(text)
        for entry in self._phase_modules(Phase.TOKEN_TRANSFORM, ordered):
            self._check_cancelled(session)
            try:
                if not self._applies(entry, text, file_type):
                    continue
                transformed = entry.module.token_transform(list(tokens), file_type)
                tokens = self._checked_tokens(entry, transformed)
            except Exception as e:
                self._module_failed(session, unit, entry, Phase.TOKEN_TRANSFORM, e)

        try:
            nodes = self.parser.build(tokens)
        except TemplateSyntaxError as e:
            record = ErrorRecord(
                kind=ErrorKind.SYNTAX,
                message=e.message,
                unit_id=unit.id,
                position=e.position,
                severity=Severity.FATAL,
            )
            if self.options.strict:
                self._abort(session, record)
            # Единица проходит без изменений
            session.collector.add(record)
            return unit.raw_text, []

        # 3. Базовый рендеринг
        self._check_cancelled(session)
        renderer = TemplateRenderer(self.options, session.collector, unit.id)
        try:
            rendered = renderer.render(nodes, session.context)
        except TemplaterUserError as e:
            self._abort(session, ErrorRecord(
                kind=_kind_for(e),
                message=e.message,
                unit_id=unit.id,
                position=e.position,
            ))

        # 4. Render модулей
        text = await self._run_text_phase(
            Phase.RENDER, ordered, unit, rendered.text, session,
            lambda module, t: module.render(t, session.context, file_type),
        )

        # 5. Postrender
        text = await self._run_text_phase(
            Phase.POSTRENDER, ordered, unit, text, session,
            lambda module, t: module.postrender(t, file_type),
        )

        logger.debug(f"Unit '{unit.id}' rendered ({len(text)} chars, {len(rendered.hints)} hint(s))")
        return text, rendered.hints

    async def _run_text_phase(
        self,
        phase: Phase,
        ordered: List[RegisteredModule],
        unit: ContentUnit,
        text: str,
        session: RenderSession,
        call: Callable[[TemplateModule, str], Awaitable[str]],
    ) -> str:
        for entry in self._phase_modules(phase, ordered):
            self._check_cancelled(session)
            try:
                if not self._applies(entry, text, unit.file_type):
                    continue
                result = await call(entry.module, text)
                if not isinstance(result, str):
                    raise ModuleError(entry.name, phase.value, f"returned {type(result).__name__} instead of text")
                text = result
            except Exception as e:
                # Текст до фазы сохраняется
                self._module_failed(session, unit, entry, phase, e)
        return text

    @staticmethod
    def _checked_tokens(entry: RegisteredModule, transformed: Any) -> List[Token]:
        if transformed is None or isinstance(transformed, (str, bytes)):
            raise ModuleError(
                entry.name, Phase.TOKEN_TRANSFORM.value,
                f"returned {type(transformed).__name__} instead of a token list",
            )
        tokens = list(transformed)
        for item in tokens:
            if not isinstance(item, Token):
                raise ModuleError(
                    entry.name, Phase.TOKEN_TRANSFORM.value,
                    f"returned {type(item).__name__} among tokens",
                )
        return tokens

    @staticmethod
    def _phase_modules(phase: Phase, ordered: List[RegisteredModule]) -> List[RegisteredModule]:
        return [entry for entry in ordered if phase in entry.descriptor.phases]

    @staticmethod
    def _applies(entry: RegisteredModule, text: str, file_type: str) -> bool:
        descriptor = entry.descriptor
        if not descriptor.supports(file_type):
            return False
        if not descriptor.tags:
            return True
        return entry.module.should_process(text, file_type)

    @staticmethod
    def _check_cancelled(session: RenderSession) -> None:
        if session.cancelled:
            raise _Cancelled()

    def _module_failed(
        self,
        session: RenderSession,
        unit: ContentUnit,
        entry: RegisteredModule,
        phase: Phase,
        error: Exception,
    ) -> None:
        if isinstance(error, ModuleError):
            message = error.message
            position = error.position
        else:
            message = ModuleError(entry.name, phase.value, str(error) or type(error).__name__).message
            position = None

        record = ErrorRecord(
            kind=ErrorKind.MODULE,
            message=message,
            unit_id=unit.id,
            position=position,
            module=entry.name,
        )
        if self.options.strict:
            self._abort(session, record)
        session.collector.add(record)

    def _abort(self, session: RenderSession, record: ErrorRecord) -> NoReturn:
        """Записывает ошибку как фатальную и прерывает единицу или весь вызов."""
        fatal = record.escalate()
        session.collector.add(fatal)
        if self.options.fatal_scope == "unit":
            raise _UnitAborted(fatal)
        session.aborted = True
        raise FatalError(fatal)


__all__ = ["ModulePipeline", "PipelineResult"]

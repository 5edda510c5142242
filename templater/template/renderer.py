"""
Рендерер, вычисляющий дерево.

Вычисляет заранее построенное AST относительно контекста и выдаёт текст и
структурные подсказки. Теги модулей выводятся дословно для фазы render
модулей в конвейере.
"""

from __future__ import annotations

import io
import json
import logging
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional, Sequence, Type

from .nodes import (
    ConditionalNode,
    LoopNode,
    ModuleTagNode,
    ParagraphPlaceholderNode,
    PlaceholderNode,
    RawSpliceNode,
    TemplateNode,
    TextNode,
)
from .parser import parse_template
from ..conditions.evaluator import ConditionEvaluator
from ..config import RenderOptions
from ..context.resolver import MISSING, is_sequence, resolve_or_missing
from ..context.scope import loop_scope
from ..diagnostics import ErrorCollector, ErrorKind, ErrorRecord
from ..errors import ResolutionError, TemplateTypeError, TemplaterUserError
from ..types import HintKind, StructuralHint

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RenderResult:
    """Отрендеренный текст со структурными подсказками, выданными по пути."""
    text: str
    hints: List[StructuralHint] = field(default_factory=list)


def _plain(value: Any) -> Any:
    """Превращает представления отображений и последовательностей (например, области циклов) в типы, пригодные для JSON."""
    if isinstance(value, Mapping):
        return {str(k): _plain(v) for k, v in value.items()}
    if is_sequence(value):
        return [_plain(v) for v in value]
    return value


def format_value(value: Any, null_getter: Callable[[], str]) -> str:
    """
    Строковая форма значения контекста.

    Скаляры печатаются как текст (булевы как true/false, целые float без
    дробной части); последовательности и отображения сериализуются компактным JSON.
    """
    if value is None:
        return null_getter()
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, str):
        return value
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    if isinstance(value, Mapping) or is_sequence(value):
        return json.dumps(_plain(value), ensure_ascii=False, separators=(",", ":"), default=str)
    return str(value)


def _is_empty(value: Any) -> bool:
    if value is None or value is MISSING:
        return True
    if isinstance(value, str):
        return value == ""
    if isinstance(value, Mapping) or is_sequence(value):
        return len(value) == 0
    return False


class TemplateRenderer:
    """
    Рендерит узлы AST относительно контекста.

    В мягком режиме восстановимые проблемы записываются в сборщик и
    заменяются подстановками; в строгом режиме бросаются исключения.

    Args:
        options: Политика рендеринга (флаг strict, null getter)
        collector: Приёмник диагностик
        unit_id: Единица контента, к которой относятся диагностики и подсказки
    """

    def __init__(
        self,
        options: Optional[RenderOptions] = None,
        collector: Optional[ErrorCollector] = None,
        unit_id: str = "",
    ):
        self.options = options or RenderOptions()
        self.collector = collector if collector is not None else ErrorCollector()
        self.unit_id = unit_id

        self._handlers: Dict[Type[TemplateNode], Callable[[Any, Any, io.StringIO, List[StructuralHint]], None]] = {
            TextNode: self._render_text,
            PlaceholderNode: self._render_placeholder,
            ParagraphPlaceholderNode: self._render_paragraph_placeholder,
            RawSpliceNode: self._render_raw_splice,
            LoopNode: self._render_loop,
            ConditionalNode: self._render_conditional,
            ModuleTagNode: self._render_module_tag,
        }

    def render(self, nodes: Sequence[TemplateNode], context: Any) -> RenderResult:
        """
        Рендерит узлы относительно контекста.

        Raises:
            ResolutionError: Отсутствующие данные в строгом режиме
            TemplateTypeError: Цикл не по последовательности в строгом режиме
        """
        out = io.StringIO()
        hints: List[StructuralHint] = []
        self._render_nodes(nodes, context, out, hints)
        return RenderResult(out.getvalue(), hints)

    def _render_nodes(
        self,
        nodes: Sequence[TemplateNode],
        context: Any,
        out: io.StringIO,
        hints: List[StructuralHint],
    ) -> None:
        for node in nodes:
            handler = self._handlers.get(type(node))
            if handler is None:
                logger.warning(f"No renderer for node type: {type(node).__name__}")
                continue
            handler(node, context, out, hints)

    # --- политика ошибок ----------------------------------------------

    def _fail(self, error: TemplaterUserError, kind: ErrorKind) -> None:
        """В строгом режиме бросает исключение, иначе записывает восстановимую диагностику."""
        if self.options.strict:
            raise error
        self.collector.add(ErrorRecord(
            kind=kind,
            message=error.message,
            unit_id=self.unit_id,
            position=error.position,
        ))

    # --- обработчики узлов -------------------------------------------

    def _render_text(self, node: TextNode, context: Any, out: io.StringIO, hints: List[StructuralHint]) -> None:
        out.write(node.text)

    def _render_placeholder(self, node: PlaceholderNode, context: Any, out: io.StringIO,
                            hints: List[StructuralHint]) -> None:
        value = resolve_or_missing(context, node.path)
        if value is MISSING:
            self._fail(ResolutionError(node.path, node.start), ErrorKind.RESOLUTION)
            out.write(self.options.null_getter())
            return
        out.write(format_value(value, self.options.null_getter))

    def _render_paragraph_placeholder(self, node: ParagraphPlaceholderNode, context: Any, out: io.StringIO,
                                      hints: List[StructuralHint]) -> None:
        value = resolve_or_missing(context, node.path)
        if value is MISSING and self.options.strict:
            raise ResolutionError(node.path, node.start)
        if _is_empty(value):
            hints.append(StructuralHint(
                kind=HintKind.REMOVE_ENCLOSING_BLOCK,
                position=node.start,
                offset=out.tell(),
                path=node.path,
                unit_id=self.unit_id,
            ))
            return
        out.write(format_value(value, self.options.null_getter))

    def _render_raw_splice(self, node: RawSpliceNode, context: Any, out: io.StringIO,
                           hints: List[StructuralHint]) -> None:
        value = resolve_or_missing(context, node.path)
        if value is MISSING or value is None:
            return
        out.write(format_value(value, lambda: ""))

    def _render_loop(self, node: LoopNode, context: Any, out: io.StringIO, hints: List[StructuralHint]) -> None:
        collection = resolve_or_missing(context, node.collection_path)
        if collection is MISSING:
            self._fail(ResolutionError(node.collection_path, node.start), ErrorKind.RESOLUTION)
            return
        if not is_sequence(collection):
            self._fail(
                TemplateTypeError(
                    f"Loop target '{node.collection_path}' is not a sequence "
                    f"(got {type(collection).__name__})",
                    node.start,
                ),
                ErrorKind.TYPE,
            )
            return

        length = len(collection)
        for index, item in enumerate(collection):
            scope = loop_scope(context, node.var, item, index, length)
            self._render_nodes(node.body, scope, out, hints)

    def _render_conditional(self, node: ConditionalNode, context: Any, out: io.StringIO,
                            hints: List[StructuralHint]) -> None:
        def on_type_error(message: str) -> None:
            # Условия не бросают исключений, в строгом режиме тоже
            self.collector.add(ErrorRecord(
                kind=ErrorKind.TYPE,
                message=message,
                unit_id=self.unit_id,
                position=node.start,
            ))

        taken = ConditionEvaluator(on_type_error).evaluate(node.condition, context)
        self._render_nodes(node.then_body if taken else node.else_body, context, out, hints)

    def _render_module_tag(self, node: ModuleTagNode, context: Any, out: io.StringIO,
                           hints: List[StructuralHint]) -> None:
        out.write(node.raw)


def render_template(
    text: str,
    context: Any,
    options: Optional[RenderOptions] = None,
    collector: Optional[ErrorCollector] = None,
) -> RenderResult:
    """
    Разбирает и рендерит текст шаблона за один шаг.

    Raises:
        TemplateSyntaxError: При несбалансированных блочных тегах
        ResolutionError, TemplateTypeError: В строгом режиме
    """
    nodes = parse_template(text)
    return TemplateRenderer(options, collector).render(nodes, context)


__all__ = ["RenderResult", "TemplateRenderer", "format_value", "render_template"]

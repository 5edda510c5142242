"""
Построитель дерева шаблонизатора.

Потребляет поток токенов и строит вложенное AST. Структура блоков
отслеживается явным стеком открытых фреймов, поэтому каждый `endloop`/`endif`
закрывает ровно самый внутренний открытый блок, а каждое тело строится один раз.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import List, Optional

from .lexer import tokenize
from .nodes import (
    ConditionalNode,
    LoopNode,
    ModuleTagNode,
    ParagraphPlaceholderNode,
    PlaceholderNode,
    RawSpliceNode,
    TemplateAST,
    TemplateNode,
    TextNode,
)
from .tokens import Token, TokenKind
from ..conditions.parser import ConditionParser
from ..errors import TemplateSyntaxError

logger = logging.getLogger(__name__)

_KEYWORDS = {
    TokenKind.LOOP_START: "loop",
    TokenKind.LOOP_END: "endloop",
    TokenKind.COND_IF: "if",
    TokenKind.COND_ELSE: "else",
    TokenKind.COND_END: "endif",
}


@dataclass
class _Frame:
    """Открытый блок на стеке парсера."""
    opener: Token
    body: List[TemplateNode] = field(default_factory=list)
    else_body: Optional[List[TemplateNode]] = None  # задаётся, когда встречен {% else %}

    @property
    def is_loop(self) -> bool:
        return self.opener.kind == TokenKind.LOOP_START

    @property
    def current(self) -> List[TemplateNode]:
        return self.else_body if self.else_body is not None else self.body


class TemplateParser:
    """
    Построитель дерева на стеке.

    Бросает TemplateSyntaxError при несбалансированных или некорректных блочных тегах.
    """

    def __init__(self, condition_parser: Optional[ConditionParser] = None):
        self.condition_parser = condition_parser or ConditionParser()

    def build(self, tokens: List[Token]) -> TemplateAST:
        """
        Строит AST из токенов.

        Args:
            tokens: Поток токенов от лексера

        Returns:
            Список узлов верхнего уровня

        Raises:
            TemplateSyntaxError: При несбалансированных блоках или некорректных заголовках
        """
        root: List[TemplateNode] = []
        stack: List[_Frame] = []

        for token in tokens:
            target = stack[-1].current if stack else root
            kind = token.kind

            if kind == TokenKind.TEXT:
                target.append(TextNode(token.raw, token.start))
            elif kind == TokenKind.PLACEHOLDER:
                target.append(PlaceholderNode(token.path, token.start))
            elif kind == TokenKind.PARAGRAPH_PLACEHOLDER:
                target.append(ParagraphPlaceholderNode(token.path, token.start))
            elif kind == TokenKind.RAW_SPLICE:
                target.append(RawSpliceNode(token.path, token.start))
            elif kind == TokenKind.MODULE_TAG:
                target.append(ModuleTagNode(token.name, token.data, token.raw, token.start))
            elif kind == TokenKind.LOOP_START:
                if not token.var:
                    raise TemplateSyntaxError(
                        f"Malformed loop tag {token.raw!r}, expected 'loop VAR in PATH'",
                        token.start,
                    )
                stack.append(_Frame(token))
            elif kind == TokenKind.COND_IF:
                stack.append(_Frame(token))
            elif kind == TokenKind.COND_ELSE:
                frame = self._expect_top(stack, token, want_loop=False)
                if frame.else_body is not None:
                    raise TemplateSyntaxError("Duplicate 'else' in 'if' block", token.start)
                frame.else_body = []
            elif kind == TokenKind.LOOP_END:
                frame = self._expect_top(stack, token, want_loop=True)
                stack.pop()
                node = LoopNode(
                    var=frame.opener.var,
                    collection_path=frame.opener.path,
                    body=tuple(frame.body),
                    start=frame.opener.start,
                )
                (stack[-1].current if stack else root).append(node)
            elif kind == TokenKind.COND_END:
                frame = self._expect_top(stack, token, want_loop=False)
                stack.pop()
                node = ConditionalNode(
                    expr=frame.opener.expr,
                    condition=self.condition_parser.parse(frame.opener.expr),
                    then_body=tuple(frame.body),
                    else_body=tuple(frame.else_body or ()),
                    start=frame.opener.start,
                )
                (stack[-1].current if stack else root).append(node)

        if stack:
            opener = stack[-1].opener
            raise TemplateSyntaxError(
                f"Unterminated '{_KEYWORDS[opener.kind]}' block {opener.raw!r}",
                opener.start,
            )

        logger.debug(f"Built AST with {len(root)} top-level nodes")
        return root

    @staticmethod
    def _expect_top(stack: List[_Frame], token: Token, *, want_loop: bool) -> _Frame:
        keyword = _KEYWORDS[token.kind]
        if not stack:
            raise TemplateSyntaxError(f"Unexpected '{keyword}' without an open block", token.start)
        frame = stack[-1]
        if frame.is_loop != want_loop:
            raise TemplateSyntaxError(
                f"'{keyword}' does not match open '{_KEYWORDS[frame.opener.kind]}' "
                f"at {frame.opener.start}",
                token.start,
            )
        return frame


def build(tokens: List[Token]) -> TemplateAST:
    """Удобная обёртка над TemplateParser.build."""
    return TemplateParser().build(tokens)


def parse_template(text: str) -> TemplateAST:
    """
    Токенизирует и разбирает текст шаблона.

    Raises:
        TemplateSyntaxError: При несбалансированных или некорректных блочных тегах
    """
    return TemplateParser().build(tokenize(text))


__all__ = ["TemplateParser", "build", "parse_template"]

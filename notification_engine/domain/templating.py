"""Parser and evaluator for the notification pattern language.

Supported constructs::

    {{path.to.value}}                      substitution (missing path -> "")
    {{#if path}} ... {{else}} ... {{/if}}  conditional, may nest freely

Patterns are parsed once into a small tree of nodes and evaluated against
any number of variable bags. Tags the language does not know (``{{#each}}``,
stray ``{{/if}}``, an ``{{#if}}`` that is never closed, ...) are kept as
literal text so that a template never fails to render.
"""

from __future__ import annotations

import html
import re
from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from typing import Any, Callable

from notification_engine.domain.entities import NotificationTemplate, RenderedNotification

_TAG = re.compile(r"\{\{(.*?)\}\}", re.DOTALL)
_PATH = re.compile(r"^[A-Za-z_$][\w$]*(?:\.[\w$]+)*$")
_IF_OPEN = re.compile(r"^#if\s+(?P<path>\S+)$")

_TEXT = "text"
_VARIABLE = "variable"
_IF = "if"
_ELSE = "else"
_END_IF = "end_if"


@dataclass(frozen=True)
class _Token:
    kind: str
    raw: str
    path: str | None = None


@dataclass
class TextNode:
    text: str


@dataclass
class VariableNode:
    path: str


@dataclass
class IfNode:
    path: str
    body: list["Node"] = field(default_factory=list)
    alternative: list["Node"] = field(default_factory=list)


Node = TextNode | VariableNode | IfNode


def _tokenize(pattern: str) -> list[_Token]:
    tokens: list[_Token] = []
    position = 0
    for match in _TAG.finditer(pattern):
        if match.start() > position:
            tokens.append(_Token(_TEXT, pattern[position : match.start()]))
        tokens.append(_classify(match.group(0), match.group(1).strip()))
        position = match.end()
    if position < len(pattern):
        tokens.append(_Token(_TEXT, pattern[position:]))
    return tokens


def _classify(raw: str, inner: str) -> _Token:
    if inner == "else":
        return _Token(_ELSE, raw)
    if inner == "/if":
        return _Token(_END_IF, raw)
    opening = _IF_OPEN.match(inner)
    if opening and _PATH.match(opening.group("path")):
        return _Token(_IF, raw, opening.group("path"))
    if _PATH.match(inner):
        return _Token(_VARIABLE, raw, inner)
    return _Token(_TEXT, raw)


class _Parser:
    """Recursive-descent parser matching every ``{{#if}}`` to its own closer."""

    def __init__(self, tokens: Sequence[_Token]) -> None:
        self._tokens = tokens
        self._position = 0

    def parse(self) -> list[Node]:
        return self._parse_nodes(stop_at=frozenset())

    def _peek(self) -> _Token | None:
        if self._position < len(self._tokens):
            return self._tokens[self._position]
        return None

    def _parse_nodes(self, stop_at: frozenset[str]) -> list[Node]:
        nodes: list[Node] = []
        while (token := self._peek()) is not None:
            if token.kind in stop_at:
                return nodes
            self._position += 1
            if token.kind == _VARIABLE:
                nodes.append(VariableNode(token.path or ""))
            elif token.kind == _IF:
                nodes.extend(self._parse_if(token))
            else:
                # Plain text, unknown tags and stray else / closers.
                nodes.append(TextNode(token.raw))
        return nodes

    def _parse_if(self, opening: _Token) -> list[Node]:
        body = self._parse_nodes(stop_at=frozenset({_ELSE, _END_IF}))
        else_token: _Token | None = None
        alternative: list[Node] = []

        token = self._peek()
        if token is not None and token.kind == _ELSE:
            else_token = token
            self._position += 1
            alternative = self._parse_nodes(stop_at=frozenset({_END_IF}))
            token = self._peek()

        if token is None:
            # Unclosed block: keep the opening tag literally and inline its content.
            unclosed: list[Node] = [TextNode(opening.raw), *body]
            if else_token is not None:
                unclosed.extend([TextNode(else_token.raw), *alternative])
            return unclosed

        self._position += 1
        return [IfNode(opening.path or "", body, alternative)]


def parse(pattern: str) -> list[Node]:
    """Parse ``pattern`` into a list of nodes."""

    return _Parser(_tokenize(pattern)).parse()


def resolve_path(variables: Mapping[str, Any], path: str) -> Any:
    """Walk a dotted ``path`` through nested mappings and sequences."""

    current: Any = variables
    for part in path.split("."):
        if isinstance(current, Mapping):
            if part not in current:
                return None
            current = current[part]
        elif isinstance(current, Sequence) and not isinstance(current, str) and part.isdigit():
            index = int(part)
            if index >= len(current):
                return None
            current = current[index]
        else:
            return None
    return current


def is_truthy(value: Any) -> bool:
    """Truthiness used by ``{{#if}}``: non-empty, non-zero, non-false."""

    if value is None or value is False:
        return False
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return value != 0
    if isinstance(value, (str, Mapping, list, tuple, set)):
        return len(value) > 0
    return bool(value)


def _format_value(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


class CompiledPattern:
    """A parsed pattern ready to be evaluated repeatedly."""

    def __init__(self, source: str) -> None:
        self.source = source
        self.nodes = parse(source)

    def render(
        self,
        variables: Mapping[str, Any],
        *,
        escape: Callable[[str], str] | None = None,
    ) -> str:
        parts: list[str] = []
        self._render_nodes(self.nodes, variables, parts, escape)
        return "".join(parts)

    def _render_nodes(
        self,
        nodes: Sequence[Node],
        variables: Mapping[str, Any],
        parts: list[str],
        escape: Callable[[str], str] | None,
    ) -> None:
        for node in nodes:
            if isinstance(node, TextNode):
                parts.append(node.text)
            elif isinstance(node, VariableNode):
                text = _format_value(resolve_path(variables, node.path))
                parts.append(escape(text) if escape else text)
            elif is_truthy(resolve_path(variables, node.path)):
                self._render_nodes(node.body, variables, parts, escape)
            else:
                self._render_nodes(node.alternative, variables, parts, escape)


class CompiledTemplate:
    """All patterns of a :class:`NotificationTemplate`, parsed at load time."""

    def __init__(self, template: NotificationTemplate) -> None:
        self.template = template
        self.title = CompiledPattern(template.title_pattern)
        self.message = CompiledPattern(template.message_pattern)
        self.subject = (
            CompiledPattern(template.email_subject_pattern)
            if template.email_subject_pattern
            else None
        )
        self.html = (
            CompiledPattern(template.email_html_pattern)
            if template.email_html_pattern
            else None
        )

    def render(self, variables: Mapping[str, Any]) -> RenderedNotification:
        """Render every pattern against ``variables``.

        Values substituted into the HTML body are escaped. Language plays no
        part here; right-to-left variants are simply different patterns.
        """

        return RenderedNotification(
            title=self.title.render(variables),
            message=self.message.render(variables),
            subject=self.subject.render(variables) if self.subject else None,
            html=self.html.render(variables, escape=html.escape) if self.html else None,
        )


def render(
    template: NotificationTemplate | CompiledTemplate, variables: Mapping[str, Any]
) -> RenderedNotification:
    """Render ``template`` (compiling it first when necessary)."""

    compiled = template if isinstance(template, CompiledTemplate) else CompiledTemplate(template)
    return compiled.render(variables)


__all__ = [
    "CompiledPattern",
    "CompiledTemplate",
    "IfNode",
    "Node",
    "TextNode",
    "VariableNode",
    "is_truthy",
    "parse",
    "render",
    "resolve_path",
]

"""
Page Builder Kernel: Template Compiler

Block type templates are HTML with a minimal directive grammar:

    {{field}}  {{a.b}}  {{this}}  {{this.name}}  {{../field}}
    {{#if field}} ... {{else}} ... {{/if}}
    {{#each field}} ... {{/each}}

Everything else between braces is a TemplateSyntaxError. No expressions,
no filters, no partials, no raw output.

compile_template() parses the text once into an immutable node tree
(Text | Variable | Conditional | Iteration). CompiledTemplate.render() walks
that tree against a Scope. The tree is never mutated after compilation, so
one compiled template serves any number of concurrent renders.

This layer does not escape anything. Config values are escaped by the
sanitizer before they reach a scope.
"""

from __future__ import annotations

import re
from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from functools import lru_cache
from typing import Any

from pagebuilder.kernel.errors import BlockRenderError, TemplateSyntaxError

# ---------------------------------------------------------------------------
# Lexical patterns
# ---------------------------------------------------------------------------

_TAG_PATTERN = re.compile(r"\{\{(.*?)\}\}", re.DOTALL)
_PATH_PATTERN = re.compile(r"^(?:\.\./)*[A-Za-z_$][\w$-]*(?:\.[\w$-]+)*$")

BLOCK_HELPERS: set[str] = {"if", "each"}


# ---------------------------------------------------------------------------
# Node tree
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class FieldPath:
    """
    A resolved field reference.

    depth: how many `../` hops up the scope chain
    keys:  dotted lookup below that scope; empty means the scope value itself
    """

    depth: int
    keys: tuple[str, ...]
    raw: str


@dataclass(frozen=True, slots=True)
class Node:
    """Base class for template nodes. Nodes are immutable."""

    lineno: int


@dataclass(frozen=True, slots=True)
class Text(Node):
    """Literal template text, emitted verbatim."""

    value: str


@dataclass(frozen=True, slots=True)
class Variable(Node):
    """Substitution: {{field}}"""

    path: FieldPath


@dataclass(frozen=True, slots=True)
class Conditional(Node):
    """Branch: {{#if field}}...{{else}}...{{/if}}"""

    path: FieldPath
    body: tuple[Node, ...]
    orelse: tuple[Node, ...] = ()


@dataclass(frozen=True, slots=True)
class Iteration(Node):
    """Loop: {{#each field}}...{{/each}}"""

    path: FieldPath
    body: tuple[Node, ...]


# ---------------------------------------------------------------------------
# Value semantics
# ---------------------------------------------------------------------------


def is_truthy(value: Any) -> bool:
    """
    Truthiness for {{#if}}.
    Falsy: missing/None, False, 0, "", []. Everything else is truthy,
    including empty mappings.
    """
    if value is None or value is False:
        return False
    if isinstance(value, bool):
        return True
    if isinstance(value, (int, float)):
        return value == value and value != 0  # NaN is falsy
    if isinstance(value, str):
        return value != ""
    if isinstance(value, (list, tuple)):
        return len(value) > 0
    return True


def to_display_string(value: Any) -> str:
    """
    Stringify a scope value for substitution.
    Booleans render as true/false, None as empty, integral floats without
    the trailing .0, lists comma-joined, mappings as empty string.
    """
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, str):
        return value
    if isinstance(value, int):
        return str(value)
    if isinstance(value, float):
        if value.is_integer():
            return str(int(value))
        return str(value)
    if isinstance(value, (list, tuple)):
        return ",".join(to_display_string(v) for v in value)
    if isinstance(value, Mapping):
        return ""
    return str(value)


# ---------------------------------------------------------------------------
# Scope
# ---------------------------------------------------------------------------

_MISSING = object()


@dataclass(frozen=True, slots=True)
class Scope:
    """
    The data context a template executes against.
    #each pushes a child scope whose data is the current element;
    `../` walks back to the parent.
    """

    data: Any
    parent: Scope | None = None

    def child(self, data: Any) -> Scope:
        return Scope(data=data, parent=self)

    def lookup(self, path: FieldPath) -> Any:
        """Resolve a field path. Anything missing resolves to None."""
        scope: Scope | None = self
        for _ in range(path.depth):
            scope = scope.parent if scope is not None else None
        if scope is None:
            return None

        value = scope.data
        for key in path.keys:
            if isinstance(value, Mapping):
                value = value.get(key, _MISSING)
            elif isinstance(value, (list, tuple)) and key.isascii() and key.isdigit():
                index = int(key)
                value = value[index] if index < len(value) else _MISSING
            else:
                value = _MISSING
            if value is _MISSING:
                return None
        return value


# ---------------------------------------------------------------------------
# Compiled template
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class CompiledTemplate:
    """A parsed template, ready to render any number of times."""

    source: str
    nodes: tuple[Node, ...]
    name: str | None = None

    def render(self, scope: Scope | Mapping[str, Any]) -> str:
        """
        Execute against a scope (or a plain mapping, which becomes the root
        scope). Raises BlockRenderError if the data does not fit the template.
        """
        root = scope if isinstance(scope, Scope) else Scope(scope)
        out: list[str] = []
        self._render_nodes(self.nodes, root, out)
        return "".join(out)

    def _render_nodes(self, nodes: Sequence[Node], scope: Scope, out: list[str]) -> None:
        for node in nodes:
            if isinstance(node, Text):
                out.append(node.value)
            elif isinstance(node, Variable):
                out.append(to_display_string(scope.lookup(node.path)))
            elif isinstance(node, Conditional):
                branch = node.body if is_truthy(scope.lookup(node.path)) else node.orelse
                self._render_nodes(branch, scope, out)
            elif isinstance(node, Iteration):
                items = scope.lookup(node.path)
                if isinstance(items, (list, tuple)):
                    for item in items:
                        self._render_nodes(node.body, scope.child(item), out)
                elif is_truthy(items):
                    raise BlockRenderError(
                        f"{{{{#each {node.path.raw}}}}} on line {node.lineno} expects a list, "
                        f"got {type(items).__name__}",
                        block_type=self.name,
                    )
            else:
                raise BlockRenderError(f"Unknown node type {type(node).__name__}", block_type=self.name)


# ---------------------------------------------------------------------------
# Parser
# ---------------------------------------------------------------------------


class _Frame:
    """An open {{#if}} / {{#each}} section while parsing."""

    def __init__(self, helper: str, path: FieldPath | None, lineno: int):
        self.helper = helper
        self.path = path
        self.lineno = lineno
        self.body: list[Node] = []
        self.orelse: list[Node] | None = None

    @property
    def target(self) -> list[Node]:
        return self.orelse if self.orelse is not None else self.body

    def close(self) -> Node:
        if self.helper == "if":
            return Conditional(
                lineno=self.lineno,
                path=self.path,
                body=tuple(self.body),
                orelse=tuple(self.orelse or ()),
            )
        return Iteration(lineno=self.lineno, path=self.path, body=tuple(self.body))


def _parse_path(expr: str, lineno: int) -> FieldPath:
    if not _PATH_PATTERN.match(expr):
        raise TemplateSyntaxError(f"Invalid field reference '{expr}'", lineno=lineno)
    depth = 0
    rest = expr
    while rest.startswith("../"):
        depth += 1
        rest = rest[3:]
    keys = tuple(rest.split("."))
    if keys[0] == "this":
        keys = keys[1:]
    return FieldPath(depth=depth, keys=keys, raw=expr)


def _parse(source: str) -> tuple[Node, ...]:
    root = _Frame("root", None, 1)
    stack: list[_Frame] = [root]
    pos = 0

    for match in _TAG_PATTERN.finditer(source):
        if match.start() > pos:
            text_line = source.count("\n", 0, pos) + 1
            stack[-1].target.append(Text(lineno=text_line, value=source[pos : match.start()]))
        lineno = source.count("\n", 0, match.start()) + 1
        pos = match.end()

        inner = match.group(1).strip()
        if not inner:
            raise TemplateSyntaxError("Empty tag {{}}", lineno=lineno)

        head = inner[0]
        if head == "{":
            raise TemplateSyntaxError("Raw output {{{...}}} is not supported", lineno=lineno)
        if head == "!":
            raise TemplateSyntaxError("Comments {{!...}} are not supported", lineno=lineno)
        if head == ">":
            raise TemplateSyntaxError("Partials {{>...}} are not supported", lineno=lineno)

        if head == "#":
            parts = inner[1:].split()
            helper = parts[0] if parts else ""
            if helper not in BLOCK_HELPERS:
                raise TemplateSyntaxError(f"Unknown helper '#{helper}'", lineno=lineno)
            if len(parts) != 2:
                raise TemplateSyntaxError(f"'#{helper}' expects exactly one field", lineno=lineno)
            stack.append(_Frame(helper, _parse_path(parts[1], lineno), lineno))
            continue

        if head == "/":
            helper = inner[1:].strip()
            if len(stack) == 1:
                raise TemplateSyntaxError(f"Unexpected {{{{/{helper}}}}} with no open block", lineno=lineno)
            frame = stack[-1]
            if helper != frame.helper:
                raise TemplateSyntaxError(
                    f"{{{{/{helper}}}}} does not close {{{{#{frame.helper}}}}} opened on line {frame.lineno}",
                    lineno=lineno,
                )
            stack.pop()
            stack[-1].target.append(frame.close())
            continue

        if inner == "else":
            frame = stack[-1]
            if frame.helper != "if":
                raise TemplateSyntaxError("{{else}} is only allowed inside {{#if}}", lineno=lineno)
            if frame.orelse is not None:
                raise TemplateSyntaxError(f"Duplicate {{{{else}}}} in {{{{#if}}}} opened on line {frame.lineno}", lineno=lineno)
            frame.orelse = []
            continue

        if " " in inner:
            raise TemplateSyntaxError(f"Unknown helper '{inner.split()[0]}'", lineno=lineno)

        stack[-1].target.append(Variable(lineno=lineno, path=_parse_path(inner, lineno)))

    tail = source[pos:]
    if "{{" in tail:
        lineno = source.count("\n", 0, pos + tail.index("{{")) + 1
        raise TemplateSyntaxError("Unclosed tag: missing '}}'", lineno=lineno)
    if tail:
        stack[-1].target.append(Text(lineno=source.count("\n", 0, pos) + 1, value=tail))

    if len(stack) > 1:
        frame = stack[-1]
        raise TemplateSyntaxError(
            f"Unclosed {{{{#{frame.helper}}}}} opened on line {frame.lineno}",
            lineno=frame.lineno,
        )

    return tuple(root.body)


@lru_cache(maxsize=512)
def _compile_cached(source: str) -> tuple[Node, ...]:
    """Parse once per distinct template text."""
    return _parse(source)


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def compile_template(source: str, name: str | None = None) -> CompiledTemplate:
    """
    Compile template text into a CompiledTemplate.

    Args:
        source: Template text
        name: Block type name, used to attribute syntax errors

    Returns:
        CompiledTemplate

    Raises:
        TemplateSyntaxError: If any directive is malformed
    """
    if not isinstance(source, str):
        raise TemplateSyntaxError("Template must be a string", block_type=name)
    try:
        nodes = _compile_cached(source)
    except TemplateSyntaxError as e:
        if name is not None:
            raise e.with_block_type(name) from None
        raise
    return CompiledTemplate(source=source, nodes=nodes, name=name)

"""
Command template mini-language.

Templates are plain text with actions between double braces:

    {{.base_command}}            the command's base command
    {{.params.name}}             value of a parameter
    {{if .params.flag}}...{{end}}
    {{if .params.flag}}...{{else}}...{{end}}

Conditionals treat absent parameters, false, zero and the empty string as
false. Nothing else is supported; any other action is a parse error.

Substituted values use their Python text form, except booleans which
render as "true" and "false". Floats keep their decimal point, so a
float parameter set to 3 renders as "3.0".
"""

import re
from dataclasses import dataclass
from functools import lru_cache
from typing import Any, Dict, List, Mapping, Optional, Tuple, Union

from ..core.exceptions import TemplateExecutionError, TemplateParseError
from ..core.types import CommandSpec

ACTION_OPEN = "{{"
ACTION_CLOSE = "}}"

_SEGMENT = r"[A-Za-z_][A-Za-z0-9_-]*"
PATH_PATTERN = re.compile(rf"(?:\.{_SEGMENT})+")
IF_PATTERN = re.compile(r"if\s+(\S+)")

_MISSING = object()


@dataclass(frozen=True)
class TextNode:
    text: str


@dataclass(frozen=True)
class ValueNode:
    path: Tuple[str, ...]
    position: int


@dataclass(frozen=True)
class IfNode:
    path: Tuple[str, ...]
    position: int
    body: Tuple["Node", ...]
    orelse: Tuple["Node", ...] = ()


Node = Union[TextNode, ValueNode, IfNode]


def _parse_path(text: str, position: int) -> Tuple[str, ...]:
    if not PATH_PATTERN.fullmatch(text):
        raise TemplateParseError(f"malformed field reference {text!r}", position)
    return tuple(text[1:].split("."))


def _format_path(path: Tuple[str, ...]) -> str:
    return "." + ".".join(path)


class _Frame:
    """An open ``if`` block while parsing."""

    def __init__(self, path: Tuple[str, ...], position: int):
        self.path = path
        self.position = position
        self.body: List[Node] = []
        self.orelse: Optional[List[Node]] = None

    @property
    def current(self) -> List[Node]:
        return self.orelse if self.orelse is not None else self.body

    def close(self) -> IfNode:
        return IfNode(self.path, self.position, tuple(self.body), tuple(self.orelse or ()))


@lru_cache(maxsize=256)
def parse_template(text: str) -> Tuple[Node, ...]:
    """Parse template text into a node tree.

    Raises:
        TemplateParseError: On unclosed or unknown actions, malformed field
            references, or unbalanced if/else/end
    """
    root: List[Node] = []
    stack: List[_Frame] = []
    pos = 0

    def emit(node: Node) -> None:
        (stack[-1].current if stack else root).append(node)

    while pos < len(text):
        start = text.find(ACTION_OPEN, pos)
        if start == -1:
            emit(TextNode(text[pos:]))
            break
        if start > pos:
            emit(TextNode(text[pos:start]))

        end = text.find(ACTION_CLOSE, start + len(ACTION_OPEN))
        if end == -1:
            raise TemplateParseError("unclosed action", start)
        action = text[start + len(ACTION_OPEN):end].strip()
        pos = end + len(ACTION_CLOSE)

        if not action:
            raise TemplateParseError("empty action", start)

        if action.startswith("."):
            emit(ValueNode(_parse_path(action, start), start))
        elif action == "else":
            if not stack:
                raise TemplateParseError("unexpected {{else}}", start)
            if stack[-1].orelse is not None:
                raise TemplateParseError("duplicate {{else}}", start)
            stack[-1].orelse = []
        elif action == "end":
            if not stack:
                raise TemplateParseError("unexpected {{end}}", start)
            frame = stack.pop()
            emit(frame.close())
        elif action == "if" or action.startswith(("if ", "if\t")):
            match = IF_PATTERN.fullmatch(action)
            if not match:
                raise TemplateParseError("malformed {{if}} action", start)
            stack.append(_Frame(_parse_path(match.group(1), start), start))
        else:
            raise TemplateParseError(f"unknown action {action!r}", start)

    if stack:
        raise TemplateParseError("unclosed {{if}}: missing {{end}}", stack[-1].position)

    return tuple(root)


def _lookup(data: Mapping[str, Any], path: Tuple[str, ...]) -> Any:
    current: Any = data
    for depth, segment in enumerate(path):
        if not isinstance(current, Mapping):
            raise TemplateExecutionError(
                f"can't evaluate field {segment} in type {type(current).__name__}",
                _format_path(path[:depth + 1]),
            )
        if segment in current:
            current = current[segment]
        elif "_" in segment and segment.replace("_", "-") in current:
            current = current[segment.replace("_", "-")]
        else:
            return _MISSING
    return current


def is_truthy(value: Any) -> bool:
    if value is _MISSING or value is None:
        return False
    if isinstance(value, (bool, int, float, str)):
        return bool(value)
    return True


def stringify(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def _evaluate(nodes: Tuple[Node, ...], data: Mapping[str, Any], out: List[str]) -> None:
    for node in nodes:
        if isinstance(node, TextNode):
            out.append(node.text)
        elif isinstance(node, ValueNode):
            value = _lookup(data, node.path)
            if value is _MISSING or value is None:
                raise TemplateExecutionError(
                    f"no value for {_format_path(node.path)}", _format_path(node.path)
                )
            out.append(stringify(value))
        elif is_truthy(_lookup(data, node.path)):
            _evaluate(node.body, data, out)
        else:
            _evaluate(node.orelse, data, out)


def render_template(template: str, base_command: str, params: Mapping[str, Any]) -> str:
    """Expand ``template`` against a base command and parameter map.

    Only leading and trailing whitespace is trimmed; spacing produced by
    conditional branches is kept as written.

    Raises:
        TemplateParseError: If the template cannot be parsed
        TemplateExecutionError: If a referenced value cannot be rendered
    """
    nodes = parse_template(template)
    data: Dict[str, Any] = {"base_command": base_command, "params": dict(params)}
    out: List[str] = []
    _evaluate(nodes, data, out)
    return "".join(out).strip()


class TemplateRenderer:
    """Renders command templates for command definitions."""

    def render(
        self, command: CommandSpec, template: str, params: Mapping[str, Any]
    ) -> str:
        return render_template(template, command.base_command, params)

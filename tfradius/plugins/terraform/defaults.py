"""
Canonical rendering of Terraform default values.

Defaults are shown inside property descriptions as ``(default: <text>)``.
The notation is compact and deterministic:

* scalars as literals (``true``, ``42``, ``10.0.0.0/16``, ``null``)
* strings quoted only when they would be ambiguous
* lists as ``[a, b]`` in source order, sets sorted
* maps and objects as ``{k1: v1, k2: v2}`` with keys sorted

``parse_default_text`` reads the notation back, so formatting is idempotent:
``format(parse(format(v))) == format(v)``.
"""

import json
import logging
import math
import re
from typing import Any

from tfradius.ir.models import (
    MapType,
    ObjectType,
    SetType,
    TupleType,
    TypeExpression,
    VariableDeclaration,
)

logger = logging.getLogger(__name__)

SENSITIVE_PLACEHOLDER = "<sensitive>"

_NUMBER_RE = re.compile(r"-?(?:\d+)(?:\.\d+)?(?:[eE][-+]?\d+)?")
_KEYWORDS = {"true": True, "false": False, "null": None}
_STRUCTURAL = frozenset("[]{},:\"'\n\r\t")


def _needs_quotes(text: str) -> bool:
    if not text or text != text.strip():
        return True
    if text in _KEYWORDS or _NUMBER_RE.fullmatch(text):
        return True
    return any(ch in _STRUCTURAL for ch in text)


def _format_string(text: str) -> str:
    if _needs_quotes(text):
        return json.dumps(text, ensure_ascii=False)
    return text


def _format_number(value: int | float) -> str:
    if isinstance(value, float):
        if math.isfinite(value) and value.is_integer():
            return str(int(value))
        return repr(value)
    return str(value)


def _element_type(type_expr: TypeExpression | None, key: Any = None):
    """Best-effort element type for recursing into composites."""
    if type_expr is None:
        return None
    if isinstance(type_expr, ObjectType):
        return type_expr.fields.get(key)
    if isinstance(type_expr, TupleType):
        if isinstance(key, int) and key < len(type_expr.elements):
            return type_expr.elements[key]
        return None
    return getattr(type_expr, "element", None)


class DefaultFormatter:
    """Renders default values into canonical description text."""

    def __init__(self):
        self._logger = logger.getChild(self.__class__.__name__)

    def format_default(
        self, value: Any, type_expr: TypeExpression | None = None
    ) -> str:
        """
        Render a default value.

        Args:
            value: The literal default (already decoded from HCL)
            type_expr: Declared type, used to recognise sets and to guide
                recursion into nested composites

        Returns:
            Canonical text for the value
        """
        if value is None:
            return "null"
        if isinstance(value, bool):
            return "true" if value else "false"
        if isinstance(value, int | float):
            return _format_number(value)
        if isinstance(value, str):
            return _format_string(value)
        if isinstance(value, dict):
            return self._format_mapping(value, type_expr)
        if isinstance(value, set | frozenset):
            return self._format_sequence(list(value), type_expr, sort=True)
        if isinstance(value, list | tuple):
            return self._format_sequence(
                list(value), type_expr, sort=isinstance(type_expr, SetType)
            )
        return _format_string(str(value))

    def _format_sequence(
        self, values: list[Any], type_expr: TypeExpression | None, sort: bool
    ) -> str:
        rendered = [
            self.format_default(item, _element_type(type_expr, i))
            for i, item in enumerate(values)
        ]
        if sort:
            rendered.sort()
        return "[" + ", ".join(rendered) + "]"

    def _format_mapping(
        self, mapping: dict[Any, Any], type_expr: TypeExpression | None
    ) -> str:
        entries = []
        for key in sorted(mapping, key=str):
            value_type = (
                _element_type(type_expr, key)
                if isinstance(type_expr, ObjectType | MapType)
                else None
            )
            rendered = self.format_default(mapping[key], value_type)
            entries.append(f"{_format_string(str(key))}: {rendered}")
        return "{" + ", ".join(entries) + "}"

    def default_suffix(self, variable: VariableDeclaration) -> str | None:
        """
        Description suffix for a variable, or None when it has no default.

        Sensitive defaults are never rendered.
        """
        if not variable.has_default:
            return None
        if variable.sensitive:
            return f"(default: {SENSITIVE_PLACEHOLDER})"
        rendered = self.format_default(variable.default, variable.type_expr)
        return f"(default: {rendered})"

    def parse_default_text(self, text: str) -> Any:
        """
        Read text produced by `format_default` back into a value.

        Raises:
            ValueError: If the text is not in the canonical notation
        """
        reader = _DefaultReader(text)
        value = reader.read_value(stop="")
        reader.skip_ws()
        if not reader.at_end():
            raise ValueError(f"Unexpected trailing text at {reader.pos}: {text!r}")
        return value


class _DefaultReader:
    """Cursor over default text in the canonical notation."""

    def __init__(self, text: str):
        self.text = text
        self.pos = 0
        self._decoder = json.JSONDecoder()

    def at_end(self) -> bool:
        return self.pos >= len(self.text)

    def skip_ws(self) -> None:
        while not self.at_end() and self.text[self.pos] == " ":
            self.pos += 1

    def _expect(self, ch: str) -> None:
        self.skip_ws()
        if self.at_end() or self.text[self.pos] != ch:
            raise ValueError(f"Expected {ch!r} at {self.pos} in {self.text!r}")
        self.pos += 1

    def _peek(self) -> str:
        self.skip_ws()
        return "" if self.at_end() else self.text[self.pos]

    def read_value(self, stop: str) -> Any:
        ch = self._peek()
        if ch == '"':
            return self._read_quoted()
        if ch == "[":
            return self._read_list()
        if ch == "{":
            return self._read_map()
        return self._read_bare(stop)

    def _read_quoted(self) -> str:
        value, end = self._decoder.raw_decode(self.text, self.pos)
        self.pos = end
        return value

    def _read_bare(self, stop: str) -> Any:
        start = self.pos
        if stop:
            while not self.at_end() and self.text[self.pos] not in stop:
                self.pos += 1
        else:
            self.pos = len(self.text)
        token = self.text[start : self.pos].strip()
        if token in _KEYWORDS:
            return _KEYWORDS[token]
        if _NUMBER_RE.fullmatch(token):
            if any(c in token for c in ".eE"):
                return float(token)
            return int(token)
        return token

    def _read_list(self) -> list[Any]:
        self._expect("[")
        items: list[Any] = []
        if self._peek() == "]":
            self.pos += 1
            return items
        while True:
            items.append(self.read_value(stop=",]"))
            if self._peek() == ",":
                self.pos += 1
                continue
            self._expect("]")
            return items

    def _read_map(self) -> dict[str, Any]:
        self._expect("{")
        result: dict[str, Any] = {}
        if self._peek() == "}":
            self.pos += 1
            return result
        while True:
            key = self._read_quoted() if self._peek() == '"' else self._read_key()
            self._expect(":")
            result[str(key)] = self.read_value(stop=",}")
            if self._peek() == ",":
                self.pos += 1
                continue
            self._expect("}")
            return result

    def _read_key(self) -> str:
        start = self.pos
        while not self.at_end() and self.text[self.pos] != ":":
            self.pos += 1
        return self.text[start : self.pos].strip()

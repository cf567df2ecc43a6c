"""
Terraform type constraint parser.

Turns the textual type constraint of a `variable` block, as emitted by
python-hcl2 (``${list(object({name = string}))}``) or written by hand
(``list(object({name = string}))``), into the TypeExpression IR.

Anything that is not a static type constraint comes back as an
``UnresolvedType`` so the mapper can report it with variable context.
"""

import logging
import re
from dataclasses import dataclass
from typing import Any

from tfradius.ir.models import (
    ANY,
    BOOL,
    NUMBER,
    STRING,
    ListType,
    MapType,
    ObjectType,
    SetType,
    TupleType,
    TypeExpression,
    UnresolvedType,
)

from .exceptions import RecursionLimitError
from .type_mapper import DEFAULT_MAX_DEPTH

logger = logging.getLogger(__name__)

_PRIMITIVES: dict[str, TypeExpression] = {
    "string": STRING,
    "number": NUMBER,
    "bool": BOOL,
}

_COLLECTIONS = {
    "list": ListType,
    "set": SetType,
    "map": MapType,
}

_TOKEN_RE = re.compile(
    r"""
      (?P<ws>\s+)
    | (?P<comment>\#[^\n]*|//[^\n]*)
    | (?P<string>"(?:[^"\\]|\\.)*"|'(?:[^'\\]|\\.)*')
    | (?P<number>-?\d+(?:\.\d+)?(?:[eE][-+]?\d+)?)
    | (?P<ident>[A-Za-z_][A-Za-z0-9_\-]*)
    | (?P<punct>[(){}\[\],=:])
    """,
    re.VERBOSE,
)

_OPENERS = "([{"
_CLOSERS = ")]}"


class TypeSyntaxError(ValueError):
    """Raised internally when a type constraint cannot be parsed."""


@dataclass(frozen=True)
class _Token:
    kind: str
    value: str
    pos: int


def unwrap_interpolation(text: str) -> str:
    """Strip any number of outer ``${ ... }`` wrappers."""
    text = text.strip()
    while text.startswith("${") and text.endswith("}") and _closes_at_end(text):
        text = text[2:-1].strip()
    return text


def _closes_at_end(text: str) -> bool:
    """True when the brace opened by the leading ``${`` is the final character."""
    depth = 0
    for i, ch in enumerate(text[1:], start=1):
        if ch == "{":
            depth += 1
        elif ch == "}":
            depth -= 1
            if depth == 0:
                return i == len(text) - 1
    return False


def _tokenize(text: str) -> list[_Token]:
    tokens: list[_Token] = []
    pos = 0
    while pos < len(text):
        match = _TOKEN_RE.match(text, pos)
        if not match:
            raise TypeSyntaxError(f"Unexpected character {text[pos]!r} at {pos}")
        kind = match.lastgroup or ""
        if kind == "string":
            raw = match.group()
            tokens.append(_Token(kind, re.sub(r"\\(.)", r"\1", raw[1:-1]), pos))
        elif kind not in ("ws", "comment"):
            tokens.append(_Token(kind, match.group(), pos))
        pos = match.end()
    return tokens


class _Parser:
    """Recursive-descent parser over one tokenized type constraint."""

    def __init__(self, text: str, max_depth: int, depth: int = 0):
        self._text = text
        self._tokens = _tokenize(text)
        self._pos = 0
        self._max_depth = max_depth
        self._base_depth = depth

    # ----- token helpers -----------------------------------------------------

    def _peek(self, offset: int = 0) -> _Token | None:
        index = self._pos + offset
        return self._tokens[index] if index < len(self._tokens) else None

    def _peek_is(self, value: str, offset: int = 0) -> bool:
        tok = self._peek(offset)
        return tok is not None and tok.kind == "punct" and tok.value == value

    def _next(self) -> _Token:
        tok = self._peek()
        if tok is None:
            raise TypeSyntaxError(f"Unexpected end of type '{self._text}'")
        self._pos += 1
        return tok

    def _expect(self, value: str) -> None:
        tok = self._next()
        if tok.kind != "punct" or tok.value != value:
            raise TypeSyntaxError(
                f"Expected '{value}' but found '{tok.value}' at {tok.pos}"
            )

    def _skip_comma(self) -> None:
        if self._peek_is(","):
            self._pos += 1

    def expect_end(self) -> None:
        tok = self._peek()
        if tok is not None:
            raise TypeSyntaxError(f"Unexpected '{tok.value}' at {tok.pos}")

    # ----- grammar -----------------------------------------------------------

    def parse_type(self, depth: int = 0) -> TypeExpression:
        depth = max(depth, self._base_depth)
        if depth > self._max_depth:
            raise RecursionLimitError(
                f"Type nesting exceeds the limit of {self._max_depth} levels",
                max_depth=self._max_depth,
            )

        tok = self._next()
        if tok.kind == "string":
            return _parse_nested(tok.value, self._max_depth, depth)
        if tok.kind != "ident":
            raise TypeSyntaxError(f"Expected a type name, found '{tok.value}'")

        name = tok.value
        if name in _PRIMITIVES and not self._peek_is("("):
            return _PRIMITIVES[name]
        if name == "any" and not self._peek_is("("):
            return ANY

        if name in _COLLECTIONS:
            collection = _COLLECTIONS[name]
            if not self._peek_is("("):
                # Pre-0.12 bare `list` / `map`
                return collection(element=ANY)
            self._expect("(")
            element = self.parse_type(depth + 1)
            self._expect(")")
            return collection(element=element)

        if name == "object":
            self._expect("(")
            obj = self._parse_object_body(depth + 1)
            self._expect(")")
            return obj

        if name == "tuple":
            self._expect("(")
            self._expect("[")
            elements: list[TypeExpression] = []
            while not self._peek_is("]"):
                elements.append(self.parse_type(depth + 1))
                self._skip_comma()
            self._expect("]")
            self._expect(")")
            return TupleType(elements=tuple(elements))

        raise TypeSyntaxError(f"Unknown type '{name}'")

    def parse_attribute_value(self, depth: int) -> tuple[TypeExpression, bool]:
        """Parse an object attribute type, unwrapping ``optional(T[, default])``."""
        tok = self._peek()
        if tok is not None and tok.kind == "string":
            self._pos += 1
            nested = _Parser(unwrap_interpolation(tok.value), self._max_depth, depth)
            result = nested.parse_attribute_value(depth)
            nested.expect_end()
            return result

        if (
            tok is not None
            and tok.kind == "ident"
            and tok.value == "optional"
            and self._peek_is("(", 1)
        ):
            self._pos += 1
            self._expect("(")
            attr_type = self.parse_type(depth)
            if self._peek_is(","):
                self._pos += 1
                self._skip_value()
            self._expect(")")
            return attr_type, True

        return self.parse_type(depth), False

    def _parse_object_body(self, depth: int) -> ObjectType:
        tok = self._peek()
        if tok is not None and tok.kind == "string":
            # python-hcl2 can hand the attribute block over as a quoted literal
            self._pos += 1
            nested = _Parser(tok.value, self._max_depth, depth)
            obj = nested._parse_object_body(depth)
            nested.expect_end()
            return obj

        self._expect("{")
        fields: dict[str, TypeExpression] = {}
        optional: set[str] = set()
        while not self._peek_is("}"):
            key = self._next()
            if key.kind not in ("ident", "string"):
                raise TypeSyntaxError(f"Expected attribute name, found '{key.value}'")
            if not (self._peek_is("=") or self._peek_is(":")):
                raise TypeSyntaxError(f"Expected '=' after attribute '{key.value}'")
            self._pos += 1
            attr_type, is_optional = self.parse_attribute_value(depth)
            if key.value in fields:
                raise TypeSyntaxError(f"Duplicate object attribute '{key.value}'")
            fields[key.value] = attr_type
            if is_optional:
                optional.add(key.value)
            self._skip_comma()
        self._expect("}")
        return ObjectType(fields=fields, optional_fields=frozenset(optional))

    def _skip_value(self) -> None:
        """Consume one default-value expression up to the closing ``)``."""
        nesting = 0
        while True:
            tok = self._peek()
            if tok is None:
                raise TypeSyntaxError("Unterminated optional() default")
            if tok.kind == "punct":
                if nesting == 0 and tok.value in (",", ")"):
                    return
                if tok.value in _OPENERS:
                    nesting += 1
                elif tok.value in _CLOSERS:
                    nesting -= 1
            self._pos += 1


def _parse_nested(text: str, max_depth: int, depth: int) -> TypeExpression:
    parser = _Parser(unwrap_interpolation(text), max_depth, depth)
    result = parser.parse_type(depth)
    parser.expect_end()
    return result


class TypeExpressionParser:
    """Parses Terraform type constraints into TypeExpression values."""

    def __init__(self, max_depth: int = DEFAULT_MAX_DEPTH):
        if max_depth < 1:
            raise ValueError("max_depth must be at least 1")
        self.max_depth = max_depth
        self._logger = logger.getChild(self.__class__.__name__)

    def parse(
        self, type_text: str | None, max_depth: int | None = None
    ) -> TypeExpression:
        """
        Parse a type constraint.

        Args:
            type_text: Constraint text, with or without ``${}`` wrapping.
                None or blank means "no constraint" and yields ``any``.
            max_depth: Nesting cap for this call; defaults to the parser's own.
                Levels are counted the same way as in ``TypeMapper``.

        Returns:
            The parsed expression, or an UnresolvedType carrying the original
            text when the constraint is not a static type.

        Raises:
            RecursionLimitError: If the constraint nests deeper than the cap
        """
        if type_text is None:
            return ANY
        text = unwrap_interpolation(str(type_text))
        if not text:
            return ANY

        limit = max_depth or self.max_depth
        try:
            parser = _Parser(text, limit)
            result = parser.parse_type()
            parser.expect_end()
            return result
        except TypeSyntaxError as e:
            self._logger.debug(f"Cannot resolve type '{type_text}': {e}")
            return UnresolvedType(raw=str(type_text))
        except RecursionError as e:
            raise RecursionLimitError(
                f"Type nesting under the limit of {limit} levels still exhausts "
                "the interpreter stack",
                max_depth=limit,
            ) from e

    def infer_from_value(self, value: Any) -> TypeExpression:
        """
        Infer a type constraint from a literal default value.

        Used for variables declared without `type`; composite values infer
        their element type only when every element agrees.
        """
        if value is None:
            return ANY
        if isinstance(value, bool):
            return BOOL
        if isinstance(value, int | float):
            return NUMBER
        if isinstance(value, str):
            return STRING
        if isinstance(value, list | tuple):
            return ListType(element=self._common_type(list(value)))
        if isinstance(value, dict):
            return MapType(element=self._common_type(list(value.values())))
        return ANY

    def _common_type(self, values: list[Any]) -> TypeExpression:
        inferred = [self.infer_from_value(v) for v in values]
        if inferred and all(t == inferred[0] for t in inferred):
            return inferred[0]
        return ANY


def parse_type_expression(type_text: str | None) -> TypeExpression:
    """Module-level shortcut for ``TypeExpressionParser().parse``."""
    return TypeExpressionParser().parse(type_text)

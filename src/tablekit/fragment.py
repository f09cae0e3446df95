"""Composable, parameter-safe SQL fragments.

A :class:`Fragment` is SQL text plus its bound values, kept apart until the
very last moment. Fragments are immutable and compose associatively: joining
or adding two fragments yields a fragment, and values never leak into the
SQL text. Only :meth:`Fragment.compile` turns a fragment into the
``(sql, params)`` pair a driver expects, using the target
:class:`~tablekit.dialect.Dialect`'s placeholder style.

Examples:
    >>> from tablekit.dialect import SQLiteDialect, PostgreSQLDialect
    >>> where = sql("age >= {} AND bio = {}", 18, "hi")
    >>> where.compile(SQLiteDialect())
    ('age >= ? AND bio = ?', (18, 'hi'))
    >>> (sql("select * from ") + Fragment.ident("users") + sql(" where ") + where).compile(
    ...     PostgreSQLDialect()
    ... )
    ('select * from "users" where age >= $1 AND bio = $2', (18, 'hi'))

Guardrails:
    ❌ DON'T: Build SQL with f-strings around caller values
    ✅ DO: Pass values through ``sql("... {}", value)`` or ``Fragment.value``

    ❌ DON'T: Use ``Fragment.raw`` for anything a caller controls
    ✅ DO: Reserve ``raw`` for trusted text such as schema scripts

Tags:
    sql, fragment, parameters, injection-safety, tablekit
"""

from __future__ import annotations

import string
from collections.abc import Iterable
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from tablekit.errors import InvalidArgumentError

if TYPE_CHECKING:
    from tablekit.dialect import Dialect

_formatter = string.Formatter()


@dataclass(frozen=True, slots=True)
class Param:
    """A single bound value inside a fragment."""

    value: Any


Chunk = str | Param


@dataclass(frozen=True, slots=True)
class Fragment:
    """Immutable sequence of literal SQL text and bound parameters."""

    chunks: tuple[Chunk, ...] = ()

    # -- Constructors ------------------------------------------------------

    @classmethod
    def raw(cls, text: str) -> Fragment:
        """Trusted SQL text, used verbatim."""
        return cls((text,)) if text else cls()

    @classmethod
    def value(cls, value: Any) -> Fragment:
        """A single bound parameter."""
        if isinstance(value, Fragment):
            return value
        return cls((Param(value),))

    @classmethod
    def ident(cls, name: str) -> Fragment:
        """A double-quoted identifier. Embedded quotes are doubled."""
        if not isinstance(name, str) or not name:
            raise InvalidArgumentError(
                "identifier must be a non-empty string", argument="name", value=name
            )
        if "\x00" in name:
            raise InvalidArgumentError(
                "identifier must not contain NUL", argument="name", value=name
            )
        return cls(('"' + name.replace('"', '""') + '"',))

    @classmethod
    def join(cls, fragments: Iterable[Fragment], separator: Fragment | str = ", ") -> Fragment:
        """Join fragments with a separator."""
        sep = cls.raw(separator) if isinstance(separator, str) else separator
        result = cls()
        for index, fragment in enumerate(fragments):
            if index:
                result = result + sep
            result = result + fragment
        return result

    # -- Composition -------------------------------------------------------

    def __add__(self, other: object) -> Fragment:
        if isinstance(other, str):
            other = Fragment.raw(other)
        if not isinstance(other, Fragment):
            return NotImplemented
        return Fragment(_merge(self.chunks, other.chunks))

    def __radd__(self, other: object) -> Fragment:
        if isinstance(other, str):
            return Fragment.raw(other) + self
        return NotImplemented

    # -- Inspection --------------------------------------------------------

    @property
    def params(self) -> tuple[Any, ...]:
        return tuple(chunk.value for chunk in self.chunks if isinstance(chunk, Param))

    def is_empty(self) -> bool:
        return not self.chunks

    def compile(self, dialect: Dialect) -> tuple[str, tuple[Any, ...]]:
        """Render to ``(sql_text, params)`` for *dialect*."""
        parts: list[str] = []
        params: list[Any] = []
        for chunk in self.chunks:
            if isinstance(chunk, Param):
                parts.append(dialect.placeholder(len(params)))
                params.append(chunk.value)
            else:
                parts.append(chunk)
        return "".join(parts), tuple(params)

    def __repr__(self) -> str:
        text = "".join("{}" if isinstance(c, Param) else c for c in self.chunks)
        return f"Fragment({text!r}, params={self.params!r})"


def _merge(left: tuple[Chunk, ...], right: tuple[Chunk, ...]) -> tuple[Chunk, ...]:
    # Adjacent text chunks are merged so fragments stay compact.
    if left and right and isinstance(left[-1], str) and isinstance(right[0], str):
        return left[:-1] + (left[-1] + right[0],) + right[1:]
    return left + right


def sql(text: str, *params: Any) -> Fragment:
    """Build a fragment from *text*, binding each ``{}`` to the next param.

    A param that is itself a :class:`Fragment` is spliced in rather than
    bound. Literal braces are written ``{{`` and ``}}``.

    Raises:
        InvalidArgumentError: If the marker count does not match *params*,
            or a named/numbered field (``{name}``, ``{0}``) is used.
    """
    try:
        pieces = list(_formatter.parse(text))
    except ValueError as exc:
        raise InvalidArgumentError(str(exc), argument="text", value=text) from exc

    result = Fragment()
    remaining = list(params)
    for literal, field_name, _spec, _conversion in pieces:
        if literal:
            result = result + Fragment.raw(literal)
        if field_name is None:
            continue
        if field_name != "":
            raise InvalidArgumentError(
                f"only positional '{{}}' markers are supported; got '{{{field_name}}}'",
                argument="text",
                value=text,
            )
        if not remaining:
            raise InvalidArgumentError(
                "more '{}' markers than parameters", argument="text", value=text
            )
        result = result + Fragment.value(remaining.pop(0))
    if remaining:
        raise InvalidArgumentError(
            f"{len(remaining)} parameter(s) without a '{{}}' marker",
            argument="params",
            value=tuple(remaining),
        )
    return result


TRUE = Fragment.raw("1 = 1")


__all__ = [
    "Fragment",
    "Param",
    "TRUE",
    "sql",
]

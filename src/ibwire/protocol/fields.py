"""
Typed sequential reader over the fields of one raw message.

Required reads raise MalformedFieldError when a field is missing or does not
parse. The ``*_unset`` readers map the wire's reserved sentinels (and empty
fields) to None so that an absent value never masquerades as zero.
"""

from __future__ import annotations

import math

from ibwire.errors import MalformedFieldError
from ibwire.protocol.constants import INFINITY_STR, UNSET_DOUBLE, UNSET_INTEGER, UNSET_LONG
from ibwire.protocol.framing import RawMessage


class FieldReader:
    """Cursor over a message's fields, starting after the tag."""

    __slots__ = ("_fields", "_pos", "tag")

    def __init__(self, fields: RawMessage, start: int = 1) -> None:
        self._fields = fields
        self._pos = start
        self.tag: int | str = fields[0] if fields else ""

    @property
    def remaining(self) -> int:
        """Number of unread fields."""
        return max(len(self._fields) - self._pos, 0)

    def _next(self, expected: str) -> str:
        if self._pos >= len(self._fields):
            raise MalformedFieldError(self.tag, self._pos, None, expected)
        value = self._fields[self._pos]
        self._pos += 1
        return value

    def _fail(self, value: str, expected: str) -> MalformedFieldError:
        return MalformedFieldError(self.tag, self._pos - 1, value, expected)

    def skip(self, count: int = 1) -> None:
        """Skip fields that carry no information for us (e.g. message version)."""
        for _ in range(count):
            self._next("field")

    # -------------------------------------------------------------------------
    # Readers
    # -------------------------------------------------------------------------

    def read_str(self) -> str:
        return self._next("string")

    def read_int(self) -> int:
        """Integer field; an empty field reads as 0."""
        raw = self._next("int")
        if raw == "":
            return 0
        try:
            return int(raw)
        except ValueError:
            raise self._fail(raw, "int") from None

    def read_int_unset(self) -> int | None:
        """Integer field where empty or the reserved maximum means unset."""
        raw = self._next("int")
        if raw == "":
            return None
        try:
            value = int(raw)
        except ValueError:
            raise self._fail(raw, "int") from None
        return None if value in (UNSET_INTEGER, UNSET_LONG) else value

    def read_float(self) -> float:
        """Float field; an empty field reads as 0.0."""
        raw = self._next("float")
        if raw == "":
            return 0.0
        return self._parse_float(raw)

    def read_float_unset(self) -> float | None:
        """Float field where empty or the reserved maximum means unset."""
        raw = self._next("float")
        if raw == "":
            return None
        value = self._parse_float(raw)
        return None if value == UNSET_DOUBLE else value

    def read_bool(self) -> bool:
        """Boolean field encoded as an integer, or as true/false text."""
        raw = self._next("bool")
        lowered = raw.lower()
        if lowered in ("", "0", "false"):
            return False
        if lowered == "true":
            return True
        try:
            return int(raw) != 0
        except ValueError:
            raise self._fail(raw, "bool") from None

    def _parse_float(self, raw: str) -> float:
        if raw == INFINITY_STR:
            return math.inf
        try:
            return float(raw)
        except ValueError:
            raise self._fail(raw, "float") from None

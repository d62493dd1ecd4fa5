"""
sargparse typed values.

Overview
- DataType: closed set of value tags (INTEGER, FLOAT, TEXT, BOOLEAN). Each tag
  knows its Python payload type, its zero value and how to read command-line text.
- Value: immutable tagged union holding exactly one payload of one tag.
  • from_int / from_float / from_text / from_bool build a value of that tag.
  • get_int / get_float / get_text / get_bool hand the payload back, and raise
    ValueTypeMismatchError when asked for a tag the value was not built with.

Contract
- Extracting the wrong tag is a programming error: callers declared the dtype of
  every argument they read back. No silent coercion ever happens.
- INTEGER payloads are 32-bit signed integers.

Quick example
    >>> value = Value.from_int(10)
    >>> value.get_int()
    10
    >>> value.get_text()
    Traceback (most recent call last):
    ...
    sargparse.faults.ValueTypeMismatchError: cannot read TEXT from an INTEGER value
"""
import enum
import re

from rich.text import Text

from .faults import ValueTypeMismatchError
from .utils import *

INT32_MIN = -2 ** 31
INT32_MAX = 2 ** 31 - 1


class DataType(enum.Enum):
    """
    tag of a typed value (and the declared type of an argument).
    """
    INTEGER = "integer"
    FLOAT = "float"
    TEXT = "text"
    BOOLEAN = "boolean"

    @property
    def type(self):
        """python type of the payload."""
        return {
            DataType.INTEGER: int,
            DataType.FLOAT: float,
            DataType.TEXT: str,
            DataType.BOOLEAN: bool,
        }[self]

    @property
    def zero(self):
        """
        value substituted for an optional argument that was neither supplied nor defaulted.
        """
        return {
            DataType.INTEGER: Value.from_int(0),
            DataType.FLOAT: Value.from_float(0.0),
            DataType.TEXT: Value.from_text(""),
            DataType.BOOLEAN: Value.from_bool(False),
        }[self]

    def parse(self, text, /):
        """
        read a raw command-line token into a Value of this tag.

        rules
        - INTEGER: optional sign followed by ascii digits, within 32-bit range.
        - FLOAT: anything float() accepts, minus surrounding whitespace and '_' separators.
        - TEXT: taken verbatim.
        - BOOLEAN: exactly "true" or "false".

        raises
        - ValueError when the token does not read as this tag
        - OverflowError when an integer token is outside the 32-bit range
        """
        if not isinstance(text, str):
            raise TypeError("DataType.parse() argument must be a string")

        match self:
            case DataType.INTEGER:
                if not re.fullmatch(r"[+-]?[0-9]+", text):
                    raise ValueError("invalid digit found in %r" % text)
                return Value.from_int(int(text))
            case DataType.FLOAT:
                if text != text.strip() or "_" in text:
                    raise ValueError("invalid float literal %r" % text)
                return Value.from_float(float(text))
            case DataType.TEXT:
                return Value.from_text(text)
            case DataType.BOOLEAN:
                try:
                    return Value.from_bool({"true": True, "false": False}[text])
                except KeyError:
                    raise ValueError("provided string %r was not 'true' or 'false'" % text) from None

    def wrap(self, object, /):
        """
        wrap a raw python object as a Value of this tag (see Value.of).
        """
        match self:
            case DataType.INTEGER:
                return Value.from_int(object)
            case DataType.FLOAT:
                return Value.from_float(object)
            case DataType.TEXT:
                return Value.from_text(object)
            case DataType.BOOLEAN:
                return Value.from_bool(object)

    def __rich__(self):
        return Text(self.name, style="italic")


class Value:
    """
    Immutable tagged union over {INTEGER, FLOAT, TEXT, BOOLEAN}.

    Instances are built only through the from_* constructors (or Value.of),
    compare equal when both tag and payload match, and are hashable.
    """
    __slots__ = ("_dtype", "_payload")

    dtype = mirror("dtype")
    payload = mirror("payload")

    def __new__(cls, *unused, **options):
        raise TypeError("use Value.from_int(), from_float(), from_text() or from_bool()")

    @classmethod
    def _build(cls, dtype, payload, /):
        self = object.__new__(cls)
        object.__setattr__(self, "_dtype", dtype)
        object.__setattr__(self, "_payload", payload)
        return self

    @classmethod
    def from_int(cls, integer, /):
        # bool is an int subclass; it is not an integer value here.
        if not isinstance(integer, int) or isinstance(integer, bool):
            raise TypeError("Value.from_int() argument must be an integer")
        if not INT32_MIN <= integer <= INT32_MAX:
            raise OverflowError("integer %d does not fit in 32 bits" % integer)
        return cls._build(DataType.INTEGER, int(integer))

    @classmethod
    def from_float(cls, number, /):
        if not isinstance(number, int | float) or isinstance(number, bool):
            raise TypeError("Value.from_float() argument must be a number")
        return cls._build(DataType.FLOAT, float(number))

    @classmethod
    def from_text(cls, text, /):
        if not isinstance(text, str):
            raise TypeError("Value.from_text() argument must be a string")
        return cls._build(DataType.TEXT, str(text))

    @classmethod
    def from_bool(cls, boolean, /):
        if not isinstance(boolean, bool):
            raise TypeError("Value.from_bool() argument must be a boolean")
        return cls._build(DataType.BOOLEAN, boolean)

    @classmethod
    def of(cls, dtype, object, /):
        """
        Wrap `object` with the tag `dtype`; Value instances pass through when the tag matches.
        """
        if not isinstance(dtype, DataType):
            raise TypeError("Value.of() first argument must be a DataType")
        if isinstance(object, Value):
            if object.dtype is not dtype:
                raise TypeError("expected a %s value, got %s" % (dtype.name, object.dtype.name))
            return object
        return dtype.wrap(object)

    def _extract(self, dtype):
        if self._dtype is not dtype:
            raise ValueTypeMismatchError(
                "cannot read %s from %s %s value" % (
                    dtype.name,
                    "an" if self._dtype.name[0] in "AEIOU" else "a",
                    self._dtype.name,
                ),
                expected=dtype,
                actual=self._dtype,
            )
        return self._payload

    def get_int(self):
        return self._extract(DataType.INTEGER)

    def get_float(self):
        return self._extract(DataType.FLOAT)

    def get_text(self):
        return self._extract(DataType.TEXT)

    def get_bool(self):
        return self._extract(DataType.BOOLEAN)

    def __setattr__(self, name, value, /):
        raise AttributeError("value is immutable")

    def __delattr__(self, name, /):
        raise AttributeError("value is immutable")

    def __eq__(self, other):
        if not isinstance(other, Value):
            return NotImplemented
        return self._dtype is other._dtype and self._payload == other._payload

    def __hash__(self):
        return hash((self._dtype, self._payload))

    def __reduce__(self):
        return Value.of, (self._dtype, self._payload)

    def __repr__(self):
        return "value(dtype=%s, payload=%r)" % (self._dtype.name, self._payload)

    def __rich_repr__(self):
        yield "dtype", self._dtype.name
        yield "payload", self._payload


__all__ = (
    "DataType",
    "Value",
)

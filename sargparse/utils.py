"""
sargparse utilities (internal helpers shared by the parser layers).

Overview
- UnsetType / Unset
  • Singleton sentinel meaning “not provided”, distinct from None (which the
    public API rejects for defaults).
- coalesce(object, default=None)
  • Materialize Unset into a concrete fallback, preserving other falsey values.
- rename(callable, name) / @rename("name")
  • Give generated callables a stable __name__/__qualname__.
- mirror("attr")
  • Read-only property over a private backing field, freezing containers.
- ordinal(number)
  • Human-friendly ordinal used by position-first fault messages.
"""
import builtins
import functools
from collections.abc import Sequence, Mapping, Set
from types import MappingProxyType
from typing import final


@final
class UnsetType:
    """
    Sentinel type for parameters the caller did not provide.

    - bool(Unset) is False, yet Unset is neither None nor 0.
    - repr(Unset) is "Unset".
    - UnsetType() always returns the same instance; subclassing is refused.
    """

    def __or__(self, other, /):
        try:
            return type(self) | other
        except TypeError:
            return NotImplemented

    def __ror__(self, other, /):
        try:
            return other | type(self)
        except TypeError:
            return NotImplemented

    @functools.cache
    def __new__(cls):
        return super().__new__(cls)

    def __bool__(self):
        return False

    def __repr__(self):
        return "Unset"

    def __init_subclass__(cls, **options):
        raise TypeError("type 'UnsetType' is not an acceptable base type")


def coalesce(object, default=None, /):
    """
    Return `default` when `object` is Unset, otherwise `object` unchanged.

    Examples
    - coalesce(Unset, "prog") -> "prog"
    - coalesce("", "prog")    -> ""   # empty text is a real value
    """
    return object if object is not Unset else default


def rename(*parameters):
    """
    Set __name__/__qualname__ on a callable.

    Forms
    - rename(callable, name) -> callable
    - rename(name)           -> decorator
    """
    match len(parameters):
        case 2:
            callable, name = parameters
            if not builtins.callable(callable):
                raise TypeError("rename() first argument must be callable")
            if not isinstance(name, str):
                raise TypeError("rename() second argument must be a string")
            callable.__qualname__ = name
            callable.__name__ = name
            return callable
        case 1:
            name, = parameters
            if not isinstance(name, str):
                raise TypeError("@rename() argument must be a string")

            def wrapper(callable):
                if not builtins.callable(callable):
                    raise TypeError("@rename() must be applied to a callable")
                return rename(callable, name)

            return rename(wrapper, "rename")
        case _:
            raise TypeError("rename takes 1 to 2 arguments but %d were given" % len(parameters))


def mirror(name, /):
    """
    Build a read-only property exposing the backing field "_{name}".

    Containers are handed out frozen (tuple, MappingProxyType, frozenset) so
    callers cannot reach into the declaration lists of a parser.
    """
    if not isinstance(name, str):
        raise TypeError("mirror() argument must be a string")

    @rename(name)
    def getter(self):
        value = getattr(self, "_" + name)
        if isinstance(value, Sequence) and not isinstance(value, str):
            return tuple(value)
        if isinstance(value, Mapping):
            return MappingProxyType(value)
        if isinstance(value, Set):
            return frozenset(value)
        return value

    return property(getter)


@functools.cache
def ordinal(number, /):
    """
    Return an ordinal label for a 1-based position ("first", "second", ..., "11th", "22nd").
    """
    try:
        return (
            "first", "second", "third", "fourth", "fifth",
            "sixth", "seventh", "eighth", "ninth", "tenth",
        )[number - 1] if number >= 1 else str(number)
    except IndexError:
        pass

    # 11th, 12th, 13th (and 111th, 112th, ...)
    if 10 < number % 100 < 20:
        return f"{number}th"

    return f"{number}%s" % {1: "st", 2: "nd", 3: "rd"}.get(number % 10, "th")


Unset = UnsetType()


__all__ = (
    "UnsetType",
    "Unset",
    "coalesce",
    "rename",
    "mirror",
    "ordinal",
)

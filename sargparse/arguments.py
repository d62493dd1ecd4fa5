r"""
sargparse argument declarations.

Overview
- Argument: immutable record describing one expected command-line argument
  (short_name, long_name, help, required, default, dtype).
- Classification (done once, at construction)
  • positional: neither name starts with '-' (e.g. "name"); consumed by position.
  • named: every non-empty name starts with '-' (e.g. "-c", "--count"); then
    required or optional according to the 'required' flag.

Validation highlights
- long_name is mandatory: it is the canonical key of the resolved value.
- Named spellings must match r"--?[^\W\d][\w.]*(-[\w.]+)*"; positional ones r"[^\W\d][\w.-]*".
- "-h" and "--help" are reserved for the built-in help switch.
- A required argument cannot declare a default, nor can a positional one.
- default is a Value of the declared dtype, or a raw python object wrapped with it;
  an explicit None is rejected (omit the parameter instead).

Quick example
    >>> count = Argument("-c", "--count", "how many", required=True, dtype=DataType.INTEGER)
    >>> count.key, count.positional
    ('count', False)
"""
import re

from .utils import *
from .values import DataType, Value

HELP_NAMES = frozenset({"-h", "--help"})


def _sanitize_names(metadata, /):
    """
    Internal: validate names and classify the declaration.

    Mutates `metadata` in place, adding the 'positional' key.
    """
    short, long = metadata["short_name"], metadata["long_name"]

    if not isinstance(short, str):
        raise TypeError("argument 'short_name' must be a string")
    if not isinstance(long, str):
        raise TypeError("argument 'long_name' must be a string")
    if not (long := long.strip()):
        raise ValueError("argument 'long_name' cannot be empty")
    short = short.strip()

    dashed = [name.startswith("-") for name in (short, long) if name]
    if any(dashed) and not all(dashed):
        raise ValueError("argument names %r and %r mix named and positional spellings" % (short, long))

    positional = not any(dashed)
    pattern = r"[^\W\d][\w.-]*" if positional else r"--?[^\W\d][\w.]*(-[\w.]+)*"
    for name in filter(None, (short, long)):
        if not re.fullmatch(pattern, name):
            kind = "positional" if positional else "option"
            raise ValueError("argument name %r is not a valid %s name" % (name, kind))
        if name in HELP_NAMES:
            raise ValueError("argument name %r is reserved for help" % name)

    if short and short == long:
        raise ValueError("argument 'short_name' and 'long_name' cannot be the same")

    metadata["short_name"] = short
    metadata["long_name"] = long
    metadata["positional"] = positional


def _sanitize_value(metadata, /):
    """
    Internal: validate help/required/dtype/default.

    Positional arguments are always required.
    """
    if not isinstance(help := metadata["help"], str):
        raise TypeError("argument 'help' must be a string")
    metadata["help"] = help.strip()

    if not isinstance(dtype := metadata["dtype"], DataType):
        raise TypeError("argument 'dtype' must be a DataType")

    if not isinstance(required := metadata["required"], bool):
        raise TypeError("argument 'required' must be a boolean")

    default = metadata["default"]
    if default is None:
        raise TypeError("argument 'default' cannot be None (omit it instead)")

    if default is not Unset:
        if metadata["positional"]:
            raise TypeError("positional argument %r cannot have a default" % metadata["long_name"])
        if required:
            raise TypeError("required argument %r cannot have a default" % metadata["long_name"])
        try:
            default = Value.of(dtype, default)
        except (TypeError, OverflowError) as exception:
            raise TypeError("argument 'default' must be a %s value: %s" % (dtype.name, exception)) from exception

    metadata["required"] = required or metadata["positional"]
    metadata["default"] = default


class Argument:
    """
    Immutable declaration of one expected argument.

    Instances are created by ArgumentParser.add_argument() (or directly, for
    introspection) and never change afterwards; the fields listed in
    __introspectable__ are exposed as read-only properties.
    """
    __introspectable__ = (
        "short_name",
        "long_name",
        "help",
        "required",
        "default",
        "dtype",
    )

    short_name = mirror("short_name")
    long_name = mirror("long_name")
    help = mirror("help")
    required = mirror("required")
    dtype = mirror("dtype")

    def __init__(self, short_name, long_name, help="", required=False, default=Unset, dtype=DataType.TEXT):
        metadata = {
            "short_name": short_name,
            "long_name": long_name,
            "help": help,
            "required": required,
            "default": default,
            "dtype": dtype,
        }
        _sanitize_names(metadata)
        _sanitize_value(metadata)

        for name, object in metadata.items():
            super().__setattr__("_" + name, object)

    @property
    def default(self):
        """declared default Value, or None when there is none."""
        return coalesce(self._default)

    @property
    def positional(self):
        return self._positional

    @property
    def names(self):
        """non-empty names as registered, short first."""
        return tuple(filter(None, (self._short_name, self._long_name)))

    @property
    def key(self):
        """canonical key of the resolved value: long_name without its leading dashes."""
        return self._long_name.lstrip("-")

    def __setattr__(self, name, value, /):
        raise AttributeError("argument declarations are read-only")

    def __delattr__(self, name, /):
        raise AttributeError("argument declarations are read-only")

    def __repr__(self):
        return "argument(%s)" % ", ".join("%s=%r" % pair for pair in self.__rich_repr__())

    def __rich_repr__(self):
        for name in type(self).__introspectable__:
            yield name, getattr(self, name)


__all__ = (
    "Argument",
)

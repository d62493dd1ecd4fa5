"""
sargparse faults (errors and warnings) and rendering.

Scope
- FaultCode: stable numeric identifiers for every user-facing issue raised while
  parsing, grouped by domain (usage, resolution, conversion, warnings).
- ParserException / ParserWarning: base types carrying a message plus options,
  able to render themselves with rich in a short, lowercased, actionable way.
- trigger(): central entry point to surface a fault (respecting shell/fancy/colorful).
- getdoc(): optional description lookup for a code from the host application.
- ValueTypeMismatchError: programming-contract error for reading a typed value
  with the wrong accessor (not a user-facing fault, never rendered).

Integration
- The parser builds a fault with its context and calls trigger(fault, **options).
- Outside shell mode errors are raised and warnings go through warnings.warn, so
  host applications can trap them. In shell mode they are printed on stderr and
  errors end the process with status 1.
"""
import copy
import sys
import warnings
from collections import defaultdict
from enum import IntEnum
from types import MappingProxyType

from rich.console import Console, Group
from rich.panel import Panel
from rich.text import Text

from .utils import Unset

console = Console(stderr=True)


class FaultCode(IntEnum):
    """
    canonical fault codes used by the parser (stable identifiers).

    grouping
    - usage (2111x): MALFORMED_TOKEN, MISSING_POSITIONALS
    - resolution (2112x): MISSING_ARGUMENT
    - conversion (2113x): UNCASTABLE_VALUE
    - warnings (221xx): UNKNOWN_OPTION, DUPLICATED_OPTION
    """
    # --- usage errors ---
    MALFORMED_TOKEN     = 21111
    MISSING_POSITIONALS = 21112

    # --- resolution errors ---
    MISSING_ARGUMENT    = 21121

    # --- conversion errors ---
    UNCASTABLE_VALUE    = 21131

    # --- warnings ---
    UNKNOWN_OPTION      = 22111
    DUPLICATED_OPTION   = 22112

    def normalize(self):
        """
        return a host-normalized string for this code.

        a __codes__ mapping in __main__ can relabel codes; otherwise the
        numeric value is used.
        """
        return str(getattr(__import__("__main__"), "__codes__", {}).get(self, self.value))


def _render(fault, palette, kind):
    main = __import__("__main__")
    styles = defaultdict(str, palette | getattr(main, "__styles__", {}))
    colorful = fault.options.get("colorful", False)

    def text(fragment, style=""):
        if not fragment:
            return Text("")
        if isinstance(fragment, Text):
            return fragment if colorful else Text(fragment.plain)
        return Text(str(fragment), styles[style] if colorful else "")

    prog = fault.options.get("prog") or getattr(main, "__prog__", "sargparse")
    code = fault.options.get("code")

    header = Text.assemble(
        "[ ",
        text(prog, "prog-name"),
        " — ",
        text(code.normalize() if isinstance(code, FaultCode) else "-", "code"),
        " | ",
        text(fault.options.get("title", kind).title(), kind + "-title"),
        " ]"
    )
    message = text(fault.message, kind + "-message")
    hint = fault.options.get("hint")
    body = [message]
    if hint:
        body.append(Text.assemble(text(" → ", "hint-arrow"), text(hint, "hint")))

    if fault.options.get("fancy", False):
        return Panel(Group(*body), title=header, title_align="left")
    return Group(header, *body)


class ParserException(Exception):
    def __init__(self, message=Unset, /, **options):
        assert isinstance(message, str | Unset)
        super().__init__(message)
        self.message = message
        self.options = MappingProxyType(options)

    def __str__(self):
        return str(self.message)

    def __rich__(self):
        return _render(self, {
            "prog-name": "bold #E6E6F0",
            "code": "bold #00E5FF",
            "error-title": "bold #FF4DA6",
            "error-message": "#C8C8D0",
            "hint-arrow": "#9CE19C dim",
            "hint": "italic #9CE19C",
        }, "error")

    def __trigger__(self) -> None:
        if not self.options.get("shell", False):
            raise self from self.__cause__
        console.print(self)
        sys.exit(1)

    def __replace__(self, *unused, **overrides):
        assert not unused, "positional arguments are not allowed"
        fault = type(self)(self.message, **{**self.options, **overrides})
        fault.__cause__ = self.__cause__
        return fault


class MalformedTokenError(ParserException): ...
class MissingPositionalsError(ParserException): ...
class MissingArgumentError(ParserException): ...
class UncastableValueError(ParserException): ...


class ParserWarning(Warning):
    def __init__(self, message=Unset, /, **options):
        assert isinstance(message, str | Unset)
        super().__init__(message)
        self.message = message
        self.options = MappingProxyType(options)

    def __str__(self):
        return str(self.message)

    def __rich__(self):
        return _render(self, {
            "prog-name": "bold #E6E6F0",
            "code": "bold #FFB400",
            "warning-title": "bold #FFC2E0",
            "warning-message": "#D6D6DE",
            "hint-arrow": "#B8EFAF dim",
            "hint": "italic #B8EFAF",
        }, "warning")

    def __trigger__(self) -> None:
        if not self.options.get("shell", False):
            return warnings.warn(self, stacklevel=self.options.get("stacklevel", 2))
        console.print(self)

    def __replace__(self, *unused, **overrides):
        assert not unused, "positional arguments are not allowed"
        return type(self)(self.message, **{**self.options, **overrides})


class UnknownOptionWarning(ParserWarning): ...
class DuplicatedOptionWarning(ParserWarning): ...


class ValueTypeMismatchError(TypeError):
    """
    a typed value was read with an accessor for another tag.

    this is a contract violation by the caller, not bad user input; it is raised
    directly and never routed through trigger().
    """

    def __init__(self, message, /, *, expected=Unset, actual=Unset):
        super().__init__(message)
        self.expected = expected
        self.actual = actual


def trigger(fault, /, **options):
    """
    surface a fault with the given runtime options.

    contract
    - fault must provide __trigger__ and __replace__ methods.
    - options are merged into the fault via copy.replace() before triggering.

    typical options
    - prog, shell, fancy, colorful, title, code, hint, docs and any context the
      renderer may want to show (token, index, argument).
    """
    if (
        not hasattr(fault, "__trigger__") or
        not callable(fault.__trigger__) or
        not hasattr(fault, "__replace__") or
        not callable(fault.__replace__)
    ):
        raise TypeError("trigger() argument must have a __trigger__ and __replace__ methods")
    copy.replace(fault, **options).__trigger__()


def getdoc(code, /):
    """
    documentation for a fault code, from a __docs__ mapping in __main__ (or None).
    """
    if not isinstance(code, FaultCode):
        raise TypeError("getdoc() argument must be a fault-code")
    try:
        return getattr(__import__("__main__"), "__docs__", {})[code]
    except KeyError:
        return None


__all__ = (
    "FaultCode",
    "ParserException",
    "MalformedTokenError",
    "MissingPositionalsError",
    "MissingArgumentError",
    "UncastableValueError",
    "ParserWarning",
    "UnknownOptionWarning",
    "DuplicatedOptionWarning",
    "ValueTypeMismatchError",
    "trigger",
    "getdoc",
)

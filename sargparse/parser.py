"""
sargparse parser: declare arguments, then turn an argument vector into typed values.

What this module provides
- ArgumentParser: holds the declarations (ordered positionals, required-named,
  optional-named) and parses an argument vector in two passes:
  • tokenize: raw tokens → intermediate map {option-as-typed: raw text | "true"}
  • resolve: each declaration → Value, keyed by its canonical long name
- ParsedArguments: read-only mapping returned by a successful parse.

Parsing rules
- argv[0] is the program name and is skipped.
- The first N tokens are the N positional arguments, in registration order.
- Then every token must be an option ('-x' or '--long'). An option followed by
  a value token takes it; an option followed by another option (or by nothing)
  is a flag and reads as "true".
- '-h' / '--help' anywhere prints help and makes parse_args() return None,
  before any other fault can surface.
- Lookup prefers the short spelling over the long one. Missing optional
  arguments fall back to their default, then to the zero value of their type;
  missing required arguments are a fault.

Quick start
    from sargparse import ArgumentParser, DataType

    parser = ArgumentParser("count things")
    parser.add_argument("-c", "--count", "how many", required=True, dtype=DataType.INTEGER)
    parser.add_argument("-v", "--verbose", "chatty output", default=False, dtype=DataType.BOOLEAN)

    if (arguments := parser.parse_args()) is not None:
        print(arguments.get_int("count"), arguments.get_bool("verbose"))
"""
import difflib
import itertools
import logging
import os.path
import shlex
import sys
from collections import defaultdict
from collections.abc import Iterable, Mapping

from rich.console import Console, Group
from rich.panel import Panel
from rich.rule import Rule
from rich.table import Table
from rich.text import Text

from .arguments import HELP_NAMES, Argument
from .faults import *
from .utils import *
from .values import DataType

logger = logging.getLogger(__name__)

# frames between a caller of parse_args() and warnings.warn() in ParserWarning.__trigger__
_STACKLEVEL = 6


class ParsedArguments(Mapping):
    """
    Read-only mapping from canonical argument key to Value.

    Holds exactly one entry per declared argument. The get_* shortcuts read a
    value with the matching accessor, so a wrong-type read raises
    ValueTypeMismatchError just like on the Value itself.
    """

    def __init__(self, values=(), /):
        self._values = dict(values)

    def __getitem__(self, key):
        return self._values[key]

    def __iter__(self):
        return iter(self._values)

    def __len__(self):
        return len(self._values)

    def get_int(self, key, /):
        return self[key].get_int()

    def get_float(self, key, /):
        return self[key].get_float()

    def get_text(self, key, /):
        return self[key].get_text()

    def get_bool(self, key, /):
        return self[key].get_bool()

    def __repr__(self):
        return "parsed-arguments(%s)" % ", ".join("%s=%r" % (key, value.payload) for key, value in self._values.items())

    def __rich_repr__(self):
        for key, value in self._values.items():
            yield key, value.payload


class ArgumentParser:
    """
    Declarative command-line parser producing typed values.

    Lifecycle
    - Construct with an optional description and presentation flags.
    - Register arguments with add_argument(); each declaration is classified once
      (positional / required / optional) and stored in the matching collection.
    - Call parse_args(argv) as many times as needed; it never mutates the declarations.

    Presentation flags
    - prog: program name for help and fault headers (when omitted: __prog__
      in __main__, else the basename of argv[0]).
    - shell: print faults on stderr and exit(1) instead of raising.
    - fancy: wrap help and faults in a panel.
    - colorful: style the output (rich drops styles on non-terminals anyway).
    """
    __introspectable__ = (
        "description",
        "prog",
        "positional_args",
        "required_args",
        "optional_args",
        "shell",
        "fancy",
        "colorful",
    )

    description = mirror("description")
    positional_args = mirror("positional_args")
    required_args = mirror("required_args")
    optional_args = mirror("optional_args")
    shell = mirror("shell")
    fancy = mirror("fancy")
    colorful = mirror("colorful")

    def __init__(self, description=None, *, prog=Unset, shell=False, fancy=False, colorful=True):
        if not isinstance(description, str | None):
            raise TypeError("parser 'description' must be a string")
        if not isinstance(prog, str | Unset):
            raise TypeError("parser 'prog' must be a string")
        elif isinstance(prog, str) and not (prog := prog.strip()):
            raise ValueError("parser 'prog' cannot be empty")

        self._description = description or ""
        self._prog = prog
        self._positional_args = []
        self._required_args = []
        self._optional_args = []
        self._shell = bool(shell)
        self._fancy = bool(fancy)
        self._colorful = bool(colorful)

    @property
    def prog(self):
        """explicit program name, or None when it is taken from argv[0] at parse time."""
        return coalesce(self._prog)

    @property
    def arguments(self):
        """every declaration: positionals, then required, then optional."""
        return tuple(itertools.chain(self._positional_args, self._required_args, self._optional_args))

    def add_argument(self, short_name, long_name, help="", required=False, default=Unset, dtype=DataType.TEXT):
        """
        Declare an argument and return its (immutable) declaration.

        Parameters
        - short_name: str
          "-x" style alias, "" when there is none. Positional arguments use a
          plain name here too, or "".
        - long_name: str
          "--long" style name, or a plain name for a positional argument. Its
          dash-less form is the key of the parsed value.
        - help: str
          one-line description shown by --help.
        - required: bool
          a required named argument must be supplied. Positional arguments
          are always required.
        - default: Value | int | float | str | bool
          used when an optional argument is not supplied; must match dtype.
        - dtype: DataType
          type the raw text is converted to.

        Raises
        - TypeError / ValueError for an invalid declaration (see Argument).
        - ValueError when a name or key is already taken by another declaration.
        """
        argument = Argument(short_name, long_name, help, required, default, dtype)

        for other in self.arguments:
            if clash := set(argument.names) & set(other.names):
                raise ValueError("argument name %r is already in use" % clash.pop())
            if argument.key == other.key:
                raise ValueError("argument key %r is already in use" % argument.key)

        if argument.positional:
            self._positional_args.append(argument)
        elif argument.required:
            self._required_args.append(argument)
        else:
            self._optional_args.append(argument)

        logger.debug("registered %r", argument)
        return argument

    def parse_args(self, args=Unset, /):
        """
        Parse an argument vector into typed values.

        Parameters
        - args:
          • Unset: read sys.argv.
          • str: shell-like command line, split with shlex.split.
          • Iterable[str]: pre-tokenized vector.
          In every form the first item is the program name.

        Returns
        - ParsedArguments with one Value per declared argument, or
        - None when help was requested (help has been printed to stdout).

        Raises (outside shell mode)
        - MissingPositionalsError, MalformedTokenError: bad token stream.
        - MissingArgumentError: required argument neither supplied nor defaulted.
        - UncastableValueError: supplied text does not read as the declared type.
        """
        if args is Unset:
            tokens = list(sys.argv)
        elif isinstance(args, str):
            tokens = shlex.split(args)
        elif isinstance(args, Iterable):
            tokens = list(args)
            if not all(isinstance(token, str) for token in tokens):
                raise TypeError("parse_args() argument must be a string or an iterable of strings")
        else:
            raise TypeError("parse_args() argument must be a string or an iterable of strings")

        prog = coalesce(self._prog, getattr(__import__("__main__"), "__prog__", os.path.basename(tokens[0]) if tokens else ""))

        # help wins over every fault, including a short positional list
        if HELP_NAMES.intersection(tokens[1:]):
            logger.debug("help requested")
            self._helper(prog)
            return None

        intermediate, positions = self._tokenize(tokens, prog)
        logger.debug("tokenized %r", intermediate)

        resolved = self._resolve(intermediate, positions, prog)
        logger.debug("resolved %s", ", ".join(resolved))
        return resolved

    def _trigger(self, fault, prog, /):
        trigger(
            fault,
            prog=prog,
            shell=self._shell,
            fancy=self._fancy,
            colorful=self._colorful,
            stacklevel=_STACKLEVEL,
        )

    def _tokenize(self, tokens, prog):
        """
        first pass: build the intermediate map from the raw tokens.

        positionals are stored under their long name; options under the
        spelling the user typed (dashes included).
        """
        intermediate = {}
        positions = {}
        index = 1

        if (available := max(len(tokens) - index, 0)) < len(self._positional_args):
            missing = self._positional_args[available:]
            self._trigger(MissingPositionalsError(
                "missing positional argument%s %s" % (
                    "s" * (len(missing) > 1),
                    ", ".join(repr(argument.long_name) for argument in missing),
                ),
                title="missing positional arguments",
                code=FaultCode.MISSING_POSITIONALS,
                hint="positional arguments come first, in this order: %s" % " ".join(
                    "<%s>" % argument.long_name for argument in self._positional_args
                ),
                missing=tuple(missing),
                docs=getdoc(FaultCode.MISSING_POSITIONALS),
            ), prog)

        for argument in self._positional_args:
            intermediate[argument.long_name] = tokens[index]
            positions[argument.long_name] = index
            index += 1

        while index < len(tokens):
            token = tokens[index]

            if not token.startswith("-"):
                self._trigger(MalformedTokenError(
                    "error parsing arguments: expected an option at %s position, got %r" % (ordinal(index), token),
                    title="malformed token",
                    code=FaultCode.MALFORMED_TOKEN,
                    hint="values follow their option (for example: --name %s); try '%s --help'" % (token, prog),
                    token=token,
                    index=index,
                    docs=getdoc(FaultCode.MALFORMED_TOKEN),
                ), prog)

            start = index
            index += 1
            if index >= len(tokens) or tokens[index].startswith("-"):
                value = "true"
            else:
                value = tokens[index]
                index += 1

            if token in intermediate:
                self._trigger(DuplicatedOptionWarning(
                    "option %r at %s position repeats the one at %s position" % (
                        token, ordinal(start), ordinal(positions[token])
                    ),
                    title="duplicated option",
                    code=FaultCode.DUPLICATED_OPTION,
                    hint="the last occurrence wins; remove the others",
                    token=token,
                    index=start,
                    docs=getdoc(FaultCode.DUPLICATED_OPTION),
                ), prog)

            intermediate[token] = value
            positions[token] = start

        return intermediate, positions

    def _convert(self, argument, name, text, prog):
        try:
            return argument.dtype.parse(text)
        except (ValueError, OverflowError) as exception:
            fault = UncastableValueError(
                "cannot read %r as %s for argument %r" % (text, argument.dtype.value, argument.key),
                title="uncastable value",
                code=FaultCode.UNCASTABLE_VALUE,
                hint=(
                    "pass 'true' or 'false' (or the bare option)"
                    if argument.dtype is DataType.BOOLEAN else
                    "pass a valid %s after %r" % (argument.dtype.value, name)
                ),
                input=name,
                text=text,
                argument=argument,
                docs=getdoc(FaultCode.UNCASTABLE_VALUE),
            )
            fault.__cause__ = exception
            self._trigger(fault, prog)

    def _resolve(self, intermediate, positions, prog):
        """
        second pass: one Value per declaration, keyed by canonical name.
        """
        resolved = {}
        consumed = set()

        for argument in self._positional_args:
            consumed.add(argument.long_name)
            resolved[argument.key] = self._convert(argument, argument.long_name, intermediate[argument.long_name], prog)

        for argument in itertools.chain(self._required_args, self._optional_args):
            supplied = [name for name in argument.names if name in intermediate]
            consumed.update(supplied)

            if len(supplied) > 1:
                self._trigger(DuplicatedOptionWarning(
                    "argument %r given as both %s; using %r" % (
                        argument.key, " and ".join(map(repr, supplied)), supplied[0]
                    ),
                    title="duplicated option",
                    code=FaultCode.DUPLICATED_OPTION,
                    hint="pass only one spelling of the option",
                    token=supplied[-1],
                    argument=argument,
                    docs=getdoc(FaultCode.DUPLICATED_OPTION),
                ), prog)

            if supplied:
                name = supplied[0]
                resolved[argument.key] = self._convert(argument, name, intermediate[name], prog)
            elif argument.default is not None:
                resolved[argument.key] = argument.default
            elif argument.required:
                self._trigger(MissingArgumentError(
                    "missing required argument %r" % argument.key,
                    title="missing required argument",
                    code=FaultCode.MISSING_ARGUMENT,
                    hint="pass it as %s <%s>" % (
                        " or ".join(argument.names), argument.dtype.value
                    ),
                    argument=argument,
                    docs=getdoc(FaultCode.MISSING_ARGUMENT),
                ), prog)
            else:
                resolved[argument.key] = argument.dtype.zero

        known = [name for argument in self.arguments if not argument.positional for name in argument.names]
        for token in intermediate:
            if token in consumed:
                continue
            suggestions = difflib.get_close_matches(token, known, 3)
            try:
                hint = "did you mean %r? run '%s --help' to see all options" % (suggestions[0], prog)
            except IndexError:
                hint = "run '%s --help' to see all options" % prog
            self._trigger(UnknownOptionWarning(
                "unknown option %r at %s position is ignored" % (token, ordinal(positions[token])),
                title="unknown option",
                code=FaultCode.UNKNOWN_OPTION,
                hint=hint,
                token=token,
                suggestions=suggestions,
                docs=getdoc(FaultCode.UNKNOWN_OPTION),
            ), prog)

        return ParsedArguments(resolved)

    def _helper(self, prog):
        """
        Render help to stdout.

        Layout: separator, description, blank line, required arguments
        (positionals first), blank line, optional arguments.

        Palette keys
        - separator, description, section-label, positional-name, option-name,
          alias, dtype, argument-help, default, panel-title
        Define __styles__ in __main__ to override any of them.
        """
        console = Console()
        styles = defaultdict(str, {
            "separator": "#4B5563",
            "description": "italic #A3A3A3",
            "section-label": "bold #FFFFFF",
            "positional-name": "bold #FFD600",
            "option-name": "bold #00E6FF",
            "alias": "#36C5F0",
            "dtype": "italic #22C55E",
            "argument-help": "#9CA3AF",
            "default": "#FF4D94",
            "panel-title": "bold #FF4D94",
        } | getattr(__import__("__main__"), "__styles__", {}))

        def text(fragment, style=""):
            return Text(str(fragment), styles[style] if self._colorful else "")

        def payload(value):
            match value.dtype:
                case DataType.BOOLEAN:
                    return "true" if value.payload else "false"
                case DataType.TEXT:
                    return repr(value.payload)
                case _:
                    return str(value.payload)

        def section(label, arguments):
            table = Table.grid(padding=(0, 2))
            table.add_column(no_wrap=True)
            table.add_column()
            for argument in arguments:
                name = text(argument.long_name, "positional-name" if argument.positional else "option-name")
                aliases = [text(argument.short_name, "alias")] if argument.short_name else []
                signature = Text.assemble(
                    "  ", name, " (", *(Text.assemble(alias, ", ") for alias in aliases),
                    text(argument.dtype.name, "dtype"), ")"
                )
                description = text(argument.help, "argument-help")
                if argument.default is not None:
                    description.append(" ").append(text("[default: %s]" % payload(argument.default), "default"))
                table.add_row(signature, description)
            return Group(text(label + ":", "section-label"), table)

        renders = [
            Rule(text(prog, "panel-title") if prog and not self._fancy else "", style=styles["separator"] if self._colorful else ""),
            text(self._description, "description"),
            Text(""),
            section("required arguments", [*self._positional_args, *self._required_args]),
            Text(""),
            section("optional arguments", self._optional_args),
        ]

        renderable = Group(*renders)

        if self._fancy:
            renderable = Panel(
                renderable,
                title=Text.assemble("[ ", "%s HELP" % prog.upper(), " ]", style=styles["panel-title"] if self._colorful else ""),
                title_align="left",
            )

        console.print(renderable)

    def __repr__(self):
        return "argument-parser(%s)" % ", ".join("%s=%r" % pair for pair in self.__rich_repr__())

    def __rich_repr__(self):
        for name in type(self).__introspectable__:
            yield name, getattr(self, name)


__all__ = (
    "ArgumentParser",
    "ParsedArguments",
)

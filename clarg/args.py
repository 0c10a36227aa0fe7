"""
Clarg declaration set: the Args snapshot.

Scope
- Args holds the ordered option descriptors of one program together with the
  outcome of the latest resolution pass (values, value history, bare tokens and
  failures). It is immutable: parse() returns a new snapshot, the receiver is
  left untouched.

Overview
- Construction (Args(...) / build(...))
  • the help flag is prepended when no option is named "help";
  • a "remaining" bare-token catcher is appended when no option is flagless;
  • several flagless options, or two options sharing a name, raise ConstructionError.
- Query API
  • get(name, default=None): last resolved value (or the declared default).
  • get_all(name, default=()): every value given, in order, or the default as a
    one-element history.
  • remaining / failures: bare tokens and recorded failures of the last pass.
- Host helpers
  • help, print_values(), print_all_values(), handle_help(), handle_errors() and
    process(); output goes through rich consoles.

Notes
- The default program invocation comes from __prog__ in __main__ when the host
  sets it, otherwise from the basename of sys.argv[0].
"""
import os.path
import sys
from collections.abc import Iterable

from rich.console import Console
from rich.text import Text

from . import engine, options
from .faults import ConstructionError
from .help import render
from .options import Opt, HELP_KEY
from .utils import Unset, SealedType, coalesce

HELP_FLAG = options.flag(HELP_KEY, ("-h", "--h", "--help"), "Show this help message.")
QUIET_FLAG = options.flag("quiet", ("-q", "--quiet"), "Suppress some verbose output.")
REMAINING_OPT = options.bare_tokens()


def socket_opt(name="socket", flags=("-s", "--socket"), default=Unset, help="Socket host:port.", required=False):
    """
    Convenience "host:port" option (see options.socket).
    """
    return options.socket(name, flags, default, help, required)


def _program_invocation():
    return getattr(__import__("__main__"), "__prog__", os.path.basename(sys.argv[0]) if sys.argv else "") or "python"


def _sanitize_metadata(cls, metadata, /):
    """
    Internal: validate the declaration and synthesize help/remaining options.

    Raises
    - TypeError: non-Opt entries or non-string comments.
    - ConstructionError: several flagless options, or duplicated names.
    """
    if isinstance(opts := metadata["opts"], str) or not isinstance(opts, Iterable):
        raise TypeError(f"{cls.__typename__} 'opts' must be an iterable of options")
    opts = list(opts)
    for opt in opts:
        if not isinstance(opt, Opt):
            raise TypeError(f"{cls.__typename__} 'opts' must only contain options, got {type(opt).__name__!r}")

    for field in ("program_invocation", "leading_comments", "trailing_comments"):
        if not isinstance(metadata[field], str | Unset):
            raise TypeError(f"{cls.__typename__} {field!r} must be a string")
    metadata["program_invocation"] = coalesce(metadata["program_invocation"], _program_invocation())

    if not any(opt.name == HELP_KEY for opt in opts):
        opts.insert(0, HELP_FLAG)

    match [opt for opt in opts if not opt.flags]:
        case []:
            opts.append(REMAINING_OPT)
        case [_]:
            pass
        case flagless:
            raise ConstructionError(
                f"{cls.__typename__} accepts at most one option without flags, got {", ".join(opt.name for opt in flagless)}"
            )

    seen = set()
    for opt in opts:
        if opt.name in seen:
            raise ConstructionError(f"{cls.__typename__} option name {opt.name!r} is declared more than once")
        seen.add(opt.name)

    metadata["opts"] = tuple(opts)


class Args(metaclass=SealedType):
    """
    Declaration set plus the state of the latest resolution pass.

    Fields (read-only)
    - program_invocation, leading_comments, trailing_comments: help texts.
    - opts: descriptors in declaration order (help flag and catcher included).
    - defaults: name -> default, for every option with one except the catcher.
    - values: name -> last value (defaults overlaid with the last pass).
    - all_values: name -> tuple of every value given (or the default alone).
    - remaining: bare tokens of the last pass.
    - failures: (key, fault) pairs of the last pass, in the order they occurred.
    """

    __introspectable__ = (
        "program_invocation",
        "leading_comments",
        "trailing_comments",
        "opts",
        "defaults",
        "values",
        "all_values",
        "remaining",
        "failures",
    )

    __replaceable__ = frozenset((
        "program_invocation",
        "leading_comments",
        "trailing_comments",
        "values",
        "all_values",
        "remaining",
        "failures",
    ))

    def __new__(cls, opts=(), /, program_invocation=Unset, leading_comments="", trailing_comments=""):
        metadata = {
            "opts": opts,
            "program_invocation": program_invocation,
            "leading_comments": leading_comments,
            "trailing_comments": trailing_comments,
        }
        _sanitize_metadata(cls, metadata)

        self = super().__new__(cls)
        for name, object in metadata.items():
            setattr(self, "_" + name, object)

        catcher = self.remaining_opt
        self._defaults = {
            opt.name: opt.default for opt in self._opts if opt.default is not Unset and opt is not catcher
        }
        self._values = dict(self._defaults)
        self._all_values = {name: (value,) for name, value in self._defaults.items()}
        self._remaining = ()
        self._failures = ()
        return self

    def __replace__(self, /, **changes):
        """
        Copy of this snapshot with some state replaced (see copy.replace).
        """
        if unknown := changes.keys() - self.__replaceable__:
            raise TypeError(f"{type(self).__typename__} cannot replace {", ".join(sorted(unknown))}")
        other = object.__new__(type(self))
        for name in type(self).__introspectable__:
            setattr(other, "_" + name, getattr(self, "_" + name))
        for name, value in changes.items():
            setattr(other, "_" + name, value)
        return other

    def __str__(self):
        return "\n".join((
            "Args:",
            "  program invocation: %s" % self._program_invocation,
            "  leading comments: %s" % self._leading_comments,
            "  trailing comments: %s" % self._trailing_comments,
            "  opts: %s" % ", ".join(map(repr, self._opts)),
            "  defaults: %s" % self._defaults,
            "  values: %s" % self._values,
            "  all values: %s" % self._all_values,
            "  remaining: %s" % (self._remaining,),
            "  failures: %s" % ", ".join("%s: %s" % failure for failure in self._failures),
        ))

    @property
    def remaining_opt(self):
        """
        The flagless bare-token catcher of this declaration.
        """
        return next(opt for opt in self._opts if not opt.flags)

    @property
    def required_options(self):
        """
        Options that must be given: declared required and without a default.
        """
        return tuple(opt for opt in self._opts if opt.is_required)

    @property
    def help(self):
        """
        The rendered help, as plain text.
        """
        return render(self).plain

    def get(self, name, default=None, /):
        return self._values.get(name, default)

    def get_all(self, name, default=(), /):
        return self._all_values.get(name, default)

    def parse(self, tokens=Unset, /):
        """
        Resolve tokens against this declaration and return the new snapshot.

        tokens may be a list of strings, a single shell-like string, or Unset
        for sys.argv[1:].
        """
        return engine.resolve(self, tokens)

    def _report(self, header, source, console, /):
        catcher = self.remaining_opt
        entries = [
            (opt.name, self._remaining if opt is catcher else source[opt.name])
            for opt in self._opts
            if opt is catcher or opt.name in source
        ]
        width = max((len(name) for name, _ in entries), default=0)
        lines = [header] + ["  %*s: %s" % (width, name, value) for name, value in entries]
        coalesce(console, Console()).print(Text("\n".join(lines)))

    def print_values(self, console=Unset, /):
        """
        Print every resolved value, one "name: value" line per option.
        """
        self._report("Command line arguments:", self._values, console)

    def print_all_values(self, console=Unset, /):
        """
        Print the value history, one "name: (values...)" line per option.
        """
        self._report("Command line arguments (all values given):", self._all_values, console)

    def handle_help(self, console=Unset, /):
        """
        Print the help when it was requested; report whether it was.
        """
        if not self.get(HELP_KEY):
            return False
        coalesce(console, Console()).print(render(self, colorful=True))
        return True

    def handle_errors(self, console=Unset, /):
        """
        Print the help (failures included) when the last pass failed; report whether it did.
        """
        if not self._failures:
            return False
        coalesce(console, Console(stderr=True)).print(render(self, colorful=True))
        return True

    def process(self, tokens=Unset, /, *, console=Unset, exit=sys.exit):
        """
        Parse, then print help and exit(0), or print failures and exit(1).

        Returns the resolved snapshot when neither applies (or when the given
        exit callable returns).
        """
        parsed = self.parse(tokens)
        if parsed.handle_help(console):
            exit(0)
        elif parsed.handle_errors(console):
            exit(1)
        return parsed


def build(opts=(), /, **metadata):
    """
    Build a declaration set; keywords are forwarded to Args.
    """
    return Args(opts, **metadata)


__all__ = (
    # Types
    "Args",

    # Functions
    "build",
    "socket_opt",

    # Predefined options
    "HELP_FLAG",
    "QUIET_FLAG",
    "REMAINING_OPT",
)

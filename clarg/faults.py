"""
Clarg faults (recorded failures and declaration errors) and rendering.

Scope
- FaultCode: canonical, stable numeric identifiers for every user-facing issue.
  Codes are grouped by domain (resolution, declaration) to keep logs and
  searches predictable.
- ResolutionFault: base type for failures recorded while resolving a token
  vector. These are data: the engine collects them in the snapshot, it never
  raises them.
  • UnrecognizedArgument, InvalidValueString, MissingRequiredArgument
- DeclarationError: base type for fatal, raised errors in the declaration
  itself (ConstructionError, GrammarError).

UX goals
- One-line str() for each fault so help output can list them verbatim.
- Rich rendering through __rich__ with a palette configurable via __styles__ in
  __main__, and code labels remappable via __codes__ in __main__.
"""
from collections import defaultdict
from enum import IntEnum
from types import MappingProxyType

from rich.console import Group
from rich.text import Text

from .utils import Unset, coalesce


class FaultCode(IntEnum):
    """
    canonical fault codes (stable identifiers).

    grouping (by high-level domain)
    - resolution (2110x)
      • UNRECOGNIZED_ARGUMENT, INVALID_VALUE_STRING, MISSING_REQUIRED_ARGUMENT
    - declaration (2210x)
      • CONSTRUCTION, GRAMMAR

    spacing leaves room for future additions without reshuffling existing codes.
    """
    # --- resolution failures (21xxx) ---
    UNRECOGNIZED_ARGUMENT       = 21101
    INVALID_VALUE_STRING        = 21102
    MISSING_REQUIRED_ARGUMENT   = 21103

    # --- declaration errors (22xxx) ---
    CONSTRUCTION                = 22101
    GRAMMAR                     = 22102

    def normalize(self):
        """
        return a host-normalized string for this code.

        the host application can provide a __codes__ mapping in __main__
        to override numeric ids with friendlier labels. when no mapping
        is present, the numeric value is returned as a string.
        """
        return str(getattr(__import__("__main__"), "__codes__", {}).get(self, self.value))


def _render(fault, title, message, colorful, /):
    main = __import__("__main__")

    styles = defaultdict(str, {
        # header parts
        "prog-name": "bold #E6E6F0",  # near-white program name
        "code": "bold #00E5FF",  # neon cyan fault code
        "error-title": "bold #FF4DA6",  # friendly pinky title

        # body
        "error-message": "#C8C8D0",  # soft light gray message
    } | getattr(main, "__styles__", {}))

    def styler(style):
        return styles[style] if colorful else ""

    def text(fragment, style=""):
        if not fragment:
            return Text("")
        if not colorful:
            return Text(str(fragment))
        return Text(str(fragment), style)

    header = Text.assemble(
        "[ ",
        text(getattr(main, "__prog__", "clarg"), styler("prog-name")),
        " — ",
        text(fault.code.normalize(), styler("code")),
        " | ",
        text(title.title(), styler("error-title")),
        " ]"
    )
    return Group(header, text(message, styler("error-message")))


class ResolutionFault(Exception):
    """
    a failure recorded while resolving tokens.

    contract
    - message: the one-line description returned by str().
    - options: read-only mapping of the structured fields of the failure.
    - code/title: classification used by the rich renderer.
    - equality is by type and fields, so recorded failures can be compared.
    """
    code = Unset
    title = Unset

    def __init__(self, message, /, **options):
        assert isinstance(message, str)
        super().__init__(message)
        self.message = message
        self.options = MappingProxyType(options)

    def __str__(self):
        return self.message

    def __eq__(self, other):
        if type(self) is not type(other):
            return NotImplemented
        return self.message == other.message

    def __hash__(self):
        return hash((type(self), self.message))

    def __rich__(self):
        return _render(self, self.title, self.message, self.options.get("colorful", True))


class UnrecognizedArgument(ResolutionFault):
    """
    a dash-prefixed token that no option accepts, or a value-bearing flag with
    no value after it.
    """
    code = FaultCode.UNRECOGNIZED_ARGUMENT
    title = "unrecognized argument"

    def __init__(self, token, rest=(), /):
        rest = tuple(rest)
        super().__init__(
            "Unrecognized argument (or missing value): %s %s" % (
                token, "(rest of arguments: %s)" % " ".join(rest) if rest else "(end of arguments)"
            ),
            token=token,
            rest=rest,
        )

    @property
    def token(self):
        return self.options["token"]

    @property
    def rest(self):
        return self.options["rest"]


class InvalidValueString(ResolutionFault, ValueError):
    """
    a value token the option codec could not convert.

    the cause (when any) is the error raised by the codec. codecs may raise an
    InvalidValueString themselves to report a custom value message, in which
    case it is recorded unchanged.
    """
    code = FaultCode.INVALID_VALUE_STRING
    title = "invalid value string"

    def __init__(self, flag, value, cause=None, /):
        message = "Invalid value string: %s for option %s" % (value, flag)
        if cause is not None:
            message += " (cause %s: %s)" % (type(cause).__name__, cause)
        super().__init__(message, flag=flag, value=value, cause=cause)

    @property
    def flag(self):
        return self.options["flag"]

    @property
    def value(self):
        return self.options["value"]

    @property
    def cause(self):
        return self.options["cause"]


class MissingRequiredArgument(ResolutionFault):
    """
    a required option (declared required, with no default) that never matched.
    """
    code = FaultCode.MISSING_REQUIRED_ARGUMENT
    title = "missing required argument"

    def __init__(self, opt, /):
        super().__init__(
            "Missing required argument: \"%s\" with flags %s, %s" % (opt.name, " | ".join(opt.flags), opt.help),
            opt=opt,
        )

    @property
    def opt(self):
        return self.options["opt"]


class DeclarationError(Exception):
    """
    a fatal error in an option declaration; raised, never recorded.
    """
    code = Unset

    def __rich__(self):
        return _render(self, "declaration error", str(self), True)


class ConstructionError(DeclarationError, ValueError):
    """
    raised when a descriptor, codec or declaration set is built from invalid
    parts (empty name, bad delimiter, several flagless options, ...).
    """
    code = FaultCode.CONSTRUCTION


class GrammarError(DeclarationError, ValueError):
    """
    raised when a line of a declarative option specification does not parse.

    attributes
    - line: the offending line, as written.
    - reason: what was expected or rejected.
    - column: zero-based position of the failure inside the stripped line, when known.
    """
    code = FaultCode.GRAMMAR

    def __init__(self, line, reason, /, column=Unset):
        self.line = line
        self.reason = reason
        self.column = coalesce(column)
        super().__init__(
            "%s: %r" % (reason, line) if self.column is None else "%s at column %d: %r" % (reason, self.column, line)
        )


__all__ = (
    # Codes
    "FaultCode",

    # Recorded failures
    "ResolutionFault",
    "UnrecognizedArgument",
    "InvalidValueString",
    "MissingRequiredArgument",

    # Raised errors
    "DeclarationError",
    "ConstructionError",
    "GrammarError",
)

"""
Clarg option descriptors.

Scope
- Opt: the single, sealed descriptor of one accepted option. Behavior is
  selected by its OptKind tag, never by subclassing.
- Builders: one module-level function per kind (flag, notflag, string, byte,
  char, int, long, float, double, seq, seq_string, path, socket, bare_tokens).
  They shadow builtins on purpose; call them qualified (options.int(...)).

Overview
- Opt.match(tokens, index) tries to consume the head of a token vector:
  • flag kinds accept exactly their flag and yield the negated default;
  • value kinds accept "flag=value" first, then "flag value";
  • the remaining kind, the only one without flags, accepts one bare (non
    dash-prefixed) token verbatim.
- A codec failure is not raised: it becomes an InvalidValueString record inside
  the returned Resolution, so the engine keeps going.

Notes
- Validation happens at construction and raises ConstructionError (bad values)
  or TypeError (bad types), following _sanitize_metadata().
- Two descriptors compare equal when every declared field agrees, including
  the element codec of sequences; this is what lets a grammar-built declaration
  equal a hand-built one.
"""
import builtins
import enum
import re
from collections import namedtuple
from collections.abc import Iterable

from . import codecs
from .faults import ConstructionError, InvalidValueString
from .utils import Unset, SealedType

HELP_KEY = "help"
REMAINING_KEY = "remaining"

_FLAG = re.compile(r"--?\w[\w-]*")


class OptKind(enum.Enum):
    """
    kind tag of a descriptor; selects its matching and conversion behavior.
    """
    FLAG = "flag"
    STRING = "string"
    BYTE = "byte"
    CHAR = "char"
    INT = "int"
    LONG = "long"
    FLOAT = "float"
    DOUBLE = "double"
    SEQ = "seq"
    PATH = "path"
    SOCKET = "socket"
    REMAINING = "remaining"


_CODECS = {
    OptKind.STRING: codecs.to_string,
    OptKind.BYTE: codecs.to_byte,
    OptKind.CHAR: codecs.to_char,
    OptKind.INT: codecs.to_int,
    OptKind.LONG: codecs.to_long,
    OptKind.FLOAT: codecs.to_float,
    OptKind.DOUBLE: codecs.to_double,
    OptKind.SOCKET: codecs.to_socket,
}

Resolution = namedtuple("Resolution", ("name", "value", "fault", "next"))
Resolution.__doc__ = """
Outcome of one successful match.

- name: the option name the outcome is keyed by.
- value: the converted value (Unset when the conversion failed).
- fault: None, or the InvalidValueString recorded for a failed conversion.
- next: index of the first token not consumed.
"""


def _sanitize_metadata(cls, metadata, /):
    """
    Internal: normalize and validate descriptor metadata in place.

    Raises
    - TypeError: for values of the wrong type.
    - ConstructionError: for an empty name, malformed or duplicated flags,
      flags on a remaining kind, no flags on any other kind, a non-boolean flag default, or a sequence kind
      without a codec.
    """
    if not isinstance(kind := metadata["kind"], OptKind):
        raise TypeError(f"{cls.__typename__} 'kind' must be an OptKind")

    if not isinstance(name := metadata["name"], str):
        raise TypeError(f"{cls.__typename__} 'name' must be a string")
    elif not (name := name.strip()):
        raise ConstructionError(f"{cls.__typename__} 'name' cannot be empty")
    metadata["name"] = name

    if isinstance(flags := metadata["flags"], str) or not isinstance(flags, Iterable):
        raise TypeError(f"{cls.__typename__} 'flags' must be an iterable of strings")
    flags = tuple(flags)
    for flag in flags:
        if not isinstance(flag, str):
            raise TypeError(f"{cls.__typename__} 'flags' must be an iterable of strings")
        elif not _FLAG.fullmatch(flag):
            raise ConstructionError(f"{cls.__typename__} flag {flag!r} is malformed")
    if len(set(flags)) != len(flags):
        raise ConstructionError(f"{cls.__typename__} {name!r} has duplicated flags")
    if kind is OptKind.REMAINING and flags:
        raise ConstructionError(f"{cls.__typename__} {name!r} of kind 'remaining' cannot have flags")
    elif kind is not OptKind.REMAINING and not flags:
        raise ConstructionError(f"{cls.__typename__} {name!r} of kind {kind.value!r} requires at least one flag")
    metadata["flags"] = flags

    if not isinstance(metadata["help"], str):
        raise TypeError(f"{cls.__typename__} 'help' must be a string")

    match kind:
        case OptKind.FLAG:
            if not isinstance(metadata["default"], bool):
                raise ConstructionError(f"{cls.__typename__} {name!r} of kind 'flag' must default to a boolean")
        case OptKind.SEQ | OptKind.PATH:
            if metadata["codec"] is Unset:
                raise ConstructionError(f"{cls.__typename__} {name!r} of kind {kind.value!r} requires a codec")
            if isinstance(metadata["default"], str):
                raise TypeError(f"{cls.__typename__} {name!r} 'default' must be a sequence of values")
            elif metadata["default"] is not Unset:
                metadata["default"] = tuple(metadata["default"])
        case OptKind.REMAINING:
            pass
        case _:
            if metadata["codec"] is Unset:
                metadata["codec"] = _CODECS[kind]

    if metadata["codec"] is not Unset and not builtins.callable(metadata["codec"]):
        raise TypeError(f"{cls.__typename__} 'codec' must be callable")

    metadata["required"] = bool(metadata["required"])


class Opt(metaclass=SealedType):
    """
    Descriptor of one accepted option.

    Fields (read-only)
    - kind: OptKind tag.
    - name: key under which values, history and failures are recorded.
    - flags: tuple of accepted flag spellings; empty for the bare-token catcher.
    - default: default value, or Unset when there is none.
    - help: human-readable description.
    - required: the declared requirement; see is_required for the effective one.
    - codec: text to value conversion (Unset for flag and remaining kinds).
    - delimiter: the split pattern of seq/path kinds (Unset otherwise).
    """

    __introspectable__ = (
        "kind",
        "name",
        "flags",
        "default",
        "help",
        "required",
        "codec",
        "delimiter",
    )
    __displayable__ = (
        "kind",
        "name",
        "flags",
        "default",
        "help",
        "required",
    )

    def __new__(cls, kind, name, flags=(), /, default=Unset, help="", required=False, *, codec=Unset):
        metadata = {
            "kind": kind,
            "name": name,
            "flags": flags,
            "default": default,
            "help": help,
            "required": required,
            "codec": codec,
        }
        _sanitize_metadata(cls, metadata)

        self = super().__new__(cls)
        for name, object in metadata.items():
            setattr(self, "_" + name, object)
        self._delimiter = getattr(self._codec, "delimiter", Unset)
        self._element = getattr(self._codec, "element", self._codec)
        return self

    @property
    def is_required(self):
        """
        required and without a default: only then can it be missing.
        """
        return self._required and self._default is Unset

    def _identity(self):
        return (
            self._kind,
            self._name,
            self._flags,
            self._default,
            self._help,
            self._required,
            self._delimiter,
            self._element,
        )

    def __eq__(self, other):
        if not isinstance(other, Opt):
            return NotImplemented
        return self._identity() == other._identity()

    def __hash__(self):
        return hash((self._kind, self._name, self._flags))

    def _convert(self, flag, raw, next, /):
        try:
            return Resolution(self._name, self._codec(raw), None, next)
        except InvalidValueString as fault:
            return Resolution(self._name, Unset, fault, next)
        except Exception as error:
            return Resolution(self._name, Unset, InvalidValueString(flag, raw, error), next)

    def match(self, tokens, index=0, /):
        """
        Try to consume tokens starting at index.

        Returns
        - None when the head token is not for this option (including a
          value-bearing flag with nothing after it).
        - Resolution(name, value, fault, next) otherwise.
        """
        head = tokens[index]

        if self._kind is OptKind.REMAINING:
            if head.startswith("-"):
                return None
            return Resolution(self._name, head, None, index + 1)

        if self._kind is OptKind.FLAG:
            if head in self._flags:
                return Resolution(self._name, not self._default, None, index + 1)
            return None

        flag, separator, raw = head.partition("=")
        if separator and flag in self._flags:
            return self._convert(flag, raw, index + 1)
        if head in self._flags and index + 1 < len(tokens):
            return self._convert(head, tokens[index + 1], index + 2)
        return None


def flag(name, flags=(), help="", required=False):
    """
    Boolean switch defaulting to False; given, it yields True.
    """
    return Opt(OptKind.FLAG, name, flags, default=False, help=help, required=required)


def notflag(name, flags=(), help="", required=False):
    """
    Boolean switch defaulting to True; given, it yields False.
    """
    return Opt(OptKind.FLAG, name, flags, default=True, help=help, required=required)


def string(name, flags=(), default=Unset, help="", required=False):
    return Opt(OptKind.STRING, name, flags, default=default, help=help, required=required)


def byte(name, flags=(), default=Unset, help="", required=False):
    return Opt(OptKind.BYTE, name, flags, default=default, help=help, required=required)


def char(name, flags=(), default=Unset, help="", required=False):
    return Opt(OptKind.CHAR, name, flags, default=default, help=help, required=required)


def int(name, flags=(), default=Unset, help="", required=False):
    return Opt(OptKind.INT, name, flags, default=default, help=help, required=required)


def long(name, flags=(), default=Unset, help="", required=False):
    return Opt(OptKind.LONG, name, flags, default=default, help=help, required=required)


def float(name, flags=(), default=Unset, help="", required=False):
    return Opt(OptKind.FLOAT, name, flags, default=default, help=help, required=required)


def double(name, flags=(), default=Unset, help="", required=False):
    return Opt(OptKind.DOUBLE, name, flags, default=default, help=help, required=required)


def seq(name, flags=(), default=Unset, help="", required=False, *, delimiter, element=codecs.to_string):
    """
    Sequence of values: the value string is split on the delimiter regular
    expression and every element goes through the element codec.

    Example
    - seq("ints", ["-i"], delimiter=":", element=codecs.to_int)
    """
    return Opt(
        OptKind.SEQ, name, flags, default=default, help=help, required=required,
        codec=codecs.sequence(delimiter, element),
    )


def seq_string(name, flags=(), default=Unset, help="", required=False, *, delimiter):
    return seq(name, flags, default, help, required, delimiter=delimiter)


def path(name, flags=(), default=Unset, help="List of file system paths", required=False):
    """
    Sequence of strings split on the platform path separator.
    """
    return Opt(OptKind.PATH, name, flags, default=default, help=help, required=required, codec=codecs.path())


def socket(name="socket", flags=("-s", "--socket"), default=Unset, help="Socket host:port.", required=False):
    """
    "host:port" value parsed into a (host, port) pair.
    """
    return Opt(OptKind.SOCKET, name, flags, default=default, help=help, required=required)


def bare_tokens(name=REMAINING_KEY, help="All remaining arguments that aren't associated with flags.", required=False):
    """
    Flagless catcher of every bare token; its tokens end up in Args.remaining.
    """
    return Opt(OptKind.REMAINING, name, (), help=help, required=required)


__all__ = (
    # Keys
    "HELP_KEY",
    "REMAINING_KEY",

    # Types
    "OptKind",
    "Opt",
    "Resolution",
)

# Builders stay out of __all__: star-importing them would shadow int/float.

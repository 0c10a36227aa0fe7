"""
Declarative option grammar.

A specification text looks like a help screen:

    myprog -i FILE [options]
    Copies things around.
       -i | --in  | --input     string              Path to input file.
      [-o | --out | --output    string=/dev/null]   Path to output file.
      [-l | --log-level         int=3]              Log level to use.
      [-p | --path              path]               Search path.
            --things            seq([-|])           Things, split on '-' or '|'.
      [-q | --quiet             flag]               Suppress output.
                                [others]            Everything else.
    Trailing notes go here.

Lines
- Blank lines are ignored.
- Non-indented lines before the first option line: the first one is the program
  invocation, the others (joined with spaces) the leading comments.
- Indented lines are option lines.
- Non-indented lines after the first option line are trailing comments.

Option line rules
    Opt           := "[" ws* Body ws* "]" ws* Help  |  Body ws* Help
    Body          := Flags ws+ Type  |  Name
    Flags         := Flag (ws* "|" ws* Flag)*
    Flag          := ("--" | "-") Name
    Name          := [A-Za-z0-9_] [A-Za-z0-9_-]*
    Type          := "flag" | "~flag"
                   | ("string" | "byte" | "char" | "int" | "long" | "float" | "double" | "path") Init?
                   | "seq(" [^)]+ ")" Init?
    Init          := "=" [^ \\t\\r\\n\\f\\[\\]]+
    Help          := rest of the line

- A bracketed body is optional, a bare one is required; a "]" closing a bare
  body is rejected.
- The option name is the last flag without its leading dashes; a flagless body
  names the bare-token catcher.
- Initial values are converted with the type's codec when the line is read.
"""
import logging
import re
from collections import namedtuple

from . import options
from .args import Args
from .faults import ConstructionError, GrammarError
from .utils import Unset

logger = logging.getLogger(__name__)

_NAME = re.compile(r"[A-Za-z0-9_][A-Za-z0-9_-]*")
_WORD = re.compile(r"~?\w+")
_DELIMITER = re.compile(r"[^)]+")
_INITIAL = re.compile(r"[^\s\[\]]+")

OptElem = namedtuple("OptElem", ("optional", "body", "help"))
FlagsAndTypeElem = namedtuple("FlagsAndTypeElem", ("flags", "type"))
RemainingElem = namedtuple("RemainingElem", ("name",))
TypeElem = namedtuple("TypeElem", ("token", "delimiter", "initial"))

_SCALARS = ("string", "byte", "char", "int", "long", "float", "double", "path")

_BUILDERS = {
    "string": options.string,
    "byte": options.byte,
    "char": options.char,
    "int": options.int,
    "long": options.long,
    "float": options.float,
    "double": options.double,
    "path": options.path,
}


class _Parser:
    """
    Recursive-descent reader of a single option line.
    """

    def __init__(self, line):
        self._line = line
        self._text = line.strip()
        self._pos = 0

    def _fail(self, reason):
        raise GrammarError(self._line, reason, self._pos)

    def _peek(self):
        return self._text[self._pos:self._pos + 1]

    def _space(self, required=False):
        start = self._pos
        while self._peek() in (" ", "\t"):
            self._pos += 1
        if required and self._pos == start:
            self._fail("expected whitespace")

    def _consume(self, pattern, reason):
        if not (match := pattern.match(self._text, self._pos)):
            self._fail(reason)
        self._pos = match.end()
        return match.group()

    def _boundary(self, what):
        if self._peek() not in ("", " ", "\t", "]"):
            self._fail(f"unexpected character {self._peek()!r} after {what}")

    def parse(self):
        if optional := self._peek() == "[":
            self._pos += 1
            self._space()
            body = self._body()
            self._space()
            if self._peek() != "]":
                self._fail("expected ']'")
            self._pos += 1
            self._space()
        else:
            body = self._body()
            self._space()
            if self._peek() == "]":
                self._fail("unmatched ']'")
        return OptElem(optional, body, self._text[self._pos:])

    def _body(self):
        if self._peek() == "-":
            flags = self._flags()
            if self._peek() in ("", "]"):
                self._fail("missing type")
            self._space(required=True)
            return FlagsAndTypeElem(flags, self._type())
        name = self._consume(_NAME, "expected a flag or a name")
        self._boundary("name")
        return RemainingElem(name)

    def _flags(self):
        flags = [self._flag()]
        while True:
            start = self._pos
            self._space()
            if self._peek() != "|":
                self._pos = start
                return tuple(flags)
            self._pos += 1
            self._space()
            flags.append(self._flag())

    def _flag(self):
        dashes = "--" if self._text.startswith("--", self._pos) else "-" if self._peek() == "-" else ""
        if not dashes:
            self._fail("expected a flag")
        self._pos += len(dashes)
        return dashes + self._consume(_NAME, "malformed flag")

    def _type(self):
        token = self._consume(_WORD, "missing type")
        delimiter = initial = None
        match token:
            case "flag" | "~flag":
                if self._peek() == "=":
                    self._fail(f"type {token!r} does not take an initial value")
            case "seq":
                if self._peek() != "(":
                    self._fail("type 'seq' requires a delimiter, as in seq(DELIM)")
                self._pos += 1
                delimiter = self._consume(_DELIMITER, "type 'seq' requires a delimiter, as in seq(DELIM)")
                if self._peek() != ")":
                    self._fail("expected ')'")
                self._pos += 1
                initial = self._initial()
            case _ if token in _SCALARS:
                initial = self._initial()
            case _:
                self._pos -= len(token)
                self._fail(f"unknown type {token!r}")
        self._boundary(f"type {token!r}")
        return TypeElem(token, delimiter, initial)

    def _initial(self):
        if self._peek() != "=":
            return None
        self._pos += 1
        return self._consume(_INITIAL, "missing initial value")


def parse_line(line, /):
    """
    Parse one option line into its OptElem; raises GrammarError.
    """
    if not isinstance(line, str):
        raise TypeError("parse_line() argument must be a string")
    return _Parser(line).parse()


def _build(element, line, /):
    optional, body, help = element
    required = not optional

    match body:
        case RemainingElem(name):
            return options.bare_tokens(name, help, required)
        case FlagsAndTypeElem(flags, TypeElem("flag", _, _)):
            return options.flag(re.sub(r"^--?", "", flags[-1]), flags, help, required)
        case FlagsAndTypeElem(flags, TypeElem("~flag", _, _)):
            return options.notflag(re.sub(r"^--?", "", flags[-1]), flags, help, required)
        case FlagsAndTypeElem(flags, TypeElem(token, delimiter, initial)):
            name = re.sub(r"^--?", "", flags[-1])
            if token == "seq":
                def builder(*parameters):
                    return options.seq_string(*parameters, delimiter=delimiter)
            else:
                builder = _BUILDERS[token]
            try:
                opt = builder(name, flags, Unset, help, required)
            except ConstructionError as error:
                raise GrammarError(line, str(error)) from error
            if initial is None:
                return opt
            try:
                default = opt.codec(initial)
            except Exception as error:
                raise GrammarError(line, f"invalid initial value {initial!r} for type {token!r}") from error
            return builder(name, flags, default, help, required)


def parse_spec(text, /):
    """
    Build an Args declaration from a specification text.

    Raises
    - GrammarError: an option line does not parse.
    - ConstructionError: the resulting declaration is invalid (for example,
      two flagless lines).
    """
    if not isinstance(text, str):
        raise TypeError("parse_spec() argument must be a string")

    leading, trailing, opts = [], [], []
    for line in re.split(r"\r?\n", text):
        if not line.strip():
            continue
        if line[0] in (" ", "\t"):
            opts.append(opt := _build(parse_line(line), line))
            logger.debug("parsed option line %r as %r", line.strip(), opt)
        elif opts:
            trailing.append(line.strip())
        else:
            leading.append(line.strip())

    return Args(
        opts,
        program_invocation=leading[0] if leading else "",
        leading_comments=" ".join(leading[1:]),
        trailing_comments=" ".join(trailing),
    )


__all__ = (
    # Elements
    "OptElem",
    "FlagsAndTypeElem",
    "RemainingElem",
    "TypeElem",

    # Functions
    "parse_line",
    "parse_spec",
)

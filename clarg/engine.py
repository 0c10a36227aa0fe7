"""
Token resolution engine.

resolve(args, tokens) walks the token vector left to right. At each position
the flagged options are tried in declaration order and the first one that
matches consumes its tokens; when none does, a dash-prefixed head becomes an
UnrecognizedArgument (consuming that token only) and any other head is handed
to the flagless catcher. The collected outcomes are then folded into a new Args
snapshot:

- values: defaults overlaid with every success, last one wins;
- all_values: every success per name, in order, or the default alone;
- remaining: the catcher's tokens;
- failures: recorded faults in token order, then one MissingRequiredArgument
  per required option that never matched, unless help was requested, in which
  case all failures are dropped.

The receiver snapshot is never modified; every pass starts from the defaults.
"""
import copy
import logging
import shlex
import sys
from collections.abc import Iterable

from .faults import UnrecognizedArgument, MissingRequiredArgument
from .options import HELP_KEY
from .utils import Unset

logger = logging.getLogger(__name__)


def _tokenize(tokens, /):
    if tokens is Unset:
        return tuple(sys.argv[1:])
    elif isinstance(tokens, str):
        return tuple(shlex.split(tokens))
    elif isinstance(tokens, Iterable):
        tokens = tuple(tokens)
        for token in tokens:
            if not isinstance(token, str):
                raise TypeError("resolve() tokens must be a string or an iterable of strings")
        return tokens
    raise TypeError("resolve() tokens must be a string or an iterable of strings")


def resolve(args, tokens=Unset, /):
    """
    Resolve tokens against args and return the resulting snapshot.

    Parameters
    - args: the Args declaration (its previous state is ignored).
    - tokens: Unset for sys.argv[1:], a shell-like string (split with
      shlex.split), or an iterable of strings used verbatim.
    """
    tokens = _tokenize(tokens)
    catcher = args.remaining_opt
    flagged = [opt for opt in args.opts if opt.flags]

    successes, failures = [], []
    index = 0
    while index < len(tokens):
        for opt in flagged:
            if (resolution := opt.match(tokens, index)) is not None:
                break
        else:
            if tokens[index].startswith("-"):
                failures.append((tokens[index], UnrecognizedArgument(tokens[index], tokens[index + 1:])))
                index += 1
                continue
            resolution = catcher.match(tokens, index)

        if resolution.fault is not None:
            failures.append((resolution.name, resolution.fault))
        else:
            successes.append((resolution.name, resolution.value))
        index = resolution.next

    values = dict(args.defaults)
    history = {}
    remaining = []
    for name, value in successes:
        if name == catcher.name:
            remaining.append(value)
            continue
        values[name] = value
        history.setdefault(name, []).append(value)

    all_values = {name: (value,) for name, value in args.defaults.items()}
    all_values.update((name, tuple(values)) for name, values in history.items())

    matched = {name for name, _ in successes}
    if HELP_KEY in matched:
        failures = []
    else:
        failures.extend((opt.name, MissingRequiredArgument(opt)) for opt in args.required_options if opt.name not in matched)

    logger.debug(
        "resolved %d token(s): %d value(s), %d bare token(s), %d failure(s)",
        len(tokens), len(successes) - len(remaining), len(remaining), len(failures)
    )

    return copy.replace(
        args,
        values=values,
        all_values=all_values,
        remaining=tuple(remaining),
        failures=tuple(failures),
    )


__all__ = (
    "resolve",
)

"""
Help rendering for a declaration set.

render(args) lays the help out as:

    Usage: <program invocation> [options]
    <leading comments>
    The following parsing errors occurred:      (only with failures)
      <one failure per line>
    Where the supported options are the following:

      [-h | --h | --help]      Show this help message.
       -i | --input  input     Path to input file.
      ...

    You can also use --foo=bar syntax. Arguments shown in [...] are optional. All others are required.
    <trailing comments>

Options that are not effectively required are bracketed; value-bearing options show their
name after the flags; help text wraps at 60 columns; non-boolean defaults are
shown as "(default: X)".

Palette keys
- usage-label, program-name, description-section, epilog-section
- failure-label, failure
- option-name, flag-name, metavar, argument-description, default

Customization
- Define a mapping named __styles__ in __main__ to override any palette entry.
- When colorful is False, styling is suppressed.
"""
import textwrap
from collections import defaultdict
from collections.abc import Sequence

from rich.text import Text

from .options import OptKind
from .utils import Unset

WRAP = 60


def _display(value):
    if isinstance(value, Sequence) and not isinstance(value, str):
        return ", ".join(map(str, value))
    return str(value)


def render(args, /, *, colorful=False):
    """
    Render the help of args as a rich Text (use .plain for a string).
    """
    styles = defaultdict(str, {
        # === Head sections ===
        "usage-label": "bold #00E6FF",  # CYAN → signature info color
        "program-name": "bold #FF4D94",  # MAGENTA-PINK → brand pop
        "description-section": "italic #A3A3A3",  # Neutral gray
        "epilog-section": "#737373",  # Dim footer gray

        # === Failures ===
        "failure-label": "bold #EF4444",  # RED headline
        "failure": "bold #FFD600",  # Amber body

        # === Options ===
        "option-name": "bold #00E6FF",  # CYAN for options
        "flag-name": "bold #22C55E",  # GREEN for flags
        "metavar": "bold #FFD600",  # AMBER for value names
        "argument-description": "#9CA3AF",  # Muted gray
        "default": "italic #9CA3AF",
    } | getattr(__import__('__main__'), "__styles__", {}))

    def styler(style):
        return styles[style] if colorful else ""

    def text(fragment, style=""):
        if not fragment:
            return Text("")
        if not colorful:
            return Text(str(fragment))
        if isinstance(fragment, Text):
            return fragment
        return Text(str(fragment), style)

    def column(opt):
        style = "flag-name" if opt.kind is OptKind.FLAG else "option-name"
        parts = [Text(" | ").join(text(flag, styler(style)) for flag in opt.flags)] if opt.flags else []
        if opt.kind is not OptKind.FLAG or not opt.flags:
            parts.append(text(opt.name, styler("metavar")))
        body = Text("  ").join(parts)
        if opt.is_required:
            return Text.assemble("   ", body, " ")
        return Text.assemble("  [", body, "]")

    lines = [Text.assemble(
        text("Usage:", styler("usage-label")), " ",
        text(args.program_invocation, styler("program-name")), " [options]"
    )]
    if args.leading_comments:
        lines.append(text(args.leading_comments, styler("description-section")))

    if args.failures:
        lines.append(text("The following parsing errors occurred:", styler("failure-label")))
        for _, fault in args.failures:
            lines.append(Text.assemble("  ", text(fault, styler("failure"))))

    lines.append(Text("Where the supported options are the following:"))
    lines.append(Text(""))

    columns = [column(opt) for opt in args.opts]
    width = max(map(len, columns), default=0) + 2
    for opt, head in zip(args.opts, columns):
        body = textwrap.wrap(opt.help, WRAP) or [""]
        if opt.default is not Unset and not isinstance(opt.default, bool):
            body.append("(default: %s)" % _display(opt.default))
        lines.append(Text.assemble(
            head, " " * (width - len(head)),
            text(body[0], styler("argument-description")),
        ))
        for entry in body[1:]:
            style = "default" if entry.startswith("(default: ") else "argument-description"
            lines.append(Text.assemble(" " * width, text(entry, styler(style))))

    if any(opt.flags and opt.kind is not OptKind.FLAG for opt in args.opts):
        lines.append(Text(""))
        lines.append(Text(
            "You can also use --foo=bar syntax. Arguments shown in [...] are optional. All others are required."
        ))
    if args.trailing_comments:
        lines.append(text(args.trailing_comments, styler("epilog-section")))

    return Text("\n").join(lines)


__all__ = (
    "render",
)

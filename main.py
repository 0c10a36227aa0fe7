from rich import print
from rich.pretty import pprint

from clarg import *

__prog__ = "python main.py"

args = parse_spec("""
python main.py [options]
Demonstrates the clarg API.
   -i | --in  | --input      string              Path to input file.
  [-o | --out | --output     string=/dev/null]   Path to output file.
  [-l | --log | --log-level  int=3]              Log level to use.
  [-p | --path               path]               Path elements separated by ':' (*nix) or ';' (Windows).
  [--things                  seq([-|])]          String elements separated by '-' or '|'.
  [-q | --quiet              flag]               Suppress some verbose output.
                             others              Other arguments.
Note that --input and "others" are required.
""")


if __name__ == '__main__':
    # Try: python main.py -i /in -o /out -l 4 -p a:b --things x-y|z foo bar baz
    parsed = args.process()
    if parsed.get("quiet", False):
        print("(... I'm being very quiet...)")
    else:
        parsed.print_values()
        parsed.print_all_values()
        print("You gave the following \"other\" arguments:", ", ".join(parsed.remaining))
        pprint(parsed.get("path"))

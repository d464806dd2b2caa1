import logging
import sys
from pathlib import Path

from rich.console import Console
from rich.table import Table
from rich.text import Text
from rich import box

from mdtext import log
from mdtext.config import RuleConfigError, load_rule_set
from mdtext.markdown_to_rich import MarkdownParser
from mdtext.merge import InlineCode, Link, PlainText
from mdtext.resolver import DisplayTextPolicy
from mdtext.rules import DEFAULT_RULES


DEFAULT_CONTEXT_WIDTH = 100

POLICIES = {
    "first": DisplayTextPolicy.FIRST_RULE_STRIPS,
    "every": DisplayTextPolicy.EVERY_RULE_STRIPS,
}

logger = logging.getLogger("mdtext.cli")


# -------------------------------------------
#  INPUT
# -------------------------------------------

def read_markdown(args):
    """Markdown comes from --text, the positional file, or stdin, in that order."""
    if args.text is not None:
        return args.text
    if args.markdown_file:
        return Path(args.markdown_file).read_text(encoding="utf-8")
    return sys.stdin.read()


def load_rules(rules_file):
    if not rules_file:
        return DEFAULT_RULES
    try:
        return load_rule_set(rules_file)
    except RuleConfigError as exc:
        for error in exc.errors:
            print(error)
        sys.exit(1)



# -------------------------------------------
#  RENDERING
# -------------------------------------------

def describe_style(style):
    parts = [style.font_level.value]
    if style.bold: parts.append("bold")
    if style.italic: parts.append("italic")
    if style.foreground.value != "default": parts.append(style.foreground.value)
    return " ".join(parts)


def render_units_table(units, console, context_width=DEFAULT_CONTEXT_WIDTH):
    """Render parsed units as a table: kind, text, style, url."""
    table = Table(
        "kind", "text", "style", "url",
        box=box.SIMPLE,
        show_header=True,
        expand=False,
    )
    for unit in units:
        match unit:
            case Link(text=text, style=style, url=url):
                table.add_row("link", Text(repr(text)), describe_style(style), Text(url))
            case InlineCode(text=text, style=style):
                table.add_row("inline_code", Text(repr(text)), describe_style(style), "")
            case PlainText(text=text, style=style):
                table.add_row("plain", Text(repr(text)), describe_style(style), "")
    console.print(table, width=context_width)


def render_markdown(md, console, parser, context_width=DEFAULT_CONTEXT_WIDTH):
    units = parser.parse_inline(md)
    console.print(parser.units_to_rich(units), width=context_width)



# -------------------------------------------
#  main
# -------------------------------------------

def main(argv=None):
    import argparse
    from contextlib import nullcontext

    parser = argparse.ArgumentParser(description="Render inline Markdown to ANSI")
    parser.add_argument("markdown_file", nargs="?", default=None, help="Path to Markdown file (default: stdin)")
    parser.add_argument("--text", type=str, default=None, help="Markdown given inline instead of a file")
    parser.add_argument("--rules", type=str, default=None, help="JSON5 rule set file (default: built-in rules)")
    parser.add_argument("--policy", choices=sorted(POLICIES), default="first",
                        help="Which rules strip their markers: the first of a span, or every one")
    parser.add_argument("--width", type=int, default=DEFAULT_CONTEXT_WIDTH, help="Global context width")
    parser.add_argument("--output", type=str, default=None, help="Write ANSI output to file instead of stdout")
    parser.add_argument("--units", action="store_true", help="Print the parsed units as a table")
    args = parser.parse_args(argv)

    log.configure()

    try:
        md = read_markdown(args)
    except OSError as exc:
        print(f"Cannot read {args.markdown_file}: {exc.strerror}")
        sys.exit(1)
    except UnicodeDecodeError as exc:
        print(f"Cannot read {args.markdown_file}: not valid UTF-8 ({exc.reason} at byte {exc.start})")
        sys.exit(1)

    md_parser = MarkdownParser(load_rules(args.rules), POLICIES[args.policy])
    logger.debug("Rendering %d chars with %d rules", len(md), len(md_parser.rules))

    with (open(args.output, "w", encoding="utf-8") if args.output else nullcontext()) as f:
        console = Console(file=(f if args.output else None), force_terminal=True)
        if args.units:
            render_units_table(md_parser.parse_inline(md), console, context_width=args.width)
        else:
            render_markdown(md, console, md_parser, context_width=args.width)


if __name__ == "__main__":
    main()

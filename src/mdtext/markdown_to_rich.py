import logging
import webbrowser
from typing import Callable, List, Sequence
from urllib.parse import urlparse

from rich.text import Text

from mdtext.merge import InlineCode, Link, PlainText, RenderedUnit, merge, to_unit
from mdtext.resolver import DisplayTextPolicy, resolve
from mdtext.rules import DEFAULT_RULES, Color, FontLevel, Rule, TextStyle
from mdtext.segmenter import Segment, preprocess, segment

logger = logging.getLogger(__name__)

FONT_LEVEL_STYLES = {
    FontLevel.BODY: "",
    FontLevel.HEADLINE: "",
    FontLevel.TITLE: "underline",
    FontLevel.LARGE_TITLE: "reverse",
}
CODE_STYLE = "bold cyan"


def is_valid_url(url: str) -> bool:
    if not url or any(ch.isspace() for ch in url):
        return False
    if url.lower().startswith("www."):
        url = f"http://{url}"
    parsed = urlparse(url)
    return parsed.scheme.lower() in ("http", "https", "ftp") and bool(parsed.netloc)


def activate_link(url: str, opener: Callable[[str], object] = webbrowser.open) -> bool:
    """
    Open a link the user activated. Invalid URLs are ignored.

    Args:
        url (str): URL taken from a Link unit.
        opener (Callable): Callback that opens the URL.

    Returns:
        bool: True if the opener was called.
    """
    if not is_valid_url(url):
        logger.info("Ignoring activation of invalid link %r", url)
        return False
    opener(url)
    return True


def style_to_rich(style: TextStyle) -> str:
    """Convert a TextStyle into a Rich style string."""
    parts = []
    if style.foreground is Color.BLUE:
        parts.append("blue")
    if style.bold:
        parts.append("bold")
    if style.italic:
        parts.append("italic")
    if FONT_LEVEL_STYLES[style.font_level]:
        parts.append(FONT_LEVEL_STYLES[style.font_level])
    return " ".join(parts)


class MarkdownParser:
    """
    Parses inline Markdown into rendered units and Rich Text objects.

    Supports, with the default rules:
        - Headers: # Title, ## Title, ### Title (marker after a line start)
        - Inline code: `code`
        - Bold: **text** or __text__
        - Links: [text](url)
        - Hyperlinks: <https://url> or a bare https://url
        - Italic: *text* or _text_ (after whitespace)
        - Nested rules, e.g. a link inside bold text
    """

    def __init__(self, rules: Sequence[Rule] = DEFAULT_RULES,
                 policy: DisplayTextPolicy = DisplayTextPolicy.FIRST_RULE_STRIPS):
        self.rules = tuple(rules)
        self.policy = policy

    def segments(self, md: str) -> List[Segment]:
        """
        Split Markdown into leaf segments, before any style is resolved.

        Args:
            md (str): Markdown string.

        Returns:
            List[Segment]: Segments whose texts concatenate to the preprocessed input.
        """
        return list(segment(preprocess(md), self.rules))

    def parse_inline(self, md: str) -> List[RenderedUnit]:
        """
        Parse inline Markdown into a list of rendered units.

        Args:
            md (str): Markdown string.

        Returns:
            List[RenderedUnit]: PlainText, InlineCode and Link units in input order.
        """
        if not md:
            return []

        typed = [resolve(seg, self.policy) for seg in self.segments(md)]
        units = merge(to_unit(t) for t in typed)
        logger.debug("Parsed %d segments into %d units", len(typed), len(units))
        return units

    def units_to_rich(self, units: Sequence[RenderedUnit]) -> Text:
        """
        Convert a list of rendered units into a Rich Text object.

        Args:
            units (Sequence[RenderedUnit]): Units to convert.

        Returns:
            Text: Rich Text object.
        """
        t = Text()
        for unit in units:
            style = style_to_rich(unit.style)
            match unit:
                case Link(url=url) if is_valid_url(url):
                    style = f"{style} link {url}".strip()
                case InlineCode():
                    style = f"{style} {CODE_STYLE}".strip()
                case PlainText() | Link():
                    pass
            t.append(unit.text, style=style or None)
        return t


parser = MarkdownParser()

def md_to_rich_text(md_text: str) -> Text:
    """
    Convert a Markdown string to a Rich Text object.

    Args:
        md_text (str): Markdown string.

    Returns:
        Text: Rich Text object.
    """
    units = parser.parse_inline(md_text)
    return parser.units_to_rich(units)

import logging
import re
from dataclasses import dataclass, field, replace
from enum import Enum
from functools import lru_cache
from typing import Callable, Dict, FrozenSet, Optional, Tuple

logger = logging.getLogger(__name__)


# -------------------------------------------
#  STYLE
# -------------------------------------------

class FontLevel(Enum):
    BODY = "body"
    HEADLINE = "headline"
    TITLE = "title"
    LARGE_TITLE = "large_title"


class Color(Enum):
    DEFAULT = "default"
    BLUE = "blue"


@dataclass(frozen=True)
class TextStyle:
    """Style flags computed for a run of text. Applying them is up to the renderer."""
    bold: bool = False
    italic: bool = False
    font_level: FontLevel = FontLevel.BODY
    foreground: Color = Color.DEFAULT


DEFAULT_STYLE = TextStyle()


class StyleOp(Enum):
    NONE = "none"
    BOLD = "bold"
    ITALIC = "italic"
    HEADLINE = "headline"
    TITLE = "title"
    LARGE_TITLE = "large_title"
    LINK = "link"


STYLE_OPS: Dict[StyleOp, Callable[[TextStyle], TextStyle]] = {
    StyleOp.NONE: lambda style: style,
    StyleOp.BOLD: lambda style: replace(style, bold=True),
    StyleOp.ITALIC: lambda style: replace(style, italic=True),
    StyleOp.HEADLINE: lambda style: replace(style, font_level=FontLevel.HEADLINE, bold=True),
    StyleOp.TITLE: lambda style: replace(style, font_level=FontLevel.TITLE, bold=True),
    StyleOp.LARGE_TITLE: lambda style: replace(style, font_level=FontLevel.LARGE_TITLE, bold=True),
    StyleOp.LINK: lambda style: replace(style, foreground=Color.BLUE),
}


# -------------------------------------------
#  RULES
# -------------------------------------------

TEMPLATE_GROUP_RE = re.compile(r"\$(\d+)")


@lru_cache(maxsize=256)
def compile_pattern(pattern: str) -> Optional[re.Pattern]:
    """Compile a rule pattern, or return None when it is empty or invalid."""
    if not pattern:
        return None
    try:
        return re.compile(pattern)
    except re.error as exc:
        logger.warning("Ignoring invalid rule pattern %r: %s", pattern, exc)
        return None


def expand_template(match: re.Match, template: str) -> str:
    """Expand a ``$n`` template against a match; missing groups expand to ''."""
    def group(m: re.Match) -> str:
        index = int(m.group(1))
        if index > (match.re.groups or 0):
            return ""
        return match.group(index) or ""

    return TEMPLATE_GROUP_RE.sub(group, template)


@dataclass(frozen=True)
class Rule:
    """
    One inline Markdown construct.

    Two rules are equal when their pattern and template are equal; the id
    and the other attributes do not take part in comparison.

    Attributes:
        id (str): Stable identifier, unique within a rule set.
        pattern (str): Regular expression the rule matches.
        template (str): ``$n`` template selecting the payload of a match.
        style_op (StyleOp): Style transform applied to matched text.
        excluded_by (FrozenSet[str]): Ids of rules inside whose matches this
            rule is not applied.
    """
    id: str = field(compare=False)
    pattern: str
    template: str
    style_op: StyleOp = field(default=StyleOp.NONE, compare=False)
    excluded_by: FrozenSet[str] = field(default=frozenset(), compare=False)

    @property
    def regex(self) -> Optional[re.Pattern]:
        return compile_pattern(self.pattern)

    @property
    def is_identity(self) -> bool:
        return self == IDENTITY_RULE

    def apply_style(self, style: TextStyle) -> TextStyle:
        return STYLE_OPS[self.style_op](style)

    def strip(self, text: str) -> str:
        """Replace every match in ``text`` by its expanded template."""
        regex = self.regex
        if regex is None:
            return text
        return regex.sub(lambda m: expand_template(m, self.template), text)


IDENTITY_RULE = Rule("none", "", "", StyleOp.NONE)

HEADER1_RULE = Rule("header1", r"(\s)(#)[ \t]+([^\n]*)", "$3", StyleOp.LARGE_TITLE)
HEADER2_RULE = Rule("header2", r"(\s)(##)[ \t]+([^\n]*)", "$3", StyleOp.TITLE)
HEADER3_RULE = Rule("header3", r"(\s)(#{3,6})[ \t]+([^\n]*)", "$3", StyleOp.HEADLINE)
CODE_RULE = Rule("code", r"`([^`\n]+)`", "$1", StyleOp.NONE)
BOLD_RULE = Rule("bold", r"(\*\*|__)(.*?)\1", "$2", StyleOp.BOLD)
LINK_RULE = Rule("link", r"\[([^\[]+)\]\(([^\)]+)\)", "$1", StyleOp.LINK)
HYPERLINK_RULE = Rule(
    "hyperlink",
    r"<((?i:https?)://[^\s<>]+)>"
    r"|(?<![(\[<\w])((?i:https?)://[^\s<>()\[\]]*[^\s<>()\[\].,;:!?'\"`*~])",
    "$1$2",
    StyleOp.LINK,
    excluded_by=frozenset({"link"}),
)
ITALIC_RULE = Rule("italic", r"(\s)(\*|_)(.+?)\2", "$1$3", StyleOp.ITALIC)

# Application order matters: bold runs before link so a bold span can
# still be subdivided by the link inside it.
DEFAULT_RULES: Tuple[Rule, ...] = (
    HEADER1_RULE,
    HEADER2_RULE,
    HEADER3_RULE,
    CODE_RULE,
    BOLD_RULE,
    LINK_RULE,
    HYPERLINK_RULE,
    ITALIC_RULE,
)

BUILTIN_RULES: Dict[str, Rule] = {rule.id: rule for rule in DEFAULT_RULES}

LINK_RULE_IDS = frozenset({LINK_RULE.id, HYPERLINK_RULE.id})
CODE_RULE_IDS = frozenset({CODE_RULE.id})

import re
from dataclasses import dataclass
from enum import Enum

from mdtext.rules import CODE_RULE_IDS, DEFAULT_STYLE, LINK_RULE_IDS, TextStyle
from mdtext.segmenter import Segment


class Kind(Enum):
    PLAIN = "plain"
    INLINE_CODE = "inline_code"
    LINK = "link"


class DisplayTextPolicy(Enum):
    """How a segment's rule stack rewrites its text.

    FIRST_RULE_STRIPS: only the first non-identity rule strips its markers,
        later rules refine the style only. Markers of nested rules stay visible
        when three or more rules stack on one span.
    EVERY_RULE_STRIPS: every non-identity rule strips its markers in stack order.
    """
    FIRST_RULE_STRIPS = "first"
    EVERY_RULE_STRIPS = "every"


URL_RE = re.compile(r"(?i)\b(?:(?:https?|ftp)://|www\.)[^\s<>()\[\]\"']+")
URL_TRAILING_PUNCTUATION = ".,;:!?`*~"
LINK_DESTINATION_RE = re.compile(r"\]\(([^\)]+)\)")


@dataclass(frozen=True)
class TypedSegment:
    text: str
    display_text: str
    style: TextStyle = DEFAULT_STYLE
    kind: Kind = Kind.PLAIN
    url: str = ""


def extract_url(text: str) -> str:
    """
    Return the first URL-looking substring of ``text``, or '' when there is none.

    A ``[label](destination)`` destination is searched before the rest of the
    text, so a URL written in the label does not win over the target.
    """
    destination = LINK_DESTINATION_RE.search(text)
    m = URL_RE.search(destination.group(1)) if destination else None
    if m is None:
        m = URL_RE.search(text)
    if not m:
        return ""
    return m.group(0).rstrip(URL_TRAILING_PUNCTUATION)


def classify(segment: Segment) -> Kind:
    ids = {rule.id for rule in segment.rules}
    if ids & LINK_RULE_IDS:
        return Kind.LINK
    if ids & CODE_RULE_IDS:
        return Kind.INLINE_CODE
    return Kind.PLAIN


def resolve(segment: Segment, policy: DisplayTextPolicy = DisplayTextPolicy.FIRST_RULE_STRIPS) -> TypedSegment:
    """
    Derive display text, style, kind and url of a leaf segment.

    Args:
        segment (Segment): Leaf segment from the segmenter.
        policy (DisplayTextPolicy): Which rules of the stack rewrite the text.

    Returns:
        TypedSegment: The resolved segment.
    """
    applicable = segment.applicable_rules
    if not applicable:
        return TypedSegment(segment.text, segment.text)

    if policy is DisplayTextPolicy.EVERY_RULE_STRIPS:
        display_text = segment.text
        for rule in applicable:
            display_text = rule.strip(display_text)
    else:
        display_text = applicable[0].strip(segment.text)

    style = DEFAULT_STYLE
    for rule in applicable:
        style = rule.apply_style(style)

    kind = classify(segment)
    url = extract_url(segment.text) if kind is Kind.LINK else ""
    return TypedSegment(segment.text, display_text, style, kind, url)

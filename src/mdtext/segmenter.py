"""
Split raw Markdown text into segments tagged with the rules that matched them.

Each rule in the rule set is applied, in order, to every segment produced so
far. A match becomes its own segment carrying the parent's rule stack plus
the rule; the text around it keeps the parent's stack. Later rules can
therefore subdivide spans earlier rules already claimed, which is how nested
formatting accumulates a multi-rule stack on the innermost span.

Offsets are Python string indices from start to end; the match ranges and
the slicing use the same scheme.
"""

import logging
import re
from dataclasses import dataclass
from typing import Iterable, List, Sequence, Tuple

from mdtext.rules import DEFAULT_RULES, IDENTITY_RULE, Rule

logger = logging.getLogger(__name__)

NEWLINE_HEADER_RE = re.compile(r"\n#")
LEADING_HEADER_RE = re.compile(r"#+[ \t]")


@dataclass(frozen=True)
class Segment:
    """A substring of the input and the rules that matched it, oldest first."""
    text: str
    rules: Tuple[Rule, ...] = (IDENTITY_RULE,)

    @property
    def applicable_rules(self) -> Tuple[Rule, ...]:
        return tuple(rule for rule in self.rules if not rule.is_identity)


def preprocess(text: str) -> str:
    """Put a space in front of header markers at line starts so header rules can see them."""
    text = NEWLINE_HEADER_RE.sub("\n #", text)
    if LEADING_HEADER_RE.match(text):
        text = " " + text
    return text


def split_segment(segment: Segment, rule: Rule) -> List[Segment]:
    """
    Split one segment on every match of a rule.

    Args:
        segment (Segment): Segment to split.
        rule (Rule): Rule whose pattern is searched in the segment text.

    Returns:
        List[Segment]: The segment itself when nothing matches or the rule
        is excluded by a rule already on its stack, otherwise the gaps
        (parent stack) interleaved with the matches (stack + rule).
    """
    regex = rule.regex
    if regex is None:
        return [segment]
    if any(applied.id in rule.excluded_by for applied in segment.rules):
        return [segment]

    text = segment.text
    matched_rules = segment.rules + (rule,)
    pieces: List[Segment] = []
    pos = 0
    for m in regex.finditer(text):
        start, end = m.span()
        if start == end:
            continue
        if start > pos:
            pieces.append(Segment(text[pos:start], segment.rules))
        pieces.append(Segment(text[start:end], matched_rules))
        pos = end

    if not pieces:
        return [segment]
    if pos < len(text):
        pieces.append(Segment(text[pos:], segment.rules))
    return pieces


def apply_rule(segments: Iterable[Segment], rule: Rule) -> List[Segment]:
    result: List[Segment] = []
    for seg in segments:
        result.extend(split_segment(seg, rule))
    return result


def segment(text: str, rules: Sequence[Rule] = DEFAULT_RULES) -> Tuple[Segment, ...]:
    """
    Fold the rule set over the whole text.

    Args:
        text (str): Text to segment, already preprocessed.
        rules (Sequence[Rule]): Rules in application order.

    Returns:
        Tuple[Segment, ...]: Leaf segments in input order. Their texts
        concatenate back to ``text``.
    """
    if not text:
        return ()

    segments: List[Segment] = [Segment(text, (IDENTITY_RULE,))]
    for rule in rules:
        segments = apply_rule(segments, rule)

    logger.debug("Segmented %d chars into %d segments with %d rules", len(text), len(segments), len(rules))
    return tuple(segments)

"""Tests for mdtext.segmenter — preprocessing and the split/fold algorithm."""

import pytest

from mdtext.rules import BOLD_RULE, DEFAULT_RULES, HYPERLINK_RULE, IDENTITY_RULE, LINK_RULE, Rule
from mdtext.segmenter import Segment, apply_rule, preprocess, segment, split_segment


def texts(segments) -> list[str]:
    return [s.text for s in segments]


def rule_ids(seg: Segment) -> list[str]:
    return [rule.id for rule in seg.rules]


# ─── Preprocessing ───────────────────────────────────────────────────────────


class TestPreprocess:
    def test_leading_header_padded(self):
        assert preprocess("# Title") == " # Title"

    def test_leading_subheader_padded(self):
        assert preprocess("## Sub") == " ## Sub"

    def test_header_after_newline_padded(self):
        assert preprocess("a\n## b\n# c") == "a\n ## b\n # c"

    def test_hash_inside_line_untouched(self):
        assert preprocess("issue #12 fixed") == "issue #12 fixed"

    def test_leading_hashtag_untouched(self):
        assert preprocess("#tag here") == "#tag here"
        assert preprocess("#") == "#"

    def test_empty(self):
        assert preprocess("") == ""


# ─── Single rule application ─────────────────────────────────────────────────


class TestSplitSegment:
    def test_no_match_returns_segment_unchanged(self):
        seg = Segment("plain text")
        assert split_segment(seg, BOLD_RULE) == [seg]

    def test_identity_rule_never_splits(self):
        seg = Segment("**x**")
        assert split_segment(seg, IDENTITY_RULE) == [seg]

    def test_invalid_pattern_never_splits(self):
        seg = Segment("a(b")
        assert split_segment(seg, Rule("broken", r"(b", "$1")) == [seg]

    def test_matches_and_gaps(self):
        result = split_segment(Segment("a **b** c **d**"), BOLD_RULE)
        assert texts(result) == ["a ", "**b**", " c ", "**d**"]
        assert [rule_ids(s) for s in result] == [
            ["none"],
            ["none", "bold"],
            ["none"],
            ["none", "bold"],
        ]

    def test_adjacent_matches_emit_no_empty_gap(self):
        result = split_segment(Segment("**a****b**"), BOLD_RULE)
        assert texts(result) == ["**a**", "**b**"]

    def test_match_covering_whole_text(self):
        result = split_segment(Segment("**all**"), BOLD_RULE)
        assert texts(result) == ["**all**"]
        assert rule_ids(result[0]) == ["none", "bold"]

    def test_parent_stack_is_kept(self):
        parent = Segment("**[a](http://a.test)** tail", (IDENTITY_RULE, BOLD_RULE))
        result = split_segment(parent, LINK_RULE)
        assert texts(result) == ["**", "[a](http://a.test)", "** tail"]
        assert rule_ids(result[0]) == ["none", "bold"]
        assert rule_ids(result[1]) == ["none", "bold", "link"]

    def test_apply_rule_over_many_segments(self):
        result = apply_rule([Segment("**a** "), Segment("x **b**")], BOLD_RULE)
        assert texts(result) == ["**a**", " ", "x ", "**b**"]

    def test_excluded_rule_skips_segment(self):
        seg = Segment("[see http://a.test now](http://b.test)", (IDENTITY_RULE, LINK_RULE))
        assert split_segment(seg, HYPERLINK_RULE) == [seg]

    def test_excluded_rule_still_splits_elsewhere(self):
        result = split_segment(Segment("see http://a.test now"), HYPERLINK_RULE)
        assert texts(result) == ["see ", "http://a.test", " now"]


# ─── Full fold ───────────────────────────────────────────────────────────────


RECONSTRUCTION_INPUTS = [
    "just plain text",
    " # Title\nbody with **bold** and _italic_ words",
    "see [Wikipedia](https://en.wikipedia.org/wiki/Markdown) now",
    "**[label](http://x.test)**",
    "`code` then <https://a.test> and https://b.test/path.",
    "unterminated **bold and [link(",
    "héllo **wörld** 🎉 and _ça_ va",
    "\n\n ## a\n ### b **c**\n",
]


class TestSegment:
    def test_empty_input(self):
        assert segment("") == ()

    @pytest.mark.parametrize("text", RECONSTRUCTION_INPUTS)
    def test_reconstruction(self, text):
        assert "".join(texts(segment(text))) == text

    @pytest.mark.parametrize("text", RECONSTRUCTION_INPUTS)
    def test_every_stack_starts_with_identity(self, text):
        for seg in segment(text):
            assert seg.rules[0] is IDENTITY_RULE
            assert seg.text

    def test_no_match_yields_single_segment(self):
        result = segment("just plain text")
        assert result == (Segment("just plain text", (IDENTITY_RULE,)),)

    def test_nested_rules_accumulate(self):
        result = segment("**[label](http://x.test)**")
        assert texts(result) == ["**", "[label](http://x.test)", "**"]
        assert rule_ids(result[1]) == ["none", "bold", "link"]
        assert rule_ids(result[0]) == ["none", "bold"]

    def test_non_ascii_offsets(self):
        result = segment("héllo **wörld** 🎉 done")
        assert texts(result) == ["héllo ", "**wörld**", " 🎉 done"]

    def test_custom_rule_set(self):
        strike = Rule("strike", r"~~(.+?)~~", "$1")
        result = segment("a ~~b~~ **c**", [strike])
        assert texts(result) == ["a ", "~~b~~", " **c**"]
        assert rule_ids(result[1]) == ["none", "strike"]

    def test_default_rules_used_when_omitted(self):
        assert segment("**x**") == segment("**x**", DEFAULT_RULES)

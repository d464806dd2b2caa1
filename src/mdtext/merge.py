from dataclasses import dataclass
from typing import Iterable, List, Union

from mdtext.resolver import Kind, TypedSegment
from mdtext.rules import DEFAULT_STYLE, TextStyle


@dataclass(frozen=True)
class PlainText:
    text: str
    style: TextStyle = DEFAULT_STYLE


@dataclass(frozen=True)
class InlineCode:
    text: str
    style: TextStyle = DEFAULT_STYLE


@dataclass(frozen=True)
class Link:
    text: str
    style: TextStyle = DEFAULT_STYLE
    url: str = ""


RenderedUnit = Union[PlainText, InlineCode, Link]


def to_unit(typed: TypedSegment) -> RenderedUnit:
    match typed.kind:
        case Kind.LINK:
            return Link(typed.display_text, typed.style, typed.url)
        case Kind.INLINE_CODE:
            return InlineCode(typed.display_text, typed.style)
        case _:
            return PlainText(typed.display_text, typed.style)


def merge(units: Iterable[RenderedUnit]) -> List[RenderedUnit]:
    """
    Join consecutive plain runs of the same style into one run.

    Links and inline code always stay separate units, even when two of them
    are adjacent. Units with empty text are dropped. Merging an already
    merged list returns an equal list.

    Args:
        units (Iterable[RenderedUnit]): Units in input order.

    Returns:
        List[RenderedUnit]: Merged units in input order.
    """
    merged: List[RenderedUnit] = []
    for unit in units:
        if not unit.text:
            continue
        last = merged[-1] if merged else None
        if isinstance(unit, PlainText) and isinstance(last, PlainText) and last.style == unit.style:
            merged[-1] = PlainText(last.text + unit.text, last.style)
        else:
            merged.append(unit)
    return merged

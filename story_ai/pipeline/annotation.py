"""Inline annotation of story text: proper-noun tooltips and item markers.

Proper nouns are wrapped in two passes so that no entry's replacement can be
matched again by a later entry:

  0. Markup already in the text (complete tooltip spans, then every other
     tag) is swapped for placeholders and is never looked at again.
  1. Entries are processed longest ``phrase_used`` first (stable for equal
     lengths). Every whole-phrase occurrence, plus directly following sentence
     punctuation, becomes a fresh placeholder. Candidates overlapping an
     existing placeholder are skipped, so the longer phrase keeps a contested
     region and a phrase nested inside it finds nothing there.
  2. Placeholders are expanded into tooltip markup and protected markup is
     put back. Nothing is scanned during this pass.

Result for "Theron." with description "a weary knight":

    <span class="proper-noun tooltip">Theron.<span class="tooltiptext">a weary knight</span></span>
"""

from __future__ import annotations

import html
import itertools
import logging
import re
from collections.abc import Sequence

from story_ai.models import ProperNoun

from .markup import (
    PLACEHOLDER_CLOSE,
    PLACEHOLDER_OPEN,
    PLACEHOLDER_RE,
    PlaceholderTable,
    contains_phrase,
    overlaps,
    phrase_pattern,
    placeholder_spans,
)

logger = logging.getLogger(__name__)

TOOLTIP_MARKUP = (
    '<span class="proper-noun tooltip">{text}'
    '<span class="tooltiptext">{description}</span></span>'
)
ITEM_ADDED = "item-added"
ITEM_REMOVED = "item-removed"


def annotate_proper_nouns(text: str, nouns: Sequence[ProperNoun]) -> str:
    """Wrap every occurrence of each entry's ``phrase_used`` in tooltip markup.

    ``nouns`` should already have been through validate_proper_nouns.
    """
    protected = PlaceholderTable("M")
    working = protected.protect(text)

    ordered = sorted(
        (n for n in nouns if n.phrase_used.strip()),
        key=lambda n: len(n.phrase_used),
        reverse=True,
    )

    counter = itertools.count()
    wrapped: dict[str, tuple[ProperNoun, str]] = {}

    # Pass 1: occurrences -> placeholders
    for noun in ordered:
        taken = placeholder_spans(working)

        def _claim(m: re.Match[str], noun: ProperNoun = noun) -> str:
            if overlaps(m.span(), taken):
                return m.group(0)
            token = f"{PLACEHOLDER_OPEN}N{next(counter)}{PLACEHOLDER_CLOSE}"
            wrapped[token] = (noun, m.group("phrase") + m.group("punct"))
            return token

        working = phrase_pattern(noun.phrase_used, absorb_punctuation=True).sub(_claim, working)

    # Pass 2: placeholders -> markup
    def _expand(m: re.Match[str]) -> str:
        entry = wrapped.get(m.group(0))
        if entry is None:
            return m.group(0)
        noun, visible = entry
        return TOOLTIP_MARKUP.format(
            text=visible,
            description=html.escape(noun.description, quote=False),
        )

    working = PLACEHOLDER_RE.sub(_expand, working)
    logger.debug("annotated %d proper noun occurrences", len(wrapped))
    return protected.restore(working)


# ---------------------------------------------------------------------------
# Item markers
# ---------------------------------------------------------------------------

def _item_span_re(css_class: str) -> re.Pattern[str]:
    return re.compile(rf'<span\s+class="{css_class}">(.*?)</span>', re.DOTALL | re.IGNORECASE)


def _is_marked(text: str, css_class: str, item: str) -> bool:
    return any(contains_phrase(m.group(1), item) for m in _item_span_re(css_class).finditer(text))


def _widen(span: tuple[int, int], noun_spans: list[tuple[int, int]]) -> tuple[int, int]:
    """Grow ``span`` until it cuts through no noun phrase occurrence."""
    start, end = span
    grown = True
    while grown:
        grown = False
        for s_start, s_end in noun_spans:
            if start < s_end and s_start < end and (s_start < start or s_end > end):
                start, end = min(start, s_start), max(end, s_end)
                grown = True
    return start, end


def _wrap_first(text: str, css_class: str, item: str, nouns: Sequence[ProperNoun]) -> str:
    protected = PlaceholderTable("M")
    working = protected.protect(text)
    taken = placeholder_spans(working)
    noun_spans = [
        m.span()
        for noun in nouns
        if noun.phrase_used.strip()
        for m in phrase_pattern(noun.phrase_used).finditer(working)
        if not overlaps(m.span(), taken)
    ]
    for m in phrase_pattern(item).finditer(working):
        if overlaps(m.span(), taken):
            continue
        start, end = _widen(m.span(), noun_spans)
        working = f'{working[:start]}<span class="{css_class}">{working[start:end]}</span>{working[end:]}'
        return protected.restore(working)
    logger.debug("item %r (%s) not found in story text", item, css_class)
    return text


def mark_items(
    text: str,
    items_added: Sequence[str],
    items_removed: Sequence[str],
    nouns: Sequence[ProperNoun] = (),
) -> str:
    """Wrap the first unmarked mention of each gained or lost item.

    Items the backend already wrapped in the right span are left alone. When
    the mention sits inside one of ``nouns``' phrases the marker wraps the
    whole phrase, so the noun can still be annotated afterwards.
    """
    for css_class, items in ((ITEM_ADDED, items_added), (ITEM_REMOVED, items_removed)):
        for item in items:
            if not _is_marked(text, css_class, item):
                text = _wrap_first(text, css_class, item, nouns)
    return text

"""Helpers shared by the noun validator and the annotators.

Phrase matching: a phrase matches case-insensitively when it is neither
preceded nor followed by a Unicode word character, so "Dr." or "Tal'Vorn"
match the same way plain words do. Whitespace inside a phrase matches any run
of whitespace in the text.

Placeholders are built from private-use code points (never produced by the
backend's prose) around a short tag and a counter, e.g. ``\\ue000N3\\ue001``.
"""

from __future__ import annotations

import functools
import itertools
import re

PLACEHOLDER_OPEN = "\ue000"
PLACEHOLDER_CLOSE = "\ue001"
PLACEHOLDER_RE = re.compile(f"{PLACEHOLDER_OPEN}[A-Z]+\\d+{PLACEHOLDER_CLOSE}")

TAG_RE = re.compile(r"<[^<>]+>")
TOOLTIP_RE = re.compile(
    r'<span\s+class="proper-noun tooltip">.*?<span\s+class="tooltiptext">.*?</span>\s*</span>',
    re.DOTALL | re.IGNORECASE,
)
TOOLTIPTEXT_RE = re.compile(r'<span\s+class="tooltiptext">.*?</span>', re.DOTALL | re.IGNORECASE)

SENTENCE_PUNCTUATION = ".,;:!?"


@functools.lru_cache(maxsize=1024)
def phrase_pattern(phrase: str, absorb_punctuation: bool = False) -> re.Pattern[str]:
    """Compile the whole-phrase matcher for ``phrase``.

    With ``absorb_punctuation`` the match also captures a directly following
    run of sentence punctuation in the ``punct`` group.
    """
    body = r"\s+".join(re.escape(word) for word in phrase.split())
    pattern = rf"(?<!\w)(?P<phrase>{body})(?!\w)"
    if absorb_punctuation:
        pattern += rf"(?P<punct>[{re.escape(SENTENCE_PUNCTUATION)}]*)"
    return re.compile(pattern, re.IGNORECASE)


def placeholder_spans(text: str) -> list[tuple[int, int]]:
    return [m.span() for m in PLACEHOLDER_RE.finditer(text)]


def overlaps(span: tuple[int, int], spans: list[tuple[int, int]]) -> bool:
    start, end = span
    return any(start < s_end and s_start < end for s_start, s_end in spans)


class PlaceholderTable:
    """Swaps spans of text for opaque tokens and puts them back later."""

    def __init__(self, kind: str) -> None:
        self._kind = kind
        self._counter = itertools.count()
        self._values: dict[str, str] = {}

    def stash(self, value: str) -> str:
        token = f"{PLACEHOLDER_OPEN}{self._kind}{next(self._counter)}{PLACEHOLDER_CLOSE}"
        self._values[token] = value
        return token

    def protect(self, text: str) -> str:
        """Hide complete tooltip spans, then every remaining tag."""
        text = TOOLTIP_RE.sub(lambda m: self.stash(m.group(0)), text)
        return TAG_RE.sub(lambda m: self.stash(m.group(0)), text)

    def restore(self, text: str) -> str:
        return PLACEHOLDER_RE.sub(lambda m: self._values.get(m.group(0), m.group(0)), text)


def searchable_text(text: str) -> str:
    """Text as a reader sees it for matching purposes.

    Tooltip descriptions are dropped and tags become a non-word separator, so
    nothing inside an attribute or a description can satisfy a phrase match.
    """
    text = TOOLTIPTEXT_RE.sub(PLACEHOLDER_OPEN, text)
    return TAG_RE.sub(PLACEHOLDER_OPEN, text)


def strip_markup(text: str) -> str:
    """Remove tooltip descriptions and all tags, leaving the visible prose."""
    return TAG_RE.sub("", TOOLTIPTEXT_RE.sub("", text))


def contains_phrase(text: str, phrase: str) -> bool:
    if not phrase.strip():
        return False
    return phrase_pattern(phrase).search(searchable_text(text)) is not None

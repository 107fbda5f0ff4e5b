"""Annotated story markup -> styled runs for the paginated export.

The walk is a plain recursive function over the BeautifulSoup tree. The
current StyleFrame is an immutable value passed down as an argument: an
element's children get a derived frame, and when the recursion returns the
caller still holds its own frame untouched. A sibling can therefore never see
styling from a previous sibling's subtree.

Element mapping:
  text                      run in the current frame
  <br>                      line break
  <strong>, <b>             bold for the subtree
  <em>, <i>                 italic for the subtree
  span.item-added           forest green for the subtree
  span.item-removed         brown + strikethrough for the subtree
  span.proper-noun          bold for the subtree
  span.tooltiptext          never emitted inline (see GlossaryPolicy)
  anything else             children walked in the unchanged frame

The PDF has no hover, so tooltip descriptions either go to the glossary only
("omit") or are also appended after the noun in parentheses ("parenthetical").
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, replace
from typing import Literal

from bs4 import BeautifulSoup, Comment, NavigableString, Tag

from story_ai.models import ProperNoun, StoryPage

RGB = tuple[int, int, int]

BLACK: RGB = (0, 0, 0)
MUTED: RGB = (64, 64, 64)
POSITIVE: RGB = (34, 139, 34)  # forest green
NEGATIVE: RGB = (165, 42, 42)  # brown

GlossaryPolicy = Literal["omit", "parenthetical"]
RunKind = Literal["text", "break", "gap", "heading"]

GLOSSARY_TITLE = "Glossary of Terms"


@dataclass(frozen=True)
class StyleFrame:
    bold: bool = False
    italic: bool = False
    strikethrough: bool = False
    color: RGB = BLACK

    @property
    def font_style(self) -> str:
        """fpdf2 style string, e.g. "BI" or "S"."""
        return "B" * self.bold + "I" * self.italic + "S" * self.strikethrough


BASE_FRAME = StyleFrame()
PROMPT_FRAME = StyleFrame(italic=True, color=MUTED)


@dataclass(frozen=True)
class Run:
    kind: RunKind
    text: str = ""
    style: StyleFrame = BASE_FRAME


LINE_BREAK = Run("break")
PARAGRAPH_GAP = Run("gap")


def _classes(tag: Tag) -> list[str]:
    return tag.get("class") or []


def frame_for(tag: Tag, frame: StyleFrame) -> StyleFrame:
    """The frame an element installs for its own subtree."""
    if tag.name in ("strong", "b"):
        return replace(frame, bold=True)
    if tag.name in ("em", "i"):
        return replace(frame, italic=True)
    if tag.name == "span":
        classes = _classes(tag)
        if "item-added" in classes:
            return replace(frame, color=POSITIVE)
        if "item-removed" in classes:
            return replace(frame, color=NEGATIVE, strikethrough=True)
        if "proper-noun" in classes:
            return replace(frame, bold=True)
    return frame


def _tooltip_description(tag: Tag) -> str:
    tip = tag.find("span", class_="tooltiptext")
    return tip.get_text(" ", strip=True) if tip is not None else ""


def _walk(node: Tag, frame: StyleFrame, runs: list[Run], policy: GlossaryPolicy) -> None:
    for child in node.children:
        if isinstance(child, Comment):
            continue
        if isinstance(child, NavigableString):
            text = str(child)
            if text:
                runs.append(Run("text", text, frame))
            continue
        if not isinstance(child, Tag):
            continue

        classes = _classes(child)
        if "tooltiptext" in classes:
            continue
        if child.name == "br":
            runs.append(LINE_BREAK)
            continue

        _walk(child, frame_for(child, frame), runs, policy)

        if policy == "parenthetical" and child.name == "span" and "proper-noun" in classes:
            description = _tooltip_description(child)
            if description:
                runs.append(Run("text", f" ({description})", frame))


def render_html(markup: str, frame: StyleFrame = BASE_FRAME, policy: GlossaryPolicy = "omit") -> list[Run]:
    """Walk one annotated fragment and return its runs."""
    runs: list[Run] = []
    _walk(BeautifulSoup(markup, "html.parser"), frame, runs, policy)
    return runs


def render_page(page: StoryPage, policy: GlossaryPolicy = "omit") -> list[Run]:
    """Prompt (italic, muted), break, response tree, paragraph gap."""
    return [
        Run("text", f"> {page.prompt}", PROMPT_FRAME),
        LINE_BREAK,
        *render_html(page.response, BASE_FRAME, policy),
        PARAGRAPH_GAP,
    ]


def render_story(pages: Iterable[StoryPage], policy: GlossaryPolicy = "omit") -> list[Run]:
    runs: list[Run] = []
    for page in pages:
        runs.extend(render_page(page, policy))
    return runs


def render_glossary(nouns: Iterable[ProperNoun]) -> list[Run]:
    """One bold name + description line per known noun. Empty when no nouns."""
    nouns = list(nouns)
    if not nouns:
        return []
    runs = [Run("heading", GLOSSARY_TITLE, StyleFrame(bold=True))]
    for noun in nouns:
        runs.append(Run("text", f"{noun.noun}: ", StyleFrame(bold=True)))
        runs.append(Run("text", noun.description, BASE_FRAME))
        runs.append(LINE_BREAK)
    return runs

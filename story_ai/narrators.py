"""Narrator styles and the dice table that picks one per new story.

A roll of 0–12 walks NARRATOR_TABLE top to bottom; the first row whose
threshold exceeds the roll and whose genre restriction admits the story's
genre wins. Nothing matching means a classic author is drawn at random.

Each style carries everything the rest of the app needs to know about it:
the author line for the prompt, an optional prompt addendum, the title used
on the exported PDF, the input placeholder and an optional opening line that
is forced onto the first page.
"""

from __future__ import annotations

import random
from dataclasses import dataclass

GENRES = ("fantasy", "sci-fi", "historical-fiction")
DEFAULT_GENRE = "fantasy"

CLASSIC_AUTHORS = [
    "James Joyce",
    "Mark Twain",
    "Jack Kerouac",
    "Kurt Vonnegut",
    "H.P. Lovecraft",
    "Edgar Allan Poe",
    "J.R.R. Tolkien",
    "Terry Pratchett",
]


@dataclass(frozen=True)
class NarratorStyle:
    key: str
    author: str
    title: str = "Your Story"
    placeholder: str = "What do you do?"
    opening_line: str = ""
    addendum: str = ""


NARRATORS: dict[str, NarratorStyle] = {
    s.key: s
    for s in [
        NarratorStyle(
            "angry", "a very angry narrator",
            title="The Tale I Was Forced to Tell",
            addendum="The narrator resents telling this story and lets it show in every sentence.",
        ),
        NarratorStyle(
            "funny", "the Monty Python group",
            title="A Decently Amusing Story",
            addendum="Lean into absurdist, deadpan British humour.",
        ),
        NarratorStyle(
            "xkcd", "XKCD",
            title="Hypothesis: A Story",
            addendum="Narrate like a dry science comic: precise, nerdy, quietly funny.",
        ),
        NarratorStyle(
            "stanley", "The Stanley Parable",
            title="The Story of a Man Named Stanley",
            placeholder="What does Stanley do?",
            opening_line="This is the story of a man named Stanley.",
            addendum="The player is Stanley. The narrator comments on, and argues with, his choices.",
        ),
        NarratorStyle(
            "glados", "GLaDOS from Portal 2",
            title="A Mandatory Enrichment Activity",
            addendum="Narrate as a passive-aggressive testing AI running an experiment on the player.",
        ),
        NarratorStyle(
            "kreia", "Kreia from Knights of the Old Republic II",
            title="A Lesson in Consequences",
            addendum="Narrate as a cryptic mentor who treats every choice as a lesson.",
        ),
        NarratorStyle(
            "historian", "The Historian",
            title="The Human Thing",
            addendum="Narrate as a historian reflecting on the human cost of the events.",
        ),
        NarratorStyle(
            "nietzsche", "Friedrich Nietzsche",
            title="Thus Spoke the Traveler",
            addendum="Narrate with aphoristic, philosophical intensity.",
        ),
        NarratorStyle(
            "bunyan", "John Bunyan",
            title="The Pilgrim's Burden",
            addendum="Narrate as an allegory where places and people embody virtues and vices.",
        ),
        NarratorStyle(
            "socrates", "Socrates",
            title="An Unexamined Life",
            addendum="Narrate through probing questions that challenge the player's assumptions.",
        ),
        NarratorStyle(
            "ross_ramsay", "Ross & Ramsay",
            title="The Happy Little Scallop is RAW!",
            addendum="Alternate between a gentle painter's calm and a furious chef's outbursts.",
        ),
        NarratorStyle(
            "tzu_gump", "Sun Tzu & Forrest Gump",
            title="The Unwitting Strategist",
            addendum="Mix strategic maxims with simple, earnest folk wisdom.",
        ),
        NarratorStyle(
            "seuss", "Dr. Seuss",
            title="Oh, the Things You Will Find!",
            placeholder="Your turn to play! What's next today?",
            addendum="Narrate in playful rhyming verse.",
        ),
    ]
}

# (roll threshold, style key, only these genres, never these genres)
NARRATOR_TABLE: list[tuple[int, str, tuple[str, ...], tuple[str, ...]]] = [
    (1, "angry", (), ()),
    (2, "funny", (), ("historical-fiction",)),
    (3, "xkcd", ("sci-fi",), ()),
    (4, "stanley", (), ()),
    (5, "glados", ("sci-fi",), ()),
    (5, "kreia", ("fantasy",), ()),
    (5, "historian", ("historical-fiction",), ()),
    (6, "nietzsche", (), ()),
    (7, "bunyan", (), ()),
    (8, "socrates", (), ()),
    (9, "ross_ramsay", (), ()),
    (10, "tzu_gump", (), ()),
    (11, "seuss", (), ("historical-fiction",)),
]

DICE_SIDES = 13


def classic_style(author: str) -> NarratorStyle:
    return NarratorStyle("classic", author)


def pick_narrator(genre: str, roll: int, rng: random.Random | None = None) -> NarratorStyle:
    """Return the narrator style for a dice roll in [0, DICE_SIDES)."""
    for threshold, key, only, never in NARRATOR_TABLE:
        if roll >= threshold:
            continue
        if only and genre not in only:
            continue
        if genre in never:
            continue
        return NARRATORS[key]
    rng = rng or random.Random()
    return classic_style(rng.choice(CLASSIC_AUTHORS))


def roll_narrator(genre: str, rng: random.Random | None = None) -> NarratorStyle:
    """Roll the dice and pick a narrator style for a new story."""
    rng = rng or random.Random()
    return pick_narrator(genre, rng.randrange(DICE_SIDES), rng)


def resolve_narrator(key: str, author: str) -> NarratorStyle:
    """Look a style back up from what a session stores."""
    return NARRATORS.get(key) or classic_style(author)

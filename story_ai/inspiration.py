"""Flavor data used to seed new stories.

Entries live in a JSON file shaped like:

    {
      "fantasy":  [{"title": "...", "description": "..."}, ...],
      "sci-fi":   [{"title": "...", "description": "..."}, ...],
      "historical-fiction": [
        {"event": "...", "description": "...", "wikipedia": "...", "summary": "..."}, ...
      ]
    }

The packaged preset (presets/inspiration.json) is used unless a path is
configured. The file is read once, on first use.
"""

from __future__ import annotations

import json
import logging
import random
from pathlib import Path

from pydantic import BaseModel

logger = logging.getLogger(__name__)

DEFAULT_INSPIRATION_PATH = Path(__file__).parent / "presets" / "inspiration.json"


class Inspiration(BaseModel):
    title: str
    description: str


class HistoricalEvent(BaseModel):
    event: str
    description: str
    wikipedia: str = ""
    summary: str = ""


class InspirationSource:
    def __init__(self, path: Path | None = None) -> None:
        self._path = path or DEFAULT_INSPIRATION_PATH
        self._data: dict[str, list[dict]] | None = None

    def _load(self) -> dict[str, list[dict]]:
        if self._data is None:
            if self._path.is_file():
                self._data = json.loads(self._path.read_text(encoding="utf-8"))
            else:
                logger.warning("Inspiration file %s not found; stories start unseeded", self._path)
                self._data = {}
        return self._data

    def pick(self, genre: str, rng: random.Random | None = None) -> Inspiration | None:
        """Random title/description seed for a fantasy or sci-fi story."""
        entries = self._load().get(genre, [])
        if not entries or genre == "historical-fiction":
            return None
        rng = rng or random.Random()
        return Inspiration.model_validate(rng.choice(entries))

    def pick_event(self, rng: random.Random | None = None) -> HistoricalEvent | None:
        """Random historical event for a historical-fiction story."""
        entries = self._load().get("historical-fiction", [])
        if not entries:
            return None
        rng = rng or random.Random()
        return HistoricalEvent.model_validate(rng.choice(entries))

"""PDF export of a session's story (fpdf2, core Times font).

Layout:
  - title page: narrator title, "An AI-generated <Genre> tale in the style of
    <author>", difficulty, and for historical fiction the event with a link;
  - story pages: the runs from renderer.render_story written inline;
  - glossary page: every proper noun the story has met, when there are any.

Core fonts only cover Latin-1, so typographic punctuation is transliterated
and anything else unencodable becomes "?".
"""

from __future__ import annotations

import logging

from fpdf import FPDF

from story_ai.session import SessionState

from .renderer import BLACK, GlossaryPolicy, Run, render_glossary, render_story

logger = logging.getLogger(__name__)

FONT = "Times"
BODY_SIZE = 12
LINE_HEIGHT = 6
PARAGRAPH_GAP = 12
LINK_COLOR = (65, 105, 225)  # royal blue

_TRANSLITERATIONS = str.maketrans({
    "\u2018": "'",
    "\u2019": "'",
    "\u201c": "\"",
    "\u201d": "\"",
    "\u2013": "-",
    "\u2014": "--",
    "\u2026": "...",
    "\u00a0": " ",
})


def latin1(text: str) -> str:
    return text.translate(_TRANSLITERATIONS).encode("latin-1", "replace").decode("latin-1")


class StoryPDF(FPDF):
    def footer(self) -> None:
        self.set_y(-15)
        self.set_font(FONT, "I", 8)
        self.set_text_color(*BLACK)
        self.cell(0, 10, f"Page {self.page_no()}", align="C")


# ---------------------------------------------------------------------------
# Sections
# ---------------------------------------------------------------------------

def _title_page(pdf: StoryPDF, session: SessionState) -> None:
    narrator = session.narrator
    pdf.add_page()
    pdf.set_text_color(*BLACK)

    pdf.set_font(FONT, "B", 36)
    pdf.cell(0, 80, "", new_x="LMARGIN", new_y="NEXT")
    pdf.multi_cell(0, 14, latin1(narrator.title), align="C", new_x="LMARGIN", new_y="NEXT")
    pdf.ln(10)

    pdf.set_font(FONT, "I", 16)
    subtitle = f"An AI-generated {session.genre.title()} tale in the style of {narrator.author}"
    pdf.multi_cell(0, 8, latin1(subtitle), align="C", new_x="LMARGIN", new_y="NEXT")
    pdf.ln(5)

    pdf.set_font(FONT, "", 12)
    pdf.cell(0, 8, latin1(f"Difficulty: {session.consequence_model.title()}"),
             align="C", new_x="LMARGIN", new_y="NEXT")

    event = session.historical
    if event is not None:
        pdf.ln(20)
        pdf.set_font(FONT, "B", 14)
        pdf.cell(0, 8, "Historical Context", align="C", new_x="LMARGIN", new_y="NEXT")
        pdf.set_font(FONT, "", 12)
        pdf.multi_cell(0, 6, latin1(event.summary or event.description),
                       align="C", new_x="LMARGIN", new_y="NEXT")
        if event.wikipedia:
            pdf.ln(4)
            pdf.set_font(FONT, "I", 10)
            pdf.set_text_color(*LINK_COLOR)
            pdf.cell(0, 6, latin1(event.event), align="C", link=event.wikipedia,
                     new_x="LMARGIN", new_y="NEXT")
            pdf.set_text_color(*BLACK)


def write_runs(pdf: FPDF, runs: list[Run]) -> None:
    """Write renderer runs at the current position, flowing across pages."""
    for run in runs:
        if run.kind == "break":
            pdf.ln(LINE_HEIGHT)
        elif run.kind == "gap":
            pdf.ln(PARAGRAPH_GAP)
        elif run.kind == "heading":
            pdf.set_font(FONT, "B", 24)
            pdf.set_text_color(*run.style.color)
            pdf.cell(0, 10, latin1(run.text), align="C", new_x="LMARGIN", new_y="NEXT")
            pdf.ln(10)
        elif run.text:
            pdf.set_font(FONT, run.style.font_style, BODY_SIZE)
            pdf.set_text_color(*run.style.color)
            pdf.write(LINE_HEIGHT, latin1(run.text))


def build_story_pdf(session: SessionState, policy: GlossaryPolicy = "omit") -> bytes:
    """Render the session's story to PDF bytes. The session is only read."""
    pdf = StoryPDF()
    pdf.set_title(latin1(session.narrator.title))
    pdf.set_author(latin1(session.narrator.author))
    pdf.set_margins(20, 20, 20)
    pdf.set_auto_page_break(True, margin=20)

    _title_page(pdf, session)

    pdf.add_page()
    write_runs(pdf, render_story(session.history, policy))

    glossary = render_glossary(session.proper_nouns)
    if glossary:
        pdf.add_page()
        write_runs(pdf, glossary)

    data = bytes(pdf.output())
    logger.info(
        "exported session %s: %d pages of story, %d glossary terms, %d bytes",
        session.id, len(session.history), len(session.proper_nouns), len(data),
    )
    return data

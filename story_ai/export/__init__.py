"""Story export: annotated markup -> styled runs -> PDF."""

from .pdf import build_story_pdf  # noqa: F401
from .renderer import (  # noqa: F401
    GlossaryPolicy,
    Run,
    StyleFrame,
    render_glossary,
    render_html,
    render_story,
)

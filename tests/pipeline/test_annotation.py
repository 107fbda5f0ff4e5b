"""Tests for story_ai.pipeline.annotation: tooltips and item markers."""

from story_ai.models import ProperNoun
from story_ai.pipeline.annotation import annotate_proper_nouns, mark_items
from story_ai.pipeline.markup import strip_markup


def tip(text: str, description: str) -> str:
    return (
        f'<span class="proper-noun tooltip">{text}'
        f'<span class="tooltiptext">{description}</span></span>'
    )


# ---------------------------------------------------------------------------
# Proper nouns
# ---------------------------------------------------------------------------

class TestAnnotateProperNouns:
    def test_single_noun_absorbs_punctuation(self) -> None:
        nouns = [ProperNoun(noun="Theron", description="a weary knight")]
        result = annotate_proper_nouns("You meet Theron.", nouns)
        assert result == "You meet " + tip("Theron.", "a weary knight")

    def test_every_occurrence_wrapped(self) -> None:
        nouns = [ProperNoun(noun="Mara", description="a smuggler")]
        result = annotate_proper_nouns("Mara laughs and Mara runs", nouns)
        assert result == f"{tip('Mara', 'a smuggler')} laughs and {tip('Mara', 'a smuggler')} runs"

    def test_longer_phrase_wins_and_no_nesting(self) -> None:
        nouns = [
            ProperNoun(noun="Tower", description="the keep"),
            ProperNoun(noun="Iron Tower", description="a fortress"),
        ]
        text = "The Iron Tower looms over the town. Inside the Tower, it is cold."
        result = annotate_proper_nouns(text, nouns)
        assert result == (
            f"The {tip('Iron Tower', 'a fortress')} looms over the town. "
            f"Inside the {tip('Tower,', 'the keep')} it is cold."
        )
        assert result.count("proper-noun") == 2

    def test_substring_of_other_word_not_wrapped(self) -> None:
        nouns = [ProperNoun(noun="Ash", description="a village")]
        assert annotate_proper_nouns("You reach Ashford.", nouns) == "You reach Ashford."

    def test_case_insensitive_keeps_visible_text(self) -> None:
        nouns = [ProperNoun(noun="Theron", description="a knight")]
        result = annotate_proper_nouns("theron nods", nouns)
        assert result == f"{tip('theron', 'a knight')} nods"

    def test_phrase_used_is_what_gets_wrapped(self) -> None:
        nouns = [ProperNoun(noun="Theron", phrase_used="Sir Theron", description="a knight")]
        result = annotate_proper_nouns("Sir Theron bows.", nouns)
        assert result == tip("Sir Theron", "a knight") + " bows."

    def test_description_mentioning_other_noun_not_rewrapped(self) -> None:
        nouns = [
            ProperNoun(noun="Mara", description="sister of Theron"),
            ProperNoun(noun="Theron", description="a knight"),
        ]
        result = annotate_proper_nouns("Mara and Theron.", nouns)
        assert result == f"{tip('Mara', 'sister of Theron')} and {tip('Theron.', 'a knight')}"

    def test_existing_tooltip_left_alone(self) -> None:
        nouns = [ProperNoun(noun="Theron", description="a knight")]
        text = tip("Theron", "already here") + " nods. Theron smiles."
        result = annotate_proper_nouns(text, nouns)
        assert result == tip("Theron", "already here") + " nods. " + tip("Theron", "a knight") + " smiles."

    def test_annotating_twice_changes_nothing(self) -> None:
        nouns = [ProperNoun(noun="Theron", description="a knight")]
        once = annotate_proper_nouns("Theron rides.", nouns)
        assert annotate_proper_nouns(once, nouns) == once

    def test_inline_tags_preserved(self) -> None:
        nouns = [ProperNoun(noun="Theron", description="a knight")]
        result = annotate_proper_nouns("<strong>Theron</strong> rides.", nouns)
        assert result == f"<strong>{tip('Theron', 'a knight')}</strong> rides."

    def test_tag_attributes_never_matched(self) -> None:
        nouns = [ProperNoun(noun="item", description="x")]
        text = 'You take the <span class="item-added">lamp</span>.'
        assert annotate_proper_nouns(text, nouns) == text

    def test_description_escaped(self) -> None:
        nouns = [ProperNoun(noun="Theron", description="knight <of> salt & iron")]
        result = annotate_proper_nouns("Theron", nouns)
        assert "knight &lt;of&gt; salt &amp; iron" in result

    def test_equal_length_ties_keep_first_entry(self) -> None:
        nouns = [
            ProperNoun(noun="Ash", description="first"),
            ProperNoun(noun="ASH", description="second"),
        ]
        assert annotate_proper_nouns("Ash falls", nouns) == f"{tip('Ash', 'first')} falls"

    def test_multi_word_phrase_spans_line_break(self) -> None:
        nouns = [ProperNoun(noun="Iron Gate", description="a gate")]
        result = annotate_proper_nouns("the Iron\nGate", nouns)
        assert result == "the " + tip("Iron\nGate", "a gate")

    def test_stripping_markup_restores_text(self) -> None:
        text = "Theron and Mara cross the Iron Bridge; the bridge sways!"
        nouns = [
            ProperNoun(noun="Theron", description="a knight"),
            ProperNoun(noun="Mara", description="sister of Theron"),
            ProperNoun(noun="Iron Bridge", description="old & narrow"),
            ProperNoun(noun="Bridge", description="a bridge"),
        ]
        assert strip_markup(annotate_proper_nouns(text, nouns)) == text

    def test_no_nouns(self) -> None:
        assert annotate_proper_nouns("Nothing here.", []) == "Nothing here."


# ---------------------------------------------------------------------------
# Items
# ---------------------------------------------------------------------------

class TestMarkItems:
    def test_added_item_wrapped(self) -> None:
        result = mark_items("You pick up the torch.", ["torch"], [])
        assert result == 'You pick up the <span class="item-added">torch</span>.'

    def test_removed_item_wrapped(self) -> None:
        result = mark_items("The rope snaps.", [], ["rope"])
        assert result == 'The <span class="item-removed">rope</span> snaps.'

    def test_only_first_occurrence(self) -> None:
        result = mark_items("torch after torch", ["torch"], [])
        assert result == '<span class="item-added">torch</span> after torch'

    def test_already_marked_left_alone(self) -> None:
        text = 'You pick up the <span class="item-added">torch</span>.'
        assert mark_items(text, ["torch"], []) == text

    def test_missing_item_ignored(self) -> None:
        assert mark_items("Nothing happens.", ["torch"], ["rope"]) == "Nothing happens."

    def test_case_insensitive(self) -> None:
        result = mark_items("A Silver Key glints.", ["silver key"], [])
        assert result == 'A <span class="item-added">Silver Key</span> glints.'

    def test_tag_attributes_not_matched(self) -> None:
        text = '<span class="item-removed">rope</span> and a lamp'
        result = mark_items(text, ["item"], [])
        assert result == text

    def test_item_inside_noun_phrase_wraps_whole_phrase(self) -> None:
        crown = ProperNoun(noun="Vael's Iron Crown", description="a circlet")
        result = mark_items("You lift Vael's Iron Crown from the altar.", ["Iron Crown"], [], [crown])
        assert result == "You lift <span class=\"item-added\">Vael's Iron Crown</span> from the altar."

    def test_item_straddling_two_phrases(self) -> None:
        nouns = [ProperNoun(noun="Red Keep"), ProperNoun(noun="Iron Door")]
        result = mark_items("The Red Keep Iron Door groans.", [], ["Keep Iron"], nouns)
        assert result == 'The <span class="item-removed">Red Keep Iron Door</span> groans.'

    def test_unrelated_noun_leaves_item_span_alone(self) -> None:
        result = mark_items("Theron hands you a torch.", ["torch"], [], [ProperNoun(noun="Theron")])
        assert result == 'Theron hands you a <span class="item-added">torch</span>.'

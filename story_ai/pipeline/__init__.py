"""Response reconciliation and narrative-annotation pipeline.

Executes one turn for one session:
  1. parsing    : trim code fences, decode the reply into a TurnResponse,
                   rewrite stray markdown emphasis into <strong>/<em>.
  2. retry      : when decoding fails, ask the backend to repair its own
                   output (bounded; UnrecoverableResponse when exhausted).
  3. validation : drop or correct proper nouns whose phrase never appears
                   in the story text.
  4. annotation : wrap unmarked items, then wrap proper nouns in tooltip
                   markup (two-pass, placeholder-mediated, no nesting).
  5. reconcile  : replace the session's state with the turn's state while
                   keeping every proper noun ever seen; append the page.

turn.start_story / turn.run_turn drive the steps under the session lock.

Markup produced and consumed:
  <strong>…</strong>  <em>…</em>
  <span class="item-added">…</span>  <span class="item-removed">…</span>
  <span class="proper-noun tooltip">phrase<span class="tooltiptext">description</span></span>
"""

from .annotation import annotate_proper_nouns, mark_items  # noqa: F401
from .parsing import apply_markdown_failsafes, parse_turn_response, strip_fences  # noqa: F401
from .reconcile import commit_turn, merge_game_state, merge_proper_nouns  # noqa: F401
from .retry import RetryCoordinator  # noqa: F401
from .turn import check_action, is_restart, render_turn, run_turn, start_story  # noqa: F401
from .validation import validate_proper_nouns  # noqa: F401

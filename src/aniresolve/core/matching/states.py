"""Per-file resolution state machine.

The orchestrator moves each file through a small set of states. The
transition functions here are pure: they look only at their arguments and
return the next state, so each branch of the resolution flow can be tested
without a catalogue.

    DIRECT ──verified──────────────────────────────▶ RESOLVED
       │ └──not verified──▶ NEEDS_MANUAL_SEARCH ──▶ RESOLVED / FAILED
    NEEDS_WALK ──walk ok──▶ RESOLVED
       └──walk failed──▶ NEEDS_MANUAL_SEARCH / FAILED
"""

from __future__ import annotations

from enum import Enum

from aniresolve.core.matching.models import ManualSearchResult, WalkOutcome
from aniresolve.core.parser.models import ParsedName
from aniresolve.shared.models.api.anilist import MediaEntity


class ResolutionState(str, Enum):
    """Where a file is in the resolution flow."""

    DIRECT = "direct"
    NEEDS_WALK = "needs_walk"
    NEEDS_MANUAL_SEARCH = "needs_manual_search"
    RESOLVED = "resolved"
    FAILED = "failed"


def initial_state(parsed: ParsedName, capacity: int | None, offset: int = 0) -> ResolutionState:
    """Pick the first state from the parsed episode and the entity capacity.

    Ranges starting at episode 1 are treated as batches and never walked.
    Other ranges walk when their upper bound exceeds the capacity. A single
    episode walks when it exceeds the capacity, or when a root refetch set
    a non-zero offset and the episode still fits the refetched entity.
    """
    episode = parsed.episode_number
    if episode is None or not capacity:
        return ResolutionState.DIRECT

    if isinstance(episode, tuple):
        start, end = episode
        if start == 1:
            return ResolutionState.DIRECT
        return ResolutionState.NEEDS_WALK if end > capacity else ResolutionState.DIRECT

    if episode > capacity or (offset != 0 and episode <= capacity):
        return ResolutionState.NEEDS_WALK
    return ResolutionState.DIRECT


def after_direct(verified: bool) -> ResolutionState:
    """An accepted episode still needs a verified entity."""
    return ResolutionState.RESOLVED if verified else ResolutionState.NEEDS_MANUAL_SEARCH


def after_walk(outcome: WalkOutcome) -> ResolutionState:
    """Route a walk outcome."""
    if outcome.needs_manual_search:
        return ResolutionState.NEEDS_MANUAL_SEARCH
    if outcome.failed:
        return ResolutionState.FAILED
    return ResolutionState.RESOLVED


def after_manual_search(result: ManualSearchResult) -> ResolutionState:
    return ResolutionState.FAILED if result.failed else ResolutionState.RESOLVED


def is_failed(state: ResolutionState, media: MediaEntity | None) -> bool:
    """A result fails in the FAILED state or without a display title."""
    return state is ResolutionState.FAILED or media is None or not media.display_title

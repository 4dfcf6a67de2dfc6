"""
Azkar Matcher Engine
sequential word matching with fuzzy equality, bounded look-ahead and wrap-around
"""

from typing import Optional, Protocol, Sequence
from dataclasses import dataclass
import logging

from azkar_tracker import config as app_config
from azkar_tracker.arabic_text import words_match, calculate_similarity


# ============================================================================
# Data Structures
# ============================================================================

@dataclass
class MatchResult:
    """Result of matching one batch of spoken words"""
    completions: int  # times the cursor wrapped past the end of the target
    current_index: int  # next expected target word


# ============================================================================
# Sequential Matching
# ============================================================================

def match_batch(
    spoken_words: Sequence[str],
    target_words: Sequence[str],
    start_index: int,
    max_skip: Optional[int] = None
) -> MatchResult:
    """
    Consume spoken words against the target starting at start_index

    Each spoken word advances the cursor on an exact or fuzzy match at the
    current position, or jumps over up to max_skip missed target words when
    it matches one of them. Anything else is discarded. Passing the end of
    the target counts a completion and restarts at 0.

    Args:
        spoken_words: Normalized spoken words (whole segment transcript)
        target_words: Normalized reference words
        start_index: Committed cursor position
        max_skip: Look-ahead window (defaults to config.MAX_SKIP)

    Returns:
        MatchResult with completions and the new cursor (0 <= idx < total)
    """
    total = len(target_words)
    if total == 0:
        return MatchResult(completions=0, current_index=0)

    if max_skip is None:
        max_skip = app_config.MAX_SKIP

    idx = start_index
    if idx < 0 or idx > total:
        logging.warning(f"Start index {start_index} outside [0, {total}], restarting from 0")
        idx = 0

    completions = 0

    for spoken in spoken_words:
        if idx >= total:
            completions += 1
            idx = 0

        target = target_words[idx]

        # Exact or fuzzy match at current position
        if words_match(spoken, target):
            _log_decision("match", spoken, target, idx)
            idx += 1
            continue

        # Look-ahead over missed words
        max_look = min(max_skip, total - idx - 1)
        for skip in range(1, max_look + 1):
            candidate = target_words[idx + skip]
            if words_match(spoken, candidate):
                _log_decision(f"skip {skip}", spoken, candidate, idx + skip)
                idx += skip + 1
                break
        else:
            _log_decision("ignored", spoken, target, idx)

    if idx >= total:
        completions += 1
        idx = 0

    return MatchResult(completions=completions, current_index=idx)


def _log_decision(kind: str, spoken: str, target: str, position: int):
    if app_config.LOG_MATCH_DETAILS:
        logging.debug(
            f"[{kind}] spoken='{spoken}' target='{target}' @ {position} "
            f"(similarity={calculate_similarity(spoken, target):.2f})"
        )


# ============================================================================
# Strategies
# ============================================================================

class MatchStrategy(Protocol):
    """Anything that maps (spoken, target, start) to a MatchResult"""

    def match(self, spoken_words: Sequence[str], target_words: Sequence[str], start_index: int) -> MatchResult:
        ...


class SequentialMatcher:
    """Forward-only matcher with a small look-ahead window"""

    name = "sequential"

    def __init__(self, max_skip: Optional[int] = None):
        self.max_skip = app_config.MAX_SKIP if max_skip is None else max_skip

    def match(self, spoken_words: Sequence[str], target_words: Sequence[str], start_index: int) -> MatchResult:
        return match_batch(spoken_words, target_words, start_index, max_skip=self.max_skip)


STRATEGIES = {
    SequentialMatcher.name: SequentialMatcher,
}


def get_strategy(name: Optional[str] = None) -> MatchStrategy:
    """Instantiate a matching strategy by name"""
    name = name or app_config.DEFAULT_STRATEGY
    if name not in STRATEGIES:
        raise ValueError(f"Unknown matching strategy '{name}'. Available: {sorted(STRATEGIES)}")
    return STRATEGIES[name]()

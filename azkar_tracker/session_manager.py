"""
Session State Manager for Azkar Recitation Tracking
Turns partial/final transcript segments into highlight moves and completion events
"""

from typing import Callable, Dict, Any, List, Optional
from dataclasses import dataclass, asdict
import logging

from azkar_tracker import config as app_config
from azkar_tracker.arabic_text import normalize_words
from azkar_tracker.azkar_matcher import MatchStrategy, get_strategy


@dataclass
class SessionState:
    """State for a single recitation session"""
    committed_index: int = 0  # cursor confirmed by the last final segment
    completions_fired_in_segment: int = 0
    highlight_index: int = 0  # word the reader is expected to say next
    completions_shown_in_segment: int = 0  # completions behind the current highlight
    total_completions: int = 0


class RecitationSession:
    """
    Tracks one reciter through one reference text

    Feed every recognizer hypothesis to on_transcript_segment(). Partial
    results are whole-segment snapshots, so each one is matched again from
    the committed index; a final result commits the cursor.

    auto_reset=True is the hands-free mode: completions fire as soon as they
    are seen (deduplicated across partials) and recognition keeps running.
    auto_reset=False completes once on a final result and then requests a stop.
    """

    def __init__(
        self,
        reference_text: str = "",
        on_complete: Optional[Callable[[], None]] = None,
        on_request_stop: Optional[Callable[[], None]] = None,
        auto_reset: Optional[bool] = None,
        strategy: Optional[MatchStrategy] = None
    ):
        self.on_complete = on_complete
        self.on_request_stop = on_request_stop
        self.auto_reset = app_config.DEFAULT_AUTO_RESET if auto_reset is None else auto_reset
        self.strategy = strategy or get_strategy()

        self.state = SessionState()
        self._reference_text = ""
        self._target_words: List[str] = []
        self._generation = 0

        self.set_reference_text(reference_text)

    @property
    def reference_text(self) -> str:
        return self._reference_text

    @property
    def target_words(self) -> List[str]:
        return list(self._target_words)

    @property
    def highlight_index(self) -> int:
        return self.state.highlight_index

    def set_reference_text(self, text: str):
        """Replace the reference text and return to idle"""
        self._reference_text = text or ""
        self._target_words = normalize_words(self._reference_text)
        self.reset()
        logging.info(f"Reference text set ({len(self._target_words)} words)")

    def reset(self):
        """Drop all cursor and segment state for the current reference text"""
        self.state = SessionState()
        self._generation += 1

    def on_transcript_segment(self, text: str, is_final: bool):
        """
        Process one partial or final recognizer result

        Args:
            text: Full transcript of the current speech segment so far
            is_final: True when the recognizer closed the segment
        """
        spoken_words = normalize_words(text or "")
        if not spoken_words:
            return

        state = self.state
        result = self.strategy.match(spoken_words, self._target_words, state.committed_index)

        if app_config.LOG_MATCH_DETAILS:
            logging.debug(
                f"Segment ({'final' if is_final else 'partial'}) from {state.committed_index}: "
                f"completions={result.completions}, index={result.current_index}"
            )

        if self.auto_reset:
            self._handle_auto_reset(result.completions, result.current_index, is_final)
        else:
            self._handle_single_shot(result.completions, result.current_index, is_final)

    def _advance_highlight(self, completions: int, current_index: int):
        """Move the highlight only if the result is further along than what is shown"""
        state = self.state
        shown = (state.completions_shown_in_segment, state.highlight_index)
        # Compared against completions already shown, so a repeated completion cannot pull the highlight back
        if (completions, current_index) > shown:
            state.completions_shown_in_segment = completions
            state.highlight_index = current_index

    def _commit(self, current_index: int):
        state = self.state
        state.committed_index = current_index
        state.highlight_index = current_index
        state.completions_fired_in_segment = 0
        state.completions_shown_in_segment = 0

    def _handle_auto_reset(self, completions: int, current_index: int, is_final: bool):
        state = self.state
        new_completions = max(0, completions - state.completions_fired_in_segment)
        state.completions_fired_in_segment = max(state.completions_fired_in_segment, completions)
        state.total_completions += new_completions

        if is_final:
            self._commit(current_index)
        else:
            self._advance_highlight(completions, current_index)

        self._fire_completions(new_completions)

    def _handle_single_shot(self, completions: int, current_index: int, is_final: bool):
        if not is_final:
            self._advance_highlight(completions, current_index)
            return

        self._commit(current_index)
        if completions == 0:
            return

        self.state.total_completions += 1
        self._fire_completions(1)

        logging.info("Reference completed, requesting recognition stop")
        if self.on_request_stop:
            self.on_request_stop()

    def _fire_completions(self, count: int):
        generation = self._generation
        for _ in range(count):
            # A callback may load new reference text; its completions belong to the old one
            if generation != self._generation:
                logging.info("Reference text changed during completion dispatch, dropping remaining completions")
                return
            logging.info(f"Completion detected (total {self.state.total_completions})")
            if self.on_complete:
                self.on_complete()


class SessionManager:
    """Manages recitation sessions for all connected users"""

    def __init__(self, auto_reset: Optional[bool] = None, strategy_name: Optional[str] = None):
        self.sessions: Dict[str, RecitationSession] = {}
        self.auto_reset = app_config.DEFAULT_AUTO_RESET if auto_reset is None else auto_reset
        self.strategy_name = strategy_name

    def create_session(self, sid: str, **kwargs) -> RecitationSession:
        """Create a new session (replaces an existing one with the same id)"""
        kwargs.setdefault("auto_reset", self.auto_reset)
        kwargs.setdefault("strategy", get_strategy(self.strategy_name))
        session = RecitationSession(**kwargs)
        self.sessions[sid] = session
        logging.info(f"Session created: {sid} (auto_reset={session.auto_reset})")
        return session

    def get_session(self, sid: str) -> RecitationSession:
        """Get session, creating if not exists"""
        if sid not in self.sessions:
            return self.create_session(sid)
        return self.sessions[sid]

    def delete_session(self, sid: str):
        """Delete a session"""
        if sid in self.sessions:
            del self.sessions[sid]

    def get_session_info(self, sid: str) -> Dict[str, Any]:
        """Get session info as dict for debugging/monitoring"""
        session = self.get_session(sid)
        info = asdict(session.state)
        info["auto_reset"] = session.auto_reset
        info["target_word_count"] = len(session.target_words)
        return info

    def has_session(self, sid: str) -> bool:
        """Check if session exists"""
        return sid in self.sessions

"""
Azkar progress store
Per-category item lists, repetition counts and the glue that drives a
RecitationSession through them
"""

from typing import Callable, List, Dict, Any, Optional
from dataclasses import dataclass
import logging

from azkar_tracker.arabic_text import tokenize_arabic_text
from azkar_tracker.session_manager import RecitationSession


# ============================================================================
# Data Structures
# ============================================================================

@dataclass
class AzkarItem:
    """A single zeker to be recited `target` times"""
    id: int
    category: str
    arabic: str
    translation: str = ""
    note: str = ""
    target: int = 1


DEFAULT_CATEGORY = "Tasbeeh"

DEFAULT_AZKAR: List[Dict[str, Any]] = [
    {
        "id": 1,
        "category": "Tasbeeh",
        "arabic": "سُبْحَانَ اللهِ",
        "translation": "Glory be to Allah.",
        "target": 33,
    },
    {
        "id": 2,
        "category": "Tasbeeh",
        "arabic": "الْحَمْدُ لِلَّهِ",
        "translation": "All praise is due to Allah.",
        "target": 33,
    },
    {
        "id": 3,
        "category": "Tasbeeh",
        "arabic": "اللهُ أَكْبَرُ",
        "translation": "Allah is the Greatest.",
        "target": 34,
    },
    {
        "id": 4,
        "category": "Morning",
        "arabic": "سُبْحَانَ اللهِ وَبِحَمْدِهِ",
        "translation": "Glory is to Allah and to Him is the praise.",
        "target": 100,
    },
    {
        "id": 5,
        "category": "Morning",
        "arabic": "لَا إِلَٰهَ إِلَّا اللهُ وَحْدَهُ لَا شَرِيكَ لَهُ، لَهُ الْمُلْكُ وَلَهُ الْحَمْدُ وَهُوَ عَلَى كُلِّ شَيْءٍ قَدِيرٌ",
        "translation": "None has the right to be worshipped but Allah alone, Who has no partner. "
                       "His is the dominion and His is the praise, and He is Able to do all things.",
        "target": 10,
    },
]


# ============================================================================
# Data Builder
# ============================================================================

class AzkarDataBuilder:
    """Builds category-indexed items from raw azkar records"""

    @staticmethod
    def build_categories(raw_azkar: List[Dict[str, Any]]) -> Dict[str, List[AzkarItem]]:
        """
        Group raw records by category, keeping their order

        Returns:
            category -> list of AzkarItem
        """
        categories: Dict[str, List[AzkarItem]] = {}

        for record in raw_azkar:
            item = AzkarItem(
                id=record['id'],
                category=record.get('category', DEFAULT_CATEGORY),
                arabic=record.get('arabic', ''),
                translation=record.get('translation', ''),
                note=record.get('note', ''),
                target=max(1, int(record.get('target', 1))),
            )
            categories.setdefault(item.category, []).append(item)

        return categories


# ============================================================================
# Store
# ============================================================================

class AzkarStore:
    """Current category/item selection and repetition counts"""

    def __init__(self, categories: Dict[str, List[AzkarItem]], category: Optional[str] = None):
        if not categories:
            raise ValueError("At least one azkar category is required")
        self.categories = categories
        self.counts: Dict[int, int] = {}
        self.current_category = ""
        self.current_index = 0
        self.set_category(category or next(iter(categories)))

    @property
    def items(self) -> List[AzkarItem]:
        return self.categories[self.current_category]

    @property
    def current_item(self) -> Optional[AzkarItem]:
        if not self.items:
            return None
        return self.items[self.current_index]

    def set_category(self, category: str):
        if category not in self.categories:
            raise KeyError(f"Unknown azkar category: {category}")
        self.current_category = category
        self.current_index = 0

    def next_item(self) -> bool:
        if self.current_index < len(self.items) - 1:
            self.current_index += 1
            return True
        return False

    def prev_item(self) -> bool:
        if self.current_index > 0:
            self.current_index -= 1
            return True
        return False

    def count_for(self, item: AzkarItem) -> int:
        return self.counts.get(item.id, 0)

    def increment_count(self) -> int:
        item = self.current_item
        if item is None:
            return 0
        self.counts[item.id] = self.count_for(item) + 1
        return self.counts[item.id]

    def is_target_reached(self, item: Optional[AzkarItem] = None) -> bool:
        item = item or self.current_item
        return item is not None and self.count_for(item) >= item.target

    def reset_current_count(self):
        item = self.current_item
        if item is not None:
            self.counts[item.id] = 0

    def reset_category_counts(self):
        for item in self.items:
            if item.id in self.counts:
                self.counts[item.id] = 0


# ============================================================================
# Tracker (store + session)
# ============================================================================

class AzkarTracker:
    """
    Counts completions from a RecitationSession and walks through the category

    The recognizer resends the whole segment transcript with every partial,
    so when the reference text changes mid-segment the words already heard
    are skipped until the segment is finalized.
    """

    def __init__(
        self,
        store: AzkarStore,
        session: Optional[RecitationSession] = None,
        on_request_stop: Optional[Callable[[], None]] = None
    ):
        self.store = store
        self.session = session or RecitationSession(auto_reset=True)
        self.session.on_complete = self._on_complete
        self.on_request_stop = on_request_stop
        self.category_finished = False
        self._segment_tokens = 0  # tokens in the latest result of the open segment
        self._segment_offset = 0  # leading tokens that belong to a previous zeker
        self.load_current_item()

    def load_current_item(self):
        item = self.store.current_item
        self._segment_offset = self._segment_tokens
        self.session.set_reference_text(item.arabic if item else "")

    def set_category(self, category: str):
        self.store.set_category(category)
        self.category_finished = False
        self.load_current_item()

    def next_item(self) -> bool:
        moved = self.store.next_item()
        if moved:
            self.load_current_item()
        return moved

    def prev_item(self) -> bool:
        moved = self.store.prev_item()
        if moved:
            self.category_finished = False
            self.load_current_item()
        return moved

    def on_transcript_segment(self, text: str, is_final: bool):
        tokens = tokenize_arabic_text(text or "")
        self._segment_tokens = len(tokens)

        if not self.category_finished:
            self.session.on_transcript_segment(" ".join(tokens[self._segment_offset:]), is_final)

        if is_final:
            self._segment_tokens = 0
            self._segment_offset = 0

    def attach(self, source):
        """Subscribe to a SegmentSource"""
        source.subscribe(self.on_transcript_segment)

    def _on_complete(self):
        item = self.store.current_item
        if item is None:
            return
        count = self.store.increment_count()
        logging.info(f"Zeker {item.id}: {count}/{item.target}")

        if count < item.target:
            return

        if self.next_item():
            logging.info(f"Target reached, moving to zeker {self.store.current_item.id}")
            return

        logging.info(f"Target reached, category '{self.store.current_category}' finished")
        self.category_finished = True
        if self.on_request_stop:
            self.on_request_stop()

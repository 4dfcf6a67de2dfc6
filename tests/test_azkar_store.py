from unittest.mock import Mock

import pytest

from azkar_tracker.asr_backend import ScriptedSegmentSource
from azkar_tracker.azkar_store import AzkarDataBuilder, AzkarItem, AzkarStore, AzkarTracker, DEFAULT_AZKAR
from azkar_tracker.session_manager import RecitationSession

RAW_AZKAR = [
    {"id": 1, "category": "Tasbeeh", "arabic": "سُبْحَانَ اللهِ", "target": 2},
    {"id": 2, "category": "Tasbeeh", "arabic": "الْحَمْدُ لِلَّهِ", "target": 2},
    {"id": 3, "category": "Evening", "arabic": "أَسْتَغْفِرُ اللهَ"},
]


@pytest.fixture
def store():
    return AzkarStore(AzkarDataBuilder.build_categories(RAW_AZKAR))


class TestAzkarDataBuilder:

    def test_groups_by_category_in_order(self):
        categories = AzkarDataBuilder.build_categories(RAW_AZKAR)

        assert list(categories) == ["Tasbeeh", "Evening"]
        assert [item.id for item in categories["Tasbeeh"]] == [1, 2]

    def test_defaults(self):
        categories = AzkarDataBuilder.build_categories([{"id": 9, "arabic": "الله أكبر", "target": 0}])

        item = categories["Tasbeeh"][0]
        assert item == AzkarItem(id=9, category="Tasbeeh", arabic="الله أكبر", target=1)

    def test_default_azkar(self):
        categories = AzkarDataBuilder.build_categories(DEFAULT_AZKAR)
        assert [item.target for item in categories["Tasbeeh"]] == [33, 33, 34]


class TestAzkarStore:

    def test_requires_categories(self):
        with pytest.raises(ValueError):
            AzkarStore({})

    def test_starts_on_first_category(self, store):
        assert store.current_category == "Tasbeeh"
        assert store.current_item.id == 1

    def test_set_category(self, store):
        store.next_item()
        store.set_category("Evening")

        assert store.current_index == 0
        assert store.current_item.id == 3

        with pytest.raises(KeyError):
            store.set_category("Unknown")

    def test_navigation_is_clamped(self, store):
        assert not store.prev_item()
        assert store.next_item()
        assert not store.next_item()
        assert store.current_item.id == 2
        assert store.prev_item()
        assert store.current_item.id == 1

    def test_counts(self, store):
        assert store.increment_count() == 1
        assert not store.is_target_reached()
        assert store.increment_count() == 2
        assert store.is_target_reached()

        store.reset_current_count()
        assert store.count_for(store.current_item) == 0

    def test_reset_category_counts(self, store):
        store.increment_count()
        store.next_item()
        store.increment_count()
        store.set_category("Evening")
        store.increment_count()
        store.set_category("Tasbeeh")

        store.reset_category_counts()

        assert store.counts == {1: 0, 2: 0, 3: 1}


class TestAzkarTracker:

    def test_loads_current_item(self, store):
        tracker = AzkarTracker(store)
        assert tracker.session.target_words == ["سبحان", "الله"]
        assert tracker.session.auto_reset is True

    def test_counts_completions_and_advances(self, store):
        tracker = AzkarTracker(store)

        tracker.on_transcript_segment("سبحان الله", True)
        assert store.counts == {1: 1}
        assert store.current_item.id == 1

        tracker.on_transcript_segment("سبحان الله", True)
        assert store.counts == {1: 2}
        assert store.current_item.id == 2
        assert tracker.session.target_words == ["الحمد", "لله"]

    def test_extra_repetitions_do_not_count_for_next_item(self, store):
        tracker = AzkarTracker(store)

        tracker.on_transcript_segment("سبحان الله سبحان الله سبحان الله", True)

        assert store.counts == {1: 2}
        assert store.current_item.id == 2
        assert tracker.session.highlight_index == 0

    def test_last_item_stays_selected(self, store):
        on_request_stop = Mock()
        tracker = AzkarTracker(store, on_request_stop=on_request_stop)
        tracker.set_category("Evening")

        tracker.on_transcript_segment("استغفر الله", True)

        assert store.counts == {3: 1}
        assert store.current_item.id == 3
        assert tracker.category_finished
        on_request_stop.assert_called_once()

    def test_finished_category_ignores_further_speech(self, store):
        on_request_stop = Mock()
        tracker = AzkarTracker(store, on_request_stop=on_request_stop)
        tracker.set_category("Evening")
        tracker.on_transcript_segment("استغفر الله", True)

        tracker.on_transcript_segment("استغفر الله", True)
        assert store.counts == {3: 1}
        on_request_stop.assert_called_once()

        tracker.set_category("Evening")
        tracker.on_transcript_segment("استغفر الله", True)
        assert store.counts == {3: 2}

    def test_growing_partial_after_switch_is_not_recounted(self, store):
        tracker = AzkarTracker(store)

        tracker.on_transcript_segment("سبحان الله سبحان الله", False)
        assert store.counts == {1: 2}
        assert store.current_item.id == 2

        tracker.on_transcript_segment("سبحان الله سبحان الله الحمد", False)
        assert store.counts == {1: 2}
        assert tracker.session.highlight_index == 1

        tracker.on_transcript_segment("سبحان الله سبحان الله الحمد لله", True)
        assert store.counts == {1: 2, 2: 1}

    def test_final_repeating_old_words_after_switch(self, store):
        tracker = AzkarTracker(store)

        tracker.on_transcript_segment("سبحان الله سبحان الله", False)
        tracker.on_transcript_segment("سبحان الله سبحان الله", True)
        assert store.counts == {1: 2}

        tracker.on_transcript_segment("الحمد لله", True)
        assert store.counts == {1: 2, 2: 1}

    def test_manual_navigation_mid_segment_skips_heard_words(self, store):
        tracker = AzkarTracker(store)
        tracker.on_transcript_segment("سبحان", False)

        tracker.next_item()
        tracker.on_transcript_segment("سبحان الحمد لله", False)

        assert store.counts == {2: 1}

    def test_manual_navigation_reloads_text(self, store):
        tracker = AzkarTracker(store)
        tracker.on_transcript_segment("سبحان", False)

        assert tracker.next_item()
        assert tracker.session.target_words == ["الحمد", "لله"]
        assert tracker.session.highlight_index == 0

        assert tracker.prev_item()
        assert tracker.session.target_words == ["سبحان", "الله"]

    def test_single_shot_session(self, store):
        session = RecitationSession(auto_reset=False)
        tracker = AzkarTracker(store, session)

        tracker.on_transcript_segment("سبحان الله سبحان الله", True)

        assert store.counts == {1: 1}

    def test_attach_to_source(self, store):
        tracker = AzkarTracker(store)
        source = ScriptedSegmentSource([
            ("سبحان", False),
            ("سبحان الله", False),
            ("سبحان الله", True),
            ("سبحان الله", True),
            ("الحمد لله", True),
        ])
        tracker.attach(source)

        assert source.run() == 5
        assert store.counts == {1: 2, 2: 1}
        assert store.current_item.id == 2

"""
Unit Tests for the music domain

- PlayableItem identity, cloning and position tracking
- EndReason and ResumeTarget value objects
- TrackQueue FIFO, uniqueness, shuffle and drain, including concurrent use
- GuildSession epoch bookkeeping
"""

import random
import threading
from collections import Counter

import pytest
from pydantic import ValidationError as PydanticValidationError

from desuu_prime.domain.music.entities import (
    GuildSession,
    PlayableItem,
    TrackQueue,
    format_ms,
)
from desuu_prime.domain.music.value_objects import (
    EndReason,
    Idle,
    InterruptedFor,
    PlaylistLoaded,
    ResumeTarget,
)
from desuu_prime.domain.shared.exceptions import BusinessRuleViolationError, ValidationError

from fakes import FakeBackend, make_item

# =============================================================================
# PlayableItem
# =============================================================================


class TestPlayableItem:
    def test_fresh_items_get_distinct_ids(self):
        a = make_item("Same")
        b = make_item("Same")
        assert a.id != b.id
        assert a != b

    def test_equality_is_by_id(self):
        item = make_item()
        same_id = make_item("Other title", id=item.id)
        assert item == same_id
        assert hash(item) == hash(same_id)

    def test_metadata_is_frozen(self):
        item = make_item()
        with pytest.raises(PydanticValidationError):
            item.title = "changed"

    def test_empty_title_rejected(self):
        with pytest.raises(PydanticValidationError):
            make_item("")

    def test_position_starts_at_start_position(self):
        item = make_item(start_position_ms=5_000)
        assert item.position_ms == 5_000

    def test_advance_position(self):
        item = make_item()
        assert item.advance_position(20) == 20
        assert item.advance_position(20) == 40
        assert item.position_ms == 40

    def test_clone_has_new_identity_and_rewinds(self):
        item = make_item()
        item.advance_position(1_000)

        clone = item.clone()

        assert clone.id != item.id
        assert clone.title == item.title
        assert clone.position_ms == 0
        assert item.position_ms == 1_000

    def test_clone_at_starts_at_position(self):
        item = make_item()
        clone = item.clone_at(42_000)
        assert clone.start_position_ms == 42_000
        assert clone.position_ms == 42_000
        assert clone.id != item.id

    def test_clone_at_clamps_to_duration(self):
        item = make_item(duration_ms=10_000)
        assert item.clone_at(99_000).start_position_ms == 10_000

    def test_clone_at_non_seekable_restarts(self):
        item = make_item(seekable=False, duration_ms=None)
        assert item.clone_at(30_000).start_position_ms == 0

    def test_clone_at_negative_raises(self):
        with pytest.raises(ValidationError) as exc_info:
            make_item().clone_at(-1)
        assert exc_info.value.field == "position_ms"

    def test_clone_position_is_independent(self):
        item = make_item()
        clone = item.clone_at(1_000)
        clone.advance_position(500)
        assert item.position_ms == 0
        assert clone.position_ms == 1_500

    @pytest.mark.parametrize(
        "duration_ms,seekable,expected",
        [
            (65_000, True, "1:05"),
            (3_725_000, True, "1:02:05"),
            (None, False, "Live"),
            (None, True, "Unknown"),
        ],
    )
    def test_duration_formatted(self, duration_ms, seekable, expected):
        item = make_item(duration_ms=duration_ms, seekable=seekable)
        assert item.duration_formatted == expected

    def test_display_title(self):
        assert make_item("Song", duration_ms=61_000).display_title == "Song [1:01]"
        assert make_item("Stream", duration_ms=None).display_title == "Stream"

    def test_format_ms(self):
        assert format_ms(0) == "0:00"
        assert format_ms(59_999) == "0:59"


# =============================================================================
# Value objects
# =============================================================================


class TestEndReason:
    @pytest.mark.parametrize(
        "reason,expected",
        [
            (EndReason.FINISHED, True),
            (EndReason.LOAD_FAILED, True),
            (EndReason.STOPPED, True),
            (EndReason.REPLACED, False),
            (EndReason.CLEANUP, False),
        ],
    )
    def test_may_start_next(self, reason, expected):
        assert reason.may_start_next is expected

    def test_str_is_value(self):
        assert str(EndReason.LOAD_FAILED) == "load_failed"


class TestResumeTarget:
    def test_empty_target(self):
        target = ResumeTarget()
        assert target.is_empty
        assert not target.should_resume

    def test_should_resume_until_skipped(self):
        target = ResumeTarget(item=make_item(), position_ms=1_000)
        assert target.should_resume
        skipped = target.mark_skipped()
        assert not skipped.should_resume
        assert skipped.item is target.item
        assert target.should_resume

    def test_at_and_cleared(self):
        target = ResumeTarget(item=make_item(), position_ms=1_000)
        assert target.at(2_000).position_ms == 2_000
        assert target.cleared().is_empty


class TestStates:
    def test_interrupted_pending_until_notification_known(self):
        assert InterruptedFor(notification=None).is_pending
        assert not InterruptedFor(notification=make_item("beep")).is_pending

    def test_state_names(self):
        assert Idle().name == "idle"
        assert InterruptedFor(notification=None).name == "interrupted"

    def test_playlist_first(self):
        items = (make_item("a"), make_item("b"))
        assert PlaylistLoaded(items=items).first is items[0]


# =============================================================================
# TrackQueue
# =============================================================================


class TestTrackQueue:
    def test_fifo_order(self):
        queue = TrackQueue()
        a, b, c = make_item("a"), make_item("b"), make_item("c")
        assert queue.enqueue(a) == 0
        assert queue.enqueue(b) == 1
        assert queue.enqueue(c) == 2

        assert [queue.dequeue_next() for _ in range(3)] == [a, b, c]
        assert queue.dequeue_next() is None

    def test_enqueue_all_returns_start_position(self):
        queue = TrackQueue([make_item("x")])
        assert queue.enqueue_all([make_item("a"), make_item("b")]) == 1
        assert len(queue) == 3

    def test_duplicate_enqueue_raises(self):
        queue = TrackQueue()
        item = make_item()
        queue.enqueue(item)
        with pytest.raises(BusinessRuleViolationError) as exc_info:
            queue.enqueue(item)
        assert exc_info.value.rule == "unique_queue_items"
        assert len(queue) == 1

    def test_enqueue_all_is_atomic_on_duplicate(self):
        queue = TrackQueue()
        a = make_item("a")
        with pytest.raises(BusinessRuleViolationError):
            queue.enqueue_all([a, make_item("b"), a])
        assert len(queue) == 0
        assert a not in queue

    def test_dequeued_item_can_be_requeued(self):
        queue = TrackQueue()
        item = make_item()
        queue.enqueue(item)
        queue.dequeue_next()
        assert item not in queue
        queue.enqueue(item)
        assert item in queue

    def test_contains_ignores_other_types(self):
        assert "not an item" not in TrackQueue()

    def test_drain_empties_and_returns_in_order(self):
        items = [make_item(str(i)) for i in range(4)]
        queue = TrackQueue(items)
        assert queue.drain() == items
        assert not queue
        assert queue.dequeue_next() is None

    def test_snapshot_is_a_copy(self):
        queue = TrackQueue([make_item("a")])
        snapshot = queue.snapshot()
        queue.enqueue(make_item("b"))
        assert len(snapshot) == 1

    def test_shuffle_preserves_items(self):
        items = [make_item(str(i)) for i in range(20)]
        queue = TrackQueue(items)

        assert queue.shuffle(random.Random(7)) == 20

        assert Counter(i.id for i in queue.snapshot()) == Counter(i.id for i in items)

    def test_shuffle_is_seedable(self):
        items = [make_item(str(i)) for i in range(10)]
        q1, q2 = TrackQueue(items), TrackQueue(items)
        q1.shuffle(random.Random(3))
        q2.shuffle(random.Random(3))
        assert q1.snapshot() == q2.snapshot()

    def test_shuffle_empty_queue(self):
        assert TrackQueue().shuffle() == 0

    def test_concurrent_shuffle_preserves_multiset(self):
        initial = [make_item(f"seed-{i}") for i in range(50)]
        queue = TrackQueue(initial)
        added = [[make_item(f"t{t}-{i}") for i in range(50)] for t in range(4)]
        dequeued: list[PlayableItem] = []
        dequeued_lock = threading.Lock()

        def producer(batch):
            for item in batch:
                queue.enqueue(item)

        def shuffler():
            for _ in range(200):
                queue.shuffle()

        def consumer():
            for _ in range(40):
                item = queue.dequeue_next()
                if item is not None:
                    with dequeued_lock:
                        dequeued.append(item)

        threads = [threading.Thread(target=producer, args=(b,)) for b in added]
        threads += [threading.Thread(target=shuffler) for _ in range(3)]
        threads += [threading.Thread(target=consumer) for _ in range(2)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        everything = initial + [i for batch in added for i in batch]
        remaining = list(queue.snapshot())
        assert Counter(i.id for i in remaining + dequeued) == Counter(i.id for i in everything)
        assert len({i.id for i in remaining}) == len(remaining)


# =============================================================================
# GuildSession
# =============================================================================


class TestGuildSession:
    def test_defaults(self):
        session = GuildSession(guild_id=1, backend=FakeBackend())
        assert isinstance(session.state, Idle)
        assert not session.queue
        assert session.epoch == 0

    def test_bump_epoch(self):
        session = GuildSession(guild_id=1, backend=FakeBackend())
        assert session.bump_epoch() == 1
        assert session.bump_epoch() == 2

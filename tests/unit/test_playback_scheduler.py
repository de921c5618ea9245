"""Unit tests for the playback pointer state machine."""

from __future__ import annotations

from pathlib import Path

import pytest

from scholarvoice.models.datatypes import AudioResource, TextChunk
from scholarvoice.pipeline import PlaybackScheduler, PointerEvent, SegmentStore


def _store_with_statuses(tmp_path: Path, ready: set[int], count: int = 3) -> SegmentStore:
    """Create a store whose segments in `ready` succeeded and the rest stay pending."""

    store = SegmentStore()
    run_id = store.open_run()
    store.populate(run_id, [TextChunk(title=f"S{i}", text=f"t{i}") for i in range(count)])
    for index in sorted(ready):
        store.mark_processing(run_id, index)
        store.record_translation(run_id, index, f"n{index}")
        path = tmp_path / f"{index}.wav"
        path.write_bytes(b"RIFF")
        store.mark_success(
            run_id,
            index,
            AudioResource(path=path, sample_rate_hz=24000, duration_seconds=1.0),
        )
    return store


def test_finished_event_advances_onto_pending_segment_without_skipping(tmp_path: Path) -> None:
    """Given [success, pending, success], finishing 0 points at 1 and waits there."""

    store = _store_with_statuses(tmp_path, ready={0, 2})
    scheduler = PlaybackScheduler(store)
    scheduler.select(0)

    assert scheduler.audible_segment() is store.get(0)
    assert scheduler.on_segment_finished(0) == 1
    assert scheduler.pointer == 1
    assert scheduler.is_waiting is True
    assert scheduler.audible_segment() is None


def test_pointer_becomes_idle_after_last_segment(tmp_path: Path) -> None:
    """Finishing the final segment should leave the scheduler idle."""

    store = _store_with_statuses(tmp_path, ready={0, 1, 2})
    scheduler = PlaybackScheduler(store)
    scheduler.select(2)

    assert scheduler.on_segment_finished(2) is None
    assert scheduler.pointer is None
    assert scheduler.is_waiting is False


def test_stale_finished_events_are_ignored(tmp_path: Path) -> None:
    """Finished events for a segment other than the pointer must not move it."""

    store = _store_with_statuses(tmp_path, ready={0, 1, 2})
    scheduler = PlaybackScheduler(store)
    scheduler.select(2)

    assert scheduler.on_segment_finished(0) == 2
    assert scheduler.pointer == 2


def test_select_is_unconditional_but_bounds_checked(tmp_path: Path) -> None:
    """Listeners may select pending segments but not indices outside the run."""

    store = _store_with_statuses(tmp_path, ready=set())
    scheduler = PlaybackScheduler(store)

    assert scheduler.select(1) == 1
    assert scheduler.is_waiting is True
    with pytest.raises(ValueError):
        scheduler.select(3)
    with pytest.raises(ValueError):
        scheduler.select(-1)


def test_auto_start_overrides_earlier_selection(tmp_path: Path) -> None:
    """Auto-start moves playback to its index whatever the listener chose."""

    store = _store_with_statuses(tmp_path, ready={0})
    scheduler = PlaybackScheduler(store)

    scheduler.select(2)
    scheduler.auto_start(0)
    assert scheduler.pointer == 0

    scheduler.reset()
    scheduler.auto_start(0)
    assert scheduler.pointer == 0



def test_pointer_changes_are_published(tmp_path: Path) -> None:
    """Each pointer move should publish one event with the previous value."""

    store = _store_with_statuses(tmp_path, ready={0, 1})
    events: list[PointerEvent] = []
    store.event_bus.subscribe(
        lambda event: events.append(event) if isinstance(event, PointerEvent) else None
    )
    scheduler = PlaybackScheduler(store)

    scheduler.select(0)
    scheduler.select(0)
    scheduler.on_segment_finished(0)
    scheduler.reset()

    assert [(event.previous, event.pointer) for event in events] == [
        (None, 0),
        (0, 1),
        (1, None),
    ]

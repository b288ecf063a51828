import random
import threading
from datetime import date

import pytest

from studymate.services.focus_service import (
    FOCUS_DURATION,
    MOTIVATIONAL_NUDGES,
    NUDGE_INTERVAL,
    FocusService,
    FocusTimer,
)
from studymate.utils.helpers import _compute_streak, _format_time

TODAY = date(2026, 10, 17)


@pytest.fixture
def focus(services):
    return FocusService(services["store"], services["ai"], rng=random.Random(3))


def test_start_gives_one_nudge():
    timer = FocusTimer()
    assert timer.start() == 1
    assert timer.is_active
    assert timer.start() == 0


def test_nudge_every_five_minutes():
    timer = FocusTimer()
    timer.start()
    assert timer.tick(NUDGE_INTERVAL - 1) == 0
    assert timer.tick(1) == 1
    assert timer.tick(2 * NUDGE_INTERVAL) == 2
    assert timer.remaining == FOCUS_DURATION - 3 * NUDGE_INTERVAL


def test_paused_timer_does_not_move():
    timer = FocusTimer()
    timer.start()
    timer.tick(60)
    timer.pause()
    assert timer.tick(120) == 0
    assert timer.remaining == FOCUS_DURATION - 60


def test_completion_stops_timer():
    timer = FocusTimer()
    timer.start()
    assert timer.tick(FOCUS_DURATION + 100) == 0
    assert timer.remaining == 0
    assert timer.is_complete and not timer.is_active
    assert timer.start() == 0

    timer.reset()
    assert timer.to_dict() == {
        "remaining": FOCUS_DURATION, "display": "25:00",
        "isActive": False, "isComplete": False, "sinceStart": 0,
    }


def test_timer_survives_round_trip_through_dict():
    timer = FocusTimer()
    timer.start()
    timer.tick(90)
    restored = FocusTimer.from_dict(timer.to_dict())
    assert restored.remaining == FOCUS_DURATION - 90
    assert restored.is_active
    assert FocusTimer.from_dict(None).remaining == FOCUS_DURATION


@pytest.mark.parametrize("seconds, expected", [(1500, "25:00"), (65, "01:05"), (0, "00:00"), (-5, "00:00")])
def test_format_time(seconds, expected):
    assert _format_time(seconds) == expected


@pytest.mark.parametrize("dates, expected", [
    (set(), 0),
    ({"2026-10-17", "2026-10-16", "2026-10-15"}, 3),
    ({"2026-10-16", "2026-10-15"}, 2),
    ({"2026-10-17", "2026-10-15"}, 1),
    ({"2026-10-14"}, 0),
])
def test_compute_streak(dates, expected):
    assert _compute_streak(dates, today=TODAY) == expected


def test_service_persists_timer(focus):
    started = focus.start("u1")
    assert started["timer"]["isActive"] is True
    assert started["nudges"][0] in MOTIVATIONAL_NUDGES

    ticked = focus.tick("u1", NUDGE_INTERVAL)
    assert ticked["timer"]["remaining"] == FOCUS_DURATION - NUDGE_INTERVAL
    assert len(ticked["nudges"]) == 1

    focus.pause("u1")
    assert focus.state("u1")["timer"]["isActive"] is False
    assert focus.reset("u1")["timer"]["remaining"] == FOCUS_DURATION


def test_completed_session_updates_streak(focus, services):
    store = services["store"]
    store.set("users/u1", {"uid": "u1", "studyStreak": 0})
    store.add("users/u1/focusSessions", {"durationSeconds": FOCUS_DURATION, "dateKey": "2026-10-16"})

    focus.start("u1")
    done = focus.tick("u1", FOCUS_DURATION, today=TODAY)
    assert done["timer"]["isComplete"] is True
    assert done["studyStreak"] == 2
    assert store.get("users/u1")["studyStreak"] == 2

    # further ticks on a finished timer record nothing
    again = focus.tick("u1", 10, today=TODAY)
    assert "studyStreak" not in again
    assert len(store.list("users/u1/focusSessions")) == 2


def test_ai_nudge(focus, fake_client):
    fake_client.reply({"message": "Keep that streak alive."})
    assert focus.nudge(use_ai=True) == "Keep that streak alive."


def test_concurrent_finishing_ticks_record_one_session(focus, services):
    store = services["store"]
    store.set("users/u2", {"uid": "u2", "studyStreak": 0})
    focus.start("u2")
    focus.tick("u2", FOCUS_DURATION - 10, today=TODAY)

    barrier = threading.Barrier(4)
    results = []

    def finish():
        barrier.wait()
        results.append(focus.tick("u2", 10, today=TODAY))

    threads = [threading.Thread(target=finish) for _ in range(4)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert sum("studyStreak" in r for r in results) == 1
    assert len(store.list("users/u2/focusSessions")) == 1
    assert store.get("users/u2")["studyStreak"] == 1

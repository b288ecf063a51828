import logging
import random

from studymate.services.data_service import SERVER_TIMESTAMP
from studymate.utils.helpers import _compute_streak, _format_time, _today_key

logger = logging.getLogger(__name__)

FOCUS_DURATION = 25 * 60  # 25 minutes
NUDGE_INTERVAL = 5 * 60  # 5 minutes
TIMERS = "focusTimers"

MOTIVATIONAL_NUDGES = [
    "Believe you can and you're halfway there.",
    "The secret to getting ahead is getting started.",
    "Don't watch the clock; do what it does. Keep going.",
    "The future depends on what you do today.",
    "You are capable of more than you know.",
    "Every expert was once a beginner. Keep learning.",
    "Push yourself, because no one else is going to do it for you.",
    "A little progress each day adds up to big results.",
    "Stay positive, work hard, make it happen.",
    "Success isn't overnight. It's when every day you get a little better than the day before.",
]


class FocusTimer:
    """Countdown for one focus session. Time only advances through ``tick``."""

    def __init__(self, remaining=FOCUS_DURATION, is_active=False, is_complete=False, since_start=0):
        self.remaining = remaining
        self.is_active = is_active
        self.is_complete = is_complete
        self.since_start = since_start

    def start(self):
        """Returns the number of nudges due, which is one when the timer actually starts."""
        if self.is_complete or self.is_active:
            return 0
        self.is_active = True
        self.since_start = 0
        return 1

    def pause(self):
        self.is_active = False

    def reset(self):
        self.remaining = FOCUS_DURATION
        self.is_active = False
        self.is_complete = False
        self.since_start = 0

    def tick(self, seconds):
        if not self.is_active or self.is_complete or seconds <= 0:
            return 0
        step = min(int(seconds), self.remaining)
        before = self.since_start
        self.since_start += step
        self.remaining -= step
        if self.remaining == 0:
            self.is_active = False
            self.is_complete = True
            return 0
        return self.since_start // NUDGE_INTERVAL - before // NUDGE_INTERVAL

    def to_dict(self):
        return {
            "remaining": self.remaining,
            "display": _format_time(self.remaining),
            "isActive": self.is_active,
            "isComplete": self.is_complete,
            "sinceStart": self.since_start,
        }

    @classmethod
    def from_dict(cls, data):
        if not data:
            return cls()
        return cls(
            remaining=int(data.get("remaining", FOCUS_DURATION)),
            is_active=bool(data.get("isActive")),
            is_complete=bool(data.get("isComplete")),
            since_start=int(data.get("sinceStart", 0)),
        )


class FocusService:
    def __init__(self, store, ai, rng=None):
        self.store = store
        self.ai = ai
        self.rng = rng or random.Random()

    def _timer_path(self, uid):
        return f"{TIMERS}/{uid}"

    def _load(self, uid):
        return FocusTimer.from_dict(self.store.get(self._timer_path(uid)))

    def _save(self, uid, timer):
        self.store.set(self._timer_path(uid), timer.to_dict())

    def nudge(self, use_ai=False):
        if use_ai:
            return self.ai.generate_motivation_nudge().message
        return self.rng.choice(MOTIVATIONAL_NUDGES)

    def _nudges(self, count, use_ai):
        return [self.nudge(use_ai) for _ in range(count)]

    def state(self, uid):
        return {"timer": self._load(uid).to_dict(), "nudges": []}

    def start(self, uid, use_ai=False):
        with self.store.transaction(TIMERS):
            timer = self._load(uid)
            due = timer.start()
            self._save(uid, timer)
        return {"timer": timer.to_dict(), "nudges": self._nudges(due, use_ai)}

    def pause(self, uid):
        with self.store.transaction(TIMERS):
            timer = self._load(uid)
            timer.pause()
            self._save(uid, timer)
        return {"timer": timer.to_dict(), "nudges": []}

    def reset(self, uid):
        with self.store.transaction(TIMERS):
            timer = self._load(uid)
            timer.reset()
            self._save(uid, timer)
        return {"timer": timer.to_dict(), "nudges": []}

    def tick(self, uid, seconds, use_ai=False, today=None):
        # only one caller may see the timer finish
        with self.store.transaction(TIMERS):
            timer = self._load(uid)
            was_complete = timer.is_complete
            due = timer.tick(seconds)
            self._save(uid, timer)
        out = {"timer": timer.to_dict(), "nudges": self._nudges(due, use_ai)}
        if timer.is_complete and not was_complete:
            out["studyStreak"] = self.record_session(uid, FOCUS_DURATION, today=today)
        return out

    def record_session(self, uid, duration, today=None):
        date_key = _today_key(today)
        self.store.add(f"users/{uid}/focusSessions", {
            "durationSeconds": duration,
            "dateKey": date_key,
            "completedAt": SERVER_TIMESTAMP,
        })
        streak = self.study_streak(uid, today=today)
        if self.store.exists(f"users/{uid}"):
            self.store.update(f"users/{uid}", {"studyStreak": streak})
        logger.info("Focus session completed for %s, streak now %d", uid, streak)
        return streak

    def study_streak(self, uid, today=None):
        sessions = self.store.list(f"users/{uid}/focusSessions")
        active_dates = {s.get("dateKey") for s in sessions if s.get("dateKey")}
        return _compute_streak(active_dates, today=today)

# timer.py
# Clock and countdown projection for presentation slots

import math
from datetime import datetime, timezone

from flask import current_app


def utcnow():
    """Naive UTC timestamp, the format stored in DateTime columns."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


class SystemClock:
    def now(self):
        return utcnow()


def current_clock():
    return current_app.extensions['clock']


def elapsed_seconds(started_at, now):
    """Whole seconds between started_at and now, never negative."""
    return max(0, math.floor((now - started_at).total_seconds()))


def remaining_seconds(slot, now):
    """
    Remaining time of a slot as seen at `now`.

    Only a running presentation (presenting, unpaused, with a start timestamp)
    is projected from the clock. In every other state the stored value is
    authoritative. Stored state is never touched here.
    """
    timer_running = (
        slot.status == 'presenting'
        and not slot.is_paused
        and slot.started_at is not None
    )
    if not timer_running:
        return max(0, slot.remaining_seconds)
    return max(0, slot.duration_seconds - elapsed_seconds(slot.started_at, now))

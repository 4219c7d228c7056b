# scheduler.py
# Deferred execution of named callbacks (auto-completion of presentations)

import threading
from dataclasses import dataclass, field
from datetime import timedelta

from flask import current_app

from timer import current_clock

_callbacks = {}


@dataclass(order=True)
class ScheduledCall:
    due_at: object
    name: str = field(compare=False)
    payload: dict = field(compare=False, default_factory=dict)


def dispatch(name, payload):
    """Invoke a registered callback. Must run inside an app context."""
    callback = _callbacks.get(name)
    if callback is None:
        current_app.logger.error('No deferred callback registered under %r', name)
        return None
    return callback(**payload)


class ThreadBackend:
    """In-process timers. Pending calls are lost on restart, see `flask reconcile-presentations`."""

    def __init__(self):
        self._timers = set()
        self._lock = threading.Lock()

    def schedule(self, app, delay_seconds, name, payload):
        timer = threading.Timer(delay_seconds, self._fire, args=(app, name, payload))
        timer.daemon = True
        with self._lock:
            self._timers.add(timer)
        timer.start()
        return timer

    def _fire(self, app, name, payload):
        with self._lock:
            self._timers.discard(threading.current_thread())
        with app.app_context():
            try:
                dispatch(name, payload)
            except Exception:
                app.logger.exception('Deferred callback %s failed with payload %r', name, payload)

    def shutdown(self):
        with self._lock:
            for timer in self._timers:
                timer.cancel()
            self._timers.clear()


class ManualBackend:
    """Keeps calls until run_due() is invoked. Due times follow the app clock."""

    def __init__(self):
        self.pending = []

    def schedule(self, app, delay_seconds, name, payload):
        call = ScheduledCall(
            due_at=current_clock().now() + timedelta(seconds=delay_seconds),
            name=name,
            payload=dict(payload),
        )
        self.pending.append(call)
        self.pending.sort()
        return call

    def run_due(self, now=None):
        now = now or current_clock().now()
        due = [call for call in self.pending if call.due_at <= now]
        self.pending = [call for call in self.pending if call.due_at > now]
        return [dispatch(call.name, call.payload) for call in due]


class DeferredScheduler:
    BACKENDS = {
        'thread': ThreadBackend,
        'manual': ManualBackend,
    }

    def init_app(self, app):
        backend_name = app.config.get('SCHEDULER_BACKEND', 'thread')
        try:
            backend = self.BACKENDS[backend_name]()
        except KeyError:
            raise ValueError(f'Unknown SCHEDULER_BACKEND: {backend_name}') from None
        app.extensions['deferred_scheduler'] = backend

    @property
    def backend(self):
        return current_app.extensions['deferred_scheduler']

    def task(self, name):
        """Register a function as a named deferred callback."""
        def decorator(f):
            _callbacks[name] = f
            return f
        return decorator

    def schedule_after(self, delay_seconds, name, payload):
        delay_seconds = max(0.0, float(delay_seconds))
        app = current_app._get_current_object()
        app.logger.debug('Scheduling %s in %.1fs with %r', name, delay_seconds, payload)
        return self.backend.schedule(app, delay_seconds, name, payload)

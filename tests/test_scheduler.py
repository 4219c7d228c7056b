import threading
from datetime import timedelta

import pytest
from flask import current_app

from app import create_app
from config import TestConfig
from conftest import START
from extensions import scheduler
from scheduler import ThreadBackend

calls = []
fired = threading.Event()


@scheduler.task('record_call')
def record_call(value):
    calls.append(value)
    return value


@scheduler.task('signal_fired')
def signal_fired():
    if current_app.config['TESTING']:
        fired.set()


@pytest.fixture(autouse=True)
def reset_calls():
    calls.clear()
    fired.clear()


def test_manual_backend_fires_only_due_calls(app, clock, deferred):
    scheduler.schedule_after(10, 'record_call', {'value': 'late'})
    scheduler.schedule_after(5, 'record_call', {'value': 'early'})
    assert [call.due_at for call in deferred.pending] == [START + timedelta(seconds=5), START + timedelta(seconds=10)]

    clock.advance(6)
    assert deferred.run_due() == ['early']
    assert calls == ['early']
    assert len(deferred.pending) == 1

    clock.advance(10)
    assert deferred.run_due() == ['late']
    assert deferred.pending == []


def test_negative_delay_fires_immediately(app, deferred):
    scheduler.schedule_after(-3, 'record_call', {'value': 'now'})
    assert deferred.run_due() == ['now']


def test_unknown_callback_is_logged_not_raised(app, deferred, caplog):
    scheduler.schedule_after(0, 'does_not_exist', {})
    assert deferred.run_due() == [None]
    assert 'does_not_exist' in caplog.text


def test_unknown_backend_is_rejected():
    class BadConfig(TestConfig):
        SCHEDULER_BACKEND = 'carrier-pigeon'

    with pytest.raises(ValueError):
        create_app(BadConfig)


def test_thread_backend_runs_callback_in_app_context():
    class ThreadConfig(TestConfig):
        SCHEDULER_BACKEND = 'thread'

    app = create_app(ThreadConfig)
    backend = app.extensions['deferred_scheduler']
    assert isinstance(backend, ThreadBackend)

    with app.app_context():
        scheduler.schedule_after(0.01, 'signal_fired', {})
    assert fired.wait(timeout=5)
    backend.shutdown()

from datetime import datetime, timedelta
from types import SimpleNamespace

import pytest

import judging
from app import create_app
from config import TestConfig
from extensions import db
from importer import StaticProjectSource
from models import Group, User

START = datetime(2025, 3, 1, 9, 0, 0)


class FakeClock:
    def __init__(self, start):
        self.current = start

    def now(self):
        return self.current

    def advance(self, seconds):
        self.current += timedelta(seconds=seconds)


def sample_projects(count):
    return [
        {'devpost_id': f'p{i}', 'name': f'Project {i}', 'devpost_url': f'https://devpost.com/software/p{i}', 'team_members': [f'Member {i}']}
        for i in range(1, count + 1)
    ]


def full_criteria(value=4):
    return {name: value for name in TestConfig.SCORING_CRITERIA}


@pytest.fixture
def app():
    app = create_app(TestConfig)
    app.extensions['clock'] = FakeClock(START)
    with app.app_context():
        db.create_all()
        yield app
        db.session.remove()
        db.drop_all()


@pytest.fixture
def clock(app):
    return app.extensions['clock']


@pytest.fixture
def deferred(app):
    return app.extensions['deferred_scheduler']


@pytest.fixture
def make_event(app):
    """Creates users, forms groups from sample projects and optionally starts judging."""
    def _make_event(mentors=1, judges=2, projects=3, active=True):
        director = User(code='000001', name='Director', role='director')
        mentor_users = [User(code=f'1{i:05d}', name=f'Mentor {i}', role='mentor') for i in range(1, mentors + 1)]
        judge_users = [User(code=f'2{i:05d}', name=f'Judge {i}', role='judge') for i in range(1, judges + 1)]
        db.session.add_all([director, *mentor_users, *judge_users])
        db.session.commit()

        result = judging.form_groups(director, StaticProjectSource(sample_projects(projects)))
        assert result.success, result.message
        if active:
            assert judging.begin_judging(director).success

        return SimpleNamespace(
            director=director,
            mentors=mentor_users,
            judges=judge_users,
            mentor=mentor_users[0] if mentor_users else None,
            group=db.session.get(Group, mentor_users[0].group_id) if mentor_users else None,
        )
    return _make_event


def assert_single_active(group):
    """The pointer and the slot statuses agree on what is presenting."""
    presenting = [slot for slot in group.presentations if slot.status == 'presenting']
    running = [slot for slot in presenting if not slot.is_paused]
    assert len(presenting) <= 1
    if running:
        assert group.currently_presenting == running[0].project_devpost_id
        assert running[0].started_at is not None
    else:
        assert group.currently_presenting is None
    for slot in group.presentations:
        if not slot.is_running:
            assert slot.started_at is None

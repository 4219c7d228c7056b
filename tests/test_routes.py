import pytest

from conftest import full_criteria, sample_projects
from extensions import db
from importer import StaticProjectSource


@pytest.fixture
def client(app):
    return app.test_client()


def login(client, user):
    response = client.post('/login', json={'code': user.code})
    assert response.status_code == 200
    return response


def test_login_with_unknown_code(client):
    response = client.post('/login', json={'code': '999999'})
    assert response.status_code == 401
    assert response.get_json()['success'] is False


def test_protected_routes_require_login(client):
    response = client.post('/presentations/p1/start')
    assert response.status_code == 401
    assert response.get_json()['code'] == 'unauthenticated'


def test_me_after_login(client, make_event):
    event = make_event()
    login(client, event.mentor)
    assert client.get('/me').get_json()['user']['name'] == 'Mentor 1'
    with client.session_transaction() as session:
        assert dict(session) == {'user_id': event.mentor.id}
    client.post('/logout')
    assert client.get('/me').status_code == 401


def test_mentor_presentation_flow(client, make_event, clock):
    event = make_event()
    login(client, event.mentor)

    response = client.post('/presentations/p1/start')
    assert response.status_code == 200
    assert response.get_json()['presentation']['status'] == 'presenting'

    conflict = client.post('/presentations/p2/start')
    assert conflict.status_code == 409
    assert conflict.get_json()['code'] == 'another_presentation_active'

    clock.advance(60)
    paused = client.post('/presentations/p1/pause').get_json()
    assert paused['presentation']['timer_state']['remaining_seconds'] == 240

    assert client.post('/presentations/p1/resume').status_code == 200
    stopped = client.post('/presentations/p1/stop').get_json()
    assert stopped['presentation']['status'] == 'completed'

    listing = client.get('/presentations').get_json()
    assert [slot['status'] for slot in listing['presentations']] == ['completed', 'upcoming', 'upcoming']

    gate = client.get('/presentations/incomplete-scores').get_json()
    assert gate['has_incomplete_scores'] is True
    assert client.post('/presentations/p2/start').status_code == 409


def test_judge_cannot_control_presentations(client, make_event):
    event = make_event()
    login(client, event.judges[0])
    response = client.post('/presentations/p1/start')
    assert response.status_code == 403
    assert response.get_json()['code'] == 'wrong_role'


def test_judge_scores_presented_project(client, make_event):
    event = make_event()
    with client.session_transaction() as session:
        session['user_id'] = event.mentor.id
    client.post('/presentations/p1/start')
    client.post('/presentations/p1/stop')

    login(client, event.judges[0])
    assert client.get('/presentations/current').get_json()['project_name'] is None
    response = client.post('/projects/p1/score', json={'criteria': full_criteria()})
    assert response.status_code == 200
    assert len(client.get('/scores/mine').get_json()['scores']) == 1
    assert len(client.get('/projects').get_json()['projects']) == 3

    bad = client.post('/projects/p1/score', json={'criteria': {'design': 1}})
    assert bad.status_code == 400

    for literal in ('NaN', 'Infinity'):
        body = '{"criteria": {' + ', '.join(f'"{name}": {literal}' for name in full_criteria()) + '}}'
        response = client.post('/projects/p1/score', data=body, content_type='application/json')
        assert response.status_code == 400
        assert response.get_json()['code'] == 'invalid_score'


def test_director_forms_groups_and_toggles_judging(client, app, make_event):
    event = make_event(active=False)
    app.extensions['project_source'] = StaticProjectSource(sample_projects(4))
    login(client, event.director)

    response = client.post('/admin/groups')
    assert response.status_code == 200
    assert len(response.get_json()['groups']) == 1
    assert len(client.get('/admin/groups').get_json()['groups'][0]['presentations']) == 4

    assert client.post('/admin/judging/begin').status_code == 200
    assert client.get('/judging/status').get_json() == {'active': True}
    assert client.post('/admin/judging/end').status_code == 200
    assert client.get('/judging/status').get_json() == {'active': False}

    overview = client.get('/admin/presentations').get_json()
    assert overview['groups'][0]['total_projects'] == 4
    assert client.get('/admin/scores').status_code == 200


def test_director_manages_users(client, make_event):
    event = make_event()
    login(client, event.director)

    created = client.post('/admin/users', json={'code': '300001', 'role': 'judge', 'name': 'Late Judge'})
    assert created.status_code == 200
    users = client.get('/admin/users').get_json()['users']
    assert 'Late Judge' in [user['name'] for user in users]


def test_non_director_cannot_form_groups(client, make_event):
    event = make_event()
    login(client, event.mentor)
    assert client.post('/admin/groups').status_code == 403


def test_server_time(client, clock):
    assert client.get('/time').get_json() == {'now': clock.now().isoformat()}


def test_unknown_route_returns_json(client):
    response = client.get('/nowhere')
    assert response.status_code == 404
    assert response.get_json()['success'] is False

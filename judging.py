# judging.py
# Group formation, the event-wide judging switch and score submission

import math
from datetime import timedelta
from numbers import Number

from flask import current_app
from sqlalchemy.exc import IntegrityError

from errors import (
    ActionResult,
    InvalidScore,
    JudgingError,
    NoEligibleMembers,
    NotFound,
    judging_action,
    require_role,
)
from extensions import db
from importer import import_projects
from logic import partition
from models import Group, JudgingStatus, PresentationSlot, Project, Score, User
from models.user import ROLES
from timer import current_clock


# --- Group formation ---

def remove_all_groups():
    """Deletes groups, slots, projects and scores and clears users' group references."""
    Score.query.delete()
    PresentationSlot.query.delete()
    Project.query.delete()
    User.query.filter(User.group_id.isnot(None)).update({User.group_id: None})
    Group.query.delete()


def build_presentations(projects, start, duration_minutes):
    """Upcoming slots in the given order, spaced one duration apart from `start`."""
    return [
        PresentationSlot(
            slot_order=index,
            project_devpost_id=project.devpost_id,
            project_name=project.name,
            scheduled_start=start + timedelta(minutes=index * duration_minutes),
            duration_minutes=duration_minutes,
            status='upcoming',
            remaining_seconds=duration_minutes * 60,
            is_paused=False,
            started_at=None,
        )
        for index, project in enumerate(projects)
    ]


@judging_action('creating groups')
def form_groups(user, project_source=None):
    """
    Recreates every group from scratch.

    Judges and imported projects are dealt round-robin over the mentors,
    independently of each other. Each step is committed on its own; on a
    failure the director is expected to run the whole thing again.
    """
    require_role(user, 'director')

    # 1. Preconditions, checked before anything is modified
    non_directors = User.query.filter(User.role != 'director').order_by(User.id).all()
    if not non_directors:
        raise NoEligibleMembers('There are no judges or mentors in the system. Please have them log in to the app.')
    mentors = [u for u in non_directors if u.role == 'mentor']
    judges = [u for u in non_directors if u.role == 'judge']
    if not mentors:
        raise NoEligibleMembers('There are no mentors registered. Please have them log in to the app.')
    if not judges:
        raise NoEligibleMembers('There are no judges registered. Please have them log in to the app.')

    # 2. Tear down the previous distribution
    remove_all_groups()
    db.session.commit()
    current_app.logger.info('Removed previous groups, projects and scores')

    # 3. One group per mentor with its share of judges
    groups = []
    for mentor, assigned_judges in zip(mentors, partition(judges, len(mentors))):
        group = Group(mentor_id=mentor.id)
        db.session.add(group)
        db.session.flush()
        mentor.group_id = group.id
        for judge in assigned_judges:
            judge.group_id = group.id
        groups.append(group)
    db.session.commit()

    # 4. Import projects; the groups stay without projects if this fails
    imported = import_projects(project_source)

    # 5. Deal projects over the groups and build their presentation order
    now = current_clock().now()
    duration = current_app.config['PRESENTATION_DURATION_MINUTES']
    for group, assigned_projects in zip(groups, partition(imported, len(mentors))):
        for item in assigned_projects:
            db.session.add(Project(
                devpost_id=item.devpost_id,
                name=item.name,
                devpost_url=item.devpost_url,
                team_members=item.team_members,
                has_presented=False,
                group_id=group.id,
            ))
        group.presentations = build_presentations(assigned_projects, now, duration)
    db.session.commit()

    current_app.logger.info(
        'Formed %d groups with %d judges and %d projects', len(groups), len(judges), len(imported)
    )
    return ActionResult.ok(
        'Groups created and projects assigned.',
        groups=[group.to_dict() for group in groups],
    )


@judging_action('getting groups')
def get_groups(user):
    require_role(user, 'director', 'mentor')
    now = current_clock().now()
    groups = Group.query.order_by(Group.id).all()
    return ActionResult.ok('Groups retrieved.', groups=[group.to_dict(now) for group in groups])


# --- Judging status ---

@judging_action('starting judging')
def begin_judging(user):
    require_role(user, 'director')
    if Group.query.count() == 0:
        raise JudgingError('Please create the judge groups before starting judging.')
    JudgingStatus.current().active = True
    db.session.commit()
    current_app.logger.info('Judging started by %s', user.display_name)
    return ActionResult.ok('Judging has begun.', active=True)


@judging_action('ending judging')
def end_judging(user):
    require_role(user, 'director')
    JudgingStatus.current().active = False
    db.session.commit()
    current_app.logger.info('Judging ended by %s', user.display_name)
    return ActionResult.ok('Judging has ended.', active=False)


def get_judging_status():
    return {'active': JudgingStatus.is_active()}


# --- Scores ---

def validate_criteria(criteria):
    if not isinstance(criteria, dict) or not criteria:
        raise InvalidScore('Scores must be given per criterion.')

    expected = current_app.config['SCORING_CRITERIA']
    score_max = current_app.config['SCORE_MAX']
    missing = [name for name in expected if name not in criteria]
    if missing:
        raise InvalidScore(f'Missing scores for: {", ".join(missing)}.')
    unknown = [name for name in criteria if name not in expected]
    if unknown:
        raise InvalidScore(f'Unknown criteria: {", ".join(unknown)}.')

    cleaned = {}
    for name in expected:
        value = criteria[name]
        if (
            isinstance(value, bool)
            or not isinstance(value, Number)
            or not math.isfinite(value)
            or int(value) != value
        ):
            raise InvalidScore(f'Score for {name} must be a whole number.')
        if not 0 <= value <= score_max:
            raise InvalidScore(f'Score for {name} must be between 0 and {score_max}.')
        cleaned[name] = int(value)
    return cleaned


@judging_action('submitting score')
def submit_score(user, project_devpost_id, criteria):
    require_role(user, 'judge')
    project = Project.query.filter_by(devpost_id=project_devpost_id).first()
    if project is None:
        raise NotFound('This project does not exist.')
    if project.group_id != user.group_id:
        raise NotFound('This project is not assigned to your group.')
    if not project.has_presented:
        raise InvalidScore(
            "Cannot score a project that hasn't presented yet. Please wait for the presentation to finish."
        )

    cleaned = validate_criteria(criteria)
    score = Score.query.filter_by(project_id=project.id, judge_id=user.id).first()
    if score:
        score.criteria = cleaned
    else:
        db.session.add(Score(project_id=project.id, judge_id=user.id, criteria=cleaned))
    db.session.commit()

    current_app.logger.info('Judge %s scored %s', user.id, project.devpost_id)
    return ActionResult.ok('Successfully submitted score.')


@judging_action('getting group projects')
def get_group_projects(user):
    require_role(user, 'mentor', 'judge')
    if not user.group_id:
        raise NotFound('You have not been assigned any projects.')
    projects = Project.query.filter_by(group_id=user.group_id).order_by(Project.id).all()
    return ActionResult.ok(
        f"Successfully retrieved projects for {user.display_name}'s group.",
        projects=[project.to_dict() for project in projects],
    )


@judging_action('getting scores')
def get_my_scores(user):
    require_role(user, 'judge')
    scores = Score.query.filter_by(judge_id=user.id).order_by(Score.id).all()
    return ActionResult.ok('Scores retrieved.', scores=[score.to_dict() for score in scores])


@judging_action('getting scores')
def get_all_scores(user):
    require_role(user, 'director')
    projects = Project.query.order_by(Project.id).all()
    return ActionResult.ok('Scores retrieved.', projects=[project.to_dict(with_scores=True) for project in projects])


# --- Users ---

@judging_action('creating user')
def create_user(user, code, role, name=None, email=None):
    require_role(user, 'director')
    if not code or not role:
        raise JudgingError('Code and role are required.')
    if role not in ROLES:
        raise JudgingError(f'Unknown role: {role}.')

    new_user = User(code=code, role=role, name=name, email=email)
    db.session.add(new_user)
    try:
        db.session.commit()
    except IntegrityError:
        raise JudgingError(f'A user with code {code} or this email already exists.') from None

    current_app.logger.info('User %s (%s) created', new_user.display_name, role)
    return ActionResult.ok(f'User {name or code} created.', user=new_user.to_dict())


@judging_action('listing users')
def list_users(user):
    require_role(user, 'director')
    users = User.query.order_by(User.created_at.desc(), User.id.desc()).all()
    return ActionResult.ok('Users retrieved.', users=[u.to_dict() for u in users])

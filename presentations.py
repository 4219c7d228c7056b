# presentations.py
# Presentation lifecycle: upcoming -> presenting (running / paused) -> completed

from datetime import timedelta

from flask import current_app
from sqlalchemy.orm.exc import StaleDataError

from errors import (
    ActionResult,
    AnotherPresentationActive,
    ConcurrentChange,
    IncompleteScores,
    InvalidTransition,
    JudgingNotActive,
    NotFound,
    judging_action,
    require_role,
)
from extensions import db, scheduler
from logic import check_incomplete_scores
from models import Group, JudgingStatus, Project, User
from timer import current_clock, elapsed_seconds, remaining_seconds

AUTO_COMPLETE_TASK = 'auto_complete_presentation'


# --- Helpers ---

def _load_mentor_group(user):
    """Role, group and judging-status checks shared by every mentor command."""
    require_role(user, 'mentor')
    if not user.group_id:
        raise NotFound('You are not assigned any judges.')
    if not JudgingStatus.is_active():
        raise JudgingNotActive()

    # Row lock where the store supports one; the version counter catches the rest
    group = Group.query.filter_by(id=user.group_id).with_for_update().first()
    if group is None:
        raise NotFound('Your group could not be found in the system.')
    return group


def _find_slot(group, project_devpost_id):
    slot = group.find_slot(project_devpost_id)
    if slot is None:
        raise NotFound('The project could not be found in your group.')
    return slot


def _find_project(project_devpost_id):
    project = Project.query.filter_by(devpost_id=project_devpost_id).first()
    if project is None:
        raise NotFound('The project could not be found in the system.')
    return project


def _ensure_no_other_presentation(group, slot):
    if group.currently_presenting and group.currently_presenting != slot.project_devpost_id:
        presenting = group.find_slot(group.currently_presenting)
        presenting_name = presenting.project_name if presenting else group.currently_presenting
        raise AnotherPresentationActive(
            f'Cannot start presentation for {slot.project_name}. {presenting_name} is currently presenting.',
            presenting_project=presenting_name,
        )
    # A paused presentation still holds the group
    for other in group.presenting_slots():
        if other is not slot:
            raise AnotherPresentationActive(
                f'Cannot start presentation for {slot.project_name}. '
                f'{other.project_name} is paused and must be resumed or stopped first.',
                presenting_project=other.project_name,
            )


def _ensure_scores_complete(group):
    report = check_incomplete_scores(group)
    if report.has_incomplete_scores:
        raise IncompleteScores(report.describe(), incomplete_projects=report.incomplete_projects)


def _commit_transition(group, now):
    """Commits a transition, failing if another request changed the group since it was loaded."""
    group.last_transition_at = now
    try:
        db.session.commit()
    except StaleDataError:
        db.session.rollback()
        raise ConcurrentChange() from None


def _schedule_completion(group, slot, delay_seconds):
    slack = current_app.config['AUTO_COMPLETE_SLACK_SECONDS']
    scheduler.schedule_after(
        max(0, delay_seconds + slack),
        AUTO_COMPLETE_TASK,
        {'group_id': group.id, 'project_devpost_id': slot.project_devpost_id},
    )


def _complete(group, slot, completed_by):
    slot.status = 'completed'
    slot.remaining_seconds = 0
    slot.is_paused = True
    slot.started_at = None
    slot.completed_by = completed_by
    if group.currently_presenting == slot.project_devpost_id:
        group.currently_presenting = None

    project = Project.query.filter_by(devpost_id=slot.project_devpost_id).first()
    if project is not None:
        project.has_presented = True
    else:
        current_app.logger.error('Project %s of group %s is missing', slot.project_devpost_id, group.id)


# --- Mentor commands ---

@judging_action('starting presentation')
def start_presentation(user, project_devpost_id):
    group = _load_mentor_group(user)
    _find_project(project_devpost_id)
    slot = _find_slot(group, project_devpost_id)

    if slot.status == 'completed':
        raise InvalidTransition(f'{slot.project_name} has already presented.')
    if slot.status != 'upcoming':
        raise InvalidTransition(f'{slot.project_name} is already presenting.')
    _ensure_no_other_presentation(group, slot)
    _ensure_scores_complete(group)

    now = current_clock().now()
    slot.status = 'presenting'
    slot.is_paused = False
    slot.started_at = now
    slot.remaining_seconds = slot.duration_seconds
    group.currently_presenting = slot.project_devpost_id
    _commit_transition(group, now)

    _schedule_completion(group, slot, slot.duration_seconds)
    current_app.logger.info('Group %s: presentation of %s started', group.id, slot.project_devpost_id)
    return ActionResult.ok(f'Presentation for {slot.project_name} started.', presentation=slot.to_dict(now))


@judging_action('pausing presentation')
def pause_presentation(user, project_devpost_id):
    group = _load_mentor_group(user)
    slot = _find_slot(group, project_devpost_id)

    if slot.status != 'presenting':
        raise InvalidTransition(f'{slot.project_name} is not presenting.')
    if slot.is_paused:
        raise InvalidTransition(f'Presentation for {slot.project_name} is already paused.')

    now = current_clock().now()
    slot.remaining_seconds = remaining_seconds(slot, now)
    slot.is_paused = True
    slot.started_at = None
    if group.currently_presenting == slot.project_devpost_id:
        group.currently_presenting = None
    _commit_transition(group, now)

    current_app.logger.info(
        'Group %s: presentation of %s paused with %ss left', group.id, slot.project_devpost_id, slot.remaining_seconds
    )
    return ActionResult.ok(f'Presentation for {slot.project_name} paused.', presentation=slot.to_dict(now))


@judging_action('resuming presentation')
def resume_presentation(user, project_devpost_id):
    group = _load_mentor_group(user)
    slot = _find_slot(group, project_devpost_id)

    if slot.status != 'presenting' or not slot.is_paused:
        raise InvalidTransition(f'Presentation for {slot.project_name} is not paused.')
    _ensure_no_other_presentation(group, slot)
    _ensure_scores_complete(group)

    now = current_clock().now()
    # Backdate the start so the elapsed-time projection yields the frozen remainder
    already_elapsed = slot.duration_seconds - slot.remaining_seconds
    slot.started_at = now - timedelta(seconds=already_elapsed)
    slot.is_paused = False
    group.currently_presenting = slot.project_devpost_id
    _commit_transition(group, now)

    _schedule_completion(group, slot, slot.remaining_seconds)
    current_app.logger.info('Group %s: presentation of %s resumed', group.id, slot.project_devpost_id)
    return ActionResult.ok(f'Presentation for {slot.project_name} resumed.', presentation=slot.to_dict(now))


@judging_action('ending presentation')
def stop_presentation(user, project_devpost_id):
    group = _load_mentor_group(user)
    _find_project(project_devpost_id)
    slot = _find_slot(group, project_devpost_id)

    if slot.status != 'presenting':
        raise InvalidTransition(f'{slot.project_name} is not presenting.')

    _complete(group, slot, completed_by='mentor')
    _commit_transition(group, current_clock().now())

    current_app.logger.info('Group %s: presentation of %s stopped by mentor', group.id, slot.project_devpost_id)
    return ActionResult.ok(
        f'Presentation ended. Please tell your judges to submit scores for {slot.project_name}.',
        presentation=slot.to_dict(),
    )


# --- System callback ---

@scheduler.task(AUTO_COMPLETE_TASK)
def auto_complete_presentation(group_id, project_devpost_id):
    """
    Completes a presentation whose time ran out.

    Fired by the deferred scheduler, possibly late or more than once. Every
    precondition is re-checked against the stored state, and a callback that
    no longer applies returns False without changing anything.
    """
    group = Group.query.filter_by(id=group_id).with_for_update().first()
    if group is None:
        current_app.logger.debug('Auto-complete: group %s no longer exists', group_id)
        return False

    slot = group.find_slot(project_devpost_id)
    if slot is None or not slot.is_running or slot.started_at is None:
        current_app.logger.debug('Auto-complete: %s in group %s is not running, skipping', project_devpost_id, group_id)
        db.session.rollback()
        return False

    now = current_clock().now()
    left = slot.duration_seconds - elapsed_seconds(slot.started_at, now)
    if left > current_app.config['AUTO_COMPLETE_TOLERANCE_SECONDS']:
        current_app.logger.debug('Auto-complete: %s in group %s has %ss left, skipping', project_devpost_id, group_id, left)
        db.session.rollback()
        return False

    _complete(group, slot, completed_by='system')
    group.last_transition_at = now
    try:
        db.session.commit()
    except StaleDataError:
        db.session.rollback()
        current_app.logger.debug('Auto-complete: group %s changed concurrently, skipping', group_id)
        return False
    current_app.logger.info('Group %s: presentation of %s completed automatically', group_id, project_devpost_id)
    return True


def reconcile_presentations():
    """
    Restart recovery: completes running presentations that are overdue and
    schedules completion for the ones still running.
    """
    now = current_clock().now()
    tolerance = current_app.config['AUTO_COMPLETE_TOLERANCE_SECONDS']
    completed = rescheduled = 0

    for group in Group.query.filter(Group.currently_presenting.isnot(None)).all():
        slot = group.find_slot(group.currently_presenting)
        if slot is None or not slot.is_running:
            current_app.logger.warning('Group %s points at %s which is not running', group.id, group.currently_presenting)
            continue
        left = remaining_seconds(slot, now)
        if left <= tolerance:
            if auto_complete_presentation(group.id, slot.project_devpost_id):
                completed += 1
        else:
            _schedule_completion(group, slot, left)
            rescheduled += 1

    current_app.logger.info('Reconciled presentations: %d completed, %d rescheduled', completed, rescheduled)
    return completed, rescheduled


# --- Queries ---

@judging_action('checking scores')
def get_incomplete_scores(user):
    require_role(user, 'mentor')
    group = db.session.get(Group, user.group_id) if user.group_id else None
    if group is None:
        raise NotFound('Your group could not be found in the system.')
    report = check_incomplete_scores(group)
    return ActionResult.ok('Scores checked.', **report.to_dict())


@judging_action('getting presentations')
def get_group_presentations(user):
    require_role(user, 'mentor')
    group = db.session.get(Group, user.group_id) if user.group_id else None
    if group is None:
        raise NotFound('You are not assigned any judges.')
    now = current_clock().now()
    return ActionResult.ok(
        'Presentations retrieved.',
        currently_presenting=group.currently_presenting,
        presentations=[slot.to_dict(now) for slot in group.presentations],
    )


@judging_action('getting presentation status')
def get_all_groups_presentation_status(user):
    require_role(user, 'director')

    statuses = []
    for mentor in User.query.filter_by(role='mentor').order_by(User.id).all():
        group = db.session.get(Group, mentor.group_id) if mentor.group_id else None
        if group is None:
            statuses.append({
                'mentor_name': mentor.display_name,
                'total_projects': 0,
                'presented_projects': 0,
                'currently_presenting': None,
                'all_complete': False,
            })
            continue

        total = len(group.presentations)
        presented = sum(1 for slot in group.presentations if slot.status == 'completed')
        current = next((slot for slot in group.presentations if slot.status == 'presenting'), None)
        statuses.append({
            'mentor_name': mentor.display_name,
            'total_projects': total,
            'presented_projects': presented,
            'currently_presenting': current.project_name if current else None,
            'all_complete': total > 0 and presented == total,
        })

    return ActionResult.ok(
        'Presentation status retrieved.',
        groups=statuses,
        all_groups_complete=all(status['all_complete'] for status in statuses),
    )


@judging_action('getting the presenting project')
def get_group_project_presenting(user):
    require_role(user, 'judge')
    group = db.session.get(Group, user.group_id) if user.group_id else None
    if group is None:
        raise NotFound('You have not been assigned to a group.')
    project_name = None
    if group.currently_presenting:
        project = Project.query.filter_by(devpost_id=group.currently_presenting).first()
        project_name = project.name if project else None
    return ActionResult.ok('Presenting project retrieved.', project_name=project_name)

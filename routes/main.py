# routes/main.py
# Mentor presentation controls and judge scoring

from flask import Blueprint, jsonify, request

import judging
import presentations
from routes import respond
from routes.auth import current_user, login_required
from timer import current_clock

main_bp = Blueprint('main', __name__)


@main_bp.route('/time')
def server_time():
    # Clients sync their countdown against this
    return jsonify({'now': current_clock().now().isoformat()})


@main_bp.route('/judging/status')
def judging_status():
    return jsonify(judging.get_judging_status())


# --- Presentations (mentor) ---

@main_bp.route('/presentations')
@login_required
def group_presentations():
    return respond(presentations.get_group_presentations(current_user()))


@main_bp.route('/presentations/<project_devpost_id>/start', methods=['POST'])
@login_required
def start_presentation(project_devpost_id):
    return respond(presentations.start_presentation(current_user(), project_devpost_id))


@main_bp.route('/presentations/<project_devpost_id>/pause', methods=['POST'])
@login_required
def pause_presentation(project_devpost_id):
    return respond(presentations.pause_presentation(current_user(), project_devpost_id))


@main_bp.route('/presentations/<project_devpost_id>/resume', methods=['POST'])
@login_required
def resume_presentation(project_devpost_id):
    return respond(presentations.resume_presentation(current_user(), project_devpost_id))


@main_bp.route('/presentations/<project_devpost_id>/stop', methods=['POST'])
@login_required
def stop_presentation(project_devpost_id):
    return respond(presentations.stop_presentation(current_user(), project_devpost_id))


@main_bp.route('/presentations/incomplete-scores')
@login_required
def incomplete_scores():
    return respond(presentations.get_incomplete_scores(current_user()))


@main_bp.route('/presentations/current')
@login_required
def current_presentation():
    return respond(presentations.get_group_project_presenting(current_user()))


# --- Projects and scores ---

@main_bp.route('/projects')
@login_required
def group_projects():
    return respond(judging.get_group_projects(current_user()))


@main_bp.route('/projects/<project_devpost_id>/score', methods=['POST'])
@login_required
def submit_score(project_devpost_id):
    payload = request.get_json(silent=True) or {}
    return respond(judging.submit_score(current_user(), project_devpost_id, payload.get('criteria')))


@main_bp.route('/scores/mine')
@login_required
def my_scores():
    return respond(judging.get_my_scores(current_user()))

# routes/admin.py
# Director controls: users, groups and the judging switch

from flask import Blueprint, request

import judging
import presentations
from routes import respond
from routes.auth import current_user, login_required

admin_bp = Blueprint('admin', __name__, url_prefix='/admin')


@admin_bp.route('/users', methods=['GET', 'POST'])
@login_required
def manage_users():
    if request.method == 'POST':
        payload = request.get_json(silent=True) or request.form
        return respond(judging.create_user(
            current_user(),
            code=payload.get('code'),
            role=payload.get('role'),
            name=payload.get('name'),
            email=payload.get('email'),
        ))
    return respond(judging.list_users(current_user()))


@admin_bp.route('/groups', methods=['GET', 'POST'])
@login_required
def manage_groups():
    if request.method == 'POST':
        # Destructive: replaces every group, project and score
        return respond(judging.form_groups(current_user()))
    return respond(judging.get_groups(current_user()))


@admin_bp.route('/judging/begin', methods=['POST'])
@login_required
def begin_judging():
    return respond(judging.begin_judging(current_user()))


@admin_bp.route('/judging/end', methods=['POST'])
@login_required
def end_judging():
    return respond(judging.end_judging(current_user()))


@admin_bp.route('/presentations')
@login_required
def presentation_status():
    return respond(presentations.get_all_groups_presentation_status(current_user()))


@admin_bp.route('/scores')
@login_required
def all_scores():
    return respond(judging.get_all_scores(current_user()))

# routes/auth.py
# Login with a personal access code

from functools import wraps

from flask import Blueprint, request, session, jsonify
from extensions import db
from errors import NO_AUTH_MSG
from models import User

auth_bp = Blueprint('auth', __name__)


def current_user():
    """The logged-in user, or None. Role claims are re-checked by every operation."""
    user_id = session.get('user_id')
    if user_id is None:
        return None
    user = db.session.get(User, user_id)
    if user is None:
        # The account was removed after login
        session.clear()
    return user


def login_required(f):
    @wraps(f)
    def decorated_function(*args, **kwargs):
        if current_user() is None:
            return jsonify({'success': False, 'code': 'unauthenticated', 'message': NO_AUTH_MSG}), 401
        return f(*args, **kwargs)
    return decorated_function


@auth_bp.route('/login', methods=['POST'])
def login():
    payload = request.get_json(silent=True) or request.form
    user_code = payload.get('code')
    if not user_code:
        return jsonify({'success': False, 'message': 'Please enter your code.'}), 400

    user = User.query.filter_by(code=user_code).first()
    if user is None:
        return jsonify({'success': False, 'message': 'Invalid access code. Please try again.'}), 401

    session.clear()
    session['user_id'] = user.id
    return jsonify({'success': True, 'message': 'Logged in.', 'user': user.to_dict()})


@auth_bp.route('/logout', methods=['POST'])
def logout():
    session.clear()
    return jsonify({'success': True, 'message': 'Logged out.'})


@auth_bp.route('/me')
@login_required
def me():
    return jsonify({'success': True, 'user': current_user().to_dict()})

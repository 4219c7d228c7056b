# errors.py
# Typed failures of judging operations and the result returned to callers

from dataclasses import dataclass, field
from functools import wraps

from flask import current_app

from extensions import db

NO_AUTH_MSG = 'You must be logged in to do this.'


class JudgingError(Exception):
    """A business-rule violation. The message is shown to the user verbatim."""
    code = 'judging_error'
    http_status = 400

    def __init__(self, message, **details):
        super().__init__(message)
        self.message = message
        self.details = details


class Unauthenticated(JudgingError):
    code = 'unauthenticated'
    http_status = 401

    def __init__(self, message=NO_AUTH_MSG, **details):
        super().__init__(message, **details)


class WrongRole(JudgingError):
    code = 'wrong_role'
    http_status = 403

    def __init__(self, expected, actual):
        expected_text = ' or '.join(expected)
        super().__init__(f'You must be a {expected_text} to do this.', expected=list(expected), actual=actual)


class JudgingNotActive(JudgingError):
    code = 'judging_not_active'
    http_status = 409

    def __init__(self, message='Please wait until judging begins.', **details):
        super().__init__(message, **details)


class AnotherPresentationActive(JudgingError):
    code = 'another_presentation_active'
    http_status = 409


class ConcurrentChange(JudgingError):
    code = 'concurrent_change'
    http_status = 409

    def __init__(self, message='Your group was changed by another request. Please refresh and try again.', **details):
        super().__init__(message, **details)


class IncompleteScores(JudgingError):
    code = 'incomplete_scores'
    http_status = 409


class NotFound(JudgingError):
    code = 'not_found'
    http_status = 404


class NoEligibleMembers(JudgingError):
    code = 'no_eligible_members'


class ImportFailed(JudgingError):
    code = 'import_failed'
    http_status = 502


class InvalidTransition(JudgingError):
    code = 'invalid_transition'
    http_status = 409


class InvalidScore(JudgingError):
    code = 'invalid_score'


@dataclass
class ActionResult:
    success: bool
    message: str
    code: str = None
    data: dict = field(default_factory=dict)
    http_status: int = 200

    @classmethod
    def ok(cls, message, **data):
        return cls(True, message, data=data)

    @classmethod
    def from_error(cls, error):
        return cls(False, error.message, code=error.code, data=dict(error.details), http_status=error.http_status)

    def __bool__(self):
        return self.success

    def to_dict(self):
        result = {'success': self.success, 'message': self.message}
        if self.code:
            result['code'] = self.code
        result.update(self.data)
        return result


def judging_action(description):
    """
    Turns an operation into one that always returns an ActionResult.

    JudgingError becomes a failure carrying its message. Anything else is
    logged and reported with a generic message.
    """
    def decorator(f):
        @wraps(f)
        def decorated_function(*args, **kwargs):
            try:
                return f(*args, **kwargs)
            except JudgingError as e:
                db.session.rollback()
                current_app.logger.info('%s rejected: %s', description.capitalize(), e.message)
                return ActionResult.from_error(e)
            except Exception:
                db.session.rollback()
                current_app.logger.exception('Unexpected error %s', description)
                return ActionResult(
                    False,
                    f'Unknown error {description}. Please try again.',
                    code='internal_error',
                    http_status=500,
                )
        return decorated_function
    return decorator


def require_role(user, *roles):
    if user is None:
        raise Unauthenticated()
    if user.role not in roles:
        raise WrongRole(roles, user.role)
    return user

# models/judging_status.py

from extensions import db


class JudgingStatus(db.Model):
    """Event-wide switch. A single row, created on first access."""
    __tablename__ = 'judging_status'
    id = db.Column(db.Integer, primary_key=True)
    active = db.Column(db.Boolean, nullable=False, default=False)

    @classmethod
    def current(cls):
        status = cls.query.order_by(cls.id).first()
        if status is None:
            status = cls(active=False)
            db.session.add(status)
            db.session.flush()
        return status

    @classmethod
    def is_active(cls):
        status = cls.query.order_by(cls.id).first()
        return bool(status and status.active)

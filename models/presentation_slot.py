# models/presentation_slot.py

from extensions import db
from sqlalchemy import CheckConstraint, UniqueConstraint
from timer import remaining_seconds

STATUSES = ('upcoming', 'presenting', 'completed')


class PresentationSlot(db.Model):
    __tablename__ = 'presentation_slots'

    id = db.Column(db.Integer, primary_key=True)
    group_id = db.Column(db.Integer, db.ForeignKey('groups.id', ondelete='CASCADE'), nullable=False)
    slot_order = db.Column(db.Integer, nullable=False)

    project_devpost_id = db.Column(db.String, nullable=False)
    # Copied at group creation, not kept in sync with the project
    project_name = db.Column(db.String, nullable=False)
    # Advisory only, timing is driven by the timer fields below
    scheduled_start = db.Column(db.DateTime, nullable=False)
    duration_minutes = db.Column(db.Integer, nullable=False)
    status = db.Column(db.String(20), nullable=False, default='upcoming')

    # --- Timer state ---
    remaining_seconds = db.Column(db.Integer, nullable=False)
    is_paused = db.Column(db.Boolean, nullable=False, default=False)
    started_at = db.Column(db.DateTime, nullable=True)  # set only while running

    # 'mentor' for a manual stop, 'system' for auto-completion
    completed_by = db.Column(db.String(10), nullable=True)

    __table_args__ = (
        UniqueConstraint('group_id', 'slot_order', name='unique_group_slot_order'),
        UniqueConstraint('group_id', 'project_devpost_id', name='unique_group_project_slot'),
        CheckConstraint("status IN ('upcoming', 'presenting', 'completed')", name="check_slot_status"),
        CheckConstraint("remaining_seconds >= 0", name="check_remaining_seconds"),
        CheckConstraint("completed_by IN ('mentor', 'system') OR completed_by IS NULL", name="check_completed_by"),
    )

    @property
    def duration_seconds(self):
        return self.duration_minutes * 60

    @property
    def is_running(self):
        return self.status == 'presenting' and not self.is_paused

    def to_dict(self, now=None):
        data = {
            'project_devpost_id': self.project_devpost_id,
            'project_name': self.project_name,
            'scheduled_start': self.scheduled_start.isoformat(),
            'duration_minutes': self.duration_minutes,
            'status': self.status,
            'completed_by': self.completed_by,
            'timer_state': {
                'remaining_seconds': self.remaining_seconds,
                'is_paused': self.is_paused,
                'started_at': self.started_at.isoformat() if self.started_at else None,
            },
        }
        if now is not None:
            data['live_remaining_seconds'] = remaining_seconds(self, now)
        return data

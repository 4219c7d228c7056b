# models/group.py

from extensions import db


class Group(db.Model):
    """A mentor, its judges and the projects presenting to them."""
    __tablename__ = 'groups'
    id = db.Column(db.Integer, primary_key=True)
    # No FK: users.group_id already points here and the pair would form a cycle
    mentor_id = db.Column(db.Integer, nullable=False, index=True)
    # devpost_id of the slot whose timer is running, if any
    currently_presenting = db.Column(db.String, nullable=True)
    created_at = db.Column(db.DateTime, server_default=db.func.current_timestamp())
    # Bumped by every presentation transition; a concurrent writer holding an
    # older version fails its flush with StaleDataError
    version = db.Column(db.Integer, nullable=False)
    last_transition_at = db.Column(db.DateTime, nullable=True)

    __mapper_args__ = {'version_id_col': version}

    mentor = db.relationship(
        'User',
        primaryjoin='foreign(Group.mentor_id) == User.id',
        viewonly=True,
        uselist=False,
    )
    members = db.relationship('User', backref='group', foreign_keys='User.group_id', order_by='User.id')
    projects = db.relationship('Project', backref='group', order_by='Project.id')
    presentations = db.relationship(
        'PresentationSlot',
        backref='group',
        order_by='PresentationSlot.slot_order',
        cascade="all, delete-orphan",
    )

    @property
    def judges(self):
        return [member for member in self.members if member.role == 'judge']

    def find_slot(self, project_devpost_id):
        for slot in self.presentations:
            if slot.project_devpost_id == project_devpost_id:
                return slot
        return None

    def presenting_slots(self):
        return [slot for slot in self.presentations if slot.status == 'presenting']

    def to_dict(self, now=None):
        mentor = self.mentor
        return {
            'id': self.id,
            'mentor_id': self.mentor_id,
            'mentor_name': mentor.display_name if mentor else 'Unknown Mentor',
            'judge_ids': [judge.id for judge in self.judges],
            'judge_names': [judge.display_name for judge in self.judges],
            'project_devpost_ids': [project.devpost_id for project in self.projects],
            'currently_presenting': self.currently_presenting,
            'presentations': [slot.to_dict(now) for slot in self.presentations],
        }

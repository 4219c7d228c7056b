from extensions import db
from sqlalchemy import CheckConstraint

ROLES = ('director', 'mentor', 'judge')


class User(db.Model):
    __tablename__ = 'users'
    id = db.Column(db.Integer, primary_key=True)
    code = db.Column(db.String(6), unique=True, nullable=False)
    name = db.Column(db.String(100), nullable=True, index=True)
    email = db.Column(db.String(255), nullable=True, unique=True)
    role = db.Column(db.String, nullable=False, index=True)
    # Back-reference to the judging group; cleared when groups are recreated
    group_id = db.Column(db.Integer, db.ForeignKey('groups.id', ondelete='SET NULL'), nullable=True, index=True)
    created_at = db.Column(db.DateTime, server_default=db.func.current_timestamp())

    scores = db.relationship('Score', backref='judge', cascade="all, delete-orphan")

    __table_args__ = (
        CheckConstraint("role IN ('director', 'mentor', 'judge')", name="check_role"),
    )

    @property
    def display_name(self):
        return self.name or f'Unknown {self.role.capitalize()}'

    def to_dict(self):
        return {
            'id': self.id,
            'name': self.display_name,
            'email': self.email,
            'role': self.role,
            'group_id': self.group_id,
        }

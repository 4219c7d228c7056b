from extensions import db


class Project(db.Model):
    __tablename__ = 'projects'
    id = db.Column(db.Integer, primary_key=True)
    devpost_id = db.Column(db.String, unique=True, nullable=False, index=True)
    name = db.Column(db.String, nullable=False)
    devpost_url = db.Column(db.String, nullable=True)
    team_members = db.Column(db.JSON, nullable=False, default=list)
    has_presented = db.Column(db.Boolean, nullable=False, default=False)
    group_id = db.Column(db.Integer, db.ForeignKey('groups.id', ondelete='CASCADE'), nullable=True)

    scores = db.relationship('Score', backref='project', lazy=True, cascade="all, delete-orphan")

    __table_args__ = (
        db.Index('ix_projects_group_presented', 'group_id', 'has_presented'),
    )

    def to_dict(self, with_scores=False):
        data = {
            'id': self.id,
            'devpost_id': self.devpost_id,
            'name': self.name,
            'devpost_url': self.devpost_url,
            'team_members': list(self.team_members or []),
            'has_presented': self.has_presented,
            'group_id': self.group_id,
        }
        if with_scores:
            data['scores'] = [score.to_dict() for score in self.scores]
        return data

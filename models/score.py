from extensions import db


class Score(db.Model):
    __tablename__ = 'scores'
    id = db.Column(db.Integer, primary_key=True)
    judge_id = db.Column(db.Integer, db.ForeignKey('users.id', ondelete='CASCADE'), nullable=False)
    project_id = db.Column(db.Integer, db.ForeignKey('projects.id', ondelete='CASCADE'), nullable=False)
    # {criterion name: value}
    criteria = db.Column(db.JSON, nullable=False)
    scored_at = db.Column(db.DateTime, server_default=db.func.current_timestamp())

    __table_args__ = (
        # One score per judge and project; resubmission updates it
        db.UniqueConstraint('project_id', 'judge_id', name='unique_project_judge_score'),
    )

    def to_dict(self):
        return {
            'id': self.id,
            'project_id': self.project_id,
            'judge_id': self.judge_id,
            'criteria': dict(self.criteria),
        }

from dataclasses import dataclass, field

from models import Project


def partition(items, bucket_count):
    """
    Round-robin split: item i goes to bucket i % bucket_count.

    Bucket sizes differ by at most one and each bucket keeps the input order.
    """
    if bucket_count < 1:
        raise ValueError('bucket_count must be at least 1')
    buckets = [[] for _ in range(bucket_count)]
    for index, item in enumerate(items):
        buckets[index % bucket_count].append(item)
    return buckets


@dataclass
class IncompleteScoresReport:
    incomplete_projects: list = field(default_factory=list)

    @property
    def has_incomplete_scores(self):
        return bool(self.incomplete_projects)

    def describe(self):
        parts = [
            f'"{entry["project_name"]}": {", ".join(entry["missing_judges"])}'
            for entry in self.incomplete_projects
        ]
        return 'Cannot start presentation. The following judges have not scored ' + '; '.join(parts)

    def to_dict(self):
        return {
            'has_incomplete_scores': self.has_incomplete_scores,
            'incomplete_projects': self.incomplete_projects,
        }


def check_incomplete_scores(group):
    """
    Finds presented projects of the group that some of its judges have not scored.
    Judges and projects of other groups are not considered.
    """
    judges = group.judges
    report = IncompleteScoresReport()

    presented_projects = Project.query.filter_by(group_id=group.id, has_presented=True).order_by(Project.id).all()
    for project in presented_projects:
        judges_who_scored = {score.judge_id for score in project.scores}
        missing = [judge.display_name for judge in judges if judge.id not in judges_who_scored]
        if missing:
            report.incomplete_projects.append({
                'project_name': project.name,
                'missing_judges': missing,
            })

    return report

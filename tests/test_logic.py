import pytest

import judging
import presentations
from conftest import full_criteria
from extensions import db
from logic import check_incomplete_scores, partition


class TestPartition:
    def test_round_robin_order(self):
        assert partition(['a', 'b', 'c', 'd', 'e'], 2) == [['a', 'c', 'e'], ['b', 'd']]

    @pytest.mark.parametrize('count,buckets', [(0, 3), (1, 3), (7, 3), (10, 4), (3, 5), (12, 1)])
    def test_sizes_differ_by_at_most_one(self, count, buckets):
        result = partition(list(range(count)), buckets)
        sizes = [len(bucket) for bucket in result]
        assert len(result) == buckets
        assert sum(sizes) == count
        assert set(sizes) <= {count // buckets, -(-count // buckets)}
        assert sorted(item for bucket in result for item in bucket) == list(range(count))

    def test_rejects_zero_buckets(self):
        with pytest.raises(ValueError):
            partition([1, 2], 0)


class TestIncompleteScores:
    def test_nothing_presented_is_complete(self, make_event):
        event = make_event()
        report = check_incomplete_scores(event.group)
        assert not report.has_incomplete_scores
        assert report.incomplete_projects == []

    def test_reports_missing_judges_per_presented_project(self, make_event):
        event = make_event()
        judge_1, judge_2 = event.judges
        presentations.start_presentation(event.mentor, 'p1')
        presentations.stop_presentation(event.mentor, 'p1')
        assert judging.submit_score(judge_1, 'p1', full_criteria()).success

        report = check_incomplete_scores(event.group)
        assert report.to_dict() == {
            'has_incomplete_scores': True,
            'incomplete_projects': [{'project_name': 'Project 1', 'missing_judges': ['Judge 2']}],
        }

        assert judging.submit_score(judge_2, 'p1', full_criteria(3)).success
        assert not check_incomplete_scores(event.group).has_incomplete_scores

    def test_ignores_other_groups(self, make_event):
        event = make_event(mentors=2, judges=2, projects=4)
        mentor_1, mentor_2 = event.mentors
        judge_1, judge_2 = event.judges
        # mentor 1 has judge 1 and projects p1, p3; mentor 2 has judge 2 and p2, p4
        presentations.start_presentation(mentor_1, 'p1')
        presentations.stop_presentation(mentor_1, 'p1')
        assert judging.submit_score(judge_1, 'p1', full_criteria()).success

        db.session.expire_all()
        assert not check_incomplete_scores(mentor_1.group).has_incomplete_scores
        assert not check_incomplete_scores(mentor_2.group).has_incomplete_scores

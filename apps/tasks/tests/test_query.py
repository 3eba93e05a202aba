"""
Tests for the task query engine (filter, sort, stats).

These run on unsaved Task instances; no database is touched.
"""
from datetime import date, datetime, timezone
from uuid import uuid4

from django.test import SimpleTestCase

from apps.tasks.models import Task
from apps.tasks.query import (
    DueRange, TaskFilter, filter_tasks, resolve_sort_key, sort_tasks, task_stats,
)


def ts(day, hour=0):
    return datetime(2024, 1, day, hour, tzinfo=timezone.utc)


def make_task(title, **fields):
    fields.setdefault('description', '')
    fields.setdefault('status', 'todo')
    fields.setdefault('priority', 'medium')
    fields.setdefault('category', '')
    fields.setdefault('created_at', ts(1))
    return Task(id=uuid4(), owner_id=uuid4(), title=title, **fields)


def titles(tasks):
    return [t.title for t in tasks]


class ScenarioTest(SimpleTestCase):
    """The three-task walkthrough: one task per status, one per priority."""

    def setUp(self):
        self.t1 = make_task('Task 1', status='todo', priority='high', created_at=ts(1))
        self.t2 = make_task('Task 2', status='in-progress', priority='medium', created_at=ts(2))
        self.t3 = make_task('Task 3', status='completed', priority='low', created_at=ts(3))
        self.tasks = [self.t1, self.t2, self.t3]

    def test_sort_by_date_newest_first(self):
        self.assertEqual(sort_tasks(self.tasks, 'date'), [self.t3, self.t2, self.t1])

    def test_sort_by_priority(self):
        self.assertEqual(sort_tasks(self.tasks, 'priority'), [self.t1, self.t2, self.t3])

    def test_stats(self):
        stats = task_stats(self.tasks)
        self.assertEqual(stats.total, 3)
        self.assertEqual(stats.completed, 1)
        self.assertEqual(stats.in_progress, 1)
        self.assertEqual(stats.todo, 1)
        self.assertEqual(stats.high_priority, 1)


class FilterTest(SimpleTestCase):

    def setUp(self):
        self.work = make_task(
            'Quarterly report', description='Numbers for Q3',
            status='todo', priority='high', category='work',
            due_date=datetime(2024, 12, 31, tzinfo=timezone.utc),
        )
        self.home = make_task(
            'Fix sink', description='Call the PLUMBER',
            status='in-progress', priority='medium', category='home',
            due_date=datetime(2024, 12, 20, tzinfo=timezone.utc),
        )
        self.misc = make_task(
            'Read book', description='',
            status='completed', priority='low', category='Work',
        )
        self.tasks = [self.work, self.home, self.misc]

    def test_empty_filter_returns_everything_in_order(self):
        self.assertEqual(filter_tasks(self.tasks, TaskFilter()), self.tasks)
        self.assertEqual(filter_tasks(self.tasks, None), self.tasks)

    def test_empty_strings_impose_no_constraint(self):
        criteria = TaskFilter.from_params(status='', priority='', category='', search='')
        self.assertEqual(filter_tasks(self.tasks, criteria), self.tasks)

    def test_status_filter_is_exact(self):
        result = filter_tasks(self.tasks, TaskFilter(status='in-progress'))
        self.assertEqual(result, [self.home])

    def test_priority_filter(self):
        result = filter_tasks(self.tasks, TaskFilter(priority='high'))
        self.assertEqual(result, [self.work])

    def test_category_is_case_sensitive(self):
        self.assertEqual(filter_tasks(self.tasks, TaskFilter(category='work')), [self.work])
        self.assertEqual(filter_tasks(self.tasks, TaskFilter(category='Work')), [self.misc])

    def test_search_matches_title_case_insensitively(self):
        self.assertEqual(filter_tasks(self.tasks, TaskFilter(search='QUARTERLY')), [self.work])

    def test_search_matches_description_independently(self):
        self.assertEqual(filter_tasks(self.tasks, TaskFilter(search='plumber')), [self.home])

    def test_constraints_compose_with_and(self):
        criteria = TaskFilter(status='todo', priority='high', category='work', search='report')
        self.assertEqual(filter_tasks(self.tasks, criteria), [self.work])

        criteria = TaskFilter(status='todo', priority='low')
        self.assertEqual(filter_tasks(self.tasks, criteria), [])

    def test_due_range_from_excludes_undated_tasks(self):
        criteria = TaskFilter(due_range=DueRange(start=datetime(2024, 1, 1, tzinfo=timezone.utc)))
        result = filter_tasks(self.tasks, criteria)
        self.assertNotIn(self.misc, result)
        self.assertEqual(result, [self.work, self.home])

    def test_open_range_still_excludes_undated_tasks(self):
        result = filter_tasks(self.tasks, TaskFilter(due_range=DueRange()))
        self.assertEqual(result, [self.work, self.home])

    def test_due_range_bounds_are_inclusive(self):
        criteria = TaskFilter(due_range=DueRange(
            start=datetime(2024, 12, 20, tzinfo=timezone.utc),
            end=datetime(2024, 12, 20, tzinfo=timezone.utc),
        ))
        self.assertEqual(filter_tasks(self.tasks, criteria), [self.home])

    def test_due_range_to_only(self):
        criteria = TaskFilter.from_params(due_to=datetime(2024, 12, 25, tzinfo=timezone.utc))
        self.assertEqual(filter_tasks(self.tasks, criteria), [self.home])

    def test_naive_and_date_bounds_are_read_as_utc(self):
        criteria = TaskFilter(due_range=DueRange(start=date(2024, 12, 21), end=datetime(2025, 1, 1)))
        self.assertEqual(filter_tasks(self.tasks, criteria), [self.work])

    def test_filter_does_not_mutate_input(self):
        original = list(self.tasks)
        filter_tasks(self.tasks, TaskFilter(status='todo'))
        self.assertEqual(self.tasks, original)


class SortTest(SimpleTestCase):

    def test_priority_sort_is_non_decreasing_in_severity(self):
        tasks = [
            make_task('a', priority='low'),
            make_task('b', priority='high'),
            make_task('c', priority='medium'),
            make_task('d', priority='high'),
            make_task('e', priority='low'),
        ]
        ranks = {'high': 0, 'medium': 1, 'low': 2}
        result = [ranks[t.priority] for t in sort_tasks(tasks, 'priority')]
        self.assertEqual(result, sorted(result))

    def test_ties_keep_original_order(self):
        first = make_task('first', created_at=ts(5))
        second = make_task('second', created_at=ts(5))
        older = make_task('older', created_at=ts(1))

        self.assertEqual(sort_tasks([older, first, second], 'date'), [first, second, older])
        self.assertEqual(sort_tasks([second, older, first], 'priority'), [second, older, first])

    def test_title_sort_ignores_case_and_accents(self):
        tasks = [make_task('Zebra'), make_task('Éclair'), make_task('apple'), make_task('eagle')]
        self.assertEqual(titles(sort_tasks(tasks, 'title')), ['apple', 'eagle', 'Éclair', 'Zebra'])

    def test_sort_is_idempotent(self):
        tasks = [
            make_task('b', priority='low', created_at=ts(2)),
            make_task('a', priority='high', created_at=ts(3)),
            make_task('c', priority='high', created_at=ts(1)),
        ]
        for key in ('date', 'priority', 'title'):
            once = sort_tasks(tasks, key)
            self.assertEqual(sort_tasks(once, key), once)

    def test_sort_returns_new_list(self):
        tasks = [make_task('a', created_at=ts(1)), make_task('b', created_at=ts(2))]
        original = list(tasks)
        result = sort_tasks(tasks, 'date')
        self.assertIsNot(result, tasks)
        self.assertEqual(tasks, original)

    def test_unknown_or_missing_key_means_date(self):
        old = make_task('old', created_at=ts(1))
        new = make_task('new', created_at=ts(2))
        self.assertEqual(sort_tasks([old, new], 'bogus'), [new, old])
        self.assertEqual(sort_tasks([old, new], None), [new, old])
        self.assertEqual(sort_tasks([old, new]), [new, old])
        self.assertEqual(resolve_sort_key('title'), 'title')


class StatsTest(SimpleTestCase):

    def test_empty(self):
        stats = task_stats([])
        self.assertEqual(stats.total, 0)
        self.assertEqual(stats.high_priority, 0)

    def test_status_buckets_sum_to_total(self):
        tasks = [
            make_task('a', status='todo', priority='high'),
            make_task('b', status='todo'),
            make_task('c', status='completed', priority='high'),
            make_task('d', status='in-progress'),
        ]
        stats = task_stats(tasks)
        self.assertEqual(stats.total, len(tasks))
        self.assertEqual(stats.completed + stats.in_progress + stats.todo, stats.total)
        self.assertEqual(stats.high_priority, 2)

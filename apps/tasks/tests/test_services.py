"""
Tests for the task access layer: owner scoping, defaults and validation.
"""
from datetime import datetime, timedelta, timezone as dt_timezone
from io import StringIO
from uuid import uuid4

from django.core.management import call_command
from django.test import TestCase
from django.utils import timezone

from apps.core.exceptions import NotFound, Unauthorized, ValidationError
from apps.identity.models import User
from apps.tasks.models import Task
from apps.tasks.query import DueRange, TaskFilter
from apps.tasks.services import (
    create_task, delete_task, get_task, get_task_stats, list_tasks, update_task,
)


class CreateTaskTest(TestCase):

    def setUp(self):
        self.owner_id = uuid4()

    def test_defaults(self):
        task = create_task(self.owner_id, {'title': 'Write tests'})
        self.assertEqual(task.owner_id, self.owner_id)
        self.assertEqual(task.status, 'todo')
        self.assertEqual(task.priority, 'medium')
        self.assertEqual(task.description, '')
        self.assertEqual(task.category, '')
        self.assertIsNone(task.due_date)
        self.assertLessEqual(task.created_at, task.updated_at)

    def test_explicit_fields(self):
        due = datetime(2024, 12, 31, tzinfo=dt_timezone.utc)
        task = create_task(self.owner_id, {
            'title': 'Ship it',
            'description': 'v1.0',
            'status': 'in-progress',
            'priority': 'high',
            'category': 'work',
            'due_date': due,
        })
        task.refresh_from_db()
        self.assertEqual(task.status, 'in-progress')
        self.assertEqual(task.priority, 'high')
        self.assertEqual(task.due_date, due)

    def test_naive_and_string_due_dates_become_utc(self):
        task = create_task(self.owner_id, {'title': 'a', 'due_date': datetime(2024, 5, 1, 12)})
        self.assertEqual(task.due_date, datetime(2024, 5, 1, 12, tzinfo=dt_timezone.utc))

        task = create_task(self.owner_id, {'title': 'b', 'due_date': '2024-05-02'})
        self.assertEqual(task.due_date, datetime(2024, 5, 2, tzinfo=dt_timezone.utc))

    def test_empty_title_is_rejected_and_nothing_persisted(self):
        for fields in ({}, {'title': ''}, {'title': '   '}, {'title': None}):
            with self.assertRaises(ValidationError):
                create_task(self.owner_id, fields)
        self.assertEqual(Task.objects.count(), 0)

    def test_invalid_priority_is_rejected(self):
        with self.assertRaises(ValidationError):
            create_task(self.owner_id, {'title': 'x', 'priority': 'urgent'})
        self.assertEqual(Task.objects.count(), 0)

    def test_title_and_category_length_limits(self):
        task = create_task(self.owner_id, {'title': 'x' * 200, 'category': 'c' * 100})
        self.assertEqual(len(task.title), 200)

        with self.assertRaises(ValidationError) as ctx:
            create_task(self.owner_id, {'title': 'x' * 201})
        self.assertEqual(ctx.exception.message, "Title must be at most 200 characters")
        with self.assertRaises(ValidationError):
            create_task(self.owner_id, {'title': 'ok', 'category': 'c' * 101})
        with self.assertRaises(ValidationError):
            update_task(self.owner_id, task.id, {'title': 'x' * 300})
        self.assertEqual(Task.objects.count(), 1)

    def test_owner_is_required(self):
        with self.assertRaises(Unauthorized):
            create_task(None, {'title': 'x'})

    def test_owner_cannot_be_set_through_fields(self):
        other = uuid4()
        task = create_task(self.owner_id, {'title': 'x', 'owner_id': other})
        self.assertEqual(task.owner_id, self.owner_id)


class OwnershipTest(TestCase):

    def setUp(self):
        self.alice = uuid4()
        self.bob = uuid4()
        self.task = create_task(self.alice, {'title': 'Alice task', 'priority': 'low'})

    def test_get_own_task(self):
        self.assertEqual(get_task(self.alice, self.task.id), self.task)
        self.assertEqual(get_task(self.alice, str(self.task.id)), self.task)

    def test_other_owner_sees_not_found(self):
        with self.assertRaises(NotFound):
            get_task(self.bob, self.task.id)

    def test_malformed_id_is_not_found(self):
        with self.assertRaises(NotFound):
            get_task(self.alice, 'not-a-uuid')
        with self.assertRaises(NotFound):
            delete_task(self.alice, 'not-a-uuid')

    def test_update_by_other_owner_is_not_found_and_does_not_mutate(self):
        with self.assertRaises(NotFound):
            update_task(self.bob, self.task.id, {'title': 'Hijacked'})
        self.task.refresh_from_db()
        self.assertEqual(self.task.title, 'Alice task')

    def test_delete_by_other_owner_is_not_found(self):
        with self.assertRaises(NotFound):
            delete_task(self.bob, self.task.id)
        self.assertTrue(Task.objects.filter(id=self.task.id).exists())

    def test_delete_is_final(self):
        delete_task(self.alice, self.task.id)
        self.assertFalse(Task.objects.filter(id=self.task.id).exists())
        with self.assertRaises(NotFound):
            delete_task(self.alice, self.task.id)

    def test_list_only_returns_own_tasks(self):
        create_task(self.bob, {'title': 'Bob task'})
        self.assertEqual([t.title for t in list_tasks(self.alice)], ['Alice task'])
        self.assertEqual([t.title for t in list_tasks(self.bob)], ['Bob task'])

    def test_list_requires_owner(self):
        with self.assertRaises(Unauthorized):
            list_tasks(None)


class UpdateTaskTest(TestCase):

    def setUp(self):
        self.owner_id = uuid4()
        self.task = create_task(self.owner_id, {
            'title': 'Original', 'description': 'keep me', 'priority': 'high',
        })

    def test_only_provided_fields_change(self):
        updated = update_task(self.owner_id, self.task.id, {'status': 'completed'})
        updated.refresh_from_db()
        self.assertEqual(updated.status, 'completed')
        self.assertEqual(updated.title, 'Original')
        self.assertEqual(updated.description, 'keep me')
        self.assertEqual(updated.priority, 'high')

    def test_updated_timestamp_is_bumped(self):
        before = self.task.updated_at
        updated = update_task(self.owner_id, self.task.id, {'category': 'work'})
        self.assertGreaterEqual(updated.updated_at, before)
        self.assertLessEqual(updated.created_at, updated.updated_at)

    def test_invalid_enum_values_are_rejected(self):
        with self.assertRaises(ValidationError):
            update_task(self.owner_id, self.task.id, {'status': 'done'})
        with self.assertRaises(ValidationError):
            update_task(self.owner_id, self.task.id, {'priority': None})
        self.task.refresh_from_db()
        self.assertEqual(self.task.status, 'todo')
        self.assertEqual(self.task.priority, 'high')

    def test_blank_title_is_rejected(self):
        with self.assertRaises(ValidationError):
            update_task(self.owner_id, self.task.id, {'title': ''})

    def test_due_date_can_be_cleared(self):
        update_task(self.owner_id, self.task.id, {'due_date': timezone.now()})
        updated = update_task(self.owner_id, self.task.id, {'due_date': None})
        self.assertIsNone(updated.due_date)


class ListTasksTest(TestCase):

    def setUp(self):
        self.owner_id = uuid4()
        base = timezone.now()
        rows = [
            ('Task 1', 'todo', 'high', 'work', base + timedelta(days=10)),
            ('Task 2', 'in-progress', 'medium', 'personal', base + timedelta(days=5)),
            ('Task 3', 'completed', 'low', 'work', None),
        ]
        for offset, (title, status, priority, category, due) in enumerate(rows):
            task = create_task(self.owner_id, {
                'title': title, 'status': status, 'priority': priority,
                'category': category, 'due_date': due,
                'description': f'Description {offset + 1}',
            })
            Task.objects.filter(id=task.id).update(created_at=base - timedelta(days=3 - offset))
        self.base = base

    def titles(self, tasks):
        return [t.title for t in tasks]

    def test_default_order_is_newest_first(self):
        self.assertEqual(self.titles(list_tasks(self.owner_id)), ['Task 3', 'Task 2', 'Task 1'])

    def test_sort_by_priority(self):
        self.assertEqual(self.titles(list_tasks(self.owner_id, sort_key='priority')), ['Task 1', 'Task 2', 'Task 3'])

    def test_sort_by_title(self):
        self.assertEqual(self.titles(list_tasks(self.owner_id, sort_key='title')), ['Task 1', 'Task 2', 'Task 3'])

    def test_filter_by_status(self):
        result = list_tasks(self.owner_id, TaskFilter(status='todo'))
        self.assertEqual(self.titles(result), ['Task 1'])

    def test_filter_by_category_and_search(self):
        result = list_tasks(self.owner_id, TaskFilter(category='work', search='DESCRIPTION 3'))
        self.assertEqual(self.titles(result), ['Task 3'])

    def test_unknown_filter_values_are_rejected(self):
        with self.assertRaises(ValidationError):
            list_tasks(self.owner_id, TaskFilter(status='bogus'))
        with self.assertRaises(ValidationError):
            get_task_stats(self.owner_id, TaskFilter(priority='urgent'))

    def test_due_range_excludes_undated(self):
        result = list_tasks(self.owner_id, TaskFilter(due_range=DueRange(start=self.base)))
        self.assertEqual(self.titles(result), ['Task 2', 'Task 1'])

    def test_stats_over_all_and_filtered(self):
        stats = get_task_stats(self.owner_id)
        self.assertEqual((stats.total, stats.completed, stats.in_progress, stats.todo, stats.high_priority), (3, 1, 1, 1, 1))

        stats = get_task_stats(self.owner_id, TaskFilter(category='work'))
        self.assertEqual(stats.total, 2)
        self.assertEqual(stats.in_progress, 0)


class SeedDemoCommandTest(TestCase):

    def test_seed_is_idempotent(self):
        call_command('seed_demo', stdout=StringIO())
        call_command('seed_demo', stdout=StringIO())

        user = User.objects.get(email='demo@example.com')
        self.assertTrue(user.check_password('DemoPass123'))
        self.assertEqual(Task.objects.filter(owner_id=user.id).count(), 5)

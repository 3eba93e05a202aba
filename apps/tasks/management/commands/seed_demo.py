from datetime import timedelta

from django.core.management.base import BaseCommand
from django.utils import timezone

from apps.identity.models import User
from apps.tasks.models import Task
from apps.tasks.services import create_task

DEMO_TASKS = [
    {'title': 'Plan sprint', 'description': 'Pick stories for next week', 'priority': 'high', 'category': 'work', 'due_days': 2},
    {'title': 'Review pull requests', 'description': 'Backlog of three reviews', 'status': 'in-progress', 'category': 'work', 'due_days': 1},
    {'title': 'Buy groceries', 'description': 'Milk, eggs, coffee', 'priority': 'low', 'category': 'personal'},
    {'title': 'Renew passport', 'description': 'Book an appointment online', 'priority': 'high', 'category': 'personal', 'due_days': 30},
    {'title': 'Write release notes', 'description': '', 'status': 'completed', 'category': 'work'},
]


class Command(BaseCommand):
    help = 'Seeds the database with a demo user and sample tasks'

    def add_arguments(self, parser):
        parser.add_argument('--email', default='demo@example.com')
        parser.add_argument('--password', default='DemoPass123')

    def handle(self, *args, **options):
        email = options['email'].lower()
        user, created = User.objects.get_or_create(
            email=email,
            defaults={'username': email, 'name': 'Demo User'},
        )

        if created:
            user.set_password(options['password'])
            user.save()
            self.stdout.write(self.style.SUCCESS(f'Created user: {email}'))
        else:
            self.stdout.write(self.style.WARNING(f'Using existing user: {email}'))

        if Task.objects.filter(owner_id=user.id).exists():
            self.stdout.write(self.style.WARNING('Demo tasks already present, skipping'))
            return

        now = timezone.now()
        for row in DEMO_TASKS:
            fields = {k: v for k, v in row.items() if k != 'due_days'}
            if 'due_days' in row:
                fields['due_date'] = now + timedelta(days=row['due_days'])
            create_task(user.id, fields)

        self.stdout.write(self.style.SUCCESS(f'Created {len(DEMO_TASKS)} tasks for {email}'))

"""
Management command to seed mock work logs for demo mode
"""
import random
from datetime import timedelta
from decimal import Decimal

from django.core.management.base import BaseCommand, CommandError
from django.db import transaction
from django.utils import timezone

from bridgepath.participants.models import Participant
from bridgepath.worklogs.models import WorkLog

ROLES = ['Processing', 'Sorting', 'Hammermill', 'Truck']

TAGS = {
    'positive': ['Great Attitude', 'High Productivity', 'Mentored Others', 'Punctual', 'Took Initiative'],
    'neutral': ['Standard Performance', 'Task Completed', 'Followed Instructions'],
    'negative': ['Late', 'Distracted', 'Low Output', 'Safety Violation', 'Left Early'],
}

NOTES = {
    'positive': [
        'Focused and on time.',
        'Great teamwork today.',
        'Completed tasks ahead of schedule.',
        'Asked good questions during training.',
        'Worked independently.',
        'Strong attention to detail.',
        'Helped new team members.',
        'Exceeded production targets.',
    ],
    'neutral': [
        'Completed assigned tasks.',
        'Standard shift.',
        'Followed safety protocols.',
        'Routine work day.',
    ],
    'negative': [
        'Needed extra support with sorting.',
        'Arrived late.',
        'Struggled with focus today.',
        'Left work station early.',
        'Needs reminders on safety gear.',
    ],
}


def pick_sentiment():
    roll = random.random()
    if roll < 0.6:
        return 'positive'
    if roll < 0.9:
        return 'neutral'
    return 'negative'


def generate_tags_and_note():
    sentiment = pick_sentiment()
    tags = random.sample(TAGS[sentiment], random.randint(1, 2))
    note = random.choice(NOTES[sentiment]) if random.random() < 0.7 else None
    return tags, note


def generate_hours():
    # Mostly full shifts: 6-8.75, otherwise 4-6.75
    if random.random() < 0.7:
        base = random.randint(6, 8)
    else:
        base = random.randint(4, 6)
    return Decimal(base) + Decimal(random.randint(0, 3)) * Decimal('0.25')


class Command(BaseCommand):
    help = "Seeds mock work logs for demo mode"

    def add_arguments(self, parser):
        parser.add_argument('--count', type=int, default=1000, help='Number of work logs to create')
        parser.add_argument('--days', type=int, default=90, help='Spread logs over this many past days')
        parser.add_argument('--clear', action='store_true', help='Delete existing mock work logs first')

    def handle(self, *args, **options):
        participants = list(Participant.objects.filter(is_mock=True).only('id', 'name'))
        if not participants:
            raise CommandError('No mock participants found. Run seed_mock_participants first.')

        if options['clear']:
            deleted, _ = WorkLog.objects.filter(is_mock=True).delete()
            self.stdout.write(self.style.WARNING(f"Deleted {deleted} existing mock work logs."))

        today = timezone.localdate()
        logs = []
        for _ in range(options['count']):
            participant = random.choice(participants)
            tags, note = generate_tags_and_note()
            logs.append(WorkLog(
                participant=participant,
                participant_name=participant.name,
                role=random.choice(ROLES),
                hours=generate_hours(),
                notes=note,
                tags=tags,
                work_date=today - timedelta(days=random.randint(0, options['days'])),
                is_mock=True,
            ))

        with transaction.atomic():
            WorkLog.objects.bulk_create(logs, batch_size=500)

        self.stdout.write(self.style.SUCCESS(f"Seeded {len(logs)} mock work logs."))

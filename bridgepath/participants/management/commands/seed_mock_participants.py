"""
Management command to seed mock participants for demo mode
"""
from datetime import date

from django.core.management.base import BaseCommand
from django.db import transaction

from bridgepath.participants.models import Participant

# name, phone suffix, entry date, phase, categories, status
MOCK_PARTICIPANTS = [
    ('Amaya Johnson', '0142', date(2025, 9, 10), 0, ['Homelessness', 'Mental Health'], 'active'),
    ('Elijah Brooks', '0186', date(2025, 8, 3), 1, ['Incarceration'], 'active'),
    ('Sofia Martinez', '0197', date(2025, 7, 14), 2, ['Addiction', 'Mental Health'], 'staffing'),
    ('Noah Evans', '0174', date(2025, 6, 1), 3, ['Incarceration', 'Homelessness'], 'graduated'),
    ('Zoe Carter', '0158', date(2025, 10, 5), 0, ['Other'], 'active'),
    ('Aiden Wright', '0123', date(2025, 5, 20), 4, ['Addiction'], 'graduated'),
    ('Maya Patel', '0116', date(2025, 11, 9), 1, ['Homelessness'], 'active'),
    ('Lucas Nguyen', '0169', date(2025, 4, 18), 2, ['Mental Health'], 'staffing'),
    ('Grace Kim', '0131', date(2025, 3, 12), 3, ['Incarceration', 'Addiction'], 'exited'),
    ('Ethan Reynolds', '0172', date(2025, 2, 27), 4, ['Homelessness', 'Other'], 'graduated'),
    ('Harper Allen', '0144', date(2025, 12, 1), 0, ['Mental Health', 'Other'], 'active'),
    ('Jackson Lee', '0192', date(2025, 1, 22), 1, ['Incarceration', 'Homelessness'], 'staffing'),
    ('Ava Thompson', '0164', date(2024, 12, 15), 2, ['Addiction'], 'active'),
    ('Caleb Moore', '0189', date(2024, 11, 8), 3, ['Homelessness', 'Mental Health'], 'staffing'),
    ('Lily Baker', '0139', date(2024, 10, 2), 4, ['Other'], 'graduated'),
    ('Gabriel Sanchez', '0108', date(2024, 9, 21), 1, ['Incarceration'], 'active'),
    ('Devon Roberts', '0201', date(2025, 11, 15), 0, ['Homelessness'], 'active'),
    ('Jasmine Lee', '0202', date(2025, 10, 20), 0, ['Mental Health'], 'active'),
    ('Marcus Thompson', '0203', date(2025, 9, 5), 2, ['Incarceration'], 'active'),
    ('Sarah Martinez', '0204', date(2025, 8, 12), 2, ['Addiction'], 'active'),
    ('James Kendrick', '0205', date(2025, 12, 5), 0, ['Other'], 'active'),
    ('Elena Rodriguez', '0206', date(2025, 11, 28), 0, ['Homelessness'], 'active'),
    ('Jordan Smith', '0207', date(2025, 7, 30), 1, ['Mental Health'], 'active'),
    ('Isaac Chen', '0208', date(2025, 6, 15), 3, ['Incarceration'], 'staffing'),
    ('Olivia Wilson', '0209', date(2025, 5, 10), 3, ['Addiction'], 'active'),
    ('Liam Brown', '0210', date(2025, 4, 5), 4, ['Homelessness'], 'graduated'),
    ('Emma Davis', '0211', date(2025, 3, 20), 4, ['Other'], 'graduated'),
    ('Mason Miller', '0212', date(2025, 2, 15), 4, ['Incarceration'], 'graduated'),
    ('Sophia Anderson', '0213', date(2025, 1, 10), 4, ['Mental Health'], 'graduated'),
]


class Command(BaseCommand):
    help = "Seeds mock participants for demo mode"

    def add_arguments(self, parser):
        parser.add_argument(
            '--clear',
            action='store_true',
            help='Delete existing mock participants (and their logs) first',
        )

    def handle(self, *args, **options):
        with transaction.atomic():
            if options['clear']:
                deleted, _ = Participant.objects.filter(is_mock=True).delete()
                self.stdout.write(self.style.WARNING(f"Deleted {deleted} existing mock rows."))

            created_count = 0
            for name, phone_suffix, entry_date, phase, categories, status in MOCK_PARTICIPANTS:
                email = f"{name.lower().replace(' ', '.')}@demo.org"
                _, created = Participant.objects.update_or_create(
                    email=email,
                    is_mock=True,
                    defaults={
                        'name': name,
                        'phone': f"(205) 555-{phone_suffix}",
                        'entry_date': entry_date,
                        'current_phase': phase,
                        'categories': categories,
                        'status': status,
                    },
                )
                if created:
                    created_count += 1

        self.stdout.write(self.style.SUCCESS(
            f"Seeded {len(MOCK_PARTICIPANTS)} mock participants ({created_count} new)."
        ))

"""
Management command to generate the daily operations brief and email it to staff
"""
from django.core.management.base import BaseCommand, CommandError

from bridgepath.core.utils import parse_day
from bridgepath.reports import daily_brief


class Command(BaseCommand):
    help = 'Generate the daily operations brief and email it to active staff'

    def add_arguments(self, parser):
        parser.add_argument(
            '--date',
            type=str,
            help='Brief date as YYYY-MM-DD (defaults to today)',
        )
        parser.add_argument(
            '--demo',
            action='store_true',
            help='Include mock (seeded) records',
        )
        parser.add_argument(
            '--to',
            action='append',
            dest='recipients',
            help='Send to this address instead of all staff (repeatable)',
        )
        parser.add_argument(
            '--dry-run',
            action='store_true',
            help='Print the brief without sending email',
        )

    def handle(self, *args, **options):
        day = None
        if options['date']:
            day = parse_day(options['date'])
            if day is None:
                raise CommandError(f"Invalid date: {options['date']}")

        recipients = options['recipients'] or daily_brief.staff_recipients()
        if not recipients and not options['dry_run']:
            raise CommandError('No staff email addresses found')

        brief_text, brief = daily_brief.generate_brief(day, demo_mode=options['demo'])
        metrics = brief['metrics']
        self.stdout.write(f"Program health: {metrics['program_health']}")
        self.stdout.write(f"Participants: {metrics['total_participants']}, critical alerts: {metrics['critical_alerts']}")

        if options['dry_run']:
            self.stdout.write('')
            self.stdout.write(brief_text)
            self.stdout.write(self.style.WARNING('Dry run: no email sent'))
            return

        daily_brief.send_brief_email(brief_text, brief, recipients)
        self.stdout.write(self.style.SUCCESS(f'Daily brief sent to {len(recipients)} recipients'))

"""
Management command to create or promote the program super-admin account
"""
from django.contrib.auth import get_user_model
from django.core.management.base import BaseCommand, CommandError

from bridgepath.core.roles import ADMIN, get_original_role, set_user_role

User = get_user_model()


class Command(BaseCommand):
    help = "Creates the super-admin account, or promotes an existing user to admin"

    def add_arguments(self, parser):
        parser.add_argument('--email', required=True, help='Email (also used as username)')
        parser.add_argument('--password', help='Password for a newly created account')
        parser.add_argument('--display-name', default='Super Admin')

    def handle(self, *args, **options):
        email = options['email'].strip().lower()
        user = User.objects.filter(email__iexact=email).first()

        if user:
            previous = get_original_role(user)
            self.stdout.write(self.style.WARNING(
                f'⚠️  User already exists with role: {previous or "unprovisioned"}. Updating to admin role...'
            ))
        else:
            if not options['password']:
                raise CommandError('--password is required when creating a new account')
            user = User.objects.create_user(
                username=email,
                email=email,
                password=options['password'],
                display_name=options['display_name'],
            )
            self.stdout.write(f'Created user {email}')

        user.is_staff = True
        user.is_superuser = True
        if not user.display_name:
            user.display_name = options['display_name']
        user.save()
        set_user_role(user, ADMIN)

        self.stdout.write(self.style.SUCCESS(f'\n✅ Successfully set admin profile for {email}'))

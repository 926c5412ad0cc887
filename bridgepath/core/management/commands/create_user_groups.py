from django.core.management.base import BaseCommand
from django.contrib.auth.models import Group, Permission

from bridgepath.core.roles import ADMIN, CASE_MANAGER, SUPERVISOR, PARTICIPANT

PROGRAM_APPS = ['participants', 'worklogs', 'pricing', 'production', 'alerts', 'reports', 'agent']


class Command(BaseCommand):
    help = 'Create Django user groups for RBAC: participant, supervisor, case_manager, admin'

    def handle(self, *args, **options):
        groups_config = [
            {
                'name': PARTICIPANT,
                'description': 'Program participant - no staff dashboard access',
            },
            {
                'name': SUPERVISOR,
                'description': 'Floor supervisor - logs work and production, reads dashboards',
            },
            {
                'name': CASE_MANAGER,
                'description': 'Case manager - participant intake and supervisor assignment',
            },
            {
                'name': ADMIN,
                'description': 'Program administrator - full access including deletes and pricing',
            },
        ]

        created_count = 0
        updated_count = 0

        for group_config in groups_config:
            group, created = Group.objects.get_or_create(name=group_config['name'])

            if created:
                self.stdout.write(self.style.SUCCESS(f'✓ Created group: {group_config["name"]}'))
                created_count += 1
            else:
                self.stdout.write(f'  Group already exists: {group_config["name"]}')
                updated_count += 1

            if group_config['name'] == ADMIN:
                group.permissions.set(Permission.objects.all())
                self.stdout.write('  Added all permissions to admin group')
            elif group_config['name'] in (SUPERVISOR, CASE_MANAGER):
                program_permissions = Permission.objects.filter(
                    content_type__app_label__in=PROGRAM_APPS
                ).exclude(codename__startswith='delete_')
                group.permissions.set(program_permissions)
                self.stdout.write(f'  Added program permissions to {group_config["name"]} group')
            else:
                self.stdout.write(f'  No model permissions for {group_config["name"]} group')

        self.stdout.write(self.style.SUCCESS(
            f'\nCompleted: {created_count} groups created, {updated_count} groups already existed'
        ))

"""
Test suite for the core module
Tests: role resolution, view-as, demo mode, whoami, admin user management
"""
from datetime import date
from io import StringIO
from unittest import mock

from django.contrib.auth.models import Group
from django.core.management import call_command
from django.core.management.base import CommandError
from django.db import DatabaseError
from django.test import TestCase, RequestFactory
from rest_framework import status
from bridgepath.core.test_utils import TestDataFactory, AuthenticatedAPIClient
from bridgepath.core.models import User, AuditLog
from bridgepath.core.roles import (
    ADMIN, SUPERVISOR, CASE_MANAGER, PARTICIPANT,
    get_original_role, get_effective_role, is_demo_mode, set_user_role, visible,
)
from bridgepath.core.utils import (
    create_audit_log, format_display_date, parse_day, resolve_date_range, weekdays_between,
)
from bridgepath.participants.models import Participant


class RoleResolutionTests(TestCase):
    """Test role helpers"""

    def setUp(self):
        self.factory = RequestFactory()

    def test_group_membership_sets_role(self):
        user = TestDataFactory.create_user(role=SUPERVISOR)
        self.assertEqual(get_original_role(user), SUPERVISOR)

    def test_superuser_without_group_is_admin(self):
        user = TestDataFactory.create_user(role=None, is_superuser=True)
        self.assertEqual(get_original_role(user), ADMIN)

    def test_unprovisioned_user_has_no_role(self):
        user = TestDataFactory.create_user(role=None)
        self.assertIsNone(get_original_role(user))

    def test_set_user_role_replaces_previous_group(self):
        user = TestDataFactory.create_user(role=SUPERVISOR)
        set_user_role(user, CASE_MANAGER)
        fresh = User.objects.get(pk=user.pk)
        self.assertEqual(list(fresh.groups.values_list('name', flat=True)), [CASE_MANAGER])

    def test_admin_view_as_cookie_changes_effective_role(self):
        request = self.factory.get('/')
        request.user = TestDataFactory.create_user(role=ADMIN)
        request.COOKIES['view-as-role'] = SUPERVISOR
        self.assertEqual(get_effective_role(request), SUPERVISOR)

    def test_view_as_ignored_for_non_admin(self):
        request = self.factory.get('/')
        request.user = TestDataFactory.create_user(role=CASE_MANAGER)
        request.COOKIES['view-as-role'] = ADMIN
        self.assertEqual(get_effective_role(request), CASE_MANAGER)

    def test_demo_mode_from_cookie_or_header(self):
        request = self.factory.get('/')
        self.assertFalse(is_demo_mode(request))
        request.COOKIES['demo-mode'] = 'true'
        self.assertTrue(is_demo_mode(request))
        header_request = self.factory.get('/', HTTP_X_DEMO_MODE='true')
        self.assertTrue(is_demo_mode(header_request))

    def test_visible_hides_mock_rows(self):
        TestDataFactory.create_participant(name='Real Person')
        TestDataFactory.create_participant(name='Mock Person', is_mock=True)
        self.assertEqual(visible(Participant.objects.all(), demo_mode=False).count(), 1)
        self.assertEqual(visible(Participant.objects.all(), demo_mode=True).count(), 2)


class UtilsTests(TestCase):
    """Test date helpers"""

    def test_parse_day_accepts_iso_timestamp(self):
        self.assertEqual(parse_day('2026-03-04T15:00:00Z'), date(2026, 3, 4))
        self.assertIsNone(parse_day('not a date'))

    def test_resolve_date_range_swaps_reversed_dates(self):
        start, end = resolve_date_range({'start': '2026-03-10', 'end': '2026-03-01'})
        self.assertEqual((start, end), (date(2026, 3, 1), date(2026, 3, 10)))

    def test_weekdays_between(self):
        # Mon 2 Mar 2026 through Sun 8 Mar 2026
        self.assertEqual(weekdays_between(date(2026, 3, 2), date(2026, 3, 8)), 5)
        self.assertEqual(weekdays_between(date(2026, 3, 8), date(2026, 3, 2)), 0)

    def test_format_display_date(self):
        self.assertEqual(format_display_date(date(2026, 1, 5)), 'Jan 5, 2026')
        self.assertEqual(format_display_date(None), '-')


class AuthTests(TestCase):
    """Test auth endpoints"""

    def setUp(self):
        self.client = AuthenticatedAPIClient()

    def test_login_returns_role(self):
        TestDataFactory.create_user(username='sam', role=SUPERVISOR)
        response = self.client.post('/api/v1/auth/login/', {'username': 'sam', 'password': 'testpass123'},
                                    format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['role'], SUPERVISOR)
        self.assertIn('access', response.data)

    def test_whoami_unauthenticated(self):
        response = self.client.get('/api/v1/auth/whoami/')
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)
        self.assertFalse(response.data['authenticated'])

    def test_whoami_unprovisioned(self):
        user = TestDataFactory.create_user(role=None)
        self.client.authenticate_user(user)
        response = self.client.get('/api/v1/auth/whoami/')
        self.assertEqual(response.status_code, status.HTTP_409_CONFLICT)
        self.assertFalse(response.data['provisioned'])

    def test_whoami_reports_view_as_role(self):
        admin = TestDataFactory.create_user(role=ADMIN)
        self.client.authenticate_user(admin).view_as(SUPERVISOR)
        response = self.client.get('/api/v1/auth/whoami/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['role'], SUPERVISOR)
        self.assertEqual(response.data['original_role'], ADMIN)

    def test_view_as_requires_admin(self):
        self.client.authenticate_user(TestDataFactory.create_user(role=SUPERVISOR))
        response = self.client.post('/api/v1/auth/view-as/', {'role': CASE_MANAGER}, format='json')
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)

    def test_view_as_sets_and_clears_cookie(self):
        self.client.authenticate_user(TestDataFactory.create_user(role=ADMIN))
        response = self.client.post('/api/v1/auth/view-as/', {'role': CASE_MANAGER}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.cookies['view-as-role'].value, CASE_MANAGER)

        response = self.client.post('/api/v1/auth/view-as/', {'role': ''}, format='json')
        self.assertEqual(response.cookies['view-as-role'].value, '')

    def test_view_as_rejects_unknown_role(self):
        self.client.authenticate_user(TestDataFactory.create_user(role=ADMIN))
        response = self.client.post('/api/v1/auth/view-as/', {'role': 'wizard'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_logout_always_ok(self):
        response = self.client.post('/api/v1/auth/logout/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertTrue(response.data['ok'])


class AdminUserManagementTests(TestCase):
    """Test admin user endpoints"""

    def setUp(self):
        self.admin = TestDataFactory.create_user(role=ADMIN)
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.admin)

    def test_non_admin_forbidden(self):
        self.client.authenticate_user(TestDataFactory.create_user(role=SUPERVISOR))
        response = self.client.get('/api/v1/admin/users/')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_view_as_does_not_revoke_admin_operations(self):
        self.client.view_as(SUPERVISOR)
        response = self.client.get('/api/v1/admin/users/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)

    def test_create_supervisor(self):
        response = self.client.post('/api/v1/admin/users/', {
            'role': SUPERVISOR, 'email': 'New.Sup@Example.org', 'display_name': 'New Sup',
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['email'], 'new.sup@example.org')
        self.assertIn('/reset-password/', response.data['reset_link'])
        user = User.objects.get(pk=response.data['uid'])
        self.assertEqual(get_original_role(user), SUPERVISOR)

    def test_create_participant_requires_assignments(self):
        response = self.client.post('/api/v1/admin/users/', {
            'role': PARTICIPANT, 'email': 'p@example.org', 'display_name': 'Pat Doe',
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_create_participant_creates_record(self):
        case_manager = TestDataFactory.create_user(role=CASE_MANAGER)
        supervisor = TestDataFactory.create_user(role=SUPERVISOR)
        response = self.client.post('/api/v1/admin/users/', {
            'role': PARTICIPANT, 'email': 'pat@example.org', 'display_name': 'Pat Doe',
            'case_manager_id': case_manager.pk, 'supervisor_id': supervisor.pk,
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        participant = Participant.objects.get(user_id=response.data['uid'])
        self.assertEqual(participant.intake_status, 'incomplete')
        self.assertEqual(participant.user.case_manager, case_manager)

    def test_duplicate_email_conflict(self):
        TestDataFactory.create_user(email='taken@example.org')
        response = self.client.post('/api/v1/admin/users/', {
            'role': SUPERVISOR, 'email': 'taken@example.org', 'display_name': 'Someone',
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_409_CONFLICT)
        self.assertEqual(response.data['error'], 'That email is already in use.')

    def test_delete_self_rejected(self):
        response = self.client.post('/api/v1/admin/users/delete/', {'uids': [self.admin.pk]}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_delete_ignores_missing_uids(self):
        target = TestDataFactory.create_user(role=SUPERVISOR)
        response = self.client.post('/api/v1/admin/users/delete/', {'uids': [target.pk, 99999]}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertFalse(User.objects.filter(pk=target.pk).exists())

    def test_delete_partial_failure(self):
        locked = TestDataFactory.create_user(role=SUPERVISOR)
        removable = TestDataFactory.create_user(role=CASE_MANAGER)
        real_delete = User.delete

        def delete(user, *args, **kwargs):
            if user.pk == locked.pk:
                raise DatabaseError('row is locked')
            return real_delete(user, *args, **kwargs)

        with mock.patch.object(User, 'delete', autospec=True, side_effect=delete):
            response = self.client.post('/api/v1/admin/users/delete/',
                                        {'uids': [locked.pk, removable.pk]}, format='json')

        self.assertEqual(response.status_code, status.HTTP_207_MULTI_STATUS)
        self.assertFalse(response.data['ok'])
        self.assertEqual(response.data['error'], 'Some deletions failed.')
        self.assertEqual(response.data['failed'], [{'uid': locked.pk, 'error': 'row is locked'}])
        self.assertTrue(User.objects.filter(pk=locked.pk).exists())
        self.assertFalse(User.objects.filter(pk=removable.pk).exists())

    def test_reset_password_unknown_email(self):
        response = self.client.post('/api/v1/admin/users/reset-password/', {'email': 'nobody@example.org'},
                                    format='json')
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)

    def test_reset_link_can_be_confirmed(self):
        target = TestDataFactory.create_user(email='reset@example.org', role=SUPERVISOR)
        response = self.client.post('/api/v1/admin/users/reset-password/', {'email': 'reset@example.org'},
                                    format='json')
        uid, token = response.data['link'].rstrip('/').split('/')[-2:]
        self.client.logout()
        response = self.client.post('/api/v1/auth/password-reset/confirm/', {
            'uid': uid, 'token': token, 'password': 'A-much-Stronger-pass-42',
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        target.refresh_from_db()
        self.assertTrue(target.check_password('A-much-Stronger-pass-42'))

    def test_participant_assignments_clear_with_null(self):
        supervisor = TestDataFactory.create_user(role=SUPERVISOR)
        participant_user = TestDataFactory.create_user(role=PARTICIPANT)
        participant_user.supervisor = supervisor
        participant_user.save()
        response = self.client.post('/api/v1/admin/participants/assignments/', {
            'participant_id': participant_user.pk, 'supervisor_id': None,
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        participant_user.refresh_from_db()
        self.assertIsNone(participant_user.supervisor)

    def test_update_records_audit_log(self):
        target = TestDataFactory.create_user(role=SUPERVISOR)
        response = self.client.post('/api/v1/admin/users/update/', {
            'target_uid': target.pk, 'role': CASE_MANAGER,
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['user']['role'], CASE_MANAGER)
        self.assertTrue(AuditLog.objects.filter(action='update', object_id=str(target.pk)).exists())


class CaseManagerSupervisorTests(TestCase):
    """Test case manager supervisor reassignment"""

    def setUp(self):
        self.case_manager = TestDataFactory.create_user(role=CASE_MANAGER)
        self.supervisor = TestDataFactory.create_user(role=SUPERVISOR)
        self.participant_user = TestDataFactory.create_user(role=PARTICIPANT)
        self.participant_user.case_manager = self.case_manager
        self.participant_user.save()
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.case_manager)

    def test_assigned_case_manager_sets_supervisor(self):
        response = self.client.post('/api/v1/case-manager/participants/supervisor/', {
            'participant_id': self.participant_user.pk, 'supervisor_id': self.supervisor.pk,
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.participant_user.refresh_from_db()
        self.assertEqual(self.participant_user.supervisor, self.supervisor)

    def test_other_case_manager_forbidden(self):
        self.client.authenticate_user(TestDataFactory.create_user(role=CASE_MANAGER))
        response = self.client.post('/api/v1/case-manager/participants/supervisor/', {
            'participant_id': self.participant_user.pk, 'supervisor_id': self.supervisor.pk,
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_missing_participant(self):
        response = self.client.post('/api/v1/case-manager/participants/supervisor/', {
            'participant_id': 99999,
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)

    def test_supervisor_role_forbidden(self):
        self.client.authenticate_user(self.supervisor)
        response = self.client.post('/api/v1/case-manager/participants/supervisor/', {
            'participant_id': self.participant_user.pk,
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)


class DemoModeAndAuditLogTests(TestCase):
    """Test the demo-mode toggle and the audit log listing"""

    def setUp(self):
        self.client = AuthenticatedAPIClient()
        self.admin = TestDataFactory.create_user(role=ADMIN)
        self.client.authenticate_user(self.admin)

    def test_demo_mode_sets_and_clears_cookie(self):
        response = self.client.post('/api/v1/auth/demo-mode/', {'enabled': True}, format='json')
        self.assertTrue(response.data['demo_mode'])
        self.assertEqual(response.cookies['demo-mode'].value, 'true')

        response = self.client.post('/api/v1/auth/demo-mode/', {'enabled': False}, format='json')
        self.assertFalse(response.data['demo_mode'])
        self.assertEqual(response.cookies['demo-mode'].value, '')

    def test_audit_logs_admin_only(self):
        self.client.authenticate_user(TestDataFactory.create_user(role=SUPERVISOR))
        response = self.client.get('/api/v1/audit-logs/')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_audit_logs_filter_by_action(self):
        create_audit_log(action='create', model_name='Participant', object_id=1, user=self.admin)
        create_audit_log(action='delete', model_name='WorkLog', object_id=2, user=self.admin)
        response = self.client.get('/api/v1/audit-logs/?action=delete')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual([entry['model_name'] for entry in response.data], ['WorkLog'])


class CoreCommandTests(TestCase):
    """Test group setup and admin bootstrap commands"""

    def test_create_user_groups(self):
        call_command('create_user_groups', stdout=StringIO())
        names = set(Group.objects.values_list('name', flat=True))
        self.assertTrue({ADMIN, SUPERVISOR, CASE_MANAGER, PARTICIPANT} <= names)

        call_command('create_user_groups', stdout=StringIO())
        self.assertEqual(Group.objects.filter(name=ADMIN).count(), 1)

    def test_bootstrap_admin_creates_account(self):
        call_command('bootstrap_admin', '--email', 'Director@Example.org', '--password', 'pass12345',
                     stdout=StringIO())
        user = User.objects.get(email='director@example.org')
        self.assertTrue(user.is_superuser)
        self.assertEqual(get_original_role(user), ADMIN)
        self.assertTrue(user.check_password('pass12345'))

    def test_bootstrap_admin_promotes_existing_user(self):
        user = TestDataFactory.create_user(email='lead@example.org', role=SUPERVISOR)
        call_command('bootstrap_admin', '--email', 'lead@example.org', stdout=StringIO())
        user = User.objects.get(pk=user.pk)
        self.assertEqual(get_original_role(user), ADMIN)
        self.assertFalse(user.groups.filter(name=SUPERVISOR).exists())

    def test_bootstrap_admin_new_account_needs_password(self):
        with self.assertRaises(CommandError):
            call_command('bootstrap_admin', '--email', 'nobody@example.org', stdout=StringIO())

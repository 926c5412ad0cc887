"""
Test suite for the worklogs module
Tests: shift recording, filtering, corrections, admin-only delete
"""
from datetime import date
from decimal import Decimal

from django.test import TestCase
from rest_framework import status
from bridgepath.core.roles import ADMIN, SUPERVISOR
from bridgepath.core.test_utils import TestDataFactory, AuthenticatedAPIClient
from bridgepath.worklogs.models import WorkLog


class WorkLogAPITests(TestCase):
    """Test work log endpoints"""

    def setUp(self):
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(TestDataFactory.create_user(role=SUPERVISOR))
        self.participant = TestDataFactory.create_participant(name='Morgan Reyes')

    def test_create_copies_participant_name(self):
        response = self.client.post('/api/v1/work-logs/', {
            'participant_id': self.participant.pk,
            'role': 'Sorting',
            'hours': '6.5',
            'work_date': '2026-03-02',
            'notes': 'Sorted copper',
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        work_log = WorkLog.objects.get(pk=response.data['id'])
        self.assertEqual(work_log.participant_name, 'Morgan Reyes')
        self.assertEqual(work_log.hours, Decimal('6.50'))

    def test_create_requires_participant(self):
        response = self.client.post('/api/v1/work-logs/', {'hours': '4', 'work_date': '2026-03-02'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('participant_id', response.data)

    def test_create_unknown_participant_logged_as_unknown(self):
        response = self.client.post('/api/v1/work-logs/', {
            'participant_id': 99999, 'hours': '4', 'work_date': '2026-03-02',
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        work_log = WorkLog.objects.get(pk=response.data['id'])
        self.assertEqual(work_log.participant_name, 'Unknown')
        self.assertIsNone(work_log.participant)

    def test_hours_bounds(self):
        for hours in ('0.1', '24.5'):
            response = self.client.post('/api/v1/work-logs/', {'hours': hours, 'work_date': '2026-03-02'},
                                        format='json')
            self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
            self.assertIn('hours', response.data)

    def test_date_range_needs_both_ends(self):
        TestDataFactory.create_work_log(self.participant, work_date=date(2026, 3, 2))
        TestDataFactory.create_work_log(self.participant, work_date=date(2026, 4, 2))

        response = self.client.get('/api/v1/work-logs/?start=2026-03-01&end=2026-03-31')
        self.assertEqual(len(response.data['work_logs']), 1)

        response = self.client.get('/api/v1/work-logs/?start=2026-03-01')
        self.assertEqual(len(response.data['work_logs']), 2)

    def test_list_filters_role_and_hides_mock(self):
        TestDataFactory.create_work_log(self.participant, role='Sorting')
        TestDataFactory.create_work_log(self.participant, role='Hammermill')
        TestDataFactory.create_work_log(self.participant, role='Sorting', is_mock=True)
        response = self.client.get('/api/v1/work-logs/?role=Sorting')
        self.assertEqual(len(response.data['work_logs']), 1)

    def test_patch_keeps_participant(self):
        work_log = TestDataFactory.create_work_log(self.participant)
        other = TestDataFactory.create_participant()
        response = self.client.patch(f'/api/v1/work-logs/{work_log.pk}/', {
            'hours': '3', 'participant_id': other.pk,
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        work_log.refresh_from_db()
        self.assertEqual(work_log.hours, Decimal('3.00'))
        self.assertEqual(work_log.participant, self.participant)

    def test_delete_admin_only(self):
        work_log = TestDataFactory.create_work_log(self.participant)
        response = self.client.delete(f'/api/v1/work-logs/{work_log.pk}/')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

        self.client.authenticate_user(TestDataFactory.create_user(role=ADMIN))
        response = self.client.delete(f'/api/v1/work-logs/{work_log.pk}/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertFalse(WorkLog.objects.exists())

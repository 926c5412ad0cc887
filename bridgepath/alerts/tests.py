"""
Test suite for the alerts module
"""
from django.test import TestCase
from rest_framework import status
from bridgepath.core.roles import ADMIN, CASE_MANAGER
from bridgepath.core.test_utils import TestDataFactory, AuthenticatedAPIClient
from bridgepath.alerts.models import Alert


class AlertAPITests(TestCase):
    """Test alert list, raise, update and unread count"""

    def setUp(self):
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(TestDataFactory.create_user(role=CASE_MANAGER))

    def test_list_filters_priority(self):
        TestDataFactory.create_alert(priority='high')
        TestDataFactory.create_alert(priority='low')
        response = self.client.get('/api/v1/alerts/?priority=high')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual([a['priority'] for a in response.data['alerts']], ['high'])

    def test_create_admin_only(self):
        participant = TestDataFactory.create_participant(name='Drew Park')
        payload = {
            'participant_id': participant.pk,
            'type': 'attendance_low',
            'priority': 'high',
            'message': 'Missed three shifts',
        }
        response = self.client.post('/api/v1/alerts/', payload, format='json')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

        self.client.authenticate_user(TestDataFactory.create_user(role=ADMIN))
        response = self.client.post('/api/v1/alerts/', payload, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(Alert.objects.get(pk=response.data['id']).participant_name, 'Drew Park')

    def test_mark_read_and_unread_count(self):
        first = TestDataFactory.create_alert()
        TestDataFactory.create_alert()
        dismissed = TestDataFactory.create_alert()
        dismissed.is_dismissed = True
        dismissed.save()

        response = self.client.get('/api/v1/alerts/unread-count/')
        self.assertEqual(response.data['count'], 2)

        response = self.client.patch(f'/api/v1/alerts/{first.pk}/', {'is_read': True}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        response = self.client.get('/api/v1/alerts/unread-count/')
        self.assertEqual(response.data['count'], 1)

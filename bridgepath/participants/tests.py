"""
Test suite for the participants module
Tests: directory CRUD, intake workflow, certifications, readiness, intelligence
"""
from datetime import timedelta
from decimal import Decimal
from unittest import mock

from django.test import TestCase
from django.utils import timezone
from rest_framework import status
from bridgepath.core.exceptions import OpenRouterError
from bridgepath.core.models import AuditLog
from bridgepath.core.roles import ADMIN, SUPERVISOR, CASE_MANAGER, PARTICIPANT
from bridgepath.core.test_utils import TestDataFactory, AuthenticatedAPIClient
from bridgepath.participants.intelligence import get_metrics, generate_insights, build_context
from bridgepath.participants.models import Participant, ReadinessAssessment
from bridgepath.participants.readiness import readiness_status, assess


class ParticipantDirectoryTests(TestCase):
    """Test participant list, create, update and delete"""

    def setUp(self):
        self.user = TestDataFactory.create_user(role=SUPERVISOR)
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.user)

    def test_participant_role_forbidden(self):
        self.client.authenticate_user(TestDataFactory.create_user(role=PARTICIPANT))
        response = self.client.get('/api/v1/participants/')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_unauthenticated_rejected(self):
        self.client.logout()
        response = self.client.get('/api/v1/participants/')
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)

    def test_list_hides_mock_participants(self):
        TestDataFactory.create_participant(name='Real Person')
        TestDataFactory.create_participant(name='Demo Person', is_mock=True)
        response = self.client.get('/api/v1/participants/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual([p['name'] for p in response.data['participants']], ['Real Person'])

    def test_list_shows_mock_participants_in_demo_mode(self):
        TestDataFactory.create_participant(name='Real Person')
        TestDataFactory.create_participant(name='Demo Person', is_mock=True)
        self.client.enable_demo_mode()
        response = self.client.get('/api/v1/participants/')
        self.assertEqual(len(response.data['participants']), 2)

    def test_list_filters_by_phase_and_status(self):
        TestDataFactory.create_participant(name='Phase One', current_phase=1)
        TestDataFactory.create_participant(name='Phase Two', current_phase=2)
        TestDataFactory.create_participant(name='Graduate', current_phase=2, status='graduated')
        response = self.client.get('/api/v1/participants/?phase=2&status=active')
        self.assertEqual([p['name'] for p in response.data['participants']], ['Phase Two'])

    def test_create_participant(self):
        response = self.client.post('/api/v1/participants/', {
            'name': 'Jordan Miles',
            'entry_date': '2026-01-05',
            'current_phase': 0,
            'categories': ['Reentry'],
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        participant = Participant.objects.get(pk=response.data['id'])
        self.assertEqual(participant.intake_status, 'incomplete')
        self.assertTrue(AuditLog.objects.filter(model_name='Participant', action='create').exists())

    def test_create_requires_category_and_valid_phase(self):
        response = self.client.post('/api/v1/participants/', {
            'name': 'Jordan Miles',
            'entry_date': '2026-01-05',
            'current_phase': 7,
            'categories': [],
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('current_phase', response.data)
        self.assertIn('categories', response.data)

    def test_patch_participant(self):
        participant = TestDataFactory.create_participant(current_phase=1)
        response = self.client.patch(f'/api/v1/participants/{participant.pk}/', {'current_phase': 2}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        participant.refresh_from_db()
        self.assertEqual(participant.current_phase, 2)

    def test_delete_requires_admin(self):
        participant = TestDataFactory.create_participant()
        response = self.client.delete(f'/api/v1/participants/{participant.pk}/')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)
        self.assertEqual(response.data['error'], 'Unauthorized')

        self.client.authenticate_user(TestDataFactory.create_user(role=ADMIN))
        response = self.client.delete(f'/api/v1/participants/{participant.pk}/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertFalse(Participant.objects.filter(pk=participant.pk).exists())

    def test_missing_participant_404(self):
        response = self.client.get('/api/v1/participants/99999/')
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)


class IntakeTests(TestCase):
    """Test intake save and completion"""

    def setUp(self):
        self.case_manager = TestDataFactory.create_user(role=CASE_MANAGER)
        participant_user = TestDataFactory.create_user(role=PARTICIPANT)
        participant_user.case_manager = self.case_manager
        participant_user.save()
        self.participant = TestDataFactory.create_participant(user=participant_user)
        self.url = f'/api/v1/participants/{self.participant.pk}/intake/'
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.case_manager)

    def test_assigned_case_manager_saves_intake(self):
        response = self.client.post(self.url, {'intake': {'city': 'Birmingham', 'goals': 'CDL'}}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['intake_status'], 'in_progress')
        self.assertEqual(response.data['intake']['city'], 'Birmingham')

    def test_intake_fields_merge(self):
        self.client.post(self.url, {'city': 'Birmingham'}, format='json')
        response = self.client.post(self.url, {'goals': 'Forklift'}, format='json')
        self.assertEqual(response.data['intake'], {'city': 'Birmingham', 'goals': 'Forklift'})

    def test_put_completes_intake(self):
        response = self.client.put(self.url, {}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['intake_status'], 'complete')
        self.assertTrue(AuditLog.objects.filter(action='intake_complete').exists())

    def test_unassigned_case_manager_forbidden(self):
        self.client.authenticate_user(TestDataFactory.create_user(role=CASE_MANAGER))
        response = self.client.get(self.url)
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_supervisor_forbidden(self):
        self.client.authenticate_user(TestDataFactory.create_user(role=SUPERVISOR))
        response = self.client.get(self.url)
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_admin_allowed(self):
        self.client.authenticate_user(TestDataFactory.create_user(role=ADMIN))
        response = self.client.get(self.url)
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['intake_status'], 'incomplete')


class CertificationTests(TestCase):
    """Test certification endpoints"""

    def setUp(self):
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(TestDataFactory.create_user(role=SUPERVISOR))
        self.participant = TestDataFactory.create_participant(name='Casey Hart')

    def test_create_and_filter(self):
        other = TestDataFactory.create_participant()
        TestDataFactory.create_certification(other)
        response = self.client.post('/api/v1/certifications/', {
            'participant_id': self.participant.pk,
            'cert_type': 'OSHA-10',
            'earned_date': '2026-02-01',
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['certification']['participant_name'], 'Casey Hart')

        response = self.client.get(f'/api/v1/certifications/?participant_id={self.participant.pk}')
        self.assertEqual(len(response.data['certifications']), 1)


class ReadinessTests(TestCase):
    """Test readiness scoring"""

    def test_status_thresholds(self):
        self.assertEqual(readiness_status(90, 5), 'ready')
        self.assertEqual(readiness_status(95, 4.99), 'watch')
        self.assertEqual(readiness_status(80, 0), 'watch')
        self.assertEqual(readiness_status(79.9, 10), 'not_ready')

    def test_assess_returns_texts(self):
        status_, assessment, recommendation = assess({'attendance_rate': 50, 'revenue_per_hour': 1})
        self.assertEqual(status_, 'not_ready')
        self.assertIn('below threshold', assessment)
        self.assertIn('barriers', recommendation)

    def test_endpoint_persists_assessment(self):
        user = TestDataFactory.create_user(role=SUPERVISOR)
        client = AuthenticatedAPIClient().authenticate_user(user)
        participant = TestDataFactory.create_participant()
        response = client.post('/api/v1/readiness/', {
            'participant_id': participant.pk,
            'metrics': {
                'total_hours': 120, 'attendance_rate': 92, 'total_revenue': 900,
                'revenue_per_hour': 7.5, 'days_in_phase': 60,
            },
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['assessment']['status'], 'ready')
        saved = ReadinessAssessment.objects.get(participant=participant)
        self.assertEqual(saved.generated_by, user)

    def test_endpoint_validates_metrics(self):
        client = AuthenticatedAPIClient().authenticate_user(TestDataFactory.create_user(role=SUPERVISOR))
        participant = TestDataFactory.create_participant()
        response = client.post('/api/v1/readiness/', {'participant_id': participant.pk, 'metrics': {}},
                               format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)


class IntelligenceTests(TestCase):
    """Test participant metrics and the insights endpoint"""

    def setUp(self):
        self.today = timezone.localdate()
        self.participant = TestDataFactory.create_participant(name='Riley Stone', current_phase=2)
        for offset in range(10):
            TestDataFactory.create_work_log(self.participant, hours=Decimal('5.00'),
                                            work_date=self.today - timedelta(days=offset))
        TestDataFactory.create_production_record(self.participant, weight=Decimal('100.00'),
                                                 price_per_unit=Decimal('1.000'), production_date=self.today)
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(TestDataFactory.create_user(role=SUPERVISOR))

    def test_get_metrics(self):
        metrics = get_metrics(self.participant, 30, today=self.today)
        self.assertEqual(metrics['total_hours'], 50.0)
        self.assertEqual(metrics['total_revenue'], 100.0)
        self.assertEqual(metrics['attendance_rate'], 50)
        self.assertEqual(metrics['productivity'], 2.0)
        self.assertEqual(metrics['count'], 10)

    def test_previous_window_is_empty(self):
        metrics = get_metrics(self.participant, 30, 30, today=self.today)
        self.assertEqual(metrics['count'], 0)
        self.assertEqual(metrics['productivity'], 0)

    @mock.patch('bridgepath.participants.intelligence.openrouter.chat_completion')
    def test_generate_insights_keeps_camel_case_keys(self, chat_completion):
        chat_completion.return_value = (
            '```json\n{"snapshot": {"status": "ON TRACK"}, "peerContext": {"productivityRank": "TOP_THIRD"}}\n```'
        )
        insights = generate_insights(build_context(self.participant, self.today))
        self.assertEqual(insights['snapshot']['status'], 'ON TRACK')
        self.assertEqual(insights['peerContext'], {'productivityRank': 'TOP_THIRD'})
        self.assertNotIn('peer_context', insights)
        self.assertIsNone(insights['production'])

    @mock.patch('bridgepath.participants.views.openrouter.is_configured', return_value=False)
    def test_endpoint_without_key(self, _):
        response = self.client.post('/api/v1/participant-intelligence/', {'participant_id': self.participant.pk},
                                    format='json')
        self.assertEqual(response.status_code, status.HTTP_500_INTERNAL_SERVER_ERROR)
        self.assertEqual(response.data['error'], 'AI API key not configured')

    @mock.patch('bridgepath.participants.views.openrouter.is_configured', return_value=False)
    def test_endpoint_unknown_participant_checked_before_key(self, _):
        response = self.client.post('/api/v1/participant-intelligence/', {'participant_id': 99999}, format='json')
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)

        response = self.client.post('/api/v1/participant-intelligence/', {'participant_id': 'abc'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)

    @mock.patch('bridgepath.participants.views.openrouter.is_configured', return_value=True)
    def test_endpoint_unknown_participant(self, _):
        response = self.client.post('/api/v1/participant-intelligence/', {'participant_id': 99999}, format='json')
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)

    @mock.patch('bridgepath.participants.intelligence.openrouter.chat_completion')
    @mock.patch('bridgepath.participants.views.openrouter.is_configured', return_value=True)
    def test_endpoint_returns_insights(self, _, chat_completion):
        chat_completion.return_value = '{"snapshot": {}, "advancement": {}, "peerContext": {}, "production": {}}'
        response = self.client.post('/api/v1/participant-intelligence/', {'participant_id': self.participant.pk},
                                    format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['metrics']['participant']['name'], 'Riley Stone')
        self.assertEqual(set(response.data['insights']), {'snapshot', 'advancement', 'peerContext', 'production'})

    @mock.patch('bridgepath.participants.intelligence.openrouter.chat_completion',
                side_effect=OpenRouterError('boom', status_code=502))
    @mock.patch('bridgepath.participants.views.openrouter.is_configured', return_value=True)
    def test_endpoint_upstream_failure(self, _, __):
        response = self.client.post('/api/v1/participant-intelligence/', {'participant_id': self.participant.pk},
                                    format='json')
        self.assertEqual(response.status_code, status.HTTP_500_INTERNAL_SERVER_ERROR)
        self.assertEqual(response.data['error'], 'Failed to generate AI intelligence')

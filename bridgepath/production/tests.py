"""
Test suite for the production module
Tests: valuation from the price sheet, customer handling, corrections
"""
from decimal import Decimal
from io import StringIO

from django.core.cache import cache
from django.core.management import call_command
from django.core.management.base import CommandError
from django.test import TestCase
from rest_framework import status
from bridgepath.core.roles import ADMIN, SUPERVISOR
from bridgepath.core.test_utils import TestDataFactory, AuthenticatedAPIClient
from bridgepath.participants.management.commands.seed_mock_participants import MOCK_PARTICIPANTS
from bridgepath.participants.models import Participant
from bridgepath.pricing.models import MaterialPrice
from bridgepath.production.models import ProductionRecord
from bridgepath.worklogs.models import WorkLog


class ProductionRecordAPITests(TestCase):
    """Test production record endpoints"""

    def setUp(self):
        cache.clear()
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(TestDataFactory.create_user(role=SUPERVISOR))
        self.participant = TestDataFactory.create_participant(name='Avery Cole')
        TestDataFactory.create_material_price(
            category='Metals & Wire', material_type='Clean Copper', price_per_unit=Decimal('3.250'),
            role='processing',
        )
        TestDataFactory.create_material_price(
            category='Electronics', material_type='Hard Drives', price_per_unit=Decimal('1.500'),
            unit='each', role='hammermill',
        )

    def post_record(self, **overrides):
        payload = {
            'participant_id': self.participant.pk,
            'material_category': 'Metals & Wire',
            'material_type': 'Clean Copper',
            'weight': '12.5',
            'production_date': '2026-03-02',
        }
        payload.update(overrides)
        return self.client.post('/api/v1/production-records/', payload, format='json')

    def test_value_from_price_sheet(self):
        response = self.post_record()
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['value'], 40.63)
        record = ProductionRecord.objects.get(pk=response.data['id'])
        self.assertEqual(record.participant_name, 'Avery Cole')
        self.assertEqual(record.role, 'processing')
        self.assertEqual(record.unit, 'lb')

    def test_unit_and_role_follow_price(self):
        response = self.post_record(material_category='Electronics', material_type='Hard Drives', weight='4')
        record = ProductionRecord.objects.get(pk=response.data['id'])
        self.assertEqual(record.unit, 'each')
        self.assertEqual(record.role, 'hammermill')
        self.assertEqual(record.value, Decimal('6.00'))

    def test_unpriced_material_is_zero(self):
        response = self.post_record(material_type='Brass')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['value'], 0)

    def test_weight_minimum(self):
        response = self.post_record(weight='0.05')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('weight', response.data)

    def test_customer_trimmed(self):
        response = self.post_record(customer='  Metro Recycling  ')
        self.assertEqual(ProductionRecord.objects.get(pk=response.data['id']).customer, 'Metro Recycling')

        response = self.post_record(customer='   ')
        self.assertIsNone(ProductionRecord.objects.get(pk=response.data['id']).customer)

    def test_patch_weight_recalculates(self):
        record_id = self.post_record().data['id']
        response = self.client.patch(f'/api/v1/production-records/{record_id}/', {'weight': '10'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['value'], 32.5)

    def test_patch_to_unpriced_material_keeps_unit_and_price(self):
        record_id = self.post_record(material_category='Electronics', material_type='Hard Drives',
                                     weight='4').data['id']
        response = self.client.patch(f'/api/v1/production-records/{record_id}/',
                                     {'material_type': 'Floppy Disks'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['value'], 0)
        record = ProductionRecord.objects.get(pk=record_id)
        self.assertEqual(record.value, Decimal('0'))
        self.assertEqual(record.unit, 'each')
        self.assertEqual(record.price_per_unit, Decimal('1.500'))
        self.assertEqual(record.material_type, 'Floppy Disks')

    def test_patch_customer_keeps_value(self):
        record = TestDataFactory.create_production_record(self.participant, value=Decimal('99.00'))
        self.client.patch(f'/api/v1/production-records/{record.pk}/', {'customer': 'Walk-in'}, format='json')
        record.refresh_from_db()
        self.assertEqual(record.value, Decimal('99.00'))
        self.assertEqual(record.customer, 'Walk-in')

    def test_list_participant_filter(self):
        TestDataFactory.create_production_record(self.participant)
        TestDataFactory.create_production_record(TestDataFactory.create_participant())
        response = self.client.get(f'/api/v1/production-records/?participant_id={self.participant.pk}')
        self.assertEqual(len(response.data['production_records']), 1)

    def test_delete_admin_only(self):
        record = TestDataFactory.create_production_record(self.participant)
        response = self.client.delete(f'/api/v1/production-records/{record.pk}/')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

        self.client.authenticate_user(TestDataFactory.create_user(role=ADMIN))
        response = self.client.delete(f'/api/v1/production-records/{record.pk}/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)


class SeedCommandTests(TestCase):
    """Test the demo data seed commands end to end"""

    def setUp(self):
        cache.clear()

    def seed(self, name, *args):
        call_command(name, *args, stdout=StringIO())

    def test_seed_requires_participants(self):
        with self.assertRaises(CommandError):
            self.seed('seed_mock_production_records', '--count', '5')

    def test_seed_pipeline(self):
        self.seed('seed_material_prices')
        self.seed('seed_mock_participants')
        self.seed('seed_mock_work_logs', '--count', '40')
        self.seed('seed_mock_production_records', '--count', '40')

        self.assertEqual(Participant.objects.filter(is_mock=True).count(), len(MOCK_PARTICIPANTS))
        self.assertEqual(WorkLog.objects.filter(is_mock=True).count(), 40)
        self.assertEqual(ProductionRecord.objects.filter(is_mock=True).count(), 40)
        self.assertFalse(ProductionRecord.objects.filter(is_mock=False).exists())

        for log in WorkLog.objects.all():
            self.assertTrue(Decimal('4') <= log.hours <= Decimal('8.75'))
        for record in ProductionRecord.objects.filter(unit='each'):
            self.assertTrue(5 <= record.weight <= 50)

    def test_seed_is_repeatable_and_clearable(self):
        self.seed('seed_material_prices')
        price_count = MaterialPrice.objects.count()
        self.seed('seed_material_prices')
        self.assertEqual(MaterialPrice.objects.count(), price_count)

        self.seed('seed_mock_participants')
        self.seed('seed_mock_work_logs', '--count', '10')
        self.seed('seed_mock_work_logs', '--count', '5', '--clear')
        self.assertEqual(WorkLog.objects.count(), 5)

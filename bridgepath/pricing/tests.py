"""
Test suite for the pricing module
Tests: price sheet access, price lookup, cache invalidation
"""
from decimal import Decimal

from django.core.cache import cache
from django.test import TestCase
from rest_framework import status
from bridgepath.core.roles import ADMIN, SUPERVISOR, PARTICIPANT
from bridgepath.core.test_utils import TestDataFactory, AuthenticatedAPIClient
from bridgepath.pricing.models import MaterialPrice
from bridgepath.pricing.services import find_price, calculate_value, get_price_table


class PriceLookupTests(TestCase):
    """Test price table lookup"""

    def setUp(self):
        cache.clear()

    def test_first_match_wins(self):
        first = TestDataFactory.create_material_price(price_per_unit=Decimal('3.100'))
        TestDataFactory.create_material_price(price_per_unit=Decimal('9.000'))
        self.assertEqual(find_price('Metals & Wire', 'Clean Copper')['id'], first.pk)

    def test_no_match(self):
        TestDataFactory.create_material_price()
        self.assertIsNone(find_price('Metals & Wire', 'Brass'))

    def test_cache_dropped_on_change(self):
        price = TestDataFactory.create_material_price(price_per_unit=Decimal('3.000'))
        self.assertEqual(get_price_table()[0]['price_per_unit'], Decimal('3.000'))
        price.price_per_unit = Decimal('4.250')
        price.save()
        self.assertEqual(get_price_table()[0]['price_per_unit'], Decimal('4.250'))
        price.delete()
        self.assertEqual(get_price_table(), [])

    def test_calculate_value_rounds_half_up(self):
        self.assertEqual(calculate_value(Decimal('0.125'), Decimal('1.00')), Decimal('0.13'))
        self.assertEqual(calculate_value('2.5', '10'), Decimal('25.00'))


class MaterialPriceAPITests(TestCase):
    """Test price sheet endpoints"""

    def setUp(self):
        cache.clear()
        self.client = AuthenticatedAPIClient()
        self.admin = TestDataFactory.create_user(role=ADMIN)

    def test_any_role_can_read(self):
        TestDataFactory.create_material_price()
        self.client.authenticate_user(TestDataFactory.create_user(role=PARTICIPANT))
        response = self.client.get('/api/v1/material-prices/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(len(response.data['prices']), 1)

    def test_create_admin_only(self):
        payload = {
            'category': 'Electronics',
            'material_type': 'Circuit Boards',
            'price_per_unit': '1.250',
            'unit': 'lb',
            'role': 'sorting',
        }
        self.client.authenticate_user(TestDataFactory.create_user(role=SUPERVISOR))
        response = self.client.post('/api/v1/material-prices/', payload, format='json')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

        self.client.authenticate_user(self.admin)
        response = self.client.post('/api/v1/material-prices/', payload, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertTrue(MaterialPrice.objects.filter(material_type='Circuit Boards').exists())

    def test_negative_price_rejected(self):
        self.client.authenticate_user(self.admin)
        response = self.client.post('/api/v1/material-prices/', {
            'category': 'Electronics', 'material_type': 'Cables', 'price_per_unit': '-1',
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_update_and_delete(self):
        price = TestDataFactory.create_material_price()
        self.client.authenticate_user(self.admin)
        response = self.client.patch(f'/api/v1/material-prices/{price.pk}/', {'price_per_unit': '3.500'},
                                     format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(find_price(price.category, price.material_type)['price_per_unit'], Decimal('3.500'))

        response = self.client.delete(f'/api/v1/material-prices/{price.pk}/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertIsNone(find_price(price.category, price.material_type))

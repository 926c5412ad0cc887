"""
Test utilities and factories for creating test data
"""
from django.contrib.auth import get_user_model
from rest_framework.test import APIClient
from rest_framework_simplejwt.tokens import RefreshToken
from bridgepath.core.roles import ADMIN, DEMO_MODE_COOKIE, VIEW_AS_COOKIE, set_user_role
from bridgepath.participants.models import Participant, Certification
from bridgepath.worklogs.models import WorkLog
from bridgepath.pricing.models import MaterialPrice
from bridgepath.production.models import ProductionRecord
from bridgepath.alerts.models import Alert
from bridgepath.reports.models import Report
from decimal import Decimal
from django.utils import timezone
import random
import string

User = get_user_model()


class TestDataFactory:
    """Factory class for creating test data"""

    @staticmethod
    def random_string(length=10):
        """Generate a random string"""
        return ''.join(random.choices(string.ascii_letters + string.digits, k=length))

    @staticmethod
    def create_user(username=None, email=None, password='testpass123', role=ADMIN, is_superuser=False,
                    display_name=None):
        """Create a test user in a role group (``role=None`` leaves the account unprovisioned)"""
        if not username:
            username = f'testuser_{TestDataFactory.random_string(6)}'
        if not email:
            email = f'{username}@test.com'
        user = User.objects.create_user(
            username=username,
            email=email,
            password=password,
            is_superuser=is_superuser,
            display_name=display_name or username,
        )
        if role:
            set_user_role(user, role)
        return user

    @staticmethod
    def create_participant(name=None, current_phase=1, status='active', is_mock=False, entry_date=None, **kwargs):
        """Create a test participant"""
        if not name:
            name = f'Participant {TestDataFactory.random_string(6)}'
        return Participant.objects.create(
            name=name,
            current_phase=current_phase,
            status=status,
            categories=kwargs.pop('categories', ['Reentry']),
            entry_date=entry_date or timezone.localdate(),
            is_mock=is_mock,
            **kwargs
        )

    @staticmethod
    def create_certification(participant, cert_type='Forklift', earned_date=None):
        return Certification.objects.create(
            participant=participant,
            cert_type=cert_type,
            earned_date=earned_date or timezone.localdate(),
        )

    @staticmethod
    def create_work_log(participant=None, hours=Decimal('6.00'), role='Processing', work_date=None,
                        notes=None, is_mock=False):
        """Create a test work log"""
        return WorkLog.objects.create(
            participant=participant,
            participant_name=participant.name if participant else 'Unknown',
            role=role,
            hours=hours,
            notes=notes,
            work_date=work_date or timezone.localdate(),
            is_mock=is_mock,
        )

    @staticmethod
    def create_material_price(category='Metals & Wire', material_type='Clean Copper', price_per_unit=Decimal('3.000'),
                              unit='lb', role='processing', is_active=True):
        """Create a test material price"""
        return MaterialPrice.objects.create(
            category=category,
            material_type=material_type,
            price_per_unit=price_per_unit,
            unit=unit,
            role=role,
            is_active=is_active,
        )

    @staticmethod
    def create_production_record(participant=None, material_category='Metals & Wire', material_type='Clean Copper',
                                 weight=Decimal('10.00'), value=None, unit='lb', price_per_unit=Decimal('3.000'),
                                 production_date=None, customer=None, is_mock=False):
        """Create a test production record; value defaults to weight x price"""
        if value is None:
            value = (Decimal(weight) * Decimal(price_per_unit)).quantize(Decimal('0.01'))
        return ProductionRecord.objects.create(
            participant=participant,
            participant_name=participant.name if participant else 'Unknown',
            material_category=material_category,
            material_type=material_type,
            weight=weight,
            value=value,
            unit=unit,
            price_per_unit=price_per_unit,
            role='processing',
            customer=customer,
            production_date=production_date or timezone.localdate(),
            is_mock=is_mock,
        )

    @staticmethod
    def create_alert(participant=None, type='attendance_low', priority='medium', message=None, is_read=False):
        """Create a test alert"""
        return Alert.objects.create(
            participant=participant,
            participant_name=participant.name if participant else None,
            type=type,
            priority=priority,
            message=message or f'Alert {TestDataFactory.random_string(6)}',
            is_read=is_read,
        )

    @staticmethod
    def create_report(created_by=None, report_type='production', start_date=None, end_date=None):
        """Create a saved report"""
        end_date = end_date or timezone.localdate()
        start_date = start_date or end_date
        return Report.objects.create(
            title=f'Report {TestDataFactory.random_string(6)}',
            report_type=report_type,
            start_date=start_date,
            end_date=end_date,
            stats={'participant_count': 0},
            created_by=created_by,
        )


class AuthenticatedAPIClient(APIClient):
    """APIClient with authentication helper"""

    def authenticate_user(self, user):
        """Authenticate the client with a user"""
        refresh = RefreshToken.for_user(user)
        self.credentials(HTTP_AUTHORIZATION=f'Bearer {refresh.access_token}')
        return self

    def enable_demo_mode(self):
        self.cookies[DEMO_MODE_COOKIE] = 'true'
        return self

    def view_as(self, role):
        self.cookies[VIEW_AS_COOKIE] = role
        return self

    def logout(self):
        """Remove authentication"""
        self.credentials()
        self.cookies.clear()

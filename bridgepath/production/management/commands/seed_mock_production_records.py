"""
Management command to seed mock production records for demo mode
"""
import random
from datetime import timedelta
from decimal import Decimal

from django.core.management.base import BaseCommand, CommandError
from django.db import transaction
from django.utils import timezone

from bridgepath.participants.models import Participant
from bridgepath.pricing.models import MaterialPrice
from bridgepath.pricing.services import calculate_value
from bridgepath.production.models import ProductionRecord

CUSTOMERS = [
    'Donation Box',
    'Ophthalmologist in Fairhope',
    'City Recycling Drop-off',
    'Community Drive',
    'Local School',
    'Retail Partner',
    'Corporate Partner',
    'Neighborhood Collection',
    '',
    '',
    '',
]

CONTAINER_TYPES = [
    'GAYLORD WITH PALLET (62 LBS)',
    'TRASH CAN (8 LBS)',
    'BLUE BIN (436 LBS)',
    'BLACK DONATION BIN (175 LBS)',
    '',
]


def generate_weight(unit):
    if unit == 'each':
        return Decimal(random.randint(5, 50))
    if random.random() < 0.7:
        weight = random.randint(50, 250) + random.random()
    else:
        weight = random.randint(10, 80) + random.random()
    return Decimal(f"{weight:.2f}")


class Command(BaseCommand):
    help = "Seeds mock production records for demo mode"

    def add_arguments(self, parser):
        parser.add_argument('--count', type=int, default=1000, help='Number of records to create')
        parser.add_argument('--days', type=int, default=90, help='Spread records over this many past days')
        parser.add_argument('--clear', action='store_true', help='Delete existing mock production records first')

    def handle(self, *args, **options):
        participants = list(Participant.objects.filter(is_mock=True).only('id', 'name'))
        if not participants:
            raise CommandError('No mock participants found. Run seed_mock_participants first.')

        prices = list(MaterialPrice.objects.all())
        if not prices:
            raise CommandError('No material prices found. Run seed_material_prices first.')

        if options['clear']:
            deleted, _ = ProductionRecord.objects.filter(is_mock=True).delete()
            self.stdout.write(self.style.WARNING(f"Deleted {deleted} existing mock production records."))

        today = timezone.localdate()
        records = []
        for _ in range(options['count']):
            participant = random.choice(participants)
            price = random.choice(prices)
            weight = generate_weight(price.unit)
            records.append(ProductionRecord(
                participant=participant,
                participant_name=participant.name,
                material_category=price.category,
                material_type=price.material_type,
                weight=weight,
                value=calculate_value(price.price_per_unit, weight),
                unit=price.unit,
                price_per_unit=price.price_per_unit,
                role=price.role,
                customer=random.choice(CUSTOMERS) or None,
                container_type=random.choice(CONTAINER_TYPES) or None,
                production_date=today - timedelta(days=random.randint(0, options['days'])),
                is_mock=True,
            ))

        with transaction.atomic():
            ProductionRecord.objects.bulk_create(records, batch_size=500)

        self.stdout.write(self.style.SUCCESS(f"Seeded {len(records)} mock production records."))

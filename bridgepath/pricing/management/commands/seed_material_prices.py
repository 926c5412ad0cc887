"""
Management command to load the canonical material price sheet
"""
from decimal import Decimal

from django.core.management.base import BaseCommand
from django.db import transaction
from django.utils import timezone

from bridgepath.pricing.models import MaterialPrice

# (category, material_type, price_per_unit, unit, role)
MATERIAL_PRICES = [
    # Processing
    ('Circuit Boards', 'Low Grade', '0.75', 'lb', 'processing'),
    ('Circuit Boards', 'Mid Grade', '2.33', 'lb', 'processing'),
    ('Circuit Boards', 'High Grade/Server', '3.25', 'lb', 'processing'),
    ('Circuit Boards', 'Mother Boards', '2.4', 'lb', 'processing'),
    ('Circuit Boards', 'Expansion Boards', '5.0', 'lb', 'processing'),
    ('Circuit Boards', 'RAM', '0.85', 'each', 'processing'),
    ('Circuit Boards', 'Pinless Processors', '0.75', 'each', 'processing'),
    ('Circuit Boards', 'Processors with Pins', '0.75', 'each', 'processing'),
    ('Metals & Wire', 'Clean Aluminum', '0.6', 'lb', 'processing'),
    ('Metals & Wire', 'Dirty Aluminum', '0.2', 'lb', 'processing'),
    ('Metals & Wire', 'Aluminum Heat Sinks', '0.7', 'lb', 'processing'),
    ('Metals & Wire', 'Copper+Aluminum Heat Sinks', '0.9', 'lb', 'processing'),
    ('Metals & Wire', 'Wire', '1.47', 'lb', 'processing'),
    ('Metals & Wire', 'Clean Copper', '3.0', 'lb', 'processing'),
    ('Components', 'Power Supplies', '0.34', 'lb', 'processing'),
    ('Components', 'CD and DVD Drives', '0.3', 'lb', 'processing'),
    ('Components', 'Lead Acid Batteries', '0.25', 'lb', 'processing'),

    # Sorting
    ('Metals & Wire', 'Clean Aluminum', '0.6', 'lb', 'sorting'),
    ('Metals & Wire', 'Dirty Aluminum', '0.2', 'lb', 'sorting'),
    ('Metals & Wire', 'Clean Copper', '3.0', 'lb', 'sorting'),
    ('Wire & Cable', 'Copper Wire', '1.47', 'lb', 'sorting'),
    ('Wire & Cable', 'Christmas Light Wire', '0.65', 'lb', 'sorting'),
    ('Wire & Cable', 'Ethernet Cable', '1.4', 'lb', 'sorting'),
    ('Components', 'Adapters', '0.3', 'lb', 'sorting'),
    ('Components', 'Batteries (laptop & cellphone)', '0.9', 'lb', 'sorting'),
    ('Components', 'Pin Connectors (VGA)', '0.93', 'lb', 'sorting'),
    ('Electronics', 'Laptops', '1.0', 'each', 'sorting'),
    ('Electronics', 'Tablets & Cellphones', '1.0', 'each', 'sorting'),
    ('Electronics', 'Cellphones (no battery)', '5.1', 'each', 'sorting'),
    ('Electronics', 'Cellphones with Battery', '3.6', 'each', 'sorting'),
    ('Electronics', 'Monitors', '1.0', 'each', 'sorting'),

    # Hammermill
    ('Hammermill', 'Steel', '0.155', 'lb', 'hammermill'),
    ('Hammermill', 'Stainless Steel', '0.25', 'lb', 'hammermill'),
    ('Hammermill', 'Hammermill Copper', '3.0', 'lb', 'hammermill'),
    ('Hammermill', 'Dirty Aluminum (MRP)', '0.35', 'lb', 'hammermill'),
    ('Hammermill', 'Clean Aluminum', '0.6', 'lb', 'hammermill'),
    ('Hammermill', 'Hammermill Wire', '0.9', 'lb', 'hammermill'),
    ('Hammermill', 'Shred Board', '0.7', 'lb', 'hammermill'),

    # Other
    ('Other', 'SHRED (from Deans)', '0.09', 'lb', 'other'),
    ('Other', 'Flat TVs (from RENEW)', '0.06', 'lb', 'other'),
    ('Other', 'Cardboard', '0.02', 'lb', 'other'),
]


class Command(BaseCommand):
    help = "Loads the canonical material price sheet"

    def add_arguments(self, parser):
        parser.add_argument(
            '--clear',
            action='store_true',
            help='Delete all existing material prices before loading',
        )

    def handle(self, *args, **options):
        today = timezone.localdate()

        with transaction.atomic():
            if options['clear']:
                self.stdout.write(self.style.WARNING("Clearing all existing material prices..."))
                deleted, _ = MaterialPrice.objects.all().delete()
                self.stdout.write(self.style.SUCCESS(f"Deleted {deleted} material prices."))

            created_count = 0
            skipped_count = 0
            for category, material_type, price, unit, role in MATERIAL_PRICES:
                _, created = MaterialPrice.objects.get_or_create(
                    category=category,
                    material_type=material_type,
                    role=role,
                    defaults={
                        'price_per_unit': Decimal(price),
                        'unit': unit,
                        'is_active': True,
                        'effective_date': today,
                    },
                )
                if created:
                    created_count += 1
                else:
                    skipped_count += 1

        self.stdout.write(self.style.SUCCESS(
            f"Seeded {created_count} material prices ({skipped_count} already existed)."
        ))
        for role, _ in MaterialPrice.ROLE_CHOICES:
            count = sum(1 for row in MATERIAL_PRICES if row[4] == role)
            self.stdout.write(f"  - {role.title()}: {count}")

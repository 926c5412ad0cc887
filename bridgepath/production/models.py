from decimal import Decimal

from django.core.validators import MinValueValidator
from django.db import models

from bridgepath.participants.models import Participant


class ProductionRecord(models.Model):
    """Material a participant processed, valued at the price sheet rate"""
    UNIT_CHOICES = [
        ('lb', 'Pound'),
        ('each', 'Each'),
    ]

    participant = models.ForeignKey(Participant, on_delete=models.SET_NULL, null=True, blank=True, related_name='production_records')
    participant_name = models.CharField(max_length=200, default='Unknown')
    material_category = models.CharField(max_length=100)
    material_type = models.CharField(max_length=200)
    weight = models.DecimalField(max_digits=10, decimal_places=2, validators=[MinValueValidator(Decimal('0.1'))])
    value = models.DecimalField(max_digits=12, decimal_places=2, default=0)
    unit = models.CharField(max_length=10, choices=UNIT_CHOICES, default='lb')
    price_per_unit = models.DecimalField(max_digits=10, decimal_places=3, default=0)
    role = models.CharField(max_length=20, blank=True, null=True)
    customer = models.CharField(max_length=200, blank=True, null=True)
    container_type = models.CharField(max_length=100, blank=True, null=True)
    production_date = models.DateField()
    is_mock = models.BooleanField(default=False)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return f"{self.participant_name} - {self.material_type} {self.weight}{self.unit} ({self.production_date})"

    class Meta:
        db_table = 'production_records'
        ordering = ['-production_date', '-created_at']
        indexes = [
            models.Index(fields=['production_date'], name='idx_production_date'),
            models.Index(fields=['participant', 'production_date'], name='idx_production_part_date'),
            models.Index(fields=['is_mock'], name='idx_production_mock'),
        ]

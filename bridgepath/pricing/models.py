from decimal import Decimal

from django.core.validators import MinValueValidator
from django.db import models


class MaterialPrice(models.Model):
    """Buyer price for one material type, per pound or per item"""
    UNIT_CHOICES = [
        ('lb', 'Pound'),
        ('each', 'Each'),
    ]

    ROLE_CHOICES = [
        ('processing', 'Processing'),
        ('sorting', 'Sorting'),
        ('hammermill', 'Hammermill'),
        ('other', 'Other'),
    ]

    category = models.CharField(max_length=100)
    material_type = models.CharField(max_length=200)
    price_per_unit = models.DecimalField(max_digits=10, decimal_places=3, validators=[MinValueValidator(Decimal('0'))])
    unit = models.CharField(max_length=10, choices=UNIT_CHOICES, default='lb')
    role = models.CharField(max_length=20, choices=ROLE_CHOICES, default='processing')
    is_active = models.BooleanField(default=True)
    effective_date = models.DateField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return f"{self.category} / {self.material_type} (${self.price_per_unit}/{self.unit})"

    class Meta:
        db_table = 'material_prices'
        ordering = ['category', 'material_type', 'id']
        indexes = [
            models.Index(fields=['category', 'material_type'], name='idx_price_category_type'),
            models.Index(fields=['role'], name='idx_price_role'),
        ]

from decimal import Decimal

from rest_framework import serializers
from .models import MaterialPrice


class MaterialPriceSerializer(serializers.ModelSerializer):
    category = serializers.CharField(min_length=1, max_length=100)
    material_type = serializers.CharField(min_length=1, max_length=200)
    price_per_unit = serializers.DecimalField(max_digits=10, decimal_places=3, min_value=Decimal('0'))

    class Meta:
        model = MaterialPrice
        fields = [
            'id', 'category', 'material_type', 'price_per_unit', 'unit', 'role',
            'is_active', 'effective_date', 'created_at', 'updated_at'
        ]
        read_only_fields = ['created_at', 'updated_at']

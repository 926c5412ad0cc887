from decimal import Decimal

from rest_framework import serializers

from bridgepath.participants.models import Participant
from bridgepath.pricing.services import find_price, calculate_value
from .models import ProductionRecord


class ProductionRecordSerializer(serializers.ModelSerializer):
    participant_id = serializers.PrimaryKeyRelatedField(
        source='participant', queryset=Participant.objects.all(), required=False, allow_null=True
    )
    material_category = serializers.CharField(min_length=1, max_length=100)
    material_type = serializers.CharField(min_length=1, max_length=200)
    weight = serializers.DecimalField(max_digits=10, decimal_places=2, min_value=Decimal('0.1'))
    customer = serializers.CharField(required=False, allow_null=True, allow_blank=True, max_length=200)
    container_type = serializers.CharField(required=False, allow_null=True, allow_blank=True, max_length=100)

    class Meta:
        model = ProductionRecord
        fields = [
            'id', 'participant_id', 'participant_name', 'material_category', 'material_type', 'weight',
            'value', 'unit', 'price_per_unit', 'role', 'customer', 'container_type', 'production_date',
            'is_mock', 'created_at', 'updated_at'
        ]
        read_only_fields = [
            'participant_name', 'value', 'unit', 'price_per_unit', 'role', 'is_mock', 'created_at', 'updated_at'
        ]

    def validate_customer(self, value):
        return (value or '').strip() or None

    def validate_container_type(self, value):
        return value or None

    def apply_price(self, instance, category, material_type, weight):
        """Value the record from the first matching price; no match values it at zero."""
        price = find_price(category, material_type)
        if price is None:
            instance.value = Decimal('0')
            return
        instance.price_per_unit = price['price_per_unit']
        instance.unit = price['unit']
        instance.role = price['role']
        instance.value = calculate_value(price['price_per_unit'], weight)

    def create(self, validated_data):
        participant = validated_data.get('participant')
        instance = ProductionRecord(**validated_data)
        instance.participant_name = participant.name if participant else 'Unknown'
        self.apply_price(instance, instance.material_category, instance.material_type, instance.weight)
        instance.save()
        return instance

    def update(self, instance, validated_data):
        validated_data.pop('participant', None)
        recalculate = any(
            field in validated_data for field in ('material_category', 'material_type', 'weight')
        )
        for attr, value in validated_data.items():
            setattr(instance, attr, value)
        if recalculate:
            self.apply_price(instance, instance.material_category, instance.material_type, instance.weight)
        instance.save()
        return instance

from django.contrib import admin
from .models import ProductionRecord


@admin.register(ProductionRecord)
class ProductionRecordAdmin(admin.ModelAdmin):
    list_display = ['participant_name', 'material_category', 'material_type', 'weight', 'unit', 'value', 'production_date', 'is_mock']
    list_filter = ['material_category', 'role', 'unit', 'is_mock']
    search_fields = ['participant_name', 'material_type', 'customer']
    raw_id_fields = ['participant']
    date_hierarchy = 'production_date'
    readonly_fields = ['value', 'price_per_unit', 'created_at', 'updated_at']

from django.contrib import admin
from .models import MaterialPrice


@admin.register(MaterialPrice)
class MaterialPriceAdmin(admin.ModelAdmin):
    list_display = ['category', 'material_type', 'price_per_unit', 'unit', 'role', 'is_active', 'effective_date']
    list_filter = ['role', 'unit', 'is_active', 'category']
    search_fields = ['category', 'material_type']
    list_editable = ['price_per_unit', 'is_active']

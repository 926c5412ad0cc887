from django.contrib import admin
from .models import Report


@admin.register(Report)
class ReportAdmin(admin.ModelAdmin):
    list_display = ['title', 'report_type', 'start_date', 'end_date', 'created_by', 'generated_at']
    list_filter = ['report_type', 'generated_at']
    search_fields = ['title']
    readonly_fields = ['stats', 'chart_configurations', 'visualization_specs', 'generated_at', 'updated_at']

from django.contrib import admin
from .models import WorkLog


@admin.register(WorkLog)
class WorkLogAdmin(admin.ModelAdmin):
    list_display = ['participant_name', 'role', 'hours', 'work_date', 'is_mock']
    list_filter = ['role', 'is_mock', 'work_date']
    search_fields = ['participant_name', 'notes']
    raw_id_fields = ['participant']
    date_hierarchy = 'work_date'

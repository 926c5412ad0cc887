from django.contrib import admin
from .models import Alert


@admin.register(Alert)
class AlertAdmin(admin.ModelAdmin):
    list_display = ['type', 'priority', 'participant_name', 'is_read', 'is_dismissed', 'created_at']
    list_filter = ['type', 'priority', 'is_read', 'is_dismissed']
    search_fields = ['message', 'participant_name']
    raw_id_fields = ['participant']

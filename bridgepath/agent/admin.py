from django.contrib import admin
from .models import OpsAgentSession


@admin.register(OpsAgentSession)
class OpsAgentSessionAdmin(admin.ModelAdmin):
    list_display = ['id', 'user', 'message_count', 'created_at', 'updated_at']
    search_fields = ['user__username', 'user__email']
    raw_id_fields = ['user']
    readonly_fields = ['created_at', 'updated_at']

    def message_count(self, obj):
        return len(obj.messages or [])
    message_count.short_description = 'Messages'

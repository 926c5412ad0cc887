from django.contrib import admin
from django.contrib.auth.admin import UserAdmin as BaseUserAdmin
from .models import User, AuditLog


@admin.register(User)
class UserAdmin(BaseUserAdmin):
    list_display = ['username', 'email', 'display_name', 'case_manager', 'supervisor', 'is_active', 'date_joined']
    list_filter = ['is_active', 'is_superuser', 'groups', 'date_joined']
    search_fields = ['username', 'email', 'display_name']
    ordering = ['display_name', 'username']
    raw_id_fields = ['case_manager', 'supervisor']
    fieldsets = BaseUserAdmin.fieldsets + (
        ('Program Profile', {'fields': ('display_name', 'phone', 'case_manager', 'supervisor')}),
    )
    add_fieldsets = BaseUserAdmin.add_fieldsets + (
        ('Program Profile', {'fields': ('display_name', 'phone')}),
    )


@admin.register(AuditLog)
class AuditLogAdmin(admin.ModelAdmin):
    list_display = ['user', 'action', 'model_name', 'object_id', 'object_name', 'ip_address', 'created_at']
    list_filter = ['action', 'model_name', 'created_at']
    search_fields = ['user__username', 'model_name', 'object_id', 'object_name']
    ordering = ['-created_at']
    readonly_fields = ['user', 'action', 'model_name', 'object_id', 'object_name', 'changes', 'ip_address', 'created_at']

from django.contrib import admin
from .models import Participant, Certification, ReadinessAssessment


class CertificationInline(admin.TabularInline):
    model = Certification
    extra = 0
    fields = ['cert_type', 'earned_date', 'expiration_date']


@admin.register(Participant)
class ParticipantAdmin(admin.ModelAdmin):
    list_display = ['name', 'current_phase', 'status', 'intake_status', 'entry_date', 'is_mock']
    list_filter = ['status', 'current_phase', 'intake_status', 'is_mock']
    search_fields = ['name', 'email', 'phone']
    raw_id_fields = ['user']
    readonly_fields = ['created_at', 'updated_at', 'intake_updated_at']
    inlines = [CertificationInline]


@admin.register(Certification)
class CertificationAdmin(admin.ModelAdmin):
    list_display = ['cert_type', 'participant', 'earned_date', 'expiration_date']
    search_fields = ['cert_type', 'participant__name']
    list_filter = ['cert_type']


@admin.register(ReadinessAssessment)
class ReadinessAssessmentAdmin(admin.ModelAdmin):
    list_display = ['participant', 'status', 'generated_by', 'generated_at']
    list_filter = ['status']
    readonly_fields = ['generated_at']

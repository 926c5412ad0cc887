from django.db import models

from bridgepath.core.models import User


class Report(models.Model):
    """Grant/impact report generated for a date range"""
    REPORT_TYPE_CHOICES = [
        ('production', 'Production Summary'),
        ('outcomes', 'Participant Outcomes'),
        ('environmental', 'Environmental Impact'),
        ('comprehensive', 'Comprehensive Impact'),
    ]

    title = models.CharField(max_length=300)
    report_type = models.CharField(max_length=20, choices=REPORT_TYPE_CHOICES)
    start_date = models.DateField()
    end_date = models.DateField()
    stats = models.JSONField(default=dict)
    narrative = models.TextField(blank=True, null=True)
    pdf_narrative = models.TextField(blank=True, null=True)
    stories = models.TextField(blank=True, null=True)
    charts = models.TextField(blank=True, null=True)  # raw model output when chart JSON is unparseable
    chart_configurations = models.JSONField(default=list, blank=True)
    visualization_specs = models.JSONField(default=list, blank=True)
    include_narrative = models.BooleanField(default=True)
    include_stories = models.BooleanField(default=False)
    include_charts = models.BooleanField(default=False)
    created_by = models.ForeignKey(User, on_delete=models.SET_NULL, null=True, blank=True, related_name='reports')
    generated_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return self.title

    class Meta:
        db_table = 'reports'
        ordering = ['-generated_at']

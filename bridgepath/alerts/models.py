from django.db import models

from bridgepath.participants.models import Participant


class Alert(models.Model):
    """Operational notice for staff about a participant or the program"""
    TYPE_CHOICES = [
        ('attendance_low', 'Attendance Low'),
        ('productivity_drop', 'Productivity Drop'),
        ('phase_ready', 'Phase Ready'),
        ('cert_expiring', 'Certification Expiring'),
        ('milestone', 'Milestone'),
    ]

    PRIORITY_CHOICES = [
        ('high', 'High'),
        ('medium', 'Medium'),
        ('low', 'Low'),
    ]

    participant = models.ForeignKey(Participant, on_delete=models.SET_NULL, null=True, blank=True, related_name='alerts')
    participant_name = models.CharField(max_length=200, blank=True, null=True)
    type = models.CharField(max_length=30, choices=TYPE_CHOICES)
    priority = models.CharField(max_length=10, choices=PRIORITY_CHOICES)
    message = models.TextField()
    is_read = models.BooleanField(default=False)
    is_dismissed = models.BooleanField(default=False)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return f"[{self.priority}] {self.get_type_display()}: {self.message[:50]}"

    class Meta:
        db_table = 'alerts'
        ordering = ['-created_at']
        indexes = [
            models.Index(fields=['priority', 'is_read'], name='idx_alert_priority_read'),
            models.Index(fields=['-created_at'], name='idx_alert_created'),
        ]

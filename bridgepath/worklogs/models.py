from decimal import Decimal

from django.core.validators import MaxValueValidator, MinValueValidator
from django.db import models

from bridgepath.participants.models import Participant


class WorkLog(models.Model):
    """Hours a participant worked on a crew for one day"""
    ROLE_CHOICES = [
        ('Processing', 'Processing'),
        ('Sorting', 'Sorting'),
        ('Hammermill', 'Hammermill'),
        ('Truck', 'Truck'),
    ]

    participant = models.ForeignKey(Participant, on_delete=models.SET_NULL, null=True, blank=True, related_name='work_logs')
    participant_name = models.CharField(max_length=200, default='Unknown')
    role = models.CharField(max_length=50, default='Processing')
    hours = models.DecimalField(
        max_digits=5, decimal_places=2,
        validators=[MinValueValidator(Decimal('0.25')), MaxValueValidator(Decimal('24'))]
    )
    notes = models.TextField(blank=True, null=True)
    tags = models.JSONField(default=list, blank=True)
    work_date = models.DateField()
    is_mock = models.BooleanField(default=False)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return f"{self.participant_name} - {self.role} ({self.work_date})"

    class Meta:
        db_table = 'work_logs'
        ordering = ['-work_date', '-created_at']
        indexes = [
            models.Index(fields=['work_date'], name='idx_worklog_date'),
            models.Index(fields=['participant', 'work_date'], name='idx_worklog_participant_date'),
            models.Index(fields=['role'], name='idx_worklog_role'),
            models.Index(fields=['is_mock'], name='idx_worklog_mock'),
        ]

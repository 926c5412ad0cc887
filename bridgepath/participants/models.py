from django.core.validators import MaxValueValidator, MinValueValidator
from django.db import models

from bridgepath.core.models import User


class Participant(models.Model):
    """A person enrolled in the workforce program"""
    STATUS_CHOICES = [
        ('active', 'Active'),
        ('staffing', 'Staffing'),
        ('graduated', 'Graduated'),
        ('exited', 'Exited'),
    ]

    INTAKE_STATUS_CHOICES = [
        ('incomplete', 'Incomplete'),
        ('in_progress', 'In Progress'),
        ('complete', 'Complete'),
    ]

    user = models.OneToOneField(User, on_delete=models.SET_NULL, null=True, blank=True, related_name='participant')
    name = models.CharField(max_length=200)
    email = models.EmailField(blank=True, null=True)
    phone = models.CharField(max_length=30, blank=True, null=True)
    entry_date = models.DateField(null=True, blank=True)
    current_phase = models.PositiveSmallIntegerField(default=0, validators=[MinValueValidator(0), MaxValueValidator(4)])
    categories = models.JSONField(default=list, blank=True)
    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default='active')
    intake_status = models.CharField(max_length=20, choices=INTAKE_STATUS_CHOICES, default='incomplete')
    intake = models.JSONField(default=dict, blank=True)
    intake_updated_at = models.DateTimeField(null=True, blank=True)
    is_mock = models.BooleanField(default=False)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return self.name

    class Meta:
        db_table = 'participants'
        ordering = ['name']
        indexes = [
            models.Index(fields=['status'], name='idx_participant_status'),
            models.Index(fields=['current_phase'], name='idx_participant_phase'),
            models.Index(fields=['is_mock'], name='idx_participant_mock'),
        ]


class Certification(models.Model):
    """Credential earned by a participant (forklift, OSHA-10, etc.)"""
    participant = models.ForeignKey(Participant, on_delete=models.CASCADE, related_name='certifications')
    cert_type = models.CharField(max_length=200)
    earned_date = models.DateField()
    expiration_date = models.DateField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    def __str__(self):
        return f"{self.cert_type} - {self.participant.name}"

    class Meta:
        db_table = 'certifications'
        ordering = ['-earned_date']


class ReadinessAssessment(models.Model):
    """Snapshot of whether a participant is ready to advance a phase"""
    STATUS_CHOICES = [
        ('ready', 'Ready'),
        ('watch', 'Watch'),
        ('not_ready', 'Not Ready'),
    ]

    participant = models.ForeignKey(Participant, on_delete=models.CASCADE, related_name='readiness_assessments')
    status = models.CharField(max_length=20, choices=STATUS_CHOICES)
    assessment = models.TextField()
    recommendation = models.TextField()
    metrics = models.JSONField(default=dict, blank=True)
    generated_by = models.ForeignKey(User, on_delete=models.SET_NULL, null=True, blank=True, related_name='readiness_assessments')
    generated_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = 'readiness_assessments'
        ordering = ['-generated_at']

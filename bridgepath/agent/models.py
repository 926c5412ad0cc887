from django.db import models

from bridgepath.core.models import User


class OpsAgentSession(models.Model):
    """One ops agent conversation. Messages are stored as ``{role, content, timestamp}`` dicts."""
    user = models.ForeignKey(User, on_delete=models.CASCADE, related_name='ops_agent_sessions')
    page_context = models.JSONField(default=dict, blank=True)
    messages = models.JSONField(default=list, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return f"Session {self.pk} - {self.user}"

    @property
    def first_message(self):
        if self.messages:
            return self.messages[0].get('content') or 'New Conversation'
        return 'New Conversation'

    class Meta:
        db_table = 'ops_agent_sessions'
        ordering = ['-updated_at']
        indexes = [
            models.Index(fields=['user', '-updated_at'], name='idx_agent_session_user'),
        ]

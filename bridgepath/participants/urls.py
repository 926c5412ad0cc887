from django.urls import path
from .views import (
    participant_list_create, participant_detail, participant_intake,
    certification_list_create, readiness, participant_intelligence,
)

urlpatterns = [
    path('participants/', participant_list_create, name='participant-list-create'),
    path('participants/<int:pk>/', participant_detail, name='participant-detail'),
    path('participants/<int:pk>/intake/', participant_intake, name='participant-intake'),
    path('certifications/', certification_list_create, name='certification-list-create'),
    path('readiness/', readiness, name='readiness'),
    path('participant-intelligence/', participant_intelligence, name='participant-intelligence'),
]

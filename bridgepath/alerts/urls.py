from django.urls import path
from .views import alert_list_create, alert_update, alert_unread_count

urlpatterns = [
    path('alerts/', alert_list_create, name='alert-list-create'),
    path('alerts/unread-count/', alert_unread_count, name='alert-unread-count'),
    path('alerts/<int:pk>/', alert_update, name='alert-update'),
]

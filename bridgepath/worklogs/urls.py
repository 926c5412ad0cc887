from django.urls import path
from .views import work_log_list_create, work_log_detail

urlpatterns = [
    path('work-logs/', work_log_list_create, name='work-log-list-create'),
    path('work-logs/<int:pk>/', work_log_detail, name='work-log-detail'),
]

from django.urls import path
from . import views

urlpatterns = [
    path('reports/', views.report_list_create, name='report-list-create'),
    path('reports/<int:pk>/', views.report_detail, name='report-detail'),
    path('dashboard-overview/', views.dashboard_overview, name='dashboard-overview'),
    path('production-overview/', views.production_overview, name='production-overview'),
    path('work-logs-overview/', views.work_logs_overview, name='work-logs-overview'),
    path('daily-brief/', views.daily_brief, name='daily-brief'),
    path('cron/daily-brief/', views.cron_daily_brief, name='cron-daily-brief'),
]

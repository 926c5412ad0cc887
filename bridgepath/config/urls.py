"""
URL configuration for the BridgePath operations API.

Every app mounts its routes under ``api/v1/``; the Django admin lives at
``admin/``.
"""
from django.contrib import admin
from django.urls import path, include, re_path
from django.conf import settings
from django.views.static import serve

admin.site.site_header = "BridgePath Operations Admin Panel"
admin.site.site_title = "BridgePath Admin Portal"
admin.site.index_title = "Welcome to BridgePath Operations"

urlpatterns = [
    path('admin/', admin.site.urls),
    path('api/v1/', include('bridgepath.core.urls')),
    path('api/v1/', include('bridgepath.participants.urls')),
    path('api/v1/', include('bridgepath.worklogs.urls')),
    path('api/v1/', include('bridgepath.pricing.urls')),
    path('api/v1/', include('bridgepath.production.urls')),
    path('api/v1/', include('bridgepath.alerts.urls')),
    path('api/v1/', include('bridgepath.reports.urls')),
    path('api/v1/', include('bridgepath.agent.urls')),
    re_path(r'^static/(?P<path>.*)$', serve, {'document_root': settings.STATIC_ROOT}),
]

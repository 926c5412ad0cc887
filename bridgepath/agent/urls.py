from django.urls import path
from . import views

urlpatterns = [
    path('ops-agent/', views.ops_agent, name='ops-agent'),
    path('pipedream/connect-link/', views.pipedream_connect_link, name='pipedream-connect-link'),
    path('pipedream/apps/', views.pipedream_apps, name='pipedream-apps'),
]

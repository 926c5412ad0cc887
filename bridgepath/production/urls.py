from django.urls import path
from .views import production_record_list_create, production_record_detail

urlpatterns = [
    path('production-records/', production_record_list_create, name='production-record-list-create'),
    path('production-records/<int:pk>/', production_record_detail, name='production-record-detail'),
]

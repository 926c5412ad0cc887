from django.urls import path
from .views import material_price_list_create, material_price_detail

urlpatterns = [
    path('material-prices/', material_price_list_create, name='material-price-list-create'),
    path('material-prices/<int:pk>/', material_price_detail, name='material-price-detail'),
]

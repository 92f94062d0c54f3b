from django.urls import path
from .views import (
    dashboard,
    product_list_create, product_detail, product_categories,
)

urlpatterns = [
    # Dashboard
    path('dashboard/', dashboard, name='dashboard'),

    # Product endpoints
    path('products/', product_list_create, name='product-list-create'),
    path('products/categories/', product_categories, name='product-categories'),
    path('products/<int:pk>/', product_detail, name='product-detail'),
]

"""
URL configuration for the keyshop project.

The `urlpatterns` list routes URLs to views. For more information please see:
    https://docs.djangoproject.com/en/5.2/topics/http/urls/
"""
from django.contrib import admin
from django.urls import path, include

admin.site.site_header = "Keyshop Inventory Admin Panel"
admin.site.site_title = "Keyshop Admin Portal"
admin.site.index_title = "Welcome to the Keyshop Admin Portal"

urlpatterns = [
    path('admin/', admin.site.urls),
    path('api/v1/', include('keyshop.core.urls')),
    path('api/v1/', include('keyshop.catalog.urls')),
]

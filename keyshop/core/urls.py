from django.urls import path
from rest_framework_simplejwt.views import TokenRefreshView
from .views import (
    RoleTokenObtainPairView, user_me,
    user_list_create, user_detail,
    audit_log_list,
)

urlpatterns = [
    # Auth endpoints
    path('auth/login/', RoleTokenObtainPairView.as_view(), name='token_obtain_pair'),
    path('auth/refresh/', TokenRefreshView.as_view(), name='token_refresh'),
    path('auth/me/', user_me, name='user-me'),

    # User endpoints
    path('users/', user_list_create, name='user-list-create'),
    path('users/<int:pk>/', user_detail, name='user-detail'),

    # AuditLog endpoints
    path('audit-logs/', audit_log_list, name='audit-log-list'),
]

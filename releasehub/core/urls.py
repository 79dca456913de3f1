from django.urls import path
from .views import (
    CustomTokenObtainPairView, CustomTokenRefreshView,
    current_user, audit_log_list,
)

urlpatterns = [
    path('auth/login/', CustomTokenObtainPairView.as_view(), name='token_obtain_pair'),
    path('auth/refresh/', CustomTokenRefreshView.as_view(), name='token_refresh'),
    path('auth/me/', current_user, name='current-user'),
    path('audit-logs/', audit_log_list, name='audit-log-list'),
]

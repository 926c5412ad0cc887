from django.urls import path
from .views import (
    CustomTokenObtainPairView, CustomTokenRefreshView, logout, whoami, view_as, demo_mode,
    password_reset_confirm,
    admin_user_list_create, admin_user_update, admin_users_delete, admin_reset_password,
    admin_participant_assignments, case_manager_participant_supervisor,
    audit_log_list, audit_log_detail,
)

urlpatterns = [
    # Auth endpoints
    path('auth/login/', CustomTokenObtainPairView.as_view(), name='token_obtain_pair'),
    path('auth/refresh/', CustomTokenRefreshView.as_view(), name='token_refresh'),
    path('auth/logout/', logout, name='logout'),
    path('auth/whoami/', whoami, name='whoami'),
    path('auth/view-as/', view_as, name='view-as'),
    path('auth/demo-mode/', demo_mode, name='demo-mode'),
    path('auth/password-reset/confirm/', password_reset_confirm, name='password-reset-confirm'),

    # Admin user management
    path('admin/users/', admin_user_list_create, name='admin-user-list-create'),
    path('admin/users/update/', admin_user_update, name='admin-user-update'),
    path('admin/users/delete/', admin_users_delete, name='admin-users-delete'),
    path('admin/users/reset-password/', admin_reset_password, name='admin-reset-password'),
    path('admin/participants/assignments/', admin_participant_assignments, name='admin-participant-assignments'),
    path('case-manager/participants/supervisor/', case_manager_participant_supervisor, name='case-manager-participant-supervisor'),

    # AuditLog endpoints
    path('audit-logs/', audit_log_list, name='audit-log-list'),
    path('audit-logs/<int:pk>/', audit_log_detail, name='audit-log-detail'),
]

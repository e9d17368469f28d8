from django.urls import path

from .views import RoleListCreateView, RoleDetailView, PermissionListView, DefaultPermissionsView

urlpatterns = [
    path("roles", RoleListCreateView.as_view(), name="role_list"),
    path("roles/<uuid:pk>", RoleDetailView.as_view(), name="role_detail"),
    path("permissions", PermissionListView.as_view(), name="permission_list"),
    path("permissions/default-permissions", DefaultPermissionsView.as_view(), name="permission_defaults"),
]

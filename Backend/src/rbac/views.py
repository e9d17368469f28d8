from django.conf import settings
from rest_framework import generics, permissions
from rest_framework.response import Response
from rest_framework.views import APIView

from notifications.activity import ActivityLogMixin
from .models import Permission, Role
from .permissions import PermissionAccess
from .serializers import PermissionSerializer, RoleSerializer


class RoleListCreateView(ActivityLogMixin, generics.ListCreateAPIView):
    """GET /api/roles (tableau complet, sans pagination) ; POST /api/roles"""

    serializer_class = RoleSerializer
    pagination_class = None
    permission_classes = [permissions.IsAuthenticated, PermissionAccess]
    required_permissions = {"GET": ["role:list"], "POST": ["role:create"]}
    activity_context = "roles"

    def get_queryset(self):
        return Role.objects.prefetch_related("permissions").order_by("name")


class RoleDetailView(ActivityLogMixin, generics.RetrieveUpdateDestroyAPIView):
    """
    GET/PATCH/PUT/DELETE /api/roles/<id>
    Suppression refusée (409) tant que des utilisateurs portent le rôle.
    """

    serializer_class = RoleSerializer
    queryset = Role.objects.prefetch_related("permissions")
    permission_classes = [permissions.IsAuthenticated, PermissionAccess]
    required_permissions = {
        "GET": ["role:read"],
        "PUT": ["role:update"],
        "PATCH": ["role:update"],
        "DELETE": ["role:delete"],
    }
    activity_context = "roles"


class PermissionListView(generics.ListAPIView):
    """GET /api/permissions -> permissions actives triées par nom"""

    serializer_class = PermissionSerializer
    pagination_class = None
    permission_classes = [permissions.IsAuthenticated, PermissionAccess]
    required_permissions = {"GET": ["permission:list"]}

    def get_queryset(self):
        return Permission.objects.filter(is_active=True).order_by("name")


class DefaultPermissionsView(APIView):
    """GET /api/permissions/default-permissions -> noms configurés"""

    permission_classes = [permissions.IsAuthenticated]

    def get(self, request):
        return Response(list(getattr(settings, "DEFAULT_PERMISSIONS", [])))

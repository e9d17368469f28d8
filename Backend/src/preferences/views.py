import logging

from django.shortcuts import get_object_or_404
from rest_framework import generics, permissions, status
from rest_framework.exceptions import NotFound
from rest_framework.response import Response
from rest_framework.views import APIView

from common.filters import LIST_FILTERS
from notifications.activity import ActivityLogMixin, log_activity
from rbac.constants import ADMINS
from rbac.permissions import RoleAccess
from . import services
from .models import Setting
from .serializers import (
    SettingSerializer,
    SettingValueSerializer,
    AppNameSerializer,
    ThemeColorSerializer,
    ThemeModeSerializer,
)

logger = logging.getLogger(__name__)

_ACCESS = [permissions.IsAuthenticated, RoleAccess]


def _upsert_and_log(request, key, value=None, is_active=None):
    setting = services.upsert(key, value=value, is_active=is_active)
    log_activity("settings", "update", f'"{key}"', context_id=key, actor=request.user)
    return Response(SettingSerializer(setting).data)


class _SettingActivity(ActivityLogMixin):
    activity_context = "settings"

    def activity_subject(self, instance) -> str:
        return f'"{instance.key}"'


class SettingListCreateView(_SettingActivity, generics.ListCreateAPIView):
    """GET /api/settings?search=&is_active= ; POST /api/settings (clé en double -> 409)"""

    queryset = Setting.objects.all()
    serializer_class = SettingSerializer
    permission_classes = _ACCESS
    role_access = {"*": ADMINS}
    filter_backends = LIST_FILTERS
    search_fields = ["key", "value"]
    ordering_fields = ["key", "value", "created_at", "updated_at"]


class SettingDetailView(_SettingActivity, generics.RetrieveUpdateDestroyAPIView):
    queryset = Setting.objects.all()
    serializer_class = SettingSerializer
    permission_classes = _ACCESS
    role_access = {"*": ADMINS}


class SettingByKeyView(APIView):
    """
    GET    /api/settings/by-key/<key>
    PATCH  /api/settings/by-key/<key> {value, is_active} (crée la clé si absente)
    DELETE /api/settings/by-key/<key>
    """

    permission_classes = _ACCESS
    role_access = {"PATCH": ADMINS, "DELETE": ADMINS}

    def get(self, request, key: str):
        setting = get_object_or_404(Setting, key=key)
        return Response(SettingSerializer(setting).data)

    def patch(self, request, key: str):
        serializer = SettingValueSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        return _upsert_and_log(request, key, **serializer.validated_data)

    def delete(self, request, key: str):
        setting = get_object_or_404(Setting, key=key)
        pk = setting.pk
        setting.delete()
        log_activity("settings", "delete", f'"{key}"', context_id=pk, actor=request.user)
        return Response(status=status.HTTP_204_NO_CONTENT)


class SettingValueView(APIView):
    """
    GET /api/settings/value/<key> -> {"value": ...}
    Les clés theme.* absentes sont créées avec leur valeur par défaut.
    """

    permission_classes = [permissions.IsAuthenticated]

    def get(self, request, key: str):
        value = services.get_value(key)
        if value is None and key.startswith("theme."):
            value = services.theme_default(key)
            logger.info(f"Création du paramètre de thème par défaut: {key} = {value}")
            services.upsert(key, value=value, is_active=True)
        if value is None:
            raise NotFound(f"Setting with key '{key}' not found")
        return Response({"value": value})


class AppSettingsView(APIView):
    """GET /api/settings/app (public) -> {"name": ...}"""

    permission_classes = [permissions.AllowAny]
    authentication_classes = []

    def get(self, request):
        return Response({"name": services.app_name()})


class AppNameView(APIView):
    """PATCH /api/settings/app-name {name}"""

    permission_classes = _ACCESS
    role_access = {"PATCH": ADMINS}

    def patch(self, request):
        serializer = AppNameSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        return _upsert_and_log(request, services.APP_NAME_KEY, serializer.validated_data["name"], True)


class ThemeView(APIView):
    """GET /api/settings/theme -> {"color", "mode"}"""

    permission_classes = [permissions.IsAuthenticated]

    def get(self, request):
        return Response(services.theme())


class ThemeColorView(APIView):
    permission_classes = [permissions.IsAuthenticated]

    def patch(self, request):
        serializer = ThemeColorSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        return _upsert_and_log(request, services.THEME_COLOR_KEY, serializer.validated_data["color"], True)


class ThemeModeView(APIView):
    """PATCH /api/settings/theme/mode {mode: light|dark}"""

    permission_classes = [permissions.IsAuthenticated]

    def patch(self, request):
        serializer = ThemeModeSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        return _upsert_and_log(request, services.THEME_MODE_KEY, serializer.validated_data["mode"], True)

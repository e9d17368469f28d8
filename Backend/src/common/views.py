import os
from importlib.metadata import version, PackageNotFoundError

from django.conf import settings
from rest_framework.views import APIView
from rest_framework.response import Response
from rest_framework import permissions


def _app_version() -> str:
    try:
        return version("office-nexus-backend")
    except PackageNotFoundError:
        return "dev"


class PingView(APIView):
    """
    GET /api/common/ping -> {"pong": true}
    """
    permission_classes = [permissions.AllowAny]
    authentication_classes = []

    def get(self, request):
        return Response({"pong": True})


class InfoView(APIView):
    """
    GET /api/common/info -> infos minimales d'environnement (non sensibles)
    """
    permission_classes = [permissions.AllowAny]
    authentication_classes = []

    def get(self, request):
        return Response({
            "debug": bool(getattr(settings, "DEBUG", False)),
            "env": os.getenv("DJANGO_ENV", "local"),
            "version": _app_version(),
            "apps": sorted(a for a in settings.INSTALLED_APPS if not a.startswith("django.")),
        })

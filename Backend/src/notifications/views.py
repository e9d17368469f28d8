import logging

from rest_framework import generics, permissions, status
from rest_framework.generics import get_object_or_404
from rest_framework.response import Response
from rest_framework.views import APIView

from common.filters import LIST_FILTERS
from common.utils import parse_bool
from rbac.constants import MEMBERS, SUPER_ADMIN
from rbac.permissions import RoleAccess
from . import services
from .models import Notification, NotificationType
from .serializers import NotificationSerializer, NotificationTypeSerializer

logger = logging.getLogger(__name__)

_ACCESS = [permissions.IsAuthenticated, RoleAccess]


def _visible(user):
    return Notification.objects.visible_to(user).with_read_state(user).select_related("type")


class NotificationListCreateView(generics.ListCreateAPIView):
    """
    GET /api/notifications?is_read=&context=&type_id=&search= (notifications de l'appelant)
    POST /api/notifications {title, message, type_id, role_ids, user_ids?}
    """

    serializer_class = NotificationSerializer
    permission_classes = _ACCESS
    role_access = {"GET": MEMBERS, "POST": (SUPER_ADMIN,)}
    filter_backends = LIST_FILTERS
    search_fields = ["title", "message", "context"]
    filter_params = {"context": "context", "type_id": "type_id"}
    ordering_fields = ["title", "context", "created_at", "updated_at"]

    def get_queryset(self):
        qs = _visible(self.request.user)
        is_read = parse_bool(self.request.query_params.get("is_read", self.request.query_params.get("isRead")))
        if is_read is not None:
            qs = qs.filter(is_read=is_read)
        return qs

    def perform_create(self, serializer):
        notification = serializer.save(created_by=self.request.user)
        logger.info(f"Notification créée: {notification.title} ({notification.pk})")


class NotificationDetailView(generics.RetrieveUpdateDestroyAPIView):
    """
    GET /api/notifications/<id> (si adressée à l'appelant)
    PATCH/PUT/DELETE réservés au Super Admin; DELETE = désactivation
    """

    serializer_class = NotificationSerializer
    permission_classes = _ACCESS
    role_access = {"GET": MEMBERS, "*": (SUPER_ADMIN,)}

    def get_queryset(self):
        user = self.request.user
        if self.request.method == "GET":
            return _visible(user)
        return Notification.objects.filter(is_active=True).with_read_state(user).select_related("type")

    def perform_destroy(self, instance):
        instance.is_active = False
        instance.save(update_fields=["is_active", "updated_at"])


class UnreadCountView(APIView):
    """GET /api/notifications/unread-count -> {"count": n}"""

    permission_classes = _ACCESS
    role_access = {"GET": MEMBERS}

    def get(self, request):
        return Response({"count": services.unread_count(request.user)})


class NotificationTypeListView(generics.ListAPIView):
    queryset = NotificationType.objects.order_by("name")
    serializer_class = NotificationTypeSerializer
    pagination_class = None
    permission_classes = _ACCESS
    role_access = {"GET": MEMBERS}


class MarkReadView(APIView):
    """PATCH /api/notifications/<id>/read"""

    permission_classes = _ACCESS
    role_access = {"PATCH": MEMBERS}

    def patch(self, request, pk):
        notification = get_object_or_404(_visible(request.user), pk=pk)
        services.mark_read(notification, request.user)
        notification = _visible(request.user).get(pk=pk)
        return Response(NotificationSerializer(notification).data)


class MarkAllReadView(APIView):
    """PATCH /api/notifications/mark-all-read -> {"updated": n}"""

    permission_classes = _ACCESS
    role_access = {"PATCH": MEMBERS}

    def patch(self, request):
        updated = services.mark_all_read(request.user)
        return Response({"updated": updated}, status=status.HTTP_200_OK)

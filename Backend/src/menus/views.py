import logging

from django.db import transaction
from django.shortcuts import get_object_or_404
from rest_framework import generics, permissions, serializers
from rest_framework.response import Response
from rest_framework.views import APIView

from common.filters import LIST_FILTERS
from common.tree import build_tree, tree_depth
from notifications.activity import ActivityLogMixin
from rbac.constants import ADMINS, STAFF
from rbac.models import Role
from rbac.permissions import RoleAccess, active_role
from .models import Menu
from .serializers import MenuSerializer, SidebarItemSerializer, MenuOrderSerializer

logger = logging.getLogger(__name__)

_ACCESS = [permissions.IsAuthenticated, RoleAccess]


def _menu_sort_key(menu):
    return (menu.order, menu.name.lower())


def menu_tree(menus, serializer_class=SidebarItemSerializer):
    return build_tree(menus, lambda m: dict(serializer_class(m).data), sort_key=_menu_sort_key)


class MenuListCreateView(ActivityLogMixin, generics.ListCreateAPIView):
    """GET /api/menus?search=&parent_id=&is_active= ; POST /api/menus {…, role_ids}"""

    queryset = Menu.objects.prefetch_related("roles")
    serializer_class = MenuSerializer
    permission_classes = _ACCESS
    role_access = {"GET": STAFF, "POST": ADMINS}
    filter_backends = LIST_FILTERS
    search_fields = ["name", "path"]
    filter_params = {"parent_id": "parent_id"}
    ordering_fields = ["name", "path", "order", "created_at", "updated_at"]
    default_sort = ("order", "asc")
    activity_context = "menus"


class MenuDetailView(ActivityLogMixin, generics.RetrieveUpdateDestroyAPIView):
    queryset = Menu.objects.prefetch_related("roles")
    serializer_class = MenuSerializer
    permission_classes = _ACCESS
    role_access = {"GET": STAFF, "*": ADMINS}
    activity_context = "menus"


class MenuHierarchyView(APIView):
    """GET /api/menus/hierarchy -> arbre complet (actifs et inactifs)"""

    permission_classes = _ACCESS
    role_access = {"GET": STAFF}

    def get(self, request):
        menus = Menu.objects.prefetch_related("roles")
        return Response(menu_tree(menus, MenuSerializer))


class MenuByRoleView(generics.ListAPIView):
    """GET /api/menus/role/<role_id> -> liste plate des menus du rôle"""

    serializer_class = MenuSerializer
    pagination_class = None
    permission_classes = _ACCESS
    role_access = {"GET": STAFF}

    def get_queryset(self):
        role = get_object_or_404(Role, pk=self.kwargs["role_id"])
        return Menu.objects.filter(roles=role).prefetch_related("roles").order_by("order", "name")


class SidebarView(APIView):
    """
    GET /api/menus/sidebar -> arbre des menus actifs visibles par le rôle de l'appelant.
    Un menu dont le parent n'est pas visible disparaît avec son sous-arbre.
    """

    permission_classes = [permissions.IsAuthenticated]

    def get(self, request):
        menus = Menu.objects.filter(is_active=True)
        if not request.user.is_superuser:
            role = active_role(request.user)
            if role is None:
                return Response([])
            menus = menus.filter(roles=role).distinct()
        return Response(menu_tree(menus))


class MenuOrderView(APIView):
    """PUT /api/menus/order {menu_orders: [{id, order}]} (tout ou rien)"""

    permission_classes = _ACCESS
    role_access = {"PUT": ADMINS}

    def put(self, request):
        serializer = MenuOrderSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        items = serializer.validated_data["menu_orders"]

        wanted = {item["id"]: item["order"] for item in items}
        with transaction.atomic():
            menus = {m.pk: m for m in Menu.objects.select_for_update().filter(pk__in=wanted)}
            unknown = [str(pk) for pk in wanted if pk not in menus]
            if unknown:
                raise serializers.ValidationError({"menu_orders": f"Unknown menu id(s): {', '.join(unknown)}"})
            for pk, order in wanted.items():
                menus[pk].order = order
            Menu.objects.bulk_update(menus.values(), ["order"])

        logger.info(f"Ordre mis à jour pour {len(menus)} menu(s)")
        updated = Menu.objects.filter(pk__in=wanted).prefetch_related("roles").order_by("order", "name")
        return Response(MenuSerializer(updated, many=True).data)


class MenuStatsView(APIView):
    """GET /api/menus/stats -> {total, active, inactive, root, max_depth}"""

    permission_classes = _ACCESS
    role_access = {"GET": STAFF}

    def get(self, request):
        menus = list(Menu.objects.all())
        total = len(menus)
        active = sum(1 for m in menus if m.is_active)
        return Response({
            "total": total,
            "active": active,
            "inactive": total - active,
            "root": sum(1 for m in menus if m.parent_id is None),
            "max_depth": tree_depth(build_tree(menus, lambda m: {"id": m.pk})),
        })

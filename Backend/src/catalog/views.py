from django.shortcuts import get_object_or_404
from rest_framework import generics, permissions
from rest_framework.response import Response
from rest_framework.views import APIView

from common.exceptions import UserFacingAPIException
from common.filters import LIST_FILTERS
from common.tree import build_tree
from rbac.constants import ADMINS, STAFF, MEMBERS
from rbac.permissions import RoleAccess
from .models import Category, ProductType
from .serializers import CategorySerializer, CategoryNodeSerializer, ProductTypeSerializer

_ACCESS = [permissions.IsAuthenticated, RoleAccess]


class CategoryListCreateView(generics.ListCreateAPIView):
    """
    GET /api/categories?search=&parent_id=&is_active=
    parent_id vide ou "null" -> catégories racines
    """

    serializer_class = CategorySerializer
    permission_classes = _ACCESS
    role_access = {"GET": STAFF, "POST": ADMINS}
    filter_backends = LIST_FILTERS
    search_fields = ["name", "slug", "description"]
    ordering_fields = ["name", "slug", "order", "created_at", "updated_at"]

    def get_queryset(self):
        qs = Category.objects.select_related("parent").prefetch_related("children")
        parent_id = self.request.query_params.get("parent_id", self.request.query_params.get("parentId"))
        if parent_id is not None:
            if parent_id in ("", "null"):
                qs = qs.filter(parent__isnull=True)
            else:
                qs = qs.filter(parent_id=parent_id)
        return qs


class CategoryDetailView(generics.RetrieveUpdateDestroyAPIView):
    queryset = Category.objects.select_related("parent").prefetch_related("children")
    serializer_class = CategorySerializer
    permission_classes = _ACCESS
    role_access = {"GET": STAFF, "*": ADMINS}

    def perform_destroy(self, instance):
        if instance.children.exists():
            raise UserFacingAPIException(
                "Cannot delete category with children. Please remove or reassign children first."
            )
        instance.delete()


class CategoryHierarchyView(APIView):
    """GET /api/categories/hierarchy -> arbre des catégories actives, trié par `order`"""

    permission_classes = _ACCESS
    role_access = {"GET": MEMBERS}

    def get(self, request):
        categories = Category.objects.filter(is_active=True)
        return Response(build_tree(
            categories,
            lambda c: dict(CategoryNodeSerializer(c).data),
            sort_key=lambda c: (c.order, c.name.lower()),
        ))


class CategoryBySlugView(APIView):
    permission_classes = _ACCESS
    role_access = {"GET": MEMBERS}

    def get(self, request, slug: str):
        category = get_object_or_404(
            Category.objects.select_related("parent").prefetch_related("children"), slug=slug
        )
        return Response(CategorySerializer(category).data)


class ProductTypeListCreateView(generics.ListCreateAPIView):
    queryset = ProductType.objects.all()
    serializer_class = ProductTypeSerializer
    permission_classes = _ACCESS
    role_access = {"GET": STAFF, "POST": ADMINS}
    filter_backends = LIST_FILTERS
    search_fields = ["name", "description"]
    ordering_fields = ["name", "created_at", "updated_at"]
    default_sort = ("name", "asc")


class ProductTypeDetailView(generics.RetrieveUpdateDestroyAPIView):
    queryset = ProductType.objects.all()
    serializer_class = ProductTypeSerializer
    permission_classes = _ACCESS
    role_access = {"GET": STAFF, "*": ADMINS}

from django.urls import path

from .views import (
    CategoryListCreateView,
    CategoryDetailView,
    CategoryHierarchyView,
    CategoryBySlugView,
    ProductTypeListCreateView,
    ProductTypeDetailView,
)

urlpatterns = [
    path("categories", CategoryListCreateView.as_view(), name="category_list"),
    path("categories/hierarchy", CategoryHierarchyView.as_view(), name="category_hierarchy"),
    path("categories/slug/<slug:slug>", CategoryBySlugView.as_view(), name="category_by_slug"),
    path("categories/<uuid:pk>", CategoryDetailView.as_view(), name="category_detail"),

    path("product-types", ProductTypeListCreateView.as_view(), name="product_type_list"),
    path("product-types/<uuid:pk>", ProductTypeDetailView.as_view(), name="product_type_detail"),
]

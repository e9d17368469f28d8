from django.urls import path

from .views import (
    MenuListCreateView,
    MenuDetailView,
    MenuHierarchyView,
    MenuByRoleView,
    SidebarView,
    MenuOrderView,
    MenuStatsView,
)

urlpatterns = [
    path("", MenuListCreateView.as_view(), name="menu_list"),
    path("hierarchy", MenuHierarchyView.as_view(), name="menu_hierarchy"),
    path("sidebar", SidebarView.as_view(), name="menu_sidebar"),
    path("order", MenuOrderView.as_view(), name="menu_order"),
    path("stats", MenuStatsView.as_view(), name="menu_stats"),
    path("role/<uuid:role_id>", MenuByRoleView.as_view(), name="menu_by_role"),
    path("<uuid:pk>", MenuDetailView.as_view(), name="menu_detail"),
]

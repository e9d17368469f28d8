import uuid

import pytest
from django.urls import reverse
from rest_framework.test import APIClient

from menus.models import Menu
from rbac.constants import ADMINISTRATOR, MANAGER, SUPER_ADMIN, USER
from rbac.models import Role


def _names(nodes):
    return [n["name"] for n in nodes]


def test_sidebar_follows_the_caller_role(make_user, api_as):
    r = api_as(make_user(USER)).get(reverse("menu_sidebar"))
    assert r.status_code == 200, r.content
    assert _names(r.json()) == ["Dashboard", "Notifications"]

    r = api_as(make_user(MANAGER)).get(reverse("menu_sidebar"))
    tree = r.json()
    assert _names(tree) == ["Dashboard", "Master Data", "Notifications"]
    master = tree[1]
    assert _names(master["children"]) == ["Offices", "Departments", "Job Positions", "Categories", "Product Types", "Approvals"]
    assert master["children"][0]["parent_id"] == master["id"]

    r = api_as(make_user(ADMINISTRATOR)).get(reverse("menu_sidebar"))
    admin_tree = r.json()
    assert _names(admin_tree) == ["Dashboard", "Master Data", "User Management", "Notifications", "Settings"]
    # "Menus" est réservé au Super Admin
    assert _names(admin_tree[2]["children"]) == ["Users", "Roles"]


def test_sidebar_drops_items_whose_parent_is_hidden(make_user, api_as):
    master = Menu.objects.get(name="Master Data", parent=None)
    secret = Menu.objects.create(name="Secret", path="/secret", parent=master, order=9)
    secret.roles.add(Role.objects.get(name=USER))

    r = api_as(make_user(USER)).get(reverse("menu_sidebar"))
    assert _names(r.json()) == ["Dashboard", "Notifications"]


def test_sidebar_hides_inactive_menus_and_sorts_by_order_then_name(make_user, api_as):
    Menu.objects.filter(name="Notifications").update(is_active=False)
    user_role = Role.objects.get(name=USER)
    for name in ("beta", "Alpha"):
        Menu.objects.create(name=name, path=f"/{name}", order=1).roles.add(user_role)

    r = api_as(make_user(USER)).get(reverse("menu_sidebar"))
    assert _names(r.json()) == ["Alpha", "beta", "Dashboard"]


def test_sidebar_for_superuser_and_inactive_role(make_user, api_as):
    root = make_user(USER, is_superuser=True)
    r = api_as(root).get(reverse("menu_sidebar"))
    assert len(r.json()) == 5

    client = api_as(make_user(USER))
    Role.objects.filter(name=USER).update(is_active=False)
    r = client.get(reverse("menu_sidebar"))
    assert r.status_code == 200
    assert r.json() == []


@pytest.mark.django_db
def test_sidebar_requires_authentication():
    assert APIClient().get(reverse("menu_sidebar")).status_code == 401


def test_menu_create_with_roles(admin_client):
    roles = Role.objects.filter(name__in=[SUPER_ADMIN, MANAGER])
    r = admin_client.post(
        reverse("menu_list"),
        {"name": "Reports", "path": "/reports", "icon": "ChartBar", "order": 6, "role_ids": [str(r.pk) for r in roles]},
        format="json",
    )
    assert r.status_code == 201, r.content
    assert sorted(x["name"] for x in r.json()["roles"]) == [MANAGER, SUPER_ADMIN]
    assert "role_ids" not in r.json()


def test_menu_list_filters(admin_client):
    master = Menu.objects.get(name="Master Data", parent=None)

    r = admin_client.get(reverse("menu_list"), {"parent_id": str(master.pk)})
    assert r.status_code == 200
    assert r.json()["meta"]["total"] == 5
    # tri par défaut: order asc
    assert [m["order"] for m in r.json()["data"]] == [1, 2, 3, 4, 5]

    r = admin_client.get(reverse("menu_list"), {"search": "/master/off"})
    assert _names(r.json()["data"]) == ["Offices"]


def test_menu_parent_cycle_is_rejected(admin_client):
    master = Menu.objects.get(name="Master Data", parent=None)
    offices = Menu.objects.get(name="Offices")

    r = admin_client.patch(reverse("menu_detail", args=[master.pk]), {"parent_id": str(offices.pk)}, format="json")
    assert r.status_code == 400
    assert "parent_id" in r.json()["error"]["detail"]


def test_menu_hierarchy_and_stats(admin_client):
    Menu.objects.filter(name="Settings").update(is_active=False)

    r = admin_client.get(reverse("menu_hierarchy"))
    assert r.status_code == 200
    tree = r.json()
    assert len(tree) == 5
    assert "roles" in tree[0]

    r = admin_client.get(reverse("menu_stats"))
    assert r.json() == {"total": 14, "active": 13, "inactive": 1, "root": 5, "max_depth": 2}


def test_menus_by_role(admin_client):
    user_role = Role.objects.get(name=USER)
    r = admin_client.get(reverse("menu_by_role", args=[user_role.pk]))
    assert r.status_code == 200
    assert _names(r.json()) == ["Dashboard", "Notifications"]

    r = admin_client.get(reverse("menu_by_role", args=[uuid.uuid4()]))
    assert r.status_code == 404


def test_menu_order_update(admin_client):
    dashboard = Menu.objects.get(name="Dashboard")
    notifications = Menu.objects.get(name="Notifications")

    r = admin_client.put(
        reverse("menu_order"),
        {"menu_orders": [{"id": str(dashboard.pk), "order": 10}, {"id": str(notifications.pk), "order": 0}]},
        format="json",
    )
    assert r.status_code == 200, r.content
    assert [(m["name"], m["order"]) for m in r.json()] == [("Notifications", 0), ("Dashboard", 10)]


def test_menu_order_is_all_or_nothing(admin_client):
    dashboard = Menu.objects.get(name="Dashboard")

    r = admin_client.put(
        reverse("menu_order"),
        {"menu_orders": [{"id": str(dashboard.pk), "order": 10}, {"id": str(uuid.uuid4()), "order": 2}]},
        format="json",
    )
    assert r.status_code == 400
    dashboard.refresh_from_db()
    assert dashboard.order == 1

    r = admin_client.put(reverse("menu_order"), {"menu_orders": []}, format="json")
    assert r.status_code == 400


def test_menu_management_is_staff_only(make_user, api_as):
    member = api_as(make_user(USER))
    assert member.get(reverse("menu_list")).status_code == 403

    manager = api_as(make_user(MANAGER))
    assert manager.get(reverse("menu_list")).status_code == 200
    r = manager.post(reverse("menu_list"), {"name": "X"}, format="json")
    assert r.status_code == 403

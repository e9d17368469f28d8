import pytest
from django.urls import reverse
from rest_framework.test import APIClient

from notifications.models import Notification
from rbac.constants import ADMINISTRATOR, GUEST, MANAGER, SUPER_ADMIN
from rbac.models import Permission, Role


def _names(role_payload):
    return {p["name"] for p in role_payload["permissions"]}


def test_roles_list_is_a_plain_array(admin_client):
    r = admin_client.get(reverse("role_list"))
    assert r.status_code == 200, r.content
    names = [role["name"] for role in r.json()]
    assert names == sorted(names)
    assert {SUPER_ADMIN, ADMINISTRATOR, MANAGER, GUEST} <= set(names)


def test_role_create_merges_default_permissions(admin_client):
    user_read = Permission.objects.get(name="user:read")

    r = admin_client.post(
        reverse("role_list"),
        {"name": "Auditor", "description": "Read only", "permissions": [str(user_read.pk)]},
        format="json",
    )
    assert r.status_code == 201, r.content
    assert _names(r.json()) == {"user:read", "auth:login", "auth:logout"}

    # le Super Admin est prévenu
    n = Notification.objects.get(context="roles")
    assert n.message == 'New role "Auditor" has been created'
    assert n.type.name == "role_activity"


def test_role_update_keeps_or_replaces_permissions(admin_client):
    role = Role.objects.create(name="Auditor")
    role.permissions.set(Permission.objects.filter(name__in=["user:read", "user:list"]))
    url = reverse("role_detail", args=[role.pk])

    # sans `permissions`: ensemble conservé, défauts ajoutés
    r = admin_client.patch(url, {"description": "Reviews accounts"}, format="json")
    assert r.status_code == 200, r.content
    assert r.json()["description"] == "Reviews accounts"
    assert _names(r.json()) == {"user:read", "user:list", "auth:login", "auth:logout"}

    # avec `permissions`: remplacement (défauts toujours présents)
    office_read = Permission.objects.get(name="office:read")
    r = admin_client.patch(url, {"permissions": [str(office_read.pk)]}, format="json")
    assert r.status_code == 200, r.content
    assert _names(r.json()) == {"office:read", "auth:login", "auth:logout"}


def test_role_name_is_unique(admin_client):
    r = admin_client.post(reverse("role_list"), {"name": MANAGER}, format="json")
    assert r.status_code == 400
    assert "name" in r.json()["error"]["detail"]


def test_role_in_use_cannot_be_deleted(admin_client, make_user):
    make_user(MANAGER)
    manager = Role.objects.get(name=MANAGER)

    r = admin_client.delete(reverse("role_detail", args=[manager.pk]))
    assert r.status_code == 409
    assert r.json()["error"]["code"] == "protected"
    assert Role.objects.filter(pk=manager.pk).exists()


def test_unused_role_can_be_deleted(admin_client):
    role = Role.objects.create(name="Temporary")

    r = admin_client.delete(reverse("role_detail", args=[role.pk]))
    assert r.status_code == 204
    assert not Role.objects.filter(name="Temporary").exists()
    assert Notification.objects.filter(context="roles", context_id=str(role.pk)).exists()


def test_permission_list_and_defaults(admin_client):
    Permission.objects.filter(name="system:logs").update(is_active=False)

    r = admin_client.get(reverse("permission_list"))
    assert r.status_code == 200
    names = [p["name"] for p in r.json()]
    assert names == sorted(names)
    assert "system:logs" not in names

    r = admin_client.get(reverse("permission_defaults"))
    assert r.status_code == 200
    assert r.json() == ["auth:login", "auth:logout"]


def test_role_without_permission_is_forbidden(make_user, api_as):
    guest = api_as(make_user(GUEST))

    r = guest.get(reverse("role_list"))
    assert r.status_code == 403
    assert r.json()["error"]["code"] == "permission_denied"


def test_inactive_role_loses_its_permissions(make_user, api_as):
    client = api_as(make_user(ADMINISTRATOR))
    Role.objects.filter(name=ADMINISTRATOR).update(is_active=False)

    r = client.get(reverse("role_list"))
    assert r.status_code == 403


def test_superuser_bypasses_permission_checks(make_user, api_as):
    root = make_user(GUEST, is_superuser=True)

    r = api_as(root).get(reverse("role_list"))
    assert r.status_code == 200


@pytest.mark.django_db
def test_roles_require_authentication():
    r = APIClient().get(reverse("role_list"))
    assert r.status_code == 401


def test_has_permissions(seeded):
    manager = Role.objects.get(name=MANAGER)
    assert manager.has_permissions(["user:read", "office:list"])
    assert not manager.has_permissions(["role:delete"])
    assert manager.has_permissions([])

import io
import uuid
from types import SimpleNamespace

import pytest
from django.core.management import call_command
from django.urls import reverse
from rest_framework.test import APIClient

from common.tree import build_tree, creates_cycle, tree_depth
from common.utils import parse_bool, to_snake_case
from menus.models import Menu
from organization.models import Department
from rbac.models import Permission, Role


@pytest.mark.django_db
def test_health_and_ping():
    client = APIClient()

    r = client.get(reverse("health"))
    assert r.status_code == 200
    assert r.json()["status"] == "ok"
    assert r["X-Request-ID"]

    r = client.get(reverse("ping"))
    assert r.status_code == 200
    assert r.json()["pong"] is True

    r = client.get(reverse("info"), HTTP_X_REQUEST_ID="abc-123")
    assert r.status_code == 200
    assert "rbac" in r.json()["apps"]
    assert r["X-Request-ID"] == "abc-123"


@pytest.mark.django_db
def test_unauthenticated_gets_401_envelope():
    r = APIClient().get(reverse("office_list"))
    assert r.status_code == 401
    body = r.json()["error"]
    assert body["status"] == 401
    assert body["code"] == "not_authenticated"


def test_unknown_id_gets_404_envelope(admin_client):
    r = admin_client.get(reverse("office_detail", args=[uuid.uuid4()]))
    assert r.status_code == 404
    assert r.json()["error"]["code"] == "not_found"


def test_malformed_uuid_filter_is_400(admin_client):
    r = admin_client.get(reverse("user_list"), {"role_id": "not-a-uuid"})
    assert r.status_code == 400
    assert r.json()["error"]["code"] == "invalid"


def test_pagination_meta_and_sorting(admin_client):
    for i in range(12):
        Department.objects.create(name=f"Dept {i:02d}", code=f"D{i:02d}")

    r = admin_client.get(reverse("department_list"), {"page": 3, "limit": 5})
    assert r.status_code == 200
    body = r.json()
    assert len(body["data"]) == 2
    assert body["meta"] == {"total": 12, "page": 3, "limit": 5, "total_pages": 3}

    # tri par défaut: name asc
    r = admin_client.get(reverse("department_list"), {"limit": 3})
    assert [d["code"] for d in r.json()["data"]] == ["D00", "D01", "D02"]

    # camelCase accepté
    r = admin_client.get(reverse("department_list"), {"limit": 3, "sortBy": "code", "sortOrder": "desc"})
    assert [d["code"] for d in r.json()["data"]] == ["D11", "D10", "D09"]

    # champ hors liste blanche -> tri par défaut
    r = admin_client.get(reverse("department_list"), {"limit": 1, "sort_by": "password"})
    assert r.json()["data"][0]["code"] == "D00"


def test_limit_is_capped(admin_client):
    r = admin_client.get(reverse("department_list"), {"limit": 1000})
    assert r.json()["meta"]["limit"] == 100


def test_page_past_the_end_is_empty(admin_client):
    for i in range(3):
        Department.objects.create(name=f"Dept {i}", code=f"P{i}")

    # dernière ligne supprimée sur la dernière page: le front relit une page vide
    r = admin_client.get(reverse("department_list"), {"page": 99, "limit": 2})
    assert r.status_code == 200
    assert r.json() == {"data": [], "meta": {"total": 3, "page": 99, "limit": 2, "total_pages": 2}}

    # numéro illisible ou nul -> première page
    r = admin_client.get(reverse("department_list"), {"page": "abc", "limit": 2})
    assert r.status_code == 200
    assert r.json()["meta"]["page"] == 1
    assert len(r.json()["data"]) == 2
    assert admin_client.get(reverse("department_list"), {"page": 0}).json()["meta"]["page"] == 1


def test_is_active_filter(admin_client):
    Department.objects.create(name="On", code="ON")
    Department.objects.create(name="Off", code="OFF", is_active=False)

    r = admin_client.get(reverse("department_list"), {"is_active": "false"})
    assert [d["code"] for d in r.json()["data"]] == ["OFF"]


def test_seed_defaults_is_idempotent(seeded):
    counts = (Permission.objects.count(), Role.objects.count(), Menu.objects.count())
    call_command("seed_defaults", "--no-admin", stdout=io.StringIO())
    assert (Permission.objects.count(), Role.objects.count(), Menu.objects.count()) == counts
    assert Role.objects.get(name="Super Admin").permissions.count() == Permission.objects.count()
    assert not Role.objects.get(name="Administrator").permissions.filter(name__startswith="system:").exists()


def test_utils():
    assert to_snake_case("createdAt") == "created_at"
    assert to_snake_case("name") == "name"
    assert parse_bool("true") is True
    assert parse_bool("0") is False
    assert parse_bool("maybe") is None
    assert parse_bool(None) is None


def _node(pk, parent_id=None):
    return SimpleNamespace(pk=pk, parent_id=parent_id, name=str(pk))


def test_build_tree_drops_orphans_and_sorts():
    items = [_node(3, 1), _node(1), _node(2, 1), _node(9, 42)]
    tree = build_tree(items, lambda n: {"id": n.pk}, sort_key=lambda n: n.pk)
    assert tree == [{"id": 1, "children": [{"id": 2, "children": []}, {"id": 3, "children": []}]}]
    assert tree_depth(tree) == 2
    assert tree_depth([]) == 0


def test_creates_cycle():
    root = SimpleNamespace(pk=1, parent=None)
    child = SimpleNamespace(pk=2, parent=root)
    grandchild = SimpleNamespace(pk=3, parent=child)
    other = SimpleNamespace(pk=4, parent=None)

    assert creates_cycle(root, grandchild) is True
    assert creates_cycle(root, root) is True
    assert creates_cycle(grandchild, other) is False
    assert creates_cycle(other, grandchild) is False

import pytest
from django.urls import reverse

from notifications.activity import activity_message, log_activity, notify_roles
from notifications.models import Notification, NotificationType
from rbac.constants import ADMINISTRATOR, MANAGER, SUPER_ADMIN, USER
from rbac.models import Role


@pytest.fixture
def super_admin(make_user, api_as):
    return api_as(make_user(SUPER_ADMIN, email="root@example.com"))


def _general():
    return NotificationType.objects.get(name="general_activity")


def _broadcast(client, **extra):
    payload = {
        "title": "Maintenance",
        "message": "Planned downtime on Sunday",
        "context": "system",
        "type_id": str(_general().pk),
        "role_ids": [str(Role.objects.get(name=USER).pk)],
        **extra,
    }
    r = client.post(reverse("notification_list"), payload, format="json")
    assert r.status_code == 201, r.content
    return r.json()


def test_broadcast_is_read_per_user(super_admin, make_user, api_as):
    alice = api_as(make_user(USER, email="alice@example.com"))
    bob = api_as(make_user(USER, email="bob@example.com"))
    manager = api_as(make_user(MANAGER))

    created = _broadcast(super_admin)
    assert created["type"]["name"] == "general_activity"
    assert created["is_read"] is False

    r = alice.get(reverse("notification_list"))
    assert [n["title"] for n in r.json()["data"]] == ["Maintenance"]
    assert alice.get(reverse("notification_unread_count")).json() == {"count": 1}
    assert manager.get(reverse("notification_list")).json()["meta"]["total"] == 0

    r = alice.patch(reverse("notification_mark_read", args=[created["id"]]))
    assert r.status_code == 200, r.content
    assert r.json()["is_read"] is True
    assert r.json()["read_at"]

    assert alice.get(reverse("notification_unread_count")).json() == {"count": 0}
    assert bob.get(reverse("notification_unread_count")).json() == {"count": 1}

    # marquer deux fois ne crée pas de doublon
    assert alice.patch(reverse("notification_mark_read", args=[created["id"]])).status_code == 200
    assert alice.get(reverse("notification_list")).json()["meta"]["total"] == 1


def test_is_read_filter_and_mark_all(super_admin, make_user, api_as):
    alice = api_as(make_user(USER, email="alice@example.com"))
    first = _broadcast(super_admin, title="First")
    _broadcast(super_admin, title="Second")

    alice.patch(reverse("notification_mark_read", args=[first["id"]]))
    r = alice.get(reverse("notification_list"), {"is_read": "false"})
    assert [n["title"] for n in r.json()["data"]] == ["Second"]
    r = alice.get(reverse("notification_list"), {"isRead": "true"})
    assert [n["title"] for n in r.json()["data"]] == ["First"]

    r = alice.patch(reverse("notification_mark_all_read"))
    assert r.status_code == 200
    assert r.json() == {"updated": 1}
    assert alice.patch(reverse("notification_mark_all_read")).json() == {"updated": 0}
    assert alice.get(reverse("notification_unread_count")).json() == {"count": 0}


def test_direct_notification_reaches_only_its_user(super_admin, make_user, api_as):
    target = make_user(USER, email="target@example.com")
    other = api_as(make_user(USER, email="other@example.com"))

    r = super_admin.post(
        reverse("notification_list"),
        {"title": "Hi", "message": "Just you", "type_id": str(_general().pk), "user_ids": [str(target.pk)]},
        format="json",
    )
    assert r.status_code == 201, r.content

    assert api_as(target).get(reverse("notification_unread_count")).json() == {"count": 1}
    assert other.get(reverse("notification_unread_count")).json() == {"count": 0}
    assert other.get(reverse("notification_detail", args=[r.json()["id"]])).status_code == 404


def test_create_requires_a_recipient(super_admin):
    r = super_admin.post(
        reverse("notification_list"),
        {"title": "Nobody", "message": "...", "type_id": str(_general().pk)},
        format="json",
    )
    assert r.status_code == 400
    assert "role_ids" in r.json()["error"]["detail"]


def test_only_super_admin_writes(make_user, api_as, super_admin):
    admin = api_as(make_user(ADMINISTRATOR))
    r = admin.post(
        reverse("notification_list"),
        {"title": "x", "message": "y", "type_id": str(_general().pk), "role_ids": []},
        format="json",
    )
    assert r.status_code == 403

    created = _broadcast(super_admin)
    r = admin.delete(reverse("notification_detail", args=[created["id"]]))
    assert r.status_code == 403


def test_update_replaces_role_broadcast(super_admin, make_user, api_as):
    alice = api_as(make_user(USER, email="alice@example.com"))
    manager = api_as(make_user(MANAGER))
    created = _broadcast(super_admin)

    r = super_admin.patch(
        reverse("notification_detail", args=[created["id"]]),
        {"title": "Maintenance (moved)", "role_ids": [str(Role.objects.get(name=MANAGER).pk)]},
        format="json",
    )
    assert r.status_code == 200, r.content
    assert r.json()["title"] == "Maintenance (moved)"

    assert alice.get(reverse("notification_unread_count")).json() == {"count": 0}
    assert manager.get(reverse("notification_unread_count")).json() == {"count": 1}


def test_delete_is_soft(super_admin, make_user, api_as):
    alice = api_as(make_user(USER, email="alice@example.com"))
    created = _broadcast(super_admin)

    r = super_admin.delete(reverse("notification_detail", args=[created["id"]]))
    assert r.status_code == 204

    notification = Notification.objects.get(pk=created["id"])
    assert notification.is_active is False
    assert alice.get(reverse("notification_list")).json()["meta"]["total"] == 0
    assert alice.get(reverse("notification_detail", args=[created["id"]])).status_code == 404


def test_notification_types(make_user, api_as):
    r = api_as(make_user(USER)).get(reverse("notification_types"))
    assert r.status_code == 200
    names = [t["name"] for t in r.json()]
    assert "general_activity" in names
    assert names == sorted(names)


def test_activity_messages():
    assert activity_message("users", "create", "Ann Lee (ann@example.com)") == (
        "New user Ann Lee (ann@example.com) has been created"
    )
    assert activity_message("job_positions", "delete", '"CTO"') == 'Job position "CTO" has been deleted'
    assert activity_message("menus", "update", '"Reports"') == 'Menu item "Reports" has been updated'


def test_activity_falls_back_to_general_type(seeded):
    NotificationType.objects.filter(name="office_activity").delete()

    n = log_activity("offices", "create", '"Paris"', context_id="42")
    assert n.type.name == "general_activity"
    assert n.title == "offices Activity"
    assert n.context_id == "42"
    assert set(n.recipients.values_list("role__name", flat=True)) == {SUPER_ADMIN, ADMINISTRATOR}


@pytest.mark.django_db
def test_activity_is_skipped_without_roles_or_types():
    assert notify_roles("offices", "msg", [SUPER_ADMIN]) is None

    Role.objects.create(name=SUPER_ADMIN)
    assert notify_roles("offices", "msg", [SUPER_ADMIN]) is None
    assert not Notification.objects.exists()

import pytest
from django.urls import reverse
from rest_framework.test import APIClient

from notifications.models import Notification
from preferences import services
from preferences.models import Setting
from rbac.constants import USER


@pytest.mark.django_db
def test_app_name_is_public_with_fallback(settings):
    settings.APP_DEFAULT_NAME = "Fallback Name"
    r = APIClient().get(reverse("setting_app"))
    assert r.status_code == 200
    assert r.json() == {"name": "Fallback Name"}

    Setting.objects.create(key="app.name", value="Acme Admin")
    assert APIClient().get(reverse("setting_app")).json() == {"name": "Acme Admin"}


def test_app_name_update_is_admin_only(admin_client, make_user, api_as):
    r = admin_client.patch(reverse("setting_app_name"), {"name": "Back Office"}, format="json")
    assert r.status_code == 200, r.content
    assert r.json()["key"] == "app.name"
    assert APIClient().get(reverse("setting_app")).json() == {"name": "Back Office"}
    assert Notification.objects.filter(context="settings", context_id="app.name").exists()

    member = api_as(make_user(USER))
    assert member.patch(reverse("setting_app_name"), {"name": "Hacked"}, format="json").status_code == 403


def test_theme_defaults_and_updates(make_user, api_as):
    Setting.objects.filter(key__startswith="theme.").delete()
    client = api_as(make_user(USER))

    r = client.get(reverse("setting_theme"))
    assert r.status_code == 200
    assert r.json() == {"color": "blue", "mode": "light"}

    r = client.patch(reverse("setting_theme_mode"), {"mode": "purple"}, format="json")
    assert r.status_code == 400
    assert "mode" in r.json()["error"]["detail"]

    r = client.patch(reverse("setting_theme_mode"), {"mode": "dark"}, format="json")
    assert r.status_code == 200
    r = client.patch(reverse("setting_theme_color"), {"color": "green"}, format="json")
    assert r.status_code == 200

    assert client.get(reverse("setting_theme")).json() == {"color": "green", "mode": "dark"}


def test_value_creates_missing_theme_keys(admin_client):
    Setting.objects.filter(key="theme.color").delete()

    r = admin_client.get(reverse("setting_value", args=["theme.color"]))
    assert r.status_code == 200
    assert r.json() == {"value": "blue"}
    assert Setting.objects.get(key="theme.color").is_active

    r = admin_client.get(reverse("setting_value", args=["does.not.exist"]))
    assert r.status_code == 404
    assert r.json()["error"]["detail"] == "Setting with key 'does.not.exist' not found"


def test_setting_crud_and_conflicts(admin_client):
    r = admin_client.post(reverse("setting_list"), {"key": "feature.beta", "value": "true"}, format="json")
    assert r.status_code == 201, r.content
    setting_id = r.json()["id"]

    r = admin_client.post(reverse("setting_list"), {"key": "feature.beta", "value": "false"}, format="json")
    assert r.status_code == 409
    assert r.json()["error"]["code"] == "conflict"

    r = admin_client.patch(reverse("setting_detail", args=[setting_id]), {"key": "app.name"}, format="json")
    assert r.status_code == 409

    r = admin_client.patch(reverse("setting_detail", args=[setting_id]), {"value": "false"}, format="json")
    assert r.status_code == 200
    assert r.json()["value"] == "false"

    r = admin_client.get(reverse("setting_list"), {"search": "feature"})
    assert [s["key"] for s in r.json()["data"]] == ["feature.beta"]

    r = admin_client.delete(reverse("setting_detail", args=[setting_id]))
    assert r.status_code == 204


def test_setting_by_key(admin_client, make_user, api_as):
    url = reverse("setting_by_key", args=["mail.sender"])

    assert admin_client.get(url).status_code == 404

    # PATCH crée la clé absente
    r = admin_client.patch(url, {"value": "noreply@example.com"}, format="json")
    assert r.status_code == 200, r.content
    assert r.json()["value"] == "noreply@example.com"
    assert r.json()["is_active"] is True

    r = admin_client.patch(url, {"is_active": False}, format="json")
    assert r.json()["value"] == "noreply@example.com"
    assert r.json()["is_active"] is False

    member = api_as(make_user(USER))
    assert member.get(url).status_code == 200
    assert member.delete(url).status_code == 403

    assert admin_client.delete(url).status_code == 204
    assert admin_client.get(url).status_code == 404


def test_settings_list_is_admin_only(make_user, api_as):
    assert api_as(make_user(USER)).get(reverse("setting_list")).status_code == 403


@pytest.mark.django_db
def test_upsert_and_theme_fallbacks():
    # clé absente: créée vide et active
    created = services.upsert("system.motd")
    assert (created.value, created.is_active) == ("", True)

    services.upsert("system.motd", value="Hello", is_active=False)
    assert services.get_value("system.motd") == "Hello"
    assert Setting.objects.get(key="system.motd").is_active is False

    # valeurs vides -> défauts du thème
    Setting.objects.create(key="theme.color", value="")
    assert services.theme() == {"color": "blue", "mode": "light"}
    assert services.theme_default("theme.unknown") == "light"

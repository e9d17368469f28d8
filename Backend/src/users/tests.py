import pytest
from django.contrib.auth import get_user_model
from django.urls import reverse
from rest_framework.test import APIClient

from client.tokens import decode_payload
from notifications.models import Notification
from organization.models import Department, Office
from rbac.constants import MANAGER, USER
from rbac.models import Role

User = get_user_model()
PASSWORD = "Str0ngPassw0rd!"


def _login(email, password=PASSWORD):
    return APIClient().post(reverse("auth_login"), {"email": email, "password": password}, format="json")


def test_login_refresh_and_me(make_user):
    make_user(USER, email="alice@example.com", first_name="Alice", last_name="Doe")

    # 1) Login
    r = _login("alice@example.com")
    assert r.status_code == 200, r.content
    body = r.json()
    assert set(body) == {"access_token", "refresh_token", "user"}
    assert body["user"]["email"] == "alice@example.com"
    assert body["user"]["role"] == USER
    assert User.objects.get(email="alice@example.com").last_login is not None

    claims = decode_payload(body["access_token"])
    assert claims["email"] == "alice@example.com"
    assert claims["role"] == USER

    # 2) Me (auth via Bearer)
    client = APIClient()
    client.credentials(HTTP_AUTHORIZATION=f"Bearer {body['access_token']}")
    r = client.get(reverse("me"))
    assert r.status_code == 200, r.content
    me = r.json()
    assert me["first_name"] == "Alice"
    assert me["role"]["name"] == USER
    assert me["office"]["code"] == "HQ"
    assert "password" not in me

    # 3) Refresh: nouvelle paire, l'ancien refresh est brûlé
    old_refresh = body["refresh_token"]
    r = APIClient().post(reverse("auth_refresh"), {"refresh_token": old_refresh}, format="json")
    assert r.status_code == 200, r.content
    assert r.json()["refresh_token"] != old_refresh

    r = APIClient().post(reverse("auth_refresh"), {"refresh_token": old_refresh}, format="json")
    assert r.status_code == 401
    assert r.json()["error"]["detail"] == "Invalid refresh token"


def test_login_rejects_bad_credentials(make_user):
    make_user(USER, email="bob@example.com")

    r = _login("bob@example.com", "wrong-password")
    assert r.status_code == 401
    assert r.json()["error"] == {"code": "unauthorized", "detail": "Invalid credentials", "status": 401}

    r = _login("nobody@example.com")
    assert r.status_code == 401

    r = APIClient().post(reverse("auth_login"), {"email": "not-an-email", "password": "x"}, format="json")
    assert r.status_code == 400


def test_inactive_user_cannot_login_or_refresh(make_user):
    user = make_user(USER, email="carol@example.com")
    refresh = _login("carol@example.com").json()["refresh_token"]

    User.objects.filter(pk=user.pk).update(is_active=False)

    assert _login("carol@example.com").status_code == 401
    r = APIClient().post(reverse("auth_refresh"), {"refresh_token": refresh}, format="json")
    assert r.status_code == 401


@pytest.mark.django_db
def test_refresh_requires_a_token():
    r = APIClient().post(reverse("auth_refresh"), {}, format="json")
    assert r.status_code == 401
    assert r.json()["error"]["detail"] == "No refresh token provided"

    r = APIClient().post(reverse("auth_refresh"), {"refresh_token": "garbage"}, format="json")
    assert r.status_code == 401
    assert r.json()["error"]["detail"] == "Invalid refresh token"


def test_logout_revokes_refresh_tokens(make_user):
    make_user(USER, email="dave@example.com")
    body = _login("dave@example.com").json()

    client = APIClient()
    client.credentials(HTTP_AUTHORIZATION=f"Bearer {body['access_token']}")
    r = client.post(reverse("auth_logout"))
    assert r.status_code == 200
    assert r.json() == {"detail": "Logged out"}

    r = APIClient().post(reverse("auth_refresh"), {"refresh_token": body["refresh_token"]}, format="json")
    assert r.status_code == 401


@pytest.mark.django_db
def test_logout_requires_authentication():
    assert APIClient().post(reverse("auth_logout")).status_code == 401


def test_change_password(make_user, api_as):
    user = make_user(USER, email="erin@example.com")
    client = api_as(user)

    r = client.post(
        reverse("change_password"),
        {"old_password": "nope", "new_password": "An0therStr0ng!"},
        format="json",
    )
    assert r.status_code == 400
    assert "old_password" in r.json()["error"]["detail"]

    r = client.post(
        reverse("change_password"),
        {"old_password": PASSWORD, "new_password": "An0therStr0ng!"},
        format="json",
    )
    assert r.status_code == 200, r.content

    assert _login("erin@example.com").status_code == 401
    assert _login("erin@example.com", "An0therStr0ng!").status_code == 200


def test_me_patch(make_user, api_as):
    make_user(USER, email="taken@example.com")
    client = api_as(make_user(USER, email="frank@example.com"))

    r = client.patch(reverse("me"), {"first_name": "Franck"}, format="json")
    assert r.status_code == 200
    assert r.json()["first_name"] == "Franck"
    assert r.json()["role"]["name"] == USER

    r = client.patch(reverse("me"), {"email": "taken@example.com"}, format="json")
    assert r.status_code == 409


def test_user_create_update_delete(admin_client):
    role = Role.objects.get(name=MANAGER)
    office = Office.objects.get(code="HQ")
    dept = Department.objects.create(name="Finance", code="FIN")
    payload = {
        "email": "grace@example.com",
        "password": "Gr4ceHopper!",
        "first_name": "Grace",
        "last_name": "Hopper",
        "role_id": str(role.pk),
        "office_id": str(office.pk),
        "department_id": str(dept.pk),
    }

    r = admin_client.post(reverse("user_list"), payload, format="json")
    assert r.status_code == 201, r.content
    created = r.json()
    assert created["role"]["name"] == MANAGER
    assert created["department"]["name"] == "Finance"
    assert created["job_position"] is None
    assert "password" not in created

    user = User.objects.get(email="grace@example.com")
    assert user.password != "Gr4ceHopper!"
    assert user.check_password("Gr4ceHopper!")

    n = Notification.objects.get(context="users")
    assert n.message == "New user Grace Hopper (grace@example.com) has been created"
    assert n.context_id == str(user.pk)

    # doublon d'email
    r = admin_client.post(reverse("user_list"), {**payload, "email": "GRACE@example.com"}, format="json")
    assert r.status_code == 409
    assert r.json()["error"]["detail"] == "User with this email already exists"

    # changement de mot de passe par un admin
    r = admin_client.patch(reverse("user_detail", args=[user.pk]), {"password": "N3wSecret!"}, format="json")
    assert r.status_code == 200
    user.refresh_from_db()
    assert user.check_password("N3wSecret!")

    r = admin_client.delete(reverse("user_detail", args=[user.pk]))
    assert r.status_code == 204
    assert not User.objects.filter(pk=user.pk).exists()


def test_user_create_validation(admin_client):
    office = Office.objects.get(code="HQ")
    role = Role.objects.get(name=USER)

    r = admin_client.post(
        reverse("user_list"),
        {"email": "h@example.com", "password": "abc", "role_id": str(role.pk), "office_id": str(office.pk)},
        format="json",
    )
    assert r.status_code == 400
    assert "password" in r.json()["error"]["detail"]

    r = admin_client.post(
        reverse("user_list"),
        {"email": "h@example.com", "role_id": str(role.pk), "office_id": str(office.pk)},
        format="json",
    )
    assert r.status_code == 400
    assert "password" in r.json()["error"]["detail"]

    r = admin_client.post(reverse("user_list"), {"email": "h@example.com", "password": "Str0ng!Pass"}, format="json")
    assert r.status_code == 400
    assert {"role_id", "office_id"} <= set(r.json()["error"]["detail"])


def test_user_list_search_and_filters(admin_client, make_user):
    make_user(USER, email="alice@example.com", first_name="Alice", last_name="Martin")
    make_user(MANAGER, email="bob.dalice@example.com", first_name="Bob", last_name="Dalice")

    # recherche par préfixe
    r = admin_client.get(reverse("user_list"), {"search": "ali"})
    assert r.status_code == 200
    assert [u["email"] for u in r.json()["data"]] == ["alice@example.com"]

    manager = Role.objects.get(name=MANAGER)
    r = admin_client.get(reverse("user_list"), {"role_id": str(manager.pk)})
    assert [u["email"] for u in r.json()["data"]] == ["bob.dalice@example.com"]

    r = admin_client.get(reverse("user_list"), {"sort_by": "email", "sort_order": "asc"})
    emails = [u["email"] for u in r.json()["data"]]
    assert emails == sorted(emails)
    assert r.json()["meta"]["total"] == 3


def test_user_access_by_role(make_user, api_as):
    target = make_user(USER)
    manager = api_as(make_user(MANAGER))

    assert manager.get(reverse("user_detail", args=[target.pk])).status_code == 200
    assert manager.get(reverse("user_list")).status_code == 403
    r = manager.patch(reverse("user_detail", args=[target.pk]), {"first_name": "X"}, format="json")
    assert r.status_code == 403


def test_admin_sees_user_activity(admin_client, make_user):
    r = admin_client.get(reverse("notification_list"), {"context": "users"})
    assert r.status_code == 200
    assert r.json()["meta"]["total"] == 0

    office = Office.objects.get(code="HQ")
    role = Role.objects.get(name=USER)
    r = admin_client.post(
        reverse("user_list"),
        {
            "email": "ivan@example.com", "password": "Iv4nStrong!", "first_name": "Ivan", "last_name": "Petrov",
            "role_id": str(role.pk), "office_id": str(office.pk),
        },
        format="json",
    )
    assert r.status_code == 201, r.content

    r = admin_client.get(reverse("notification_list"), {"context": "users"})
    assert r.json()["meta"]["total"] == 1
    assert r.json()["data"][0]["is_read"] is False

import io

import pytest
from django.contrib.auth import get_user_model
from django.core.management import call_command
from rest_framework.test import APIClient

from organization.models import Office
from rbac.constants import ADMINISTRATOR
from rbac.models import Role
from users.tokens import issue_tokens

PASSWORD = "Str0ngPassw0rd!"


@pytest.fixture
def seeded(db):
    """Permissions, rôles, menus, paramètres et bureau HQ (sans compte admin)."""
    call_command("seed_defaults", "--no-admin", stdout=io.StringIO())


@pytest.fixture
def make_user(seeded):
    counter = {"n": 0}

    def _make(role_name=ADMINISTRATOR, email=None, password=PASSWORD, **extra):
        counter["n"] += 1
        email = email or f"user{counter['n']}@example.com"
        extra.setdefault("first_name", "Test")
        extra.setdefault("last_name", role_name)
        return get_user_model().objects.create_user(
            email=email,
            password=password,
            role=Role.objects.get(name=role_name),
            office=Office.objects.get(code="HQ"),
            **extra,
        )

    return _make


@pytest.fixture
def api_as():
    def _as(user):
        client = APIClient()
        client.credentials(HTTP_AUTHORIZATION=f"Bearer {issue_tokens(user)['access_token']}")
        return client

    return _as


@pytest.fixture
def admin_user(make_user):
    return make_user(ADMINISTRATOR, email="admin@example.com")


@pytest.fixture
def admin_client(admin_user, api_as):
    return api_as(admin_user)

import io
import json
import os
import stat
import threading
import time
from unittest import mock

import jwt
import pytest
import requests
from django.contrib.auth import get_user_model
from django.core.management import call_command

from client import ApiClient, ApiError, FileTokenStore, Forbidden, MemoryTokenStore, SessionExpired, Sidebar
from client.tokens import decode_payload, is_expired
from organization.models import Office
from rbac.constants import MANAGER
from rbac.models import Role

BASE = "http://api.test/api"


def _resp(status, body=None):
    r = mock.Mock()
    r.status_code = status
    r.content = b"" if body is None else json.dumps(body).encode()
    r.text = r.content.decode()
    r.json.return_value = body
    return r


def _tokens(access, refresh):
    return {"access_token": access, "refresh_token": refresh, "user": {"email": "a@example.com"}}


def _client(access="A1", refresh="R1", **kwargs):
    store = MemoryTokenStore()
    store.set(access, refresh)
    session = mock.Mock()
    return ApiClient(BASE, store=store, session=session, **kwargs), session


def _auth_header(call):
    return call.kwargs["headers"].get("Authorization")


# ---------------------------------------------------------------------------
# Intercepteur
# ---------------------------------------------------------------------------
def test_bearer_is_attached():
    client, session = _client()
    session.request.return_value = _resp(200, {"ok": True})

    assert client.get("/users/me") == {"ok": True}
    call = session.request.call_args
    assert call.args == ("GET", f"{BASE}/users/me")
    assert _auth_header(call) == "Bearer A1"


def test_401_refreshes_once_and_replays():
    client, session = _client()
    session.request.side_effect = [
        _resp(401, {"error": {"code": "token_not_valid", "detail": "expired", "status": 401}}),
        _resp(200, _tokens("A2", "R2")),
        _resp(200, {"id": 1}),
    ]

    assert client.get("/users/me") == {"id": 1}
    first, refresh, replay = session.request.call_args_list
    assert refresh.args == ("POST", f"{BASE}/auth/refresh")
    assert refresh.kwargs["json"] == {"refresh_token": "R1"}
    assert "Authorization" not in refresh.kwargs["headers"]
    assert _auth_header(replay) == "Bearer A2"
    assert (client.store.access_token, client.store.refresh_token) == ("A2", "R2")


def test_refused_refresh_ends_the_session():
    on_logout = mock.Mock()
    client, session = _client(on_logout=on_logout)
    session.request.side_effect = [_resp(401), _resp(401, {"error": {"detail": "Invalid refresh token"}})]

    with pytest.raises(SessionExpired):
        client.get("/users/me")
    assert session.request.call_count == 2
    on_logout.assert_called_once_with()
    assert client.store.access_token is None and client.store.refresh_token is None


def test_second_401_is_not_retried_again():
    on_logout = mock.Mock()
    client, session = _client(on_logout=on_logout)
    session.request.side_effect = [_resp(401), _resp(200, _tokens("A2", "R2")), _resp(401)]

    with pytest.raises(SessionExpired):
        client.get("/users/me")
    assert session.request.call_count == 3
    on_logout.assert_called_once_with()


def test_401_without_refresh_token_ends_the_session():
    on_logout = mock.Mock()
    client, session = _client(refresh=None, on_logout=on_logout)
    session.request.return_value = _resp(401)

    with pytest.raises(SessionExpired):
        client.get("/users/me")
    assert session.request.call_count == 1
    on_logout.assert_called_once_with()


def test_403_is_not_retried():
    client, session = _client()
    session.request.return_value = _resp(403, {"error": {"code": "permission_denied", "detail": "Nope", "status": 403}})

    with pytest.raises(Forbidden) as exc:
        client.get("/roles")
    assert exc.value.status == 403
    assert exc.value.code == "permission_denied"
    assert session.request.call_count == 1
    assert client.store.access_token == "A1"


def test_other_errors_carry_the_envelope():
    client, session = _client()
    session.request.return_value = _resp(409, {"error": {"code": "conflict", "detail": "Duplicate", "status": 409}})

    with pytest.raises(ApiError) as exc:
        client.post("/settings", {"key": "x"})
    assert str(exc.value) == "Duplicate"
    assert exc.value.status == 409
    assert exc.value.code == "conflict"


def test_network_errors_become_api_errors():
    client, session = _client()
    session.request.side_effect = requests.ConnectionError("down")

    with pytest.raises(ApiError) as exc:
        client.get("/users/me")
    assert exc.value.status is None


def test_empty_body_returns_none():
    client, session = _client()
    session.request.return_value = _resp(204)
    assert client.delete("/settings/by-key/x") is None


def test_concurrent_401s_share_one_refresh():
    client, session = _client()
    barrier = threading.Barrier(2)
    refreshes = []

    def fake_request(method, url, headers=None, **kwargs):
        if url.endswith("/auth/refresh"):
            refreshes.append(kwargs["json"])
            time.sleep(0.05)
            return _resp(200, _tokens("A2", "R2"))
        if headers.get("Authorization") == "Bearer A1":
            barrier.wait(timeout=5)
            return _resp(401)
        return _resp(200, {"ok": True})

    session.request.side_effect = fake_request
    results = []

    def worker():
        results.append(client.get("/notifications/unread-count"))

    threads = [threading.Thread(target=worker) for _ in range(2)]
    for t in threads:
        t.start()
    for t in threads:
        t.join(timeout=10)

    assert results == [{"ok": True}, {"ok": True}]
    assert refreshes == [{"refresh_token": "R1"}]


def test_concurrent_expiry_logs_out_once():
    on_logout = mock.Mock()
    client, session = _client(on_logout=on_logout)
    barrier = threading.Barrier(2)

    def fake_request(method, url, headers=None, **kwargs):
        if url.endswith("/auth/refresh"):
            time.sleep(0.05)
            return _resp(401, {"error": {"detail": "Invalid refresh token"}})
        barrier.wait(timeout=5)
        return _resp(401)

    session.request.side_effect = fake_request
    errors = []

    def worker():
        try:
            client.get("/notifications/unread-count")
        except SessionExpired as e:
            errors.append(e)

    threads = [threading.Thread(target=worker) for _ in range(2)]
    for t in threads:
        t.start()
    for t in threads:
        t.join(timeout=10)

    # deux appels en échec, une seule fin de session
    assert len(errors) == 2
    on_logout.assert_called_once_with()
    assert client.store.access_token is None and client.store.refresh_token is None

    # un appel tardif avec l'ancien jeton ne relance pas on_logout
    with pytest.raises(SessionExpired):
        client._refresh_after_401("A1")
    on_logout.assert_called_once_with()


# ---------------------------------------------------------------------------
# Session
# ---------------------------------------------------------------------------
def test_login_stores_tokens():
    client, session = _client(access=None, refresh=None)
    session.request.return_value = _resp(200, _tokens("A1", "R1"))

    user = client.login("a@example.com", "secret")
    assert user == {"email": "a@example.com"}
    assert client.has_refresh_token()
    assert "Authorization" not in session.request.call_args.kwargs["headers"]


def test_failed_login_does_not_trigger_logout():
    on_logout = mock.Mock()
    client, session = _client(access=None, refresh=None, on_logout=on_logout)
    session.request.return_value = _resp(401, {"error": {"detail": "Invalid credentials"}})

    with pytest.raises(ApiError) as exc:
        client.login("a@example.com", "bad")
    assert not isinstance(exc.value, SessionExpired)
    assert str(exc.value) == "Invalid credentials"
    on_logout.assert_not_called()


def test_logout_always_clears_tokens():
    client, session = _client()
    session.request.side_effect = requests.ConnectionError("down")

    client.logout()
    assert client.store.access_token is None
    assert not client.has_refresh_token()


def test_check_and_refresh_auth():
    expired = jwt.encode({"exp": int(time.time()) - 10}, "k", algorithm="HS256")
    client, session = _client(access=expired)
    session.request.side_effect = [_resp(200, _tokens("A2", "R2")), _resp(200, {"email": "a@example.com"})]

    assert client.check_and_refresh_auth() == {"email": "a@example.com"}
    assert session.request.call_args_list[0].args[1].endswith("/auth/refresh")

    client, session = _client(access=None, refresh=None)
    assert client.check_and_refresh_auth() is None
    session.request.assert_not_called()


def test_paginate_walks_every_page():
    client, session = _client()
    session.request.side_effect = [
        _resp(200, {"data": [1, 2], "meta": {"total": 3, "page": 1, "limit": 2, "total_pages": 2}}),
        _resp(200, {"data": [3], "meta": {"total": 3, "page": 2, "limit": 2, "total_pages": 2}}),
    ]

    assert list(client.paginate("/users", {"search": "a"}, limit=2)) == [1, 2, 3]
    params = [c.kwargs["params"] for c in session.request.call_args_list]
    assert params == [{"search": "a", "page": 1, "limit": 2}, {"search": "a", "page": 2, "limit": 2}]


# ---------------------------------------------------------------------------
# Jetons
# ---------------------------------------------------------------------------
def test_is_expired():
    now = 1_700_000_000
    fresh = jwt.encode({"exp": now + 3600}, "k", algorithm="HS256")
    soon = jwt.encode({"exp": now + 30}, "k", algorithm="HS256")
    no_exp = jwt.encode({"sub": "x"}, "k", algorithm="HS256")

    assert is_expired(fresh, now=now) is False
    assert is_expired(soon, now=now) is True
    assert is_expired(soon, leeway=0, now=now) is False
    assert is_expired(no_exp, now=now) is True
    assert is_expired("garbage", now=now) is True
    assert is_expired(None) is True
    assert decode_payload("garbage") is None


def test_file_token_store(tmp_path):
    path = tmp_path / "session" / "tokens.json"
    store = FileTokenStore(path)
    store.set("A1", "R1")
    store.set("A2")

    reloaded = FileTokenStore(path)
    assert (reloaded.access_token, reloaded.refresh_token) == ("A2", "R1")

    reloaded.clear()
    assert not path.exists()

    path.write_text("{not json", encoding="utf-8")
    broken = FileTokenStore(path)
    assert broken.access_token is None


@pytest.mark.skipif(os.name == "nt", reason="permissions POSIX")
def test_file_token_store_is_private(tmp_path):
    path = tmp_path / "tokens.json"
    # ancien fichier lisible par tous: remplacé, pas réécrit en place
    path.write_text("{}", encoding="utf-8")
    path.chmod(0o644)

    FileTokenStore(path).set("A1", "R1")
    assert stat.S_IMODE(path.stat().st_mode) == 0o600
    assert json.loads(path.read_text(encoding="utf-8")) == {"access_token": "A1", "refresh_token": "R1"}
    assert [p.name for p in tmp_path.iterdir()] == ["tokens.json"]


# ---------------------------------------------------------------------------
# Barre latérale
# ---------------------------------------------------------------------------
MENU_TREE = [
    {"id": "1", "name": "Dashboard", "path": "/", "icon": "LayoutDashboard", "parent_id": None, "children": []},
    {"id": "2", "name": "Master Data", "path": "", "parent_id": None, "children": [
        {"id": "3", "name": "Offices", "path": "/master/offices", "parent_id": "2", "children": [
            {"id": "4", "name": "Branches", "path": "/master/offices/branches", "parent_id": "3", "children": []},
        ]},
        {"id": "5", "name": "Departments", "path": "/master/departments", "parent_id": "2", "children": []},
    ]},
    {"id": "6", "label": "Notifications", "path": "/notifications", "children": []},
]


def test_sidebar_starts_collapsed():
    sidebar = Sidebar.from_api(MENU_TREE)
    assert sidebar.render() == "  Dashboard\n+ Master Data\n  Notifications"
    assert [r.depth for r in sidebar.rows()] == [0, 0, 0]


def test_sidebar_toggle_and_closed_bar():
    sidebar = Sidebar.from_api(MENU_TREE)

    assert sidebar.toggle("2") is True
    assert [r.node.label for r in sidebar.rows()] == ["Dashboard", "Master Data", "Offices", "Departments", "Notifications"]

    # barre repliée: premier niveau seulement, rien n'apparaît déplié
    closed = list(sidebar.rows(open=False))
    assert [r.node.label for r in closed] == ["Dashboard", "Master Data", "Notifications"]
    assert not any(r.expanded for r in closed)

    assert sidebar.toggle("2") is False
    assert sidebar.is_expanded("2") is False


def test_sidebar_expand_to_active_path():
    sidebar = Sidebar.from_api(MENU_TREE, active_path="/master/offices/branches")

    assert sidebar.expand_to("/master/offices/branches") is True
    assert sidebar.render() == "\n".join([
        "  Dashboard",
        "- Master Data",
        "  - Offices",
        "      Branches *",
        "    Departments",
        "  Notifications",
    ])
    active = [r for r in sidebar.rows() if r.active]
    assert [(r.node.id, r.depth) for r in active] == [("4", 2)]

    assert sidebar.expand_to("/unknown") is False
    sidebar.collapse_all()
    assert sidebar.render(open=True).count("\n") == 2


def test_sidebar_opens_on_the_active_item():
    sidebar = Sidebar.from_api(MENU_TREE, active_path="/master/offices/branches")

    # ancêtres dépliés dès la construction
    rows = list(sidebar.rows())
    assert [(r.node.label, r.depth) for r in rows if r.active] == [("Branches", 2)]
    assert sidebar.is_expanded("2") and sidebar.is_expanded("3")
    assert not sidebar.is_expanded("4")

    # chemin inconnu: rien n'est déplié
    assert Sidebar.from_api(MENU_TREE, active_path="/nowhere").render() == "  Dashboard\n+ Master Data\n  Notifications"


# ---------------------------------------------------------------------------
# Bout en bout contre le serveur de test
# ---------------------------------------------------------------------------
@pytest.mark.django_db(transaction=True)
def test_client_against_live_server(live_server):
    call_command("seed_defaults", "--no-admin", stdout=io.StringIO())
    get_user_model().objects.create_user(
        email="manager@example.com",
        password="Str0ngPassw0rd!",
        first_name="Mia",
        last_name="Manager",
        role=Role.objects.get(name=MANAGER),
        office=Office.objects.get(code="HQ"),
    )
    on_logout = mock.Mock()
    client = ApiClient(f"{live_server.url}/api", on_logout=on_logout)

    user = client.login("manager@example.com", "Str0ngPassw0rd!")
    assert user["role"] == MANAGER
    assert client.has_valid_access_token()

    sidebar = Sidebar.load(client, active_path="/master/offices")
    assert [n.label for n in sidebar.roots] == ["Dashboard", "Master Data", "Notifications"]
    assert sidebar.expand_to("/master/offices")
    assert sidebar.render().count(" *") == 1

    # jeton d'accès invalide: refresh transparent puis rejeu
    client.store.set("garbage")
    assert client.get("/users/me")["email"] == "manager@example.com"
    assert client.store.access_token != "garbage"

    with pytest.raises(Forbidden):
        client.get("/users")

    old_refresh = client.store.refresh_token
    client.logout()
    assert not client.has_refresh_token()

    # refresh révoqué au logout: la session ne peut pas être relancée
    revived = ApiClient(f"{live_server.url}/api", store=MemoryTokenStore(), on_logout=on_logout)
    revived.store.set("garbage", old_refresh)
    with pytest.raises(SessionExpired):
        revived.get("/users/me")
    on_logout.assert_called_once_with()

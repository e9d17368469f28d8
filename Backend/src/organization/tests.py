from django.urls import reverse

from notifications.models import Notification
from organization.models import Department, JobPosition, MasterApproval, MasterApprovalItem, Office
from rbac.constants import GUEST, MANAGER, USER


def test_office_crud(admin_client):
    r = admin_client.post(
        reverse("office_list"),
        {"name": "Lyon", "code": "LYO", "address": "1 rue de la République", "email": "lyon@example.com"},
        format="json",
    )
    assert r.status_code == 201, r.content
    office_id = r.json()["id"]
    assert r.json()["parent_id"] is None

    r = admin_client.get(reverse("office_list"), {"search": "lyo"})
    assert r.status_code == 200
    assert [o["code"] for o in r.json()["data"]] == ["LYO"]

    r = admin_client.patch(reverse("office_detail", args=[office_id]), {"phone": "0400000000"}, format="json")
    assert r.status_code == 200
    assert r.json()["phone"] == "0400000000"

    r = admin_client.delete(reverse("office_detail", args=[office_id]))
    assert r.status_code == 204
    assert not Office.objects.filter(code="LYO").exists()

    messages = list(Notification.objects.filter(context="offices").values_list("message", flat=True))
    assert 'New office "Lyon (LYO)" has been created' in messages
    assert 'Office "Lyon (LYO)" has been deleted' in messages


def test_office_code_is_unique(admin_client):
    r = admin_client.post(reverse("office_list"), {"name": "Other HQ", "code": "HQ"}, format="json")
    assert r.status_code == 400
    assert "code" in r.json()["error"]["detail"]


def test_office_detail_embeds_parent_and_children(admin_client):
    hq = Office.objects.get(code="HQ")
    branch = Office.objects.create(name="Branch", code="BR", parent=hq)

    r = admin_client.get(reverse("office_detail", args=[hq.pk]))
    assert r.status_code == 200
    assert r.json()["parent"] is None
    assert [c["code"] for c in r.json()["children"]] == ["BR"]

    r = admin_client.get(reverse("office_detail", args=[branch.pk]))
    assert r.json()["parent"]["code"] == "HQ"
    assert r.json()["parent_id"] == str(hq.pk)


def test_office_parent_cycle_is_rejected(admin_client):
    a = Office.objects.create(name="A", code="A")
    b = Office.objects.create(name="B", code="B", parent=a)
    c = Office.objects.create(name="C", code="C", parent=b)

    r = admin_client.patch(reverse("office_detail", args=[a.pk]), {"parent_id": str(c.pk)}, format="json")
    assert r.status_code == 400
    assert "parent_id" in r.json()["error"]["detail"]

    r = admin_client.patch(reverse("office_detail", args=[a.pk]), {"parent_id": str(a.pk)}, format="json")
    assert r.status_code == 400

    # détacher reste possible
    r = admin_client.patch(reverse("office_detail", args=[c.pk]), {"parent_id": None}, format="json")
    assert r.status_code == 200
    assert r.json()["parent_id"] is None


def test_office_hierarchy(admin_client):
    hq = Office.objects.get(code="HQ")
    Office.objects.create(name="Paris", code="PAR", parent=hq)
    Office.objects.create(name="Bordeaux", code="BOR", parent=hq)

    r = admin_client.get(reverse("office_hierarchy"))
    assert r.status_code == 200
    tree = r.json()
    assert [o["code"] for o in tree] == ["HQ"]
    assert [o["code"] for o in tree[0]["children"]] == ["BOR", "PAR"]
    assert tree[0]["children"][0]["children"] == []


def test_office_filter_by_parent(admin_client):
    hq = Office.objects.get(code="HQ")
    Office.objects.create(name="Paris", code="PAR", parent=hq)
    Office.objects.create(name="Remote", code="REM")

    r = admin_client.get(reverse("office_list"), {"parent_id": str(hq.pk)})
    assert [o["code"] for o in r.json()["data"]] == ["PAR"]


def test_office_with_users_cannot_be_deleted(admin_client):
    hq = Office.objects.get(code="HQ")
    r = admin_client.delete(reverse("office_detail", args=[hq.pk]))
    assert r.status_code == 409
    assert r.json()["error"]["code"] == "protected"


def test_office_access_by_role(make_user, api_as):
    member = api_as(make_user(USER))
    assert member.get(reverse("office_list")).status_code == 200
    r = member.post(reverse("office_list"), {"name": "X", "code": "X"}, format="json")
    assert r.status_code == 403

    guest = api_as(make_user(GUEST))
    assert guest.get(reverse("office_list")).status_code == 403


def test_department_by_code(admin_client):
    Department.objects.create(name="Finance", code="FIN")

    r = admin_client.get(reverse("department_by_code", args=["FIN"]))
    assert r.status_code == 200
    assert r.json()["name"] == "Finance"

    r = admin_client.get(reverse("department_by_code", args=["NOPE"]))
    assert r.status_code == 404


def test_department_search_and_duplicate_code(admin_client):
    Department.objects.create(name="Finance", code="FIN", description="Money matters")
    Department.objects.create(name="Human Resources", code="HR")

    r = admin_client.get(reverse("department_list"), {"search": "money"})
    assert [d["code"] for d in r.json()["data"]] == ["FIN"]

    r = admin_client.post(reverse("department_list"), {"name": "Finance 2", "code": "FIN"}, format="json")
    assert r.status_code == 400


def test_job_position_level(admin_client):
    r = admin_client.post(reverse("job_position_list"), {"name": "Intern", "code": "INT", "level": 0}, format="json")
    assert r.status_code == 400
    assert "level" in r.json()["error"]["detail"]

    r = admin_client.post(reverse("job_position_list"), {"name": "Intern", "code": "INT"}, format="json")
    assert r.status_code == 201
    assert r.json()["level"] == 1

    JobPosition.objects.create(name="Director", code="DIR", level=5)
    r = admin_client.get(reverse("job_position_list"), {"level": 5})
    assert [j["code"] for j in r.json()["data"]] == ["DIR"]


def test_job_positions_are_staff_only(make_user, api_as):
    assert api_as(make_user(MANAGER)).get(reverse("job_position_list")).status_code == 200
    assert api_as(make_user(USER)).get(reverse("job_position_list")).status_code == 403


def _approval_refs():
    finance = Department.objects.create(name="Finance", code="FIN")
    hr = Department.objects.create(name="Human Resources", code="HR")
    head = JobPosition.objects.create(name="Head", code="HEAD", level=3)
    director = JobPosition.objects.create(name="Director", code="DIR", level=5)
    return finance, hr, head, director


def test_master_approval_crud(admin_client, admin_user):
    finance, hr, head, director = _approval_refs()

    r = admin_client.post(
        reverse("master_approval_list"),
        {
            "entity": "Purchase Order",
            "items": [
                {"job_position_id": str(head.pk), "department_id": str(finance.pk)},
                {"job_position_id": str(director.pk), "department_id": str(finance.pk)},
            ],
        },
        format="json",
    )
    assert r.status_code == 201, r.content
    body = r.json()
    approval_id = body["id"]
    assert body["is_active"] is True
    # sans "order": position dans la liste
    assert [(i["order"], i["job_position"]["name"]) for i in body["items"]] == [(1, "Head"), (2, "Director")]
    assert body["items"][0]["department"] == {"id": str(finance.pk), "name": "Finance"}
    assert body["items"][0]["creator"]["id"] == str(admin_user.pk)

    # modification sans "items": les étapes restent
    r = admin_client.patch(reverse("master_approval_detail", args=[approval_id]), {"is_active": False}, format="json")
    assert r.status_code == 200
    assert r.json()["is_active"] is False
    assert len(r.json()["items"]) == 2

    # "items" fourni: remplacement complet
    r = admin_client.patch(
        reverse("master_approval_detail", args=[approval_id]),
        {"items": [{"job_position_id": str(director.pk), "department_id": str(hr.pk), "order": 5}]},
        format="json",
    )
    assert r.status_code == 200, r.content
    assert [(i["order"], i["department"]["name"]) for i in r.json()["items"]] == [(5, "Human Resources")]
    assert MasterApprovalItem.objects.filter(approval_id=approval_id).count() == 1

    r = admin_client.delete(reverse("master_approval_detail", args=[approval_id]))
    assert r.status_code == 204
    assert not MasterApproval.objects.exists()
    assert not MasterApprovalItem.objects.exists()

    messages = list(Notification.objects.filter(context="master_approvals").values_list("message", flat=True))
    assert 'New master approval "Purchase Order" has been created' in messages
    assert 'Master approval "Purchase Order" has been deleted' in messages


def test_master_approval_list_search_and_filter(admin_client):
    finance, _, head, _ = _approval_refs()
    for entity, active in [("Purchase Order", True), ("Leave Request", True), ("Expense Claim", False)]:
        approval = MasterApproval.objects.create(entity=entity, is_active=active)
        MasterApprovalItem.objects.create(approval=approval, order=1, job_position=head, department=finance)

    r = admin_client.get(reverse("master_approval_list"))
    assert r.status_code == 200
    assert [a["entity"] for a in r.json()["data"]] == ["Expense Claim", "Leave Request", "Purchase Order"]
    assert r.json()["meta"]["total"] == 3
    assert r.json()["data"][0]["items"][0]["job_position"]["name"] == "Head"

    r = admin_client.get(reverse("master_approval_list"), {"search": "order"})
    assert [a["entity"] for a in r.json()["data"]] == ["Purchase Order"]

    r = admin_client.get(reverse("master_approval_list"), {"isActive": "false"})
    assert [a["entity"] for a in r.json()["data"]] == ["Expense Claim"]

    r = admin_client.get(reverse("master_approval_list"), {"sort_by": "entity", "sort_order": "desc", "limit": 1})
    assert [a["entity"] for a in r.json()["data"]] == ["Purchase Order"]


def test_master_approval_rejects_unknown_references(admin_client):
    finance, _, head, _ = _approval_refs()
    r = admin_client.post(
        reverse("master_approval_list"),
        {"entity": "Purchase Order", "items": [{"job_position_id": str(finance.pk), "department_id": str(finance.pk)}]},
        format="json",
    )
    assert r.status_code == 400
    assert "items" in r.json()["error"]["detail"]

    r = admin_client.post(reverse("master_approval_list"), {"entity": "No steps"}, format="json")
    assert r.status_code == 400
    assert not MasterApproval.objects.exists()


def test_department_used_by_an_approval_cannot_be_deleted(admin_client):
    finance, _, head, _ = _approval_refs()
    approval = MasterApproval.objects.create(entity="Purchase Order")
    MasterApprovalItem.objects.create(approval=approval, order=1, job_position=head, department=finance)

    r = admin_client.delete(reverse("department_detail", args=[finance.pk]))
    assert r.status_code == 409
    assert r.json()["error"]["code"] == "protected"


def test_master_approvals_access_by_role(make_user, api_as):
    approval = MasterApproval.objects.create(entity="Purchase Order")

    manager = api_as(make_user(MANAGER))
    assert manager.get(reverse("master_approval_list")).status_code == 200
    assert manager.get(reverse("master_approval_detail", args=[approval.pk])).status_code == 200
    r = manager.patch(reverse("master_approval_detail", args=[approval.pk]), {"is_active": False}, format="json")
    assert r.status_code == 403
    r = manager.post(reverse("master_approval_list"), {"entity": "X", "items": []}, format="json")
    assert r.status_code == 403

    assert api_as(make_user(USER)).get(reverse("master_approval_list")).status_code == 403

from django.urls import reverse

from catalog.models import Category, ProductType
from rbac.constants import MANAGER, USER


def _category(name, slug, parent=None, **extra):
    return Category.objects.create(name=name, slug=slug, parent=parent, **extra)


def test_category_create_and_nested_payload(admin_client):
    r = admin_client.post(
        reverse("category_list"),
        {"name": "Electronics", "slug": "electronics", "image_url": "https://cdn.example.com/e.png"},
        format="json",
    )
    assert r.status_code == 201, r.content
    parent_id = r.json()["id"]
    assert r.json()["parent"] is None
    assert r.json()["children"] == []

    r = admin_client.post(
        reverse("category_list"),
        {"name": "Phones", "slug": "phones", "parent_id": parent_id, "order": 2},
        format="json",
    )
    assert r.status_code == 201, r.content
    assert r.json()["parent"]["slug"] == "electronics"

    r = admin_client.get(reverse("category_detail", args=[parent_id]))
    assert [c["slug"] for c in r.json()["children"]] == ["phones"]


def test_category_validation(admin_client):
    _category("Books", "books")

    r = admin_client.post(reverse("category_list"), {"name": "Books 2", "slug": "books"}, format="json")
    assert r.status_code == 400
    assert "slug" in r.json()["error"]["detail"]

    r = admin_client.post(reverse("category_list"), {"name": "Bad", "slug": "not a slug"}, format="json")
    assert r.status_code == 400

    r = admin_client.post(reverse("category_list"), {"name": "Neg", "slug": "neg", "order": -1}, format="json")
    assert r.status_code == 400
    assert "order" in r.json()["error"]["detail"]


def test_category_parent_filter(admin_client):
    root = _category("Home", "home")
    _category("Kitchen", "kitchen", parent=root)
    _category("Garden", "garden")

    r = admin_client.get(reverse("category_list"), {"parent_id": "null"})
    assert sorted(c["slug"] for c in r.json()["data"]) == ["garden", "home"]

    r = admin_client.get(reverse("category_list"), {"parentId": str(root.pk)})
    assert [c["slug"] for c in r.json()["data"]] == ["kitchen"]

    r = admin_client.get(reverse("category_list"))
    assert r.json()["meta"]["total"] == 3


def test_category_with_children_cannot_be_deleted(admin_client):
    root = _category("Home", "home")
    child = _category("Kitchen", "kitchen", parent=root)

    r = admin_client.delete(reverse("category_detail", args=[root.pk]))
    assert r.status_code == 400
    assert r.json()["error"]["detail"].startswith("Cannot delete category with children")

    assert admin_client.delete(reverse("category_detail", args=[child.pk])).status_code == 204
    assert admin_client.delete(reverse("category_detail", args=[root.pk])).status_code == 204


def test_category_cycle_is_rejected(admin_client):
    root = _category("Home", "home")
    child = _category("Kitchen", "kitchen", parent=root)

    r = admin_client.patch(reverse("category_detail", args=[root.pk]), {"parent_id": str(child.pk)}, format="json")
    assert r.status_code == 400


def test_category_hierarchy_and_slug(make_user, api_as):
    root = _category("Home", "home")
    _category("Lighting", "lighting", parent=root, order=2)
    _category("Kitchen", "kitchen", parent=root, order=1)
    _category("Old stuff", "old-stuff", parent=root, is_active=False)
    client = api_as(make_user(USER))

    r = client.get(reverse("category_hierarchy"))
    assert r.status_code == 200
    tree = r.json()
    assert [c["slug"] for c in tree] == ["home"]
    assert [c["slug"] for c in tree[0]["children"]] == ["kitchen", "lighting"]

    r = client.get(reverse("category_by_slug", args=["kitchen"]))
    assert r.status_code == 200
    assert r.json()["parent"]["slug"] == "home"
    assert client.get(reverse("category_by_slug", args=["nope"])).status_code == 404

    # la liste de gestion reste réservée au staff
    assert client.get(reverse("category_list")).status_code == 403


def test_product_types(admin_client, make_user, api_as):
    ProductType.objects.create(name="Service")
    ProductType.objects.create(name="Goods")

    r = admin_client.get(reverse("product_type_list"))
    assert [p["name"] for p in r.json()["data"]] == ["Goods", "Service"]

    r = admin_client.post(reverse("product_type_list"), {"name": "Goods"}, format="json")
    assert r.status_code == 400

    r = admin_client.post(reverse("product_type_list"), {"name": "x" * 101}, format="json")
    assert r.status_code == 400

    r = admin_client.post(reverse("product_type_list"), {"name": "Digital", "description": "Downloads"}, format="json")
    assert r.status_code == 201
    pk = r.json()["id"]

    r = admin_client.patch(reverse("product_type_detail", args=[pk]), {"is_active": False}, format="json")
    assert r.json()["is_active"] is False

    manager = api_as(make_user(MANAGER))
    assert manager.get(reverse("product_type_list")).status_code == 200
    assert manager.delete(reverse("product_type_detail", args=[pk])).status_code == 403
    assert admin_client.delete(reverse("product_type_detail", args=[pk])).status_code == 204

from rest_framework import serializers

from common.tree import creates_cycle
from rbac.models import Role
from rbac.serializers import RoleSummarySerializer
from .models import Menu


class MenuSerializer(serializers.ModelSerializer):
    parent_id = serializers.PrimaryKeyRelatedField(
        source="parent", queryset=Menu.objects.all(), allow_null=True, required=False,
    )
    roles = RoleSummarySerializer(many=True, read_only=True)
    role_ids = serializers.PrimaryKeyRelatedField(
        source="roles", queryset=Role.objects.all(), many=True, required=False, write_only=True,
    )

    class Meta:
        model = Menu
        fields = [
            "id", "name", "path", "icon", "parent_id", "order", "is_active",
            "roles", "role_ids", "created_at", "updated_at",
        ]
        read_only_fields = ["id", "created_at", "updated_at"]

    def validate(self, attrs):
        parent = attrs.get("parent")
        if self.instance is not None and parent is not None and creates_cycle(self.instance, parent):
            raise serializers.ValidationError(
                {"parent_id": "A menu cannot be placed under itself or one of its descendants."}
            )
        return attrs


class SidebarItemSerializer(serializers.ModelSerializer):
    """Nœud de l'arbre renvoyé au front (les enfants sont ajoutés par build_tree)."""

    parent_id = serializers.UUIDField(read_only=True)

    class Meta:
        model = Menu
        fields = ["id", "name", "path", "icon", "parent_id", "order"]


class MenuOrderItemSerializer(serializers.Serializer):
    id = serializers.UUIDField()
    order = serializers.IntegerField()


class MenuOrderSerializer(serializers.Serializer):
    menu_orders = MenuOrderItemSerializer(many=True, allow_empty=False)

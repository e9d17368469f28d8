from django.db import transaction
from rest_framework import serializers

from common.tree import creates_cycle
from .models import Office, Department, JobPosition, MasterApproval, MasterApprovalItem


class OfficeSummarySerializer(serializers.ModelSerializer):
    class Meta:
        model = Office
        fields = ["id", "name", "code"]


class OfficeSerializer(serializers.ModelSerializer):
    parent_id = serializers.PrimaryKeyRelatedField(
        source="parent", queryset=Office.objects.all(), allow_null=True, required=False,
    )

    class Meta:
        model = Office
        fields = [
            "id", "name", "code", "description", "address", "phone", "email",
            "parent_id", "is_active", "created_at", "updated_at",
        ]
        read_only_fields = ["id", "created_at", "updated_at"]

    def validate(self, attrs):
        parent = attrs.get("parent")
        if self.instance is not None and parent is not None and creates_cycle(self.instance, parent):
            raise serializers.ValidationError(
                {"parent_id": "An office cannot be placed under itself or one of its descendants."}
            )
        return attrs


class OfficeDetailSerializer(OfficeSerializer):
    """Détail: parent et enfants directs embarqués."""

    parent = OfficeSummarySerializer(read_only=True)
    children = OfficeSummarySerializer(many=True, read_only=True)

    class Meta(OfficeSerializer.Meta):
        fields = OfficeSerializer.Meta.fields + ["parent", "children"]


class DepartmentSerializer(serializers.ModelSerializer):
    class Meta:
        model = Department
        fields = ["id", "name", "code", "description", "is_active", "created_at", "updated_at"]
        read_only_fields = ["id", "created_at", "updated_at"]


class JobPositionSerializer(serializers.ModelSerializer):
    level = serializers.IntegerField(min_value=1, required=False)

    class Meta:
        model = JobPosition
        fields = ["id", "name", "code", "level", "description", "is_active", "created_at", "updated_at"]
        read_only_fields = ["id", "created_at", "updated_at"]


class _RefSerializer(serializers.Serializer):
    id = serializers.UUIDField(read_only=True)
    name = serializers.CharField(read_only=True)


class MasterApprovalItemSerializer(serializers.ModelSerializer):
    order = serializers.IntegerField(min_value=0, required=False)
    job_position_id = serializers.PrimaryKeyRelatedField(source="job_position", queryset=JobPosition.objects.all())
    department_id = serializers.PrimaryKeyRelatedField(source="department", queryset=Department.objects.all())
    job_position = _RefSerializer(read_only=True)
    department = _RefSerializer(read_only=True)
    creator = serializers.SerializerMethodField()

    class Meta:
        model = MasterApprovalItem
        fields = [
            "id", "order", "job_position_id", "department_id",
            "job_position", "department", "creator", "created_at",
        ]
        read_only_fields = ["id", "created_at"]

    def validate(self, attrs):
        # en PATCH les champs requis des étapes ne sont pas vérifiés par DRF
        missing = [f"{name}_id" for name in ("job_position", "department") if name not in attrs]
        if missing:
            raise serializers.ValidationError({f: "This field is required." for f in missing})
        return attrs

    def get_creator(self, obj):
        user = obj.created_by
        if user is None:
            return None
        return {"id": str(user.pk), "name": f"{user.first_name} {user.last_name}".strip()}


class MasterApprovalSerializer(serializers.ModelSerializer):
    """
    Les étapes sont écrites avec le circuit. En modification, une liste
    `items` fournie remplace toutes les étapes existantes.
    Sans `order`, une étape prend sa position dans la liste (à partir de 1).
    """

    items = MasterApprovalItemSerializer(many=True)

    class Meta:
        model = MasterApproval
        fields = ["id", "entity", "is_active", "items", "created_at", "updated_at"]
        read_only_fields = ["id", "created_at", "updated_at"]

    def _write_items(self, approval, items):
        request = self.context.get("request")
        user = getattr(request, "user", None)
        creator = user if getattr(user, "is_authenticated", False) else None
        MasterApprovalItem.objects.bulk_create([
            MasterApprovalItem(
                approval=approval,
                order=item.get("order", position),
                job_position=item["job_position"],
                department=item["department"],
                created_by=creator,
            )
            for position, item in enumerate(items, start=1)
        ])

    @transaction.atomic
    def create(self, validated_data):
        items = validated_data.pop("items")
        approval = MasterApproval.objects.create(**validated_data)
        self._write_items(approval, items)
        return approval

    @transaction.atomic
    def update(self, instance, validated_data):
        items = validated_data.pop("items", None)
        instance = super().update(instance, validated_data)
        if items is not None:
            instance.items.all().delete()
            self._write_items(instance, items)
        return instance

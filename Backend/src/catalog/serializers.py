from rest_framework import serializers

from common.tree import creates_cycle
from .models import Category, ProductType


class CategorySummarySerializer(serializers.ModelSerializer):
    class Meta:
        model = Category
        fields = ["id", "name", "slug"]


class CategorySerializer(serializers.ModelSerializer):
    parent_id = serializers.PrimaryKeyRelatedField(
        source="parent", queryset=Category.objects.all(), allow_null=True, required=False,
    )
    order = serializers.IntegerField(min_value=0, required=False)
    parent = CategorySummarySerializer(read_only=True)
    children = CategorySummarySerializer(many=True, read_only=True)

    class Meta:
        model = Category
        fields = [
            "id", "name", "slug", "description", "image_url", "parent_id", "order",
            "is_active", "parent", "children", "created_at", "updated_at",
        ]
        read_only_fields = ["id", "created_at", "updated_at"]

    def validate(self, attrs):
        parent = attrs.get("parent")
        if self.instance is not None and parent is not None and creates_cycle(self.instance, parent):
            raise serializers.ValidationError(
                {"parent_id": "A category cannot be placed under itself or one of its descendants."}
            )
        return attrs


class CategoryNodeSerializer(serializers.ModelSerializer):
    parent_id = serializers.UUIDField(read_only=True)

    class Meta:
        model = Category
        fields = ["id", "name", "slug", "description", "image_url", "parent_id", "order"]


class ProductTypeSerializer(serializers.ModelSerializer):
    class Meta:
        model = ProductType
        fields = ["id", "name", "description", "is_active", "created_at", "updated_at"]
        read_only_fields = ["id", "created_at", "updated_at"]

from django.contrib.auth import get_user_model
from rest_framework import serializers

from rbac.models import Role
from .models import Notification, NotificationType
from .services import create_notification, replace_role_recipients

User = get_user_model()


class NotificationTypeSerializer(serializers.ModelSerializer):
    class Meta:
        model = NotificationType
        fields = ["id", "name", "description"]


class NotificationSerializer(serializers.ModelSerializer):
    """
    `is_read` / `read_at` concernent l'utilisateur courant
    (annotations posées par NotificationQuerySet.with_read_state).
    """

    type = NotificationTypeSerializer(read_only=True)
    type_id = serializers.PrimaryKeyRelatedField(
        source="type", queryset=NotificationType.objects.all(), write_only=True,
    )
    created_by = serializers.UUIDField(source="created_by_id", read_only=True)
    is_read = serializers.SerializerMethodField()
    read_at = serializers.SerializerMethodField()

    role_ids = serializers.PrimaryKeyRelatedField(
        queryset=Role.objects.all(), many=True, write_only=True, required=False,
    )
    user_ids = serializers.PrimaryKeyRelatedField(
        queryset=User.objects.all(), many=True, write_only=True, required=False,
    )

    class Meta:
        model = Notification
        fields = [
            "id", "title", "message", "context", "context_id", "type", "type_id",
            "created_by", "is_active", "is_read", "read_at", "role_ids", "user_ids",
            "created_at", "updated_at",
        ]
        read_only_fields = ["id", "created_at", "updated_at"]

    def get_is_read(self, obj) -> bool:
        return bool(getattr(obj, "is_read", False))

    def get_read_at(self, obj):
        value = getattr(obj, "read_at", None)
        return serializers.DateTimeField().to_representation(value) if value else None

    def validate(self, attrs):
        if self.instance is None and not attrs.get("role_ids") and not attrs.get("user_ids"):
            raise serializers.ValidationError({"role_ids": "At least one role or user recipient is required."})
        return attrs

    def create(self, validated_data):
        roles = validated_data.pop("role_ids", [])
        users = validated_data.pop("user_ids", [])
        return create_notification(roles=roles, users=users, **validated_data)

    def update(self, instance, validated_data):
        roles = validated_data.pop("role_ids", None)
        validated_data.pop("user_ids", None)
        instance = super().update(instance, validated_data)
        if roles is not None:
            replace_role_recipients(instance, roles)
        return instance

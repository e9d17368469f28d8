import logging

from django.conf import settings
from rest_framework import serializers

from .models import Permission, Role

logger = logging.getLogger(__name__)


class PermissionSerializer(serializers.ModelSerializer):
    class Meta:
        model = Permission
        fields = ["id", "name", "description", "is_active", "created_at", "updated_at"]
        read_only_fields = ["id", "created_at", "updated_at"]


class RoleSummarySerializer(serializers.ModelSerializer):
    """Forme courte embarquée dans les utilisateurs et les menus."""

    class Meta:
        model = Role
        fields = ["id", "name"]


def default_permissions():
    """Permissions (actives ou non) dont les noms sont listés dans DEFAULT_PERMISSIONS."""
    names = list(getattr(settings, "DEFAULT_PERMISSIONS", []))
    found = list(Permission.objects.filter(name__in=names))
    missing = set(names) - {p.name for p in found}
    if missing:
        logger.warning(f"DEFAULT_PERMISSIONS inconnues en base: {sorted(missing)}")
    return found


class RoleSerializer(serializers.ModelSerializer):
    """
    Lecture: permissions détaillées.
    Écriture: `permissions` = liste d'ids, complétée par les permissions par défaut.
    Sans `permissions` en mise à jour, l'ensemble existant est conservé.
    """

    permissions = serializers.PrimaryKeyRelatedField(
        queryset=Permission.objects.all(), many=True, required=False, write_only=True,
    )

    class Meta:
        model = Role
        fields = ["id", "name", "description", "is_active", "permissions", "created_at", "updated_at"]
        read_only_fields = ["id", "created_at", "updated_at"]

    def to_representation(self, instance):
        data = super().to_representation(instance)
        data["permissions"] = PermissionSerializer(instance.permissions.all(), many=True).data
        return data

    def _apply_permissions(self, role, requested):
        wanted = {p.pk: p for p in default_permissions()}
        if requested is None:
            # pas de remplacement: on garantit seulement les permissions par défaut
            role.permissions.add(*wanted.values())
            return
        wanted.update({p.pk: p for p in requested})
        role.permissions.set(wanted.values())

    def create(self, validated_data):
        requested = validated_data.pop("permissions", [])
        role = Role.objects.create(**validated_data)
        self._apply_permissions(role, requested)
        return role

    def update(self, instance, validated_data):
        requested = validated_data.pop("permissions", None)
        for attr, value in validated_data.items():
            setattr(instance, attr, value)
        instance.save()
        self._apply_permissions(instance, requested)
        return instance

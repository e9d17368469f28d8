from django.db import models

from common.models import TimeStampedModel


class Permission(TimeStampedModel):
    """Droit élémentaire nommé `ressource:action` (ex: user:create)."""

    name = models.CharField(max_length=100, unique=True)
    description = models.TextField(blank=True, default="")
    is_active = models.BooleanField(default=True)

    def __str__(self) -> str:
        return self.name

    class Meta:
        ordering = ["name"]


class Role(TimeStampedModel):
    name = models.CharField(max_length=100, unique=True)
    description = models.TextField(blank=True, default="")
    is_active = models.BooleanField(default=True)
    permissions = models.ManyToManyField(Permission, related_name="roles", blank=True)

    def __str__(self) -> str:
        return self.name

    def has_permissions(self, names) -> bool:
        """True si le rôle détient toutes les permissions actives demandées."""
        wanted = set(names)
        if not wanted:
            return True
        held = self.permissions.filter(is_active=True, name__in=wanted).count()
        return held == len(wanted)

    class Meta:
        ordering = ["name"]

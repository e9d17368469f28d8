from django.db import models

from common.models import TimeStampedModel


class Menu(TimeStampedModel):
    """Entrée de la barre latérale; visible par les rôles listés dans `roles`."""

    name = models.CharField(max_length=100)
    path = models.CharField(max_length=255, blank=True, default="")
    icon = models.CharField(max_length=100, blank=True, default="")
    parent = models.ForeignKey(
        "self", on_delete=models.SET_NULL, null=True, blank=True, related_name="children"
    )
    order = models.IntegerField(default=0)
    is_active = models.BooleanField(default=True)
    roles = models.ManyToManyField("rbac.Role", related_name="menus", blank=True)

    def __str__(self) -> str:
        return self.name

    class Meta:
        ordering = ["order", "name"]

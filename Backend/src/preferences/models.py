from django.db import models

from common.models import TimeStampedModel


class Setting(TimeStampedModel):
    """Paramètre clé/valeur (ex: app.name, theme.color)."""

    key = models.CharField(max_length=255, unique=True)
    value = models.TextField(blank=True, default="")
    is_active = models.BooleanField(default=True)

    def __str__(self) -> str:
        return self.key

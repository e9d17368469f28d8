import uuid

from django.db import models


class TimeStampedModel(models.Model):
    """
    Base abstraite de toutes les entités métier:
    identifiant UUID + horodatage de création / mise à jour.
    """

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        abstract = True

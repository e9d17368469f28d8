from django.conf import settings
from django.core.validators import MinValueValidator
from django.db import models

from common.models import TimeStampedModel


class Office(TimeStampedModel):
    """Bureau / agence, organisé en arbre via `parent`."""

    name = models.CharField(max_length=255)
    code = models.CharField(max_length=50, unique=True)
    description = models.TextField(blank=True, default="")
    address = models.CharField(max_length=255, blank=True, default="")
    phone = models.CharField(max_length=50, blank=True, default="")
    email = models.EmailField(blank=True, default="")
    parent = models.ForeignKey(
        "self", on_delete=models.SET_NULL, null=True, blank=True, related_name="children"
    )
    is_active = models.BooleanField(default=True)

    def __str__(self) -> str:
        return f"{self.name} ({self.code})"


class Department(TimeStampedModel):
    name = models.CharField(max_length=255)
    code = models.CharField(max_length=50, unique=True)
    description = models.TextField(blank=True, default="")
    is_active = models.BooleanField(default=True)

    def __str__(self) -> str:
        return self.name


class JobPosition(TimeStampedModel):
    name = models.CharField(max_length=255)
    code = models.CharField(max_length=50, unique=True)
    level = models.PositiveIntegerField(default=1, validators=[MinValueValidator(1)])
    description = models.TextField(blank=True, default="")
    is_active = models.BooleanField(default=True)

    def __str__(self) -> str:
        return self.name


class MasterApproval(TimeStampedModel):
    """Circuit de validation d'une entité (ex: "Purchase Order"): étapes ordonnées."""

    entity = models.CharField(max_length=255)
    is_active = models.BooleanField(default=True)

    def __str__(self) -> str:
        return self.entity


class MasterApprovalItem(TimeStampedModel):
    """Étape du circuit: un poste dans un département."""

    approval = models.ForeignKey(MasterApproval, on_delete=models.CASCADE, related_name="items")
    order = models.PositiveIntegerField(default=0)
    job_position = models.ForeignKey(JobPosition, on_delete=models.PROTECT, related_name="approval_items")
    department = models.ForeignKey(Department, on_delete=models.PROTECT, related_name="approval_items")
    created_by = models.ForeignKey(
        settings.AUTH_USER_MODEL, on_delete=models.SET_NULL, null=True, blank=True, related_name="+"
    )

    class Meta:
        ordering = ["order", "created_at"]

    def __str__(self) -> str:
        return f"{self.approval} #{self.order}"

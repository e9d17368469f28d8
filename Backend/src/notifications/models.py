from django.conf import settings
from django.db import models
from django.db.models import Exists, OuterRef, Q, Subquery

from common.models import TimeStampedModel


class NotificationType(TimeStampedModel):
    name = models.CharField(max_length=100, unique=True)
    description = models.TextField(blank=True, default="")

    def __str__(self) -> str:
        return self.name

    class Meta:
        ordering = ["name"]


class NotificationQuerySet(models.QuerySet):
    def visible_to(self, user):
        """Notifications actives adressées à l'utilisateur ou diffusées à son rôle."""
        target = Q(recipients__user=user)
        if getattr(user, "role_id", None):
            target |= Q(recipients__role_id=user.role_id, recipients__user__isnull=True)
        return self.filter(is_active=True).filter(target).distinct()

    def with_read_state(self, user):
        own = NotificationRecipient.objects.filter(notification=OuterRef("pk"), user=user)
        return self.annotate(
            is_read=Exists(own.filter(is_read=True)),
            read_at=Subquery(own.filter(is_read=True).values("read_at")[:1]),
        )


class Notification(TimeStampedModel):
    title = models.CharField(max_length=255)
    message = models.TextField()
    context = models.CharField(max_length=100, blank=True, default="")
    context_id = models.CharField(max_length=255, blank=True, default="")
    type = models.ForeignKey(NotificationType, on_delete=models.PROTECT, related_name="notifications")
    created_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="notifications_created",
    )
    is_active = models.BooleanField(default=True)

    objects = NotificationQuerySet.as_manager()

    def __str__(self) -> str:
        return self.title

    class Meta:
        ordering = ["-created_at"]


class NotificationRecipient(TimeStampedModel):
    """
    Ligne de distribution.
    - role renseigné, user vide: diffusion au rôle (jamais marquée lue)
    - user renseigné: livraison et état de lecture propres à cet utilisateur
    """

    notification = models.ForeignKey(Notification, on_delete=models.CASCADE, related_name="recipients")
    role = models.ForeignKey("rbac.Role", on_delete=models.CASCADE, null=True, blank=True, related_name="+")
    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        null=True,
        blank=True,
        related_name="notification_deliveries",
    )
    is_read = models.BooleanField(default=False)
    read_at = models.DateTimeField(null=True, blank=True)

    class Meta:
        constraints = [
            models.UniqueConstraint(
                fields=["notification", "user"],
                condition=Q(user__isnull=False),
                name="uniq_notification_user_recipient",
            ),
        ]

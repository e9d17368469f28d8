from typing import Iterable

from django.db import transaction

from common.utils import now_utc
from .models import Notification, NotificationRecipient


@transaction.atomic
def create_notification(*, roles: Iterable = (), users: Iterable = (), **fields) -> Notification:
    """Crée la notification et ses lignes de distribution (rôles puis utilisateurs)."""
    notification = Notification.objects.create(**fields)
    rows = [NotificationRecipient(notification=notification, role=role) for role in roles]
    rows += [NotificationRecipient(notification=notification, role=u.role, user=u) for u in users]
    NotificationRecipient.objects.bulk_create(rows)
    return notification


def replace_role_recipients(notification, roles) -> None:
    notification.recipients.filter(user__isnull=True).delete()
    NotificationRecipient.objects.bulk_create(
        [NotificationRecipient(notification=notification, role=role) for role in roles]
    )


def mark_read(notification, user) -> NotificationRecipient:
    """L'état de lecture vit sur la ligne propre à l'utilisateur (créée au besoin)."""
    recipient, _ = NotificationRecipient.objects.get_or_create(
        notification=notification,
        user=user,
        defaults={"role": getattr(user, "role", None)},
    )
    if not recipient.is_read:
        recipient.is_read = True
        recipient.read_at = now_utc()
        recipient.save(update_fields=["is_read", "read_at", "updated_at"])
    return recipient


@transaction.atomic
def mark_all_read(user) -> int:
    unread_ids = list(
        Notification.objects.visible_to(user)
        .with_read_state(user)
        .filter(is_read=False)
        .values_list("pk", flat=True)
    )
    if not unread_ids:
        return 0
    now = now_utc()
    own = NotificationRecipient.objects.filter(user=user, notification_id__in=unread_ids)
    existing = set(own.values_list("notification_id", flat=True))
    own.update(is_read=True, read_at=now)
    NotificationRecipient.objects.bulk_create([
        NotificationRecipient(
            notification_id=pk, user=user, role=getattr(user, "role", None), is_read=True, read_at=now,
        )
        for pk in unread_ids
        if pk not in existing
    ])
    return len(unread_ids)


def unread_count(user) -> int:
    return Notification.objects.visible_to(user).with_read_state(user).filter(is_read=False).count()

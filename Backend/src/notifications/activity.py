"""
Journal d'activité: chaque création / modification / suppression d'une entité
d'administration produit une notification diffusée aux rôles concernés.

Un échec d'écriture est journalisé puis ignoré: l'opération métier a déjà réussi.
"""
import logging
from typing import Iterable, Optional

from django.db import DatabaseError, transaction

from rbac.constants import ADMINS, SUPER_ADMIN
from rbac.models import Role
from .models import Notification, NotificationRecipient, NotificationType

logger = logging.getLogger(__name__)

GENERAL_ACTIVITY = "general_activity"

# contexte -> (libellé, type de notification, rôles destinataires)
ACTIVITY_CONTEXTS = {
    "users": ("user", "user_activity", ADMINS),
    "roles": ("role", "role_activity", (SUPER_ADMIN,)),
    "offices": ("office", "office_activity", ADMINS),
    "departments": ("department", "department_activity", ADMINS),
    "job_positions": ("job position", "job_position_activity", ADMINS),
    "master_approvals": ("master approval", "approval_activity", ADMINS),
    "menus": ("menu item", "menu_activity", (SUPER_ADMIN,)),
    "settings": ("setting", "settings_activity", (SUPER_ADMIN,)),
}

_PAST = {
    "create": "created",
    "update": "updated",
    "delete": "deleted",
    "activate": "activated",
    "deactivate": "deactivated",
}


def activity_message(context: str, action: str, subject: str) -> str:
    label = ACTIVITY_CONTEXTS.get(context, (context, None, None))[0]
    if action == "create":
        return f"New {label} {subject} has been created"
    return f"{label.capitalize()} {subject} has been {_PAST.get(action, action)}"


def _resolve_type(name: str) -> Optional[NotificationType]:
    found = NotificationType.objects.filter(name__in=[name, GENERAL_ACTIVITY])
    by_name = {t.name: t for t in found}
    if name not in by_name:
        logger.warning(f"Type de notification '{name}' absent, repli sur '{GENERAL_ACTIVITY}'")
    return by_name.get(name) or by_name.get(GENERAL_ACTIVITY)


def notify_roles(
    context: str,
    message: str,
    role_names: Iterable[str],
    *,
    context_id=None,
    actor=None,
    type_name: str = GENERAL_ACTIVITY,
) -> Optional[Notification]:
    roles = list(Role.objects.filter(name__in=list(role_names), is_active=True))
    if not roles:
        return None
    try:
        with transaction.atomic():
            ntype = _resolve_type(type_name)
            if ntype is None:
                logger.warning(f"Aucun type de notification disponible pour '{context}'")
                return None
            notification = Notification.objects.create(
                title=f"{context} Activity",
                message=message,
                context=context,
                context_id=str(context_id or ""),
                type=ntype,
                created_by=actor if getattr(actor, "is_authenticated", False) else None,
            )
            NotificationRecipient.objects.bulk_create(
                [NotificationRecipient(notification=notification, role=r) for r in roles]
            )
    except DatabaseError as e:
        logger.warning(f"Activité '{context}' non journalisée: {e}")
        return None
    logger.info(f"[activity] {context}: {message}")
    return notification


def log_activity(context: str, action: str, subject: str, *, context_id=None, actor=None):
    _, type_name, audience = ACTIVITY_CONTEXTS[context]
    return notify_roles(
        context,
        activity_message(context, action, subject),
        audience,
        context_id=context_id,
        actor=actor,
        type_name=type_name,
    )


class ActivityLogMixin:
    """
    À placer avant une vue générique DRF: journalise create/update/delete.
    La vue définit `activity_context` et peut surcharger `activity_subject`.
    """

    activity_context: str = ""

    def activity_subject(self, instance) -> str:
        return f'"{instance}"'

    def _log(self, action, instance, pk=None, subject=None):
        log_activity(
            self.activity_context,
            action,
            subject or self.activity_subject(instance),
            context_id=pk or instance.pk,
            actor=self.request.user,
        )

    def perform_create(self, serializer):
        instance = serializer.save()
        self._log("create", instance)

    def perform_update(self, serializer):
        instance = serializer.save()
        self._log("update", instance)

    def perform_destroy(self, instance):
        pk, subject = instance.pk, self.activity_subject(instance)
        instance.delete()
        self._log("delete", instance, pk=pk, subject=subject)

"""
Contrôle d'accès par rôle ou par permission.

Une vue déclare, par méthode HTTP:
    role_access = {"GET": STAFF, "POST": ADMINS, ...}
    required_permissions = {"POST": ["user:create"], ...}
"*" sert de valeur par défaut; une méthode absente n'impose que l'authentification.
Les superutilisateurs Django passent toujours.
"""
import logging

from rest_framework.permissions import BasePermission

logger = logging.getLogger(__name__)


def _method(request) -> str:
    return "GET" if request.method == "HEAD" else request.method


def _rule(view, attr: str, request):
    rules = getattr(view, attr, None) or {}
    method = _method(request)
    return rules.get(method, rules.get("*"))


def active_role(user):
    role = getattr(user, "role", None)
    if role is None or not role.is_active:
        return None
    return role


class RoleAccess(BasePermission):
    message = "Your role does not allow this operation."

    def has_permission(self, request, view) -> bool:
        user = request.user
        if not user or not user.is_authenticated:
            return False
        allowed = _rule(view, "role_access", request)
        if allowed is None or user.is_superuser:
            return True
        role = active_role(user)
        if role is None or role.name not in allowed:
            logger.debug(f"RoleAccess refusé: {user} ({role}) sur {type(view).__name__}")
            return False
        return True


class PermissionAccess(BasePermission):
    message = "Missing permission for this operation."

    def has_permission(self, request, view) -> bool:
        user = request.user
        if not user or not user.is_authenticated:
            return False
        required = _rule(view, "required_permissions", request)
        if not required or user.is_superuser:
            return True
        role = active_role(user)
        return role is not None and role.has_permissions(required)

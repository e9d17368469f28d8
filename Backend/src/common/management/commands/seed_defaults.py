import os

from django.contrib.auth import get_user_model
from django.core.management.base import BaseCommand
from django.db import transaction

from menus.models import Menu
from notifications.models import NotificationType
from organization.models import Office
from preferences.models import Setting
from rbac.constants import (
    PERMISSION_CATALOG,
    ROLE_DESCRIPTIONS,
    SUPER_ADMIN,
    ADMINISTRATOR,
    MANAGER,
    USER,
    permissions_for_role,
)
from rbac.models import Permission, Role

NOTIFICATION_TYPES = [
    ("user_activity", "User management activities (create, update, delete users)"),
    ("role_activity", "Role management activities (create, update, delete roles)"),
    ("system_activity", "System-wide activities and updates"),
    ("office_activity", "Office management activities"),
    ("department_activity", "Department management activities"),
    ("job_position_activity", "Job position management activities"),
    ("approval_activity", "Master approval management activities"),
    ("menu_activity", "Menu management activities"),
    ("settings_activity", "Settings management activities"),
    ("general_activity", "General application activities"),
]

SETTINGS = [
    ("theme.color", "blue"),
    ("theme.mode", "light"),
    ("system.name", "Admin Panel"),
    ("system.version", "1.0.0"),
    ("system.timezone", "UTC"),
    ("app.name", "Office Nexus"),
    ("app.language", "en"),
    ("pagination.default_limit", "10"),
    ("pagination.max_limit", "100"),
]

_ALL = (SUPER_ADMIN, ADMINISTRATOR, MANAGER, USER)
_STAFF = (SUPER_ADMIN, ADMINISTRATOR, MANAGER)
_ADMINS = (SUPER_ADMIN, ADMINISTRATOR)

# (nom, chemin, icône, ordre, rôles, sous-menus)
MENUS = [
    ("Dashboard", "/", "LayoutDashboard", 1, _ALL, []),
    ("Master Data", "", "Building2", 2, _STAFF, [
        ("Offices", "/master/offices", "Building", 1, _STAFF, []),
        ("Departments", "/master/departments", "UsersRound", 2, _STAFF, []),
        ("Job Positions", "/master/job-positions", "Briefcase", 3, _STAFF, []),
        ("Categories", "/master/categories", "FolderTree", 4, _STAFF, []),
        ("Product Types", "/master/product-types", "Package", 5, _STAFF, []),
        ("Approvals", "/master/approvals", "ListChecks", 6, _STAFF, []),
    ]),
    ("User Management", "", "Users", 3, _ADMINS, [
        ("Users", "/users", "User", 1, _ADMINS, []),
        ("Roles", "/roles", "Shield", 2, _ADMINS, []),
        ("Menus", "/menus", "Menu", 3, (SUPER_ADMIN,), []),
    ]),
    ("Notifications", "/notifications", "Bell", 4, _ALL, []),
    ("Settings", "/settings", "Settings", 5, _ADMINS, []),
]


class Command(BaseCommand):
    help = "Crée (ou complète) les données de référence: permissions, rôles, types de notification, paramètres, menus, bureau principal et compte administrateur."

    def add_arguments(self, parser):
        parser.add_argument("--admin-email", type=str, default=os.getenv("ADMIN_EMAIL", "admin@example.com"))
        parser.add_argument("--admin-password", type=str, default=os.getenv("ADMIN_PASSWORD", "admin123"))
        parser.add_argument("--no-admin", action="store_true", help="Ne pas créer le compte administrateur")

    @transaction.atomic
    def handle(self, *args, **opts):
        # 1) Permissions
        for name, description in PERMISSION_CATALOG:
            Permission.objects.update_or_create(name=name, defaults={"description": description, "is_active": True})
        names = [name for name, _ in PERMISSION_CATALOG]
        self.stdout.write(self.style.NOTICE(f"{len(names)} permissions"))

        # 2) Rôles
        roles = {}
        for role_name, description in ROLE_DESCRIPTIONS.items():
            role, _ = Role.objects.update_or_create(
                name=role_name, defaults={"description": description, "is_active": True}
            )
            role.permissions.set(Permission.objects.filter(name__in=permissions_for_role(role_name, names)))
            roles[role_name] = role
        self.stdout.write(self.style.NOTICE(f"Rôles: {', '.join(roles)}"))

        # 3) Types de notification
        for name, description in NOTIFICATION_TYPES:
            NotificationType.objects.update_or_create(name=name, defaults={"description": description})

        # 4) Paramètres (on ne touche pas aux valeurs déjà saisies)
        for key, value in SETTINGS:
            Setting.objects.get_or_create(key=key, defaults={"value": value})

        # 5) Menus
        count = self._seed_menus(MENUS, None, roles)
        self.stdout.write(self.style.NOTICE(f"{count} menus"))

        # 6) Bureau principal + administrateur
        office, _ = Office.objects.get_or_create(code="HQ", defaults={"name": "Headquarters"})
        if not opts["no_admin"]:
            self._seed_admin(opts["admin_email"], opts["admin_password"], roles[SUPER_ADMIN], office)

        self.stdout.write(self.style.SUCCESS("Données de référence en place"))

    def _seed_menus(self, entries, parent, roles) -> int:
        count = 0
        for name, path, icon, order, role_names, children in entries:
            menu, _ = Menu.objects.update_or_create(
                name=name,
                parent=parent,
                defaults={"path": path, "icon": icon, "order": order, "is_active": True},
            )
            menu.roles.set([roles[r] for r in role_names])
            count += 1 + self._seed_menus(children, menu, roles)
        return count

    def _seed_admin(self, email, password, role, office):
        User = get_user_model()
        user = User.objects.filter(email=email).first()
        if user is not None:
            self.stdout.write(f"Administrateur {email} déjà présent")
            return
        User.objects.create_superuser(
            email=email,
            password=password,
            first_name="Admin",
            last_name="User",
            role=role,
            office=office,
        )
        self.stdout.write(self.style.SUCCESS(f"Administrateur créé: {email}"))
